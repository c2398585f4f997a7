"""qubitsim - a PyTorch-native dense statevector quantum circuit simulator."""

__version__ = "0.1.0"

# Audit side-channel
from .audit import AuditRecord, AuditTrail, digest

# Backend operations
from .backend import apply_matrix, expand_operator, measure_probs, zero_state

# Circuit IR
from .circuit import (
    CircuitFactory,
    CircuitOperation,
    CircuitOptimizer,
    CircuitResult,
    CircuitStats,
    MeasurementBasis,
    MeasurementOp,
    OptimizationOptions,
    QuantumCircuit,
    ShotResults,
)
from .core import Device, default_device, device
from .core.context import SimulationContext, default_context

# Diagnostics
from .diagnostics import (
    assert_hermitian,
    assert_normalized,
    debug_context,
    is_debug_enabled,
    set_debug_enabled,
)

# Gates
from .gates import ControlledGate, Gate, GateKind, GateLibrary, GateProperties

# Logging
from .logging import configure_logging, get_logger, set_log_level

# States
from .states import (
    BlochCoordinates,
    MultiQubitState,
    Qubit,
    QubitRegister,
    QubitState,
)

# Analysis and visualization
from .transpile import GateCountSummary, summarize_gate_counts
from .viz import print_circuit, to_text

__all__ = [
    "__version__",
    "AuditRecord",
    "AuditTrail",
    "digest",
    "apply_matrix",
    "expand_operator",
    "measure_probs",
    "zero_state",
    "QuantumCircuit",
    "CircuitOperation",
    "MeasurementOp",
    "MeasurementBasis",
    "CircuitResult",
    "ShotResults",
    "CircuitStats",
    "CircuitOptimizer",
    "OptimizationOptions",
    "CircuitFactory",
    "Device",
    "device",
    "default_device",
    "SimulationContext",
    "default_context",
    "assert_normalized",
    "assert_hermitian",
    "is_debug_enabled",
    "set_debug_enabled",
    "debug_context",
    "Gate",
    "ControlledGate",
    "GateKind",
    "GateLibrary",
    "GateProperties",
    "get_logger",
    "set_log_level",
    "configure_logging",
    "QubitState",
    "MultiQubitState",
    "BlochCoordinates",
    "Qubit",
    "QubitRegister",
    "GateCountSummary",
    "summarize_gate_counts",
    "to_text",
    "print_circuit",
]
