"""Circuit IR, optimizer and canonical circuit builders."""

from .core import (
    CircuitOperation,
    CircuitResult,
    CircuitStats,
    MeasurementBasis,
    MeasurementOp,
    QuantumCircuit,
    ShotResults,
)
from .factory import CircuitFactory
from .optimizer import CircuitOptimizer, OptimizationOptions

__all__ = [
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
]
