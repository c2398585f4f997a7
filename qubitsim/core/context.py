"""Simulation settings shared by circuits built against the same context."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional

import torch

from ..audit import AuditTrail
from ..gates.library import GateLibrary
from .device import Device, default_device

_MAX_QUBITS_ENV_VAR = "QUBITSIM_MAX_QUBITS"
_DEFAULT_MAX_QUBITS = 20


def _max_qubits_from_env() -> int:
    raw = os.getenv(_MAX_QUBITS_ENV_VAR)
    if raw is None or raw.strip() == "":
        return _DEFAULT_MAX_QUBITS
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(
            f"{_MAX_QUBITS_ENV_VAR} must be an integer, got {raw!r}"
        ) from None
    if value < 1:
        raise ValueError(f"{_MAX_QUBITS_ENV_VAR} must be >= 1, got {value}")
    return value


@dataclass
class SimulationContext:
    """
    Configuration carried by a circuit.

    Attributes
    ----------
    min_qubits, max_qubits:
        Inclusive bounds on circuit width.
    tolerance:
        Numerical tolerance for normalization and unitarity checks.
    device:
        Device used for freshly allocated statevectors.
    generator:
        Default random source for measurement; None uses the global torch RNG.
    library:
        Gate registry used by the circuit builder methods.
    audit:
        Optional hash chain that records circuit runs.
    """

    min_qubits: int = 1
    max_qubits: int = field(default_factory=_max_qubits_from_env)
    tolerance: float = 1e-10
    device: Device = field(default_factory=default_device)
    generator: Optional[torch.Generator] = None
    library: GateLibrary = field(default_factory=GateLibrary.standard)
    audit: Optional[AuditTrail] = None

    def __post_init__(self) -> None:
        if self.min_qubits < 1:
            raise ValueError(f"min_qubits must be >= 1, got {self.min_qubits}")
        if self.max_qubits < self.min_qubits:
            raise ValueError(
                f"max_qubits ({self.max_qubits}) must be >= min_qubits ({self.min_qubits})"
            )
        if self.tolerance <= 0:
            raise ValueError(f"tolerance must be positive, got {self.tolerance}")

    def check_num_qubits(self, num_qubits: int) -> int:
        """Return ``num_qubits`` as an int, or raise if it is out of bounds."""
        if isinstance(num_qubits, bool) or not isinstance(num_qubits, int):
            raise TypeError(
                f"num_qubits must be an int, got {type(num_qubits).__name__}"
            )
        if num_qubits < self.min_qubits or num_qubits > self.max_qubits:
            raise ValueError(
                f"Number of qubits must be between {self.min_qubits} and "
                f"{self.max_qubits}, got {num_qubits}."
            )
        return num_qubits


def default_context() -> SimulationContext:
    """A fresh context with the standard gate library and default bounds."""
    return SimulationContext()


__all__ = ["SimulationContext", "default_context"]
