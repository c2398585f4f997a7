"""Qubit and register state representations."""

from .multi import MultiQubitMeasurement, MultiQubitState, PartialMeasurement
from .qubit import BLOCH_BASIS_STATES, BlochCoordinates, MeasurementResult, QubitState
from .register import Qubit, QubitRegister

__all__ = [
    "QubitState",
    "MultiQubitState",
    "BlochCoordinates",
    "BLOCH_BASIS_STATES",
    "MeasurementResult",
    "MultiQubitMeasurement",
    "PartialMeasurement",
    "Qubit",
    "QubitRegister",
]
