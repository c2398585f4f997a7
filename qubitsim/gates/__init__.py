"""Gate matrices, gate objects and the gate registry."""

from . import standard
from .base import (
    SELF_INVERSE_KINDS,
    ControlledGate,
    Gate,
    GateKind,
    GateProperties,
    are_inverses,
    inverse_kind,
)
from .library import GateLibrary

__all__ = [
    "standard",
    "Gate",
    "ControlledGate",
    "GateKind",
    "GateProperties",
    "GateLibrary",
    "SELF_INVERSE_KINDS",
    "are_inverses",
    "inverse_kind",
]
