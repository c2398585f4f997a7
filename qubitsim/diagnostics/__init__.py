"""Diagnostics and debugging utilities for qubitsim."""

from .core import (
    assert_hermitian,
    assert_normalized,
    fidelity,
    is_hermitian,
    total_probability,
)
from .debug_mode import (
    debug_context,
    is_debug_enabled,
    set_debug_enabled,
)

__all__ = [
    "total_probability",
    "assert_normalized",
    "is_hermitian",
    "assert_hermitian",
    "fidelity",
    "is_debug_enabled",
    "set_debug_enabled",
    "debug_context",
]
