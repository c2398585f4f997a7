"""Process-wide debug switch.

While debug mode is on, the statevector backend re-checks normalization
after every gate application. The initial value comes from the
``QUBITSIM_DEBUG`` environment variable.
"""

from __future__ import annotations

import os
from contextlib import contextmanager
from typing import Iterator

_TRUTHY = frozenset({"1", "true", "yes", "on"})


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in _TRUTHY


_debug_enabled = _env_flag("QUBITSIM_DEBUG")


def is_debug_enabled() -> bool:
    return _debug_enabled


def set_debug_enabled(enabled: bool) -> None:
    global _debug_enabled
    _debug_enabled = bool(enabled)


@contextmanager
def debug_context(enabled: bool = True) -> Iterator[None]:
    """
    Temporarily switch debug mode, restoring the previous value on exit.

    Example
    -------
    >>> with debug_context(True):
    ...     circuit.run()
    """
    previous = is_debug_enabled()
    set_debug_enabled(enabled)
    try:
        yield
    finally:
        set_debug_enabled(previous)
