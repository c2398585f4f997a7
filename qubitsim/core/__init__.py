"""Devices and simulation configuration.

``SimulationContext`` lives in :mod:`qubitsim.core.context`; it depends on the
gate layer, so it is not re-exported here to keep ``qubitsim.core.device``
importable from the backend.
"""

from .device import Device, default_device, device

__all__ = ["Device", "device", "default_device"]
