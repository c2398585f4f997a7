"""Where statevectors are allocated, and with which dtypes."""

from __future__ import annotations

from dataclasses import dataclass

import torch

_ALIASES = {"cpu": "sv_cpu", "cuda": "sv_cuda"}


@dataclass(frozen=True)
class Device:
    """
    A simulation device: a PyTorch device plus the dtypes used for
    amplitudes and for real-valued quantities such as probabilities.

    Attributes
    ----------
    name:
        Logical name, "sv_cpu" or "sv_cuda".
    torch_device:
        Underlying PyTorch device.
    real_dtype:
        Dtype of probabilities and angles.
    complex_dtype:
        Dtype of amplitudes and gate matrices.
    """

    name: str
    torch_device: torch.device
    real_dtype: torch.dtype = torch.float64
    complex_dtype: torch.dtype = torch.complex128

    def as_torch_device(self) -> torch.device:
        return self.torch_device

    def zeros(self, dim: int) -> torch.Tensor:
        """Zero amplitude vector of length ``dim`` on this device."""
        return torch.zeros(dim, dtype=self.complex_dtype, device=self.torch_device)


def device(name: str) -> Device:
    """
    Look up a device by name.

    Accepts "sv_cpu" and "sv_cuda", or the shorthands "cpu" and "cuda".

    Raises:
        RuntimeError: If a CUDA device is requested but CUDA is not available.
        ValueError: If the name is not recognised.
    """
    canonical = _ALIASES.get(name, name)
    if canonical == "sv_cpu":
        return Device("sv_cpu", torch.device("cpu"))
    if canonical == "sv_cuda":
        if not torch.cuda.is_available():
            raise RuntimeError("CUDA device requested but torch.cuda.is_available() is False")
        return Device("sv_cuda", torch.device("cuda"))
    raise ValueError(
        f"Unsupported device name: {name!r}. Supported devices: "
        f"['sv_cpu', 'sv_cuda', 'cpu', 'cuda']"
    )


def default_device() -> Device:
    """CPU statevector device with complex128 amplitudes."""
    return device("sv_cpu")
