"""Numerical sanity checks for amplitude vectors and gate matrices."""

from __future__ import annotations

import torch


def total_probability(state: torch.Tensor) -> float:
    """Sum of |amplitude|^2 over a 1D state."""
    return float((state.abs() ** 2).sum())


def assert_normalized(state: torch.Tensor, atol: float = 1e-8) -> None:
    """
    Raise unless ``state`` has unit norm.

    Parameters
    ----------
    state:
        Complex amplitude vector.
    atol:
        Allowed deviation of the total probability from 1.

    Raises
    ------
    ValueError
        If the total probability is non-finite or differs from 1 by more
        than ``atol``.
    """
    total = total_probability(state)
    if total != total or abs(total - 1.0) > atol:
        raise ValueError(
            f"State is not normalized within tolerance {atol} "
            f"(total probability {total!r})."
        )


def is_hermitian(mat: torch.Tensor, atol: float = 1e-10) -> bool:
    """True when ``mat`` is square and every entry of M - M† is within ``atol``."""
    if mat.dim() != 2 or mat.shape[0] != mat.shape[1]:
        return False
    deviation = (mat - mat.conj().transpose(0, 1)).abs()
    return bool(torch.all(deviation <= atol))


def assert_hermitian(mat: torch.Tensor, atol: float = 1e-10) -> None:
    if not is_hermitian(mat, atol=atol):
        raise ValueError(f"Matrix is not Hermitian within tolerance {atol}.")


def fidelity(state_a: torch.Tensor, state_b: torch.Tensor) -> float:
    """
    Overlap |⟨a|b⟩|² of two pure states.

    Raises
    ------
    ValueError
        If the vectors do not have the same shape.
    """
    if state_a.shape != state_b.shape:
        raise ValueError(
            f"fidelity expects states of the same shape, got "
            f"{tuple(state_a.shape)} and {tuple(state_b.shape)}."
        )
    return float(torch.vdot(state_a, state_b).abs() ** 2)


__all__ = [
    "total_probability",
    "assert_normalized",
    "is_hermitian",
    "assert_hermitian",
    "fidelity",
]
