"""Standard quantum gate matrices.

Every constructor returns a fresh complex tensor. Multi-qubit matrices are
ordered |00⟩, |01⟩, |10⟩, |11⟩ (...) with the first gate qubit as the most
significant bit, matching the order in which targets are passed to
``Gate.apply_to``.
"""

from __future__ import annotations

import cmath
import math
from typing import Sequence

import torch


def _resolve(
    dtype: torch.dtype | None, device: torch.device | None
) -> tuple[torch.dtype, torch.device]:
    if dtype is None:
        dtype = torch.complex128
    if device is None:
        device = torch.device("cpu")
    return dtype, device


def _matrix(
    rows: Sequence[Sequence[complex]],
    dtype: torch.dtype | None,
    device: torch.device | None,
) -> torch.Tensor:
    dtype, device = _resolve(dtype, device)
    return torch.tensor(rows, dtype=dtype, device=device)


def _permutation(
    size: int,
    swaps: Sequence[tuple[int, int]],
    dtype: torch.dtype | None,
    device: torch.device | None,
) -> torch.Tensor:
    dtype, device = _resolve(dtype, device)
    matrix = torch.eye(size, dtype=dtype, device=device)
    for a, b in swaps:
        matrix[a, a] = 0.0
        matrix[b, b] = 0.0
        matrix[a, b] = 1.0
        matrix[b, a] = 1.0
    return matrix


def I(dtype: torch.dtype | None = None, device: torch.device | None = None) -> torch.Tensor:
    """Identity gate (single-qubit)."""
    dtype, device = _resolve(dtype, device)
    return torch.eye(2, dtype=dtype, device=device)


def X(dtype: torch.dtype | None = None, device: torch.device | None = None) -> torch.Tensor:
    """Pauli-X gate (bit-flip, NOT gate)."""
    return _matrix([[0.0, 1.0], [1.0, 0.0]], dtype, device)


def Y(dtype: torch.dtype | None = None, device: torch.device | None = None) -> torch.Tensor:
    """Pauli-Y gate."""
    return _matrix([[0.0, -1.0j], [1.0j, 0.0]], dtype, device)


def Z(dtype: torch.dtype | None = None, device: torch.device | None = None) -> torch.Tensor:
    """Pauli-Z gate (phase-flip)."""
    return _matrix([[1.0, 0.0], [0.0, -1.0]], dtype, device)


def H(dtype: torch.dtype | None = None, device: torch.device | None = None) -> torch.Tensor:
    """Hadamard gate."""
    s = 1.0 / math.sqrt(2.0)
    return _matrix([[s, s], [s, -s]], dtype, device)


def S(dtype: torch.dtype | None = None, device: torch.device | None = None) -> torch.Tensor:
    """S gate (phase gate, √Z)."""
    return _matrix([[1.0, 0.0], [0.0, 1.0j]], dtype, device)


def SDG(dtype: torch.dtype | None = None, device: torch.device | None = None) -> torch.Tensor:
    """S† gate."""
    return _matrix([[1.0, 0.0], [0.0, -1.0j]], dtype, device)


def T(dtype: torch.dtype | None = None, device: torch.device | None = None) -> torch.Tensor:
    """T gate (π/8 gate, √S)."""
    return _matrix([[1.0, 0.0], [0.0, cmath.exp(1.0j * math.pi / 4.0)]], dtype, device)


def TDG(dtype: torch.dtype | None = None, device: torch.device | None = None) -> torch.Tensor:
    """T† gate."""
    return _matrix([[1.0, 0.0], [0.0, cmath.exp(-1.0j * math.pi / 4.0)]], dtype, device)


def RX(
    theta: float,
    dtype: torch.dtype | None = None,
    device: torch.device | None = None,
) -> torch.Tensor:
    """
    Rotation about X: RX(θ) = exp(-iθX/2).

        [[cos(θ/2), -i sin(θ/2)],
         [-i sin(θ/2), cos(θ/2)]]
    """
    c, s = math.cos(theta / 2.0), math.sin(theta / 2.0)
    return _matrix([[c, -1.0j * s], [-1.0j * s, c]], dtype, device)


def RY(
    theta: float,
    dtype: torch.dtype | None = None,
    device: torch.device | None = None,
) -> torch.Tensor:
    """
    Rotation about Y: RY(θ) = exp(-iθY/2).

        [[cos(θ/2), -sin(θ/2)],
         [sin(θ/2), cos(θ/2)]]
    """
    c, s = math.cos(theta / 2.0), math.sin(theta / 2.0)
    return _matrix([[c, -s], [s, c]], dtype, device)


def RZ(
    theta: float,
    dtype: torch.dtype | None = None,
    device: torch.device | None = None,
) -> torch.Tensor:
    """
    Rotation about Z: RZ(θ) = exp(-iθZ/2).

        [[exp(-iθ/2), 0],
         [0, exp(iθ/2)]]
    """
    half = theta / 2.0
    return _matrix([[cmath.exp(-1.0j * half), 0.0], [0.0, cmath.exp(1.0j * half)]], dtype, device)


def P(
    theta: float,
    dtype: torch.dtype | None = None,
    device: torch.device | None = None,
) -> torch.Tensor:
    """Phase gate diag(1, e^{iθ})."""
    return _matrix([[1.0, 0.0], [0.0, cmath.exp(1.0j * theta)]], dtype, device)


def U3(
    theta: float,
    phi: float,
    lam: float,
    dtype: torch.dtype | None = None,
    device: torch.device | None = None,
) -> torch.Tensor:
    """
    General single-qubit rotation.

        [[cos(θ/2), -e^{iλ} sin(θ/2)],
         [e^{iφ} sin(θ/2), e^{i(φ+λ)} cos(θ/2)]]
    """
    c, s = math.cos(theta / 2.0), math.sin(theta / 2.0)
    return _matrix(
        [
            [c, -cmath.exp(1.0j * lam) * s],
            [cmath.exp(1.0j * phi) * s, cmath.exp(1.0j * (phi + lam)) * c],
        ],
        dtype,
        device,
    )


def CNOT(
    dtype: torch.dtype | None = None,
    device: torch.device | None = None,
    control_first: bool = True,
) -> torch.Tensor:
    """
    CNOT gate (controlled-X).

    With control_first=True the first qubit is the control:
    |10⟩ <-> |11⟩. With control_first=False the second qubit is the control:
    |01⟩ <-> |11⟩.
    """
    if control_first:
        return _permutation(4, [(2, 3)], dtype, device)
    return _permutation(4, [(1, 3)], dtype, device)


def CZ(dtype: torch.dtype | None = None, device: torch.device | None = None) -> torch.Tensor:
    """Controlled-Z gate, diag(1, 1, 1, -1)."""
    dtype, device = _resolve(dtype, device)
    matrix = torch.eye(4, dtype=dtype, device=device)
    matrix[3, 3] = -1.0
    return matrix


def SWAP(dtype: torch.dtype | None = None, device: torch.device | None = None) -> torch.Tensor:
    """SWAP gate, |01⟩ <-> |10⟩."""
    return _permutation(4, [(1, 2)], dtype, device)


def ISWAP(dtype: torch.dtype | None = None, device: torch.device | None = None) -> torch.Tensor:
    """iSWAP gate: swaps |01⟩ and |10⟩ with a phase of i."""
    return _matrix(
        [
            [1.0, 0.0, 0.0, 0.0],
            [0.0, 0.0, 1.0j, 0.0],
            [0.0, 1.0j, 0.0, 0.0],
            [0.0, 0.0, 0.0, 1.0],
        ],
        dtype,
        device,
    )


def SQRT_SWAP(dtype: torch.dtype | None = None, device: torch.device | None = None) -> torch.Tensor:
    """Square root of SWAP."""
    a, b = 0.5 + 0.5j, 0.5 - 0.5j
    return _matrix(
        [
            [1.0, 0.0, 0.0, 0.0],
            [0.0, a, b, 0.0],
            [0.0, b, a, 0.0],
            [0.0, 0.0, 0.0, 1.0],
        ],
        dtype,
        device,
    )


def CP(
    theta: float,
    dtype: torch.dtype | None = None,
    device: torch.device | None = None,
) -> torch.Tensor:
    """Controlled phase, diag(1, 1, 1, e^{iθ})."""
    dtype, device = _resolve(dtype, device)
    matrix = torch.eye(4, dtype=dtype, device=device)
    matrix[3, 3] = cmath.exp(1.0j * theta)
    return matrix


def CRX(
    theta: float,
    dtype: torch.dtype | None = None,
    device: torch.device | None = None,
) -> torch.Tensor:
    """Controlled RX(θ), first qubit is the control."""
    dtype, device = _resolve(dtype, device)
    matrix = torch.eye(4, dtype=dtype, device=device)
    matrix[2:, 2:] = RX(theta, dtype=dtype, device=device)
    return matrix


def TOFFOLI(dtype: torch.dtype | None = None, device: torch.device | None = None) -> torch.Tensor:
    """Toffoli (CCX): flips the third qubit when the first two are 1."""
    return _permutation(8, [(6, 7)], dtype, device)


def FREDKIN(dtype: torch.dtype | None = None, device: torch.device | None = None) -> torch.Tensor:
    """Fredkin (CSWAP): swaps the last two qubits when the first is 1."""
    return _permutation(8, [(5, 6)], dtype, device)


def is_unitary(matrix: torch.Tensor, atol: float = 1e-10) -> bool:
    """
    Check if a matrix is unitary within a given tolerance.

    A matrix U is unitary if U†U = I, where U† is the conjugate transpose.

    Args:
        matrix: Tensor of shape (..., n, n).
        atol: Absolute tolerance on every entry of U†U - I.

    Returns:
        True if the matrix is unitary (within tolerance), False otherwise.
    """
    if matrix.dim() < 2 or matrix.shape[-1] != matrix.shape[-2]:
        return False

    adjoint = matrix.conj().transpose(-1, -2)
    product = torch.matmul(adjoint, matrix)

    n = matrix.shape[-1]
    identity = torch.eye(n, dtype=matrix.dtype, device=matrix.device)
    if product.ndim > 2:
        identity = identity.expand(product.shape)

    diff = torch.abs(product - identity)
    return bool(torch.all(diff <= atol).item())
