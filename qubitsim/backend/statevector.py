"""Statevector backend for dense pure-state simulation.

Convention: for an n-qubit register the basis index i encodes the bitstring
b_0 b_1 ... b_{n-1} with qubit 0 as the most significant bit, so qubit q is
read as ``(i >> (n - 1 - q)) & 1``.

The kernel never materializes the full 2**n x 2**n operator. For a k-qubit
gate it gathers, for every basis index, the k local target bits and
scatters ``matrix[new_bits, old_bits] * amplitude`` into the index whose
target bits were rewritten to ``new_bits``. All 2**n indices are processed
at once per value of ``new_bits``, so a gate costs O(2**k * 2**n) work.
"""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

import torch

from ..core.device import Device, default_device
from ..diagnostics import assert_normalized, is_debug_enabled

# Coefficients at or below this magnitude are skipped when scattering. This
# only saves work; dropping them does not change the result beyond rounding.
COEFF_EPS = 1e-15


def infer_num_qubits(dim: int) -> int:
    """
    Infer n from a statevector length of 2**n.

    Raises
    ------
    ValueError
        If dim is not a positive power of 2.
    """
    dim = int(dim)
    if dim <= 0 or dim & (dim - 1) != 0:
        raise ValueError(f"Statevector length must be a power of 2, got {dim}.")
    return dim.bit_length() - 1


def _check_dimension(state: torch.Tensor, n_qubits: Optional[int]) -> int:
    if state.dim() != 1:
        raise ValueError(f"state must be a 1D tensor, got shape {tuple(state.shape)}")
    if not torch.is_complex(state):
        raise ValueError(f"state must be complex dtype, got {state.dtype}")

    dim = state.shape[0]
    if n_qubits is None:
        return infer_num_qubits(dim)
    if 2**n_qubits != dim:
        raise ValueError(
            f"state dimension {dim} does not match 2**n_qubits = {2**n_qubits}"
        )
    return n_qubits


def check_targets(targets: Sequence[int], n_qubits: int) -> Tuple[int, ...]:
    """
    Validate a target list against a register size.

    Returns
    -------
    tuple of int
        The targets as a tuple of ints.

    Raises
    ------
    ValueError
        If the list is empty, an index is out of range, or an index repeats.
    """
    t_tuple = tuple(int(q) for q in targets)
    if not t_tuple:
        raise ValueError("At least one target qubit is required.")
    for q in t_tuple:
        if q < 0 or q >= n_qubits:
            raise ValueError(f"qubit index {q} out of range [0, {n_qubits})")
    if len(set(t_tuple)) != len(t_tuple):
        raise ValueError(f"target qubits must be distinct, got {list(t_tuple)}")
    return t_tuple


def _gather_local_bits(
    indices: torch.Tensor, targets: Sequence[int], n_qubits: int
) -> torch.Tensor:
    """Pack the target bits of each index into a k-bit value (first target = MSB)."""
    k = len(targets)
    local = torch.zeros_like(indices)
    for t, q in enumerate(targets):
        bit = (indices >> (n_qubits - 1 - q)) & 1
        local |= bit << (k - 1 - t)
    return local


def _scatter_local_bits(
    local: torch.Tensor, targets: Sequence[int], n_qubits: int
) -> torch.Tensor:
    """Inverse of _gather_local_bits: spread k-bit values onto register positions."""
    k = len(targets)
    spread = torch.zeros_like(local)
    for t, q in enumerate(targets):
        bit = (local >> (k - 1 - t)) & 1
        spread |= bit << (n_qubits - 1 - q)
    return spread


def zero_state(
    n_qubits: int,
    device: Device | None = None,
    dtype: torch.dtype | None = None,
) -> torch.Tensor:
    """
    Create the all-zero state |0...0> for n_qubits.

    Args:
        n_qubits: Number of qubits. Must be >= 0.
        device: Device to allocate on. Defaults to default_device().
        dtype: Complex dtype. Defaults to the device's complex dtype.

    Returns:
        A complex tensor of shape (2**n_qubits,).
    """
    return basis_state(n_qubits, 0, device=device, dtype=dtype)


def basis_state(
    n_qubits: int,
    index: int,
    device: Device | None = None,
    dtype: torch.dtype | None = None,
) -> torch.Tensor:
    """Create the computational basis state |index> on n_qubits."""
    if n_qubits < 0:
        raise ValueError(f"n_qubits must be >= 0, got {n_qubits}")
    dim = 2**n_qubits
    if index < 0 or index >= dim:
        raise ValueError(f"basis index {index} out of range [0, {dim})")

    qdevice = device if device is not None else default_device()
    if dtype is None:
        dtype = qdevice.complex_dtype

    state = qdevice.zeros(dim).to(dtype)
    state[index] = 1.0 + 0.0j
    return state


def apply_matrix(
    state: torch.Tensor,
    matrix: torch.Tensor,
    targets: Sequence[int],
    n_qubits: int | None = None,
) -> torch.Tensor:
    """
    Apply a k-qubit gate matrix to the given target qubits of a statevector.

    The gate's local basis orders the targets as listed: ``targets[0]`` is the
    most significant bit of the row/column index of ``matrix``.

    Args:
        state: Statevector of shape (2**n_qubits,), complex dtype.
        matrix: Gate matrix of shape (2**k, 2**k) with k = len(targets).
        targets: Distinct target qubit indices.
        n_qubits: Number of qubits. If None, inferred from the state length.

    Returns:
        A new statevector; ``state`` is left untouched.

    Raises:
        ValueError: On a non-power-of-2 state, a matrix whose size does not
            match the number of targets, or invalid target indices.
    """
    n_qubits = _check_dimension(state, n_qubits)
    targets = check_targets(targets, n_qubits)

    k = len(targets)
    gate_dim = 2**k
    if tuple(matrix.shape) != (gate_dim, gate_dim):
        raise ValueError(
            f"gate matrix must have shape ({gate_dim}, {gate_dim}) for "
            f"{k} target(s), got {tuple(matrix.shape)}"
        )

    matrix = matrix.to(dtype=state.dtype, device=state.device)
    dim = state.shape[0]

    indices = torch.arange(dim, device=state.device)
    old_bits = _gather_local_bits(indices, targets, n_qubits)

    # Accumulate in a real view so index_add_ only ever sees float tensors.
    accum = torch.zeros(dim, 2, dtype=state.real.dtype, device=state.device)

    for new_bits in range(gate_dim):
        coeff = matrix[new_bits, old_bits]
        keep = coeff.abs() > COEFF_EPS
        if not bool(keep.any()):
            continue

        flips = _scatter_local_bits(old_bits ^ new_bits, targets, n_qubits)
        dest = (indices ^ flips)[keep]
        contrib = coeff[keep] * state[keep]
        accum.index_add_(0, dest, torch.view_as_real(contrib))

    new_state = torch.view_as_complex(accum)

    if is_debug_enabled():
        assert_normalized(new_state)

    return new_state


def expand_operator(
    matrix: torch.Tensor,
    targets: Sequence[int],
    n_qubits: int,
) -> torch.Tensor:
    """
    Embed a k-qubit gate matrix into the full 2**n x 2**n operator.

    Entry (i, j) equals ``matrix[local(i), local(j)]`` when i and j agree on
    every non-target qubit, and 0 otherwise. This is the expensive reference
    path (O(4**n) memory) used to build whole-circuit unitaries.
    """
    targets = check_targets(targets, n_qubits)
    k = len(targets)
    if tuple(matrix.shape) != (2**k, 2**k):
        raise ValueError(
            f"gate matrix must have shape ({2**k}, {2**k}) for {k} target(s), "
            f"got {tuple(matrix.shape)}"
        )

    dim = 2**n_qubits
    indices = torch.arange(dim, device=matrix.device)
    local = _gather_local_bits(indices, targets, n_qubits)

    target_mask = int(
        _scatter_local_bits(torch.tensor(2**k - 1), targets, n_qubits)
    )
    spectators = indices & ~target_mask
    same_spectators = spectators.unsqueeze(1) == spectators.unsqueeze(0)

    embedded = matrix[local.unsqueeze(1), local.unsqueeze(0)]
    return torch.where(same_spectators, embedded, torch.zeros_like(embedded))


def measure_probs(state: torch.Tensor) -> torch.Tensor:
    """
    Probability of every computational basis state, |state[i]|^2.

    The result is renormalized to sum to 1 so that small numerical drift does
    not bias sampling.
    """
    _check_dimension(state, None)
    probs = (state.abs() ** 2).contiguous()
    total = probs.sum()
    return probs / torch.clamp(total, min=1e-300)


def qubit_probabilities(
    state: torch.Tensor, qubit: int, n_qubits: int | None = None
) -> Tuple[float, float]:
    """Return (P(qubit = 0), P(qubit = 1)) for a statevector."""
    n_qubits = _check_dimension(state, n_qubits)
    check_targets([qubit], n_qubits)

    probs = state.abs() ** 2
    bits = (torch.arange(state.shape[0], device=state.device) >> (n_qubits - 1 - qubit)) & 1
    p1 = float(probs[bits == 1].sum())
    p0 = float(probs[bits == 0].sum())
    return p0, p1


def project_qubit(
    state: torch.Tensor,
    qubit: int,
    outcome: int,
    probability: float,
    n_qubits: int | None = None,
) -> torch.Tensor:
    """
    Project ``qubit`` onto ``outcome`` and rescale by 1/sqrt(probability).

    Amplitudes disagreeing with the outcome are zeroed; the rest are divided
    by sqrt(probability), which restores unit norm.
    """
    n_qubits = _check_dimension(state, n_qubits)
    check_targets([qubit], n_qubits)
    if outcome not in (0, 1):
        raise ValueError(f"outcome must be 0 or 1, got {outcome}")
    if probability <= 0.0:
        raise ValueError(
            f"Cannot project qubit {qubit} onto outcome {outcome} with probability {probability}."
        )

    bits = (torch.arange(state.shape[0], device=state.device) >> (n_qubits - 1 - qubit)) & 1
    scale = 1.0 / (probability ** 0.5)
    return torch.where(bits == outcome, state * scale, torch.zeros_like(state))


def draw_uniform(generator: Optional[torch.Generator] = None) -> float:
    """Draw one uniform sample from [0, 1), optionally from a given generator."""
    return float(torch.rand(1, generator=generator, dtype=torch.float64)[0])


def sample_index(probs: torch.Tensor, draw: float) -> int:
    """
    Inverse-CDF sampling: the first index whose cumulative probability
    exceeds ``draw``.

    If rounding leaves ``draw`` at or above the final cumulative value, the
    last index with non-zero probability is returned.
    """
    cumulative = torch.cumsum(probs.to(torch.float64), dim=0)
    draw_t = torch.tensor([draw], dtype=torch.float64, device=cumulative.device)
    index = int(torch.searchsorted(cumulative, draw_t, right=True)[0])
    if index >= probs.shape[0]:
        nonzero = torch.nonzero(probs > 0).flatten()
        index = int(nonzero[-1]) if nonzero.numel() else probs.shape[0] - 1
    return index


__all__ = [
    "COEFF_EPS",
    "infer_num_qubits",
    "check_targets",
    "zero_state",
    "basis_state",
    "apply_matrix",
    "expand_operator",
    "measure_probs",
    "qubit_probabilities",
    "project_qubit",
    "draw_uniform",
    "sample_index",
]
