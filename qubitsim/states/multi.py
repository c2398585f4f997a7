"""Dense multi-qubit states."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

import numpy as np
import torch

from ..audit import digest
from ..backend import statevector as sv
from ..core.device import Device
from ..diagnostics.core import fidelity, total_probability
from ..logging import get_logger
from .qubit import QubitState, _format_amplitude

logger = get_logger(__name__)

AmplitudeLike = Union[torch.Tensor, np.ndarray, Sequence[complex]]

# Eigenvalues of a reduced density matrix at or below this are treated as 0
# when computing entropy.
_ENTROPY_EPS = 1e-10


@dataclass(frozen=True)
class MultiQubitMeasurement:
    """Outcome of measuring every qubit of a register."""

    outcome: int
    bitstring: str
    probability: float
    hash: str


@dataclass(frozen=True)
class PartialMeasurement:
    """Outcome of measuring one qubit; ``new_state`` is the renormalized remainder."""

    outcome: int
    probability: float
    new_state: "MultiQubitState"


def _to_amplitude_tensor(amplitudes: AmplitudeLike) -> torch.Tensor:
    if isinstance(amplitudes, np.ndarray):
        return torch.from_numpy(np.asarray(amplitudes, dtype=np.complex128).reshape(-1).copy())
    if isinstance(amplitudes, torch.Tensor):
        vector = amplitudes.detach().reshape(-1)
        if not torch.is_complex(vector):
            vector = vector.to(torch.float64)
        return vector.to(torch.complex128).clone()
    return torch.tensor([complex(a) for a in amplitudes], dtype=torch.complex128)


def _entropy_from_eigenvalues(eigenvalues: Sequence[float]) -> float:
    entropy = 0.0
    for lam in eigenvalues:
        if lam > _ENTROPY_EPS:
            entropy -= lam * math.log2(lam)
    return entropy


class MultiQubitState:
    """
    Normalized n-qubit state stored as a dense vector of 2**n amplitudes.

    Basis index i is the binary number b_0 b_1 ... b_{n-1}, with qubit 0 as
    the most significant bit. The vector is rescaled to unit norm on
    construction and never mutated afterwards.

    Parameters
    ----------
    amplitudes:
        Sequence of complex numbers or a 1D tensor whose length is a power
        of 2 (1, 2, 4, ...).

    Raises
    ------
    ValueError
        If the length is not a power of 2.
    """

    def __init__(self, amplitudes: AmplitudeLike) -> None:
        vector = _to_amplitude_tensor(amplitudes)
        dim = vector.shape[0]
        if dim == 0 or dim & (dim - 1) != 0:
            raise ValueError(
                f"Number of amplitudes must be a power of 2, got {dim}."
            )
        self._num_qubits = dim.bit_length() - 1

        norm = float(torch.sqrt((vector.abs() ** 2).sum()))
        if norm > 0:
            vector = vector / norm
        self._amplitudes = vector

    @classmethod
    def _wrap(cls, vector: torch.Tensor) -> "MultiQubitState":
        """Build from a tensor the caller will not touch again."""
        state = cls.__new__(cls)
        state._num_qubits = sv.infer_num_qubits(vector.shape[0])
        norm = float(torch.sqrt((vector.abs() ** 2).sum()))
        state._amplitudes = vector / norm if norm > 0 else vector
        return state

    # Presets

    @classmethod
    def zeros(cls, num_qubits: int, device: Optional[Device] = None) -> "MultiQubitState":
        """|0...0⟩ on ``num_qubits`` qubits, allocated on ``device``."""
        return cls._wrap(sv.zero_state(num_qubits, device=device))

    @classmethod
    def basis(cls, num_qubits: int, index: int) -> "MultiQubitState":
        """Computational basis state |index⟩."""
        return cls._wrap(sv.basis_state(num_qubits, index))

    @classmethod
    def from_bitstring(cls, bits: str) -> "MultiQubitState":
        """Basis state written as a bitstring, qubit 0 first (e.g. "110")."""
        if not bits or any(b not in "01" for b in bits):
            raise ValueError(f"bitstring must be a non-empty string of 0/1, got {bits!r}")
        return cls.basis(len(bits), int(bits, 2))

    @classmethod
    def tensor_product(cls, *states: QubitState) -> "MultiQubitState":
        """Product state; the first argument becomes qubit 0."""
        if not states:
            raise ValueError("Need at least one qubit state")
        vector = states[0].amplitudes
        for state in states[1:]:
            vector = torch.kron(vector, state.amplitudes)
        return cls._wrap(vector)

    @classmethod
    def bell_phi_plus(cls) -> "MultiQubitState":
        """(|00⟩ + |11⟩)/√2."""
        return cls([1.0, 0.0, 0.0, 1.0])

    @classmethod
    def bell_phi_minus(cls) -> "MultiQubitState":
        """(|00⟩ - |11⟩)/√2."""
        return cls([1.0, 0.0, 0.0, -1.0])

    @classmethod
    def bell_psi_plus(cls) -> "MultiQubitState":
        """(|01⟩ + |10⟩)/√2."""
        return cls([0.0, 1.0, 1.0, 0.0])

    @classmethod
    def bell_psi_minus(cls) -> "MultiQubitState":
        """(|01⟩ - |10⟩)/√2."""
        return cls([0.0, 1.0, -1.0, 0.0])

    @classmethod
    def ghz(cls, num_qubits: int) -> "MultiQubitState":
        """(|0...0⟩ + |1...1⟩)/√2."""
        if num_qubits < 1:
            raise ValueError(f"GHZ state needs at least 1 qubit, got {num_qubits}")
        vector = torch.zeros(2**num_qubits, dtype=torch.complex128)
        vector[0] = 1.0
        vector[-1] = 1.0
        return cls._wrap(vector)

    @classmethod
    def w(cls, num_qubits: int) -> "MultiQubitState":
        """Equal superposition of all states with exactly one qubit set."""
        if num_qubits < 1:
            raise ValueError(f"W state needs at least 1 qubit, got {num_qubits}")
        vector = torch.zeros(2**num_qubits, dtype=torch.complex128)
        for q in range(num_qubits):
            vector[2 ** (num_qubits - 1 - q)] = 1.0
        return cls._wrap(vector)

    # Accessors

    @property
    def num_qubits(self) -> int:
        return self._num_qubits

    @property
    def dimension(self) -> int:
        return self._amplitudes.shape[0]

    @property
    def amplitudes(self) -> torch.Tensor:
        """Copy of the amplitude vector."""
        return self._amplitudes.clone()

    def amplitude(self, index: int) -> complex:
        if index < 0 or index >= self.dimension:
            raise ValueError(f"Index {index} out of bounds [0, {self.dimension})")
        return complex(self._amplitudes[index].item())

    def probability(self, index: int) -> float:
        return abs(self.amplitude(index)) ** 2

    def probabilities(self) -> torch.Tensor:
        return self._amplitudes.abs() ** 2

    def total_probability(self) -> float:
        return total_probability(self._amplitudes)

    def is_normalized(self, tolerance: float = 1e-10) -> bool:
        return abs(math.sqrt(self.total_probability()) - 1.0) < tolerance

    def bitstring(self, index: int) -> str:
        """Basis index as an n-character bitstring, qubit 0 first."""
        if self._num_qubits == 0:
            return ""
        return format(index, f"0{self._num_qubits}b")

    def evolve(self, matrix: torch.Tensor, targets: Sequence[int]) -> "MultiQubitState":
        """Return the state after applying ``matrix`` to ``targets``."""
        return MultiQubitState._wrap(
            sv.apply_matrix(self._amplitudes, matrix, targets, self._num_qubits)
        )

    # Measurement

    def measure(self, generator: Optional[torch.Generator] = None) -> MultiQubitMeasurement:
        """Sample one basis state with the Born rule (inverse-CDF on one draw)."""
        probs = self.probabilities()
        outcome = sv.sample_index(probs, sv.draw_uniform(generator))
        bitstring = self.bitstring(outcome)
        probability = float(probs[outcome])
        return MultiQubitMeasurement(
            outcome=outcome,
            bitstring=bitstring,
            probability=probability,
            hash=digest(f"measure:{outcome}:{bitstring}:{probability!r}"),
        )

    def measure_qubit(
        self, qubit: int, generator: Optional[torch.Generator] = None
    ) -> PartialMeasurement:
        """
        Projectively measure one qubit and renormalize the remaining state.

        Raises
        ------
        ValueError
            If ``qubit`` is out of range.
        """
        if qubit < 0 or qubit >= self._num_qubits:
            raise ValueError(
                f"Qubit index {qubit} out of bounds [0, {self._num_qubits})"
            )

        p0, p1 = sv.qubit_probabilities(self._amplitudes, qubit, self._num_qubits)
        # Scale the draw by p0 + p1 so a zero-probability outcome is never picked.
        outcome = 0 if sv.draw_uniform(generator) * (p0 + p1) < p0 else 1
        probability = p0 if outcome == 0 else p1
        projected = sv.project_qubit(
            self._amplitudes, qubit, outcome, probability, self._num_qubits
        )
        logger.debug(
            "measured qubit %d -> %d (p=%.6f)", qubit, outcome, probability
        )
        return PartialMeasurement(
            outcome=outcome,
            probability=probability,
            new_state=MultiQubitState._wrap(projected),
        )

    # Comparison and entanglement

    def fidelity(self, other: "MultiQubitState") -> float:
        """|⟨ψ|φ⟩|²; both states must have the same qubit count."""
        if self._num_qubits != other._num_qubits:
            raise ValueError(
                "States must have same number of qubits "
                f"({self._num_qubits} != {other._num_qubits})"
            )
        return fidelity(self._amplitudes, other._amplitudes)

    def equals(self, other: "MultiQubitState", tolerance: float = 1e-10) -> bool:
        """Equality up to global phase."""
        if self._num_qubits != other._num_qubits:
            return False
        return abs(self.fidelity(other) - 1.0) < tolerance

    def reduced_density_matrix(self, qubits: Sequence[int]) -> torch.Tensor:
        """
        Reduced density matrix of ``qubits``, tracing out every other qubit.

        The first listed qubit is the most significant bit of the reduced
        index. The amplitudes are permuted so the kept qubits lead and the
        rest are contracted away, so memory stays O(2**n).
        """
        kept = sv.check_targets(qubits, self._num_qubits)
        n = self._num_qubits
        traced = [q for q in range(n) if q not in kept]

        psi = self._amplitudes.reshape((2,) * n).permute(*kept, *traced)
        psi = psi.reshape(2 ** len(kept), -1)
        return psi @ psi.conj().transpose(0, 1)

    def entanglement_entropy(self, qubits: Sequence[int]) -> float:
        """
        Von Neumann entropy (base 2) of the reduced state of ``qubits``.

        A single kept qubit uses the closed-form 2x2 eigenvalues; larger
        subsystems use a Hermitian eigendecomposition.
        """
        rho = self.reduced_density_matrix(qubits)
        if rho.shape[0] == 2:
            a = float(rho[0, 0].real)
            d = float(rho[1, 1].real)
            b = float(rho[0, 1].abs())
            trace = a + d
            det = a * d - b * b
            disc = math.sqrt(max(0.0, trace * trace - 4.0 * det))
            eigenvalues = [max(0.0, (trace + disc) / 2.0), max(0.0, (trace - disc) / 2.0)]
        else:
            eigenvalues = torch.linalg.eigvalsh(rho).clamp(min=0.0).tolist()
        return _entropy_from_eigenvalues(eigenvalues)

    def is_separable(self, tolerance: float = 1e-6) -> bool:
        """True when every single-qubit reduced state is pure."""
        if self._num_qubits <= 1:
            return True
        return all(
            self.entanglement_entropy([q]) <= tolerance for q in range(self._num_qubits)
        )

    # Misc

    def clone(self) -> "MultiQubitState":
        return MultiQubitState._wrap(self._amplitudes.clone())

    def get_hash(self) -> str:
        values = ",".join(
            f"{a.real:.12e}{a.imag:+.12e}j" for a in self._amplitudes.tolist()
        )
        return digest(f"multiqubit:{self._num_qubits}:{values}")

    def nonzero_terms(self, tolerance: float = 1e-10) -> List[tuple]:
        """(bitstring, amplitude) pairs with magnitude above ``tolerance``."""
        return [
            (self.bitstring(i), a)
            for i, a in enumerate(self._amplitudes.tolist())
            if abs(a) > tolerance
        ]

    def __str__(self) -> str:
        terms = [f"{_format_amplitude(a)}|{bits}⟩" for bits, a in self.nonzero_terms()]
        return " + ".join(terms) if terms else "0"

    def __repr__(self) -> str:
        return f"MultiQubitState(num_qubits={self._num_qubits})"


__all__ = [
    "MultiQubitMeasurement",
    "PartialMeasurement",
    "MultiQubitState",
]
