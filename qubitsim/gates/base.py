"""Gate value objects: named unitary matrices acting on k qubits."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union

import numpy as np
import torch

from ..audit import digest
from ..diagnostics.core import is_hermitian as _is_hermitian_matrix
from ..states.multi import MultiQubitState
from ..states.qubit import QubitState
from .standard import is_unitary as _is_unitary_matrix

MatrixLike = Union[torch.Tensor, np.ndarray, Sequence[Sequence[complex]]]


class GateKind(enum.Enum):
    """Tag identifying the named standard gates."""

    IDENTITY = "I"
    X = "X"
    Y = "Y"
    Z = "Z"
    H = "H"
    S = "S"
    SDG = "S†"
    T = "T"
    TDG = "T†"
    RX = "RX"
    RY = "RY"
    RZ = "RZ"
    P = "P"
    U3 = "U3"
    CNOT = "CNOT"
    CZ = "CZ"
    SWAP = "SWAP"
    ISWAP = "iSWAP"
    SQRT_SWAP = "√SWAP"
    CP = "CP"
    CRX = "CRX"
    TOFFOLI = "Toffoli"
    FREDKIN = "Fredkin"
    CUSTOM = "custom"


SELF_INVERSE_KINDS = frozenset(
    {GateKind.X, GateKind.Y, GateKind.Z, GateKind.H, GateKind.CNOT, GateKind.CZ, GateKind.SWAP}
)

# Families closed under adjoint: the adjoint is the same gate with negated angles.
PARAMETRIC_KINDS = frozenset(
    {GateKind.RX, GateKind.RY, GateKind.RZ, GateKind.P, GateKind.U3, GateKind.CP, GateKind.CRX}
)

_INVERSE_PAIRS = {
    GateKind.S: GateKind.SDG,
    GateKind.SDG: GateKind.S,
    GateKind.T: GateKind.TDG,
    GateKind.TDG: GateKind.T,
}

# Kinds whose controlled version is itself a named gate.
_CONTROLLED_KINDS = {
    (GateKind.X, 1): GateKind.CNOT,
    (GateKind.Z, 1): GateKind.CZ,
    (GateKind.X, 2): GateKind.TOFFOLI,
    (GateKind.SWAP, 1): GateKind.FREDKIN,
}


def inverse_kind(kind: GateKind) -> GateKind:
    """Kind of the adjoint of a gate of ``kind`` (CUSTOM when not named)."""
    if kind in SELF_INVERSE_KINDS or kind in PARAMETRIC_KINDS or kind is GateKind.IDENTITY:
        return kind
    return _INVERSE_PAIRS.get(kind, GateKind.CUSTOM)


def _adjoint_params(kind: GateKind, params: Tuple[float, ...]) -> Tuple[float, ...]:
    if kind is GateKind.U3 and len(params) == 3:
        theta, phi, lam = params
        return (-theta, -lam, -phi)
    if kind in PARAMETRIC_KINDS:
        return tuple(-p for p in params)
    return ()


def are_inverses(a: GateKind, b: GateKind) -> bool:
    """True when gates of kinds ``a`` and ``b`` are known to cancel."""
    if a in SELF_INVERSE_KINDS:
        return a is b
    return _INVERSE_PAIRS.get(a) is b


@dataclass(frozen=True)
class GateProperties:
    """Structural summary of a gate."""

    name: str
    num_qubits: int
    dimension: int
    kind: GateKind
    is_unitary: bool
    is_hermitian: bool
    is_self_inverse: bool


def _to_matrix(matrix: MatrixLike) -> torch.Tensor:
    if isinstance(matrix, np.ndarray):
        return torch.from_numpy(np.array(matrix, dtype=np.complex128))
    if isinstance(matrix, torch.Tensor):
        tensor = matrix.detach()
        if not torch.is_complex(tensor):
            tensor = tensor.to(torch.float64)
        return tensor.to(torch.complex128).clone()
    return torch.tensor(
        [[complex(v) for v in row] for row in matrix], dtype=torch.complex128
    )


class Gate:
    """
    A named unitary acting on ``num_qubits`` qubits.

    The matrix is copied on the way in and on the way out, so a Gate can be
    shared freely between circuits. Unitarity is not enforced; use
    ``is_unitary`` to check.

    Parameters
    ----------
    name:
        Display name, e.g. "H" or "Rx(0.500)".
    matrix:
        Square 2**k x 2**k complex matrix.
    num_qubits:
        Optional arity; inferred from the matrix when omitted.
    kind:
        GateKind tag; CUSTOM for anything that is not a named standard gate.
    params:
        Numeric parameters the matrix was built from, used for display.

    Raises
    ------
    ValueError
        If the matrix is not square with a power-of-2 dimension >= 2, or
        disagrees with ``num_qubits``.
    """

    def __init__(
        self,
        name: str,
        matrix: MatrixLike,
        num_qubits: Optional[int] = None,
        kind: GateKind = GateKind.CUSTOM,
        params: Sequence[float] = (),
    ) -> None:
        tensor = _to_matrix(matrix)
        if tensor.dim() != 2 or tensor.shape[0] != tensor.shape[1]:
            raise ValueError(
                f"Gate matrix must be square, got shape {tuple(tensor.shape)}."
            )
        dim = tensor.shape[0]
        if dim < 2 or dim & (dim - 1) != 0:
            raise ValueError(
                f"Gate matrix dimension must be a power of 2 >= 2, got {dim}."
            )
        inferred = dim.bit_length() - 1
        if num_qubits is not None and num_qubits != inferred:
            raise ValueError(
                f"Gate {name!r}: matrix of dimension {dim} acts on {inferred} "
                f"qubit(s), not {num_qubits}."
            )
        if not isinstance(kind, GateKind):
            raise TypeError(f"kind must be a GateKind, got {type(kind).__name__}")

        self._name = name
        self._matrix = tensor
        self._num_qubits = inferred
        self._kind = kind
        self._params = tuple(float(p) for p in params)

    @property
    def name(self) -> str:
        return self._name

    @property
    def num_qubits(self) -> int:
        return self._num_qubits

    @property
    def kind(self) -> GateKind:
        return self._kind

    @property
    def params(self) -> Tuple[float, ...]:
        """Numeric parameters (e.g. rotation angles); empty for fixed gates."""
        return self._params

    @property
    def matrix(self) -> torch.Tensor:
        """Copy of the gate matrix."""
        return self._matrix.clone()

    def get_matrix(self) -> torch.Tensor:
        return self.matrix

    # Application

    def apply(self, state: QubitState) -> QubitState:
        """Apply a single-qubit gate to a QubitState."""
        if self._num_qubits != 1:
            raise ValueError(
                f"Gate {self._name!r} acts on {self._num_qubits} qubits; "
                "apply() only accepts single-qubit gates."
            )
        vector = self._matrix @ state.amplitudes
        return QubitState(vector[0], vector[1])

    def apply_to(self, state: MultiQubitState, targets: Sequence[int]) -> MultiQubitState:
        """
        Apply the gate to ``targets`` of a multi-qubit state.

        ``targets[0]`` is the most significant bit of the gate's local basis.
        """
        targets = tuple(int(q) for q in targets)
        if len(targets) != self._num_qubits:
            raise ValueError(
                f"Gate {self._name!r} requires {self._num_qubits} target(s), "
                f"got {len(targets)}."
            )
        return state.evolve(self._matrix, targets)

    # Algebra

    def tensor(self, other: "Gate") -> "Gate":
        """Kronecker product; ``self`` acts on the leading qubits."""
        return Gate(
            f"{self._name}⊗{other._name}",
            torch.kron(self._matrix, other._matrix),
            self._num_qubits + other._num_qubits,
        )

    def compose(self, other: "Gate") -> "Gate":
        """Matrix product self @ other: ``other`` acts first."""
        if self._matrix.shape != other._matrix.shape:
            raise ValueError(
                f"Cannot compose {self._name!r} ({self._num_qubits} qubits) with "
                f"{other._name!r} ({other._num_qubits} qubits)."
            )
        return Gate(
            f"{self._name}∘{other._name}",
            self._matrix @ other._matrix,
            self._num_qubits,
        )

    def dagger(self) -> "Gate":
        """Conjugate transpose. Self-inverse named gates keep their name."""
        if self._kind in SELF_INVERSE_KINDS or self._kind is GateKind.IDENTITY:
            name = self._name
        elif self._name.endswith("†"):
            name = self._name[:-1]
        else:
            name = f"{self._name}†"
        return Gate(
            name,
            self._matrix.conj().transpose(0, 1),
            self._num_qubits,
            inverse_kind(self._kind),
            _adjoint_params(self._kind, self._params),
        )

    def controlled(self, num_controls: int = 1) -> "ControlledGate":
        return ControlledGate(self, num_controls)

    # Properties

    def is_unitary(self, tolerance: float = 1e-10) -> bool:
        return _is_unitary_matrix(self._matrix, atol=tolerance)

    def is_hermitian(self, tolerance: float = 1e-10) -> bool:
        return _is_hermitian_matrix(self._matrix, atol=tolerance)

    def properties(self) -> GateProperties:
        dim = self._matrix.shape[0]
        identity = torch.eye(dim, dtype=self._matrix.dtype)
        squared = self._matrix @ self._matrix
        return GateProperties(
            name=self._name,
            num_qubits=self._num_qubits,
            dimension=dim,
            kind=self._kind,
            is_unitary=self.is_unitary(),
            is_hermitian=self.is_hermitian(),
            is_self_inverse=bool(torch.allclose(squared, identity, atol=1e-10)),
        )

    def get_hash(self) -> str:
        values = ",".join(
            f"{v.real:.12e}{v.imag:+.12e}j" for v in self._matrix.reshape(-1).tolist()
        )
        return digest(f"gate:{self._name}:{self._num_qubits}:{values}")

    def __str__(self) -> str:
        return f"{self._name} ({self._num_qubits}-qubit gate)"

    def __repr__(self) -> str:
        return (
            f"Gate(name={self._name!r}, num_qubits={self._num_qubits}, "
            f"kind={self._kind.name})"
        )


class ControlledGate(Gate):
    """
    ``base`` conditioned on ``num_controls`` leading control qubits.

    The matrix is the identity except on the block where every control bit
    is 1, which holds the base matrix. Targets are passed controls first.
    """

    def __init__(self, base: Gate, num_controls: int = 1) -> None:
        if num_controls < 1:
            raise ValueError(f"num_controls must be >= 1, got {num_controls}")

        base_dim = 2**base.num_qubits
        dim = base_dim * 2**num_controls
        matrix = torch.eye(dim, dtype=torch.complex128)
        matrix[dim - base_dim :, dim - base_dim :] = base.matrix

        super().__init__(
            "C" * num_controls + base.name,
            matrix,
            base.num_qubits + num_controls,
            _CONTROLLED_KINDS.get((base.kind, num_controls), GateKind.CUSTOM),
            base.params,
        )
        self.base = base
        self.num_controls = num_controls

    def dagger(self) -> "ControlledGate":
        """Adjoint, kept in controlled form so the controls stay visible."""
        return ControlledGate(self.base.dagger(), self.num_controls)


__all__ = [
    "GateKind",
    "SELF_INVERSE_KINDS",
    "PARAMETRIC_KINDS",
    "inverse_kind",
    "are_inverses",
    "GateProperties",
    "Gate",
    "ControlledGate",
]
