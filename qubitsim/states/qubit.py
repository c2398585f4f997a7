"""Single-qubit states and Bloch-sphere coordinates."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Optional

import torch

from ..audit import digest
from ..backend.statevector import draw_uniform
from ..diagnostics.core import fidelity

_SQRT2_INV = 1.0 / math.sqrt(2.0)


def _as_complex(value) -> complex:
    if isinstance(value, torch.Tensor):
        if value.numel() != 1:
            raise ValueError(f"amplitude must be a scalar, got shape {tuple(value.shape)}")
        return complex(value.reshape(()).item())
    return complex(value)


def _format_amplitude(a: complex) -> str:
    return f"({a.real:.4f}{a.imag:+.4f}j)"


@dataclass(frozen=True)
class BlochCoordinates:
    """
    Point on the Bloch sphere.

    Attributes
    ----------
    theta:
        Polar angle in [0, π].
    phi:
        Azimuthal angle, phase(β) - phase(α); not wrapped.
    x, y, z:
        Cartesian coordinates sin θ cos φ, sin θ sin φ, cos θ.
    """

    theta: float
    phi: float
    x: float
    y: float
    z: float

    @classmethod
    def from_angles(cls, theta: float, phi: float) -> "BlochCoordinates":
        return cls(
            theta=theta,
            phi=phi,
            x=math.sin(theta) * math.cos(phi),
            y=math.sin(theta) * math.sin(phi),
            z=math.cos(theta),
        )

    def distance(self, other: "BlochCoordinates") -> float:
        """Euclidean distance between two points on the sphere."""
        return math.sqrt(
            (self.x - other.x) ** 2 + (self.y - other.y) ** 2 + (self.z - other.z) ** 2
        )


BLOCH_BASIS_STATES: Dict[str, BlochCoordinates] = {
    "|0⟩": BlochCoordinates.from_angles(0.0, 0.0),
    "|1⟩": BlochCoordinates.from_angles(math.pi, 0.0),
    "|+⟩": BlochCoordinates.from_angles(math.pi / 2, 0.0),
    "|-⟩": BlochCoordinates.from_angles(math.pi / 2, math.pi),
    "|+i⟩": BlochCoordinates.from_angles(math.pi / 2, math.pi / 2),
    "|-i⟩": BlochCoordinates.from_angles(math.pi / 2, -math.pi / 2),
}


@dataclass(frozen=True)
class MeasurementResult:
    """Outcome of measuring a single qubit in the computational basis."""

    outcome: int
    probability: float
    collapsed_state: "QubitState"
    hash: str


class QubitState:
    """
    Normalized single-qubit state α|0⟩ + β|1⟩.

    The amplitudes are rescaled to unit norm on construction (a zero vector
    is kept as-is). Instances are never mutated; measurement returns a new
    collapsed state.
    """

    def __init__(self, alpha, beta) -> None:
        vector = torch.tensor(
            [_as_complex(alpha), _as_complex(beta)], dtype=torch.complex128
        )
        norm = float(torch.sqrt((vector.abs() ** 2).sum()))
        if norm > 0:
            vector = vector / norm
        self._vector = vector

    # Presets

    @classmethod
    def zero(cls) -> "QubitState":
        return cls(1.0, 0.0)

    @classmethod
    def one(cls) -> "QubitState":
        return cls(0.0, 1.0)

    @classmethod
    def plus(cls) -> "QubitState":
        return cls(_SQRT2_INV, _SQRT2_INV)

    @classmethod
    def minus(cls) -> "QubitState":
        return cls(_SQRT2_INV, -_SQRT2_INV)

    @classmethod
    def plus_i(cls) -> "QubitState":
        return cls(_SQRT2_INV, 1j * _SQRT2_INV)

    @classmethod
    def minus_i(cls) -> "QubitState":
        return cls(_SQRT2_INV, -1j * _SQRT2_INV)

    @classmethod
    def from_bloch(cls, theta: float, phi: float) -> "QubitState":
        """cos(θ/2)|0⟩ + e^{iφ} sin(θ/2)|1⟩."""
        half = theta / 2.0
        return cls(math.cos(half), math.sin(half) * complex(math.cos(phi), math.sin(phi)))

    @classmethod
    def random(cls, generator: Optional[torch.Generator] = None) -> "QubitState":
        """Uniformly distributed on the Bloch sphere."""
        theta = math.acos(2.0 * draw_uniform(generator) - 1.0)
        phi = 2.0 * math.pi * draw_uniform(generator)
        return cls.from_bloch(theta, phi)

    # Accessors

    @property
    def alpha(self) -> complex:
        return complex(self._vector[0].item())

    @property
    def beta(self) -> complex:
        return complex(self._vector[1].item())

    @property
    def amplitudes(self) -> torch.Tensor:
        """Copy of the amplitude vector [α, β]."""
        return self._vector.clone()

    def to_vector(self) -> torch.Tensor:
        return self.amplitudes

    def is_normalized(self, tolerance: float = 1e-10) -> bool:
        norm = float(torch.sqrt((self._vector.abs() ** 2).sum()))
        return abs(norm - 1.0) < tolerance

    def probability_zero(self) -> float:
        return abs(self.alpha) ** 2

    def probability_one(self) -> float:
        return abs(self.beta) ** 2

    def measure(self, generator: Optional[torch.Generator] = None) -> MeasurementResult:
        """
        Measure in the computational basis.

        One uniform draw u picks outcome 0 when u < P(0). The returned state is
        the corresponding basis state; this instance is unchanged.
        """
        p0, p1 = self.probability_zero(), self.probability_one()
        outcome = 0 if draw_uniform(generator) * (p0 + p1) < p0 else 1
        probability = p0 if outcome == 0 else p1
        collapsed = QubitState.zero() if outcome == 0 else QubitState.one()
        return MeasurementResult(
            outcome=outcome,
            probability=probability,
            collapsed_state=collapsed,
            hash=digest(f"measure:{outcome}:{probability!r}"),
        )

    def to_bloch(self) -> BlochCoordinates:
        alpha, beta = self.alpha, self.beta
        theta = 2.0 * math.acos(min(1.0, abs(alpha)))
        phi = math.atan2(beta.imag, beta.real) - math.atan2(alpha.imag, alpha.real)
        return BlochCoordinates.from_angles(theta, phi)

    def to_density_matrix(self) -> torch.Tensor:
        """|ψ⟩⟨ψ| as a 2x2 complex tensor."""
        return torch.outer(self._vector, self._vector.conj())

    def fidelity(self, other: "QubitState") -> float:
        """|⟨ψ|φ⟩|²."""
        return fidelity(self._vector, other._vector)

    def equals(self, other: "QubitState", tolerance: float = 1e-10) -> bool:
        """Equality up to global phase."""
        return abs(self.fidelity(other) - 1.0) < tolerance

    def clone(self) -> "QubitState":
        return QubitState(self.alpha, self.beta)

    def get_hash(self) -> str:
        return digest(f"qubit:{self.alpha!r}:{self.beta!r}")

    def __str__(self) -> str:
        return f"{_format_amplitude(self.alpha)}|0⟩ + {_format_amplitude(self.beta)}|1⟩"

    def __repr__(self) -> str:
        return f"QubitState(alpha={self.alpha!r}, beta={self.beta!r})"


__all__ = [
    "BlochCoordinates",
    "BLOCH_BASIS_STATES",
    "MeasurementResult",
    "QubitState",
]
