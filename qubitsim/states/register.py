"""Labelled qubits and qubit registers."""

from __future__ import annotations

import itertools
from typing import List, Optional

import torch

from ..audit import digest
from .multi import MultiQubitState
from .qubit import BlochCoordinates, MeasurementResult, QubitState

_qubit_ids = itertools.count()


class Qubit:
    """A labelled holder for a single-qubit state.

    Unlike QubitState, a Qubit is mutable: measuring it replaces its state
    with the collapsed one.
    """

    def __init__(
        self,
        state: Optional[QubitState] = None,
        label: Optional[str] = None,
        qubit_id: Optional[str] = None,
    ) -> None:
        self._state = state if state is not None else QubitState.zero()
        self.id = qubit_id or f"q{next(_qubit_ids)}"
        self.label = label or self.id

    @property
    def state(self) -> QubitState:
        return self._state

    @state.setter
    def state(self, value: QubitState) -> None:
        self._state = value

    def to_bloch(self) -> BlochCoordinates:
        return self._state.to_bloch()

    def measure(self, generator: Optional[torch.Generator] = None) -> MeasurementResult:
        result = self._state.measure(generator)
        self._state = result.collapsed_state
        return result

    def reset(self) -> None:
        self._state = QubitState.zero()

    def clone(self) -> "Qubit":
        return Qubit(self._state.clone(), label=f"{self.label}_clone", qubit_id=f"{self.id}_clone")

    def get_hash(self) -> str:
        return digest(f"qubit:{self.id}:{self._state.get_hash()}")

    def __str__(self) -> str:
        return f"{self.label}: {self._state}"


class QubitRegister:
    """Fixed-size list of labelled qubits, all starting in |0⟩."""

    def __init__(self, size: int, label: str = "qreg") -> None:
        if size < 1:
            raise ValueError(f"Register size must be >= 1, got {size}")
        self.label = label
        self._qubits: List[Qubit] = [
            Qubit(label=f"{label}[{i}]", qubit_id=f"{label}[{i}]") for i in range(size)
        ]

    def __len__(self) -> int:
        return len(self._qubits)

    def __getitem__(self, index: int) -> Qubit:
        if index < 0 or index >= len(self._qubits):
            raise IndexError(f"Index {index} out of bounds for register of size {len(self)}")
        return self._qubits[index]

    @property
    def qubits(self) -> tuple[Qubit, ...]:
        return tuple(self._qubits)

    def combined_state(self) -> MultiQubitState:
        """Tensor product of the qubit states, register index 0 first."""
        return MultiQubitState.tensor_product(*(q.state for q in self._qubits))

    def measure_all(self, generator: Optional[torch.Generator] = None) -> List[MeasurementResult]:
        return [q.measure(generator) for q in self._qubits]

    def reset(self) -> None:
        for q in self._qubits:
            q.reset()

    def get_hash(self) -> str:
        return digest(f"register:{self.label}:" + ",".join(q.get_hash() for q in self._qubits))

    def __str__(self) -> str:
        return f"{self.label}[{len(self)}]: {self.combined_state()}"


__all__ = ["Qubit", "QubitRegister"]
