"""Canonical circuit constructions."""

from __future__ import annotations

import math
from typing import Optional

import torch

from ..backend.statevector import draw_uniform
from ..core.context import SimulationContext
from ..gates.base import Gate
from .core import QuantumCircuit

_RANDOM_GATES = ("H", "X", "Y", "Z", "T", "S")


class CircuitFactory:
    """
    Builders for frequently used circuits.

    Every method returns a fresh, unmeasured circuit; add measurements as
    needed. Randomized builders take an optional ``torch.Generator``.
    """

    @staticmethod
    def bell_state(pair: int = 0, context: Optional[SimulationContext] = None) -> QuantumCircuit:
        """
        Prepare one of the four Bell states from |00⟩.

        pair 0: |Φ+⟩, 1: |Φ-⟩, 2: |Ψ+⟩, 3: |Ψ-⟩.
        """
        if pair not in (0, 1, 2, 3):
            raise ValueError(f"Bell pair must be 0, 1, 2 or 3, got {pair!r}.")
        circuit = QuantumCircuit(2, name="bell_state", context=context)
        circuit.h(0).cx(0, 1)
        if pair == 1:
            circuit.z(0)
        elif pair == 2:
            circuit.x(1)
        elif pair == 3:
            circuit.x(1).z(0)
        return circuit

    @staticmethod
    def ghz_state(num_qubits: int, context: Optional[SimulationContext] = None) -> QuantumCircuit:
        """(|0...0⟩ + |1...1⟩)/√2."""
        circuit = QuantumCircuit(num_qubits, name="ghz_state", context=context)
        circuit.h(0)
        for i in range(1, num_qubits):
            circuit.cx(0, i)
        return circuit

    @staticmethod
    def w_state(num_qubits: int, context: Optional[SimulationContext] = None) -> QuantumCircuit:
        """
        Exact W state, an equal superposition of all single-excitation states.

        The excitation starts on qubit 0; step i keeps amplitude
        sqrt(1/(n-i)) of it there and hands the rest to qubit i+1 with a
        controlled RY followed by a CNOT back onto qubit i.
        """
        circuit = QuantumCircuit(num_qubits, name="w_state", context=context)
        library = circuit.context.library
        circuit.x(0)
        for i in range(num_qubits - 1):
            theta = 2.0 * math.acos(math.sqrt(1.0 / (num_qubits - i)))
            circuit.controlled(library.rotation("y", theta), i, i + 1)
            circuit.cx(i + 1, i)
        return circuit

    @staticmethod
    def qft(num_qubits: int, context: Optional[SimulationContext] = None) -> QuantumCircuit:
        """
        Quantum Fourier transform, |x⟩ -> Σ_y e^{2πi·xy/N} |y⟩ / √N.

        Qubit 0 is the most significant bit of both x and y.
        """
        circuit = QuantumCircuit(num_qubits, name="qft", context=context)
        for i in range(num_qubits):
            circuit.h(i)
            for j in range(i + 1, num_qubits):
                circuit.cp(math.pi / 2 ** (j - i), j, i)
        for i in range(num_qubits // 2):
            circuit.swap(i, num_qubits - 1 - i)
        return circuit

    @staticmethod
    def iqft(num_qubits: int, context: Optional[SimulationContext] = None) -> QuantumCircuit:
        circuit = CircuitFactory.qft(num_qubits, context=context).inverse()
        circuit.name = "iqft"
        return circuit

    @staticmethod
    def phase_estimation(
        precision: int,
        unitary: Optional[Gate] = None,
        context: Optional[SimulationContext] = None,
    ) -> QuantumCircuit:
        """
        Phase estimation with ``precision`` counting qubits and one target.

        Without ``unitary`` only the counting register is put into
        superposition, leaving a template to extend. With a single-qubit
        ``unitary``, controlled powers U^(2^(precision-1-k)) are applied from
        counting qubit k to the target (the last qubit) and the inverse QFT
        is run on the counting register. The target starts in |0⟩; pass an
        initial state to ``run`` to load an eigenvector.
        """
        if precision < 1:
            raise ValueError(f"precision must be >= 1, got {precision}")
        circuit = QuantumCircuit(precision + 1, name="qpe", context=context)
        for i in range(precision):
            circuit.h(i)

        if unitary is None:
            return circuit
        if unitary.num_qubits != 1:
            raise ValueError(
                f"phase_estimation expects a single-qubit unitary, got "
                f"{unitary.num_qubits} qubits."
            )

        target = precision
        for k in range(precision):
            power = 2 ** (precision - 1 - k)
            powered = Gate(
                f"{unitary.name}^{power}",
                torch.linalg.matrix_power(unitary.matrix, power),
                1,
            )
            circuit.controlled(powered, k, target)

        # Counting qubits are 0..precision-1 in both circuits.
        for op in CircuitFactory.iqft(precision, context=circuit.context).operations:
            circuit.apply(op.gate, *op.targets)
        return circuit

    @staticmethod
    def vqe_ansatz(
        num_qubits: int,
        depth: int,
        generator: Optional[torch.Generator] = None,
        context: Optional[SimulationContext] = None,
    ) -> QuantumCircuit:
        """Hardware-efficient ansatz: random RY/RZ layers and a CNOT chain per layer."""
        circuit = QuantumCircuit(num_qubits, name="vqe_ansatz", context=context)
        for _ in range(depth):
            for i in range(num_qubits):
                circuit.ry(draw_uniform(generator) * math.pi, i)
                circuit.rz(draw_uniform(generator) * math.pi, i)
            for i in range(num_qubits - 1):
                circuit.cx(i, i + 1)
        return circuit

    @staticmethod
    def random(
        num_qubits: int,
        depth: int,
        generator: Optional[torch.Generator] = None,
        context: Optional[SimulationContext] = None,
    ) -> QuantumCircuit:
        """
        Random circuit: per layer, one gate from {H, X, Y, Z, T, S} on every
        qubit, then a CNOT on each neighbouring pair with probability 1/2.
        """
        circuit = QuantumCircuit(num_qubits, name="random", context=context)
        library = circuit.context.library
        for _ in range(depth):
            for i in range(num_qubits):
                pick = min(int(draw_uniform(generator) * len(_RANDOM_GATES)), len(_RANDOM_GATES) - 1)
                circuit.apply(library.get(_RANDOM_GATES[pick]), i)
            for i in range(num_qubits - 1):
                if draw_uniform(generator) > 0.5:
                    circuit.cx(i, i + 1)
        return circuit


__all__ = ["CircuitFactory"]
