"""Peephole optimization of circuits."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from ..gates.base import GateKind, are_inverses
from ..logging import get_logger
from .core import CircuitOperation, QuantumCircuit

logger = get_logger(__name__)


@dataclass(frozen=True)
class OptimizationOptions:
    """Which passes ``CircuitOptimizer.optimize`` runs."""

    remove_identities: bool = True
    cancel_inverses: bool = True


def remove_identities(ops: List[CircuitOperation]) -> List[CircuitOperation]:
    """Drop every operation whose gate is the identity."""
    return [op for op in ops if op.gate.kind is not GateKind.IDENTITY]


def cancel_inverses(ops: List[CircuitOperation]) -> List[CircuitOperation]:
    """
    One pass of adjacent-inverse cancellation.

    For each surviving operation i, later operations that share no qubit with
    it are skipped. The first later operation that shares any qubit either
    cancels with i (same targets in the same order, and a known inverse
    pair by gate kind) or blocks further scanning for i.

    Inverses are recognised by ``GateKind`` only, so e.g. Rz(θ) followed by
    Rz(-θ) is left alone.
    """
    removed = [False] * len(ops)
    for i, op in enumerate(ops):
        if removed[i]:
            continue
        qubits = set(op.targets)
        for j in range(i + 1, len(ops)):
            if removed[j]:
                continue
            other = ops[j]
            if qubits.isdisjoint(other.targets):
                continue
            if other.targets == op.targets and are_inverses(op.gate.kind, other.gate.kind):
                removed[i] = removed[j] = True
            break
    return [op for op, gone in zip(ops, removed) if not gone]


class CircuitOptimizer:
    """
    Rewrites circuits into shorter equivalents.

    Identity removal runs first; inverse cancellation is then repeated until
    a pass removes nothing, so optimizing an optimized circuit is a no-op.
    """

    def __init__(self, options: Optional[OptimizationOptions] = None) -> None:
        self.options = options if options is not None else OptimizationOptions()

    def optimize(
        self,
        circuit: QuantumCircuit,
        options: Optional[OptimizationOptions] = None,
    ) -> QuantumCircuit:
        """Return an optimized copy of ``circuit``; the input is not modified."""
        opts = options if options is not None else self.options
        ops = list(circuit.operations)
        before = len(ops)

        if opts.remove_identities:
            ops = remove_identities(ops)

        if opts.cancel_inverses:
            while True:
                reduced = cancel_inverses(ops)
                if len(reduced) == len(ops):
                    break
                ops = reduced

        optimized = QuantumCircuit(
            circuit.num_qubits,
            name=circuit.name,
            context=circuit.context,
            num_classical_bits=circuit.num_classical_bits,
        )
        for op in ops:
            optimized.apply(op.gate, *op.targets, label=op.label)
        for m in circuit.measurements:
            optimized.measure(m.qubit, m.classical_bit, m.basis)

        logger.debug(
            "optimized %r: %d -> %d operations", circuit.name, before, len(ops)
        )
        return optimized


__all__ = [
    "OptimizationOptions",
    "CircuitOptimizer",
    "remove_identities",
    "cancel_inverses",
]
