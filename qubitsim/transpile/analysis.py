"""Circuit analysis utilities: gate counts by kind."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Mapping

from ..circuit import QuantumCircuit
from ..gates.base import GateKind

_CLIFFORD_KINDS = frozenset(
    {
        GateKind.IDENTITY,
        GateKind.X,
        GateKind.Y,
        GateKind.Z,
        GateKind.H,
        GateKind.S,
        GateKind.SDG,
        GateKind.CNOT,
        GateKind.CZ,
        GateKind.SWAP,
        GateKind.ISWAP,
    }
)


@dataclass(frozen=True)
class GateCountSummary:
    """
    Summary of gate counts by type, with T-count and Clifford count.

    Attributes
    ----------
    counts:
        Mapping from gate name to its occurrence count in the circuit.
    t_count:
        Number of T and T† gates.
    clifford_count:
        Number of Clifford gates (I, H, S, S†, Paulis, CNOT, CZ, SWAP, iSWAP).
    total_gates:
        Total number of gates in the circuit.
    """

    counts: Mapping[str, int]
    t_count: int
    clifford_count: int
    total_gates: int


def summarize_gate_counts(
    circuit: QuantumCircuit,
) -> GateCountSummary:
    """
    Count gates by name and report T-count and Clifford-count.

    Gates are classified by their ``GateKind``, so aliases and custom names
    of the same standard gate are counted alike. Measurements are not gates
    and are ignored.

    Parameters
    ----------
    circuit:
        Circuit to analyze.

    Returns
    -------
    GateCountSummary
        Summary of gate counts, T-count, and Clifford-count.
    """
    counts: Counter = Counter()
    t_count = 0
    clifford_count = 0
    for op in circuit.operations:
        counts[op.gate.name] += 1
        kind = op.gate.kind
        if kind in (GateKind.T, GateKind.TDG):
            t_count += 1
        elif kind in _CLIFFORD_KINDS:
            clifford_count += 1

    return GateCountSummary(
        counts=dict(counts),
        t_count=t_count,
        clifford_count=clifford_count,
        total_gates=sum(counts.values()),
    )


__all__ = [
    "GateCountSummary",
    "summarize_gate_counts",
]
