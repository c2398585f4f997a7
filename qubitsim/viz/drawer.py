"""ASCII/text circuit drawer for QuantumCircuit visualization.

This module provides deterministic, dependency-free circuit visualization
using ASCII and box-drawing characters.
"""

from __future__ import annotations

import math
import sys
from typing import IO, Dict, List, Optional, Tuple

from ..circuit import CircuitOperation, MeasurementBasis, MeasurementOp, QuantumCircuit
from ..gates.base import ControlledGate, Gate, GateKind

_ASCII_REPLACEMENTS = (("π", "pi"), ("†", "dg"), ("√", "sqrt"), ("●", "*"), ("⊕", "X"), ("×", "x"))

# kind -> (number of leading control qubits, symbol drawn on each target)
_CONTROLLED_SYMBOLS: Dict[GateKind, Tuple[int, Optional[str]]] = {
    GateKind.CNOT: (1, "⊕"),
    GateKind.TOFFOLI: (2, "⊕"),
    GateKind.CZ: (1, "[Z]"),
    GateKind.SWAP: (0, "×"),
    GateKind.FREDKIN: (1, "×"),
    GateKind.CP: (1, None),
    GateKind.CRX: (1, None),
}


def _format_angle(theta: float, atol: float = 1e-8) -> str:
    """
    Format an angle in radians as a readable string.

    Attempts to represent exact rational multiples of π in a compact form
    (e.g., π/2, π/4, 3π/4). Falls back to decimal representation otherwise.

    Parameters
    ----------
    theta:
        Angle in radians.
    atol:
        Absolute tolerance for checking rational multiples.

    Returns
    -------
    str
        Formatted angle string.
    """
    pi = math.pi

    k = round(theta / (pi / 4.0))
    if math.isclose(theta, k * (pi / 4.0), abs_tol=atol):
        named = {0: "0", 1: "π/4", 2: "π/2", 3: "3π/4", 4: "π"}
        if abs(k) in named:
            return named[k] if k >= 0 else f"-{named[-k]}"
        if k % 4 == 0:
            return f"{k // 4}π"
        if k % 2 == 0:
            return f"{k // 2}π/2"
        return f"{k}π/4"

    # Powers of two below π/4, as produced by the QFT.
    for denom in (8, 16, 32, 64):
        k = round(theta / (pi / denom))
        if k != 0 and math.isclose(theta, k * (pi / denom), abs_tol=atol):
            return f"π/{denom}" if k == 1 else f"{k}π/{denom}"

    return f"{theta:.3f}"


def _gate_label(gate: Gate) -> str:
    """
    Display label: base name with π-formatted parameters, else the name.

    Adjoints of parametric gates carry negated angles, so no † is shown.
    """
    if isinstance(gate, ControlledGate):
        return _gate_label(gate.base)
    if gate.params:
        base = gate.name.split("(", 1)[0]
        if gate.kind in (GateKind.CP, GateKind.CRX):
            base = base[1:]
        return f"{base}({','.join(_format_angle(p) for p in gate.params)})"
    if len(gate.name) <= 5:
        return gate.name
    return gate.name[:3]


def _compute_layers(circuit: QuantumCircuit) -> List[List[CircuitOperation]]:
    """
    Group operations into layers by their recorded depth.

    Returns
    -------
    List[List[CircuitOperation]]
        ``layers[d - 1]`` holds every operation of depth ``d``, in circuit order.
    """
    layers: List[List[CircuitOperation]] = [[] for _ in range(circuit.depth())]
    for op in circuit.operations:
        layers[op.depth - 1].append(op)
    return layers


def _render_gate_column(ops: List[CircuitOperation], n_qubits: int) -> List[str]:
    """One layer of gates as one (unpadded) cell per qubit wire."""
    cells = [""] * n_qubits
    for op in ops:
        gate = op.gate
        if isinstance(gate, ControlledGate):
            num_controls, symbol = gate.num_controls, None
        else:
            num_controls, symbol = _CONTROLLED_SYMBOLS.get(gate.kind, (0, None))
        label = symbol if symbol is not None else f"[{_gate_label(gate)}]"
        for i, q in enumerate(op.targets):
            cells[q] = "●" if i < num_controls else label
    return cells


def _render_measurement_column(m: MeasurementOp, n_qubits: int) -> List[str]:
    cells = [""] * n_qubits
    tag = "" if m.basis is MeasurementBasis.Z else m.basis.value.lower()
    cells[m.qubit] = f"[M{tag}]"
    return cells


def _to_ascii(cell: str) -> str:
    for src, dst in _ASCII_REPLACEMENTS:
        cell = cell.replace(src, dst)
    return cell


def _pad(cells: List[str], wire: str, use_ascii: bool) -> List[str]:
    if use_ascii:
        cells = [_to_ascii(c) for c in cells]
    width = max(3, max(len(c) for c in cells) + 2)
    padded = []
    for c in cells:
        if not c:
            padded.append(wire * width)
            continue
        left = (width - len(c)) // 2
        padded.append(wire * left + c + wire * (width - len(c) - left))
    return padded


def to_text(
    circuit: QuantumCircuit,
    max_width: int = 80,
    use_ascii: bool = False,
) -> str:
    """
    Convert a QuantumCircuit to a multi-line text diagram.

    Gates are drawn layer by layer; controls are shown as ● and targets of
    X-type controlled gates as ⊕. Measurements follow the gates, one column
    each, as [M] boxes ([Mx]/[My] for the other bases).

    Parameters
    ----------
    circuit:
        Circuit to visualize.
    max_width:
        Maximum width in characters. If circuit is wider, pagination is used.
    use_ascii:
        If True, use only ASCII characters (no box-drawing characters).

    Returns
    -------
    str
        Multi-line string representation of the circuit.
    """
    n_qubits = circuit.num_qubits
    wire = "-" if use_ascii else "─"

    columns = [_render_gate_column(layer, n_qubits) for layer in _compute_layers(circuit)]
    columns.extend(_render_measurement_column(m, n_qubits) for m in circuit.measurements)
    columns = [_pad(col, wire, use_ascii) for col in columns]

    prefixes = [f"q{q}: " for q in range(n_qubits)]
    if not columns:
        return "\n".join(prefixes)

    budget = max(1, max_width - max(len(p) for p in prefixes))
    pages: List[List[List[str]]] = [[]]
    used = 0
    for col in columns:
        width = len(col[0])
        if pages[-1] and used + width > budget:
            pages.append([])
            used = 0
        pages[-1].append(col)
        used += width

    all_lines: List[str] = []
    for index, page in enumerate(pages):
        for q in range(n_qubits):
            all_lines.append(prefixes[q] + "".join(col[q] for col in page))
        if index < len(pages) - 1:
            all_lines.append("-- continuing --")

    return "\n".join(all_lines)


def print_circuit(
    circuit: QuantumCircuit,
    file: Optional[IO[str]] = None,
    max_width: int = 80,
    use_ascii: bool = False,
) -> None:
    """
    Print a circuit diagram to stdout or a file.

    Parameters
    ----------
    circuit:
        Circuit to visualize.
    file:
        File-like object to write to. If None, writes to sys.stdout.
    max_width:
        Maximum width in characters.
    use_ascii:
        If True, use only ASCII characters.
    """
    if file is None:
        file = sys.stdout
    text = to_text(circuit, max_width=max_width, use_ascii=use_ascii)
    print(text, file=file)


__all__ = ["to_text", "print_circuit"]
