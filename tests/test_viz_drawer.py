"""Tests for circuit drawer visualization."""

import io
import math

from qubitsim.circuit import CircuitFactory, QuantumCircuit
from qubitsim.gates import library as lib
from qubitsim.viz.drawer import _format_angle, print_circuit, to_text


def test_format_angle():
    """Test angle formatting for common values."""
    assert _format_angle(0) == "0"
    assert _format_angle(math.pi / 4) == "π/4"
    assert _format_angle(math.pi / 2) == "π/2"
    assert _format_angle(3 * math.pi / 4) == "3π/4"
    assert _format_angle(math.pi) == "π"
    assert _format_angle(-math.pi / 2) == "-π/2"
    assert _format_angle(-math.pi) == "-π"
    assert _format_angle(2 * math.pi) == "2π"
    assert _format_angle(math.pi / 8) == "π/8"
    assert _format_angle(3 * math.pi / 16) == "3π/16"
    assert _format_angle(0.123) == "0.123"


def test_empty_circuit():
    """An empty circuit draws just the wire labels."""
    assert to_text(QuantumCircuit(3)) == "q0: \nq1: \nq2: "


def test_bell_circuit_layout():
    """H and CNOT land in separate columns with the control drawn as ●."""
    circ = QuantumCircuit(2).h(0).cx(0, 1)
    assert to_text(circ).split("\n") == [
        "q0: ─[H]──●─",
        "q1: ──────⊕─",
    ]


def test_ascii_mode():
    circ = QuantumCircuit(2).h(0).cx(0, 1).measure(1)
    text = to_text(circ, use_ascii=True)
    assert text.split("\n") == [
        "q0: -[H]--*------",
        "q1: ------X--[M]-",
    ]
    assert all(ord(ch) < 128 for ch in text)


def test_parallel_gates_share_column():
    circ = QuantumCircuit(2).h(0).x(1)
    lines = to_text(circ).split("\n")
    assert lines == ["q0: ─[H]─", "q1: ─[X]─"]


def test_parametric_labels():
    circ = QuantumCircuit(2).rx(math.pi / 2, 0).cp(math.pi / 4, 0, 1)
    text = to_text(circ)
    assert "[Rx(π/2)]" in text
    assert "[P(π/4)]" in text
    assert "●" in text
    assert "[Rx(pi/2)]" in to_text(circ, use_ascii=True)


def test_adjoint_and_long_names():
    composite = lib.hadamard().tensor(lib.pauli_x()).compose(lib.pauli_x().tensor(lib.hadamard()))
    circ = QuantumCircuit(4).sdg(0).apply(lib.sqrt_swap(), 1, 2)
    circ.apply(composite, 2, 3)
    text = to_text(circ)
    assert "[S†]" in text
    assert "[√SWAP]" in text
    # Names longer than five characters are cut to three.
    assert "[H⊗X]" in text
    ascii_text = to_text(circ, use_ascii=True)
    assert "[Sdg]" in ascii_text
    assert "[sqrtSWAP]" in ascii_text


def test_swap_and_toffoli_symbols():
    circ = QuantumCircuit(3).swap(0, 2).ccx(0, 1, 2).cswap(2, 0, 1)
    lines = to_text(circ).split("\n")
    assert lines[0].count("×") == 2
    assert lines[2].count("×") == 1
    assert lines[1].count("●") == 1
    assert "⊕" in lines[2]


def test_controlled_gate_shows_base_label():
    circ = QuantumCircuit(2).controlled(lib.hadamard(), 1, 0)
    lines = to_text(circ).split("\n")
    assert "[H]" in lines[0]
    assert "●" in lines[1]


def test_measurement_bases():
    circ = QuantumCircuit(2).measure(0, basis="X").measure(1, basis="Y")
    lines = to_text(circ).split("\n")
    assert "[Mx]" in lines[0]
    assert "[My]" in lines[1]


def test_columns_aligned():
    circ = CircuitFactory.qft(3)
    for use_ascii in (False, True):
        lines = to_text(circ, max_width=1000, use_ascii=use_ascii).split("\n")
        assert len({len(line) for line in lines}) == 1


def test_pagination():
    circ = QuantumCircuit(1)
    for _ in range(30):
        circ.h(0)
    text = to_text(circ, max_width=30)
    assert "-- continuing --" in text
    for line in text.split("\n"):
        assert len(line) <= 30


def test_circuit_draw_method():
    circ = QuantumCircuit(2).h(0).cx(0, 1)
    assert circ.draw() == to_text(circ)
    assert circ.draw(use_ascii=True) == to_text(circ, use_ascii=True)


def test_print_circuit():
    circ = QuantumCircuit(1).x(0)
    buffer = io.StringIO()
    print_circuit(circ, file=buffer)
    assert buffer.getvalue() == to_text(circ) + "\n"
