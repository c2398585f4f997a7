"""Tests for circuit analysis utilities."""

from __future__ import annotations

from qubitsim.circuit import QuantumCircuit
from qubitsim.gates import library as lib
from qubitsim.transpile import GateCountSummary, summarize_gate_counts


class TestSummarizeGateCounts:
    """Tests for summarize_gate_counts function."""

    def test_simple_gate_counts(self):
        """Test gate counting for a simple circuit."""
        circuit = QuantumCircuit(2).h(0).h(1).t(0).cx(0, 1).x(1)

        summary = summarize_gate_counts(circuit)

        assert isinstance(summary, GateCountSummary)
        assert summary.total_gates == 5
        assert summary.counts["H"] == 2
        assert summary.counts["T"] == 1
        assert summary.counts["CNOT"] == 1
        assert summary.counts["X"] == 1
        assert summary.t_count == 1
        # H, H, CNOT and X are Clifford.
        assert summary.clifford_count == 4

    def test_empty_circuit(self):
        """Test gate counting for empty circuit."""
        summary = summarize_gate_counts(QuantumCircuit(1))

        assert summary.total_gates == 0
        assert len(summary.counts) == 0
        assert summary.t_count == 0
        assert summary.clifford_count == 0

    def test_t_count_includes_adjoint(self):
        """T and T† both contribute to the T-count."""
        circuit = QuantumCircuit(1).t(0).tdg(0).t(0)

        summary = summarize_gate_counts(circuit)

        assert summary.t_count == 3
        assert summary.clifford_count == 0

    def test_classified_by_kind_not_name(self):
        """A controlled X built by hand counts as a Clifford CNOT."""
        circuit = QuantumCircuit(2).controlled(lib.pauli_x(), 0, 1).s(0).sdg(1)

        summary = summarize_gate_counts(circuit)

        assert summary.counts == {"CX": 1, "S": 1, "S†": 1}
        assert summary.clifford_count == 3

    def test_non_clifford_gates(self):
        """Rotations and multi-controlled gates are neither T nor Clifford."""
        circuit = QuantumCircuit(3).rx(0.3, 0).ccx(0, 1, 2).measure_all()

        summary = summarize_gate_counts(circuit)

        assert summary.total_gates == 2
        assert summary.t_count == 0
        assert summary.clifford_count == 0
