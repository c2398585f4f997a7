"""Tests for SimulationContext configuration."""

from __future__ import annotations

import pytest

from qubitsim.circuit import QuantumCircuit
from qubitsim.core.context import SimulationContext, default_context
from qubitsim.gates import Gate, GateLibrary
from qubitsim.gates import standard as stdgates


def test_defaults(monkeypatch):
    monkeypatch.delenv("QUBITSIM_MAX_QUBITS", raising=False)
    ctx = default_context()
    assert ctx.min_qubits == 1
    assert ctx.max_qubits == 20
    assert ctx.tolerance == 1e-10
    assert ctx.generator is None
    assert ctx.audit is None
    assert ctx.library.has("H")
    assert ctx.device.name == "sv_cpu"


def test_fresh_library_per_context():
    a = default_context()
    b = default_context()
    assert a.library is not b.library


def test_max_qubits_from_environment(monkeypatch):
    monkeypatch.setenv("QUBITSIM_MAX_QUBITS", "4")
    ctx = SimulationContext()
    assert ctx.max_qubits == 4
    with pytest.raises(ValueError, match="between 1 and 4"):
        QuantumCircuit(5, context=ctx)


@pytest.mark.parametrize("raw", ["lots", "0"])
def test_bad_environment_value(monkeypatch, raw):
    monkeypatch.setenv("QUBITSIM_MAX_QUBITS", raw)
    with pytest.raises(ValueError, match="QUBITSIM_MAX_QUBITS"):
        SimulationContext()


def test_validation():
    with pytest.raises(ValueError, match="min_qubits"):
        SimulationContext(min_qubits=0)
    with pytest.raises(ValueError, match="max_qubits"):
        SimulationContext(min_qubits=3, max_qubits=2)
    with pytest.raises(ValueError, match="tolerance"):
        SimulationContext(tolerance=0.0)


def test_check_num_qubits():
    ctx = SimulationContext(min_qubits=2, max_qubits=3)
    assert ctx.check_num_qubits(2) == 2
    with pytest.raises(ValueError, match="between 2 and 3, got 1"):
        ctx.check_num_qubits(1)
    with pytest.raises(TypeError):
        ctx.check_num_qubits(2.0)
    with pytest.raises(TypeError):
        ctx.check_num_qubits(True)


def test_circuit_uses_context_library():
    library = GateLibrary.standard()
    # Rebind "H" to X; builder methods look gates up by name.
    library.add("H", Gate("H", stdgates.X()))
    circ = QuantumCircuit(1, context=SimulationContext(library=library)).h(0)
    assert circ.get_statevector().probability(1) == pytest.approx(1.0)
