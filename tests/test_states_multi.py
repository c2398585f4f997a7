"""Tests for dense multi-qubit states."""

from __future__ import annotations

import math

import numpy as np
import pytest
import torch

from qubitsim.states import MultiQubitState, QubitState

_S = 1.0 / math.sqrt(2.0)


def _pairwise_reduced_density_matrix(amps: torch.Tensor, kept: list, n: int) -> torch.Tensor:
    """Partial trace as an explicit sum over amplitude pairs with equal traced bits."""
    traced = [q for q in range(n) if q not in kept]
    size = 2 ** len(kept)
    rho = torch.zeros(size, size, dtype=torch.complex128)

    def bits(i, qubits):
        value = 0
        for q in qubits:
            value = (value << 1) | ((i >> (n - 1 - q)) & 1)
        return value

    for i in range(2**n):
        for j in range(2**n):
            if bits(i, traced) == bits(j, traced):
                rho[bits(i, kept), bits(j, kept)] += amps[i] * amps[j].conj()
    return rho


class TestConstruction:
    def test_rejects_non_power_of_two(self) -> None:
        with pytest.raises(ValueError, match="power of 2"):
            MultiQubitState([1.0, 0.0, 0.0])
        with pytest.raises(ValueError, match="power of 2"):
            MultiQubitState([])

    def test_normalizes(self) -> None:
        state = MultiQubitState([1.0, 1.0, 1.0, 1.0])
        assert state.num_qubits == 2
        assert state.is_normalized()
        assert state.amplitude(3) == pytest.approx(0.5)

    def test_accepts_numpy_arrays(self) -> None:
        state = MultiQubitState(np.array([[1.0, 0.0], [0.0, 1.0j]]))
        assert state.num_qubits == 2
        assert state.amplitude(3) == pytest.approx(1j / math.sqrt(2.0))

    def test_amplitude_bounds(self) -> None:
        with pytest.raises(ValueError):
            MultiQubitState.zeros(2).amplitude(4)

    def test_tensor_product_order(self) -> None:
        """The first state becomes qubit 0, the most significant bit."""
        state = MultiQubitState.tensor_product(QubitState.one(), QubitState.zero())
        assert state.probability(2) == pytest.approx(1.0)
        assert state.bitstring(2) == "10"

    def test_tensor_product_requires_states(self) -> None:
        with pytest.raises(ValueError):
            MultiQubitState.tensor_product()

    def test_presets(self) -> None:
        assert torch.allclose(
            MultiQubitState.bell_phi_plus().probabilities(),
            torch.tensor([0.5, 0.0, 0.0, 0.5], dtype=torch.float64),
        )
        assert MultiQubitState.bell_psi_minus().amplitude(2) == pytest.approx(-_S)
        ghz = MultiQubitState.ghz(3)
        assert ghz.probability(0) == pytest.approx(0.5)
        assert ghz.probability(7) == pytest.approx(0.5)
        w = MultiQubitState.w(3)
        for index in (1, 2, 4):
            assert w.probability(index) == pytest.approx(1.0 / 3.0)

    def test_from_bitstring(self) -> None:
        assert MultiQubitState.from_bitstring("110").probability(6) == pytest.approx(1.0)
        with pytest.raises(ValueError):
            MultiQubitState.from_bitstring("12")


class TestMeasurement:
    def test_measure_basis_state_is_deterministic(self) -> None:
        result = MultiQubitState.from_bitstring("101").measure()
        assert result.outcome == 5
        assert result.bitstring == "101"
        assert result.probability == pytest.approx(1.0)

    def test_measure_bell_outcomes(self, torch_rng: torch.Generator) -> None:
        bell = MultiQubitState.bell_phi_plus()
        outcomes = [bell.measure(torch_rng).outcome for _ in range(400)]
        assert set(outcomes) <= {0, 3}
        assert 0.4 < outcomes.count(0) / 400 < 0.6

    def test_partial_measurement_normalizes(self, torch_rng: torch.Generator) -> None:
        state = MultiQubitState([0.1, 0.3j, -0.5, 0.2, 0.4, 0.1, 0.6j, 0.25])
        for qubit in range(3):
            result = state.measure_qubit(qubit, torch_rng)
            assert result.new_state.total_probability() == pytest.approx(1.0, abs=1e-10)
            p0 = sum(
                state.probability(i) for i in range(8) if (i >> (2 - qubit)) & 1 == 0
            )
            expected = p0 if result.outcome == 0 else 1.0 - p0
            assert result.probability == pytest.approx(expected)

    def test_partial_measurement_collapses_partner(self, torch_rng: torch.Generator) -> None:
        bell = MultiQubitState.bell_phi_plus()
        result = bell.measure_qubit(0, torch_rng)
        expected = "11" if result.outcome == 1 else "00"
        assert result.new_state.equals(MultiQubitState.from_bitstring(expected))

    def test_partial_measurement_never_picks_zero_probability_outcome(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """A rounded-down P(0) with P(1) == 0 must still yield outcome 0."""
        state = MultiQubitState.zeros(3)
        monkeypatch.setattr(
            "qubitsim.backend.statevector.qubit_probabilities",
            lambda *args: (0.9999999999999998, 0.0),
        )
        monkeypatch.setattr(
            "qubitsim.backend.statevector.draw_uniform",
            lambda generator=None: math.nextafter(1.0, 0.0),
        )
        result = state.measure_qubit(0)
        assert result.outcome == 0
        assert result.probability == pytest.approx(1.0)

    def test_partial_measurement_of_definite_qubit(self, rng: np.random.Generator) -> None:
        rest = rng.normal(size=4) + 1j * rng.normal(size=4)
        state = MultiQubitState(np.concatenate([rest, np.zeros(4)]))
        generator = torch.Generator().manual_seed(5)
        outcomes = {state.measure_qubit(0, generator).outcome for _ in range(200)}
        assert outcomes == {0}

    def test_partial_measurement_out_of_range(self) -> None:
        with pytest.raises(ValueError, match="out of bounds"):
            MultiQubitState.zeros(2).measure_qubit(2)


class TestComparisonAndEntanglement:
    def test_fidelity_mismatch_raises(self) -> None:
        with pytest.raises(ValueError, match="same number of qubits"):
            MultiQubitState.zeros(2).fidelity(MultiQubitState.zeros(3))

    def test_equals_ignores_global_phase(self) -> None:
        a = MultiQubitState([_S, _S])
        b = MultiQubitState([-_S, -_S])
        assert a.equals(b)
        assert not a.equals(MultiQubitState([_S, -_S]))

    def test_reduced_density_matrix_of_bell(self) -> None:
        rho = MultiQubitState.bell_phi_plus().reduced_density_matrix([1])
        assert torch.allclose(rho, 0.5 * torch.eye(2, dtype=torch.complex128), atol=1e-12)

    def test_reduced_density_matrix_qubit_order(self) -> None:
        state = MultiQubitState.from_bitstring("10")
        rho = state.reduced_density_matrix([1, 0])
        # Kept order (q1, q0) reads the state as "01".
        assert rho[1, 1].real == pytest.approx(1.0)

    def test_entropy_of_product_and_bell(self) -> None:
        product = MultiQubitState.tensor_product(QubitState.plus(), QubitState.one())
        assert product.entanglement_entropy([0]) == pytest.approx(0.0, abs=1e-9)
        assert MultiQubitState.bell_phi_plus().entanglement_entropy([0]) == pytest.approx(1.0)

    def test_entropy_of_larger_subsystem(self) -> None:
        """Two kept qubits of a 4-qubit GHZ state carry one bit of entropy."""
        ghz = MultiQubitState.ghz(4)
        assert ghz.entanglement_entropy([0, 1]) == pytest.approx(1.0)
        bells = MultiQubitState(
            torch.kron(
                MultiQubitState.bell_phi_plus().amplitudes,
                MultiQubitState.bell_phi_plus().amplitudes,
            )
        )
        # Qubits 0 and 2 come from different Bell pairs.
        assert bells.entanglement_entropy([0, 2]) == pytest.approx(2.0)

    def test_is_separable(self) -> None:
        assert MultiQubitState.zeros(3).is_separable()
        assert not MultiQubitState.ghz(3).is_separable()

    @pytest.mark.parametrize("kept", [[0], [2], [3, 1], [0, 2, 3], [3, 2, 1, 0]])
    def test_reduced_density_matrix_matches_pairwise_trace(
        self, rng: np.random.Generator, kept: list
    ) -> None:
        state = MultiQubitState(rng.normal(size=16) + 1j * rng.normal(size=16))
        expected = _pairwise_reduced_density_matrix(state.amplitudes, kept, 4)
        assert torch.allclose(state.reduced_density_matrix(kept), expected, atol=1e-12)

    def test_entropy_on_wide_register(self) -> None:
        n = 16
        uniform = MultiQubitState(torch.full((2**n,), 2.0 ** (-n / 2), dtype=torch.complex128))
        assert uniform.entanglement_entropy([0]) == pytest.approx(0.0, abs=1e-9)
        assert uniform.is_separable()

        ghz = MultiQubitState.ghz(n)
        rho = ghz.reduced_density_matrix([5])
        assert torch.allclose(rho, 0.5 * torch.eye(2, dtype=torch.complex128), atol=1e-12)
        assert ghz.entanglement_entropy([5, 9]) == pytest.approx(1.0)


class TestMisc:
    def test_clone_is_independent_value(self) -> None:
        state = MultiQubitState.bell_phi_plus()
        clone = state.clone()
        assert clone is not state
        assert clone.equals(state)
        assert clone.get_hash() == state.get_hash()

    def test_str_lists_nonzero_terms(self) -> None:
        text = str(MultiQubitState.bell_phi_plus())
        assert text == "(0.7071+0.0000j)|00⟩ + (0.7071+0.0000j)|11⟩"
