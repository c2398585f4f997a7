"""Tests for the statevector backend kernel."""

from __future__ import annotations

import math

import numpy as np
import pytest
import torch

from qubitsim.backend.statevector import (
    apply_matrix,
    basis_state,
    check_targets,
    draw_uniform,
    expand_operator,
    infer_num_qubits,
    measure_probs,
    project_qubit,
    qubit_probabilities,
    sample_index,
    zero_state,
)
from qubitsim.gates import standard as stdgates


def _random_state(n_qubits: int, rng: np.random.Generator) -> torch.Tensor:
    dim = 2**n_qubits
    vec = rng.normal(size=dim) + 1j * rng.normal(size=dim)
    vec = vec / np.linalg.norm(vec)
    return torch.tensor(vec, dtype=torch.complex128)


def _random_unitary(k: int, rng: np.random.Generator) -> torch.Tensor:
    dim = 2**k
    z = rng.normal(size=(dim, dim)) + 1j * rng.normal(size=(dim, dim))
    q, r = np.linalg.qr(z)
    q = q * (np.diag(r) / np.abs(np.diag(r)))
    return torch.tensor(q, dtype=torch.complex128)


class TestStatePreparation:
    def test_zero_state(self) -> None:
        state = zero_state(3)
        assert state.shape == (8,)
        assert state.dtype == torch.complex128
        assert state[0] == 1.0
        assert float(state.abs().sum()) == pytest.approx(1.0)

    def test_basis_state_bounds(self) -> None:
        assert basis_state(2, 3)[3] == 1.0
        with pytest.raises(ValueError, match="out of range"):
            basis_state(2, 4)

    def test_infer_num_qubits(self) -> None:
        assert infer_num_qubits(1) == 0
        assert infer_num_qubits(8) == 3
        with pytest.raises(ValueError, match="power of 2"):
            infer_num_qubits(6)


class TestApplyMatrix:
    def test_x_on_msb_qubit(self) -> None:
        """Qubit 0 is the most significant bit: X on q0 maps |00> to |10>."""
        out = apply_matrix(zero_state(2), stdgates.X(), [0])
        assert torch.allclose(out, basis_state(2, 2))

    def test_x_on_lsb_qubit(self) -> None:
        out = apply_matrix(zero_state(2), stdgates.X(), [1])
        assert torch.allclose(out, basis_state(2, 1))

    def test_cnot_target_order(self) -> None:
        """targets[0] is the control of CNOT."""
        state = basis_state(2, 2)  # |10>
        assert torch.allclose(apply_matrix(state, stdgates.CNOT(), [0, 1]), basis_state(2, 3))
        # Reversed: control is qubit 1, which is 0, so nothing happens.
        assert torch.allclose(apply_matrix(state, stdgates.CNOT(), [1, 0]), state)

    def test_input_untouched(self) -> None:
        state = zero_state(1)
        before = state.clone()
        apply_matrix(state, stdgates.H(), [0])
        assert torch.equal(state, before)

    def test_probability_conserved_for_random_unitaries(self, rng: np.random.Generator) -> None:
        """Total probability is preserved by every unitary on every target set."""
        n = 4
        for k, targets in [(1, [2]), (2, [3, 0]), (3, [1, 3, 2])]:
            state = _random_state(n, rng)
            out = apply_matrix(state, _random_unitary(k, rng), targets)
            assert float((out.abs() ** 2).sum()) == pytest.approx(1.0, abs=1e-10)

    def test_matches_expanded_operator(self, rng: np.random.Generator) -> None:
        """The gather/scatter kernel agrees with the dense embedding."""
        n = 4
        for targets in ([0], [3], [2, 0], [1, 3], [3, 0, 2]):
            u = _random_unitary(len(targets), rng)
            state = _random_state(n, rng)
            expected = expand_operator(u, targets, n) @ state
            assert torch.allclose(apply_matrix(state, u, targets), expected, atol=1e-12)

    def test_validation(self) -> None:
        state = zero_state(2)
        with pytest.raises(ValueError, match="out of range"):
            apply_matrix(state, stdgates.X(), [2])
        with pytest.raises(ValueError, match="distinct"):
            apply_matrix(state, stdgates.CNOT(), [1, 1])
        with pytest.raises(ValueError, match="shape"):
            apply_matrix(state, stdgates.CNOT(), [0])
        with pytest.raises(ValueError, match="power of 2"):
            apply_matrix(torch.zeros(3, dtype=torch.complex128), stdgates.X(), [0])

    def test_check_targets_requires_one(self) -> None:
        with pytest.raises(ValueError, match="At least one"):
            check_targets([], 2)


class TestExpandOperator:
    def test_single_qubit_embedding(self) -> None:
        full = expand_operator(stdgates.X(), [1], 2)
        expected = torch.kron(stdgates.I(), stdgates.X())
        assert torch.allclose(full, expected)

    def test_swap_via_reversed_cnots(self) -> None:
        a = expand_operator(stdgates.CNOT(), [0, 1], 2)
        b = expand_operator(stdgates.CNOT(), [1, 0], 2)
        assert torch.allclose(a @ b @ a, stdgates.SWAP())


class TestMeasurementHelpers:
    def test_measure_probs_sum_to_one(self) -> None:
        s = 1.0 / math.sqrt(2.0)
        state = torch.tensor([s, 0.0, 0.0, s], dtype=torch.complex128)
        probs = measure_probs(state)
        assert torch.allclose(probs, torch.tensor([0.5, 0.0, 0.0, 0.5], dtype=torch.float64))

    def test_qubit_probabilities_and_projection(self) -> None:
        s = 1.0 / math.sqrt(2.0)
        state = torch.tensor([s, 0.0, 0.0, s], dtype=torch.complex128)
        p0, p1 = qubit_probabilities(state, 0)
        assert p0 == pytest.approx(0.5)
        assert p1 == pytest.approx(0.5)

        projected = project_qubit(state, 0, 1, p1)
        assert torch.allclose(projected, basis_state(2, 3))

        with pytest.raises(ValueError, match="probability"):
            project_qubit(state, 0, 1, 0.0)

    def test_sample_index_inverse_cdf(self) -> None:
        probs = torch.tensor([0.25, 0.0, 0.5, 0.25], dtype=torch.float64)
        assert sample_index(probs, 0.0) == 0
        assert sample_index(probs, 0.2499) == 0
        assert sample_index(probs, 0.25) == 2
        assert sample_index(probs, 0.9) == 3

    def test_sample_index_falls_back_to_last_nonzero(self) -> None:
        probs = torch.tensor([0.5, 0.5 - 1e-9, 0.0, 0.0], dtype=torch.float64)
        assert sample_index(probs, 0.99999999999) == 1

    def test_draw_uniform_reproducible(self) -> None:
        g1 = torch.Generator().manual_seed(7)
        g2 = torch.Generator().manual_seed(7)
        draws = [draw_uniform(g1) for _ in range(5)]
        assert draws == [draw_uniform(g2) for _ in range(5)]
        assert all(0.0 <= d < 1.0 for d in draws)
