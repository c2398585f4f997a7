"""Backend implementations for statevector operations."""

from .statevector import (
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

__all__ = [
    "zero_state",
    "basis_state",
    "apply_matrix",
    "expand_operator",
    "check_targets",
    "infer_num_qubits",
    "measure_probs",
    "qubit_probabilities",
    "project_qubit",
    "draw_uniform",
    "sample_index",
]
