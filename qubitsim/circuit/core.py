"""Core circuit IR types and simulation."""

from __future__ import annotations

import enum
from collections import Counter
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple, Union

import torch

from ..audit import digest
from ..backend.statevector import expand_operator
from ..core.context import SimulationContext, default_context
from ..gates.base import ControlledGate, Gate
from ..gates.library import hadamard, s_dagger
from ..logging import get_logger
from ..states.multi import MultiQubitState

logger = get_logger(__name__)


class MeasurementBasis(enum.Enum):
    """Basis a qubit is measured in."""

    Z = "Z"
    X = "X"
    Y = "Y"

    @classmethod
    def parse(cls, value: Union["MeasurementBasis", str]) -> "MeasurementBasis":
        if isinstance(value, MeasurementBasis):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            raise ValueError(
                f"Unknown measurement basis {value!r}; expected 'Z', 'X' or 'Y'."
            ) from None


# Rotations applied before a Z measurement to measure in the given basis.
_BASIS_CHANGE: Dict[MeasurementBasis, Tuple[Gate, ...]] = {
    MeasurementBasis.Z: (),
    MeasurementBasis.X: (hadamard(),),
    MeasurementBasis.Y: (s_dagger(), hadamard()),
}


@dataclass(frozen=True)
class CircuitOperation:
    """
    A single gate application in a quantum circuit.

    Attributes
    ----------
    gate:
        The applied gate (shared, never copied).
    targets:
        Target qubit indices; ``targets[0]`` is the gate's most significant
        local qubit.
    depth:
        Layer the operation lands in: one more than the deepest earlier
        operation touching any of its qubits.
    label:
        Optional free-form annotation.
    """

    gate: Gate
    targets: Tuple[int, ...]
    depth: int
    label: Optional[str] = None


@dataclass(frozen=True)
class MeasurementOp:
    """A deferred measurement of ``qubit`` stored into ``classical_bit``."""

    qubit: int
    classical_bit: int
    basis: MeasurementBasis = MeasurementBasis.Z


@dataclass(frozen=True)
class CircuitResult:
    """
    Result of a single run.

    ``probability`` is always 1.0: a run follows one sampled path and does
    not track branch weights.
    """

    final_state: MultiQubitState
    measurements: Dict[int, int]
    bitstring: str
    probability: float = 1.0
    hash: str = ""


@dataclass(frozen=True)
class ShotResults:
    """Aggregated outcome of repeated runs."""

    counts: Counter
    total_shots: int
    probabilities: Dict[str, float]
    hash: str = ""


@dataclass(frozen=True)
class CircuitStats:
    num_qubits: int
    depth: int
    gate_count: int
    single_qubit_gates: int
    two_qubit_gates: int
    multi_qubit_gates: int
    measurements: int


class QuantumCircuit:
    """
    An ordered program of gate applications and measurements on a fixed
    number of qubits.

    Builder methods validate their arguments, append, and return ``self`` so
    calls can be chained::

        bell = QuantumCircuit(2, name="bell").h(0).cx(0, 1).measure_all()

    Measurements are deferred: ``run`` applies every gate first and then
    performs the measurements in the order they were added.

    Parameters
    ----------
    num_qubits:
        Register width, bounded by the context (1..20 by default).
    name:
        Display name.
    context:
        Simulation settings; a fresh ``default_context()`` when omitted.
    num_classical_bits:
        Width of the classical register; defaults to ``num_qubits``.
    """

    def __init__(
        self,
        num_qubits: int,
        name: str = "circuit",
        context: Optional[SimulationContext] = None,
        num_classical_bits: Optional[int] = None,
    ) -> None:
        self._context = context if context is not None else default_context()
        self._num_qubits = self._context.check_num_qubits(num_qubits)
        self.name = name
        self._ops: List[CircuitOperation] = []
        self._measurements: List[MeasurementOp] = []
        self._num_classical_bits = 0
        self.num_classical_bits = num_qubits if num_classical_bits is None else num_classical_bits

    # Accessors

    @property
    def num_qubits(self) -> int:
        return self._num_qubits

    @property
    def context(self) -> SimulationContext:
        return self._context

    @property
    def num_classical_bits(self) -> int:
        return self._num_classical_bits

    @num_classical_bits.setter
    def num_classical_bits(self, value: int) -> None:
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ValueError(f"Number of classical bits must be an int >= 0, got {value!r}.")
        self._num_classical_bits = value

    @property
    def operations(self) -> Tuple[CircuitOperation, ...]:
        """Return a read-only tuple of all gate operations."""
        return tuple(self._ops)

    @property
    def measurements(self) -> Tuple[MeasurementOp, ...]:
        return tuple(self._measurements)

    def __len__(self) -> int:
        """Return the number of gate operations in this circuit."""
        return len(self._ops)

    # Building

    def _check_qubit(self, q: int) -> int:
        if isinstance(q, bool) or not isinstance(q, int):
            raise TypeError(f"Qubit index must be an int, got {type(q).__name__}")
        if q < 0 or q >= self._num_qubits:
            raise ValueError(
                f"Qubit index {q} is out of range for this circuit "
                f"(n_qubits={self._num_qubits})."
            )
        return q

    def _current_depth(self, qubits: Tuple[int, ...]) -> int:
        qubit_layer = [0] * self._num_qubits
        for op in self._ops:
            for q in op.targets:
                if op.depth > qubit_layer[q]:
                    qubit_layer[q] = op.depth
        return max(qubit_layer[q] for q in qubits)

    def apply(self, gate: Gate, *targets: int, label: Optional[str] = None) -> "QuantumCircuit":
        """
        Append ``gate`` acting on ``targets``.

        Raises
        ------
        ValueError
            If the number of targets differs from the gate arity, a target is
            out of range, or a target is repeated.
        """
        if not isinstance(gate, Gate):
            raise TypeError(f"Expected a Gate, got {type(gate).__name__}")
        if len(targets) != gate.num_qubits:
            raise ValueError(
                f"Gate {gate.name!r} requires {gate.num_qubits} target(s), "
                f"got {len(targets)}."
            )
        t_tuple = tuple(self._check_qubit(q) for q in targets)
        if len(set(t_tuple)) != len(t_tuple):
            raise ValueError(f"Target qubits must be distinct, got {t_tuple}.")

        depth = self._current_depth(t_tuple) + 1
        self._ops.append(CircuitOperation(gate=gate, targets=t_tuple, depth=depth, label=label))
        return self

    def _named(self, name: str, *targets: int) -> "QuantumCircuit":
        return self.apply(self._context.library.get(name), *targets)

    def h(self, qubit: int) -> "QuantumCircuit":
        return self._named("H", qubit)

    def x(self, qubit: int) -> "QuantumCircuit":
        return self._named("X", qubit)

    def y(self, qubit: int) -> "QuantumCircuit":
        return self._named("Y", qubit)

    def z(self, qubit: int) -> "QuantumCircuit":
        return self._named("Z", qubit)

    def s(self, qubit: int) -> "QuantumCircuit":
        return self._named("S", qubit)

    def sdg(self, qubit: int) -> "QuantumCircuit":
        return self._named("S†", qubit)

    def t(self, qubit: int) -> "QuantumCircuit":
        return self._named("T", qubit)

    def tdg(self, qubit: int) -> "QuantumCircuit":
        return self._named("T†", qubit)

    def rx(self, angle: float, qubit: int) -> "QuantumCircuit":
        return self.apply(self._context.library.rotation("x", angle), qubit)

    def ry(self, angle: float, qubit: int) -> "QuantumCircuit":
        return self.apply(self._context.library.rotation("y", angle), qubit)

    def rz(self, angle: float, qubit: int) -> "QuantumCircuit":
        return self.apply(self._context.library.rotation("z", angle), qubit)

    def p(self, angle: float, qubit: int) -> "QuantumCircuit":
        return self.apply(self._context.library.phase(angle), qubit)

    def u3(self, theta: float, phi: float, lam: float, qubit: int) -> "QuantumCircuit":
        return self.apply(self._context.library.u3(theta, phi, lam), qubit)

    def cx(self, control: int, target: int) -> "QuantumCircuit":
        return self._named("CNOT", control, target)

    def cz(self, control: int, target: int) -> "QuantumCircuit":
        return self._named("CZ", control, target)

    def cp(self, angle: float, control: int, target: int) -> "QuantumCircuit":
        return self.apply(self._context.library.cphase(angle), control, target)

    def swap(self, a: int, b: int) -> "QuantumCircuit":
        return self._named("SWAP", a, b)

    def ccx(self, control1: int, control2: int, target: int) -> "QuantumCircuit":
        return self._named("Toffoli", control1, control2, target)

    def cswap(self, control: int, a: int, b: int) -> "QuantumCircuit":
        return self._named("Fredkin", control, a, b)

    def controlled(self, gate: Gate, *qubits: int) -> "QuantumCircuit":
        """Apply ``gate`` controlled on the leading qubits; the last ``gate.num_qubits`` are targets."""
        num_controls = len(qubits) - gate.num_qubits
        if num_controls < 1:
            raise ValueError(
                f"controlled({gate.name!r}) needs at least {gate.num_qubits + 1} "
                f"qubits, got {len(qubits)}."
            )
        return self.apply(ControlledGate(gate, num_controls), *qubits)

    def barrier(self, *qubits: int) -> "QuantumCircuit":
        """Visual/structural marker only; records nothing."""
        for q in qubits:
            self._check_qubit(q)
        return self

    def measure(
        self,
        qubit: int,
        classical_bit: Optional[int] = None,
        basis: Union[MeasurementBasis, str] = MeasurementBasis.Z,
    ) -> "QuantumCircuit":
        """Record a measurement of ``qubit`` into ``classical_bit`` (defaults to ``qubit``)."""
        self._check_qubit(qubit)
        bit = qubit if classical_bit is None else classical_bit
        if isinstance(bit, bool) or not isinstance(bit, int) or bit < 0:
            raise ValueError(f"Classical bit must be an int >= 0, got {bit!r}.")
        self._measurements.append(
            MeasurementOp(qubit=qubit, classical_bit=bit, basis=MeasurementBasis.parse(basis))
        )
        return self

    def measure_all(self) -> "QuantumCircuit":
        for q in range(self._num_qubits):
            self.measure(q)
        return self

    # Execution

    def _initial_state(self, initial_state: Optional[MultiQubitState]) -> MultiQubitState:
        if initial_state is None:
            return MultiQubitState.zeros(self._num_qubits, device=self._context.device)
        if initial_state.num_qubits != self._num_qubits:
            raise ValueError(
                f"Initial state has {initial_state.num_qubits} qubits, "
                f"circuit has {self._num_qubits}."
            )
        return initial_state

    def _evolve(self, state: MultiQubitState) -> MultiQubitState:
        for op in self._ops:
            state = op.gate.apply_to(state, op.targets)
        return state

    def _measure_stage(
        self, state: MultiQubitState, generator: Optional[torch.Generator]
    ) -> Tuple[MultiQubitState, Dict[int, int], str]:
        outcomes: Dict[int, int] = {}
        for m in self._measurements:
            for gate in _BASIS_CHANGE[m.basis]:
                state = gate.apply_to(state, (m.qubit,))
            result = state.measure_qubit(m.qubit, generator)
            state = result.new_state
            outcomes[m.classical_bit] = result.outcome

        bits = ["0"] * self._num_classical_bits
        for bit, outcome in outcomes.items():
            if bit < self._num_classical_bits:
                bits[bit] = str(outcome)
        return state, outcomes, "".join(bits)

    def get_statevector(self, initial_state: Optional[MultiQubitState] = None) -> MultiQubitState:
        """Apply every gate (no measurements) and return the resulting state."""
        return self._evolve(self._initial_state(initial_state))

    def run(
        self,
        initial_state: Optional[MultiQubitState] = None,
        generator: Optional[torch.Generator] = None,
    ) -> CircuitResult:
        """
        Execute the circuit once: all gates, then all measurements.

        X-basis measurements apply H first; Y-basis measurements apply S†
        then H. Outcomes are keyed by classical bit; the bitstring has one
        character per classical bit, '0' where nothing was recorded.
        """
        if generator is None:
            generator = self._context.generator

        state = self.get_statevector(initial_state)
        state, outcomes, bitstring = self._measure_stage(state, generator)
        logger.debug(
            "run %r: %d ops, %d measurements -> %s",
            self.name,
            len(self._ops),
            len(self._measurements),
            bitstring or "<none>",
        )

        run_hash = digest(f"run:{self.get_hash()}:{bitstring}:{state.get_hash()}")
        if self._context.audit is not None:
            self._context.audit.record("run", run_hash)

        return CircuitResult(
            final_state=state,
            measurements=outcomes,
            bitstring=bitstring,
            probability=1.0,
            hash=run_hash,
        )

    def run_shots(
        self,
        shots: int,
        initial_state: Optional[MultiQubitState] = None,
        generator: Optional[torch.Generator] = None,
    ) -> ShotResults:
        """
        Sample the measurement record ``shots`` times.

        Gates are deterministic, so the pre-measurement state is computed once
        and each shot repeats only the measurement stage on it.
        """
        if isinstance(shots, bool) or not isinstance(shots, int) or shots < 1:
            raise ValueError(f"Number of shots must be a positive int, got {shots!r}.")
        if generator is None:
            generator = self._context.generator

        evolved = self.get_statevector(
            initial_state.clone() if initial_state is not None else None
        )
        counts: Counter = Counter()
        for _ in range(shots):
            _, _, bitstring = self._measure_stage(evolved, generator)
            counts[bitstring] += 1

        probabilities = {k: v / float(shots) for k, v in counts.items()}
        summary = ",".join(f"{k}:{v}" for k, v in sorted(counts.items()))
        shots_hash = digest(f"shots:{self.get_hash()}:{shots}:{summary}")
        logger.debug("run_shots %r: %d shots, %d distinct outcomes", self.name, shots, len(counts))

        if self._context.audit is not None:
            self._context.audit.record("shots", shots_hash)

        return ShotResults(
            counts=counts,
            total_shots=shots,
            probabilities=probabilities,
            hash=shots_hash,
        )

    def get_unitary(self) -> torch.Tensor:
        """
        Full 2**n x 2**n unitary of the gate sequence (measurements ignored).

        Materializes every operator, so memory grows as 4**n.
        """
        dim = 2**self._num_qubits
        unitary = torch.eye(dim, dtype=torch.complex128)
        for op in self._ops:
            unitary = expand_operator(op.gate.matrix, op.targets, self._num_qubits) @ unitary
        return unitary

    # Transformations

    def _empty_like(self, name: str) -> "QuantumCircuit":
        return QuantumCircuit(
            self._num_qubits,
            name=name,
            context=self._context,
            num_classical_bits=self._num_classical_bits,
        )

    def clone(self) -> "QuantumCircuit":
        """Copy of this circuit; gates are shared, the lists are not."""
        new = self._empty_like(self.name)
        new._ops.extend(self._ops)
        new._measurements.extend(self._measurements)
        return new

    def compose(self, other: "QuantumCircuit") -> "QuantumCircuit":
        """New circuit running ``self`` and then ``other``."""
        if other.num_qubits != self._num_qubits:
            raise ValueError(
                f"Cannot compose circuits with {self._num_qubits} and "
                f"{other.num_qubits} qubits."
            )
        new = self.clone()
        new.num_classical_bits = max(self._num_classical_bits, other.num_classical_bits)
        for op in other._ops:
            new.apply(op.gate, *op.targets, label=op.label)
        new._measurements.extend(other._measurements)
        return new

    def inverse(self) -> "QuantumCircuit":
        """
        Circuit applying the adjoint of every gate in reverse order.

        Raises
        ------
        ValueError
            If the circuit contains measurements, which are not invertible.
        """
        if self._measurements:
            raise ValueError(
                f"Cannot invert circuit {self.name!r}: it contains "
                f"{len(self._measurements)} measurement(s)."
            )
        new = self._empty_like(f"{self.name}_inverse")
        for op in reversed(self._ops):
            new.apply(op.gate.dagger(), *op.targets, label=op.label)
        return new

    def clear(self) -> "QuantumCircuit":
        self._ops.clear()
        self._measurements.clear()
        return self

    # Analysis

    def depth(self) -> int:
        """Number of layers when gates on disjoint qubits run in parallel; 0 if empty."""
        return max((op.depth for op in self._ops), default=0)

    def gate_counts(self) -> Dict[str, int]:
        """Return a dictionary mapping gate names to their counts."""
        counts: Dict[str, int] = {}
        for op in self._ops:
            counts[op.gate.name] = counts.get(op.gate.name, 0) + 1
        return counts

    def stats(self) -> CircuitStats:
        arities = [op.gate.num_qubits for op in self._ops]
        return CircuitStats(
            num_qubits=self._num_qubits,
            depth=self.depth(),
            gate_count=len(arities),
            single_qubit_gates=sum(1 for k in arities if k == 1),
            two_qubit_gates=sum(1 for k in arities if k == 2),
            multi_qubit_gates=sum(1 for k in arities if k > 2),
            measurements=len(self._measurements),
        )

    def get_hash(self) -> str:
        parts = [f"circuit:{self.name}:{self._num_qubits}:{self._num_classical_bits}"]
        parts.extend(f"{op.gate.get_hash()}@{op.targets}" for op in self._ops)
        parts.extend(
            f"M{m.qubit}->{m.classical_bit}:{m.basis.value}" for m in self._measurements
        )
        return digest("|".join(parts))

    def draw(self, use_ascii: bool = False) -> str:
        """Text diagram of the circuit; see :func:`qubitsim.viz.drawer.to_text`."""
        from ..viz.drawer import to_text

        return to_text(self, use_ascii=use_ascii)

    def __str__(self) -> str:
        lines = [f"Circuit: {self.name} ({self._num_qubits} qubits)"]
        for op in self._ops:
            lines.append(f"  {op.gate.name} on q[{', '.join(str(q) for q in op.targets)}]")
        for m in self._measurements:
            lines.append(
                f"  Measure q[{m.qubit}] → c[{m.classical_bit}] ({m.basis.value}-basis)"
            )
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"QuantumCircuit(num_qubits={self._num_qubits}, name={self.name!r}, "
            f"ops={len(self._ops)}, measurements={len(self._measurements)})"
        )


__all__ = [
    "MeasurementBasis",
    "CircuitOperation",
    "MeasurementOp",
    "CircuitResult",
    "ShotResults",
    "CircuitStats",
    "QuantumCircuit",
]
