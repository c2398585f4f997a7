"""Gate factories and the name-keyed gate registry."""

from __future__ import annotations

from typing import Callable, Dict, List

from . import standard as stdgates
from .base import ControlledGate, Gate, GateKind


def _angle(theta: float) -> str:
    return f"{theta:.3f}"


def identity() -> Gate:
    return Gate("I", stdgates.I(), 1, GateKind.IDENTITY)


def pauli_x() -> Gate:
    return Gate("X", stdgates.X(), 1, GateKind.X)


def pauli_y() -> Gate:
    return Gate("Y", stdgates.Y(), 1, GateKind.Y)


def pauli_z() -> Gate:
    return Gate("Z", stdgates.Z(), 1, GateKind.Z)


def hadamard() -> Gate:
    return Gate("H", stdgates.H(), 1, GateKind.H)


def s_gate() -> Gate:
    return Gate("S", stdgates.S(), 1, GateKind.S)


def s_dagger() -> Gate:
    return Gate("S†", stdgates.SDG(), 1, GateKind.SDG)


def t_gate() -> Gate:
    return Gate("T", stdgates.T(), 1, GateKind.T)


def t_dagger() -> Gate:
    return Gate("T†", stdgates.TDG(), 1, GateKind.TDG)


def rx(theta: float) -> Gate:
    return Gate(f"Rx({_angle(theta)})", stdgates.RX(theta), 1, GateKind.RX, (theta,))


def ry(theta: float) -> Gate:
    return Gate(f"Ry({_angle(theta)})", stdgates.RY(theta), 1, GateKind.RY, (theta,))


def rz(theta: float) -> Gate:
    return Gate(f"Rz({_angle(theta)})", stdgates.RZ(theta), 1, GateKind.RZ, (theta,))


def phase(theta: float) -> Gate:
    return Gate(f"P({_angle(theta)})", stdgates.P(theta), 1, GateKind.P, (theta,))


def u3(theta: float, phi: float, lam: float) -> Gate:
    name = f"U3({_angle(theta)},{_angle(phi)},{_angle(lam)})"
    return Gate(name, stdgates.U3(theta, phi, lam), 1, GateKind.U3, (theta, phi, lam))


def cnot() -> Gate:
    return Gate("CNOT", stdgates.CNOT(), 2, GateKind.CNOT)


def cz() -> Gate:
    return Gate("CZ", stdgates.CZ(), 2, GateKind.CZ)


def swap() -> Gate:
    return Gate("SWAP", stdgates.SWAP(), 2, GateKind.SWAP)


def iswap() -> Gate:
    return Gate("iSWAP", stdgates.ISWAP(), 2, GateKind.ISWAP)


def sqrt_swap() -> Gate:
    return Gate("√SWAP", stdgates.SQRT_SWAP(), 2, GateKind.SQRT_SWAP)


def cphase(theta: float) -> Gate:
    return Gate(f"CP({_angle(theta)})", stdgates.CP(theta), 2, GateKind.CP, (theta,))


def crx(theta: float) -> Gate:
    return Gate(f"CRx({_angle(theta)})", stdgates.CRX(theta), 2, GateKind.CRX, (theta,))


def toffoli() -> Gate:
    return Gate("Toffoli", stdgates.TOFFOLI(), 3, GateKind.TOFFOLI)


def fredkin() -> Gate:
    return Gate("Fredkin", stdgates.FREDKIN(), 3, GateKind.FREDKIN)


_FIXED_GATES: Dict[str, Callable[[], Gate]] = {
    "I": identity,
    "X": pauli_x,
    "Y": pauli_y,
    "Z": pauli_z,
    "H": hadamard,
    "S": s_gate,
    "S†": s_dagger,
    "T": t_gate,
    "T†": t_dagger,
    "CNOT": cnot,
    "CZ": cz,
    "SWAP": swap,
    "iSWAP": iswap,
    "√SWAP": sqrt_swap,
    "Toffoli": toffoli,
    "Fredkin": fredkin,
}

_ALIASES = {
    "CX": "CNOT",
    "CCNOT": "Toffoli",
    "CCX": "Toffoli",
    "CSWAP": "Fredkin",
    "SDG": "S†",
    "TDG": "T†",
}

_ROTATIONS: Dict[str, Callable[[float], Gate]] = {"x": rx, "y": ry, "z": rz}


class GateLibrary:
    """
    Registry of gates keyed by name.

    Libraries are plain values: build one with ``GateLibrary.standard()`` or
    start empty and ``add`` custom gates. Lookups are case-sensitive.
    """

    def __init__(self) -> None:
        self._gates: Dict[str, Gate] = {}

    @classmethod
    def standard(cls) -> "GateLibrary":
        """Library holding every fixed standard gate plus the usual aliases."""
        library = cls()
        for name, factory in _FIXED_GATES.items():
            library.add(name, factory())
        for alias, target in _ALIASES.items():
            library.add(alias, library.get(target))
        return library

    def get(self, name: str) -> Gate:
        """
        Return the gate registered under ``name``.

        Raises:
            ValueError: If no gate has that name.
        """
        try:
            return self._gates[name]
        except KeyError:
            raise ValueError(
                f"Unknown gate {name!r}. Known gates: {self.names()}"
            ) from None

    def has(self, name: str) -> bool:
        return name in self._gates

    def add(self, name: str, gate: Gate) -> None:
        """Register ``gate`` under ``name``, replacing any previous entry."""
        if not isinstance(gate, Gate):
            raise TypeError(f"Expected a Gate, got {type(gate).__name__}")
        self._gates[name] = gate

    def names(self) -> List[str]:
        return sorted(self._gates)

    def __contains__(self, name: object) -> bool:
        return name in self._gates

    def __len__(self) -> int:
        return len(self._gates)

    # Parametric gates

    def rotation(self, axis: str, angle: float) -> Gate:
        """Rx/Ry/Rz for ``axis`` in {"x", "y", "z"} (case-insensitive)."""
        factory = _ROTATIONS.get(axis.lower())
        if factory is None:
            raise ValueError(f"Unknown rotation axis {axis!r}; expected 'x', 'y' or 'z'.")
        return factory(angle)

    def phase(self, angle: float) -> Gate:
        return phase(angle)

    def u3(self, theta: float, phi: float, lam: float) -> Gate:
        return u3(theta, phi, lam)

    def controlled(self, gate: Gate, num_controls: int = 1) -> ControlledGate:
        return ControlledGate(gate, num_controls)

    def cphase(self, angle: float) -> Gate:
        return cphase(angle)

    def crx(self, angle: float) -> Gate:
        return crx(angle)


__all__ = [
    "GateLibrary",
    "identity",
    "pauli_x",
    "pauli_y",
    "pauli_z",
    "hadamard",
    "s_gate",
    "s_dagger",
    "t_gate",
    "t_dagger",
    "rx",
    "ry",
    "rz",
    "phase",
    "u3",
    "cnot",
    "cz",
    "swap",
    "iswap",
    "sqrt_swap",
    "cphase",
    "crx",
    "toffoli",
    "fredkin",
]
