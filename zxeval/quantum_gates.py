import numpy as np
from enum import Enum
from fractions import Fraction
from typing import Optional

from .scalar import Phase, to_fraction


class GType(Enum):
    ZPhase = "ZPhase"
    Z = "Z"
    S = "S"
    T = "T"
    Sdg = "Sdg"
    Tdg = "Tdg"
    CZ = "CZ"
    CCZ = "CCZ"
    HAD = "HAD"
    NOT = "NOT"
    XPhase = "XPhase"
    CNOT = "CNOT"
    TOFF = "TOFF"
    SWAP = "SWAP"
    XCX = "XCX"
    ParityPhase = "ParityPhase"
    InitAncilla = "InitAncilla"
    PostSelect = "PostSelect"
    UnknownGate = "UnknownGate"


def _zphase_matrix(p: Fraction) -> np.ndarray:
    return np.array([[1.0, 0.0], [0.0, np.exp(1j * np.pi * float(p))]], dtype=complex)


def _xphase_matrix(p: Fraction) -> np.ndarray:
    h = H().gate
    return h @ _zphase_matrix(p) @ h


class QuantumGate:
    """A gate kind with its arity and, for phase gates, a phase in units of pi.

    `gate` holds the dense unitary (qubit 0 most significant), or None for
    gates that are not unitaries of a fixed size.
    """

    def __init__(self, name, num_qubits, kind, param=None):
        self.name: str = name
        self.num_qubits: Optional[int] = num_qubits
        self.kind: GType = kind
        self.param: Optional[Fraction] = None if param is None else to_fraction(param)

    def __repr__(self):
        param_str = "" if self.param is None else f"({self.param})"
        return f"{self.name}{param_str}"


class ZPhase(QuantumGate):
    def __init__(self, phase: Phase):
        super().__init__(name="ZPhase", num_qubits=1, kind=GType.ZPhase, param=phase)
        self.gate = _zphase_matrix(self.param)


class Z(QuantumGate):
    def __init__(self):
        self.gate = np.array([[1.0, 0.0], [0.0, -1.0]])
        super().__init__(name="Z", num_qubits=1, kind=GType.Z)


class S(QuantumGate):
    def __init__(self):
        self.gate = np.array([[1.0, 0.0], [0.0, 1.0j]])
        super().__init__(name="S", num_qubits=1, kind=GType.S)


class Sdg(QuantumGate):
    def __init__(self):
        self.gate = S().gate.conj().T
        super().__init__(name="Sdg", num_qubits=1, kind=GType.Sdg)


class T(QuantumGate):
    def __init__(self):
        self.gate = np.array([[1.0, 0.0], [0.0, np.exp(1j * np.pi / 4)]])
        super().__init__(name="T", num_qubits=1, kind=GType.T)


class Tdg(QuantumGate):
    def __init__(self):
        self.gate = T().gate.conj().T
        super().__init__(name="Tdg", num_qubits=1, kind=GType.Tdg)


class H(QuantumGate):
    def __init__(self):
        self.gate = 1 / np.sqrt(2) * np.array([[1.0, 1.0], [1.0, -1.0]])
        super().__init__(name="H", num_qubits=1, kind=GType.HAD)


class X(QuantumGate):
    def __init__(self):
        self.gate = np.array([[0.0, 1.0], [1.0, 0.0]])
        super().__init__(name="X", num_qubits=1, kind=GType.NOT)


class XPhase(QuantumGate):
    def __init__(self, phase: Phase):
        super().__init__(name="XPhase", num_qubits=1, kind=GType.XPhase, param=phase)
        self.gate = _xphase_matrix(self.param)


class CX(QuantumGate):
    def __init__(self):
        self.gate = np.array(
            [
                [1.0, 0.0, 0.0, 0.0],
                [0.0, 1.0, 0.0, 0.0],
                [0.0, 0.0, 0.0, 1.0],
                [0.0, 0.0, 1.0, 0.0],
            ]
        )
        super().__init__(name="CX", num_qubits=2, kind=GType.CNOT)


class CZ(QuantumGate):
    def __init__(self):
        self.gate = np.diag([1.0, 1.0, 1.0, -1.0])
        super().__init__(name="CZ", num_qubits=2, kind=GType.CZ)


class CCZ(QuantumGate):
    def __init__(self):
        self.gate = np.diag([1.0] * 7 + [-1.0])
        super().__init__(name="CCZ", num_qubits=3, kind=GType.CCZ)


class TOFF(QuantumGate):
    def __init__(self):
        gate = np.eye(8)
        gate[[6, 7]] = gate[[7, 6]]
        self.gate = gate
        super().__init__(name="TOFF", num_qubits=3, kind=GType.TOFF)


class SWAP(QuantumGate):
    def __init__(self):
        self.gate = np.array(
            [
                [1.0, 0.0, 0.0, 0.0],
                [0.0, 0.0, 1.0, 0.0],
                [0.0, 1.0, 0.0, 0.0],
                [0.0, 0.0, 0.0, 1.0],
            ]
        )
        super().__init__(name="SWAP", num_qubits=2, kind=GType.SWAP)


class XCX(QuantumGate):
    """Phase e^(i pi p) on |-,->: H on both qubits around a controlled phase."""
    def __init__(self, phase: Phase = 1):
        super().__init__(name="XCX", num_qubits=2, kind=GType.XCX, param=phase)
        hh = np.kron(H().gate, H().gate)
        cp = np.diag([1.0, 1.0, 1.0, np.exp(1j * np.pi * float(self.param))])
        self.gate = hh @ cp @ hh


class ParityPhase(QuantumGate):
    def __init__(self, phase: Phase, num_qubits: Optional[int] = None):
        self.gate = None
        super().__init__(name="ParityPhase", num_qubits=num_qubits, kind=GType.ParityPhase, param=phase)


class InitAncilla(QuantumGate):
    def __init__(self):
        self.gate = None
        super().__init__(name="InitAncilla", num_qubits=1, kind=GType.InitAncilla)


class PostSelect(QuantumGate):
    def __init__(self):
        self.gate = None
        super().__init__(name="PostSelect", num_qubits=1, kind=GType.PostSelect)


class UnknownGate(QuantumGate):
    """A gate the parser kept by name but that has no known semantics."""
    def __init__(self, name: str = "UnknownGate", num_qubits: Optional[int] = None):
        self.gate = None
        super().__init__(name=name, num_qubits=num_qubits, kind=GType.UnknownGate)
