from typing import List, Tuple, Dict
import copy

from .quantum_gates import QuantumGate, GType
from .tensor import ToTensor, circuit_to_tensor

from .log import get_logger
logger = get_logger(__name__)


class QuantumInstruction:
    def __init__(self, gate, qubit_indices):
        self.gate: QuantumGate = gate
        self.gate_indices: Tuple[int, ...] = tuple(qubit_indices)

    @property
    def kind(self) -> GType:
        return self.gate.kind

    @property
    def phase(self):
        return self.gate.param

    @property
    def qs(self) -> Tuple[int, ...]:
        return self.gate_indices

    def __str__(self):
        return self.gate.name + f" {self.gate_indices}"

    def __repr__(self) -> str:
        param_str = f" param={self.gate.param}" if self.gate.param is not None else ""
        return (
            f"<QuantumInstruction name='{self.gate.name}' "
            f"qargs={self.gate_indices}{param_str}>"
        )


class QuantumCircuit(ToTensor):
    """An ordered list of gates acting on `qubit_count` qubits."""

    def __init__(self, qubit_count=None, instructions=None):
        self.qubit_count: int = 0 if qubit_count is None else qubit_count
        self.gate_set: List[str] = []
        self.instructions: List[QuantumInstruction] = []

        for instruction in instructions or []:
            self.add_instruction(instruction)

    def add_instruction(
        self,
        instruction: QuantumInstruction = None,
        gate: QuantumGate = None,
        indices: Tuple[int, ...] = None,
    ):
        if instruction is None:
            if not isinstance(gate, QuantumGate):
                raise TypeError(f"{gate} must be a QuantumGate instance")
            if indices is None:
                raise ValueError(f"add_instruction requires gate indices for {gate}")
            circ_instrc = QuantumInstruction(gate=gate, qubit_indices=indices)
        else:
            if not isinstance(instruction, QuantumInstruction):
                raise TypeError(
                    f"add_instruction requires a QuantumInstruction or a QuantumGate and indices, "
                    f"got {type(instruction).__name__}"
                )
            circ_instrc = instruction

        if not self.valid_gate_indices(circ_instrc):
            raise ValueError(
                f"Gate indices invalid or out of bounds for instruction {circ_instrc} "
                f"on {self.qubit_count} qubits"
            )

        if circ_instrc.gate.name not in self.gate_set:
            self.gate_set.append(circ_instrc.gate.name)

        self.instructions.append(circ_instrc)

    def add_gate(self, gate: QuantumGate, *indices: int):
        self.add_instruction(gate=gate, indices=indices)

    def valid_gate_indices(self, instruction: QuantumInstruction) -> bool:
        indices = instruction.gate_indices
        indices_in_range = all(
            0 <= qubit_index < self.qubit_count for qubit_index in indices
        )
        indices_not_repeated = len(indices) == len(set(indices))
        arity = instruction.gate.num_qubits
        arity_matches = arity is None or arity == len(indices)

        return indices_in_range and indices_not_repeated and arity_matches and len(indices) > 0

    def num_qubits(self) -> int:
        return self.qubit_count

    @property
    def gates(self) -> List[QuantumInstruction]:
        return self.instructions

    def depth(self) -> int:
        if self.qubit_count == 0:
            return 0
        depth_at_idx = [0] * self.qubit_count
        for instruction in self.instructions:
            new_depth = max(
                depth_at_idx[gate_idx] for gate_idx in instruction.gate_indices
            )

            for gate_idx in instruction.gate_indices:
                depth_at_idx[gate_idx] = new_depth + 1

        return max(depth_at_idx)

    def copy(self) -> "QuantumCircuit":
        return copy.deepcopy(self)

    def to_tensor(self, elem=None):
        return circuit_to_tensor(self, elem)

    def __len__(self):
        return len(self.instructions)

    def __repr__(self) -> str:
        """
        <QuantumCircuit 2 qubits, 3 instructions (CX:3), depth=3>
        """
        gate_hist: Dict[str, int] = {}
        for instr in self.instructions:
            gate_hist[instr.gate.name] = gate_hist.get(instr.gate.name, 0) + 1
        gate_summary = ", ".join(f"{name}:{cnt}" for name, cnt in sorted(gate_hist.items()))

        return (
            f"<QuantumCircuit {self.qubit_count} qubits, "
            f"{len(self.instructions)} instructions ({gate_summary}), "
            f"depth={self.depth()}>"
        )
