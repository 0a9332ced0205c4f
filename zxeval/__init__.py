"""Exact evaluation of ZX-diagrams and circuits.

Cyclotomic scalars, GF(2) linear algebra and a contraction scheduler that
turns diagrams and gate lists into dense tensors.
"""

# Set up the logger.
from .log import get_logger
logger = get_logger()

from .scalar import (
    DEFAULT_EPSILON,
    Exact,
    Float,
    Scalar,
    ScalarN,
    Scalar1,
    Scalar2,
    Scalar3,
    Scalar4,
    Scalar5,
    Scalar6,
    Scalar7,
    Scalar8,
    mod2,
    to_fraction,
)
from .linalg import DEFAULT_BLOCKSIZE, Mat2, NoOps, OpRecorder, RowColOps
from .tensor import (
    ComplexElem,
    QubitOps,
    ToTensor,
    circuit_to_tensor,
    format_tensor,
    graph_to_tensor,
    tensors_approx_eq,
    to_complex,
)
from .graph import EType, Graph, VType
from .quantum_gates import GType, QuantumGate
from .quantum import QuantumCircuit, QuantumInstruction

__all__ = [
    "logger",
    "DEFAULT_EPSILON",
    "Exact",
    "Float",
    "Scalar",
    "ScalarN",
    "Scalar1",
    "Scalar2",
    "Scalar3",
    "Scalar4",
    "Scalar5",
    "Scalar6",
    "Scalar7",
    "Scalar8",
    "mod2",
    "to_fraction",
    "DEFAULT_BLOCKSIZE",
    "Mat2",
    "NoOps",
    "OpRecorder",
    "RowColOps",
    "ComplexElem",
    "QubitOps",
    "ToTensor",
    "circuit_to_tensor",
    "format_tensor",
    "graph_to_tensor",
    "tensors_approx_eq",
    "to_complex",
    "EType",
    "Graph",
    "VType",
    "GType",
    "QuantumGate",
    "QuantumCircuit",
    "QuantumInstruction",
]
