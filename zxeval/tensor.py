"""
Dense tensors of ZX-diagrams and circuits.

Tensors are numpy arrays with one axis of length 2 per open wire. The
element type is chosen by the caller: any `Scalar` subclass (stored in an
object array, exact where possible) or `complex` (a complex128 array).

Diagrams are contracted one vertex at a time. Each vertex adds an axis,
each edge to an already-seen vertex multiplies in a delta (plain edge) or
a CZ-like phase (Hadamard edge), and an interior vertex is summed out as
soon as all of its edges have been accounted for, so the running tensor only
ever holds the axes of the current frontier.
"""

import abc
import cmath
import math
from typing import Callable, Dict, List, Sequence, Tuple

import numpy as np

from .scalar import DEFAULT_EPSILON, Phase, Scalar, Scalar4, to_fraction
from .log import get_logger
logger = get_logger(__name__)


class ComplexElem:
    """Tensor element operations for floating-point complex numbers."""
    dtype = np.complex128

    @staticmethod
    def zero() -> complex:
        return 0j

    @staticmethod
    def one() -> complex:
        return 1 + 0j

    @staticmethod
    def sqrt2_pow(p: int) -> complex:
        return complex(math.sqrt(2.0) ** p)

    @classmethod
    def one_over_sqrt2(cls) -> complex:
        return cls.sqrt2_pow(-1)

    @staticmethod
    def from_phase(p: Phase) -> complex:
        return cmath.exp(1j * math.pi * float(to_fraction(p)))

    @staticmethod
    def from_scalar(s) -> complex:
        if isinstance(s, Scalar):
            return s.float_value()
        return complex(s)


def tensor_elem(elem=None):
    """Resolve the element operations for `elem` (a Scalar subclass or complex)."""
    if elem is None:
        return Scalar4
    if isinstance(elem, type) and issubclass(elem, Scalar):
        return elem
    if elem in (complex, np.complex128, ComplexElem):
        return ComplexElem
    raise TypeError(f"Unsupported tensor element type: {elem!r}")


class QubitOps:
    """Builders and in-place axis operators for tensors of one element type."""

    def __init__(self, elem=None):
        self.elem = tensor_elem(elem)

    def as_tensor(self, x) -> np.ndarray:
        return np.asarray(x, dtype=self.elem.dtype)

    def from_shape_fn(self, shape: Sequence[int], f: Callable[[Tuple[int, ...]], object]) -> np.ndarray:
        t = np.empty(tuple(shape), dtype=self.elem.dtype)
        for ix in np.ndindex(*shape):
            t[ix] = f(ix)
        return t

    def ident(self, q: int) -> np.ndarray:
        """Identity on q wires: axes i and q+i agree."""
        one, zero = self.elem.one(), self.elem.zero()
        return self.from_shape_fn(
            [2] * (2 * q),
            lambda ix: one if all(ix[i] == ix[q + i] for i in range(q)) else zero,
        )

    def delta(self, q: int) -> np.ndarray:
        """The q-legged copy tensor: 1 on |0...0> and |1...1>."""
        one, zero = self.elem.one(), self.elem.zero()
        return self.from_shape_fn(
            [2] * q,
            lambda ix: one if all(i == 0 for i in ix) or all(i == 1 for i in ix) else zero,
        )

    def cphase(self, p: Phase, q: int) -> np.ndarray:
        t = self.ident(q)
        self.cphase_at(t, p, list(range(q)))
        return t

    def hadamard(self) -> np.ndarray:
        n = self.elem.one_over_sqrt2()
        minus = self.elem.from_phase(1)
        t = np.empty((2, 2), dtype=self.elem.dtype)
        t[0, 0], t[0, 1], t[1, 0], t[1, 1] = n, n, n, minus * n
        return t

    def _axis_shape(self, a: np.ndarray, qs: Sequence[int], name: str) -> List[int]:
        if len(set(qs)) != len(qs):
            raise ValueError(f"Bad indices for {name}: repeated axes {list(qs)}")
        shape = [1] * a.ndim
        for q in qs:
            if not 0 <= q < a.ndim:
                raise ValueError(f"Bad indices for {name}: axis {q} out of range for a rank-{a.ndim} tensor")
            shape[q] = 2
        return shape

    def _mul_at(self, a: np.ndarray, factor: np.ndarray, name: str):
        try:
            np.multiply(a, factor, out=a)
        except ValueError as e:
            raise ValueError(f"Bad indices for {name}: {e}") from e

    def delta_at(self, a: np.ndarray, qs: Sequence[int]):
        shape = self._axis_shape(a, qs, "delta_at")
        self._mul_at(a, self.delta(len(qs)).reshape(shape), "delta_at")

    def cphase_at(self, a: np.ndarray, p: Phase, qs: Sequence[int]):
        shape = self._axis_shape(a, qs, "cphase_at")
        one, f = self.elem.one(), self.elem.from_phase(p)
        cp = self.from_shape_fn(
            [2] * len(qs), lambda ix: f if all(i == 1 for i in ix) else one
        )
        self._mul_at(a, cp.reshape(shape), "cphase_at")

    def slice_qubit(self, a: np.ndarray, q: int) -> Tuple[np.ndarray, np.ndarray]:
        """Split `a` into the non-overlapping views where axis q is 0 and 1."""
        if not 0 <= q < a.ndim:
            raise ValueError(f"Bad index for slice_qubit: axis {q} out of range for a rank-{a.ndim} tensor")
        if a.shape[q] != 2:
            raise ValueError(f"Bad index for slice_qubit: axis {q} has length {a.shape[q]}, expected 2")
        ix0 = [slice(None)] * a.ndim
        ix1 = [slice(None)] * a.ndim
        ix0[q], ix1[q] = 0, 1
        return a[tuple(ix0) + (Ellipsis,)], a[tuple(ix1) + (Ellipsis,)]

    def hadamard_at(self, a: np.ndarray, q: int):
        n = self.elem.one_over_sqrt2()
        minus = self.elem.from_phase(1)

        a0, a1 = self.slice_qubit(a, q)
        # pairs (a0[i], a1[i]) are independent
        b0 = n * (a0 + a1)
        b1 = n * (a0 + minus * a1)
        a0[...] = b0
        a1[...] = b1


class ToTensor(abc.ABC):
    """Objects that evaluate to a dense tensor."""

    @abc.abstractmethod
    def to_tensor(self, elem=None) -> np.ndarray:
        ...

    def to_tensor4(self) -> np.ndarray:
        """Shorthand for `to_tensor(Scalar4)`"""
        return self.to_tensor(Scalar4)

    def to_tensorf(self) -> np.ndarray:
        """Shorthand for `to_tensor(complex)`"""
        return self.to_tensor(complex)


def graph_to_tensor(graph, elem=None) -> np.ndarray:
    """Evaluate a ZX-diagram. Axes are the inputs then the outputs, in order."""
    from .graph import EType, VType

    ops = QubitOps(elem)
    g = graph.copy()
    g.x_to_z()
    # H-boxes are not implemented yet
    for v in g.vertices():
        t = g.vertex_type(v)
        if t is not VType.B and t is not VType.Z:
            raise NotImplementedError(f"Vertex type currently unsupported: {t}")

    inputs, outputs = g.inputs(), g.outputs()
    boundary = set(inputs) | set(outputs)
    for v in boundary:
        if g.vertex_type(v) is not VType.B:
            raise ValueError(f"Input/output vertex {v} must be a boundary vertex, got {g.vertex_type(v)}")
    for v in g.vertices():
        if g.vertex_type(v) is VType.B and v not in boundary:
            raise ValueError(f"All boundary vertices must be an input or an output (vertex {v} is neither)")

    mid = [v for v in g.vertices() if g.vertex_type(v) is not VType.B]
    vs = inputs + mid + outputs
    vs.reverse()

    a = ops.as_tensor(ops.elem.one())
    index: List[int] = []
    seen: Dict[int, int] = {}
    num_had = 0

    def contract(a, v):
        i = index.index(v)
        del index[i]
        return ops.as_tensor(a.sum(axis=i))

    for v in vs:
        p = g.phase(v)
        if p == 0:
            a = np.stack([a, a])
        else:
            a = np.stack([a, ops.as_tensor(a * ops.elem.from_phase(p))])
        index.insert(0, v)
        deg_v = 0

        for w, et in g.incident_edges(v):
            if w not in seen:
                continue
            deg_v += 1
            seen[w] += 1

            vi, wi = index.index(v), index.index(w)
            if et is EType.N:
                ops.delta_at(a, [vi, wi])
            else:
                ops.cphase_at(a, 1, [vi, wi])
                num_had += 1

            # contract away any index whose vertex now has all its edges in the tensor
            if g.vertex_type(v) is not VType.B and g.degree(v) == deg_v:
                a = contract(a, v)
            if g.vertex_type(w) is not VType.B and g.degree(w) == seen[w]:
                a = contract(a, w)

        if v in index and g.vertex_type(v) is not VType.B and g.degree(v) == deg_v:
            # isolated spider
            a = contract(a, v)
        seen[v] = deg_v
        logger.debug(f"vertex {v}: tensor rank {a.ndim}, open indices {index}")

    s = ops.elem.from_scalar(g.scalar) * ops.elem.sqrt2_pow(-num_had)
    return ops.as_tensor(a * s)


def circuit_to_tensor(circuit, elem=None) -> np.ndarray:
    """Evaluate a circuit. Axes are the q inputs then the q outputs.

    Gates are applied to the input indices, which computes the transpose of
    the circuit; every gate here is its own transpose, so applying them in
    reverse order gives the circuit itself.
    """
    from .quantum_gates import GType

    ops = QubitOps(elem)
    a = ops.ident(circuit.num_qubits())

    for g in reversed(circuit.gates):
        kind, qs = g.kind, list(g.qs)
        if kind is GType.ZPhase:
            ops.cphase_at(a, g.phase, qs)
        elif kind in (GType.Z, GType.CZ, GType.CCZ):
            ops.cphase_at(a, 1, qs)
        elif kind is GType.S:
            ops.cphase_at(a, to_fraction(1) / 2, qs)
        elif kind is GType.T:
            ops.cphase_at(a, to_fraction(1) / 4, qs)
        elif kind is GType.Sdg:
            ops.cphase_at(a, to_fraction(-1) / 2, qs)
        elif kind is GType.Tdg:
            ops.cphase_at(a, to_fraction(-1) / 4, qs)
        elif kind is GType.HAD:
            ops.hadamard_at(a, qs[0])
        elif kind is GType.NOT:
            ops.hadamard_at(a, qs[0])
            ops.cphase_at(a, 1, qs)
            ops.hadamard_at(a, qs[0])
        elif kind is GType.XPhase:
            ops.hadamard_at(a, qs[0])
            ops.cphase_at(a, g.phase, qs)
            ops.hadamard_at(a, qs[0])
        elif kind is GType.CNOT:
            ops.hadamard_at(a, qs[1])
            ops.cphase_at(a, 1, qs)
            ops.hadamard_at(a, qs[1])
        elif kind is GType.TOFF:
            ops.hadamard_at(a, qs[2])
            ops.cphase_at(a, 1, qs)
            ops.hadamard_at(a, qs[2])
        elif kind is GType.SWAP:
            a = np.ascontiguousarray(np.swapaxes(a, qs[0], qs[1]))
        elif kind is GType.XCX:
            ops.hadamard_at(a, qs[0])
            ops.hadamard_at(a, qs[1])
            ops.cphase_at(a, g.phase, qs)
            ops.hadamard_at(a, qs[0])
            ops.hadamard_at(a, qs[1])
        elif kind is GType.UnknownGate:
            logger.debug(f"ignoring unknown gate {g}")
        else:
            # ParityPhase, InitAncilla, PostSelect
            raise NotImplementedError(f"Unsupported gate: {g.gate.name}")

    return a


def to_complex(t) -> np.ndarray:
    """Floating-point copy of a tensor of any element type."""
    return np.asarray(t).astype(np.complex128)


def tensors_approx_eq(a, b, epsilon: float = DEFAULT_EPSILON) -> bool:
    ca, cb = to_complex(a), to_complex(b)
    if ca.shape != cb.shape:
        return False
    diff = ca - cb
    return bool(np.all(np.abs(diff.real) <= epsilon) and np.all(np.abs(diff.imag) <= epsilon))


def format_tensor(t, indent: int = 0) -> str:
    """Render rows in brackets with space-separated entries, numpy style."""
    t = np.asarray(t)
    if t.ndim == 0:
        return str(t.item())
    if t.ndim == 1:
        return "[" + " ".join(str(x) for x in t.tolist()) + "]"
    sep = "\n" + " " * (indent + 1)
    return "[" + sep.join(format_tensor(sub, indent + 1) for sub in t) + "]"
