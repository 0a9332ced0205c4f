import math
import numpy as np
import pytest
from fractions import Fraction

from zxeval.scalar import Scalar4, ScalarN
from zxeval.tensor import (
    ComplexElem,
    QubitOps,
    format_tensor,
    tensor_elem,
    tensors_approx_eq,
    to_complex,
)
from zxeval.graph import EType, Graph, VType


def tensors_eq(a, b):
    """Exact elementwise comparison of two Scalar tensors."""
    return a.shape == b.shape and all(x == y for x, y in zip(a.flat, b.flat))


@pytest.fixture
def ops():
    return QubitOps(Scalar4)


def generate_wire(*spider_phases, etype=EType.N):
    """Input, a chain of Z spiders, output."""
    g = Graph()
    i = g.add_vertex(VType.B)
    o = g.add_vertex(VType.B)
    prev = i
    for p in spider_phases:
        v = g.add_vertex(VType.Z, p)
        g.add_edge(prev, v, etype)
        prev = v
    g.add_edge(prev, o, etype)
    g.set_inputs([i])
    g.set_outputs([o])
    return g


def test_ident_delta_cphase(ops):
    assert tensors_eq(ops.ident(0), np.asarray(Scalar4.one(), dtype=object))
    i1 = ops.ident(1)
    assert i1.shape == (2, 2)
    assert i1[0, 0] == 1 and i1[1, 1] == 1
    assert i1[0, 1] == 0 and i1[1, 0] == 0

    d3 = ops.delta(3)
    assert d3.shape == (2, 2, 2)
    assert sum(1 for x in d3.flat if x == 1) == 2
    assert d3[0, 0, 0] == 1 and d3[1, 1, 1] == 1

    cz = ops.cphase(1, 2)
    assert cz.shape == (2, 2, 2, 2)
    assert cz[1, 1, 1, 1] == -1
    assert cz[1, 0, 1, 0] == 1
    assert cz[1, 0, 0, 1] == 0


def test_hadamard(ops):
    h = ops.hadamard()
    n = Scalar4.one_over_sqrt2()
    assert h[0, 0] == n and h[0, 1] == n and h[1, 0] == n
    assert h[1, 1] == -n
    assert np.allclose(to_complex(h), np.array([[1, 1], [1, -1]]) / math.sqrt(2))


def test_had_at(ops):
    arr = ops.ident(1)
    ops.hadamard_at(arr, 0)
    assert tensors_eq(arr, ops.hadamard())

    arr = ops.ident(2)
    ops.hadamard_at(arr, 0)
    ops.hadamard_at(arr, 1)
    ops.hadamard_at(arr, 0)
    ops.hadamard_at(arr, 1)
    assert tensors_eq(arr, ops.ident(2))


@pytest.mark.parametrize("q", [0, 1, 2])
def test_hadamard_four_times_is_identity(ops, q):
    arr = ops.cphase(Fraction(1, 4), 3)
    ops.hadamard_at(arr, q)
    assert not tensors_eq(arr, ops.cphase(Fraction(1, 4), 3))
    for _ in range(3):
        ops.hadamard_at(arr, q)
    assert tensors_eq(arr, ops.cphase(Fraction(1, 4), 3))


def test_hadamard_at_vector():
    ops = QubitOps(complex)
    v = np.array([1, 0], dtype=complex)
    ops.hadamard_at(v, 0)
    assert np.allclose(v, [1 / math.sqrt(2), 1 / math.sqrt(2)])


def test_slice_qubit_views():
    ops = QubitOps(complex)
    a = ops.ident(1)
    a0, a1 = ops.slice_qubit(a, 0)
    a0[...] = 5
    assert np.allclose(a, [[5, 5], [0, 1]])
    with pytest.raises(ValueError):
        ops.slice_qubit(a, 2)


def test_delta_at_and_cphase_at(ops):
    a = ops.ident(2)
    ops.delta_at(a, [0, 1])
    assert a[0, 0, 0, 0] == 1
    assert a[1, 1, 1, 1] == 1
    assert a[0, 1, 0, 1] == 0

    b = ops.ident(1)
    ops.cphase_at(b, Fraction(1, 2), [1])
    assert b[1, 1] == Scalar4.from_phase(Fraction(1, 2))
    assert b[0, 0] == 1


@pytest.mark.parametrize("qs", [[0, 0], [0, 4], [-1, 1]])
def test_bad_indices(ops, qs):
    a = ops.ident(2)
    with pytest.raises(ValueError, match="Bad indices for delta_at"):
        ops.delta_at(a, qs)
    with pytest.raises(ValueError, match="Bad indices for cphase_at"):
        ops.cphase_at(a, 1, qs)


def test_complex_elem():
    ops = QubitOps(complex)
    assert ops.elem is ComplexElem
    assert ops.ident(1).dtype == np.complex128
    assert np.allclose(ops.cphase(Fraction(1, 2), 1), [[1, 0], [0, 1j]])
    assert tensor_elem(None) is Scalar4
    assert tensor_elem(ScalarN) is ScalarN
    assert tensor_elem(np.complex128) is ComplexElem
    with pytest.raises(TypeError):
        tensor_elem(int)


def test_tensors_approx_eq(ops):
    assert tensors_approx_eq(ops.hadamard(), QubitOps(complex).hadamard())
    assert not tensors_approx_eq(ops.hadamard(), QubitOps(complex).ident(1))
    assert not tensors_approx_eq(ops.ident(1), ops.ident(2))


def test_format_tensor(ops):
    assert format_tensor(ops.ident(1)) == "[[1 0]\n [0 1]]"
    assert format_tensor(np.asarray(Scalar4.one(), dtype=object)) == "1"
    assert format_tensor(ops.delta(3)) == "[[[1 0]\n  [0 0]]\n [[0 0]\n  [0 1]]]"


# graphs


def test_tensor_linked_spiders():
    g = Graph()
    g.add_vertex(VType.Z)
    g.add_vertex(VType.Z)
    g.add_edge(0, 1)
    t = g.to_tensor4()
    assert t.shape == ()
    assert t.item() == 2


def test_tensor_linked_spiders_with_phases():
    g = Graph()
    g.add_vertex(VType.Z, Fraction(1, 4))
    g.add_vertex(VType.Z, Fraction(1, 4))
    g.add_edge(0, 1)
    # 1 + e^(i pi/2)
    assert g.to_tensor4().item().approx_eq(1 + 1j)


def test_tensor_isolated_spider():
    g = Graph()
    g.add_vertex(VType.Z, Fraction(1, 2))
    assert g.to_tensor4().item() == Scalar4.one_plus_phase(Fraction(1, 2))


def test_tensor_id(ops):
    g = Graph()
    g.add_vertex(VType.B)
    g.add_vertex(VType.B)
    g.add_edge(0, 1)
    g.set_inputs([0])
    g.set_outputs([1])
    assert tensors_eq(g.to_tensor4(), ops.ident(1))

    assert tensors_eq(generate_wire(0).to_tensor4(), ops.ident(1))


def test_tensor_default_elem_is_scalar4():
    t = generate_wire(0).to_tensor()
    assert t.dtype == object
    assert isinstance(t[0, 0], Scalar4)


def test_tensor_delta(ops):
    g = Graph()
    for _ in range(4):
        g.add_vertex(VType.B)
    g.add_vertex(VType.Z)
    g.add_vertex(VType.Z)
    g.add_edge(0, 4)
    g.add_edge(1, 5)
    g.add_edge_with_type(4, 5, EType.N)
    g.add_edge(2, 4)
    g.add_edge(3, 5)
    g.set_inputs([0, 1])
    g.set_outputs([2, 3])
    assert tensors_eq(g.to_tensor4(), ops.delta(4))


def generate_cz_graph():
    g = Graph()
    g.add_vertex(VType.B)
    g.add_vertex(VType.B)
    g.add_vertex(VType.Z)
    g.add_vertex(VType.Z)
    g.add_vertex(VType.B)
    g.add_vertex(VType.B)
    g.add_edge(0, 2)
    g.add_edge(1, 3)
    g.add_edge_with_type(2, 3, EType.H)
    g.add_edge(2, 4)
    g.add_edge(3, 5)
    g.set_inputs([0, 1])
    g.set_outputs([4, 5])
    g.scalar_mul_sqrt2_pow(1)
    return g


def test_tensor_cz(ops):
    t = generate_cz_graph().to_tensor4()
    assert tensors_eq(t, ops.cphase(1, 2))


def test_tensor_cz_complex():
    t = generate_cz_graph().to_tensorf()
    assert t.dtype == np.complex128
    assert np.allclose(t.reshape(4, 4), np.diag([1, 1, 1, -1]))


def test_tensor_phase_wire(ops):
    t = generate_wire(Fraction(1, 4)).to_tensor4()
    assert tensors_eq(t, ops.cphase(Fraction(1, 4), 1))


def test_tensor_spider_chain_fuses(ops):
    # phases add up to 2, i.e. nothing
    t = generate_wire(*[Fraction(1, 4)] * 8).to_tensor4()
    assert tensors_eq(t, ops.ident(1))


def test_tensor_hadamard_wire(ops):
    g = generate_wire(0)
    z = [v for v in g.vertices() if g.vertex_type(v) is VType.Z][0]
    o = g.outputs()[0]
    g.set_edge_type(z, o, EType.H)
    assert tensors_eq(g.to_tensor4(), ops.hadamard())


def test_tensor_x_spider(ops):
    g = Graph()
    i = g.add_vertex(VType.B)
    x = g.add_vertex(VType.X, 1)
    o = g.add_vertex(VType.B)
    g.add_edge(i, x)
    g.add_edge(x, o)
    g.set_inputs([i])
    g.set_outputs([o])
    # an X(pi) spider on a wire is the NOT gate
    t = g.to_tensor4()
    assert t[0, 1] == 1 and t[1, 0] == 1
    assert t[0, 0] == 0 and t[1, 1] == 0
    # the input graph is left alone
    assert g.vertex_type(x) is VType.X


def test_tensor_axes_are_inputs_then_outputs():
    g = Graph()
    i0 = g.add_vertex(VType.B)
    i1 = g.add_vertex(VType.B)
    o0 = g.add_vertex(VType.B)
    o1 = g.add_vertex(VType.B)
    z = g.add_vertex(VType.Z, Fraction(1, 2))
    g.add_edge(i0, z)
    g.add_edge(z, o0)
    g.add_edge(i1, o1)
    g.set_inputs([i0, i1])
    g.set_outputs([o0, o1])
    # S on qubit 0, identity on qubit 1
    t = g.to_tensor4()
    s = Scalar4.from_phase(Fraction(1, 2))
    assert t.shape == (2, 2, 2, 2)
    assert t[1, 0, 1, 0] == s
    assert t[0, 1, 0, 1] == 1
    assert t[1, 1, 1, 1] == s
    assert t[1, 0, 0, 1] == 0
    assert t[0, 1, 1, 0] == 0


def test_tensor_global_scalar():
    g = generate_wire(0)
    g.scalar_mul_phase(Fraction(1, 2))
    t = g.to_tensor4()
    assert t[0, 0] == Scalar4.from_phase(Fraction(1, 2))
    assert t[0, 1] == 0

    # order 8 does not fit Scalar4
    g = generate_wire(0)
    g.scalar_mul_phase(Fraction(1, 8))
    t = g.to_tensor4()
    assert not t[0, 0].is_exact()
    assert tensors_approx_eq(t, np.exp(1j * math.pi / 8) * np.eye(2))


def test_tensor_float_and_exact_agree():
    g = generate_wire(Fraction(1, 4), Fraction(3, 4))
    assert tensors_approx_eq(g.to_tensor4(), g.to_tensorf())
    assert tensors_approx_eq(g.to_tensor(ScalarN), g.to_tensorf())


def test_tensor_unsupported_vertex():
    g = Graph()
    g.add_vertex(VType.H)
    with pytest.raises(NotImplementedError, match="Vertex type currently unsupported"):
        g.to_tensor4()


def test_tensor_stray_boundary():
    g = generate_wire(0)
    g.set_outputs([])
    with pytest.raises(ValueError, match="All boundary vertices must be an input or an output"):
        g.to_tensor4()


@pytest.mark.parametrize("p", range(-4, 5))
def test_complex_elem_sqrt2_pow(p):
    assert ComplexElem.sqrt2_pow(p) == pytest.approx(math.sqrt(2.0) ** p)
    assert ComplexElem.sqrt2_pow(p) == pytest.approx(complex(Scalar4.sqrt2_pow(p)))
