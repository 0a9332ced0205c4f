"""
ZX-diagrams as undirected graphs.

Vertices are boundaries or spiders carrying a phase (a rational multiple of
pi); edges are plain or Hadamard edges. The diagram also owns a global
scalar. Storage is a `networkx.Graph` with the vertex type and phase kept as
node attributes and the edge type as an edge attribute.
"""

from enum import Enum
from fractions import Fraction
from typing import Iterator, List, Sequence, Tuple

import networkx as nx

from .scalar import Phase, ScalarN, mod2, to_fraction
from .tensor import ToTensor, graph_to_tensor
from .log import get_logger
logger = get_logger(__name__)


class VType(Enum):
    B = "boundary"
    Z = "Z"
    X = "X"
    H = "H-box"


class EType(Enum):
    N = "normal"
    H = "hadamard"

    def toggle(self) -> "EType":
        return EType.H if self is EType.N else EType.N


class Graph(ToTensor):
    """A ZX-diagram.

    Vertex ids are handed out by `add_vertex` and never reused.
    """

    def __init__(self):
        self.graph = nx.Graph()
        self._next_vertex = 0
        self._inputs: List[int] = []
        self._outputs: List[int] = []
        self.scalar: ScalarN = ScalarN.one()

    def add_vertex(self, ty: VType, phase: Phase = 0) -> int:
        v = self._next_vertex
        self._next_vertex += 1
        self.graph.add_node(v, ty=ty, phase=mod2(phase))
        return v

    def add_edge(self, s: int, t: int, etype: EType = EType.N):
        for v in (s, t):
            if v not in self.graph:
                raise ValueError(f"Vertex {v} is not in the graph")
        if s == t:
            raise ValueError(f"Self-loops are not supported (vertex {s})")
        if self.graph.has_edge(s, t):
            raise ValueError(f"Edge {s}-{t} already exists")
        self.graph.add_edge(s, t, ty=etype)

    def add_edge_with_type(self, s: int, t: int, etype: EType):
        self.add_edge(s, t, etype)

    def remove_vertex(self, v: int):
        self.graph.remove_node(v)
        self._inputs = [u for u in self._inputs if u != v]
        self._outputs = [u for u in self._outputs if u != v]

    def remove_edge(self, s: int, t: int):
        self.graph.remove_edge(s, t)

    def vertices(self) -> Iterator[int]:
        return iter(list(self.graph.nodes))

    def num_vertices(self) -> int:
        return self.graph.number_of_nodes()

    def num_edges(self) -> int:
        return self.graph.number_of_edges()

    def vertex_type(self, v: int) -> VType:
        return self.graph.nodes[v]["ty"]

    def set_vertex_type(self, v: int, ty: VType):
        self.graph.nodes[v]["ty"] = ty

    def phase(self, v: int) -> Fraction:
        return self.graph.nodes[v]["phase"]

    def set_phase(self, v: int, phase: Phase):
        self.graph.nodes[v]["phase"] = mod2(phase)

    def add_to_phase(self, v: int, phase: Phase):
        self.set_phase(v, self.phase(v) + to_fraction(phase))

    def edge_type(self, s: int, t: int) -> EType:
        return self.graph.edges[s, t]["ty"]

    def set_edge_type(self, s: int, t: int, etype: EType):
        self.graph.edges[s, t]["ty"] = etype

    def incident_edges(self, v: int) -> List[Tuple[int, EType]]:
        return [(w, data["ty"]) for w, data in self.graph.adj[v].items()]

    def neighbors(self, v: int) -> List[int]:
        return list(self.graph.adj[v])

    def degree(self, v: int) -> int:
        return self.graph.degree[v]

    def inputs(self) -> List[int]:
        return list(self._inputs)

    def outputs(self) -> List[int]:
        return list(self._outputs)

    def set_inputs(self, inputs: Sequence[int]):
        self._inputs = list(inputs)

    def set_outputs(self, outputs: Sequence[int]):
        self._outputs = list(outputs)

    def scalar_mul_phase(self, phase: Phase):
        self.scalar = self.scalar.mul_phase(phase)

    def scalar_mul_sqrt2_pow(self, p: int):
        self.scalar = self.scalar.mul_sqrt2_pow(p)

    def x_to_z(self):
        """Turn every X spider into a Z spider by toggling its incident edges."""
        for v in self.vertices():
            if self.vertex_type(v) is VType.X:
                self.set_vertex_type(v, VType.Z)
                for w, et in self.incident_edges(v):
                    self.set_edge_type(v, w, et.toggle())

    def copy(self) -> "Graph":
        g = Graph()
        g.graph = self.graph.copy()
        g._next_vertex = self._next_vertex
        g._inputs = list(self._inputs)
        g._outputs = list(self._outputs)
        g.scalar = self.scalar
        return g

    def to_tensor(self, elem=None):
        return graph_to_tensor(self, elem)

    def __repr__(self):
        return (
            f"<Graph {self.num_vertices()} vertices, {self.num_edges()} edges, "
            f"inputs={self._inputs}, outputs={self._outputs}, scalar={self.scalar}>"
        )
