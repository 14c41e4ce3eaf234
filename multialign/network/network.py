"""Undirected network backed by networkx."""

from typing import Dict, FrozenSet, Iterator, List, Optional, Tuple

import networkx as nx

from .node import Node


class Network:
    """An undirected simple network of :class:`Node` vertices.

    Vertices are kept in insertion order. Neighbor sets are cached and the
    cache is dropped whenever the network is modified.
    """

    def __init__(self, name: str = ""):
        self.name = name
        self.graph = nx.Graph()
        self._by_name: Dict[str, Node] = {}
        self._neighbor_index: Dict[Node, FrozenSet[Node]] = {}

    @classmethod
    def from_edges(cls, edges, name: str = "", vertices=()) -> "Network":
        """Build a network from (name, name) pairs and optional isolated vertex names."""
        network = cls(name)
        for vertex in vertices:
            network.add_vertex(vertex)
        for a, b in edges:
            network.add_edge(a, b)
        return network

    def add_vertex(self, vertex) -> Node:
        """Add a vertex by name or as a :class:`Node`; existing vertices are returned."""
        node = vertex if isinstance(vertex, Node) else Node(str(vertex))
        existing = self._by_name.get(node.name)
        if existing is not None:
            return existing
        self._by_name[node.name] = node
        self.graph.add_node(node)
        self._neighbor_index.clear()
        return node

    def add_edge(self, a, b) -> bool:
        """Add an undirected edge.

        Self loops are ignored. Returns True if a new edge was added.
        """
        u = self.add_vertex(a)
        v = self.add_vertex(b)
        if u == v or self.graph.has_edge(u, v):
            return False
        self.graph.add_edge(u, v)
        self._neighbor_index.clear()
        return True

    def remove_vertices(self, nodes) -> None:
        """Remove vertices and their incident edges."""
        for node in list(nodes):
            if node in self.graph:
                self.graph.remove_node(node)
                self._by_name.pop(node.name, None)
        self._neighbor_index.clear()

    def pad(self, size: int, next_fid: int = 0) -> int:
        """Add placeholder vertices until the network has ``size`` vertices.

        Returns the next unused placeholder id so ids stay unique across networks.
        """
        while self.num_vertices < size:
            self.add_vertex(Node.fake(next_fid))
            next_fid += 1
        return next_fid

    def get_node(self, name: str) -> Optional[Node]:
        return self._by_name.get(name)

    def has_edge(self, u: Node, v: Node) -> bool:
        return self.graph.has_edge(u, v)

    def degree(self, node: Node) -> int:
        return self.graph.degree(node)

    def neighbors(self, node: Node) -> FrozenSet[Node]:
        """Neighbor set of a vertex."""
        cached = self._neighbor_index.get(node)
        if cached is None:
            cached = frozenset(self.graph.neighbors(node))
            self._neighbor_index[node] = cached
        return cached

    @property
    def vertices(self) -> List[Node]:
        return list(self.graph.nodes)

    @property
    def edges(self) -> List[Tuple[Node, Node]]:
        return list(self.graph.edges)

    @property
    def num_vertices(self) -> int:
        return self.graph.number_of_nodes()

    @property
    def num_edges(self) -> int:
        return self.graph.number_of_edges()

    @property
    def num_real_vertices(self) -> int:
        return sum(1 for node in self.graph.nodes if not node.is_fake)

    def __iter__(self) -> Iterator[Node]:
        return iter(self.graph.nodes)

    def __len__(self) -> int:
        return self.num_vertices

    def __contains__(self, item) -> bool:
        if isinstance(item, Node):
            return item in self.graph
        return str(item) in self._by_name

    def __repr__(self) -> str:
        return f"Network({self.name!r}, vertices={self.num_vertices}, edges={self.num_edges})"
