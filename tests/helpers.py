"""Shared builders for the test suite."""

import random

import numpy as np
from multialign.network.network import Network
from multialign.search.matrix import ConservationMatrix


def random_network(rng: random.Random, num_vertices: int, p: float = 0.4, name: str = "") -> Network:
    """Erdos-Renyi style network over vertices v0..v{num_vertices-1}."""
    names = [f"v{i}" for i in range(num_vertices)]
    edges = [
        (names[i], names[j])
        for i in range(num_vertices)
        for j in range(i + 1, num_vertices)
        if rng.random() < p
    ]
    return Network.from_edges(edges, name=name, vertices=names)


def random_networks(rng: random.Random, min_size: int = 6, max_size: int = 10, max_networks: int = 4):
    n = rng.randint(2, max_networks)
    return [random_network(rng, rng.randint(min_size, max_size), name=f"g{k}") for k in range(n)]


def cycle(num_vertices: int, name: str = "") -> Network:
    names = [str(i) for i in range(num_vertices)]
    return Network.from_edges(
        [(names[i], names[(i + 1) % num_vertices]) for i in range(num_vertices)], name=name
    )


def recompute_matrix(search) -> ConservationMatrix:
    """Conservation matrix rebuilt from scratch for the search's current positions."""
    edge_positions = []
    for k, network in enumerate(search.networks):
        slot_of = {node: s for s, node in enumerate(search.nodes[k])}
        edge_positions.append(np.array(
            [(search.positions[k, slot_of[a]], search.positions[k, slot_of[b]]) for a, b in network.edges],
            dtype=int,
        ).reshape(-1, 2))
    return ConservationMatrix.from_edges(search.M, search.n, edge_positions)
