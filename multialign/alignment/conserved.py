"""Conserved subnetwork and consensus matrix derived from an alignment."""

from typing import List, Sequence

import networkx as nx
import numpy as np

from ..network.network import Network
from ..network.node import Node


def conservation_counts(rows: Sequence[Sequence[Node]], networks: Sequence[Network]) -> np.ndarray:
    """
    Count, for every position pair, the networks with an edge there.

    Args:
        rows: Per network, its vertices ordered by position
        networks: The aligned networks, in the same order

    Returns:
        Symmetric (M, M) integer array
    """
    size = len(rows[0]) if rows else 0
    counts = np.zeros((size, size), dtype=np.int32)
    for nodes, network in zip(rows, networks):
        position = {node: p for p, node in enumerate(nodes)}
        for u, v in network.edges:
            i, j = position[u], position[v]
            counts[i, j] += 1
            counts[j, i] += 1
    return counts


def consensus_matrix(counts: np.ndarray, num_networks: int) -> np.ndarray:
    """Fraction of networks carrying each position pair."""
    return counts.astype(float) / num_networks


PLACEHOLDER_LABEL = "-"


def position_label(nodes: Sequence[Node]) -> str:
    """Name of an aligned position: one entry per network joined by '|', '-' for placeholders."""
    return "|".join(PLACEHOLDER_LABEL if node.is_fake else node.name for node in nodes)


def position_labels(rows: Sequence[Sequence[Node]]) -> List[str]:
    """Distinct vertex names for every position of an alignment.

    A label already taken by an earlier position gets the position index
    appended, so two positions never share a conserved-network vertex.
    """
    labels: List[str] = []
    seen = set()
    for p, column in enumerate(zip(*rows)):
        label = position_label(column)
        while label in seen:
            label = f"{label}#{p}"
        seen.add(label)
        labels.append(label)
    return labels


def build_conserved_network(
    rows: Sequence[Sequence[Node]],
    networks: Sequence[Network],
    exceptions: int = 0,
    connected: bool = False,
    remove_exception_leaves: bool = False,
) -> Network:
    """
    Build the network of edges conserved under an alignment.

    A position pair becomes an edge when at least ``n - exceptions`` networks
    carry it. Each edge stores its count as the ``conservation`` attribute.

    Args:
        rows: Per network, its vertices ordered by position
        networks: The aligned networks
        exceptions: Number of networks allowed to miss an edge
        connected: Keep only the largest connected component
        remove_exception_leaves: Drop degree-1 vertices whose only edge is
            not present in every network

    Returns:
        The conserved network; vertices are named by position_labels() and
        carry their alignment position as the ``position`` attribute
    """
    n = len(networks)
    if not 0 <= exceptions < n:
        raise ValueError(f"exceptions must be in [0, {n - 1}], got {exceptions}")

    counts = conservation_counts(rows, networks)
    threshold = n - exceptions

    labels = position_labels(rows)
    result = Network("conserved")
    rows_idx, cols_idx = np.nonzero(np.triu(counts, k=1) >= threshold)
    for i, j in zip(rows_idx.tolist(), cols_idx.tolist()):
        u = result.add_vertex(labels[i])
        v = result.add_vertex(labels[j])
        result.graph.nodes[u]["position"] = i
        result.graph.nodes[v]["position"] = j
        result.add_edge(u, v)
        result.graph.edges[u, v]["conservation"] = int(counts[i, j])

    if remove_exception_leaves:
        leaves: List[Node] = []
        for node in result:
            if result.degree(node) != 1:
                continue
            (other,) = result.neighbors(node)
            if result.graph.edges[node, other]["conservation"] < n:
                leaves.append(node)
        result.remove_vertices(leaves)

    if connected and result.num_vertices > 0:
        largest = max(nx.connected_components(result.graph), key=len)
        result.remove_vertices([node for node in result if node not in largest])

    return result
