"""Alignment of several networks by shared positions."""

from pathlib import Path
from typing import List, Sequence, Union

import numpy as np

from ..network.network import Network
from ..network.node import Node
from .conserved import build_conserved_network, conservation_counts, consensus_matrix


class Alignment:
    """
    Per-network vertex sequences ordered by position.

    Vertices sharing an index across the sequences are aligned to each other.
    """

    def __init__(self, rows: Sequence[Sequence[Node]], networks: Sequence[Network]):
        if len(rows) != len(networks):
            raise ValueError(f"Got {len(rows)} vertex sequences for {len(networks)} networks")
        sizes = {len(nodes) for nodes in rows}
        if len(sizes) > 1:
            raise ValueError(f"Vertex sequences differ in length: {sorted(sizes)}")
        self.rows: List[List[Node]] = [list(nodes) for nodes in rows]
        self.networks = list(networks)

    @property
    def num_networks(self) -> int:
        return len(self.rows)

    @property
    def size(self) -> int:
        return len(self.rows[0]) if self.rows else 0

    def get_alignment(self) -> List[List[Node]]:
        return self.rows

    def position(self, j: int) -> List[Node]:
        """Vertices aligned at position j, one per network."""
        return [nodes[j] for nodes in self.rows]

    def table(self) -> List[List[str]]:
        """One row per position with the names of its real vertices."""
        return [
            [node.name for node in self.position(j) if not node.is_fake]
            for j in range(self.size)
        ]

    def format_table(self) -> str:
        return "".join("\t".join(row) + "\n" for row in self.table())

    def write(self, path: Union[str, Path]) -> None:
        """Write the alignment table, tab-separated, one line per position."""
        Path(path).write_text(self.format_table())

    def conservation_counts(self) -> np.ndarray:
        return conservation_counts(self.rows, self.networks)

    def count_conserved_edges(self, exceptions: int = 0) -> int:
        """Number of position pairs carried by at least n - exceptions networks."""
        counts = self.conservation_counts()
        return int(np.count_nonzero(np.triu(counts, k=1) >= self.num_networks - exceptions))

    def build_network(
        self,
        exceptions: int = 0,
        connected: bool = False,
        remove_exception_leaves: bool = False,
    ) -> Network:
        """Build the conserved subnetwork. See build_conserved_network()."""
        return build_conserved_network(
            self.rows, self.networks, exceptions, connected, remove_exception_leaves
        )

    def consensus_matrix(self) -> np.ndarray:
        return consensus_matrix(self.conservation_counts(), self.num_networks)

    def write_consensus_matrix(self, path: Union[str, Path]) -> None:
        np.savetxt(path, self.consensus_matrix(), fmt="%.4f", delimiter="\t")

    def __eq__(self, other) -> bool:
        if not isinstance(other, Alignment):
            return NotImplemented
        return self.rows == other.rows

    def __repr__(self) -> str:
        return f"Alignment(networks={self.num_networks}, size={self.size})"
