"""Conservation matrix: per position pair, the number of networks with an edge there."""

from typing import Sequence

import numpy as np


class InvariantViolation(AssertionError):
    """A conservation count would leave [0, n]. Indicates a bookkeeping bug."""


class ConservationMatrix:
    """
    Symmetric M x M table of edge agreement counts.

    Cell (i, j) holds the number of networks in which the vertices at
    positions i and j are adjacent. The diagonal stays zero. The table is
    built once and then kept up to date one cell pair at a time.
    """

    def __init__(self, size: int, num_networks: int, check_invariants: bool = True):
        self.size = size
        self.num_networks = num_networks
        self.check_invariants = check_invariants
        self.cells = np.zeros((size, size), dtype=np.int32)

    @classmethod
    def from_edges(
        cls,
        size: int,
        num_networks: int,
        edge_positions: Sequence[np.ndarray],
        check_invariants: bool = True,
    ) -> "ConservationMatrix":
        """
        Build a matrix from the edges of every network.

        Args:
            size: Number of positions M
            num_networks: Number of networks n
            edge_positions: One (E_k, 2) integer array per network holding the
                positions of each edge's endpoints
            check_invariants: Raise InvariantViolation on out-of-range counts
        """
        matrix = cls(size, num_networks, check_invariants)
        for positions in edge_positions:
            positions = np.asarray(positions, dtype=np.intp).reshape(-1, 2)
            if len(positions) == 0:
                continue
            rows, cols = positions[:, 0], positions[:, 1]
            if np.any(rows == cols):
                raise InvariantViolation("Edge endpoints share a position")
            np.add.at(matrix.cells, (rows, cols), 1)
            np.add.at(matrix.cells, (cols, rows), 1)
        if check_invariants and matrix.cells.size and matrix.cells.max() > num_networks:
            raise InvariantViolation("Initial counts exceed the number of networks")
        return matrix

    def _check_index(self, i: int, j: int) -> None:
        if not (0 <= i < self.size and 0 <= j < self.size):
            raise IndexError(f"Position pair ({i}, {j}) out of range for size {self.size}")

    def get(self, i: int, j: int) -> int:
        self._check_index(i, j)
        return int(self.cells[i, j])

    def increment(self, i: int, j: int) -> None:
        if self.check_invariants:
            self._check_index(i, j)
            if i == j or self.cells[i, j] >= self.num_networks:
                raise InvariantViolation(f"Cannot increment cell ({i}, {j}) = {self.cells[i, j]}")
        self.cells[i, j] += 1
        self.cells[j, i] += 1

    def decrement(self, i: int, j: int) -> None:
        if self.check_invariants:
            self._check_index(i, j)
            if i == j or self.cells[i, j] <= 0:
                raise InvariantViolation(f"Cannot decrement cell ({i}, {j}) = {self.cells[i, j]}")
        self.cells[i, j] -= 1
        self.cells[j, i] -= 1

    def count_quality(self) -> int:
        """Number of position pairs i < j conserved in every network."""
        upper = np.triu(self.cells, k=1)
        return int(np.count_nonzero(upper == self.num_networks))

    def potential(self) -> int:
        """Sum of squared counts over pairs i < j. Swap deltas measure this value."""
        upper = np.triu(self.cells, k=1).astype(np.int64)
        return int(np.sum(upper * upper))

    def copy(self) -> "ConservationMatrix":
        new = ConservationMatrix(self.size, self.num_networks, self.check_invariants)
        new.cells = self.cells.copy()
        return new

    def __eq__(self, other) -> bool:
        if not isinstance(other, ConservationMatrix):
            return NotImplemented
        return self.num_networks == other.num_networks and np.array_equal(self.cells, other.cells)

    def __repr__(self) -> str:
        return f"ConservationMatrix(size={self.size}, networks={self.num_networks})"
