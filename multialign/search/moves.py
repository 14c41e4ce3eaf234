"""Swap evaluation and application for a single network."""

from typing import List, FrozenSet

import numpy as np

from .matrix import ConservationMatrix


class MoveEvaluator:
    """
    Evaluates and applies position swaps between two vertices of one network.

    Vertices are addressed by slot, the fixed index of a vertex in the
    network's vertex list. ``positions`` is the network's row of the
    search's position array and is updated in place by :meth:`swap`.

    Only the cells touched by the symmetric difference of the two neighbor
    sets change under a swap: a common neighbor keeps an edge at both
    positions, and the edge between the two vertices stays on the same pair.
    """

    def __init__(
        self,
        matrix: ConservationMatrix,
        positions: np.ndarray,
        neighbors: List[FrozenSet[int]],
    ):
        self.matrix = matrix
        self.positions = positions
        self.neighbors = neighbors

    def delta(self, u: int, v: int) -> int:
        """
        Change in the matrix potential (sum of squared counts) if u and v swapped.

        Moving an edge out of a cell holding c lowers the potential by 2c - 1,
        moving it into a cell holding c raises it by 2c + 1. Does not mutate.
        """
        cells = self.matrix.cells
        positions = self.positions
        i = positions[u]
        j = positions[v]
        nu = self.neighbors[u]
        nv = self.neighbors[v]

        delta = 0
        for w in nu - nv:
            if w != v:
                l = positions[w]
                delta -= 2 * int(cells[i, l]) - 1
                delta += 2 * int(cells[j, l]) + 1

        for w in nv - nu:
            if w != u:
                l = positions[w]
                delta -= 2 * int(cells[j, l]) - 1
                delta += 2 * int(cells[i, l]) + 1

        return delta

    def quality_delta(self, u: int, v: int) -> int:
        """Exact change in quality (fully conserved pairs) if u and v swapped."""
        cells = self.matrix.cells
        n = self.matrix.num_networks
        positions = self.positions
        i = positions[u]
        j = positions[v]
        nu = self.neighbors[u]
        nv = self.neighbors[v]

        delta = 0
        for src, dst, moving, partner in ((i, j, nu - nv, v), (j, i, nv - nu, u)):
            for w in moving:
                if w == partner:
                    continue
                l = positions[w]
                if cells[src, l] == n:
                    delta -= 1
                if cells[dst, l] + 1 == n:
                    delta += 1
        return delta

    def swap(self, u: int, v: int) -> None:
        """Exchange the positions of u and v, keeping the matrix consistent."""
        matrix = self.matrix
        positions = self.positions
        i = int(positions[u])
        j = int(positions[v])
        nu = self.neighbors[u]
        nv = self.neighbors[v]

        for w in nu - nv:
            if w != v:
                l = int(positions[w])
                matrix.decrement(i, l)
                matrix.increment(j, l)

        for w in nv - nu:
            if w != u:
                l = int(positions[w])
                matrix.decrement(j, l)
                matrix.increment(i, l)

        positions[u] = j
        positions[v] = i
