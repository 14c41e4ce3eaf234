"""Iterated local search over vertex positions of several networks."""

import math
import os
import random
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np

from ..network.network import Network
from ..network.node import Node
from ..alignment.alignment import Alignment
from .config import SearchConfig, validate_perturbation_amount
from .matrix import ConservationMatrix
from .moves import MoveEvaluator


class IteratedLocalSearch:
    """
    Heuristic multiple network aligner.

    Every network is padded with placeholder vertices to a common size M and
    each vertex gets a position in [0, M). Network 0 is the fixed reference;
    the others are permuted by perturbation followed by best-improvement
    hill climbing until the search stagnates. The best configuration seen
    is kept as a snapshot and returned by :meth:`get_alignment`.
    """

    def __init__(
        self,
        networks: Sequence[Network],
        perturbation_amount: Optional[float] = None,
        config: Optional[SearchConfig] = None,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize the search.

        Args:
            networks: Networks to align (at least two). They are padded in place.
            perturbation_amount: Overrides config.perturbation_amount if given
            config: Search configuration
            rng: Random source; defaults to random.Random(config.seed)
        """
        if len(networks) < 2:
            raise ValueError(f"Need at least two networks for alignment, got {len(networks)}")

        self.config = config or SearchConfig()
        self.perturbation_amount = validate_perturbation_amount(
            self.config.perturbation_amount if perturbation_amount is None else perturbation_amount
        )
        self.rand = rng if rng is not None else random.Random(self.config.seed)

        self.networks: List[Network] = list(networks)
        self.n = len(self.networks)
        self.M = max(network.num_vertices for network in self.networks)
        if self.M == 0:
            raise ValueError("All networks are empty")

        # The swap budget is bounded by the smallest network's edge count
        min_edges = min(network.num_edges for network in self.networks)
        self.min_required_swaps = max(1, min_edges // self.config.min_swap_ratio)

        fid = 0
        for network in self.networks:
            fid = network.pad(self.M, fid)

        # Slots: degree-descending vertex order, fixed for the lifetime of the search
        self.nodes: List[List[Node]] = []
        self.neighbors: List[List[frozenset]] = []
        edge_positions = []
        for network in self.networks:
            nodes = sorted(network.vertices, key=network.degree, reverse=True)
            slot_of = {node: slot for slot, node in enumerate(nodes)}
            self.nodes.append(nodes)
            self.neighbors.append([
                frozenset(slot_of[w] for w in network.neighbors(node)) for node in nodes
            ])
            edge_positions.append(np.array(
                [(slot_of[a], slot_of[b]) for a, b in network.edges],
                dtype=np.intp,
            ).reshape(-1, 2))

        # Slot s of network k sits at positions[k, s]; initially position == slot
        self.positions = np.tile(np.arange(self.M, dtype=np.intp), (self.n, 1))
        self.matrix = ConservationMatrix.from_edges(
            self.M, self.n, edge_positions, check_invariants=self.config.check_invariants
        )

        self.num_workers = self.config.max_workers or min(32, (os.cpu_count() or 1) + 4)

        self.evaluators = [
            MoveEvaluator(self.matrix, self.positions[k], self.neighbors[k])
            for k in range(self.n)
        ]

        self.best_positions = self.positions.copy()
        self.quality = self.matrix.count_quality()
        self.best_quality = self.quality

        # State
        self.num_steps = 0
        self.history: List[Dict] = []

        # Callbacks
        self.on_step: Optional[Callable[[int, int, int], Optional[bool]]] = None
        self.on_new_best: Optional[Callable[[int], None]] = None

    def _log(self, msg: str) -> None:
        if self.config.verbose:
            print(f"[ILS] {msg}")

    def run(self, max_nonimproving: Optional[int] = None, max_steps: Optional[int] = None) -> int:
        """
        Repeat steps until the search stagnates or the step budget is spent.

        Args:
            max_nonimproving: Stop after this many consecutive non-improving steps
            max_steps: Stop after this many steps in total

        Returns:
            The best quality found
        """
        if max_nonimproving is None:
            max_nonimproving = self.config.max_nonimproving
        if max_steps is None:
            max_steps = self.config.max_steps

        nonimproving = 0
        num_steps = 0
        while nonimproving < max_nonimproving and num_steps < max_steps:
            nonimproving += 1
            if self.step():
                nonimproving = 0
            num_steps += 1

            self._log(f"step {num_steps}: current {self.quality} edges, best {self.best_quality} edges")

            if self.on_step:
                should_continue = self.on_step(num_steps, self.quality, self.best_quality)
                if should_continue is False:
                    break

        return self.best_quality

    def step(self) -> bool:
        """Perturb, run local search to convergence and record the result.

        Returns True if the quality improved on the best seen so far.
        """
        self.perturb()

        if self._use_pool():
            with ThreadPoolExecutor(max_workers=self.num_workers) as executor:
                passes, swaps = self.local_search(executor)
        else:
            passes, swaps = self.local_search()

        self.num_steps += 1
        self.quality = self.matrix.count_quality()
        improved = self.quality > self.best_quality
        if improved:
            self.best_quality = self.quality
            np.copyto(self.best_positions, self.positions)
            if self.on_new_best:
                self.on_new_best(self.best_quality)

        self.history.append({
            'step': self.num_steps,
            'quality': self.quality,
            'best_quality': self.best_quality,
            'passes': passes,
            'swaps': swaps,
            'improved': improved,
        })
        return improved

    def perturb(self) -> None:
        """Apply round(M * perturbation_amount) random swaps to every non-reference network."""
        if self.M < 2:
            return
        count = int(math.floor(self.M * self.perturbation_amount + 0.5))
        for k in range(1, self.n):
            evaluator = self.evaluators[k]
            for _ in range(count):
                j = self.rand.randrange(self.M)
                s = self.rand.randrange(self.M - 1)
                if s >= j:
                    s += 1
                evaluator.swap(j, s)

    def local_search(self, executor: Optional[Executor] = None) -> Tuple[int, int]:
        """
        Best-improvement hill climbing over all non-reference networks.

        Passes repeat while the number of accepted swaps in the last pass is
        at least ``min_required_swaps``, which is ``min_edges // min_swap_ratio``
        floored at 1. A threshold of 0 would never be undercut, so small
        networks stop at the first pass that accepts no swap.

        Returns:
            (number of passes, total accepted swaps)
        """
        num_passes = 0
        total_swaps = 0
        while True:
            num_swaps = 0
            for k in range(1, self.n):
                evaluator = self.evaluators[k]
                for j in range(self.M - 1):
                    best_delta, best = self._best_partner(evaluator, j, executor)
                    if best_delta > 0:
                        evaluator.swap(j, best)
                        num_swaps += 1
            num_passes += 1
            total_swaps += num_swaps
            self._log(f"  pass {num_passes}: {num_swaps} swaps")

            if num_swaps < self.min_required_swaps:
                break
        return num_passes, total_swaps

    def _best_partner(
        self, evaluator: MoveEvaluator, j: int, executor: Optional[Executor] = None
    ) -> Tuple[int, int]:
        """Find the slot in (j, M) whose swap with j has the largest delta.

        Ties go to the lowest slot, so the result does not depend on how
        candidates are split between workers.
        """
        start, stop = j + 1, self.M
        if executor is None or stop - start < self.config.parallel_threshold:
            return _best_in_range(evaluator, j, start, stop)

        bounds = np.linspace(start, stop, self.num_workers + 1, dtype=int)
        ranges = [(a, b) for a, b in zip(bounds[:-1], bounds[1:]) if b > a]
        results = executor.map(lambda r: _best_in_range(evaluator, j, r[0], r[1]), ranges)

        best_delta, best = None, -1
        for chunk_delta, chunk_best in results:
            if best_delta is None or chunk_delta > best_delta:
                best_delta, best = chunk_delta, chunk_best
        return best_delta, best

    def _use_pool(self) -> bool:
        return self.config.parallel_evaluation and self.M - 1 >= self.config.parallel_threshold

    def get_alignment(self) -> Alignment:
        """Materialize the best snapshot as per-network vertex sequences ordered by position."""
        rows = []
        for k in range(self.n):
            order = np.argsort(self.best_positions[k], kind="stable")
            rows.append([self.nodes[k][s] for s in order])
        return Alignment(rows, self.networks)

    def get_current_quality(self) -> int:
        return self.quality

    def get_best_quality(self) -> int:
        return self.best_quality

    def set_perturbation_amount(self, amount: float) -> None:
        self.perturbation_amount = validate_perturbation_amount(amount)

    def get_statistics(self) -> Dict:
        """Get statistics about the search run."""
        return {
            'networks': self.n,
            'size': self.M,
            'steps': self.num_steps,
            'current_quality': self.quality,
            'best_quality': self.best_quality,
            'min_required_swaps': self.min_required_swaps,
            'history': self.history,
        }


def _best_in_range(evaluator: MoveEvaluator, j: int, start: int, stop: int) -> Tuple[int, int]:
    """First maximal delta for swapping slot j with a slot in [start, stop)."""
    best_delta, best = None, -1
    for s in range(start, stop):
        d = evaluator.delta(j, s)
        if best_delta is None or d > best_delta:
            best_delta, best = d, s
    return best_delta, best
