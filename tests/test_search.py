"""Tests for the iterated local search."""

import random

import numpy as np
import pytest
from multialign.network.network import Network
from multialign.search.config import SearchConfig
from multialign.search.iterated import IteratedLocalSearch

from helpers import cycle, random_network, random_networks, recompute_matrix


def sequential_config(**kwargs):
    return SearchConfig(parallel_evaluation=False, **kwargs)


class TestConstruction:
    """Tests for position assignment and initial state."""

    def test_requires_two_networks(self):
        with pytest.raises(ValueError):
            IteratedLocalSearch([cycle(4)])

    def test_rejects_empty_networks(self):
        with pytest.raises(ValueError):
            IteratedLocalSearch([Network(), Network()])

    def test_rejects_bad_perturbation(self):
        with pytest.raises(ValueError):
            IteratedLocalSearch([cycle(4), cycle(4)], perturbation_amount=1.5)

    def test_identical_cycles_start_fully_conserved(self):
        search = IteratedLocalSearch([cycle(4), cycle(4)], config=sequential_config(seed=0))
        assert search.get_best_quality() == 4
        assert search.get_current_quality() == 4

    def test_padding_with_different_sizes(self):
        big = Network.from_edges([("a", "b"), ("b", "c"), ("c", "d"), ("d", "e"), ("e", "f")])
        small = Network.from_edges([("x", "y"), ("y", "z")])
        search = IteratedLocalSearch([big, small], config=sequential_config(seed=0))

        assert search.M == 6
        assert small.num_vertices == 6
        for nodes in search.nodes:
            assert len(nodes) == 6

        fake_slots = [s for s, node in enumerate(search.nodes[1]) if node.is_fake]
        assert len(fake_slots) == 3
        for s in fake_slots:
            assert search.neighbors[1][s] == frozenset()

    def test_placeholders_never_in_matrix(self):
        rng = random.Random(5)
        networks = [random_network(rng, 10), random_network(rng, 6), random_network(rng, 8)]
        search = IteratedLocalSearch(networks, config=sequential_config(seed=5))
        search.run(max_nonimproving=2, max_steps=3)

        # Only real vertices of a network contribute to its counts
        for k in range(search.n):
            for s, node in enumerate(search.nodes[k]):
                if node.is_fake:
                    assert not search.neighbors[k][s]
        assert search.matrix == recompute_matrix(search)

    def test_degree_descending_initial_order(self):
        star = Network.from_edges([("hub", "a"), ("hub", "b"), ("hub", "c"), ("a", "b")])
        search = IteratedLocalSearch([star, cycle(4)], config=sequential_config(seed=0))
        degrees = [star.degree(node) for node in search.nodes[0]]
        assert degrees == sorted(degrees, reverse=True)
        assert search.nodes[0][0].name == "hub"

    def test_min_required_swaps_floor(self):
        search = IteratedLocalSearch([cycle(4), cycle(5)])
        assert search.min_required_swaps == 1

    def test_min_required_swaps_floor_terminates_small_instances(self):
        search = IteratedLocalSearch([cycle(8), cycle(9)], config=sequential_config(seed=4))
        assert cycle(8).num_edges // search.config.min_swap_ratio == 0
        search.step()
        assert search.history[-1]['passes'] >= 1

    def test_inline_evaluation_by_default(self):
        assert not SearchConfig().parallel_evaluation
        search = IteratedLocalSearch([cycle(300), cycle(300)])
        assert not search._use_pool()

    def test_min_required_swaps_scales_with_smallest_network(self):
        search = IteratedLocalSearch(
            [cycle(30), cycle(40)], config=sequential_config(min_swap_ratio=10)
        )
        assert search.min_required_swaps == 3


class TestStep:
    """Tests for single steps."""

    @pytest.mark.parametrize("seed", range(4))
    def test_quality_matches_matrix_after_step(self, seed):
        rng = random.Random(seed)
        search = IteratedLocalSearch(random_networks(rng), config=sequential_config(seed=seed))
        for _ in range(3):
            search.step()
            assert search.matrix == recompute_matrix(search)
            assert search.get_current_quality() == recompute_matrix(search).count_quality()

    @pytest.mark.parametrize("seed", range(4))
    def test_best_quality_is_monotone(self, seed):
        rng = random.Random(seed)
        search = IteratedLocalSearch(random_networks(rng), config=sequential_config(seed=seed))
        previous = search.get_best_quality()
        for _ in range(6):
            improved = search.step()
            best = search.get_best_quality()
            assert best >= previous
            assert best >= search.get_current_quality()
            assert improved == (best > previous)
            previous = best

    def test_reference_network_never_moves(self):
        rng = random.Random(2)
        search = IteratedLocalSearch(random_networks(rng), config=sequential_config(seed=2))
        for _ in range(3):
            search.step()
        assert np.array_equal(search.positions[0], np.arange(search.M))

    def test_positions_remain_permutations(self):
        rng = random.Random(8)
        search = IteratedLocalSearch(random_networks(rng), config=sequential_config(seed=8))
        for _ in range(3):
            search.step()
        for k in range(search.n):
            assert sorted(search.positions[k].tolist()) == list(range(search.M))

    def test_local_search_reaches_local_optimum(self):
        rng = random.Random(4)
        search = IteratedLocalSearch(random_networks(rng), config=sequential_config(seed=4))
        search.step()
        # With a threshold of one swap, the last pass accepted nothing
        for k in range(1, search.n):
            evaluator = search.evaluators[k]
            for j in range(search.M - 1):
                for s in range(j + 1, search.M):
                    assert evaluator.delta(j, s) <= 0

    def test_history_recorded(self):
        search = IteratedLocalSearch([cycle(5), cycle(5)], config=sequential_config(seed=0))
        search.step()
        assert len(search.history) == 1
        assert search.history[0]['step'] == 1
        assert search.history[0]['passes'] >= 1

    def test_zero_perturbation_keeps_optimum(self):
        search = IteratedLocalSearch(
            [cycle(6), cycle(6)], perturbation_amount=0.0, config=sequential_config(seed=0)
        )
        assert not search.step()
        assert search.get_current_quality() == 6


class TestRun:
    """Tests for the control loop."""

    def test_zero_nonimproving_budget_performs_no_steps(self):
        rng = random.Random(1)
        search = IteratedLocalSearch(random_networks(rng), config=sequential_config(seed=1))
        initial = search.get_best_quality()
        search.run(max_nonimproving=0, max_steps=100)
        assert search.num_steps == 0
        assert search.get_best_quality() == initial

    def test_step_budget(self):
        search = IteratedLocalSearch([cycle(6), cycle(6)], config=sequential_config(seed=0))
        search.run(max_nonimproving=100, max_steps=3)
        assert search.num_steps == 3

    def test_stops_after_nonimproving_steps(self):
        search = IteratedLocalSearch([cycle(4), cycle(4)], config=sequential_config(seed=0))
        search.run(max_nonimproving=3, max_steps=100)
        # Already optimal, so no step can improve
        assert search.num_steps == 3
        assert search.get_best_quality() >= 4

    def test_uses_config_budgets_by_default(self):
        config = sequential_config(seed=0, max_nonimproving=2, max_steps=50)
        search = IteratedLocalSearch([cycle(4), cycle(4)], config=config)
        search.run()
        assert search.num_steps == 2

    def test_callback_can_stop_run(self):
        search = IteratedLocalSearch([cycle(6), cycle(6)], config=sequential_config(seed=0))
        calls = []

        def on_step(step, quality, best):
            calls.append(step)
            return step < 2

        search.on_step = on_step
        search.run(max_nonimproving=100, max_steps=100)
        assert calls == [1, 2]

    def test_finds_shared_structure(self):
        # Second network is a relabelled copy of the first
        rng = random.Random(3)
        first = random_network(rng, 12, p=0.3)
        names = [node.name for node in first]
        shuffled = names[:]
        rng.shuffle(shuffled)
        relabel = dict(zip(names, shuffled))
        second = Network.from_edges(
            [(relabel[u.name], relabel[v.name]) for u, v in first.edges],
            vertices=shuffled,
        )
        search = IteratedLocalSearch([first, second], config=sequential_config(seed=3))
        initial = search.get_best_quality()
        search.run(max_nonimproving=10, max_steps=50)
        assert search.get_best_quality() >= initial
        assert search.get_best_quality() <= first.num_edges

    def test_seeded_runs_are_reproducible(self):
        results = []
        for _ in range(2):
            rng = random.Random(21)
            search = IteratedLocalSearch(random_networks(rng), config=sequential_config(seed=21))
            search.run(max_nonimproving=3, max_steps=5)
            results.append((search.history, search.get_alignment().table()))
        assert results[0] == results[1]

    def test_parallel_evaluation_matches_sequential(self):
        tables = []
        for parallel in (False, True):
            rng = random.Random(9)
            networks = random_networks(rng, min_size=10, max_size=14, max_networks=3)
            config = SearchConfig(
                seed=9, parallel_evaluation=parallel, parallel_threshold=2, max_workers=3
            )
            search = IteratedLocalSearch(networks, config=config)
            search.run(max_nonimproving=2, max_steps=4)
            tables.append((search.get_best_quality(), search.get_alignment().table()))
        assert tables[0] == tables[1]


class TestResults:
    """Tests for alignment extraction and accessors."""

    def test_get_alignment_twice_is_identical(self):
        rng = random.Random(6)
        search = IteratedLocalSearch(random_networks(rng), config=sequential_config(seed=6))
        search.run(max_nonimproving=2, max_steps=4)
        first = search.get_alignment()
        second = search.get_alignment()
        assert first == second
        assert first.table() == second.table()

    def test_alignment_reflects_best_quality(self):
        rng = random.Random(7)
        search = IteratedLocalSearch(random_networks(rng), config=sequential_config(seed=7))
        search.run(max_nonimproving=3, max_steps=6)
        alignment = search.get_alignment()
        assert alignment.count_conserved_edges() == search.get_best_quality()

    def test_get_alignment_does_not_touch_working_state(self):
        rng = random.Random(12)
        search = IteratedLocalSearch(random_networks(rng), config=sequential_config(seed=12))
        search.step()
        positions = search.positions.copy()
        search.get_alignment()
        assert np.array_equal(search.positions, positions)
        assert search.matrix == recompute_matrix(search)

    def test_set_perturbation_amount(self):
        search = IteratedLocalSearch([cycle(4), cycle(4)])
        search.set_perturbation_amount(0.5)
        assert search.perturbation_amount == 0.5
        with pytest.raises(ValueError):
            search.set_perturbation_amount(-0.1)

    def test_statistics(self):
        search = IteratedLocalSearch([cycle(4), cycle(4)], config=sequential_config(seed=0))
        search.run(max_nonimproving=1, max_steps=1)
        stats = search.get_statistics()
        assert stats['steps'] == 1
        assert stats['networks'] == 2
        assert stats['size'] == 4
        assert stats['best_quality'] == 4

    def test_verbose_output(self, capsys):
        config = sequential_config(seed=0, verbose=True)
        search = IteratedLocalSearch([cycle(4), cycle(4)], config=config)
        search.run(max_nonimproving=1, max_steps=1)
        out = capsys.readouterr().out
        assert "[ILS] step 1" in out
