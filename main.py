#!/usr/bin/env python3
"""
multialign - Main Entry Point

Aligns two or more networks so that the number of edges conserved in all of
them is maximized, using iterated local search.
"""

import argparse
import sys

from multialign.search.config import (
    DEFAULT_MAX_NONIMPROVING,
    DEFAULT_MAX_STEPS,
    DEFAULT_PERTURBATION,
)

DEFAULT_EXCEPTIONS = 0


def read_networks(paths):
    from multialign.network.io import NetworkReader

    return [NetworkReader.read(path) for path in paths]


def run_align(args):
    """Align networks and write the requested outputs."""
    from multialign.network.io import NetworkWriter
    from multialign.search.config import SearchConfig
    from multialign.search.iterated import IteratedLocalSearch

    if len(args.networks) < 2:
        print("Error: Needs at least two networks for alignment.")
        return 1

    try:
        networks = read_networks(args.networks)
        config = SearchConfig(
            perturbation_amount=args.perturbation,
            max_nonimproving=args.max_nonimproving,
            max_steps=args.max_steps,
            seed=args.seed,
            parallel_evaluation=args.parallel,
            max_workers=args.workers,
            verbose=args.verbose,
        )
        search = IteratedLocalSearch(networks, config=config)
    except (OSError, ValueError) as e:
        print(f"Error: {e}")
        return 1

    print("=" * 60)
    print("  multialign - iterated local search")
    print("=" * 60)
    for network in networks:
        print(f"  {network.name}: {network.num_real_vertices} vertices, {network.num_edges} edges")
    print(f"Perturbation: {config.perturbation_amount}")
    print(f"Max non-improving steps: {config.max_nonimproving}")
    print(f"Initial conserved edges: {search.get_best_quality()}")
    print("=" * 60)

    search.run(config.max_nonimproving, config.max_steps)
    alignment = search.get_alignment()
    print(f"Best conserved edges: {search.get_best_quality()} after {search.num_steps} steps")

    try:
        if args.output:
            alignment.write(args.output)
            print(f"Alignment written to {args.output}")

        if args.network:
            conserved = alignment.build_network(
                exceptions=args.exceptions,
                connected=args.connected,
                remove_exception_leaves=args.remove_exception_leaves,
            )
            NetworkWriter.write(conserved, args.network)
            print(f"Conserved network ({conserved.num_vertices} vertices, "
                  f"{conserved.num_edges} edges) written to {args.network}")

        if args.consensus_matrix:
            alignment.write_consensus_matrix(args.consensus_matrix)
            print(f"Consensus matrix written to {args.consensus_matrix}")
    except (OSError, ValueError) as e:
        print(f"Error: {e}")
        return 1

    return 0


def run_info(args):
    """Print size statistics for network files."""
    try:
        networks = read_networks(args.networks)
    except (OSError, ValueError) as e:
        print(f"Error: {e}")
        return 1

    for network in networks:
        degrees = [network.degree(node) for node in network]
        max_degree = max(degrees) if degrees else 0
        print(f"  {network.name:20s} - {network.num_vertices} vertices, "
              f"{network.num_edges} edges, max degree {max_degree}")
    return 0


def build_parser():
    parser = argparse.ArgumentParser(
        description="multialign - Multiple network alignment by iterated local search"
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Align command
    align_parser = subparsers.add_parser("align", help="Align two or more networks")
    align_parser.add_argument("networks", nargs="+", help="Edge-list network files")
    align_parser.add_argument(
        "-i", "--max-nonimproving",
        type=int,
        default=DEFAULT_MAX_NONIMPROVING,
        help=f"Stop after this number of non-improving steps (default: {DEFAULT_MAX_NONIMPROVING})"
    )
    align_parser.add_argument(
        "-s", "--max-steps",
        type=int,
        default=DEFAULT_MAX_STEPS,
        help=f"Stop after this number of steps (default: {DEFAULT_MAX_STEPS})"
    )
    align_parser.add_argument(
        "-p", "--perturbation",
        type=float,
        default=DEFAULT_PERTURBATION,
        help=f"Ratio of nodes to swap during perturbation (default: {DEFAULT_PERTURBATION})"
    )
    align_parser.add_argument(
        "-e", "--exceptions",
        type=int,
        default=DEFAULT_EXCEPTIONS,
        help=f"Number of exceptions allowed per edge in the conserved network (default: {DEFAULT_EXCEPTIONS})"
    )
    align_parser.add_argument(
        "-c", "--connected",
        action="store_true",
        help="Only keep the largest connected part of the conserved network"
    )
    align_parser.add_argument(
        "--remove-exception-leaves",
        action="store_true",
        help="Remove leaves connected by an exception edge from the conserved network"
    )
    align_parser.add_argument("-o", "--output", help="Write the alignment table to this file")
    align_parser.add_argument("-n", "--network", help="Write the conserved network to this file")
    align_parser.add_argument("--consensus-matrix", help="Write the consensus matrix to this file")
    align_parser.add_argument("--seed", type=int, default=None, help="Random seed")
    align_parser.add_argument("-w", "--workers", type=int, default=None, help="Worker threads")
    align_parser.add_argument(
        "--parallel",
        action="store_true",
        help="Score candidate swaps on a thread pool"
    )
    align_parser.add_argument("-v", "--verbose", action="store_true", help="Print search progress")

    # Info command
    info_parser = subparsers.add_parser("info", help="Show network statistics")
    info_parser.add_argument("networks", nargs="+", help="Edge-list network files")

    return parser


def main(argv=None):
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "align":
        return run_align(args)
    elif args.command == "info":
        return run_info(args)

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
