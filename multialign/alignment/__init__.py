"""Alignment results and conserved subnetwork extraction."""

from .alignment import Alignment
from .conserved import build_conserved_network, conservation_counts, consensus_matrix

__all__ = [
    "Alignment",
    "build_conserved_network",
    "conservation_counts",
    "consensus_matrix",
]
