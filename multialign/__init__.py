"""Multiple network alignment by iterated local search."""

from .network import Network, Node, NetworkReader, NetworkWriter
from .search import IteratedLocalSearch, SearchConfig, ConservationMatrix, InvariantViolation
from .alignment import Alignment

__all__ = [
    "Network",
    "Node",
    "NetworkReader",
    "NetworkWriter",
    "IteratedLocalSearch",
    "SearchConfig",
    "ConservationMatrix",
    "InvariantViolation",
    "Alignment",
]
