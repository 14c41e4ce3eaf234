"""Iterated local search for multiple network alignment."""

from .config import SearchConfig
from .matrix import ConservationMatrix, InvariantViolation
from .moves import MoveEvaluator
from .iterated import IteratedLocalSearch

__all__ = [
    "SearchConfig",
    "ConservationMatrix",
    "InvariantViolation",
    "MoveEvaluator",
    "IteratedLocalSearch",
]
