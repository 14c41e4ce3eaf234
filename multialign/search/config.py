"""Configuration for the iterated local search."""

from dataclasses import dataclass
from typing import Optional

DEFAULT_PERTURBATION = 0.2
DEFAULT_MAX_NONIMPROVING = 20
DEFAULT_MAX_STEPS = 1000
MIN_SWAP_RATIO = 1000


@dataclass
class SearchConfig:
    """Configuration for the iterated local search."""
    perturbation_amount: float = DEFAULT_PERTURBATION  # Fraction of M swapped per network
    max_nonimproving: int = DEFAULT_MAX_NONIMPROVING
    max_steps: int = DEFAULT_MAX_STEPS
    # Local search repeats while a pass accepts >= max(1, min_edges // min_swap_ratio) swaps
    min_swap_ratio: int = MIN_SWAP_RATIO
    seed: Optional[int] = None
    # Thread-pool candidate scoring keeps reads and the applied swap in separate
    # phases, but under the GIL it adds overhead rather than speed; off by default
    parallel_evaluation: bool = False
    max_workers: Optional[int] = None
    parallel_threshold: int = 256  # Fewer candidates than this are evaluated inline
    check_invariants: bool = True
    verbose: bool = False

    def __post_init__(self):
        validate_perturbation_amount(self.perturbation_amount)
        if self.max_nonimproving < 0:
            raise ValueError(f"max_nonimproving must be >= 0, got {self.max_nonimproving}")
        if self.max_steps < 0:
            raise ValueError(f"max_steps must be >= 0, got {self.max_steps}")
        if self.min_swap_ratio < 1:
            raise ValueError(f"min_swap_ratio must be >= 1, got {self.min_swap_ratio}")
        if self.max_workers is not None and self.max_workers < 1:
            self.max_workers = None
        if self.parallel_threshold < 2:
            self.parallel_threshold = 2


def validate_perturbation_amount(amount: float) -> float:
    if not 0.0 <= amount <= 1.0:
        raise ValueError(f"Perturbation amount must be in [0, 1], got {amount}")
    return amount
