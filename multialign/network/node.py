"""Vertex identity."""

from dataclasses import dataclass

FAKE_PREFIX = "$fake$"


@dataclass(frozen=True)
class Node:
    """A vertex of a network.

    Only identity is stored here. Positions are owned by the search, which
    keeps them in its own arrays.
    """
    name: str
    is_fake: bool = False

    @classmethod
    def fake(cls, fid: int) -> "Node":
        """Create a placeholder vertex used to pad a network."""
        return cls(f"{FAKE_PREFIX}{fid}", is_fake=True)

    def __str__(self) -> str:
        return self.name
