"""Network representation and edge-list I/O."""

from .node import Node
from .network import Network
from .io import NetworkReader, NetworkWriter

__all__ = [
    "Node",
    "Network",
    "NetworkReader",
    "NetworkWriter",
]
