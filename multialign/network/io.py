"""Edge-list reading and writing.

Format: one edge per line as two whitespace-separated vertex names. A line
with a single name declares an isolated vertex. Blank lines and lines
starting with ``#`` are skipped.
"""

from pathlib import Path
from typing import Iterable, Optional, Union

from .network import Network


class NetworkReader:
    """Reader for edge-list network files."""

    @staticmethod
    def read(path: Union[str, Path], name: Optional[str] = None) -> Network:
        """
        Read a network from an edge-list file.

        Args:
            path: File to read
            name: Network name (defaults to the file stem)

        Returns:
            The parsed Network

        Raises:
            ValueError: If a line has more than two fields
        """
        path = Path(path)
        with path.open() as f:
            return NetworkReader.parse(f, name=name if name is not None else path.stem)

    @staticmethod
    def parse(lines: Iterable[str], name: str = "") -> Network:
        """Parse edge-list lines into a network."""
        network = Network(name)
        for line_no, line in enumerate(lines, start=1):
            line = line.strip()
            if not line or line.startswith("#"):
                continue

            fields = line.split()
            if len(fields) == 1:
                network.add_vertex(fields[0])
            elif len(fields) == 2:
                network.add_edge(fields[0], fields[1])
            else:
                raise ValueError(
                    f"Line {line_no}: expected 1 or 2 fields, got {len(fields)}: {line!r}"
                )
        return network


class NetworkWriter:
    """Writer for edge-list network files."""

    @staticmethod
    def format(network: Network) -> str:
        """Format a network as edge-list text; placeholder vertices are left out."""
        lines = []
        for u, v in network.edges:
            lines.append(f"{u.name}\t{v.name}")
        for node in network:
            if not node.is_fake and network.degree(node) == 0:
                lines.append(node.name)
        return "".join(line + "\n" for line in lines)

    @staticmethod
    def write(network: Network, path: Union[str, Path]) -> None:
        Path(path).write_text(NetworkWriter.format(network))
