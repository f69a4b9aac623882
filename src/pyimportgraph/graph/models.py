"""Graph data models for the induced import subgraph and its rendering."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Edge:
    """A direct import of one package by another."""
    source: str  # Importing package
    target: str  # Imported package


@dataclass
class InducedSubgraph:
    """The workspace import graph restricted to a set of packages."""
    nodes: frozenset[str] = field(default_factory=frozenset)
    edges: list[Edge] = field(default_factory=list)

    def edge_set(self) -> set[tuple[str, str]]:
        """Edges as (source, target) pairs."""
        return {(edge.source, edge.target) for edge in self.edges}


@dataclass(frozen=True)
class RenderedImage:
    """Rendered graph image, held in memory only."""
    data: bytes
    content_type: str
    format: str
