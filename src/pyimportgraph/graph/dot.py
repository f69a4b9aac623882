"""Graphviz DOT serializer for induced import subgraphs."""

import logging

from .framework import GraphRenderer
from .models import InducedSubgraph

logger = logging.getLogger(__name__)

GRAPH_NAME = "importgraph"


def quote_id(identifier: str) -> str:
    """Quote an identifier as a DOT string literal.

    The identifier is opaque: only characters that would end or corrupt the
    literal are escaped.
    """
    escaped = (
        identifier.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
    )
    return f'"{escaped}"'


class DotSerializer(GraphRenderer):
    """Writes one ``"a" -> "b";`` statement per edge inside a named digraph."""

    def __init__(self, graph_name: str = GRAPH_NAME):
        self.graph_name = graph_name

    @property
    def format_name(self) -> str:
        return "dot"

    def get_file_extension(self) -> str:
        return ".dot"

    def render(self, subgraph: InducedSubgraph) -> str:
        lines = [f"digraph {quote_id(self.graph_name)} {{"]
        for edge in subgraph.edges:
            lines.append(f"\t{quote_id(edge.source)} -> {quote_id(edge.target)};")
        lines.append("}")

        logger.debug(f"Serialized {len(subgraph.edges)} edges between {len(subgraph.nodes)} packages")
        return "\n".join(lines) + "\n"
