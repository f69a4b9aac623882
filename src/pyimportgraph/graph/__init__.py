"""Graph restriction, serialization and rendering for pyimportgraph.

Restricts the workspace import graph to the requested packages, writes it
as a Graphviz DOT document and rasterizes it with the ``dot`` executable.
"""

from .dot import DotSerializer, quote_id
from .framework import GraphRenderer, ImageRenderer
from .graphviz import GraphvizRenderer, content_type_for
from .models import Edge, InducedSubgraph, RenderedImage
from .subgraph import induced_subgraph

__all__ = [
    "GraphRenderer",
    "ImageRenderer",
    "DotSerializer",
    "GraphvizRenderer",
    "content_type_for",
    "quote_id",
    "Edge",
    "InducedSubgraph",
    "RenderedImage",
    "induced_subgraph",
]
