"""Build environment for pyimportgraph.

Locates packages below source roots, expands command-line patterns and
computes the workspace-wide forward import graph.
"""

from .context import BuildContext, Package, is_test_file
from .importgraph import AstGraphSource, GraphBuildResult, GraphSource
from .patterns import expand_patterns

__all__ = [
    "BuildContext",
    "Package",
    "is_test_file",
    "AstGraphSource",
    "GraphBuildResult",
    "GraphSource",
    "expand_patterns",
]
