"""pyimportgraph - Display the import graph among Python packages.

pyimportgraph resolves a set of packages, restricts the workspace import graph
to the edges between them, renders it with Graphviz and shows the image in
the browser through a one-shot local web server.
"""

__version__ = "0.1.0"
__description__ = "Display the import graph among specified Python packages"

from pyimportgraph.config import ImportGraphConfig

__all__ = [
    "__version__",
    "__description__",
    "ImportGraphConfig",
]
