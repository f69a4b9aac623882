"""Renderer abstractions for import graphs."""

from abc import ABC, abstractmethod

from .models import InducedSubgraph, RenderedImage


class GraphRenderer(ABC):
    """Abstract base class for graph description renderers."""

    @property
    @abstractmethod
    def format_name(self) -> str:
        """Name of the output format."""
        pass

    @abstractmethod
    def render(self, subgraph: InducedSubgraph) -> str:
        """Render the subgraph to a textual graph description."""
        pass

    @abstractmethod
    def get_file_extension(self) -> str:
        """Get file extension for this format."""
        pass


class ImageRenderer(ABC):
    """Abstract base class for rasterizing a graph description."""

    @abstractmethod
    def ensure_available(self) -> str:
        """Check the renderer can run, returning what will be invoked."""
        pass

    @abstractmethod
    def render(self, description: str) -> RenderedImage:
        """Rasterize a graph description into an image."""
        pass
