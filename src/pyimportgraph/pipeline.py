"""End-to-end run: resolve packages, build, filter, render and display the graph."""

import logging
import webbrowser
from collections.abc import Callable, Sequence
from pathlib import Path

from pyimportgraph.build import AstGraphSource, BuildContext, GraphSource, expand_patterns
from pyimportgraph.config import ImportGraphConfig
from pyimportgraph.display import DisplaySession, display_in_browser, route_for
from pyimportgraph.graph import DotSerializer, GraphvizRenderer, ImageRenderer, InducedSubgraph, induced_subgraph
from pyimportgraph.resolve import resolve_packages

logger = logging.getLogger(__name__)


class ImportGraphViewer:
    """Runs the single-pass pipeline for one invocation."""

    def __init__(
        self,
        config: ImportGraphConfig,
        context: BuildContext | None = None,
        graph_source: GraphSource | None = None,
        renderer: ImageRenderer | None = None,
        cwd: Path | None = None,
        opener: Callable[[str], bool] = webbrowser.open,
        announce: Callable[[str], None] | None = None,
    ):
        self.config = config
        self.cwd = Path(cwd or Path.cwd()).resolve()
        self.context = context
        self.graph_source = graph_source or AstGraphSource()
        self.renderer = renderer or GraphvizRenderer(config.render.command, config.render.format)
        self.serializer = DotSerializer()
        self.opener = opener
        self.announce = announce

    def run(self, patterns: Sequence[str], include_tests: bool | None = None) -> bool:
        """Show the import graph among the packages matching patterns.

        The renderer is checked before any package work so a missing
        executable fails fast.

        Returns:
            True if the image was viewed, False if the watchdog expired
        """
        self.renderer.ensure_available()

        description = self.build_description(patterns, include_tests)
        image = self.renderer.render(description)

        display = self.config.display
        session = DisplaySession(
            image,
            route=route_for(image.format),
            bind=display.bind,
            port=display.port,
            grace_delay=display.grace_delay,
        )
        return display_in_browser(
            session,
            opener=self.opener,
            open_browser=display.open_browser,
            timeout=display.timeout,
            announce=self.announce,
        )

    def build_description(self, patterns: Sequence[str], include_tests: bool | None = None) -> str:
        """Return the DOT document of the induced subgraph."""
        return self.serializer.render(self.build_subgraph(patterns, include_tests))

    def build_subgraph(self, patterns: Sequence[str], include_tests: bool | None = None) -> InducedSubgraph:
        """Resolve patterns and restrict the workspace graph to them."""
        if include_tests is None:
            include_tests = self.config.graph.include_tests
        context = self._get_context()

        paths = expand_patterns(patterns, context, self.cwd)
        import_paths = resolve_packages(paths, context, self.cwd)

        result = self.graph_source.build(context, include_tests)
        if result.errors:
            logger.info(f"{len(result.errors)} package(s) had errors while building the graph")
            for import_path, error in sorted(result.errors.items()):
                logger.debug(f"  {import_path}: {error}")

        subgraph = induced_subgraph(result.forward, set(import_paths))
        logger.info(f"Graph has {len(subgraph.nodes)} packages and {len(subgraph.edges)} edges")
        return subgraph

    def _get_context(self) -> BuildContext:
        if self.context is None:
            self.context = BuildContext.from_config(self.config.graph, self.cwd)
        return self.context
