"""CLI interface for pyimportgraph using Typer framework."""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.markup import escape

from pyimportgraph import __description__, __version__
from pyimportgraph.config import ImageFormat, LogLevel, load_config
from pyimportgraph.errors import ImportGraphError
from pyimportgraph.pipeline import ImportGraphViewer

logger = logging.getLogger(__name__)

LOG_LEVELS = {
    LogLevel.ERROR.value: logging.ERROR,
    LogLevel.WARN.value: logging.WARNING,
    LogLevel.INFO.value: logging.INFO,
    LogLevel.DEBUG.value: logging.DEBUG,
}

EPILOG = """Examples:

  pyimportgraph ./...

  pyimportgraph mypkg/... --tests

  pyimportgraph mypkg.core mypkg.io --format png
"""

app = typer.Typer(
    name="pyimportgraph",
    help=__description__,
    add_completion=False,
    rich_markup_mode="rich"
)

console = Console()
err_console = Console(stderr=True)


def version_callback(value: bool) -> None:
    """Show version information and exit."""
    if value:
        console.print(f"pyimportgraph version {__version__}")
        raise typer.Exit()


def _configure_logging(level: int) -> None:
    logging.basicConfig(format="%(name)s %(levelname)s %(message)s")
    logging.getLogger("pyimportgraph").setLevel(level)


def _fail(message: str, code: int = 1) -> typer.Exit:
    err_console.print(f"[red]Error:[/red] {escape(message)}", soft_wrap=True)
    return typer.Exit(code)


@app.command(epilog=EPILOG)
def main(
    packages: Annotated[
        Optional[list[str]],
        typer.Argument(help="Package paths or patterns (default: ./... - every package below the current directory)", show_default=False)
    ] = None,
    tests: Annotated[
        Optional[bool],
        typer.Option("--tests/--no-tests", help="Include test modules when building the graph (default: from config)", show_default=False)
    ] = None,
    image_format: Annotated[
        Optional[ImageFormat],
        typer.Option("--format", "-f", help="Image format (default: svg)", show_default=False)
    ] = None,
    config: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Configuration file path (default: search for .pyimportgraph.json)")
    ] = None,
    no_browser: Annotated[
        bool,
        typer.Option("--no-browser", help="Print the URL instead of opening a browser")
    ] = False,
    timeout: Annotated[
        Optional[float],
        typer.Option("--timeout", help="Stop serving after this many seconds if the graph is never viewed")
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Enable debug logging")
    ] = False,
    version: Annotated[
        bool,
        typer.Option("--version", "-v", callback=version_callback, is_eager=True, help="Show version and exit")
    ] = False,
) -> None:
    """Display the import graph among the specified Python packages.

    The graph is rendered with Graphviz [bold]dot[/bold] and shown in the
    default browser; the local server exits once the image has been viewed.
    """
    try:
        graph_config = load_config(config)
    except ValueError as e:
        raise _fail(str(e))

    # Apply CLI overrides
    if image_format is not None:
        graph_config.render.format = image_format.value
    if no_browser:
        graph_config.display.open_browser = False
    if timeout is not None:
        if timeout <= 0:
            raise _fail(f"--timeout must be > 0, got: {timeout}")
        graph_config.display.timeout = timeout

    _configure_logging(logging.DEBUG if verbose else LOG_LEVELS[graph_config.logging.level])

    viewer = ImportGraphViewer(
        graph_config,
        announce=lambda url: err_console.print(f"Open {url} to view the graph", soft_wrap=True),
    )

    try:
        viewer.run(packages or [], include_tests=tests)
    except ImportGraphError as e:
        raise _fail(str(e))
    except KeyboardInterrupt:
        err_console.print("\n[yellow]Interrupted[/yellow]")
        raise typer.Exit(130)
    except Exception as e:
        logger.debug("Unexpected failure", exc_info=True)
        raise _fail(f"{type(e).__name__}: {e}")
