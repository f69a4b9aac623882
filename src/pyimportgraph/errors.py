"""Error types raised while building and displaying an import graph.

Every error renders as a single line naming what failed and the underlying
cause, so the CLI can print it as-is.
"""


class ImportGraphError(Exception):
    """Base class for all pyimportgraph failures."""


class PatternExpansionError(ImportGraphError):
    """A command-line pattern cannot be interpreted."""

    def __init__(self, pattern: str, reason: str):
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"invalid package pattern {pattern!r}: {reason}")


class PackageLoadError(ImportGraphError):
    """The build context could not load a package."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(reason)


class PackageNotFound(ImportGraphError):
    """A requested path does not correspond to a loadable package."""

    def __init__(self, path: str, cause: Exception):
        self.path = path
        self.cause = cause
        super().__init__(f"can't load package {path!r}: {cause}")


class GraphBuildError(ImportGraphError):
    """The workspace import graph could not be built at all."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"building import graph failed: {reason}")


class RendererMissing(ImportGraphError):
    """The external renderer executable is not on the search path."""

    def __init__(self, command: str, cause: str):
        self.command = command
        self.cause = cause
        super().__init__(
            f"`{command}` command is required (install Graphviz, e.g. "
            f"`apt install graphviz` or `brew install graphviz`): {cause}"
        )


class RenderFailed(ImportGraphError):
    """The renderer ran but did not produce a usable image."""

    def __init__(self, reason: str, stderr: str | None = None):
        self.reason = reason
        self.stderr = stderr
        detail = f"rendering graph failed: {reason}"
        if stderr:
            # Keep the diagnostic on one line
            detail += f": {' '.join(stderr.split())}"
        super().__init__(detail)
