"""Resolution of candidate paths into canonical package identifiers."""

import logging
from collections.abc import Sequence
from pathlib import Path

from pyimportgraph.build.context import BuildContext
from pyimportgraph.errors import PackageLoadError, PackageNotFound

logger = logging.getLogger(__name__)


def resolve_packages(paths: Sequence[str], context: BuildContext, cwd: Path | None = None) -> list[str]:
    """Resolve local and import paths to canonical import paths.

    Every package is fully loaded rather than just located: a directory
    without importable modules would otherwise contribute nothing to the
    graph and the result would be silently empty. Vendor lookup is disabled
    so identifiers never point inside a vendored copy.

    Args:
        paths: Candidate paths, e.g. ``./pkg`` or ``pkg.sub``
        context: Build context to resolve against
        cwd: Directory local paths are relative to

    Returns:
        One import path per candidate, in resolution order

    Raises:
        PackageNotFound: On the first path that cannot be loaded
    """
    cwd = Path(cwd or Path.cwd()).resolve()

    import_paths = []
    for path in paths:
        try:
            package = context.import_package(path, cwd, ignore_vendor=True)
        except PackageLoadError as e:
            raise PackageNotFound(path, e) from e
        import_paths.append(package.import_path)

    logger.debug(f"Resolved {len(import_paths)} package(s): {', '.join(import_paths)}")
    return import_paths
