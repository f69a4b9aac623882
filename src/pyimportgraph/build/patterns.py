"""Expansion of command-line package patterns.

``...`` is a wildcard matching any string, and ``x/...`` also matches ``x``
itself. Local patterns (``./...``, ``./pkg/...``) are matched against
directories below the working directory; import-path patterns (``pkg/...``
or ``pkg.sub...``) against every package of the build context.
"""

import logging
import os
import re
from collections.abc import Callable, Sequence
from pathlib import Path

from pyimportgraph.build.context import BuildContext, is_local_path
from pyimportgraph.errors import PatternExpansionError

logger = logging.getLogger(__name__)

WILDCARD = "..."
DEFAULT_PATTERNS = ["./..."]


def expand_patterns(args: Sequence[str], context: BuildContext, cwd: Path | None = None) -> list[str]:
    """Expand wildcard patterns into a flat list of candidate package paths.

    Args:
        args: Raw command-line patterns; empty means every package below cwd
        context: Build context supplying source roots and packages
        cwd: Working directory local patterns are relative to

    Returns:
        Candidate paths, first occurrence order, without duplicates

    Raises:
        PatternExpansionError: If a pattern cannot be interpreted
    """
    cwd = Path(cwd or Path.cwd()).resolve()
    patterns = list(args) or DEFAULT_PATTERNS

    expanded: list[str] = []
    for pattern in patterns:
        if not pattern.strip():
            raise PatternExpansionError(pattern, "empty pattern")

        if WILDCARD not in pattern:
            expanded.append(pattern)
            continue

        if is_local_path(pattern):
            matches = _match_local(pattern, context, cwd)
        else:
            matches = _match_import_paths(pattern, context)
        if not matches:
            logger.warning(f"Pattern {pattern!r} matched no packages")
        expanded.extend(matches)

    return list(dict.fromkeys(expanded))


def match_pattern(pattern: str) -> Callable[[str], bool]:
    """Return a predicate matching slash-separated names against pattern."""
    regex = re.escape(pattern).replace(re.escape(WILDCARD), ".*")
    if regex.endswith("/.*"):
        regex = regex[: -len("/.*")] + "(/.*)?"
    compiled = re.compile(regex)
    return lambda name: compiled.fullmatch(name) is not None


def _match_local(pattern: str, context: BuildContext, cwd: Path) -> list[str]:
    prefix = pattern[: pattern.index(WILDCARD)]
    base = (cwd / (os.path.dirname(prefix) or ".")).resolve()
    if not base.is_dir():
        raise PatternExpansionError(pattern, f"directory {base} does not exist")

    matches = match_pattern(pattern)
    found: list[str] = []
    for directory in context.walk(base):
        name = Path(os.path.relpath(directory, cwd)).as_posix()
        if name != "." and not name.startswith("../"):
            name = f"./{name}"
        if not matches(name):
            continue
        if context.package_at(directory) is None:
            logger.debug(f"Skipping {name}: not a package below any source root")
            continue
        found.append(name)
    return found


def _match_import_paths(pattern: str, context: BuildContext) -> list[str]:
    # Dotted patterns are matched in slash form, keeping the wildcard intact
    slash_pattern = WILDCARD.join(part.replace(".", "/") for part in pattern.split(WILDCARD))
    matches = match_pattern(slash_pattern)
    return [
        package.import_path
        for package in context.iter_packages()
        if matches(package.import_path.replace(".", "/"))
    ]
