"""Workspace-wide forward import graph construction."""

import ast
import logging
from abc import ABC, abstractmethod
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

from pyimportgraph.build.context import BuildContext
from pyimportgraph.errors import GraphBuildError

logger = logging.getLogger(__name__)


@dataclass
class GraphBuildResult:
    """Forward edges of every package plus advisory per-package errors."""
    forward: dict[str, set[str]] = field(default_factory=dict)
    errors: dict[str, Exception] = field(default_factory=dict)


@dataclass(frozen=True)
class ImportRef:
    """One import statement target: ``from module import names`` or ``import module``."""
    module: str
    names: tuple[str, ...] = ()


class GraphSource(ABC):
    """Abstract source of the forward import graph."""

    @abstractmethod
    def build(self, context: BuildContext, include_tests: bool = False) -> GraphBuildResult:
        """Return forward edges for every package in the build context."""
        pass


class AstGraphSource(GraphSource):
    """Builds the import graph by parsing module sources, without importing them."""

    def build(self, context: BuildContext, include_tests: bool = False) -> GraphBuildResult:
        if not any(root.is_dir() for root in context.roots):
            roots = ", ".join(str(root) for root in context.roots)
            raise GraphBuildError(f"no source root exists ({roots})")

        try:
            packages = list(context.iter_packages())
        except OSError as e:
            raise GraphBuildError(f"walking source roots failed: {e}") from e

        known = {package.import_path for package in packages}
        result = GraphBuildResult()

        for package in packages:
            targets = result.forward.setdefault(package.import_path, set())
            files = package.modules + (package.test_modules if include_tests else [])
            for path in files:
                try:
                    refs = extract_imports(path, package.module_name(path), is_package=path.stem == "__init__")
                except (OSError, SyntaxError, ValueError) as e:
                    # First failure per package is enough to report it
                    result.errors.setdefault(package.import_path, e)
                    continue
                for ref in refs:
                    targets.update(owning_packages(ref, known))

        edge_count = sum(len(targets) for targets in result.forward.values())
        logger.info(f"Built import graph with {len(result.forward)} packages and {edge_count} edges")
        return result


def extract_imports(path: Path, module_name: str, is_package: bool = False) -> list[ImportRef]:
    """Parse a module and return the targets of its import statements."""
    tree = ast.parse(path.read_bytes(), filename=str(path))

    refs: list[ImportRef] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            refs.extend(ImportRef(alias.name) for alias in node.names)
        elif isinstance(node, ast.ImportFrom):
            base = resolve_relative_import(module_name, node.level, node.module, is_package)
            if base is None:
                logger.debug(f"{path}:{node.lineno}: relative import beyond top-level package")
                continue
            names = tuple(alias.name for alias in node.names if alias.name != "*")
            refs.append(ImportRef(base, names))
    return refs


def resolve_relative_import(module_name: str, level: int, module: str | None, is_package: bool = False) -> str | None:
    """Return the absolute module a (possibly relative) ``from`` import refers to."""
    if level <= 0:
        return module

    parts = module_name.split(".")
    if not is_package:
        parts = parts[:-1]
    if level - 1 >= len(parts):
        return None
    prefix = parts[: len(parts) - (level - 1)]
    if module:
        prefix.extend(module.split("."))
    return ".".join(prefix)


def owning_packages(ref: ImportRef, known: set[str]) -> Iterator[str]:
    """Yield the packages an import statement depends on.

    ``from pkg import sub`` depends on ``pkg.sub`` when that is a package;
    anything else depends on the longest known package containing the
    module. Modules outside the workspace are kept under their own name.
    """
    plain_names = not ref.names
    for name in ref.names:
        candidate = f"{ref.module}.{name}"
        if candidate in known:
            yield candidate
        else:
            plain_names = True
    if plain_names:
        yield longest_known_prefix(ref.module, known) or ref.module


def longest_known_prefix(module: str, known: set[str]) -> str | None:
    parts = module.split(".")
    for end in range(len(parts), 0, -1):
        candidate = ".".join(parts[:end])
        if candidate in known:
            return candidate
    return None

