"""Build context: source roots, package discovery and package loading.

A package is a directory below a source root that holds at least one
non-test Python module. Its identifier is the dotted path of the directory
relative to the root (``src/pkg/sub`` under root ``src`` is ``pkg.sub``).
"""

import ast
import keyword
import logging
import os
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path

from pyimportgraph.config import GraphConfig
from pyimportgraph.errors import PackageLoadError

logger = logging.getLogger(__name__)


def is_test_file(path: Path) -> bool:
    """Return True for modules that only exist to run tests."""
    name = path.name
    return name == "conftest.py" or name.startswith("test_") or name.endswith("_test.py")


def is_local_path(path: str) -> bool:
    """Return True for paths relative to the working directory or absolute."""
    return (
        path in (".", "..")
        or path.startswith(("./", "../"))
        or os.path.isabs(path)
    )


def is_identifier(name: str) -> bool:
    return name.isidentifier() and not keyword.iskeyword(name)


def enclosing_root(directory: Path) -> Path:
    """Return the nearest ancestor of directory (or itself) outside any regular package."""
    current = directory
    while (current / "__init__.py").is_file() and current.parent != current:
        current = current.parent
    return current


@dataclass
class Package:
    """A loadable package found in the build context."""
    import_path: str
    dir: Path
    root: Path
    modules: list[Path] = field(default_factory=list)
    test_modules: list[Path] = field(default_factory=list)

    def module_name(self, path: Path) -> str:
        """Dotted module name of one of this package's files."""
        if path.stem == "__init__":
            return self.import_path
        return f"{self.import_path}.{path.stem}"


class BuildContext:
    """Resolves paths to packages across an ordered list of source roots."""

    def __init__(
        self,
        roots: Iterable[str | Path],
        vendor_dirs: Iterable[str] = ("vendor", "_vendor", "_vendored"),
        exclude_dirs: Iterable[str] = ("__pycache__",),
    ):
        self.roots = [Path(root).resolve() for root in roots]
        self.vendor_dirs = set(vendor_dirs)
        self.exclude_dirs = set(exclude_dirs)

    @classmethod
    def from_config(cls, config: GraphConfig, cwd: Path | None = None) -> "BuildContext":
        """Create a context from the graph config section.

        Relative configured roots are taken from the working directory;
        ``load_config`` has already anchored roots read from a file. Without
        configured roots, the first ancestor of the working directory that is
        not a regular package is the base, and its ``src`` directory (when it
        is not a package itself) and the base are used, in that order.
        """
        cwd = Path(cwd or Path.cwd()).resolve()
        if config.roots:
            roots = [cwd / root for root in config.roots]
        else:
            base = enclosing_root(cwd)
            roots = []
            src_dir = base / "src"
            if src_dir.is_dir() and not (src_dir / "__init__.py").exists():
                roots.append(src_dir)
            roots.append(base)
        return cls(roots, config.vendor_dirs, config.exclude_dirs)

    def import_package(self, path: str, src_dir: str | Path | None = None, ignore_vendor: bool = False) -> Package:
        """Locate and load the package named by path.

        Args:
            path: Local directory (``./pkg``) or import path (``pkg.sub`` or ``pkg/sub``)
            src_dir: Directory local paths are relative to, and where vendor lookup starts
            ignore_vendor: Never look inside vendor trees when locating an import path

        Returns:
            The loaded package

        Raises:
            PackageLoadError: If the package cannot be found or loaded
        """
        src_dir = Path(src_dir or Path.cwd()).resolve()

        if is_local_path(path):
            directory = (src_dir / path).resolve()
            if not directory.is_dir():
                raise PackageLoadError(path, f"cannot find package directory {directory}")
            root = self.root_for(directory)
            if root is None:
                roots = ", ".join(str(r) for r in self.roots)
                raise PackageLoadError(path, f"directory {directory} outside available source roots ({roots})")
            return self._load(path, directory, root)

        parts = path.replace("/", ".").split(".")
        if not all(is_identifier(part) for part in parts):
            raise PackageLoadError(path, f"invalid import path {path!r}")

        if not ignore_vendor:
            for vendor_root in self._vendor_roots(src_dir):
                directory = vendor_root.joinpath(*parts)
                if directory.is_dir():
                    return self._load(path, directory, self.root_for(directory))

        for root in self.roots:
            directory = root.joinpath(*parts)
            if directory.is_dir():
                return self._load(path, directory, root)

        searched = ", ".join(str(r) for r in self.roots)
        raise PackageLoadError(path, f"cannot find package {'.'.join(parts)!r} in any of: {searched}")

    def iter_packages(self) -> Iterator[Package]:
        """Yield every package under every root, earlier roots shadowing later ones."""
        seen: set[str] = set()
        for root in self.roots:
            if not root.is_dir():
                logger.debug(f"Skipping missing source root {root}")
                continue
            for directory in self.walk(root, prune_roots=True):
                package = self.package_at(directory, root)
                if package is None or package.import_path in seen:
                    continue
                seen.add(package.import_path)
                yield package

    def package_at(self, directory: Path, root: Path | None = None) -> Package | None:
        """Return the unvalidated package at directory, or None if it is not one."""
        root = root or self.root_for(directory)
        if root is None or directory == root:
            return None
        parts = directory.relative_to(root).parts
        if not all(is_identifier(part) for part in parts):
            return None
        modules, test_modules = self._scan_modules(directory)
        if not modules:
            return None
        return Package(".".join(parts), directory, root, modules, test_modules)

    def walk(self, top: Path, prune_roots: bool = False) -> Iterator[Path]:
        """Yield top and every directory below it that may hold packages."""
        roots = set(self.roots)

        def on_error(exc: OSError) -> None:
            logger.warning(f"Cannot read directory {exc.filename}: {exc.strerror}")

        for dirpath, dirnames, _ in os.walk(top, onerror=on_error):
            current = Path(dirpath)
            dirnames[:] = sorted(
                name for name in dirnames
                if not self.is_skipped_dir(current / name)
                and not (prune_roots and (current / name).resolve() in roots)
            )
            yield current

    def is_skipped_dir(self, directory: Path) -> bool:
        """Return True for directories that never hold workspace packages.

        Excluded names such as ``build`` only apply to plain directories; a
        regular package that happens to share the name is still walked.
        """
        name = directory.name
        return (
            name.startswith(".")
            or (name in self.exclude_dirs and not (directory / "__init__.py").is_file())
            or name in self.vendor_dirs
            or not name.isidentifier()
        )

    def root_for(self, directory: Path) -> Path | None:
        """Return the most specific source root containing directory."""
        candidates = [root for root in self.roots if directory.is_relative_to(root)]
        if not candidates:
            return None
        return max(candidates, key=lambda root: len(root.parts))

    def _vendor_roots(self, src_dir: Path) -> Iterator[Path]:
        # Innermost vendor trees first, stopping at the enclosing source root
        root = self.root_for(src_dir)
        if root is None:
            return
        current = src_dir
        while True:
            for name in sorted(self.vendor_dirs):
                candidate = current / name
                if candidate.is_dir():
                    yield candidate
            if current == root:
                break
            current = current.parent

    def _scan_modules(self, directory: Path) -> tuple[list[Path], list[Path]]:
        modules: list[Path] = []
        test_modules: list[Path] = []
        for entry in sorted(directory.iterdir()):
            if entry.suffix != ".py" or not entry.is_file() or not entry.stem.isidentifier():
                continue
            if is_test_file(entry):
                test_modules.append(entry)
            else:
                modules.append(entry)
        return modules, test_modules

    def _load(self, path: str, directory: Path, root: Path) -> Package:
        if directory == root:
            raise PackageLoadError(path, f"{directory} is a source root, not a package")
        parts = directory.relative_to(root).parts
        if not all(is_identifier(part) for part in parts):
            raise PackageLoadError(path, f"{directory} is not importable: invalid import path {'.'.join(parts)!r}")

        try:
            modules, test_modules = self._scan_modules(directory)
        except OSError as e:
            raise PackageLoadError(path, f"cannot read {directory}: {e.strerror or e}") from e
        if not modules:
            raise PackageLoadError(path, f"no Python source files in {directory}")

        # Import-capable, not merely present: every module must compile
        for module in modules:
            try:
                ast.parse(module.read_bytes(), filename=str(module))
            except SyntaxError as e:
                raise PackageLoadError(path, f"{module}:{e.lineno}: {e.msg}") from e
            except (OSError, ValueError) as e:
                raise PackageLoadError(path, f"cannot parse {module}: {e}") from e

        package = Package(".".join(parts), directory, root, modules, test_modules)
        logger.debug(f"Loaded package {package.import_path} from {directory}")
        return package
