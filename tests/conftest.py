"""Shared fixtures: a small workspace laid out like a src-layout project."""

from pathlib import Path

import pytest

from pyimportgraph.build import BuildContext
from pyimportgraph.config import GraphConfig

WORKSPACE_FILES = {
    "src/app/__init__.py": "from app import core\n",
    "src/app/core/__init__.py": "from ..util import helpers\nimport os\n",
    "src/app/core/engine.py": "from . import models\nfrom app.io import reader\n",
    "src/app/core/models.py": "import json\n",
    "src/app/io/__init__.py": "from app.core import engine\n",
    "src/app/io/reader.py": "import app.util\n",
    "src/app/util/__init__.py": "",
    "src/app/util/helpers.py": "import typing\n",
    "src/app/util/test_helpers.py": "import app.io\nimport pytest\n",
    "src/app/_vendor/six/__init__.py": "import app.core\n",
    "src/app/empty/README.txt": "not a package\n",
}


def write_files(base: Path, files: dict[str, str]) -> None:
    for relative, content in files.items():
        path = base / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")


@pytest.fixture
def workspace(tmp_path):
    """Workspace root with packages app, app.core, app.io and app.util below src/."""
    write_files(tmp_path, WORKSPACE_FILES)
    return tmp_path


@pytest.fixture
def context(workspace):
    """Build context with the default roots of the workspace."""
    return BuildContext.from_config(GraphConfig(), cwd=workspace)


@pytest.fixture
def write_tree():
    """Helper writing {relative path: content} below a directory."""
    return write_files
