"""Unit tests for command-line pattern expansion."""

import logging

import pytest

from pyimportgraph.build import expand_patterns
from pyimportgraph.build.patterns import match_pattern
from pyimportgraph.errors import PatternExpansionError


class TestMatchPattern:
    """Test wildcard matching."""

    @pytest.mark.parametrize("pattern,name,expected", [
        ("./...", ".", True),
        ("./...", "./src/app", True),
        ("./src/...", "./src", True),
        ("./src/...", "./src/app/core", True),
        ("./src/...", "./srcx", False),
        ("app/...", "app", True),
        ("app/...", "app/core", True),
        ("app/...", "application", False),
        ("app/c...", "app/core", True),
        ("app/c...", "app/io", False),
        ("...", "anything/at/all", True),
        ("app", "app", True),
        ("app", "app/core", False),
    ])
    def test_match_pattern(self, pattern, name, expected):
        assert match_pattern(pattern)(name) is expected


class TestExpandPatterns:
    """Test expansion against a workspace."""

    def test_no_arguments_means_whole_workspace(self, context, workspace):
        expanded = expand_patterns([], context, workspace)
        assert expanded == ["./src/app", "./src/app/core", "./src/app/io", "./src/app/util"]

    def test_local_wildcard_below_directory(self, context, workspace):
        expanded = expand_patterns(["./src/app/..."], context, workspace)
        assert expanded == ["./src/app", "./src/app/core", "./src/app/io", "./src/app/util"]

    def test_local_wildcard_skips_vendor(self, context, workspace):
        expanded = expand_patterns(["./..."], context, workspace)
        assert not any("_vendor" in path for path in expanded)

    def test_import_path_wildcard(self, context, workspace):
        expanded = expand_patterns(["app/..."], context, workspace)
        assert expanded == ["app", "app.core", "app.io", "app.util"]

    def test_dotted_import_path_wildcard(self, context, workspace):
        expanded = expand_patterns(["app.core..."], context, workspace)
        assert expanded == ["app.core"]

    def test_plain_patterns_pass_through(self, context, workspace):
        expanded = expand_patterns(["app.io", "./src/app/util", "does.not.exist"], context, workspace)
        assert expanded == ["app.io", "./src/app/util", "does.not.exist"]

    def test_duplicates_removed_keeping_first(self, context, workspace):
        expanded = expand_patterns(["app.io", "app/...", "app.io"], context, workspace)
        assert expanded == ["app.io", "app", "app.core", "app.util"]

    def test_empty_pattern_rejected(self, context, workspace):
        with pytest.raises(PatternExpansionError, match="empty pattern"):
            expand_patterns(["app", "  "], context, workspace)

    def test_missing_local_base_rejected(self, context, workspace):
        with pytest.raises(PatternExpansionError, match="does not exist"):
            expand_patterns(["./missing/..."], context, workspace)

    def test_no_match_warns(self, context, workspace, caplog):
        with caplog.at_level(logging.WARNING, logger="pyimportgraph"):
            expanded = expand_patterns(["nomatch/..."], context, workspace)

        assert expanded == []
        assert "matched no packages" in caplog.text
