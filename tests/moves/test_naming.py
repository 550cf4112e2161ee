#!/usr/bin/env python3
"""Tests for ScriptNamer, using real shell scripts."""

import pytest

from tidydir.core.constants import ErrorCode
from tidydir.core.errors import ScriptError
from tidydir.moves.naming import ScriptNamer
from tidydir.moves.resolver import AutoMoveResolver
from tidydir.rules.patterns import Matcher
from tidydir.rules.ruleset import MoveRule


@pytest.fixture
def namer(quiet_logger):
    return ScriptNamer(timeout=5, logger=quiet_logger)


class TestScriptNamer:
    """Tests for running naming scripts."""

    def test_prints_name(self, namer, make_script):
        """Trimmed stdout is the name; the source path is the only argument."""
        script = make_script("name.sh", 'echo "  Nov-2022/$(basename "$1")  "')
        assert namer(str(script), "/shots/shot.png") == "Nov-2022/shot.png"

    def test_non_zero_exit(self, namer, make_script):
        """A non-zero exit is a ScriptError with the last stderr line."""
        script = make_script("fail.sh", 'echo "first" >&2\necho "cannot date file" >&2\nexit 3')
        with pytest.raises(ScriptError) as exc_info:
            namer(str(script), "/x")
        assert "status 3" in exc_info.value.message
        assert "cannot date file" in exc_info.value.message
        assert exc_info.value.script == str(script)
        assert exc_info.value.error_code == ErrorCode.SCRIPT_FAILED

    def test_empty_output(self, namer, make_script):
        """Printing nothing is a ScriptError."""
        script = make_script("empty.sh", "echo '   '")
        with pytest.raises(ScriptError, match="no filename"):
            namer(str(script), "/x")

    def test_multiple_lines(self, namer, make_script):
        """Printing several lines is a ScriptError."""
        script = make_script("two.sh", "echo a\necho b")
        with pytest.raises(ScriptError, match="more than one"):
            namer(str(script), "/x")

    def test_invalid_utf8(self, namer, make_script):
        """Undecodable output is a ScriptError."""
        script = make_script("bytes.sh", "printf '\\377\\376'")
        with pytest.raises(ScriptError, match="UTF-8"):
            namer(str(script), "/x")

    def test_missing_script(self, namer, temp_dir):
        """A script that cannot be started is a ScriptError."""
        with pytest.raises(ScriptError, match="Could not execute"):
            namer(str(temp_dir / "missing.sh"), "/x")

    def test_timeout(self, quiet_logger, make_script):
        """A script running too long is a TIMEOUT ScriptError."""
        script = make_script("slow.sh", "exec sleep 5")
        with pytest.raises(ScriptError) as exc_info:
            ScriptNamer(timeout=0.2, logger=quiet_logger)(str(script), "/x")
        assert exc_info.value.error_code == ErrorCode.TIMEOUT


class TestResolverWithScripts:
    """End-to-end naming through the resolver."""

    def test_absolute_and_relative(self, temp_dir, make_script, quiet_logger):
        """Relative output joins onto ``to``, absolute output replaces it."""
        parent = temp_dir / "in"
        parent.mkdir()
        (parent / "rel.txt").write_text("")
        (parent / "abs.txt").write_text("")
        archive = temp_dir / "archive"
        script = make_script(
            "route.sh",
            f'case "$(basename "$1")" in\n'
            f'  abs.txt) echo "{archive}/abs.txt" ;;\n'
            f'  *) echo "sorted/$(basename "$1")" ;;\n'
            f"esac",
        )
        rule = MoveRule(
            parent=str(parent),
            to=str(temp_dir / "out"),
            match=(Matcher.extension("txt"),),
            to_script=str(script),
        )

        resolver = AutoMoveResolver(namer=ScriptNamer(timeout=5, logger=quiet_logger), logger=quiet_logger)
        destinations = {a.source: a.destination for a in resolver.resolve([rule])}

        assert destinations[str(parent / "abs.txt")] == str(archive / "abs.txt")
        assert destinations[str(parent / "rel.txt")] == str(temp_dir / "out" / "sorted" / "rel.txt")
