#!/usr/bin/env python3
"""Tests for DirRule, MoveRule, RuleSet and build_ruleset."""

import pytest

from tidydir.core.constants import EntryKind
from tidydir.core.errors import ConfigError
from tidydir.rules.patterns import Matcher, MatchSet
from tidydir.rules.ruleset import DirRule, MoveRule, RuleSet, build_ruleset, is_under


class TestIsUnder:
    """Tests for component-wise path containment."""

    def test_same_path(self):
        """A path is under itself."""
        assert is_under("/a/b", "/a/b")

    def test_child(self):
        """Descendants are under their ancestors."""
        assert is_under("/a/b/c", "/a/b")
        assert is_under("/a/b/c", "/")

    def test_sibling_prefix(self):
        """A shared string prefix is not containment."""
        assert not is_under("/a/bc", "/a/b")

    def test_trailing_slash(self):
        """Trailing separators are ignored."""
        assert is_under("/a/b/c", "/a/b/")


class TestDirRule:
    """Tests for DirRule."""

    def test_allows_by_kind(self):
        """Directories use allowed_dirs, files use allowed_files."""
        rule = DirRule(
            path="/home",
            allowed_dirs=MatchSet.of([Matcher.name("Documents")]),
            allowed_files=MatchSet.none(),
        )
        assert rule.allows("Documents", EntryKind.DIRECTORY)
        assert not rule.allows("Documents", EntryKind.FILE)
        assert not rule.allows("tmp", EntryKind.DIRECTORY)

    def test_defaults_pass_through(self):
        """A bare rule allows everything."""
        rule = DirRule(path="/x")
        assert rule.allows("a", EntryKind.FILE)
        assert rule.allows("b", EntryKind.DIRECTORY)
        assert not rule.recursive

    def test_prunes(self):
        """Ignored children are matched by name."""
        rule = DirRule(path="/x", recursive=True, recursive_ignore_children=(Matcher.name(".git"),))
        assert rule.prunes(".git")
        assert not rule.prunes("src")


class TestMoveRule:
    """Tests for MoveRule."""

    def test_display_name(self):
        """The name is shown when set, else the parent."""
        assert MoveRule(parent="/d", to="/m", name="Music").display_name == "Music"
        assert MoveRule(parent="/d", to="/m").display_name == "/d"

    def test_empty_match_matches_nothing(self):
        """A rule without matchers never matches."""
        assert not MoveRule(parent="/d", to="/m").matches("a.mp3", EntryKind.FILE)


class TestRuleSetUnder:
    """Tests for the target filter."""

    def test_none_keeps_everything(self):
        """No target means no filtering."""
        ruleset = RuleSet(dir_rules=(DirRule(path="/a"),))
        assert ruleset.under(None) is ruleset

    def test_filters_both_lists(self):
        """Only rules inside the target survive, in order."""
        ruleset = RuleSet(
            dir_rules=(DirRule(path="/home/me"), DirRule(path="/home/me/Music"), DirRule(path="/srv")),
            move_rules=(MoveRule(parent="/home/me/Downloads", to="/elsewhere"), MoveRule(parent="/srv", to="/x")),
        )
        filtered = ruleset.under("/home/me/Music")
        assert [r.path for r in filtered.dir_rules] == ["/home/me/Music"]
        assert filtered.move_rules == ()

        filtered = ruleset.under("/home")
        assert [r.path for r in filtered.dir_rules] == ["/home/me", "/home/me/Music"]
        assert len(filtered.move_rules) == 1
        assert len(filtered) == 3


class TestBuildRuleset:
    """Tests for building a RuleSet from a configuration document."""

    def test_full_document(self):
        """Dirs and rules are built in declaration order."""
        ruleset = build_ruleset(
            {
                "dirs": {
                    "/home/me/Videos": {"allowed-files": [{"ext": "mp4"}], "allowed-dirs": []},
                    "/home/me": None,
                },
                "automove": {
                    "rules": [
                        {"parent": "/home/me/Downloads", "match": {"ext": "mp3"}, "to": "/home/me/Music/"},
                    ]
                },
            }
        )
        assert [r.path for r in ruleset.dir_rules] == ["/home/me/Videos", "/home/me"]
        videos, home = ruleset.dir_rules
        assert videos.allowed_dirs.is_deny_all
        assert videos.allowed_files.allows("a.mp4", EntryKind.FILE)
        assert home.allowed_files.is_pass_through

        (rule,) = ruleset.move_rules
        assert rule.to == "/home/me/Music"
        assert rule.matches("x.mp3", EntryKind.FILE)

    def test_empty_document(self):
        """An empty document gives an empty RuleSet."""
        assert len(build_ruleset({})) == 0

    def test_relative_dir_rejected(self):
        """Rule paths must be absolute."""
        with pytest.raises(ConfigError):
            build_ruleset({"dirs": {"relative/path": None}})

    def test_type_matcher_in_dirs_rejected(self):
        """Kind matchers are only allowed in move rules."""
        with pytest.raises(ConfigError):
            build_ruleset({"dirs": {"/a": {"allowed-files": [{"type": "file"}]}}})

    def test_relative_script_joined_to_config_dir(self):
        """A relative naming script is resolved against the config directory."""
        ruleset = build_ruleset(
            {"automove": {"rules": [{"parent": "/a", "match": [], "to": "/b", "to-script": "scripts/n.sh"}]}},
            config_dir="/etc/tidydir",
        )
        assert ruleset.move_rules[0].to_script == "/etc/tidydir/scripts/n.sh"

    def test_relative_script_without_config_dir(self):
        """A relative naming script needs a config directory."""
        with pytest.raises(ConfigError):
            build_ruleset(
                {"automove": {"rules": [{"parent": "/a", "match": [], "to": "/b", "to-script": "n.sh"}]}}
            )

    def test_unknown_key_rejected(self):
        """Unknown keys are configuration errors."""
        with pytest.raises(ConfigError):
            build_ruleset({"dirs": {"/a": {"allowed": []}}})
