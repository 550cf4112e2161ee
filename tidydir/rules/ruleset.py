#!/usr/bin/env python3
"""In-memory rule set.

This module provides the typed, read-only rule model consumed by the scanner
and the move resolver:
- DirRule: allowed entries for one directory, optionally recursive
- MoveRule: where matched children of a parent directory should go
- RuleSet: both rule lists in declaration order

A RuleSet is built from a configuration document whose paths are already
variable-expanded (see ConfigManager.build_ruleset). Every path stored here
is absolute and normalized.

Example:
    >>> ruleset = build_ruleset({"dirs": {"/data": {"allowed-files": [{"ext": "mp4"}]}}})
    >>> ruleset.dir_rules[0].allowed_files.allows("a.mp4", EntryKind.FILE)
    True
"""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from tidydir.core.constants import ConfigKey, EntryKind
from tidydir.core.errors import ConfigError
from tidydir.core.validators import validate_config
from tidydir.rules.patterns import (
    Matcher,
    MatchSet,
    match_set_from_config,
    matcher_from_config,
    matches_any,
)


@dataclass(frozen=True)
class DirRule:
    """Placement rule bound to one absolute directory."""

    path: str
    allowed_dirs: MatchSet = field(default_factory=MatchSet.any)
    allowed_files: MatchSet = field(default_factory=MatchSet.any)
    recursive: bool = False
    recursive_ignore_children: Tuple[Matcher, ...] = ()

    def allows(self, name: str, kind: EntryKind) -> bool:
        """Check an entry against the MatchSet for its kind."""
        if kind == EntryKind.DIRECTORY:
            return self.allowed_dirs.allows(name, kind)
        return self.allowed_files.allows(name, kind)

    def prunes(self, name: str) -> bool:
        """Check whether recursion must not descend into a child directory."""
        return matches_any(self.recursive_ignore_children, name, EntryKind.DIRECTORY)


@dataclass(frozen=True)
class MoveRule:
    """Relocation rule for the immediate children of ``parent``."""

    parent: str
    to: str
    match: Tuple[Matcher, ...] = ()
    name: Optional[str] = None
    to_script: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.name if self.name else self.parent

    def matches(self, name: str, kind: EntryKind) -> bool:
        return matches_any(self.match, name, kind)


@dataclass(frozen=True)
class RuleSet:
    """All directory and move rules of one invocation."""

    dir_rules: Tuple[DirRule, ...] = ()
    move_rules: Tuple[MoveRule, ...] = ()

    def under(self, target: Optional[str]) -> "RuleSet":
        """Keep only rules whose directory lies under ``target``.

        Args:
            target: Absolute directory, or None for no filtering

        Returns:
            Filtered RuleSet (declaration order preserved)
        """
        if target is None:
            return self
        return RuleSet(
            dir_rules=tuple(r for r in self.dir_rules if is_under(r.path, target)),
            move_rules=tuple(r for r in self.move_rules if is_under(r.parent, target)),
        )

    def __len__(self) -> int:
        return len(self.dir_rules) + len(self.move_rules)


def is_under(path: str, parent: str) -> bool:
    """Component-wise prefix test (``/a/bc`` is not under ``/a/b``)."""
    path = os.path.normpath(path)
    parent = os.path.normpath(parent)
    if path == parent:
        return True
    return path.startswith(parent.rstrip(os.sep) + os.sep)


def build_ruleset(config: Dict[str, Any], config_dir: Optional[str] = None) -> RuleSet:
    """Build a RuleSet from an expanded configuration document.

    Args:
        config: Configuration with ``dirs`` and ``automove`` sections, paths expanded
        config_dir: Directory relative ``to-script`` paths are resolved against

    Returns:
        RuleSet

    Raises:
        ConfigError: If the document is invalid or a path is not absolute
    """
    validate_config(config)

    dir_rules: List[DirRule] = []
    for path, body in (config.get(ConfigKey.DIRS) or {}).items():
        dir_rules.append(_build_dir_rule(path, body or {}))

    move_rules: List[MoveRule] = []
    automove = config.get(ConfigKey.AUTOMOVE) or {}
    for body in automove.get(ConfigKey.RULES) or []:
        move_rules.append(_build_move_rule(body, config_dir))

    return RuleSet(dir_rules=tuple(dir_rules), move_rules=tuple(move_rules))


def _build_dir_rule(path: str, body: Dict[str, Any]) -> DirRule:
    return DirRule(
        path=_absolute(path, "directory rule"),
        allowed_dirs=match_set_from_config(body.get(ConfigKey.ALLOWED_DIRS)),
        allowed_files=match_set_from_config(body.get(ConfigKey.ALLOWED_FILES)),
        recursive=bool(body.get(ConfigKey.RECURSIVE, False)),
        recursive_ignore_children=tuple(
            matcher_from_config(m, allow_type=False)
            for m in body.get(ConfigKey.RECURSIVE_IGNORE) or []
        ),
    )


def _build_move_rule(body: Dict[str, Any], config_dir: Optional[str]) -> MoveRule:
    match = body[ConfigKey.RULE_MATCH]
    if not isinstance(match, list):
        match = [match]

    script = body.get(ConfigKey.RULE_TO_SCRIPT)
    if script is not None and not os.path.isabs(script):
        if config_dir is None:
            raise ConfigError(f"Relative to-script needs a config directory: {script}")
        script = os.path.join(config_dir, script)

    return MoveRule(
        name=body.get(ConfigKey.RULE_NAME),
        parent=_absolute(body[ConfigKey.RULE_PARENT], "auto-move parent"),
        to=_absolute(body[ConfigKey.RULE_TO], "auto-move destination"),
        match=tuple(matcher_from_config(m, allow_type=True) for m in match),
        to_script=os.path.normpath(script) if script is not None else None,
    )


def _absolute(path: str, label: str) -> str:
    if not os.path.isabs(path):
        raise ConfigError(f"Path for {label} must be absolute after expansion: {path}")
    return os.path.normpath(path)
