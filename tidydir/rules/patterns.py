#!/usr/bin/env python3
r"""Matchers for directory entries.

This module provides the matching primitives used by directory and move rules:
- Exact name matching
- Regular expression matching (unanchored, against the base name)
- Extension matching (case-sensitive suffix after the last dot)
- Entry-kind matching (file or directory)
- MatchSet with pass-through / deny-all / OR semantics

Example:
    >>> allowed = MatchSet.of([Matcher.extension("mp4"), Matcher.pattern(r"^\.")])
    >>> allowed.allows("clip.mp4", EntryKind.FILE)
    True
    >>> allowed.allows("notes.txt", EntryKind.FILE)
    False
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Pattern, Tuple, Union

from tidydir.core.constants import ConfigKey, EntryKind
from tidydir.core.errors import ConfigError
from tidydir.core.validators import validate_matcher_config


class MatcherType(Enum):
    """Matcher variant."""

    NAME = "name"  # Exact base name
    PATTERN = "pattern"  # Regular expression, unanchored
    EXTENSION = "ext"  # Suffix after the last '.'
    KIND = "type"  # File or directory


@dataclass(frozen=True)
class Matcher:
    """A single immutable matching criterion.

    Only the field belonging to ``type`` is meaningful: ``value`` holds the
    name, extension or pattern source, ``compiled`` the compiled regex and
    ``kind`` the entry kind.
    """

    type: MatcherType
    value: str = ""
    compiled: Optional[Pattern[str]] = None
    kind: Optional[EntryKind] = None

    @classmethod
    def name(cls, name: str) -> "Matcher":
        return cls(MatcherType.NAME, value=name)

    @classmethod
    def pattern(cls, pattern: str) -> "Matcher":
        """Build a regex matcher.

        Raises:
            ConfigError: If the pattern does not compile
        """
        try:
            compiled = re.compile(pattern)
        except re.error as e:
            raise ConfigError(f"Invalid regex pattern {pattern!r}: {e}")
        return cls(MatcherType.PATTERN, value=pattern, compiled=compiled)

    @classmethod
    def extension(cls, ext: str) -> "Matcher":
        return cls(MatcherType.EXTENSION, value=ext)

    @classmethod
    def of_kind(cls, kind: EntryKind) -> "Matcher":
        return cls(MatcherType.KIND, value=kind.value, kind=kind)

    def matches(self, name: str, kind: EntryKind) -> bool:
        """Check whether an entry satisfies this matcher.

        Args:
            name: Base name of the entry
            kind: Filesystem kind of the entry

        Returns:
            True if the entry matches
        """
        if self.type == MatcherType.NAME:
            return name == self.value
        elif self.type == MatcherType.PATTERN:
            return self.compiled is not None and self.compiled.search(name) is not None
        elif self.type == MatcherType.EXTENSION:
            _, dot, suffix = name.rpartition(".")
            return bool(dot) and suffix == self.value
        elif self.type == MatcherType.KIND:
            return kind == self.kind

        return False

    def __str__(self) -> str:
        return f"{self.type.value}={self.value}"


def matches_any(matchers: Iterable[Matcher], name: str, kind: EntryKind) -> bool:
    """OR-combine matchers. An empty collection matches nothing."""
    for matcher in matchers:
        if matcher.matches(name, kind):
            return True
    return False


@dataclass(frozen=True)
class MatchSet:
    """An optional, OR-combined list of matchers.

    Three states:
    - absent (``matchers is None``): every entry passes
    - present but empty: no entry passes
    - present and non-empty: an entry passes if any matcher matches
    """

    matchers: Optional[Tuple[Matcher, ...]] = None

    @classmethod
    def any(cls) -> "MatchSet":
        return cls(None)

    @classmethod
    def none(cls) -> "MatchSet":
        return cls(())

    @classmethod
    def of(cls, matchers: Optional[Iterable[Matcher]]) -> "MatchSet":
        if matchers is None:
            return cls(None)
        return cls(tuple(matchers))

    @property
    def is_pass_through(self) -> bool:
        return self.matchers is None

    @property
    def is_deny_all(self) -> bool:
        return self.matchers is not None and not self.matchers

    def allows(self, name: str, kind: EntryKind) -> bool:
        """Check whether an entry is allowed by this set."""
        if self.matchers is None:
            return True
        return matches_any(self.matchers, name, kind)

    def __len__(self) -> int:
        return len(self.matchers) if self.matchers else 0


def matcher_from_config(config: Union[str, Dict[str, Any]], allow_type: bool = True) -> Matcher:
    """Build a Matcher from its configuration form.

    Args:
        config: Bare regex string, or a mapping with one of name/pattern/ext/type
        allow_type: Whether entry-kind matchers are accepted

    Returns:
        Matcher instance

    Raises:
        ConfigError: If the matcher is malformed
    """
    validate_matcher_config(config, allow_type=allow_type)

    if isinstance(config, str):
        return Matcher.pattern(config)

    ((key, value),) = config.items()
    if key == ConfigKey.MATCH_NAME:
        return Matcher.name(value)
    elif key == ConfigKey.MATCH_PATTERN:
        return Matcher.pattern(value)
    elif key == ConfigKey.MATCH_EXT:
        return Matcher.extension(value)
    return Matcher.of_kind(EntryKind(value))


def match_set_from_config(
    config: Optional[Iterable[Union[str, Dict[str, Any]]]], allow_type: bool = False
) -> MatchSet:
    """Build a MatchSet; ``None`` keeps the pass-through state."""
    if config is None:
        return MatchSet.any()
    return MatchSet.of(matcher_from_config(item, allow_type=allow_type) for item in config)
