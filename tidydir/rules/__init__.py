"""tidydir Rules System.

This module provides entry matching and the rule model:
- Matcher / MatchSet: name, regex, extension and entry-kind matching
- DirRule / MoveRule / RuleSet: typed rules built from configuration

Rules decide which directory entries are allowed where, and which entries
should be moved to another directory.
"""

from .patterns import (
    Matcher,
    MatcherType,
    MatchSet,
    match_set_from_config,
    matcher_from_config,
    matches_any,
)
from .ruleset import DirRule, MoveRule, RuleSet, build_ruleset, is_under

__all__ = [
    # Matching
    "MatcherType",
    "Matcher",
    "MatchSet",
    "matcher_from_config",
    "match_set_from_config",
    "matches_any",
    # Rule model
    "DirRule",
    "MoveRule",
    "RuleSet",
    "build_ruleset",
    "is_under",
]
