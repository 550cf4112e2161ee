#!/usr/bin/env python3
"""Auto-move resolution.

This module turns MoveRules into an ordered list of MoveActions:
- Lists the immediate children of each rule's parent (no recursion)
- Keeps the children matching any of the rule's matchers
- Computes each destination: ``to/<basename>``, or the name printed by the
  rule's naming script (absolute names replace ``to`` entirely)
- Drops actions whose destination equals the source

Resolution never touches the filesystem beyond listing directories and
running naming scripts. Overwrite checks belong to the executor.

Naming scripts may run on a bounded thread pool. Results are collected by
index, so the action order is the same whatever the worker count.

Example:
    >>> resolver = AutoMoveResolver(script_workers=4)
    >>> actions = resolver.resolve(ruleset.move_rules)
"""

import os
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple, Union

from tidydir.core.constants import EntryKind, Limits
from tidydir.core.errors import PathAccessError, ScriptError
from tidydir.core.file_ops import entry_kind, list_dir
from tidydir.infrastructure.logger import Logger, get_logger
from tidydir.moves.actions import MoveAction, MoveOutcome
from tidydir.moves.naming import Namer, ScriptNamer
from tidydir.rules.ruleset import MoveRule


@dataclass
class RuleResolution:
    """Resolution result for one MoveRule."""

    rule: MoveRule
    actions: List[MoveAction] = field(default_factory=list)
    error: Optional[PathAccessError] = None


def destination_for(rule: MoveRule, source: str, name: Optional[str] = None) -> str:
    """Compute the destination of ``source`` under ``rule``.

    Args:
        rule: Move rule
        source: Absolute source path
        name: Name printed by the naming script, or None to keep the basename

    Returns:
        Normalized absolute destination path
    """
    if name is None:
        name = os.path.basename(source)
    if os.path.isabs(name):
        return os.path.normpath(name)
    return os.path.normpath(os.path.join(rule.to, name))


class AutoMoveResolver:
    """Computes move actions for move rules."""

    def __init__(
        self,
        namer: Optional[Namer] = None,
        script_workers: int = Limits.DEFAULT_SCRIPT_WORKERS,
        logger: Optional[Logger] = None,
    ):
        """Initialize resolver.

        Args:
            namer: Naming-script runner (default: ScriptNamer subprocess runner)
            script_workers: Maximum naming scripts running at once
            logger: Logger instance
        """
        self.logger = logger or get_logger()
        self.namer = namer or ScriptNamer(logger=self.logger)
        self.script_workers = max(1, script_workers)

    def resolve(self, move_rules: Iterable[MoveRule]) -> List[MoveAction]:
        """Resolve every rule and flatten the actions in declaration order."""
        actions: List[MoveAction] = []
        for resolution in self.resolve_rules(move_rules):
            actions.extend(resolution.actions)
        return actions

    def resolve_rules(self, move_rules: Iterable[MoveRule]) -> List[RuleResolution]:
        """Resolve every rule, keeping per-rule errors.

        Args:
            move_rules: Rules in declaration order

        Returns:
            One RuleResolution per rule, in the same order
        """
        rules = list(move_rules)
        if self.script_workers > 1 and any(r.to_script for r in rules):
            with ThreadPoolExecutor(max_workers=self.script_workers) as pool:
                return [self.resolve_rule(rule, pool) for rule in rules]
        return [self.resolve_rule(rule) for rule in rules]

    def resolve_rule(self, rule: MoveRule, pool: Optional[Executor] = None) -> RuleResolution:
        """Resolve a single rule.

        Args:
            rule: Rule to resolve
            pool: Optional executor for naming scripts

        Returns:
            RuleResolution; ``error`` is set when the parent cannot be listed
        """
        resolution = RuleResolution(rule=rule)

        with self.logger.add_context(rule=rule.display_name):
            try:
                matched = self._matched_children(rule)
            except PathAccessError as e:
                self.logger.warning("Cannot list parent directory", path=rule.parent, reason=e.message)
                resolution.error = e
                return resolution

            names = self._names_for(rule, [source for source, _ in matched], pool)

            for (source, kind), name in zip(matched, names):
                if isinstance(name, ScriptError):
                    self.logger.warning("Naming script failed", source=source, reason=name.message)
                    resolution.actions.append(
                        MoveAction(
                            rule=rule,
                            source=source,
                            destination=None,
                            kind=kind,
                            outcome=MoveOutcome.FAILED,
                            error=name,
                        )
                    )
                    continue

                destination = destination_for(rule, source, name)
                if destination == os.path.normpath(source):
                    self.logger.debug("Already in place", source=source)
                    continue

                self.logger.debug("Resolved move", source=source, destination=destination)
                resolution.actions.append(
                    MoveAction(rule=rule, source=source, destination=destination, kind=kind)
                )

        self.logger.info("Resolved rule", rule=rule.display_name, actions=len(resolution.actions))
        return resolution

    def count_matches(self, move_rules: Iterable[MoveRule], stop_at_first: bool = False) -> int:
        """Count entries the rules would move, without running naming scripts.

        Rules whose parent cannot be listed count as zero. Entries that would
        stay in place (no script and ``to`` equal to ``parent``) are not counted.

        Args:
            move_rules: Rules to count
            stop_at_first: Return as soon as one entry is found

        Returns:
            Number of matching entries
        """
        count = 0
        for rule in move_rules:
            if rule.to_script is None and os.path.normpath(rule.to) == os.path.normpath(rule.parent):
                continue
            try:
                count += len(self._matched_children(rule))
            except PathAccessError:
                continue
            if stop_at_first and count:
                break
        return count

    def _matched_children(self, rule: MoveRule) -> List[Tuple[str, EntryKind]]:
        matched = []
        for entry in list_dir(rule.parent):
            kind = entry_kind(entry)
            if rule.matches(entry.name, kind):
                matched.append((entry.path, kind))
        return matched

    def _names_for(
        self, rule: MoveRule, sources: List[str], pool: Optional[Executor]
    ) -> List[Union[None, str, ScriptError]]:
        """Destination names by index: None keeps the basename."""
        if rule.to_script is None:
            return [None] * len(sources)

        def run(source: str) -> Union[str, ScriptError]:
            try:
                return self.namer(rule.to_script, source)
            except ScriptError as e:
                return e

        if pool is None:
            return [run(source) for source in sources]
        return list(pool.map(run, sources))
