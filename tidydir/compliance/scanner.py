#!/usr/bin/env python3
"""Compliance scanner for configured directories.

This module walks the directories named by DirRules and reports every entry
that its rule does not allow:
- Directories are checked against ``allowed_dirs``, everything else
  against ``allowed_files``
- Recursive rules apply the same MatchSets to every subdirectory
- ``recursive_ignore_children`` prunes descent but does not exempt the
  directory entry itself
- A missing or unreadable rule directory is recorded on its report and the
  scan moves on to the next rule

The walk is depth-first pre-order: a subdirectory's contents are reported
right after the subdirectory itself. It keeps an explicit stack of directory
iterators, so tree depth is bounded by memory rather than by the
interpreter's recursion limit. Symlinked directories are classified as
directories but never descended into.

Example:
    >>> scanner = ComplianceScanner()
    >>> for report in scanner.scan(ruleset.dir_rules):
    ...     print(report.rule.path, len(report.entries))
"""

import os
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional

from tidydir.core.constants import EntryKind
from tidydir.core.errors import PathAccessError
from tidydir.core.file_ops import entry_kind, list_dir
from tidydir.infrastructure.logger import Logger, get_logger
from tidydir.rules.ruleset import DirRule


@dataclass(frozen=True)
class ComplianceEntry:
    """A misplaced directory entry."""

    path: str
    kind: EntryKind

    @property
    def name(self) -> str:
        return os.path.basename(self.path)

    def relative_to(self, root: str) -> str:
        return os.path.relpath(self.path, root)


@dataclass
class RuleReport:
    """Scan result for one DirRule."""

    rule: DirRule
    entries: List[ComplianceEntry] = field(default_factory=list)
    error: Optional[PathAccessError] = None

    @property
    def ok(self) -> bool:
        """True when the directory was scanned and nothing is misplaced."""
        return self.error is None and not self.entries

    @property
    def directories(self) -> List[ComplianceEntry]:
        return [e for e in self.entries if e.kind == EntryKind.DIRECTORY]

    @property
    def files(self) -> List[ComplianceEntry]:
        return [e for e in self.entries if e.kind == EntryKind.FILE]


class ComplianceScanner:
    """Classifies directory entries as allowed or misplaced."""

    def __init__(self, logger: Optional[Logger] = None):
        self.logger = logger or get_logger()

    def scan(self, dir_rules: Iterable[DirRule]) -> List[RuleReport]:
        """Scan every rule in declaration order.

        Args:
            dir_rules: Rules to check

        Returns:
            One RuleReport per rule, in the same order
        """
        reports = [self.scan_rule(rule) for rule in dir_rules]
        misplaced = sum(len(r.entries) for r in reports)
        self.logger.info("Compliance scan finished", rules=len(reports), misplaced=misplaced)
        return reports

    def scan_rule(self, rule: DirRule) -> RuleReport:
        """Scan a single DirRule.

        Args:
            rule: Rule to check

        Returns:
            RuleReport with misplaced entries, or with ``error`` set when the
            rule directory itself cannot be listed
        """
        report = RuleReport(rule=rule)

        try:
            root_entries = list_dir(rule.path)
        except PathAccessError as e:
            self.logger.warning("Cannot scan directory", path=rule.path, reason=e.message)
            report.error = e
            return report

        stack: List[Iterator[os.DirEntry]] = [iter(root_entries)]
        while stack:
            entry = next(stack[-1], None)
            if entry is None:
                stack.pop()
                continue
            kind = entry_kind(entry)

            if not rule.allows(entry.name, kind):
                self.logger.debug("Misplaced entry", path=entry.path, kind=kind.value)
                report.entries.append(ComplianceEntry(path=entry.path, kind=kind))

            if not rule.recursive or not self._is_real_dir(entry):
                continue

            if rule.prunes(entry.name):
                self.logger.debug("Pruned from recursion", path=entry.path)
                continue

            try:
                stack.append(iter(list_dir(entry.path)))
            except PathAccessError as e:
                self.logger.warning("Skipping unreadable subdirectory", path=entry.path, reason=e.message)

        self.logger.debug("Scanned directory", path=rule.path, misplaced=len(report.entries))
        return report

    @staticmethod
    def _is_real_dir(entry: os.DirEntry) -> bool:
        try:
            return entry.is_dir(follow_symlinks=False)
        except OSError:
            return False
