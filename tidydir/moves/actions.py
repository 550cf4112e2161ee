#!/usr/bin/env python3
"""Move actions and their outcomes.

A MoveAction is created by the resolver (PLANNED, or FAILED when the naming
script failed) and annotated by the executor with its final outcome. Actions
are never persisted.
"""

import os
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from tidydir.core.constants import EntryKind
from tidydir.core.errors import TidyDirError
from tidydir.rules.ruleset import MoveRule


class MoveOutcome(Enum):
    """Outcome of a move action."""

    PLANNED = "planned"  # Would be moved (dry run) or not executed yet
    MOVED = "moved"  # Moved successfully
    SKIPPED_CONFLICT = "skipped_conflict"  # Destination exists, overwrite disabled
    FAILED = "failed"  # Naming script or filesystem error


@dataclass(frozen=True)
class MoveAction:
    """One source -> destination relocation."""

    rule: MoveRule
    source: str
    destination: Optional[str]
    kind: EntryKind = EntryKind.FILE
    outcome: MoveOutcome = MoveOutcome.PLANNED
    error: Optional[TidyDirError] = None

    @property
    def reason(self) -> Optional[str]:
        """Human-readable failure or skip reason."""
        return self.error.message if self.error is not None else None

    @property
    def succeeded(self) -> bool:
        """True for actions that were moved or would be moved."""
        return self.outcome in (MoveOutcome.PLANNED, MoveOutcome.MOVED)

    @property
    def destination_dir(self) -> Optional[str]:
        if self.destination is None:
            return None
        return os.path.dirname(self.destination)

    def __str__(self) -> str:
        return f"{self.source} -> {self.destination} [{self.outcome.value}]"
