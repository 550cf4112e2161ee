#!/usr/bin/env python3
"""Move execution.

This module applies (or simulates) resolved MoveActions one at a time, in
resolver order:
- Dry runs never touch the filesystem
- An existing destination is a conflict unless overwriting is allowed
- Missing destination directories are created
- Moves work across filesystems (rename, then copy-and-delete fallback)
- A failing action is recorded and execution continues with the next one

Example:
    >>> executor = MoveExecutor()
    >>> done = executor.execute(actions, effective_dry=False, allow_overwrite=False)
"""

import dataclasses
import os
from typing import Iterable, List, Optional, Set

from tidydir.core.constants import ErrorCode
from tidydir.core.errors import ConflictError, FileSystemError
from tidydir.core.file_ops import move_path
from tidydir.infrastructure.logger import Logger, get_logger
from tidydir.moves.actions import MoveAction, MoveOutcome


def effective_dry_run(requested: bool, force_dry_run: bool) -> bool:
    """The configured force-dry-run rail cannot be overridden from the CLI."""
    return requested or force_dry_run


class MoveExecutor:
    """Performs or simulates move actions sequentially."""

    def __init__(self, logger: Optional[Logger] = None):
        self.logger = logger or get_logger()

    def execute(
        self, actions: Iterable[MoveAction], effective_dry: bool, allow_overwrite: bool
    ) -> List[MoveAction]:
        """Execute actions in order.

        Args:
            actions: Actions from the resolver
            effective_dry: Simulate only (user --dry OR configured force-dry-run)
            allow_overwrite: Replace existing destinations

        Returns:
            The actions, in input order, annotated with their final outcome
        """
        # Destinations taken by earlier planned actions of this batch
        claimed: Set[str] = set()
        results = []
        for action in actions:
            result = self.execute_one(action, effective_dry, allow_overwrite, claimed)
            if result.outcome == MoveOutcome.PLANNED and result.destination is not None:
                claimed.add(result.destination)
            results.append(result)

        counts = {outcome.value: 0 for outcome in MoveOutcome}
        for result in results:
            counts[result.outcome.value] += 1
        self.logger.info("Move execution finished", dry_run=effective_dry, **counts)

        return results

    def execute_one(
        self,
        action: MoveAction,
        effective_dry: bool,
        allow_overwrite: bool,
        claimed: Optional[Set[str]] = None,
    ) -> MoveAction:
        """Execute a single action.

        Actions that already failed during resolution are returned unchanged.
        In a dry run, destinations in ``claimed`` count as existing, since a
        real run would have moved an entry there already.
        """
        if action.outcome == MoveOutcome.FAILED or action.destination is None:
            return action

        source, destination = action.source, action.destination

        taken = effective_dry and claimed is not None and destination in claimed
        if (taken or os.path.lexists(destination)) and not allow_overwrite:
            self.logger.warning("Destination exists, skipping", source=source, destination=destination)
            return dataclasses.replace(
                action,
                outcome=MoveOutcome.SKIPPED_CONFLICT,
                error=ConflictError(f"Moving to {destination} would overwrite an existing entry", destination),
            )

        if effective_dry:
            self.logger.debug("[DRY RUN] Would move", source=source, destination=destination)
            return dataclasses.replace(action, outcome=MoveOutcome.PLANNED, error=None)

        parent = os.path.dirname(destination)
        try:
            if parent and not os.path.isdir(parent):
                os.makedirs(parent, exist_ok=True)
        except OSError as e:
            return self._failed(action, f"Couldn't create directory {parent}: {e.strerror or e}", e)

        try:
            move_path(source, destination)
        except OSError as e:
            return self._failed(action, f"Couldn't move {source} to {destination}: {e.strerror or e}", e)

        self.logger.info("Moved", source=source, destination=destination)
        return dataclasses.replace(action, outcome=MoveOutcome.MOVED, error=None)

    def _failed(self, action: MoveAction, message: str, exc: OSError) -> MoveAction:
        if isinstance(exc, PermissionError):
            code = ErrorCode.PERMISSION_DENIED
        elif isinstance(exc, FileNotFoundError):
            code = ErrorCode.NOT_FOUND
        else:
            code = ErrorCode.INTERNAL_ERROR

        self.logger.warning("Move failed", source=action.source, reason=message)
        return dataclasses.replace(action, outcome=MoveOutcome.FAILED, error=FileSystemError(message, code))
