"""tidydir Auto-Move.

- AutoMoveResolver: computes MoveActions from MoveRules
- ScriptNamer: runs external naming scripts
- MoveExecutor: applies or simulates MoveActions
"""

from .actions import MoveAction, MoveOutcome
from .executor import MoveExecutor, effective_dry_run
from .naming import Namer, ScriptNamer
from .resolver import AutoMoveResolver, RuleResolution, destination_for

__all__ = [
    "MoveAction",
    "MoveOutcome",
    "Namer",
    "ScriptNamer",
    "AutoMoveResolver",
    "RuleResolution",
    "destination_for",
    "MoveExecutor",
    "effective_dry_run",
]
