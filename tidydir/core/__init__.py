"""tidydir Core - constants, error types and configuration validators.

Import specific names from submodules:
    from tidydir.core.constants import ErrorCode, EntryKind
    from tidydir.core.errors import ConfigError
    from tidydir.core import validators
"""

from tidydir.core import constants, errors, validators

__all__ = [
    "constants",
    "errors",
    "validators",
]
