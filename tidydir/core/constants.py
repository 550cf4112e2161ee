"""
tidydir Core: Constants and Type Definitions

This module provides system-wide constants, error codes, exit codes and
configuration keys shared by every layer.
"""
from enum import Enum, IntEnum

# Version information
TIDYDIR_VERSION = "1.0.0"

# Environment variables
CONFIG_FILE_ENV = "TIDYDIR_CONFIG_FILE"
ENV_PREFIX = "TIDYDIR_"


class ErrorCode(IntEnum):
    """Standardized error codes for tidydir operations."""

    SUCCESS = 0  # Operation completed successfully
    INVALID_INPUT = 1  # Bad path, invalid configuration
    NOT_FOUND = 2  # File or directory doesn't exist
    PERMISSION_DENIED = 3  # Insufficient permissions
    CONFLICT = 4  # Destination already exists
    SCRIPT_FAILED = 5  # Naming script failed or printed nothing
    INTERNAL_ERROR = 6  # Bug in tidydir
    TIMEOUT = 7  # Naming script timed out
    NOT_A_DIRECTORY = 8  # Configured directory is a file


class ExitCode(IntEnum):
    """Process exit codes returned by the CLI."""

    SUCCESS = 0
    FATAL = 1  # Configuration or CLI error, nothing was scanned
    PARTIAL = 2  # Run completed but some items failed or were skipped
    INTERRUPTED = 130


class EntryKind(Enum):
    """Filesystem kind of a directory entry."""

    FILE = "file"
    DIRECTORY = "directory"


class ReportInfo(Enum):
    """Auto-move hint appended to the end of a check report."""

    NO = "no"  # No hint
    ANY = "any"  # Tell whether anything can be moved
    COUNT = "count"  # Tell how many entries can be moved


class Limits:
    """Resource limits and default values."""

    MAX_PATH_LENGTH = 4096
    MAX_PATTERN_LENGTH = 4096

    # Naming scripts
    DEFAULT_SCRIPT_TIMEOUT = 30  # seconds
    MAX_SCRIPT_TIMEOUT = 3600  # seconds
    DEFAULT_SCRIPT_WORKERS = 1
    MAX_SCRIPT_WORKERS = 64

    # Log file rotation
    LOG_FILE_MAX_BYTES = 10 * 1024 * 1024  # 10MB
    LOG_FILE_BACKUPS = 5


class ConfigKey:
    """Configuration key constants."""

    # Top-level sections
    SETTINGS = "settings"
    DIRS = "dirs"
    AUTOMOVE = "automove"

    # settings
    COLOR = "color"
    UNICODE = "use-unicode"
    HIDE_OK = "hide-ok-directories"
    LOG_LEVEL = "log-level"
    LOG_FILE = "log-file"

    # dirs.<path>
    RECURSIVE = "recursive"
    RECURSIVE_IGNORE = "recursive-ignore-children"
    ALLOWED_DIRS = "allowed-dirs"
    ALLOWED_FILES = "allowed-files"

    # automove
    FORCE_DRY_RUN = "force-dry-run"
    ALLOW_OVERWRITE = "allow-overwrite"
    REPORT_INFO = "report-info"
    SCRIPT_WORKERS = "script-workers"
    SCRIPT_TIMEOUT = "script-timeout"
    RULES = "rules"

    # automove.rules[]
    RULE_NAME = "name"
    RULE_PARENT = "parent"
    RULE_MATCH = "match"
    RULE_TO = "to"
    RULE_TO_SCRIPT = "to-script"

    # matchers
    MATCH_NAME = "name"
    MATCH_PATTERN = "pattern"
    MATCH_EXT = "ext"
    MATCH_TYPE = "type"


# Compiled defaults (lowest configuration layer)
DEFAULT_CONFIG = {
    ConfigKey.SETTINGS: {
        ConfigKey.COLOR: True,
        ConfigKey.UNICODE: False,
        ConfigKey.HIDE_OK: False,
        ConfigKey.LOG_LEVEL: "WARNING",
        ConfigKey.LOG_FILE: None,
    },
    ConfigKey.DIRS: {},
    ConfigKey.AUTOMOVE: {
        ConfigKey.FORCE_DRY_RUN: False,
        ConfigKey.ALLOW_OVERWRITE: False,
        ConfigKey.REPORT_INFO: ReportInfo.NO.value,
        ConfigKey.SCRIPT_WORKERS: Limits.DEFAULT_SCRIPT_WORKERS,
        ConfigKey.SCRIPT_TIMEOUT: Limits.DEFAULT_SCRIPT_TIMEOUT,
        ConfigKey.RULES: [],
    },
}

# Written to the user's config directory when no config file exists yet.
DEFAULT_CONFIG_FILE = """\
#----------------------------#
#      General Settings      #
#----------------------------#

settings:
  color: true # color terminal output
  use-unicode: false
  hide-ok-directories: false

#----------------------------#
#         Directories        #
#----------------------------#

dirs:
  "$HOME":
    allowed-dirs:
      - name: Downloads
      - name: Pictures
      - name: Desktop
      - name: Videos
      - name: Music
      - name: Documents
      - pattern: '^\\.' # any hidden directory
    allowed-files:
      - pattern: '^\\.' # any hidden file

  "$HOME/Videos":
    recursive: true # sub-folders get the same rules
    # no 'allowed-dirs' means any directory is valid
    allowed-files:
      - pattern: '\\.(mp4|mov|mkv)$'

  "$HOME/Music":
    recursive: true
    allowed-files:
      - pattern: '\\.(mp3|m4a|flac|opus)$'

  "$HOME/Downloads":
    allowed-dirs:
      - name: Videos
      - name: Music
      - name: Misc
    # no 'allowed-files' means any file is valid

#----------------------------#
#       Auto Move Rules      #
#----------------------------#

automove:
  # New configs start in dry mode. Set this to false once the rules look right.
  force-dry-run: true
  allow-overwrite: false
  report-info: count

  rules:
    - parent: "$HOME/Downloads"
      match:
        - pattern: '\\.(mp3|m4a|flac|opus)$'
      to: "$HOME/Downloads/Music"

    - parent: "$HOME/Downloads"
      match:
        - pattern: '\\.(mp4|mov|mkv)$'
      to: "$HOME/Downloads/Videos"
"""
