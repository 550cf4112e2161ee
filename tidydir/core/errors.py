"""
tidydir Core: Error Types

ConfigError is fatal. The other kinds describe per-rule, per-entry and
per-action failures; the scanner and the move engine catch them and carry
them as values in scan reports and move actions.
"""
from tidydir.core.constants import ErrorCode


class TidyDirError(Exception):
    """Base exception for tidydir errors."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.INTERNAL_ERROR):
        """Initialize error.

        Args:
            message: Error message
            error_code: Associated error code
        """
        self.message = message
        self.error_code = error_code
        super().__init__(message)


class ConfigError(TidyDirError):
    """Malformed configuration or matcher. Fatal before any scanning starts."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.INVALID_INPUT):
        super().__init__(message, error_code)


class PathAccessError(TidyDirError):
    """A configured directory is missing, not a directory, or unreadable."""

    def __init__(self, message: str, path: str, error_code: ErrorCode = ErrorCode.NOT_FOUND):
        super().__init__(message, error_code)
        self.path = path


class ScriptError(TidyDirError):
    """A naming script failed, timed out, or printed no usable name."""

    def __init__(self, message: str, script: str, error_code: ErrorCode = ErrorCode.SCRIPT_FAILED):
        super().__init__(message, error_code)
        self.script = script


class FileSystemError(TidyDirError):
    """A move failed with an I/O or permission error."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.INTERNAL_ERROR):
        super().__init__(message, error_code)


class ConflictError(TidyDirError):
    """The destination exists and overwriting is disabled."""

    def __init__(self, message: str, destination: str):
        super().__init__(message, ErrorCode.CONFLICT)
        self.destination = destination
