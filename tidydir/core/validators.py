"""
tidydir Core: Configuration Validators.

This module checks the loosely-typed configuration document before it is
turned into a RuleSet: section layout, known keys, value types, matcher
shapes and regular expressions. Paths are checked for shape only; variable
expansion and absoluteness are handled when the RuleSet is built.
"""
import re
from typing import Any, Dict, Pattern, Union

from tidydir.core.constants import ConfigKey, EntryKind, ErrorCode, Limits, ReportInfo
from tidydir.core.errors import ConfigError

LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

SETTINGS_FIELDS = {
    ConfigKey.COLOR,
    ConfigKey.UNICODE,
    ConfigKey.HIDE_OK,
    ConfigKey.LOG_LEVEL,
    ConfigKey.LOG_FILE,
}
DIR_FIELDS = {
    ConfigKey.RECURSIVE,
    ConfigKey.RECURSIVE_IGNORE,
    ConfigKey.ALLOWED_DIRS,
    ConfigKey.ALLOWED_FILES,
}
AUTOMOVE_FIELDS = {
    ConfigKey.FORCE_DRY_RUN,
    ConfigKey.ALLOW_OVERWRITE,
    ConfigKey.REPORT_INFO,
    ConfigKey.SCRIPT_WORKERS,
    ConfigKey.SCRIPT_TIMEOUT,
    ConfigKey.RULES,
}
MOVE_RULE_FIELDS = {
    ConfigKey.RULE_NAME,
    ConfigKey.RULE_PARENT,
    ConfigKey.RULE_MATCH,
    ConfigKey.RULE_TO,
    ConfigKey.RULE_TO_SCRIPT,
}
MATCHER_FIELDS = {
    ConfigKey.MATCH_NAME,
    ConfigKey.MATCH_PATTERN,
    ConfigKey.MATCH_EXT,
    ConfigKey.MATCH_TYPE,
}


class ValidationError(ConfigError):
    """Raised when the configuration document is structurally invalid."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.INVALID_INPUT):
        """Initialize ValidationError.

        Args:
            message: Error message
            error_code: Associated error code
        """
        super().__init__(message, error_code)


def validate_config(config: Dict[str, Any]) -> bool:
    """Validate the merged tidydir configuration.

    Args:
        config: Configuration dictionary

    Returns:
        True if valid

    Raises:
        ValidationError: If configuration is invalid
    """
    if not isinstance(config, dict):
        raise ValidationError("Configuration must be a dictionary")

    known = {ConfigKey.SETTINGS, ConfigKey.DIRS, ConfigKey.AUTOMOVE}
    unknown = set(config.keys()) - known
    if unknown:
        raise ValidationError(f"Unknown configuration sections: {', '.join(sorted(unknown))}")

    if ConfigKey.SETTINGS in config:
        validate_settings_config(config[ConfigKey.SETTINGS])

    if ConfigKey.DIRS in config:
        dirs = config[ConfigKey.DIRS]
        if dirs is None:
            dirs = {}
        if not isinstance(dirs, dict):
            raise ValidationError("'dirs' must be a mapping of directory path to rules")

        for path, dir_config in dirs.items():
            try:
                validate_dir_config(path, dir_config)
            except ValidationError as e:
                raise ValidationError(f"Invalid directory rule '{path}': {e}")

    if ConfigKey.AUTOMOVE in config:
        validate_automove_config(config[ConfigKey.AUTOMOVE])

    return True


def validate_settings_config(settings: Dict[str, Any]) -> bool:
    """Validate the settings section.

    Raises:
        ValidationError: If settings are invalid
    """
    if not isinstance(settings, dict):
        raise ValidationError("'settings' must be a mapping")

    _reject_unknown(settings, SETTINGS_FIELDS, "settings")

    for key in (ConfigKey.COLOR, ConfigKey.UNICODE, ConfigKey.HIDE_OK):
        if key in settings:
            _require_bool(settings[key], f"settings.{key}")

    level = settings.get(ConfigKey.LOG_LEVEL)
    if level is not None:
        if not isinstance(level, str) or level.upper() not in LOG_LEVELS:
            raise ValidationError(
                f"Invalid log level: {level}. Must be one of {sorted(LOG_LEVELS)}"
            )

    log_file = settings.get(ConfigKey.LOG_FILE)
    if log_file is not None:
        validate_path(log_file)

    return True


def validate_dir_config(path: str, dir_config: Dict[str, Any]) -> bool:
    """Validate one entry of the dirs section.

    Args:
        path: Directory path (mapping key), before variable expansion
        dir_config: Rule body

    Returns:
        True if valid

    Raises:
        ValidationError: If the rule is invalid
    """
    validate_path(path)

    # An empty body is allowed: everything is pass-through
    if dir_config is None:
        return True

    if not isinstance(dir_config, dict):
        raise ValidationError("Directory rule must be a mapping")

    _reject_unknown(dir_config, DIR_FIELDS, "directory rule")

    if ConfigKey.RECURSIVE in dir_config:
        _require_bool(dir_config[ConfigKey.RECURSIVE], ConfigKey.RECURSIVE)

    for key in (ConfigKey.ALLOWED_DIRS, ConfigKey.ALLOWED_FILES, ConfigKey.RECURSIVE_IGNORE):
        if key not in dir_config:
            continue
        matchers = dir_config[key]
        if matchers is None:
            continue
        if not isinstance(matchers, list):
            raise ValidationError(f"'{key}' must be a list of matchers")
        for i, matcher in enumerate(matchers):
            try:
                validate_matcher_config(matcher, allow_type=False)
            except ValidationError as e:
                raise ValidationError(f"Invalid matcher at {key}[{i}]: {e}")

    return True


def validate_automove_config(automove: Dict[str, Any]) -> bool:
    """Validate the automove section.

    Raises:
        ValidationError: If the section is invalid
    """
    if not isinstance(automove, dict):
        raise ValidationError("'automove' must be a mapping")

    _reject_unknown(automove, AUTOMOVE_FIELDS, "automove")

    for key in (ConfigKey.FORCE_DRY_RUN, ConfigKey.ALLOW_OVERWRITE):
        if key in automove:
            _require_bool(automove[key], f"automove.{key}")

    if ConfigKey.REPORT_INFO in automove:
        info = automove[ConfigKey.REPORT_INFO]
        try:
            ReportInfo(info)
        except ValueError:
            valid = [r.value for r in ReportInfo]
            raise ValidationError(f"Invalid report-info: {info}. Must be one of {valid}")

    if ConfigKey.SCRIPT_WORKERS in automove:
        validate_workers(automove[ConfigKey.SCRIPT_WORKERS])

    if ConfigKey.SCRIPT_TIMEOUT in automove:
        validate_timeout(automove[ConfigKey.SCRIPT_TIMEOUT])

    rules = automove.get(ConfigKey.RULES)
    if rules is not None:
        if not isinstance(rules, list):
            raise ValidationError("automove.rules must be a list")

        for i, rule in enumerate(rules):
            try:
                validate_move_rule_config(rule)
            except ValidationError as e:
                raise ValidationError(f"Invalid auto-move rule at index {i}: {e}")

    return True


def validate_move_rule_config(rule: Dict[str, Any]) -> bool:
    """Validate one auto-move rule.

    Args:
        rule: Rule configuration dictionary

    Returns:
        True if valid

    Raises:
        ValidationError: If rule is invalid
    """
    if not isinstance(rule, dict):
        raise ValidationError("Auto-move rule must be a mapping")

    _reject_unknown(rule, MOVE_RULE_FIELDS, "auto-move rule")

    for key in (ConfigKey.RULE_PARENT, ConfigKey.RULE_TO):
        if key not in rule:
            raise ValidationError(f"Auto-move rule must have '{key}' field")
        validate_path(rule[key])

    if ConfigKey.RULE_MATCH not in rule:
        raise ValidationError("Auto-move rule must have 'match' field")

    matchers = rule[ConfigKey.RULE_MATCH]
    if not isinstance(matchers, list):
        matchers = [matchers]
    for i, matcher in enumerate(matchers):
        try:
            validate_matcher_config(matcher, allow_type=True)
        except ValidationError as e:
            raise ValidationError(f"Invalid matcher at match[{i}]: {e}")

    name = rule.get(ConfigKey.RULE_NAME)
    if name is not None and (not isinstance(name, str) or not name.strip()):
        raise ValidationError(f"Rule name must be a non-empty string: {name!r}")

    script = rule.get(ConfigKey.RULE_TO_SCRIPT)
    if script is not None:
        validate_path(script)

    return True


def validate_matcher_config(matcher: Union[str, Dict[str, Any]], allow_type: bool = True) -> bool:
    """Validate a single matcher.

    A matcher is either a bare string (a regular expression) or a mapping
    with exactly one of: name, pattern, ext, type.

    Args:
        matcher: Matcher configuration
        allow_type: Whether the entry-kind form is accepted here

    Returns:
        True if valid

    Raises:
        ValidationError: If matcher is invalid
    """
    if isinstance(matcher, str):
        validate_regex(matcher)
        return True

    if not isinstance(matcher, dict):
        raise ValidationError(f"Matcher must be a string or a mapping, got {type(matcher).__name__}")

    keys = set(matcher.keys())
    if len(keys) != 1 or not keys <= MATCHER_FIELDS:
        raise ValidationError(
            f"Matcher must have exactly one of {sorted(MATCHER_FIELDS)}, got {sorted(keys)}"
        )

    (key,) = keys
    value = matcher[key]

    if key == ConfigKey.MATCH_TYPE:
        if not allow_type:
            raise ValidationError("'type' matchers are only allowed in auto-move rules")
        try:
            EntryKind(value)
        except ValueError:
            valid = [k.value for k in EntryKind]
            raise ValidationError(f"Invalid entry type: {value}. Must be one of {valid}")
        return True

    if not isinstance(value, str) or not value:
        raise ValidationError(f"Matcher '{key}' must be a non-empty string")

    if key == ConfigKey.MATCH_PATTERN:
        validate_regex(value)
    elif "/" in value or "\0" in value:
        raise ValidationError(f"Matcher '{key}' cannot contain '/' or null bytes: {value!r}")

    return True


def validate_path(path: str) -> bool:
    """Validate the shape of a configured path.

    Args:
        path: Path to validate

    Returns:
        True if valid

    Raises:
        ValidationError: If path is invalid
    """
    if not isinstance(path, str):
        raise ValidationError(f"Path must be string, got {type(path).__name__}")

    if not path:
        raise ValidationError("Path cannot be empty")

    if len(path) > Limits.MAX_PATH_LENGTH:
        raise ValidationError(f"Path exceeds maximum length ({Limits.MAX_PATH_LENGTH})")

    if "\0" in path:
        raise ValidationError("Path contains null bytes")

    if any(ord(c) < 32 and c not in "\t" for c in path):
        raise ValidationError("Path contains control characters")

    return True


def validate_regex(pattern: str) -> Pattern[str]:
    """Validate and compile a regex pattern.

    Args:
        pattern: Regex pattern string

    Returns:
        Compiled regex pattern

    Raises:
        ValidationError: If pattern is invalid
    """
    if not isinstance(pattern, str) or not pattern:
        raise ValidationError("Regex pattern cannot be empty")

    if len(pattern) > Limits.MAX_PATTERN_LENGTH:
        raise ValidationError(f"Pattern exceeds maximum length ({Limits.MAX_PATTERN_LENGTH})")

    try:
        return re.compile(pattern)
    except re.error as e:
        raise ValidationError(f"Failed to compile regex pattern {pattern!r}: {e}")


def validate_timeout(timeout: Union[int, float]) -> bool:
    """Validate naming-script timeout.

    Raises:
        ValidationError: If timeout is invalid
    """
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)):
        raise ValidationError(f"Timeout must be numeric, got {type(timeout).__name__}")

    if timeout <= 0:
        raise ValidationError(f"Timeout must be positive: {timeout}")

    if timeout > Limits.MAX_SCRIPT_TIMEOUT:
        raise ValidationError(
            f"Timeout exceeds maximum ({Limits.MAX_SCRIPT_TIMEOUT} seconds): {timeout}"
        )

    return True


def validate_workers(workers: int) -> bool:
    """Validate the naming-script worker count.

    Raises:
        ValidationError: If the count is invalid
    """
    if isinstance(workers, bool) or not isinstance(workers, int):
        raise ValidationError(f"script-workers must be an integer, got {type(workers).__name__}")

    if workers < 1 or workers > Limits.MAX_SCRIPT_WORKERS:
        raise ValidationError(
            f"script-workers must be in range 1-{Limits.MAX_SCRIPT_WORKERS}, got {workers}"
        )

    return True


def _require_bool(value: Any, name: str) -> None:
    if not isinstance(value, bool):
        raise ValidationError(f"{name} must be boolean: {value!r}")


def _reject_unknown(section: Dict[str, Any], valid: set, label: str) -> None:
    unknown = set(section.keys()) - valid
    if unknown:
        raise ValidationError(f"Unknown {label} fields: {', '.join(sorted(map(str, unknown)))}")
