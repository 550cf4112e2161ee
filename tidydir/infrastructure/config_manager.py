#!/usr/bin/env python3
"""Layered configuration manager for tidydir.

This module provides configuration management with:
- 4-level precedence hierarchy (defaults, file, environment, CLI)
- YAML config files
- Environment variable overrides (TIDYDIR_<SECTION>_<KEY>)
- $VAR / ${VAR} / ~ expansion in configured paths, with XDG fallbacks
- Validation and conversion into a typed RuleSet and Settings

Example:
    >>> config = ConfigManager("~/.config/tidydir/tidydir.yaml")
    >>> config.get("automove.force-dry-run")
    True
    >>> ruleset = config.build_ruleset()
"""

import copy
import os
import re
import threading
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from tidydir.core.constants import (
    CONFIG_FILE_ENV,
    DEFAULT_CONFIG,
    DEFAULT_CONFIG_FILE,
    ENV_PREFIX,
    ConfigKey,
    ErrorCode,
    ReportInfo,
)
from tidydir.core.errors import ConfigError
from tidydir.core.validators import validate_config
from tidydir.rules.ruleset import RuleSet, build_ruleset

_VAR_PATTERN = re.compile(r"\$(?:\{(\w+)\}|(\w+))")

XDG_DEFAULTS = {
    "XDG_CONFIG_HOME": "~/.config",
    "XDG_DATA_HOME": "~/.local/share",
    "XDG_CACHE_HOME": "~/.cache",
    "XDG_STATE_HOME": "~/.local/state",
}


class ConfigSource(Enum):
    """Configuration source precedence levels."""

    COMPILED_DEFAULTS = 1  # Lowest precedence
    USER_CONFIG = 2
    ENVIRONMENT = 3
    CLI_ARGS = 4  # Highest precedence


@dataclass(frozen=True)
class Settings:
    """Process-wide settings passed explicitly to the components that need them."""

    color: bool = True
    unicode: bool = False
    hide_ok_directories: bool = False
    log_level: str = "WARNING"
    log_file: Optional[str] = None
    force_dry_run: bool = False
    allow_overwrite: bool = False
    report_info: ReportInfo = ReportInfo.NO
    script_workers: int = 1
    script_timeout: float = 30


class ConfigManager:
    """Thread-safe layered configuration manager.

    Manages configuration from multiple sources with precedence:
    1. Compiled defaults (lowest)
    2. User config file (YAML)
    3. Environment variables (TIDYDIR_*)
    4. CLI arguments (highest)
    """

    def __init__(
        self,
        config_file: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        """Initialize configuration manager.

        Args:
            config_file: Optional config file to load
            environ: Environment used for overrides and path expansion
                (defaults to os.environ)
        """
        self._config: Dict[ConfigSource, Dict[str, Any]] = {}
        self._lock = threading.RLock()
        self._environ: Mapping[str, str] = os.environ if environ is None else environ
        self._config_file: Optional[Path] = None

        self._config[ConfigSource.COMPILED_DEFAULTS] = copy.deepcopy(DEFAULT_CONFIG)

        if config_file:
            self.load_file(config_file)

        self._load_environment()

    @property
    def config_file(self) -> Optional[Path]:
        return self._config_file

    @property
    def config_dir(self) -> Optional[str]:
        """Directory of the loaded config file (relative to-script base)."""
        if self._config_file is None:
            return None
        return str(self._config_file.parent)

    def load_file(self, file_path: str, source: ConfigSource = ConfigSource.USER_CONFIG) -> None:
        """Load configuration from YAML file.

        Args:
            file_path: Path to YAML config file
            source: Configuration source level

        Raises:
            ConfigError: If file cannot be loaded or parsed
        """
        path = Path(os.path.expanduser(file_path)).resolve()

        if not path.exists():
            raise ConfigError(f"Config file not found: {file_path}", ErrorCode.NOT_FOUND)

        try:
            with open(path, "r", encoding="utf-8") as f:
                config_data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"YAML parse error in {file_path}: {e}")
        except OSError as e:
            raise ConfigError(f"Could not read config file {file_path}: {e}", ErrorCode.PERMISSION_DENIED)

        if config_data is None:
            config_data = {}
        if not isinstance(config_data, dict):
            raise ConfigError(f"Invalid config format in {file_path}: expected a mapping")

        with self._lock:
            self._config[source] = config_data
            self._config_file = path

    def load_dict(self, config_data: Dict[str, Any], source: ConfigSource = ConfigSource.CLI_ARGS) -> None:
        """Load configuration from dictionary.

        Args:
            config_data: Configuration dictionary
            source: Configuration source level
        """
        with self._lock:
            self._config[source] = copy.deepcopy(config_data)

    def _load_environment(self) -> None:
        """Load overrides from environment variables.

        Format: TIDYDIR_<SECTION>_<KEY>=value, underscores in KEY become dashes.
        Example: TIDYDIR_AUTOMOVE_FORCE_DRY_RUN=false
        """
        env_config: Dict[str, Dict[str, Any]] = {}
        sections = (ConfigKey.SETTINGS, ConfigKey.AUTOMOVE)

        for key, value in self._environ.items():
            if not key.startswith(ENV_PREFIX) or key == CONFIG_FILE_ENV:
                continue

            section, _, name = key[len(ENV_PREFIX):].lower().partition("_")
            if section not in sections or not name:
                continue

            env_config.setdefault(section, {})[name.replace("_", "-")] = self._parse_env_value(value)

        if env_config:
            with self._lock:
                self._config[ConfigSource.ENVIRONMENT] = env_config

    def _parse_env_value(self, value: str) -> Any:
        """Parse environment variable value into bool, int, float or str."""
        if value.lower() in ("true", "yes", "on"):
            return True
        if value.lower() in ("false", "no", "off"):
            return False

        try:
            return int(value)
        except ValueError:
            pass

        try:
            return float(value)
        except ValueError:
            pass

        return value

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by key.

        Args:
            key: Dot-separated key path (e.g., "automove.allow-overwrite")
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        with self._lock:
            for source in sorted(self._config.keys(), key=lambda s: s.value, reverse=True):
                value = self._get_nested(self._config[source], key)
                if value is not None:
                    return value

            return default

    def _get_nested(self, config: Dict[str, Any], key: str) -> Optional[Any]:
        current: Any = config
        for part in key.split("."):
            if not isinstance(current, dict) or part not in current:
                return None
            current = current[part]
        return current

    def set(self, key: str, value: Any, source: ConfigSource = ConfigSource.CLI_ARGS) -> None:
        """Set configuration value.

        Args:
            key: Dot-separated key path
            value: Value to set
            source: Configuration source level
        """
        with self._lock:
            current = self._config.setdefault(source, {})
            parts = key.split(".")
            for part in parts[:-1]:
                current = current.setdefault(part, {})
            current[parts[-1]] = value

    def get_all(self) -> Dict[str, Any]:
        """Get merged configuration from all sources.

        Returns:
            Merged configuration dictionary
        """
        with self._lock:
            merged: Dict[str, Any] = {}
            for source in sorted(self._config.keys(), key=lambda s: s.value):
                merged = self._deep_merge(merged, self._config[source])
            return merged

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        result = copy.deepcopy(base)

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = copy.deepcopy(value)

        return result

    def expand_path(self, path: str) -> str:
        """Expand ``~`` and ``$VAR``/``${VAR}`` in a configured path.

        XDG base directory variables fall back to their standard defaults
        when unset.

        Raises:
            ConfigError: If the path references an unknown variable
        """

        def replace(match: "re.Match[str]") -> str:
            name = match.group(1) or match.group(2)
            if name in self._environ:
                return self._environ[name]
            if name in XDG_DEFAULTS:
                return self._expand_user(XDG_DEFAULTS[name])
            raise ConfigError(f"Unknown variable ${name} in path: {path}")

        return self._expand_user(_VAR_PATTERN.sub(replace, path))

    def _expand_user(self, path: str) -> str:
        if path == "~" or path.startswith("~/"):
            home = self._environ.get("HOME") or os.path.expanduser("~")
            return home + path[1:]
        return path

    def expanded(self) -> Dict[str, Any]:
        """Merged configuration with every configured path expanded.

        Raises:
            ConfigError: If the merged document is invalid
        """
        config = self.get_all()
        validate_config(config)

        dirs = config.get(ConfigKey.DIRS) or {}
        expanded_dirs: Dict[str, Any] = {}
        for path, body in dirs.items():
            expanded = self.expand_path(path)
            if expanded in expanded_dirs:
                raise ConfigError(f"Directory configured twice: {expanded}")
            expanded_dirs[expanded] = body
        config[ConfigKey.DIRS] = expanded_dirs

        automove = config.get(ConfigKey.AUTOMOVE) or {}
        for rule in automove.get(ConfigKey.RULES) or []:
            for key in (ConfigKey.RULE_PARENT, ConfigKey.RULE_TO, ConfigKey.RULE_TO_SCRIPT):
                if rule.get(key) is not None:
                    rule[key] = self.expand_path(rule[key])

        settings = config.get(ConfigKey.SETTINGS) or {}
        if settings.get(ConfigKey.LOG_FILE):
            settings[ConfigKey.LOG_FILE] = self.expand_path(settings[ConfigKey.LOG_FILE])

        return config

    def build_ruleset(self) -> RuleSet:
        """Validate, expand and convert the configuration into a RuleSet.

        Raises:
            ConfigError: On any configuration problem
        """
        return build_ruleset(self.expanded(), self.config_dir)

    def settings(self) -> Settings:
        """Typed view of the settings and automove switches."""
        config = self.expanded()
        settings = config.get(ConfigKey.SETTINGS) or {}
        automove = config.get(ConfigKey.AUTOMOVE) or {}
        return Settings(
            color=settings.get(ConfigKey.COLOR, True),
            unicode=settings.get(ConfigKey.UNICODE, False),
            hide_ok_directories=settings.get(ConfigKey.HIDE_OK, False),
            log_level=str(settings.get(ConfigKey.LOG_LEVEL, "WARNING")).upper(),
            log_file=settings.get(ConfigKey.LOG_FILE),
            force_dry_run=automove.get(ConfigKey.FORCE_DRY_RUN, False),
            allow_overwrite=automove.get(ConfigKey.ALLOW_OVERWRITE, False),
            report_info=ReportInfo(automove.get(ConfigKey.REPORT_INFO, ReportInfo.NO.value)),
            script_workers=automove.get(ConfigKey.SCRIPT_WORKERS, 1),
            script_timeout=automove.get(ConfigKey.SCRIPT_TIMEOUT, 30),
        )

    def clear(self, source: Optional[ConfigSource] = None) -> None:
        """Clear configuration.

        Args:
            source: Specific source to clear, or None for all except defaults
        """
        with self._lock:
            if source:
                if source in self._config and source != ConfigSource.COMPILED_DEFAULTS:
                    del self._config[source]
            else:
                for s in [s for s in self._config if s != ConfigSource.COMPILED_DEFAULTS]:
                    del self._config[s]


def default_config_path(environ: Optional[Mapping[str, str]] = None) -> Path:
    """Location of the per-user config file ($XDG_CONFIG_HOME/tidydir/tidydir.yaml)."""
    environ = os.environ if environ is None else environ
    base = environ.get("XDG_CONFIG_HOME")
    if not base:
        home = environ.get("HOME") or os.path.expanduser("~")
        base = os.path.join(home, ".config")
    return Path(base) / "tidydir" / "tidydir.yaml"


def write_default_config(path: Path) -> bool:
    """Write the bundled default configuration if ``path`` does not exist.

    Returns:
        True if a new file was written

    Raises:
        ConfigError: If the file cannot be created
    """
    if path.exists():
        return False

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(DEFAULT_CONFIG_FILE, encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Could not create default config {path}: {e}", ErrorCode.PERMISSION_DENIED)
    return True
