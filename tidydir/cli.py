#!/usr/bin/env python3
"""Command-line interface for tidydir.

This module provides the CLI for checking and tidying directories:
- Argument parsing and validation (``check`` and ``auto-move`` commands)
- Configuration file discovery and first-run bootstrap
- Logging setup
- Exit code mapping

Example:
    >>> from tidydir.cli import parse_arguments
    >>> args = parse_arguments(["auto-move", "--dry", "~/Downloads"])
"""

import argparse
import os
import sys
import traceback
from pathlib import Path
from typing import List, Mapping, Optional, TextIO

from tidydir.core.constants import CONFIG_FILE_ENV, TIDYDIR_VERSION, ConfigKey, ExitCode
from tidydir.core.errors import TidyDirError
from tidydir.infrastructure.config_manager import (
    ConfigManager,
    ConfigSource,
    Settings,
    default_config_path,
    write_default_config,
)
from tidydir.infrastructure.logger import Logger, LogLevel, set_global_logger

DESCRIPTION = "tidydir - Keep your directories tidy"


class CLIError(Exception):
    """Exception raised for CLI-related errors."""

    pass


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tidydir",
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Report misplaced entries in every configured directory
  tidydir check

  # Only directories under ~/Downloads, one path per line
  tidydir check ~/Downloads --list

  # Show what auto-move would do without touching anything
  tidydir auto-move --dry

  # Use another configuration file
  tidydir --config ./tidydir.yaml auto-move
        """,
    )

    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s {TIDYDIR_VERSION}",
    )

    parser.add_argument(
        "-c",
        "--config",
        metavar="FILE",
        type=str,
        help=f"Configuration file path (default: ${CONFIG_FILE_ENV} or "
        "$XDG_CONFIG_HOME/tidydir/tidydir.yaml)",
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output",
    )

    commands = parser.add_subparsers(dest="command", metavar="COMMAND")
    commands.required = True

    check = commands.add_parser(
        "check",
        help="Report entries that are not allowed in the configured directories",
    )
    check.add_argument(
        "target",
        metavar="TARGET",
        nargs="?",
        help="Only check configured directories under TARGET",
    )
    check.add_argument(
        "-l",
        "--list",
        action="store_true",
        help="Print one absolute path per misplaced entry",
    )

    automove = commands.add_parser(
        "auto-move",
        aliases=["au", "aumove"],
        help="Move matching entries according to the automove rules",
    )
    automove.add_argument(
        "target",
        metavar="TARGET",
        nargs="?",
        help="Only apply rules whose parent directory is under TARGET",
    )
    automove.add_argument(
        "-l",
        "--list",
        action="store_true",
        help="Print 'old new' per moved entry (spaces escaped)",
    )
    automove.add_argument(
        "-d",
        "--dry",
        action="store_true",
        help="Only show what would be moved",
    )

    return parser


def parse_arguments(args: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Args:
        args: Argument list to parse (defaults to sys.argv[1:])

    Returns:
        Parsed arguments namespace, ``command`` normalized to
        ``check`` or ``auto-move``

    Raises:
        SystemExit: On invalid arguments or --help/--version
        CLIError: If an argument fails validation
    """
    parsed = build_parser().parse_args(args)

    if parsed.command in ("au", "aumove"):
        parsed.command = "auto-move"
    if not hasattr(parsed, "dry"):
        parsed.dry = False

    _validate_arguments(parsed)

    return parsed


def _validate_arguments(args: argparse.Namespace) -> None:
    """
    Validate parsed arguments.

    Raises:
        CLIError: If validation fails
    """
    if args.target is not None:
        target = Path(os.path.expanduser(args.target))

        if not target.exists():
            raise CLIError(f"Target does not exist: {args.target}")

        if not target.is_dir():
            raise CLIError(f"Target is not a directory: {args.target}")

    if args.config:
        config_path = Path(os.path.expanduser(args.config))

        if not config_path.exists():
            raise CLIError(f"Configuration file does not exist: {args.config}")

        if not config_path.is_file():
            raise CLIError(f"Configuration path is not a file: {args.config}")


def find_config_file(
    args: argparse.Namespace,
    environ: Optional[Mapping[str, str]] = None,
    err: Optional[TextIO] = None,
) -> Path:
    """
    Locate the configuration file.

    Order: ``--config``, then ``$TIDYDIR_CONFIG_FILE``, then the per-user
    default path. The default file is created from the bundled template
    when it does not exist yet.

    Args:
        args: Parsed arguments namespace
        environ: Environment (defaults to os.environ)
        err: Stream for the bootstrap notice (defaults to stderr)

    Returns:
        Path of the configuration file to load

    Raises:
        CLIError: If $TIDYDIR_CONFIG_FILE points to a missing file
    """
    environ = os.environ if environ is None else environ
    err = err or sys.stderr

    if args.config:
        return Path(os.path.expanduser(args.config))

    from_env = environ.get(CONFIG_FILE_ENV)
    if from_env:
        path = Path(os.path.expanduser(from_env))
        if not path.is_file():
            raise CLIError(f"${CONFIG_FILE_ENV} does not point to a file: {from_env}")
        return path

    path = default_config_path(environ)
    if write_default_config(path):
        err.write(
            f"Info: Default configuration file was created at {path}\n"
            "It has force-dry-run enabled, so nothing is moved until you edit it.\n\n"
        )
    return path


def build_config_from_args(args: argparse.Namespace) -> dict:
    """
    Build the CLI configuration layer from command-line arguments.

    Args:
        args: Parsed arguments namespace

    Returns:
        Configuration dictionary for ConfigManager
    """
    config: dict = {}

    if args.no_color:
        config.setdefault(ConfigKey.SETTINGS, {})[ConfigKey.COLOR] = False

    if args.verbose:
        config.setdefault(ConfigKey.SETTINGS, {})[ConfigKey.LOG_LEVEL] = "DEBUG"

    return config


def setup_logging(settings: Settings) -> Logger:
    """
    Setup logging based on configuration.

    Args:
        settings: Resolved settings

    Returns:
        Configured logger instance, also installed as the shared logger

    Raises:
        CLIError: If the log file cannot be opened
    """
    logger = Logger("tidydir", level=LogLevel[settings.log_level])

    if settings.log_file:
        try:
            logger.add_handler(logger.create_file_handler(settings.log_file))
        except OSError as e:
            raise CLIError(f"Cannot open log file {settings.log_file}: {e}")

    set_global_logger(logger)
    return logger


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Handles argument parsing, configuration loading and logging setup,
    then passes control to tidydir.main for the actual command.
    """
    try:
        args = parse_arguments(argv)

        config_manager = ConfigManager(str(find_config_file(args)))
        config_manager.load_dict(build_config_from_args(args), ConfigSource.CLI_ARGS)

        logger = setup_logging(config_manager.settings())
        logger.debug("Configuration loaded", config_file=config_manager.config_file)

        from tidydir.main import run_tidydir

        return run_tidydir(args, config_manager, logger)

    except CLIError as e:
        print(f"Error: {e}", file=sys.stderr)
        return ExitCode.FATAL

    except TidyDirError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return ExitCode.FATAL

    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return ExitCode.INTERRUPTED

    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        traceback.print_exc()
        return ExitCode.FATAL


if __name__ == "__main__":
    sys.exit(main())
