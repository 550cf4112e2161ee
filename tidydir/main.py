#!/usr/bin/env python3
"""Command controller for tidydir.

This module handles:
- Building the RuleSet and Settings from the ConfigManager
- Restricting rules to the TARGET directory
- Running the compliance scan (``check``)
- Resolving and executing moves (``auto-move``)
- Rendering reports and mapping results to an exit code

Example:
    >>> from tidydir.main import run_tidydir
    >>> run_tidydir(args, config_manager, logger)
"""

import argparse
import os
import sys
from typing import List, Optional, TextIO

from rich.console import Console

from tidydir.compliance.scanner import ComplianceScanner, RuleReport
from tidydir.core.constants import ExitCode, ReportInfo
from tidydir.core.errors import ConfigError
from tidydir.infrastructure.config_manager import ConfigManager, Settings
from tidydir.infrastructure.logger import Logger
from tidydir.moves.actions import MoveOutcome
from tidydir.moves.executor import MoveExecutor, effective_dry_run
from tidydir.moves.naming import Namer, ScriptNamer
from tidydir.moves.resolver import AutoMoveResolver, RuleResolution
from tidydir.reporting.renderer import (
    ReportRenderer,
    automove_list_lines,
    check_list_lines,
    write_lines,
)
from tidydir.rules.ruleset import RuleSet


class TidyDirMain:
    """
    Main controller for one tidydir invocation.

    Wires configuration, scanner, resolver, executor and renderer together.
    """

    def __init__(
        self,
        args: argparse.Namespace,
        config_manager: ConfigManager,
        logger: Logger,
        console: Optional[Console] = None,
        err_console: Optional[Console] = None,
        out: Optional[TextIO] = None,
        namer: Optional[Namer] = None,
    ):
        """
        Initialize controller.

        Args:
            args: Parsed command-line arguments
            config_manager: Loaded configuration
            logger: Logger instance
            console: Console for human reports (default: stdout)
            err_console: Console for notices (default: stderr)
            out: Stream for list mode (default: stdout)
            namer: Naming-script runner (default: ScriptNamer)
        """
        self.args = args
        self.config_manager = config_manager
        self.logger = logger
        self.out = out or sys.stdout

        self.settings: Settings = config_manager.settings()
        self.renderer = ReportRenderer(self.settings, console=console, err_console=err_console)
        self.namer = namer or ScriptNamer(timeout=self.settings.script_timeout, logger=logger)

    def load_ruleset(self) -> RuleSet:
        """
        Build the RuleSet and apply the TARGET filter.

        Raises:
            ConfigError: If the configuration is invalid
        """
        ruleset = self.config_manager.build_ruleset()

        target = getattr(self.args, "target", None)
        if target is not None:
            target = os.path.realpath(os.path.expanduser(target))
            ruleset = ruleset.under(target)
            self.logger.debug("Filtered rules by target", target=target, rules=len(ruleset))

        return ruleset

    def run_check(self) -> int:
        """
        Run the compliance scan and print the report.

        Returns:
            Exit code

        Raises:
            ConfigError: If no directory rule applies
        """
        ruleset = self.load_ruleset()
        if not ruleset.dir_rules:
            raise ConfigError("(!) No directories were configured to be checked.")
        reports = ComplianceScanner(logger=self.logger).scan(ruleset.dir_rules)

        if self.args.list:
            write_lines(check_list_lines(reports), self.out)
        else:
            self.renderer.print_check(reports, hint=self.automove_hint(ruleset))

        return self._check_exit_code(reports)

    def automove_hint(self, ruleset: RuleSet) -> Optional[str]:
        """Auto-move hint appended to the check report, per ``report-info``."""
        report_info = self.settings.report_info
        if report_info == ReportInfo.NO or not ruleset.move_rules:
            return None

        resolver = AutoMoveResolver(logger=self.logger)
        if report_info == ReportInfo.ANY:
            if resolver.count_matches(ruleset.move_rules, stop_at_first=True):
                return "Some files can be automatically moved!"
            return None

        count = resolver.count_matches(ruleset.move_rules)
        if not count:
            return None
        return f"{count} {'file' if count == 1 else 'files'} can be automatically moved!"

    def run_automove(self) -> int:
        """
        Resolve and execute (or simulate) the move rules.

        Returns:
            Exit code

        Raises:
            ConfigError: If no move rule applies
        """
        settings = self.settings
        ruleset = self.load_ruleset()
        if not ruleset.move_rules:
            raise ConfigError("(!) No auto-move rules were configured to be run.")
        dry_run = effective_dry_run(self.args.dry, settings.force_dry_run)

        if not self.args.list:
            self.renderer.print_dry_run_notice(requested=self.args.dry, forced=settings.force_dry_run)

        resolver = AutoMoveResolver(
            namer=self.namer,
            script_workers=settings.script_workers,
            logger=self.logger,
        )
        resolutions = resolver.resolve_rules(ruleset.move_rules)

        planned = [action for resolution in resolutions for action in resolution.actions]
        executed = MoveExecutor(logger=self.logger).execute(
            planned, effective_dry=dry_run, allow_overwrite=settings.allow_overwrite
        )

        # Hand the executed actions back to their rules, order is preserved
        remaining = iter(executed)
        for resolution in resolutions:
            resolution.actions = [next(remaining) for _ in resolution.actions]

        if self.args.list:
            write_lines(automove_list_lines(executed), self.out)
        else:
            self.renderer.print_automove(resolutions, dry_run)
            any_planned = any(action.outcome == MoveOutcome.PLANNED for action in executed)
            if settings.force_dry_run and not self.args.dry and any_planned:
                self.renderer.print_forced_footer()

        return self._automove_exit_code(resolutions)

    @staticmethod
    def _check_exit_code(reports: List[RuleReport]) -> int:
        if any(report.error is not None for report in reports):
            return ExitCode.PARTIAL
        return ExitCode.SUCCESS

    @staticmethod
    def _automove_exit_code(resolutions: List[RuleResolution]) -> int:
        for resolution in resolutions:
            if resolution.error is not None:
                return ExitCode.PARTIAL
            for action in resolution.actions:
                if action.outcome in (MoveOutcome.FAILED, MoveOutcome.SKIPPED_CONFLICT):
                    return ExitCode.PARTIAL
        return ExitCode.SUCCESS

    def run(self) -> int:
        """
        Run the selected command.

        Returns:
            Exit code
        """
        try:
            if self.args.command == "check":
                return self.run_check()
            if self.args.command == "auto-move":
                return self.run_automove()

            self.logger.error("Unknown command", command=self.args.command)
            return ExitCode.FATAL

        except KeyboardInterrupt:
            self.logger.info("Interrupted by user")
            return ExitCode.INTERRUPTED


def run_tidydir(args: argparse.Namespace, config_manager: ConfigManager, logger: Logger) -> int:
    """
    Main entry point for running a tidydir command.

    Args:
        args: Parsed command-line arguments
        config_manager: Loaded configuration
        logger: Logger instance

    Returns:
        Exit code
    """
    main = TidyDirMain(args, config_manager, logger)

    return main.run()


def main():
    """
    Entry point when run as standalone script.

    Typically called via cli.py, but can be run directly for testing.
    """
    from tidydir.cli import main as cli_main

    return cli_main()


if __name__ == "__main__":
    sys.exit(main())
