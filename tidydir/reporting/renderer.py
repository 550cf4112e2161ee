#!/usr/bin/env python3
"""Report rendering for check and auto-move runs.

This module turns scan reports and executed move actions into output:
- Human reports: Jinja2 templates rendered to rich markup and printed on a
  rich Console (colors follow ``settings.color``)
- List mode: one absolute path (check) or one ``old new`` pair (auto-move)
  per line, with no formatting, for piping into other tools
- Dry-run notices on stderr

Example:
    >>> renderer = ReportRenderer(settings)
    >>> renderer.print_check(reports, hint="3 files can be automatically moved!")
"""

import os
import sys
from collections import Counter
from typing import Any, Dict, List, Optional, Sequence, TextIO

import jinja2
from rich.console import Console
from rich.markup import escape

from tidydir.compliance.scanner import RuleReport
from tidydir.infrastructure.config_manager import Settings
from tidydir.moves.actions import MoveAction, MoveOutcome
from tidydir.moves.resolver import RuleResolution
from tidydir.reporting.templates import AUTOMOVE_TEMPLATE, CHECK_TEMPLATE
from tidydir.rules.ruleset import is_under

UNICODE_MARKS = {"ok": "\uf00c", "bad": "\uf467", "dot": "\uf444", "ok_prefix": "\uf00c "}
ASCII_MARKS = {"ok": "OK", "bad": "X", "dot": "-", "ok_prefix": ""}


def escape_list_path(path: str) -> str:
    """Escape spaces so ``old new`` pairs stay splittable."""
    return path.replace(" ", "\\ ")


def check_list_lines(reports: Sequence[RuleReport]) -> List[str]:
    """Absolute paths of every misplaced entry, in report order."""
    return [entry.path for report in reports for entry in report.entries]


def automove_list_lines(actions: Sequence[MoveAction]) -> List[str]:
    """``old new`` lines for actions that were (or would be) moved."""
    return [
        f"{escape_list_path(a.source)} {escape_list_path(a.destination)}"
        for a in actions
        if a.succeeded and a.destination is not None
    ]


class ReportRenderer:
    """Renders reports to the terminal."""

    def __init__(
        self,
        settings: Settings,
        console: Optional[Console] = None,
        err_console: Optional[Console] = None,
    ):
        """Initialize renderer.

        Args:
            settings: Display settings (color, unicode, hide-ok-directories)
            console: Console for reports (default: stdout)
            err_console: Console for notices (default: stderr)
        """
        self.settings = settings
        color_system = "auto" if settings.color else None
        self.console = console or Console(color_system=color_system, highlight=False, soft_wrap=True)
        self.err_console = err_console or Console(
            stderr=True, color_system=color_system, highlight=False, soft_wrap=True
        )
        self.marks = UNICODE_MARKS if settings.unicode else ASCII_MARKS

        self._env = jinja2.Environment(
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=False,
            undefined=jinja2.StrictUndefined,
        )
        self._env.filters["esc"] = lambda value: escape(str(value))

    def _render(self, template: str, **context: Any) -> str:
        try:
            return self._env.from_string(template).render(marks=self.marks, **context)
        except jinja2.TemplateError as e:
            raise RuntimeError(f"Report template error: {e}") from e

    def render_check(self, reports: Sequence[RuleReport], hint: Optional[str] = None) -> str:
        """Render a check report as rich markup.

        Args:
            reports: Scan reports in rule order
            hint: Optional auto-move hint line

        Returns:
            Markup text
        """
        shown = []
        hidden = 0
        for report in reports:
            if self.settings.hide_ok_directories and report.ok:
                hidden += 1
                continue
            shown.append(self._check_item(report))

        return self._render(CHECK_TEMPLATE, reports=shown, hidden=hidden, hint=hint)

    def _check_item(self, report: RuleReport) -> Dict[str, Any]:
        root = report.rule.path
        return {
            "path": root,
            "error": report.error.message if report.error else None,
            "entries": report.entries,
            "directories": sorted(e.relative_to(root) for e in report.directories),
            "files": sorted(e.relative_to(root) for e in report.files),
        }

    def render_automove(self, resolutions: Sequence[RuleResolution], dry_run: bool) -> str:
        """Render executed move actions grouped by rule.

        Args:
            resolutions: Per-rule results whose actions carry final outcomes
            dry_run: Whether the run was a dry run

        Returns:
            Markup text
        """
        shown = []
        hidden = 0
        for resolution in resolutions:
            if self.settings.hide_ok_directories and resolution.error is None and not resolution.actions:
                hidden += 1
                continue
            shown.append(self._automove_item(resolution, dry_run))

        return self._render(AUTOMOVE_TEMPLATE, rules=shown, hidden=hidden, dry_run=dry_run)

    def _automove_item(self, resolution: RuleResolution, dry_run: bool) -> Dict[str, Any]:
        rule = resolution.rule
        actions = resolution.actions
        outcomes = Counter(a.outcome for a in actions)

        moved = outcomes[MoveOutcome.PLANNED] + outcomes[MoveOutcome.MOVED]
        summary = []
        if moved:
            verb = "to move" if dry_run else "moved"
            summary.append(f"[bright_yellow]{moved} {'entry' if moved == 1 else 'entries'} {verb}[/]")
        conflicts = outcomes[MoveOutcome.SKIPPED_CONFLICT]
        if conflicts:
            summary.append(f"[yellow]{conflicts} {'conflict' if conflicts == 1 else 'conflicts'}[/]")
        errors = outcomes[MoveOutcome.FAILED]
        if errors:
            summary.append(f"[bright_red]{errors} {'error' if errors == 1 else 'errors'}[/]")

        target_counts = Counter(a.destination_dir for a in actions if a.succeeded and a.destination_dir)
        targets = [
            f"[bright_blue]{escape(self._display_dir(directory, rule.parent))}[/] [dim]({count})[/]"
            for directory, count in sorted(target_counts.items())
        ]

        return {
            "name": rule.display_name,
            "error": resolution.error.message if resolution.error else None,
            "actions": actions,
            "summary": summary,
            "targets": targets,
            "problems": [a.reason for a in actions if not a.succeeded and a.reason],
        }

    @staticmethod
    def _display_dir(directory: str, parent: str) -> str:
        if is_under(directory, parent):
            return os.path.relpath(directory, parent)
        return directory

    def print_check(self, reports: Sequence[RuleReport], hint: Optional[str] = None) -> None:
        self.console.print(self.render_check(reports, hint), end="")

    def print_automove(self, resolutions: Sequence[RuleResolution], dry_run: bool) -> None:
        self.console.print(self.render_automove(resolutions, dry_run), end="")

    def print_dry_run_notice(self, requested: bool, forced: bool) -> None:
        """Explain on stderr why nothing will be moved."""
        if forced:
            self.err_console.print(
                "[bold bright_yellow]Info![/] Dry run is enforced by [dim]force-dry-run[/] in the "
                "config file. [bold]No file will actually be moved until it is turned off.[/]\n"
            )
        elif requested:
            self.err_console.print(
                "[bold bright_blue]Info![/] Auto-move running in [bold]dry mode[/], "
                "no files will actually be moved.\n"
            )

    def print_forced_footer(self) -> None:
        self.err_console.print(
            "\n[italic]No files were actually moved because force-dry-run is enabled. "
            "See the note at the beginning of this output.[/]"
        )

    def print_notice(self, message: str) -> None:
        self.err_console.print(escape(message))


def write_lines(lines: Sequence[str], out: Optional[TextIO] = None) -> None:
    """Write raw lines for list mode."""
    out = out or sys.stdout
    for line in lines:
        out.write(line + "\n")
    out.flush()
