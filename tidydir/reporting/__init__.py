"""tidydir Reporting.

Renders check and auto-move results for people (rich + Jinja2 templates)
and for scripts (list mode).
"""

from .renderer import (
    ReportRenderer,
    automove_list_lines,
    check_list_lines,
    escape_list_path,
    write_lines,
)

__all__ = [
    "ReportRenderer",
    "automove_list_lines",
    "check_list_lines",
    "escape_list_path",
    "write_lines",
]
