#!/usr/bin/env python3
"""Naming scripts.

A naming script is an external executable that computes the destination name
of a matched entry. It is called with the entry's absolute path as its only
argument; on exit status 0 its trimmed standard output is the new name,
either relative (joined onto the rule's ``to`` directory) or absolute (used
as-is). Anything else is a ScriptError for that one entry.

The resolver only sees the ``Namer`` signature, so tests can substitute a
plain function for the subprocess call.

Example script (files grouped by modification month):

    #!/bin/sh
    echo "$(date -r "$1" '+%b-%Y')/$(basename "$1")"
"""

import subprocess
from typing import Callable, Optional

from tidydir.core.constants import ErrorCode, Limits
from tidydir.core.errors import ScriptError
from tidydir.infrastructure.logger import Logger, get_logger

# (script path, absolute source path) -> destination name
Namer = Callable[[str, str], str]


class ScriptNamer:
    """Runs naming scripts as blocking subprocesses."""

    def __init__(self, timeout: float = Limits.DEFAULT_SCRIPT_TIMEOUT, logger: Optional[Logger] = None):
        """Initialize script runner.

        Args:
            timeout: Seconds a single script call may take
            logger: Logger instance
        """
        self.timeout = timeout
        self.logger = logger or get_logger()

    def __call__(self, script: str, source: str) -> str:
        """Run ``script source`` and return the name it prints.

        Args:
            script: Path to the executable
            source: Absolute path of the matched entry

        Returns:
            Trimmed standard output

        Raises:
            ScriptError: On launch failure, timeout, non-zero exit, or unusable output
        """
        self.logger.debug("Running naming script", script=script, source=source)

        try:
            proc = subprocess.run(
                [script, source],
                stdin=subprocess.DEVNULL,
                capture_output=True,
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired:
            raise ScriptError(
                f"Naming script timed out after {self.timeout}s for '{source}'",
                script,
                ErrorCode.TIMEOUT,
            )
        except OSError as e:
            raise ScriptError(f"Could not execute naming script {script}: {e}", script)

        if proc.returncode != 0:
            stderr = proc.stderr.decode("utf-8", errors="replace").strip()
            detail = f": {stderr.splitlines()[-1]}" if stderr else ""
            raise ScriptError(
                f"Naming script exited with status {proc.returncode} for '{source}'{detail}",
                script,
            )

        try:
            name = proc.stdout.decode("utf-8").strip()
        except UnicodeDecodeError:
            raise ScriptError(f"Naming script printed invalid UTF-8 for '{source}'", script)

        if not name:
            raise ScriptError(f"Naming script printed no filename for '{source}'", script)

        if "\n" in name or "\0" in name:
            raise ScriptError(f"Naming script printed more than one name for '{source}'", script)

        return name
