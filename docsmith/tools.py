"""External tool invocation.

The version-control tool and the autobuild typesetter are both run through a
``ToolRunner``. ``SubprocessRunner`` is the real implementation; tests pass a
recording fake instead. Calls block until the tool exits and there is no
timeout.
"""

from __future__ import annotations

import os
import subprocess
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from rich.markup import escape

from docsmith.utils import console, print_output


class ToolError(Exception):
    """Raised when an external tool cannot be started or exits non-zero."""

    def __init__(self, message: str, command: str = "", output: str = "", returncode: int = -1):
        self.command = command
        self.output = output
        self.returncode = returncode
        super().__init__(message)


class ToolRunner(Protocol):
    """Runs an external command and returns its combined stdout/stderr."""

    def run(self, args: Sequence[str], cwd: Path) -> str:
        ...


def format_command(args: Sequence[str], cwd: Path) -> str:
    """Human-readable form used in messages, e.g. ``cd /tmp/x && git pull``."""
    return f"cd {cwd} && {' '.join(args)}"


class SubprocessRunner:
    """Runs tools with ``subprocess`` in the given working directory.

    The current environment is inherited. stdout and stderr are merged so
    errors carry the complete tool output.
    """

    def __init__(self, echo: bool = True) -> None:
        self.echo = echo

    def run(self, args: Sequence[str], cwd: Path) -> str:
        command = format_command(args, cwd)
        if self.echo:
            console.print(f"[cyan]$[/cyan] {escape(command)}")

        try:
            completed = subprocess.run(
                list(args),
                cwd=str(cwd),
                env=os.environ.copy(),
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                check=False,
            )
        except OSError as exc:
            raise ToolError(f"'{command}' could not be started: {exc}", command=command) from exc

        output = completed.stdout.decode("utf-8", errors="replace").strip()
        if self.echo:
            print_output(output)

        if completed.returncode != 0:
            raise ToolError(
                f"'{command}' failed (exit {completed.returncode})\n{output}",
                command=command,
                output=output,
                returncode=completed.returncode,
            )
        return output
