"""Shared utility functions for jsforge.

Provides external command execution for the assembly steps, plus the
Rich-based console helpers used to report progress.  Commands run with the
parent's standard streams so the user sees ``npm`` and ``git`` output live.
"""

from __future__ import annotations

import asyncio
import re
import shutil
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.rule import Rule
from rich.table import Table

console = Console()

# ---------------------------------------------------------------------------
# Command execution
# ---------------------------------------------------------------------------

_TOKEN_RE = re.compile(r'[^"\s]+|"[^"]+"')


class ProcessFailure(Exception):
    """Raised when an external command exits non-zero or cannot be launched.

    Exactly one of ``exit_code`` and ``launch_error`` is set.
    """

    def __init__(
        self,
        command_line: str,
        exit_code: int | None = None,
        launch_error: OSError | None = None,
    ) -> None:
        self.command_line = command_line
        self.exit_code = exit_code
        self.launch_error = launch_error
        if launch_error is not None:
            message = f'Command "{command_line}" could not be started: {launch_error}'
        else:
            message = f'Command "{command_line}" failed with exit code {exit_code}'
        super().__init__(message)


def split_command(command_line: str) -> list[str]:
    """Split a command line on whitespace, keeping double-quoted runs whole.

    The surrounding quotes of a quoted token are removed::

        split_command('git commit -m "Initial commit"')
        -> ["git", "commit", "-m", "Initial commit"]

    Raises:
        ValueError: If the command line holds no tokens.
    """
    tokens = [
        tok[1:-1] if tok.startswith('"') and tok.endswith('"') else tok
        for tok in _TOKEN_RE.findall(command_line)
    ]
    if not tokens:
        raise ValueError(f"Empty command line: {command_line!r}")
    return tokens


async def run_command(command_line: str, cwd: str | Path) -> None:
    """Run one external command to completion.

    The command is echoed to the console, then spawned with inherited
    stdin/stdout/stderr in *cwd*.  There is no timeout.

    Args:
        command_line: Command string, tokenized with :func:`split_command`.
        cwd: Working directory for the child process.

    Raises:
        ProcessFailure: On a non-zero exit status, or when the executable
            cannot be launched (not found, permission denied).
    """
    args = split_command(command_line)
    print_command(command_line)

    # Resolve through PATH so wrappers such as npm.cmd work on Windows.
    executable = shutil.which(args[0]) or args[0]

    try:
        process = await asyncio.create_subprocess_exec(
            executable,
            *args[1:],
            cwd=str(cwd),
        )
    except OSError as exc:
        print_error(f"Error while executing command: {command_line}")
        raise ProcessFailure(command_line, launch_error=exc) from exc

    returncode = await process.wait()
    if returncode != 0:
        raise ProcessFailure(command_line, exit_code=returncode)


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def format_duration(seconds: float) -> str:
    """Format a duration in seconds to a human-readable string.

    Examples::

        format_duration(3.7)    -> "3.7s"
        format_duration(65.2)   -> "1m 5s"
    """
    if seconds < 0:
        return "0.0s"

    minutes = int(seconds // 60)
    secs = seconds % 60
    if minutes > 0:
        return f"{minutes}m {int(secs)}s"
    return f"{secs:.1f}s"


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_step_header(index: int, total: int, name: str) -> None:
    """Print a rule announcing the step about to run."""
    console.print()
    console.print(
        Rule(f"[bold bright_cyan] Step {index}/{total}: {name} [/bold bright_cyan]",
             style="bright_cyan")
    )


def print_command(command: str) -> None:
    """Echo a command line in magenta before it runs."""
    console.print(f"[magenta]{escape(command)}[/magenta]", highlight=False)


def print_output(message: str) -> None:
    """Print an informational message in yellow."""
    console.print(f"[yellow]{escape(message)}[/yellow]", highlight=False)


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print a two-column key/value summary table."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, escape(str(value)))

    console.print(table)
    console.print()


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{escape(message)}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{escape(message)}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{escape(message)}[/bold yellow]")
