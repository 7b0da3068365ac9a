"""Shared utility functions for dappstrap.

Provides async command execution, JSON loading, file-system helpers and the
Rich-based leveled logger used by every stage.  Output always goes through the
single module-level ``console`` so tests can capture it and so the styling is
consistent across the pipeline.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.rule import Rule
from rich.table import Table

console = Console()

# ---------------------------------------------------------------------------
# Async command execution
# ---------------------------------------------------------------------------


async def run_command(
    cmd: list[str],
    cwd: str | Path | None = None,
    timeout: float | None = 120,
    capture: bool = True,
    input_text: str | None = None,
) -> tuple[int, str, str]:
    """Run a command asynchronously.

    Args:
        cmd: Argument list; executed directly, never through a shell.
        cwd: Working directory for the child process.
        timeout: Maximum wall-clock seconds before the process is killed.
            ``None`` waits indefinitely (used for long-running servers).
        capture: Whether to capture stdout/stderr (if ``False`` they inherit
            the parent's streams, so the operator sees the tool's output live).
        input_text: Optional text written to the child's stdin, e.g. answers
            for an interactive initialiser.

    Returns:
        A ``(returncode, stdout, stderr)`` tuple.  If *capture* is ``False``
        the stdout/stderr strings will be empty.
    """
    stdout_pipe = asyncio.subprocess.PIPE if capture else None
    stderr_pipe = asyncio.subprocess.PIPE if capture else None
    stdin_pipe = asyncio.subprocess.PIPE if input_text is not None else None

    process = await asyncio.create_subprocess_exec(
        *cmd,
        stdin=stdin_pipe,
        stdout=stdout_pipe,
        stderr=stderr_pipe,
        cwd=str(cwd) if cwd else None,
    )

    stdin_bytes = input_text.encode("utf-8") if input_text is not None else None

    try:
        stdout_bytes, stderr_bytes = await asyncio.wait_for(
            process.communicate(stdin_bytes), timeout=timeout
        )
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        return (
            -1,
            "",
            f"Command timed out after {timeout}s: {format_command(cmd)}",
        )

    stdout_str = (stdout_bytes or b"").decode("utf-8", errors="replace").strip()
    stderr_str = (stderr_bytes or b"").decode("utf-8", errors="replace").strip()
    return (process.returncode or 0, stdout_str, stderr_str)


def format_command(cmd: list[str]) -> str:
    """Return a printable form of *cmd*."""
    return " ".join(cmd)


# ---------------------------------------------------------------------------
# JSON I/O
# ---------------------------------------------------------------------------


def load_json(path: str | Path) -> Any:
    """Load and parse a JSON file.

    Raises:
        FileNotFoundError: If the file does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
    """
    raw = Path(path).read_text(encoding="utf-8")
    return json.loads(raw)


def dump_json(data: Any) -> str:
    """Serialise *data* as 2-space indented JSON with a trailing newline."""
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


# ---------------------------------------------------------------------------
# File-system helpers
# ---------------------------------------------------------------------------


def ensure_dir(path: str | Path) -> Path:
    """Create a directory (and parents) if it does not exist.

    Returns:
        The resolved ``Path`` object.
    """
    dir_path = Path(path)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path.resolve()


def write_text(path: Path, content: str) -> Path:
    """Create parent dirs and write *content*, overwriting any existing file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def format_duration(seconds: float) -> str:
    """Format a duration in seconds to a human-readable string.

    Examples::

        format_duration(3.7)    -> "3.7s"
        format_duration(65.2)   -> "1m 5s"
        format_duration(3661.0) -> "1h 1m 1s"
    """
    if seconds < 0:
        return "0.0s"

    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = seconds % 60

    parts: list[str] = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")

    if hours > 0 or minutes > 0:
        parts.append(f"{int(secs)}s")
    else:
        parts.append(f"{secs:.1f}s")

    return " ".join(parts)


# ---------------------------------------------------------------------------
# Leveled logger
# ---------------------------------------------------------------------------


LEVEL_STYLES: dict[str, str] = {
    "info": "blue",
    "success": "green",
    "warning": "yellow",
    "error": "red",
}


def format_message(level: str, text: str) -> str:
    """Return Rich markup for a leveled status line.

    The rendered (plain) form is ``[LEVEL]: text``.  Known levels are coloured;
    unknown levels are printed without colour.  Both the label and the text
    are escaped so square brackets in messages survive.
    """
    line = escape(f"[{level.upper()}]: {text}")
    style = LEVEL_STYLES.get(level.lower())
    if style is None:
        return line
    return f"[{style}]{line}[/{style}]"


def msg(level: str, text: str) -> None:
    """Print a leveled status message."""
    console.print(format_message(level, text))


def print_info(message: str) -> None:
    """Print a blue ``[INFO]`` message."""
    msg("info", message)


def print_success(message: str) -> None:
    """Print a green ``[SUCCESS]`` message."""
    msg("success", message)


def print_warning(message: str) -> None:
    """Print a yellow ``[WARNING]`` message."""
    msg("warning", message)


def print_error(message: str) -> None:
    """Print a red ``[ERROR]`` message."""
    msg("error", message)


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_stage_header(index: int, name: str) -> None:
    """Print a full-width rule announcing stage *index*."""
    console.print()
    console.print(
        Rule(f"[bold bright_cyan] Stage {index}: {escape(name)} [/bold bright_cyan]", style="bright_cyan")
    )


def print_summary_table(rows: list[tuple[str, str, str]], title: str = "Summary") -> None:
    """Print a three-column stage/status/detail table."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Stage", style="dim", no_wrap=True)
    table.add_column("Status")
    table.add_column("Detail")

    for name, status, detail in rows:
        table.add_row(escape(name), escape(status), escape(detail))

    console.print(table)
    console.print()
