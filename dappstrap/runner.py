"""External command execution for pipeline stages.

``ProcessRunner`` announces every command before it runs, executes it with an
explicit working directory and turns its exit status into a ``CommandResult``.
Failures are reported as ``CommandError`` so the stage runner can decide
whether they abort the pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from dappstrap.utils import format_command, print_info, run_command


class CommandError(Exception):
    """Raised when an external command exits non-zero or cannot be started."""

    def __init__(
        self,
        message: str,
        command: str = "",
        returncode: int | None = None,
        stderr: str = "",
    ) -> None:
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message)


@dataclass
class CommandResult:
    """Outcome of a single external command."""

    command: list[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def check(self) -> "CommandResult":
        """Return ``self`` or raise ``CommandError`` for a non-zero exit."""
        if not self.ok:
            cmd_str = format_command(self.command)
            detail = f"\n{self.stderr}" if self.stderr else ""
            raise CommandError(
                f"Command failed (exit {self.returncode}): {cmd_str}{detail}",
                command=cmd_str,
                returncode=self.returncode,
                stderr=self.stderr,
            )
        return self


class ProcessRunner:
    """Runs external tools one at a time, blocking until each exits."""

    def __init__(self, timeout: float | None = 900) -> None:
        self.timeout = timeout

    async def execute(
        self,
        description: str,
        cmd: list[str],
        cwd: Path,
        *,
        input_text: str | None = None,
        capture: bool = False,
        check: bool = True,
        timeout: float | None = -1,
    ) -> CommandResult:
        """Describe and run *cmd* inside *cwd*.

        Args:
            description: Human-readable purpose, printed before the command.
            cmd: Argument list; never passed through a shell.
            cwd: Working directory for the child process.
            input_text: Optional stdin content for interactive tools.
            capture: Capture output instead of streaming it to the terminal.
            check: Raise ``CommandError`` on a non-zero exit.
            timeout: Seconds before the command is killed.  ``-1`` uses the
                runner default; ``None`` disables the limit.

        Returns:
            The ``CommandResult``.

        Raises:
            CommandError: If the executable is missing, or if *check* is set
                and the command fails.
        """
        print_info(f"{description}: `{format_command(cmd)}`")
        effective_timeout = self.timeout if timeout == -1 else timeout

        try:
            returncode, stdout, stderr = await run_command(
                cmd,
                cwd=cwd,
                timeout=effective_timeout,
                capture=capture,
                input_text=input_text,
            )
        except FileNotFoundError as exc:
            raise CommandError(
                f"Could not start {cmd[0]}: {exc}",
                command=format_command(cmd),
                returncode=127,
                stderr=str(exc),
            ) from exc

        result = CommandResult(command=list(cmd), returncode=returncode, stdout=stdout, stderr=stderr)
        if check:
            result.check()
        return result
