"""Pre-flight checks that must pass before anything touches the disk.

``ToolchainValidator`` makes sure every external executable the pipeline will
invoke is resolvable on ``PATH``; ``InteractiveGate`` asks the operator to
confirm the directory creation.  Both are gates, not reports: they either
return normally or raise, and they never mutate the filesystem.
"""

from __future__ import annotations

import shutil
from collections.abc import Callable, Iterable
from pathlib import Path

from rich.markup import escape

from dappstrap.utils import console, print_error, print_info, print_success, print_warning

AFFIRMATIVE_ANSWERS = frozenset({"y", "yes"})


class PrerequisiteMissing(Exception):
    """Raised when a required executable cannot be resolved."""

    def __init__(self, tool: str) -> None:
        self.tool = tool
        super().__init__(
            f"{tool} is required but not installed. Please install it and try again."
        )


class UserRefused(Exception):
    """Raised when the operator declines the confirmation prompt."""

    def __init__(self, answer: str = "") -> None:
        self.answer = answer
        super().__init__("Aborted by user.")


class ToolchainValidator:
    """Checks that every required tool resolves before any mutation happens."""

    def __init__(
        self,
        tools: Iterable[str],
        which: Callable[[str], str | None] = shutil.which,
    ) -> None:
        self.tools = tuple(tools)
        self._which = which

    def validate(self) -> dict[str, str]:
        """Resolve each tool in order.

        Returns:
            Mapping of tool name to its resolved path.

        Raises:
            PrerequisiteMissing: On the first tool that cannot be resolved.
        """
        resolved: dict[str, str] = {}
        for tool in self.tools:
            path = self._which(tool)
            if not path:
                print_error(f"{tool} is required but not installed. Please install it and try again.")
                raise PrerequisiteMissing(tool)
            resolved[tool] = path
            print_info(f"Found {tool}: {path}")
        return resolved


class InteractiveGate:
    """Single yes/no confirmation point before the first mutation."""

    def __init__(self, input_fn: Callable[[str], str] | None = None) -> None:
        self._input = input_fn or console.input

    def confirm(self, project_root: Path) -> None:
        """Ask whether *project_root* may be created.

        Only ``y``/``yes`` (any case) is accepted.  Anything else, including an
        empty answer or a closed stdin, is a refusal.

        Raises:
            UserRefused: If the operator does not answer affirmatively.
        """
        print_info(
            f"This will create the project directory '{project_root.name}/' "
            f"in: {project_root.parent}"
        )
        try:
            answer = self._input(escape("Do you want to continue? [y/N] "))
        except EOFError:
            answer = ""

        if answer.strip().lower() not in AFFIRMATIVE_ANSWERS:
            print_error("Aborted by user.")
            raise UserRefused(answer)

        print_success("Confirmed.")
        print_warning("The setup process may take a few minutes. Please be patient...")
        print_warning("You will require internet for the installations to complete.")
