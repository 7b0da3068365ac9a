"""Final hand-off: show the result and give the terminal to the dev server."""

from __future__ import annotations

import shutil
from collections.abc import Callable
from pathlib import Path

from rich.markup import escape
from rich.tree import Tree

from dappstrap.config import ProjectConfig
from dappstrap.runner import CommandError, ProcessRunner
from dappstrap.utils import console, print_info, print_success, print_warning

_TREE_DEPTH = 2


def build_tree(root: Path, depth: int = _TREE_DEPTH) -> Tree:
    """Return a Rich tree of *root*, *depth* levels deep, directories first."""
    tree = Tree(f"[bold]{escape(root.name)}/[/bold]")
    _add_children(tree, root, depth)
    return tree


def _add_children(node: Tree, directory: Path, depth: int) -> None:
    if depth <= 0:
        return
    entries = sorted(directory.iterdir(), key=lambda p: (not p.is_dir(), p.name.lower()))
    for entry in entries:
        if entry.is_dir():
            child = node.add(f"[blue]{escape(entry.name)}/[/blue]")
            _add_children(child, entry, depth - 1)
        else:
            node.add(escape(entry.name))


class DevServerLauncher:
    """Starts ``npm run dev`` in the frontend; the process owns the terminal."""

    def __init__(
        self,
        runner: ProcessRunner,
        which: Callable[[str], str | None] = shutil.which,
    ) -> None:
        self.runner = runner
        self._which = which

    async def open_editor(self, config: ProjectConfig) -> bool:
        """Open the workspace in VS Code when the ``code`` CLI is available."""
        if not self._which("code"):
            print_info(f"Open {config.workspace_file.name} in VS Code to use the workspace settings.")
            return False
        try:
            await self.runner.execute(
                "Open in VS Code",
                ["code", config.workspace_file.name],
                cwd=config.project_root,
                timeout=60,
            )
        except (CommandError, OSError) as exc:
            print_warning(f"Could not open VS Code: {exc}")
            return False
        return True

    def print_tree(self, config: ProjectConfig) -> None:
        """Show the generated layout; an unreadable directory only warns."""
        try:
            tree = build_tree(config.project_root)
        except OSError as exc:
            print_warning(f"Could not list the project directory: {exc}")
            return
        print_info("Directory structure:")
        console.print(tree)

    async def launch(self, config: ProjectConfig) -> str:
        print_success(f"{config.project_name} setup complete!")
        self.print_tree(config)
        await self.open_editor(config)
        print_info(f"To start the dev server, run `cd {config.frontend_dir} && npm run dev`")

        print_info("Starting npm dev server for frontend...")
        result = await self.runner.execute(
            "Start dev server",
            ["npm", "run", "dev"],
            cwd=config.frontend_path,
            check=False,
            timeout=None,
        )
        if not result.ok:
            print_warning(f"Dev server exited with status {result.returncode}.")
        return f"dev server exited ({result.returncode})"
