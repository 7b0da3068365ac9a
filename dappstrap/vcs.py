"""Git repository initialisation and the one best-effort commit per run."""

from __future__ import annotations

from dappstrap.config import ProjectConfig
from dappstrap.runner import CommandResult, ProcessRunner
from dappstrap.utils import print_info, print_success


class VCSInitializer:
    """Creates the project repository once and commits the generated tree."""

    def __init__(self, runner: ProcessRunner) -> None:
        self.runner = runner

    async def _git(
        self,
        description: str,
        *args: str,
        config: ProjectConfig,
        capture: bool = False,
        check: bool = True,
    ) -> CommandResult:
        return await self.runner.execute(
            description,
            ["git", *args],
            cwd=config.project_root,
            capture=capture,
            check=check,
        )

    async def ensure_repository(self, config: ProjectConfig) -> str:
        """Initialise the repository.

        Guarded by the ``.git`` precondition in the pipeline, so this never
        runs against an existing repository.  Nested repositories (e.g. a
        dependency checked out with its own ``.git``) are not embedded
        silently.
        """
        print_info("Initializing Git...")
        await self._git(
            "Initialize repository",
            "init",
            "--initial-branch",
            config.default_branch,
            config=config,
        )
        await self._git(
            "Set default branch",
            "config",
            "init.defaultBranch",
            config.default_branch,
            config=config,
        )
        await self._git(
            "Disable silent nested-repository embedding",
            "config",
            "advice.addEmbeddedRepo",
            "false",
            config=config,
        )
        return f"branch {config.default_branch}"

    async def commit_all(self, config: ProjectConfig) -> str:
        """Stage everything and attempt a single commit.

        A failed commit (nothing changed, no identity configured, ...) is
        informational, not an error.
        """
        print_info("Adding all files to commit...")
        await self._git("Stage files", "add", ".", config=config)
        result = await self._git(
            "Commit",
            "commit",
            "-m",
            config.commit_message,
            config=config,
            capture=True,
            check=False,
        )
        if not result.ok:
            reason = (result.stdout or result.stderr or f"exit {result.returncode}").splitlines()[0]
            print_info(f"Nothing committed: {reason}")
            return f"not committed ({reason})"
        print_success("Git initialization completed.")
        return "committed"
