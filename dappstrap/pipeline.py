"""dappstrap pipeline orchestrator.

Builds the fixed, ordered stage plan and drives it:

    validate toolchain -> confirm -> project root -> backend -> frontend
    -> root files -> ABI sync -> git -> dev server

Every marker-guarded step is skipped when the filesystem shows it already
ran, so the command can be re-run safely against a half-finished project.

Usage::

    dappstrap
    python -m dappstrap
"""

from __future__ import annotations

import asyncio
import platform
import sys
import time
from datetime import datetime, timezone
from typing import Any

from rich.markup import escape
from rich.panel import Panel

from dappstrap.artifacts import ArtifactSync
from dappstrap.config import ProjectConfig
from dappstrap.devserver import DevServerLauncher
from dappstrap.preflight import InteractiveGate, PrerequisiteMissing, ToolchainValidator, UserRefused
from dappstrap.runner import ProcessRunner
from dappstrap.scaffolder import BackendGenerator, FrontendGenerator, TemplateRenderer, WorkspaceGenerator
from dappstrap.stages import PlanItem, Stage, StageError, StageGroup, StageRunner
from dappstrap.utils import (
    console,
    ensure_dir,
    format_duration,
    print_info,
    print_summary_table,
)
from dappstrap.vcs import VCSInitializer


class Pipeline:
    """Scaffolding pipeline orchestrator.

    Attributes:
        config: Immutable project configuration.
        state: Accumulates the outcome of the run (stage results, errors,
            whether the dev-server hand-off was reached).
    """

    def __init__(
        self,
        config: ProjectConfig,
        runner: ProcessRunner | None = None,
        validator: ToolchainValidator | None = None,
        gate: InteractiveGate | None = None,
    ) -> None:
        self.config = config
        self.runner = runner or ProcessRunner(timeout=config.command_timeout)
        self.validator = validator or ToolchainValidator(config.required_tools)
        self.gate = gate or InteractiveGate()

        self.renderer = TemplateRenderer()
        self.backend_gen = BackendGenerator(self.renderer, self.runner)
        self.frontend_gen = FrontendGenerator(self.renderer, self.runner)
        self.workspace_gen = WorkspaceGenerator(self.renderer)
        self.artifact_sync = ArtifactSync()
        self.vcs = VCSInitializer(self.runner)
        self.launcher = DevServerLauncher(self.runner)
        self.stage_runner = StageRunner(config)

        self.state: dict[str, Any] = {
            "started_at": datetime.now(timezone.utc).isoformat(),
            "stages": [],
            "handoff_reached": False,
            "success": False,
        }

    # ------------------------------------------------------------------
    # Plan
    # ------------------------------------------------------------------

    def build_plan(self) -> list[PlanItem]:
        """Return the ordered stage plan; the last item is the dev-server hand-off."""
        backend = self.backend_gen
        frontend = self.frontend_gen
        workspace = self.workspace_gen

        return [
            Stage("Validate toolchain", self._validate_toolchain),
            Stage("Confirm", self._confirm),
            Stage("Create project root", _make_dir("project_root")),
            Stage("Create backend directory", _make_dir("backend_path")),
            StageGroup(
                "Hardhat backend",
                precondition=lambda cfg: cfg.backend_marker.exists(),
                skip_message=(
                    f"Hardhat config found. If you want to re-setup the backend, delete the "
                    f"'{self.config.backend_dir}' directory and run this command again."
                ),
                stages=[
                    Stage("Initialize backend package", backend.init_package),
                    Stage("Install backend dependencies", backend.install_dependencies),
                    Stage("Scaffold backend tooling config", backend.init_tooling),
                    Stage("Emit contract", backend.emit_contract),
                    Stage("Emit contract test", backend.emit_contract_test),
                    Stage("Emit backend environment", backend.emit_env),
                ],
            ),
            Stage("Create frontend directory", _make_dir("frontend_path")),
            StageGroup(
                "Next.js frontend",
                precondition=lambda cfg: cfg.frontend_marker.exists(),
                skip_message=(
                    f"If you want to re-setup the frontend, delete the "
                    f"'{self.config.frontend_dir}' directory and run this command again."
                ),
                stages=[
                    Stage("Scaffold frontend application", frontend.create_app),
                    Stage("Install frontend dependencies", frontend.install_dependencies),
                    Stage("Configure UI library", frontend.init_ui_library),
                    Stage("Create frontend source directories", frontend.create_source_dirs),
                    Stage("Emit frontend binding", frontend.emit_binding),
                    Stage("Emit frontend environment", frontend.emit_env),
                ],
            ),
            Stage(
                "Emit root environment",
                workspace.emit_root_env,
                precondition=lambda cfg: (cfg.project_root / ".env").exists(),
            ),
            Stage("Emit editor workspace", workspace.emit_editor_workspace),
            Stage("Synchronize ABI", self.artifact_sync.run_stage),
            Stage("Emit ignore file", workspace.emit_gitignore),
            Stage(
                "Initialize repository",
                self.vcs.ensure_repository,
                precondition=lambda cfg: cfg.git_dir.exists(),
            ),
            Stage("Commit generated tree", self.vcs.commit_all, abort_on_failure=False),
            Stage("Launch dev server", self._launch, abort_on_failure=False),
        ]

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    async def run(self) -> dict[str, Any]:
        """Execute the plan.

        Returns:
            The final state dictionary, including a top-level ``success``
            boolean.  Fatal conditions are reported and recorded here rather
            than raised.
        """
        pipeline_start = time.monotonic()
        self._print_banner()

        *setup, handoff = self.build_plan()
        try:
            await self.stage_runner.run(setup)
            self._print_summary()
            await self.stage_runner.run([handoff])
            self.state["success"] = True
        except PrerequisiteMissing as exc:
            self.state["error"] = str(exc)
        except UserRefused as exc:
            self.state["error"] = str(exc)
        except StageError as exc:
            self.state["error"] = str(exc)
            print_info("Fix the problem and run the command again; finished stages will be skipped.")
        finally:
            self.state["stages"] = [
                {"name": r.name, "status": r.status.value, "detail": r.detail}
                for r in self.stage_runner.results
            ]
            self.state["total_duration"] = format_duration(time.monotonic() - pipeline_start)
            self.state["finished_at"] = datetime.now(timezone.utc).isoformat()

        return self.state

    # ------------------------------------------------------------------
    # Stage bodies owned by the pipeline
    # ------------------------------------------------------------------

    async def _validate_toolchain(self, config: ProjectConfig) -> str:
        resolved = self.validator.validate()
        return ", ".join(resolved)

    async def _confirm(self, config: ProjectConfig) -> str:
        self.gate.confirm(config.project_root)
        return "confirmed"

    async def _launch(self, config: ProjectConfig) -> str:
        self.state["handoff_reached"] = True
        return await self.launcher.launch(config)

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def _print_banner(self) -> None:
        console.print(
            Panel(
                f"[bold bright_cyan]dappstrap[/bold bright_cyan]\n"
                f"Project  : {escape(self.config.project_name)}\n"
                f"Location : {escape(str(self.config.project_root))}\n"
                f"Backend  : {escape(self.config.backend_dir)} (Hardhat, {escape(self.config.contract_name)}.sol)\n"
                f"Frontend : {escape(self.config.frontend_dir)} (Next.js)\n"
                f"Platform : {escape(platform.system() or 'unknown')}",
                title="[bold]Project setup[/bold]",
                border_style="bright_cyan",
            )
        )

    def _print_summary(self) -> None:
        rows = [(r.name, r.status.value, r.detail) for r in self.stage_runner.results]
        print_summary_table(rows, title="Setup results")


def _make_dir(attribute: str):
    """Return a stage body that creates ``getattr(config, attribute)``."""

    async def _body(config: ProjectConfig) -> str:
        path = ensure_dir(getattr(config, attribute))
        return str(path)

    return _body


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``dappstrap`` / ``python -m dappstrap``."""
    import argparse

    from dappstrap import __version__

    parser = argparse.ArgumentParser(
        prog="dappstrap",
        description=(
            "Scaffold a Hardhat contract backend and a Next.js frontend in the "
            "current directory, wire the ABI between them, commit and start the "
            "dev server."
        ),
        epilog=(
            "Configuration comes from DAPPSTRAP_* environment variables, e.g.\n"
            "  DAPPSTRAP_PROJECT_NAME=my-dapp DAPPSTRAP_CONTRACT_NAME=Market dappstrap\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.parse_args(argv)

    try:
        config = ProjectConfig.from_env()
    except ValueError as exc:
        console.print(f"[bold red]Error:[/bold red] Invalid configuration: {escape(str(exc))}")
        sys.exit(1)

    pipeline = Pipeline(config)
    try:
        result = asyncio.run(pipeline.run())
    except KeyboardInterrupt:
        if pipeline.state.get("handoff_reached"):
            console.print("[bold green]Dev server stopped.[/bold green]")
            return
        console.print("[bold red]Interrupted.[/bold red]")
        sys.exit(130)

    if not result.get("success"):
        sys.exit(1)


if __name__ == "__main__":
    main()
