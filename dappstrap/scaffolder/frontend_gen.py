"""Next.js frontend generation.

Drives ``create-next-app`` and the shadcn/ui CLI, creates the source folders
the rest of the project expects and writes the contract helper and the
frontend ``.env.local``.
"""

from __future__ import annotations

from pathlib import Path

from dappstrap.config import ProjectConfig
from dappstrap.runner import ProcessRunner

from .templates import Template, TemplateRenderer

SOURCE_DIRS: tuple[str, ...] = ("public", "src/lib", "src/components", "src/hooks")

CONTRACT_BINDING_TEMPLATE = Template(
    "frontend/contract.ts.j2",
    "src/lib/contract.ts",
    required=("contract_name",),
)
ENV_TEMPLATE = Template("frontend/env.local.j2", ".env.local", required=("chain_id",))


def create_next_app_command(frontend_dir: str) -> list[str]:
    """Return the non-interactive ``create-next-app`` invocation."""
    return [
        "npx",
        "create-next-app@latest",
        frontend_dir,
        "--ts",
        "--app",
        "--tailwind",
        "--eslint",
        "--src-dir",
        "--import-alias",
        "@/*",
        "--no-git",
        "--yes",
    ]


class FrontendGenerator:
    """Generates the Next.js frontend inside ``config.frontend_path``."""

    def __init__(self, renderer: TemplateRenderer, runner: ProcessRunner) -> None:
        self.renderer = renderer
        self.runner = runner

    async def create_app(self, config: ProjectConfig) -> str:
        # create-next-app takes the target directory as an argument, so it runs
        # from the project root.
        await self.runner.execute(
            "Create Next.js app",
            create_next_app_command(config.frontend_dir),
            cwd=config.project_root,
        )
        return config.frontend_dir

    async def install_dependencies(self, config: ProjectConfig) -> str:
        cmd = ["npm", "install", *config.frontend_dependencies]
        await self.runner.execute("Install frontend deps", cmd, cwd=config.frontend_path)
        return f"{len(config.frontend_dependencies)} packages"

    async def init_ui_library(self, config: ProjectConfig) -> str:
        await self.runner.execute(
            "Init shadcn/ui",
            ["npx", "shadcn@latest", "init", "--force", "--yes", "--base-color", "slate"],
            cwd=config.frontend_path,
        )
        await self.runner.execute(
            "Add UI components",
            ["npx", "shadcn@latest", "add", *config.ui_components, "--yes"],
            cwd=config.frontend_path,
        )
        return ", ".join(config.ui_components)

    async def create_source_dirs(self, config: ProjectConfig) -> str:
        for rel in SOURCE_DIRS:
            (config.frontend_path / rel).mkdir(parents=True, exist_ok=True)
        return ", ".join(SOURCE_DIRS)

    async def emit_binding(self, config: ProjectConfig) -> str:
        path = await self._emit(CONTRACT_BINDING_TEMPLATE, config)
        return str(path.relative_to(config.frontend_path).as_posix())

    async def emit_env(self, config: ProjectConfig) -> str:
        path = await self._emit(ENV_TEMPLATE, config)
        return str(path.name)

    async def _emit(self, template: Template, config: ProjectConfig) -> Path:
        return await self.renderer.emit(template, config.frontend_path, config.template_context())
