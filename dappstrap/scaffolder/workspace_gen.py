"""Root-level project files: editor workspace, root ``.env`` and ``.gitignore``."""

from __future__ import annotations

from dappstrap.config import ProjectConfig
from dappstrap.utils import print_info, print_success

from .templates import Template, TemplateRenderer

EXTENSIONS_TEMPLATE = Template(
    "workspace/extensions.json.j2",
    ".vscode/extensions.json",
    required=("editor_extensions",),
)
WORKSPACE_TEMPLATE = Template(
    "workspace/code-workspace.j2",
    "{{ project_name }}.code-workspace",
    required=("project_name",),
)
ROOT_ENV_TEMPLATE = Template("workspace/env.j2", ".env", required=("default_rpc_url",))
GITIGNORE_TEMPLATE = Template("workspace/gitignore.j2", ".gitignore")


class WorkspaceGenerator:
    """Writes the files that live directly in the project root."""

    def __init__(self, renderer: TemplateRenderer) -> None:
        self.renderer = renderer

    async def emit_editor_workspace(self, config: ProjectConfig) -> str:
        context = config.template_context()
        await self.renderer.emit(EXTENSIONS_TEMPLATE, config.project_root, context)
        workspace = await self.renderer.emit(WORKSPACE_TEMPLATE, config.project_root, context)
        print_success("VS Code recommendations saved.")
        print_info(
            "Note that you need to install these extensions manually. "
            "VS Code will prompt you to do so when you open the project."
        )
        return workspace.name

    async def emit_root_env(self, config: ProjectConfig) -> str:
        path = await self.renderer.emit(ROOT_ENV_TEMPLATE, config.project_root, config.template_context())
        return path.name

    async def emit_gitignore(self, config: ProjectConfig) -> str:
        path = await self.renderer.emit(GITIGNORE_TEMPLATE, config.project_root, config.template_context())
        return path.name
