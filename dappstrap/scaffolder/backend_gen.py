"""Hardhat backend generation.

Initialises the npm package, installs Hardhat and its toolbox, runs the
Hardhat initialiser and writes the tooling config, the contract, its test and
the backend ``.env``.  Every method is one stage body of the backend group and
receives the ``ProjectConfig`` explicitly.
"""

from __future__ import annotations

from pathlib import Path

from dappstrap.config import ProjectConfig
from dappstrap.runner import ProcessRunner

from .templates import Template, TemplateRenderer

# Answers for the interactive ``npx hardhat init`` prompts:
# JavaScript project, add .gitignore, no telemetry.
HARDHAT_INIT_ANSWERS = "1\ny\nn\n"

CONFIG_TEMPLATE = Template(
    "backend/hardhat.config.cjs.j2",
    "hardhat.config.cjs",
    required=("solidity_version", "network_name", "default_rpc_url"),
)
CONTRACT_TEMPLATE = Template(
    "backend/contract.sol.j2",
    "contracts/{{ contract_name }}.sol",
    required=("contract_name", "solidity_version"),
)
CONTRACT_TEST_TEMPLATE = Template(
    "backend/contract.test.js.j2",
    "test/contract.test.js",
    required=("contract_name",),
)
ENV_TEMPLATE = Template("backend/env.j2", ".env", required=("default_rpc_url",))


class BackendGenerator:
    """Generates the Hardhat backend inside ``config.backend_path``."""

    def __init__(self, renderer: TemplateRenderer, runner: ProcessRunner) -> None:
        self.renderer = renderer
        self.runner = runner

    async def init_package(self, config: ProjectConfig) -> str:
        await self.runner.execute("Initialize npm", ["npm", "init", "-y"], cwd=config.backend_path)
        return "package.json created"

    async def install_dependencies(self, config: ProjectConfig) -> str:
        cmd = ["npm", "install", "--save-dev", *config.backend_dependencies]
        await self.runner.execute("Install Hardhat deps", cmd, cwd=config.backend_path)
        return f"{len(config.backend_dependencies)} packages"

    async def init_tooling(self, config: ProjectConfig) -> str:
        """Run the Hardhat initialiser, then write our own ``hardhat.config.cjs``."""
        await self.runner.execute(
            "Initialize Hardhat (.gitignore, no telemetry)",
            ["npx", "hardhat", "init", "--force"],
            cwd=config.backend_path,
            input_text=HARDHAT_INIT_ANSWERS,
        )
        path = await self._emit(CONFIG_TEMPLATE, config)
        return str(path.name)

    async def emit_contract(self, config: ProjectConfig) -> str:
        path = await self._emit(CONTRACT_TEMPLATE, config)
        return str(path.relative_to(config.backend_path).as_posix())

    async def emit_contract_test(self, config: ProjectConfig) -> str:
        path = await self._emit(CONTRACT_TEST_TEMPLATE, config)
        return str(path.relative_to(config.backend_path).as_posix())

    async def emit_env(self, config: ProjectConfig) -> str:
        path = await self._emit(ENV_TEMPLATE, config)
        return str(path.name)

    async def _emit(self, template: Template, config: ProjectConfig) -> Path:
        return await self.renderer.emit(template, config.backend_path, config.template_context())
