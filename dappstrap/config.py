"""dappstrap project configuration.

Every value the pipeline needs is fixed once, up front, in a frozen Pydantic
v2 model.  Stages never consult the process working directory: all paths are
derived from ``ProjectConfig.base_dir`` and handed to each stage explicitly.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

_DIR_NAME_PATTERN = r"^[A-Za-z0-9][A-Za-z0-9._-]*$"

DEFAULT_BACKEND_DEPENDENCIES: tuple[str, ...] = (
    "hardhat",
    "dotenv",
    "ethers",
    "chai",
    "mocha",
    "@nomicfoundation/hardhat-toolbox",
)

DEFAULT_FRONTEND_DEPENDENCIES: tuple[str, ...] = (
    "@tanstack/react-table",
    "@shadcn/ui",
    "clsx",
    "tailwind-variants",
    "@radix-ui/react-icons",
    "ethers",
    "dotenv",
)

DEFAULT_UI_COMPONENTS: tuple[str, ...] = (
    "button",
    "card",
    "alert",
    "dialog",
    "input",
    "table",
)

DEFAULT_EDITOR_EXTENSIONS: tuple[str, ...] = (
    "dbaeumer.vscode-eslint",
    "esbenp.prettier-vscode",
    "nextjs.vscode-nextjs-extension",
    "nomicfoundation.hardhat-solidity",
    "rodrigovallades.es7-react-js-snippets",
)


class ProjectConfig(BaseModel):
    """Immutable description of the project to scaffold.

    Instances are created once by the CLI entry point (usually through
    :meth:`from_env`) and then passed, read-only, to every stage.
    """

    model_config = ConfigDict(frozen=True)

    project_name: str = Field(default="agrichain", pattern=_DIR_NAME_PATTERN)
    backend_dir: str = Field(default="ngine", pattern=_DIR_NAME_PATTERN)
    frontend_dir: str = Field(default="frontend", pattern=_DIR_NAME_PATTERN)
    contract_name: str = Field(default="AgriChain", pattern=r"^[A-Za-z_][A-Za-z0-9_]*$")
    default_rpc_url: str = Field(default="http://127.0.0.1:8545", min_length=1)
    chain_id: int = Field(default=11155111, ge=1)
    network_name: str = Field(default="apechain", pattern=r"^[A-Za-z_][A-Za-z0-9_]*$")
    solidity_version: str = Field(default="0.8.20", pattern=r"^\d+\.\d+\.\d+$")

    base_dir: Path = Field(default_factory=Path.cwd)
    required_tools: tuple[str, ...] = Field(default=("node", "npm", "npx", "git"))
    command_timeout: int = Field(
        default=900, ge=10, description="Per-command timeout in seconds for installs and generators"
    )

    default_branch: str = Field(default="master")
    commit_message: str = Field(
        default="Initial commit: Setup backend with Hardhat and frontend with Next.js and tailwindcss"
    )

    backend_dependencies: tuple[str, ...] = Field(default=DEFAULT_BACKEND_DEPENDENCIES)
    frontend_dependencies: tuple[str, ...] = Field(default=DEFAULT_FRONTEND_DEPENDENCIES)
    ui_components: tuple[str, ...] = Field(default=DEFAULT_UI_COMPONENTS)
    editor_extensions: tuple[str, ...] = Field(default=DEFAULT_EDITOR_EXTENSIONS)

    # ------------------------------------------------------------------
    # Derived paths (read-only properties)
    # ------------------------------------------------------------------

    @property
    def project_root(self) -> Path:
        """Directory that holds the whole generated project."""
        return self.base_dir / self.project_name

    @property
    def backend_path(self) -> Path:
        return self.project_root / self.backend_dir

    @property
    def frontend_path(self) -> Path:
        return self.project_root / self.frontend_dir

    @property
    def backend_marker(self) -> Path:
        """Presence of this file means the backend group already ran."""
        return self.backend_path / "hardhat.config.cjs"

    @property
    def frontend_marker(self) -> Path:
        """Presence of this directory means the frontend group already ran."""
        return self.frontend_path / "node_modules"

    @property
    def artifact_path(self) -> Path:
        """Where ``npx hardhat compile`` writes the contract's compiled JSON."""
        return (
            self.backend_path
            / "artifacts"
            / "contracts"
            / f"{self.contract_name}.sol"
            / f"{self.contract_name}.json"
        )

    @property
    def abi_json_path(self) -> Path:
        return self.frontend_path / "src" / "lib" / "abi.json"

    @property
    def binding_path(self) -> Path:
        return self.frontend_path / "src" / "lib" / "abi.ts"

    @property
    def workspace_file(self) -> Path:
        return self.project_root / f"{self.project_name}.code-workspace"

    @property
    def git_dir(self) -> Path:
        return self.project_root / ".git"

    # ------------------------------------------------------------------
    # Template context
    # ------------------------------------------------------------------

    def template_context(self) -> dict[str, Any]:
        """Return the variables available to every template.

        Pure: the same configuration always yields an equal mapping.
        """
        return {
            "project_name": self.project_name,
            "backend_dir": self.backend_dir,
            "frontend_dir": self.frontend_dir,
            "contract_name": self.contract_name,
            "default_rpc_url": self.default_rpc_url,
            "chain_id": self.chain_id,
            "network_name": self.network_name,
            "solidity_version": self.solidity_version,
            "editor_extensions": list(self.editor_extensions),
        }

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    @classmethod
    def from_env(cls) -> "ProjectConfig":
        """Build a ``ProjectConfig`` from environment variables.

        Recognised variables (all optional):
            DAPPSTRAP_PROJECT_NAME, DAPPSTRAP_BACKEND_DIR, DAPPSTRAP_FRONTEND_DIR,
            DAPPSTRAP_CONTRACT_NAME, DAPPSTRAP_RPC_URL, DAPPSTRAP_CHAIN_ID,
            DAPPSTRAP_BASE_DIR, DAPPSTRAP_COMMAND_TIMEOUT.
        """
        kwargs: dict[str, Any] = {}
        string_vars = {
            "DAPPSTRAP_PROJECT_NAME": "project_name",
            "DAPPSTRAP_BACKEND_DIR": "backend_dir",
            "DAPPSTRAP_FRONTEND_DIR": "frontend_dir",
            "DAPPSTRAP_CONTRACT_NAME": "contract_name",
            "DAPPSTRAP_RPC_URL": "default_rpc_url",
        }
        for env_name, field_name in string_vars.items():
            if os.environ.get(env_name):
                kwargs[field_name] = os.environ[env_name]

        if os.environ.get("DAPPSTRAP_CHAIN_ID"):
            kwargs["chain_id"] = int(os.environ["DAPPSTRAP_CHAIN_ID"])
        if os.environ.get("DAPPSTRAP_COMMAND_TIMEOUT"):
            kwargs["command_timeout"] = int(os.environ["DAPPSTRAP_COMMAND_TIMEOUT"])
        if os.environ.get("DAPPSTRAP_BASE_DIR"):
            kwargs["base_dir"] = Path(os.environ["DAPPSTRAP_BASE_DIR"])

        return cls(**kwargs)
