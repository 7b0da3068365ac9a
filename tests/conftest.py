"""Shared pytest fixtures for the dappstrap test suite.

Provides reusable fixtures for:
- A ``ProjectConfig`` rooted in a temporary directory
- A fake toolchain that stands in for npm / npx / git and records every call
- Mock asyncio subprocess helpers
- Compiled Hardhat artifacts
- Fully wired ``Pipeline`` instances with scripted operator answers
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from dappstrap.config import ProjectConfig
from dappstrap.pipeline import Pipeline
from dappstrap.preflight import InteractiveGate, ToolchainValidator
from dappstrap.runner import ProcessRunner


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

@pytest.fixture
def project_config(tmp_path: Path) -> ProjectConfig:
    """A configuration whose project root lives under ``tmp_path``."""
    return ProjectConfig(
        project_name="demo-dapp",
        base_dir=tmp_path,
        command_timeout=30,
    )


# ---------------------------------------------------------------------------
# Fake toolchain
# ---------------------------------------------------------------------------

class FakeToolchain:
    """Replacement for ``dappstrap.runner.run_command``.

    Records every invocation and reproduces the on-disk effects the real tools
    have that the pipeline depends on (``package.json``, ``node_modules``,
    ``.git``, the create-next-app target directory).  Commands can be made to
    fail by registering an argument prefix in ``failures``.
    """

    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []
        self.failures: dict[tuple[str, ...], tuple[int, str, str]] = {}

    def fail(self, *prefix: str, returncode: int = 1, stdout: str = "", stderr: str = "boom") -> None:
        self.failures[prefix] = (returncode, stdout, stderr)

    async def __call__(
        self,
        cmd: list[str],
        cwd: str | Path | None = None,
        timeout: float | None = 120,
        capture: bool = True,
        input_text: str | None = None,
    ) -> tuple[int, str, str]:
        cwd_path = Path(cwd) if cwd else Path.cwd()
        self.calls.append(
            {
                "cmd": list(cmd),
                "cwd": cwd_path,
                "timeout": timeout,
                "capture": capture,
                "input_text": input_text,
            }
        )
        for prefix, outcome in self.failures.items():
            if tuple(cmd[: len(prefix)]) == prefix:
                return outcome
        self._simulate(list(cmd), cwd_path)
        return (0, "", "")

    @staticmethod
    def _simulate(cmd: list[str], cwd: Path) -> None:
        if cmd[:2] == ["npm", "init"]:
            (cwd / "package.json").write_text("{}\n", encoding="utf-8")
        elif cmd[:2] == ["npm", "install"]:
            (cwd / "node_modules").mkdir(exist_ok=True)
        elif cmd[:2] == ["git", "init"]:
            (cwd / ".git").mkdir(exist_ok=True)
        elif "create-next-app@latest" in cmd:
            target = cwd / cmd[2]
            target.mkdir(exist_ok=True)
            (target / "package.json").write_text("{}\n", encoding="utf-8")

    # -- Query helpers -------------------------------------------------------

    @property
    def commands(self) -> list[str]:
        return [" ".join(call["cmd"]) for call in self.calls]

    def find(self, *prefix: str) -> list[dict[str, Any]]:
        return [c for c in self.calls if tuple(c["cmd"][: len(prefix)]) == prefix]


@pytest.fixture
def fake_toolchain(monkeypatch: pytest.MonkeyPatch) -> FakeToolchain:
    """Patch ``run_command`` used by ``ProcessRunner`` with a ``FakeToolchain``."""
    fake = FakeToolchain()
    monkeypatch.setattr("dappstrap.runner.run_command", fake)
    return fake


# ---------------------------------------------------------------------------
# Mock Subprocess (generic)
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_subprocess():
    """Mock asyncio subprocess for testing command execution.

    Returns a factory that creates mock subprocess instances with configurable
    stdout, stderr, and return codes.

    Usage:
        def test_command(mock_subprocess):
            proc = mock_subprocess(stdout="output", returncode=0)
            with patch("asyncio.create_subprocess_exec", return_value=proc):
                ...
    """
    def factory(
        stdout: str = "",
        stderr: str = "",
        returncode: int = 0,
    ) -> AsyncMock:
        mock_proc = AsyncMock()
        mock_proc.communicate = AsyncMock(
            return_value=(stdout.encode("utf-8"), stderr.encode("utf-8"))
        )
        mock_proc.returncode = returncode
        mock_proc.pid = 99999
        mock_proc.kill = MagicMock()
        mock_proc.wait = AsyncMock(return_value=returncode)
        return mock_proc

    return factory


# ---------------------------------------------------------------------------
# Artifacts
# ---------------------------------------------------------------------------

SAMPLE_ABI: list[dict[str, Any]] = [
    {
        "inputs": [
            {"internalType": "string", "name": "product", "type": "string"},
            {"internalType": "uint256", "name": "quantity", "type": "uint256"},
            {"internalType": "uint256", "name": "price", "type": "uint256"},
        ],
        "name": "createListing",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "inputs": [{"internalType": "uint256", "name": "id", "type": "uint256"}],
        "name": "buy",
        "outputs": [],
        "stateMutability": "payable",
        "type": "function",
    },
]


@pytest.fixture
def sample_abi() -> list[dict[str, Any]]:
    return json.loads(json.dumps(SAMPLE_ABI))


@pytest.fixture
def write_artifact(project_config: ProjectConfig):
    """Factory writing a Hardhat artifact (or arbitrary JSON) at the artifact path."""

    def factory(payload: Any | None = None, raw: str | None = None) -> Path:
        path = project_config.artifact_path
        path.parent.mkdir(parents=True, exist_ok=True)
        if raw is not None:
            path.write_text(raw, encoding="utf-8")
        else:
            if payload is None:
                payload = {
                    "_format": "hh-sol-artifact-1",
                    "contractName": project_config.contract_name,
                    "sourceName": f"contracts/{project_config.contract_name}.sol",
                    "abi": SAMPLE_ABI,
                    "bytecode": "0x6080",
                }
            path.write_text(json.dumps(payload), encoding="utf-8")
        return path

    return factory


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------

def all_tools_found(tool: str) -> str:
    return f"/usr/bin/{tool}"


@pytest.fixture
def make_pipeline(project_config: ProjectConfig, fake_toolchain: FakeToolchain):
    """Factory for a ``Pipeline`` with scripted answers and a fake toolchain.

    ``answers`` feeds the confirmation prompt, one entry per run; ``which``
    replaces ``shutil.which`` for the toolchain check.
    """

    def factory(
        answers: list[str] | None = None,
        which=all_tools_found,
        config: ProjectConfig | None = None,
    ) -> Pipeline:
        cfg = config or project_config
        replies = list(answers if answers is not None else ["y"])
        gate = InteractiveGate(input_fn=lambda prompt: replies.pop(0))
        validator = ToolchainValidator(cfg.required_tools, which=which)
        pipeline = Pipeline(
            cfg,
            runner=ProcessRunner(timeout=cfg.command_timeout),
            validator=validator,
            gate=gate,
        )
        pipeline.launcher._which = lambda tool: None
        return pipeline

    return factory
