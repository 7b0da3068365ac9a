"""ABI synchronisation from the Hardhat build output into the frontend.

Reads the contract's compiled artifact, takes its ``abi`` field and writes
``src/lib/abi.json`` plus a thin ``src/lib/abi.ts`` re-export.  A missing or
malformed artifact is expected before the first ``npx hardhat compile`` and is
reported as a warning; it never stops the pipeline.
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from dappstrap.config import ProjectConfig
from dappstrap.utils import dump_json, load_json, print_success, print_warning, write_text

BINDING_MODULE = 'import abi from "./abi.json"; export default abi;\n'


@dataclass
class SyncResult:
    synced: bool
    reason: str = ""
    abi_path: Path | None = None
    binding_path: Path | None = None
    entries: int = 0


def extract_abi(artifact: Any) -> list[Any] | None:
    """Return the artifact's ``abi`` list, or ``None`` for any other shape."""
    if not isinstance(artifact, dict):
        return None
    abi = artifact.get("abi")
    if not isinstance(abi, list):
        return None
    return abi


def read_abi(artifact_path: Path) -> tuple[list[Any] | None, str]:
    """Load *artifact_path* and extract its ABI.

    Returns:
        ``(abi, "")`` on success, otherwise ``(None, reason)``.
    """
    if not artifact_path.is_file():
        return None, f"artifact not found: {artifact_path}"
    try:
        artifact = load_json(artifact_path)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        return None, f"artifact unreadable: {exc}"
    abi = extract_abi(artifact)
    if abi is None:
        return None, "artifact has no 'abi' list"
    return abi, ""


class ArtifactSync:
    """Bridges the backend's compiled interface into the frontend source tree."""

    async def sync(self, config: ProjectConfig) -> SyncResult:
        abi, reason = read_abi(config.artifact_path)
        if abi is None:
            print_warning(
                "ABI not found (contract not yet compiled). "
                f"Run `npx hardhat compile` in '{config.backend_dir}' first."
            )
            return SyncResult(synced=False, reason=reason)

        await asyncio.to_thread(write_text, config.abi_json_path, dump_json(abi))
        await asyncio.to_thread(write_text, config.binding_path, BINDING_MODULE)
        print_success("ABI synced to frontend.")
        return SyncResult(
            synced=True,
            abi_path=config.abi_json_path,
            binding_path=config.binding_path,
            entries=len(abi),
        )

    async def run_stage(self, config: ProjectConfig) -> str:
        """Stage body: sync and describe the outcome."""
        result = await self.sync(config)
        if result.synced:
            return f"{result.entries} ABI entries"
        return f"not synced ({result.reason})"
