"""dappstrap -- idempotent scaffolding for Hardhat + Next.js dApp projects.

Creates a contract backend and a web frontend side by side, wires the compiled
contract ABI into the frontend, commits the tree to git and hands the terminal
to the frontend dev server.

Quick usage::

    from dappstrap import Pipeline, ProjectConfig

    pipeline = Pipeline(ProjectConfig(project_name="my-dapp"))
    state = asyncio.run(pipeline.run())
"""

from dappstrap.config import ProjectConfig
from dappstrap.pipeline import Pipeline

__version__ = "0.1.0"

__all__ = [
    "Pipeline",
    "ProjectConfig",
    "__version__",
]
