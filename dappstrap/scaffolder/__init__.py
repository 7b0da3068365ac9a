"""dappstrap scaffolder -- renders and drives generation of project files.

Quick usage::

    from dappstrap.scaffolder import TemplateRenderer, BackendGenerator

    renderer = TemplateRenderer()
    backend = BackendGenerator(renderer, ProcessRunner())
    await backend.emit_contract(config)
"""

from dappstrap.scaffolder.backend_gen import BackendGenerator
from dappstrap.scaffolder.frontend_gen import FrontendGenerator
from dappstrap.scaffolder.templates import Template, TemplateError, TemplateRenderer
from dappstrap.scaffolder.workspace_gen import WorkspaceGenerator

__all__ = [
    "BackendGenerator",
    "FrontendGenerator",
    "Template",
    "TemplateError",
    "TemplateRenderer",
    "WorkspaceGenerator",
]
