"""Jinja2 template rendering for project scaffolding.

Provides the ``TemplateRenderer`` class which loads Jinja2 templates from the
``dappstrap/scaffolder/templates/`` directory and renders them with the
project's template context.  Rendering is kept apart from writing: ``render``
is a pure function of (template, context); ``emit`` writes the result.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from dappstrap.utils import write_text


# ---------------------------------------------------------------------------
# Template directory discovery
# ---------------------------------------------------------------------------

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"


class TemplateError(Exception):
    """Raised when a template is emitted without its required variables."""


@dataclass(frozen=True)
class Template:
    """A template file and where its rendered output belongs.

    ``target`` is relative to the directory handed to ``emit`` and may itself
    contain placeholders (e.g. ``contracts/{{ contract_name }}.sol``).
    """

    name: str
    target: str
    required: tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders Jinja2 templates for project scaffolding.

    Undefined variables are errors rather than empty strings, so a template
    can never silently produce a half-filled file.
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape([]),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )

    # -- Pure rendering ----------------------------------------------------

    def render(self, template_path: str, context: dict[str, Any]) -> str:
        """Render a single template with the provided context.

        Args:
            template_path: Path relative to the template directory (e.g.
                ``"backend/hardhat.config.cjs.j2"``).
            context: Dictionary of variables available inside the template.

        Returns:
            The rendered template content as a string.
        """
        template = self.env.get_template(template_path)
        return template.render(**context)

    def render_string(self, template_string: str, context: dict[str, Any]) -> str:
        """Render an inline template string with the provided context."""
        template = self.env.from_string(template_string)
        return template.render(**context)

    def resolve_target(self, template: Template, context: dict[str, Any]) -> str:
        """Return *template*'s target path with placeholders filled in."""
        return self.render_string(template.target, context)

    # -- File output (async) -----------------------------------------------

    async def render_to_file(
        self,
        template_path: str,
        output_path: str | Path,
        context: dict[str, Any],
    ) -> Path:
        """Render a template and write the result to *output_path*.

        Parent directories are created automatically and an existing file is
        overwritten without being read.
        """
        content = self.render(template_path, context)
        out = Path(output_path)
        await asyncio.to_thread(write_text, out, content)
        return out

    async def emit(self, template: Template, root: Path, context: dict[str, Any]) -> Path:
        """Check *template*'s required bindings, render it and write it under *root*.

        Raises:
            TemplateError: If a required variable is missing from *context*.
        """
        missing = [name for name in template.required if name not in context]
        if missing:
            raise TemplateError(
                f"Template {template.name} is missing variables: {', '.join(missing)}"
            )
        target = root / self.resolve_target(template, context)
        return await self.render_to_file(template.name, target, context)

