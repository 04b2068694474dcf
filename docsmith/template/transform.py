"""Per-file transforms of a template project.

Each template-project file is described by a ``FileDescriptor`` that knows
where the file comes from, what it is called in the staging directory and
which transform produces its content:

* ``HtmlTransform``  -- Jinja2 template rendered with autoescaping.
* ``TextTransform``  -- Jinja2 template rendered verbatim.
* ``CopyTransform``  -- the source bytes, unchanged.
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Any, BinaryIO, Optional, Protocol

from jinja2 import Template
from pydantic import BaseModel

from docsmith.model.nodes import Node
from docsmith.utils import print_warning


class TemplateError(Exception):
    """Base class for template project failures. ``path`` names the offending file."""

    def __init__(self, message: str, path: Optional[Path] = None):
        self.path = path
        super().__init__(message)


class TemplateParseError(TemplateError):
    """Raised when a template file cannot be parsed."""


class TemplateRenderError(TemplateError):
    """Raised when a template cannot be applied or a file cannot be written."""


def render_context(model: Any) -> dict[str, Any]:
    """Build the Jinja2 context for *model*.

    Fields of a pydantic model (every docsmith node) are exposed at the top
    level, so ``{{ title }}`` reads the title of the selected document. The
    model itself is always available as ``model`` and a node's discriminator
    as ``kind``.
    """
    context: dict[str, Any] = {}
    if isinstance(model, BaseModel):
        for name in type(model).model_fields:
            context[name] = getattr(model, name)
    elif isinstance(model, dict):
        context.update(model)
    if isinstance(model, Node):
        context.setdefault("kind", model.type_name)
    context["model"] = model
    return context


class Transform(Protocol):
    def transform(self, model: Any, out: BinaryIO) -> None:
        ...


@dataclass
class _JinjaTransform:
    name: str
    template: Template
    source: Path

    flavor = "jinja"

    def transform(self, model: Any, out: BinaryIO) -> None:
        try:
            rendered = self.template.render(render_context(model))
        except Exception as exc:
            raise TemplateRenderError(
                f"Failed to apply {self.flavor} template {self.name}: {exc}", path=self.source
            ) from exc
        out.write(rendered.encode("utf-8"))


class HtmlTransform(_JinjaTransform):
    """Applies an autoescaping (HTML) template to the model."""

    flavor = "html"


class TextTransform(_JinjaTransform):
    """Applies a plain text template to the model."""

    flavor = "text"


@dataclass
class CopyTransform:
    """Pipes an existing file through unchanged."""

    source: Path

    def transform(self, model: Any, out: BinaryIO) -> None:
        try:
            with self.source.open("rb") as src:
                shutil.copyfileobj(src, out)
        except OSError as exc:
            raise TemplateRenderError(f"Failed to copy {self.source}: {exc}", path=self.source) from exc


@dataclass
class FileDescriptor:
    """Maps a template-project source file onto its staged output."""

    source: Path
    relative_dir: Path
    destination_name: str
    transform: Transform

    def destination(self, staging_dir: Path) -> Path:
        return staging_dir / self.relative_dir / self.destination_name

    def apply(self, model: Any, staging_dir: Path) -> Path:
        """Render into the mirrored location below *staging_dir* and return it."""
        target = self.destination(staging_dir)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            out = target.open("wb")
        except OSError as exc:
            raise TemplateRenderError(f"Unable to create file {target}: {exc}", path=self.source) from exc

        try:
            self.transform.transform(model, out)
        finally:
            try:
                out.close()
            except OSError as exc:
                print_warning(f"Failed to close {target}: {exc}")
        return target
