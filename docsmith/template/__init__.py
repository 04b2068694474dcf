"""docsmith template projects.

Reads a template directory into per-file transforms and renders it against a
document model into a staging directory.

Quick usage::

    from docsmith.template import read_template

    project = read_template("templates/book", "/tmp/staging")
    artefacts = project.build(workspace.by_id("book"))
"""

from .functions import TEMPLATE_FUNCTIONS, escape_latex, is_type, to_str, type_of
from .project import AutobuildError, TemplateProject, read_template
from .transform import (
    CopyTransform,
    FileDescriptor,
    HtmlTransform,
    TemplateError,
    TemplateParseError,
    TemplateRenderError,
    TextTransform,
    render_context,
)

__all__ = [
    # Project
    "TemplateProject",
    "read_template",
    # Transforms
    "FileDescriptor",
    "HtmlTransform",
    "TextTransform",
    "CopyTransform",
    "render_context",
    # Functions
    "TEMPLATE_FUNCTIONS",
    "escape_latex",
    "type_of",
    "is_type",
    "to_str",
    # Errors
    "TemplateError",
    "TemplateParseError",
    "TemplateRenderError",
    "AutobuildError",
]
