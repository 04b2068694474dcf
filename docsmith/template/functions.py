"""Functions available to text-flavor templates.

They are registered both as Jinja2 globals and as filters, so a template may
write either ``{{ escape_latex(node.value) }}`` or ``{{ node.value | escape_latex }}``.
Together they let a template branch on the node variant and emit reserved
characters of the target format safely::

    {% for node in body %}
    {% if is_type(node, "chapter") %}{{ node.title | escape_latex }}
    {% elif is_type(node, "text") %}{{ node | str | escape_latex }}
    {% endif %}
    {% endfor %}
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any, Callable

from docsmith.model.nodes import Code, Node, Span

_LATEX_REPLACEMENTS: dict[str, str] = {
    "\\": r"\textbackslash{}",
    "&": r"\&",
    "%": r"\%",
    "$": r"\$",
    "#": r"\#",
    "_": r"\_",
    "{": r"\{",
    "}": r"\}",
    "~": r"\textasciitilde{}",
    "^": r"\textasciicircum{}",
}

_LATEX_PATTERN = re.compile("|".join(re.escape(char) for char in _LATEX_REPLACEMENTS))


def to_str(value: Any) -> str:
    """Stringify a node or plain value for output.

    Text spans yield their value, code yields its lines joined by newlines and
    ``None`` yields an empty string.
    """
    if value is None:
        return ""
    if isinstance(value, Span):
        return value.value
    if isinstance(value, Code):
        return "\n".join(value.lines)
    return str(value)


def escape_latex(value: Any) -> str:
    """Escape the characters LaTeX reserves, in a single pass."""
    return _LATEX_PATTERN.sub(lambda match: _LATEX_REPLACEMENTS[match.group(0)], to_str(value))


def type_of(node: Any) -> str:
    """Return the discriminator of *node*, or ``""`` for non-nodes."""
    if isinstance(node, Node):
        return node.type_name
    if isinstance(node, Mapping):
        value = node.get("type")
        return value if isinstance(value, str) else ""
    return ""


def is_type(node: Any, *names: str) -> bool:
    """Return ``True`` if the discriminator of *node* is one of *names*."""
    return type_of(node) in names


TEMPLATE_FUNCTIONS: dict[str, Callable[..., Any]] = {
    "escape_latex": escape_latex,
    "type_of": type_of,
    "is_type": is_type,
    "str": to_str,
}
