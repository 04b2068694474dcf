"""JSON codec for the document tree.

Every node maps to a plain attribute dictionary tagged with its discriminator
under ``TYPE_KEY``. Encoders and decoders are kept in two tables keyed by
``NodeType``; each decoder reads exactly the attributes its encoder writes.

Optional string attributes are left out when empty and every string attribute
reads back as ``""`` when absent, so absent and empty are indistinguishable.
Integers tolerate the float representation generic JSON tooling may produce.
"""

from __future__ import annotations

import json
import math
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any, Optional

from docsmith.model.nodes import (
    Author,
    Bold,
    Chapter,
    Code,
    Container,
    Document,
    Image,
    Italic,
    Newline,
    Newpage,
    Node,
    NodeType,
    Span,
    TableOfContents,
    TitlePage,
    Underline,
    Workspace,
)

TYPE_KEY = "type"


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class DecodeError(ValueError):
    """Raised when serialized data cannot be turned back into a tree."""

    def __init__(self, message: str, path: Optional[Path] = None):
        self.path = path
        super().__init__(message)


class UnknownVariantError(DecodeError):
    """Raised when an object's discriminator is not a known ``NodeType``."""

    def __init__(self, discriminator: Any, payload: Optional[Mapping[str, Any]] = None):
        self.discriminator = discriminator
        self.payload = dict(payload) if payload is not None else {}
        super().__init__(f"Unknown node type {discriminator!r}: {_preview(self.payload)}")


# ---------------------------------------------------------------------------
# Attribute helpers
# ---------------------------------------------------------------------------

def _opt_str(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    return value if isinstance(value, str) else ""


def _opt_int(data: Mapping[str, Any], key: str) -> int:
    value = data.get(key)
    if isinstance(value, bool):
        return 0
    if isinstance(value, float) and not math.isfinite(value):
        raise DecodeError(f"Attribute '{key}' is not a finite number: {value}")
    if isinstance(value, (int, float)):
        return int(value)
    return 0


def _opt_str_list(data: Mapping[str, Any], key: str) -> list[str]:
    value = data.get(key)
    if not isinstance(value, list):
        return []
    return [item if isinstance(item, str) else str(item) for item in value]


def _set_opt(data: dict[str, Any], key: str, value: str) -> None:
    if value:
        data[key] = value


def _decode_list(data: Mapping[str, Any], key: str) -> list[Node]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise DecodeError(f"Attribute '{key}' must be a list, got {type(value).__name__}")
    nodes: list[Node] = []
    for index, item in enumerate(value):
        if not isinstance(item, Mapping):
            raise DecodeError(
                f"Entry {index} of '{key}' must be an object, got {type(item).__name__}"
            )
        nodes.append(decode(item))
    return nodes


def _encode_list(nodes: list[Node]) -> list[dict[str, Any]]:
    return [encode(node) for node in nodes]


def _preview(payload: Mapping[str, Any], limit: int = 200) -> str:
    text = json.dumps(payload, default=str, ensure_ascii=False)
    return text if len(text) <= limit else text[:limit] + "..."


# ---------------------------------------------------------------------------
# Per-variant encoders
# ---------------------------------------------------------------------------

def _encode_workspace(node: Workspace) -> dict[str, Any]:
    return {
        TYPE_KEY: node.type_name,
        "title": node.title,
        "version": node.version,
        "format": node.format,
        "resources": _encode_list(node.resources),
    }


def _encode_document(node: Document) -> dict[str, Any]:
    data: dict[str, Any] = {TYPE_KEY: node.type_name}
    _set_opt(data, "id", node.id)
    data["title"] = node.title
    data["authors"] = _encode_list(node.authors)
    data["body"] = _encode_list(node.body)
    return data


def _encode_author(node: Author) -> dict[str, Any]:
    data: dict[str, Any] = {
        TYPE_KEY: node.type_name,
        "firstname": node.firstname,
        "lastname": node.lastname,
    }
    _set_opt(data, "email", node.email)
    return data


def _encode_chapter(node: Chapter) -> dict[str, Any]:
    return {
        TYPE_KEY: node.type_name,
        "title": node.title,
        "level": node.level,
        "body": _encode_list(node.body),
    }


def _encode_span(node: Span) -> dict[str, Any]:
    return {TYPE_KEY: node.type_name, "value": node.value}


def _encode_code(node: Code) -> dict[str, Any]:
    data: dict[str, Any] = {TYPE_KEY: node.type_name}
    _set_opt(data, "hint", node.hint)
    data["lines"] = list(node.lines)
    return data


def _encode_image(node: Image) -> dict[str, Any]:
    data: dict[str, Any] = {TYPE_KEY: node.type_name, "src": node.src}
    _set_opt(data, "width", node.width)
    _set_opt(data, "height", node.height)
    return data


def _encode_group(node: Container) -> dict[str, Any]:
    return {TYPE_KEY: node.type_name, "body": _encode_list(node.body)}


def _encode_marker(node: Node) -> dict[str, Any]:
    return {TYPE_KEY: node.type_name}


# ---------------------------------------------------------------------------
# Per-variant decoders
# ---------------------------------------------------------------------------

def _decode_workspace(data: Mapping[str, Any]) -> Workspace:
    return Workspace(
        title=_opt_str(data, "title"),
        version=_opt_str(data, "version"),
        format=_opt_int(data, "format"),
        resources=_decode_list(data, "resources"),
    )


def _decode_document(data: Mapping[str, Any]) -> Document:
    authors: list[Author] = []
    for node in _decode_list(data, "authors"):
        if not isinstance(node, Author):
            raise DecodeError(f"Document authors must be of type 'author', got '{node.type_name}'")
        authors.append(node)
    return Document(
        id=_opt_str(data, "id"),
        title=_opt_str(data, "title"),
        authors=authors,
        body=_decode_list(data, "body"),
    )


def _decode_author(data: Mapping[str, Any]) -> Author:
    return Author(
        firstname=_opt_str(data, "firstname"),
        lastname=_opt_str(data, "lastname"),
        email=_opt_str(data, "email"),
    )


def _decode_chapter(data: Mapping[str, Any]) -> Chapter:
    return Chapter(
        title=_opt_str(data, "title"),
        level=max(_opt_int(data, "level"), 0),
        body=_decode_list(data, "body"),
    )


def _decode_span(data: Mapping[str, Any]) -> Span:
    return Span(value=_opt_str(data, "value"))


def _decode_code(data: Mapping[str, Any]) -> Code:
    return Code(hint=_opt_str(data, "hint"), lines=_opt_str_list(data, "lines"))


def _decode_image(data: Mapping[str, Any]) -> Image:
    return Image(
        src=_opt_str(data, "src"),
        width=_opt_str(data, "width"),
        height=_opt_str(data, "height"),
    )


def _group_decoder(cls: type[Container]) -> Callable[[Mapping[str, Any]], Node]:
    def _decode_group(data: Mapping[str, Any]) -> Node:
        return cls(body=_decode_list(data, "body"))
    return _decode_group


def _marker_decoder(cls: type[Node]) -> Callable[[Mapping[str, Any]], Node]:
    def _decode_marker(data: Mapping[str, Any]) -> Node:
        return cls()
    return _decode_marker


# ---------------------------------------------------------------------------
# Dispatch tables
# ---------------------------------------------------------------------------

_ENCODERS: dict[NodeType, Callable[[Any], dict[str, Any]]] = {
    NodeType.WORKSPACE: _encode_workspace,
    NodeType.DOCUMENT: _encode_document,
    NodeType.AUTHOR: _encode_author,
    NodeType.CHAPTER: _encode_chapter,
    NodeType.TEXT: _encode_span,
    NodeType.CODE: _encode_code,
    NodeType.IMAGE: _encode_image,
    NodeType.TOC: _encode_marker,
    NodeType.NEWLINE: _encode_marker,
    NodeType.NEWPAGE: _encode_marker,
    NodeType.ITALIC: _encode_group,
    NodeType.BOLD: _encode_group,
    NodeType.UNDERLINE: _encode_group,
    NodeType.TITLEPAGE: _encode_group,
}

_DECODERS: dict[NodeType, Callable[[Mapping[str, Any]], Node]] = {
    NodeType.WORKSPACE: _decode_workspace,
    NodeType.DOCUMENT: _decode_document,
    NodeType.AUTHOR: _decode_author,
    NodeType.CHAPTER: _decode_chapter,
    NodeType.TEXT: _decode_span,
    NodeType.CODE: _decode_code,
    NodeType.IMAGE: _decode_image,
    NodeType.TOC: _marker_decoder(TableOfContents),
    NodeType.NEWLINE: _marker_decoder(Newline),
    NodeType.NEWPAGE: _marker_decoder(Newpage),
    NodeType.ITALIC: _group_decoder(Italic),
    NodeType.BOLD: _group_decoder(Bold),
    NodeType.UNDERLINE: _group_decoder(Underline),
    NodeType.TITLEPAGE: _group_decoder(TitlePage),
}

for _table in (_ENCODERS, _DECODERS):
    _missing = set(NodeType) - set(_table)
    if _missing:
        raise RuntimeError(f"Codec table lacks entries for: {sorted(m.value for m in _missing)}")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def encode(node: Node) -> dict[str, Any]:
    """Encode *node* (and its subtree) into a JSON-compatible dictionary."""
    return _ENCODERS[node.kind](node)


def decode(data: Mapping[str, Any]) -> Node:
    """Decode a dictionary produced by ``encode`` (or parsed from JSON).

    Raises:
        UnknownVariantError: If ``data[TYPE_KEY]`` is missing or not a known type.
        DecodeError: If a nested attribute has the wrong shape.
    """
    discriminator = data.get(TYPE_KEY)
    try:
        node_type = NodeType(discriminator)
    except ValueError:
        raise UnknownVariantError(discriminator, data) from None
    return _DECODERS[node_type](data)


def marshal(workspace: Workspace, indent: Optional[int] = None) -> bytes:
    """Serialize a whole workspace to JSON bytes.

    Non-ASCII characters are written as ``\\uXXXX`` escapes, so strings holding
    lone surrogates survive the round trip.
    """
    return json.dumps(encode(workspace), indent=indent).encode("utf-8")


def unmarshal(data: bytes | str) -> Workspace:
    """Parse a serialized workspace.

    Raises:
        DecodeError: On invalid JSON or when the root is not a workspace object.
    """
    try:
        raw = json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise DecodeError(f"Invalid JSON: {exc}") from exc
    if not isinstance(raw, dict):
        raise DecodeError(f"Workspace root must be an object, got {type(raw).__name__}")
    node = decode(raw)
    if not isinstance(node, Workspace):
        raise DecodeError(f"Root object must be of type 'workspace', got '{node.type_name}'")
    return node


def unmarshal_file(path: str | Path) -> Workspace:
    """Read and decode a workspace JSON file; errors name the file."""
    file_path = Path(path)
    try:
        raw = file_path.read_bytes()
    except OSError as exc:
        raise DecodeError(f"Cannot read {file_path}: {exc}", path=file_path) from exc
    try:
        return unmarshal(raw)
    except DecodeError as exc:
        exc.path = file_path
        exc.args = (f"Cannot parse {file_path}: {exc.args[0]}",)
        raise


def marshal_file(workspace: Workspace, path: str | Path) -> Path:
    """Write *workspace* as pretty-printed JSON, creating parent directories."""
    file_path = Path(path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_bytes(marshal(workspace, indent=2))
    return file_path
