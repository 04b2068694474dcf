"""docsmith document model.

The typed tree authors build content with, and its JSON codec.

Quick usage::

    from docsmith.model import Workspace, marshal, unmarshal

    ws = Workspace(title="W")
    ws.new_document(id="D1").new_chapter("Intro").text("hello")
    again = unmarshal(marshal(ws))
    assert again.by_id("D1") == ws.by_id("D1")
"""

from .codec import (
    TYPE_KEY,
    DecodeError,
    UnknownVariantError,
    decode,
    encode,
    marshal,
    marshal_file,
    unmarshal,
    unmarshal_file,
)
from .nodes import (
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
    bold,
    code,
    image,
    italic,
    newline,
    newpage,
    text,
    title_page,
    toc,
    underline,
    walk,
)

__all__ = [
    # Nodes
    "Node",
    "NodeType",
    "Container",
    "Workspace",
    "Document",
    "Author",
    "Chapter",
    "Span",
    "Code",
    "Image",
    "Italic",
    "Bold",
    "Underline",
    "TitlePage",
    "Newline",
    "Newpage",
    "TableOfContents",
    # Factories
    "text",
    "code",
    "image",
    "italic",
    "bold",
    "underline",
    "title_page",
    "newline",
    "newpage",
    "toc",
    "walk",
    # Codec
    "TYPE_KEY",
    "DecodeError",
    "UnknownVariantError",
    "encode",
    "decode",
    "marshal",
    "unmarshal",
    "marshal_file",
    "unmarshal_file",
]
