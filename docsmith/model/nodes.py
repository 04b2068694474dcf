"""Pydantic v2 models for the docsmith document tree.

A ``Workspace`` holds heterogeneous resources; ``Document`` resources carry an
optional identifier so a build can select them as the root of a template run.
Content below a document is a tree of nodes (chapters, text spans, code,
images, formatting groups and zero-attribute markers). Every node class is
tagged with exactly one member of ``NodeType``.

Construction is append-only and fluent::

    ws = Workspace(title="handbook")
    doc = ws.new_document(id="book")
    intro = doc.new_chapter("Introduction")
    intro.text("Hello").add(newline(), bold(text("world")))
"""

from __future__ import annotations

from collections.abc import Iterator
from enum import Enum
from typing import ClassVar, Optional

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Discriminators
# ---------------------------------------------------------------------------

class NodeType(str, Enum):
    """Closed set of type discriminators, shared by the model and the codec."""
    WORKSPACE = "workspace"
    DOCUMENT = "document"
    AUTHOR = "author"
    CHAPTER = "chapter"
    TEXT = "text"
    CODE = "code"
    IMAGE = "image"
    TOC = "toc"
    NEWLINE = "newline"
    NEWPAGE = "newpage"
    ITALIC = "italic"
    BOLD = "bold"
    UNDERLINE = "underline"
    TITLEPAGE = "titlepage"


# ---------------------------------------------------------------------------
# Base classes
# ---------------------------------------------------------------------------

class Node(BaseModel):
    """Base class of every tree node."""

    kind: ClassVar[NodeType]

    @property
    def type_name(self) -> str:
        """The discriminator string, e.g. ``"chapter"``."""
        return self.kind.value

    def children(self) -> list[Node]:
        """Owned child nodes in document order (empty for leaves)."""
        return []


class Container(Node):
    """A node owning an ordered body of further nodes."""

    body: list[Node] = Field(default_factory=list)

    def add(self, *nodes: Node) -> Container:
        """Append *nodes* to the body and return ``self`` for chaining."""
        self.body.extend(nodes)
        return self

    def children(self) -> list[Node]:
        return self.body


# ---------------------------------------------------------------------------
# Leaf values
# ---------------------------------------------------------------------------

class Author(Node):
    """Someone who has written (part of) a document."""
    kind: ClassVar[NodeType] = NodeType.AUTHOR

    firstname: str = ""
    lastname: str = ""
    email: str = ""


class Span(Node):
    """A piece of plain text."""
    kind: ClassVar[NodeType] = NodeType.TEXT

    value: str = ""

    def __str__(self) -> str:
        return self.value


class Code(Node):
    """A code listing: a format hint plus literal lines (no embedded newlines)."""
    kind: ClassVar[NodeType] = NodeType.CODE

    hint: str = ""
    lines: list[str] = Field(default_factory=list)


class Image(Node):
    """A reference to a (usually local) image with format-specific size hints."""
    kind: ClassVar[NodeType] = NodeType.IMAGE

    src: str = ""
    width: str = ""
    height: str = ""


class TableOfContents(Node):
    kind: ClassVar[NodeType] = NodeType.TOC


class Newline(Node):
    kind: ClassVar[NodeType] = NodeType.NEWLINE


class Newpage(Node):
    kind: ClassVar[NodeType] = NodeType.NEWPAGE


# ---------------------------------------------------------------------------
# Groups
# ---------------------------------------------------------------------------

class Italic(Container):
    kind: ClassVar[NodeType] = NodeType.ITALIC


class Bold(Container):
    kind: ClassVar[NodeType] = NodeType.BOLD


class Underline(Container):
    kind: ClassVar[NodeType] = NodeType.UNDERLINE


class TitlePage(Container):
    """A specially formatted page.

    How the body is interpreted depends entirely on the template, which may
    use all of it, none of it, or just the first text.
    """
    kind: ClassVar[NodeType] = NodeType.TITLEPAGE


class Chapter(Container):
    """Hierarchical titled grouping.

    ``level`` starts at 0 for top-level chapters. ``new_chapter`` derives the
    child's level from its parent; levels of hand-built chapters are stored
    as given.
    """
    kind: ClassVar[NodeType] = NodeType.CHAPTER

    title: str = ""
    level: int = Field(default=0, ge=0)

    def new_chapter(self, title: str) -> Chapter:
        """Append a nested chapter one level deeper and return it."""
        chapter = Chapter(title=title, level=self.level + 1)
        self.body.append(chapter)
        return chapter

    def text(self, value: str) -> Chapter:
        """Append a text span and return ``self``."""
        self.body.append(Span(value=value))
        return self


# ---------------------------------------------------------------------------
# Documents and workspaces
# ---------------------------------------------------------------------------

class Document(Container):
    """One publishable unit (a book, an article, a web page)."""
    kind: ClassVar[NodeType] = NodeType.DOCUMENT

    id: str = ""
    title: str = ""
    authors: list[Author] = Field(default_factory=list)

    def new_chapter(self, title: str) -> Chapter:
        """Append a top-level chapter (level 0) and return it."""
        chapter = Chapter(title=title, level=0)
        self.body.append(chapter)
        return chapter

    def add_author(self, firstname: str, lastname: str, email: str = "") -> Document:
        """Append an author and return ``self``."""
        self.authors.append(Author(firstname=firstname, lastname=lastname, email=email))
        return self


class Workspace(Node):
    """Root container for all resources of a project."""
    kind: ClassVar[NodeType] = NodeType.WORKSPACE

    format: int = 0
    version: str = ""
    title: str = ""
    resources: list[Node] = Field(default_factory=list)

    def new_document(self, id: str = "", title: str = "") -> Document:
        """Append an empty document and return it."""
        document = Document(id=id, title=title)
        self.resources.append(document)
        return document

    def by_id(self, identifier: str) -> Optional[Document]:
        """Return the first top-level document whose id is *identifier*.

        Only direct resources of type ``document`` are considered; chapters
        and other nested nodes are never searched.
        """
        for resource in self.resources:
            if isinstance(resource, Document) and resource.id == identifier:
                return resource
        return None

    def children(self) -> list[Node]:
        return self.resources


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

def text(value: str) -> Span:
    return Span(value=value)


def code(hint: str, *lines: str) -> Code:
    return Code(hint=hint, lines=list(lines))


def image(src: str, width: str = "", height: str = "") -> Image:
    return Image(src=src, width=width, height=height)


def italic(*body: Node) -> Italic:
    """Group *body* for cursive typesetting."""
    return Italic(body=list(body))


def bold(*body: Node) -> Bold:
    """Group *body* for bold typesetting."""
    return Bold(body=list(body))


def underline(*body: Node) -> Underline:
    return Underline(body=list(body))


def title_page(*body: Node) -> TitlePage:
    return TitlePage(body=list(body))


def newline() -> Newline:
    return Newline()


def newpage() -> Newpage:
    return Newpage()


def toc() -> TableOfContents:
    """A table of contents built by the template from chapters and their levels."""
    return TableOfContents()


# ---------------------------------------------------------------------------
# Traversal
# ---------------------------------------------------------------------------

def walk(node: Node) -> Iterator[Node]:
    """Yield *node* and all of its descendants depth-first, in document order."""
    yield node
    for child in node.children():
        yield from walk(child)
