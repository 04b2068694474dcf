"""Shared pytest fixtures for the docsmith test suite.

Provides reusable fixtures for:
- A sample workspace covering every node variant
- Template project directories on disk
- A recording fake for external tools (git, latexmk)
- Settings pointing at a per-test scratch directory
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Optional

import pytest

from docsmith.config import Settings
from docsmith.model import (
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
)
from docsmith.tools import ToolError


# ---------------------------------------------------------------------------
# Fake tool runner
# ---------------------------------------------------------------------------

class FakeRunner:
    """Records every tool invocation instead of spawning processes.

    ``handlers`` maps a tool name (``args[0]``) to a callable receiving
    ``(args, cwd)``; it may create files to simulate the tool or raise
    ``ToolError`` to simulate a failure.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[list[str], Path]] = []
        self.handlers: dict[str, Callable[[list[str], Path], Optional[str]]] = {}

    def run(self, args: Sequence[str], cwd: Path) -> str:
        call = list(args)
        self.calls.append((call, Path(cwd)))
        handler = self.handlers.get(call[0])
        if handler is None:
            return ""
        return handler(call, Path(cwd)) or ""

    def commands(self, tool: str) -> list[list[str]]:
        """Every recorded argument list whose program is *tool*."""
        return [args for args, _ in self.calls if args[0] == tool]

    def fail(self, tool: str, output: str = "fatal: repository not found") -> None:
        """Make every later invocation of *tool* fail with *output*."""
        def _fail(args: list[str], cwd: Path) -> str:
            command = " ".join(args)
            raise ToolError(f"'{command}' failed", command=command, output=output, returncode=128)
        self.handlers[tool] = _fail

    def serve_clone(self, files: dict[str, str], tool: str = "git") -> None:
        """Simulate ``git clone`` by writing *files* into the clone directory."""
        def _clone(args: list[str], cwd: Path) -> str:
            if "clone" in args:
                for name, content in files.items():
                    target = cwd / name
                    target.parent.mkdir(parents=True, exist_ok=True)
                    target.write_text(content, encoding="utf-8")
            return ""
        self.handlers[tool] = _clone


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


# ---------------------------------------------------------------------------
# Settings & directories
# ---------------------------------------------------------------------------

@pytest.fixture
def scratch_dir(tmp_path: Path) -> Path:
    path = tmp_path / "scratch"
    path.mkdir()
    return path


@pytest.fixture
def settings(scratch_dir: Path) -> Settings:
    return Settings(scratch_dir=scratch_dir)


def _write_files(root: Path, files: dict[str, str | bytes]) -> Path:
    for name, content in files.items():
        target = root / name
        target.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            target.write_bytes(content)
        else:
            target.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def write_files() -> Callable[[Path, dict[str, str | bytes]], Path]:
    """Create files (relative path -> content) below a root and return the root."""
    return _write_files


@pytest.fixture
def template_dir(tmp_path: Path) -> Path:
    """A small template project mixing text, html and static files."""
    return _write_files(
        tmp_path / "template",
        {
            "index.tmpl": "Hello {{ title }}",
            "page.gohtml": "<h1>{{ title }}</h1>",
            "assets/logo.png": b"\x89PNG\r\n\x1a\n\x00\x01binary",
            "chapters/list.txt.tmpl": (
                "{% for node in body %}{{ type_of(node) }};{% endfor %}"
            ),
        },
    )


# ---------------------------------------------------------------------------
# Sample model
# ---------------------------------------------------------------------------

@pytest.fixture
def sample_workspace() -> Workspace:
    """A workspace using every node variant with some nesting."""
    ws = Workspace(title="my workspace", version="1.0.1", format=1)
    doc = ws.new_document(id="1234", title="my technical book")
    doc.add_author("Ada", "Lovelace", "ada@example.com").add_author("Alan", "Turing")
    doc.add(title_page(text("my technical book"), text("a subtitle")), toc())

    chapter = doc.new_chapter("my first chapter")
    chapter.text("The inventory system consists of a login server.")
    chapter.add(newline())
    chapter.add(text("hello "), italic(text("worl"), bold(underline(text("d")))), newline())
    chapter.add(bold(italic(text("ugly chars: & % $ # _ { } ~ ^ \\"))), newpage())
    chapter.add(code("python", "def main():", "    return 0"))
    chapter.add(image("figures/arch.png", width="0.8\\textwidth"))

    section = chapter.new_chapter("a section")
    section.text("This is a section within a chapter.")
    section.new_chapter("a subsection").text("Deeper still.")

    doc.new_chapter("another main chapter").text("typesetting test.")
    ws.new_document(id="notes", title="Release notes").new_chapter("0.3").text("Initial release.")
    return ws
