"""Shared utility functions for docsmith.

Provides content addressing for cache directories, file-system helpers for
copying build artefacts, and Rich-based progress reporting.
"""

from __future__ import annotations

import hashlib
import shutil
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.rule import Rule
from rich.table import Table

console = Console()

# ---------------------------------------------------------------------------
# Content addressing
# ---------------------------------------------------------------------------


def content_address(*parts: str) -> str:
    """Return a stable hex digest for the concatenation of *parts*.

    Used to derive cache directory names from a template URL or from an
    ``identifier + template`` pair.

    Examples::

        content_address("https://example.com/tpl.git")  -> "5b0c...e1"  (56 hex chars)
    """
    digest = hashlib.sha224("".join(parts).encode("utf-8"))
    return digest.hexdigest()


def is_url(reference: str) -> bool:
    """Return ``True`` if *reference* names a remote repository (``http``/``https``)."""
    return reference.lower().startswith("http")


# ---------------------------------------------------------------------------
# File-system helpers
# ---------------------------------------------------------------------------


def ensure_dir(path: str | Path) -> Path:
    """Create a directory (and parents) if it does not exist."""
    dir_path = Path(path)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path


def reset_dir(path: str | Path) -> Path:
    """Remove *path* entirely if present and recreate it empty."""
    dir_path = Path(path)
    if dir_path.exists():
        shutil.rmtree(dir_path)
    dir_path.mkdir(parents=True)
    return dir_path


def claim_dir(path: str | Path) -> bool:
    """Atomically create *path*.

    Parents are created as needed. Returns ``True`` if this call created the
    directory and ``False`` if it already existed, so two callers racing on the
    same path never both believe they own a fresh directory.
    """
    dir_path = Path(path)
    dir_path.parent.mkdir(parents=True, exist_ok=True)
    try:
        dir_path.mkdir()
    except FileExistsError:
        return False
    return True


def copy_file(src: str | Path, dst: str | Path) -> Path:
    """Copy a single file, keeping its permission bits."""
    return Path(shutil.copy2(src, dst))


def copy_tree(src: str | Path, dst: str | Path) -> Path:
    """Copy a directory recursively, merging into *dst* if it exists."""
    return Path(shutil.copytree(src, dst, dirs_exist_ok=True))


def list_root_entries(directory: str | Path) -> list[Path]:
    """Return every top-level entry (files and directories) of *directory*, sorted."""
    return sorted(Path(directory).iterdir())


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_rule_header(index: int, title: str) -> None:
    """Print a full-width rule announcing the build rule being processed."""
    console.print()
    console.print(Rule(f"[bold bright_cyan] Rule {index}: {escape(title)} [/bold bright_cyan]", style="bright_cyan"))


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print a two-column key/value summary table."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, str(value))

    console.print(table)
    console.print()


def print_info(message: str) -> None:
    """Print a dim informational message."""
    console.print(f"[dim]{escape(message)}[/dim]")


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{escape(message)}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{escape(message)}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{escape(message)}[/bold yellow]")


def print_output(output: str) -> None:
    """Print raw tool output verbatim (no markup interpretation)."""
    if output:
        console.print(output, markup=False, highlight=False)
