"""Template projects.

A template project is a directory tree. Reading it produces one
``FileDescriptor`` per regular file; building it renders every descriptor
against a model into a staging directory that mirrors the source tree, then
runs the optional autobuild hook.

Files ending in the HTML suffix (``.gohtml`` by default) become autoescaping
Jinja2 templates, files ending in the text suffix (``.tmpl``) become plain
Jinja2 templates, and everything else is copied byte for byte. The suffix is
dropped from the staged filename, so ``book.tex.tmpl`` is staged as
``book.tex``.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional

from jinja2 import Environment, FileSystemLoader
from jinja2 import TemplateError as JinjaTemplateError

from docsmith.config import Settings
from docsmith.template.functions import TEMPLATE_FUNCTIONS
from docsmith.template.transform import (
    CopyTransform,
    FileDescriptor,
    HtmlTransform,
    TemplateError,
    TemplateParseError,
    TextTransform,
)
from docsmith.tools import SubprocessRunner, ToolError, ToolRunner
from docsmith.utils import list_root_entries, print_info, reset_dir


class AutobuildError(TemplateError):
    """Raised when the autobuild tool fails. ``output`` holds what it printed."""

    def __init__(self, message: str, path: Optional[Path] = None, output: str = ""):
        self.output = output
        super().__init__(message, path=path)


def _make_environment(loader: FileSystemLoader, autoescape: bool) -> Environment:
    return Environment(
        loader=loader,
        autoescape=autoescape,
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )


class TemplateProject:
    """A parsed template directory, ready to render against a model.

    Construction walks *source_dir* and parses every template immediately, so
    a broken template is reported before anything is written. Hidden
    directories and the staging directory itself (when it lives inside the
    source tree) are skipped. Walk order is sorted to keep builds reproducible.
    """

    def __init__(
        self,
        source_dir: str | Path,
        staging_dir: str | Path,
        settings: Optional[Settings] = None,
        runner: Optional[ToolRunner] = None,
    ) -> None:
        self.source_dir = Path(source_dir)
        self.staging_dir = Path(staging_dir)
        self.settings = settings or Settings()
        self.runner: ToolRunner = runner or SubprocessRunner()

        if not self.source_dir.is_dir():
            raise TemplateError(f"Template directory not found: {self.source_dir}", path=self.source_dir)

        loader = FileSystemLoader(str(self.source_dir))
        self.html_env = _make_environment(loader, autoescape=True)
        self.text_env = _make_environment(loader, autoescape=False)
        self.text_env.globals.update(TEMPLATE_FUNCTIONS)
        self.text_env.filters.update(TEMPLATE_FUNCTIONS)

        self.files: list[FileDescriptor] = self._scan()

    # -- Reading -----------------------------------------------------------

    def _scan(self) -> list[FileDescriptor]:
        config = self.settings.template
        staging = self.staging_dir.resolve()

        def _on_error(exc: OSError) -> None:
            raise TemplateError(f"Failed to walk path {exc.filename}: {exc}", path=self.source_dir) from exc

        files: list[FileDescriptor] = []
        for root, dirnames, filenames in os.walk(self.source_dir, onerror=_on_error):
            root_path = Path(root)
            dirnames[:] = sorted(
                name
                for name in dirnames
                if not name.startswith(config.hidden_prefix)
                and (root_path / name).resolve() != staging
            )
            for name in sorted(filenames):
                if name in config.ignored_files:
                    continue
                path = root_path / name
                if not path.is_file():
                    continue
                files.append(self._describe(path))
        return files

    def _describe(self, path: Path) -> FileDescriptor:
        config = self.settings.template
        relative = path.relative_to(self.source_dir)
        name = path.name
        lowered = name.lower()
        template_name = relative.as_posix()

        for suffix, env, transform_cls in (
            (config.html_suffix, self.html_env, HtmlTransform),
            (config.text_suffix, self.text_env, TextTransform),
        ):
            suffix = suffix.lower()
            if lowered.endswith(suffix) and len(name) > len(suffix):
                try:
                    template = env.get_template(template_name)
                except (JinjaTemplateError, UnicodeDecodeError) as exc:
                    raise TemplateParseError(
                        f"Failed to parse {transform_cls.flavor} template {path}: {exc}", path=path
                    ) from exc
                return FileDescriptor(
                    source=path,
                    relative_dir=relative.parent,
                    destination_name=name[: -len(suffix)],
                    transform=transform_cls(name=name, template=template, source=path),
                )

        return FileDescriptor(
            source=path,
            relative_dir=relative.parent,
            destination_name=name,
            transform=CopyTransform(source=path),
        )

    # -- Building ----------------------------------------------------------

    def build(self, model: Any) -> list[Path]:
        """Render every file against *model* and return the resulting artefacts.

        The staging directory is wiped first. Returns the autobuild artefacts
        when the autobuild marker is present, otherwise every top-level entry
        of the staging directory.
        """
        try:
            reset_dir(self.staging_dir)
        except OSError as exc:
            raise TemplateError(
                f"Failed to prepare build dir {self.staging_dir}: {exc}", path=self.staging_dir
            ) from exc

        for descriptor in self.files:
            descriptor.apply(model, self.staging_dir)

        return self._autobuild()

    def _autobuild(self) -> list[Path]:
        config = self.settings.autobuild
        if not (self.staging_dir / config.marker).exists():
            print_info(f"No {config.marker} in {self.staging_dir}, autobuild skipped")
            return list_root_entries(self.staging_dir)

        print_info(f"Found {config.marker}, running {config.tool}")
        try:
            self.runner.run([config.tool, *config.args], cwd=self.staging_dir)
        except ToolError as exc:
            raise AutobuildError(
                f"Failed to build project in {self.staging_dir}: {exc}",
                path=self.staging_dir,
                output=exc.output,
            ) from exc

        suffix = config.artifact_suffix.lower()
        return [
            entry
            for entry in list_root_entries(self.staging_dir)
            if entry.is_file() and entry.name.lower().endswith(suffix)
        ]


def read_template(
    source_dir: str | Path,
    staging_dir: str | Path,
    settings: Optional[Settings] = None,
    runner: Optional[ToolRunner] = None,
) -> TemplateProject:
    """Read and parse the template project at *source_dir*."""
    return TemplateProject(source_dir, staging_dir, settings=settings, runner=runner)
