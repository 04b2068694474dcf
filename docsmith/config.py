"""docsmith configuration.

Typed settings for the build pipeline. All settings use Pydantic v2 models so
they can be validated at construction time and serialised to/from JSON or
environment variables without boiler-plate.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field

SUPPORTED_INPUT_FORMATS: tuple[str, ...] = ("json",)


class ConfigError(Exception):
    """Raised when required input is missing or a setting is not supported."""


class TemplateConfig(BaseModel):
    """How a template project directory is scanned and dispatched."""

    html_suffix: str = Field(default=".gohtml", min_length=1)
    text_suffix: str = Field(default=".tmpl", min_length=1)
    hidden_prefix: str = Field(
        default=".", min_length=1, description="Directories starting with this are skipped"
    )
    ignored_files: list[str] = Field(default_factory=lambda: [".DS_Store"])


class AutobuildConfig(BaseModel):
    """Post-render hook triggered by a marker file in the staging directory."""

    marker: str = Field(default="latexmkrc")
    tool: str = Field(default="latexmk")
    args: list[str] = Field(default_factory=list)
    artifact_suffix: str = Field(default=".pdf")


class VcsConfig(BaseModel):
    """Version-control tool used to provision remote templates."""

    tool: str = Field(default="git")
    clone_args: list[str] = Field(default_factory=lambda: ["clone"])
    pull_args: list[str] = Field(default_factory=lambda: ["pull"])


class Settings(BaseModel):
    """Global docsmith settings.

    Instances are typically created once by the CLI entry point (or by the
    caller embedding a ``Build``) and then passed through the rest of the
    system.
    """

    scratch_dir: Optional[Path] = Field(
        default=None, description="Cache root; a fresh temp dir per Build when unset"
    )
    input_format: str = Field(default="json")
    template: TemplateConfig = Field(default_factory=TemplateConfig)
    autobuild: AutobuildConfig = Field(default_factory=AutobuildConfig)
    vcs: VcsConfig = Field(default_factory=VcsConfig)

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the settings to a JSON file and return the path written."""
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "Settings":
        """Load previously-saved settings from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "Settings":
        """Build ``Settings`` from environment variables.

        Recognised variables (all optional):
            DOCSMITH_SCRATCH_DIR, DOCSMITH_HTML_SUFFIX, DOCSMITH_TEXT_SUFFIX,
            DOCSMITH_AUTOBUILD_MARKER, DOCSMITH_AUTOBUILD_TOOL,
            DOCSMITH_ARTIFACT_SUFFIX, DOCSMITH_GIT, DOCSMITH_INPUT_FORMAT.
        """
        template_kwargs: dict[str, Any] = {}
        if os.environ.get("DOCSMITH_HTML_SUFFIX"):
            template_kwargs["html_suffix"] = os.environ["DOCSMITH_HTML_SUFFIX"]
        if os.environ.get("DOCSMITH_TEXT_SUFFIX"):
            template_kwargs["text_suffix"] = os.environ["DOCSMITH_TEXT_SUFFIX"]

        autobuild_kwargs: dict[str, Any] = {}
        if os.environ.get("DOCSMITH_AUTOBUILD_MARKER"):
            autobuild_kwargs["marker"] = os.environ["DOCSMITH_AUTOBUILD_MARKER"]
        if os.environ.get("DOCSMITH_AUTOBUILD_TOOL"):
            autobuild_kwargs["tool"] = os.environ["DOCSMITH_AUTOBUILD_TOOL"]
        if os.environ.get("DOCSMITH_ARTIFACT_SUFFIX"):
            autobuild_kwargs["artifact_suffix"] = os.environ["DOCSMITH_ARTIFACT_SUFFIX"]

        vcs_kwargs: dict[str, Any] = {}
        if os.environ.get("DOCSMITH_GIT"):
            vcs_kwargs["tool"] = os.environ["DOCSMITH_GIT"]

        scratch = os.environ.get("DOCSMITH_SCRATCH_DIR")
        return cls(
            scratch_dir=Path(scratch) if scratch else None,
            input_format=os.environ.get("DOCSMITH_INPUT_FORMAT") or "json",
            template=TemplateConfig(**template_kwargs),
            autobuild=AutobuildConfig(**autobuild_kwargs),
            vcs=VcsConfig(**vcs_kwargs),
        )


def check_input_format(fmt: str) -> str:
    """Return *fmt* normalised, or raise ``ConfigError`` if it is not supported."""
    normalised = fmt.strip().lower()
    if normalised not in SUPPORTED_INPUT_FORMATS:
        supported = ", ".join(SUPPORTED_INPUT_FORMATS)
        raise ConfigError(f"Unsupported input format '{fmt}' (supported: {supported})")
    return normalised
