"""Build orchestration.

A ``Build`` applies an ordered list of ``BuildRule`` objects to one
workspace. For each rule it provisions the template, selects the document
subtree by identifier, renders the template project into a staging
directory private to that (identifier, template) pair, and copies the
resulting artefacts into ``<output_dir>/<rule.name>``.

Rules run strictly in the order they were added. The first failure aborts
the whole ``apply()`` call.
"""

from __future__ import annotations

import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from docsmith.builder.errors import BuildError, OutputError, ProvisioningError, ResolutionError
from docsmith.builder.provision import TemplateProvisioner
from docsmith.config import Settings
from docsmith.model.nodes import Workspace
from docsmith.template.project import TemplateProject
from docsmith.template.transform import TemplateError
from docsmith.tools import SubprocessRunner, ToolRunner
from docsmith.utils import (
    content_address,
    copy_file,
    copy_tree,
    ensure_dir,
    print_info,
    print_rule_header,
    print_success,
)


@dataclass
class BuildRule:
    """One requested output: which subtree, which template, which folder."""

    identifier: str
    template: str
    name: str


class Build:
    """Describes which workspace to build and how.

    All caches (cloned templates and staging directories) live below
    ``scratch_dir``. When no scratch directory is configured a fresh
    temporary one is created and removed again by ``cleanup()`` (or on
    leaving a ``with`` block). A caller-supplied scratch directory is kept so
    it can be shared between builds.
    """

    def __init__(
        self,
        workspace: Workspace,
        output_dir: str | Path,
        *,
        settings: Optional[Settings] = None,
        runner: Optional[ToolRunner] = None,
        scratch_dir: Optional[str | Path] = None,
    ) -> None:
        self.workspace = workspace
        self.output_dir = Path(output_dir)
        self.settings = settings or Settings()
        self.runner: ToolRunner = runner or SubprocessRunner()
        self.rules: list[BuildRule] = []

        scratch = scratch_dir if scratch_dir is not None else self.settings.scratch_dir
        try:
            if scratch is None:
                self.scratch_dir = Path(tempfile.mkdtemp(prefix="docsmith"))
                self._owns_scratch = True
            else:
                self.scratch_dir = ensure_dir(scratch)
                self._owns_scratch = False
        except OSError as exc:
            raise BuildError(f"Scratch directory required: {exc}") from exc

        self.provisioner = TemplateProvisioner(self.scratch_dir, self.settings, self.runner)

    def __enter__(self) -> Build:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.cleanup()

    def add_rule(self, rule: BuildRule) -> None:
        self.rules.append(rule)

    def transform_dir(self, rule: BuildRule) -> Path:
        """Staging directory for *rule*, keyed by identifier and template together."""
        return self.scratch_dir / "transform" / content_address(rule.identifier, rule.template)

    def apply(self) -> dict[str, list[Path]]:
        """Apply every rule in order.

        Returns:
            The copied output paths, grouped by rule name.

        Raises:
            BuildError: On the first rule that fails (provisioning,
                resolution, template build or output copy).
        """
        results: dict[str, list[Path]] = {}
        for index, rule in enumerate(self.rules, start=1):
            print_rule_header(index, f"{rule.identifier} -> {rule.name}")
            results.setdefault(rule.name, []).extend(self._apply_rule(rule))
        return results

    def _apply_rule(self, rule: BuildRule) -> list[Path]:
        try:
            template_dir = self.provisioner.provide(rule.template)
        except ProvisioningError as exc:
            raise ProvisioningError(
                f"Unable to provide template for '{rule.identifier}': {exc}",
                identifier=rule.identifier,
                template=rule.template,
                output=exc.output,
            ) from exc

        root = self.workspace.by_id(rule.identifier)
        if root is None:
            raise ResolutionError(
                f"Workspace does not contain '{rule.identifier}'",
                identifier=rule.identifier,
                template=rule.template,
            )

        staging = self.transform_dir(rule)
        try:
            project = TemplateProject(template_dir, staging, settings=self.settings, runner=self.runner)
            artefacts = project.build(root)
        except TemplateError as exc:
            raise BuildError(
                f"Failed to build template {rule.template} for '{rule.identifier}': {exc}",
                identifier=rule.identifier,
                template=rule.template,
            ) from exc

        target_dir = self.output_dir / rule.name
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
            copied = [self._copy_artefact(artefact, target_dir) for artefact in artefacts]
        except OSError as exc:
            raise OutputError(
                f"Failed to copy results into {target_dir}: {exc}",
                identifier=rule.identifier,
                template=rule.template,
            ) from exc

        print_success(f"{len(copied)} artefact(s) written to {target_dir}")
        return copied

    @staticmethod
    def _copy_artefact(artefact: Path, target_dir: Path) -> Path:
        destination = target_dir / artefact.name
        if artefact.is_dir():
            return copy_tree(artefact, destination)
        return copy_file(artefact, destination)

    def cleanup(self) -> None:
        """Remove the scratch directory if this build created it."""
        if self._owns_scratch and self.scratch_dir.exists():
            print_info(f"Removing scratch directory {self.scratch_dir}")
            shutil.rmtree(self.scratch_dir)
