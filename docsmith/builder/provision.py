"""Template provisioning.

A template reference is either a local directory or an ``http``/``https``
repository URL. Remote templates are cloned once into a content-addressed
directory below the scratch root and refreshed with a pull on every later
use, so repeated builds against the same URL never clone twice.
"""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Optional

from docsmith.builder.errors import ProvisioningError
from docsmith.config import Settings
from docsmith.tools import SubprocessRunner, ToolError, ToolRunner
from docsmith.utils import claim_dir, content_address, is_url, print_info


class TemplateProvisioner:
    """Turns template references into local directories."""

    def __init__(
        self,
        scratch_dir: str | Path,
        settings: Optional[Settings] = None,
        runner: Optional[ToolRunner] = None,
    ) -> None:
        self.scratch_dir = Path(scratch_dir)
        self.settings = settings or Settings()
        self.runner: ToolRunner = runner or SubprocessRunner()

    def cache_dir(self, url: str) -> Path:
        """Directory a remote template at *url* is cloned into."""
        return self.scratch_dir / "template" / content_address(url)

    def provide(self, reference: str) -> Path:
        """Return a local directory holding the template named by *reference*.

        Raises:
            ProvisioningError: If a local reference does not exist or the
                clone/pull fails.
        """
        if is_url(reference):
            return self._provide_remote(reference)

        path = Path(reference)
        if not path.exists():
            raise ProvisioningError(f"Cannot find template {reference}", template=reference)
        return path

    def _provide_remote(self, url: str) -> Path:
        vcs = self.settings.vcs
        target = self.cache_dir(url)

        try:
            fresh = claim_dir(target)
        except OSError as exc:
            raise ProvisioningError(
                f"Failed to create template clone folder {target}: {exc}", template=url
            ) from exc

        if not fresh:
            print_info(f"Updating cached template {url}")
            try:
                self.runner.run([vcs.tool, *vcs.pull_args], cwd=target)
            except ToolError as exc:
                raise ProvisioningError(
                    f"Failed to update template {url}: {exc}", template=url, output=exc.output
                ) from exc
            return target

        print_info(f"Cloning template {url}")
        try:
            self.runner.run([vcs.tool, *vcs.clone_args, url, "."], cwd=target)
        except BaseException as exc:
            # Release the claim so the next attempt clones again instead of pulling.
            shutil.rmtree(target, ignore_errors=True)
            if isinstance(exc, ToolError):
                raise ProvisioningError(
                    f"Failed to clone template {url}: {exc}", template=url, output=exc.output
                ) from exc
            raise
        return target
