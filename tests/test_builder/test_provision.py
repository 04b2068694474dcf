"""Unit tests for template provisioning (docsmith.builder.provision).

Tests cover:
- Local references (existing / missing)
- Remote references: clone once, pull afterwards
- Content-addressed cache directories per URL
- Clone failure releases the cache directory
- Configured VCS tool is the one executed
"""

from __future__ import annotations

from pathlib import Path

import pytest

from docsmith.builder import ProvisioningError, TemplateProvisioner
from docsmith.config import Settings, VcsConfig
from docsmith.utils import content_address

URL = "https://example.com/templates/book.git"


class TestLocal:
    @pytest.mark.unit
    def test_existing_directory_returned_as_is(self, template_dir: Path, scratch_dir: Path, fake_runner):
        provisioner = TemplateProvisioner(scratch_dir, runner=fake_runner)
        assert provisioner.provide(str(template_dir)) == template_dir
        assert fake_runner.calls == []

    @pytest.mark.unit
    def test_missing_directory_raises(self, tmp_path: Path, scratch_dir: Path, fake_runner):
        provisioner = TemplateProvisioner(scratch_dir, runner=fake_runner)
        with pytest.raises(ProvisioningError, match="Cannot find template") as excinfo:
            provisioner.provide(str(tmp_path / "nope"))
        assert excinfo.value.template == str(tmp_path / "nope")


class TestRemote:
    @pytest.mark.unit
    def test_first_use_clones_into_cache(self, scratch_dir: Path, fake_runner):
        provisioner = TemplateProvisioner(scratch_dir, runner=fake_runner)
        path = provisioner.provide(URL)

        assert path == scratch_dir / "template" / content_address(URL)
        assert path.is_dir()
        assert fake_runner.calls == [(["git", "clone", URL, "."], path)]

    @pytest.mark.unit
    def test_second_use_pulls_instead_of_cloning(self, scratch_dir: Path, fake_runner):
        provisioner = TemplateProvisioner(scratch_dir, runner=fake_runner)
        first = provisioner.provide(URL)
        second = provisioner.provide(URL)

        assert first == second
        assert fake_runner.commands("git") == [["git", "clone", URL, "."], ["git", "pull"]]
        assert fake_runner.calls[1][1] == first

    @pytest.mark.unit
    def test_cache_shared_across_provisioners(self, scratch_dir: Path, fake_runner):
        TemplateProvisioner(scratch_dir, runner=fake_runner).provide(URL)
        TemplateProvisioner(scratch_dir, runner=fake_runner).provide(URL)
        assert len(fake_runner.commands("git")) == 2
        assert fake_runner.commands("git")[1] == ["git", "pull"]

    @pytest.mark.unit
    def test_url_prefix_is_case_insensitive(self, scratch_dir: Path, fake_runner):
        TemplateProvisioner(scratch_dir, runner=fake_runner).provide("HTTPS://Example.com/t.git")
        assert fake_runner.commands("git")[0][1] == "clone"

    @pytest.mark.unit
    def test_different_urls_different_directories(self, scratch_dir: Path, fake_runner):
        provisioner = TemplateProvisioner(scratch_dir, runner=fake_runner)
        assert provisioner.provide(URL) != provisioner.provide(URL + "#v2")

    @pytest.mark.unit
    def test_clone_failure_releases_directory(self, scratch_dir: Path, fake_runner):
        provisioner = TemplateProvisioner(scratch_dir, runner=fake_runner)
        fake_runner.fail("git", output="fatal: repository not found")

        with pytest.raises(ProvisioningError) as excinfo:
            provisioner.provide(URL)

        assert excinfo.value.output == "fatal: repository not found"
        assert not provisioner.cache_dir(URL).exists()

        fake_runner.handlers.clear()
        provisioner.provide(URL)
        assert fake_runner.commands("git")[-1] == ["git", "clone", URL, "."]

    @pytest.mark.unit
    @pytest.mark.parametrize("interruption", [KeyboardInterrupt, RuntimeError])
    def test_interrupted_clone_releases_directory(self, scratch_dir: Path, fake_runner, interruption):
        provisioner = TemplateProvisioner(scratch_dir, runner=fake_runner)

        def _interrupt(args, cwd):
            (cwd / ".git").mkdir()
            raise interruption("clone cut short")

        fake_runner.handlers["git"] = _interrupt
        with pytest.raises(interruption):
            provisioner.provide(URL)
        assert not provisioner.cache_dir(URL).exists()

        fake_runner.handlers.clear()
        provisioner.provide(URL)
        assert fake_runner.commands("git")[-1] == ["git", "clone", URL, "."]

    @pytest.mark.unit
    def test_pull_failure_raises(self, scratch_dir: Path, fake_runner):
        provisioner = TemplateProvisioner(scratch_dir, runner=fake_runner)
        provisioner.provide(URL)
        fake_runner.fail("git", output="merge conflict")

        with pytest.raises(ProvisioningError, match="Failed to update template"):
            provisioner.provide(URL)
        assert provisioner.cache_dir(URL).exists()

    @pytest.mark.unit
    def test_configured_vcs_tool_is_executed(self, scratch_dir: Path, fake_runner):
        settings = Settings(vcs=VcsConfig(tool="/usr/local/bin/git", clone_args=["clone", "--depth", "1"]))
        TemplateProvisioner(scratch_dir, settings=settings, runner=fake_runner).provide(URL)
        assert fake_runner.calls[0][0] == ["/usr/local/bin/git", "clone", "--depth", "1", URL, "."]
