"""Exceptions raised while applying build rules."""

from __future__ import annotations


class BuildError(Exception):
    """Raised when a build rule cannot be applied.

    ``identifier`` and ``template`` name the rule that failed, when known.
    """

    def __init__(self, message: str, identifier: str = "", template: str = ""):
        self.identifier = identifier
        self.template = template
        super().__init__(message)


class ProvisioningError(BuildError):
    """Raised when a template cannot be found, cloned or updated."""

    def __init__(self, message: str, identifier: str = "", template: str = "", output: str = ""):
        self.output = output
        super().__init__(message, identifier=identifier, template=template)


class ResolutionError(BuildError):
    """Raised when a rule's identifier names no document in the workspace."""


class OutputError(BuildError):
    """Raised when artefacts cannot be copied into the output directory."""
