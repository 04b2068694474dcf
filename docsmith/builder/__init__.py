"""docsmith builder module.

Applies build rules to a workspace: template provisioning (local directory or
cached git clone), subtree selection, template project rendering and output
collection.

Key classes:
    Build                - Ordered rule application over one workspace
    BuildRule            - (identifier, template, name) triple
    TemplateProvisioner  - Local path lookup and content-addressed clone cache
"""

from .build import Build, BuildRule
from .errors import BuildError, OutputError, ProvisioningError, ResolutionError
from .provision import TemplateProvisioner

__all__ = [
    # Orchestration
    "Build",
    "BuildRule",
    # Provisioning
    "TemplateProvisioner",
    # Errors
    "BuildError",
    "ProvisioningError",
    "ResolutionError",
    "OutputError",
]
