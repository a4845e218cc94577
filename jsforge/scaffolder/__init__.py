"""jsforge scaffolder -- the steps that assemble a project directory.

Quick usage::

    from jsforge.scaffolder import TemplateInstaller, TemplateSource

    installer = TemplateInstaller(TemplateSource())
    await installer.install("tsconfig", project_root / "tsconfig.json")
"""

from jsforge.scaffolder.steps import Requirement, Step, StepTools
from jsforge.scaffolder.templates import (
    STATIC_TEMPLATES,
    TemplateInstaller,
    TemplateNotFoundError,
    TemplateSource,
)

__all__ = [
    "STATIC_TEMPLATES",
    "Requirement",
    "Step",
    "StepTools",
    "TemplateInstaller",
    "TemplateNotFoundError",
    "TemplateSource",
]
