"""jsforge configuration.

Typed configuration for the assembly pipeline.  ``ProjectConfig`` is the
immutable record produced from the user's answers; ``Settings`` holds the
tool-level knobs (executables, template location, output directory) and can
be built from environment variables.  Both are Pydantic v2 models so they are
validated at construction time.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "scaffolder" / "templates"

# Characters that are illegal in a directory name on at least one platform.
_ILLEGAL_NAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')


def validate_project_name(value: str) -> str:
    """Return *value* stripped, or raise ``ValueError`` if it cannot be a
    single directory name."""
    name = value.strip()
    if not name:
        raise ValueError("project name must not be empty")
    if name in (".", ".."):
        raise ValueError(f"'{name}' is not a valid project name")
    bad = _ILLEGAL_NAME_CHARS.search(name)
    if bad:
        raise ValueError(
            f"project name contains an illegal character: {bad.group()!r}"
        )
    if name.endswith((".", " ")):
        raise ValueError("project name must not end with a dot or a space")
    return name


class Language(str, Enum):
    """Source language of the generated project."""

    JAVASCRIPT = "JavaScript"
    TYPESCRIPT = "TypeScript"

    @property
    def extension(self) -> str:
        """File extension for source files (``js`` or ``ts``)."""
        return "ts" if self is Language.TYPESCRIPT else "js"


class Addon(str, Enum):
    """Optional capabilities that contribute their own steps."""

    TAILWIND = "tailwind"
    GIT = "git"


class ProjectConfig(BaseModel):
    """The resolved answers for one assembly.

    Immutable once constructed.  Optional capabilities live in ``addons``;
    ``use_tailwind`` and ``use_git`` are derived from it.
    """

    model_config = ConfigDict(frozen=True)

    project_name: str = Field(..., description="Name of the directory to create")
    language: Language = Field(default=Language.JAVASCRIPT)
    addons: frozenset[Addon] = Field(default_factory=frozenset)

    @field_validator("project_name")
    @classmethod
    def _validate_project_name(cls, value: str) -> str:
        return validate_project_name(value)

    @classmethod
    def from_answers(
        cls,
        project_name: str,
        language: Language | str,
        use_tailwind: bool,
        use_git: bool,
    ) -> "ProjectConfig":
        """Build a config from the four raw prompt answers."""
        addons: set[Addon] = set()
        if use_tailwind:
            addons.add(Addon.TAILWIND)
        if use_git:
            addons.add(Addon.GIT)
        return cls(
            project_name=project_name,
            language=Language(language),
            addons=frozenset(addons),
        )

    @property
    def use_tailwind(self) -> bool:
        return Addon.TAILWIND in self.addons

    @property
    def use_git(self) -> bool:
        return Addon.GIT in self.addons

    @property
    def is_typescript(self) -> bool:
        return self.language is Language.TYPESCRIPT


@dataclass
class ProjectContext:
    """Per-assembly state handed to every step.

    Created by the pipeline once the project directory exists.
    ``single_dev_script`` is False only for TypeScript + Tailwind, where the
    dev scripts are fanned out under ``dev:*`` keys instead of a single
    ``dev`` script.
    """

    root_path: Path
    config: ProjectConfig
    single_dev_script: bool = field(init=False)

    def __post_init__(self) -> None:
        self.root_path = Path(self.root_path).resolve()
        self.single_dev_script = not (
            self.config.is_typescript and self.config.use_tailwind
        )


class Settings(BaseModel):
    """Tool-level settings for the pipeline.

    Instances are typically created once by the CLI entry point via
    :meth:`from_env` and passed to ``Pipeline``.
    """

    output_dir: Path = Field(default_factory=Path.cwd)
    templates_dir: Path = Field(default=_DEFAULT_TEMPLATE_DIR)
    npm: str = Field(default="npm", min_length=1)
    npx: str = Field(default="npx", min_length=1)
    git: str = Field(default="git", min_length=1)
    initial_commit_message: str = Field(default="Initial commit: project setup", min_length=1)
    work_branch: str = Field(default="dev", min_length=1)

    # Both values are spliced into a git command line and re-tokenized.
    @field_validator("initial_commit_message")
    @classmethod
    def _validate_commit_message(cls, value: str) -> str:
        if '"' in value:
            raise ValueError("commit message must not contain double quotes")
        if not value.strip():
            raise ValueError("commit message must not be blank")
        return value

    @field_validator("work_branch")
    @classmethod
    def _validate_work_branch(cls, value: str) -> str:
        if any(c.isspace() for c in value) or '"' in value:
            raise ValueError("branch name must not contain whitespace or double quotes")
        return value

    @classmethod
    def from_env(cls) -> "Settings":
        """Build ``Settings`` from environment variables.

        Recognised variables (all optional):
            JSFORGE_OUTPUT_DIR, JSFORGE_TEMPLATES_DIR, JSFORGE_NPM,
            JSFORGE_NPX, JSFORGE_GIT, JSFORGE_COMMIT_MESSAGE,
            JSFORGE_WORK_BRANCH.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("JSFORGE_OUTPUT_DIR"):
            kwargs["output_dir"] = Path(os.environ["JSFORGE_OUTPUT_DIR"])
        if os.environ.get("JSFORGE_TEMPLATES_DIR"):
            kwargs["templates_dir"] = Path(os.environ["JSFORGE_TEMPLATES_DIR"])
        if os.environ.get("JSFORGE_NPM"):
            kwargs["npm"] = os.environ["JSFORGE_NPM"]
        if os.environ.get("JSFORGE_NPX"):
            kwargs["npx"] = os.environ["JSFORGE_NPX"]
        if os.environ.get("JSFORGE_GIT"):
            kwargs["git"] = os.environ["JSFORGE_GIT"]
        if os.environ.get("JSFORGE_COMMIT_MESSAGE"):
            kwargs["initial_commit_message"] = os.environ["JSFORGE_COMMIT_MESSAGE"]
        if os.environ.get("JSFORGE_WORK_BRANCH"):
            kwargs["work_branch"] = os.environ["JSFORGE_WORK_BRANCH"]
        return cls(**kwargs)
