"""jsforge pipeline orchestrator.

Turns a resolved ``ProjectConfig`` into a new project directory by running
an ordered list of steps:

    init-npm-project      -- package.json, ESLint + Prettier toolchain
    set-module-type       -- JavaScript only: "type": "module"
    setup-typescript      -- TypeScript only
    setup-tailwind        -- Tailwind add-on only
    setup-dev-runner      -- TypeScript + Tailwind: fan-out "dev" script
    setup-lint-config     -- .eslintrc.json
    setup-prettier-config -- .prettierrc.json
    setup-git             -- Git add-on only, always last

Steps run strictly one after another.  The first failure stops the
assembly; nothing that already ran is rolled back.

Usage::

    jsforge
    python -m jsforge
"""

from __future__ import annotations

import asyncio
import sys
import time
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError
from rich.markup import escape
from rich.panel import Panel

from jsforge.config import Language, ProjectConfig, ProjectContext, Settings
from jsforge.manifest import ManifestStore
from jsforge.scaffolder.steps import (
    INIT_NPM_PROJECT,
    SET_MODULE_TYPE,
    SETUP_DEV_RUNNER,
    SETUP_GIT,
    SETUP_LINT_CONFIG,
    SETUP_PRETTIER_CONFIG,
    SETUP_TAILWIND,
    SETUP_TYPESCRIPT,
    CommandRunner,
    Requirement,
    Step,
    StepTools,
)
from jsforge.scaffolder.templates import TemplateInstaller, TemplateSource
from jsforge.utils import (
    console,
    format_duration,
    print_error,
    print_output,
    print_step_header,
    print_success,
    print_summary_table,
    print_warning,
    run_command,
)

CREATE_DIRECTORY = "create-directory"

# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class AssemblyError(Exception):
    """Raised when a step fails; ends the assembly."""

    def __init__(self, step_name: str, cause: BaseException) -> None:
        self.step_name = step_name
        self.cause = cause
        super().__init__(f"Step '{step_name}' failed: {cause}")


class PreconditionError(Exception):
    """Raised when a step's declared requirement does not hold."""

    def __init__(self, step_name: str, requirement: Requirement, message: str) -> None:
        self.step_name = step_name
        self.requirement = requirement
        super().__init__(f"Precondition '{requirement.value}' of '{step_name}' violated: {message}")


class PipelineState(str, Enum):
    NOT_STARTED = "not-started"
    DIRECTORY_CREATED = "directory-created"
    STEPS_RUNNING = "steps-running"
    COMPLETED = "completed"
    FAILED = "failed"


class AssemblyResult(BaseModel):
    """Outcome of a successful assembly."""

    project_path: Path
    steps_completed: list[str] = Field(default_factory=list)
    duration_seconds: float = 0.0


# ---------------------------------------------------------------------------
# Step planning
# ---------------------------------------------------------------------------


def plan_steps(config: ProjectConfig) -> list[Step]:
    """Return the ordered steps for *config*.

    Depends only on the language and the add-ons, so equal configs always
    produce the same plan.
    """
    steps = [INIT_NPM_PROJECT]
    if config.language is Language.JAVASCRIPT:
        steps.append(SET_MODULE_TYPE)
    if config.is_typescript:
        steps.append(SETUP_TYPESCRIPT)
    if config.use_tailwind:
        steps.append(SETUP_TAILWIND)
    if config.is_typescript and config.use_tailwind:
        steps.append(SETUP_DEV_RUNNER)
    steps.append(SETUP_LINT_CONFIG)
    steps.append(SETUP_PRETTIER_CONFIG)
    if config.use_git:
        steps.append(SETUP_GIT)
    return steps


# ---------------------------------------------------------------------------
# Pipeline Orchestrator
# ---------------------------------------------------------------------------


class Pipeline:
    """Runs the planned steps for one project.

    A pipeline instance assembles exactly one project; calling :meth:`run`
    a second time is an error.

    Attributes:
        config: The resolved project configuration.
        settings: Tool-level settings (executables, output directory).
        steps: The planned steps, in execution order.
        state: Current position in the assembly state machine.
        completed_steps: Names of the steps that finished successfully.
        failed_step: Name of the step that failed, if any.
    """

    def __init__(
        self,
        config: ProjectConfig,
        settings: Optional[Settings] = None,
        runner: CommandRunner = run_command,
        source: Optional[TemplateSource] = None,
        manifest: Optional[ManifestStore] = None,
    ) -> None:
        self.config = config
        self.settings = settings or Settings()
        self.source = source or TemplateSource(self.settings.templates_dir)
        self.manifest = manifest or ManifestStore()
        self.tools = StepTools(
            settings=self.settings,
            runner=runner,
            manifest=self.manifest,
            templates=TemplateInstaller(self.source),
        )
        self.steps = plan_steps(config)
        self.state = PipelineState.NOT_STARTED
        self.completed_steps: list[str] = []
        self.failed_step: Optional[str] = None
        self.context: Optional[ProjectContext] = None

    @property
    def project_path(self) -> Path:
        return (self.settings.output_dir / self.config.project_name).resolve()

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def run(self) -> AssemblyResult:
        """Create the project directory and run every planned step.

        Returns:
            An ``AssemblyResult`` describing the finished project.

        Raises:
            AssemblyError: If the directory cannot be created or any step
                fails.  ``step_name`` names the failing step.
        """
        if self.state is not PipelineState.NOT_STARTED:
            raise RuntimeError(f"Pipeline already run (state: {self.state.value})")

        start = time.monotonic()
        root = self.project_path

        console.print(
            Panel(
                f"[bold bright_cyan]jsforge[/bold bright_cyan]\n"
                f"Project  : {escape(self.config.project_name)}\n"
                f"Location : {escape(str(root))}\n"
                f"Steps    : {escape(', '.join(step.name for step in self.steps))}",
                title="[bold]Creating project[/bold]",
                border_style="bright_cyan",
            )
        )

        try:
            await asyncio.to_thread(root.mkdir)
        except OSError as exc:
            raise self._fail(CREATE_DIRECTORY, exc) from exc

        self.state = PipelineState.DIRECTORY_CREATED
        self.context = ProjectContext(root_path=root, config=self.config)

        self.state = PipelineState.STEPS_RUNNING
        total = len(self.steps)
        for index, step in enumerate(self.steps, start=1):
            print_step_header(index, total, step.name)
            try:
                self._check_requirements(step, self.context)
                await step.run(self.context, self.tools)
            except Exception as exc:
                raise self._fail(step.name, exc) from exc
            self.completed_steps.append(step.name)

        self.state = PipelineState.COMPLETED
        elapsed = time.monotonic() - start
        self._print_final_summary(elapsed)

        return AssemblyResult(
            project_path=root,
            steps_completed=list(self.completed_steps),
            duration_seconds=elapsed,
        )

    def _check_requirements(self, step: Step, ctx: ProjectContext) -> None:
        """Raise ``PreconditionError`` if *step* cannot run on *ctx* yet."""
        has_manifest = self.manifest.exists(ctx.root_path)
        manifest_path = self.manifest.path_for(ctx.root_path)

        if Requirement.MANIFEST in step.requires and not has_manifest:
            raise PreconditionError(
                step.name, Requirement.MANIFEST, f"{manifest_path} does not exist"
            )
        if Requirement.MANIFEST_ABSENT in step.requires and has_manifest:
            raise PreconditionError(
                step.name, Requirement.MANIFEST_ABSENT, f"{manifest_path} already exists"
            )

    def _fail(self, step_name: str, cause: BaseException) -> AssemblyError:
        self.state = PipelineState.FAILED
        self.failed_step = step_name
        return AssemblyError(step_name, cause)

    # ------------------------------------------------------------------
    # Summary
    # ------------------------------------------------------------------

    def _print_final_summary(self, elapsed: float) -> None:
        addons = ", ".join(sorted(a.value for a in self.config.addons)) or "none"
        console.print()
        print_summary_table(
            {
                "Project": self.config.project_name,
                "Location": str(self.project_path),
                "Language": self.config.language.value,
                "Add-ons": addons,
                "Steps": str(len(self.completed_steps)),
                "Duration": format_duration(elapsed),
            },
            title="Project Summary",
        )
        print_output(f"Project {self.config.project_name} has been created")


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def main() -> None:
    """CLI entry point for ``jsforge`` / ``python -m jsforge``."""
    from jsforge.prompts import ask_questions

    try:
        settings = Settings.from_env()
    except ValidationError as exc:
        print_error(f"Invalid settings: {exc}")
        sys.exit(1)

    try:
        config = ask_questions()
    except (KeyboardInterrupt, EOFError):
        console.print()
        print_error("Aborted.")
        sys.exit(1)
    except ValidationError as exc:
        print_error(f"Invalid configuration: {exc}")
        sys.exit(1)

    pipeline = Pipeline(config, settings)
    try:
        asyncio.run(pipeline.run())
    except KeyboardInterrupt:
        console.print()
        print_error("Aborted.")
        if pipeline.state is not PipelineState.NOT_STARTED:
            _warn_partial_project(pipeline)
        sys.exit(1)
    except AssemblyError as exc:
        print_error(f"Error creating project: {exc}")
        if exc.step_name != CREATE_DIRECTORY:
            _warn_partial_project(pipeline)
        sys.exit(1)

    print_success("Done.")


def _warn_partial_project(pipeline: Pipeline) -> None:
    print_warning(
        f"The partially created project was left at {pipeline.project_path}; "
        "remove it before trying again."
    )


if __name__ == "__main__":
    main()
