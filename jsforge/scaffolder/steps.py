"""Assembly steps.

Each step is a named async function that mutates the project directory
through the tools in ``StepTools``: the command runner, the manifest store
and the template installer.  Steps declare what they need from the project
(``Requirement``) and the pipeline checks those requirements before calling
them.  A step never reads another step's script keys; it only adds or
overrides its own.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Awaitable, Callable

from jsforge.config import ProjectContext, Settings
from jsforge.manifest import ManifestStore
from jsforge.scaffolder.templates import TemplateInstaller, replace_content_glob
from jsforge.utils import print_output

CommandRunner = Callable[[str, Path], Awaitable[None]]

BUILD_DIR = "dist"

LINT_PACKAGES = [
    "eslint",
    "prettier",
    "eslint-config-prettier",
    "eslint-config-airbnb",
    "eslint-plugin-import",
]

TYPESCRIPT_PACKAGES = [
    "typescript",
    "@types/node",
    "@typescript-eslint/parser",
    "@typescript-eslint/eslint-plugin",
]

TAILWIND_PACKAGE = "tailwindcss@3"
TAILWIND_PRETTIER_PLUGIN = "prettier-plugin-tailwindcss"
DEV_RUNNER_PACKAGE = "npm-run-all"

TAILWIND_WATCH = (
    f"tailwindcss -i ./src/styles/styles.css -o ./{BUILD_DIR}/styles.css --watch"
)


class Requirement(str, Enum):
    """Project state a step needs before it can run."""

    MANIFEST_ABSENT = "manifest-absent"
    MANIFEST = "manifest"


@dataclass
class StepTools:
    """Collaborators shared by every step of one assembly."""

    settings: Settings
    runner: CommandRunner
    manifest: ManifestStore
    templates: TemplateInstaller

    async def npm(self, ctx: ProjectContext, args: str) -> None:
        await self.runner(f"{_quote(self.settings.npm)} {args}", ctx.root_path)

    async def npx(self, ctx: ProjectContext, args: str) -> None:
        await self.runner(f"{_quote(self.settings.npx)} {args}", ctx.root_path)

    async def git(self, ctx: ProjectContext, args: str) -> None:
        await self.runner(f"{_quote(self.settings.git)} {args}", ctx.root_path)


StepFn = Callable[[ProjectContext, StepTools], Awaitable[None]]


@dataclass(frozen=True)
class Step:
    """One named unit of assembly work, run exactly once per assembly."""

    name: str
    run: StepFn = field(compare=False)
    requires: frozenset[Requirement] = frozenset({Requirement.MANIFEST})


# ---------------------------------------------------------------------------
# Step implementations
# ---------------------------------------------------------------------------


async def init_npm_project(ctx: ProjectContext, tools: StepTools) -> None:
    """Create ``package.json`` and install the lint/format toolchain."""
    await tools.npm(ctx, "init -y")
    await tools.npm(ctx, "install --save-dev " + " ".join(LINT_PACKAGES))
    await tools.manifest.merge_scripts(
        ctx.root_path,
        {
            "format": "prettier --write .",
            "lint": "eslint .",
        },
    )


async def set_module_type(ctx: ProjectContext, tools: StepTools) -> None:
    await tools.manifest.set_field(ctx.root_path, "type", "module")


async def setup_typescript(ctx: ProjectContext, tools: StepTools) -> None:
    """Install TypeScript, write ``tsconfig.json`` and a placeholder entry.

    With a single dev script the TypeScript compiler owns ``dev``;
    otherwise it contributes ``dev:typescript`` and the fan-out runner
    provides ``dev``.
    """
    root = ctx.root_path
    await tools.npm(ctx, "install --save-dev " + " ".join(TYPESCRIPT_PACKAGES))
    await tools.templates.install("tsconfig", root / "tsconfig.json")

    await tools.templates.render(
        "app.j2",
        root / "src" / f"app.{ctx.config.language.extension}",
        _template_context(ctx),
    )

    if ctx.single_dev_script:
        scripts = {
            "build": "tsc",
            "dev": "tsc -w",
            "typecheck": "tsc -b",
        }
    else:
        scripts = {"dev:typescript": "tsc -w"}
    await tools.manifest.merge_scripts(root, scripts)


async def setup_tailwind(ctx: ProjectContext, tools: StepTools) -> None:
    """Install Tailwind CSS and wire it into the project.

    ``npx tailwindcss init`` writes ``tailwind.config.js`` (or ``.ts`` with
    ``--ts``) with an empty ``content`` array, which is then pointed at
    the project's HTML and source files.
    """
    root = ctx.root_path
    ext = ctx.config.language.extension

    await tools.npm(ctx, f"install --save-dev {TAILWIND_PACKAGE}")
    await tools.npx(ctx, "tailwindcss init --ts" if ctx.config.is_typescript else "tailwindcss init")

    globs = ["./index.html", f"./src/**/*.{{html,{ext}}}"]
    await tools.templates.rewrite(
        root / f"tailwind.config.{ext}",
        lambda text: replace_content_glob(text, globs),
    )

    context = _template_context(ctx)
    await tools.templates.render(
        "styles.css.j2", root / "src" / "styles" / "styles.css", context
    )
    await tools.templates.render("index.html.j2", root / "index.html", context)

    key = "css" if ctx.single_dev_script else "dev:tailwind"
    await tools.manifest.merge_scripts(root, {key: TAILWIND_WATCH})

    await tools.npm(ctx, f"install --save-dev {TAILWIND_PRETTIER_PLUGIN}")


async def setup_dev_runner(ctx: ProjectContext, tools: StepTools) -> None:
    """Run every ``dev:*`` script in parallel under a single ``dev``."""
    await tools.npm(ctx, f"install --save-dev {DEV_RUNNER_PACKAGE}")
    await tools.manifest.merge_scripts(ctx.root_path, {"dev": "run-p dev:*"})


async def setup_lint_config(ctx: ProjectContext, tools: StepTools) -> None:
    key = "eslint-ts" if ctx.config.is_typescript else "eslint-js"
    await tools.templates.install(key, ctx.root_path / ".eslintrc.json")


async def setup_prettier_config(ctx: ProjectContext, tools: StepTools) -> None:
    transform = _add_tailwind_plugin if ctx.config.use_tailwind else None
    await tools.templates.install(
        "prettier", ctx.root_path / ".prettierrc.json", transform=transform
    )


async def setup_git(ctx: ProjectContext, tools: StepTools) -> None:
    """Commit everything written so far and switch to the work branch."""
    settings = tools.settings
    await tools.templates.install("gitignore", ctx.root_path / ".gitignore")

    await tools.git(ctx, "init")
    await tools.git(ctx, "add .")
    await tools.git(ctx, f'commit -m "{settings.initial_commit_message}"')
    await tools.git(ctx, f"checkout -b {settings.work_branch}")

    print_output(
        f"Git has been set up, and you are now on the '{settings.work_branch}' branch."
    )


# ---------------------------------------------------------------------------
# Step table
# ---------------------------------------------------------------------------

INIT_NPM_PROJECT = Step(
    "init-npm-project", init_npm_project, frozenset({Requirement.MANIFEST_ABSENT})
)
SET_MODULE_TYPE = Step("set-module-type", set_module_type)
SETUP_TYPESCRIPT = Step("setup-typescript", setup_typescript)
SETUP_TAILWIND = Step("setup-tailwind", setup_tailwind)
SETUP_DEV_RUNNER = Step("setup-dev-runner", setup_dev_runner)
SETUP_LINT_CONFIG = Step("setup-lint-config", setup_lint_config)
SETUP_PRETTIER_CONFIG = Step("setup-prettier-config", setup_prettier_config)
SETUP_GIT = Step("setup-git", setup_git)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _template_context(ctx: ProjectContext) -> dict[str, str]:
    return {
        "project_name": ctx.config.project_name,
        "language": ctx.config.language.value,
        "build_dir": BUILD_DIR,
    }


def _add_tailwind_plugin(text: str) -> str:
    data = json.loads(text)
    plugins = list(data.get("plugins", []))
    if TAILWIND_PRETTIER_PLUGIN not in plugins:
        plugins.append(TAILWIND_PRETTIER_PLUGIN)
    data["plugins"] = plugins
    return json.dumps(data, indent=2) + "\n"


def _quote(executable: str) -> str:
    """Quote an executable path containing whitespace for ``split_command``."""
    return f'"{executable}"' if any(c.isspace() for c in executable) else executable
