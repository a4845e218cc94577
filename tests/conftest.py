"""Shared pytest fixtures for the jsforge test suite.

Provides reusable fixtures for:
- A recording fake command runner that emulates ``npm init -y`` and
  ``npx tailwindcss init`` without touching the network
- Project configurations for the common language / add-on combinations
- Settings pointing the pipeline at a temporary output directory
- Project directories with and without a minimal ``package.json``
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import pytest

from jsforge.config import Language, ProjectConfig, Settings
from jsforge.manifest import ManifestStore
from jsforge.scaffolder.steps import StepTools
from jsforge.scaffolder.templates import TemplateInstaller, TemplateSource
from jsforge.utils import ProcessFailure, split_command


# ---------------------------------------------------------------------------
# Fake command runner
# ---------------------------------------------------------------------------

TAILWIND_CONFIG_JS = """\
/** @type {import('tailwindcss').Config} */
export default {
  content: [],
  theme: {
    extend: {},
  },
  plugins: [],
}
"""

TAILWIND_CONFIG_TS = """\
import type { Config } from 'tailwindcss'

export default {
  content: [],
  theme: {
    extend: {},
  },
  plugins: [],
} satisfies Config
"""


class FakeRunner:
    """Records command lines and fakes the file effects of a few of them.

    ``fail_on`` makes any command whose line starts with that prefix raise
    ``ProcessFailure`` with exit code 1.
    """

    def __init__(self, fail_on: Optional[str] = None) -> None:
        self.fail_on = fail_on
        self.calls: list[tuple[str, Path]] = []

    @property
    def commands(self) -> list[str]:
        return [command for command, _ in self.calls]

    async def __call__(self, command_line: str, cwd: Path) -> None:
        self.calls.append((command_line, Path(cwd)))
        if self.fail_on is not None and command_line.startswith(self.fail_on):
            raise ProcessFailure(command_line, exit_code=1)

        args = split_command(command_line)
        if args[1:3] == ["init", "-y"]:
            manifest = {
                "name": Path(cwd).name,
                "version": "1.0.0",
                "description": "",
                "main": "index.js",
                "scripts": {
                    "test": 'echo "Error: no test specified" && exit 1',
                },
                "keywords": [],
                "author": "",
                "license": "ISC",
            }
            (Path(cwd) / "package.json").write_text(
                json.dumps(manifest, indent=2) + "\n", encoding="utf-8"
            )
        elif args[1:3] == ["tailwindcss", "init"]:
            if "--ts" in args:
                (Path(cwd) / "tailwind.config.ts").write_text(TAILWIND_CONFIG_TS, encoding="utf-8")
            else:
                (Path(cwd) / "tailwind.config.js").write_text(TAILWIND_CONFIG_JS, encoding="utf-8")


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def failing_runner():
    """Factory for a ``FakeRunner`` that fails on a command prefix."""
    def _make(prefix: str) -> FakeRunner:
        return FakeRunner(fail_on=prefix)
    return _make


# ---------------------------------------------------------------------------
# Configurations & settings
# ---------------------------------------------------------------------------

@pytest.fixture
def js_config() -> ProjectConfig:
    return ProjectConfig.from_answers("demo", Language.JAVASCRIPT, False, False)


@pytest.fixture
def ts_config() -> ProjectConfig:
    return ProjectConfig.from_answers("demo", Language.TYPESCRIPT, False, False)


@pytest.fixture
def ts_tailwind_config() -> ProjectConfig:
    return ProjectConfig.from_answers("demo", Language.TYPESCRIPT, True, False)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings whose output directory is a fresh temporary directory."""
    output = tmp_path / "workspace"
    output.mkdir()
    return Settings(output_dir=output)


# ---------------------------------------------------------------------------
# Step-level fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def manifest_store() -> ManifestStore:
    return ManifestStore()


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """Empty project directory (auto-cleanup)."""
    root = tmp_path / "demo"
    root.mkdir()
    yield root


@pytest.fixture
def project_with_manifest(project_root: Path) -> Path:
    """Project directory holding a minimal ``package.json``."""
    (project_root / "package.json").write_text(
        json.dumps({"name": "demo", "version": "1.0.0", "scripts": {}}, indent=2) + "\n",
        encoding="utf-8",
    )
    return project_root


@pytest.fixture
def step_tools(settings: Settings, fake_runner: FakeRunner, manifest_store: ManifestStore) -> StepTools:
    return StepTools(
        settings=settings,
        runner=fake_runner,
        manifest=manifest_store,
        templates=TemplateInstaller(TemplateSource()),
    )
