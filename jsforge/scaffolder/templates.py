"""Template lookup and installation for project assembly.

``TemplateSource`` is a read-only view over the tool's own template
directory (``jsforge/scaffolder/templates/`` by default).  Static templates
such as ``tsconfig`` are addressed by a fixed key and copied verbatim;
generated files (the entry source, the base stylesheet, the HTML shell) are
Jinja2 templates rendered with a small context.

``TemplateInstaller`` writes either kind into the target project.
"""

from __future__ import annotations

import asyncio
import re
from pathlib import Path
from typing import Any, Callable, Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

Transform = Callable[[str], str]

# Static template key -> file name inside the template directory.
STATIC_TEMPLATES: dict[str, str] = {
    "tsconfig": "tsconfig.json",
    "eslint-js": "eslintrc_js.json",
    "eslint-ts": "eslintrc_ts.json",
    "prettier": "prettierrc.json",
    "gitignore": "gitignore",
}

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"

_EMPTY_CONTENT_RE = re.compile(r"content:\s*\[\s*\]")


class TemplateNotFoundError(KeyError):
    """Raised for a template key the source does not know."""


# ---------------------------------------------------------------------------
# TemplateSource
# ---------------------------------------------------------------------------


class TemplateSource:
    """Read-only key -> content lookup over a template directory."""

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape([]),
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
        )

    def keys(self) -> list[str]:
        return sorted(STATIC_TEMPLATES)

    def path_of(self, key: str) -> Path:
        try:
            filename = STATIC_TEMPLATES[key]
        except KeyError:
            raise TemplateNotFoundError(key) from None
        return self.template_dir / filename

    def read(self, key: str) -> str:
        """Return the text of the static template *key*.

        Raises:
            TemplateNotFoundError: If *key* is not a known template key.
            OSError: If the template file cannot be read.
        """
        return self.path_of(key).read_text(encoding="utf-8")

    def render(self, template_name: str, context: dict[str, Any]) -> str:
        """Render a Jinja2 template (e.g. ``"index.html.j2"``) with *context*."""
        template = self.env.get_template(template_name)
        return template.render(**context)


# ---------------------------------------------------------------------------
# TemplateInstaller
# ---------------------------------------------------------------------------


class TemplateInstaller:
    """Writes templates from a ``TemplateSource`` into a project.

    Every write overwrites the destination; nothing is merged with
    pre-existing content.
    """

    def __init__(self, source: TemplateSource) -> None:
        self.source = source

    async def install(
        self,
        key: str,
        destination: str | Path,
        transform: Optional[Transform] = None,
    ) -> Path:
        """Copy static template *key* to *destination*.

        Parent directories are created as needed.  *transform*, if given,
        is applied to the template text before writing.
        """
        content = await asyncio.to_thread(self.source.read, key)
        if transform is not None:
            content = transform(content)
        out = Path(destination)
        await asyncio.to_thread(_write_file, out, content)
        return out

    async def render(
        self,
        template_name: str,
        destination: str | Path,
        context: dict[str, Any],
    ) -> Path:
        """Render a Jinja2 template and write the result to *destination*."""
        content = self.source.render(template_name, context)
        out = Path(destination)
        await asyncio.to_thread(_write_file, out, content)
        return out

    async def rewrite(self, path: str | Path, transform: Transform) -> Path:
        """Apply *transform* to a file that already exists in the project."""
        target = Path(path)
        content = await asyncio.to_thread(target.read_text, encoding="utf-8")
        await asyncio.to_thread(_write_file, target, transform(content))
        return target


def replace_content_glob(text: str, globs: list[str]) -> str:
    """Fill the empty ``content: []`` array of a Tailwind config.

    Raises:
        ValueError: If *text* has no empty content array to fill.
    """
    if not _EMPTY_CONTENT_RE.search(text):
        raise ValueError("No empty 'content' array found in Tailwind config")
    rendered = ", ".join(f'"{g}"' for g in globs)
    return _EMPTY_CONTENT_RE.sub(lambda _m: f"content: [{rendered}]", text, count=1)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _write_file(path: Path, content: str) -> None:
    """Synchronous helper: create parent dirs and write content."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
