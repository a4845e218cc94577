"""Read-modify-write access to a project's ``package.json``.

The manifest is shared by several steps over the lifetime of one assembly,
so the store never caches: every mutation re-reads the file, applies the
change, and writes it straight back.  Steps only add or override their own
keys.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

MANIFEST_NAME = "package.json"


class ManifestNotFoundError(FileNotFoundError):
    """Raised when a step needs the manifest before it has been created."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"File not found: {path}")


class ManifestStore:
    """Loads, mutates and persists ``package.json`` under a project root.

    The store holds no state; every method takes the project root so
    that the on-disk file stays the single source of truth.
    """

    def __init__(self, filename: str = MANIFEST_NAME) -> None:
        self.filename = filename

    def path_for(self, root: str | Path) -> Path:
        return Path(root) / self.filename

    def exists(self, root: str | Path) -> bool:
        return self.path_for(root).is_file()

    def ensure_exists(self, root: str | Path) -> Path:
        """Return the manifest path, or raise if the file is missing.

        Raises:
            ManifestNotFoundError: If ``package.json`` does not exist.
        """
        path = self.path_for(root)
        if not path.is_file():
            raise ManifestNotFoundError(path)
        return path

    # -- Whole-document I/O ------------------------------------------------

    async def load(self, root: str | Path) -> dict[str, Any]:
        """Parse the manifest as it currently is on disk."""
        path = self.ensure_exists(root)
        return await asyncio.to_thread(_read_json, path)

    async def save(self, root: str | Path, data: dict[str, Any]) -> None:
        """Write *data* as the manifest (2-space indent, UTF-8)."""
        await asyncio.to_thread(_write_json, self.path_for(root), data)

    # -- Mutations ---------------------------------------------------------

    async def set_field(self, root: str | Path, key: str, value: Any) -> None:
        """Set a top-level manifest field, leaving all other keys untouched."""
        data = await self.load(root)
        data[key] = value
        await self.save(root, data)

    async def merge_scripts(self, root: str | Path, additions: dict[str, str]) -> None:
        """Merge *additions* into ``scripts`` and re-sort by key.

        Additions win on key collisions.  Keys are ordered by plain code
        point comparison so the result does not depend on step order.
        """
        data = await self.load(root)
        data["scripts"] = merge_script_maps(data.get("scripts") or {}, additions)
        await self.save(root, data)


def merge_script_maps(
    scripts: dict[str, str], additions: dict[str, str]
) -> dict[str, str]:
    """Return ``{**scripts, **additions}`` with keys sorted ascending."""
    merged = {**scripts, **additions}
    return {key: merged[key] for key in sorted(merged)}


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _read_json(path: Path) -> dict[str, Any]:
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{path} does not contain a JSON object")
    return data


def _write_json(path: Path, data: dict[str, Any]) -> None:
    content = json.dumps(data, indent=2, ensure_ascii=False) + "\n"
    path.write_text(content, encoding="utf-8")
