"""
Resource stores: where the loader reads raw JSON from.

A store is addressed by logical hierarchical paths such as
``("domains", "<domain>", "<topic>", "quiz")`` and returns UTF-8 JSON text,
or None when the resource does not exist.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Protocol

from .errors import MalformedResource, ResourcePath

# Logical names that do not map 1:1 onto a file name
FILE_NAMES = {
    ("guideline",): "learning-guideline.json",
}


class ResourceStore(Protocol):
    """Key-value resource store addressed by hierarchical path."""

    def read(self, path: ResourcePath) -> str | None:
        """Return the resource's JSON text, or None if it is absent."""
        ...


class FileResourceStore:
    """
    Store backed by the on-disk content tree.

    Layout:
        data/
          definitions.json
          learning-guideline.json
          domains/<domain>/outline.json
          domains/<domain>/<topic>/outline.json
          domains/<domain>/<topic>/quiz.json
          domains/<domain>/<topic>/<page>/content.json
    """

    def __init__(self, root: Path | str):
        self.root = Path(root)

    def resolve(self, path: ResourcePath) -> Path:
        """Map a logical path onto a file below the root."""
        for segment in path:
            if not segment or segment in (".", "..") or "/" in segment or "\\" in segment:
                raise MalformedResource(path, f"illegal path segment {segment!r}")

        if path in FILE_NAMES:
            return self.root / FILE_NAMES[path]
        *directories, name = path
        return self.root.joinpath(*directories, f"{name}.json")

    def read(self, path: ResourcePath) -> str | None:
        file_path = self.resolve(path)
        if not file_path.is_file():
            return None
        try:
            return file_path.read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as e:
            raise MalformedResource(path, f"failed to read file: {e}") from e

    def exists(self) -> bool:
        return self.root.is_dir()

    def __repr__(self) -> str:
        return f"FileResourceStore({str(self.root)!r})"


class MemoryResourceStore:
    """
    In-memory store for tests and tooling.

    Values may be JSON text or plain Python objects, which are serialized on read.
    """

    def __init__(self, resources: Mapping[ResourcePath, Any] | None = None):
        self.resources: dict[ResourcePath, Any] = dict(resources or {})

    def put(self, path: ResourcePath, value: Any) -> None:
        self.resources[tuple(path)] = value

    def read(self, path: ResourcePath) -> str | None:
        value = self.resources.get(tuple(path))
        if value is None:
            return None
        if isinstance(value, str):
            return value
        return json.dumps(value)
