"""Errors raised while assembling a curriculum from its resource store."""

from __future__ import annotations

from typing import Sequence

ResourcePath = tuple[str, ...]


def format_path(path: Sequence[str] | None) -> str | None:
    """Render a logical resource path as a slash-joined string."""
    if path is None:
        return None
    return "/".join(path)


class CurriculumError(Exception):
    """Base class for load failures. Carries the offending resource path."""

    kind = "CurriculumError"

    def __init__(self, message: str, path: Sequence[str] | None = None):
        super().__init__(message)
        self.message = message
        self.path = format_path(path)

    def to_dict(self) -> dict:
        """Structured error document for API consumers."""
        return {
            "success": False,
            "error": self.message,
            "path": self.path,
            "kind": self.kind,
        }


class MissingResource(CurriculumError):
    """A mandatory resource (definitions or guideline) is absent."""

    kind = "MissingResource"

    def __init__(self, path: Sequence[str]):
        super().__init__(f"Resource not found: {format_path(path)}", path)


class MalformedResource(CurriculumError):
    """A resource exists but is not valid JSON or does not match its schema."""

    kind = "MalformedResource"

    def __init__(self, path: Sequence[str], reason: str):
        super().__init__(f"Invalid resource {format_path(path)} - {reason}", path)
        self.reason = reason
