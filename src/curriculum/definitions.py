"""Glossary index: case-insensitive term lookup for tooltip annotation."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from loguru import logger


class DefinitionIndex:
    """
    Normalized, immutable view of the glossary.

    Keys are lower-cased on construction. When two raw terms differ only by
    case, the first one encountered is kept.
    """

    __slots__ = ("_definitions", "_terms")

    def __init__(self, definitions: Mapping[str, str] | None = None):
        normalized: dict[str, str] = {}
        for term, text in (definitions or {}).items():
            key = term.strip().lower()
            if not key:
                continue
            if key in normalized:
                logger.warning(f"Duplicate glossary term ignored: {term!r}")
                continue
            normalized[key] = text

        self._definitions = MappingProxyType(normalized)
        # sorted() is stable: equal-length terms keep their glossary order
        self._terms = tuple(sorted(normalized, key=len, reverse=True))

    def lookup(self, term: str) -> str | None:
        """Definition for ``term`` (any casing), or None."""
        if not isinstance(term, str):
            return None
        return self._definitions.get(term.strip().lower())

    def all_terms(self) -> tuple[str, ...]:
        """All lower-cased terms, longest first."""
        return self._terms

    def to_dict(self) -> dict[str, str]:
        return dict(self._definitions)

    def __contains__(self, term: object) -> bool:
        return isinstance(term, str) and term.strip().lower() in self._definitions

    def __len__(self) -> int:
        return len(self._definitions)

    def __repr__(self) -> str:
        return f"DefinitionIndex({len(self)} terms)"
