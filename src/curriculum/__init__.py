"""Exam content: hierarchy loading, validation and the glossary index."""

from .definitions import DefinitionIndex
from .errors import CurriculumError, MalformedResource, MissingResource
from .loader import HierarchyLoader, load_curriculum, parse_block
from .models import (
    CodeBlock,
    ContentBlock,
    Curriculum,
    Domain,
    FallbackBlock,
    Guideline,
    GuidelineDomain,
    HeadingBlock,
    ListBlock,
    Page,
    ParagraphBlock,
    Question,
    Quiz,
    Topic,
)
from .store import FileResourceStore, MemoryResourceStore, ResourceStore

__all__ = [
    "CodeBlock",
    "ContentBlock",
    "Curriculum",
    "CurriculumError",
    "DefinitionIndex",
    "Domain",
    "FallbackBlock",
    "FileResourceStore",
    "Guideline",
    "GuidelineDomain",
    "HeadingBlock",
    "HierarchyLoader",
    "ListBlock",
    "MalformedResource",
    "MemoryResourceStore",
    "MissingResource",
    "Page",
    "ParagraphBlock",
    "Question",
    "Quiz",
    "ResourceStore",
    "Topic",
    "load_curriculum",
    "parse_block",
]
