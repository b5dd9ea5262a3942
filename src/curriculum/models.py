"""Immutable data models for a loaded exam curriculum."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from .definitions import DefinitionIndex


# ========================================
# Content Blocks
# ========================================


@dataclass(frozen=True)
class HeadingBlock:
    text: str
    type: str = field(default="heading", init=False)

    def to_dict(self) -> dict:
        return {"type": self.type, "text": self.text}


@dataclass(frozen=True)
class ParagraphBlock:
    text: str
    type: str = field(default="paragraph", init=False)

    def to_dict(self) -> dict:
        return {"type": self.type, "text": self.text}


@dataclass(frozen=True)
class ListBlock:
    items: tuple[str, ...]
    ordered: bool = False
    type: str = field(default="list", init=False)

    def to_dict(self) -> dict:
        return {"type": self.type, "ordered": self.ordered, "items": list(self.items)}


@dataclass(frozen=True)
class CodeBlock:
    text: str
    type: str = field(default="code", init=False)

    def to_dict(self) -> dict:
        return {"type": self.type, "text": self.text}


@dataclass(frozen=True)
class FallbackBlock:
    """A block of unknown type or shape, kept verbatim."""

    raw: Any
    type: str = field(default="fallback", init=False)

    @property
    def text(self) -> str:
        """Display text: the block's ``text`` field if it has one, else the raw value."""
        if isinstance(self.raw, dict) and self.raw.get("text"):
            return str(self.raw["text"])
        return str(self.raw)

    def to_dict(self) -> Any:
        return self.raw


ContentBlock = Union[HeadingBlock, ParagraphBlock, ListBlock, CodeBlock, FallbackBlock]


# ========================================
# Hierarchy
# ========================================


@dataclass(frozen=True)
class Page:
    """One study page within a topic."""

    id: str
    title: str
    blocks: tuple[ContentBlock, ...] = ()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "blocks": [block.to_dict() for block in self.blocks],
        }


@dataclass(frozen=True)
class Question:
    """A multiple choice question with a single correct option."""

    text: str
    options: tuple[str, ...]
    correct_index: int
    explanation: str | None = None

    def to_dict(self) -> dict:
        data = {
            "question": self.text,
            "options": list(self.options),
            "correct": self.correct_index,
        }
        if self.explanation is not None:
            data["explanation"] = self.explanation
        return data


@dataclass(frozen=True)
class Quiz:
    questions: tuple[Question, ...] = ()

    def to_dict(self) -> dict:
        return {"questions": [question.to_dict() for question in self.questions]}


@dataclass(frozen=True)
class Topic:
    """
    A topic: ordered pages followed by an optional quiz.

    An empty ``pages`` tuple is legal; navigation skips such topics.
    """

    id: str
    title: str
    domain_title: str
    pages: tuple[Page, ...] = ()
    quiz: Quiz | None = None

    @property
    def has_quiz(self) -> bool:
        return self.quiz is not None

    @property
    def unit_count(self) -> int:
        """Progress units: one per page plus one for the quiz."""
        return len(self.pages) + (1 if self.has_quiz else 0)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "domain": self.domain_title,
            "pages": [page.to_dict() for page in self.pages],
            "quiz": self.quiz.to_dict() if self.quiz is not None else None,
        }


@dataclass(frozen=True)
class Domain:
    id: str
    title: str
    order: int
    topics: tuple[Topic, ...] = ()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "order": self.order,
            "topics": [topic.to_dict() for topic in self.topics],
        }


@dataclass(frozen=True)
class GuidelineDomain:
    """A domain as declared by the guideline, whether or not it loaded."""

    id: str
    title: str
    order: int

    def to_dict(self) -> dict:
        return {"id": self.id, "title": self.title, "order": self.order}


@dataclass(frozen=True)
class Guideline:
    exam: str
    description: str = ""
    study_tips: tuple[str, ...] = ()
    domains: tuple[GuidelineDomain, ...] = ()

    def to_dict(self) -> dict:
        return {
            "exam": self.exam,
            "description": self.description,
            "studyTips": list(self.study_tips),
            "domains": [domain.to_dict() for domain in self.domains],
        }


@dataclass(frozen=True)
class Curriculum:
    """
    Root of a loaded exam: guideline, ordered domains and the glossary.

    Built once per load and shared read-only by every session.
    """

    guideline: Guideline
    domains: tuple[Domain, ...]
    definitions: DefinitionIndex

    @property
    def total_units(self) -> int:
        return sum(topic.unit_count for domain in self.domains for topic in domain.topics)

    def topic_at(self, domain_index: int, topic_index: int) -> Topic | None:
        """Topic at the given indices, or None when either is out of range."""
        if not 0 <= domain_index < len(self.domains):
            return None
        topics = self.domains[domain_index].topics
        if not 0 <= topic_index < len(topics):
            return None
        return topics[topic_index]

    def iter_topics(self):
        """Yield ``(domain_index, topic_index, domain, topic)`` in study order."""
        for domain_index, domain in enumerate(self.domains):
            for topic_index, topic in enumerate(domain.topics):
                yield domain_index, topic_index, domain, topic

    def to_dict(self) -> dict:
        """The assembled document served by the content API."""
        return {
            "guideline": self.guideline.to_dict(),
            "domains": [domain.to_dict() for domain in self.domains],
            "definitions": self.definitions.to_dict(),
        }
