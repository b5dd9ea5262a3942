"""
Hierarchy loader: assemble a Curriculum from a resource store.

Load order:
    definitions → guideline → per domain outline → per topic outline
    → per page content (+ optional topic quiz)

Mandatory resources (definitions, guideline) raise MissingResource when
absent. Domains, topics and pages whose resources are absent are skipped
so partial content sets can be served while authoring. A resource that is
present but invalid always raises MalformedResource, optional or not.
"""

from __future__ import annotations

import json
from typing import Any, TypeVar

from loguru import logger
from pydantic import BaseModel, ValidationError

from .definitions import DefinitionIndex
from .errors import MalformedResource, MissingResource, ResourcePath
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
from .schemas import (
    BLOCK_SCHEMAS,
    DefinitionsResource,
    DomainOutlineResource,
    GuidelineResource,
    PageContentResource,
    QuizResource,
    TopicOutlineResource,
)
from .store import ResourceStore

DEFAULT_DOMAIN_ORDER = 999

DEFINITIONS_PATH: ResourcePath = ("definitions",)
GUIDELINE_PATH: ResourcePath = ("guideline",)

SchemaT = TypeVar("SchemaT", bound=BaseModel)


def _describe_validation_error(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"]) or "<root>"
        parts.append(f"{location}: {item['msg']}")
    return "; ".join(parts)


def parse_block(raw: Any) -> ContentBlock:
    """
    Build a content block from its raw JSON.

    Never fails: anything that is not a well-formed known block type is kept
    as a FallbackBlock.
    """
    if not isinstance(raw, dict):
        return FallbackBlock(raw=raw)

    schema = BLOCK_SCHEMAS.get(raw.get("type"))
    if schema is None:
        return FallbackBlock(raw=raw)
    try:
        parsed = schema.model_validate(raw)
    except ValidationError:
        return FallbackBlock(raw=raw)

    block_type = raw["type"]
    if block_type == "heading":
        return HeadingBlock(text=parsed.text)
    if block_type == "paragraph":
        return ParagraphBlock(text=parsed.text)
    if block_type == "list":
        return ListBlock(items=tuple(parsed.items), ordered=parsed.ordered)
    return CodeBlock(text=parsed.text)


class HierarchyLoader:
    """Load and validate the full content hierarchy from one store."""

    def __init__(self, store: ResourceStore, default_domain_order: int = DEFAULT_DOMAIN_ORDER):
        """
        Initialize loader.

        Args:
            store: Resource store to read raw JSON from
            default_domain_order: Sort order for domains that declare none
        """
        self.store = store
        self.default_domain_order = default_domain_order

    # ========================================
    # Resource access
    # ========================================

    def _read(
        self, path: ResourcePath, schema: type[SchemaT], required: bool = False
    ) -> SchemaT | None:
        """Read, decode and validate one resource. None if optional and absent."""
        text = self.store.read(path)
        if text is None:
            if required:
                raise MissingResource(path)
            return None

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise MalformedResource(path, f"invalid JSON: {e.msg} (line {e.lineno})") from e

        try:
            return schema.model_validate(data)
        except ValidationError as e:
            raise MalformedResource(path, _describe_validation_error(e)) from e

    # ========================================
    # Hierarchy
    # ========================================

    def load(self) -> Curriculum:
        """
        Load the whole curriculum.

        Returns:
            A fully formed Curriculum

        Raises:
            MissingResource: definitions or guideline is absent
            MalformedResource: any present resource is invalid
        """
        definitions = self._read(DEFINITIONS_PATH, DefinitionsResource, required=True)
        guideline = self._read(GUIDELINE_PATH, GuidelineResource, required=True)

        declared = tuple(
            GuidelineDomain(
                id=entry.id,
                title=entry.title,
                order=entry.order if entry.order is not None else self.default_domain_order,
            )
            for entry in guideline.domains
        )

        domains = []
        for entry in declared:
            domain = self._load_domain(entry)
            if domain is not None:
                domains.append(domain)

        # sorted() is stable: equal orders keep guideline order
        domains.sort(key=lambda domain: domain.order)

        curriculum = Curriculum(
            guideline=Guideline(
                exam=guideline.exam,
                description=guideline.description,
                study_tips=tuple(guideline.study_tips),
                domains=declared,
            ),
            domains=tuple(domains),
            definitions=DefinitionIndex(definitions.definitions),
        )
        logger.info(
            f"Loaded '{curriculum.guideline.exam}': {len(curriculum.domains)} domains, "
            f"{sum(len(d.topics) for d in curriculum.domains)} topics, "
            f"{len(curriculum.definitions)} glossary terms"
        )
        return curriculum

    def _load_domain(self, entry: GuidelineDomain) -> Domain | None:
        outline = self._read(("domains", entry.id, "outline"), DomainOutlineResource)
        if outline is None:
            logger.debug(f"Skipping domain '{entry.id}': no outline")
            return None

        topics = []
        for topic_entry in outline.topics:
            topic = self._load_topic(entry.id, outline.domain, topic_entry.id, topic_entry.title)
            if topic is not None:
                topics.append(topic)

        return Domain(id=entry.id, title=entry.title, order=entry.order, topics=tuple(topics))

    def _load_topic(
        self, domain_id: str, domain_title: str, topic_id: str, title: str
    ) -> Topic | None:
        outline = self._read(("domains", domain_id, topic_id, "outline"), TopicOutlineResource)
        if outline is None:
            logger.debug(f"Skipping topic '{domain_id}/{topic_id}': no outline")
            return None

        pages = []
        for page_entry in outline.pages:
            content = self._read(
                ("domains", domain_id, topic_id, page_entry.id, "content"), PageContentResource
            )
            if content is None:
                logger.debug(f"Skipping page '{domain_id}/{topic_id}/{page_entry.id}': no content")
                continue
            pages.append(
                Page(
                    id=page_entry.id,
                    title=page_entry.title,
                    blocks=tuple(parse_block(raw) for raw in content.blocks),
                )
            )

        return Topic(
            id=topic_id,
            title=title,
            domain_title=domain_title,
            pages=tuple(pages),
            quiz=self._load_quiz(domain_id, topic_id),
        )

    def _load_quiz(self, domain_id: str, topic_id: str) -> Quiz | None:
        resource = self._read(("domains", domain_id, topic_id, "quiz"), QuizResource)
        if resource is None:
            return None
        return Quiz(
            questions=tuple(
                Question(
                    text=item.question,
                    options=tuple(item.options),
                    correct_index=item.correct,
                    explanation=item.explanation,
                )
                for item in resource.questions
            )
        )


def load_curriculum(store: ResourceStore, default_domain_order: int = DEFAULT_DOMAIN_ORDER) -> Curriculum:
    """Convenience wrapper around HierarchyLoader.load()."""
    return HierarchyLoader(store, default_domain_order=default_domain_order).load()
