"""
Pydantic schemas for the raw JSON resources of an exam content tree.

These describe what the resource store hands back, before it is turned into
the immutable curriculum models. Field aliases keep the on-disk names
(``studyTips``) while the Python side stays snake_case.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator


class _Resource(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class DefinitionsResource(_Resource):
    """``definitions`` → ``{definitions: {term: text}}``."""

    definitions: dict[str, str]


class GuidelineDomainEntry(_Resource):
    id: str
    title: str
    order: int | None = None


class GuidelineResource(_Resource):
    """``guideline`` → exam metadata plus the declared domain list."""

    exam: str
    description: str = ""
    study_tips: list[str] = Field(default_factory=list, alias="studyTips")
    domains: list[GuidelineDomainEntry] = Field(default_factory=list)


class OutlineEntry(_Resource):
    id: str
    title: str


class DomainOutlineResource(_Resource):
    """Per-domain ``outline``: the domain title and its ordered topics."""

    domain: str
    topics: list[OutlineEntry] = Field(default_factory=list)


class TopicOutlineResource(_Resource):
    """Per-topic ``outline``: the ordered page list."""

    pages: list[OutlineEntry] = Field(default_factory=list)


class QuestionResource(_Resource):
    question: str
    options: list[str] = Field(min_length=2)
    correct: int
    explanation: str | None = None

    @model_validator(mode="after")
    def _check_correct_index(self) -> "QuestionResource":
        if not 0 <= self.correct < len(self.options):
            raise ValueError(
                f"correct index {self.correct} out of range for {len(self.options)} options"
            )
        return self


class QuizResource(_Resource):
    """Optional per-topic ``quiz``."""

    questions: list[QuestionResource] = Field(default_factory=list)


class PageContentResource(_Resource):
    """Per-page ``content``. Blocks stay raw; they are parsed leniently later."""

    blocks: list = Field(default_factory=list)


# Lenient block shapes. A raw block that fails these becomes a fallback block.


class HeadingBlockResource(_Resource):
    text: str


class ParagraphBlockResource(_Resource):
    text: str


class ListBlockResource(_Resource):
    ordered: bool = False
    items: list[str]


class CodeBlockResource(_Resource):
    text: str


BLOCK_SCHEMAS: dict[str, type[_Resource]] = {
    "heading": HeadingBlockResource,
    "paragraph": ParagraphBlockResource,
    "list": ListBlockResource,
    "code": CodeBlockResource,
}
