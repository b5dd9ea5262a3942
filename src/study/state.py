"""
Navigation state for a study session.

The session exposes one of three states:
    PageState(domain, topic, page)
    QuizState(domain, topic, question)
    CompletionState()

The mutable NavigationCursor and QuizResult map back those states and are
owned by exactly one StudySession.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import ClassVar, Union


def quiz_key(domain_index: int, topic_index: int) -> str:
    """Key of a topic's quiz result: ``"<domain>-<topic>"``."""
    return f"{domain_index}-{topic_index}"


@dataclass(frozen=True)
class PageState:
    domain_index: int
    topic_index: int
    page_index: int
    kind: ClassVar[str] = "page"


@dataclass(frozen=True)
class QuizState:
    domain_index: int
    topic_index: int
    question_index: int
    kind: ClassVar[str] = "quiz"

    @property
    def key(self) -> str:
        return quiz_key(self.domain_index, self.topic_index)


@dataclass(frozen=True)
class CompletionState:
    kind: ClassVar[str] = "completion"


NavState = Union[PageState, QuizState, CompletionState]


@dataclass
class NavigationCursor:
    """Current position. ``quiz_key`` is set while a quiz is being taken."""

    domain_index: int = 0
    topic_index: int = 0
    page_index: int = 0
    quiz_key: str | None = None
    question_index: int = 0
    completed: bool = False

    @property
    def in_quiz(self) -> bool:
        return self.quiz_key is not None and not self.completed

    def to_state(self) -> NavState:
        if self.completed:
            return CompletionState()
        if self.quiz_key is not None:
            return QuizState(self.domain_index, self.topic_index, self.question_index)
        return PageState(self.domain_index, self.topic_index, self.page_index)

    def move_to(self, state: NavState) -> None:
        """Point the cursor at ``state``."""
        if isinstance(state, CompletionState):
            self.completed = True
            self.quiz_key = None
            return

        self.completed = False
        self.domain_index = state.domain_index
        self.topic_index = state.topic_index
        if isinstance(state, QuizState):
            self.quiz_key = state.key
            self.question_index = state.question_index
        else:
            self.quiz_key = None
            self.question_index = 0
            self.page_index = state.page_index


@dataclass
class QuizResult:
    """Running score for one topic's quiz."""

    key: str
    correct_count: int = 0
    total_answered: int = 0
    completed: bool = False

    @property
    def percentage(self) -> int:
        if self.total_answered == 0:
            return 0
        return round(self.correct_count / self.total_answered * 100)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class NavigationRequest:
    """
    An externally supplied start position.

    ``quiz`` selects the quiz form ``(domain, topic, quiz)``; otherwise the
    page form ``(domain, topic, page)``.
    """

    domain_index: int = 0
    topic_index: int = 0
    page_index: int = 0
    quiz: bool = False


def _to_int(value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def parse_navigation_request(params) -> NavigationRequest:
    """
    Build a NavigationRequest from query-style parameters.

    Reads ``domain``, ``topic``, ``page`` and ``quiz``. Absent or
    non-integer values default to 0; any ``quiz`` value selects the quiz form.
    """
    params = params or {}
    return NavigationRequest(
        domain_index=_to_int(params.get("domain")),
        topic_index=_to_int(params.get("topic")),
        page_index=_to_int(params.get("page")),
        quiz=params.get("quiz") is not None,
    )
