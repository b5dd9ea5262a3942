"""
Study session: the navigation state machine over a loaded Curriculum.

Sequencing:
    Page(d,t,0) → … → Page(d,t,last) → Quiz(d,t,0) → … → Quiz(d,t,last)
    → Page(d,t+1,0) → … → Page(d+1,0,0) → … → Completion

Every transition is total. Out-of-range targets and quiz requests for
quiz-less topics are clamped forward by the next-topic rule instead of
raising. Topics without pages are skipped.

Finishing a quiz does not move the cursor immediately: next_question()
returns a PendingAdvance which only applies if nothing else moved the
cursor in the meantime (see AutoAdvanceScheduler).
"""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from src.curriculum.models import Curriculum, Question

from .state import (
    CompletionState,
    NavigationCursor,
    NavigationRequest,
    NavState,
    PageState,
    QuizResult,
    QuizState,
    quiz_key,
)
from .studied import StudiedPagesTracker

CORRECT_FEEDBACK = "Correct! Well done."


@dataclass(frozen=True)
class AnswerFeedback:
    """Outcome of answering the current question."""

    correct: bool
    selected_index: int
    correct_index: int
    explanation: str


@dataclass(frozen=True)
class PendingAdvance:
    """A deferred move after a finished quiz, valid for one generation."""

    generation: int
    target: NavState


@dataclass(frozen=True)
class TopicResultSummary:
    domain_title: str
    topic_title: str
    correct: int
    total: int
    percentage: int

    def to_dict(self) -> dict:
        return {
            "domain": self.domain_title,
            "topic": self.topic_title,
            "correct": self.correct,
            "total": self.total,
            "percentage": self.percentage,
        }


def feedback_for(question: Question, selected_index: int) -> AnswerFeedback:
    """Build answer feedback, defaulting the explanation when the question has none."""
    correct = selected_index == question.correct_index
    if question.explanation:
        explanation = question.explanation
    elif correct:
        explanation = CORRECT_FEEDBACK
    else:
        explanation = f"The correct answer is: {question.options[question.correct_index]}"
    return AnswerFeedback(
        correct=correct,
        selected_index=selected_index,
        correct_index=question.correct_index,
        explanation=explanation,
    )


class StudySession:
    """
    One learner's walk through a curriculum.

    Aggregates the shared read-only Curriculum with this session's own
    NavigationCursor and QuizResult map. Nothing here is process-global.
    """

    def __init__(self, curriculum: Curriculum, tracker: StudiedPagesTracker | None = None):
        self.curriculum = curriculum
        self.tracker = tracker
        self.cursor = NavigationCursor()
        self.results: dict[str, QuizResult] = {}
        self._generation = 0
        self._pending: PendingAdvance | None = None
        self._feedback: AnswerFeedback | None = None

    # ========================================
    # Read-only views
    # ========================================

    @property
    def state(self) -> NavState:
        return self.cursor.to_state()

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def feedback(self) -> AnswerFeedback | None:
        """Feedback for the question on screen, once it has been answered."""
        return self._feedback

    @property
    def pending_advance(self) -> PendingAdvance | None:
        return self._pending

    def current_question(self) -> Question | None:
        state = self.state
        if not isinstance(state, QuizState):
            return None
        topic = self.curriculum.topic_at(state.domain_index, state.topic_index)
        return topic.quiz.questions[state.question_index]

    # ========================================
    # Target resolution
    # ========================================

    def resolve_page(self, domain_index: int, topic_index: int, page_index: int) -> NavState:
        """
        Clamp a page target forward until it names a real page.

        Out-of-range topic → first page of the next domain. Out-of-range page
        → first page of the next topic. Past the last domain → Completion.
        Each step moves strictly forward through a finite list of topics, so
        the bound below is never the reason the loop ends on valid input.
        """
        domains = self.curriculum.domains
        d, t, p = max(domain_index, 0), max(topic_index, 0), max(page_index, 0)

        remaining = sum(len(domain.topics) for domain in domains) + len(domains) + 1
        while remaining > 0:
            remaining -= 1
            if d >= len(domains):
                return CompletionState()
            topics = domains[d].topics
            if t >= len(topics):
                d, t, p = d + 1, 0, 0
                continue
            if p >= len(topics[t].pages):
                t, p = t + 1, 0
                continue
            return PageState(d, t, p)
        return CompletionState()

    def resolve_quiz(self, domain_index: int, topic_index: int) -> NavState:
        """Quiz target, or the next-topic fallback when the topic has no quiz."""
        d, t = max(domain_index, 0), max(topic_index, 0)
        if d >= len(self.curriculum.domains):
            return CompletionState()
        topic = self.curriculum.topic_at(d, t)
        if topic is None:
            return self.resolve_page(d, t, 0)
        if topic.quiz is None:
            return self.resolve_page(d, t + 1, 0)
        return QuizState(d, t, 0)

    # ========================================
    # Transitions
    # ========================================

    def _apply(self, state: NavState) -> NavState:
        """Move the cursor. Any move invalidates an outstanding auto-advance."""
        self._generation += 1
        self._pending = None
        self._feedback = None

        if isinstance(state, QuizState):
            topic = self.curriculum.topic_at(state.domain_index, state.topic_index)
            result = self.results.setdefault(state.key, QuizResult(key=state.key))
            if not topic.quiz.questions:
                # Nothing to ask: the quiz is done as soon as it is entered
                result.completed = True
                return self._apply(self.resolve_page(state.domain_index, state.topic_index + 1, 0))

        self.cursor.move_to(state)

        if isinstance(state, PageState) and self.tracker is not None:
            try:
                self.tracker.mark(state.domain_index, state.topic_index, state.page_index)
            except OSError as e:
                logger.warning(f"Could not record studied page: {e}")
        return state

    def start(self, request: NavigationRequest | None = None) -> NavState:
        """Enter the session at ``request`` (default: first page)."""
        request = request or NavigationRequest()
        if request.quiz:
            return self.jump_to_quiz(request.domain_index, request.topic_index)
        return self.jump(request.domain_index, request.topic_index, request.page_index)

    def jump(self, domain_index: int, topic_index: int, page_index: int = 0) -> NavState:
        return self._apply(self.resolve_page(domain_index, topic_index, page_index))

    def jump_to_quiz(self, domain_index: int, topic_index: int) -> NavState:
        return self._apply(self.resolve_quiz(domain_index, topic_index))

    def next(self) -> NavState:
        """
        Advance from the current page.

        Next page, else the topic's quiz, else the next topic's first page.
        Outside the page state this is a no-op.
        """
        state = self.state
        if not isinstance(state, PageState):
            return state

        topic = self.curriculum.topic_at(state.domain_index, state.topic_index)
        if state.page_index + 1 < len(topic.pages):
            return self._apply(PageState(state.domain_index, state.topic_index, state.page_index + 1))
        if topic.quiz is not None:
            return self._apply(QuizState(state.domain_index, state.topic_index, 0))
        return self._apply(self.resolve_page(state.domain_index, state.topic_index + 1, 0))

    def previous(self) -> NavState:
        """Back one page within the current topic. No-op on the first page."""
        state = self.state
        if not isinstance(state, PageState) or state.page_index == 0:
            return state
        return self._apply(PageState(state.domain_index, state.topic_index, state.page_index - 1))

    def answer(self, selected_index: int) -> AnswerFeedback | None:
        """
        Answer the question on screen.

        Only the first answer per question presentation counts; later calls
        return the original feedback unchanged. Returns None outside a quiz
        or for an option index that does not exist.
        """
        question = self.current_question()
        if question is None:
            return None
        if self._feedback is not None or self._pending is not None:
            logger.debug("Question already answered; ignoring repeat answer")
            return self._feedback
        if not 0 <= selected_index < len(question.options):
            logger.debug(f"Ignoring answer with out-of-range option {selected_index}")
            return None

        state = self.state
        result = self.results.setdefault(state.key, QuizResult(key=state.key))
        feedback = feedback_for(question, selected_index)
        result.total_answered += 1
        if feedback.correct:
            result.correct_count += 1

        self._feedback = feedback
        return feedback

    def next_question(self) -> NavState | PendingAdvance | None:
        """
        Move to the next question, or finish the quiz.

        Returns:
            The new QuizState while questions remain; a PendingAdvance once
            the last question is passed (the quiz is marked completed at that
            point); None outside a quiz.
        """
        state = self.state
        if not isinstance(state, QuizState):
            return None
        if self._pending is not None:
            return self._pending

        topic = self.curriculum.topic_at(state.domain_index, state.topic_index)
        if state.question_index + 1 < len(topic.quiz.questions):
            return self._apply(QuizState(state.domain_index, state.topic_index, state.question_index + 1))

        self.results.setdefault(state.key, QuizResult(key=state.key)).completed = True
        self._pending = PendingAdvance(
            generation=self._generation,
            target=self.resolve_page(state.domain_index, state.topic_index + 1, 0),
        )
        return self._pending

    def resolve_advance(self, pending: PendingAdvance) -> bool:
        """
        Apply a deferred advance if the session has not moved since.

        Returns:
            True if applied; False if a later navigation superseded it
        """
        if pending.generation != self._generation:
            logger.debug(f"Dropping stale auto-advance (generation {pending.generation})")
            return False
        self._apply(pending.target)
        return True

    # ========================================
    # Results
    # ========================================

    def result_for(self, domain_index: int, topic_index: int) -> QuizResult | None:
        return self.results.get(quiz_key(domain_index, topic_index))

    def results_summary(self) -> list[TopicResultSummary]:
        """Scores for every quiz with at least one answer, in study order."""
        summary = []
        for d, t, domain, topic in self.curriculum.iter_topics():
            result = self.results.get(quiz_key(d, t))
            if result is None or result.total_answered == 0:
                continue
            summary.append(
                TopicResultSummary(
                    domain_title=domain.title,
                    topic_title=topic.title,
                    correct=result.correct_count,
                    total=result.total_answered,
                    percentage=result.percentage,
                )
            )
        return summary
