"""
Unit tests for the study session state machine.

Tests sequencing, clamping of out-of-range targets, quiz scoring and the
deferred advance after a finished quiz.
"""

import pytest

from src.curriculum.loader import HierarchyLoader
from src.study.navigation import CORRECT_FEEDBACK, PendingAdvance, StudySession
from src.study.state import (
    CompletionState,
    NavigationCursor,
    NavigationRequest,
    PageState,
    QuizState,
    parse_navigation_request,
)
from src.study.studied import MemoryKeyValueStore, StudiedPagesTracker


@pytest.fixture
def session(chain_curriculum):
    s = StudySession(chain_curriculum)
    s.start()
    return s


class TestSequencing:
    """Walking the whole curriculum with next()."""

    def test_full_chain(self, session):
        assert session.state == PageState(0, 0, 0)
        assert session.next() == PageState(0, 0, 1)
        assert session.next() == QuizState(0, 0, 0)

        feedback = session.answer(0)
        assert feedback.correct is True

        pending = session.next_question()
        assert isinstance(pending, PendingAdvance)
        assert pending.target == PageState(1, 0, 0)
        assert session.state == QuizState(0, 0, 0)

        assert session.resolve_advance(pending) is True
        assert session.state == PageState(1, 0, 0)
        assert session.next() == CompletionState()

    def test_previous_within_topic(self, session):
        session.next()

        assert session.previous() == PageState(0, 0, 0)

    def test_previous_on_first_page_is_noop(self, session):
        generation = session.generation

        assert session.previous() == PageState(0, 0, 0)
        assert session.generation == generation

    def test_next_and_previous_are_noops_in_quiz(self, session):
        session.jump_to_quiz(0, 0)

        assert session.next() == QuizState(0, 0, 0)
        assert session.previous() == QuizState(0, 0, 0)

    def test_next_is_noop_at_completion(self, session):
        session.jump(9, 0, 0)

        assert session.next() == CompletionState()

    def test_topics_without_pages_are_skipped(self, make_store):
        store = make_store(
            [
                {
                    "id": "d0",
                    "title": "D0",
                    "topics": [
                        {"id": "empty", "title": "Empty", "pages": []},
                        {"id": "full", "title": "Full", "pages": [{"id": "p0", "title": "P0"}]},
                    ],
                }
            ]
        )
        s = StudySession(HierarchyLoader(store).load())

        assert s.start() == PageState(0, 1, 0)

    def test_empty_curriculum_starts_at_completion(self, make_store):
        s = StudySession(HierarchyLoader(make_store([])).load())

        assert s.start() == CompletionState()


class TestClamping:
    """Every jump lands on a valid state."""

    @pytest.mark.parametrize(
        "target, expected",
        [
            ((0, 0, 1), PageState(0, 0, 1)),
            ((0, 0, 9), PageState(1, 0, 0)),
            ((0, 5, 0), PageState(1, 0, 0)),
            ((5, 0, 0), CompletionState()),
            ((1, 0, 3), CompletionState()),
            ((-1, -3, -2), PageState(0, 0, 0)),
        ],
    )
    def test_jump(self, session, target, expected):
        assert session.jump(*target) == expected

    @pytest.mark.parametrize(
        "target, expected",
        [
            ((0, 0), QuizState(0, 0, 0)),
            ((1, 0), CompletionState()),
            ((0, 7), PageState(1, 0, 0)),
            ((4, 0), CompletionState()),
        ],
    )
    def test_jump_to_quiz(self, session, target, expected):
        assert session.jump_to_quiz(*target) == expected

    def test_start_from_request(self, chain_curriculum):
        s = StudySession(chain_curriculum)

        assert s.start(NavigationRequest(domain_index=0, topic_index=0, quiz=True)) == QuizState(0, 0, 0)
        assert s.start(NavigationRequest(domain_index=1)) == PageState(1, 0, 0)


class TestQuizScoring:
    """Answers, feedback and accumulated results."""

    def test_scores_accumulate(self, two_question_curriculum):
        s = StudySession(two_question_curriculum)
        s.jump_to_quiz(0, 0)

        wrong = s.answer(1)
        assert wrong.correct is False
        assert wrong.explanation == "The correct answer is: yes"

        assert s.next_question() == QuizState(0, 0, 1)
        assert s.feedback is None

        right = s.answer(1)
        assert right.correct is True
        assert right.explanation == "Because."

        pending = s.next_question()
        assert pending.target == CompletionState()

        result = s.result_for(0, 0)
        assert (result.correct_count, result.total_answered, result.completed) == (1, 2, True)
        assert result.percentage == 50

    def test_default_correct_feedback(self, session):
        session.jump_to_quiz(0, 0)

        assert session.answer(0).explanation == CORRECT_FEEDBACK

    def test_second_answer_is_ignored(self, session):
        session.jump_to_quiz(0, 0)

        first = session.answer(1)
        second = session.answer(0)

        assert second == first
        result = session.result_for(0, 0)
        assert (result.correct_count, result.total_answered) == (0, 1)

    @pytest.mark.parametrize("index", [-1, 2, 99])
    def test_out_of_range_answer_is_ignored(self, session, index):
        session.jump_to_quiz(0, 0)

        assert session.answer(index) is None
        assert session.result_for(0, 0).total_answered == 0

    def test_answer_outside_quiz(self, session):
        assert session.answer(0) is None
        assert session.next_question() is None

    def test_reentering_quiz_keeps_accumulating(self, session):
        session.jump_to_quiz(0, 0)
        session.answer(0)
        session.resolve_advance(session.next_question())

        session.jump_to_quiz(0, 0)
        session.answer(1)

        result = session.result_for(0, 0)
        assert (result.correct_count, result.total_answered) == (1, 2)
        assert result.completed is True

    def test_empty_quiz_completes_on_entry(self, make_store):
        store = make_store(
            [
                {
                    "id": "d0",
                    "title": "D0",
                    "topics": [
                        {"id": "t0", "title": "T0", "pages": [{"id": "p0", "title": "P0"}], "quiz": {"questions": []}},
                        {"id": "t1", "title": "T1", "pages": [{"id": "p0", "title": "P0"}]},
                    ],
                }
            ]
        )
        s = StudySession(HierarchyLoader(store).load())
        s.start()

        assert s.next() == PageState(0, 1, 0)
        assert s.result_for(0, 0).completed is True

    def test_results_summary(self, session):
        session.jump_to_quiz(0, 0)
        session.answer(0)

        summary = [item.to_dict() for item in session.results_summary()]

        assert summary == [
            {"domain": "Domain Zero", "topic": "Topic Zero", "correct": 1, "total": 1, "percentage": 100}
        ]

    def test_unanswered_quiz_not_in_summary(self, session):
        session.jump_to_quiz(0, 0)

        assert session.results_summary() == []


class TestDeferredAdvance:
    """The post-quiz move only applies if nothing moved in between."""

    def test_navigation_supersedes_pending_advance(self, session):
        session.jump_to_quiz(0, 0)
        session.answer(0)
        pending = session.next_question()

        session.jump(0, 0, 1)

        assert session.resolve_advance(pending) is False
        assert session.state == PageState(0, 0, 1)

    def test_repeat_next_question_returns_same_pending(self, session):
        session.jump_to_quiz(0, 0)
        session.answer(0)

        first = session.next_question()

        assert session.next_question() is first
        assert session.pending_advance is first

    def test_answer_after_finish_is_ignored(self, session):
        session.jump_to_quiz(0, 0)
        session.answer(0)
        session.next_question()

        session.answer(1)

        assert session.result_for(0, 0).total_answered == 1

    def test_pending_advance_applies_once(self, session):
        session.jump_to_quiz(0, 0)
        session.answer(0)
        pending = session.next_question()

        assert session.resolve_advance(pending) is True
        assert session.resolve_advance(pending) is False


class TestStudiedPages:
    def test_visited_pages_are_marked(self, chain_curriculum):
        tracker = StudiedPagesTracker(MemoryKeyValueStore())
        s = StudySession(chain_curriculum, tracker=tracker)
        s.start()
        s.next()
        s.jump(1, 0, 0)

        assert tracker.pages(0, 0) == [0, 1]
        assert tracker.pages(1, 0) == [0]


class TestNavigationCursor:
    def test_round_trip_through_states(self):
        cursor = NavigationCursor()

        cursor.move_to(QuizState(1, 2, 3))
        assert cursor.in_quiz is True
        assert cursor.quiz_key == "1-2"
        assert cursor.to_state() == QuizState(1, 2, 3)

        cursor.move_to(PageState(1, 3, 0))
        assert cursor.in_quiz is False
        assert cursor.to_state() == PageState(1, 3, 0)

        cursor.move_to(CompletionState())
        assert cursor.to_state() == CompletionState()


class TestParseNavigationRequest:
    @pytest.mark.parametrize(
        "params, expected",
        [
            ({}, NavigationRequest()),
            (None, NavigationRequest()),
            ({"domain": "2", "topic": "1", "page": "3"}, NavigationRequest(2, 1, 3)),
            ({"domain": "x", "topic": None}, NavigationRequest()),
            ({"domain": "1", "topic": "0", "quiz": ""}, NavigationRequest(1, 0, 0, quiz=True)),
        ],
    )
    def test_parse(self, params, expected):
        assert parse_navigation_request(params) == expected
