"""
Study module: navigation, quiz scoring and progress for one learner session.

Components:
- StudySession: navigation state machine over a Curriculum
- AutoAdvanceScheduler: delayed, cancelable move after a finished quiz
- compute_progress: unit-based completion fraction
- StudiedPagesTracker / StudyPreferences: advisory client-side state
"""

from .navigation import AnswerFeedback, PendingAdvance, StudySession, TopicResultSummary
from .progress import Progress, compute_progress
from .scheduler import AutoAdvanceScheduler
from .state import (
    CompletionState,
    NavigationCursor,
    NavigationRequest,
    NavState,
    PageState,
    QuizResult,
    QuizState,
    parse_navigation_request,
    quiz_key,
)
from .studied import (
    JsonFileKeyValueStore,
    KeyValueStore,
    MemoryKeyValueStore,
    StudiedPagesTracker,
    StudyPreferences,
)

__all__ = [
    "AnswerFeedback",
    "AutoAdvanceScheduler",
    "CompletionState",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "NavState",
    "NavigationCursor",
    "NavigationRequest",
    "PageState",
    "PendingAdvance",
    "Progress",
    "QuizResult",
    "QuizState",
    "StudiedPagesTracker",
    "StudyPreferences",
    "StudySession",
    "TopicResultSummary",
    "compute_progress",
    "parse_navigation_request",
    "quiz_key",
]
