"""
Pure rendering: session state in, view model out.

The presentation layer (terminal UI, templates, a browser client) consumes
these dataclasses; nothing here touches a display.
"""

from __future__ import annotations

import html
from dataclasses import asdict, dataclass, field
from typing import Union

from src.curriculum.models import (
    CodeBlock,
    ContentBlock,
    FallbackBlock,
    HeadingBlock,
    ListBlock,
    ParagraphBlock,
)
from src.study.navigation import AnswerFeedback, StudySession
from src.study.progress import Progress, compute_progress
from src.study.state import PageState, QuizState, quiz_key
from src.study.studied import StudiedPagesTracker

from .annotator import TooltipAnnotator

NEXT_PAGE_LABEL = "Next →"
QUIZ_LABEL = "Proceed to Quiz →"
NEXT_TOPIC_LABEL = "Next Topic →"


# ========================================
# View Models
# ========================================


@dataclass(frozen=True)
class PageView:
    heading: str
    page_title: str
    html: str
    page_number: int
    total_pages: int
    can_go_back: bool
    next_action: str  # "next-page" | "quiz" | "next-topic"
    next_label: str
    kind: str = "page"


@dataclass(frozen=True)
class QuizView:
    topic_title: str
    question_number: int
    total_questions: int
    question: str
    options: tuple[str, ...]
    answered: bool = False
    feedback: AnswerFeedback | None = None
    finished: bool = False
    kind: str = "quiz"


@dataclass(frozen=True)
class CompletionView:
    results: tuple[dict, ...] = ()
    kind: str = "completion"


@dataclass(frozen=True)
class SidebarEntry:
    domain_index: int
    topic_index: int
    domain_title: str
    title: str
    active: bool = False
    completed: bool = False
    studied_pages: tuple[int, ...] = ()


@dataclass(frozen=True)
class ViewModel:
    view: Union[PageView, QuizView, CompletionView]
    progress: Progress
    sidebar: tuple[SidebarEntry, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {
            "view": asdict(self.view),
            "progress": self.progress.to_dict(),
            "sidebar": [asdict(entry) for entry in self.sidebar],
        }


# ========================================
# Content Formatting
# ========================================


def format_block(block: ContentBlock, annotator: TooltipAnnotator) -> str:
    """
    Render one content block to HTML.

    Paragraph and list text is authored inline markup and gets glossary
    annotation; headings, code and fallback text are escaped.
    """
    if isinstance(block, HeadingBlock):
        return f"<h3>{html.escape(block.text)}</h3>"
    if isinstance(block, ParagraphBlock):
        return f"<p>{annotator.annotate(block.text)}</p>"
    if isinstance(block, ListBlock):
        tag = "ol" if block.ordered else "ul"
        items = "".join(f"<li>{annotator.annotate(item)}</li>" for item in block.items)
        return f"<{tag}>{items}</{tag}>"
    if isinstance(block, CodeBlock):
        return f"<code>{html.escape(block.text)}</code>"
    if isinstance(block, FallbackBlock):
        return f"<p>{html.escape(block.text)}</p>"
    return f"<p>{html.escape(str(block))}</p>"


def format_blocks(blocks, annotator: TooltipAnnotator) -> str:
    return "".join(format_block(block, annotator) for block in blocks)


# ========================================
# Rendering
# ========================================


def _render_page(session: StudySession, state: PageState, annotator: TooltipAnnotator) -> PageView:
    domain = session.curriculum.domains[state.domain_index]
    topic = domain.topics[state.topic_index]
    page = topic.pages[state.page_index]

    if state.page_index < len(topic.pages) - 1:
        next_action, next_label = "next-page", NEXT_PAGE_LABEL
    elif topic.quiz is not None:
        next_action, next_label = "quiz", QUIZ_LABEL
    else:
        next_action, next_label = "next-topic", NEXT_TOPIC_LABEL

    return PageView(
        heading=f"{domain.title} - {topic.title}",
        page_title=page.title,
        html=format_blocks(page.blocks, annotator),
        page_number=state.page_index + 1,
        total_pages=len(topic.pages),
        can_go_back=state.page_index > 0,
        next_action=next_action,
        next_label=next_label,
    )


def _render_quiz(session: StudySession, state: QuizState) -> QuizView:
    topic = session.curriculum.topic_at(state.domain_index, state.topic_index)
    question = topic.quiz.questions[state.question_index]
    feedback = session.feedback
    return QuizView(
        topic_title=topic.title,
        question_number=state.question_index + 1,
        total_questions=len(topic.quiz.questions),
        question=question.text,
        options=question.options,
        answered=feedback is not None,
        feedback=feedback,
        finished=session.pending_advance is not None,
    )


def render_sidebar(
    session: StudySession, tracker: StudiedPagesTracker | None = None
) -> tuple[SidebarEntry, ...]:
    state = session.state
    studied = tracker.all() if tracker is not None else {}
    entries = []
    for d, t, domain, topic in session.curriculum.iter_topics():
        result = session.results.get(quiz_key(d, t))
        entries.append(
            SidebarEntry(
                domain_index=d,
                topic_index=t,
                domain_title=domain.title,
                title=topic.title,
                active=isinstance(state, PageState)
                and (state.domain_index, state.topic_index) == (d, t),
                completed=result is not None and result.completed,
                studied_pages=tuple(sorted(studied.get(quiz_key(d, t), []))),
            )
        )
    return tuple(entries)


def render(
    session: StudySession,
    annotator: TooltipAnnotator | None = None,
    tracker: StudiedPagesTracker | None = None,
) -> ViewModel:
    """Build the complete view model for the session's current state."""
    annotator = annotator or TooltipAnnotator(session.curriculum.definitions)
    tracker = tracker or session.tracker
    state = session.state

    if isinstance(state, PageState):
        view = _render_page(session, state, annotator)
    elif isinstance(state, QuizState):
        view = _render_quiz(session, state)
    else:
        view = CompletionView(results=tuple(item.to_dict() for item in session.results_summary()))

    return ViewModel(
        view=view,
        progress=compute_progress(session.curriculum, session.cursor, session.results),
        sidebar=render_sidebar(session, tracker),
    )
