"""
Progress through a curriculum, measured in units.

One unit per page and one per quiz. Pages before the cursor count fully,
the page on screen does not count yet, a completed quiz counts 1 and the
quiz currently being taken counts 0.5.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass

from src.curriculum.models import Curriculum

from .state import NavigationCursor, QuizResult, quiz_key

IN_PROGRESS_QUIZ_CREDIT = 0.5


@dataclass(frozen=True)
class Progress:
    completed_units: float
    total_units: int

    @property
    def percentage(self) -> float:
        if self.total_units == 0:
            return 0.0
        return self.completed_units / self.total_units * 100

    @property
    def ordinal(self) -> int:
        """1-based number of the unit being worked on."""
        return math.floor(self.completed_units) + 1

    @property
    def label(self) -> str:
        return f"Progress: {self.ordinal} of {self.total_units} sections"

    def to_dict(self) -> dict:
        return {
            "completedUnits": self.completed_units,
            "totalUnits": self.total_units,
            "percentage": self.percentage,
            "ordinal": self.ordinal,
            "label": self.label,
        }


def compute_progress(
    curriculum: Curriculum,
    cursor: NavigationCursor,
    results: Mapping[str, QuizResult],
) -> Progress:
    """
    Derive progress from the cursor and quiz results.

    Pages of the topic at the cursor count up to the last page shown, which
    the cursor keeps while that topic's quiz is being taken. After
    completion every page counts.
    """
    total = 0
    completed = 0.0
    position = (cursor.domain_index, cursor.topic_index)

    for d, t, _domain, topic in curriculum.iter_topics():
        page_count = len(topic.pages)
        total += page_count

        if cursor.completed or (d, t) < position:
            completed += page_count
        elif (d, t) == position:
            completed += min(cursor.page_index, page_count)

        if topic.quiz is None:
            continue
        total += 1
        key = quiz_key(d, t)
        result = results.get(key)
        if result is not None and result.completed:
            completed += 1
        elif cursor.in_quiz and cursor.quiz_key == key:
            completed += IN_PROGRESS_QUIZ_CREDIT

    return Progress(completed_units=completed, total_units=total)
