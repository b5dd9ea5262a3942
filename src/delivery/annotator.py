"""
Tooltip annotator: wrap glossary terms in rendered text with definition spans.

Matching policy:
- Terms are tried longest first, one term at a time, so "access control"
  claims its text before "control" is considered.
- A match must sit on word boundaries on both sides.
- A match that overlaps text already claimed (by a longer term, by an
  annotation span already present in the input, or by an HTML tag) is left
  alone. Claims are tracked as character ranges over the input, so a
  definition can never confuse the overlap check, whatever it contains.

Output markup:
    <span class="tooltip-link" data-term="<term>" data-definition="<escaped>">Label</span>
"""

from __future__ import annotations

import html
import re
from dataclasses import dataclass

from src.curriculum.definitions import DefinitionIndex

SPAN_CLASS = "tooltip-link"

# Regions of the input that must never be rewritten: existing annotation
# spans (whole, including their label) and anything shaped like an HTML tag.
PROTECTED_PATTERN = re.compile(
    rf'<span\s+class="{SPAN_CLASS}"[^>]*>.*?</span>|</?[A-Za-z][^<>]*>',
    re.IGNORECASE | re.DOTALL,
)


@dataclass(frozen=True)
class Annotation:
    """One glossary match in the input text."""

    start: int
    end: int
    term: str
    definition: str


def escape_attribute(value: str) -> str:
    """Escape &, <, >, " and ' for use inside a double-quoted attribute."""
    return html.escape(value, quote=True)


class TooltipAnnotator:
    """Pure text → markup rewriter over a DefinitionIndex."""

    def __init__(self, definitions: DefinitionIndex):
        self.definitions = definitions
        self._patterns: dict[str, re.Pattern[str]] = {}

    def _pattern(self, term: str) -> re.Pattern[str]:
        pattern = self._patterns.get(term)
        if pattern is None:
            pattern = re.compile(rf"(?<!\w){re.escape(term)}(?!\w)", re.IGNORECASE)
            self._patterns[term] = pattern
        return pattern

    def find_annotations(self, text: str) -> list[Annotation]:
        """
        Locate every glossary match that would be wrapped.

        Args:
            text: Input text, possibly containing inline markup

        Returns:
            Non-overlapping annotations ordered by position
        """
        if not isinstance(text, str) or not text:
            return []

        claimed = [(match.start(), match.end()) for match in PROTECTED_PATTERN.finditer(text)]
        annotations: list[Annotation] = []

        for term in self.definitions.all_terms():
            for match in self._pattern(term).finditer(text):
                start, end = match.span()
                if any(start < c_end and c_start < end for c_start, c_end in claimed):
                    continue
                definition = self.definitions.lookup(match.group(0).lower())
                if not definition:
                    continue
                claimed.append((start, end))
                annotations.append(Annotation(start=start, end=end, term=term, definition=definition))

        annotations.sort(key=lambda item: item.start)
        return annotations

    def annotate(self, text):
        """
        Rewrite ``text`` with tooltip spans around glossary terms.

        Non-string or empty input is returned unchanged. The matched text keeps
        its original casing as the visible label.
        """
        if not isinstance(text, str) or not text:
            return text

        pieces = []
        position = 0
        for item in self.find_annotations(text):
            pieces.append(text[position : item.start])
            pieces.append(self.render_span(item.term, item.definition, text[item.start : item.end]))
            position = item.end
        pieces.append(text[position:])
        return "".join(pieces)

    @staticmethod
    def render_span(term: str, definition: str, label: str) -> str:
        return (
            f'<span class="{SPAN_CLASS}" data-term="{escape_attribute(term.lower())}" '
            f'data-definition="{escape_attribute(definition)}">{label}</span>'
        )


def annotate(text, definitions: DefinitionIndex):
    """One-shot helper: annotate ``text`` against ``definitions``."""
    return TooltipAnnotator(definitions).annotate(text)
