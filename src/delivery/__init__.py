"""
Delivery: turn session state and page content into displayable data.

- annotator: glossary tooltip injection into page text
- renderer: pure render(session) -> ViewModel
"""

from .annotator import Annotation, TooltipAnnotator, annotate, escape_attribute
from .renderer import (
    CompletionView,
    PageView,
    QuizView,
    SidebarEntry,
    ViewModel,
    format_block,
    format_blocks,
    render,
)

__all__ = [
    "Annotation",
    "CompletionView",
    "PageView",
    "QuizView",
    "SidebarEntry",
    "TooltipAnnotator",
    "ViewModel",
    "annotate",
    "escape_attribute",
    "format_block",
    "format_blocks",
    "render",
]
