"""
examdeck CLI - Terminal front end for the study platform.

Usage:
    examdeck validate              # Load and validate the content tree
    examdeck outline               # Show domains, topics and pages
    examdeck study                 # Study from the first page
    examdeck study -d 1 -t 0 -p 2  # Start at a specific page
    examdeck study -d 0 -t 1 --quiz
    examdeck prefs --dark          # Display preferences
    examdeck serve                 # Run the JSON content API
"""

from __future__ import annotations

import asyncio
from datetime import timedelta
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from config import Settings, configure_logging, get_settings
from src.curriculum.errors import CurriculumError
from src.curriculum.loader import HierarchyLoader
from src.curriculum.models import (
    CodeBlock,
    Curriculum,
    HeadingBlock,
    ListBlock,
    Page,
    ParagraphBlock,
)
from src.curriculum.store import FileResourceStore
from src.delivery.annotator import TooltipAnnotator
from src.delivery.renderer import CompletionView, PageView, QuizView, ViewModel, render
from src.study.navigation import PendingAdvance, StudySession
from src.study.scheduler import AutoAdvanceScheduler
from src.study.state import NavigationRequest, PageState
from src.study.studied import JsonFileKeyValueStore, StudiedPagesTracker, StudyPreferences

# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="examdeck",
    help="examdeck - self-paced exam study in the terminal",
    add_completion=False,
    rich_markup_mode="rich",
)

console = Console()

DataDirOption = Annotated[
    Path | None, typer.Option("--data-dir", help="Content root (default: DATA_DIR setting)")
]


@app.callback()
def main_callback() -> None:
    """Configure logging before any command runs."""
    configure_logging(get_settings())


def _load(settings: Settings, data_dir: Path | None) -> Curriculum:
    """Load the curriculum or exit with the load error."""
    store = FileResourceStore(data_dir or settings.data_dir)
    try:
        return HierarchyLoader(store, default_domain_order=settings.default_domain_order).load()
    except CurriculumError as e:
        console.print(f"[red]✗ Failed to load study materials:[/] {e.message}")
        raise typer.Exit(code=1)


def _state_store(settings: Settings) -> JsonFileKeyValueStore:
    return JsonFileKeyValueStore(settings.state_file)


# =============================================================================
# Content Commands
# =============================================================================


@app.command()
def validate(data_dir: DataDirOption = None) -> None:
    """
    Load the content tree and report what was assembled.

    Exits with status 1 if a required resource is missing or any present
    resource is malformed.
    """
    settings = get_settings()
    curriculum = _load(settings, data_dir)

    table = Table(title=curriculum.guideline.exam)
    table.add_column("Order", justify="right")
    table.add_column("Domain")
    table.add_column("Topics", justify="right")
    table.add_column("Pages", justify="right")
    table.add_column("Quizzes", justify="right")
    table.add_column("Questions", justify="right")

    for domain in curriculum.domains:
        quizzes = [topic.quiz for topic in domain.topics if topic.quiz is not None]
        table.add_row(
            str(domain.order),
            domain.title,
            str(len(domain.topics)),
            str(sum(len(topic.pages) for topic in domain.topics)),
            str(len(quizzes)),
            str(sum(len(quiz.questions) for quiz in quizzes)),
        )
    console.print(table)

    loaded = {domain.id for domain in curriculum.domains}
    skipped = [entry.id for entry in curriculum.guideline.domains if entry.id not in loaded]
    if skipped:
        console.print(f"[yellow]Skipped domains without content:[/] {', '.join(skipped)}")

    console.print(
        f"[green]✓ Content valid[/] - {curriculum.total_units} study units, "
        f"{len(curriculum.definitions)} glossary terms"
    )


@app.command()
def outline(data_dir: DataDirOption = None) -> None:
    """Show the domain → topic → page outline with studied pages marked."""
    settings = get_settings()
    curriculum = _load(settings, data_dir)
    tracker = StudiedPagesTracker(_state_store(settings))
    studied = tracker.all()

    tree = Tree(f"[bold]{curriculum.guideline.exam}[/]")
    for d, domain in enumerate(curriculum.domains):
        domain_node = tree.add(f"[cyan]{domain.title}[/]")
        for t, topic in enumerate(domain.topics):
            topic_node = domain_node.add(topic.title)
            seen = set(studied.get(f"{d}-{t}", []))
            for p, page in enumerate(topic.pages):
                mark = "[green]✓[/]" if p in seen else " "
                topic_node.add(f"{mark} {page.title}")
            if topic.quiz is not None:
                topic_node.add(f"[magenta]Quiz ({len(topic.quiz.questions)} questions)[/]")
    console.print(tree)


# =============================================================================
# Study Commands
# =============================================================================


def _page_text(text: str, annotator: TooltipAnnotator, highlight: str, glossary: dict[str, str]) -> Text:
    """Plain text with glossary matches highlighted; collects the matched terms."""
    rendered = Text(text)
    for item in annotator.find_annotations(text):
        rendered.stylize(highlight, item.start, item.end)
        glossary[item.term] = item.definition
    return rendered


def _show_page(
    page: Page, view: PageView, annotator: TooltipAnnotator, preferences: StudyPreferences
) -> None:
    highlight = "bold yellow" if preferences.dark_mode else "bold blue"
    glossary: dict[str, str] = {}

    console.rule(f"[bold]{escape(view.heading)}[/]")
    console.print(f"[dim]Page {view.page_number} of {view.total_pages}[/] · {escape(page.title)}\n")
    for block in page.blocks:
        if isinstance(block, HeadingBlock):
            console.print(Text(block.text, style="bold underline"))
        elif isinstance(block, ParagraphBlock):
            console.print(_page_text(block.text, annotator, highlight, glossary))
        elif isinstance(block, ListBlock):
            for number, item in enumerate(block.items, start=1):
                bullet = f"{number}. " if block.ordered else "• "
                console.print(Text(bullet) + _page_text(item, annotator, highlight, glossary))
        elif isinstance(block, CodeBlock):
            console.print(Panel(Text(block.text), border_style="dim"))
        else:
            console.print(Text(block.text))
        console.print()

    if glossary:
        table = Table(title="Key terms", show_header=False, box=None)
        for term, definition in glossary.items():
            table.add_row(Text(term, style=highlight), Text(definition))
        console.print(table)


def _current_page(session: StudySession) -> Page:
    state = session.state
    if not isinstance(state, PageState):
        raise RuntimeError("no page on screen")
    topic = session.curriculum.topic_at(state.domain_index, state.topic_index)
    return topic.pages[state.page_index]


def _show_sidebar(model: ViewModel) -> None:
    lines = []
    for entry in model.sidebar:
        marker = "▶" if entry.active else ("✓" if entry.completed else " ")
        lines.append(f"{marker} {escape(entry.domain_title)} / {escape(entry.title)}")
    console.print(Panel("\n".join(lines), title="Topics", border_style="dim"))


def _show_quiz(view: QuizView) -> None:
    console.rule(f"[bold magenta]Quiz: {escape(view.topic_title)}[/]")
    console.print(f"[dim]Question {view.question_number} of {view.total_questions}[/]")
    console.print(f"\n[bold]{escape(view.question)}[/]\n")
    for number, option in enumerate(view.options, start=1):
        console.print(f"  {number}. {escape(option)}")


def _show_completion(view: CompletionView) -> None:
    console.print(Panel("[bold green]You have reached the end of the material.[/]", title="Complete"))
    if not view.results:
        return
    table = Table(title="Your Results")
    table.add_column("Topic")
    table.add_column("Score", justify="right")
    for item in view.results:
        table.add_row(
            f"{item['domain']} - {item['topic']}",
            f"{item['correct']}/{item['total']} correct ({item['percentage']}%)",
        )
    console.print(table)


async def _auto_advance(session: StudySession, pending: PendingAdvance, delay: float) -> bool:
    scheduler = AutoAdvanceScheduler(session, delay)
    return await scheduler.schedule(pending)


@app.command()
def study(
    domain: Annotated[int, typer.Option("--domain", "-d", help="Domain index")] = 0,
    topic: Annotated[int, typer.Option("--topic", "-t", help="Topic index within the domain")] = 0,
    page: Annotated[int, typer.Option("--page", "-p", help="Page index within the topic")] = 0,
    quiz: Annotated[bool, typer.Option("--quiz", "-q", help="Start at the topic's quiz")] = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Study page by page, then take each topic's quiz.

    Examples:
        examdeck study                 # From the beginning
        examdeck study -d 1 -t 2       # Domain 1, topic 2
        examdeck study -d 0 -t 0 -q    # Straight to a quiz
    """
    settings = get_settings()
    curriculum = _load(settings, data_dir)
    store = _state_store(settings)
    tracker = StudiedPagesTracker(store, ttl=timedelta(days=settings.studied_ttl_days))
    preferences = StudyPreferences(store)
    annotator = TooltipAnnotator(curriculum.definitions)

    session = StudySession(curriculum, tracker=tracker)
    session.start(NavigationRequest(domain, topic, page, quiz))

    while True:
        model = render(session, annotator, tracker)
        view = model.view
        console.print(f"\n[dim]{model.progress.label} ({model.progress.percentage:.0f}%)[/]")

        if isinstance(view, CompletionView):
            _show_completion(view)
            return

        if isinstance(view, PageView):
            if not preferences.sidebar_hidden:
                _show_sidebar(model)
            _show_page(_current_page(session), view, annotator, preferences)

            choices = ["n", "q"] + (["p"] if view.can_go_back else [])
            hint = f"[n] {view.next_label}" + ("  [p] ← Previous" if view.can_go_back else "") + "  [q] Quit"
            choice = Prompt.ask(escape(hint), choices=choices, default="n", show_choices=False)
            if choice == "q":
                return
            if choice == "p":
                session.previous()
            else:
                session.next()
            continue

        _show_quiz(view)
        answer = Prompt.ask(
            "Your answer (number, or q to quit)",
            choices=[str(n) for n in range(1, len(view.options) + 1)] + ["q"],
            show_choices=False,
        )
        if answer == "q":
            return
        feedback = session.answer(int(answer) - 1)
        if feedback is not None:
            style = "green" if feedback.correct else "red"
            console.print(
                Panel(
                    Text(feedback.explanation),
                    border_style=style,
                    title="Correct" if feedback.correct else "Incorrect",
                )
            )

        Prompt.ask("[dim]Press Enter to continue[/]", default="", show_default=False)
        outcome = session.next_question()
        if isinstance(outcome, PendingAdvance):
            result = session.result_for(session.cursor.domain_index, session.cursor.topic_index)
            if result is not None:
                console.print(
                    f"[bold]Quiz complete:[/] {result.correct_count}/{result.total_answered} "
                    f"correct ({result.percentage}%)"
                )
            with console.status("Moving on..."):
                asyncio.run(_auto_advance(session, outcome, settings.quiz_advance_delay_seconds))


@app.command()
def prefs(
    dark: Annotated[
        bool | None, typer.Option("--dark/--light", help="Dark mode highlight colours")
    ] = None,
    sidebar: Annotated[
        bool | None, typer.Option("--sidebar/--no-sidebar", help="Show the topic sidebar while studying")
    ] = None,
) -> None:
    """Show or change display preferences."""
    settings = get_settings()
    preferences = StudyPreferences(
        _state_store(settings), ttl=timedelta(days=settings.studied_ttl_days)
    )
    if dark is not None:
        preferences.dark_mode = dark
    if sidebar is not None:
        preferences.sidebar_hidden = not sidebar

    console.print(f"Dark mode: {'on' if preferences.dark_mode else 'off'}")
    console.print(f"Sidebar:   {'hidden' if preferences.sidebar_hidden else 'shown'}")


@app.command()
def serve(
    host: Annotated[str | None, typer.Option("--host", help="Bind address")] = None,
    port: Annotated[int | None, typer.Option("--port", help="Bind port")] = None,
) -> None:
    """Run the read-only JSON content API."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "src.api.main:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        log_level=settings.log_level.lower(),
    )


def run() -> None:
    """Console script entry point."""
    app()


if __name__ == "__main__":
    run()
