"""
certstudy CLI: adaptive study sessions from the terminal.

Commands:
    certstudy db init                       - Create database tables
    certstudy study class <class_id> -l L   - Ordered study cards for a class
    certstudy study deck <deck_id> -l L     - Ordered study cards for a deck
    certstudy rate <card_id> <level> -l L   - Save a 1-5 confidence rating
    certstudy quiz <id> <correct> <total>   - Record a completed quiz
    certstudy progress <deck_id> -l L       - Deck progress summary
    certstudy class-progress <id> -l L      - Class progress by deck
    certstudy stats -l L                    - Lifetime totals and day streak
    certstudy serve                         - Run the REST API
"""
from __future__ import annotations

from collections.abc import Callable
from typing import TypeVar
from uuid import UUID

import typer
from loguru import logger
from rich import print as rprint
from rich.console import Console
from rich.table import Table

from certstudy.config import get_settings
from certstudy.core.errors import StudyEngineError
from certstudy.core.log_config import configure_logging
from certstudy.core.mastery import MasteryStatus
from certstudy.core.models import StudyScope
from certstudy.core.modes import QuizTargetKind
from certstudy.db.database import session_scope
from certstudy.study.study_service import StudySelection, StudyService

T = TypeVar("T")

app = typer.Typer(
    help="certstudy CLI: adaptive flashcard study for certification exams",
    no_args_is_help=True,
)

console = Console()

LearnerOption = typer.Option(..., "--learner", "-l", help="Learner identifier")


def _run(action: Callable[[StudyService], T]) -> T:
    """Run ``action`` in one transaction; engine errors exit with status 1."""
    try:
        with session_scope() as session:
            return action(StudyService(session))
    except StudyEngineError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1) from None


def _status_markup(status: MasteryStatus | None) -> str:
    if status is None:
        return "-"
    return f"[{status.color}]{status.emoji} {status.display_name}[/{status.color}]"


def _print_selection(selection: StudySelection) -> None:
    table = Table(
        title=f"{selection.scope_name} - {selection.mode.value} "
        f"({selection.study_cards_count}/{selection.total_cards} cards)"
    )
    table.add_column("#", justify="right", style="dim")
    table.add_column("Deck", style="cyan")
    table.add_column("Question")
    table.add_column("Card ID", style="dim")

    for index, card in enumerate(selection.cards, start=1):
        table.add_row(str(index), card.deck_name or "-", card.question, str(card.id))

    console.print(table)
    if not selection.cards:
        rprint("[yellow]No published cards in scope.[/yellow]")


# ========================================
# Database Commands
# ========================================

db_app = typer.Typer(help="Database management")
app.add_typer(db_app, name="db")


@db_app.command("init")
def db_init() -> None:
    """
    Initialize database tables from SQLAlchemy models.

    Safe to run multiple times (idempotent).
    """
    from certstudy.db.database import init_db

    logger.info("Initializing database tables...")
    init_db()
    rprint("[green]Database tables ready.[/green]")


# ========================================
# Study Commands
# ========================================

study_app = typer.Typer(help="Ordered study cards for a class or deck", no_args_is_help=True)
app.add_typer(study_app, name="study")


@study_app.command("class")
def study_class(
    class_id: UUID = typer.Argument(..., help="Class ID"),
    learner: str = LearnerOption,
    mode: str | None = typer.Option(None, "--mode", "-m", help="progressive, random or all"),
    deck: list[UUID] | None = typer.Option(None, "--deck", "-d", help="Restrict to these decks"),
) -> None:
    """Show the study order for a class."""
    scope = StudyScope.for_class(class_id, deck)
    selection = _run(lambda service: service.get_study_cards(learner, scope, mode))
    _print_selection(selection)


@study_app.command("deck")
def study_deck(
    deck_id: UUID = typer.Argument(..., help="Deck ID"),
    learner: str = LearnerOption,
    mode: str | None = typer.Option(None, "--mode", "-m", help="progressive, random or all"),
) -> None:
    """Show the study order for a deck."""
    scope = StudyScope.for_deck(deck_id)
    selection = _run(lambda service: service.get_study_cards(learner, scope, mode))
    _print_selection(selection)


# ========================================
# Progress Commands
# ========================================


@app.command("rate")
def rate(
    card_id: UUID = typer.Argument(..., help="Flashcard ID"),
    level: int = typer.Argument(..., help="Confidence 1 (no idea) to 5 (certain)"),
    learner: str = LearnerOption,
    session: UUID | None = typer.Option(None, "--session", "-s", help="Study session ID"),
) -> None:
    """Save a confidence rating for a card."""
    snapshot = _run(lambda service: service.rate_card(learner, card_id, level, session_id=session))
    due = snapshot.next_review_due.strftime("%Y-%m-%d %H:%M") if snapshot.next_review_due else "-"
    rprint(
        f"Saved confidence [bold]{snapshot.confidence_level}[/bold] "
        f"({_status_markup(snapshot.mastery_status)}), seen {snapshot.times_seen}x, next review {due}"
    )


@app.command("quiz")
def quiz(
    target_id: UUID = typer.Argument(..., help="Flashcard ID (or deck ID with --deck)"),
    correct: int = typer.Argument(..., help="Correct answers"),
    total: int = typer.Argument(..., help="Questions answered"),
    learner: str = LearnerOption,
    deck: bool = typer.Option(False, "--deck", help="The quiz covered a whole deck"),
) -> None:
    """Record a completed quiz session."""
    kind = QuizTargetKind.DECK if deck else QuizTargetKind.CARD
    aggregate = _run(lambda service: service.complete_quiz(learner, target_id, kind, correct, total))

    table = Table(title=f"Quiz result ({kind.value})")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Score", f"{aggregate.last_score:.2f}%")
    table.add_row("Average", f"{aggregate.average_score:.2f}%")
    table.add_row("Best", f"{aggregate.best_score:.2f}%")
    table.add_row("Times taken", str(aggregate.times_taken))
    if kind == QuizTargetKind.CARD:
        table.add_row("Mastery", _status_markup(aggregate.mastery_status))
    else:
        table.add_row("Deck mastery", f"{aggregate.mastery_percentage:.2f}%")
    console.print(table)


@app.command("progress")
def progress(
    deck_id: UUID = typer.Argument(..., help="Deck ID"),
    learner: str = LearnerOption,
) -> None:
    """Show card mastery counts for a deck."""
    summary = _run(lambda service: service.get_deck_progress(learner, deck_id))

    table = Table(title="Deck progress")
    table.add_column("Status")
    table.add_column("Cards", justify="right")
    for status, count in (
        (MasteryStatus.NEW, summary.cards_new),
        (MasteryStatus.LEARNING, summary.cards_learning),
        (MasteryStatus.MASTERED, summary.cards_mastered),
    ):
        table.add_row(_status_markup(status), str(count))
    table.add_row("[bold]Total[/bold]", str(summary.total_cards))
    console.print(table)

    rprint(f"Mastered: [bold]{summary.mastery_percentage:.2f}%[/bold]")
    if summary.quiz_mastery_percentage is not None:
        rprint(f"Quiz mastery: [bold]{summary.quiz_mastery_percentage:.2f}%[/bold]")


@app.command("class-progress")
def class_progress(
    class_id: UUID = typer.Argument(..., help="Class ID"),
    learner: str = LearnerOption,
) -> None:
    """Show studied cards per deck for a class."""
    summary = _run(lambda service: service.get_class_progress(learner, class_id))

    table = Table(title=f"{summary.class_name} progress")
    table.add_column("Deck", style="cyan")
    table.add_column("Studied", justify="right")
    table.add_column("Cards", justify="right")
    table.add_column("Progress", justify="right")
    for deck in summary.decks:
        table.add_row(deck.name, str(deck.studied_count), str(deck.card_count), f"{deck.progress}%")
    console.print(table)

    rprint(
        f"Studied [bold]{summary.studied_cards}/{summary.total_cards}[/bold] ({summary.progress}%): "
        f"{summary.mastered_cards} mastered, {summary.learning_cards} learning, {summary.new_cards} new"
    )


@app.command("stats")
def stats(learner: str = LearnerOption) -> None:
    """Show lifetime study totals and the day streak."""
    summary = _run(lambda service: service.get_learner_stats(learner))

    hours, remainder = divmod(summary.total_study_time, 3600)
    last_active = summary.last_active_date.strftime("%Y-%m-%d") if summary.last_active_date else "-"

    table = Table(title=f"Study stats: {learner}")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Cards studied", str(summary.total_cards_studied))
    table.add_row("Study time", f"{hours}h {remainder // 60}m")
    table.add_row("Day streak", str(summary.study_streak_days))
    table.add_row("Last active", last_active)
    console.print(table)


# ========================================
# API Server
# ========================================


@app.command("serve")
def serve(
    host: str | None = typer.Option(None, "--host", help="Bind host (default: from config)"),
    port: int | None = typer.Option(None, "--port", help="Bind port (default: from config)"),
    reload: bool = typer.Option(False, "--reload", help="Auto-reload on code changes"),
) -> None:
    """Run the REST API with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "certstudy.api.main:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


def main() -> None:
    """Entry point for the CLI."""
    settings = get_settings()
    configure_logging(settings.log_level, settings.log_file)
    app()


if __name__ == "__main__":
    main()
