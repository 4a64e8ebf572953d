"""
Typer CLI for vocab-mastery.

Commands:
    vocab-mastery init-db                 - Create the mastery tables
    vocab-mastery load-items FILE         - Load vocabulary items from a JSON list
    vocab-mastery due LEARNER             - Show items due for review
    vocab-mastery review LEARNER          - Run an interactive review session
    vocab-mastery stats LEARNER           - Show mastery counts per status

Usage:
    vocab-mastery --help
    vocab-mastery load-items items.json
    vocab-mastery review learner-1 --limit 10 --seed 42
"""

from __future__ import annotations

import asyncio
import json
import random
import time
from collections import Counter
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import TypeVar

import typer
from loguru import logger
from rich import print as rprint
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from vocab_mastery.config import Settings, get_settings
from vocab_mastery.core.clock import utc_now
from vocab_mastery.core.errors import MasteryError
from vocab_mastery.core.logging_setup import setup_logging
from vocab_mastery.core.models import MasteryStatus, SessionSummary, VocabularyItem
from vocab_mastery.exercises.translate import ReviewExercise
from vocab_mastery.integrations.progress_client import ProgressClient
from vocab_mastery.review.queue import ReviewQueueBuilder
from vocab_mastery.rewards.calculator import accuracy_percent
from vocab_mastery.session.runner import SessionKind, SessionRunner
from vocab_mastery.store.mastery_store import MasteryStore
from vocab_mastery.store.repository import ItemFilter
from vocab_mastery.store.sql import SqlMasteryRepository

T = TypeVar("T")

app = typer.Typer(
    help="vocab-mastery: spaced-repetition mastery engine for vocabulary learning",
    no_args_is_help=True,
)

console = Console()


@app.callback()
def main_callback() -> None:
    """Configure logging from settings before any command runs."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_file)


# ========================================
# Helpers
# ========================================


def _open_repository(settings: Settings) -> SqlMasteryRepository:
    if settings.database_url.startswith("sqlite:///"):
        db_path = Path(settings.database_url.removeprefix("sqlite:///"))
        db_path.parent.mkdir(parents=True, exist_ok=True)
    return SqlMasteryRepository.from_url(settings.database_url, echo=settings.database_echo)


def _execute(action: Callable[[SqlMasteryRepository, Settings], Awaitable[T]]) -> T:
    """Run an async command body against the configured repository."""
    settings = get_settings()

    async def runner() -> T:
        repository = _open_repository(settings)
        try:
            return await action(repository, settings)
        finally:
            await repository.dispose()

    try:
        return asyncio.run(runner())
    except MasteryError as e:
        logger.debug(f"Command failed: {e!r}")
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)


def _render_summary(summary: SessionSummary) -> None:
    table = Table(show_header=False, box=None)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Correct", f"{summary.correct}/{summary.total}")
    table.add_row("Accuracy", f"{summary.accuracy}%")
    table.add_row("Time", f"{summary.elapsed_seconds}s")
    table.add_row("XP", f"+{summary.xp_earned}")
    for event in summary.badge_events:
        label = event.kind.value.replace("_", " ")
        table.add_row("Badge event", f"{label} {event.item_id or ''}".strip())
    console.print(Panel(table, title="[bold green]Session complete[/bold green]", border_style="green"))


def _ask(exercise: ReviewExercise, number: int, count: int) -> str | None:
    """Show a review exercise and return the chosen item id (None = skip)."""
    rprint(f"\n[bold cyan]{number}/{count}[/bold cyan]  Translate: [bold]{exercise.prompt}[/bold]")
    for index, option in enumerate(exercise.options, 1):
        rprint(f"  [{index}] {exercise.option_text(option)}")

    choices = [str(i) for i in range(1, len(exercise.options) + 1)] + ["s"]
    answer = Prompt.ask("Your answer ('s' to skip)", choices=choices, console=console)
    if answer == "s":
        return None
    return exercise.options[int(answer) - 1].id


# ========================================
# Commands
# ========================================


@app.command("init-db")
def init_db() -> None:
    """Create the vocabulary and mastery tables if they do not exist."""

    async def action(repository: SqlMasteryRepository, settings: Settings) -> None:
        await repository.init_schema()

    _execute(action)
    rprint("[bold green]✓ Database initialized[/bold green]")


@app.command("load-items")
def load_items(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON list of vocabulary items"),
) -> None:
    """
    Load vocabulary items from a JSON file.

    Each entry needs id, source_text and target_text; image_ref, audio_ref
    and tags are optional. Existing items with the same id are replaced.
    """
    try:
        rows = json.loads(file.read_text(encoding="utf-8"))
        if not isinstance(rows, list):
            raise ValueError("expected a JSON list")
        items = [VocabularyItem.from_dict(row) for row in rows]
    except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
        rprint(f"[red]Error:[/red] invalid item file {file}: {e}")
        raise typer.Exit(code=1)

    async def action(repository: SqlMasteryRepository, settings: Settings) -> int:
        await repository.init_schema()
        return await repository.add_items(items)

    count = _execute(action)
    rprint(f"[green]✓[/green] Loaded {count} vocabulary items")


@app.command("due")
def due(learner: str = typer.Argument(..., help="Learner id")) -> None:
    """Show the learner's due items, oldest first."""

    async def action(repository: SqlMasteryRepository, settings: Settings):
        records = await ReviewQueueBuilder(repository).build_queue(learner, utc_now())
        items = await repository.list_items(ItemFilter(item_ids=frozenset(r.item_id for r in records)))
        return records, {item.id: item for item in items}

    records, items = _execute(action)
    if not records:
        rprint(f"[dim]No reviews due for {learner}[/dim]")
        return

    table = Table(title=f"Due reviews for {learner}", show_header=True)
    table.add_column("Item", style="cyan")
    table.add_column("Word")
    table.add_column("Status")
    table.add_column("Streak", justify="right")
    table.add_column("Due", style="dim")

    for record in records:
        item = items.get(record.item_id)
        word = f"{item.source_text} / {item.target_text}" if item else "[red]missing[/red]"
        status = record.status
        table.add_row(
            record.item_id,
            word,
            f"[{status.color}]{status.display_name}[/{status.color}]",
            str(record.streak),
            record.next_due.strftime("%Y-%m-%d %H:%M") if record.next_due else "-",
        )

    console.print(table)


@app.command("review")
def review(
    learner: str = typer.Argument(..., help="Learner id"),
    limit: int | None = typer.Option(None, "--limit", "-n", help="Maximum exercises (default: all due)"),
    seed: int | None = typer.Option(None, "--seed", help="Seed for reproducible option order"),
    upload: bool = typer.Option(True, "--upload/--no-upload", help="Send the summary to the progress API"),
) -> None:
    """Run an interactive review session over the learner's due items."""

    async def action(repository: SqlMasteryRepository, settings: Settings) -> SessionSummary | None:
        builder = ReviewQueueBuilder(
            repository,
            rng=random.Random(seed),
            max_distractors=settings.max_distractors,
        )
        session_limit = limit if limit is not None else settings.review_session_limit
        session_exercises = await builder.build_session(learner, utc_now(), limit=session_limit)
        if not session_exercises:
            return None

        store = MasteryStore(repository, settings.get_interval_policy())
        runner = SessionRunner(
            store, learner, SessionKind.REVIEW, reward_policy=settings.get_reward_policy()
        )
        runner.start(session_exercises)

        summary = None
        for number, exercise in enumerate(session_exercises, 1):
            started = time.monotonic()
            chosen = _ask(exercise, number, len(session_exercises))
            latency_ms = int((time.monotonic() - started) * 1000)

            if chosen is None:
                await runner.skip(latency_ms)
                rprint(f"[yellow]Skipped.[/yellow] Answer: {exercise.option_text(exercise.item)}")
            else:
                result = await runner.submit(chosen, latency_ms)
                if result.correct:
                    rprint(f"[green]✓ {result.feedback}[/green]")
                else:
                    rprint(f"[red]✗ {result.feedback}[/red] Answer: {result.correct_answer}")
            summary = runner.advance()

        if summary is not None and upload and settings.has_progress_api_configured():
            async with ProgressClient.from_settings(settings) as client:
                await client.upload_summary(summary)
        return summary

    summary = _execute(action)
    if summary is None:
        rprint(f"[dim]No reviews due for {learner}[/dim]")
        return
    _render_summary(summary)


@app.command("stats")
def stats(learner: str = typer.Argument(..., help="Learner id")) -> None:
    """Show how many of the learner's items are in each mastery status."""

    async def action(repository: SqlMasteryRepository, settings: Settings):
        return await repository.list_records(learner)

    records = _execute(action)
    counts = Counter(record.status for record in records)

    table = Table(title=f"Mastery for {learner}", show_header=False)
    table.add_column("Status", style="cyan")
    table.add_column("Count", justify="right")
    for status in MasteryStatus:
        table.add_row(f"[{status.color}]{status.display_name}[/{status.color}]", str(counts[status]))
    table.add_section()
    table.add_row("Total", str(len(records)), style="bold")
    console.print(table)

    correct = sum(r.correct_count for r in records)
    answered = sum(r.total_answers for r in records)
    if answered:
        rprint(f"[dim]Answers: {answered}, correct: {correct} ({accuracy_percent(correct, answered)}%)[/dim]")


def run() -> None:
    app()


if __name__ == "__main__":
    run()
