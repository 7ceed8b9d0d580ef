"""CLI commands for clock."""

from dataclasses import dataclass
from datetime import timedelta
from typing import Callable

import typer
from loguru import logger
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from clock import __logo__, __version__
from clock.config.loader import get_ledger_path, load_settings
from clock.config.schema import Settings
from clock.errors import AlreadyClockedInError, ClockError, LedgerStorageError
from clock.ledger.aggregator import render_day, summarize_day
from clock.ledger.resolver import Resolver, Validator
from clock.ledger.storage import LedgerStorage
from clock.ledger.store import LedgerStore
from clock.ledger.timeutil import Clock, format_clock, local_date, utc_now
from clock.logging_config import setup_logging

app = typer.Typer(
    name="clock",
    help=f"{__logo__} clock - personal work-time ledger",
)

console = Console()


@dataclass
class Runtime:
    """Per-invocation state built by the root callback."""
    settings: Settings
    clock: Clock

    @property
    def storage(self) -> LedgerStorage:
        return LedgerStorage(get_ledger_path(self.settings), tz=self.settings.tz)

    def store(self, storage: LedgerStorage) -> LedgerStore:
        return LedgerStore(storage.load(), tz=self.settings.tz, clock=self.clock)


def version_callback(value: bool):
    if value:
        console.print(f"{__logo__} clock v{__version__}")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        None, "--version", "-V", callback=version_callback, is_eager=True
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """clock - record clock-in, clock-out and breaks per project."""
    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help(), highlight=False)
        raise typer.Exit(2)

    try:
        settings = load_settings()
    except ValidationError as e:
        console.print(f"[red]Error: invalid configuration: {escape(str(e))}[/red]")
        raise typer.Exit(2)
    setup_logging("DEBUG" if verbose else settings.log_level)
    logger.debug(f"Starting clock {ctx.invoked_subcommand} with {settings.model_dump()}")
    ctx.obj = Runtime(settings=settings, clock=utc_now)


# ============================================================================
# Shared helpers
# ============================================================================


def _fail(e: ClockError) -> None:
    """Report an error and exit: storage problems are fatal (2), the rest 1."""
    console.print(f"[red]Error: {escape(str(e))}[/red]")
    raise typer.Exit(2 if isinstance(e, LedgerStorageError) else 1)


def _mutate(ctx: typer.Context, action: Callable[[LedgerStore], str | None]) -> None:
    """Load, apply one mutation, save. Nothing is saved if the action fails."""
    runtime: Runtime = ctx.obj
    storage = runtime.storage
    try:
        store = runtime.store(storage)
        message = action(store)
        storage.save(store.ledger)
    except ClockError as e:
        _fail(e)
        return
    if message:
        console.print(message, highlight=False)


def _project_note(project: str | None) -> str:
    return f" (project {escape(project)})" if project is not None else ""


def _ask(message: str, validate: Validator) -> str:
    """Prompt until `validate` accepts the answer."""
    def value_proc(text: str) -> str:
        try:
            validate(text)
        except ClockError as e:
            raise typer.BadParameter(str(e))
        return text

    return typer.prompt(message, value_proc=value_proc)


# ============================================================================
# Commands
# ============================================================================


@app.command("in")
def clock_in(
    ctx: typer.Context,
    project: str = typer.Option(None, "--project", "-p", help="Project label"),
):
    """Clock in now."""
    def action(store: LedgerStore) -> str:
        now = store.clock()
        existing = store.find_open_entry(project, local_date(now, store.tz))
        if existing is not None:
            raise AlreadyClockedInError(project, format_clock(existing.timestamp, store.tz))
        store.open(project, now)
        return f"[green]✓[/green] Clocked in at {format_clock(now, store.tz)}{_project_note(project)}"

    _mutate(ctx, action)


@app.command("out")
def clock_out(
    ctx: typer.Context,
    project: str = typer.Option(None, "--project", "-p", help="Project label"),
):
    """Clock out of today's open session."""
    def action(store: LedgerStore) -> str:
        event = store.close(project)
        return f"[green]✓[/green] Clocked out at {format_clock(event.timestamp, store.tz)}{_project_note(project)}"

    _mutate(ctx, action)


@app.command("break")
def take_break(
    ctx: typer.Context,
    project: str = typer.Option(None, "--project", "-p", help="Project label"),
):
    """Record a break (counted as a fixed deduction)."""
    runtime: Runtime = ctx.obj

    def action(store: LedgerStore) -> str:
        store.record_break(project)
        return f"[green]✓[/green] Break recorded ({runtime.settings.break_minutes} mins){_project_note(project)}"

    _mutate(ctx, action)


@app.command("list")
def list_days(
    ctx: typer.Context,
    limit: int = typer.Option(None, "--limit", "-n", min=1, help="Number of days to show [default: 5]"),
    project: str = typer.Option(None, "--project", "-p", help="Only this project"),
):
    """Show worked and break time for the most recent days."""
    runtime: Runtime = ctx.obj
    if limit is None:
        limit = runtime.settings.list_limit

    try:
        store = runtime.store(runtime.storage)
    except ClockError as e:
        _fail(e)
        return

    days = store.recent(limit, project)
    if not days:
        console.print("No entries yet.")
        return

    now = store.clock()
    break_duration = timedelta(minutes=runtime.settings.break_minutes)
    blocks = []
    for bucket in days:
        summary = summarize_day(bucket, project, now=now, tz=store.tz, break_duration=break_duration)
        blocks.append(render_day(summary, bucket.events, store.tz))

    console.print("\n\n".join(blocks), highlight=False, markup=False)


@app.command("resolve")
def resolve(ctx: typer.Context):
    """Fill in missing clock-out times."""
    runtime: Runtime = ctx.obj
    storage = runtime.storage
    try:
        store = runtime.store(storage)
        resolver = Resolver(store, ask=_ask, echo=lambda text: console.print(text, highlight=False, markup=False))
        resolved = resolver.run()
        if resolved:
            storage.save(store.ledger)
    except ClockError as e:
        _fail(e)
        return

    if resolved:
        console.print(f"[green]✓[/green] Resolved {len(resolved)} session(s)")


if __name__ == "__main__":
    app()
