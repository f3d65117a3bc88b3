"""CLI interface for mindful-journal."""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.table import Table

from mindful_journal.backend import create_supabase
from mindful_journal.browser import mood_emoji
from mindful_journal.config import load_config, merge_cli_overrides
from mindful_journal.controller import Confirmer, Notifier, SessionController
from mindful_journal.errors import ConfigError
from mindful_journal.identity import SupabaseIdentityGateway
from mindful_journal.models import Mood
from mindful_journal.reflection import ReflectionGenerator
from mindful_journal.repository import EntryRepository
from mindful_journal.store import SupabaseEntryStore
from mindful_journal.views import TerminalApp

app = typer.Typer(
    name="mindful-journal",
    help="Write mood-tagged journal entries and reflect on them.",
)

console = Console()

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from mindful_journal import __version__

        console.print(f"mindful-journal {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """Mindful Journal - a private, mood-tagged diary."""
    pass


@app.command(name="run")
def run_cmd(
    config_path: Annotated[
        Optional[Path],
        typer.Option(
            "--config",
            "-c",
            help="Path to a .mindful-journal.toml file.",
        ),
    ] = None,
    model: Annotated[
        str | None,
        typer.Option(
            "--model",
            help="Gemini model used for reflections.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            help="Log debug output to stderr.",
        ),
    ] = False,
) -> None:
    """Open the journal.

    Resumes the previous session when there is one, otherwise asks you to
    log in or register.
    """
    config = merge_cli_overrides(
        load_config(config_path),
        model=model,
        log_level="DEBUG" if verbose else None,
    )
    logging.basicConfig(level=config.logging.level.upper(), format=LOG_FORMAT)

    try:
        client = create_supabase(config)
    except ConfigError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1)

    gateway = SupabaseIdentityGateway(client)
    repository = EntryRepository(SupabaseEntryStore(client, table=config.supabase.table))
    generator = ReflectionGenerator(config.reflection)
    if not generator.is_configured():
        console.print("[dim]AI reflections are off: no Google AI API key configured.[/dim]")

    def build_controller(notify: Notifier, confirm: Confirmer) -> SessionController:
        return SessionController(gateway, repository, notify=notify, confirm=confirm)

    TerminalApp(build_controller, generator=generator, console=console).run()


@app.command(name="moods")
def moods_cmd() -> None:
    """List the moods an entry can be tagged with."""
    table = Table(title="Moods")
    table.add_column("Mood")
    table.add_column("")
    for mood in Mood:
        label = f"{mood.value} (default)" if mood == Mood.NEUTRAL else mood.value
        table.add_row(label, mood_emoji(mood))
    console.print(table)


if __name__ == "__main__":
    app()
