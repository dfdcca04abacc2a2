"""
CLI entry point for chessduel.

Two language models play a game of chess against each other; the board is printed after every move.
"""

import asyncio
from typing import Optional
from uuid import UUID

import click

from chessduel.ai.events import MoveAttemptEvent
from chessduel.ai.manager import AIManager
from chessduel.ai.player import AIChessPlayer
from chessduel.api.models import (
    GameStateResponse,
    SaveCredentialRequest,
    StartMatchRequest,
)
from chessduel.core.config import get_settings
from chessduel.core.exceptions import CatalogError, ChessDuelError
from chessduel.core.logging import setup_logging
from chessduel.db.database import get_db
from chessduel.db.sql_repository import SQLCredentialStore, SQLMatchRepository
from chessduel.services.match_service import MatchService
from chessduel.services.setup_service import SetupService


@click.group()
@click.option(
    "--log-level",
    "-l",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    help="Logging level",
)
@click.option("--log-file", type=click.Path(dir_okay=False), help="Also log to this file")
def main(log_level: Optional[str], log_file: Optional[str]) -> None:
    """chessduel - AI vs AI chess"""
    settings = get_settings()
    setup_logging(log_level or settings.log_level, log_file or settings.log_file)


@main.command()
@click.argument("white_model")
@click.argument("black_model")
@click.option("--fen", help="Start from this position instead of the initial one")
@click.option("--api-key", envvar="OPENROUTER_API_KEY", help="Provider API key")
@click.option("--verbose", "-v", is_flag=True, help="Show every move attempt")
def play(
    white_model: str,
    black_model: str,
    fen: Optional[str],
    api_key: Optional[str],
    verbose: bool,
) -> None:
    """Let WHITE_MODEL play BLACK_MODEL until the game is over."""

    def show_attempt(event: MoveAttemptEvent) -> None:
        if verbose:
            click.echo(
                f"  [{event.model}] #{event.attempt} {event.outcome}"
                + (f": {event.reason}" if event.reason else "")
            )

    def make_player(key: str, model: str) -> AIChessPlayer:
        return AIChessPlayer(key, model, on_event=show_attempt)

    with get_db() as db:
        setup = SetupService(SQLCredentialStore(db))
        key = api_key or setup.restore_api_key()
        if not key:
            raise click.ClickException("No API key given or stored (see `chessduel save-key`).")

        try:
            request = StartMatchRequest(
                api_key=key,
                white_model=white_model,
                black_model=black_model,
                starting_fen=fen,
            )
        except ChessDuelError as exc:
            raise click.ClickException(str(exc)) from exc

        service = MatchService(SQLMatchRepository(db), AIManager(make_player))
        state = service.start(request)
        click.echo(state.board_text)

        def show_move(current: GameStateResponse) -> None:
            click.echo(f"\n{current.move_history[-1]}\n{current.board_text}")

        try:
            asyncio.run(service.run(on_move=show_move))
        except KeyboardInterrupt:
            service.pause()

        final = service.state()
        click.echo(f"\nResult: {final.result} after {len(final.move_history)} plies")
        click.echo(f"FEN: {final.full_fen}")


@main.command()
@click.option("--api-key", envvar="OPENROUTER_API_KEY", help="Provider API key")
def models(api_key: Optional[str]) -> None:
    """List the models suitable for playing, best candidates first."""
    with get_db() as db:
        setup = SetupService(SQLCredentialStore(db))
        try:
            listing = asyncio.run(setup.load_models(api_key))
        except CatalogError as exc:
            raise click.ClickException(exc.classification) from exc
        except ChessDuelError as exc:
            raise click.ClickException(str(exc)) from exc

    for entry in listing.models:
        click.echo(f"{entry.priority:>3}  {entry.id:<50}  {entry.display_name}")
    click.echo(f"{len(listing.models)} models")


@main.command("save-key")
@click.argument("api_key")
def save_key(api_key: str) -> None:
    """Remember the API key for later sessions."""
    with get_db() as db:
        try:
            SetupService(SQLCredentialStore(db)).save_api_key(
                SaveCredentialRequest(api_key=api_key)
            )
        except ChessDuelError as exc:
            raise click.ClickException(str(exc)) from exc
    click.echo("API key saved")


@main.command("forget-key")
def forget_key() -> None:
    """Remove the stored API key."""
    with get_db() as db:
        SetupService(SQLCredentialStore(db)).forget_api_key()
    click.echo("API key removed")


@main.command()
def matches() -> None:
    """Show all recorded matches."""
    with get_db() as db:
        summaries = MatchService(SQLMatchRepository(db)).list_matches()
    for summary in summaries:
        click.echo(
            f"{summary.match_id}  {summary.white_model} vs {summary.black_model}"
            f"  {summary.result}  ({summary.num_moves} plies)"
        )


@main.command()
@click.argument("match_id", type=click.UUID)
def delete(match_id: UUID) -> None:
    """Delete a recorded match."""
    with get_db() as db:
        try:
            MatchService(SQLMatchRepository(db)).delete_match(match_id)
        except ChessDuelError as exc:
            raise click.ClickException(str(exc)) from exc
    click.echo(f"Deleted {match_id}")


if __name__ == "__main__":
    main()
