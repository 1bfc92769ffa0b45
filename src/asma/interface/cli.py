"""asma CLI: practice sessions, answer checking, ratings and progress."""

import asyncio
import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Annotated

import click
import typer
from pydantic import ValidationError

from asma.application.config import resolve_config
from asma.application.factory import get_practice_service
from asma.application.practice_service import PracticeService
from asma.application.session_composer import SessionOrdering
from asma.domain.models import MemoryState, SessionItem

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="asma: spaced-repetition practice for the 99 Names.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(help="Manage asma configuration.")
app.add_typer(config_app, name="config")

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

_LOG_LEVELS = {0: logging.WARNING, 1: logging.INFO}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _service(ctx: typer.Context) -> PracticeService:
    obj = ctx.obj or {}
    try:
        config = resolve_config(
            {
                "state_dir": obj.get("state_dir"),
                "user_id": obj.get("user_id"),
                "catalog_source": obj.get("catalog_source"),
            }
        )
    except ValidationError as e:
        typer.secho(f"Invalid configuration: {e}", fg="red")
        raise typer.Exit(1) from None
    return get_practice_service(config)


def _configured_verbosity() -> int:
    try:
        return resolve_config().verbose
    except ValidationError:
        # Reported by the command itself
        return 1


def _describe_state(state: MemoryState) -> str:
    return (
        f"stage={state.stage.value} interval={state.interval}d "
        f"ease={state.ease_factor:.2f} streak={state.consecutive_correct} "
        f"next={state.next_review:%Y-%m-%d %H:%M}"
    )


def _session_row(entry: SessionItem) -> dict:
    return {
        "item_id": entry.item.id,
        "name": entry.item.name,
        "arabic": entry.item.arabic,
        "type": entry.item_type.value,
        "priority": entry.priority,
        "stage": entry.state.stage.value if entry.state else "new",
    }


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase verbosity. Repeat for more detail."
        ),
    ] = 0,
    state_dir: Annotated[
        Path | None, typer.Option(help="Directory holding progress files.")
    ] = None,
    user: Annotated[str | None, typer.Option(help="Progress profile to use.")] = None,
    catalog: Annotated[
        str | None,
        typer.Option(help="Catalog source: bundled or remote."),
    ] = None,
):
    """Global settings for asma."""
    ctx.ensure_object(dict)
    level = _LOG_LEVELS.get(verbose or _configured_verbosity(), logging.DEBUG)
    logging.getLogger().setLevel(level)
    ctx.obj["state_dir"] = state_dir
    ctx.obj["user_id"] = user
    ctx.obj["catalog_source"] = catalog


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command()
def session(
    ctx: typer.Context,
    seconds: Annotated[
        int | None, typer.Option("--seconds", "-s", help="Target session length in seconds.")
    ] = None,
    ordering: Annotated[
        SessionOrdering | None, typer.Option(help="Arrange item types grouped or interleaved.")
    ] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Show the items the next practice session would contain."""
    service = _service(ctx)
    entries = asyncio.run(service.build_session(_now(), seconds, ordering))

    if json_output:
        typer.echo(json.dumps([_session_row(e) for e in entries], indent=2, ensure_ascii=False))
        return

    typer.echo(f"Session: {len(entries)} items")
    for i, entry in enumerate(entries, start=1):
        typer.echo(
            f"  {i:>2}. [{entry.item_type.value}] #{entry.item.id} {entry.item.name}"
            f"  (priority {entry.priority})"
        )


@app.command()
def check(
    ctx: typer.Context,
    item_id: Annotated[int, typer.Argument(help="Catalog number of the name.")],
    answer: Annotated[str, typer.Argument(help="Your answer.")],
):
    """Check an answer without recording a review."""
    service = _service(ctx)
    try:
        item = asyncio.run(service.get_item(item_id))
    except KeyError as e:
        typer.secho(str(e.args[0]), fg="red")
        raise typer.Exit(1) from None

    if service.check_answer(answer, item):
        typer.secho(f"Correct: {item.name}", fg="green")
    else:
        typer.secho(f"Incorrect: expected {item.name}", fg="yellow")


@app.command()
def answer(
    ctx: typer.Context,
    item_id: Annotated[int, typer.Argument(help="Catalog number of the name.")],
    text: Annotated[str, typer.Argument(help="Your answer.")],
):
    """Check an answer and record the review (quality 4 if correct, 2 if not)."""
    service = _service(ctx)
    try:
        correct, state = asyncio.run(service.answer(item_id, text, _now()))
    except KeyError as e:
        typer.secho(str(e.args[0]), fg="red")
        raise typer.Exit(1) from None

    typer.secho("Correct" if correct else "Incorrect", fg="green" if correct else "yellow")
    typer.echo(_describe_state(state))


@app.command()
def rate(
    ctx: typer.Context,
    item_id: Annotated[int, typer.Argument(help="Catalog number of the name.")],
    quality: Annotated[
        int, typer.Argument(help="Recall quality 0-5 (>= 3 counts as correct).")
    ],
):
    """Record a self-assessed review."""
    service = _service(ctx)
    try:
        state = asyncio.run(service.rate(item_id, quality, _now()))
    except KeyError as e:
        typer.secho(str(e.args[0]), fg="red")
        raise typer.Exit(1) from None

    typer.echo(_describe_state(state))


@app.command()
def reset(
    ctx: typer.Context,
    item_id: Annotated[int, typer.Argument(help="Catalog number of the name.")],
):
    """Return a name to the new stage."""
    service = _service(ctx)
    try:
        asyncio.run(service.reset_item(item_id, _now()))
    except KeyError as e:
        typer.secho(str(e.args[0]), fg="red")
        raise typer.Exit(1) from None

    typer.secho(f"Reset #{item_id}", fg="green")


@app.command()
def stats(
    ctx: typer.Context,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Show learning progress across all names."""
    service = _service(ctx)
    progress = asyncio.run(service.progress(_now()))

    if json_output:
        typer.echo(
            json.dumps(
                {
                    "total": progress.total,
                    "due": progress.due,
                    "new": progress.new,
                    "learning": progress.learning,
                    "young": progress.young,
                    "mature": progress.mature,
                    "total_sessions": progress.total_sessions,
                    "average_accuracy": progress.average_accuracy,
                },
                indent=2,
            )
        )
        return

    typer.echo(f"Names: {progress.total}  Due: {progress.due}")
    typer.echo(
        f"New: {progress.new}  Learning: {progress.learning}  "
        f"Young: {progress.young}  Mature: {progress.mature}"
    )
    if progress.total_sessions:
        typer.echo(
            f"Sessions: {progress.total_sessions}  "
            f"Average accuracy: {progress.average_accuracy or 0:.0%}"
        )


@app.command()
def practice(
    ctx: typer.Context,
    seconds: Annotated[
        int | None, typer.Option("--seconds", "-s", help="Target session length in seconds.")
    ] = None,
    self_rate: Annotated[
        bool,
        typer.Option("--self-rate", help="Rate recall 0-5 yourself instead of typing answers."),
    ] = False,
):
    """Run an interactive practice session."""
    service = _service(ctx)

    async def run():
        started_at = _now()
        entries = await service.build_session(started_at, seconds)
        correct = 0

        for i, entry in enumerate(entries, start=1):
            item = entry.item
            typer.echo(f"\n[{i}/{len(entries)}] ({entry.item_type.value}) {item.arabic}")
            typer.echo(f"  Meaning: {item.meaning}")

            if self_rate:
                typer.prompt("  Press Enter to reveal", default="", show_default=False)
                typer.echo(f"  -> {item.name}")
                quality = typer.prompt("  Quality 0-5", type=click.IntRange(0, 5))
                await service.rate(item.id, quality, _now())
                ok = quality >= 3
            else:
                text = typer.prompt("  Name")
                ok, _ = await service.answer(item.id, text, _now())
                if ok:
                    typer.secho(f"  Correct: {item.name}", fg="green")
                else:
                    typer.secho(f"  Not quite: {item.name}", fg="yellow")
            correct += int(ok)

        result = await service.finish_session(entries, correct, started_at, _now())
        typer.echo(
            f"\nDone: {result.correct_count}/{result.total_items} correct "
            f"({result.review_count} review, {result.new_count} new, "
            f"{result.reinforcement_count} reinforcement)"
        )

    asyncio.run(run())


@app.command()
def serve(
    port: Annotated[int, typer.Option(help="Port to bind the server to.")] = 8799,
    host: Annotated[str, typer.Option(help="Host to bind the server to.")] = "127.0.0.1",
    reload: Annotated[bool, typer.Option(help="Enable auto-reload.")] = False,
):
    """Start the HTTP API."""
    import uvicorn

    uvicorn.run("asma.server:app", host=host, port=port, reload=reload)


# ---------------------------------------------------------------------------
# Config subgroup
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show():
    """Display final resolved configuration."""
    config = resolve_config()
    d = {k: str(v) if isinstance(v, Path) else v for k, v in config.model_dump().items()}
    typer.echo(json.dumps(d, indent=2))
