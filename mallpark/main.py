from datetime import datetime

import pydantic
import typer
from loguru import logger
from rich import print
from sqlalchemy.orm import Session

from mallpark.cli import formatter
from mallpark.cli.handler import CommandHandler
from mallpark.cli.shell import Shell
from mallpark.config import settings
from mallpark.core.exceptions import CarParkException
from mallpark.core.logger import configure_logging
from mallpark.database import create_db_engine, init_db, make_session_factory, session_scope
from mallpark.schemas.parking import SlotCreate
from mallpark.schemas.session import SessionRecord
from mallpark.services import fee as fee_service
from mallpark.services import parking as parking_service
from mallpark.utils.constants import DEFAULT_SLOT_LAYOUT, RateClass

app = typer.Typer(help=settings.app_name)


def setup_default_complex(db: Session) -> None:
    slots = [
        SlotCreate(id=slot_id, size=size, distances=distances)
        for slot_id, size, distances in DEFAULT_SLOT_LAYOUT
    ]
    parking_service.setup_complex(db, settings.entry_point_count, slots)


def parse_stay(value: str) -> SessionRecord:
    """``CLASS,ENTRY,EXIT`` with ISO-8601 times."""
    try:
        rate_class, entry, exit_ = (part.strip() for part in value.split(","))
        rate_class = RateClass(rate_class.lower())
        entry_time = datetime.fromisoformat(entry)
        exit_time = datetime.fromisoformat(exit_)
    except ValueError as exc:
        raise typer.BadParameter(f"Invalid stay '{value}': {exc}") from exc
    return SessionRecord(
        vehicle_id="quote", rate_class=rate_class, entry_time=entry_time, exit_time=exit_time
    )


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    log_level: str | None = typer.Option(None, "--log-level", help="Override the configured log level"),
):
    if log_level is None and ctx.invoked_subcommand in (None, "shell"):
        # Keep INFO lines out of the interactive prompt
        log_level = settings.shell_log_level
    configure_logging(log_level)
    if ctx.invoked_subcommand is None:
        shell()


@app.command()
def shell():
    """Start the interactive parking shell."""
    engine = create_db_engine()
    init_db(engine)
    with session_scope(make_session_factory(engine)) as db:
        setup_default_complex(db)
        db.commit()
        Shell(CommandHandler(db)).start()


@app.command()
def quote(
    rate_class: RateClass = typer.Option(..., "--rate-class", case_sensitive=False),
    entry: datetime = typer.Option(..., "--entry"),
    exit_time: datetime = typer.Option(..., "--exit"),
):
    """Fee for a single stay."""
    try:
        record = SessionRecord(
            vehicle_id="quote", rate_class=rate_class, entry_time=entry, exit_time=exit_time
        )
        fee = fee_service.compute_fee(record)
    except (pydantic.ValidationError, CarParkException) as exc:
        logger.error(f"Quote failed: {exc}")
        print(formatter.format_error(str(exc)))
        raise typer.Exit(code=1)
    print(f"{fee} {formatter.CURRENCY}")


@app.command("quote-continuous")
def quote_continuous(
    stays: list[str] = typer.Option(..., "--stay", help="CLASS,ENTRY,EXIT; repeat for each stay"),
):
    """Fee for several stays of one vehicle with the continuous rate applied."""
    try:
        records = [parse_stay(stay) for stay in stays]
        segments = fee_service.summarize_segments(records)
        fee = fee_service.compute_continuous_fee(records)
    except (pydantic.ValidationError, CarParkException) as exc:
        logger.error(f"Continuous quote failed: {exc}")
        print(formatter.format_error(str(exc)))
        raise typer.Exit(code=1)
    for index, segment in enumerate(segments, start=1):
        print(f"segment {index}: {len(segment.sessions)} stay(s), {segment.billed_hours}h, {segment.fee}")
    print(f"{fee} {formatter.CURRENCY}")


@app.command()
def version():
    print("v0.1.0")


def run():
    app()


if __name__ == "__main__":
    run()
