"""
Command-line interface using typer.

Commands parse their arguments, hand concrete values to the services and
print what comes back: reports on stdout, confirmations and errors on stderr.
"""

import contextlib
import datetime
import logging
import sys
from pathlib import Path
from typing import Iterator, Optional

import typer

from temps.domain.exceptions import TempsError
from temps.infra.config import Settings, load_settings
from temps.infra.repository import EntryStore, format_timestamp
from temps.parsing import parse_date, parse_start_date
from temps.services.calendar_service import CalendarService
from temps.services.report_service import ReportMode, ReportService
from temps.services.table import Table
from temps.services.timeline_service import TimelineService
from temps.services.timer_service import TimerService

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="temps",
    help="Simple time tracker.",
    add_completion=False,
    no_args_is_help=False,
)


def current_time() -> datetime.datetime:
    """Now, in the local zone, to the second"""
    return datetime.datetime.now().astimezone().replace(microsecond=0)


class AppState:
    """Objects shared by all commands of one invocation"""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.calendar = CalendarService(settings.midnight_offset, settings.first_weekday)
        self.store = EntryStore(settings.temps_file)
        self.reports = ReportService(self.calendar)
        self.timeline = TimelineService(settings.timeline_row_minutes, settings.timeline_lane_width,
                                        tz=self.calendar.tz)
        self.timer = TimerService(self.store)


@contextlib.contextmanager
def report_errors() -> Iterator[None]:
    """Print core errors as one line and exit with status 1"""
    try:
        yield
    except TempsError as e:
        logger.debug("Command failed", exc_info=True)
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


def _state(ctx: typer.Context) -> AppState:
    return ctx.obj


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    temps_file: Optional[Path] = typer.Option(
        None, "--temps-file", help="Path for the tracking data [env: TEMPS_FILE]"
    ),
    midnight_offset: Optional[str] = typer.Option(
        None, "--midnight-offset",
        help="Time at which we consider the current day to have ended [env: TEMPS_MIDNIGHT_OFFSET]",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debugging output to stderr"),
) -> None:
    """Simple time tracker."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )

    with report_errors():
        settings = load_settings(temps_file=temps_file, midnight_offset=midnight_offset)
        ctx.obj = AppState(settings)
    logger.debug(f"Using log file {settings.temps_file}, midnight offset {settings.midnight_offset}")

    if ctx.invoked_subcommand is None:
        _print_summary(ctx.obj, ReportMode.DAILY, None)


def _print_summary(state: AppState, mode: ReportMode, date: Optional[str]) -> None:
    with report_errors():
        now = current_time()
        day = parse_date(date, state.calendar, now) if date else None
        entries = state.store.load()
        typer.echo(state.reports.generate_report(mode, entries, now, day), nl=False)


@app.command()
def summary(
    ctx: typer.Context,
    full: bool = typer.Option(False, "--full", "-f", help="Time tracked forever"),
    weekly: bool = typer.Option(False, "--weekly", "-w", help="Time tracked this week"),
    daily: bool = typer.Option(False, "--daily", "-d", help="Time tracked today (default)"),
    date: Optional[str] = typer.Option(
        None, "--date", help="Reference day for daily and weekly summaries (YYYY-MM-DD, yesterday, N days ago)"
    ),
) -> None:
    """Display a summary of the time tracked per project."""
    if full + weekly + daily > 1:
        raise typer.BadParameter("--full, --weekly and --daily are mutually exclusive")

    mode = ReportMode.DAILY
    if full:
        mode = ReportMode.FULL
    elif weekly:
        mode = ReportMode.WEEKLY
    _print_summary(_state(ctx), mode, date)


@app.command()
def start(
    ctx: typer.Context,
    project: Optional[str] = typer.Argument(None, help="Project name (defaults to last project)"),
    from_: Optional[str] = typer.Option(None, "--from", "-f", help="Start date (defaults to now)"),
) -> None:
    """Start new timer."""
    state = _state(ctx)
    with report_errors(), state.store.session():
        now = current_time()
        start_at = parse_start_date(from_, state.calendar, now) if from_ else None
        result = state.timer.start(now, project, start_at)

    if result.stopped is not None:
        typer.echo(f"Stopped '{result.stopped.project}'.", err=True)
    typer.echo(f"Started '{result.started.project}'.", err=True)


@app.command()
def stop(
    ctx: typer.Context,
    at: Optional[str] = typer.Option(None, "--at", "-a", help="Stop date (defaults to now)"),
) -> None:
    """Stop ongoing timer."""
    state = _state(ctx)
    with report_errors(), state.store.session():
        now = current_time()
        stop_at = parse_start_date(at, state.calendar, now) if at else None
        entry = state.timer.stop(now, stop_at)

    typer.echo(f"Stopped '{entry.project}'.", err=True)


@app.command()
def cancel(ctx: typer.Context) -> None:
    """Cancel ongoing timer."""
    state = _state(ctx)
    with report_errors(), state.store.session():
        entry = state.timer.cancel()

    typer.echo(f"Cancelled '{entry.project}' (started at {format_timestamp(entry.start)}).", err=True)


@app.command(name="list")
def list_entries(ctx: typer.Context) -> None:
    """List raw data."""
    state = _state(ctx)
    with report_errors():
        entries = state.store.load()

    table = Table(["Project", "Start", "End"])
    for entry in entries:
        table.row([
            entry.project,
            format_timestamp(entry.start),
            format_timestamp(entry.end) if entry.end is not None else "",
        ])
    typer.echo(table.render())


@app.command()
def edit(ctx: typer.Context) -> None:
    """Edit raw data with default editor."""
    state = _state(ctx)
    path = state.settings.temps_file
    path.parent.mkdir(parents=True, exist_ok=True)
    path.touch(exist_ok=True)

    typer.edit(filename=str(path))

    # Tell the user right away if the edit broke the file
    with report_errors():
        state.store.load()


@app.command(name="viz")
def visualize(
    ctx: typer.Context,
    date: Optional[str] = typer.Argument(None, help="Date (defaults to today)"),
) -> None:
    """Visualize time spent on a given day."""
    state = _state(ctx)
    with report_errors():
        now = current_time()
        day = parse_date(date, state.calendar, now) if date else state.calendar.day_of(now)
        entries = state.store.load()

    text = state.timeline.render_day(entries, state.calendar.window(day), now)
    if not text:
        typer.echo(f"Nothing tracked on {day.isoformat()}.", err=True)
        return
    typer.echo(text, nl=False)


def main() -> None:
    app()
