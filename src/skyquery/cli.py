"""Command line entry point.

    skyquery -l 45n -L 93w rpn mars rise .
    skyquery -d 2024-04-08 query moon phase,dist,between:sun
    skyquery -f csv ephem venus mag,illumfrac --end 2024-12-31 --step 7d
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo

import click
from dotenv import load_dotenv
from pytz import UnknownTimeZoneError

from skyquery.catalog import default_catalog
from skyquery.config import Settings, load_settings
from skyquery.errors import InvalidLiteralError, SkyQueryError
from skyquery.i18n import LANGUAGES
from skyquery.localtime import display_timezone
from skyquery.models import Angle, ReferenceFrame
from skyquery.parse import now_utc, parse_angle, parse_date, parse_duration, parse_object, parse_properties
from skyquery.query import default_provider, ephemeris, run
from skyquery.renderers.base import Driver
from skyquery.renderers.csv_table import CsvDriver
from skyquery.renderers.json_stream import JsonDriver
from skyquery.renderers.term import TermDriver
from skyquery.rpn import Evaluator

log = logging.getLogger(__name__)

EXIT_ERROR = 1

DRIVERS: dict[str, type[Driver]] = {
    "term": TermDriver,
    "csv": CsvDriver,
    "json": JsonDriver,
}


class SkyQueryCliError(click.ClickException):
    """Click exception with explicit exit-code control."""

    def __init__(self, message: str, *, exit_code: int = EXIT_ERROR) -> None:
        super().__init__(message)
        self.exit_code = int(exit_code)


class _LiteralType(click.ParamType):
    """Click parameter backed by one of the literal parsers."""

    def __init__(self, name: str, parser) -> None:
        self.name = name
        self._parser = parser

    def convert(self, value, param, ctx):
        if not isinstance(value, str):
            return value
        try:
            return self._parser(value)
        except InvalidLiteralError as exc:
            self.fail(str(exc), param, ctx)


ANGLE = _LiteralType("angle", parse_angle)
DATE = _LiteralType("date", parse_date)
DURATION = _LiteralType("duration", parse_duration)


@dataclass(frozen=True)
class Session:
    """Options shared by every subcommand."""

    settings: Settings
    frame: ReferenceFrame
    fmt: str
    raw: bool
    tz: tzinfo
    lang: str

    def driver(self) -> Driver:
        return DRIVERS[self.fmt](raw=self.raw, tz=self.tz, lang=self.lang)


@contextmanager
def _reporting() -> Iterator[None]:
    try:
        yield
    except SkyQueryError as exc:
        log.debug("query failed", exc_info=True)
        raise SkyQueryCliError(str(exc)) from exc


def _location(
    settings: Settings, latitude: Angle | None, longitude: Angle | None
) -> tuple[Angle, Angle] | None:
    if latitude is None and longitude is None:
        return settings.location
    if latitude is None or longitude is None:
        raise click.UsageError("--lat and --long must be given together")
    return latitude, longitude


@click.group()
@click.option("-l", "--lat", "latitude", type=ANGLE, help="Observer latitude, e.g. 45n or -33.9d.")
@click.option("-L", "--long", "longitude", type=ANGLE, help="Observer longitude, e.g. 93w or 151.2e.")
@click.option("-d", "--date", "when", type=DATE, help="Instant: now, @<unix>, <n>jd, 2024-04-08t18:00.")
@click.option(
    "-f", "--format", "fmt", type=click.Choice(sorted(DRIVERS)), default="term", show_default=True
)
@click.option("--raw", is_flag=True, help="Machine-readable values (degrees, unix seconds).")
@click.option("--tz", "tz_name", help="Display time zone (default: observer's zone, else UTC).")
@click.option("--lang", type=click.Choice(LANGUAGES), help="Language for labels and phase names.")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging.")
@click.pass_context
def main(
    ctx: click.Context,
    latitude: Angle | None,
    longitude: Angle | None,
    when: datetime | None,
    fmt: str,
    raw: bool,
    tz_name: str | None,
    lang: str | None,
    verbose: bool,
) -> None:
    """Query positions, brightness and phases of sky objects."""
    load_dotenv()
    with _reporting():
        settings = load_settings()
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    frame = ReferenceFrame(
        instant=when if when is not None else now_utc(),
        location=_location(settings, latitude, longitude),
    )
    try:
        tz = display_timezone(frame, tz_name or settings.timezone)
    except UnknownTimeZoneError:
        raise click.BadParameter(f"unknown time zone {tz_name}", param_hint="--tz") from None

    ctx.obj = Session(
        settings=settings,
        frame=frame,
        fmt=fmt,
        raw=raw,
        tz=tz,
        lang=lang or settings.lang,
    )
    log.debug("frame %s, display zone %s", frame, tz)


@main.command()
@click.argument("words", nargs=-1, required=True)
@click.pass_obj
def rpn(session: Session, words: tuple[str, ...]) -> None:
    """Evaluate RPN WORDS, e.g. `moon phase .` or `45n 93w latlong mars rise .`"""
    evaluator = Evaluator(
        catalog=default_catalog(),
        provider=default_provider(),
        sink=click.echo,
        tz=session.tz,
        lang=session.lang,
    )
    with _reporting():
        state = evaluator.evaluate(words, session.frame)
    if state.stack:
        click.echo(state.stack[-1].render(session.raw, tz=session.tz, lang=session.lang))


@main.command()
@click.argument("obj")
@click.argument("props")
@click.pass_obj
def query(session: Session, obj: str, props: str) -> None:
    """Print PROPS (comma list, `between:<name>` allowed) of OBJ."""
    with _reporting():
        catalog = default_catalog()
        target = parse_object(obj, catalog)
        queries = parse_properties(props, catalog)
        values = run(target, [q for q, _ in queries], session.frame, default_provider())
    driver = session.driver()
    driver.start()
    driver.query([(value, label) for value, (_, label) in zip(values, queries)])
    driver.footer()


@main.command()
@click.argument("obj")
@click.argument("props")
@click.option("--start", type=DATE, help="First row (default: --date).")
@click.option("--end", type=DATE, required=True, help="Last row is the first instant at or past this.")
@click.option("--step", type=DURATION, default="1d", show_default=True, help="90s, 15m, 6h, 1d, 1w.")
@click.pass_obj
def ephem(
    session: Session,
    obj: str,
    props: str,
    start: datetime | None,
    end: datetime,
    step: timedelta,
) -> None:
    """Tabulate PROPS of OBJ from --start to --end every --step."""
    with _reporting():
        catalog = default_catalog()
        target = parse_object(obj, catalog)
        queries = parse_properties(props, catalog)
        first = start if start is not None else session.frame.instant
        rows = ephemeris(
            target,
            [q for q, _ in queries],
            session.frame,
            first,
            end,
            step,
            default_provider(),
        )
        driver = session.driver()
        driver.start()
        header_written = False
        for instant, values in rows:
            labelled = [(value, label) for value, (_, label) in zip(values, queries)]
            if not header_written:
                driver.header(labelled, instant)
                header_written = True
            driver.ephemeris_row(labelled, instant)
        driver.footer()


if __name__ == "__main__":
    main()
