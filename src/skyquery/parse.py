"""Literal grammar: dates, angles, numbers, durations, property and object names.

Dates: ``now``, ``@<unix>``, ``<n>u``, ``<n>j`` / ``<n>jd`` (Julian day),
RFC 3339, ``YYYY-MM-DDtHH:MM[:SS]`` and ``YYYY-MM-DD``. Forms without an
offset are UTC.

Angles: ``e``/``n`` positive and ``w``/``s`` negative degrees, ``d``/``deg``/``°``
degrees, ``rad`` radians. ``<n>h`` is a time-of-day angle in decimal hours.
"""

import math
import re
from collections.abc import Callable
from datetime import datetime, timedelta

from dateutil import parser as dateparser
from pytz import utc

from skyquery.catalog import Catalog
from skyquery.errors import InvalidLiteralError, UnknownPropertyError
from skyquery.models import (
    Angle,
    AngleBetween,
    CelestialObject,
    Equatorial,
    Property,
    Query,
    RawCoordinate,
)
from skyquery.values import AngleValue, AngleView, DateValue, NumberValue, Value

JULIAN_DAY_UNIX_EPOCH = 2_440_587.5
SECONDS_PER_DAY = 86_400.0

_RFC3339 = re.compile(r"^\d{4}-\d{2}-\d{2}t\d{2}:\d{2}:\d{2}(\.\d+)?(z|[+-]\d{2}:\d{2})$")
_LOCAL_DATETIME = re.compile(r"^\d{4}-\d{2}-\d{2}t\d{2}:\d{2}(:\d{2})?$")
_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# Checked in order; a suffix whose stripped remainder is not a number falls
# through to the next one ("1.5rad" also ends in "d").
_ANGLE_SUFFIXES: tuple[tuple[str, Callable[[float], Angle]], ...] = (
    ("e", lambda n: Angle(n)),
    ("w", lambda n: Angle(-n)),
    ("n", lambda n: Angle(n)),
    ("s", lambda n: Angle(-n)),
    ("d", lambda n: Angle(n)),
    ("deg", lambda n: Angle(n)),
    ("°", lambda n: Angle(n)),
    ("rad", Angle.from_radians),
)

_DURATION_UNITS = {"s": 1.0, "m": 60.0, "h": 3_600.0, "d": 86_400.0, "w": 604_800.0}

PROPERTY_NAMES: dict[str, Property] = {
    "equ": Property.EQUATORIAL,
    "equa": Property.EQUATORIAL,
    "equatorial": Property.EQUATORIAL,
    "horiz": Property.HORIZONTAL,
    "horizontal": Property.HORIZONTAL,
    "ecl": Property.ECLIPTIC,
    "ecliptic": Property.ECLIPTIC,
    "dist": Property.DISTANCE,
    "distance": Property.DISTANCE,
    "mag": Property.MAGNITUDE,
    "magnitude": Property.MAGNITUDE,
    "brightness": Property.MAGNITUDE,
    "phase": Property.PHASE_DEFAULT,
    "phaseemoji": Property.PHASE_EMOJI,
    "phasename": Property.PHASE_NAME,
    "phaseprecent": Property.ILLUMINATED_FRACTION,
    "phasepercent": Property.ILLUMINATED_FRACTION,
    "illumfrac": Property.ILLUMINATED_FRACTION,
    "angdia": Property.ANGULAR_DIAMETER,
    "rise": Property.RISE,
    "set": Property.SET,
}


def now_utc() -> datetime:
    return datetime.now(tz=utc)


def _number(text: str) -> float | None:
    try:
        n = float(text)
    except ValueError:
        return None
    return n if math.isfinite(n) else None


def _suffix_number(text: str, suffix: str) -> float | None:
    if not text.endswith(suffix) or len(text) == len(suffix):
        return None
    return _number(text[: -len(suffix)])


def _from_unix(seconds: float, token: str) -> datetime:
    try:
        return datetime.fromtimestamp(seconds, tz=utc)
    except (OverflowError, OSError, ValueError) as exc:
        raise InvalidLiteralError(token, f"Date out of range ({exc})") from exc


def parse_date(text: str, clock: Callable[[], datetime] = now_utc) -> datetime:
    """Parse a date literal into an aware UTC datetime.

    Raises:
        InvalidLiteralError: If ``text`` is not one of the date forms.
    """
    s = text.strip().lower()
    if s == "now":
        return clock()
    if s.startswith("@"):
        n = _number(s[1:])
        if n is not None:
            return _from_unix(n, text)
    elif (n := _suffix_number(s, "u")) is not None:
        return _from_unix(n, text)
    elif (n := _suffix_number(s, "jd")) is not None or (n := _suffix_number(s, "j")) is not None:
        return _from_unix((n - JULIAN_DAY_UNIX_EPOCH) * SECONDS_PER_DAY, text)
    elif _RFC3339.match(s) or _LOCAL_DATETIME.match(s) or _DATE.match(s):
        try:
            dt = dateparser.isoparse(s.upper())
        except ValueError as exc:
            raise InvalidLiteralError(text, f"Invalid date ({exc})") from exc
        if dt.tzinfo is None:
            return dt.replace(tzinfo=utc)
        return dt.astimezone(utc)
    raise InvalidLiteralError(text, "Invalid date")


def parse_angle(text: str) -> Angle:
    """Parse an angle literal. South and west are negative.

    Raises:
        InvalidLiteralError: If no suffix matches a number.
    """
    s = text.strip().lower()
    for suffix, build in _ANGLE_SUFFIXES:
        n = _suffix_number(s, suffix)
        if n is not None:
            return build(n)
    raise InvalidLiteralError(text, "Invalid angle")


def parse_duration(text: str) -> timedelta:
    """``90``, ``90s``, ``15m``, ``6h``, ``1d`` or ``1w``. Must be positive."""
    s = text.strip().lower()
    seconds = _number(s)
    if seconds is None:
        for unit, scale in _DURATION_UNITS.items():
            n = _suffix_number(s, unit)
            if n is not None:
                seconds = n * scale
                break
    if seconds is None or seconds <= 0:
        raise InvalidLiteralError(text, "Invalid duration")
    return timedelta(seconds=seconds)


def parse_literal(text: str, clock: Callable[[], datetime] = now_utc) -> Value:
    """Date, then angle, then clock hours, then bare number."""
    try:
        return DateValue(parse_date(text, clock))
    except InvalidLiteralError:
        pass
    try:
        return AngleValue(parse_angle(text), AngleView.ANGLE)
    except InvalidLiteralError:
        pass
    s = text.strip().lower()
    hours = _suffix_number(s, "h")
    if hours is not None:
        return AngleValue(Angle.from_hours(hours), AngleView.TIME)
    n = _number(s)
    if n is not None:
        return NumberValue(n)
    raise InvalidLiteralError(text, "Not a date, angle or number")


def parse_coordinate(text: str) -> RawCoordinate:
    """``<ra angle>,<dec angle>``, e.g. ``101.29d,-16.72d``."""
    parts = text.split(",")
    if len(parts) != 2:
        raise InvalidLiteralError(text, "Invalid coordinate, expected RA,DEC")
    ra, dec = (parse_angle(p) for p in parts)
    return RawCoordinate(Equatorial(ra, dec))


def parse_object(text: str, catalog: Catalog) -> CelestialObject:
    """A catalog name, or an inline ``RA,DEC`` raw coordinate."""
    if "," in text:
        return parse_coordinate(text)
    return catalog.lookup(text)


def parse_property(text: str, catalog: Catalog | None = None) -> Query:
    """A property name, or ``between:<object>`` when a catalog is given.

    Raises:
        UnknownPropertyError: If the name is not a property.
    """
    s = text.strip().lower()
    if s in PROPERTY_NAMES:
        return PROPERTY_NAMES[s]
    if catalog is not None and s.startswith("between:"):
        return AngleBetween(parse_object(s.split(":", 1)[1], catalog))
    raise UnknownPropertyError(text)


def parse_properties(text: str, catalog: Catalog | None = None) -> list[tuple[Query, str]]:
    """Comma list of properties, each paired with its label as typed."""
    return [(parse_property(p, catalog), p.strip()) for p in text.split(",") if p.strip()]
