"""Value model: every query result, and how each one renders itself.

Each value has exactly two renderings, chosen by the ``raw`` flag:

- human (``raw=False``): locale formatted, dates in the display time zone;
- raw (``raw=True``): plain decimal degrees/hours, unix timestamps, quoted text.

Horizontal and ecliptic coordinates arrive here already projected, so a value
never needs a reference frame to render.
"""

import json
from dataclasses import dataclass
from datetime import datetime, tzinfo
from enum import Enum

from pytz import utc

from skyquery.i18n import PHASE_KEYS, t
from skyquery.models import Angle, CelestialObject, Equatorial

KM_PER_AU = 149_597_870.7
AU_PER_LIGHT_YEAR = 63_241.07708
_KM_THRESHOLD_AU = 0.003342293561  # ~500,000 km
_LY_THRESHOLD_AU = 20_000.0

EMOJIS_NORTH: tuple[str, ...] = ("🌑", "🌘", "🌗", "🌖", "🌕", "🌔", "🌓", "🌒")
EMOJIS_SOUTH: tuple[str, ...] = ("🌑", "🌒", "🌓", "🌔", "🌕", "🌖", "🌗", "🌘")


def illuminated_fraction(angle: Angle) -> float:
    """Fraction of the disc lit, 0 at phase angle 0, 1 at 180."""
    return (1.0 - angle.cos()) / 2.0


def phase_index(fraction: float, angle: Angle) -> int:
    """Bucket an illuminated fraction into one of the eight named phases.

    Ranges are half-open on the upper side except Full, which includes 1.0.
    Quarter, gibbous and crescent buckets split on ``angle.degrees > 90``.
    """
    waning = angle.degrees > 90.0
    if fraction < 0.04:
        return 0
    if fraction >= 0.96:
        return 4
    if 0.46 <= fraction < 0.54:
        return 6 if waning else 2
    if 0.54 <= fraction < 0.96:
        return 5 if waning else 3
    return 7 if waning else 1


def _unix(when: datetime) -> str:
    ts = when.timestamp()
    return str(int(ts)) if ts.is_integer() else str(ts)


class Value:
    """Base for every query result."""

    def render(self, raw: bool = False, *, tz: tzinfo = utc, lang: str = "en") -> str:
        raise NotImplementedError

    def __str__(self) -> str:
        return self.render()


@dataclass(frozen=True)
class DateValue(Value):
    when: datetime  # Aware datetime

    def render(self, raw: bool = False, *, tz: tzinfo = utc, lang: str = "en") -> str:
        if raw:
            return _unix(self.when)
        return self.when.astimezone(tz).strftime("%Y-%m-%dT%H:%M:%S")


class AngleView(Enum):
    ANGLE = "angle"  # 123°04′05.6″
    LATITUDE = "latitude"  # +12°34′56.7″, folded into (-180, 180]
    TIME = "time"  # 12h34m56s


@dataclass(frozen=True)
class AngleValue(Value):
    angle: Angle
    view: AngleView = AngleView.ANGLE

    def render(self, raw: bool = False, *, tz: tzinfo = utc, lang: str = "en") -> str:
        if self.view is AngleView.TIME:
            if raw:
                return f"{self.angle.normalized().hours:.5f}"
            h, m, s = self.angle.clock()
            return f"{h:02d}h{m:02d}m{int(s):02d}s"
        if self.view is AngleView.LATITUDE:
            signed = self.angle.signed()
            if raw:
                return f"{signed.degrees:.5f}"
            d, m, s = signed.dms()
            sign = "-" if signed.degrees < 0 else "+"
            return f"{sign}{d:02d}°{m:02d}′{s:04.1f}″"
        if raw:
            return f"{self.angle.degrees:.5f}"
        d, m, s = self.angle.dms()
        sign = "-" if self.angle.degrees < 0 else ""
        return f"{sign}{d:02d}°{m:02d}′{s:04.1f}″"


class CoordView(Enum):
    EQUATORIAL = "equatorial"
    HORIZONTAL = "horizontal"
    ECLIPTIC = "ecliptic"


@dataclass(frozen=True)
class CoordinateValue(Value):
    """A sky position.

    ``position`` is always the equatorial pair of date. For horizontal and
    ecliptic views ``projected`` holds the already-transformed pair
    (azimuth/altitude or longitude/latitude).
    """

    position: Equatorial
    view: CoordView = CoordView.EQUATORIAL
    projected: tuple[Angle, Angle] | None = None

    def __post_init__(self) -> None:
        if self.view is not CoordView.EQUATORIAL and self.projected is None:
            raise ValueError(f"{self.view.value} coordinate needs a projected pair")

    def parts(self) -> tuple[AngleValue, AngleValue]:
        if self.view is CoordView.EQUATORIAL:
            return (
                AngleValue(self.position.ra, AngleView.TIME),
                AngleValue(self.position.dec, AngleView.LATITUDE),
            )
        assert self.projected is not None
        first, second = self.projected
        return AngleValue(first, AngleView.ANGLE), AngleValue(second, AngleView.LATITUDE)

    def render(self, raw: bool = False, *, tz: tzinfo = utc, lang: str = "en") -> str:
        first, second = self.parts()
        if raw:
            return f"[{first.render(True)}, {second.render(True)}]"
        return f"{first.render()} {second.render()}"


@dataclass(frozen=True)
class NumberValue(Value):
    number: float

    def render(self, raw: bool = False, *, tz: tzinfo = utc, lang: str = "en") -> str:
        return f"{self.number:.2f}"


@dataclass(frozen=True)
class DistanceValue(Value):
    au: float

    def render(self, raw: bool = False, *, tz: tzinfo = utc, lang: str = "en") -> str:
        if raw:
            return str(self.au)
        if self.au < _KM_THRESHOLD_AU:
            return f"{self.au * KM_PER_AU:.1f} km"
        if self.au >= _LY_THRESHOLD_AU:
            return f"{self.au / AU_PER_LIGHT_YEAR:.2f} ly"
        return f"{self.au:.2f} AU"


class PhaseView(Enum):
    DEFAULT = "default"  # emoji, name and percentage
    EMOJI = "emoji"
    ILLUMINATED_FRACTION = "illumfrac"
    NAME = "name"


@dataclass(frozen=True)
class PhaseValue(Value):
    angle: Angle  # 0 = new, 180 = full
    view: PhaseView = PhaseView.DEFAULT
    northern: bool = True  # Picks the emoji set

    @property
    def fraction(self) -> float:
        return illuminated_fraction(self.angle)

    @property
    def index(self) -> int:
        return phase_index(self.fraction, self.angle)

    def emoji(self) -> str:
        return (EMOJIS_NORTH if self.northern else EMOJIS_SOUTH)[self.index]

    def name(self, lang: str = "en") -> str:
        return t(PHASE_KEYS[self.index], lang)

    def render(self, raw: bool = False, *, tz: tzinfo = utc, lang: str = "en") -> str:
        if self.view is PhaseView.ILLUMINATED_FRACTION:
            return f"{100.0 * self.fraction:.1f}"
        if self.view is PhaseView.EMOJI:
            text = self.emoji()
        elif self.view is PhaseView.NAME:
            text = self.name(lang)
        else:
            text = f"{self.emoji()} {self.name(lang)} ({100.0 * self.fraction:.1f}%)"
        return json.dumps(text, ensure_ascii=False) if raw else text


@dataclass(frozen=True)
class RiseSetValue(Value):
    when: datetime | None  # None: the event does not happen that day

    def render(self, raw: bool = False, *, tz: tzinfo = utc, lang: str = "en") -> str:
        if self.when is None:
            return "none"
        if raw:
            return _unix(self.when)
        return self.when.astimezone(tz).strftime("%H:%M")


@dataclass(frozen=True)
class ObjectValue(Value):
    """A catalog object waiting on the RPN stack for a property word."""

    obj: CelestialObject

    def render(self, raw: bool = False, *, tz: tzinfo = utc, lang: str = "en") -> str:
        return self.obj.name
