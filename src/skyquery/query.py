"""Property resolution: (object, property, reference frame) → Value.

Derived properties (horizontal, ecliptic, rise/set, separation and the phase
views) resolve their base property recursively through ``resolve`` and never
compute anything on their own.
"""

import logging
from collections.abc import Callable, Iterator, Sequence
from datetime import datetime, timedelta
from functools import lru_cache

from skyquery.config import load_settings
from skyquery.coords import J2000
from skyquery.ephemeris import EphemerisProvider, SkyfieldEphemeris
from skyquery.errors import (
    InvalidLiteralError,
    MissingLocationError,
    NoPhaseError,
    UnknownDataError,
    UnsupportedPropertyError,
)
from skyquery.models import (
    Angle,
    AngleBetween,
    CelestialObject,
    Equatorial,
    Planet,
    Property,
    Query,
    RawCoordinate,
    ReferenceFrame,
    Star,
    Sun,
)
from skyquery.values import (
    AngleValue,
    AngleView,
    CoordinateValue,
    CoordView,
    DistanceValue,
    NumberValue,
    PhaseValue,
    PhaseView,
    RiseSetValue,
    Value,
)

log = logging.getLogger(__name__)

ARCSEC_PER_RADIAN = 206_265.0

# Everything else is undefined for a bare sky position.
_RAW_COORDINATE_PROPERTIES = {Property.EQUATORIAL, Property.HORIZONTAL, Property.ECLIPTIC}

Handler = Callable[[CelestialObject, Query, ReferenceFrame, EphemerisProvider], Value]


@lru_cache(maxsize=1)
def default_provider() -> SkyfieldEphemeris:
    settings = load_settings()
    return SkyfieldEphemeris(settings.data_dir, settings.ephemeris_file)


def label(prop: Query) -> str:
    return prop.value


def _location(prop: Query, obj: CelestialObject, frame: ReferenceFrame) -> tuple[Angle, Angle]:
    if frame.location is None:
        raise MissingLocationError(label(prop), obj.name)
    return frame.location


def _position(obj: CelestialObject, frame: ReferenceFrame, provider: EphemerisProvider) -> Equatorial:
    value = resolve(obj, Property.EQUATORIAL, frame, provider)
    assert isinstance(value, CoordinateValue)
    return value.position


def _equatorial(obj, prop, frame, provider) -> Value:
    if isinstance(obj, RawCoordinate):
        position = obj.position
    elif isinstance(obj, Planet):
        position = provider.location(obj, frame.instant)
    else:
        position = provider.precess(provider.location(obj, frame.instant), J2000, frame.instant)
    return CoordinateValue(position, CoordView.EQUATORIAL)


def _horizontal(obj, prop, frame, provider) -> Value:
    latitude, longitude = _location(prop, obj, frame)
    position = _position(obj, frame, provider)
    projected = provider.horizon(position, frame.instant, latitude, longitude)
    return CoordinateValue(position, CoordView.HORIZONTAL, projected)


def _ecliptic(obj, prop, frame, provider) -> Value:
    position = _position(obj, frame, provider)
    projected = provider.ecliptic(position, frame.instant)
    return CoordinateValue(position, CoordView.ECLIPTIC, projected)


def rise_set_instant(
    provider: EphemerisProvider,
    position: Equatorial,
    frame: ReferenceFrame,
    rising: bool,
) -> RiseSetValue:
    """Rise or set of a fixed position on the frame's UTC day. Frame must have a location."""
    assert frame.location is not None
    latitude, longitude = frame.location
    rise, set_ = provider.riseset(position, frame.instant, latitude, longitude)
    return RiseSetValue(rise if rising else set_)


def _rise_set(obj, prop, frame, provider) -> Value:
    _location(prop, obj, frame)
    position = _position(obj, frame, provider)
    return rise_set_instant(provider, position, frame, rising=prop is Property.RISE)


def _angle_between(obj, prop, frame, provider) -> Value:
    a = _position(obj, frame, provider)
    b = _position(prop.other, frame, provider)
    return AngleValue(provider.angular_separation(a, b), AngleView.ANGLE)


def _distance(obj, prop, frame, provider) -> Value:
    if isinstance(obj, Star):
        parallax_arcsec = obj.parallax.degrees * 3600.0
        if parallax_arcsec <= 0.0:
            raise UnknownDataError(label(prop), obj.name)
        return DistanceValue(ARCSEC_PER_RADIAN / parallax_arcsec)
    return DistanceValue(provider.distance(obj, frame.instant))


def _magnitude(obj, prop, frame, provider) -> Value:
    if isinstance(obj, Star):
        return NumberValue(obj.magnitude)
    return NumberValue(provider.magnitude(obj, frame.instant))


def _phase_default(obj, prop, frame, provider) -> Value:
    if isinstance(obj, (Sun, Star)):
        raise NoPhaseError(label(prop), obj.name)
    angle = provider.phase_angle(obj, frame.instant)
    return PhaseValue(angle, PhaseView.DEFAULT, frame.northern)


def _phase_view(view: PhaseView) -> Handler:
    def handler(obj, prop, frame, provider) -> Value:
        base = resolve(obj, Property.PHASE_DEFAULT, frame, provider)
        assert isinstance(base, PhaseValue)
        return PhaseValue(base.angle, view, base.northern)

    return handler


def _angular_diameter(obj, prop, frame, provider) -> Value:
    if isinstance(obj, Star):
        raise UnknownDataError(label(prop), obj.name)
    angle = provider.angular_diameter(obj, frame.instant)
    if angle is None:
        raise UnknownDataError(label(prop), obj.name)
    return AngleValue(angle, AngleView.ANGLE)


_HANDLERS: dict[Property, Handler] = {
    Property.EQUATORIAL: _equatorial,
    Property.HORIZONTAL: _horizontal,
    Property.ECLIPTIC: _ecliptic,
    Property.RISE: _rise_set,
    Property.SET: _rise_set,
    Property.DISTANCE: _distance,
    Property.MAGNITUDE: _magnitude,
    Property.PHASE_DEFAULT: _phase_default,
    Property.PHASE_EMOJI: _phase_view(PhaseView.EMOJI),
    Property.PHASE_NAME: _phase_view(PhaseView.NAME),
    Property.ILLUMINATED_FRACTION: _phase_view(PhaseView.ILLUMINATED_FRACTION),
    Property.ANGULAR_DIAMETER: _angular_diameter,
}


def resolve(
    obj: CelestialObject,
    prop: Query,
    frame: ReferenceFrame,
    provider: EphemerisProvider | None = None,
) -> Value:
    """Compute one property of one object in a reference frame.

    Args:
        obj: Catalog object or raw coordinate.
        prop: Property tag, or ``AngleBetween(other)``.
        frame: Observer location (optional) and instant.
        provider: Ephemeris backend. Defaults to the skyfield kernel from settings.

    Returns:
        The Value, ready to render.

    Raises:
        DomainError: If the property is undefined for this object or frame.
    """
    if provider is None:
        provider = default_provider()
    if isinstance(prop, AngleBetween):
        handler = _angle_between
    else:
        if isinstance(obj, RawCoordinate) and prop not in _RAW_COORDINATE_PROPERTIES:
            raise UnsupportedPropertyError(
                label(prop), obj.name, "unsupported property for a raw coordinate"
            )
        handler = _HANDLERS[prop]
    value = handler(obj, prop, frame, provider)
    log.debug("%s of %s at %s -> %r", label(prop), obj.name, frame.instant.isoformat(), value)
    return value


def run(
    obj: CelestialObject,
    props: Sequence[Query],
    frame: ReferenceFrame,
    provider: EphemerisProvider | None = None,
) -> list[Value]:
    """Resolve a property list for one object. The first failure propagates."""
    return [resolve(obj, prop, frame, provider) for prop in props]


def ephemeris(
    obj: CelestialObject,
    props: Sequence[Query],
    frame: ReferenceFrame,
    start: datetime,
    end: datetime,
    step: timedelta,
    provider: EphemerisProvider | None = None,
) -> Iterator[tuple[datetime, list[Value]]]:
    """Table rows at ``start, start + step, ...`` up to the first instant at or past ``end``.

    Only the frame's instant advances; each row is an independent ``run``.
    """
    if step <= timedelta(0):
        raise InvalidLiteralError(str(step), "Invalid duration, step must be positive")
    instant = start
    while True:
        row_frame = ReferenceFrame(instant=instant, location=frame.location)
        yield instant, run(obj, props, row_frame, provider)
        if instant >= end:
            break
        instant += step
