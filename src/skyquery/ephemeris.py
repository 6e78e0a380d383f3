"""Ephemeris provider: positions, distances, magnitudes and phases from skyfield.

The resolver only talks to the ``EphemerisProvider`` protocol, so tests and
batch callers can swap in any object with the same methods.
"""

import logging
import math
from datetime import datetime, timedelta
from pathlib import Path
from typing import Protocol

import numpy as np
from pytz import utc
from skyfield import almanac
from skyfield.api import Loader, wgs84
from skyfield.api import Star as SkyfieldStar
from skyfield.magnitudelib import planetary_magnitude

from skyquery import coords
from skyquery.catalog import MAS_PER_DEGREE
from skyquery.models import Angle, Equatorial, Moon, Planet, SolarSystemBody, Star, Sun

log = logging.getLogger(__name__)

_ROOT = Path(__file__).parent.parent.parent
DEFAULT_DATA_DIR = _ROOT / "resources"
DEFAULT_KERNEL = "de421.bsp"

SUN_ABSOLUTE_MAGNITUDE = -26.74  # At 1 AU
MOON_FULL_MAGNITUDE = -12.73  # At mean distance, phase angle 0

# Planets skyfield.magnitudelib has a model for; the rest use H + 5 log10(r·Δ).
_MAGNITUDE_MODELS = {"mercury", "venus", "mars", "jupiter", "saturn", "uranus", "neptune"}


class EphemerisProvider(Protocol):
    def location(self, body: SolarSystemBody | Star, when: datetime) -> Equatorial: ...

    def distance(self, body: SolarSystemBody, when: datetime) -> float: ...

    def magnitude(self, body: SolarSystemBody, when: datetime) -> float: ...

    def phase_angle(self, body: Planet | Moon, when: datetime) -> Angle: ...

    def angular_diameter(self, body: SolarSystemBody, when: datetime) -> Angle | None: ...

    def riseset(
        self, position: Equatorial, when: datetime, latitude: Angle, longitude: Angle
    ) -> tuple[datetime | None, datetime | None]: ...

    def horizon(
        self, position: Equatorial, when: datetime, latitude: Angle, longitude: Angle
    ) -> tuple[Angle, Angle]: ...

    def ecliptic(self, position: Equatorial, when: datetime) -> tuple[Angle, Angle]: ...

    def precess(
        self, position: Equatorial, from_epoch: datetime, to_epoch: datetime
    ) -> Equatorial: ...

    def angular_separation(self, a: Equatorial, b: Equatorial) -> Angle: ...


def skyfield_star(star: Star) -> SkyfieldStar:
    """skyfield Star carrying the catalog entry's proper motion and parallax."""
    return SkyfieldStar(
        ra_hours=star.position.ra.normalized().hours,
        dec_degrees=star.position.dec.degrees,
        ra_mas_per_year=star.pm_ra.degrees * MAS_PER_DEGREE,
        dec_mas_per_year=star.pm_dec.degrees * MAS_PER_DEGREE,
        parallax_mas=star.parallax.degrees * MAS_PER_DEGREE,
    )


def _first_crossing(found) -> datetime | None:
    times, crossed = found
    hits = np.flatnonzero(crossed)
    if not len(hits):
        return None
    return times[hits[0]].utc_datetime().astimezone(utc)


class SkyfieldEphemeris:
    """EphemerisProvider backed by a JPL kernel loaded through skyfield.

    The kernel is opened (and downloaded into ``data_dir`` if missing) on the
    first body query or rise/set search, not on construction. The other
    coordinate transforms never touch it.

    Sun, Moon and star locations are astrometric J2000; planet locations are
    apparent and of date.
    """

    horizon = staticmethod(coords.horizon)
    ecliptic = staticmethod(coords.ecliptic)
    precess = staticmethod(coords.precess)
    angular_separation = staticmethod(coords.angular_separation)

    def __init__(self, data_dir: Path = DEFAULT_DATA_DIR, kernel: str = DEFAULT_KERNEL) -> None:
        self._loader = Loader(str(data_dir))
        self._kernel_name = kernel
        self._kernel = None

    @property
    def kernel(self):
        if self._kernel is None:
            log.debug("loading ephemeris kernel %s", self._kernel_name)
            self._kernel = self._loader(self._kernel_name)
        return self._kernel

    def _target(self, body: SolarSystemBody | Star):
        if isinstance(body, Star):
            return skyfield_star(body)
        if isinstance(body, Planet):
            return self.kernel[body.target]
        return self.kernel[body.name]

    def _astrometric(self, body: SolarSystemBody | Star, when: datetime):
        t = coords.skyfield_time(when)
        earth = self.kernel["earth"]
        return earth.at(t).observe(self._target(body))  # type: ignore[union-attr]

    def location(self, body: SolarSystemBody | Star, when: datetime) -> Equatorial:
        astrometric = self._astrometric(body, when)
        if isinstance(body, Planet):
            ra, dec, _ = astrometric.apparent().radec(epoch="date")
        else:
            ra, dec, _ = astrometric.radec()
        return Equatorial(Angle.from_hours(float(ra.hours)), Angle(float(dec.degrees)))

    def distance(self, body: SolarSystemBody, when: datetime) -> float:
        return float(self._astrometric(body, when).distance().au)

    def _heliocentric_distance(self, body: Planet, when: datetime) -> float:
        t = coords.skyfield_time(when)
        return float((self.kernel[body.target] - self.kernel["sun"]).at(t).distance().au)

    def magnitude(self, body: SolarSystemBody, when: datetime) -> float:
        if isinstance(body, Sun):
            return SUN_ABSOLUTE_MAGNITUDE + 5.0 * math.log10(self.distance(body, when))
        if isinstance(body, Moon):
            t = coords.skyfield_time(when)
            alpha = abs(float(almanac.phase_angle(self.kernel, "moon", t).degrees))
            return MOON_FULL_MAGNITUDE + 0.026 * alpha + 4e-9 * alpha**4
        if body.name in _MAGNITUDE_MODELS:
            return float(planetary_magnitude(self._astrometric(body, when)))
        r = self._heliocentric_distance(body, when)
        delta = self.distance(body, when)
        return body.abs_magnitude + 5.0 * math.log10(r * delta)

    def phase_angle(self, body: Planet | Moon, when: datetime) -> Angle:
        """Phase angle with 0 at new and 180 at full.

        For the Moon this is the Sun-Moon elongation in ecliptic longitude,
        which also tells waxing from waning. Planets only ever show their
        gibbous side, so they stay in [0, 180].
        """
        t = coords.skyfield_time(when)
        if isinstance(body, Moon):
            return Angle(float(almanac.moon_phase(self.kernel, t).degrees))
        if isinstance(body, Planet):
            sun_angle = float(almanac.phase_angle(self.kernel, body.target, t).degrees)
            return Angle(180.0 - sun_angle)
        raise ValueError(f"no phase angle for {body.name}")

    def angular_diameter(self, body: SolarSystemBody, when: datetime) -> Angle | None:
        radius = getattr(body, "radius_km", None)
        if not radius:
            return None
        distance_km = self._astrometric(body, when).distance().km
        return Angle.from_radians(2.0 * math.asin(radius / float(distance_km)))

    def riseset(
        self, position: Equatorial, when: datetime, latitude: Angle, longitude: Angle
    ) -> tuple[datetime | None, datetime | None]:
        """First rise and first set of a fixed position during ``when``'s UTC day.

        Either is None when the position does not cross the horizon that way
        that day, e.g. circumpolar or never-rising positions.
        """
        start = coords.utc_day(when)
        t0 = coords.skyfield_time(start)
        t1 = coords.skyfield_time(start + timedelta(days=1))
        observer = self.kernel["earth"] + wgs84.latlon(latitude.degrees, longitude.degrees)
        target = coords.fixed_star(position, when)
        horizon = coords.STANDARD_ALTITUDE.degrees
        rise = _first_crossing(almanac.find_risings(observer, target, t0, t1, horizon_degrees=horizon))
        set_ = _first_crossing(almanac.find_settings(observer, target, t0, t1, horizon_degrees=horizon))
        return rise, set_
