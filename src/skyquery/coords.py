"""Coordinate transforms on fixed equatorial positions.

Positions are turned into skyfield position objects and projected through
skyfield's frames. Only the built-in timescale is needed here; rise and set
need the Earth's orbit and live on the ephemeris provider.
"""

from datetime import datetime, time
from functools import lru_cache

from pytz import utc
from skyfield.api import Star, load, position_of_radec, wgs84
from skyfield.framelib import ecliptic_frame

from skyquery.models import Angle, Equatorial

J2000 = datetime(2000, 1, 1, 12, 0, tzinfo=utc)
STANDARD_ALTITUDE = Angle(-0.5667)  # Horizon refraction at rise/set


@lru_cache(maxsize=1)
def _timescale():
    return load.timescale()


def skyfield_time(when: datetime):
    """skyfield Time for an aware datetime."""
    return _timescale().from_datetime(when)


def utc_day(when: datetime) -> datetime:
    """Midnight UTC starting ``when``'s UTC day."""
    return datetime.combine(when.astimezone(utc).date(), time(0), tzinfo=utc)


def _epoch(when: datetime):
    # J2000 positions are ICRS; every other instant means true equator and equinox of date.
    if when == J2000:
        return None
    return skyfield_time(when)


def _sky_position(position: Equatorial, when: datetime, center=None):
    return position_of_radec(
        position.ra.normalized().hours,
        position.dec.degrees,
        epoch=_epoch(when),
        t=skyfield_time(when),
        center=center,
    )


def _equatorial(ra, dec) -> Equatorial:
    return Equatorial(Angle.from_hours(float(ra.hours)), Angle(float(dec.degrees)))


def horizon(
    position: Equatorial, when: datetime, latitude: Angle, longitude: Angle
) -> tuple[Angle, Angle]:
    """Project an equatorial position onto the observer's horizon.

    Returns:
        (azimuth measured from north through east, altitude).
    """
    observer = wgs84.latlon(latitude.degrees, longitude.degrees)
    alt, az, _ = _sky_position(position, when, center=observer).altaz()
    return Angle(float(az.degrees)), Angle(float(alt.degrees))


def ecliptic(position: Equatorial, when: datetime) -> tuple[Angle, Angle]:
    """Ecliptic (longitude, latitude) on the true ecliptic and equinox of date."""
    lat, lon, _ = _sky_position(position, when).frame_latlon(ecliptic_frame)
    return Angle(float(lon.degrees)), Angle(float(lat.degrees))


def precess(position: Equatorial, from_epoch: datetime, to_epoch: datetime) -> Equatorial:
    """Move an equatorial position between two equinoxes."""
    moved = position_of_radec(
        position.ra.normalized().hours, position.dec.degrees, epoch=_epoch(from_epoch)
    )
    ra, dec, _ = moved.radec(epoch=_epoch(to_epoch))
    return _equatorial(ra, dec)


def angular_separation(a: Equatorial, b: Equatorial) -> Angle:
    separation = _sky_position(a, J2000).separation_from(_sky_position(b, J2000))
    return Angle(float(separation.degrees))


def fixed_star(position: Equatorial, when: datetime) -> Star:
    """A skyfield Star sitting still at an equatorial position of ``when``."""
    ra, dec, _ = position_of_radec(
        position.ra.normalized().hours, position.dec.degrees, epoch=_epoch(when)
    ).radec()
    return Star(ra=ra, dec=dec)
