"""Display time zone for human-readable dates."""

import logging
from datetime import tzinfo
from functools import lru_cache

from pytz import timezone, utc
from timezonefinder import TimezoneFinder

from skyquery.models import ReferenceFrame

log = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def _finder() -> TimezoneFinder:
    return TimezoneFinder()


def display_timezone(frame: ReferenceFrame, override: str | None = None) -> tzinfo:
    """Pick the zone dates are shown in.

    An explicit zone name wins; otherwise the zone at the frame's location;
    otherwise UTC (also when the location falls in open ocean).
    """
    if override:
        return timezone(override)
    if frame.location is None:
        return utc
    latitude, longitude = frame.location
    tz_str = _finder().timezone_at(lat=latitude.signed().degrees, lng=longitude.signed().degrees)
    if tz_str is None:
        log.debug("no time zone at %s, %s; using UTC", latitude, longitude)
        return utc
    return timezone(tz_str)
