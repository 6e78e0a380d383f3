from datetime import datetime, timedelta

import pytest
from pytz import utc

from skyquery import coords
from skyquery.catalog import default_catalog
from skyquery.models import Angle, Equatorial, ReferenceFrame, Star

FIXED = datetime(2024, 3, 20, 12, 0, tzinfo=utc)


class FakeEphemeris:
    """Deterministic stand-in for SkyfieldEphemeris.

    Body data comes from plain dicts keyed by object name and stars sit still
    at their catalog position. Rise/set is a fixed 06:00/18:00 unless the
    position never crosses the horizon. The other coordinate transforms are
    the real ones, which need no kernel.
    """

    horizon = staticmethod(coords.horizon)
    ecliptic = staticmethod(coords.ecliptic)
    precess = staticmethod(coords.precess)
    angular_separation = staticmethod(coords.angular_separation)

    def __init__(self, phase_angles=None, no_diameter=()):
        self.positions = {
            "sun": Equatorial(Angle(0.0), Angle(0.0)),
            "moon": Equatorial(Angle(180.0), Angle(0.0)),
            "mars": Equatorial(Angle(60.0), Angle(20.0)),
            "venus": Equatorial(Angle(30.0), Angle(10.0)),
        }
        self.distances = {"sun": 1.0, "moon": 0.00257, "mars": 1.5, "venus": 0.7}
        self.magnitudes = {"sun": -26.74, "moon": -12.7, "mars": 0.5, "venus": -4.1}
        self.phase_angles = {"moon": 180.0, "mars": 170.0, "venus": 90.0}
        self.phase_angles.update(phase_angles or {})
        self.no_diameter = set(no_diameter)
        self.calls = []

    def location(self, body, when):
        self.calls.append(("location", body.name))
        if isinstance(body, Star):
            return body.position
        return self.positions.get(body.name, Equatorial(Angle(0.0), Angle(0.0)))

    def distance(self, body, when):
        return self.distances.get(body.name, 10.0)

    def magnitude(self, body, when):
        return self.magnitudes.get(body.name, 5.0)

    def phase_angle(self, body, when):
        return Angle(self.phase_angles.get(body.name, 90.0))

    def angular_diameter(self, body, when):
        if body.name in self.no_diameter:
            return None
        return Angle(0.5)

    def riseset(self, position, when, latitude, longitude):
        if abs(position.dec.degrees) + abs(latitude.degrees) >= 90.0:
            return None, None
        midnight = coords.utc_day(when)
        return midnight + timedelta(hours=6), midnight + timedelta(hours=18)


@pytest.fixture
def provider():
    return FakeEphemeris()


@pytest.fixture(scope="session")
def catalog():
    return default_catalog()


@pytest.fixture
def frame():
    """No observer."""
    return ReferenceFrame(instant=FIXED)


@pytest.fixture
def minneapolis():
    return ReferenceFrame(instant=FIXED, location=(Angle(45.0), Angle(-93.0)))


@pytest.fixture
def sydney():
    return ReferenceFrame(instant=FIXED, location=(Angle(-33.9), Angle(151.2)))


@pytest.fixture
def clean_env(monkeypatch):
    """Unset every SKYQUERY_* variable so settings come out at their defaults."""
    for key in (
        "SKYQUERY_DATA_DIR",
        "SKYQUERY_EPHEMERIS",
        "SKYQUERY_LAT",
        "SKYQUERY_LONG",
        "SKYQUERY_TZ",
        "SKYQUERY_LANG",
        "SKYQUERY_LOG_LEVEL",
    ):
        monkeypatch.delenv(key, raising=False)
