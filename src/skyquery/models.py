"""Data model definitions: angles, celestial objects, reference frames, property tags."""

import math
from dataclasses import dataclass
from datetime import datetime
from enum import Enum


@dataclass(frozen=True)
class Angle:
    """An angle stored in degrees. Never normalized on construction."""

    degrees: float

    @classmethod
    def from_radians(cls, radians: float) -> "Angle":
        return cls(math.degrees(radians))

    @classmethod
    def from_hours(cls, hours: float) -> "Angle":
        return cls(hours * 15.0)

    @property
    def radians(self) -> float:
        return math.radians(self.degrees)

    @property
    def hours(self) -> float:
        return self.degrees / 15.0

    def normalized(self) -> "Angle":
        """Same direction, in [0, 360)."""
        return Angle(self.degrees % 360.0)

    def signed(self) -> "Angle":
        """Same direction, in (-180, 180]."""
        d = self.degrees % 360.0
        return Angle(d - 360.0 if d > 180.0 else d)

    def cos(self) -> float:
        return math.cos(self.radians)

    def dms(self) -> tuple[int, int, float]:
        """Degrees, arcminutes and arcseconds of the absolute value, seconds to 0.1″."""
        tenths = round(abs(self.degrees) * 36_000.0)
        d, rest = divmod(tenths, 36_000)
        m, s = divmod(rest, 600)
        return d, m, s / 10.0

    def clock(self) -> tuple[int, int, float]:
        """Hours, minutes and whole seconds of the normalized angle read as a clock."""
        seconds = round(self.normalized().hours * 3600.0) % 86_400
        h, rest = divmod(seconds, 3600)
        m, s = divmod(rest, 60)
        return h, m, float(s)


@dataclass(frozen=True)
class Equatorial:
    """A right ascension / declination pair."""

    ra: Angle
    dec: Angle


@dataclass(frozen=True)
class Planet:
    """A solar-system planet served by the ephemeris kernel."""

    name: str
    target: str  # Segment name in the JPL kernel ("mars barycenter")
    radius_km: float  # Mean radius, for angular diameter
    abs_magnitude: float  # H, used where skyfield has no magnitude model


@dataclass(frozen=True)
class Sun:
    name: str = "sun"
    radius_km: float = 695_700.0


@dataclass(frozen=True)
class Moon:
    name: str = "moon"
    radius_km: float = 1_737.4


@dataclass(frozen=True)
class Star:
    """A catalog star. Position is J2000, proper motions are per Julian year."""

    name: str
    position: Equatorial
    magnitude: float  # Apparent visual magnitude
    parallax: Angle
    pm_ra: Angle  # Includes the cos(dec) factor
    pm_dec: Angle


@dataclass(frozen=True)
class RawCoordinate:
    """An ad-hoc sky position that bypasses the catalog."""

    position: Equatorial

    @property
    def name(self) -> str:
        return f"coordinate({self.position.ra.degrees:.5f}, {self.position.dec.degrees:.5f})"


CelestialObject = Planet | Sun | Moon | Star | RawCoordinate

# Bodies the ephemeris provider computes directly.
SolarSystemBody = Planet | Sun | Moon


@dataclass(frozen=True)
class ReferenceFrame:
    """Observer location (optional) and instant. Input to every computed property."""

    instant: datetime  # Aware UTC datetime
    location: tuple[Angle, Angle] | None = None  # (latitude, longitude)

    @property
    def northern(self) -> bool:
        """Hemisphere used for cosmetic choices. No location counts as northern."""
        if self.location is None:
            return True
        return self.location[0].signed().degrees >= 0.0


class Property(Enum):
    """What is being asked about an object."""

    EQUATORIAL = "equatorial"
    HORIZONTAL = "horizontal"
    ECLIPTIC = "ecliptic"
    DISTANCE = "distance"
    MAGNITUDE = "magnitude"
    PHASE_DEFAULT = "phase"
    PHASE_NAME = "phasename"
    PHASE_EMOJI = "phaseemoji"
    ILLUMINATED_FRACTION = "illumfrac"
    ANGULAR_DIAMETER = "angdia"
    RISE = "rise"
    SET = "set"


@dataclass(frozen=True)
class AngleBetween:
    """Great-circle separation from the subject to another object."""

    other: CelestialObject

    @property
    def value(self) -> str:
        return f"between:{self.other.name}"


Query = Property | AngleBetween
