"""Catalog: the fixed solar-system bodies plus the named stars from data/stars.csv."""

import logging
from collections.abc import Iterator, Mapping
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType

import pandas as pd

from skyquery.errors import UnknownObjectError
from skyquery.models import Angle, CelestialObject, Equatorial, Moon, Planet, Star, Sun

log = logging.getLogger(__name__)

STARS_PATH = Path(__file__).parent / "data" / "stars.csv"

# Catalog angular columns are milliarcseconds; this takes them to degrees.
MAS_PER_DEGREE = 3_600_000.0

PLANETS: tuple[Planet, ...] = (
    Planet(name="mercury", target="mercury", radius_km=2_439.7, abs_magnitude=-0.60),
    Planet(name="venus", target="venus", radius_km=6_051.8, abs_magnitude=-4.47),
    Planet(name="mars", target="mars", radius_km=3_389.5, abs_magnitude=-1.52),
    Planet(name="jupiter", target="jupiter barycenter", radius_km=69_911.0, abs_magnitude=-9.40),
    Planet(name="saturn", target="saturn barycenter", radius_km=58_232.0, abs_magnitude=-8.88),
    Planet(name="uranus", target="uranus barycenter", radius_km=25_362.0, abs_magnitude=-7.19),
    Planet(name="neptune", target="neptune barycenter", radius_km=24_622.0, abs_magnitude=-6.87),
    Planet(name="pluto", target="pluto barycenter", radius_km=1_188.3, abs_magnitude=-1.01),
)


class Catalog(Mapping[str, CelestialObject]):
    """Read-only name → object table. Safe to share between threads."""

    def __init__(self, objects: Mapping[str, CelestialObject]) -> None:
        self._objects = MappingProxyType({k.lower(): v for k, v in objects.items()})

    def __getitem__(self, name: str) -> CelestialObject:
        return self._objects[name.lower()]

    def __iter__(self) -> Iterator[str]:
        return iter(self._objects)

    def __len__(self) -> int:
        return len(self._objects)

    def lookup(self, name: str) -> CelestialObject:
        """Case-insensitive lookup.

        Raises:
            UnknownObjectError: If no object has this name.
        """
        try:
            return self[name]
        except KeyError:
            raise UnknownObjectError(name) from None


def solar_system() -> dict[str, CelestialObject]:
    bodies: dict[str, CelestialObject] = {"sun": Sun(), "moon": Moon()}
    for planet in PLANETS:
        bodies[planet.name] = planet
    return bodies


def load_stars(path: Path = STARS_PATH) -> dict[str, Star]:
    """Parse the star table.

    Columns: ``name, ra_deg, dec_deg, magnitude, parallax, pm_ra, pm_dec``.
    Parallax and proper motions are divided by 3,600,000 to get degrees.
    """
    df = pd.read_csv(path)
    df = df.dropna(subset=["ra_deg", "dec_deg"])
    stars: dict[str, Star] = {}
    for row in df.itertuples(index=False):
        name = str(row.name).strip().lower()
        stars[name] = Star(
            name=name,
            position=Equatorial(Angle(float(row.ra_deg)), Angle(float(row.dec_deg))),
            magnitude=float(row.magnitude),
            parallax=Angle(float(row.parallax) / MAS_PER_DEGREE),
            pm_ra=Angle(float(row.pm_ra) / MAS_PER_DEGREE),
            pm_dec=Angle(float(row.pm_dec) / MAS_PER_DEGREE),
        )
    return stars


def load_catalog(stars_path: Path = STARS_PATH) -> Catalog:
    """Solar-system bodies plus stars. A star never shadows a body of the same name."""
    objects: dict[str, CelestialObject] = {}
    objects.update(load_stars(stars_path))
    objects.update(solar_system())
    log.debug("catalog loaded: %d objects from %s", len(objects), stars_path)
    return Catalog(objects)


@lru_cache(maxsize=1)
def default_catalog() -> Catalog:
    return load_catalog()
