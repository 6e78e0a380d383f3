"""Catalog loading and lookup."""

import pytest

from skyquery.catalog import PLANETS, load_catalog
from skyquery.errors import UnknownObjectError
from skyquery.models import Moon, Planet, Star, Sun

BODIES = ["sun", "mercury", "venus", "moon", "mars", "jupiter", "saturn", "uranus", "neptune", "pluto"]


class TestDefaultCatalog:
    @pytest.mark.parametrize("name", BODIES)
    def test_solar_system_seeded(self, catalog, name):
        assert name in catalog

    def test_body_types(self, catalog):
        assert isinstance(catalog.lookup("sun"), Sun)
        assert isinstance(catalog.lookup("moon"), Moon)
        assert isinstance(catalog.lookup("Jupiter"), Planet)
        assert catalog.lookup("jupiter").target == "jupiter barycenter"

    def test_star_units_are_degrees(self, catalog):
        sirius = catalog.lookup("sirius")
        assert isinstance(sirius, Star)
        assert sirius.position.ra.degrees == pytest.approx(101.287155)
        assert sirius.magnitude == pytest.approx(-1.46)
        assert sirius.parallax.degrees * 3_600_000 == pytest.approx(379.21)
        assert sirius.pm_dec.degrees * 3_600_000 == pytest.approx(-1223.07)

    def test_unknown(self, catalog):
        with pytest.raises(UnknownObjectError):
            catalog.lookup("vulcan")

    def test_read_only(self, catalog):
        with pytest.raises(TypeError):
            catalog["vulcan"] = PLANETS[0]


class TestLoadCatalog:
    def test_star_never_shadows_body(self, tmp_path):
        path = tmp_path / "stars.csv"
        path.write_text(
            "name,ra_deg,dec_deg,magnitude,parallax,pm_ra,pm_dec\n"
            "Mars,10.0,10.0,1.0,1.0,0.0,0.0\n"
            "Testar,20.0,-5.0,3.5,100.0,0.0,0.0\n"
        )
        catalog = load_catalog(path)
        assert isinstance(catalog.lookup("mars"), Planet)
        assert catalog.lookup("TESTAR").magnitude == 3.5
        assert len(catalog) == len(BODIES) + 1

    def test_rows_without_position_dropped(self, tmp_path):
        path = tmp_path / "stars.csv"
        path.write_text(
            "name,ra_deg,dec_deg,magnitude,parallax,pm_ra,pm_dec\n"
            "ghost,,,1.0,1.0,0.0,0.0\n"
        )
        assert "ghost" not in load_catalog(path)
