"""SkyfieldEphemeris without a kernel: construction, star models and the rise/set search."""

from datetime import datetime, timedelta

import numpy as np
import pytest
from pytz import utc
from skyfield import almanac
from skyfield.api import load

from conftest import FIXED
from skyquery import coords
from skyquery.catalog import MAS_PER_DEGREE
from skyquery.ephemeris import SkyfieldEphemeris, skyfield_star
from skyquery.models import Angle, Equatorial, Sun


@pytest.fixture
def ephemeris(tmp_path):
    return SkyfieldEphemeris(tmp_path, "de421.bsp")


class _Earth:
    """Kernel segment stand-in: adding a ground position gives that position back."""

    def __add__(self, topos):
        return topos


class TestSkyfieldEphemeris:
    def test_kernel_is_lazy(self, ephemeris, tmp_path):
        assert ephemeris._kernel is None
        assert not (tmp_path / "de421.bsp").exists()

    def test_coordinate_methods_need_no_kernel(self, ephemeris):
        position = Equatorial(Angle(60.0), Angle(20.0))
        assert ephemeris.horizon(position, FIXED, Angle(45.0), Angle(-93.0)) == coords.horizon(
            position, FIXED, Angle(45.0), Angle(-93.0)
        )
        assert ephemeris.angular_separation(position, position).degrees == pytest.approx(0.0, abs=1e-6)
        assert ephemeris._kernel is None

    def test_sun_has_no_phase_angle(self, ephemeris):
        with pytest.raises(ValueError):
            ephemeris.phase_angle(Sun(), FIXED)


class TestStarModel:
    def test_catalog_motion_in_milliarcseconds(self, catalog):
        sirius = catalog["sirius"]
        star = skyfield_star(sirius)
        assert star.ra.hours * 15.0 == pytest.approx(sirius.position.ra.degrees)
        assert star.dec.degrees == pytest.approx(sirius.position.dec.degrees)
        assert star.ra_mas_per_year == pytest.approx(sirius.pm_ra.degrees * MAS_PER_DEGREE)
        assert star.dec_mas_per_year == pytest.approx(sirius.pm_dec.degrees * MAS_PER_DEGREE)
        assert star.parallax_mas == pytest.approx(sirius.parallax.degrees * MAS_PER_DEGREE)
        assert star.parallax_mas > 300.0


class TestRiseSet:
    @pytest.fixture
    def searches(self, ephemeris, monkeypatch):
        ts = load.timescale()
        midnight = datetime(2024, 3, 20, tzinfo=utc)
        calls = []

        def find(crossed):
            def search(observer, target, start, end, horizon_degrees):
                calls.append((start.utc_datetime(), end.utc_datetime(), horizon_degrees, target))
                times = ts.from_datetimes([midnight + timedelta(hours=5), midnight + timedelta(hours=7)])
                return times, np.array(crossed)

            return search

        ephemeris._kernel = {"earth": _Earth()}
        monkeypatch.setattr(almanac, "find_risings", find([False, True]))
        monkeypatch.setattr(almanac, "find_settings", find([False, False]))
        return calls

    def test_searches_the_frame_utc_day(self, ephemeris, searches):
        ephemeris.riseset(Equatorial(Angle(60.0), Angle(20.0)), FIXED, Angle(45.0), Angle(-93.0))
        assert len(searches) == 2
        for start, end, horizon_degrees, _ in searches:
            assert abs((start - datetime(2024, 3, 20, tzinfo=utc)).total_seconds()) < 1e-3
            assert abs((end - datetime(2024, 3, 21, tzinfo=utc)).total_seconds()) < 1e-3
            assert horizon_degrees == coords.STANDARD_ALTITUDE.degrees

    def test_first_real_crossing_or_none(self, ephemeris, searches):
        rise, set_ = ephemeris.riseset(
            Equatorial(Angle(60.0), Angle(20.0)), FIXED, Angle(45.0), Angle(-93.0)
        )
        assert abs((rise - datetime(2024, 3, 20, 7, tzinfo=utc)).total_seconds()) < 1e-3
        assert set_ is None

    def test_target_is_the_fixed_position(self, ephemeris, searches):
        position = coords.precess(Equatorial(Angle(60.0), Angle(20.0)), coords.J2000, FIXED)
        ephemeris.riseset(position, FIXED, Angle(45.0), Angle(-93.0))
        target = searches[0][3]
        assert target.ra.hours * 15.0 == pytest.approx(60.0, abs=1e-7)
        assert target.dec.degrees == pytest.approx(20.0, abs=1e-7)
