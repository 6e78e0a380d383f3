"""CLI commands through click's test runner."""

import json

import pytest
from click.testing import CliRunner

from conftest import FakeEphemeris
from skyquery import cli


@pytest.fixture
def runner(clean_env, monkeypatch):
    provider = FakeEphemeris()
    monkeypatch.setattr(cli, "default_provider", lambda: provider)
    return CliRunner()


def invoke(runner, *args):
    return runner.invoke(cli.main, list(args))


class TestRpn:
    def test_moon_phase(self, runner):
        result = invoke(runner, "rpn", "moon", "phase", ".")
        assert result.exit_code == 0, result.output
        assert result.output == "🌕 Full (100.0%)\n"

    def test_prints_remaining_top(self, runner):
        result = invoke(runner, "rpn", "mars", "mag")
        assert result.exit_code == 0, result.output
        assert result.output == "0.50\n"

    def test_location_from_options(self, runner):
        result = invoke(runner, "-l", "45n", "-L", "93w", "--tz", "UTC", "rpn", "mars", "rise", ".")
        assert result.exit_code == 0, result.output
        assert result.output.strip() == "none" or len(result.output.strip()) == 5

    def test_raw_date(self, runner):
        result = invoke(runner, "--raw", "-d", "@86400", "rpn", "@86400")
        assert result.exit_code == 0, result.output
        assert result.output == "86400\n"

    def test_domain_error_exit_status(self, runner):
        result = invoke(runner, "rpn", "sun", "phase")
        assert result.exit_code == 1
        assert "phase of sun: no phase" in result.output

    def test_unparseable_word(self, runner):
        result = invoke(runner, "rpn", "mars", "bogus")
        assert result.exit_code == 1
        assert "Failed to parse word 1: `bogus`" in result.output


class TestQuery:
    def test_term(self, runner):
        result = invoke(runner, "query", "mars", "mag,dist")
        assert result.exit_code == 0, result.output
        assert result.output == "0.50 1.50 AU\n"

    def test_csv_raw(self, runner):
        result = invoke(runner, "-f", "csv", "--raw", "query", "mars", "mag,dist")
        assert result.output == "0.50,1.5\n"

    def test_json(self, runner):
        result = invoke(runner, "-f", "json", "query", "mars", "mag")
        assert json.loads(result.output) == {"q": [{"mag": "0.50", "isq": True}, {"isq": False}]}

    def test_raw_coordinate_object(self, runner):
        result = invoke(runner, "--raw", "query", "60d,20d", "equ")
        assert result.output == "[4.00000, 20.00000]\n"

    def test_unknown_object(self, runner):
        result = invoke(runner, "query", "vulcan", "mag")
        assert result.exit_code == 1
        assert "Unknown object: `vulcan`" in result.output

    def test_missing_location(self, runner):
        result = invoke(runner, "query", "mars", "horiz")
        assert result.exit_code == 1
        assert "need a location" in result.output


class TestEphem:
    def test_csv_table(self, runner):
        result = invoke(
            runner, "-f", "csv", "-d", "2024-01-01", "ephem", "mars", "mag", "--end", "2024-01-03"
        )
        assert result.exit_code == 0, result.output
        assert result.output.splitlines() == [
            "date,mag",
            "2024-01-01T00:00:00,0.50",
            "2024-01-02T00:00:00,0.50",
            "2024-01-03T00:00:00,0.50",
        ]

    def test_step_and_start(self, runner):
        result = invoke(
            runner,
            "-f", "json", "--raw",
            "ephem", "mars", "mag",
            "--start", "@0", "--end", "@7200", "--step", "1h",
        )
        doc = json.loads(result.output)
        assert [row["timestamp"] for row in doc["q"][:-1]] == [0, 3600, 7200]

    def test_bad_step(self, runner):
        result = invoke(runner, "ephem", "mars", "mag", "--end", "@0", "--step", "0")
        assert result.exit_code == 2


class TestOptions:
    def test_lat_without_long(self, runner):
        result = invoke(runner, "-l", "45n", "query", "mars", "mag")
        assert result.exit_code == 2
        assert "--lat and --long" in result.output

    def test_bad_angle(self, runner):
        result = invoke(runner, "-l", "north", "-L", "93w", "query", "mars", "mag")
        assert result.exit_code == 2
        assert "Invalid angle" in result.output

    def test_unknown_zone(self, runner):
        result = invoke(runner, "--tz", "Mars/Olympus_Mons", "query", "mars", "mag")
        assert result.exit_code == 2

    def test_bad_environment(self, runner, monkeypatch):
        monkeypatch.setenv("SKYQUERY_LANG", "fr")
        result = invoke(runner, "query", "mars", "mag")
        assert result.exit_code == 1
        assert "SKYQUERY_LANG" in result.output

    def test_korean_phase_name(self, runner):
        result = invoke(runner, "--lang", "ko", "query", "moon", "phasename")
        assert result.output == "보름달\n"
