"""Settings from the environment. Entry points call ``load_dotenv()`` first, so a .env file works too."""

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from pytz import UnknownTimeZoneError, timezone

from skyquery.ephemeris import DEFAULT_DATA_DIR, DEFAULT_KERNEL
from skyquery.errors import ConfigError, InvalidLiteralError
from skyquery.i18n import LANGUAGES
from skyquery.models import Angle
from skyquery.parse import parse_angle


@dataclass(frozen=True)
class Settings:
    data_dir: Path  # skyfield download/cache directory
    ephemeris_file: str  # JPL kernel name ("de421.bsp")
    location: tuple[Angle, Angle] | None  # Default observer (latitude, longitude)
    timezone: str | None  # Display zone name; None = observer's zone or UTC
    lang: str  # "en" or "ko"
    log_level: str


def _angle(environ: Mapping[str, str], key: str) -> Angle | None:
    raw = environ.get(key, "").strip()
    if not raw:
        return None
    try:
        return parse_angle(raw)
    except InvalidLiteralError as exc:
        raise ConfigError(f"{key}: {exc}") from exc


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build Settings from ``SKYQUERY_*`` variables.

    Raises:
        ConfigError: On a malformed or incomplete value.
    """
    env = os.environ if environ is None else environ

    latitude = _angle(env, "SKYQUERY_LAT")
    longitude = _angle(env, "SKYQUERY_LONG")
    if (latitude is None) != (longitude is None):
        raise ConfigError("SKYQUERY_LAT and SKYQUERY_LONG must be set together")
    location = (latitude, longitude) if latitude is not None and longitude is not None else None

    tz_name = env.get("SKYQUERY_TZ", "").strip() or None
    if tz_name is not None:
        try:
            timezone(tz_name)
        except UnknownTimeZoneError as exc:
            raise ConfigError(f"SKYQUERY_TZ: unknown time zone {tz_name}") from exc

    lang = env.get("SKYQUERY_LANG", "en").strip().lower() or "en"
    if lang not in LANGUAGES:
        raise ConfigError(f"SKYQUERY_LANG must be one of {', '.join(LANGUAGES)}")

    log_level = env.get("SKYQUERY_LOG_LEVEL", "WARNING").strip().upper() or "WARNING"
    if not isinstance(logging.getLevelName(log_level), int):
        raise ConfigError(f"SKYQUERY_LOG_LEVEL: unknown level {log_level}")

    data_dir = env.get("SKYQUERY_DATA_DIR", "").strip()
    return Settings(
        data_dir=Path(data_dir).expanduser() if data_dir else DEFAULT_DATA_DIR,
        ephemeris_file=env.get("SKYQUERY_EPHEMERIS", "").strip() or DEFAULT_KERNEL,
        location=location,
        timezone=tz_name,
        lang=lang,
        log_level=log_level,
    )
