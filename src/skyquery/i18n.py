"""Simple two-language (en/ko) translation helper for rendered labels."""

LANGUAGES = ("en", "ko")

_STRINGS: dict[str, dict[str, str]] = {
    "phase_new": {
        "en": "New",
        "ko": "삭",
    },
    "phase_waxing_crescent": {
        "en": "Waxing Crescent",
        "ko": "초승달",
    },
    "phase_first_quarter": {
        "en": "First Quarter",
        "ko": "상현달",
    },
    "phase_waxing_gibbous": {
        "en": "Waxing Gibbous",
        "ko": "차가는 달",
    },
    "phase_full": {
        "en": "Full",
        "ko": "보름달",
    },
    "phase_waning_gibbous": {
        "en": "Waning Gibbous",
        "ko": "기우는 달",
    },
    "phase_last_quarter": {
        "en": "Last Quarter",
        "ko": "하현달",
    },
    "phase_waning_crescent": {
        "en": "Waning Crescent",
        "ko": "그믐달",
    },
    "column_date": {
        "en": "date",
        "ko": "날짜",
    },
}

# Indexed by phase bucket.
PHASE_KEYS: tuple[str, ...] = (
    "phase_new",
    "phase_waxing_crescent",
    "phase_first_quarter",
    "phase_waxing_gibbous",
    "phase_full",
    "phase_waning_gibbous",
    "phase_last_quarter",
    "phase_waning_crescent",
)


def t(key: str, lang: str) -> str:
    """Phase name or column label for a rendered value.

    A language missing from the table reads as English; a key missing from the
    table is shown as-is so an unknown label still renders.
    """
    entry = _STRINGS.get(key)
    if entry is None:
        return key
    return entry.get(lang) or entry.get("en") or key
