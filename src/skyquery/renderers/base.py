"""Output driver interface shared by the term, CSV and JSON renderers."""

import sys
from collections.abc import Sequence
from datetime import datetime, tzinfo
from typing import TextIO

from pytz import utc

from skyquery.values import DateValue, Value

# (value, column label as the user typed it)
Row = tuple[Value, str]


class Driver:
    """Writes query results to a text stream.

    Call order: ``start()``, then either one ``query(rows)`` or
    ``header(rows, when)`` followed by ``ephemeris_row(rows, when)`` per
    instant, then ``footer()``.

    Args:
        stream: Destination. Defaults to stdout.
        raw: Render values in their machine form.
        tz: Display zone for human dates.
        lang: Language for labels and phase names.
    """

    def __init__(
        self,
        stream: TextIO | None = None,
        raw: bool = False,
        tz: tzinfo = utc,
        lang: str = "en",
    ) -> None:
        self.stream = stream if stream is not None else sys.stdout
        self.raw = raw
        self.tz = tz
        self.lang = lang

    def fmt(self, value: Value) -> str:
        return value.render(self.raw, tz=self.tz, lang=self.lang)

    def fmt_date(self, when: datetime) -> str:
        return self.fmt(DateValue(when))

    def write(self, text: str) -> None:
        self.stream.write(text)

    def start(self) -> None:
        pass

    def header(self, rows: Sequence[Row], when: datetime) -> None:
        pass

    def query(self, rows: Sequence[Row]) -> None:
        raise NotImplementedError

    def ephemeris_row(self, rows: Sequence[Row], when: datetime) -> None:
        raise NotImplementedError

    def footer(self) -> None:
        pass
