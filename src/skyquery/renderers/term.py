"""Plain terminal output: space-joined values, fixed-width ephemeris tables."""

from collections.abc import Sequence
from datetime import datetime

from skyquery.i18n import t
from skyquery.renderers.base import Driver, Row

DATE_WIDTH = 22
COLUMN_WIDTH = 29


class TermDriver(Driver):
    def header(self, rows: Sequence[Row], when: datetime) -> None:
        line = f"{t('column_date', self.lang):^{DATE_WIDTH}}"
        line += "".join(f"{label:^{COLUMN_WIDTH}}" for _, label in rows)
        self.write(line + "\n")
        self.write("=" * (COLUMN_WIDTH * len(rows) + DATE_WIDTH) + "\n")

    def query(self, rows: Sequence[Row]) -> None:
        self.write(" ".join(self.fmt(value) for value, _ in rows) + "\n")

    def ephemeris_row(self, rows: Sequence[Row], when: datetime) -> None:
        line = f"{self.fmt_date(when):^{DATE_WIDTH}}"
        line += "".join(f"{self.fmt(value):<{COLUMN_WIDTH}}" for value, _ in rows)
        self.write(line.rstrip() + "\n")
