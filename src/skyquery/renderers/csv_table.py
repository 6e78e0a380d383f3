"""CSV output: a ``date,<labels>`` header, then one record per row."""

import csv
from collections.abc import Sequence
from datetime import datetime

from skyquery.renderers.base import Driver, Row


class CsvDriver(Driver):
    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._writer = csv.writer(self.stream, lineterminator="\n")

    def header(self, rows: Sequence[Row], when: datetime) -> None:
        self._writer.writerow(["date", *(label for _, label in rows)])

    def query(self, rows: Sequence[Row]) -> None:
        self._writer.writerow([self.fmt(value) for value, _ in rows])

    def ephemeris_row(self, rows: Sequence[Row], when: datetime) -> None:
        self._writer.writerow([self.fmt_date(when), *(self.fmt(value) for value, _ in rows)])
