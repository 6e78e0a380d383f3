"""Streaming JSON output.

The document is ``{"q": [<row>, ..., {"isq": false}]}``. Each row maps labels
to rendered values and carries ``"isq": true``; ephemeris rows also carry a
unix ``"timestamp"``. The closing ``isq: false`` sentinel lets rows be written
as they are computed without tracking commas.
"""

import json
from collections.abc import Sequence
from datetime import datetime

from skyquery.renderers.base import Driver, Row


def _timestamp(when: datetime) -> int | float:
    ts = when.timestamp()
    return int(ts) if ts.is_integer() else ts


class JsonDriver(Driver):
    def _row(self, record: dict) -> None:
        self.write(json.dumps(record, ensure_ascii=False) + ", ")

    def _values(self, rows: Sequence[Row]) -> dict[str, str]:
        return {label: self.fmt(value) for value, label in rows}

    def start(self) -> None:
        self.write('{"q": [')

    def query(self, rows: Sequence[Row]) -> None:
        self._row({**self._values(rows), "isq": True})

    def ephemeris_row(self, rows: Sequence[Row], when: datetime) -> None:
        self._row({"timestamp": _timestamp(when), **self._values(rows), "isq": True})

    def footer(self) -> None:
        self.write('{"isq": false}]}\n')
