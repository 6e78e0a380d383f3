"""RPN stack evaluator.

Each word, case-folded, is tried in order as:

1. a property of the object on top of the stack (the object stays put);
2. an operator (``.``, ``.s``, ``between``, ``latlong``, ``rise``, ``set``,
   ``now``, ``isdate``, ``to_horiz``, ``to_equatorial``);
3. a catalog object, or an inline ``RA,DEC`` coordinate;
4. a date, angle or number literal.

Anything else stops evaluation with ``UnparseableWordError``. Operators check
their operands before popping, so a failing word leaves the stack as it was.
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, replace
from datetime import datetime, tzinfo

from pytz import utc

from skyquery.catalog import Catalog, default_catalog
from skyquery.ephemeris import EphemerisProvider
from skyquery.errors import EvaluationError, InvalidLiteralError, MissingLocationError, UnparseableWordError
from skyquery.models import AngleBetween, Equatorial, Property, ReferenceFrame
from skyquery.parse import PROPERTY_NAMES, now_utc, parse_coordinate, parse_literal
from skyquery.query import default_provider, resolve, rise_set_instant
from skyquery.values import (
    AngleValue,
    AngleView,
    CoordinateValue,
    CoordView,
    DateValue,
    ObjectValue,
    Value,
)

log = logging.getLogger(__name__)

Sink = Callable[[str], None]


@dataclass
class EvalState:
    """Everything one evaluation pass mutates."""

    frame: ReferenceFrame
    stack: list[Value] = field(default_factory=list)

    def top(self) -> Value | None:
        return self.stack[-1] if self.stack else None


class Evaluator:
    """Runs word sequences against a catalog and an ephemeris provider.

    Holds no per-run state, so one instance can evaluate any number of
    independent word sequences.

    Args:
        catalog: Name → object table. Defaults to the bundled catalog.
        provider: Ephemeris backend. Defaults to the skyfield kernel from settings.
        sink: Receives each printed line from ``.`` and ``.s``.
        clock: Wall clock for ``now``.
        tz: Display zone for printed dates.
        lang: Language for printed phase names.
    """

    def __init__(
        self,
        catalog: Catalog | None = None,
        provider: EphemerisProvider | None = None,
        sink: Sink = print,
        clock: Callable[[], datetime] = now_utc,
        tz: tzinfo = utc,
        lang: str = "en",
    ) -> None:
        self.catalog = catalog if catalog is not None else default_catalog()
        self._provider = provider
        self.sink = sink
        self.clock = clock
        self.tz = tz
        self.lang = lang
        self._operators: dict[str, Callable[[EvalState, str, int], None]] = {
            ".": self._print,
            ".s": self._print_stack,
            "between": self._between,
            "latlong": self._latlong,
            "rise": self._rise_set,
            "set": self._rise_set,
            "now": self._now,
            "isdate": self._isdate,
            "to_horiz": self._to_horizontal,
            "to_equatorial": self._to_equatorial,
        }

    @property
    def provider(self) -> EphemerisProvider:
        if self._provider is None:
            self._provider = default_provider()
        return self._provider

    def evaluate(self, words: Iterable[str], frame: ReferenceFrame) -> EvalState:
        """Run every word in order and return the final stack and frame."""
        state = EvalState(frame=frame)
        for index, word in enumerate(words):
            self.step(state, word, index)
        return state

    def step(self, state: EvalState, word: str, index: int = 0) -> None:
        w = word.strip().lower()
        log.debug("word %d %r, stack depth %d", index, w, len(state.stack))

        top = state.top()
        if isinstance(top, ObjectValue) and w in PROPERTY_NAMES:
            state.stack.append(resolve(top.obj, PROPERTY_NAMES[w], state.frame, self.provider))
            return

        operator = self._operators.get(w)
        if operator is not None:
            operator(state, w, index)
            return

        if w in self.catalog:
            state.stack.append(ObjectValue(self.catalog[w]))
            return
        try:
            if "," in w:
                state.stack.append(ObjectValue(parse_coordinate(w)))
            else:
                state.stack.append(parse_literal(w, self.clock))
        except InvalidLiteralError:
            raise UnparseableWordError(word, index) from None

    # -- operand helpers -------------------------------------------------------

    def _take(self, state: EvalState, word: str, index: int, *kinds: tuple[type, ...]) -> list[Value]:
        """Pop one value per entry in ``kinds`` (top first) after checking all of them."""
        if len(state.stack) < len(kinds):
            raise EvaluationError(word, index, f"stack underflow, needs {len(kinds)} value(s)")
        for depth, allowed in enumerate(kinds, start=1):
            value = state.stack[-depth]
            if not isinstance(value, allowed):
                expected = " or ".join(k.__name__ for k in allowed)
                raise EvaluationError(
                    word, index, f"expected {expected}, got {type(value).__name__}"
                )
        return [state.stack.pop() for _ in kinds]

    def _require_location(self, state: EvalState, word: str, subject: Value) -> None:
        if state.frame.location is None:
            raise MissingLocationError(word, subject.render())

    def _position(self, value: Value, frame: ReferenceFrame) -> Equatorial:
        if isinstance(value, ObjectValue):
            resolved = resolve(value.obj, Property.EQUATORIAL, frame, self.provider)
            assert isinstance(resolved, CoordinateValue)
            return resolved.position
        assert isinstance(value, CoordinateValue)
        return value.position

    # -- operators ----------------------------------------------------------------

    def _print(self, state: EvalState, word: str, index: int) -> None:
        (value,) = self._take(state, word, index, (Value,))
        self.sink(value.render(tz=self.tz, lang=self.lang))

    def _print_stack(self, state: EvalState, word: str, index: int) -> None:
        for n in range(len(state.stack) - 1, -1, -1):
            self.sink(f"#{n:02d}: {state.stack[n].render(tz=self.tz, lang=self.lang)}")

    def _between(self, state: EvalState, word: str, index: int) -> None:
        kinds = (CoordinateValue, ObjectValue)
        if len(state.stack) >= 2:
            b, a = state.stack[-1], state.stack[-2]
            if isinstance(a, ObjectValue) and isinstance(b, ObjectValue):
                value = resolve(a.obj, AngleBetween(b.obj), state.frame, self.provider)
                self._take(state, word, index, kinds, kinds)
                state.stack.append(value)
                return
            if isinstance(a, kinds) and isinstance(b, kinds):
                separation = self.provider.angular_separation(
                    self._position(a, state.frame), self._position(b, state.frame)
                )
                self._take(state, word, index, kinds, kinds)
                state.stack.append(AngleValue(separation, AngleView.ANGLE))
                return
        self._take(state, word, index, kinds, kinds)

    def _latlong(self, state: EvalState, word: str, index: int) -> None:
        longitude, latitude = self._take(state, word, index, (AngleValue,), (AngleValue,))
        state.frame = replace(state.frame, location=(latitude.angle, longitude.angle))

    def _rise_set(self, state: EvalState, word: str, index: int) -> None:
        top = state.top()
        if isinstance(top, CoordinateValue):
            self._require_location(state, word, top)
        (coordinate,) = self._take(state, word, index, (CoordinateValue,))
        state.stack.append(
            rise_set_instant(self.provider, coordinate.position, state.frame, rising=word == "rise")
        )

    def _now(self, state: EvalState, word: str, index: int) -> None:
        state.stack.append(DateValue(self.clock()))

    def _isdate(self, state: EvalState, word: str, index: int) -> None:
        (date,) = self._take(state, word, index, (DateValue,))
        state.frame = replace(state.frame, instant=date.when)

    def _to_horizontal(self, state: EvalState, word: str, index: int) -> None:
        top = state.top()
        if isinstance(top, CoordinateValue):
            self._require_location(state, word, top)
        (coordinate,) = self._take(state, word, index, (CoordinateValue,))
        latitude, longitude = state.frame.location
        projected = self.provider.horizon(coordinate.position, state.frame.instant, latitude, longitude)
        state.stack.append(CoordinateValue(coordinate.position, CoordView.HORIZONTAL, projected))

    def _to_equatorial(self, state: EvalState, word: str, index: int) -> None:
        (coordinate,) = self._take(state, word, index, (CoordinateValue,))
        state.stack.append(CoordinateValue(coordinate.position, CoordView.EQUATORIAL))


def evaluate(words: Iterable[str], frame: ReferenceFrame, **kwargs) -> EvalState:
    """One-shot ``Evaluator(**kwargs).evaluate(words, frame)``."""
    return Evaluator(**kwargs).evaluate(words, frame)
