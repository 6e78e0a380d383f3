"""Error taxonomy. Every failure is terminal and carries a readable reason."""


class SkyQueryError(Exception):
    """Base class for everything this package raises on purpose."""


class ConfigError(SkyQueryError):
    """Invalid environment or .env setting."""


class ParseError(SkyQueryError):
    """A token could not be understood."""

    def __init__(self, token: str, reason: str) -> None:
        super().__init__(f"{reason}: `{token}`")
        self.token = token
        self.reason = reason


class InvalidLiteralError(ParseError):
    """Bad date, angle, number or duration literal."""


class UnknownObjectError(ParseError):
    def __init__(self, token: str) -> None:
        super().__init__(token, "Unknown object")


class UnknownPropertyError(ParseError):
    def __init__(self, token: str) -> None:
        super().__init__(token, "Unknown property")


class UnparseableWordError(ParseError):
    """An RPN word that is no property, operator, object or literal."""

    def __init__(self, token: str, index: int) -> None:
        super().__init__(token, f"Failed to parse word {index}")
        self.index = index


class DomainError(SkyQueryError):
    """A property that cannot be computed for this object or frame."""

    def __init__(self, prop: str, obj: str, reason: str) -> None:
        super().__init__(f"{prop} of {obj}: {reason}")
        self.prop = prop
        self.obj = obj
        self.reason = reason


class MissingLocationError(DomainError):
    def __init__(self, prop: str, obj: str) -> None:
        super().__init__(prop, obj, "need a location, set one with -l/-L or latlong")


class NoPhaseError(DomainError):
    def __init__(self, prop: str, obj: str) -> None:
        super().__init__(prop, obj, "no phase")


class UnsupportedPropertyError(DomainError):
    """Property undefined for the object variant (e.g. distance of a raw coordinate)."""


class UnknownDataError(DomainError):
    """The ephemeris has no data for this object."""

    def __init__(self, prop: str, obj: str) -> None:
        super().__init__(prop, obj, "not known")


class EvaluationError(SkyQueryError):
    """Stack underflow or wrong operand types in the RPN evaluator."""

    def __init__(self, word: str, index: int, reason: str) -> None:
        super().__init__(f"word {index} `{word}`: {reason}")
        self.word = word
        self.index = index
        self.reason = reason
