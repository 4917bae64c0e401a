from __future__ import annotations

import math
import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import ROUND_HALF_EVEN, Decimal
from enum import Enum
from typing import Any

from ..errors import ConversionError, SchemaError

"""Semantic types supported by the table model.

Every member of :class:`SemanticType` carries its own parse/format pair, value type and
default factory. The set is closed: a type tag that is not listed here is a schema error.

Fixed serialization patterns:
- date      ``yyyy-MM-dd``
- time      ``HH:mm:ss`` (fractional seconds accepted on input)
- datetime  ``yyyy-MM-ddTHH:mm:ss`` (fractional seconds accepted on input)
"""

__all__ = [
    "SemanticType",
    "MAX_FRACTION_DIGITS",
    "DATE_PATTERN",
    "TIME_PATTERN",
    "DATETIME_PATTERN",
    "format_double",
    "stringify",
]

MAX_FRACTION_DIGITS = 10

DATE_PATTERN = "yyyy-MM-dd"
TIME_PATTERN = "HH:mm:ss"
DATETIME_PATTERN = "yyyy-MM-ddTHH:mm:ss"

_INT_RE = re.compile(r"^[-+]?[0-9]+$")
_DOUBLE_RE = re.compile(
    r"^[-+]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][-+]?[0-9]+)?$"
)
_DOUBLE_SPECIALS = {"nan": math.nan, "infinity": math.inf, "+infinity": math.inf, "-infinity": -math.inf}
_DATE_RE = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")
_TIME_RE = re.compile(r"^[0-9]{2}:[0-9]{2}:[0-9]{2}(?:\.[0-9]{1,6})?$")
_DATETIME_RE = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}T[0-9]{2}:[0-9]{2}:[0-9]{2}(?:\.[0-9]{1,6})?$")


class SemanticType(Enum):
    STRING = "string"
    INT = "int"
    DOUBLE = "double"
    BOOLEAN = "boolean"
    DATE = "date"
    TIME = "time"
    DATETIME = "datetime"

    @classmethod
    def from_tag(cls, tag: str | SemanticType) -> SemanticType:
        """Resolve a type tag (case-insensitive) to a member.

        Raises:
            SchemaError: if the tag is blank or not a supported type
        """
        if isinstance(tag, SemanticType):
            return tag
        if not isinstance(tag, str) or not tag.strip():
            raise SchemaError(f"Unsupported column type: {tag!r}")
        try:
            return cls(tag.strip().lower())
        except ValueError:
            raise SchemaError(f"Unsupported column type: {tag}") from None

    @property
    def tag(self) -> str:
        return self.value

    @property
    def python_type(self) -> type:
        return _CODECS[self].python_type

    @property
    def expected_pattern(self) -> str:
        return _CODECS[self].expected

    def is_instance(self, value: Any) -> bool:
        """True when ``value`` is None or an instance of this type's value class."""
        if value is None:
            return True
        # bool is an int subclass and datetime a date subclass; neither may leak across types
        if isinstance(value, bool) and self is not SemanticType.BOOLEAN:
            return False
        if isinstance(value, datetime) and self is SemanticType.DATE:
            return False
        return isinstance(value, self.python_type)

    def parse(self, raw: str | None, *, column: str | None = None) -> Any:
        """Convert a raw string into a typed value.

        The string type is the identity (``""`` stays ``""``). Every other type maps
        ``None``/``""`` to ``None``.
        """
        if self is SemanticType.STRING:
            return raw
        if raw is None:
            return None
        text = raw.strip()
        if text == "":
            return None
        codec = _CODECS[self]
        try:
            return codec.parse(text)
        except ValueError as e:
            where = f" for column '{column}'" if column else ""
            raise ConversionError(
                f"Invalid {self.value} value '{raw}'{where}. Expected format: {codec.expected}",
                column=column,
                value=raw,
                expected=codec.expected,
            ) from e

    def format(self, value: Any) -> str | None:
        """Natural string form of a typed value (inverse of :meth:`parse`)."""
        if value is None:
            return None
        return _CODECS[self].format(value)

    def default_value(self) -> Any:
        return _CODECS[self].default()


def _parse_int(text: str) -> int:
    if not _INT_RE.match(text):
        raise ValueError(f"not an integer: {text}")
    return int(text)


def _parse_double(text: str) -> float:
    special = _DOUBLE_SPECIALS.get(text.lower())
    if special is not None:
        return special
    if not _DOUBLE_RE.match(text):
        raise ValueError(f"not a number: {text}")
    return float(text)


def _parse_boolean(text: str) -> bool:
    lowered = text.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    raise ValueError(f"not a boolean: {text}")


def _parse_date(text: str) -> date:
    if not _DATE_RE.match(text):
        raise ValueError(f"not a date: {text}")
    return date.fromisoformat(text)


def _parse_time(text: str) -> time:
    if not _TIME_RE.match(text):
        raise ValueError(f"not a time: {text}")
    return time.fromisoformat(text)


def _parse_datetime(text: str) -> datetime:
    if not _DATETIME_RE.match(text):
        raise ValueError(f"not a datetime: {text}")
    return datetime.fromisoformat(text)


def format_double(value: float) -> str:
    """Render a float without grouping, keeping the fractional digits its repr implies.

    The number of fractional digits is taken from the shortest round-tripping repr of the
    value and capped at ``MAX_FRACTION_DIGITS``. ``30000.0`` renders as ``"30000.0"`` and
    ``1e16`` as ``"10000000000000000"``.
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    dec = Decimal(repr(float(value)))
    exponent = int(dec.as_tuple().exponent)
    if exponent >= 0:
        return f"{dec:f}"
    places = min(-exponent, MAX_FRACTION_DIGITS)
    quantized = dec.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_EVEN)
    return f"{quantized:f}"


def _format_time(value: time) -> str:
    return value.isoformat()


def _format_datetime(value: datetime) -> str:
    return value.isoformat(sep="T")


def _now_date() -> date:
    return date.today()


def _now_time() -> time:
    return datetime.now().time().replace(microsecond=0)


def _now_datetime() -> datetime:
    return datetime.now().replace(microsecond=0)


@dataclass(frozen=True)
class _Codec:
    python_type: type
    parse: Callable[[str], Any]
    format: Callable[[Any], str]
    default: Callable[[], Any]
    expected: str


_CODECS: dict[SemanticType, _Codec] = {
    SemanticType.STRING: _Codec(str, str, str, lambda: "", "any text"),
    SemanticType.INT: _Codec(int, _parse_int, str, lambda: 0, "integer"),
    SemanticType.DOUBLE: _Codec(float, _parse_double, format_double, lambda: 0.0, "decimal number"),
    SemanticType.BOOLEAN: _Codec(
        bool, _parse_boolean, lambda v: "true" if v else "false", lambda: False, "true|false"
    ),
    SemanticType.DATE: _Codec(date, _parse_date, date.isoformat, _now_date, DATE_PATTERN),
    SemanticType.TIME: _Codec(time, _parse_time, _format_time, _now_time, TIME_PATTERN),
    SemanticType.DATETIME: _Codec(
        datetime, _parse_datetime, _format_datetime, _now_datetime, DATETIME_PATTERN
    ),
}


def stringify(value: Any) -> str | None:
    """Render an arbitrary driver value (e.g. from a DB cursor) as a raw string.

    Used by row sources that receive native Python values instead of text. Timezone-aware
    datetimes and times (e.g. ``timestamptz``) are shifted to local wall-clock time and made
    naive, since the serialization patterns carry no offset.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return SemanticType.BOOLEAN.format(value)
    if isinstance(value, float):
        return format_double(value)
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone().replace(tzinfo=None)
        return SemanticType.DATETIME.format(value)
    if isinstance(value, date):
        return SemanticType.DATE.format(value)
    if isinstance(value, time):
        if value.tzinfo is not None:
            value = datetime.combine(date.today(), value).astimezone().time()
        return SemanticType.TIME.format(value)
    if isinstance(value, Decimal):
        return f"{value:f}"
    return str(value)
