from __future__ import annotations

import re
from collections.abc import Sequence
from datetime import date, datetime, time

from .types import SemanticType

"""Type inference for untyped sources.

``infer_type`` classifies one raw string with an ordered rule cascade (first match wins).
The order matters: plain integers are tested before the double patterns, so ``"1e10"``
is a double and ``"123"`` an int, while a leading ``+`` never yields an int.
"""

__all__ = [
    "infer_type",
    "infer_schema",
]

_INT = re.compile(r"^-?\d+$", re.ASCII)
_DOUBLE_PATTERNS = (
    re.compile(r"^[-+]?\d+\.\d*$", re.ASCII),
    re.compile(r"^[-+]?\.\d+$", re.ASCII),
    re.compile(r"^[-+]?\d+\.?\d*[eE][-+]?\d+$", re.ASCII),
    re.compile(r"^[-+]?\.\d+[eE][-+]?\d+$", re.ASCII),
)
_BOOLEANS = {"true", "false"}
_DOUBLE_SPECIALS = {"nan", "infinity", "+infinity", "-infinity"}
_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$", re.ASCII)
_TIME = re.compile(r"^\d{2}:\d{2}:\d{2}$", re.ASCII)
_DATETIME = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}$", re.ASCII)


def _parses(parser, text: str) -> bool:
    try:
        parser(text)
    except ValueError:
        return False
    return True


def infer_type(raw: str | None) -> SemanticType:
    """Infer the semantic type of a raw string value.

    Examples:
        >>> infer_type("123").tag
        'int'
        >>> infer_type("+123").tag
        'string'
        >>> infer_type("2023-13-01").tag
        'string'
    """
    if raw is None:
        return SemanticType.STRING
    text = raw.strip()
    if not text:
        return SemanticType.STRING
    if _INT.match(text):
        return SemanticType.INT
    if any(p.match(text) for p in _DOUBLE_PATTERNS):
        return SemanticType.DOUBLE
    lowered = text.lower()
    if lowered in _BOOLEANS:
        return SemanticType.BOOLEAN
    if lowered in _DOUBLE_SPECIALS:
        return SemanticType.DOUBLE
    # Pattern match without a valid calendar value falls through to string
    if _DATE.match(text):
        return SemanticType.DATE if _parses(date.fromisoformat, text) else SemanticType.STRING
    if _TIME.match(text):
        return SemanticType.TIME if _parses(time.fromisoformat, text) else SemanticType.STRING
    if _DATETIME.match(text):
        return SemanticType.DATETIME if _parses(datetime.fromisoformat, text) else SemanticType.STRING
    return SemanticType.STRING


def infer_schema(headers: Sequence[str], sample_row: Sequence[str | None]) -> dict[str, str]:
    """Build ordered column definitions (name -> type tag) from a first-row sample.

    Columns without a sample value are typed as string.
    """
    schema: dict[str, str] = {}
    for i, name in enumerate(headers):
        sample = sample_row[i] if i < len(sample_row) else None
        schema[name] = infer_type(sample).tag
    return schema
