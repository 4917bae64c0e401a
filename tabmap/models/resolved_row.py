from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

"""ResolvedRow model.

ResolvedRow is the output of forward mapping resolution for one external row: typed values
keyed by target column, the raw strings they were converted from, and any warnings raised
while resolving (missing source columns, out-of-range indexes).
"""

__all__ = [
    "ResolvedRow",
]


@dataclass(frozen=True)
class ResolvedRow:
    """Logical representation of a single external row after mapping resolution.

    The row_number is 1-based and counts data rows only (a header row is not counted).
    Target columns for which no value was available, even after default substitution,
    are absent from both ``values`` and ``raw_values``.
    """
    row_number: int  # 1-based data row number in the source
    values: dict[str, Any]  # Target column name -> converted value
    raw_values: dict[str, str] = field(default_factory=dict)  # Target column name -> raw string
    warnings: tuple[str, ...] = ()  # Recoverable lookup problems for this row
