from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

"""RawRow / HeaderIndex models for the CSV transaction importer.

RawRow is a fixed-schema view of one CSV data line. Columns outside the schema
are ignored; a column declared in the header but absent from a short line
defaults to an empty string.
"""

__all__ = [
    "REQUIRED_COLUMNS",
    "OPTIONAL_COLUMNS",
    "HeaderIndex",
    "RawRow",
]

REQUIRED_COLUMNS: tuple[str, ...] = (
    "transaction_type",
    "transaction_name",
    "amount",
    "transaction_date",
)
OPTIONAL_COLUMNS: tuple[str, ...] = ("category", "payment_mode", "remarks")


@dataclass(frozen=True)
class HeaderIndex:
    """Column name -> position lookup, built once per document."""

    positions: dict[str, int]

    @classmethod
    def from_header(cls, header: Sequence[str]) -> HeaderIndex:
        positions: dict[str, int] = {}
        for idx, name in enumerate(header):
            # 重複列は先勝ち
            positions.setdefault(name, idx)
        return cls(positions=positions)

    def missing(self, columns: Sequence[str] = REQUIRED_COLUMNS) -> list[str]:
        return [c for c in columns if c not in self.positions]

    def value(self, values: Sequence[str], column: str) -> str:
        idx = self.positions.get(column)
        if idx is None or idx >= len(values):
            return ""
        return values[idx]

    def build_row(self, row_number: int, values: Sequence[str]) -> RawRow:
        return RawRow(
            row_number=row_number,
            **{c: self.value(values, c) for c in REQUIRED_COLUMNS + OPTIONAL_COLUMNS},
        )


@dataclass
class RawRow:
    """One non-blank, non-header CSV line mapped onto the transaction schema.

    Mutable on purpose: validation rewrites ``transaction_date`` in place with
    its canonical form.
    """

    row_number: int  # 1-based source line number (header = 1)
    transaction_type: str = ""
    transaction_name: str = ""
    amount: str = ""
    transaction_date: str = ""
    category: str = ""
    payment_mode: str = ""
    remarks: str = ""
