from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

"""ImportRecord domain model and TransactionType enum.

An ImportRecord is a CSV row that passed validation. Its ``date`` is always a
canonical ``YYYY-MM-DD`` string; rows whose date cannot be normalized never
become ImportRecords.
"""

__all__ = [
    "TransactionType",
    "ImportRecord",
]


class TransactionType(Enum):
    INCOME = "income"
    EXPENSE = "expense"

    @classmethod
    def values(cls) -> tuple[str, ...]:
        return tuple(member.value for member in cls)


@dataclass(frozen=True)
class ImportRecord:
    """Validated transaction candidate ready for bulk insert."""

    type: TransactionType
    name: str
    amount: float
    date: str  # YYYY-MM-DD
    category: str = ""
    payment_mode: str = ""
    remarks: str = ""

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the bulk-insert request object (column names of the remote table)."""
        return {
            "transaction_type": self.type.value,
            "category": self.category,
            "transaction_name": self.name,
            "amount": self.amount,
            "transaction_date": self.date,
            "payment_mode": self.payment_mode,
            "remarks": self.remarks,
        }
