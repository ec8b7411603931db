from __future__ import annotations

import math

from txn_import.errors import RowValidationError
from txn_import.models.import_record import ImportRecord, TransactionType
from txn_import.models.row_data import RawRow

from .dates import is_canonical_date, normalize_date

"""Record validator: RawRow -> ImportRecord.

Rules are checked in order and the first failure wins. On success the row's
``transaction_date`` is rewritten in place with its canonical form.
"""

__all__ = [
    "parse_amount",
    "validate_row",
]


def parse_amount(value: str) -> float | None:
    """Parse an amount cell; None when empty, unparseable or not finite."""
    if not value:
        return None
    try:
        amount = float(value)
    except ValueError:
        return None
    if not math.isfinite(amount):
        return None
    return amount


def validate_row(row: RawRow) -> ImportRecord:
    """Validate one parsed row.

    Raises:
        RowValidationError: message names the missing / invalid field
    """
    if not row.transaction_type:
        raise RowValidationError("transaction_type is required", row.row_number)

    if row.transaction_type not in TransactionType.values():
        raise RowValidationError(
            f"Invalid transaction_type: {row.transaction_type}. Must be 'income' or 'expense'",
            row.row_number,
        )

    if not row.transaction_name.strip():
        raise RowValidationError("transaction_name is required", row.row_number)

    amount = parse_amount(row.amount)
    if amount is None:
        raise RowValidationError("Valid amount is required", row.row_number)

    if not row.transaction_date:
        raise RowValidationError("transaction_date is required", row.row_number)

    normalized = normalize_date(row.transaction_date)
    if not is_canonical_date(normalized):
        raise RowValidationError(
            f"Invalid date format: {row.transaction_date}. Expected YYYY-MM-DD or readable date.",
            row.row_number,
        )

    row.transaction_date = normalized

    return ImportRecord(
        type=TransactionType(row.transaction_type),
        name=row.transaction_name,
        amount=amount,
        date=normalized,
        category=row.category,
        payment_mode=row.payment_mode,
        remarks=row.remarks,
    )
