from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from .import_record import ImportRecord

"""LocalTransaction model: the client-side record persisted in the local store.

JSON layout (one object per transaction) matches the existing store files:
``id, dbId, name, amount, date, type, category, paymentMode, remarks``.
"""

__all__ = [
    "LocalTransaction",
]


@dataclass(frozen=True)
class LocalTransaction:
    id: int  # local id, unique within the collection
    db_id: int | str | None  # id assigned by the bulk-insert service (None until known)
    name: str
    amount: float
    date: str  # YYYY-MM-DD
    type: str  # income / expense
    category: str = ""
    payment_mode: str = ""
    remarks: str = ""

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["dbId"] = data.pop("db_id")
        data["paymentMode"] = data.pop("payment_mode")
        return data

    @staticmethod
    def from_record(record: ImportRecord, local_id: int, db_id: int | str | None) -> LocalTransaction:
        return LocalTransaction(
            id=local_id,
            db_id=db_id,
            name=record.name,
            amount=record.amount,
            date=record.date,
            type=record.type.value,
            category=record.category,
            payment_mode=record.payment_mode,
            remarks=record.remarks,
        )

    @staticmethod
    def from_dict(data: dict[str, Any]) -> LocalTransaction:
        """Build from a stored JSON object.

        Older entries carry a full ISO timestamp in ``date``; only its
        ``YYYY-MM-DD`` prefix is kept.
        """
        raw_date = str(data.get("date") or "")
        return LocalTransaction(
            id=int(data["id"]),
            db_id=data.get("dbId"),
            name=str(data.get("name") or ""),
            amount=float(data.get("amount") or 0.0),
            date=raw_date[:10],
            type=str(data.get("type") or ""),
            category=data.get("category") or "",
            payment_mode=data.get("paymentMode") or "",
            remarks=data.get("remarks") or "",
        )

    @property
    def signed_amount(self) -> float:
        return self.amount if self.type == "income" else -self.amount
