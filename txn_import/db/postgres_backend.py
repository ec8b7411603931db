from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any

import psycopg2

from txn_import.errors import TransportError
from txn_import.models.config_models import DatabaseConfig
from txn_import.models.row_data import REQUIRED_COLUMNS
from txn_import.remote.interface import BatchOutcome, BulkInsertService

from .batch_insert import BatchInsertError, batch_insert

"""Bulk-insert collaborator backed directly by PostgreSQL.

Same contract as the HTTP endpoint: the batch is validated, inserted inside one
transaction (BEGIN / COMMIT, ROLLBACK on any failure) and the generated ids are
returned in submission order.
"""

__all__ = [
    "INSERT_COLUMNS",
    "PostgresBulkInsertService",
    "connect",
]

logger = logging.getLogger(__name__)

INSERT_COLUMNS: tuple[str, ...] = (
    "transaction_type",
    "category",
    "transaction_name",
    "amount",
    "transaction_date",
    "payment_mode",
    "remarks",
)


@contextmanager
def connect(db_cfg: DatabaseConfig):  # pragma: no cover (thin wrapper)
    """Yield a psycopg2 cursor; the service manages BEGIN/COMMIT itself."""
    conn = psycopg2.connect(db_cfg.resolve_dsn())
    conn.autocommit = True  # 明示トランザクション境界 (service が BEGIN/COMMIT 実行)
    cur = conn.cursor()
    try:
        yield cur
    finally:
        cur.close()
        conn.close()


class PostgresBulkInsertService(BulkInsertService):
    def __init__(self, cursor: Any, table: str = "transactions") -> None:
        self.cursor = cursor
        self.table = table

    def _validate(self, payloads: list[dict[str, Any]]) -> None:
        errors = [
            f"Row {i}: Missing required fields"
            for i, p in enumerate(payloads, start=1)
            if any(p.get(c) in (None, "") for c in REQUIRED_COLUMNS)
        ]
        if errors:
            raise TransportError(f"Server Error: Validation failed ({'; '.join(errors)})")

    def insert_many(self, payloads: list[dict[str, Any]]) -> BatchOutcome:
        if not payloads:
            raise TransportError("Server Error: Invalid request: transactions array is required")
        self._validate(payloads)

        rows = [
            [
                p["transaction_type"],
                p.get("category") or "",
                p["transaction_name"],
                float(p["amount"]),
                p["transaction_date"],
                p.get("payment_mode") or "",
                p.get("remarks") or "",
            ]
            for p in payloads
        ]
        try:
            self.cursor.execute("BEGIN")
            result = batch_insert(
                self.cursor,
                table=self.table,
                columns=INSERT_COLUMNS,
                rows=rows,
                returning="id",
            )
            self.cursor.execute("COMMIT")
        except (BatchInsertError, psycopg2.Error) as e:
            self._rollback()
            raise TransportError(f"Server Error: {e}") from e

        ids = result.returned_values or []
        logger.debug("table=%s inserted=%d ids=%d", self.table, result.inserted_rows, len(ids))
        return BatchOutcome(
            count=result.inserted_rows,
            ids=list(ids),
            message=f"Successfully imported {result.inserted_rows} transactions",
        )

    def insert_one(self, payload: dict[str, Any]) -> Any:
        outcome = self.insert_many([payload])
        if not outcome.ids:
            raise TransportError("Server Error: insert returned no id")
        return outcome.ids[0]

    def delete(self, external_id: Any) -> None:
        try:
            self.cursor.execute(f"DELETE FROM {self.table} WHERE id = %s", (external_id,))
        except psycopg2.Error as e:
            raise TransportError(f"Server Error: {e}") from e

    def _rollback(self) -> None:
        try:
            self.cursor.execute("ROLLBACK")
        except psycopg2.Error:
            logger.warning("rollback failed table=%s", self.table, exc_info=True)
