from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

from txn_import.errors import ImportInProgressError, StoreError, TransactionNotFoundError
from txn_import.models.local_transaction import LocalTransaction
from txn_import.remote.interface import BulkInsertService

"""Local transaction store (JSON file).

One TransactionStore owns one collection file. Reads go through an in-memory
cache; every write replaces the file atomically and refreshes the cache.
A missing file is an empty collection. There is no schema versioning.

Read-modify-save cycles (CSV imports, single adds) run under ``exclusive()``:
at most one at a time per store, a second one is refused, not queued.
"""

__all__ = [
    "Totals",
    "TransactionStore",
    "sort_by_date_desc",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Totals:
    income: float
    expense: float

    @property
    def balance(self) -> float:
        return self.income - self.expense


def sort_by_date_desc(transactions: list[LocalTransaction]) -> list[LocalTransaction]:
    """Newest first; equal dates keep their relative order (stable sort)."""
    return sorted(transactions, key=lambda t: t.date, reverse=True)


class TransactionStore:
    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._cache: list[LocalTransaction] | None = None
        self._busy = threading.Lock()

    @contextmanager
    def exclusive(self) -> Iterator[TransactionStore]:
        """Hold the collection for one read-modify-save cycle.

        Raises:
            ImportInProgressError: another cycle already holds this store
        """
        if not self._busy.acquire(blocking=False):
            raise ImportInProgressError("An import is already in progress")
        try:
            yield self
        finally:
            self._busy.release()

    def load(self) -> list[LocalTransaction]:
        """Return a copy of the stored collection (cached after the first read)."""
        if self._cache is None:
            self._cache = self._read()
        return list(self._cache)

    def _read(self) -> list[LocalTransaction]:
        if not self.path.exists():
            return []
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "[]")
        except (OSError, json.JSONDecodeError) as e:
            raise StoreError(f"failed to read transaction store {self.path}: {e}") from e
        if not isinstance(data, list):
            raise StoreError(f"transaction store {self.path} must hold a JSON array")
        try:
            return [LocalTransaction.from_dict(item) for item in data]
        except (KeyError, TypeError, ValueError) as e:
            raise StoreError(f"invalid entry in transaction store {self.path}: {e}") from e

    def save(self, transactions: list[LocalTransaction]) -> None:
        """Replace the whole collection (write to temp file, then os.replace)."""
        payload = json.dumps([t.to_dict() for t in transactions], ensure_ascii=False, indent=2)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_name, self.path)
        except OSError as e:
            Path(tmp_name).unlink(missing_ok=True)
            self.invalidate()
            raise StoreError(f"failed to write transaction store {self.path}: {e}") from e
        self._cache = list(transactions)
        logger.debug("store=%s saved=%d", self.path, len(transactions))

    def invalidate(self) -> None:
        self._cache = None

    def max_local_id(self) -> int:
        return max((t.id for t in self.load()), default=0)

    def next_local_id(self, now: float) -> int:
        # 時刻(ms)ベース。既存 id と衝突しないよう最大値+1 以上にする
        return max(int(now * 1000), self.max_local_id() + 1)

    def delete(self, local_id: int, remote: BulkInsertService | None = None) -> LocalTransaction:
        """Delete one transaction by local id.

        The remote record (when the transaction has a remote id) is deleted
        first; the local entry is only removed once that succeeded.

        Raises:
            TransactionNotFoundError: no transaction with ``local_id``
            TransportError: remote delete failed (local collection untouched)
            ImportInProgressError: another cycle holds this store
        """
        with self.exclusive():
            transactions = self.load()
            for idx, txn in enumerate(transactions):
                if txn.id == local_id:
                    break
            else:
                raise TransactionNotFoundError(f"transaction not found: {local_id}")

            if txn.db_id is not None and remote is not None:
                remote.delete(txn.db_id)
            elif txn.db_id is not None:
                logger.warning("id=%s has remote id %s but no remote configured", local_id, txn.db_id)

            del transactions[idx]
            self.save(sort_by_date_desc(transactions))
            return txn

    def totals(self) -> Totals:
        income = sum(t.amount for t in self.load() if t.type == "income")
        expense = sum(t.amount for t in self.load() if t.type == "expense")
        return Totals(income=income, expense=expense)
