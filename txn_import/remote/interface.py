from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from txn_import.errors import MalformedResponseError

"""Bulk-insert collaborator interface.

The importer needs three operations from the remote side: insert a batch
and get back one id per submitted record (``ids[i]`` belongs to the i-th
payload), insert a single record and get back its id, and delete one record
by its remote id. Implementations live in
txn_import.remote.http_client (HTTP endpoint) and
txn_import.db.postgres_backend (direct database access).
"""

__all__ = [
    "BatchOutcome",
    "BulkInsertService",
    "parse_insert_response",
]


@dataclass(frozen=True)
class BatchOutcome:
    count: int
    ids: list[Any] = field(default_factory=list)
    message: str = ""

    @staticmethod
    def from_response(body: Any, submitted: int) -> BatchOutcome:
        """Build from a decoded success body ``{count, ids, message}``.

        Raises:
            MalformedResponseError: body is not an object or ``ids`` is not a list
        """
        if not isinstance(body, dict):
            raise MalformedResponseError(
                f"Malformed server response: expected an object, got {type(body).__name__}"
            )
        ids = body.get("ids")
        if not isinstance(ids, list):
            raise MalformedResponseError("Malformed server response: 'ids' must be a list")
        count = body.get("count", submitted)
        if isinstance(count, bool) or not isinstance(count, int):
            raise MalformedResponseError("Malformed server response: 'count' must be an integer")
        return BatchOutcome(count=count, ids=ids, message=str(body.get("message") or ""))


def parse_insert_response(body: Any) -> Any:
    """Remote id from a decoded single-insert body ``{id, message}``.

    Raises:
        MalformedResponseError: body is not an object or carries no ``id``
    """
    if not isinstance(body, dict):
        raise MalformedResponseError(
            f"Malformed server response: expected an object, got {type(body).__name__}"
        )
    if body.get("id") is None:
        raise MalformedResponseError("Malformed server response: 'id' is missing")
    return body["id"]


class BulkInsertService(ABC):
    """Remote store accepting validated transaction batches."""

    @abstractmethod
    def insert_many(self, payloads: list[dict[str, Any]]) -> BatchOutcome:
        """Insert all payloads as one batch.

        Args:
            payloads: ImportRecord.to_payload() objects, in submission order

        Returns:
            BatchOutcome with ids positionally aligned to ``payloads``

        Raises:
            TransportError: network failure or non-success response
        """

    @abstractmethod
    def insert_one(self, payload: dict[str, Any]) -> Any:
        """Insert a single record and return its remote id.

        Raises:
            TransportError: network failure or non-success response
        """

    @abstractmethod
    def delete(self, external_id: Any) -> None:
        """Delete one remote record.

        Raises:
            TransportError: the remote delete failed
        """
