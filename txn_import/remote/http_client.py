from __future__ import annotations

import logging
from typing import Any

import requests

from txn_import.errors import MalformedResponseError, TransportError

from .interface import BatchOutcome, BulkInsertService, parse_insert_response

"""HTTP client for the bulk-insert / delete endpoints.

Request:  POST <import_url>  {"transactions": [payload, ...]}
Success:  200 {"count": int, "ids": [...], "message": str}
Failure:  non-2xx with {"message": ...} or {"error": ...}; surfaced verbatim as
          ``Server Error: <text>``.
Insert:   POST <insert_url>  payload  ->  200 {"id": ..., "message": str}
Delete:   DELETE <delete_url>?id=<remote id>
"""

__all__ = [
    "HttpBulkInsertClient",
]

logger = logging.getLogger(__name__)

DEFAULT_UPLOAD_ERROR = "Failed to upload transactions"


def _error_text(response: requests.Response, fallback: str) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text.strip() or fallback
    if isinstance(body, dict):
        return str(body.get("message") or body.get("error") or fallback)
    return fallback


class HttpBulkInsertClient(BulkInsertService):
    def __init__(
        self,
        import_url: str,
        delete_url: str | None = None,
        *,
        insert_url: str | None = None,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.import_url = import_url
        self.delete_url = delete_url
        self.insert_url = insert_url
        # None のまま = 無期限待機
        self.timeout = timeout
        self.session = session or requests.Session()

    def insert_many(self, payloads: list[dict[str, Any]]) -> BatchOutcome:
        logger.debug("POST %s transactions=%d", self.import_url, len(payloads))
        try:
            response = self.session.post(
                self.import_url,
                json={"transactions": payloads},
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise TransportError(f"Network error: {e}") from e

        if not response.ok:
            raise TransportError(f"Server Error: {_error_text(response, DEFAULT_UPLOAD_ERROR)}")

        try:
            body = response.json()
        except ValueError as e:
            raise MalformedResponseError(f"Malformed server response: {e}") from e
        return BatchOutcome.from_response(body, submitted=len(payloads))

    def insert_one(self, payload: dict[str, Any]) -> Any:
        if not self.insert_url:
            raise TransportError("Insert endpoint is not configured")
        logger.debug("POST %s", self.insert_url)
        try:
            response = self.session.post(
                self.insert_url,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise TransportError(f"Network error: {e}") from e

        if not response.ok:
            raise TransportError(f"Server Error: {_error_text(response, 'Failed to save transaction')}")

        try:
            body = response.json()
        except ValueError as e:
            raise MalformedResponseError(f"Malformed server response: {e}") from e
        return parse_insert_response(body)

    def delete(self, external_id: Any) -> None:
        if not self.delete_url:
            raise TransportError("Delete endpoint is not configured")
        try:
            response = self.session.delete(
                self.delete_url,
                params={"id": external_id},
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise TransportError(f"Network error: {e}") from e
        if not response.ok:
            raise TransportError(f"Server Error: {_error_text(response, 'Failed to delete transaction')}")
