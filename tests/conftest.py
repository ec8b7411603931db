# Shared pytest fixtures
from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Any

import pytest

from txn_import.remote.interface import BatchOutcome, BulkInsertService

HEADER = "transaction_type,transaction_name,amount,transaction_date,category,payment_mode,remarks"

ENV_VARS = (
    "TXN_IMPORT_ENDPOINT",
    "TXN_INSERT_ENDPOINT",
    "TXN_DELETE_ENDPOINT",
    "DATABASE_URL",
    "PGDSN",
    "PGHOST",
    "PGPORT",
    "PGUSER",
    "PGPASSWORD",
    "PGDATABASE",
)


class FakeRemote(BulkInsertService):
    """In-memory bulk-insert service.

    ids: explicit ids to return (None = sequential from next_id)
    error: exception raised by every call when set
    """

    def __init__(self) -> None:
        self.batches: list[list[dict[str, Any]]] = []
        self.deleted: list[Any] = []
        self.ids: list[Any] | None = None
        self.next_id = 100
        self.error: Exception | None = None

    def insert_many(self, payloads: list[dict[str, Any]]) -> BatchOutcome:
        if self.error is not None:
            raise self.error
        self.batches.append(payloads)
        if self.ids is None:
            ids = list(range(self.next_id, self.next_id + len(payloads)))
            self.next_id += len(payloads)
        else:
            ids = list(self.ids)
        return BatchOutcome(
            count=len(payloads),
            ids=ids,
            message=f"Successfully imported {len(payloads)} transactions",
        )

    def insert_one(self, payload: dict[str, Any]) -> Any:
        if self.error is not None:
            raise self.error
        self.batches.append([payload])
        new_id = self.next_id
        self.next_id += 1
        return new_id

    def delete(self, external_id: Any) -> None:
        if self.error is not None:
            raise self.error
        self.deleted.append(external_id)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """backend: http
store_path: ./data/transactions.json
endpoints:
  import: https://import.example.invalid/
  insert: https://insert.example.invalid/
  delete: https://delete.example.invalid/
warning_display_limit: 5
database:
  host: localhost
  port: 5432
  user: appuser
  password: secret
  database: appdb
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "import.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def fake_remote() -> FakeRemote:
    return FakeRemote()


@pytest.fixture()
def write_csv(temp_workdir: Path):
    def _write(name: str, *rows: str, header: str = HEADER) -> Path:
        path = temp_workdir / "data" / name
        path.write_text("\n".join((header, *rows)) + "\n", encoding="utf-8")
        return path

    return _write
