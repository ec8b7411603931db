from __future__ import annotations

import psycopg2
import pytest

from txn_import.db.postgres_backend import INSERT_COLUMNS, PostgresBulkInsertService
from txn_import.errors import TransportError


class DummyCursor:
    def __init__(self, fail_on: str | None = None) -> None:
        self.statements: list[tuple[str, tuple | None]] = []
        self.fail_on = fail_on

    def execute(self, sql: str, params: tuple | None = None) -> None:
        self.statements.append((sql, params))
        if self.fail_on and sql.startswith(self.fail_on):
            raise psycopg2.Error(f"{self.fail_on} failed")

    @property
    def sql(self) -> list[str]:
        return [s for s, _ in self.statements]


@pytest.fixture()
def inserted(monkeypatch):
    import txn_import.db.batch_insert as bi

    calls: list[dict] = []

    def fake_execute_values(cursor, sql, rows, page_size=1000, fetch=False):
        cursor.statements.append((sql, None))
        calls.append({"sql": sql, "rows": rows, "fetch": fetch})
        return [(500 + i,) for i, _ in enumerate(rows)]

    monkeypatch.setattr(bi, "execute_values", fake_execute_values)
    return calls


def _payload(name: str, **overrides):
    p = {
        "transaction_type": "expense",
        "category": "food",
        "transaction_name": name,
        "amount": 4.25,
        "transaction_date": "2026-01-02",
        "payment_mode": "cash",
        "remarks": "",
    }
    p.update(overrides)
    return p


def test_insert_many_in_one_transaction(inserted):
    cur = DummyCursor()
    outcome = PostgresBulkInsertService(cur).insert_many([_payload("Tea"), _payload("Bun", category=None)])

    assert outcome.count == 2
    assert outcome.ids == [500, 501]
    assert outcome.message == "Successfully imported 2 transactions"
    assert cur.sql[0] == "BEGIN"
    assert cur.sql[-1] == "COMMIT"
    assert inserted[0]["fetch"] is True
    assert inserted[0]["rows"][1] == ["expense", "", "Bun", 4.25, "2026-01-02", "cash", ""]
    assert len(inserted[0]["rows"][0]) == len(INSERT_COLUMNS)


def test_zero_amount_is_accepted(inserted):
    outcome = PostgresBulkInsertService(DummyCursor()).insert_many([_payload("Free", amount=0.0)])
    assert outcome.count == 1


def test_empty_batch_rejected(inserted):
    with pytest.raises(TransportError, match="transactions array is required"):
        PostgresBulkInsertService(DummyCursor()).insert_many([])
    assert inserted == []


def test_missing_required_field_rejected_before_insert(inserted):
    cur = DummyCursor()
    with pytest.raises(TransportError) as e:
        PostgresBulkInsertService(cur).insert_many([_payload("ok"), _payload("")])
    assert str(e.value) == "Server Error: Validation failed (Row 2: Missing required fields)"
    assert cur.statements == []


def test_insert_failure_rolls_back(monkeypatch):
    import txn_import.db.batch_insert as bi

    def boom(*args, **kwargs):
        raise psycopg2.Error("relation does not exist")

    monkeypatch.setattr(bi, "execute_values", boom)
    cur = DummyCursor()
    with pytest.raises(TransportError, match="^Server Error: relation does not exist"):
        PostgresBulkInsertService(cur).insert_many([_payload("Tea")])
    assert cur.sql == ["BEGIN", "ROLLBACK"]


def test_commit_failure_rolls_back(inserted):
    cur = DummyCursor(fail_on="COMMIT")
    with pytest.raises(TransportError):
        PostgresBulkInsertService(cur).insert_many([_payload("Tea")])
    assert cur.sql[-1] == "ROLLBACK"


def test_delete_by_remote_id():
    cur = DummyCursor()
    PostgresBulkInsertService(cur, table="ledger").delete(77)
    assert cur.statements == [("DELETE FROM ledger WHERE id = %s", (77,))]


def test_delete_failure():
    with pytest.raises(TransportError):
        PostgresBulkInsertService(DummyCursor(fail_on="DELETE")).delete(1)


def test_insert_one_returns_generated_id(inserted):
    cur = DummyCursor()
    assert PostgresBulkInsertService(cur).insert_one(_payload("Tea")) == 500
    assert cur.sql[0] == "BEGIN" and cur.sql[-1] == "COMMIT"
    assert len(inserted[0]["rows"]) == 1


def test_insert_one_validation_failure(inserted):
    with pytest.raises(TransportError, match="Validation failed"):
        PostgresBulkInsertService(DummyCursor()).insert_one(_payload("Tea", amount=None))
