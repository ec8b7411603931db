from __future__ import annotations

import json
from contextlib import contextmanager

import pytest

import txn_import.cli.__main__ as cli_mod
from txn_import.cli import main as cli_main
from txn_import.errors import TransportError
from txn_import.logging.init import reset_logging


@pytest.fixture()
def seeded_store(temp_workdir):
    path = temp_workdir / "data" / "transactions.json"
    path.write_text(
        json.dumps(
            [
                {"id": 2, "dbId": 12, "name": "Dinner", "amount": 1250.5, "date": "2026-01-04", "type": "expense",
                 "category": "food", "paymentMode": "credit-card", "remarks": "team"},
                {"id": 1, "dbId": None, "name": "Salary", "amount": 5000, "date": "2026-01-01", "type": "income",
                 "category": "salary", "paymentMode": "", "remarks": ""},
            ]
        ),
        encoding="utf-8",
    )
    return path


@pytest.fixture()
def patched_remote(monkeypatch, fake_remote):
    @contextmanager
    def _fake_open_remote(cfg):
        yield fake_remote

    monkeypatch.setattr(cli_mod, "_open_remote", _fake_open_remote)
    reset_logging()
    yield fake_remote
    reset_logging()


def test_list(write_config, seeded_store, capsys):
    reset_logging()
    assert cli_main(["list"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[0].split() == ["2", "2026-01-04", "-1,250.50", "Dinner", "[Food", "&", "Dining]", "via", "Credit", "Card", "-", "team"]
    assert lines[1].split() == ["1", "2026-01-01", "+5,000.00", "Salary", "[Salary]"]
    assert lines[-1] == "income=5,000.00 expense=1,250.50 balance=3,749.50"


def test_list_empty(write_config, capsys):
    reset_logging()
    assert cli_main(["list"]) == 0
    out = capsys.readouterr().out
    assert "No transactions." in out
    assert "balance=0.00" in out


def test_list_corrupt_store(temp_workdir, write_config, capsys):
    (temp_workdir / "data" / "transactions.json").write_text("{broken", encoding="utf-8")
    reset_logging()
    assert cli_main(["list"]) == 1
    assert "ERROR store:" in capsys.readouterr().out


def test_delete(write_config, seeded_store, patched_remote, capsys):
    assert cli_main(["delete", "2"]) == 0
    assert patched_remote.deleted == [12]
    assert [t["id"] for t in json.loads(seeded_store.read_text(encoding="utf-8"))] == [1]
    assert "INFO deleted id=2 name=Dinner" in capsys.readouterr().out


def test_delete_unknown(write_config, seeded_store, patched_remote, capsys):
    assert cli_main(["delete", "99"]) == 1
    assert "ERROR delete: transaction not found: 99" in capsys.readouterr().out


def test_delete_remote_failure_keeps_entry(write_config, seeded_store, patched_remote, capsys):
    patched_remote.error = TransportError("Server Error: Transaction not found")
    assert cli_main(["delete", "2"]) == 1
    assert len(json.loads(seeded_store.read_text(encoding="utf-8"))) == 2
