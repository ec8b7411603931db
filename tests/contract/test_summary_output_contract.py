from __future__ import annotations

import re
from contextlib import contextmanager

import txn_import.cli.__main__ as cli_mod
from txn_import.cli import main as cli_main
from txn_import.logging.init import reset_logging

"""SUMMARY 行フォーマット契約テスト"""

SUMMARY_PATTERN = re.compile(
    r"^SUMMARY\s+files=([0-9]+)/(\1)\s+success=([0-9]+)\s+failed=([0-9]+)\s+"
    r"rows=([0-9]+)\s+warnings=([0-9]+)\s+elapsed_sec=([0-9]+\.?[0-9]*)\s+"
    r"throughput_rps=([0-9]+\.?[0-9]*)$"
)


def test_summary_pattern_example_line():
    line = "SUMMARY files=2/2 success=1 failed=1 rows=4 warnings=3 elapsed_sec=0.84 throughput_rps=4.762"
    m = SUMMARY_PATTERN.match(line)
    assert m
    assert m.group(3) == "1" and m.group(6) == "3"


def test_cli_emits_single_summary_line(write_config, write_csv, monkeypatch, fake_remote, capsys):
    @contextmanager
    def _fake(cfg):
        yield fake_remote

    monkeypatch.setattr(cli_mod, "_open_remote", _fake)
    reset_logging()
    path = write_csv("a.csv", "income,Pay,1,2026-01-01", "expense,Tea,x,2026-01-02")

    cli_main(["import", str(path)])

    lines = [line for line in capsys.readouterr().out.splitlines() if line.startswith("SUMMARY")]
    assert len(lines) == 1
    m = SUMMARY_PATTERN.match(lines[0])
    assert m, lines[0]
    assert m.group(5) == "1" and m.group(6) == "1"
