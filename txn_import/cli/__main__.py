from __future__ import annotations

import argparse
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from dotenv import load_dotenv

from txn_import.config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from txn_import.csvfile.reader import parse_csv_file
from txn_import.errors import CsvImportError, RowValidationError, StoreError, TransportError
from txn_import.logging.error_log import ErrorLogBuffer
from txn_import.logging.init import get_logger, log_summary, setup_logging
from txn_import.models.categories import category_label, payment_mode_label
from txn_import.models.config_models import ImportConfig
from txn_import.models.processing_result import ImportResult
from txn_import.models.row_data import RawRow
from txn_import.remote.interface import BulkInsertService
from txn_import.services.importer import CsvImporter, process_files
from txn_import.services.summary import render_summary_line
from txn_import.store.local_store import TransactionStore

"""CLI entrypoint.

    python -m txn_import.cli [--config PATH] [--debug] import FILE... [--inspect-data]
    python -m txn_import.cli add --type expense --name Lunch --amount 12.5 --date 2026-01-09 [...]
    python -m txn_import.cli list
    python -m txn_import.cli delete ID

Files are imported one after another, never concurrently.
"""

EXIT_SUCCESS_ALL = 0
EXIT_FATAL = 1
EXIT_PARTIAL_FAILURE = 2


@contextmanager
def _open_remote(cfg: ImportConfig) -> Iterator[BulkInsertService]:
    """Build the bulk-insert collaborator selected by ``cfg.backend``."""
    if cfg.backend == "postgres":
        from txn_import.db.postgres_backend import PostgresBulkInsertService, connect

        with connect(cfg.database) as cur:
            yield PostgresBulkInsertService(cur, table=cfg.table)
        return

    from txn_import.remote.http_client import HttpBulkInsertClient

    client = HttpBulkInsertClient(
        cfg.endpoints.import_url or "",
        cfg.endpoints.delete_url,
        insert_url=cfg.endpoints.insert_url,
        timeout=cfg.timeout_seconds,
    )
    try:
        yield client
    finally:
        client.session.close()


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env so its values win over the YAML config (see config.loader)."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="txn_import", description="CSV transaction importer")
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="Path to import.yml")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    imp = sub.add_parser("import", help="Import one or more CSV files")
    imp.add_argument("files", nargs="+", type=Path)
    imp.add_argument(
        "--inspect-data",
        action="store_true",
        help="Parse and print accepted rows / warnings without uploading",
    )

    add = sub.add_parser("add", help="Add a single transaction")
    add.add_argument("--type", dest="transaction_type", required=True, help="income or expense")
    add.add_argument("--name", required=True)
    add.add_argument("--amount", required=True)
    add.add_argument("--date", required=True, help="YYYY-MM-DD or a readable date")
    add.add_argument("--category", default="")
    add.add_argument("--payment-mode", default="")
    add.add_argument("--remarks", default="")

    sub.add_parser("list", help="Show stored transactions and totals")

    dele = sub.add_parser("delete", help="Delete a stored transaction by local id")
    dele.add_argument("id", type=int)
    return p.parse_args(argv)


def _inspect_data(files: list[Path], limit: int) -> int:
    code = EXIT_SUCCESS_ALL
    for f in files:
        print(f"FILE: {f.name}")
        try:
            outcome = parse_csv_file(f)
        except CsvImportError as e:
            print(f"  error={e}")
            code = EXIT_PARTIAL_FAILURE
            continue
        print(f"  accepted={len(outcome.records)} warnings={len(outcome.errors)}")
        for rec in outcome.records[:3]:
            print("    sample_row=", rec.to_payload())
        for msg in outcome.errors[:limit]:
            print(f"    warning: {msg}")
    return code


def _report_import(limit: int):
    logger = get_logger()

    def report(path: Path, result: ImportResult) -> None:
        logger.info(f"{path.name}: Successfully imported {result.count} transactions!")
        for msg in result.display_warnings(limit):
            logger.warning(f"{path.name}: {msg}")

    return report


def _cmd_import(cfg: ImportConfig, args: argparse.Namespace) -> int:
    logger = setup_logging()
    store = TransactionStore(cfg.store_path)
    error_log = ErrorLogBuffer()
    try:
        with _open_remote(cfg) as remote:
            importer = CsvImporter(remote, store, error_log=error_log)
            result = process_files(importer, args.files, on_result=_report_import(cfg.warning_display_limit))
    except Exception as e:  # 接続確立失敗など (ファイル単位の失敗は process_files 内で集計)
        logger.error(f"backend: {e}")
        return EXIT_FATAL

    total_files = result.success_files + result.failed_files
    log_summary(render_summary_line(total_files, result).removeprefix("SUMMARY "))

    if result.failed_files > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


def _cmd_add(cfg: ImportConfig, args: argparse.Namespace) -> int:
    logger = setup_logging()
    row = RawRow(
        row_number=0,
        transaction_type=args.transaction_type.strip(),
        transaction_name=args.name.strip(),
        amount=args.amount.strip(),
        transaction_date=args.date.strip(),
        category=args.category.strip(),
        payment_mode=args.payment_mode.strip(),
        remarks=args.remarks.strip(),
    )
    store = TransactionStore(cfg.store_path)
    try:
        with _open_remote(cfg) as remote:
            txn = CsvImporter(remote, store).add_transaction(row)
    except (RowValidationError, CsvImportError) as e:
        logger.error(f"add: {e}")
        return EXIT_FATAL
    except Exception as e:
        logger.error(f"backend: {e}")
        return EXIT_FATAL
    logger.info(f"Transaction added: id={txn.id} remote_id={txn.db_id} date={txn.date}")
    return EXIT_SUCCESS_ALL


def _cmd_list(cfg: ImportConfig) -> int:
    logger = setup_logging()
    store = TransactionStore(cfg.store_path)
    try:
        transactions = store.load()
        totals = store.totals()
    except StoreError as e:
        logger.error(f"store: {e}")
        return EXIT_FATAL

    if not transactions:
        print("No transactions.")
    for t in transactions:
        line = f"{t.id:>14} {t.date} {t.signed_amount:+,.2f} {t.name}"
        if t.category:
            line += f" [{category_label(t.type, t.category)}]"
        if t.payment_mode:
            line += f" via {payment_mode_label(t.payment_mode)}"
        if t.remarks:
            line += f" - {t.remarks}"
        print(line)
    print(f"income={totals.income:,.2f} expense={totals.expense:,.2f} balance={totals.balance:,.2f}")
    return EXIT_SUCCESS_ALL


def _cmd_delete(cfg: ImportConfig, local_id: int) -> int:
    logger = setup_logging()
    store = TransactionStore(cfg.store_path)
    try:
        with _open_remote(cfg) as remote:
            removed = store.delete(local_id, remote)
    except (StoreError, TransportError) as e:
        logger.error(f"delete: {e}")
        return EXIT_FATAL
    except Exception as e:
        logger.error(f"backend: {e}")
        return EXIT_FATAL
    logger.info(f"deleted id={removed.id} name={removed.name}")
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    # None のときのみシステム引数を読む (テストで main([...]) を呼ぶため)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    logger = setup_logging(debug=args.debug)
    logger.debug("debug mode enabled")

    # .env を最優先で読み込む
    _load_env_file(Path(".env"), override=True)
    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.command == "import":
        if args.inspect_data:
            return _inspect_data(args.files, cfg.warning_display_limit)
        return _cmd_import(cfg, args)
    if args.command == "add":
        return _cmd_add(cfg, args)
    if args.command == "list":
        return _cmd_list(cfg)
    return _cmd_delete(cfg, args.id)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
