from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from ..csvfile.reader import Source, parse_csv, read_source
from ..csvfile.validator import validate_row
from ..errors import (
    CsvImportError,
    EmptyResultError,
    ImportInProgressError,
    MalformedResponseError,
    SourceReadError,
    StoreError,
    StructuralError,
    TransportError,
)
from ..logging.error_log import ErrorLogBuffer, ErrorRecord
from ..models.import_record import ImportRecord
from ..models.local_transaction import LocalTransaction
from ..models.processing_result import FileStat, ImportResult, ProcessingResult
from ..models.row_data import RawRow
from ..remote.interface import BulkInsertService
from ..store.local_store import TransactionStore, sort_by_date_desc
from .progress import ProgressTracker

"""Import coordinator: CSV source -> parse -> bulk insert -> reconcile -> store.

Flow of one ``CsvImporter.import_csv`` call:
1. read the whole source (SourceReadError)
2. parse (StructuralError); zero accepted rows is EmptyResultError
3. submit every accepted record as one batch to the bulk-insert service
4. pair returned ids with records by position
5. merge into the stored collection, newest first (stable sort), save once
Any failure leaves the local collection untouched.

One read-modify-save cycle at a time per store (TransactionStore.exclusive):
a concurrent import or add raises ImportInProgressError instead of
interleaving.

``CsvImporter.add_transaction`` is the single-record variant: validate one
row, insert it remotely, store it with the returned id.
"""

__all__ = [
    "CsvImporter",
    "reconcile",
    "process_files",
]

logger = logging.getLogger(__name__)

ERROR_TYPES: dict[type[CsvImportError], str] = {
    SourceReadError: "SOURCE_READ_ERROR",
    StructuralError: "STRUCTURAL_ERROR",
    EmptyResultError: "EMPTY_RESULT",
    MalformedResponseError: "MALFORMED_RESPONSE",
    TransportError: "TRANSPORT_ERROR",
    ImportInProgressError: "IMPORT_IN_PROGRESS",
}


def _error_type(exc: CsvImportError) -> str:
    for cls in type(exc).__mro__:
        if cls in ERROR_TYPES:
            return ERROR_TYPES[cls]
    return "IMPORT_ERROR"


def reconcile(records: Sequence[ImportRecord], ids: Sequence[Any], base_id: int) -> list[LocalTransaction]:
    """Pair accepted records with server ids by position.

    ``ids[i]`` belongs to ``records[i]``. Positions without an id get
    ``db_id=None``; surplus ids are ignored. Local ids are ``base_id + i``.
    """
    if len(ids) != len(records):
        logger.warning(
            "server returned %d ids for %d records; unmatched positions get no remote id",
            len(ids),
            len(records),
        )
    return [
        LocalTransaction.from_record(rec, base_id + i, ids[i] if i < len(ids) else None)
        for i, rec in enumerate(records)
    ]


class CsvImporter:
    """CSV import and single-record add against one local transaction store."""

    def __init__(
        self,
        remote: BulkInsertService,
        store: TransactionStore,
        *,
        error_log: ErrorLogBuffer | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.remote = remote
        self.store = store
        self.error_log = error_log
        self._clock = clock

    def _record_error(self, source_name: str, row: int, error_type: str, message: str) -> None:
        if self.error_log is not None:
            self.error_log.append(ErrorRecord.create(source_name, row, error_type, message))

    def import_csv(self, source: Source, source_name: str | None = None) -> ImportResult:
        """Run one import.

        Raises:
            ImportInProgressError: another import or add holds the store
            CsvImportError: any fatal failure (read, structure, empty, transport)
        """
        name = source_name or (Path(source).name if isinstance(source, (str, Path)) else "<stream>")
        try:
            with self.store.exclusive():
                return self._run(source, name)
        except CsvImportError as e:
            self._record_error(name, -1, _error_type(e), str(e))
            logger.debug("import failed source=%s: %s", name, e)
            raise

    def _run(self, source: Source, name: str) -> ImportResult:
        text = read_source(source)

        outcome = parse_csv(text)
        for row, msg in zip(outcome.error_rows, outcome.errors):
            self._record_error(name, row, "ROW_VALIDATION_ERROR", msg)
        if not outcome.records:
            raise EmptyResultError("No valid transactions found in CSV file")

        logger.debug("source=%s accepted=%d warnings=%d", name, len(outcome.records), len(outcome.errors))

        # 送信前に読む: 壊れたストアならリモートへ書く前に失敗させる
        try:
            existing = self.store.load()
        except StoreError as e:
            raise CsvImportError(f"Failed to load local transactions: {e}") from e

        batch = self.remote.insert_many([r.to_payload() for r in outcome.records])
        outcome.ids = list(batch.ids)

        new_transactions = reconcile(outcome.records, outcome.ids, self.store.next_local_id(self._clock()))
        merged = sort_by_date_desc(existing + new_transactions)
        try:
            self.store.save(merged)
        except StoreError as e:
            raise CsvImportError(
                f"Uploaded {batch.count} transactions but failed to save them locally: {e}"
            ) from e

        logger.info("source=%s imported=%d warnings=%d", name, batch.count, len(outcome.errors))
        return ImportResult(
            success=True,
            count=batch.count,
            transactions=merged,
            warnings=list(outcome.errors),
        )

    def add_transaction(self, row: RawRow) -> LocalTransaction:
        """Validate one entry, insert it remotely and store it with its remote id.

        Raises:
            RowValidationError: the entry fails a field rule (nothing is sent)
            ImportInProgressError: another import or add holds the store
            CsvImportError: transport failure or local store failure
        """
        record = validate_row(row)
        with self.store.exclusive():
            try:
                existing = self.store.load()
            except StoreError as e:
                raise CsvImportError(f"Failed to load local transactions: {e}") from e

            db_id = self.remote.insert_one(record.to_payload())
            txn = LocalTransaction.from_record(record, self.store.next_local_id(self._clock()), db_id)
            try:
                self.store.save(sort_by_date_desc(existing + [txn]))
            except StoreError as e:
                raise CsvImportError(f"Saved transaction {db_id} but failed to save it locally: {e}") from e

        logger.info("added id=%s remote_id=%s name=%s", txn.id, db_id, txn.name)
        return txn


def process_files(
    importer: CsvImporter,
    paths: Sequence[Path],
    on_result: Callable[[Path, ImportResult], None] | None = None,
) -> ProcessingResult:
    """Import several CSV files one after another and aggregate the run.

    A failing file is logged and counted; the remaining files still run.
    """
    start_time = datetime.now(UTC)
    file_stats: list[FileStat] = []
    success_count = 0
    failed_count = 0
    total_rows = 0
    total_warnings = 0

    with ProgressTracker(len(paths), description="Importing files") as progress:
        for path in paths:
            progress.start_file(path)
            file_start = time.perf_counter()
            try:
                result = importer.import_csv(path)
            except CsvImportError as e:
                failed_count += 1
                logger.error("%s: %s", path.name, e)
                file_stats.append(
                    FileStat(
                        file_name=path.name,
                        status="failed",
                        imported_rows=0,
                        warnings=0,
                        elapsed_seconds=time.perf_counter() - file_start,
                        error=str(e),
                    )
                )
                progress.finish_file()
                continue

            success_count += 1
            total_rows += result.count
            total_warnings += len(result.warnings)
            file_stats.append(
                FileStat(
                    file_name=path.name,
                    status="success",
                    imported_rows=result.count,
                    warnings=len(result.warnings),
                    elapsed_seconds=time.perf_counter() - file_start,
                )
            )
            if on_result is not None:
                on_result(path, result)
            progress.set_postfix(success=success_count, failed=failed_count, rows=total_rows)
            progress.finish_file()

    if importer.error_log is not None:
        try:
            importer.error_log.flush()
        except OSError:
            logger.warning("failed to write error log", exc_info=True)

    end_time = datetime.now(UTC)
    elapsed_seconds = (end_time - start_time).total_seconds()
    throughput_rps = total_rows / elapsed_seconds if elapsed_seconds > 0 else 0.0

    return ProcessingResult(
        success_files=success_count,
        failed_files=failed_count,
        total_imported_rows=total_rows,
        total_warnings=total_warnings,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=elapsed_seconds,
        throughput_rows_per_sec=throughput_rps,
        file_stats=file_stats,
    )
