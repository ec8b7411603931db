"""Domain models for the CSV transaction importer."""

from .config_models import DatabaseConfig, EndpointConfig, ImportConfig
from .import_record import ImportRecord, TransactionType
from .local_transaction import LocalTransaction
from .processing_result import FileStat, ImportOutcome, ImportResult, ProcessingResult
from .row_data import HeaderIndex, RawRow

__all__ = [
    # Configuration models
    "DatabaseConfig",
    "EndpointConfig",
    "ImportConfig",
    # Parsing models
    "HeaderIndex",
    "RawRow",
    "ImportRecord",
    "TransactionType",
    # Results / persisted state
    "ImportOutcome",
    "ImportResult",
    "LocalTransaction",
    "FileStat",
    "ProcessingResult",
]
