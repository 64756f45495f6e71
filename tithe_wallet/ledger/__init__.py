"""Ledger computations: aggregation, migrations and backups."""

from tithe_wallet.ledger.aggregator import (
    INVALID_MONTH_KEY,
    TITHE_RATE,
    first_day_of_month,
    goal_progress,
    gross_total,
    group_by_month,
    month_key,
    month_label,
    net_of,
    projection,
    recent,
    summarize,
    summarize_wallet,
    tithe_of,
)
from tithe_wallet.ledger.backup import (
    BackupImportError,
    backup_filename,
    export_backup,
    parse_backup,
    wallet_from_document,
)
from tithe_wallet.ledger.migrations import (
    UnsupportedSchemaError,
    detect_version,
    migrate_document,
)

__all__ = [
    # Aggregation
    "INVALID_MONTH_KEY",
    "TITHE_RATE",
    "first_day_of_month",
    "goal_progress",
    "gross_total",
    "group_by_month",
    "month_key",
    "month_label",
    "net_of",
    "projection",
    "recent",
    "summarize",
    "summarize_wallet",
    "tithe_of",
    # Backups
    "BackupImportError",
    "backup_filename",
    "export_backup",
    "parse_backup",
    "wallet_from_document",
    # Migrations
    "UnsupportedSchemaError",
    "detect_version",
    "migrate_document",
]
