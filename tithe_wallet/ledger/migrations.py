"""
Wallet document migrations.

Stored documents and backups may come from older versions of the app.
Each version only ever added fields, so migrating means detecting the
version and backfilling what is missing:

    version 1  transactions (with the per-transaction isTithePaid flag),
               darkMode, currency, prosperityGoal; no schemaVersion
    version 2  adds tithePayments and stamps schemaVersion

Documents are plain dicts here; validation happens afterwards.
"""

import copy
from typing import Any

from tithe_wallet.models.wallet import (
    CURRENT_SCHEMA_VERSION,
    DEFAULT_CURRENCY,
    DEFAULT_GOAL,
)


FIRST_SCHEMA_VERSION = 1


class UnsupportedSchemaError(ValueError):
    """Document schema version is not one this app can read."""
    pass


def detect_version(document: dict[str, Any]) -> int:
    version = document.get("schemaVersion")
    if isinstance(version, int) and not isinstance(version, bool):
        return version
    return 2 if "tithePayments" in document else 1


def _to_v2(document: dict[str, Any]) -> None:
    document.setdefault("tithePayments", [])


_MIGRATIONS = {
    1: _to_v2,
}


def _backfill_transactions(document: dict[str, Any]) -> None:
    transactions = document.get("transactions")
    if not isinstance(transactions, list):
        return
    for transaction in transactions:
        if isinstance(transaction, dict):
            transaction.setdefault("type", "income")
            transaction.setdefault("isTithePaid", False)


def migrate_document(raw: dict[str, Any]) -> dict[str, Any]:
    """
    Bring a wallet document up to CURRENT_SCHEMA_VERSION.

    Returns a new dict; `raw` is left untouched. An explicit null
    prosperityGoal is kept (it means "no goal"); only an absent one is
    backfilled.

    Raises:
        UnsupportedSchemaError: the document is newer than this app, or
            claims a version that never existed
    """
    document = copy.deepcopy(raw)
    version = detect_version(document)

    if version > CURRENT_SCHEMA_VERSION:
        raise UnsupportedSchemaError(
            f"Wallet schema version {version} is newer than supported "
            f"version {CURRENT_SCHEMA_VERSION}"
        )
    if version < FIRST_SCHEMA_VERSION:
        raise UnsupportedSchemaError(f"Wallet schema version {version} does not exist")

    while version < CURRENT_SCHEMA_VERSION:
        _MIGRATIONS[version](document)
        version += 1

    document.setdefault("transactions", [])
    document.setdefault("tithePayments", [])
    document.setdefault("darkMode", False)
    document.setdefault("currency", DEFAULT_CURRENCY)
    document.setdefault("prosperityGoal", DEFAULT_GOAL)
    _backfill_transactions(document)
    document["schemaVersion"] = CURRENT_SCHEMA_VERSION

    return document
