"""
Backup export and import.

An export is the full wallet document as JSON, named with the current
date. An import replaces the whole wallet, so it is only accepted after
the document passes every check:

STAGE 1 - SHAPE: valid JSON, a top-level object, a transactions list
STAGE 2 - MIGRATION: older documents are brought to the current schema
STAGE 3 - STRUCTURE: every record has every field, with the right type
          (no coercion: "12.5" is not an amount), and ids are unique

Any failure raises BackupImportError carrying a message meant for the
user. Nothing is applied until all stages pass.
"""

import json
from collections import Counter
from datetime import date
from typing import Any, Optional, Union

from pydantic import ValidationError

from tithe_wallet.ledger.migrations import UnsupportedSchemaError, migrate_document
from tithe_wallet.models.wallet import WalletData


BACKUP_PREFIX = "carteira-prosperidade-backup"


class BackupImportError(Exception):
    """Backup file rejected. The message is shown to the user as is."""
    pass


def backup_filename(today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"{BACKUP_PREFIX}-{today.isoformat()}.json"


def export_backup(wallet: WalletData) -> str:
    """Serialize the whole wallet as a backup document."""
    return json.dumps(wallet.to_document(), ensure_ascii=False, indent=2)


def wallet_from_document(document: dict[str, Any]) -> WalletData:
    """
    Migrate and validate a wallet document.

    Raises:
        UnsupportedSchemaError: document newer than this app
        ValidationError: document does not match the schema
    """
    return WalletData.model_validate(migrate_document(document))


def _format_validation_error(exc: ValidationError, limit: int = 3) -> str:
    parts = []
    for error in exc.errors()[:limit]:
        location = ".".join(str(part) for part in error["loc"])
        parts.append(f"{location}: {error['msg']}")
    more = exc.error_count() - limit
    if more > 0:
        parts.append(f"(+{more} outros problemas)")
    return "; ".join(parts)


def _duplicate_ids(records: list) -> list[str]:
    counts = Counter(record.id for record in records)
    return sorted(record_id for record_id, n in counts.items() if n > 1)


def parse_backup(raw: Union[str, bytes]) -> WalletData:
    """
    Parse and fully validate a backup file.

    Raises:
        BackupImportError: the file cannot be accepted
    """
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8-sig")
        except UnicodeDecodeError:
            raise BackupImportError("Erro ao importar arquivo: codificação inválida.")

    try:
        document = json.loads(raw)
    except json.JSONDecodeError as e:
        raise BackupImportError(f"Erro ao importar arquivo: JSON inválido ({e.msg}).")

    if not isinstance(document, dict):
        raise BackupImportError("Erro ao importar arquivo: formato de carteira inválido.")

    if not isinstance(document.get("transactions"), list):
        raise BackupImportError(
            "Erro ao importar arquivo: lista de transações ausente."
        )

    # Records get fresh ids when created in the app; an imported one must carry its own
    for list_name in ("transactions", "tithePayments"):
        records = document.get(list_name) or []
        if isinstance(records, list):
            for index, record in enumerate(records):
                if isinstance(record, dict) and "id" not in record:
                    raise BackupImportError(
                        f"Erro ao importar arquivo: {list_name}.{index}: id ausente."
                    )

    try:
        wallet = wallet_from_document(document)
    except UnsupportedSchemaError as e:
        raise BackupImportError(f"Erro ao importar arquivo: {e}.")
    except ValidationError as e:
        raise BackupImportError(
            f"Erro ao importar arquivo: {_format_validation_error(e)}"
        )

    duplicates = _duplicate_ids(wallet.transactions) + _duplicate_ids(wallet.tithe_payments)
    if duplicates:
        raise BackupImportError(
            f"Erro ao importar arquivo: identificadores repetidos ({', '.join(duplicates)})."
        )

    return wallet
