"""
JSON File Storage Implementation

The wallet document is kept in `<data_dir>/<storage_key>.json`.

Writes go to a temporary file in the same directory which then replaces
the real file, so a crash mid-write never leaves half a document behind.
A replace can fail transiently (another process holding the file open,
antivirus scanners on Windows), so writes are retried a few times.
"""

import os
import tempfile
from pathlib import Path
from typing import Optional

import structlog
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from tithe_wallet.config import StorageSettings, get_settings
from tithe_wallet.models.wallet import WalletData
from tithe_wallet.services.storage.interface import (
    StorageError,
    WalletStoreInterface,
    decode_wallet,
    encode_wallet,
)


logger = structlog.get_logger(__name__)


class JsonFileWalletStore(WalletStoreInterface):
    """File-backed wallet store: one JSON document per storage key."""

    def __init__(self, settings: Optional[StorageSettings] = None):
        self._settings = settings or get_settings().storage

    @property
    def path(self) -> Path:
        return Path(self._settings.data_dir).expanduser() / f"{self._settings.storage_key}.json"

    def load(self) -> Optional[WalletData]:
        """Load the wallet from disk (None if the file does not exist)."""
        path = self.path
        if not path.exists():
            return None

        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Failed to read wallet file {path}: {e}")

        return decode_wallet(text)

    @retry(
        retry=retry_if_exception_type(OSError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
        reraise=True,
    )
    def _write(self, text: str) -> None:
        path = self.path
        path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{path.stem}-", suffix=".tmp", dir=path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(text)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def save(self, wallet: WalletData) -> None:
        """Overwrite the wallet file with the whole document."""
        try:
            self._write(encode_wallet(wallet))
        except OSError as e:
            raise StorageError(f"Failed to save wallet to {self.path}: {e}")

        logger.debug(
            "wallet_saved",
            path=str(self.path),
            transactions=len(wallet.transactions),
            tithe_payments=len(wallet.tithe_payments),
        )

    def clear(self) -> None:
        """Delete the wallet file."""
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to delete wallet file {self.path}: {e}")
