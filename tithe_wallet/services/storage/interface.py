"""
Abstract Storage Interface

The wallet is persisted as one JSON document under a fixed storage key.
The interface is small: load the whole document, overwrite the whole
document, forget it.

This allows us to:
1. Keep the wallet on disk (JsonFileWalletStore)
2. Use in-memory storage for testing (InMemoryWalletStore)
3. Keep the wallet service decoupled from where the bytes live
"""

import json
from abc import ABC, abstractmethod
from typing import Optional

from pydantic import ValidationError

from tithe_wallet.ledger.backup import wallet_from_document
from tithe_wallet.ledger.migrations import UnsupportedSchemaError
from tithe_wallet.models.wallet import WalletData


class WalletStoreInterface(ABC):
    """
    Abstract interface for wallet persistence.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    def load(self) -> Optional[WalletData]:
        """
        Load the stored wallet.

        Returns:
            The wallet, migrated to the current schema, or None if
            nothing is stored yet

        Raises:
            CorruptDocumentError: stored value exists but is unreadable
            StorageError: the backend itself failed
        """
        pass

    @abstractmethod
    def save(self, wallet: WalletData) -> None:
        """
        Overwrite the stored wallet with `wallet`.

        Raises:
            StorageError: If save fails
        """
        pass

    @abstractmethod
    def clear(self) -> None:
        """Remove the stored wallet. Clearing an empty store is fine."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class CorruptDocumentError(StorageError):
    """Stored document could not be parsed or validated."""
    pass


def encode_wallet(wallet: WalletData) -> str:
    return json.dumps(wallet.to_document(), ensure_ascii=False, separators=(",", ":"))


def decode_wallet(text: str) -> WalletData:
    """
    Parse a stored document, migrating older schemas.

    Raises:
        CorruptDocumentError: text is not a valid wallet document
    """
    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise CorruptDocumentError(f"Stored wallet is not valid JSON: {e}")

    if not isinstance(document, dict):
        raise CorruptDocumentError(
            f"Stored wallet must be a JSON object, got {type(document).__name__}"
        )

    try:
        return wallet_from_document(document)
    except (ValidationError, UnsupportedSchemaError) as e:
        raise CorruptDocumentError(f"Stored wallet does not match the schema: {e}")
