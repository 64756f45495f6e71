"""
Storage Services Package

Provides the abstract wallet store interface and its implementations.
The file store is used by the app; the in-memory store by tests.
"""

from tithe_wallet.services.storage.interface import (
    CorruptDocumentError,
    StorageError,
    WalletStoreInterface,
    decode_wallet,
    encode_wallet,
)
from tithe_wallet.services.storage.json_file import JsonFileWalletStore
from tithe_wallet.services.storage.memory import InMemoryWalletStore

__all__ = [
    # Interface
    "WalletStoreInterface",
    "decode_wallet",
    "encode_wallet",
    # Exceptions
    "CorruptDocumentError",
    "StorageError",
    # Implementations
    "InMemoryWalletStore",
    "JsonFileWalletStore",
]
