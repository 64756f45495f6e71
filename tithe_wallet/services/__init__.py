"""Services package."""

from tithe_wallet.services.exchange import (
    ExchangeRateError,
    ExchangeRatePoller,
    ExchangeRateService,
)
from tithe_wallet.services.storage import (
    CorruptDocumentError,
    InMemoryWalletStore,
    JsonFileWalletStore,
    StorageError,
    WalletStoreInterface,
)

__all__ = [
    # Exchange rate
    "ExchangeRateError",
    "ExchangeRatePoller",
    "ExchangeRateService",
    # Storage
    "CorruptDocumentError",
    "InMemoryWalletStore",
    "JsonFileWalletStore",
    "StorageError",
    "WalletStoreInterface",
]
