"""In-memory wallet store, used by tests and when no data directory is wanted."""

from typing import Optional

from tithe_wallet.models.wallet import WalletData
from tithe_wallet.services.storage.interface import (
    WalletStoreInterface,
    decode_wallet,
    encode_wallet,
)


class InMemoryWalletStore(WalletStoreInterface):
    """
    Keeps serialized documents in a dict keyed by storage key.

    Documents are stored as text, exactly as the file store would write
    them, so loading goes through the same parsing and migration path.
    """

    def __init__(self, storage_key: str = "creative_wallet_data_v2"):
        self.storage_key = storage_key
        self.documents: dict[str, str] = {}
        self.save_count = 0

    def load(self) -> Optional[WalletData]:
        text = self.documents.get(self.storage_key)
        if text is None:
            return None
        return decode_wallet(text)

    def save(self, wallet: WalletData) -> None:
        self.documents[self.storage_key] = encode_wallet(wallet)
        self.save_count += 1

    def clear(self) -> None:
        self.documents.pop(self.storage_key, None)
