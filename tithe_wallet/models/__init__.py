"""
Data Models Package

This package contains all Pydantic models used by the wallet.
Everything persisted or displayed conforms to these schemas.
"""

from tithe_wallet.models.wallet import (
    CURRENT_SCHEMA_VERSION,
    DEFAULT_CURRENCY,
    DEFAULT_GOAL,
    ExchangeRate,
    MonthlySummary,
    TithePayment,
    TithePaymentInput,
    Transaction,
    TransactionInput,
    WalletData,
    WalletSummary,
    new_id,
    parse_amount,
)
from tithe_wallet.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Wallet models
    "CURRENT_SCHEMA_VERSION",
    "DEFAULT_CURRENCY",
    "DEFAULT_GOAL",
    "ExchangeRate",
    "MonthlySummary",
    "TithePayment",
    "TithePaymentInput",
    "Transaction",
    "TransactionInput",
    "WalletData",
    "WalletSummary",
    "new_id",
    "parse_amount",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
