"""
Audit Models for the Tithe Wallet

Every user action and every silently degraded failure is recorded as an
AuditEvent. Failures the user never sees (corrupt storage, quote API
down, advice fallback) still leave a trace here.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Income records
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_DELETED = "transaction_deleted"

    # Tithe payments
    TITHE_PAYMENT_ADDED = "tithe_payment_added"
    TITHE_PAYMENT_DELETED = "tithe_payment_deleted"

    # Preferences
    GOAL_UPDATED = "goal_updated"
    DARK_MODE_TOGGLED = "dark_mode_toggled"

    # Whole-wallet operations
    DATA_EXPORTED = "data_exported"
    DATA_IMPORTED = "data_imported"
    IMPORT_REJECTED = "import_rejected"
    DATA_CLEARED = "data_cleared"
    ACTION_CANCELLED = "action_cancelled"

    # Storage
    STATE_LOADED = "state_loaded"
    STATE_RESET = "state_reset"
    SAVE_FAILED = "save_failed"

    # External services
    EXCHANGE_RATE_FAILED = "exchange_rate_failed"
    ADVICE_FALLBACK = "advice_fallback"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """A single audit event."""

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # Which record this is about, when there is one
    entity_type: Optional[str] = Field(
        default=None,
        description="'transaction', 'tithe_payment' or 'wallet'"
    )
    entity_id: Optional[str] = None

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None

    is_user_action: bool = False

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.transaction_added(transaction_id, amount, date)
        event = AuditEventBuilder.import_rejected(reason)
    """

    @staticmethod
    def transaction_added(
        transaction_id: str,
        amount: float,
        on: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            entity_type="transaction",
            entity_id=transaction_id,
            description=f"Income added: R$ {amount:.2f} on {on}",
            details={"amount": amount, "date": on},
            is_user_action=True,
        )

    @staticmethod
    def transaction_deleted(transaction_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_DELETED,
            entity_type="transaction",
            entity_id=transaction_id,
            description="Income record deleted",
            is_user_action=True,
        )

    @staticmethod
    def tithe_payment_added(
        payment_id: str,
        amount: float,
        on: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TITHE_PAYMENT_ADDED,
            entity_type="tithe_payment",
            entity_id=payment_id,
            description=f"Tithe payment recorded: R$ {amount:.2f} on {on}",
            details={"amount": amount, "date": on, "month": on[:7]},
            is_user_action=True,
        )

    @staticmethod
    def tithe_payment_deleted(payment_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TITHE_PAYMENT_DELETED,
            entity_type="tithe_payment",
            entity_id=payment_id,
            description="Tithe payment deleted",
            is_user_action=True,
        )

    @staticmethod
    def goal_updated(
        previous: Optional[float],
        current: float,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GOAL_UPDATED,
            entity_type="wallet",
            description=f"Prosperity goal set to {current:.2f}",
            details={"previous": previous, "current": current},
            is_user_action=True,
        )

    @staticmethod
    def dark_mode_toggled(enabled: bool) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DARK_MODE_TOGGLED,
            severity=AuditSeverity.DEBUG,
            entity_type="wallet",
            description=f"Dark mode {'enabled' if enabled else 'disabled'}",
            details={"dark_mode": enabled},
            is_user_action=True,
        )

    @staticmethod
    def data_exported(filename: str, transaction_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DATA_EXPORTED,
            entity_type="wallet",
            description=f"Backup exported: {filename}",
            details={"filename": filename, "transaction_count": transaction_count},
            is_user_action=True,
        )

    @staticmethod
    def data_imported(
        transaction_count: int,
        payment_count: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DATA_IMPORTED,
            entity_type="wallet",
            description=(
                f"Backup imported with {transaction_count} transactions "
                f"and {payment_count} tithe payments"
            ),
            details={
                "transaction_count": transaction_count,
                "payment_count": payment_count,
            },
            is_user_action=True,
        )

    @staticmethod
    def import_rejected(reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IMPORT_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="wallet",
            description="Backup import rejected",
            error_message=reason,
            is_user_action=True,
        )

    @staticmethod
    def data_cleared() -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DATA_CLEARED,
            severity=AuditSeverity.WARNING,
            entity_type="wallet",
            description="All wallet data cleared",
            is_user_action=True,
        )

    @staticmethod
    def action_cancelled(action: str, entity_id: Optional[str] = None) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACTION_CANCELLED,
            severity=AuditSeverity.DEBUG,
            entity_id=entity_id,
            description=f"User declined confirmation: {action}",
            details={"action": action},
            is_user_action=True,
        )

    @staticmethod
    def state_loaded(
        transaction_count: int,
        schema_version: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATE_LOADED,
            severity=AuditSeverity.DEBUG,
            entity_type="wallet",
            description=f"Wallet loaded with {transaction_count} transactions",
            details={
                "transaction_count": transaction_count,
                "schema_version": schema_version,
            },
        )

    @staticmethod
    def state_reset(reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATE_RESET,
            severity=AuditSeverity.WARNING,
            entity_type="wallet",
            description="Stored wallet missing or unreadable, starting from defaults",
            error_message=reason,
        )

    @staticmethod
    def save_failed(error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="wallet",
            description="Could not persist wallet",
            error_message=error_message,
        )

    @staticmethod
    def exchange_rate_failed(url: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXCHANGE_RATE_FAILED,
            severity=AuditSeverity.WARNING,
            description="Could not fetch exchange rate",
            details={"url": url},
            error_message=error_message,
        )

    @staticmethod
    def advice_fallback(reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ADVICE_FALLBACK,
            severity=AuditSeverity.WARNING,
            description="Advice service unavailable, static tip used",
            error_message=reason,
        )
