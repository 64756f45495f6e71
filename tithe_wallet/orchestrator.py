"""
Main Orchestrator for the Tithe Wallet

WalletService owns the one WalletData root and is the only thing that
changes it. Every operation follows the same path:

    validate input → build a new WalletData → persist it whole → audit

The aggregator never sees the service; the service hands it the current
data explicitly (summary()), so derived values are always recomputed
from what is stored.

Destructive operations take a `confirm` callback. The callback receives
the question to ask the user; if it returns False nothing happens.

create_app_components() wires the service, the exchange-rate poller and
the advice agent from settings.
"""

from collections.abc import Callable, MutableMapping
from datetime import date
from typing import Optional, Union

import structlog

from tithe_wallet.agents import AdviceAgent
from tithe_wallet.audit import AuditLogger
from tithe_wallet.config import AppSettings, get_settings
from tithe_wallet.ledger import (
    BackupImportError,
    backup_filename,
    export_backup,
    first_day_of_month,
    parse_backup,
    recent,
    summarize_wallet,
)
from tithe_wallet.models.audit import AuditEventBuilder
from tithe_wallet.models.wallet import (
    TithePayment,
    TithePaymentInput,
    Transaction,
    TransactionInput,
    WalletData,
    WalletSummary,
    parse_amount,
)
from tithe_wallet.services.exchange import ExchangeRatePoller, ExchangeRateService
from tithe_wallet.services.storage import (
    JsonFileWalletStore,
    StorageError,
    WalletStoreInterface,
)


logger = structlog.get_logger(__name__)


ConfirmFn = Callable[[str], bool]

DELETE_TRANSACTION_PROMPT = "Deseja realmente excluir esta transação?"
DELETE_PAYMENT_PROMPT = "Deseja realmente excluir este pagamento de dízimo?"
CLEAR_DATA_PROMPT = (
    "AVISO: Isso apagará todos os seus dados permanentemente. Deseja continuar?"
)


class PendingConfirmation:
    """
    One destructive action waiting for a yes/no from the user.

    The request lives in a session-state mapping so it survives UI reruns.
    Every answer consumes it: each delete or clear needs its own request,
    and an answer only applies to the prompt that was shown.
    """

    def __init__(self, state: MutableMapping, key: str = "pending_confirmation"):
        self._state = state
        self._key = key

    def request(self, action: str, prompt: str, target: Optional[str] = None) -> None:
        self._state[self._key] = {"action": action, "prompt": prompt, "target": target}

    @property
    def pending(self) -> Optional[dict]:
        return self._state.get(self._key)

    def is_pending(self, action: str, target: Optional[str] = None) -> bool:
        pending = self.pending
        return (
            pending is not None
            and pending["action"] == action
            and pending["target"] == target
        )

    def resolve(self, accepted: bool) -> ConfirmFn:
        """Consume the pending request and return the confirm callback answering it."""
        request = self._state.pop(self._key, None)

        def confirm(message: str) -> bool:
            return accepted and request is not None and message == request["prompt"]

        return confirm


class WalletService:
    """
    Owns the wallet and applies every user action to it.

    Storage failures never break an action: the in-memory wallet stays
    authoritative, the failure is audited and `last_save_error` is set
    so the UI can warn. The next successful save writes everything.
    """

    def __init__(
        self,
        store: WalletStoreInterface,
        audit_logger: Optional[AuditLogger] = None,
        app_settings: Optional[AppSettings] = None,
    ):
        self._store = store
        self._audit_logger = audit_logger or AuditLogger()
        self._app_settings = app_settings or get_settings().app
        self.last_save_error: Optional[str] = None
        self._data = self._load()

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    def _defaults(self) -> WalletData:
        return WalletData(
            currency=self._app_settings.currency,
            prosperity_goal=self._app_settings.default_goal,
        )

    def _load(self) -> WalletData:
        try:
            wallet = self._store.load()
        except StorageError as e:
            self._audit_logger.log(AuditEventBuilder.state_reset(str(e)))
            return self._defaults()

        if wallet is None:
            logger.info("wallet_not_found_using_defaults")
            return self._defaults()

        self._audit_logger.log(
            AuditEventBuilder.state_loaded(len(wallet.transactions), wallet.schema_version)
        )
        return wallet

    def _commit(self, wallet: WalletData) -> None:
        self._data = wallet
        try:
            self._store.save(wallet)
            self.last_save_error = None
        except StorageError as e:
            self.last_save_error = str(e)
            self._audit_logger.log(AuditEventBuilder.save_failed(str(e)))

    @property
    def data(self) -> WalletData:
        return self._data

    @property
    def audit_logger(self) -> AuditLogger:
        return self._audit_logger

    def summary(self) -> WalletSummary:
        return summarize_wallet(self._data)

    def recent(self, limit: Optional[int] = None) -> list[Transaction]:
        return recent(self._data.transactions, limit or self._app_settings.recent_limit)

    def _confirmed(self, confirm: ConfirmFn, prompt: str, action: str, entity_id: Optional[str] = None) -> bool:
        if confirm(prompt):
            return True
        self._audit_logger.log(AuditEventBuilder.action_cancelled(action, entity_id))
        return False

    # -------------------------------------------------------------------------
    # Income records
    # -------------------------------------------------------------------------

    def add_transaction(
        self,
        amount: Union[str, float],
        description: str,
        on: Optional[Union[date, str]] = None,
    ) -> Transaction:
        """
        Record a new income.

        Raises:
            ValidationError: amount not positive, blank description, bad date
        """
        fields = {"amount": amount, "description": description}
        if on is not None:
            fields["on"] = on
        transaction = TransactionInput(**fields).to_transaction()

        self._commit(self._data.model_copy(
            update={"transactions": [*self._data.transactions, transaction]}
        ))
        self._audit_logger.log(AuditEventBuilder.transaction_added(
            transaction.id, transaction.amount, transaction.date
        ))
        return transaction

    def delete_transaction(self, transaction_id: str, confirm: ConfirmFn) -> bool:
        """Delete one income record. False if unknown or not confirmed."""
        if self._data.find_transaction(transaction_id) is None:
            return False
        if not self._confirmed(confirm, DELETE_TRANSACTION_PROMPT, "delete_transaction", transaction_id):
            return False

        remaining = [t for t in self._data.transactions if t.id != transaction_id]
        self._commit(self._data.model_copy(update={"transactions": remaining}))
        self._audit_logger.log(AuditEventBuilder.transaction_deleted(transaction_id))
        return True

    # -------------------------------------------------------------------------
    # Tithe payments
    # -------------------------------------------------------------------------

    def add_tithe_payment(
        self,
        amount: Union[str, float],
        on: Optional[Union[date, str]] = None,
    ) -> TithePayment:
        """
        Record a tithe payment; its month shows as paid.

        Raises:
            ValidationError: amount not positive or bad date
        """
        fields = {"amount": amount}
        if on is not None:
            fields["on"] = on
        payment = TithePaymentInput(**fields).to_payment()

        self._commit(self._data.model_copy(
            update={"tithe_payments": [*self._data.tithe_payments, payment]}
        ))
        self._audit_logger.log(AuditEventBuilder.tithe_payment_added(
            payment.id, payment.amount, payment.date
        ))
        return payment

    def mark_month_paid(self, month: str) -> TithePayment:
        """
        Pay a month's computed tithe, dated on the 1st of that month.

        Raises:
            ValueError: `month` has no income, or its tithe is not positive
        """
        for summary in self.summary().monthly:
            if summary.key == month:
                if summary.tithe <= 0:
                    raise ValueError(f"Nothing to pay for month {month!r}")
                return self.add_tithe_payment(summary.tithe, first_day_of_month(month))
        raise ValueError(f"No income recorded for month {month!r}")

    def delete_tithe_payment(self, payment_id: str, confirm: ConfirmFn) -> bool:
        """Delete one tithe payment. False if unknown or not confirmed."""
        if self._data.find_tithe_payment(payment_id) is None:
            return False
        if not self._confirmed(confirm, DELETE_PAYMENT_PROMPT, "delete_tithe_payment", payment_id):
            return False

        remaining = [p for p in self._data.tithe_payments if p.id != payment_id]
        self._commit(self._data.model_copy(update={"tithe_payments": remaining}))
        self._audit_logger.log(AuditEventBuilder.tithe_payment_deleted(payment_id))
        return True

    # -------------------------------------------------------------------------
    # Preferences
    # -------------------------------------------------------------------------

    def set_goal(self, value: Union[str, float, None]) -> float:
        """Set the prosperity goal. Anything that is not a number means 0 (no goal)."""
        try:
            goal = parse_amount(value) if value is not None else 0.0
        except ValueError:
            goal = 0.0

        previous = self._data.prosperity_goal
        self._commit(self._data.model_copy(update={"prosperity_goal": goal}))
        self._audit_logger.log(AuditEventBuilder.goal_updated(previous, goal))
        return goal

    def toggle_dark_mode(self) -> bool:
        enabled = not self._data.dark_mode
        self._commit(self._data.model_copy(update={"dark_mode": enabled}))
        self._audit_logger.log(AuditEventBuilder.dark_mode_toggled(enabled))
        return enabled

    # -------------------------------------------------------------------------
    # Whole-wallet operations
    # -------------------------------------------------------------------------

    def export_backup(self, today: Optional[date] = None) -> tuple[str, str]:
        """Returns (file name, JSON text) of a full backup."""
        filename = backup_filename(today)
        text = export_backup(self._data)
        self._audit_logger.log(
            AuditEventBuilder.data_exported(filename, len(self._data.transactions))
        )
        return filename, text

    def import_backup(self, raw: Union[str, bytes]) -> WalletData:
        """
        Replace the whole wallet with a backup.

        Raises:
            BackupImportError: file rejected; the current wallet is untouched
        """
        try:
            wallet = parse_backup(raw)
        except BackupImportError as e:
            self._audit_logger.log(AuditEventBuilder.import_rejected(str(e)))
            raise

        self._commit(wallet)
        self._audit_logger.log(AuditEventBuilder.data_imported(
            len(wallet.transactions), len(wallet.tithe_payments)
        ))
        return wallet

    def clear_all(self, confirm: ConfirmFn) -> bool:
        """Forget everything and start from defaults."""
        if not self._confirmed(confirm, CLEAR_DATA_PROMPT, "clear_all"):
            return False

        self._data = self._defaults()
        try:
            self._store.clear()
            self.last_save_error = None
        except StorageError as e:
            self.last_save_error = str(e)
            self._audit_logger.log(AuditEventBuilder.save_failed(str(e)))

        self._audit_logger.log(AuditEventBuilder.data_cleared())
        return True


def create_app_components(
    store: Optional[WalletStoreInterface] = None,
    start_polling: bool = True,
) -> tuple[WalletService, ExchangeRatePoller, AdviceAgent]:
    """
    Create all application components.

    Args:
        store: Wallet store to use (defaults to the JSON file store)
        start_polling: Start the exchange-rate poller thread right away

    Returns:
        (wallet_service, exchange_poller, advice_agent)
    """
    settings = get_settings()
    audit_logger = AuditLogger()

    wallet_service = WalletService(
        store=store or JsonFileWalletStore(settings.storage),
        audit_logger=audit_logger,
        app_settings=settings.app,
    )

    exchange_settings = settings.exchange_rate
    exchange_poller = ExchangeRatePoller(
        ExchangeRateService(settings=exchange_settings, audit_logger=audit_logger),
        interval_seconds=exchange_settings.poll_interval_seconds,
    )
    if start_polling:
        exchange_poller.start()

    advice_agent = AdviceAgent(
        settings=settings.gemini,
        recent_count=settings.app.advice_recent_count,
        audit_logger=audit_logger,
    )

    return wallet_service, exchange_poller, advice_agent
