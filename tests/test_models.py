"""
Tests for the Tithe Wallet models

Test strategy:
1. Unit tests for individual components (models, parsers, audit events)
2. Service tests with in-memory storage and mocked external services
3. No real API calls in tests (use mocks)
"""

import pytest
from datetime import date
from pydantic import ValidationError

from tithe_wallet.models.wallet import (
    CURRENT_SCHEMA_VERSION,
    DEFAULT_GOAL,
    ExchangeRate,
    MonthlySummary,
    TithePayment,
    TithePaymentInput,
    Transaction,
    TransactionInput,
    WalletData,
    WalletSummary,
    parse_amount,
)
from tithe_wallet.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from tithe_wallet.audit import AuditLogger


class TestRecordModels:
    """Tests for the persisted record models."""

    def test_transaction_defaults(self):
        """Test a new Transaction gets an id, type and unpaid flag."""
        transaction = Transaction(amount=1000.0, description="Salário", date="2024-03-15")
        assert transaction.id
        assert transaction.type == "income"
        assert transaction.is_tithe_paid is False

    def test_transaction_ids_are_unique(self):
        """Test that generated ids differ between records."""
        a = Transaction(amount=1.0, description="a", date="2024-01-01")
        b = Transaction(amount=1.0, description="b", date="2024-01-01")
        assert a.id != b.id

    def test_transaction_accepts_int_amount(self):
        """Test that JSON integers are valid amounts."""
        transaction = Transaction(amount=1500, description="Freela", date="2024-03-01")
        assert transaction.amount == 1500.0
        assert isinstance(transaction.amount, float)

    def test_transaction_rejects_string_amount(self):
        """Test that numeric strings are not coerced into amounts."""
        with pytest.raises(ValidationError):
            Transaction(amount="12.5", description="x", date="2024-03-01")

    def test_transaction_rejects_bool_amount(self):
        """Test that booleans are not accepted as amounts."""
        with pytest.raises(ValidationError):
            Transaction(amount=True, description="x", date="2024-03-01")

    def test_transaction_rejects_non_finite_amount(self):
        """Test that NaN and infinity are rejected."""
        with pytest.raises(ValidationError):
            Transaction(amount=float("nan"), description="x", date="2024-03-01")
        with pytest.raises(ValidationError):
            Transaction(amount=float("inf"), description="x", date="2024-03-01")

    def test_transaction_rejects_huge_integer_amount(self):
        """Test that an integer too large for a float is a validation error."""
        with pytest.raises(ValidationError):
            Transaction(amount=10 ** 400, description="x", date="2024-03-01")

    def test_transaction_is_frozen(self):
        """Test that records cannot be modified in place."""
        transaction = Transaction(amount=10.0, description="x", date="2024-03-01")
        with pytest.raises(ValidationError):
            transaction.amount = 20.0

    def test_transaction_accepts_camel_case_input(self):
        """Test that persisted camelCase names are understood."""
        transaction = Transaction.model_validate({
            "id": "t1",
            "amount": 10,
            "description": "x",
            "date": "2024-03-01",
            "type": "income",
            "isTithePaid": True,
        })
        assert transaction.is_tithe_paid is True

    def test_tithe_payment_creation(self):
        """Test TithePayment model creation."""
        payment = TithePayment(amount=100.0, date="2024-03-10")
        assert payment.id
        assert payment.amount == 100.0


class TestWalletData:
    """Tests for the WalletData root."""

    def test_defaults(self):
        """Test that a fresh wallet has the documented defaults."""
        wallet = WalletData()
        assert wallet.transactions == []
        assert wallet.tithe_payments == []
        assert wallet.dark_mode is False
        assert wallet.currency == "BRL"
        assert wallet.prosperity_goal == DEFAULT_GOAL
        assert wallet.schema_version == CURRENT_SCHEMA_VERSION

    def test_to_document_uses_camel_case(self):
        """Test that the persisted document keeps its camelCase keys."""
        wallet = WalletData(
            transactions=[Transaction(id="t1", amount=10.0, description="x", date="2024-03-01")],
        )
        document = wallet.to_document()
        assert set(document) == {
            "transactions", "tithePayments", "darkMode",
            "currency", "prosperityGoal", "schemaVersion",
        }
        assert document["transactions"][0]["isTithePaid"] is False

    def test_null_goal_allowed(self):
        """Test that a null goal is valid (means no goal)."""
        wallet = WalletData.model_validate({"prosperityGoal": None})
        assert wallet.prosperity_goal is None

    def test_find_records(self):
        """Test lookup of records by id."""
        transaction = Transaction(id="t1", amount=10.0, description="x", date="2024-03-01")
        payment = TithePayment(id="p1", amount=1.0, date="2024-03-01")
        wallet = WalletData(transactions=[transaction], tithe_payments=[payment])

        assert wallet.find_transaction("t1") == transaction
        assert wallet.find_transaction("missing") is None
        assert wallet.find_tithe_payment("p1") == payment
        assert wallet.find_tithe_payment("t1") is None


class TestParseAmount:
    """Tests for parsing user-typed amounts."""

    @pytest.mark.parametrize("text, expected", [
        ("1500", 1500.0),
        ("1500.50", 1500.5),
        ("1500,50", 1500.5),
        ("1.500", 1500.0),
        ("1.500,50", 1500.5),
        ("1,500.50", 1500.5),
        ("R$ 2.000,00", 2000.0),
        ("  42 ", 42.0),
        ("0.5", 0.5),
    ])
    def test_parses_common_formats(self, text, expected):
        """Test pt-BR and en formats with optional currency prefix."""
        assert parse_amount(text) == pytest.approx(expected)

    def test_numbers_pass_through(self):
        """Test that numbers are returned as floats."""
        assert parse_amount(10) == 10.0
        assert parse_amount(2.5) == 2.5

    @pytest.mark.parametrize("bad", ["", "   ", "abc", "R$", "1,2,3", "1e999", "nan", "inf", "-inf"])
    def test_rejects_garbage(self, bad):
        """Test that non-numeric and non-finite text raises ValueError."""
        with pytest.raises(ValueError):
            parse_amount(bad)

    def test_rejects_bool(self):
        """Test that booleans are not amounts."""
        with pytest.raises(ValueError):
            parse_amount(True)


class TestInputModels:
    """Tests for form input validation."""

    def test_transaction_input_creates_record(self):
        """Test that valid input becomes a Transaction with an ISO date."""
        transaction = TransactionInput(
            amount="1.000,00",
            description="  Salário  ",
            on=date(2024, 3, 15),
        ).to_transaction()
        assert transaction.amount == 1000.0
        assert transaction.description == "Salário"
        assert transaction.date == "2024-03-15"

    def test_transaction_input_defaults_to_today(self):
        """Test that the date defaults to today."""
        assert TransactionInput(amount=1, description="x").on == date.today()

    @pytest.mark.parametrize("amount", [0, -10, "0", "-5,00"])
    def test_transaction_input_rejects_non_positive(self, amount):
        """Test that zero and negative amounts are rejected."""
        with pytest.raises(ValidationError):
            TransactionInput(amount=amount, description="x")

    def test_transaction_input_rejects_blank_description(self):
        """Test that a whitespace-only description is rejected."""
        with pytest.raises(ValidationError):
            TransactionInput(amount=10, description="   ")

    def test_transaction_input_rejects_unparseable_amount(self):
        """Test that text that is not a number is rejected."""
        with pytest.raises(ValidationError):
            TransactionInput(amount="muito", description="x")

    def test_tithe_payment_input(self):
        """Test that a payment input becomes a TithePayment."""
        payment = TithePaymentInput(amount="150,00", on="2024-03-01").to_payment()
        assert payment.amount == 150.0
        assert payment.date == "2024-03-01"


class TestExchangeRate:
    """Tests for the quote model."""

    def test_parses_api_payload(self):
        """Test parsing one pair from the quote API."""
        rate = ExchangeRate.model_validate({
            "code": "USD",
            "codein": "BRL",
            "name": "Dólar Americano/Real Brasileiro",
            "bid": "5.0123",
            "ask": "5.0150",
            "varBid": "0.01",
        })
        assert rate.bid_value == pytest.approx(5.0123)

    def test_rejects_non_numeric_bid(self):
        """Test that a bid that is not a number is rejected."""
        with pytest.raises(ValidationError):
            ExchangeRate(code="USD", codein="BRL", bid="n/a")


class TestSummaryModels:
    """Tests for derived value models."""

    def test_unpaid_months(self):
        """Test filtering months without payment."""
        summary = WalletSummary(
            gross_total=300.0,
            suggested_tithe=30.0,
            net_balance=270.0,
            monthly=[
                MonthlySummary(key="2024-01", label="jan. de 24", total=100.0, is_paid=True),
                MonthlySummary(key="2024-02", label="fev. de 24", total=200.0),
            ],
            goal_progress=6.0,
            projection=2100.0,
        )
        assert [m.key for m in summary.unpaid_months] == ["2024-02"]
        assert summary.average_monthly == pytest.approx(150.0)

    def test_average_monthly_without_months(self):
        """Test that an empty summary averages to zero."""
        summary = WalletSummary(
            gross_total=0.0, suggested_tithe=0.0, net_balance=0.0,
            goal_progress=0.0, projection=0.0,
        )
        assert summary.average_monthly == 0.0

    @pytest.mark.parametrize("month, expected", [
        (MonthlySummary(key="2024-03", label="mar. de 24", total=100.0, tithe=10.0), True),
        (MonthlySummary(key="2024-03", label="mar. de 24", total=100.0, tithe=10.0, is_paid=True), False),
        (MonthlySummary(key="2024-03", label="mar. de 24", total=-50.0, tithe=-5.0), False),
        (MonthlySummary(key="2024-03", label="mar. de 24"), False),
        (MonthlySummary(key="invalid", label="Data inválida", total=100.0, tithe=10.0), False),
    ])
    def test_can_mark_paid(self, month, expected):
        """Test that only unpaid dated months with a positive tithe are payable."""
        assert month.can_mark_paid is expected


class TestAuditModels:
    """Tests for audit models."""

    def test_audit_event_creation(self):
        """Test AuditEvent creation."""
        event = AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            description="Test event",
        )
        assert event.event_id is not None
        assert event.timestamp is not None
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            description="Test",
            error_message="disk full",
        )
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "save_failed"
        assert log_dict["severity"] == "error"
        assert log_dict["error_message"] == "disk full"
        assert isinstance(log_dict["event_id"], str)

    def test_audit_event_builder_transaction_added(self):
        """Test building a transaction-added event."""
        event = AuditEventBuilder.transaction_added("t1", 1000.0, "2024-03-15")
        assert event.event_type == AuditEventType.TRANSACTION_ADDED
        assert event.entity_id == "t1"
        assert event.is_user_action is True

    def test_audit_event_builder_import_rejected(self):
        """Test that rejected imports are warnings."""
        event = AuditEventBuilder.import_rejected("JSON inválido")
        assert event.event_type == AuditEventType.IMPORT_REJECTED
        assert event.severity == AuditSeverity.WARNING

    def test_audit_event_builder_save_failed(self):
        """Test that failed saves are errors."""
        event = AuditEventBuilder.save_failed("disk full")
        assert event.severity == AuditSeverity.ERROR
        assert event.is_user_action is False


class TestAuditLogger:
    """Tests for the in-memory audit history."""

    def test_recent_events_newest_first(self):
        """Test that history is returned newest first."""
        audit = AuditLogger()
        audit.log(AuditEventBuilder.data_cleared())
        audit.log(AuditEventBuilder.dark_mode_toggled(True))

        events = audit.recent_events()
        assert [e.event_type for e in events] == [
            AuditEventType.DARK_MODE_TOGGLED,
            AuditEventType.DATA_CLEARED,
        ]
        assert len(audit.recent_events(limit=1)) == 1

    def test_history_is_bounded(self):
        """Test that old events are dropped past the history size."""
        audit = AuditLogger(history_size=2)
        for _ in range(5):
            audit.log(AuditEventBuilder.data_cleared())
        assert len(audit.recent_events()) == 2
