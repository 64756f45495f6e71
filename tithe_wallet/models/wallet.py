"""
Core Data Models for the Tithe Wallet

These models define the schemas for everything the wallet stores and
everything it derives. They are designed to:
1. Round-trip through JSON without loss
2. Keep the camelCase field names of the persisted document
3. Validate user input before it becomes a record

Records (Transaction, TithePayment) and the WalletData root are frozen:
every change produces a new WalletData which is then persisted whole.
"""

import math
import re
from datetime import date
from typing import Annotated, Literal, Optional, Union
from uuid import uuid4

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    StrictBool,
    StrictInt,
    StrictStr,
    field_validator,
)
from pydantic.alias_generators import to_camel


CURRENT_SCHEMA_VERSION = 2
DEFAULT_GOAL = 5000.0
DEFAULT_CURRENCY = "BRL"


def new_id() -> str:
    """Opaque identifier for a new record."""
    return str(uuid4())


def _require_number(value):
    # No coercion from strings or booleans: a document saying "12.5" is malformed
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError("must be a number")
    try:
        number = float(value)
    except OverflowError:
        raise ValueError("must be a finite number")
    if not math.isfinite(number):
        raise ValueError("must be a finite number")
    return number


Amount = Annotated[float, BeforeValidator(_require_number)]


class DocumentModel(BaseModel):
    """Base for everything that is part of the persisted document."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


# =============================================================================
# PERSISTED RECORDS
# =============================================================================

class Transaction(DocumentModel):
    """
    An income record.

    `date` is kept as the ISO string the user entered. It is not parsed
    here: the aggregator buckets malformed dates into a fallback group
    instead of rejecting them.

    Field types are strict (no string-to-number coercion and the like)
    because whole documents from backup files are validated through here.
    """

    id: StrictStr = Field(default_factory=new_id)
    amount: Amount
    description: StrictStr
    date: StrictStr
    type: Literal["income"] = "income"

    # Legacy per-transaction flag; paid status is now derived per month
    is_tithe_paid: StrictBool = False


class TithePayment(DocumentModel):
    """A tithe payment the user reports; its month is considered settled."""

    id: StrictStr = Field(default_factory=new_id)
    amount: Amount
    date: StrictStr


class WalletData(DocumentModel):
    """
    The aggregate root: everything the wallet persists.

    Always written and read as one document.
    """

    transactions: list[Transaction] = Field(default_factory=list)
    tithe_payments: list[TithePayment] = Field(default_factory=list)
    dark_mode: StrictBool = False
    currency: StrictStr = DEFAULT_CURRENCY
    prosperity_goal: Optional[Amount] = DEFAULT_GOAL
    schema_version: StrictInt = CURRENT_SCHEMA_VERSION

    def to_document(self) -> dict:
        """JSON-ready dict using the persisted (camelCase) field names."""
        return self.model_dump(mode="json", by_alias=True)

    def find_transaction(self, transaction_id: str) -> Optional[Transaction]:
        for transaction in self.transactions:
            if transaction.id == transaction_id:
                return transaction
        return None

    def find_tithe_payment(self, payment_id: str) -> Optional[TithePayment]:
        for payment in self.tithe_payments:
            if payment.id == payment_id:
                return payment
        return None


# =============================================================================
# EXTERNAL DATA
# =============================================================================

class ExchangeRate(BaseModel):
    """
    One currency pair quote as returned by the quote API.

    Every value arrives as a string; only `bid` is displayed.
    """

    model_config = ConfigDict(extra="ignore")

    code: str
    codein: str
    name: str = ""
    high: str = ""
    low: str = ""
    bid: str
    ask: str = ""
    timestamp: str = ""
    create_date: str = ""

    @field_validator('bid')
    @classmethod
    def validate_bid(cls, v: str) -> str:
        """The bid is displayed as a number, so it must parse as one."""
        float(v)
        return v

    @property
    def bid_value(self) -> float:
        return float(self.bid)


# =============================================================================
# DERIVED VALUES
# =============================================================================

class MonthlySummary(BaseModel):
    """Totals of one calendar month of income."""

    key: str = Field(
        ...,
        description="YYYY-MM month key, or 'invalid' for unparseable dates"
    )
    label: str = Field(
        ...,
        description="Short localized label, e.g. 'mar. de 24'"
    )
    total: float = 0.0
    tithe: float = 0.0
    net: float = 0.0
    transaction_count: int = 0
    is_paid: bool = False

    @property
    def can_mark_paid(self) -> bool:
        """Unpaid, dated, and with a positive tithe to pay."""
        return not self.is_paid and self.key != "invalid" and self.tithe > 0


class WalletSummary(BaseModel):
    """Everything the dashboard and analytics views display."""

    gross_total: float
    suggested_tithe: float
    net_balance: float
    monthly: list[MonthlySummary] = Field(default_factory=list)
    goal_progress: float
    projection: float
    tithe_paid_total: float = 0.0

    @property
    def unpaid_months(self) -> list[MonthlySummary]:
        return [month for month in self.monthly if not month.is_paid]

    @property
    def average_monthly(self) -> float:
        if not self.monthly:
            return 0.0
        return self.gross_total / len(self.monthly)


# =============================================================================
# USER INPUT
# =============================================================================

_THOUSANDS_DOT = re.compile(r"^-?\d{1,3}(\.\d{3})+$")


def parse_amount(value: Union[str, int, float]) -> float:
    """
    Parse a money amount typed by the user.

    Accepts numbers, "1234.56", "1234,56", "1.234,56", "1,234.56"
    and an optional "R$" prefix.
    Infinity and NaN ("1e999", "nan") are not amounts.
    """
    if isinstance(value, bool):
        raise ValueError("Amount must be a number")
    if isinstance(value, (int, float)):
        return _require_number(value)

    text = value.strip().replace("R$", "").replace(" ", "")
    if not text:
        raise ValueError("Amount is required")

    if "," in text and "." in text:
        if text.rfind(",") > text.rfind("."):
            text = text.replace(".", "").replace(",", ".")
        else:
            text = text.replace(",", "")
    elif "," in text:
        text = text.replace(",", ".")
    elif _THOUSANDS_DOT.match(text):
        # "1.500" typed in pt-BR means fifteen hundred
        text = text.replace(".", "")

    try:
        number = float(text)
    except ValueError:
        raise ValueError(f"Not a valid amount: {value!r}")
    return _require_number(number)


class TransactionInput(BaseModel):
    """Validated contents of the new-income form."""

    model_config = ConfigDict(str_strip_whitespace=True)

    amount: float = Field(..., gt=0, description="Income amount")
    description: str = Field(..., min_length=1, max_length=200)
    on: date = Field(default_factory=date.today, description="Date received")

    @field_validator('amount', mode='before')
    @classmethod
    def parse_amount_text(cls, v):
        return parse_amount(v)

    def to_transaction(self) -> Transaction:
        return Transaction(
            amount=self.amount,
            description=self.description,
            date=self.on.isoformat(),
        )


class TithePaymentInput(BaseModel):
    """Validated contents of the tithe payment form."""

    amount: float = Field(..., gt=0, description="Amount paid")
    on: date = Field(default_factory=date.today, description="Payment date")

    @field_validator('amount', mode='before')
    @classmethod
    def parse_amount_text(cls, v):
        return parse_amount(v)

    def to_payment(self) -> TithePayment:
        return TithePayment(amount=self.amount, date=self.on.isoformat())
