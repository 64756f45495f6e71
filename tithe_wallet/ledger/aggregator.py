"""
Ledger Aggregator

Computes every derived value the wallet displays from the raw records:
gross total, suggested tithe, net balance, per-month summaries with
paid status, goal progress and the 12-month projection.

Everything here is a pure function of its arguments. Nothing is cached
and nothing is mutated, so the same records always give the same summary.

Month keys are the first seven characters of the ISO date ("2024-03").
Dates that do not start with a valid YYYY-MM are collected into a single
INVALID_MONTH_KEY group, which sorts after every real month.
"""

import re
from collections.abc import Iterable, Sequence
from datetime import date
from typing import Optional

from tithe_wallet.models.wallet import (
    MonthlySummary,
    TithePayment,
    Transaction,
    WalletData,
    WalletSummary,
)


TITHE_RATE = 0.10
PROJECTION_MONTHS = 12

INVALID_MONTH_KEY = "invalid"
INVALID_MONTH_LABEL = "Data inválida"

_MONTH_KEY = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")

# pt-BR short month names
PT_BR_MONTHS = (
    "jan.", "fev.", "mar.", "abr.", "mai.", "jun.",
    "jul.", "ago.", "set.", "out.", "nov.", "dez.",
)


def month_key(iso_date: str) -> str:
    """Month bucket of an ISO date, or INVALID_MONTH_KEY."""
    key = iso_date[:7] if isinstance(iso_date, str) else ""
    if _MONTH_KEY.match(key):
        return key
    return INVALID_MONTH_KEY


def month_label(iso_date: str) -> str:
    """Short pt-BR label for the month of a date, e.g. 'mar. de 24'."""
    key = month_key(iso_date)
    if key == INVALID_MONTH_KEY:
        return INVALID_MONTH_LABEL
    year, month = int(key[:4]), int(key[5:7])
    return f"{PT_BR_MONTHS[month - 1]} de {year % 100:02d}"


def tithe_of(amount: float) -> float:
    return amount * TITHE_RATE


def net_of(amount: float) -> float:
    """Net after tithe. The one formula every net figure uses."""
    return amount - tithe_of(amount)


def gross_total(transactions: Iterable[Transaction]) -> float:
    return sum(t.amount for t in transactions)


def group_by_month(
    transactions: Iterable[Transaction],
    tithe_payments: Iterable[TithePayment] = (),
) -> list[MonthlySummary]:
    """
    Per-month totals, sorted ascending by month key.

    A month is paid when any tithe payment falls in it. Payments in a
    month without income do not create a group.
    """
    groups: dict[str, dict] = {}

    for transaction in transactions:
        key = month_key(transaction.date)
        group = groups.get(key)
        if group is None:
            group = groups[key] = {
                "key": key,
                "label": month_label(transaction.date),
                "total": 0.0,
                "tithe": 0.0,
                "net": 0.0,
                "transaction_count": 0,
                "is_paid": False,
            }
        group["total"] += transaction.amount
        group["tithe"] += tithe_of(transaction.amount)
        group["net"] += net_of(transaction.amount)
        group["transaction_count"] += 1

    for payment in tithe_payments:
        key = month_key(payment.date)
        if key != INVALID_MONTH_KEY and key in groups:
            groups[key]["is_paid"] = True

    # "invalid" sorts after any "YYYY-MM" key because digits < letters
    return [MonthlySummary(**groups[key]) for key in sorted(groups)]


def goal_progress(total: float, goal: Optional[float]) -> float:
    """Percent of the goal reached, capped at 100. No lower bound."""
    if not goal:
        return 0.0
    return min(100.0, total / goal * 100)


def projection(total: float, month_count: int) -> float:
    """
    Naive linear projection: current total plus twelve average months.

    Every month counted so far weighs the same; no seasonality.
    """
    if month_count == 0:
        return 0.0
    average_monthly = total / month_count
    return total + average_monthly * PROJECTION_MONTHS


def summarize(
    transactions: Sequence[Transaction],
    tithe_payments: Sequence[TithePayment] = (),
    goal: Optional[float] = None,
) -> WalletSummary:
    """Compute every derived wallet value in one pass over the inputs."""
    total = gross_total(transactions)
    tithe = tithe_of(total)
    monthly = group_by_month(transactions, tithe_payments)

    return WalletSummary(
        gross_total=total,
        suggested_tithe=tithe,
        net_balance=total - tithe,
        monthly=monthly,
        goal_progress=goal_progress(total, goal),
        projection=projection(total, len(monthly)),
        tithe_paid_total=sum(p.amount for p in tithe_payments),
    )


def summarize_wallet(wallet: WalletData) -> WalletSummary:
    return summarize(
        wallet.transactions,
        wallet.tithe_payments,
        wallet.prosperity_goal,
    )


def recent(transactions: Sequence[Transaction], limit: int = 8) -> list[Transaction]:
    """The last `limit` entries, newest entry first."""
    if limit <= 0:
        return []
    return list(reversed(transactions[-limit:]))


def first_day_of_month(key: str) -> date:
    """Date of the 1st of a YYYY-MM key."""
    if len(key) != 7 or month_key(key) == INVALID_MONTH_KEY:
        raise ValueError(f"Not a month key: {key!r}")
    return date(int(key[:4]), int(key[5:7]), 1)
