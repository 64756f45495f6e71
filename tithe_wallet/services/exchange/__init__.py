"""Exchange rate services package."""

from tithe_wallet.services.exchange.quote_service import (
    ExchangeRateError,
    ExchangeRatePoller,
    ExchangeRateService,
)

__all__ = [
    "ExchangeRateError",
    "ExchangeRatePoller",
    "ExchangeRateService",
]
