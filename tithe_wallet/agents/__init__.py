"""AI Agents package."""

from tithe_wallet.agents.advice_agent import (
    EMPTY_RESPONSE_ADVICE,
    FALLBACK_ADVICE,
    LOADING_ADVICE,
    NO_TRANSACTIONS_ADVICE,
    AdviceAgent,
)

__all__ = [
    "AdviceAgent",
    "EMPTY_RESPONSE_ADVICE",
    "FALLBACK_ADVICE",
    "LOADING_ADVICE",
    "NO_TRANSACTIONS_ADVICE",
]
