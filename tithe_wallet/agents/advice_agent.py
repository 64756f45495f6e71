"""
Advice Agent

Asks Gemini for a short, motivational financial tip based on the most
recent income records and the running total.

BOUNDARIES:
- The tip is flavour text. It NEVER feeds back into any computation.
- The agent NEVER raises. Missing API key, network errors, blocked or
  empty responses all resolve to a fixed Portuguese fallback string.
- When several requests overlap, the one started last decides
  `last_advice`, whichever finishes first.
"""

import itertools
from collections.abc import Sequence
from typing import Any, Optional

import google.generativeai as genai
import structlog

from tithe_wallet.audit import AuditLogger
from tithe_wallet.config import GeminiSettings, get_settings
from tithe_wallet.ledger.aggregator import TITHE_RATE, gross_total
from tithe_wallet.models.audit import AuditEventBuilder
from tithe_wallet.models.wallet import Transaction


logger = structlog.get_logger(__name__)


NO_TRANSACTIONS_ADVICE = (
    "Adicione algumas transações para receber conselhos financeiros personalizados!"
)
FALLBACK_ADVICE = "Mantenha a consistência em seus lançamentos para prosperar!"
EMPTY_RESPONSE_ADVICE = "Continue focado nos seus objetivos financeiros!"
LOADING_ADVICE = "Buscando sabedoria financeira..."


class AdviceAgent:
    """
    Gemini-backed generator of one-paragraph financial tips.

    `model` can be injected (anything with an async
    `generate_content_async(prompt)`); otherwise one is built from the
    Gemini settings when an API key is configured.
    """

    def __init__(
        self,
        settings: Optional[GeminiSettings] = None,
        recent_count: Optional[int] = None,
        audit_logger: Optional[AuditLogger] = None,
        model: Optional[Any] = None,
    ):
        self._settings = settings or get_settings().gemini
        self._recent_count = recent_count or get_settings().app.advice_recent_count
        self._audit_logger = audit_logger
        self._model = model

        self._sequence = itertools.count(1)
        self._applied_sequence = 0
        self.last_advice = LOADING_ADVICE

        if self._model is None and self._settings.is_configured:
            self._configure_genai()

    def _configure_genai(self):
        """Configure Google Generative AI."""
        genai.configure(api_key=self._settings.api_key)
        self._model = genai.GenerativeModel(
            model_name=self._settings.model_name,
            generation_config={
                "temperature": self._settings.temperature,
                "max_output_tokens": self._settings.max_tokens,
            }
        )

    @property
    def is_available(self) -> bool:
        return self._model is not None

    def build_prompt(self, transactions: Sequence[Transaction]) -> str:
        """Prompt from the latest records and the gross total."""
        total = gross_total(transactions)
        recent = ", ".join(
            f"{t.description}: R${t.amount:.2f}"
            for t in transactions[-self._recent_count:]
        )
        return f"""Como um consultor financeiro especialista e amigável, analise estas transações recentes: {recent}.
O saldo total bruto recebido até agora é R${total:.2f}.
Lembre-se que o usuário separa {TITHE_RATE:.0%} para o dízimo.
Dê uma dica curta, criativa e motivadora (máximo 3 frases) em português sobre prosperidade ou gestão financeira."""

    def _fallback(self, reason: str) -> str:
        logger.warning("advice_fallback", reason=reason)
        if self._audit_logger:
            self._audit_logger.log(AuditEventBuilder.advice_fallback(reason))
        return FALLBACK_ADVICE

    async def _generate(self, transactions: Sequence[Transaction]) -> str:
        if not transactions:
            return NO_TRANSACTIONS_ADVICE

        if self._model is None:
            return self._fallback("Gemini API key not configured")

        prompt = self.build_prompt(transactions)
        try:
            response = await self._model.generate_content_async(prompt)
            # .text raises ValueError when the response was blocked
            text = (response.text or "").strip()
        except Exception as e:
            return self._fallback(f"{type(e).__name__}: {e}")

        return text or EMPTY_RESPONSE_ADVICE

    async def get_advice(self, transactions: Sequence[Transaction]) -> str:
        """
        Get a tip for the given records.

        Always returns text. Also updates `last_advice` unless a
        request started later has already done so.
        """
        sequence = next(self._sequence)
        advice = await self._generate(transactions)

        if sequence > self._applied_sequence:
            self._applied_sequence = sequence
            self.last_advice = advice

        return advice
