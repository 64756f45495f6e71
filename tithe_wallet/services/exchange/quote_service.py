"""
Exchange Rate Service

Fetches the USD→BRL quote from the AwesomeAPI currency endpoint
(https://economia.awesomeapi.com.br). The endpoint is asked for
USD-BRL and EUR-BRL in one call; only the configured pair is used,
and of that pair only the `bid` is displayed.

The quote is decoration, not data: every failure is logged and
swallowed, and the last known quote stays on screen. There is no retry;
the poller simply tries again on its next tick.

Results are published last-write-wins by request order: a slow older
request that finishes after a newer one does not overwrite it.
"""

import itertools
import threading
from typing import Any, Optional

import requests
import structlog
from pydantic import ValidationError

from tithe_wallet.audit import AuditLogger
from tithe_wallet.config import ExchangeRateSettings, get_settings
from tithe_wallet.models.audit import AuditEventBuilder
from tithe_wallet.models.wallet import ExchangeRate


logger = structlog.get_logger(__name__)


class ExchangeRateError(Exception):
    """Quote could not be fetched or understood."""
    pass


class ExchangeRateService:
    """
    Client for the quote endpoint that remembers the last good quote.

    `session` may be a requests.Session (or anything with a compatible
    `get`); the requests module itself is used by default.
    """

    def __init__(
        self,
        settings: Optional[ExchangeRateSettings] = None,
        session: Optional[Any] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._settings = settings or get_settings().exchange_rate
        self._http = session or requests
        self._audit_logger = audit_logger

        self._lock = threading.Lock()
        self._sequence = itertools.count(1)
        self._applied_sequence = 0
        self._latest: Optional[ExchangeRate] = None

    @property
    def latest(self) -> Optional[ExchangeRate]:
        """Last successfully fetched quote, or None if there never was one."""
        return self._latest

    def _request(self) -> ExchangeRate:
        try:
            response = self._http.get(
                self._settings.url,
                timeout=self._settings.timeout_seconds,
            )
            response.raise_for_status()
            payload = response.json()
        except requests.exceptions.RequestException as e:
            raise ExchangeRateError(f"Request failed: {e}")
        except ValueError as e:
            raise ExchangeRateError(f"Response is not JSON: {e}")

        if not isinstance(payload, dict) or self._settings.pair_key not in payload:
            raise ExchangeRateError(
                f"Response has no {self._settings.pair_key} quote"
            )

        try:
            rate = ExchangeRate.model_validate(payload[self._settings.pair_key])
        except ValidationError as e:
            raise ExchangeRateError(f"Malformed quote: {e}")

        return rate

    def _publish(self, sequence: int, rate: ExchangeRate) -> None:
        with self._lock:
            if sequence > self._applied_sequence:
                self._applied_sequence = sequence
                self._latest = rate

    def fetch_rate(self) -> Optional[ExchangeRate]:
        """
        Fetch the current quote.

        Returns the new quote, or None if the request failed. On failure
        `latest` keeps the previous quote.
        """
        with self._lock:
            sequence = next(self._sequence)

        try:
            rate = self._request()
        except ExchangeRateError as e:
            logger.warning("exchange_rate_unavailable", url=self._settings.url, error=str(e))
            if self._audit_logger:
                self._audit_logger.log(
                    AuditEventBuilder.exchange_rate_failed(self._settings.url, str(e))
                )
            return None

        self._publish(sequence, rate)
        return rate


class ExchangeRatePoller:
    """
    Refreshes an ExchangeRateService on a fixed interval.

    Runs on a daemon thread: the first fetch happens immediately on
    start(), then one every `interval_seconds`.
    """

    def __init__(
        self,
        service: ExchangeRateService,
        interval_seconds: Optional[float] = None,
    ):
        self._service = service
        self._interval = interval_seconds or get_settings().exchange_rate.poll_interval_seconds
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def latest(self) -> Optional[ExchangeRate]:
        return self._service.latest

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _run(self) -> None:
        while not self._stop.is_set():
            self._service.fetch_rate()
            self._stop.wait(self._interval)

    def start(self) -> None:
        if self.is_running:
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run,
            name="exchange-rate-poller",
            daemon=True,
        )
        self._thread.start()

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def __enter__(self) -> "ExchangeRatePoller":
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()
