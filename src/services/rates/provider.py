"""
Exchange Rate Providers

Supplies the secondary-per-base rate used when the user enters an amount
in the secondary currency.

DESIGN DECISION: A rate provider never fails from the caller's point of view.
A network problem, an HTTP error or a malformed payload all degrade to
FALLBACK_RATE, so entering a transaction never depends on the network.
"""

from abc import ABC, abstractmethod
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

import requests
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from src.config import get_settings
from src.logs import LedgerLogger
from src.models.ledger import FALLBACK_RATE


class RateProvider(ABC):
    """Abstract source of the secondary-per-base exchange rate."""

    @abstractmethod
    def fetch_rate(self) -> Decimal:
        """Return a positive rate. Implementations must not raise."""
        pass


class FixedRateProvider(RateProvider):
    """Always returns the same rate. Used offline and in tests."""

    def __init__(self, rate: Decimal = FALLBACK_RATE):
        self._rate = Decimal(str(rate))

    def fetch_rate(self) -> Decimal:
        return self._rate


class RateUnavailableError(Exception):
    """The rate service answered with something we cannot use."""
    pass


class NbpRateProvider(RateProvider):
    """
    EUR mid rate from the National Bank of Poland (table A).

    Response shape:
        {"table": "A", "currency": "euro", "code": "EUR",
         "rates": [{"no": "...", "effectiveDate": "...", "mid": 4.2843}]}
    """

    def __init__(
        self,
        api_url: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        max_attempts: Optional[int] = None,
        fallback_rate: Optional[Decimal] = None,
        logger: Optional[LedgerLogger] = None,
    ):
        settings = get_settings()
        self._api_url = api_url or settings.rates.api_url
        self._timeout = timeout_seconds or settings.rates.timeout_seconds
        self._max_attempts = max_attempts or settings.rates.max_attempts
        self._fallback_rate = fallback_rate or settings.ledger.fallback_rate
        self._logger = logger or LedgerLogger()

    def fetch_rate(self) -> Decimal:
        fetch = retry(
            retry=retry_if_exception_type(requests.RequestException),
            stop=stop_after_attempt(self._max_attempts),
            wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
            reraise=True,
        )(self._request)

        try:
            rate = self._parse_rate(fetch())
        except (requests.RequestException, RateUnavailableError) as e:
            self._logger.log_rate_fallback(rate=self._fallback_rate, error_message=str(e))
            return self._fallback_rate

        self._logger.log_rate_fetched(rate=rate, source=self._api_url)
        return rate

    def _request(self) -> Any:
        response = requests.get(
            self._api_url,
            timeout=self._timeout,
            headers={"Accept": "application/json"},
        )
        response.raise_for_status()
        try:
            return response.json()
        except ValueError as e:
            raise RateUnavailableError(f"NBP returned invalid JSON: {e}") from e

    @staticmethod
    def _parse_rate(payload: Any) -> Decimal:
        try:
            mid = payload["rates"][0]["mid"]
        except (KeyError, IndexError, TypeError) as e:
            raise RateUnavailableError(f"NBP payload has no rates[0].mid: {e!r}") from e

        if isinstance(mid, bool) or not isinstance(mid, (int, float, str)):
            raise RateUnavailableError(f"NBP mid rate is not a number: {mid!r}")

        try:
            rate = Decimal(str(mid))
        except InvalidOperation as e:
            raise RateUnavailableError(f"NBP mid rate is not a number: {mid!r}") from e

        if not rate.is_finite() or rate <= 0:
            raise RateUnavailableError(f"NBP mid rate must be positive, got {mid!r}")
        return rate
