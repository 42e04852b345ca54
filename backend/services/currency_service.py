"""
Exchange-rate snapshot source and conversion into the reporting currency
"""
import logging
import time
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Callable, Dict, Mapping, Optional, Tuple

import httpx

from .config import Settings
from .exceptions import ConversionError

logger = logging.getLogger(__name__)

REPORTING_CURRENCY = "USD"
CENT = Decimal("0.01")


def convert_to_reporting_currency(amount: float, currency: str, rates: Optional[Mapping[str, float]]) -> float:
    """
    Convert an amount into USD using a snapshot of rates quoted against USD

    Amounts already in USD are returned untouched. When no snapshot is
    available or it lacks the currency, the original amount is returned.
    """
    if currency == REPORTING_CURRENCY:
        return amount
    if not rates:
        logger.warning(f"[CURRENCY] No rate snapshot, keeping {amount} {currency} unconverted")
        return amount

    rate = rates.get(currency)
    try:
        rate_value = Decimal(str(rate))
    except (InvalidOperation, ValueError):
        rate_value = Decimal(0)
    if not rate_value.is_finite() or rate_value <= 0:
        logger.warning(f"[CURRENCY] No usable rate for {currency}, keeping amount unconverted")
        return amount

    converted = Decimal(str(amount)) / rate_value
    return float(converted.quantize(CENT, rounding=ROUND_HALF_UP))


class ExchangeRateService:
    """Fetches USD-based rate snapshots and keeps the latest one for a while"""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        url: str,
        ttl_seconds: int = 3600,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._client = http_client
        self._url = url
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._snapshot: Optional[Tuple[Dict[str, float], float]] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "ExchangeRateService":
        client = httpx.AsyncClient(timeout=settings.http_timeout_seconds)
        return cls(client, settings.exchange_rate_url, ttl_seconds=settings.exchange_rate_ttl_seconds)

    async def get_rates(self) -> Dict[str, float]:
        """Return the rate snapshot, raising ConversionError if the source is unreachable"""
        if self._snapshot is not None:
            rates, expires_at = self._snapshot
            if self._clock() < expires_at:
                return rates
            self._snapshot = None

        try:
            response = await self._client.get(self._url)
            response.raise_for_status()
            payload = response.json()
            rates = {
                str(code).upper(): float(value)
                for code, value in payload["rates"].items()
            }
        except httpx.HTTPError as e:
            logger.error(f"[CURRENCY] Rate source unreachable: {e}")
            raise ConversionError(f"Exchange rate request failed: {e}")
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.error(f"[CURRENCY] Malformed rate payload: {e}")
            raise ConversionError(f"Exchange rate payload malformed: {e}")

        self._snapshot = (rates, self._clock() + self._ttl_seconds)
        logger.info(f"[CURRENCY] Loaded {len(rates)} exchange rates")
        return rates

    async def close(self):
        await self._client.aclose()
