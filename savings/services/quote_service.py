"""Quote Gateway - live USD/THB rate and spot prices with fallbacks.

Both providers are best effort. A failure never propagates to the caller:
the rate falls back to a fixed value with a ``note`` and missing prices are
simply absent from the mapping (valued as zero by the aggregation).
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Mapping, Optional

import httpx

from savings.core.config import Settings
from savings.core.errors import UpstreamUnavailableError
from savings.core.logging import get_logger
from savings.services.aggregation import Quote

log = get_logger("quote_service")

# Symbols whose USD price never comes from a provider
PINNED_PRICES: Dict[str, float] = {"USD": 1.0}

NOTE_API_UNAVAILABLE = "Fallback rate - API unavailable"
NOTE_API_ERROR = "Fallback rate - API error"


@dataclass(frozen=True)
class ExchangeRate:
    rate: float
    timestamp: datetime
    note: Optional[str] = None

    @property
    def is_fallback(self) -> bool:
        return self.note is not None


class QuoteGateway:
    """Fetches quotes through an injected ``httpx.AsyncClient``.

    The client is owned by whoever builds the gateway (the app lifespan in
    production, a ``MockTransport`` client in tests).
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        exchange_rate_url: str,
        price_api_url: str,
        price_ids: Mapping[str, str],
        fallback_rate: float = 33.5,
        timeout: float = 10.0,
    ):
        self.client = client
        self.exchange_rate_url = exchange_rate_url
        self.price_api_url = price_api_url
        self.price_ids = dict(price_ids)
        self.fallback_rate = fallback_rate
        self.timeout = timeout

    @classmethod
    def from_settings(cls, client: httpx.AsyncClient, settings: Settings) -> "QuoteGateway":
        return cls(
            client,
            exchange_rate_url=settings.EXCHANGE_RATE_URL,
            price_api_url=settings.PRICE_API_URL,
            price_ids=settings.ASSET_PRICE_IDS,
            fallback_rate=settings.FALLBACK_USDTHB_RATE,
            timeout=settings.QUOTE_TIMEOUT_SECONDS,
        )

    # -------------------------------------------------------------------------
    # Exchange rate
    # -------------------------------------------------------------------------
    async def get_current_rate(self) -> ExchangeRate:
        """Current USD->THB rate, or the fallback rate with a note."""
        now = datetime.now(timezone.utc)
        try:
            data = await self._get_json(self.exchange_rate_url)
        except UpstreamUnavailableError as exc:
            log.warning(f"Exchange rate provider failed, using fallback {self.fallback_rate}: {exc.message}")
            return ExchangeRate(rate=self.fallback_rate, timestamp=now, note=NOTE_API_ERROR)

        rate = self._safe_float((data.get("rates") or {}).get("THB")) if isinstance(data, dict) else None
        if not rate or rate <= 0:
            log.warning(f"Exchange rate response had no THB rate, using fallback {self.fallback_rate}")
            return ExchangeRate(rate=self.fallback_rate, timestamp=now, note=NOTE_API_UNAVAILABLE)

        return ExchangeRate(rate=rate, timestamp=now)

    # -------------------------------------------------------------------------
    # Spot prices
    # -------------------------------------------------------------------------
    async def get_current_prices(self, symbols: Iterable[str]) -> Dict[str, float]:
        """USD price per symbol. Unknown or unpriced symbols are left out."""
        wanted = {symbol.upper() for symbol in symbols}
        prices: Dict[str, float] = {}

        lookup = {
            self.price_ids[symbol]: symbol
            for symbol in sorted(wanted)
            if symbol in self.price_ids and symbol not in PINNED_PRICES
        }
        if lookup:
            params = {"ids": ",".join(lookup), "vs_currencies": "usd"}
            try:
                data = await self._get_json(self.price_api_url, params=params)
            except UpstreamUnavailableError as exc:
                log.warning(f"Price provider failed for {sorted(lookup.values())}: {exc.message}")
                data = {}

            for provider_id, symbol in lookup.items():
                entry = data.get(provider_id) if isinstance(data, dict) else None
                price = self._safe_float(entry.get("usd")) if isinstance(entry, dict) else None
                if price is None:
                    log.warning(f"No USD price returned for {symbol} ({provider_id})")
                    continue
                prices[symbol] = price

        # Pinned entries win over anything a provider says
        prices.update(PINNED_PRICES)
        return prices

    async def get_quote(self, symbols: Iterable[str]) -> Quote:
        """Rate and prices fetched concurrently."""
        rate, prices = await asyncio.gather(
            self.get_current_rate(),
            self.get_current_prices(symbols),
        )
        return Quote(usdthb_rate=rate.rate, prices=prices, degraded=rate.is_fallback)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------
    async def _get_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        try:
            resp = await self.client.get(url, params=params, timeout=self.timeout)
            resp.raise_for_status()
            return resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise UpstreamUnavailableError(f"{url}: {exc!r}") from exc

    @staticmethod
    def _safe_float(value: Any) -> Optional[float]:
        if value is None or isinstance(value, bool):
            return None
        try:
            return float(value)
        except (ValueError, TypeError):
            return None
