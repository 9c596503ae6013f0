"""
Adapter: Yahoo Finance chart API.

Implements QuoteProviderPort.
Quotes come from the ``meta`` block of the chart endpoint, candles from
its ``timestamp`` and ``indicators.quote`` arrays. Responses are cached
per symbol/range/interval. Provider failures are logged and reported as
"no data"; they never raise.
"""

import logging
from typing import Any, Optional

import requests

from tradejournal.domain.journal.entities import Candle, StockQuote
from tradejournal.domain.journal.ports import CachePort, QuoteProviderPort

logger = logging.getLogger(__name__)

USER_AGENT = "Mozilla/5.0"


class YahooQuoteAdapter(QuoteProviderPort):
    """Quote provider backed by the public Yahoo Finance chart endpoint."""

    def __init__(
        self,
        base_url: str,
        cache: CachePort,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._cache = cache
        self._timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": USER_AGENT})

    def get_quote(self, symbol: str) -> Optional[StockQuote]:
        key = f"quote:{symbol}"
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        result = self._fetch(symbol, {})
        if result is None:
            return None
        quote = _parse_quote(symbol, result.get("meta") or {})
        if quote is not None:
            self._cache.set(key, quote)
        return quote

    def get_chart(self, symbol: str, range_: str, interval: str) -> list[Candle]:
        key = f"chart:{symbol}:{range_}:{interval}"
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        result = self._fetch(symbol, {"range": range_, "interval": interval})
        if result is None:
            return []
        candles = _parse_candles(result)
        self._cache.set(key, candles)
        return candles

    def _fetch(self, symbol: str, params: dict[str, str]) -> Optional[dict[str, Any]]:
        """Return the first chart result for ``symbol`` or None on any failure."""
        url = f"{self._base_url}/{symbol}"
        try:
            response = self._session.get(url, params=params, timeout=self._timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.exceptions.HTTPError as exc:
            logger.error("Quote API error for %s: HTTP %s", symbol, exc.response.status_code)
            return None
        except (requests.exceptions.RequestException, ValueError) as exc:
            logger.error("Quote API request failed for %s: %s", symbol, exc)
            return None

        chart = payload.get("chart") or {}
        if chart.get("error"):
            logger.warning(
                "Quote API error for %s: %s", symbol, chart["error"].get("description")
            )
            return None
        results = chart.get("result") or []
        if not results:
            logger.warning("No data found for symbol: %s", symbol)
            return None
        return results[0]


def _parse_quote(symbol: str, meta: dict[str, Any]) -> Optional[StockQuote]:
    price = meta.get("regularMarketPrice")
    previous_close = meta.get("previousClose") or meta.get("chartPreviousClose")
    if price is None or not previous_close:
        logger.warning("Incomplete quote for symbol: %s", symbol)
        return None

    change = price - previous_close
    return StockQuote(
        symbol=meta.get("symbol") or symbol,
        price=float(price),
        change=change,
        change_percent=change / previous_close * 100,
        open=float(meta.get("regularMarketOpen") or 0.0),
        high=float(meta.get("regularMarketDayHigh") or 0.0),
        low=float(meta.get("regularMarketDayLow") or 0.0),
        previous_close=float(previous_close),
        timestamp=int(meta.get("regularMarketTime") or 0) * 1000,
    )


def _parse_candles(result: dict[str, Any]) -> list[Candle]:
    timestamps = result.get("timestamp") or []
    quotes = (result.get("indicators") or {}).get("quote") or [{}]
    bars = quotes[0]
    opens = bars.get("open") or []
    highs = bars.get("high") or []
    lows = bars.get("low") or []
    closes = bars.get("close") or []
    volumes = bars.get("volume") or []

    def at(values: list, i: int):
        return values[i] if i < len(values) else None

    candles = []
    for i, ts in enumerate(timestamps):
        close = at(closes, i)
        # Yahoo pads holidays and the live bar with nulls.
        if close is None:
            continue
        candles.append(
            Candle(
                time=int(ts),
                open=float(at(opens, i) or close),
                high=float(at(highs, i) or close),
                low=float(at(lows, i) or close),
                close=float(close),
                volume=int(at(volumes, i) or 0),
            )
        )
    return candles
