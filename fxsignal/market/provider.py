"""Alpha Vantage client for realtime FX quotes and intraday candles."""

import asyncio
import time
from datetime import datetime, timezone
from typing import Optional

import aiohttp

from fxsignal.errors import ProviderError
from fxsignal.market.pairs import currency_legs, normalize_interval
from fxsignal.utils.candle import Candle, Quote


def parse_exchange_rate(pair: str, data: dict, now: float) -> Quote:
    rate = data.get("Realtime Currency Exchange Rate")
    if not rate:
        raise ProviderError(_describe_empty(data, "exchange rate"))

    try:
        price = float(rate["5. Exchange Rate"])
    except (KeyError, TypeError, ValueError) as e:
        raise ProviderError(f"Malformed exchange rate payload: {e}") from e

    bid = _to_float(rate.get("8. Bid Price")) or price * 0.99995
    ask = _to_float(rate.get("9. Ask Price")) or price * 1.00005
    return Quote(pair=pair, price=price, bid=bid, ask=ask, timestamp=now)


def parse_intraday(data: dict, limit: int = 100) -> list[Candle]:
    """Time-series payload -> candles, oldest first, newest ``limit`` kept."""
    key = next((k for k in data if "Time Series" in k), None)
    if key is None or not data[key]:
        raise ProviderError(_describe_empty(data, "time series"))
    if not isinstance(data[key], dict):
        raise ProviderError(f"Malformed time series payload: {type(data[key]).__name__}")

    rows = sorted(data[key].items(), key=lambda kv: kv[0], reverse=True)[:limit]
    candles: list[Candle] = []
    for stamp, values in reversed(rows):
        try:
            ts = datetime.strptime(stamp, "%Y-%m-%d %H:%M:%S").replace(tzinfo=timezone.utc)
            candles.append(Candle(
                timestamp=ts.timestamp(),
                open=float(values["1. open"]),
                high=float(values["2. high"]),
                low=float(values["3. low"]),
                close=float(values["4. close"]),
                volume=float(values.get("5. volume", 0) or 0),
            ))
        except (KeyError, TypeError, ValueError):
            continue

    if not candles:
        raise ProviderError("Time series contained no parseable bars")
    return candles


def _to_float(value) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _describe_empty(data: dict, what: str) -> str:
    # Rate limiting comes back as HTTP 200 with a Note / Information message
    for key in ("Error Message", "Note", "Information"):
        if key in data:
            return f"No {what} in response: {data[key]}"
    return f"No {what} in response"


class AlphaVantageProvider:
    """Closes only the session it created; an injected session stays the caller's."""

    def __init__(self, api_key: str, base_url: str = "https://www.alphavantage.co/query",
                 timeout: float = 10.0, session: Optional[aiohttp.ClientSession] = None,
                 candle_limit: int = 100):
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout
        self.candle_limit = candle_limit
        self._session = session
        self._owns_session = False

    async def fetch_quote(self, pair: str) -> Quote:
        src, dst = currency_legs(pair)
        data = await self._get({
            "function": "CURRENCY_EXCHANGE_RATE",
            "from_currency": src,
            "to_currency": dst,
        })
        return parse_exchange_rate(pair, data, time.time())

    async def fetch_candles(self, pair: str, interval: str) -> list[Candle]:
        src, dst = currency_legs(pair)
        data = await self._get({
            "function": "FX_INTRADAY",
            "from_symbol": src,
            "to_symbol": dst,
            "interval": normalize_interval(interval),
        })
        return parse_intraday(data, self.candle_limit)

    def _client(self) -> aiohttp.ClientSession:
        if self._session is None or (self._owns_session and self._session.closed):
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def _get(self, params: dict) -> dict:
        params = {**params, "apikey": self.api_key}
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        try:
            async with self._client().get(self.base_url, params=params, timeout=timeout) as resp:
                return await self._read(resp)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise ProviderError(f"HTTP request failed: {e}") from e

    @staticmethod
    async def _read(resp: aiohttp.ClientResponse) -> dict:
        if resp.status != 200:
            raise ProviderError(f"HTTP {resp.status}")
        data = await resp.json(content_type=None)
        if not isinstance(data, dict):
            raise ProviderError("Unexpected response body")
        return data

    async def close(self):
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        if self._owns_session:
            self._session = None
            self._owns_session = False
