import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional, Protocol

from fxsignal.errors import UnknownPairError
from fxsignal.market.cache import CacheStore
from fxsignal.market.pairs import currency_legs, normalize_interval
from fxsignal.market.synthetic import SyntheticMarket
from fxsignal.utils.candle import Candle, Quote, parse_candle

log = logging.getLogger("FXSignal")


class QuoteProvider(Protocol):
    async def fetch_quote(self, pair: str) -> Quote: ...

    async def fetch_candles(self, pair: str, interval: str) -> list[Candle]: ...


class QuoteSource:
    """Quotes and candles for a pair: cache first, then the provider with
    bounded retries, then the synthetic market. Only an unknown pair raises."""

    def __init__(
        self,
        provider: Optional[QuoteProvider] = None,
        cache: Optional[CacheStore] = None,
        synthetic: Optional[SyntheticMarket] = None,
        max_retries: int = 3,
        retry_backoff: float = 1.0,
        candle_count: int = 100,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.provider = provider
        self.cache = cache if cache is not None else CacheStore(clock=clock)
        self.synthetic = synthetic if synthetic is not None else SyntheticMarket()
        self.max_retries = max(1, max_retries)
        self.retry_backoff = retry_backoff
        self.candle_count = candle_count
        self.clock = clock
        self._sleep = sleep

    # ------------------------------------------------------------------
    async def get_quote(self, pair: str) -> Quote:
        currency_legs(pair)
        cached = self.cache.get(pair)
        if cached is not None:
            return cached

        quote = None
        if self.provider is not None:
            quote = await self._fetch_with_retry(
                lambda: self.provider.fetch_quote(pair), f"quote {pair}")
        if quote is None:
            quote = self.synthetic.quote(pair, self.clock())
            log.debug("Synthetic quote for %s: %.5f", pair, quote.price)

        self.cache.set(pair, quote)
        return quote

    async def get_candles(self, pair: str, interval: str = "15min") -> list[Candle]:
        currency_legs(pair)
        interval = normalize_interval(interval)
        key = f"{pair}|{interval}"
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        candles = None
        if self.provider is not None:
            candles = await self._fetch_with_retry(
                lambda: self._provider_candles(pair, interval), f"candles {pair} {interval}")
        if not candles:
            candles = self.synthetic.candles(pair, interval, self.candle_count, self.clock())
            log.debug("Synthetic candles for %s %s (%d bars)", pair, interval, len(candles))

        self.cache.set(key, candles)
        return candles

    async def get_all_quotes(self, pairs) -> list[Quote]:
        return list(await asyncio.gather(*(self.get_quote(p) for p in pairs)))

    # ------------------------------------------------------------------
    async def _provider_candles(self, pair: str, interval: str) -> list[Candle]:
        rows = await self.provider.fetch_candles(pair, interval)
        return [parse_candle(r) for r in rows]

    async def _fetch_with_retry(self, call, what: str):
        for attempt in range(1, self.max_retries + 1):
            try:
                return await call()
            except UnknownPairError:
                raise
            except Exception as e:
                if attempt == self.max_retries:
                    log.warning("Provider failed for %s after %d attempts: %s — using synthetic data",
                                what, attempt, e)
                    return None
                log.debug("Provider error for %s (attempt %d/%d): %r",
                          what, attempt, self.max_retries, e)
                await self._sleep(self.retry_backoff * attempt)
        return None
