from datetime import datetime, timezone

import pytest

from fxsignal.constants import Momentum, Regime, Trend, Volatility
from fxsignal.core.indicators import MACD, BollingerBands, Stochastic, Supertrend
from fxsignal.core.technicals import TechnicalAnalysis
from fxsignal.errors import ProviderError
from fxsignal.utils.candle import Candle, Quote

# Wednesday, markets open, no scheduled news at noon
WEDNESDAY_NOON = datetime(2024, 1, 10, 12, 0, tzinfo=timezone.utc).timestamp()
SATURDAY_NOON = datetime(2024, 1, 13, 12, 0, tzinfo=timezone.utc).timestamp()


class FakeClock:
    def __init__(self, now: float = WEDNESDAY_NOON):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FakeProvider:
    """Serves fixed candles; the first ``failures`` calls raise ProviderError."""

    def __init__(self, candles=None, price: float = 1.1, failures: int = 0):
        self.candles = candles or []
        self.price = price
        self.failures = failures
        self.calls = 0

    def _maybe_fail(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise ProviderError("boom")

    async def fetch_quote(self, pair):
        self._maybe_fail()
        return Quote(pair=pair, price=self.price, bid=self.price - 0.0001,
                     ask=self.price + 0.0001, timestamp=0.0)

    async def fetch_candles(self, pair, interval):
        self._maybe_fail()
        return list(self.candles)


class PairProvider(FakeProvider):
    """Serves candles per pair, ``default`` for pairs not listed."""

    def __init__(self, by_pair: dict, default=None):
        super().__init__(candles=default)
        self.by_pair = by_pair

    async def fetch_candles(self, pair, interval):
        self._maybe_fail()
        return list(self.by_pair.get(pair, self.candles))


async def no_sleep(_seconds):
    return None


def make_candles(closes, wick: float = 0.0002, start: float = 0.0, step: float = 300.0):
    """Each bar opens at the previous close; wicks extend ``wick`` past the body."""
    out = []
    prev = closes[0]
    for i, close in enumerate(closes):
        out.append(Candle(
            timestamp=start + i * step,
            open=prev,
            high=max(prev, close) + wick,
            low=min(prev, close) - wick,
            close=close,
        ))
        prev = close
    return out


def flat_candles(n: int = 100, price: float = 1.1):
    return [Candle(timestamp=i * 300.0, open=price, high=price, low=price, close=price)
            for i in range(n)]


def breakout_candles(n: int = 100, base: float = 1.0, step: float = 0.001, jump: float = 0.05):
    """Steady climb finished by one large bullish bar."""
    closes = [base + i * step for i in range(n - 1)]
    closes.append(closes[-1] + jump)
    return make_candles(closes)


def make_technicals(**overrides) -> TechnicalAnalysis:
    values = dict(
        rsi=50.0,
        rsi_divergence=False,
        macd=MACD(0.0, 0.0, 0.0),
        sma20=1.1,
        sma50=1.1,
        sma200=1.1,
        ema12=1.1,
        ema26=1.1,
        bollinger_bands=BollingerBands(1.11, 1.1, 1.09, 0.5, False),
        stochastic=Stochastic(50.0, 50.0),
        atr=0.001,
        adx=25.0,
        supertrend=Supertrend(Trend.NEUTRAL, 1.1),
        candle_pattern=None,
        trend=Trend.NEUTRAL,
        momentum=Momentum.MODERATE,
        volatility=Volatility.MEDIUM,
        market_regime=Regime.RANGING,
        close=1.1,
    )
    values.update(overrides)
    return TechnicalAnalysis(**values)


@pytest.fixture
def clock():
    return FakeClock()
