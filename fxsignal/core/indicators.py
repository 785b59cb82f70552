"""Technical indicators over price / candle sequences (oldest -> newest).

Every function degrades to a neutral value on short history instead of
raising, so a snapshot can always be built from whatever bars are available.
"""

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from fxsignal.constants import Trend
from fxsignal.utils.candle import Candle


@dataclass(frozen=True)
class MACD:
    macd_line: float
    signal_line: float
    histogram: float


@dataclass(frozen=True)
class BollingerBands:
    upper: float
    middle: float
    lower: float
    percent_b: float
    breakout: bool


@dataclass(frozen=True)
class Stochastic:
    k: float
    d: float


@dataclass(frozen=True)
class Supertrend:
    direction: Trend
    value: float


# ---- Moving averages ----
def sma(prices: Sequence[float], period: int) -> float:
    if len(prices) == 0:
        return 0.0
    if len(prices) < period:
        return float(prices[-1])
    return float(np.mean(np.asarray(prices[-period:], dtype=np.float64)))


def ema(prices: Sequence[float], period: int) -> float:
    if len(prices) == 0:
        return 0.0
    if len(prices) < period:
        return float(prices[-1])
    k = 2.0 / (period + 1)
    val = sum(float(p) for p in prices[:period]) / period
    for price in prices[period:]:
        val = float(price) * k + val * (1 - k)
    return val


def ema_series(prices: Sequence[float], period: int) -> list[float]:
    """EMA after each bar from index ``period - 1`` on.

    ``ema_series(p, n)[i - n]`` equals ``ema(p[:i], n)`` exactly.
    """
    if len(prices) < period:
        return []
    k = 2.0 / (period + 1)
    val = sum(float(p) for p in prices[:period]) / period
    out = [val]
    for price in prices[period:]:
        val = float(price) * k + val * (1 - k)
        out.append(val)
    return out


# ---- Oscillators ----
def rsi(prices: Sequence[float], period: int = 14) -> float:
    if len(prices) < period + 1:
        return 50.0
    deltas = np.diff(np.asarray(prices[-(period + 1):], dtype=np.float64))
    avg_gain = float(np.sum(np.maximum(deltas, 0.0))) / period
    avg_loss = float(np.sum(np.maximum(-deltas, 0.0))) / period
    if avg_loss == 0:
        return 100.0
    rs = avg_gain / avg_loss
    return 100.0 - 100.0 / (1.0 + rs)


def macd(prices: Sequence[float], fast: int = 12, slow: int = 26, signal: int = 9) -> MACD:
    macd_line = ema(prices, fast) - ema(prices, slow)

    # MACD line for every prefix with at least `slow` bars
    fast_run = ema_series(prices, fast)
    slow_run = ema_series(prices, slow)
    offset = slow - fast
    history = [fast_run[i + offset] - s for i, s in enumerate(slow_run)]

    signal_line = ema(history, signal) if len(history) >= signal else macd_line
    return MACD(macd_line=macd_line, signal_line=signal_line, histogram=macd_line - signal_line)


def bollinger_bands(prices: Sequence[float], period: int = 20, std_dev: float = 2.0) -> BollingerBands:
    if len(prices) == 0:
        return BollingerBands(0.0, 0.0, 0.0, 0.5, False)

    middle = sma(prices, period)
    window = np.asarray(prices[-period:], dtype=np.float64)
    variance = float(np.sum((window - middle) ** 2)) / period
    sd = variance ** 0.5
    upper = middle + sd * std_dev
    lower = middle - sd * std_dev

    last = float(prices[-1])
    width = upper - lower
    percent_b = (last - lower) / width if width > 0 else 0.5
    return BollingerBands(
        upper=upper, middle=middle, lower=lower,
        percent_b=percent_b, breakout=last > upper or last < lower,
    )


def stochastic(candles: Sequence[Candle], k_period: int = 14, d_period: int = 3) -> Stochastic:
    if len(candles) < k_period:
        return Stochastic(50.0, 50.0)

    highs = np.array([c.high for c in candles], dtype=np.float64)
    lows = np.array([c.low for c in candles], dtype=np.float64)
    closes = np.array([c.close for c in candles], dtype=np.float64)

    k_values = []
    for i in range(k_period - 1, len(candles)):
        lo = np.min(lows[i - k_period + 1:i + 1])
        hi = np.max(highs[i - k_period + 1:i + 1])
        k_values.append(100.0 * (closes[i] - lo) / (hi - lo) if hi > lo else 50.0)

    k = float(k_values[-1])
    d = float(np.mean(k_values[-d_period:])) if len(k_values) >= d_period else k
    return Stochastic(k=k, d=d)


# ---- Volatility / trend strength ----
def true_ranges(candles: Sequence[Candle]) -> list[float]:
    return [
        max(
            cur.high - cur.low,
            abs(cur.high - prev.close),
            abs(cur.low - prev.close),
        )
        for prev, cur in zip(candles[:-1], candles[1:])
    ]


def atr(candles: Sequence[Candle], period: int = 14) -> float:
    if len(candles) < period + 1:
        return 0.0
    return float(np.mean(true_ranges(candles)[-period:]))


def adx(candles: Sequence[Candle], period: int = 14) -> float:
    """Directional strength proxy: |DI+ - DI-| / (DI+ + DI-) over one window.

    Not Wilder-smoothed; the DM and TR sums of the last ``period`` bars are
    used directly.
    """
    if len(candles) < period + 1:
        return 25.0

    dm_plus, dm_minus = [], []
    for prev, cur in zip(candles[:-1], candles[1:]):
        up = cur.high - prev.high
        down = prev.low - cur.low
        dm_plus.append(up if up > down and up > 0 else 0.0)
        dm_minus.append(down if down > up and down > 0 else 0.0)

    sum_tr = sum(true_ranges(candles)[-period:])
    if sum_tr <= 0:
        return 0.0
    di_plus = sum(dm_plus[-period:]) / sum_tr * 100
    di_minus = sum(dm_minus[-period:]) / sum_tr * 100
    if di_plus + di_minus == 0:
        return 0.0
    return abs(di_plus - di_minus) / (di_plus + di_minus) * 100


def supertrend(candles: Sequence[Candle], period: int = 10, multiplier: float = 3.0) -> Supertrend:
    """Single-bar supertrend read.

    Needs ``period + 2`` bars and a non-zero ATR; otherwise NEUTRAL at the
    last close.
    """
    if len(candles) < period + 2:
        last = candles[-1].close if candles else 0.0
        return Supertrend(Trend.NEUTRAL, last)

    band = atr(candles, period) * multiplier
    current = candles[-1]
    if band == 0:
        return Supertrend(Trend.NEUTRAL, current.close)

    hl2 = (current.high + current.low) / 2
    upper = hl2 + band
    lower = hl2 - band

    if current.close > upper:
        return Supertrend(Trend.BULLISH, lower)
    if current.close < lower:
        return Supertrend(Trend.BEARISH, upper)
    if candles[-2].close > hl2:
        return Supertrend(Trend.BULLISH, lower)
    return Supertrend(Trend.BEARISH, upper)


# ---- Candles ----
def detect_candle_pattern(candles: Sequence[Candle]) -> Optional[str]:
    if len(candles) < 2:
        return None

    cur, prev = candles[-1], candles[-2]
    body = cur.body
    if cur.range <= 0:
        return None

    if cur.is_bullish and prev.is_bearish:
        if cur.close > prev.open and cur.open < prev.close and body > prev.body * 0.8:
            return "bullish_engulfing"

    if cur.is_bearish and prev.is_bullish:
        if cur.open > prev.close and cur.close < prev.open and body > prev.body * 0.8:
            return "bearish_engulfing"

    if body / cur.range < 0.1 and cur.upper_wick > body * 2 and cur.lower_wick > body * 2:
        return "doji"

    # Hammer and shooting star read two bars of context
    if len(candles) < 3:
        return None
    prev2 = candles[-3]

    if cur.lower_wick > body * 2 and cur.upper_wick < body * 0.5:
        if prev.is_bearish and prev2.is_bearish:
            return "hammer"
        return "pin_bar_bullish"

    if cur.upper_wick > body * 2 and cur.lower_wick < body * 0.5:
        if prev.is_bullish and prev2.is_bullish:
            return "shooting_star"
        return "pin_bar_bearish"

    return None


def detect_divergence(candles: Sequence[Candle], period: int = 14, lookback: int = 5) -> Optional[Trend]:
    """RSI divergence between the last bar and the bar ``lookback`` back.

    BULLISH: lower low with a higher RSI.  BEARISH: higher high with a
    lower RSI.
    """
    if len(candles) < period + 1 + lookback:
        return None

    closes = [c.close for c in candles]
    rsi_now = rsi(closes, period)
    rsi_then = rsi(closes[:-lookback], period)
    now, then = candles[-1], candles[-1 - lookback]

    if now.low < then.low and rsi_now > rsi_then:
        return Trend.BULLISH
    if now.high > then.high and rsi_now < rsi_then:
        return Trend.BEARISH
    return None
