import numpy as np
import pytest

from fxsignal.constants import Trend
from fxsignal.core import indicators as ind
from fxsignal.market.synthetic import SyntheticMarket
from fxsignal.utils.candle import Candle

from conftest import breakout_candles, flat_candles, make_candles


@pytest.fixture
def noisy_closes():
    rng = np.random.default_rng(7)
    return list(1.1 + np.cumsum(rng.normal(0, 0.0005, 120)))


def test_sma_edge_cases():
    assert ind.sma([], 20) == 0.0
    assert ind.sma([1.0, 2.0], 20) == 2.0
    assert ind.sma([1.0, 2.0, 3.0, 4.0], 2) == pytest.approx(3.5)


def test_ema_short_history_returns_last_value():
    assert ind.ema([1.0, 1.5], 12) == 1.5
    assert ind.ema([], 12) == 0.0


def test_ema_series_matches_prefix_recompute(noisy_closes):
    series = ind.ema_series(noisy_closes, 26)
    for i in range(26, len(noisy_closes) + 1):
        assert series[i - 26] == ind.ema(noisy_closes[:i], 26)


def test_macd_signal_matches_full_prefix_recompute(noisy_closes):
    history = [ind.ema(noisy_closes[:i], 12) - ind.ema(noisy_closes[:i], 26)
               for i in range(26, len(noisy_closes) + 1)]
    expected = ind.ema(history, 9)

    result = ind.macd(noisy_closes)
    assert result.signal_line == expected
    assert result.histogram == pytest.approx(result.macd_line - result.signal_line)


def test_macd_short_history_signal_equals_line():
    closes = [1.0 + i * 0.001 for i in range(30)]   # only 5 full-length prefixes
    result = ind.macd(closes)
    assert result.signal_line == result.macd_line
    assert result.histogram == 0.0


def test_rsi_boundaries(noisy_closes):
    assert ind.rsi([1.0] * 10) == 50.0
    assert ind.rsi([1.0 + i * 0.001 for i in range(20)]) == 100.0
    assert ind.rsi([2.0 - i * 0.001 for i in range(20)]) == 0.0
    assert 0.0 <= ind.rsi(noisy_closes) <= 100.0


def test_bollinger_ordering(noisy_closes):
    bb = ind.bollinger_bands(noisy_closes)
    assert bb.lower <= bb.middle <= bb.upper


def test_bollinger_zero_width():
    bb = ind.bollinger_bands([1.25] * 30)
    assert bb.upper == bb.lower == bb.middle == 1.25
    assert bb.percent_b == 0.5
    assert not bb.breakout


def test_stochastic_defaults():
    assert ind.stochastic(flat_candles(10)) == ind.Stochastic(50.0, 50.0)
    flat = ind.stochastic(flat_candles(30))
    assert flat.k == 50.0 and flat.d == 50.0


def test_atr_and_adx_short_history():
    candles = flat_candles(14)
    assert ind.atr(candles) == 0.0
    assert ind.adx(candles) == 25.0


def test_adx_flat_market_is_zero():
    assert ind.adx(flat_candles(50)) == 0.0


def test_adx_one_way_market_is_max():
    candles = make_candles([1.0 + i * 0.001 for i in range(40)])
    assert ind.adx(candles) == pytest.approx(100.0)


def test_supertrend_requires_history():
    assert ind.supertrend([]) == ind.Supertrend(Trend.NEUTRAL, 0.0)
    short = flat_candles(11, price=1.3)
    assert ind.supertrend(short) == ind.Supertrend(Trend.NEUTRAL, 1.3)


def test_supertrend_flat_is_neutral():
    st = ind.supertrend(flat_candles(50, price=1.1))
    assert st.direction is Trend.NEUTRAL
    assert st.value == 1.1


def test_supertrend_breakout_directions():
    up = ind.supertrend(breakout_candles())
    assert up.direction is Trend.BULLISH

    down = ind.supertrend(breakout_candles(base=2.0, step=-0.001, jump=-0.05))
    assert down.direction is Trend.BEARISH


def test_detect_candle_pattern_engulfing():
    candles = [
        Candle(0, 1.000, 1.001, 0.999, 1.000),
        Candle(1, 1.010, 1.011, 0.999, 1.000),
        Candle(2, 0.999, 1.013, 0.998, 1.012),
    ]
    assert ind.detect_candle_pattern(candles) == "bullish_engulfing"
    assert ind.detect_candle_pattern(candles[1:]) == "bullish_engulfing"
    assert ind.detect_candle_pattern(candles[-1:]) is None


def test_detect_candle_pattern_two_bar_bearish_engulfing():
    candles = [
        Candle(0, 1.000, 1.011, 0.999, 1.010),
        Candle(1, 1.011, 1.012, 0.997, 0.998),
    ]
    assert ind.detect_candle_pattern(candles) == "bearish_engulfing"


def test_hammer_needs_three_bars():
    candles = [
        Candle(0, 1.010, 1.011, 1.004, 1.005),
        Candle(1, 1.005, 1.006, 0.999, 1.0005),
        Candle(2, 1.000, 1.0012, 0.990, 1.001),
    ]
    assert ind.detect_candle_pattern(candles) == "hammer"
    assert ind.detect_candle_pattern(candles[1:]) is None


def test_detect_divergence_needs_history():
    assert ind.detect_divergence(flat_candles(15)) is None


def test_indicators_on_synthetic_series():
    candles = SyntheticMarket(seed=1).candles("EUR/USD", "5min", 100, now=1_000_000.0)
    closes = [c.close for c in candles]
    assert 0.0 <= ind.rsi(closes) <= 100.0
    assert ind.atr(candles) > 0
    assert 0.0 <= ind.adx(candles) <= 100.0
    stoch = ind.stochastic(candles)
    assert 0.0 <= stoch.k <= 100.0
