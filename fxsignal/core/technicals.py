"""Per-timeframe technical snapshot built from a candle series."""

from dataclasses import asdict, dataclass
from typing import Optional, Sequence

from fxsignal.config import EngineConfig
from fxsignal.constants import Momentum, Regime, Trend, Volatility
from fxsignal.core import indicators as ind
from fxsignal.core.indicators import MACD, BollingerBands, Stochastic, Supertrend
from fxsignal.core.regime import RegimeDetector
from fxsignal.utils.candle import Candle


@dataclass(frozen=True)
class TechnicalAnalysis:
    rsi: float
    rsi_divergence: bool
    macd: MACD
    sma20: float
    sma50: float
    sma200: float
    ema12: float
    ema26: float
    bollinger_bands: BollingerBands
    stochastic: Stochastic
    atr: float
    adx: float
    supertrend: Supertrend
    candle_pattern: Optional[str]
    trend: Trend
    momentum: Momentum
    volatility: Volatility
    market_regime: Regime
    divergence: Optional[Trend] = None
    close: float = 0.0

    def to_dict(self) -> dict:
        d = asdict(self)
        for key in ("trend", "momentum", "volatility", "market_regime", "divergence"):
            if d[key] is not None:
                d[key] = d[key].value
        d["supertrend"]["direction"] = self.supertrend.direction.value
        return d


def _trend_label(close: float, rsi: float, macd: MACD, sma20: float, sma50: float,
                 sma200: float, ema12: float, ema26: float, bb: BollingerBands,
                 stoch: Stochastic, st: Supertrend, adx: float) -> Trend:
    bull = bear = 0.0

    # Moving-average stack
    if close > sma20: bull += 1.5
    else: bear += 1.5
    if close > sma50: bull += 2
    else: bear += 2
    if close > sma200: bull += 2.5
    else: bear += 2.5
    if ema12 > ema26: bull += 2
    else: bear += 2

    if macd.histogram > 0 and macd.macd_line > macd.signal_line:
        bull += 2.5
    elif macd.histogram < 0 and macd.macd_line < macd.signal_line:
        bear += 2.5

    # Oscillators lean contrarian
    if rsi < 30: bull += 3
    elif rsi < 40: bull += 1
    elif rsi > 70: bear += 3
    elif rsi > 60: bear += 1

    if bb.percent_b < 0.2: bull += 2
    elif bb.percent_b > 0.8: bear += 2

    if stoch.k < 20 and stoch.d < 20: bull += 2
    elif stoch.k > 80 and stoch.d > 80: bear += 2
    if stoch.k > stoch.d and stoch.k < 50: bull += 1
    elif stoch.k < stoch.d and stoch.k > 50: bear += 1

    if st.direction is Trend.BULLISH: bull += 3
    elif st.direction is Trend.BEARISH: bear += 3

    if adx > 25:
        if bull > bear: bull += 1.5
        else: bear += 1.5

    if bull > bear + 2:
        return Trend.BULLISH
    if bear > bull + 2:
        return Trend.BEARISH
    return Trend.NEUTRAL


def _momentum_label(adx: float, macd: MACD) -> Momentum:
    hist, sig = abs(macd.histogram), abs(macd.signal_line)
    if adx > 40 or hist > sig * 0.5:
        return Momentum.STRONG
    if adx > 25 or hist > sig * 0.2:
        return Momentum.MODERATE
    return Momentum.WEAK


def _volatility_label(atr: float, bb_middle: float, cfg: EngineConfig) -> Volatility:
    if atr > bb_middle * cfg.volatility_high_ratio:
        return Volatility.HIGH
    if atr > bb_middle * cfg.volatility_medium_ratio:
        return Volatility.MEDIUM
    return Volatility.LOW


def analyze_technicals(candles: Sequence[Candle], cfg: Optional[EngineConfig] = None) -> TechnicalAnalysis:
    """Compute every indicator and the derived labels for one candle series.

    Never raises; an empty or short series yields the neutral defaults of
    each indicator.
    """
    cfg = cfg or EngineConfig()
    closes = [c.close for c in candles]
    close = closes[-1] if closes else 0.0

    rsi = ind.rsi(closes, 14)
    macd = ind.macd(closes)
    sma20 = ind.sma(closes, 20)
    sma50 = ind.sma(closes, 50)
    sma200 = ind.sma(closes, 200)
    ema12 = ind.ema(closes, 12)
    ema26 = ind.ema(closes, 26)
    bb = ind.bollinger_bands(closes, 20, 2)
    stoch = ind.stochastic(candles, 14, 3)
    atr = ind.atr(candles, 14)
    adx = ind.adx(candles, 14)
    st = ind.supertrend(candles, 10, 3)
    divergence = ind.detect_divergence(candles)

    regime = RegimeDetector(cfg.regime_trend_adx, cfg.regime_min_volatility)

    return TechnicalAnalysis(
        rsi=rsi,
        rsi_divergence=divergence is not None,
        macd=macd,
        sma20=sma20,
        sma50=sma50,
        sma200=sma200,
        ema12=ema12,
        ema26=ema26,
        bollinger_bands=bb,
        stochastic=stoch,
        atr=atr,
        adx=adx,
        supertrend=st,
        candle_pattern=ind.detect_candle_pattern(candles),
        trend=_trend_label(close, rsi, macd, sma20, sma50, sma200, ema12, ema26, bb, stoch, st, adx),
        momentum=_momentum_label(adx, macd),
        volatility=_volatility_label(atr, bb.middle, cfg),
        market_regime=regime.detect(candles, adx, atr, bb.middle),
        divergence=divergence,
        close=close,
    )
