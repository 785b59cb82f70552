from typing import Sequence

from fxsignal.constants import Regime
from fxsignal.utils.candle import Candle


class RegimeDetector:
    def __init__(self, trend_adx: float = 25.0, min_volatility: float = 0.0002):
        self.trend_adx = trend_adx
        self.min_volatility = min_volatility

    @staticmethod
    def volatility_ratio(atr: float, bb_middle: float) -> float:
        # ATR relative to price level
        return atr / (bb_middle or 1.0)

    def detect(self, candles: Sequence[Candle], adx: float, atr: float,
               bb_middle: float, window: int = 20) -> Regime:
        if len(candles) < window:
            return Regime.RANGING

        if adx > self.trend_adx and self.volatility_ratio(atr, bb_middle) > self.min_volatility:
            return Regime.TRENDING
        return Regime.RANGING
