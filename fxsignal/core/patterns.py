from dataclasses import asdict, dataclass
from typing import Sequence

from fxsignal.constants import Trend
from fxsignal.utils.candle import Candle


@dataclass(frozen=True)
class PatternScore:
    bullish_engulfing: float = 0.0
    bearish_engulfing: float = 0.0
    morning_doji: float = 0.0
    evening_doji: float = 0.0
    hammer_pattern: float = 0.0
    hanging_man: float = 0.0
    three_soldiers: float = 0.0
    three_crows: float = 0.0
    overall_score: float = 0.0
    direction: Trend = Trend.NEUTRAL

    def to_dict(self) -> dict:
        d = asdict(self)
        d["direction"] = self.direction.value
        return d


class PatternRecognizer:
    """Scores the last three candles for eight classic patterns.

    Each detector returns a fixed signed strength or 0. Detectors are
    independent, so overlapping shapes all count (hammer and hanging man
    share one shape and cancel out).
    """

    DIRECTION_THRESHOLD = 10.0

    def detect(self, candles: Sequence[Candle]) -> PatternScore:
        if len(candles) < 3:
            return PatternScore()

        c1, c2, c3 = candles[-3], candles[-2], candles[-1]
        scores = {
            "bullish_engulfing": self._bullish_engulfing(c2, c3),
            "bearish_engulfing": self._bearish_engulfing(c2, c3),
            "morning_doji": self._morning_doji(c1, c2, c3),
            "evening_doji": self._evening_doji(c1, c2, c3),
            "hammer_pattern": 50.0 if self._is_hammer_shape(c3) else 0.0,
            "hanging_man": -50.0 if self._is_hammer_shape(c3) else 0.0,
            "three_soldiers": self._three_soldiers(c1, c2, c3),
            "three_crows": self._three_crows(c1, c2, c3),
        }

        overall = sum(scores.values()) / len(scores)
        if overall > self.DIRECTION_THRESHOLD:
            direction = Trend.BULLISH
        elif overall < -self.DIRECTION_THRESHOLD:
            direction = Trend.BEARISH
        else:
            direction = Trend.NEUTRAL

        return PatternScore(**scores, overall_score=round(overall, 1), direction=direction)

    # ------------------------------------------------------------------
    @staticmethod
    def _bullish_engulfing(prev: Candle, cur: Candle) -> float:
        if (prev.is_bearish and cur.is_bullish
                and cur.close > prev.open and cur.open < prev.close
                and cur.body > prev.body * 0.8):
            return 75.0
        return 0.0

    @staticmethod
    def _bearish_engulfing(prev: Candle, cur: Candle) -> float:
        if (prev.is_bullish and cur.is_bearish
                and cur.open > prev.close and cur.close < prev.open
                and cur.body > prev.body * 0.8):
            return -75.0
        return 0.0

    @staticmethod
    def _is_doji(c: Candle) -> bool:
        return c.body < c.range * 0.1

    @classmethod
    def _morning_doji(cls, c1: Candle, c2: Candle, c3: Candle) -> float:
        if c1.is_bearish and cls._is_doji(c2) and c3.is_bullish and c3.close > c1.open:
            return 60.0
        return 0.0

    @classmethod
    def _evening_doji(cls, c1: Candle, c2: Candle, c3: Candle) -> float:
        if c1.is_bullish and cls._is_doji(c2) and c3.is_bearish and c3.close < c1.open:
            return -60.0
        return 0.0

    @staticmethod
    def _is_hammer_shape(c: Candle) -> bool:
        body = c.body
        if body <= 0 or c.range <= 0:
            return False
        return c.lower_wick > body * 2 and c.upper_wick < body * 0.5

    @staticmethod
    def _three_soldiers(c1: Candle, c2: Candle, c3: Candle) -> float:
        if (c1.is_bullish and c2.is_bullish and c3.is_bullish
                and c2.close > c1.close and c3.close > c2.close
                and c2.open > c1.open and c3.open > c2.open):
            return 65.0
        return 0.0

    @staticmethod
    def _three_crows(c1: Candle, c2: Candle, c3: Candle) -> float:
        if (c1.is_bearish and c2.is_bearish and c3.is_bearish
                and c2.close < c1.close and c3.close < c2.close
                and c2.open < c1.open and c3.open < c2.open):
            return -65.0
        return 0.0
