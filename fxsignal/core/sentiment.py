from dataclasses import asdict, dataclass

from fxsignal.constants import Momentum, Trend, Volatility
from fxsignal.core.technicals import TechnicalAnalysis


@dataclass(frozen=True)
class SentimentScore:
    rsi_sentiment: float
    macd_sentiment: float
    stochastic_sentiment: float
    trend_sentiment: float
    volatility_sentiment: float
    momentum_sentiment: float
    adx_strength: float
    overall_sentiment: int

    def to_dict(self) -> dict:
        return asdict(self)


class SentimentAnalyzer:
    """Folds a technical snapshot into one signed market-mood score."""

    WEIGHTS = {
        "rsi": 0.15,
        "macd": 0.2,
        "stochastic": 0.15,
        "trend": 0.3,
        "volatility": 0.05,
        "momentum": 0.15,
    }

    TREND_SCORES = {Trend.BULLISH: 80, Trend.BEARISH: -80, Trend.NEUTRAL: 0}
    VOLATILITY_SCORES = {Volatility.HIGH: 30, Volatility.MEDIUM: 0, Volatility.LOW: -20}
    MOMENTUM_SCORES = {Momentum.STRONG: 70, Momentum.MODERATE: 30, Momentum.WEAK: -30}

    def analyze(self, t: TechnicalAnalysis) -> SentimentScore:
        parts = {
            "rsi": self.rsi_score(t.rsi),
            "macd": self.macd_score(t.macd.macd_line, t.macd.signal_line, t.macd.histogram),
            "stochastic": self.stochastic_score(t.stochastic.k),
            "trend": self.TREND_SCORES[t.trend],
            "volatility": self.VOLATILITY_SCORES[t.volatility],
            "momentum": self.MOMENTUM_SCORES[t.momentum],
        }
        overall = sum(parts[k] * w for k, w in self.WEIGHTS.items())

        return SentimentScore(
            rsi_sentiment=parts["rsi"],
            macd_sentiment=parts["macd"],
            stochastic_sentiment=parts["stochastic"],
            trend_sentiment=parts["trend"],
            volatility_sentiment=parts["volatility"],
            momentum_sentiment=parts["momentum"],
            adx_strength=self.adx_strength(t.adx),
            overall_sentiment=int(round(overall)),
        )

    # ------------------------------------------------------------------
    @staticmethod
    def rsi_score(rsi: float) -> float:
        if rsi < 30: return -40
        if rsi < 40: return -30
        if rsi < 50: return -10
        if rsi < 60: return 10
        if rsi < 70: return 30
        if rsi <= 85: return 40
        return 20  # stretched, fading

    @staticmethod
    def macd_score(line: float, signal: float, histogram: float) -> float:
        strength = min(abs(histogram) * 1000, 100)
        if histogram > 0:
            return strength if line > signal else strength / 2
        return -strength if line < signal else -strength / 2

    @staticmethod
    def stochastic_score(k: float) -> float:
        if k < 20: return -75
        if k < 40: return -40
        if k < 60: return 0
        if k < 80: return 40
        return 75

    @staticmethod
    def adx_strength(adx: float) -> float:
        if adx < 20: return 0
        if adx < 40: return 60
        return 100


def sentiment_explanation(score: SentimentScore) -> str:
    s = score.overall_sentiment
    if s > 70: return "🟢 VERY BULLISH - strong upside momentum"
    if s > 40: return "🟢 BULLISH - moderate bullish bias"
    if s > 10: return "🟢 MILDLY BULLISH - slight upside advantage"
    if s > -10: return "⚪ NEUTRAL - mixed signals"
    if s > -40: return "🔴 MILDLY BEARISH - slight downside pressure"
    if s > -70: return "🔴 BEARISH - moderate bearish bias"
    return "🔴 VERY BEARISH - strong downside momentum"
