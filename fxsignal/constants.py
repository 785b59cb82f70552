from enum import Enum

class Direction(Enum):
    CALL = "CALL"
    PUT = "PUT"

class Trend(Enum):
    BULLISH = "BULLISH"
    BEARISH = "BEARISH"
    NEUTRAL = "NEUTRAL"

class Momentum(Enum):
    STRONG = "STRONG"
    MODERATE = "MODERATE"
    WEAK = "WEAK"

class Volatility(Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"

class Regime(Enum):
    TRENDING = "TRENDING"
    RANGING = "RANGING"

class SignalGrade(Enum):
    A = "A"
    A_MINUS = "A-"
    B_PLUS = "B+"
    B = "B"
    C = "C"
    SKIPPED = "SKIPPED"

class SkipReason(Enum):
    MARKET_CLOSED = "MarketClosed"
    NEWS_EVENT = "NewsEvent"
    COOLDOWN = "Cooldown"
    HALTED = "Halted"
    NO_CONSENSUS = "NoConsensus"
    LOW_CONFIDENCE = "LowConfidence"

class StakeAdvice(Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"
