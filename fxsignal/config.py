from dataclasses import dataclass, field
from typing import Optional

DEFAULT_PAIRS = (
    "EUR/USD", "GBP/USD", "USD/JPY", "USD/CHF",
    "AUD/USD", "USD/CAD", "NZD/USD", "EUR/GBP",
    "EUR/JPY", "GBP/JPY", "AUD/JPY", "EUR/AUD",
)

@dataclass
class EngineConfig:
    """All tuneable knobs in one place."""

    # --- quote provider ---
    api_key: Optional[str] = None           # Alpha Vantage key; None = synthetic data
    api_url: str = "https://www.alphavantage.co/query"
    request_timeout: float = 10.0           # seconds per HTTP request
    max_retries: int = 3                    # attempts before synthetic fallback
    retry_backoff_seconds: float = 1.0      # linear: 1s, 2s, ...
    cache_ttl_seconds: float = 60.0         # quote / candle cache lifetime
    synthetic_candle_count: int = 100       # bars generated when offline
    provider_candle_limit: int = 100        # newest bars kept from the API

    # --- universe ---
    pairs: tuple = DEFAULT_PAIRS
    timeframes: tuple = ("5min", "15min", "60min")  # primary first

    # --- gates ---
    cooldown_seconds: int = 600             # 10 min between signals per pair
    news_blackout: bool = False             # block around high-impact releases
    session_goal_bp: int = 300              # +3% daily goal halts signals
    max_drawdown_bp: int = 500              # -5% daily loss halts signals
    notional_balance: float = 100.0         # P&L -> basis points reference

    # --- tactical grade (ADX band x |ML score| band) ---
    grade_adx_bands: tuple = (30.0, 25.0, 20.0)      # strong / moderate / weak
    grade_ml_bands: tuple = (30.0, 15.0, 5.0)        # high / mid / low
    grade_table: tuple = (
        ("A", "A-", "B+"),                  # ADX >= 30
        ("A-", "B+", "B"),                  # ADX >= 25
        ("B+", "B", "C"),                   # ADX >= 20
    )
    a_plus_ml_score: float = 20.0           # aligned ML score for A+ override
    rsi_extreme_low: float = 20.0           # A+ needs RSI inside this band
    rsi_extreme_high: float = 80.0

    # --- confidence ---
    base_confidence: int = 65
    cluster_bonus: int = 8                  # >= 4/5 majors agree
    cluster_penalty: int = -8               # <= 2/5 majors agree
    cluster_agree_min: int = 4
    cluster_disagree_max: int = 2
    front_running_bonus: int = 6            # stochastic turn from the far half
    htf_full_bonus: int = 10                # 15m and 60m trend agree
    htf_partial_bonus: int = 4              # one of them agrees
    htf_none_penalty: int = -5
    mean_reversion_bonus: int = 12
    mean_reversion_rsi_low: float = 30.0
    mean_reversion_rsi_high: float = 70.0
    mean_reversion_deviation: float = 0.001  # 0.1% away from SMA20
    ml_score_divisor: float = 10.0
    max_confidence: int = 98

    # --- adaptive threshold ---
    threshold_normal: int = 72
    threshold_low_adx: int = 78             # not choppy, ADX < trend_adx
    threshold_choppy: int = 78              # choppy, ADX >= trend_adx
    threshold_choppy_low_adx: int = 82      # choppy, weak_adx <= ADX < trend_adx
    threshold_choppy_no_adx: int = 85       # choppy, ADX < weak_adx
    trend_adx: float = 25.0
    weak_adx: float = 20.0
    choppy_percent_b_low: float = 0.35
    choppy_percent_b_high: float = 0.65

    # --- exits ---
    atr_stop_multiplier: float = 1.5
    min_stop_pips: float = 10.0
    reward_risk_ratio: float = 1.5

    # --- stake advice ---
    stake_high_confidence: int = 85
    stake_medium_confidence: int = 78

    # --- technical labels ---
    volatility_high_ratio: float = 0.015    # ATR / BB middle
    volatility_medium_ratio: float = 0.008
    regime_trend_adx: float = 25.0
    regime_min_volatility: float = 0.0002   # ATR / BB middle for TRENDING

    # --- persistence ---
    db_path: str = "signal_journal.db"

    # --- misc ---
    seed: Optional[int] = None              # synthetic market seed
    scan_interval: float = 0.0              # 0 = single scan from main.py
    correlation_cluster: dict = field(default_factory=lambda: {
        "EUR/USD": 1, "GBP/USD": 1, "AUD/USD": 1, "NZD/USD": 1, "USD/CHF": -1,
    })

    @property
    def primary_timeframe(self) -> str:
        return self.timeframes[0]
