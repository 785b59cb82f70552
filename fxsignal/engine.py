import asyncio
import logging
import math
import time
import uuid
from collections import Counter
from dataclasses import asdict, dataclass, field
from typing import Callable, Iterable, Optional

from fxsignal.config import EngineConfig
from fxsignal.constants import Direction, SignalGrade, SkipReason, StakeAdvice, Trend
from fxsignal.core.grading import (
    adaptive_confidence_threshold, is_a_plus, is_choppy, stake_advice, tactical_grade,
)
from fxsignal.core.indicators import supertrend
from fxsignal.core.patterns import PatternRecognizer
from fxsignal.core.sentiment import SentimentAnalyzer, sentiment_explanation
from fxsignal.core.technicals import TechnicalAnalysis, analyze_technicals
from fxsignal.market.cache import CacheStore
from fxsignal.market.pairs import currency_legs, pip_size
from fxsignal.market.provider import AlphaVantageProvider
from fxsignal.market.source import QuoteSource
from fxsignal.market.synthetic import SyntheticMarket
from fxsignal.trading.cooldown import CooldownTracker
from fxsignal.trading.journal import TradeJournal
from fxsignal.trading.market_hours import is_market_open, news_event_at
from fxsignal.trading.session_tracker import SessionTracker
from fxsignal.trading.trade import TradeLogEntry

log = logging.getLogger("FXSignal")

_DIRECTION_OF = {Trend.BULLISH: Direction.CALL, Trend.BEARISH: Direction.PUT}
_TREND_OF = {Direction.CALL: Trend.BULLISH, Direction.PUT: Trend.BEARISH}


@dataclass
class RuleChecklist:
    market_open: bool = False
    cooldown_clear: bool = False
    session_ok: bool = False
    htf_alignment: bool = False
    tactical_grade: bool = False
    correlation_aligned: bool = False
    confidence_threshold: bool = False


@dataclass
class SignalAnalysis:
    pair: str
    timeframe: str
    current_price: float = 0.0
    signal_type: Optional[Direction] = None
    confidence: int = 0
    signal_grade: SignalGrade = SignalGrade.SKIPPED
    entry: float = 0.0
    stop_loss: float = 0.0
    take_profit: float = 0.0
    technicals: Optional[TechnicalAnalysis] = None
    reasoning: list[str] = field(default_factory=list)
    rule_checklist: RuleChecklist = field(default_factory=RuleChecklist)
    skip_reason: Optional[SkipReason] = None
    ml_pattern_score: float = 0.0
    sentiment_score: int = 0
    ml_confidence_boost: int = 0
    stake_advice: Optional[StakeAdvice] = None
    timestamp: float = 0.0
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @property
    def is_skipped(self) -> bool:
        return self.signal_grade is SignalGrade.SKIPPED

    @property
    def is_valid(self) -> bool:
        return self.confidence > 0 and not self.is_skipped

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "pair": self.pair,
            "timeframe": self.timeframe,
            "current_price": self.current_price,
            "signal_type": self.signal_type.value if self.signal_type else None,
            "confidence": self.confidence,
            "signal_grade": self.signal_grade.value,
            "entry": self.entry,
            "stop_loss": self.stop_loss,
            "take_profit": self.take_profit,
            "technicals": self.technicals.to_dict() if self.technicals else None,
            "reasoning": list(self.reasoning),
            "rule_checklist": asdict(self.rule_checklist),
            "skip_reason": self.skip_reason.value if self.skip_reason else None,
            "ml_pattern_score": self.ml_pattern_score,
            "sentiment_score": self.sentiment_score,
            "ml_confidence_boost": self.ml_confidence_boost,
            "stake_advice": self.stake_advice.value if self.stake_advice else None,
            "timestamp": self.timestamp,
        }


@dataclass
class ScanResult:
    best_signal: Optional[SignalAnalysis]
    signals: list[SignalAnalysis]
    stats: dict


def summarize_scan(signals: Iterable[SignalAnalysis]) -> ScanResult:
    """Sort by confidence (highest first) and pick the best non-skipped signal."""
    ranked = sorted(signals, key=lambda s: s.confidence, reverse=True)
    valid = [s for s in ranked if s.is_valid]
    reasons = Counter(s.skip_reason.value for s in ranked if s.skip_reason is not None)
    return ScanResult(
        best_signal=valid[0] if valid else None,
        signals=ranked,
        stats={
            "total": len(ranked),
            "valid": len(valid),
            "blocked": len(ranked) - len(valid),
            "skip_reasons": dict(reasons),
        },
    )


class SignalEngine:
    def __init__(self, cfg: EngineConfig,
                 source: Optional[QuoteSource] = None,
                 session: Optional[SessionTracker] = None,
                 cooldowns: Optional[CooldownTracker] = None,
                 journal: Optional[TradeJournal] = None,
                 clock: Callable[[], float] = time.time):
        self.cfg = cfg
        self.clock = clock
        self.source = source if source is not None else self._build_source(cfg, clock)
        self.session = session if session is not None else SessionTracker(
            cfg.session_goal_bp, cfg.max_drawdown_bp, cfg.notional_balance, clock)
        self.cooldowns = cooldowns if cooldowns is not None else CooldownTracker(
            cfg.cooldown_seconds, clock)
        self.journal = journal
        self.patterns = PatternRecognizer()
        self.sentiment = SentimentAnalyzer()

    @staticmethod
    def _build_source(cfg: EngineConfig, clock) -> QuoteSource:
        provider = None
        if cfg.api_key:
            provider = AlphaVantageProvider(
                cfg.api_key, cfg.api_url, cfg.request_timeout,
                candle_limit=cfg.provider_candle_limit,
            )
        return QuoteSource(
            provider=provider,
            cache=CacheStore(cfg.cache_ttl_seconds, clock),
            synthetic=SyntheticMarket(seed=cfg.seed),
            max_retries=cfg.max_retries,
            retry_backoff=cfg.retry_backoff_seconds,
            candle_count=cfg.synthetic_candle_count,
            clock=clock,
        )

    # ------------------------------------------------------------------
    async def generate_signal(self, pair: str, timeframe: Optional[str] = None) -> SignalAnalysis:
        currency_legs(pair)
        cfg = self.cfg
        timeframe = timeframe or cfg.primary_timeframe
        now = self.clock()
        result = SignalAnalysis(pair=pair, timeframe=timeframe, timestamp=now)
        rules = result.rule_checklist

        # --- gates that need no market data ---
        status = is_market_open(now)
        if not status.is_open:
            return self._skip(result, SkipReason.MARKET_CLOSED, f"❌ MARKET CLOSED: {status.reason}")
        rules.market_open = True

        if cfg.news_blackout:
            event = news_event_at(now)
            if event is not None:
                return self._skip(result, SkipReason.NEWS_EVENT,
                                  f"❌ NEWS BLACKOUT: {event.name} ({event.impact})")

        if self.cooldowns.in_cooldown(pair):
            remaining = self.cooldowns.remaining(pair)
            return self._skip(result, SkipReason.COOLDOWN,
                              f"⏳ COOL-DOWN: {math.ceil(remaining)}s until next {pair} signal")
        rules.cooldown_clear = True

        if self.session.has_reached_daily_goal():
            return self._skip(result, SkipReason.HALTED, "🛑 HALTED: daily session goal reached")
        if self.session.has_exceeded_max_drawdown():
            return self._skip(result, SkipReason.HALTED, "🛑 HALTED: max daily drawdown exceeded")
        rules.session_ok = True

        # --- multi-timeframe technicals ---
        candle_sets = await asyncio.gather(
            *(self.source.get_candles(pair, tf) for tf in cfg.timeframes))
        techs = [analyze_technicals(c, cfg) for c in candle_sets]
        t5, t15, t60 = techs[0], techs[1], techs[2]
        primary = candle_sets[0]
        result.technicals = t5
        result.current_price = primary[-1].close if primary else 0.0

        pattern = self.patterns.detect(primary)
        sentiment = self.sentiment.analyze(t5)
        ml_score = int(round((pattern.overall_score + sentiment.overall_sentiment) / 2))
        result.ml_pattern_score = pattern.overall_score
        result.sentiment_score = sentiment.overall_sentiment
        result.ml_confidence_boost = math.floor(
            (abs(pattern.overall_score) + abs(sentiment.overall_sentiment)) / 15)
        result.reasoning.append(
            f"🧭 SENTIMENT {sentiment.overall_sentiment}: {sentiment_explanation(sentiment)}")

        direction = _DIRECTION_OF.get(t5.supertrend.direction)
        if direction is None:
            return self._skip(result, SkipReason.NO_CONSENSUS,
                              "❌ NO CONSENSUS: 5m supertrend is neutral")
        result.signal_type = direction

        htf_aligned = (t5.supertrend.direction == t15.supertrend.direction
                       == t60.supertrend.direction)
        rules.htf_alignment = htf_aligned
        if htf_aligned:
            result.reasoning.append(f"✅ HTF ALIGNED: 5m, 15m & 60m all {t5.supertrend.direction.value}")
        else:
            result.reasoning.append(
                f"⚠️ HTF MISALIGNED: 5m={t5.supertrend.direction.value} "
                f"15m={t15.supertrend.direction.value} 60m={t60.supertrend.direction.value}")

        # --- tactical grade ---
        aligned_ml = ml_score if direction is Direction.CALL else -ml_score
        grade = tactical_grade(t5.adx, ml_score, htf_aligned, cfg)
        if is_a_plus(htf_aligned, aligned_ml, t5.rsi_divergence, t5.rsi, cfg):
            grade = SignalGrade.A
            result.reasoning.append("⭐ A+ SETUP: aligned timeframes with ML/divergence confirmation")
        if grade is None:
            return self._skip(result, SkipReason.NO_CONSENSUS,
                              f"❌ NO CONSENSUS: ADX {t5.adx:.1f}, ML score {ml_score}")
        rules.tactical_grade = True
        result.reasoning.append(f"✅ TACTICAL GRADE {grade.value}: ADX {t5.adx:.1f}, ML score {ml_score}")

        # --- confidence ---
        cluster = await self._cluster_adjustment(pair, direction)
        rules.correlation_aligned = cluster >= 0
        if cluster > 0:
            result.reasoning.append(f"✅ CORRELATION CLUSTER agrees (+{cluster})")
        elif cluster < 0:
            result.reasoning.append(f"⚠️ CORRELATION CLUSTER disagrees ({cluster})")

        front_running = self._front_running(t5, direction)
        if front_running:
            result.reasoning.append(f"✅ STOCHASTIC TURN in signal direction (+{front_running})")

        htf_bonus = self._htf_trend_bonus(direction, t15, t60)
        mean_reversion = self._mean_reversion(t5, direction)
        if mean_reversion:
            result.reasoning.append(f"✅ MEAN REVERSION from SMA20 extreme (+{mean_reversion})")

        raw = (cfg.base_confidence + cluster + front_running + htf_bonus + mean_reversion
               + aligned_ml / cfg.ml_score_divisor)
        confidence = max(0, min(cfg.max_confidence, int(round(raw))))

        choppy = is_choppy(t5, cfg)
        threshold = adaptive_confidence_threshold(t5.adx, choppy, cfg)
        if confidence < threshold:
            return self._skip(result, SkipReason.LOW_CONFIDENCE,
                              f"❌ LOW CONFIDENCE: {confidence}% < {threshold}%"
                              f"{' (choppy market)' if choppy else ''}")
        rules.confidence_threshold = True

        # --- emit ---
        pip = pip_size(pair)
        sl_pips = max(t5.atr / pip * cfg.atr_stop_multiplier, cfg.min_stop_pips)
        tp_pips = sl_pips * cfg.reward_risk_ratio
        sign = 1 if direction is Direction.CALL else -1
        entry = result.current_price

        result.confidence = confidence
        result.signal_grade = grade
        result.entry = entry
        result.stop_loss = entry - sign * sl_pips * pip
        result.take_profit = entry + sign * tp_pips * pip
        result.stake_advice = stake_advice(grade, confidence, cfg)
        result.reasoning.append(
            f"🎯 {direction.value} {confidence}% (threshold {threshold}%)  SL {sl_pips:.1f} pips  TP {tp_pips:.1f} pips")

        self.cooldowns.record(pair)
        if self.journal is not None:
            self.journal.log_trade(self._log_entry(result))

        log.info("▶ SIGNAL %s %s  grade=%s  conf=%d%%  entry=%.5f  SL=%.5f  TP=%.5f  stake=%s",
                 pair, direction.value, grade.value, confidence, entry,
                 result.stop_loss, result.take_profit, result.stake_advice.value)
        return result

    async def scan_all(self, pairs: Optional[Iterable[str]] = None,
                       timeframe: Optional[str] = None) -> ScanResult:
        pairs = list(pairs) if pairs is not None else list(self.cfg.pairs)
        for p in pairs:
            currency_legs(p)
        signals = await asyncio.gather(*(self.generate_signal(p, timeframe) for p in pairs))
        scan = summarize_scan(signals)

        log.info("🔍 Scan: %d pairs  |  %d valid  |  %d blocked  %s",
                 scan.stats["total"], scan.stats["valid"], scan.stats["blocked"],
                 scan.stats["skip_reasons"] or "")
        if scan.best_signal is not None:
            b = scan.best_signal
            log.info("🏆 Best: %s %s %d%% (%s)", b.pair, b.signal_type.value,
                     b.confidence, b.signal_grade.value)
        return scan

    async def analyze(self, pair: str, interval: Optional[str] = None) -> TechnicalAnalysis:
        candles = await self.source.get_candles(pair, interval or self.cfg.primary_timeframe)
        return analyze_technicals(candles, self.cfg)

    def record_trade_result(self, won: bool, pnl: float = 1.0, signal_id: Optional[str] = None):
        self.session.record_trade(won, pnl)
        if signal_id is not None and self.journal is not None:
            self.journal.update_result(signal_id, "win" if won else "loss", pnl if won else -pnl)
        stats = self.session.get_daily_pnl()
        log.info("%s Trade %s  |  day net %+.2f (%+d bp)", "✅" if won else "❌",
                 "WON" if won else "LOST", stats["net"], stats["basis_points"])

    async def close(self):
        provider = self.source.provider
        if provider is not None and hasattr(provider, "close"):
            await provider.close()
        if self.journal is not None:
            self.journal.close()

    # ------------------------------------------------------------------
    def _skip(self, result: SignalAnalysis, reason: SkipReason, message: str) -> SignalAnalysis:
        result.confidence = 0
        result.signal_grade = SignalGrade.SKIPPED
        result.skip_reason = reason
        result.stake_advice = None
        result.reasoning.append(message)
        log.debug("⏸ %s skipped: %s", result.pair, message)
        return result

    async def _cluster_adjustment(self, pair: str, direction: Direction) -> int:
        cluster = self.cfg.correlation_cluster
        if pair not in cluster:
            return 0

        # Normalise every member to the "USD-weak" direction via its weight
        target = (1 if direction is Direction.CALL else -1) * cluster[pair]
        others = [p for p in cluster if p != pair]
        sets = await asyncio.gather(
            *(self.source.get_candles(p, self.cfg.primary_timeframe) for p in others))

        agree = 1
        for p, candles in zip(others, sets):
            d = supertrend(candles, 10, 3).direction
            vote = {Trend.BULLISH: 1, Trend.BEARISH: -1}.get(d, 0) * cluster[p]
            if vote == target:
                agree += 1

        if agree >= self.cfg.cluster_agree_min:
            return self.cfg.cluster_bonus
        if agree <= self.cfg.cluster_disagree_max:
            return self.cfg.cluster_penalty
        return 0

    def _front_running(self, t: TechnicalAnalysis, direction: Direction) -> int:
        k, d = t.stochastic.k, t.stochastic.d
        if direction is Direction.CALL and k > d and k < 50:
            return self.cfg.front_running_bonus
        if direction is Direction.PUT and k < d and k > 50:
            return self.cfg.front_running_bonus
        return 0

    def _htf_trend_bonus(self, direction: Direction, t15: TechnicalAnalysis,
                         t60: TechnicalAnalysis) -> int:
        want = _TREND_OF[direction]
        agreeing = (t15.trend is want) + (t60.trend is want)
        if agreeing == 2:
            return self.cfg.htf_full_bonus
        if agreeing == 1:
            return self.cfg.htf_partial_bonus
        return self.cfg.htf_none_penalty

    def _mean_reversion(self, t: TechnicalAnalysis, direction: Direction) -> int:
        cfg = self.cfg
        if t.sma20 <= 0:
            return 0
        deviation = (t.close - t.sma20) / t.sma20
        if (direction is Direction.CALL and t.rsi <= cfg.mean_reversion_rsi_low
                and deviation <= -cfg.mean_reversion_deviation):
            return cfg.mean_reversion_bonus
        if (direction is Direction.PUT and t.rsi >= cfg.mean_reversion_rsi_high
                and deviation >= cfg.mean_reversion_deviation):
            return cfg.mean_reversion_bonus
        return 0

    @staticmethod
    def _log_entry(s: SignalAnalysis) -> TradeLogEntry:
        return TradeLogEntry(
            id=s.id,
            pair=s.pair,
            direction=s.signal_type.value,
            grade=s.signal_grade.value,
            confidence=s.confidence,
            entry=s.entry,
            stop_loss=s.stop_loss,
            take_profit=s.take_profit,
            timeframe=s.timeframe,
            created_at=s.timestamp,
            reasoning=list(s.reasoning),
            stake_advice=s.stake_advice.value if s.stake_advice else None,
        )
