"""Tactical grade, adaptive confidence threshold and stake sizing advice."""

from typing import Optional

from fxsignal.config import EngineConfig
from fxsignal.constants import Momentum, SignalGrade, StakeAdvice, Volatility
from fxsignal.core.technicals import TechnicalAnalysis


def tactical_grade(adx: float, ml_score: float, htf_aligned: bool,
                   cfg: EngineConfig) -> Optional[SignalGrade]:
    """Look up the (ADX band x |ML score| band) table.

    Returns None when timeframes disagree or either input falls below the
    weakest band.
    """
    if not htf_aligned:
        return None

    strength = abs(ml_score)
    for row, adx_floor in enumerate(cfg.grade_adx_bands):
        if adx < adx_floor:
            continue
        for col, ml_floor in enumerate(cfg.grade_ml_bands):
            if strength >= ml_floor:
                return SignalGrade(cfg.grade_table[row][col])
        return None
    return None


def is_a_plus(htf_aligned: bool, aligned_ml: float, rsi_divergence: bool,
              rsi: float, cfg: EngineConfig) -> bool:
    if not htf_aligned:
        return False
    if not (aligned_ml >= cfg.a_plus_ml_score or rsi_divergence):
        return False
    return cfg.rsi_extreme_low <= rsi <= cfg.rsi_extreme_high


def is_choppy(t: TechnicalAnalysis, cfg: EngineConfig) -> bool:
    bb = t.bollinger_bands
    mid_band = (cfg.choppy_percent_b_low <= bb.percent_b <= cfg.choppy_percent_b_high
                and not bb.breakout)
    dead = t.volatility is Volatility.LOW and t.momentum is Momentum.WEAK
    return mid_band or dead


def adaptive_confidence_threshold(adx: float, choppy: bool, cfg: EngineConfig) -> int:
    # Never increases with ADX for a fixed choppy flag
    if not choppy:
        return cfg.threshold_normal if adx >= cfg.trend_adx else cfg.threshold_low_adx
    if adx >= cfg.trend_adx:
        return cfg.threshold_choppy
    if adx >= cfg.weak_adx:
        return cfg.threshold_choppy_low_adx
    return cfg.threshold_choppy_no_adx


def stake_advice(grade: SignalGrade, confidence: int, cfg: EngineConfig) -> StakeAdvice:
    if grade in (SignalGrade.A, SignalGrade.A_MINUS) and confidence >= cfg.stake_high_confidence:
        return StakeAdvice.HIGH
    if (grade in (SignalGrade.A, SignalGrade.A_MINUS, SignalGrade.B_PLUS)
            and confidence >= cfg.stake_medium_confidence):
        return StakeAdvice.MEDIUM
    return StakeAdvice.LOW
