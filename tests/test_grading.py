import pytest

from fxsignal.config import EngineConfig
from fxsignal.constants import Momentum, SignalGrade, StakeAdvice, Volatility
from fxsignal.core.grading import (
    adaptive_confidence_threshold, is_a_plus, is_choppy, stake_advice, tactical_grade,
)
from fxsignal.core.indicators import BollingerBands

from conftest import make_technicals


@pytest.fixture
def cfg():
    return EngineConfig()


@pytest.mark.parametrize("adx, ml, expected", [
    (32, 35, SignalGrade.A),
    (32, -35, SignalGrade.A),
    (32, 20, SignalGrade.A_MINUS),
    (30, 6, SignalGrade.B_PLUS),
    (27, 31, SignalGrade.A_MINUS),
    (27, 10, SignalGrade.B),
    (21, 16, SignalGrade.B),
    (21, 6, SignalGrade.C),
    (19, 50, None),
    (35, 3, None),
])
def test_tactical_grade_table(cfg, adx, ml, expected):
    assert tactical_grade(adx, ml, True, cfg) is expected


def test_tactical_grade_requires_alignment(cfg):
    assert tactical_grade(40, 50, False, cfg) is None


def test_a_plus(cfg):
    assert is_a_plus(True, 25, False, 55, cfg)
    assert is_a_plus(True, 0, True, 55, cfg)
    assert not is_a_plus(False, 25, True, 55, cfg)
    assert not is_a_plus(True, 10, False, 55, cfg)
    assert not is_a_plus(True, 25, False, 85, cfg)
    assert is_a_plus(True, 25, False, 80, cfg)


@pytest.mark.parametrize("choppy", [True, False])
def test_threshold_never_rises_with_adx(cfg, choppy):
    values = [adaptive_confidence_threshold(adx / 2, choppy, cfg) for adx in range(0, 120)]
    assert all(a >= b for a, b in zip(values, values[1:]))


def test_threshold_values(cfg):
    assert adaptive_confidence_threshold(30, False, cfg) == 72
    assert adaptive_confidence_threshold(10, False, cfg) == 78
    assert adaptive_confidence_threshold(30, True, cfg) == 78
    assert adaptive_confidence_threshold(22, True, cfg) == 82
    assert adaptive_confidence_threshold(5, True, cfg) == 85


def test_is_choppy(cfg):
    mid = make_technicals(bollinger_bands=BollingerBands(1.2, 1.1, 1.0, 0.5, False),
                          volatility=Volatility.HIGH, momentum=Momentum.STRONG)
    assert is_choppy(mid, cfg)

    edge = make_technicals(bollinger_bands=BollingerBands(1.2, 1.1, 1.0, 0.9, False),
                           volatility=Volatility.HIGH, momentum=Momentum.STRONG)
    assert not is_choppy(edge, cfg)

    dead = make_technicals(bollinger_bands=BollingerBands(1.2, 1.1, 1.0, 0.9, False),
                           volatility=Volatility.LOW, momentum=Momentum.WEAK)
    assert is_choppy(dead, cfg)


def test_stake_advice(cfg):
    assert stake_advice(SignalGrade.A, 90, cfg) is StakeAdvice.HIGH
    assert stake_advice(SignalGrade.A_MINUS, 85, cfg) is StakeAdvice.HIGH
    assert stake_advice(SignalGrade.A, 80, cfg) is StakeAdvice.MEDIUM
    assert stake_advice(SignalGrade.B_PLUS, 95, cfg) is StakeAdvice.MEDIUM
    assert stake_advice(SignalGrade.B, 95, cfg) is StakeAdvice.LOW
    assert stake_advice(SignalGrade.B_PLUS, 70, cfg) is StakeAdvice.LOW
