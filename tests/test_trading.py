from datetime import datetime, timezone

import pytest

from fxsignal.trading.cooldown import CooldownTracker
from fxsignal.trading.journal import TradeJournal
from fxsignal.trading.market_hours import is_market_open, news_event_at, next_news_event
from fxsignal.trading.session_tracker import SessionTracker
from fxsignal.trading.trade import TradeLogEntry


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


# ---- market hours ----
@pytest.mark.parametrize("when, is_open", [
    (utc(2024, 1, 10, 12, 0), True),     # Wednesday
    (utc(2024, 1, 12, 21, 59), True),    # Friday before close
    (utc(2024, 1, 12, 22, 0), False),    # Friday close
    (utc(2024, 1, 13, 9, 0), False),     # Saturday
    (utc(2024, 1, 14, 21, 59), False),   # Sunday before open
    (utc(2024, 1, 14, 22, 0), True),     # Sunday open
    (utc(2024, 1, 15, 3, 0), True),      # Monday
])
def test_market_hours(when, is_open):
    status = is_market_open(when)
    assert status.is_open is is_open
    assert (status.reason is None) is is_open


def test_market_hours_accepts_timestamps():
    assert not is_market_open(utc(2024, 1, 13, 9, 0).timestamp()).is_open


def test_news_calendar():
    assert news_event_at(utc(2024, 1, 10, 12, 0)) is None
    assert news_event_at(utc(2024, 1, 10, 13, 30)).name.startswith("NFP")
    assert news_event_at(utc(2024, 1, 10, 10, 45)).name == "UK Inflation"
    assert next_news_event(utc(2024, 1, 10, 12, 0)).minute_utc == 810
    assert next_news_event(utc(2024, 1, 10, 23, 0)) is None


# ---- cooldown ----
def test_cooldown_window(clock):
    cd = CooldownTracker(600, clock)
    assert not cd.in_cooldown("EUR/USD")
    cd.record("EUR/USD")
    assert cd.in_cooldown("EUR/USD")
    assert not cd.in_cooldown("GBP/USD")
    clock.advance(599)
    assert cd.remaining("EUR/USD") == pytest.approx(1)
    clock.advance(1)
    assert not cd.in_cooldown("EUR/USD")


# ---- session tracker ----
def test_session_goal_and_drawdown(clock):
    tracker = SessionTracker(clock=clock)
    for _ in range(3):
        tracker.record_trade(True)
    pnl = tracker.get_daily_pnl()
    assert pnl["net"] == 3
    assert pnl["basis_points"] == 300
    assert tracker.has_reached_daily_goal()
    assert tracker.get_goal_progress() == 100.0

    losing = SessionTracker(clock=clock)
    for _ in range(4):
        losing.record_trade(False)
    assert not losing.has_exceeded_max_drawdown()
    losing.record_trade(False)
    assert losing.has_exceeded_max_drawdown()
    assert losing.is_halted()


def test_goal_progress_with_zero_goal(clock):
    tracker = SessionTracker(session_goal=0, clock=clock)
    assert tracker.get_goal_progress() == 100.0
    tracker.record_trade(False)
    assert tracker.get_goal_progress() == 0.0
    tracker.record_trade(True, 2.0)
    assert tracker.get_goal_progress() == 100.0


def test_session_resets_on_new_utc_day(clock):
    tracker = SessionTracker(clock=clock)
    tracker.record_trade(True, 2.5)
    tracker.record_trade(False, 1.0)
    stats = tracker.get_stats()
    assert (stats.trades_won, stats.trades_lost) == (1, 1)

    clock.advance(86_400)
    stats = tracker.get_stats()
    assert stats.daily_profit == 0
    assert stats.trades_won == 0
    assert stats.start_of_day == utc(2024, 1, 11).date()


# ---- journal ----
def make_entry(id_="sig-1", created_at=1.0):
    return TradeLogEntry(
        id=id_, pair="EUR/USD", direction="CALL", grade="A-", confidence=84,
        entry=1.085, stop_loss=1.084, take_profit=1.0865, timeframe="5min",
        created_at=created_at, reasoning=["✅ HTF ALIGNED"], stake_advice="MEDIUM",
    )


def test_journal_roundtrip(tmp_path):
    journal = TradeJournal(str(tmp_path / "journal.db"))
    journal.log_trade(make_entry("a", 1.0))
    journal.log_trade(make_entry("b", 2.0))
    assert journal.total_signals() == 2

    assert journal.update_result("a", "win", 0.85)
    assert not journal.update_result("missing", "loss", -1)

    recent = journal.recent_signals(10)
    assert [e.id for e in recent] == ["b", "a"]
    assert recent[1].result == "win"
    assert recent[1].profit == 0.85
    assert recent[0].reasoning == ["✅ HTF ALIGNED"]
    journal.close()
