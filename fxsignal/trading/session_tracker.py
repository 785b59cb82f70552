from dataclasses import dataclass, field, replace
from datetime import date, datetime, timezone
import logging
import time
from typing import Callable

log = logging.getLogger("FXSignal")


def _utc_date(ts: float) -> date:
    return datetime.fromtimestamp(ts, tz=timezone.utc).date()


@dataclass
class SessionStats:
    daily_profit: float = 0.0
    daily_loss: float = 0.0
    trades_won: int = 0
    trades_lost: int = 0
    start_of_day: date = field(default_factory=lambda: datetime.now(timezone.utc).date())
    session_goal: int = 300                 # basis points
    max_drawdown: int = 500                 # basis points


class SessionTracker:
    """Daily P&L in basis points of a notional balance; halts at goal or drawdown."""

    def __init__(self, session_goal: int = 300, max_drawdown: int = 500,
                 notional_balance: float = 100.0, clock: Callable[[], float] = time.time):
        self.session_goal = session_goal
        self.max_drawdown = max_drawdown
        self.notional_balance = notional_balance
        self.clock = clock
        self.stats = self._fresh()

    def _fresh(self) -> SessionStats:
        return SessionStats(
            start_of_day=_utc_date(self.clock()),
            session_goal=self.session_goal,
            max_drawdown=self.max_drawdown,
        )

    def reset_if_new_day(self):
        today = _utc_date(self.clock())
        if today != self.stats.start_of_day:
            log.info("New day — resetting session P&L")
            self.stats = self._fresh()

    # ------------------------------------------------------------------
    def record_trade(self, won: bool, profit_loss: float = 1.0):
        self.reset_if_new_day()
        if won:
            self.stats.trades_won += 1
            self.stats.daily_profit += profit_loss
        else:
            self.stats.trades_lost += 1
            self.stats.daily_loss += profit_loss

    def get_daily_pnl(self) -> dict:
        self.reset_if_new_day()
        net = self.stats.daily_profit - self.stats.daily_loss
        return {
            "profit": self.stats.daily_profit,
            "loss": self.stats.daily_loss,
            "net": net,
            "basis_points": int(round(net / self.notional_balance * 10000)),
        }

    def has_reached_daily_goal(self) -> bool:
        return self.get_daily_pnl()["basis_points"] >= self.stats.session_goal

    def has_exceeded_max_drawdown(self) -> bool:
        return self.get_daily_pnl()["basis_points"] <= -self.stats.max_drawdown

    def is_halted(self) -> bool:
        return self.has_reached_daily_goal() or self.has_exceeded_max_drawdown()

    def get_goal_progress(self) -> float:
        bp = self.get_daily_pnl()["basis_points"]
        goal = self.stats.session_goal
        if goal <= 0:
            return 100.0 if bp >= goal else 0.0
        return min(100.0, bp / goal * 100)

    def get_stats(self) -> SessionStats:
        self.reset_if_new_day()
        return replace(self.stats)
