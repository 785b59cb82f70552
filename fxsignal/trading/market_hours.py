"""Weekly forex market hours and the high-impact news calendar (all UTC)."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

# Friday 22:00 UTC close, Sunday 22:00 UTC reopen
CLOSE_WEEKDAY = 4
REOPEN_WEEKDAY = 6
ROLLOVER_HOUR = 22


@dataclass(frozen=True)
class MarketStatus:
    is_open: bool
    reason: Optional[str] = None


@dataclass(frozen=True)
class NewsEvent:
    name: str
    minute_utc: int          # minutes after midnight
    impact: str              # "HIGH" / "MEDIUM"
    block_minutes: int       # blocked this long before and after

    @property
    def window(self) -> tuple[int, int]:
        return self.minute_utc - self.block_minutes, self.minute_utc + self.block_minutes


NEWS_EVENTS: tuple[NewsEvent, ...] = (
    # US data, 13:30
    NewsEvent("NFP (Non-Farm Payroll)", 810, "HIGH", 30),
    NewsEvent("CPI (Consumer Price Index)", 810, "HIGH", 30),
    NewsEvent("PPI (Producer Price Index)", 810, "HIGH", 30),
    NewsEvent("Jobless Claims", 810, "MEDIUM", 20),
    NewsEvent("Retail Sales", 810, "MEDIUM", 20),
    NewsEvent("Industrial Production", 810, "MEDIUM", 20),
    # FOMC, 18:00
    NewsEvent("FOMC Decision", 1080, "HIGH", 60),
    NewsEvent("Fed Chair Press Conference", 1140, "HIGH", 60),
    # ECB, 13:45
    NewsEvent("ECB Decision", 825, "HIGH", 60),
    # UK data, 10:30
    NewsEvent("UK Inflation", 630, "HIGH", 30),
    NewsEvent("UK Jobs Report", 630, "HIGH", 30),
)


def _utc(now) -> datetime:
    if isinstance(now, datetime):
        return now if now.tzinfo else now.replace(tzinfo=timezone.utc)
    return datetime.fromtimestamp(now, tz=timezone.utc)


def is_market_open(now) -> MarketStatus:
    """``now`` is a unix timestamp or a datetime (naive means UTC)."""
    t = _utc(now)
    day, hour = t.weekday(), t.hour

    if day == CLOSE_WEEKDAY and hour >= ROLLOVER_HOUR:
        return MarketStatus(False, "Weekend - market closed Friday 22:00 UTC")
    if day == 5:
        return MarketStatus(False, "Weekend - market closed Saturday")
    if day == REOPEN_WEEKDAY and hour < ROLLOVER_HOUR:
        return MarketStatus(False, "Weekend - market opens Sunday 22:00 UTC")
    return MarketStatus(True)


def news_event_at(now) -> Optional[NewsEvent]:
    t = _utc(now)
    minute = t.hour * 60 + t.minute
    for event in NEWS_EVENTS:
        start, end = event.window
        if start <= minute <= end:
            return event
    return None


def next_news_event(now) -> Optional[NewsEvent]:
    t = _utc(now)
    minute = t.hour * 60 + t.minute
    upcoming = [e for e in NEWS_EVENTS if e.minute_utc > minute]
    return min(upcoming, key=lambda e: e.minute_utc) if upcoming else None
