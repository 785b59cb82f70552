"""Supported forex pairs, their currency legs and offline reference prices."""

import re

from fxsignal.errors import UnknownPairError

FOREX_PAIRS: dict[str, tuple[str, str]] = {
    "EUR/USD": ("EUR", "USD"),
    "GBP/USD": ("GBP", "USD"),
    "USD/JPY": ("USD", "JPY"),
    "USD/CHF": ("USD", "CHF"),
    "AUD/USD": ("AUD", "USD"),
    "USD/CAD": ("USD", "CAD"),
    "NZD/USD": ("NZD", "USD"),
    "EUR/GBP": ("EUR", "GBP"),
    "EUR/JPY": ("EUR", "JPY"),
    "GBP/JPY": ("GBP", "JPY"),
    "AUD/JPY": ("AUD", "JPY"),
    "EUR/AUD": ("EUR", "AUD"),
}

BASE_PRICES: dict[str, float] = {
    "EUR/USD": 1.0850,
    "GBP/USD": 1.2650,
    "USD/JPY": 149.50,
    "USD/CHF": 0.8850,
    "AUD/USD": 0.6550,
    "USD/CAD": 1.3650,
    "NZD/USD": 0.6050,
    "EUR/GBP": 0.8580,
    "EUR/JPY": 162.20,
    "GBP/JPY": 189.10,
    "AUD/JPY": 97.90,
    "EUR/AUD": 1.6560,
}

_INTERVAL_RE = re.compile(r"^(?:M(\d+)|H(\d+)|(\d+)\s*min)$", re.IGNORECASE)


def currency_legs(pair: str) -> tuple[str, str]:
    try:
        return FOREX_PAIRS[pair]
    except KeyError:
        raise UnknownPairError(pair) from None


def is_jpy(pair: str) -> bool:
    return "JPY" in pair


def pip_size(pair: str) -> float:
    return 0.01 if is_jpy(pair) else 0.0001


def base_price(pair: str) -> float:
    return BASE_PRICES.get(pair, 1.0)


def interval_minutes(interval: str) -> int:
    """'5min' / 'M15' / 'H1' -> minutes. Unparseable input means 15."""
    m = _INTERVAL_RE.match(interval.strip())
    if not m:
        return 15
    if m.group(1):
        return int(m.group(1))
    if m.group(2):
        return int(m.group(2)) * 60
    return int(m.group(3))


def normalize_interval(interval: str) -> str:
    """Alpha Vantage spelling ('5min', '60min') for any accepted form."""
    return f"{interval_minutes(interval)}min"
