import math
from typing import Optional

import numpy as np

from fxsignal.market.pairs import base_price, interval_minutes, is_jpy
from fxsignal.utils.candle import Candle, Quote


class SyntheticMarket:
    """Offline price generator used when no API key is set or the API fails.

    All randomness comes from ``rng`` so a seeded generator makes every
    quote and candle series reproducible.
    """

    def __init__(self, rng: Optional[np.random.Generator] = None, seed: Optional[int] = None):
        self.rng = rng if rng is not None else np.random.default_rng(seed)

    def quote(self, pair: str, now: float) -> Quote:
        base = base_price(pair)
        volatility = 0.0002 if is_jpy(pair) else 0.00002
        random_walk = (self.rng.random() - 0.5) * 2 * volatility * base
        price = base + random_walk
        spread = 0.02 if is_jpy(pair) else 0.00002

        return Quote(
            pair=pair,
            price=price,
            bid=price - spread / 2,
            ask=price + spread / 2,
            timestamp=now,
            change=random_walk,
            change_percent=random_walk / base * 100,
        )

    def candles(self, pair: str, interval: str, count: int, now: float) -> list[Candle]:
        price = base_price(pair)
        volatility = 0.001 if is_jpy(pair) else 0.0001
        step = interval_minutes(interval) * 60

        out: list[Candle] = []
        for i in range(count - 1, -1, -1):
            trend = math.sin(i * 0.1) * volatility * price
            noise = (self.rng.random() - 0.5) * volatility * price

            open_ = price
            close = open_ + trend + noise
            high = max(open_, close) + self.rng.random() * volatility * price * 0.5
            low = min(open_, close) - self.rng.random() * volatility * price * 0.5

            out.append(Candle(
                timestamp=now - i * step,
                open=open_, high=high, low=low, close=close,
            ))
            price = close
        return out
