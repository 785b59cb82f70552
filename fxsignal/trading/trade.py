from dataclasses import dataclass, field
from typing import Optional

@dataclass
class TradeLogEntry:
    id: str
    pair: str
    direction: str                 # "CALL" / "PUT"
    grade: str
    confidence: int
    entry: float
    stop_loss: float
    take_profit: float
    timeframe: str
    created_at: float
    reasoning: list[str] = field(default_factory=list)
    stake_advice: Optional[str] = None
    result: Optional[str] = None   # "win" / "loss" once known
    profit: Optional[float] = None
