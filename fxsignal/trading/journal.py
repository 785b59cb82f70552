import json
import sqlite3

from fxsignal.trading.trade import TradeLogEntry

class TradeJournal:
    """SQLite sink for every emitted signal and its eventual outcome."""

    def __init__(self, db_path: str):
        self.conn = sqlite3.connect(db_path)
        self._init_db()

    def _init_db(self):
        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS signals (
                id           TEXT PRIMARY KEY,
                pair         TEXT,
                direction    TEXT,
                grade        TEXT,
                confidence   INTEGER,
                entry        REAL,
                stop_loss    REAL,
                take_profit  REAL,
                timeframe    TEXT,
                created_at   REAL,
                reasoning    TEXT,
                stake_advice TEXT,
                result       TEXT,
                profit       REAL
            )
        """)
        self.conn.commit()

    def log_trade(self, e: TradeLogEntry):
        self.conn.execute(
            "INSERT OR REPLACE INTO signals VALUES (?,?,?,?,?,?,?,?,?,?,?,?,?,?)",
            (e.id, e.pair, e.direction, e.grade, e.confidence,
             e.entry, e.stop_loss, e.take_profit, e.timeframe, e.created_at,
             json.dumps(e.reasoning), e.stake_advice, e.result, e.profit),
        )
        self.conn.commit()

    def update_result(self, signal_id: str, result: str, profit: float) -> bool:
        cur = self.conn.execute(
            "UPDATE signals SET result = ?, profit = ? WHERE id = ?",
            (result, profit, signal_id),
        )
        self.conn.commit()
        return cur.rowcount > 0

    def recent_signals(self, n: int = 50) -> list[TradeLogEntry]:
        cur = self.conn.execute(
            "SELECT id, pair, direction, grade, confidence, entry, stop_loss, take_profit, "
            "timeframe, created_at, reasoning, stake_advice, result, profit "
            "FROM signals ORDER BY created_at DESC LIMIT ?",
            (n,),
        )
        entries = []
        for row in cur.fetchall():
            fields = list(row)
            fields[10] = json.loads(fields[10]) if fields[10] else []
            entries.append(TradeLogEntry(*fields))
        return entries

    def total_signals(self) -> int:
        cur = self.conn.execute("SELECT COUNT(*) FROM signals")
        return cur.fetchone()[0]

    def close(self):
        self.conn.close()
