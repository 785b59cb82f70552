import asyncio
import logging
import os

from fxsignal.config import DEFAULT_PAIRS, EngineConfig
from fxsignal.engine import SignalEngine
from fxsignal.trading.journal import TradeJournal
from fxsignal.utils.logger import setup_logger


def _env_flag(name: str, default: str = "0") -> bool:
    return os.environ.get(name, default).strip().lower() in ("1", "true", "yes", "on")


def load_config() -> EngineConfig:
    # --- Load config from env or defaults ---
    pairs_str = os.environ.get("FX_PAIRS", "")
    pairs = tuple(p.strip().upper() for p in pairs_str.split(",") if p.strip()) or DEFAULT_PAIRS

    seed = os.environ.get("FX_SEED", "").strip()
    timeframe = os.environ.get("FX_TIMEFRAME", "5min")

    return EngineConfig(
        api_key=os.environ.get("ALPHA_VANTAGE_API_KEY") or None,
        pairs=pairs,
        timeframes=(timeframe, "15min", "60min"),
        db_path=os.environ.get("FX_DB_PATH", "signal_journal.db"),
        seed=int(seed) if seed else None,
        scan_interval=float(os.environ.get("FX_SCAN_INTERVAL", "0")),
        news_blackout=_env_flag("FX_NEWS_BLACKOUT"),
    )


def main():
    level = getattr(logging, os.environ.get("FX_LOG_LEVEL", "INFO").upper(), logging.INFO)
    log = setup_logger(level=level)
    cfg = load_config()

    log.info("═" * 60)
    log.info("  📈 FX SIGNAL ENGINE")
    log.info("  Pairs: %d  |  Timeframes: %s", len(cfg.pairs), ", ".join(cfg.timeframes))
    log.info("  Data: %s", "Alpha Vantage" if cfg.api_key else "synthetic (no API key)")
    log.info("═" * 60)

    engine = SignalEngine(cfg, journal=TradeJournal(cfg.db_path))

    async def run():
        try:
            while True:
                scan = await engine.scan_all()
                if scan.best_signal is None:
                    log.info("No valid signal this scan.")
                else:
                    for line in scan.best_signal.reasoning:
                        log.info("   %s", line)
                if cfg.scan_interval <= 0:
                    break
                await asyncio.sleep(cfg.scan_interval)
        finally:
            await engine.close()

    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        log.info("Stopped.")

if __name__ == "__main__":
    main()
