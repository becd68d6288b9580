# memetrader/persistence/audit.py
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from memetrader.portfolio.models import TradeRecord

log = logging.getLogger("memetrader.audit")


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class TradeRecorder:
    """
    Append-only trade log (logs one JSON object per line to trades.jsonl).

    Written for humans and offline analysis only; nothing in the bot reads it back.
    """

    def __init__(self, jsonl_path: str = "trades.jsonl"):
        self.jsonl_path = Path(jsonl_path)

        # ensure folder + file exist
        try:
            self.jsonl_path.parent.mkdir(parents=True, exist_ok=True)
            self.jsonl_path.touch(exist_ok=True)
        except Exception as e:
            log.error("Cannot prepare trade log %s: %s", self.jsonl_path, e)

    def log(self, record: TradeRecord) -> None:
        line = json.dumps(record.to_dict(), ensure_ascii=False)
        try:
            with self.jsonl_path.open("a", encoding="utf-8") as f:
                f.write(line + "\n")
        except Exception as e:
            # never crash the trading loop because the audit write failed
            log.error("Failed to log trade %s (%s): %s", record.symbol, record.action.value, e)
            return

        log.info("Trade logged: %s (%s)", record.symbol, record.action.value)
