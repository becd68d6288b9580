# memetrader/runner/runner.py
from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from memetrader.discovery.repo_tokens import Discovery
from memetrader.execution.entry import BUY_SIZE_NATIVE, EntryExecutor, EntryResult
from memetrader.execution.position_evaluator import EvalResult, PositionEvaluator
from memetrader.persistence.audit import utc_now_iso
from memetrader.portfolio.ledger import PositionLedger

log = logging.getLogger("memetrader.runner")

DEFAULT_CYCLE_INTERVAL_SECONDS = 600.0


@dataclass
class CycleReport:
    cycle_id: str
    started_at: str
    skipped: bool = False
    reason: str = ""
    exits: List[EvalResult] = field(default_factory=list)
    entries: List[EntryResult] = field(default_factory=list)
    cash_native: float = 0.0
    open_positions: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cycle_id": self.cycle_id,
            "started_at": self.started_at,
            "skipped": self.skipped,
            "reason": self.reason,
            "exits": [r.action for r in self.exits],
            "entries": [r.action for r in self.entries],
            "cash_native": self.cash_native,
            "open_positions": self.open_positions,
        }


class CycleController:
    """
    One cycle = evaluate every open position for exit, then consider new entries.

    Exits always run before entries so a position can't be sold and re-bought
    on a stale balance in the same pass. run_once() is guarded by a
    non-blocking lock: an overlapping call is skipped, never queued.
    """

    def __init__(
        self,
        ledger: PositionLedger,
        evaluator: PositionEvaluator,
        entry: EntryExecutor,
        discovery: Discovery,
        *,
        interval_seconds: float = DEFAULT_CYCLE_INTERVAL_SECONDS,
        buy_size: float = BUY_SIZE_NATIVE,
        stop_event: Optional[threading.Event] = None,
    ):
        self.ledger = ledger
        self.evaluator = evaluator
        self.entry = entry
        self.discovery = discovery
        self.interval_seconds = interval_seconds
        self.buy_size = buy_size
        self.stop_event = stop_event or threading.Event()

        self._cycle_lock = threading.Lock()
        self.cycle_count = 0
        self.last_error: Optional[str] = None

    def run_once(self) -> CycleReport:
        report = CycleReport(cycle_id=str(uuid.uuid4()), started_at=utc_now_iso())

        if not self._cycle_lock.acquire(blocking=False):
            log.warning("Previous cycle still running, skipping")
            report.skipped = True
            report.reason = "CYCLE_ALREADY_RUNNING"
            return report

        try:
            log.info("--- Cycle Start (%s) ---", report.started_at)
            log.info(
                "[Portfolio] Cash: %.4f ETH. Positions: %d",
                self.ledger.get_balance(),
                len(self.ledger.get_positions()),
            )

            # 1) exits
            report.exits = self.evaluator.evaluate_all()

            # 2) entries
            if self.stop_event.is_set():
                report.reason = "STOPPED"
            elif not self.ledger.can_afford(self.buy_size):
                log.info(
                    "Skipping discovery: not enough ETH for new buys (min %s).",
                    self.buy_size,
                )
                report.reason = "INSUFFICIENT_CASH"
            else:
                candidates = self.discovery.list_candidates()
                report.entries = self.entry.enter_all(candidates)

            report.cash_native = self.ledger.get_balance()
            report.open_positions = len(self.ledger.get_positions())
            self.cycle_count += 1
            return report
        finally:
            self._cycle_lock.release()

    def run_forever(self) -> None:
        """Repeat run_once() every interval until stop_event is set."""
        while not self.stop_event.is_set():
            try:
                self.run_once()
                self.last_error = None
            except Exception as e:
                # a broken cycle is retried on the next tick
                self.last_error = f"{type(e).__name__}: {e}"
                log.exception("Cycle failed")

            if self.stop_event.is_set():
                break
            log.info("[Cycle End] Waiting %.0f seconds...", self.interval_seconds)
            self.stop_event.wait(self.interval_seconds)

        log.info("Runner stopped after %d cycles", self.cycle_count)

    def stop(self) -> None:
        self.stop_event.set()
