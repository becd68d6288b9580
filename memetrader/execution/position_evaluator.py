# memetrader/execution/position_evaluator.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from memetrader.execution.exit_rules import ExitAction, decide_exit
from memetrader.notify.telegram import Notifier
from memetrader.persistence.audit import TradeRecorder, utc_now_iso
from memetrader.portfolio.ledger import PositionLedger
from memetrader.portfolio.models import Position, TradeAction, TradeRecord, TradeStatus
from memetrader.pricing.oracle import PriceOracle

log = logging.getLogger("memetrader.evaluator")


@dataclass
class EvalResult:
    address: str
    symbol: str
    action: str  # ExitAction value or "NO_PRICE" / "ERROR"
    price: Optional[float] = None
    pnl_percent: Optional[float] = None


def exit_message(action: ExitAction, pos: Position, pnl: float, price: float, proceeds: float) -> str:
    title = "Take Profit" if action == ExitAction.TAKE_PROFIT else "Stop Loss"
    return (
        f"*{title} Executed*\n"
        f"Token: {pos.symbol}\n"
        f"PnL: {pnl:.2f}%\n"
        f"Price: {price:.9f} ETH\n"
        f"Proceeds: {proceeds:.4f} ETH"
    )


class PositionEvaluator:
    """
    Once per cycle: price every open position and close it on TP/SL.

    The position list is a snapshot taken at the start of the pass, so sells
    made during the pass don't disturb iteration.
    """

    def __init__(
        self,
        ledger: PositionLedger,
        oracle: PriceOracle,
        recorder: TradeRecorder,
        notifier: Notifier,
        *,
        dry_run: bool = True,
        delay: Optional[Callable[[], None]] = None,
    ):
        self.ledger = ledger
        self.oracle = oracle
        self.recorder = recorder
        self.notifier = notifier
        self.dry_run = dry_run
        self._delay = delay or (lambda: None)

    def evaluate_all(self) -> List[EvalResult]:
        positions = self.ledger.get_positions()
        if not positions:
            return []

        log.info("Checking %d positions for TP/SL...", len(positions))
        results: List[EvalResult] = []
        for pos in positions:
            try:
                results.append(self.evaluate(pos))
            except Exception:
                # never kill the whole pass for one position
                log.exception("Evaluation failed for %s (%s)", pos.symbol, pos.address)
                results.append(EvalResult(pos.address, pos.symbol, "ERROR"))
            self._delay()
        return results

    def evaluate(self, pos: Position) -> EvalResult:
        price = self.oracle.resolve_price(pos.pool_address, pos.address, pos.amount)
        if price is None:
            log.info("  [Pos] %s: price unavailable, skipping this cycle", pos.symbol)
            return EvalResult(pos.address, pos.symbol, "NO_PRICE")

        decision = decide_exit(pos.entry_price_native, price)
        if decision.action == ExitAction.NO_DECISION:
            log.warning(
                "  [Pos] %s: entry price is %r, cannot compute PnL; leaving position untouched",
                pos.symbol,
                pos.entry_price_native,
            )
            return EvalResult(pos.address, pos.symbol, decision.action.value, price)

        log.info(
            "  [Pos] %s: Entry %.9f -> Current %.9f (%.2f%%)",
            pos.symbol,
            pos.entry_price_native,
            price,
            decision.pnl_percent,
        )

        if decision.triggered:
            self._close(pos, decision.action, price, decision.pnl_percent)

        return EvalResult(pos.address, pos.symbol, decision.action.value, price, decision.pnl_percent)

    def _close(self, pos: Position, action: ExitAction, price: float, pnl: float) -> None:
        label = "TAKE PROFIT" if action == ExitAction.TAKE_PROFIT else "STOP LOSS"
        log.warning("  Triggering %s for %s...", label, pos.symbol)

        proceeds = pos.amount * price
        realized = self.ledger.record_sell(pos.address, pos.amount, price)

        self.recorder.log(
            TradeRecord(
                timestamp=utc_now_iso(),
                symbol=pos.symbol,
                address=pos.address,
                source="portfolio",
                action=TradeAction(action.value),
                amount_native=proceeds,
                amount_token=pos.amount,
                price_native=price,
                status=TradeStatus.SIMULATED if self.dry_run else TradeStatus.EXECUTED,
                repo="portfolio_manager",
                pnl_native=realized,
            )
        )
        self.notifier.send(exit_message(action, pos, pnl, price, proceeds))
