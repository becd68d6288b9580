# memetrader/execution/entry.py
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Protocol

from memetrader.discovery.repo_tokens import Candidate
from memetrader.notify.telegram import Notifier
from memetrader.persistence.audit import TradeRecorder, utc_now_iso
from memetrader.portfolio.ledger import PositionLedger
from memetrader.portfolio.models import TradeAction, TradeRecord, TradeStatus
from memetrader.pricing.oracle import PriceOracle
from memetrader.wallet.models import SwapFailure, SwapResult

log = logging.getLogger("memetrader.entry")

BUY_SIZE_NATIVE = 0.0001  # fixed ticket, independent of portfolio size


class SwapExecutor(Protocol):
    def execute_swap(self, token_address: str, native_in: float) -> SwapResult: ...


@dataclass
class EntryResult:
    address: str
    symbol: str
    action: str  # BOUGHT | LOGGED_NO_FILL | SKIP_HELD | SKIP_CASH | SWAP_FAILED | ERROR
    tokens: float = 0.0
    price: float = 0.0


def buy_message(c: Candidate, mode: str, price: float) -> str:
    return (
        f"*Buy Executed ({mode})*\n"
        f"Token: {c.symbol}\n"
        f"Repo: {c.repo or '-'}\n"
        f"Entry: {price:.9f} ETH"
    )


class EntryExecutor:
    """
    Opens fixed-size positions in newly discovered tokens.

    Fill size comes from the swap result; when that carries no amount and the
    candidate has a pool, tokens are estimated as BUY_SIZE_NATIVE / pool price.
    A buy with no usable amount is still written to the trade log, but no
    position is opened because its cost basis is unknown.
    """

    def __init__(
        self,
        ledger: PositionLedger,
        oracle: PriceOracle,
        wallet: SwapExecutor,
        recorder: TradeRecorder,
        notifier: Notifier,
        *,
        dry_run: bool = True,
        buy_size: float = BUY_SIZE_NATIVE,
        delay: Optional[Callable[[], None]] = None,
        stop_event: Optional[threading.Event] = None,
    ):
        self.ledger = ledger
        self.oracle = oracle
        self.wallet = wallet
        self.recorder = recorder
        self.notifier = notifier
        self.dry_run = dry_run
        self.buy_size = buy_size
        self._delay = delay or (lambda: None)
        self.stop_event = stop_event or threading.Event()

    def enter_all(self, candidates: Iterable[Candidate]) -> List[EntryResult]:
        results: List[EntryResult] = []
        for c in candidates:
            if self.stop_event.is_set():
                log.info("Stop requested, not buying the remaining candidates")
                break
            try:
                results.append(self.enter(c))
            except Exception:
                log.exception("Entry failed for %s (%s)", c.symbol, c.address)
                results.append(EntryResult(c.address, c.symbol, "ERROR"))
            self._delay()
        return results

    def enter(self, c: Candidate) -> EntryResult:
        if self.ledger.holds(c.address):
            log.info("  Skipping %s: Already holding position.", c.symbol)
            return EntryResult(c.address, c.symbol, "SKIP_HELD")

        if not self.ledger.can_afford(self.buy_size):
            log.info("  Skipping %s: not enough cash for %s native", c.symbol, self.buy_size)
            return EntryResult(c.address, c.symbol, "SKIP_CASH")

        log.info("Buying %s native of %s...", self.buy_size, c.symbol)
        result = self.wallet.execute_swap(c.address, self.buy_size)
        if isinstance(result, SwapFailure):
            log.error("  Swap failed for %s: %s", c.symbol, result.reason)
            return EntryResult(c.address, c.symbol, "SWAP_FAILED")

        tokens = result.tokens_out or 0.0
        price = result.unit_price or 0.0

        if not result.has_fill and c.pool_address:
            log.info("  [RPC] Fetching real-time price from pool %s...", c.pool_address)
            pool_px = self.oracle.pool_price(c.pool_address, c.address)
            if pool_px:
                price = pool_px
                tokens = self.buy_size / pool_px
                log.info("  [RPC] Price: %.9f native. Est. Tokens: %.2f", price, tokens)

        if tokens > 0 and price > 0:
            self.ledger.record_buy(c.symbol, c.address, self.buy_size, tokens, price, c.pool_address)
            action = "BOUGHT"
        else:
            log.warning(
                "  Failed to get price/amount for %s. Logging the buy but opening no position.",
                c.symbol,
            )
            tokens, price = 0.0, 0.0
            action = "LOGGED_NO_FILL"

        self.recorder.log(
            TradeRecord(
                timestamp=utc_now_iso(),
                symbol=c.symbol,
                address=c.address,
                source=c.source,
                action=TradeAction.BUY,
                amount_native=self.buy_size,
                amount_token=tokens,
                price_native=price,
                status=_status(result.status),
                tx_hash=result.transaction_id,
                repo=c.repo,
            )
        )
        self.notifier.send(buy_message(c, "SIMULATED" if self.dry_run else "LIVE", price))
        return EntryResult(c.address, c.symbol, action, tokens, price)


def _status(raw: str) -> TradeStatus:
    try:
        return TradeStatus(raw)
    except ValueError:
        return TradeStatus.EXECUTED
