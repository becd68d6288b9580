# memetrader/portfolio/ledger.py
from __future__ import annotations

import copy
import logging
from typing import List, Optional

from memetrader.persistence.state_store import PortfolioStore
from memetrader.portfolio.models import PortfolioState, Position

log = logging.getLogger("memetrader.ledger")

DUST_THRESHOLD = 1e-9  # token units; at or below this a position is closed
DEFAULT_STARTING_CASH = 1.0


class PositionLedger:
    """
    Paper portfolio: cash in the native asset plus open positions by token address.

    - All mutations go through record_buy / record_sell.
    - State is saved after every mutation. A failed save is logged and the
      in-memory change stands; the next successful save catches the file up.
    - Affordability is the caller's job: record_buy never refuses a debit.
    """

    def __init__(self, store: PortfolioStore, starting_cash: float = DEFAULT_STARTING_CASH):
        self.store = store

        loaded = store.load()
        if loaded is None:
            loaded = PortfolioState(cash_native=float(starting_cash))
            log.info("No saved portfolio, starting with %.4f native", starting_cash)
        self._state = loaded

    # ---------- READS ----------
    def get_balance(self) -> float:
        return self._state.cash_native

    def can_afford(self, amount: float) -> bool:
        return amount <= self._state.cash_native

    def get_positions(self) -> List[Position]:
        """Snapshot copies; mutating them does not touch the ledger."""
        return [copy.copy(p) for p in self._state.positions.values()]

    def get_position(self, address: str) -> Optional[Position]:
        pos = self._state.positions.get(address)
        return copy.copy(pos) if pos is not None else None

    def holds(self, address: str) -> bool:
        return address in self._state.positions

    # ---------- MUTATIONS ----------
    def record_buy(
        self,
        symbol: str,
        address: str,
        native_spent: float,
        tokens_received: float,
        unit_price: float,
        pool_address: Optional[str] = None,
    ) -> None:
        self._state.cash_native -= native_spent

        pos = self._state.positions.get(address) or Position(address=address, symbol=symbol)

        if pool_address and not pos.pool_address:
            pos.pool_address = pool_address

        # volume-weighted average cost basis
        total_value = pos.amount * pos.entry_price_native + tokens_received * unit_price
        total_amount = pos.amount + tokens_received
        if total_amount > 0:
            pos.entry_price_native = total_value / total_amount
            pos.amount = total_amount
            self._state.positions[address] = pos
        else:
            # cash is spent, but an empty position is never stored
            log.warning("Buy of %s filled no tokens; no position opened", symbol)

        self._persist()
        log.info(
            "Bought %.2f %s @ %.9f native. Cash left: %.4f",
            tokens_received,
            symbol,
            unit_price,
            self._state.cash_native,
        )

    def record_sell(self, address: str, tokens_sold: float, unit_price: float) -> Optional[float]:
        """
        Returns realized pnl of the sold slice (native units), or None when
        there is no position at `address`.
        """
        pos = self._state.positions.get(address)
        if pos is None:
            return None

        proceeds = tokens_sold * unit_price
        realized = tokens_sold * (unit_price - pos.entry_price_native)
        self._state.cash_native += proceeds

        pos.amount -= tokens_sold
        if pos.amount <= DUST_THRESHOLD:
            del self._state.positions[address]

        self._persist()
        log.info(
            "Sold %.2f %s @ %.9f native. Cash increased to: %.4f",
            tokens_sold,
            pos.symbol,
            unit_price,
            self._state.cash_native,
        )
        return realized

    def _persist(self) -> None:
        try:
            self.store.save(self._state)
        except Exception as e:
            # Don't crash the bot because persistence failed; memory stays authoritative
            log.error("Failed to save portfolio: %s: %s", type(e).__name__, e)
