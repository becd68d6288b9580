# memetrader/execution/exit_rules.py
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional

# Fixed policy, not configuration.
TAKE_PROFIT_PCT = 50.0
STOP_LOSS_PCT = -20.0

# percentage points; absorbs float rounding at meme-scale prices
PNL_TOLERANCE = 1e-9


class ExitAction(str, Enum):
    HOLD = "HOLD"
    TAKE_PROFIT = "sell_tp"
    STOP_LOSS = "sell_sl"
    NO_DECISION = "NO_DECISION"


@dataclass(frozen=True)
class ExitDecision:
    action: ExitAction
    pnl_percent: Optional[float]
    reason: str

    @property
    def triggered(self) -> bool:
        return self.action in (ExitAction.TAKE_PROFIT, ExitAction.STOP_LOSS)


def pnl_percent(entry_price: float, current_price: float) -> Optional[float]:
    """(current - entry) / entry * 100, or None when entry is zero or the result isn't finite."""
    if not entry_price:
        return None
    pnl = (current_price - entry_price) / entry_price * 100.0
    if not math.isfinite(pnl):
        return None
    return pnl


def decide_exit(
    entry_price: float,
    current_price: float,
    take_profit_pct: float = TAKE_PROFIT_PCT,
    stop_loss_pct: float = STOP_LOSS_PCT,
) -> ExitDecision:
    """
    Long-only exit policy. Both bounds are inclusive (within PNL_TOLERANCE):
      pnl >= take_profit_pct -> TAKE_PROFIT
      pnl <= stop_loss_pct   -> STOP_LOSS
    A zero/unknown cost basis is NO_DECISION; the position is left alone.
    """
    pnl = pnl_percent(entry_price, current_price)
    if pnl is None:
        return ExitDecision(ExitAction.NO_DECISION, None, "NO_ENTRY_PRICE")

    if pnl >= take_profit_pct - PNL_TOLERANCE:
        return ExitDecision(ExitAction.TAKE_PROFIT, pnl, f"TAKE_PROFIT_{pnl:.2f}")

    if pnl <= stop_loss_pct + PNL_TOLERANCE:
        return ExitDecision(ExitAction.STOP_LOSS, pnl, f"STOP_LOSS_{pnl:.2f}")

    return ExitDecision(ExitAction.HOLD, pnl, "HOLD")
