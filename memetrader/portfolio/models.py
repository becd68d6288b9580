# memetrader/portfolio/models.py
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class TradeAction(str, Enum):
    BUY = "buy"
    SELL_TP = "sell_tp"
    SELL_SL = "sell_sl"


class TradeStatus(str, Enum):
    SIMULATED = "simulated"
    EXECUTED = "executed"
    FAILED = "failed"


@dataclass
class Position:
    address: str
    symbol: str
    amount: float = 0.0
    entry_price_native: float = 0.0  # native units per one token
    pool_address: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "symbol": self.symbol,
            "amount": self.amount,
            "entry_price_native": self.entry_price_native,
        }
        if self.pool_address:
            d["pool_address"] = self.pool_address
        return d

    @classmethod
    def from_dict(cls, address: str, raw: Dict[str, Any]) -> "Position":
        # older snapshots used *_eth keys
        entry = raw.get("entry_price_native", raw.get("entry_price_eth", 0.0))
        return cls(
            address=address,
            symbol=str(raw.get("symbol") or ""),
            amount=float(raw.get("amount") or 0.0),
            entry_price_native=float(entry or 0.0),
            pool_address=raw.get("pool_address") or None,
        )


@dataclass
class PortfolioState:
    cash_native: float
    positions: Dict[str, Position] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cash_native": self.cash_native,
            "positions": {addr: p.to_dict() for addr, p in self.positions.items()},
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "PortfolioState":
        cash = raw.get("cash_native", raw.get("cash_eth"))
        if cash is None:
            raise ValueError("snapshot has no cash balance")
        positions = {
            addr: Position.from_dict(addr, p)
            for addr, p in (raw.get("positions") or {}).items()
        }
        return cls(cash_native=float(cash), positions=positions)


@dataclass(frozen=True)
class TradeRecord:
    timestamp: str
    symbol: str
    address: str
    source: str
    action: TradeAction
    amount_native: float
    amount_token: float
    price_native: float
    status: TradeStatus
    tx_hash: Optional[str] = None
    repo: Optional[str] = None
    pnl_native: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["action"] = self.action.value
        d["status"] = self.status.value
        return {k: v for k, v in d.items() if v is not None}
