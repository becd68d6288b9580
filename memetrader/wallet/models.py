# memetrader/wallet/models.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class BuyQuote:
    tokens_out: float
    unit_price: float  # native per token


@dataclass(frozen=True)
class SellQuote:
    native_out: float
    unit_price: float  # native per token


@dataclass(frozen=True)
class SwapSuccess:
    status: str  # "simulated" | "executed"
    transaction_id: Optional[str] = None
    tokens_out: Optional[float] = None
    unit_price: Optional[float] = None

    @property
    def has_fill(self) -> bool:
        return bool(self.tokens_out and self.tokens_out > 0 and self.unit_price and self.unit_price > 0)


@dataclass(frozen=True)
class SwapFailure:
    reason: str


SwapResult = Union[SwapSuccess, SwapFailure]
