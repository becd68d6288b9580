# memetrader/pricing/oracle.py
from __future__ import annotations

import logging
from fractions import Fraction
from typing import Iterable, List, Optional, Protocol

from memetrader.chain.pool_reader import PoolState
from memetrader.wallet.models import SellQuote

log = logging.getLogger("memetrader.oracle")

Q96 = 2**96
DEFAULT_QUOTE_AMOUNT = 1.0  # tokens, when the caller has no position size


class ChainReader(Protocol):
    def read_pool_state(self, pool_address: str) -> Optional[PoolState]: ...


class SellQuoter(Protocol):
    def quote_sell(self, token_address: str, token_amount_in: float) -> Optional[SellQuote]: ...


def sqrt_price_x96_to_ratio(sqrt_price_x96: int) -> float:
    """(sqrtPriceX96 / 2**96) ** 2, i.e. price of token0 in units of token1."""
    return float(Fraction(int(sqrt_price_x96) ** 2, Q96 * Q96))


def price_from_pool_state(state: PoolState, token_address: str) -> Optional[float]:
    """Native price of `token_address` from the pool's packed price. None if degenerate."""
    ratio = sqrt_price_x96_to_ratio(state.sqrt_price_x96)
    if ratio <= 0:
        return None
    if token_address.lower() == state.token0.lower():
        return ratio
    return 1.0 / ratio


class PriceSource(Protocol):
    name: str

    def price(self, pool_address: Optional[str], token_address: str, amount: float) -> Optional[float]: ...


class PoolPriceSource:
    name = "pool"

    def __init__(self, reader: Optional[ChainReader]):
        self.reader = reader

    def price(self, pool_address: Optional[str], token_address: str, amount: float) -> Optional[float]:
        if self.reader is None or not pool_address:
            return None
        state = self.reader.read_pool_state(pool_address)
        if state is None:
            return None
        return price_from_pool_state(state, token_address)


class QuotePriceSource:
    name = "quote"

    def __init__(self, quoter: SellQuoter):
        self.quoter = quoter

    def price(self, pool_address: Optional[str], token_address: str, amount: float) -> Optional[float]:
        quote = self.quoter.quote_sell(token_address, amount)
        if quote is None:
            return None
        return quote.unit_price


class PriceOracle:
    """
    Resolves native-asset price per token from an ordered list of sources.
    First positive answer wins; None means "unknown right now", never zero.
    """

    def __init__(self, sources: Iterable[PriceSource]):
        self.sources: List[PriceSource] = list(sources)

    @classmethod
    def default(cls, reader: Optional[ChainReader], quoter: SellQuoter) -> "PriceOracle":
        return cls([PoolPriceSource(reader), QuotePriceSource(quoter)])

    def resolve_price(
        self,
        pool_address: Optional[str],
        token_address: str,
        amount: Optional[float] = None,
    ) -> Optional[float]:
        qty = amount if amount and amount > 0 else DEFAULT_QUOTE_AMOUNT
        for source in self.sources:
            try:
                px = source.price(pool_address, token_address, qty)
            except Exception as e:
                log.error("Price source %s raised for %s: %s", source.name, token_address, e)
                px = None
            if px is not None and px > 0:
                log.debug("Price for %s from %s: %.12f", token_address, source.name, px)
                return px
        return None

    def pool_price(self, pool_address: Optional[str], token_address: str) -> Optional[float]:
        """Direct-pool path only (buy-side estimate)."""
        for source in self.sources:
            if isinstance(source, PoolPriceSource):
                try:
                    px = source.price(pool_address, token_address, DEFAULT_QUOTE_AMOUNT)
                except Exception as e:
                    log.error("Pool price raised for %s: %s", token_address, e)
                    return None
                return px if px is not None and px > 0 else None
        return None
