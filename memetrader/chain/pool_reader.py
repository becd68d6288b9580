# memetrader/chain/pool_reader.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from web3 import Web3

log = logging.getLogger("memetrader.chain")

# Uniswap v3 style pool: only the two views we need
POOL_ABI = [
    {
        "name": "slot0",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [
            {"name": "sqrtPriceX96", "type": "uint160"},
            {"name": "tick", "type": "int24"},
            {"name": "observationIndex", "type": "uint16"},
            {"name": "observationCardinality", "type": "uint16"},
            {"name": "observationCardinalityNext", "type": "uint16"},
            {"name": "feeProtocol", "type": "uint8"},
            {"name": "unlocked", "type": "bool"},
        ],
    },
    {
        "name": "token0",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "address"}],
    },
]


@dataclass(frozen=True)
class PoolState:
    sqrt_price_x96: int
    token0: str


class Web3PoolReader:
    """Reads slot0/token0 from a concentrated-liquidity pool over JSON-RPC."""

    def __init__(self, rpc_url: str, timeout: float = 20.0, w3: Optional[Web3] = None):
        self.w3 = w3 or Web3(Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": timeout}))

    def read_pool_state(self, pool_address: str) -> Optional[PoolState]:
        try:
            pool = self.w3.eth.contract(address=Web3.to_checksum_address(pool_address), abi=POOL_ABI)
            slot0 = pool.functions.slot0().call()
            token0 = pool.functions.token0().call()
        except Exception as e:
            # network error, bad address, missing pool, reverted call: all "no data"
            log.error("Price fetch failed for pool %s: %s", pool_address, e)
            return None

        return PoolState(sqrt_price_x96=int(slot0[0]), token0=str(token0))
