# memetrader/discovery/clanker.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Optional

import requests

log = logging.getLogger("memetrader.clanker")

TOKENS_URL = "https://www.clanker.world/api/tokens"
BROWSER_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


@dataclass(frozen=True)
class ClankerToken:
    name: str
    symbol: str
    contract_address: str
    created_at: str
    pool_address: Optional[str] = None


def _token_list(payload: Any) -> List[dict]:
    # the API answers with either a bare list or {"data": [...], "pagination": ...}
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict) and isinstance(payload.get("data"), list):
        return payload["data"]
    return []


class ClankerScanner:
    def __init__(
        self,
        chain_id: int = 8453,
        limit: int = 5,
        timeout: float = 20.0,
        session: Optional[requests.Session] = None,
    ):
        self.chain_id = chain_id
        self.limit = limit
        self.timeout = timeout
        self.session = session or requests.Session()

    def search_token(self, query: str) -> List[ClankerToken]:
        try:
            r = self.session.get(
                TOKENS_URL,
                params={
                    "search": query,
                    "q": query,
                    "chainId": self.chain_id,
                    "sort": "desc",
                    "limit": self.limit,
                },
                headers={"User-Agent": BROWSER_UA},
                timeout=self.timeout,
            )
            r.raise_for_status()
            rows = _token_list(r.json())
        except Exception as e:
            log.debug("Clanker search failed for %r: %s", query, e)
            return []

        out: List[ClankerToken] = []
        for row in rows:
            if not isinstance(row, dict) or not row.get("contract_address"):
                continue
            out.append(
                ClankerToken(
                    name=str(row.get("name") or ""),
                    symbol=str(row.get("symbol") or ""),
                    contract_address=str(row["contract_address"]),
                    created_at=str(row.get("created_at") or ""),
                    pool_address=row.get("pool_address") or None,
                )
            )
        return out
