# memetrader/discovery/github.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import List, Optional

import requests

log = logging.getLogger("memetrader.github")

SEARCH_URL = "https://api.github.com/search/repositories"


@dataclass(frozen=True)
class GitHubRepo:
    name: str
    full_name: str
    description: str
    stargazers_count: int
    html_url: str


class GitHubScanner:
    """Most-starred repositories created in the last `days` days."""

    def __init__(
        self,
        token: str = "",
        days: int = 7,
        timeout: float = 20.0,
        session: Optional[requests.Session] = None,
    ):
        self.token = token
        self.days = days
        self.timeout = timeout
        self.session = session or requests.Session()

    def _query(self, now: Optional[datetime] = None) -> str:
        since = (now or datetime.now(timezone.utc)) - timedelta(days=self.days)
        return f"created:>{since.date().isoformat()} sort:stars"

    def get_trending_repos(self) -> List[GitHubRepo]:
        headers = {
            "User-Agent": "Memecoin-Trader-Bot",
            "Accept": "application/vnd.github.v3+json",
        }
        if self.token:
            headers["Authorization"] = f"token {self.token}"

        try:
            r = self.session.get(
                SEARCH_URL,
                params={"q": self._query(), "order": "desc"},
                headers=headers,
                timeout=self.timeout,
            )
            r.raise_for_status()
            items = (r.json() or {}).get("items") or []
        except Exception as e:
            log.error("GitHub API error: %s", e)
            return []

        out: List[GitHubRepo] = []
        for it in items:
            if not isinstance(it, dict) or not it.get("name"):
                continue
            out.append(
                GitHubRepo(
                    name=str(it["name"]),
                    full_name=str(it.get("full_name") or it["name"]),
                    description=str(it.get("description") or ""),
                    stargazers_count=int(it.get("stargazers_count") or 0),
                    html_url=str(it.get("html_url") or ""),
                )
            )
        return out
