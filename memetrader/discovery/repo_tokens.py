# memetrader/discovery/repo_tokens.py
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, List, Optional, Protocol

from memetrader.discovery.clanker import ClankerScanner
from memetrader.discovery.github import GitHubScanner

log = logging.getLogger("memetrader.discovery")

_CAMEL = re.compile(r"([a-z])([A-Z])")
_SEPARATORS = re.compile(r"[-_.]")


@dataclass(frozen=True)
class Candidate:
    name: str
    address: str
    symbol: str
    pool_address: Optional[str] = None
    repo: Optional[str] = None
    created_at: Optional[str] = None
    source: str = "clanker"


class Discovery(Protocol):
    def list_candidates(self) -> List[Candidate]: ...


def clean_repo_name(name: str) -> str:
    """'myCoolRepo-v2.js' -> 'my cool repo v2 js'"""
    return _SEPARATORS.sub(" ", _CAMEL.sub(r"\1 \2", name)).lower()


def parse_created_at(raw: str) -> Optional[datetime]:
    s = (raw or "").strip()
    if not s:
        return None
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(s)
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def age_days(created_at: str, now: Optional[datetime] = None) -> Optional[float]:
    dt = parse_created_at(created_at)
    if dt is None:
        return None
    now = now or datetime.now(timezone.utc)
    return (now - dt).total_seconds() / 86400.0


class RepoTokenDiscovery:
    """
    Trending GitHub repo -> freshest matching Clanker token.

    One Candidate per repo at most (the first search hit), dropped when older
    than `max_age_days` or when its launch time can't be parsed.
    """

    def __init__(
        self,
        github: GitHubScanner,
        clanker: ClankerScanner,
        max_age_days: float = 7.0,
        delay: Optional[Callable[[], None]] = None,
        now: Optional[Callable[[], datetime]] = None,
    ):
        self.github = github
        self.clanker = clanker
        self.max_age_days = max_age_days
        self._delay = delay or (lambda: None)
        self._now = now or (lambda: datetime.now(timezone.utc))

    def list_candidates(self) -> List[Candidate]:
        log.info("Scanning trending GitHub repos...")
        repos = self.github.get_trending_repos()

        out: List[Candidate] = []
        seen = set()
        for repo in repos:
            query = clean_repo_name(repo.name)
            log.info("Checking Clanker for repo: %s (query: %r)", repo.name, query)
            matches = self.clanker.search_token(query)
            self._delay()

            if not matches:
                continue

            best = matches[0]
            age = age_days(best.created_at, self._now())
            if age is None:
                log.info("  Skipping %s: unknown launch time %r", best.symbol, best.created_at)
                continue
            if age > self.max_age_days:
                log.info("  Skipping %s: Too old (%.1f days)", best.symbol, age)
                continue
            if best.contract_address in seen:
                continue
            seen.add(best.contract_address)

            log.info("  Found Opportunity: %s (%s). Age: %.1f days.", best.symbol, best.contract_address, age)
            out.append(
                Candidate(
                    name=best.name,
                    address=best.contract_address,
                    symbol=best.symbol,
                    pool_address=best.pool_address,
                    repo=repo.name,
                    created_at=best.created_at,
                )
            )
        return out
