# memetrader/persistence/state_store.py
from __future__ import annotations

import copy
import json
import logging
import os
from pathlib import Path
from typing import Optional, Protocol

from memetrader.portfolio.models import PortfolioState

log = logging.getLogger("memetrader.state_store")


class PortfolioStore(Protocol):
    """Storage seam for the ledger. load() returns None when nothing is stored yet."""

    def load(self) -> Optional[PortfolioState]: ...

    def save(self, state: PortfolioState) -> None: ...


class JsonPortfolioStore:
    """
    Whole-snapshot JSON file (default: portfolio.json).

    Every save() rewrites the file completely: write to a sibling temp file,
    then os.replace() it over the old one.
    """

    def __init__(self, path: str = "portfolio.json"):
        self.path = Path(path)

    def load(self) -> Optional[PortfolioState]:
        if not self.path.exists():
            return None

        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
            return PortfolioState.from_dict(raw)
        except Exception as e:
            # unreadable snapshot -> caller starts fresh
            log.error("Failed to load portfolio from %s, starting fresh: %s", self.path, e)
            return None

    def save(self, state: PortfolioState) -> None:
        folder = self.path.parent
        if str(folder) not in ("", "."):
            folder.mkdir(parents=True, exist_ok=True)

        tmp = self.path.with_name(self.path.name + ".tmp")
        with tmp.open("w", encoding="utf-8") as f:
            json.dump(state.to_dict(), f, indent=2)
        os.replace(tmp, self.path)


class MemoryPortfolioStore:
    """In-process store. Keeps deep copies so callers can't alias ledger state."""

    def __init__(self, state: Optional[PortfolioState] = None):
        self._state = copy.deepcopy(state) if state is not None else None
        self.saves = 0

    def load(self) -> Optional[PortfolioState]:
        return copy.deepcopy(self._state)

    def save(self, state: PortfolioState) -> None:
        self._state = copy.deepcopy(state)
        self.saves += 1
