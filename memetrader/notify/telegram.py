# memetrader/notify/telegram.py
from __future__ import annotations

import logging
from typing import Optional, Protocol

import requests

log = logging.getLogger("memetrader.telegram")


class Notifier(Protocol):
    def send(self, text: str) -> None: ...


class TelegramNotifier:
    """Fire-and-forget Telegram messages. send() never raises."""

    def __init__(
        self,
        bot_token: str = "",
        chat_id: str = "",
        enabled: bool = False,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self.bot_token = bot_token
        self.chat_id = chat_id
        self.enabled = enabled
        self.timeout = timeout
        self.session = session or requests.Session()

    def send(self, text: str) -> None:
        if not self.enabled:
            return

        if not (self.bot_token and self.chat_id):
            log.info("No Telegram credentials, skipping message: %s", text)
            return

        try:
            r = self.session.post(
                f"https://api.telegram.org/bot{self.bot_token}/sendMessage",
                json={"chat_id": self.chat_id, "text": text, "parse_mode": "Markdown"},
                timeout=self.timeout,
            )
            if r.status_code >= 400:
                log.error("Telegram HTTP %s: %s", r.status_code, r.text[:200])
        except Exception as e:
            log.error("Failed to send Telegram message: %s", e)


class NullNotifier:
    """Used when Telegram is switched off."""

    def send(self, text: str) -> None:
        return None
