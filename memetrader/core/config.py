# memetrader/core/config.py
from __future__ import annotations

from typing import Any, List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ALCHEMY_BASE_URL = "https://base-mainnet.g.alchemy.com/v2/"
LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class ConfigError(ValueError):
    """Fatal misconfiguration. The only error allowed to stop the bot at startup."""


def _parse_bool(v: Any) -> bool:
    """
    Accepts:
      - bool: True / False
      - str:  "true", "1", "yes", "y", "on" (case-insensitive) -> True
    Anything else is False.
    """
    if isinstance(v, bool):
        return v
    if v is None:
        return False
    return str(v).strip().lower() in {"1", "true", "yes", "y", "on"}


class Settings(BaseSettings):
    """Runtime configuration loaded from .env / environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # --- Wallet service ---
    API_KEY: str = ""
    BASE_URL: str = "https://heyvincent.ai"
    CHAIN_ID: int = 8453  # Base
    DRY_RUN: bool = True
    HTTP_TIMEOUT_SECONDS: float = 20.0

    # --- Chain RPC (pool price reads) ---
    ALCHEMY_API_KEY: str = ""
    BASE_RPC_URL: str = ""

    # --- Discovery ---
    GITHUB_TOKEN: str = ""
    MAX_TOKEN_AGE_DAYS: float = 7.0

    # --- Notifications ---
    ENABLE_TELEGRAM: bool = False
    TELEGRAM_BOT_TOKEN: str = ""
    TELEGRAM_CHAT_ID: str = ""

    # --- Persistence ---
    PORTFOLIO_PATH: str = "portfolio.json"
    TRADES_PATH: str = "trades.jsonl"
    STARTING_CASH_NATIVE: float = 1.0

    # --- Scheduling ---
    CYCLE_INTERVAL_SECONDS: float = 600.0
    RATE_LIMIT_DELAY_SECONDS: float = 1.0

    LOG_LEVEL: str = "INFO"

    @field_validator("DRY_RUN", "ENABLE_TELEGRAM", mode="before")
    @classmethod
    def parse_flags(cls, v: Any) -> bool:
        return _parse_bool(v)

    def model_post_init(self, __context: Any) -> None:
        self.BASE_URL = (self.BASE_URL or "").strip().rstrip("/")
        self.LOG_LEVEL = (self.LOG_LEVEL or "INFO").strip().upper()

    @property
    def rpc_url(self) -> Optional[str]:
        """Alchemy wins over an explicit BASE_RPC_URL. None disables pool pricing."""
        if self.ALCHEMY_API_KEY.strip():
            return f"{ALCHEMY_BASE_URL}{self.ALCHEMY_API_KEY.strip()}"
        if self.BASE_RPC_URL.strip():
            return self.BASE_RPC_URL.strip()
        return None

    @property
    def mode_label(self) -> str:
        return "DRY RUN" if self.DRY_RUN else "LIVE"

    def validate_runtime(self) -> List[str]:
        """
        Fail-fast validation. Returns warnings (non-fatal).
        Raises ConfigError for fatal misconfiguration.
        """
        errors: List[str] = []
        warnings: List[str] = []

        if not self.API_KEY.strip():
            errors.append("API_KEY is missing. The wallet service cannot be used without it.")

        if not self.BASE_URL:
            errors.append("BASE_URL must not be empty.")

        if self.CYCLE_INTERVAL_SECONDS <= 0:
            errors.append("CYCLE_INTERVAL_SECONDS must be > 0.")

        if self.RATE_LIMIT_DELAY_SECONDS < 0:
            errors.append("RATE_LIMIT_DELAY_SECONDS must be >= 0.")

        if self.STARTING_CASH_NATIVE <= 0:
            errors.append("STARTING_CASH_NATIVE must be > 0.")

        if self.HTTP_TIMEOUT_SECONDS <= 0:
            errors.append("HTTP_TIMEOUT_SECONDS must be > 0.")

        if self.LOG_LEVEL not in LOG_LEVELS:
            errors.append(f"LOG_LEVEL must be one of {sorted(LOG_LEVELS)}.")

        if self.rpc_url is None:
            warnings.append(
                "No ALCHEMY_API_KEY or BASE_RPC_URL set. Pool price reads are disabled; "
                "prices will come from wallet quotes only."
            )

        if self.ENABLE_TELEGRAM and not (self.TELEGRAM_BOT_TOKEN and self.TELEGRAM_CHAT_ID):
            warnings.append(
                "ENABLE_TELEGRAM is on but TELEGRAM_BOT_TOKEN / TELEGRAM_CHAT_ID are missing. "
                "Messages will only be logged."
            )

        if not self.DRY_RUN:
            warnings.append("DRY_RUN=false will execute REAL swaps through the wallet service.")

        if errors:
            msg = "Config validation failed:\n" + "\n".join([f"- {e}" for e in errors])
            raise ConfigError(msg)

        return warnings
