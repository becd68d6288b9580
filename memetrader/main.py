# memetrader/main.py
from __future__ import annotations

import logging
import signal
import sys
import threading
from typing import Optional

from dotenv import load_dotenv

from memetrader.chain.pool_reader import Web3PoolReader
from memetrader.core.config import Settings
from memetrader.discovery.clanker import ClankerScanner
from memetrader.discovery.github import GitHubScanner
from memetrader.discovery.repo_tokens import RepoTokenDiscovery
from memetrader.execution.entry import EntryExecutor
from memetrader.execution.position_evaluator import PositionEvaluator
from memetrader.notify.telegram import Notifier, NullNotifier, TelegramNotifier
from memetrader.persistence.audit import TradeRecorder
from memetrader.persistence.state_store import JsonPortfolioStore
from memetrader.portfolio.ledger import PositionLedger
from memetrader.pricing.oracle import PriceOracle
from memetrader.runner.runner import CycleController
from memetrader.wallet.client import WalletClient

log = logging.getLogger("memetrader.main")


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )


def build_notifier(settings: Settings) -> Notifier:
    if not settings.ENABLE_TELEGRAM:
        return NullNotifier()
    return TelegramNotifier(
        bot_token=settings.TELEGRAM_BOT_TOKEN,
        chat_id=settings.TELEGRAM_CHAT_ID,
        enabled=True,
        timeout=settings.HTTP_TIMEOUT_SECONDS,
    )


def build_controller(
    settings: Settings,
    notifier: Notifier,
    stop_event: Optional[threading.Event] = None,
) -> CycleController:
    """Wire every collaborator from settings. Raises ValueError if the wallet can't be built."""
    stop_event = stop_event or threading.Event()

    def rate_limit_delay() -> None:
        stop_event.wait(settings.RATE_LIMIT_DELAY_SECONDS)

    wallet = WalletClient(
        api_key=settings.API_KEY,
        base_url=settings.BASE_URL,
        chain_id=settings.CHAIN_ID,
        dry_run=settings.DRY_RUN,
        timeout=settings.HTTP_TIMEOUT_SECONDS,
    )

    rpc_url = settings.rpc_url
    reader = Web3PoolReader(rpc_url, timeout=settings.HTTP_TIMEOUT_SECONDS) if rpc_url else None
    oracle = PriceOracle.default(reader, wallet)

    ledger = PositionLedger(JsonPortfolioStore(settings.PORTFOLIO_PATH), settings.STARTING_CASH_NATIVE)
    recorder = TradeRecorder(settings.TRADES_PATH)

    discovery = RepoTokenDiscovery(
        GitHubScanner(token=settings.GITHUB_TOKEN, timeout=settings.HTTP_TIMEOUT_SECONDS),
        ClankerScanner(chain_id=settings.CHAIN_ID, timeout=settings.HTTP_TIMEOUT_SECONDS),
        max_age_days=settings.MAX_TOKEN_AGE_DAYS,
        delay=rate_limit_delay,
    )

    evaluator = PositionEvaluator(
        ledger, oracle, recorder, notifier, dry_run=settings.DRY_RUN, delay=rate_limit_delay
    )
    entry = EntryExecutor(
        ledger,
        oracle,
        wallet,
        recorder,
        notifier,
        dry_run=settings.DRY_RUN,
        delay=rate_limit_delay,
        stop_event=stop_event,
    )

    return CycleController(
        ledger,
        evaluator,
        entry,
        discovery,
        interval_seconds=settings.CYCLE_INTERVAL_SECONDS,
        stop_event=stop_event,
    )


def main() -> int:
    load_dotenv()

    try:
        settings = Settings()
        warnings = settings.validate_runtime()
    except ValueError as e:
        # fail-closed: ConfigError and pydantic ValidationError are both ValueErrors
        setup_logging()
        log.critical("%s", e)
        return 1

    setup_logging(settings.LOG_LEVEL)
    for w in warnings:
        log.warning("[CONFIG WARNING] %s", w)

    notifier = build_notifier(settings)
    controller = build_controller(settings, notifier)

    def _on_signal(signum, _frame) -> None:
        log.info("Received signal %s, stopping after the current step", signum)
        controller.stop()

    signal.signal(signal.SIGINT, _on_signal)
    signal.signal(signal.SIGTERM, _on_signal)

    log.info("Starting Memecoin Trader (Mode: %s)...", settings.mode_label)
    notifier.send(f"*Memecoin Trader Started*\nMode: {settings.mode_label}")

    controller.run_forever()
    return 0


if __name__ == "__main__":
    sys.exit(main())
