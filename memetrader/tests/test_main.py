from memetrader import main as main_mod
from memetrader.core.config import Settings
from memetrader.notify.telegram import NullNotifier, TelegramNotifier
from memetrader.pricing.oracle import PoolPriceSource


def test_build_controller_wires_from_settings(tmp_path):
    settings = Settings(CYCLE_INTERVAL_SECONDS=5, RATE_LIMIT_DELAY_SECONDS=0)

    ctl = main_mod.build_controller(settings, NullNotifier())

    assert ctl.interval_seconds == 5
    assert ctl.ledger.get_balance() == 1.0
    assert ctl.entry.dry_run is True
    pool_source = next(s for s in ctl.evaluator.oracle.sources if isinstance(s, PoolPriceSource))
    # no RPC configured in tests
    assert pool_source.reader is None
    assert ctl.entry.recorder.jsonl_path == tmp_path / "trades.jsonl"


def test_main_fails_closed_without_api_key(monkeypatch):
    monkeypatch.setenv("API_KEY", "")
    monkeypatch.setattr(main_mod, "load_dotenv", lambda: None)

    assert main_mod.main() == 1


def test_main_runs_until_stopped(monkeypatch):
    monkeypatch.setattr(main_mod, "load_dotenv", lambda: None)
    monkeypatch.setattr(main_mod.signal, "signal", lambda *a: None)

    ran = []

    def fake_run_forever(self):
        ran.append(self.stop_event.is_set())

    monkeypatch.setattr(main_mod.CycleController, "run_forever", fake_run_forever)

    assert main_mod.main() == 0
    assert ran == [False]


def test_controller_and_entry_share_the_stop_event():
    ctl = main_mod.build_controller(Settings(), NullNotifier())
    ctl.stop()
    assert ctl.entry.stop_event.is_set()


def test_telegram_off_uses_null_notifier():
    assert isinstance(main_mod.build_notifier(Settings()), NullNotifier)


def test_telegram_on_uses_telegram_notifier():
    settings = Settings(ENABLE_TELEGRAM=True, TELEGRAM_BOT_TOKEN="tok", TELEGRAM_CHAT_ID="42")
    notifier = main_mod.build_notifier(settings)
    assert isinstance(notifier, TelegramNotifier)
    assert notifier.enabled is True
    assert notifier.chat_id == "42"
