import pytest

from memetrader.core.config import ConfigError, Settings


def test_missing_api_key_is_fatal():
    s = Settings(API_KEY="")
    with pytest.raises(ConfigError) as exc:
        s.validate_runtime()
    assert "API_KEY" in str(exc.value)


def test_all_fatal_errors_are_reported_together():
    s = Settings(API_KEY="", CYCLE_INTERVAL_SECONDS=0, STARTING_CASH_NATIVE=-1)
    with pytest.raises(ConfigError) as exc:
        s.validate_runtime()
    msg = str(exc.value)
    assert "API_KEY" in msg
    assert "CYCLE_INTERVAL_SECONDS" in msg
    assert "STARTING_CASH_NATIVE" in msg


def test_live_mode_warning_not_error():
    s = Settings(API_KEY="k", DRY_RUN=False, BASE_RPC_URL="http://localhost:8545")
    warnings = s.validate_runtime()
    assert any("REAL swaps" in w for w in warnings)


def test_no_rpc_is_a_warning():
    s = Settings(API_KEY="k")
    warnings = s.validate_runtime()
    assert s.rpc_url is None
    assert any("Pool price reads are disabled" in w for w in warnings)


def test_alchemy_key_wins_over_rpc_url():
    s = Settings(API_KEY="k", ALCHEMY_API_KEY="abc", BASE_RPC_URL="http://other")
    assert s.rpc_url == "https://base-mainnet.g.alchemy.com/v2/abc"


def test_flags_parse_from_env_strings(monkeypatch):
    monkeypatch.setenv("DRY_RUN", "false")
    monkeypatch.setenv("ENABLE_TELEGRAM", "YES")
    s = Settings()
    assert s.DRY_RUN is False
    assert s.ENABLE_TELEGRAM is True
    assert s.mode_label == "LIVE"


def test_bad_log_level_is_fatal():
    s = Settings(API_KEY="k", LOG_LEVEL="chatty")
    with pytest.raises(ConfigError):
        s.validate_runtime()
