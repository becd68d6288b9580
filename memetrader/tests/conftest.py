import pytest


@pytest.fixture(autouse=True)
def _test_env(monkeypatch, tmp_path):
    """
    Ensure tests never hit live swaps or write into the working directory.
    """
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("API_KEY", "test-key")
    monkeypatch.setenv("DRY_RUN", "true")
    monkeypatch.setenv("ENABLE_TELEGRAM", "false")
    monkeypatch.setenv("ALCHEMY_API_KEY", "")
    monkeypatch.setenv("BASE_RPC_URL", "")
    monkeypatch.setenv("PORTFOLIO_PATH", str(tmp_path / "portfolio.json"))
    monkeypatch.setenv("TRADES_PATH", str(tmp_path / "trades.jsonl"))
