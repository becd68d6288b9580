import json

from memetrader.persistence.audit import TradeRecorder
from memetrader.portfolio.models import TradeAction, TradeRecord, TradeStatus


def _record(**kw):
    base = dict(
        timestamp="2026-10-19T00:00:00+00:00",
        symbol="MEME",
        address="0xToken",
        source="clanker",
        action=TradeAction.BUY,
        amount_native=0.0001,
        amount_token=1000.0,
        price_native=1e-7,
        status=TradeStatus.SIMULATED,
    )
    base.update(kw)
    return TradeRecord(**base)


def test_appends_one_json_line_per_trade(tmp_path):
    path = tmp_path / "logs" / "trades.jsonl"
    rec = TradeRecorder(str(path))

    rec.log(_record(tx_hash="0x_simulated_hash", repo="meme-repo"))
    rec.log(_record(action=TradeAction.SELL_TP, pnl_native=6e-5))

    lines = path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    first, second = (json.loads(x) for x in lines)
    assert first["action"] == "buy"
    assert first["status"] == "simulated"
    assert first["tx_hash"] == "0x_simulated_hash"
    assert "pnl_native" not in first
    assert second["action"] == "sell_tp"
    assert second["pnl_native"] == 6e-5
    assert "repo" not in second


def test_write_failure_is_swallowed(tmp_path, caplog):
    # a directory where the file should be makes open() fail
    target = tmp_path / "trades.jsonl"
    target.mkdir()
    rec = TradeRecorder(str(target))

    rec.log(_record())

    assert any("Failed to log trade" in r.getMessage() for r in caplog.records)
