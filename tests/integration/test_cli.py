# [TESTER] v1

from __future__ import annotations

import json

import pytest

from zapswap.integration.cli import main
from zapswap.integration.memory_amm import InMemoryAmm
from zapswap.integration.snapshot import load_amm, save_amm
from zapswap.state.assets import NATIVE_COIN, Asset

ALICE = "0x" + "a1" * 20
X = Asset.token("0x" + "11" * 20)
Y = Asset.token("0x" + "22" * 20)


def test_quote_command(capsys) -> None:
    rc = main(["quote", "--reserve-in", "1000", "--reserve-out", "2000", "--amount", "100"])
    out = json.loads(capsys.readouterr().out)
    assert rc == 0
    assert out["ok"] is True
    assert out["swap_amount"] == 48
    assert out["expected_out"] == 91
    assert out["post_swap_reserves"] == [1048, 1909]
    assert out["deposit"] == [52, 91]
    assert out["expected_shares"] == 66
    assert out["residual"] >= 0


def test_quote_command_reports_dust(capsys) -> None:
    rc = main(["quote", "--reserve-in", "1000000000", "--reserve-out", "5", "--amount", "1", "--fee", "30bps"])
    out = json.loads(capsys.readouterr().out)
    assert rc == 1
    assert out["kind"] == "SwapComputationError"


@pytest.mark.parametrize("fee", ["abc", "1/0", "xbps"])
def test_quote_command_rejects_bad_fee(capsys, fee: str) -> None:
    rc = main(["quote", "--reserve-in", "1000", "--reserve-out", "2000", "--amount", "100", "--fee", fee])
    out = json.loads(capsys.readouterr().out)
    assert rc == 2
    assert out["ok"] is False
    assert out["error"].startswith("invalid --fee")


@pytest.mark.parametrize("bps", ["10000", "-1"])
def test_quote_command_rejects_out_of_range_slippage(capsys, bps: str) -> None:
    rc = main(["quote", "--reserve-in", "1000", "--reserve-out", "2000", "--amount", "100", "--slippage-bps", bps])
    out = json.loads(capsys.readouterr().out)
    assert rc == 2
    assert out["ok"] is False
    assert "--slippage-bps" in out["error"]


def _write_state(tmp_path):
    amm = InMemoryAmm()
    amm.mint(ALICE, X, 10_000)
    amm.mint(ALICE, Y, 10_000)
    amm.mint(ALICE, NATIVE_COIN, 1_000)
    pool, _ = amm.create_pool(X, Y, 1000, 2000, ALICE)
    path = tmp_path / "state.json"
    save_amm(amm, path)
    return path, pool


def test_simulate_token_zap_writes_new_state(tmp_path, capsys, monkeypatch) -> None:
    monkeypatch.delenv("ZAP_CONFIG", raising=False)
    path, pool = _write_state(tmp_path)
    out_path = tmp_path / "after.json"
    rc = main(
        [
            "simulate",
            "--state",
            str(path),
            "--caller",
            ALICE,
            "--pool",
            pool,
            "--asset",
            X.to_str(),
            "--amount",
            "100",
            "--out",
            str(out_path),
        ]
    )
    out = json.loads(capsys.readouterr().out)
    assert rc == 0
    assert out["result"]["shares_minted"] == 66
    assert out["commitment"].startswith("0x")
    after = load_amm(out_path)
    assert after.share_balance(ALICE, pool) == 414 + 66


def test_simulate_native_into_token_pool_fails_cleanly(tmp_path, capsys, monkeypatch) -> None:
    monkeypatch.delenv("ZAP_CONFIG", raising=False)
    path, pool = _write_state(tmp_path)
    rc = main(["simulate", "--state", str(path), "--caller", ALICE, "--pool", pool, "--native", "100"])
    out = json.loads(capsys.readouterr().out)
    assert rc == 1
    assert out["kind"] == "InvalidPairError"
    assert out["error"].startswith("Invalid pair address")


def test_simulate_requires_one_input(tmp_path, capsys) -> None:
    path, pool = _write_state(tmp_path)
    rc = main(["simulate", "--state", str(path), "--caller", ALICE, "--pool", pool])
    assert rc == 2
    assert json.loads(capsys.readouterr().out)["ok"] is False
