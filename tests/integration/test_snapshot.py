# [TESTER] v1

from __future__ import annotations

import json

import pytest

from zapswap.core.zap import ZapEngine
from zapswap.integration.memory_amm import InMemoryAmm
from zapswap.integration.snapshot import amm_from_snapshot, load_amm, save_amm, snapshot_from_amm
from zapswap.state.assets import NATIVE_COIN, Asset

ALICE = "0x" + "a1" * 20
X = Asset.token("0x" + "11" * 20)
Y = Asset.token("0x" + "22" * 20)


def _amm() -> InMemoryAmm:
    amm = InMemoryAmm()
    amm.mint(ALICE, X, 10_000)
    amm.mint(ALICE, Y, 10_000)
    amm.mint(ALICE, NATIVE_COIN, 7)
    amm.create_pool(X, Y, 1000, 2000, ALICE)
    return amm


def test_snapshot_roundtrip_is_deterministic() -> None:
    amm = _amm()
    snap1 = snapshot_from_amm(amm)
    restored = amm_from_snapshot(snap1.data)
    snap2 = snapshot_from_amm(restored)
    assert snap1.canonical_bytes() == snap2.canonical_bytes()
    assert snap1.commitment_hex() == snap2.commitment_hex()
    assert snap1.commitment_hex().startswith("0x")


def test_restored_amm_supports_zaps(tmp_path) -> None:
    path = tmp_path / "state.json"
    save_amm(_amm(), path)
    amm = load_amm(path)
    pool = amm.pool_for(X, Y)
    result = ZapEngine.from_backend(amm).zap_in_token(pool, X, 100, ALICE)
    assert result.shares_minted == 66


def test_snapshot_rejects_bad_inputs() -> None:
    data = snapshot_from_amm(_amm()).data
    bad_version = dict(data, version=2)
    with pytest.raises(ValueError, match="unsupported"):
        amm_from_snapshot(bad_version)

    dup = json.loads(json.dumps(data))
    dup["balances"].append(dict(dup["balances"][0]))
    with pytest.raises(ValueError, match="duplicate"):
        amm_from_snapshot(dup)

    skewed = json.loads(json.dumps(data))
    skewed["lp_balances"][0]["amount"] += 1
    with pytest.raises(ValueError, match="sum to"):
        amm_from_snapshot(skewed)

    with pytest.raises(TypeError):
        amm_from_snapshot([])  # type: ignore[arg-type]


def test_lp_and_balance_holders_are_normalized_on_load() -> None:
    amm = _amm()
    pool = amm.pool_for(X, Y)
    data = json.loads(json.dumps(snapshot_from_amm(amm).data))
    for entry in data["lp_balances"]:
        if entry["holder"] == ALICE:
            entry["holder"] = ALICE[2:].upper()
            entry["pool"] = "0X" + pool[2:].upper()
    for entry in data["balances"]:
        entry["holder"] = entry["holder"].upper().replace("0X", "0x")

    restored = amm_from_snapshot(data)
    assert restored.share_balance(ALICE, pool) == amm.share_balance(ALICE, pool)
    assert restored.balance_of(ALICE, X) == amm.balance_of(ALICE, X)
    assert snapshot_from_amm(restored).commitment_hex() == snapshot_from_amm(amm).commitment_hex()


def test_balance_holders_differing_only_in_case_are_duplicates() -> None:
    data = json.loads(json.dumps(snapshot_from_amm(_amm()).data))
    twin = dict(data["balances"][0])
    twin["holder"] = twin["holder"].upper().replace("0X", "0x")
    data["balances"].append(twin)
    with pytest.raises(ValueError, match="duplicate"):
        amm_from_snapshot(data)
