"""
In-memory AMM snapshot encoding.

Goals:
- Deterministic JSON serialization for hashing / handing state to the CLI.
- Round-trippable into `InMemoryAmm`.
- Explicit versioning.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Union

from ..state.assets import normalize_address, parse_asset
from ..state.canonical import canonical_json_bytes, snapshot_commitment
from ..state.pools import FeeRatio, PoolState, PoolStatus
from .memory_amm import DEFAULT_WRAPPED_NATIVE, InMemoryAmm


AMM_SNAPSHOT_VERSION = 1


def _require_str(value: Any, *, name: str, max_len: int = 256) -> str:
    if not isinstance(value, str):
        raise TypeError(f"{name} must be a string")
    if not value:
        raise ValueError(f"{name} must be non-empty")
    if len(value) > max_len:
        raise ValueError(f"{name} too large")
    return value


def _require_int(value: Any, *, name: str) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")
    if value < 0:
        raise ValueError(f"{name} must be non-negative")
    return int(value)


def _require_list(snapshot: Mapping[str, Any], key: str, max_len: int) -> list:
    entries = snapshot.get(key)
    if entries is None:
        return []
    if not isinstance(entries, list):
        raise TypeError(f"snapshot.{key} must be a list")
    if len(entries) > max_len:
        raise ValueError(f"too many {key} entries: {len(entries)} > {max_len}")
    for entry in entries:
        if not isinstance(entry, Mapping):
            raise TypeError(f"snapshot.{key} entries must be objects")
    return entries


@dataclass(frozen=True)
class AmmSnapshot:
    """
    Deterministic, versioned snapshot of an `InMemoryAmm`.

    The commitment is *not* included inside `data` to avoid self-reference.
    """

    version: int
    data: Dict[str, Any]

    def canonical_bytes(self) -> bytes:
        return canonical_json_bytes(self.data)

    def commitment_hex(self) -> str:
        return snapshot_commitment(self.data, version=self.version)


def snapshot_from_amm(amm: InMemoryAmm, *, version: int = AMM_SNAPSHOT_VERSION) -> AmmSnapshot:
    if not isinstance(version, int) or isinstance(version, bool) or version <= 0:
        raise ValueError("version must be a positive int")

    balances_entries = [
        {"holder": holder, "asset": asset.to_str(), "amount": int(amount)}
        for (holder, asset), amount in amm.balances.get_all_balances().items()
    ]
    balances_entries.sort(key=lambda e: (e["holder"], e["asset"]))

    pools_entries = [
        {
            "address": pool.address,
            "asset0": pool.asset0.to_str(),
            "asset1": pool.asset1.to_str(),
            "reserve0": int(pool.reserve0),
            "reserve1": int(pool.reserve1),
            "fee": pool.fee.to_str(),
            "total_shares": int(pool.total_shares),
            "status": pool.status.value,
            "created_at": int(pool.created_at),
        }
        for pool in amm.all_pools()
    ]

    lp_entries = [
        {"holder": holder, "pool": pool, "amount": int(amount)}
        for (holder, pool), amount in amm.lp_balances.get_all_balances().items()
    ]
    lp_entries.sort(key=lambda e: (e["holder"], e["pool"]))

    data: Dict[str, Any] = {
        "version": int(version),
        "wrapped_native": amm.wrapped_native.to_str(),
        "min_lock": int(amm.min_lock),
        "balances": balances_entries,
        "pools": pools_entries,
        "lp_balances": lp_entries,
    }
    return AmmSnapshot(version=version, data=data)


def amm_from_snapshot(
    snapshot: Mapping[str, Any],
    *,
    max_balances: int = 200_000,
    max_pools: int = 50_000,
    max_lp_balances: int = 200_000,
) -> InMemoryAmm:
    if not isinstance(snapshot, Mapping):
        raise TypeError("snapshot must be a mapping")

    version = snapshot.get("version", AMM_SNAPSHOT_VERSION)
    if not isinstance(version, int) or isinstance(version, bool) or version <= 0:
        raise ValueError("snapshot.version must be a positive int")
    if version != AMM_SNAPSHOT_VERSION:
        raise ValueError(f"unsupported snapshot version: {version}")

    wrapped = _require_str(snapshot.get("wrapped_native", DEFAULT_WRAPPED_NATIVE), name="wrapped_native")
    min_lock = _require_int(snapshot.get("min_lock", 1000), name="min_lock")
    amm = InMemoryAmm(wrapped_native=wrapped, min_lock=min_lock)

    seen_balances = set()
    for entry in _require_list(snapshot, "balances", max_balances):
        holder = normalize_address(_require_str(entry.get("holder"), name="balance.holder"))
        asset = parse_asset(_require_str(entry.get("asset"), name="balance.asset"))
        amount = _require_int(entry.get("amount"), name="balance.amount")
        key = (holder, asset)
        if key in seen_balances:
            raise ValueError("duplicate balance entry (holder, asset)")
        seen_balances.add(key)
        amm.mint(holder, asset, amount)

    for entry in _require_list(snapshot, "pools", max_pools):
        status_raw = entry.get("status", PoolStatus.ACTIVE.value)
        try:
            status = PoolStatus(str(status_raw))
        except ValueError as exc:
            raise ValueError(f"invalid pool status: {status_raw}") from exc
        pool = PoolState(
            address=_require_str(entry.get("address"), name="pool.address"),
            asset0=parse_asset(_require_str(entry.get("asset0"), name="pool.asset0")),
            asset1=parse_asset(_require_str(entry.get("asset1"), name="pool.asset1")),
            reserve0=_require_int(entry.get("reserve0", 0), name="pool.reserve0"),
            reserve1=_require_int(entry.get("reserve1", 0), name="pool.reserve1"),
            fee=FeeRatio.parse(_require_str(entry.get("fee", "997/1000"), name="pool.fee")),
            total_shares=_require_int(entry.get("total_shares", 0), name="pool.total_shares"),
            status=status,
            created_at=_require_int(entry.get("created_at", 0), name="pool.created_at"),
        )
        amm.load_pool(pool)

    seen_lp = set()
    for entry in _require_list(snapshot, "lp_balances", max_lp_balances):
        holder = normalize_address(_require_str(entry.get("holder"), name="lp.holder"))
        pool_addr = normalize_address(_require_str(entry.get("pool"), name="lp.pool"))
        amount = _require_int(entry.get("amount"), name="lp.amount")
        if pool_addr not in amm.pools:
            raise ValueError(f"lp entry references unknown pool: {pool_addr}")
        if (holder, pool_addr) in seen_lp:
            raise ValueError("duplicate lp entry (holder, pool)")
        seen_lp.add((holder, pool_addr))
        amm.lp_balances.set(holder, pool_addr, amount)

    for address, pool in amm.pools.items():
        held = amm.lp_balances.total_for_pool(address)
        if held != pool.total_shares:
            raise ValueError(f"lp balances for pool {address} sum to {held}, expected {pool.total_shares}")

    return amm


def load_amm(path: Union[str, Path]) -> InMemoryAmm:
    with open(path, "r", encoding="utf-8") as f:
        return amm_from_snapshot(json.load(f))


def save_amm(amm: InMemoryAmm, path: Union[str, Path]) -> str:
    """Write a pretty-printed snapshot; returns its commitment."""
    snap = snapshot_from_amm(amm)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(snap.data, f, indent=2, sort_keys=True)
        f.write("\n")
    return snap.commitment_hex()
