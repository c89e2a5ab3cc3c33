"""
Snapshot commitments.

An AMM snapshot is hashed as `sha256(tag || canonical JSON)`, where the tag
names the snapshot format and its version. Two processes holding the same
balances, pools and share tables get the same commitment regardless of dict
ordering.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any

SNAPSHOT_TAG = "zapswap:amm_snapshot"


def _walk_amounts(node: Any) -> None:
    # Amounts are integer base units; a float here means lost precision upstream.
    if isinstance(node, float):
        raise TypeError("snapshot values must not be floats")
    if isinstance(node, dict):
        for key, child in node.items():
            if not isinstance(key, str):
                raise TypeError(f"snapshot keys must be str: {key!r}")
            _walk_amounts(child)
    elif isinstance(node, (list, tuple)):
        for child in node:
            _walk_amounts(child)


def canonical_json_bytes(data: Any) -> bytes:
    """Compact, key-sorted UTF-8 JSON of a snapshot body."""
    _walk_amounts(data)
    return json.dumps(data, sort_keys=True, separators=(",", ":"), ensure_ascii=False, allow_nan=False).encode(
        "utf-8"
    )


def snapshot_commitment(data: Any, *, version: int) -> str:
    """`0x`-prefixed sha256 of the versioned tag, a NUL, then the canonical body."""
    if not isinstance(version, int) or isinstance(version, bool) or version <= 0:
        raise ValueError("version must be a positive int")
    tag = f"{SNAPSHOT_TAG}:v{version}".encode("ascii") + b"\x00"
    return "0x" + hashlib.sha256(tag + canonical_json_bytes(data)).hexdigest()
