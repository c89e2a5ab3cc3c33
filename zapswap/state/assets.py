"""
Asset identifiers.

An asset is either the chain's native coin or a fungible token at an address.
Loosely-typed identifiers (strings from a CLI, JSON snapshot, or caller) are
resolved once at the boundary via `parse_asset`; everything past that point
works on the closed `Asset` variant set.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Union


# Type aliases
Address = str  # 20-byte hex string, lower-case, 0x-prefixed
Amount = int  # Non-negative integer in the asset's smallest unit

NATIVE_ALIASES = frozenset({"native", "eth", "ether"})

_ADDRESS_RE = re.compile(r"^0x[0-9a-f]{40}$")


def normalize_address(value: str) -> Address:
    """
    Canonicalize a hex address to lower-case `0x` + 40 hex chars.

    Raises:
        TypeError: If value is not a string
        ValueError: If value is not a 20-byte hex address
    """
    if not isinstance(value, str):
        raise TypeError("address must be a string")
    s = value.strip().lower()
    if not s.startswith("0x"):
        s = "0x" + s
    if not _ADDRESS_RE.fullmatch(s):
        raise ValueError(f"invalid address: {value!r}")
    return s


class AssetKind(Enum):
    """Asset variant tag."""
    NATIVE = "NATIVE"
    TOKEN = "TOKEN"


@dataclass(frozen=True)
class Asset:
    """
    Immutable asset identifier.

    Attributes:
        kind: NATIVE or TOKEN
        address: Token address (empty for the native coin)
    """
    kind: AssetKind
    address: Address = ""

    def __post_init__(self) -> None:
        if self.kind == AssetKind.NATIVE:
            if self.address:
                raise ValueError("native coin must not carry an address")
            return
        object.__setattr__(self, "address", normalize_address(self.address))

    @classmethod
    def native(cls) -> "Asset":
        return cls(AssetKind.NATIVE)

    @classmethod
    def token(cls, address: str) -> "Asset":
        return cls(AssetKind.TOKEN, address)

    @property
    def is_native(self) -> bool:
        return self.kind == AssetKind.NATIVE

    def sort_key(self) -> str:
        # Native sorts before every token.
        return "" if self.is_native else self.address

    def to_str(self) -> str:
        return "native" if self.is_native else self.address

    def __str__(self) -> str:
        return self.to_str()


NATIVE_COIN = Asset.native()


def parse_asset(value: Union[Asset, str]) -> Asset:
    """
    Resolve a loose asset identifier into an `Asset`.

    Accepts an `Asset`, one of the native aliases ("native", "eth", "ether"),
    or a hex token address.
    """
    if isinstance(value, Asset):
        return value
    if not isinstance(value, str):
        raise TypeError(f"unsupported asset identifier: {value!r}")
    if value.strip().lower() in NATIVE_ALIASES:
        return NATIVE_COIN
    return Asset.token(value)
