"""
Pool state management for constant-product pools.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Tuple

import hashlib

from .assets import Address, Amount, Asset, normalize_address


BPS_DENOM = 10_000


@dataclass(frozen=True)
class FeeRatio:
    """
    Fraction of the swap input kept after the fee.

    A 0.3% fee is `FeeRatio(997, 1000)`: 997/1000 of the input is priced.

    Attributes:
        numerator: Kept portion (0 < numerator <= denominator)
        denominator: Scale of the ratio
    """
    numerator: int
    denominator: int

    def __post_init__(self) -> None:
        for name, v in (("numerator", self.numerator), ("denominator", self.denominator)):
            if not isinstance(v, int) or isinstance(v, bool):
                raise TypeError(f"{name} must be an int")
        if self.denominator <= 0:
            raise ValueError(f"fee denominator must be positive: {self.denominator}")
        if not (0 < self.numerator <= self.denominator):
            raise ValueError(
                f"fee numerator must be in (0, {self.denominator}]: {self.numerator}"
            )

    @classmethod
    def from_bps(cls, fee_bps: int) -> "FeeRatio":
        """Build the ratio for a fee expressed in basis points (30 -> 9970/10000)."""
        if not isinstance(fee_bps, int) or isinstance(fee_bps, bool):
            raise TypeError("fee_bps must be an int")
        if not (0 <= fee_bps < BPS_DENOM):
            raise ValueError(f"fee_bps must be in [0, {BPS_DENOM}): {fee_bps}")
        return cls(BPS_DENOM - fee_bps, BPS_DENOM)

    @classmethod
    def parse(cls, value: str) -> "FeeRatio":
        """Parse "997/1000" or "30bps"."""
        s = value.strip().lower()
        if s.endswith("bps"):
            return cls.from_bps(int(s[:-3].strip()))
        num, sep, den = s.partition("/")
        if not sep:
            raise ValueError(f"fee must look like 'n/d' or '<int>bps': {value!r}")
        return cls(int(num.strip()), int(den.strip()))

    def to_str(self) -> str:
        return f"{self.numerator}/{self.denominator}"


DEFAULT_FEE = FeeRatio(997, 1000)


class PoolStatus(Enum):
    """Pool status enumeration."""
    ACTIVE = "ACTIVE"
    FROZEN = "FROZEN"


def sort_assets(asset_a: Asset, asset_b: Asset) -> Tuple[Asset, Asset]:
    """Return the pair in canonical order (asset0 < asset1)."""
    if asset_a == asset_b:
        raise ValueError(f"Pool assets must differ: {asset_a}")
    if asset_a.sort_key() < asset_b.sort_key():
        return asset_a, asset_b
    return asset_b, asset_a


def compute_pool_address(asset0: Asset, asset1: Asset, fee: FeeRatio) -> Address:
    """
    Deterministically compute a pool address for the given pool parameters.

        address = last20(H("ZapSwapPair" || asset0 || asset1 || fee))
    """
    if asset0.sort_key() >= asset1.sort_key():
        raise ValueError(f"Assets must be in canonical order: {asset0} < {asset1}")

    pool_data = (
        b"ZapSwapPair"
        + asset0.to_str().encode("utf-8")
        + asset1.to_str().encode("utf-8")
        + fee.to_str().encode("utf-8")
    )
    return "0x" + hashlib.sha256(pool_data).hexdigest()[-40:]


@dataclass
class PoolState:
    """
    State of a constant-product liquidity pool.

    Attributes:
        address: Pool address (also the address of its share token)
        asset0: First asset (sorts before asset1)
        asset1: Second asset
        reserve0: Reserve amount for asset0
        reserve1: Reserve amount for asset1
        fee: Swap fee ratio
        total_shares: Total share supply, including any locked minimum
        status: Pool status
        created_at: Block height or timestamp when pool was created
    """
    address: Address
    asset0: Asset
    asset1: Asset
    reserve0: Amount
    reserve1: Amount
    fee: FeeRatio
    total_shares: Amount
    status: PoolStatus = PoolStatus.ACTIVE
    created_at: int = 0

    def __post_init__(self):
        """Validate pool state invariants."""
        self.address = normalize_address(self.address)

        if self.asset0.is_native or self.asset1.is_native:
            raise ValueError("Pools hold tokens only; wrap the native coin first")

        # Ensure canonical ordering
        if self.asset0.sort_key() >= self.asset1.sort_key():
            raise ValueError(
                f"Assets must be in canonical order: {self.asset0} < {self.asset1}"
            )

        if self.reserve0 < 0 or self.reserve1 < 0:
            raise ValueError(
                f"Reserves must be non-negative: ({self.reserve0}, {self.reserve1})"
            )

        if self.total_shares < 0:
            raise ValueError(f"Share supply must be non-negative: {self.total_shares}")

    @property
    def share_asset(self) -> Asset:
        """The pool-share token, which lives at the pool address."""
        return Asset.token(self.address)

    def contains(self, asset: Asset) -> bool:
        return asset == self.asset0 or asset == self.asset1

    def other_asset(self, asset: Asset) -> Asset:
        if asset == self.asset0:
            return self.asset1
        if asset == self.asset1:
            return self.asset0
        raise ValueError(f"Asset {asset} not in pool {self.address}")

    def get_reserve(self, asset: Asset) -> Amount:
        """
        Get reserve for a specific asset.

        Raises:
            ValueError: If asset is not in this pool
        """
        if asset == self.asset0:
            return self.reserve0
        elif asset == self.asset1:
            return self.reserve1
        else:
            raise ValueError(f"Asset {asset} not in pool {self.address}")

    def reserves_for(self, asset_in: Asset) -> Tuple[Amount, Amount]:
        """Return (reserve_in, reserve_out) for a swap paying asset_in."""
        return self.get_reserve(asset_in), self.get_reserve(self.other_asset(asset_in))

    def copy(self) -> "PoolState":
        return replace(self)

    def __repr__(self) -> str:
        return (
            f"PoolState(address={self.address[:10]}..., "
            f"assets=({str(self.asset0)[:8]}..., {str(self.asset1)[:8]}...), "
            f"reserves=({self.reserve0}, {self.reserve1}), "
            f"fee={self.fee.to_str()}, total_shares={self.total_shares}, "
            f"status={self.status.value})"
        )
