"""
Reserve reader / pair resolver.

Resolves the pool a zap targets and returns an immutable reserve snapshot.
Snapshots are read fresh per request and never cached; `ensure_fresh`
re-reads right before the swap so a moved pool is rejected rather than
traded against with a stale split.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from ..state.assets import Address, Amount, Asset, normalize_address, parse_asset
from ..state.pools import BPS_DENOM, FeeRatio, PoolState, PoolStatus, sort_assets
from .errors import InvalidPairError, StaleReserveError
from .services import PoolReader

logger = logging.getLogger(__name__)

AssetLike = Union[Asset, str]
PoolHint = Union[str, Tuple[AssetLike, AssetLike]]


@dataclass(frozen=True)
class PoolSnapshot:
    """Consistent read of one pool's reserves, fee and share supply."""

    address: Address
    asset0: Asset
    asset1: Asset
    reserve0: Amount
    reserve1: Amount
    fee: FeeRatio
    total_shares: Amount

    @classmethod
    def from_state(cls, pool: PoolState) -> "PoolSnapshot":
        return cls(
            address=pool.address,
            asset0=pool.asset0,
            asset1=pool.asset1,
            reserve0=int(pool.reserve0),
            reserve1=int(pool.reserve1),
            fee=pool.fee,
            total_shares=int(pool.total_shares),
        )

    @property
    def share_asset(self) -> Asset:
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
        if asset == self.asset0:
            return self.reserve0
        if asset == self.asset1:
            return self.reserve1
        raise ValueError(f"Asset {asset} not in pool {self.address}")

    def reserves_for(self, asset_in: Asset) -> Tuple[Amount, Amount]:
        """(reserve_in, reserve_out) for a swap paying asset_in."""
        return self.get_reserve(asset_in), self.get_reserve(self.other_asset(asset_in))


def _moved_beyond(old: Amount, new: Amount, tolerance_bps: int) -> bool:
    return abs(new - old) * BPS_DENOM > old * tolerance_bps


class PairResolver:
    """
    Resolve pools through a `PoolReader`.

    The native coin never sits in a pool; when `wrapped_native` is configured,
    native-coin lookups resolve against the wrapped token instead.
    """

    def __init__(self, reader: PoolReader, *, wrapped_native: Optional[Asset] = None) -> None:
        if wrapped_native is not None and wrapped_native.is_native:
            raise ValueError("wrapped_native must be a token")
        self._reader = reader
        self._wrapped_native = wrapped_native

    @property
    def wrapped_native(self) -> Optional[Asset]:
        return self._wrapped_native

    def to_pool_asset(self, asset: Asset) -> Asset:
        """Map an asset onto what the pool actually holds."""
        if not asset.is_native:
            return asset
        if self._wrapped_native is None:
            raise InvalidPairError("native coin is not supported (no wrapped-native token configured)")
        return self._wrapped_native

    def _read(self, address: Address) -> PoolSnapshot:
        pool = self._reader.read_pool(address)
        if pool is None:
            raise InvalidPairError(f"no pool at {address}")
        if pool.status != PoolStatus.ACTIVE:
            raise InvalidPairError(f"pool {address} is not active: {pool.status.value}")
        return PoolSnapshot.from_state(pool)

    def resolve_pool(self, asset_a: AssetLike, asset_b: AssetLike) -> PoolSnapshot:
        """Look up the pool for a pair of assets via the factory."""
        try:
            a = self.to_pool_asset(parse_asset(asset_a))
            b = self.to_pool_asset(parse_asset(asset_b))
            asset0, asset1 = sort_assets(a, b)
        except (TypeError, ValueError) as exc:
            raise InvalidPairError(str(exc)) from exc

        address = self._reader.pool_for(asset0, asset1)
        if address is None:
            raise InvalidPairError(f"no pool for pair ({asset0}, {asset1})")
        snapshot = self._read(address)
        if not (snapshot.contains(asset0) and snapshot.contains(asset1)):
            raise InvalidPairError(f"factory returned pool {address} not holding ({asset0}, {asset1})")
        return snapshot

    def resolve_pool_for_asset(self, pool_address: str, asset: AssetLike) -> PoolSnapshot:
        """Read a known pool and check it holds `asset`."""
        try:
            address = normalize_address(pool_address)
            pool_asset = self.to_pool_asset(parse_asset(asset))
        except (TypeError, ValueError) as exc:
            raise InvalidPairError(str(exc)) from exc

        snapshot = self._read(address)
        if not snapshot.contains(pool_asset):
            raise InvalidPairError(f"pool {address} does not contain {pool_asset}")
        return snapshot

    def resolve(self, hint: PoolHint, asset: AssetLike) -> PoolSnapshot:
        """
        Resolve a pool hint: either a pool address or a pair of assets.

        With a pair hint, the input asset must be one side of the pair.
        """
        if isinstance(hint, tuple):
            if len(hint) != 2:
                raise InvalidPairError("pair hint must contain exactly two assets")
            snapshot = self.resolve_pool(hint[0], hint[1])
            try:
                pool_asset = self.to_pool_asset(parse_asset(asset))
            except (TypeError, ValueError) as exc:
                raise InvalidPairError(str(exc)) from exc
            if not snapshot.contains(pool_asset):
                raise InvalidPairError(f"pool {snapshot.address} does not contain {pool_asset}")
            return snapshot
        if isinstance(hint, str):
            return self.resolve_pool_for_asset(hint, asset)
        raise InvalidPairError(f"unsupported pool hint: {hint!r}")

    def refresh(self, snapshot: PoolSnapshot) -> PoolSnapshot:
        pool = self._reader.read_pool(snapshot.address)
        if pool is None:
            raise StaleReserveError(f"pool {snapshot.address} disappeared")
        if pool.status != PoolStatus.ACTIVE:
            raise StaleReserveError(f"pool {snapshot.address} is no longer active")
        return PoolSnapshot.from_state(pool)

    def ensure_fresh(self, snapshot: PoolSnapshot, *, tolerance_bps: int = 0) -> PoolSnapshot:
        """
        Re-read the pool and reject reserve movement beyond `tolerance_bps`.

        Returns the fresh snapshot.
        """
        if not (0 <= tolerance_bps <= BPS_DENOM):
            raise ValueError(f"tolerance_bps must be in [0, {BPS_DENOM}]: {tolerance_bps}")
        current = self.refresh(snapshot)
        if current.fee != snapshot.fee:
            raise StaleReserveError(f"pool {snapshot.address} fee changed")
        moved = _moved_beyond(snapshot.reserve0, current.reserve0, tolerance_bps) or _moved_beyond(
            snapshot.reserve1, current.reserve1, tolerance_bps
        )
        if moved:
            logger.warning(
                "reserves moved for pool %s: (%d, %d) -> (%d, %d), tolerance %d bps",
                snapshot.address,
                snapshot.reserve0,
                snapshot.reserve1,
                current.reserve0,
                current.reserve1,
                tolerance_bps,
            )
            raise StaleReserveError(
                f"reserves for pool {snapshot.address} moved beyond {tolerance_bps} bps "
                f"({snapshot.reserve0}, {snapshot.reserve1}) -> ({current.reserve0}, {current.reserve1})"
            )
        return current
