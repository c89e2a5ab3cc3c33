"""
Interfaces to the external AMM, token and wallet services.

The zap engine never touches pool state directly; it only calls through these
narrow seams. Implementations signal failure by raising; the engine maps those
failures onto its own error taxonomy.
"""

from __future__ import annotations

from typing import Optional, Tuple

from ..state.assets import Address, Amount, Asset
from ..state.pools import PoolState


class PoolReader:
    """Read access to the pair factory and pool reserves."""

    def pool_for(self, asset_a: Asset, asset_b: Asset) -> Optional[Address]:
        """Pool address for the pair, or None when the factory has no such pool."""
        raise NotImplementedError

    def read_pool(self, pool: Address) -> Optional[PoolState]:
        """Fresh copy of the pool state, or None for an unknown address."""
        raise NotImplementedError


class SwapService:
    """Exact-in swap against a single pool."""

    def swap(
        self,
        pool: Address,
        asset_in: Asset,
        amount_in: Amount,
        min_amount_out: Amount,
        sender: Address,
    ) -> Amount:
        """Swap from `sender`'s balance; fails if output < min_amount_out."""
        raise NotImplementedError


class DepositService:
    """Add liquidity to a pool."""

    def add_liquidity(
        self,
        pool: Address,
        amount0: Amount,
        amount1: Amount,
        min_shares: Amount,
        sender: Address,
    ) -> Tuple[Amount, Amount, Amount]:
        """
        Deposit up to (amount0, amount1), in pool asset order, from `sender`.

        Returns (shares_minted, unused0, unused1). Unused amounts stay with the sender.
        """
        raise NotImplementedError


class TransferService:
    """Asset transfers, including the native coin and pool-share tokens."""

    def transfer(self, asset: Asset, sender: Address, recipient: Address, amount: Amount) -> None:
        raise NotImplementedError


class NativeWrapper:
    """Wrapped-native token contract (deposit / withdraw)."""

    @property
    def wrapped_native(self) -> Asset:
        raise NotImplementedError

    def wrap_native(self, holder: Address, amount: Amount) -> None:
        raise NotImplementedError

    def unwrap_native(self, holder: Address, amount: Amount) -> None:
        raise NotImplementedError
