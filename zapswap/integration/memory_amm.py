"""
In-memory AMM backend.

A single-process stand-in for the pair factory, pools, token ledger and the
wrapped-native contract. It implements every service interface the zap engine
calls, so the engine can be exercised end-to-end (tests, CLI simulation,
offline demo) without a chain.

Every mutating call is all-or-nothing: it validates against copies and only
commits once nothing can fail. Failures raise `AmmRevert`.
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, List, Optional, Tuple

from ..core.services import DepositService, NativeWrapper, PoolReader, SwapService, TransferService
from ..kernels.python.cpmm_swap import swap_exact_in
from ..kernels.python.lp_math import MIN_LIQUIDITY_LOCK, deposit_for_shares, initial_shares
from ..state.assets import NATIVE_COIN, Address, Amount, Asset, normalize_address
from ..state.balances import BalanceTable
from ..state.lp import LPTable
from ..state.pools import DEFAULT_FEE, FeeRatio, PoolState, PoolStatus, compute_pool_address, sort_assets

logger = logging.getLogger(__name__)

DEFAULT_WRAPPED_NATIVE = "0x" + "ee" * 20
# Holder of the minimum-liquidity lock minted at pool creation.
LOCKED_SHARES_HOLDER = "0x" + "00" * 20


class AmmRevert(Exception):
    """Raised when an AMM call is rejected; no state is modified."""


class InMemoryAmm(PoolReader, SwapService, DepositService, TransferService, NativeWrapper):
    def __init__(self, *, wrapped_native: str = DEFAULT_WRAPPED_NATIVE, min_lock: int = MIN_LIQUIDITY_LOCK) -> None:
        self._lock = threading.RLock()
        self._wrapped = Asset.token(wrapped_native)
        self._min_lock = int(min_lock)
        self.balances = BalanceTable()
        self.lp_balances = LPTable()
        self.pools: Dict[Address, PoolState] = {}
        self._pairs: Dict[Tuple[Asset, Asset], Address] = {}
        self._created = 0

    # ---------- Setup / inspection ----------

    def mint(self, holder: str, asset: Asset, amount: Amount) -> None:
        """Credit `amount` of `asset` out of thin air (faucet)."""
        if amount < 0:
            raise ValueError(f"mint amount must be non-negative: {amount}")
        with self._lock:
            self.balances.add(normalize_address(holder), asset, amount)

    def balance_of(self, holder: str, asset: Asset) -> Amount:
        holder = normalize_address(holder)
        with self._lock:
            if not asset.is_native and asset.address in self.pools:
                return self.lp_balances.get(holder, asset.address)
            return self.balances.get(holder, asset)

    def share_balance(self, holder: str, pool: str) -> Amount:
        with self._lock:
            return self.lp_balances.get(normalize_address(holder), normalize_address(pool))

    def create_pool(
        self,
        asset_a: Asset,
        asset_b: Asset,
        amount_a: Amount,
        amount_b: Amount,
        creator: str,
        *,
        fee: FeeRatio = DEFAULT_FEE,
    ) -> Tuple[Address, Amount]:
        """
        Create a pool seeded by `creator`. Returns (pool address, shares minted to creator).

        The first `min_lock` shares are locked forever.
        """
        creator = normalize_address(creator)
        with self._lock:
            try:
                asset0, asset1 = sort_assets(asset_a, asset_b)
            except ValueError as exc:
                raise AmmRevert(str(exc)) from exc
            amount0, amount1 = (amount_a, amount_b) if asset0 == asset_a else (amount_b, amount_a)
            if (asset0, asset1) in self._pairs:
                raise AmmRevert(f"pool already exists for ({asset0}, {asset1})")
            if asset0.is_native or asset1.is_native:
                raise AmmRevert("pools hold tokens only")
            try:
                minted, total = initial_shares(amount0=amount0, amount1=amount1, min_lock=self._min_lock)
            except ValueError as exc:
                raise AmmRevert(str(exc)) from exc
            self._require_balance(creator, asset0, amount0)
            self._require_balance(creator, asset1, amount1)

            address = compute_pool_address(asset0, asset1, fee)
            self._created += 1
            pool = PoolState(
                address=address,
                asset0=asset0,
                asset1=asset1,
                reserve0=amount0,
                reserve1=amount1,
                fee=fee,
                total_shares=total,
                created_at=self._created,
            )
            self.balances.move(asset0, creator, address, amount0)
            self.balances.move(asset1, creator, address, amount1)
            self.lp_balances.add(creator, address, minted)
            self.lp_balances.add(LOCKED_SHARES_HOLDER, address, total - minted)
            self.pools[address] = pool
            self._pairs[(asset0, asset1)] = address
            logger.info("created pool %s (%s, %s) reserves=(%d, %d)", address, asset0, asset1, amount0, amount1)
            return address, minted

    def load_pool(self, pool: PoolState) -> None:
        """Register an existing pool as-is (snapshot restore). Balances are not touched."""
        with self._lock:
            key = (pool.asset0, pool.asset1)
            if pool.address in self.pools or key in self._pairs:
                raise AmmRevert(f"pool already exists: {pool.address}")
            self.pools[pool.address] = pool.copy()
            self._pairs[key] = pool.address
            self._created = max(self._created, pool.created_at)

    @property
    def min_lock(self) -> int:
        return self._min_lock

    def set_status(self, pool: str, status: PoolStatus) -> None:
        with self._lock:
            self._pool(normalize_address(pool)).status = status

    def all_pools(self) -> List[PoolState]:
        with self._lock:
            return [p.copy() for _, p in sorted(self.pools.items())]

    # ---------- PoolReader ----------

    def pool_for(self, asset_a: Asset, asset_b: Asset) -> Optional[Address]:
        try:
            key = sort_assets(asset_a, asset_b)
        except ValueError:
            return None
        with self._lock:
            return self._pairs.get(key)

    def read_pool(self, pool: Address) -> Optional[PoolState]:
        with self._lock:
            state = self.pools.get(pool)
            return state.copy() if state is not None else None

    # ---------- SwapService ----------

    def swap(
        self,
        pool: Address,
        asset_in: Asset,
        amount_in: Amount,
        min_amount_out: Amount,
        sender: Address,
    ) -> Amount:
        sender = normalize_address(sender)
        with self._lock:
            state = self._active_pool(pool)
            if not state.contains(asset_in):
                raise AmmRevert(f"pool {pool} does not trade {asset_in}")
            asset_out = state.other_asset(asset_in)
            reserve_in, reserve_out = state.reserves_for(asset_in)
            try:
                result = swap_exact_in(
                    reserve_in=reserve_in,
                    reserve_out=reserve_out,
                    amount_in=amount_in,
                    fee_numerator=state.fee.numerator,
                    fee_denominator=state.fee.denominator,
                )
            except ValueError as exc:
                raise AmmRevert(str(exc)) from exc
            if result.amount_out < min_amount_out:
                raise AmmRevert(f"insufficient output amount: {result.amount_out} < {min_amount_out}")
            self._require_balance(sender, asset_in, amount_in)

            self.balances.move(asset_in, sender, state.address, amount_in)
            self.balances.move(asset_out, state.address, sender, result.amount_out)
            if asset_in == state.asset0:
                state.reserve0, state.reserve1 = result.new_reserve_in, result.new_reserve_out
            else:
                state.reserve0, state.reserve1 = result.new_reserve_out, result.new_reserve_in
            logger.debug("swap on %s: %d %s -> %d %s", pool, amount_in, asset_in, result.amount_out, asset_out)
            return result.amount_out

    # ---------- DepositService ----------

    def add_liquidity(
        self,
        pool: Address,
        amount0: Amount,
        amount1: Amount,
        min_shares: Amount,
        sender: Address,
    ) -> Tuple[Amount, Amount, Amount]:
        sender = normalize_address(sender)
        with self._lock:
            state = self._active_pool(pool)
            try:
                result = deposit_for_shares(
                    reserve0=state.reserve0,
                    reserve1=state.reserve1,
                    total_shares=state.total_shares,
                    offered0=amount0,
                    offered1=amount1,
                    min_shares=min_shares,
                )
            except ValueError as exc:
                raise AmmRevert(str(exc)) from exc
            dep = result.deposit
            self._require_balance(sender, state.asset0, dep.deposit0)
            self._require_balance(sender, state.asset1, dep.deposit1)

            self.balances.move(state.asset0, sender, state.address, dep.deposit0)
            self.balances.move(state.asset1, sender, state.address, dep.deposit1)
            self.lp_balances.add(sender, state.address, result.shares_minted)
            state.reserve0 = result.reserve0_after
            state.reserve1 = result.reserve1_after
            state.total_shares = result.total_shares_after
            logger.debug(
                "deposit into %s: used=(%d, %d) shares=%d",
                pool,
                dep.deposit0,
                dep.deposit1,
                result.shares_minted,
            )
            return result.shares_minted, dep.leftover0, dep.leftover1

    # ---------- TransferService ----------

    def transfer(self, asset: Asset, sender: Address, recipient: Address, amount: Amount) -> None:
        if amount < 0:
            raise AmmRevert(f"transfer amount must be non-negative: {amount}")
        sender = normalize_address(sender)
        recipient = normalize_address(recipient)
        with self._lock:
            if not asset.is_native and asset.address in self.pools:
                have = self.lp_balances.get(sender, asset.address)
                if have < amount:
                    raise AmmRevert(f"insufficient shares: {sender} has {have}, needs {amount}")
                self.lp_balances.subtract(sender, asset.address, amount)
                self.lp_balances.add(recipient, asset.address, amount)
                return
            self._require_balance(sender, asset, amount)
            self.balances.move(asset, sender, recipient, amount)

    # ---------- NativeWrapper ----------

    @property
    def wrapped_native(self) -> Asset:
        return self._wrapped

    def wrap_native(self, holder: Address, amount: Amount) -> None:
        holder = normalize_address(holder)
        with self._lock:
            self._require_balance(holder, NATIVE_COIN, amount)
            self.balances.subtract(holder, NATIVE_COIN, amount)
            self.balances.add(holder, self._wrapped, amount)

    def unwrap_native(self, holder: Address, amount: Amount) -> None:
        holder = normalize_address(holder)
        with self._lock:
            self._require_balance(holder, self._wrapped, amount)
            self.balances.subtract(holder, self._wrapped, amount)
            self.balances.add(holder, NATIVE_COIN, amount)

    # ---------- Internals ----------

    def _pool(self, address: Address) -> PoolState:
        state = self.pools.get(address)
        if state is None:
            raise AmmRevert(f"unknown pool: {address}")
        return state

    def _active_pool(self, address: Address) -> PoolState:
        state = self._pool(address)
        if state.status != PoolStatus.ACTIVE:
            raise AmmRevert(f"pool {address} is {state.status.value}")
        return state

    def _require_balance(self, holder: Address, asset: Asset, amount: Amount) -> None:
        have = self.balances.get(holder, asset)
        if have < amount:
            raise AmmRevert(f"insufficient {asset} balance: {holder} has {have}, needs {amount}")
