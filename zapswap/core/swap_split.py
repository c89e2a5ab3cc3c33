"""
Swap-split computation for a single-sided zap (pure).

Given a reserve snapshot and a single-asset input, decide how much to swap,
what the swap should return, and what the deposit should mint. Nothing here
calls external services; the engine uses these numbers to drive execution
and to derive slippage floors.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..kernels.python.cpmm_swap import get_amount_out
from ..kernels.python.lp_math import deposit_for_shares
from ..kernels.python.optimal_swap import optimal_swap_amount
from ..state.assets import Amount, Asset
from ..state.pools import BPS_DENOM
from .errors import InputAmountError, InvalidPairError, SwapComputationError
from .pair_resolver import PoolSnapshot


@dataclass(frozen=True)
class SwapSplit:
    asset_in: Asset
    asset_out: Asset
    amount_in: Amount
    swap_amount: Amount
    expected_out: Amount
    min_amount_out: Amount

    @property
    def deposit_in(self) -> Amount:
        """Portion of the input left for the deposit."""
        return self.amount_in - self.swap_amount


@dataclass(frozen=True)
class ZapQuote:
    """Preview of a zap against a snapshot: split, deposit, shares and leftovers."""

    pool: str
    split: SwapSplit
    amount0: Amount
    amount1: Amount
    expected_shares: Amount
    min_shares: Amount
    leftover_in: Amount
    leftover_out: Amount

    def to_dict(self) -> dict:
        return {
            "pool": self.pool,
            "asset_in": self.split.asset_in.to_str(),
            "asset_out": self.split.asset_out.to_str(),
            "amount_in": self.split.amount_in,
            "swap_amount": self.split.swap_amount,
            "expected_out": self.split.expected_out,
            "min_amount_out": self.split.min_amount_out,
            "amount0": self.amount0,
            "amount1": self.amount1,
            "expected_shares": self.expected_shares,
            "min_shares": self.min_shares,
            "leftover_in": self.leftover_in,
            "leftover_out": self.leftover_out,
        }


def apply_slippage(amount: Amount, slippage_bps: int) -> Amount:
    """Lower bound `floor(amount * (1 - slippage))`, never below 1 for a positive amount."""
    if not (0 <= slippage_bps < BPS_DENOM):
        raise ValueError(f"slippage_bps must be in [0, {BPS_DENOM}): {slippage_bps}")
    if amount <= 0:
        return 0
    return max(1, (amount * (BPS_DENOM - slippage_bps)) // BPS_DENOM)


def compute_swap_split(
    snapshot: PoolSnapshot,
    asset_in: Asset,
    amount_in: Amount,
    *,
    slippage_bps: int = 0,
) -> SwapSplit:
    """
    Compute the optimal amount of `asset_in` to swap before depositing.

    Raises:
        InputAmountError: amount_in <= 0
        InvalidPairError: asset_in is not held by the pool
        SwapComputationError: no positive split exists (empty pool, dust input)
    """
    if amount_in <= 0:
        raise InputAmountError(f"amount should be more than 0: {amount_in}")
    if not snapshot.contains(asset_in):
        raise InvalidPairError(f"pool {snapshot.address} does not contain {asset_in}")

    reserve_in, reserve_out = snapshot.reserves_for(asset_in)
    if reserve_in <= 0 or reserve_out <= 0:
        raise SwapComputationError(f"pool {snapshot.address} has empty reserves")

    fee = snapshot.fee
    try:
        swap_amount = optimal_swap_amount(
            amount_in=amount_in,
            reserve_in=reserve_in,
            fee_numerator=fee.numerator,
            fee_denominator=fee.denominator,
        )
        expected_out = get_amount_out(
            amount_in=swap_amount,
            reserve_in=reserve_in,
            reserve_out=reserve_out,
            fee_numerator=fee.numerator,
            fee_denominator=fee.denominator,
        )
    except ValueError as exc:
        raise SwapComputationError(str(exc)) from exc
    if expected_out <= 0:
        raise SwapComputationError(f"swapping {swap_amount} of {asset_in} yields nothing")

    return SwapSplit(
        asset_in=asset_in,
        asset_out=snapshot.other_asset(asset_in),
        amount_in=amount_in,
        swap_amount=swap_amount,
        expected_out=expected_out,
        min_amount_out=apply_slippage(expected_out, slippage_bps),
    )


def quote_zap(
    snapshot: PoolSnapshot,
    asset_in: Asset,
    amount_in: Amount,
    *,
    slippage_bps: int = 0,
) -> ZapQuote:
    """Simulate swap + deposit on the snapshot reserves."""
    split = compute_swap_split(snapshot, asset_in, amount_in, slippage_bps=slippage_bps)

    reserve_in, reserve_out = snapshot.reserves_for(asset_in)
    post_in = reserve_in + split.swap_amount
    post_out = reserve_out - split.expected_out
    if asset_in == snapshot.asset0:
        reserve0, reserve1 = post_in, post_out
        amount0, amount1 = split.deposit_in, split.expected_out
    else:
        reserve0, reserve1 = post_out, post_in
        amount0, amount1 = split.expected_out, split.deposit_in

    try:
        minted = deposit_for_shares(
            reserve0=reserve0,
            reserve1=reserve1,
            total_shares=snapshot.total_shares,
            offered0=amount0,
            offered1=amount1,
        )
    except ValueError as exc:
        raise SwapComputationError(f"deposit after swap would fail: {exc}") from exc

    if asset_in == snapshot.asset0:
        leftover_in, leftover_out = minted.deposit.leftover0, minted.deposit.leftover1
    else:
        leftover_in, leftover_out = minted.deposit.leftover1, minted.deposit.leftover0

    return ZapQuote(
        pool=snapshot.address,
        split=split,
        amount0=amount0,
        amount1=amount1,
        expected_shares=minted.shares_minted,
        min_shares=apply_slippage(minted.shares_minted, slippage_bps),
        leftover_in=leftover_in,
        leftover_out=leftover_out,
    )
