"""
Share math for depositing a pair of amounts into a constant-product pool.

A deposit keeps the pool ratio: whichever side is offered in excess is
trimmed (floored) and handed back as a leftover. Shares for a live pool are
`min(deposit0 * total / reserve0, deposit1 * total / reserve1)`, floored.
A new pool mints `isqrt(amount0 * amount1)` shares, of which `MIN_LIQUIDITY_LOCK`
are locked to the zero holder.
"""

from __future__ import annotations

import math
from dataclasses import dataclass


MIN_LIQUIDITY_LOCK = 1000


def _ints(**values: int) -> None:
    for name, v in values.items():
        if not isinstance(v, int) or isinstance(v, bool):
            raise TypeError(f"{name} must be an int")


@dataclass(frozen=True)
class RatioDeposit:
    deposit0: int
    deposit1: int
    leftover0: int
    leftover1: int


@dataclass(frozen=True)
class ShareMint:
    shares_minted: int
    deposit: RatioDeposit
    reserve0_after: int
    reserve1_after: int
    total_shares_after: int


def quote(*, amount_a: int, reserve_a: int, reserve_b: int) -> int:
    """Amount of B worth `amount_a` of A at the current pool ratio (floor)."""
    _ints(amount_a=amount_a, reserve_a=reserve_a, reserve_b=reserve_b)
    if amount_a <= 0:
        raise ValueError("amount_a must be positive")
    if reserve_a <= 0 or reserve_b <= 0:
        raise ValueError("reserves must be positive")
    return (amount_a * reserve_b) // reserve_a


def ratio_deposit(*, reserve0: int, reserve1: int, offered0: int, offered1: int) -> RatioDeposit:
    """
    Split the offered amounts into what the pool takes and what is left over.

    Side 0 is taken in full when its matching side-1 amount fits the offer;
    otherwise side 1 is taken in full and side 0 is re-quoted from it.
    """
    _ints(reserve0=reserve0, reserve1=reserve1, offered0=offered0, offered1=offered1)
    if reserve0 <= 0 or reserve1 <= 0:
        raise ValueError("cannot deposit into an empty pool")
    if offered0 <= 0 or offered1 <= 0:
        raise ValueError("offered amounts must be positive")

    matching1 = quote(amount_a=offered0, reserve_a=reserve0, reserve_b=reserve1)
    if matching1 <= offered1:
        deposit0, deposit1 = offered0, matching1
    else:
        deposit0, deposit1 = quote(amount_a=offered1, reserve_a=reserve1, reserve_b=reserve0), offered1
    if deposit0 <= 0 or deposit1 <= 0:
        raise ValueError("deposit rounds to zero on one side")

    return RatioDeposit(
        deposit0=deposit0,
        deposit1=deposit1,
        leftover0=offered0 - deposit0,
        leftover1=offered1 - deposit1,
    )


def initial_shares(*, amount0: int, amount1: int, min_lock: int = MIN_LIQUIDITY_LOCK) -> tuple[int, int]:
    """Shares for seeding a new pool: (creator_shares, total_shares including the lock)."""
    _ints(amount0=amount0, amount1=amount1, min_lock=min_lock)
    if amount0 <= 0 or amount1 <= 0:
        raise ValueError("initial amounts must be positive")
    if min_lock < 0:
        raise ValueError("min_lock must be non-negative")

    total = math.isqrt(amount0 * amount1)
    if total <= min_lock:
        raise ValueError(f"insufficient initial liquidity: isqrt(amount0*amount1)={total} <= {min_lock}")
    return total - min_lock, total


def deposit_for_shares(
    *,
    reserve0: int,
    reserve1: int,
    total_shares: int,
    offered0: int,
    offered1: int,
    min_shares: int = 0,
) -> ShareMint:
    """Deposit into a live pool at its ratio and mint shares, refusing fewer than `min_shares`."""
    _ints(total_shares=total_shares, min_shares=min_shares)
    if total_shares <= 0:
        raise ValueError("pool has no shares outstanding")
    if min_shares < 0:
        raise ValueError("min_shares must be non-negative")

    dep = ratio_deposit(reserve0=reserve0, reserve1=reserve1, offered0=offered0, offered1=offered1)
    minted = min(dep.deposit0 * total_shares // reserve0, dep.deposit1 * total_shares // reserve1)
    if minted <= 0:
        raise ValueError("deposit too small: shares minted is zero")
    if minted < min_shares:
        raise ValueError(f"shares minted ({minted}) below min_shares ({min_shares})")

    return ShareMint(
        shares_minted=minted,
        deposit=dep,
        reserve0_after=reserve0 + dep.deposit0,
        reserve1_after=reserve1 + dep.deposit1,
        total_shares_after=total_shares + minted,
    )
