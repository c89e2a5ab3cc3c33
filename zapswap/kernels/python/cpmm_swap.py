"""
CPMM swap kernel (fee-ratio semantics).

- The fee is a ratio `fee_numerator / fee_denominator` of the input that is
  priced (997/1000 for a 0.3% fee, Uniswap-v2 style).
- The full gross input is added to the input reserve; the fee stays in the pool.
- Output is floored so the constant product never decreases.

Integer-only, pure functions with typed results.
"""

from __future__ import annotations

from dataclasses import dataclass


def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")


def _check_fee(fee_numerator: int, fee_denominator: int) -> None:
    _require_int("fee_numerator", fee_numerator)
    _require_int("fee_denominator", fee_denominator)
    if fee_denominator <= 0:
        raise ValueError("fee_denominator must be positive")
    if not (0 < fee_numerator <= fee_denominator):
        raise ValueError("fee_numerator must be in (0, fee_denominator]")


@dataclass(frozen=True)
class SwapExactInResult:
    amount_out: int
    amount_in: int
    new_reserve_in: int
    new_reserve_out: int
    k_before: int
    k_after: int


def get_amount_out(
    *,
    amount_in: int,
    reserve_in: int,
    reserve_out: int,
    fee_numerator: int,
    fee_denominator: int,
) -> int:
    """
    Exact-in quote:
        priced_in = amount_in * fee_numerator
        amount_out = floor(priced_in * reserve_out / (reserve_in * fee_denominator + priced_in))

    Raises ValueError on invalid inputs or empty reserves.
    """
    for name, v in (("amount_in", amount_in), ("reserve_in", reserve_in), ("reserve_out", reserve_out)):
        _require_int(name, v)
    _check_fee(fee_numerator, fee_denominator)

    if amount_in <= 0:
        raise ValueError("amount_in must be positive")
    if reserve_in <= 0 or reserve_out <= 0:
        raise ValueError("cannot swap against an empty reserve")

    priced_in = amount_in * fee_numerator
    numerator = priced_in * reserve_out
    denominator = reserve_in * fee_denominator + priced_in
    return numerator // denominator


def swap_exact_in(
    *,
    reserve_in: int,
    reserve_out: int,
    amount_in: int,
    fee_numerator: int,
    fee_denominator: int,
) -> SwapExactInResult:
    """
    Exact-in swap quote + post-state.

    Raises ValueError on invalid inputs or if the swap would produce a zero output.
    """
    amount_out = get_amount_out(
        amount_in=amount_in,
        reserve_in=reserve_in,
        reserve_out=reserve_out,
        fee_numerator=fee_numerator,
        fee_denominator=fee_denominator,
    )
    if amount_out <= 0:
        raise ValueError("amount_out is zero (trade too small)")
    if amount_out >= reserve_out:
        raise ValueError("amount_out exceeds reserve_out")

    k_before = reserve_in * reserve_out
    new_reserve_in = reserve_in + amount_in
    new_reserve_out = reserve_out - amount_out
    k_after = new_reserve_in * new_reserve_out
    if k_after < k_before:
        raise ValueError(f"Invariant violation: new_k ({k_after}) < old_k ({k_before})")

    return SwapExactInResult(
        amount_out=amount_out,
        amount_in=amount_in,
        new_reserve_in=new_reserve_in,
        new_reserve_out=new_reserve_out,
        k_before=k_before,
        k_after=k_after,
    )
