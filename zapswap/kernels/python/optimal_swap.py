"""
Optimal single-sided swap kernel.

Problem:
A user holds `a` of asset X and wants to deposit into an X/Y constant-product
pool with reserves (Rx, Ry) and fee ratio f = n/d. Swap `s` of X for
`y = f*s*Ry / (Rx + f*s)` of Y, then deposit `(a - s)` X and `y` Y. The deposit
is leftover-free when the offered ratio equals the post-swap pool ratio:

    (a - s) / (Rx + s) = y / (Ry - y)

Since `Ry - y = Ry*Rx / (Rx + f*s)`, the right side is `f*s / Rx`, which gives

    f*s^2 + Rx*(1 + f)*s - Rx*a = 0

and, multiplying through by d,

    n*s^2 + Rx*(n + d)*s - Rx*a*d = 0

The positive root is

    s = (sqrt(Rx^2*(n + d)^2 + 4*n*d*Rx*a) - Rx*(n + d)) / (2*n)

Rounding:
`isqrt` floors the square root and `//` floors the division. Because
`Rx*(n + d)` and `2*n` are integers, nested floors collapse and the result is
exactly `floor(s_real)`. Rounding down means the deposit never asks for more
than is held after the swap.

For 997/1000 this is the familiar
`(sqrt(Rx*(3988009*Rx + 3988000*a)) - 1997*Rx) / 1994`.
"""

from __future__ import annotations

import math
from dataclasses import dataclass


def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")


def _check_inputs(amount_in: int, reserve_in: int, fee_numerator: int, fee_denominator: int) -> None:
    for name, v in (
        ("amount_in", amount_in),
        ("reserve_in", reserve_in),
        ("fee_numerator", fee_numerator),
        ("fee_denominator", fee_denominator),
    ):
        _require_int(name, v)
    if amount_in <= 0:
        raise ValueError("amount_in must be positive")
    if reserve_in <= 0:
        raise ValueError("reserve_in must be positive (no root for an empty pool)")
    if fee_denominator <= 0:
        raise ValueError("fee_denominator must be positive")
    if not (0 < fee_numerator <= fee_denominator):
        raise ValueError("fee_numerator must be in (0, fee_denominator]")


@dataclass(frozen=True)
class QuadraticCoefficients:
    """Coefficients of `a*s^2 + b*s + c = 0` (scaled by the fee denominator)."""

    a: int
    b: int
    c: int

    @property
    def discriminant(self) -> int:
        return self.b * self.b - 4 * self.a * self.c


def split_coefficients(
    *,
    amount_in: int,
    reserve_in: int,
    fee_numerator: int,
    fee_denominator: int,
) -> QuadraticCoefficients:
    _check_inputs(amount_in, reserve_in, fee_numerator, fee_denominator)
    return QuadraticCoefficients(
        a=fee_numerator,
        b=reserve_in * (fee_numerator + fee_denominator),
        c=-reserve_in * amount_in * fee_denominator,
    )


def optimal_swap_amount(
    *,
    amount_in: int,
    reserve_in: int,
    fee_numerator: int,
    fee_denominator: int,
) -> int:
    """
    Amount of the input asset to swap so the remainder and the swap output
    deposit at the post-swap pool ratio.

    Returns floor of the positive root. Raises ValueError when the pool is
    empty or the root is not positive (input too small to split).
    """
    coeffs = split_coefficients(
        amount_in=amount_in,
        reserve_in=reserve_in,
        fee_numerator=fee_numerator,
        fee_denominator=fee_denominator,
    )
    disc = coeffs.discriminant
    if disc < 0:
        raise ValueError("no real root for swap split")

    swap_amount = (math.isqrt(disc) - coeffs.b) // (2 * coeffs.a)
    if swap_amount <= 0:
        raise ValueError(f"swap split is non-positive for amount_in={amount_in} (input too small)")
    if swap_amount >= amount_in:
        raise AssertionError("swap split must leave part of the input for the deposit")
    return swap_amount


def ratio_residual(
    *,
    swap_amount: int,
    amount_in: int,
    reserve_in: int,
    fee_numerator: int,
    fee_denominator: int,
) -> int:
    """
    Signed mismatch between the offered deposit ratio and the post-swap pool ratio.

    The exact residual `(a - s)*(Ry - y) - y*(Rx + s)` with the unrounded `y`
    equals `Ry / (Rx + f*s)` times `Rx*(a - s) - f*s*(Rx + s)`. The first
    factor is positive, so the sign is carried by the integer

        d*Rx*(a - s) - n*s*(Rx + s)

    Positive: X is in excess (s too small). Negative: Y is in excess.
    """
    _check_inputs(amount_in, reserve_in, fee_numerator, fee_denominator)
    _require_int("swap_amount", swap_amount)
    if not (0 <= swap_amount <= amount_in):
        raise ValueError("swap_amount must be in [0, amount_in]")
    return (
        fee_denominator * reserve_in * (amount_in - swap_amount)
        - fee_numerator * swap_amount * (reserve_in + swap_amount)
    )


def is_optimal_split(
    *,
    swap_amount: int,
    amount_in: int,
    reserve_in: int,
    fee_numerator: int,
    fee_denominator: int,
) -> bool:
    """
    True when the exact deposit ratio crosses the pool ratio between
    `swap_amount` and `swap_amount + 1`, i.e. `swap_amount` is the largest
    integer that does not overshoot.
    """
    kw = dict(
        amount_in=amount_in,
        reserve_in=reserve_in,
        fee_numerator=fee_numerator,
        fee_denominator=fee_denominator,
    )
    if swap_amount <= 0 or swap_amount >= amount_in:
        return False
    return ratio_residual(swap_amount=swap_amount, **kw) >= 0 > ratio_residual(swap_amount=swap_amount + 1, **kw)
