"""
Human amount <-> smallest-unit conversions.

All amounts inside the package are integers in the asset's smallest unit.
These helpers exist for the CLI, demos and tests.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Union

from .assets import Amount

Number = Union[int, str, Decimal]

ETHER_DECIMALS = 18
GWEI_DECIMALS = 9
USDC_DECIMALS = 6


def to_base_units(amount: Number, decimals: int) -> Amount:
    """
    Convert a human amount to smallest units, rejecting sub-unit precision.

    Floats are refused; pass a string or Decimal for fractional amounts.
    """
    if isinstance(amount, bool) or isinstance(amount, float):
        raise TypeError("amount must be an int, str or Decimal")
    if not isinstance(decimals, int) or decimals < 0:
        raise ValueError(f"decimals must be a non-negative int: {decimals}")
    try:
        value = Decimal(amount)
    except InvalidOperation as exc:
        raise ValueError(f"invalid amount: {amount!r}") from exc
    scaled = value.scaleb(decimals)
    if scaled != scaled.to_integral_value():
        raise ValueError(f"amount {amount} has more than {decimals} decimals")
    out = int(scaled)
    if out < 0:
        raise ValueError(f"amount must be non-negative: {amount}")
    return out


def from_base_units(amount: Amount, decimals: int) -> Decimal:
    if amount < 0:
        raise ValueError(f"amount must be non-negative: {amount}")
    return Decimal(amount).scaleb(-decimals)


def ether(amount: Number) -> Amount:
    return to_base_units(amount, ETHER_DECIMALS)


def gwei(amount: Number) -> Amount:
    return to_base_units(amount, GWEI_DECIMALS)


def wei(amount: Number) -> Amount:
    return to_base_units(amount, 0)


def usdc(amount: Number) -> Amount:
    return to_base_units(amount, USDC_DECIMALS)
