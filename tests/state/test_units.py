# [TESTER] v1

from __future__ import annotations

from decimal import Decimal

import pytest

from zapswap.state.units import ether, from_base_units, gwei, to_base_units, usdc, wei


def test_unit_helpers() -> None:
    assert ether(1) == 10**18
    assert ether("0.5") == 5 * 10**17
    assert gwei(2) == 2 * 10**9
    assert wei(7) == 7
    assert usdc("1.25") == 1_250_000


def test_from_base_units_inverts_scaling() -> None:
    assert from_base_units(1_250_000, 6) == Decimal("1.25")


def test_rejects_floats_and_excess_precision() -> None:
    with pytest.raises(TypeError):
        to_base_units(1.5, 6)  # type: ignore[arg-type]
    with pytest.raises(ValueError, match="decimals"):
        usdc("0.0000001")
    with pytest.raises(ValueError):
        to_base_units("abc", 6)
    with pytest.raises(ValueError):
        ether("-1")
