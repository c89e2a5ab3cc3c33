# [TESTER] v1

from __future__ import annotations

import pytest

from zapswap.kernels.python.lp_math import (
    MIN_LIQUIDITY_LOCK,
    deposit_for_shares,
    initial_shares,
    quote,
    ratio_deposit,
)


def test_initial_shares_lock_minimum() -> None:
    minted, total = initial_shares(amount0=1000, amount1=2000)
    # isqrt(2_000_000) == 1414
    assert total == 1414
    assert minted == 1414 - MIN_LIQUIDITY_LOCK


def test_initial_shares_use_integer_isqrt() -> None:
    n = (1 << 70) + 12345
    minted, _ = initial_shares(amount0=n, amount1=n)
    assert minted == n - MIN_LIQUIDITY_LOCK


def test_initial_shares_reject_insufficient_liquidity() -> None:
    with pytest.raises(ValueError, match="insufficient initial liquidity"):
        initial_shares(amount0=1000, amount1=1000)


def test_quote_floors() -> None:
    assert quote(amount_a=91, reserve_a=1909, reserve_b=1048) == 49


def test_ratio_deposit_leaves_excess_side_over() -> None:
    d = ratio_deposit(reserve0=1048, reserve1=1909, offered0=52, offered1=91)
    assert (d.deposit0, d.deposit1) == (49, 91)
    assert (d.leftover0, d.leftover1) == (3, 0)


def test_ratio_deposit_takes_side_zero_in_full_when_it_fits() -> None:
    d = ratio_deposit(reserve0=1000, reserve1=2000, offered0=10, offered1=25)
    assert (d.deposit0, d.deposit1, d.leftover0, d.leftover1) == (10, 20, 0, 5)


def test_deposit_for_shares_after_zap_swap() -> None:
    r = deposit_for_shares(reserve0=1048, reserve1=1909, total_shares=1414, offered0=52, offered1=91)
    assert r.shares_minted == 66
    assert (r.reserve0_after, r.reserve1_after, r.total_shares_after) == (1097, 2000, 1480)
    assert r.deposit.leftover0 == 3


def test_deposit_for_shares_enforces_min_shares() -> None:
    with pytest.raises(ValueError, match="below min_shares"):
        deposit_for_shares(reserve0=1048, reserve1=1909, total_shares=1414, offered0=52, offered1=91, min_shares=67)


def test_deposit_for_shares_rejects_empty_pool() -> None:
    with pytest.raises(ValueError):
        deposit_for_shares(reserve0=0, reserve1=0, total_shares=0, offered0=10, offered1=10)


def test_deposit_for_shares_rejects_dust() -> None:
    with pytest.raises(ValueError, match="zero"):
        deposit_for_shares(reserve0=10**18, reserve1=10**18, total_shares=1000, offered0=1, offered1=1)
