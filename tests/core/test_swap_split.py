# [TESTER] v1

from __future__ import annotations

import importlib.util

import pytest

if importlib.util.find_spec("hypothesis") is None:  # pragma: no cover
    pytest.skip("hypothesis not installed", allow_module_level=True)

import hypothesis.strategies as st
from hypothesis import given, settings

from zapswap.core.errors import InputAmountError, InvalidPairError, SwapComputationError
from zapswap.core.pair_resolver import PoolSnapshot
from zapswap.core.swap_split import apply_slippage, compute_swap_split, quote_zap
from zapswap.kernels.python.optimal_swap import is_optimal_split
from zapswap.state.assets import Asset
from zapswap.state.pools import DEFAULT_FEE, FeeRatio

X = Asset.token("0x" + "11" * 20)
Y = Asset.token("0x" + "22" * 20)
POOL = "0x" + "aa" * 20


def _snapshot(r0: int, r1: int, total: int, fee: FeeRatio = DEFAULT_FEE) -> PoolSnapshot:
    return PoolSnapshot(address=POOL, asset0=X, asset1=Y, reserve0=r0, reserve1=r1, fee=fee, total_shares=total)


def test_reference_split_and_quote() -> None:
    snap = _snapshot(1000, 2000, 1414)
    split = compute_swap_split(snap, X, 100)
    assert (split.swap_amount, split.expected_out, split.deposit_in) == (48, 91, 52)
    assert split.asset_out == Y
    assert split.min_amount_out == 91

    q = quote_zap(snap, X, 100)
    assert (q.amount0, q.amount1) == (52, 91)
    assert q.expected_shares == 66
    assert (q.leftover_in, q.leftover_out) == (3, 0)
    assert q.to_dict()["swap_amount"] == 48


def test_quote_orders_deposit_when_input_is_asset1() -> None:
    snap = _snapshot(2000, 1000, 1414)
    q = quote_zap(snap, Y, 100)
    assert q.split.swap_amount == 48
    assert (q.amount0, q.amount1) == (91, 52)
    assert (q.leftover_in, q.leftover_out) == (3, 0)


def test_apply_slippage() -> None:
    assert apply_slippage(10_000, 50) == 9_950
    assert apply_slippage(1, 50) == 1
    assert apply_slippage(0, 50) == 0
    with pytest.raises(ValueError):
        apply_slippage(100, 10_000)


def test_split_errors() -> None:
    snap = _snapshot(1000, 2000, 1414)
    with pytest.raises(InputAmountError):
        compute_swap_split(snap, X, 0)
    with pytest.raises(InvalidPairError):
        compute_swap_split(snap, Asset.token("0x" + "33" * 20), 100)
    with pytest.raises(SwapComputationError):
        compute_swap_split(_snapshot(0, 0, 0), X, 100)
    with pytest.raises(SwapComputationError):
        compute_swap_split(_snapshot(10**18, 10**18, 10**18), X, 1)


@settings(max_examples=200, deadline=None)
@given(
    r0=st.integers(min_value=10**3, max_value=10**24),
    r1=st.integers(min_value=10**3, max_value=10**24),
    amount=st.integers(min_value=10**3, max_value=10**24),
)
def test_split_is_optimal_and_strictly_inside_input(r0: int, r1: int, amount: int) -> None:
    snap = _snapshot(r0, r1, 10**6)
    try:
        split = compute_swap_split(snap, X, amount)
    except SwapComputationError:
        return
    assert 0 < split.swap_amount < amount
    assert is_optimal_split(
        swap_amount=split.swap_amount,
        amount_in=amount,
        reserve_in=r0,
        fee_numerator=DEFAULT_FEE.numerator,
        fee_denominator=DEFAULT_FEE.denominator,
    )


RESERVE_SETS = [(10**6, 2 * 10**6, 1_414_213), (10**9, 10**9, 10**9), (5 * 10**12, 3 * 10**10, 10**11)]


@settings(max_examples=150, deadline=None)
@given(
    reserves=st.sampled_from(RESERVE_SETS),
    a1=st.integers(min_value=10**4, max_value=10**8),
    extra=st.integers(min_value=0, max_value=10**8),
)
def test_shares_grow_when_input_at_least_doubles(reserves, a1: int, extra: int) -> None:
    r0, r1, total = reserves
    snap = _snapshot(r0, r1, total)
    a2 = 2 * a1 + extra
    try:
        q1 = quote_zap(snap, X, a1)
    except SwapComputationError:
        return
    q2 = quote_zap(snap, X, a2)
    assert q1.expected_shares > 0
    assert q2.expected_shares >= q1.expected_shares


def test_adjacent_inputs_can_mint_one_share_fewer() -> None:
    # Both swap s=28 for 54 Y. a=58 offers 30 X, which the deposit re-quotes
    # from 54 Y and floors to 28, one below the 29 that a=57 deposits.
    snap = _snapshot(1000, 2000, 1414)
    small, large = quote_zap(snap, X, 57), quote_zap(snap, X, 58)
    assert small.split.swap_amount == large.split.swap_amount == 28
    assert (small.amount0, small.amount1, small.leftover_in) == (29, 54, 0)
    assert (large.amount0, large.amount1, large.leftover_in) == (30, 54, 2)
    assert (small.expected_shares, large.expected_shares) == (39, 38)
