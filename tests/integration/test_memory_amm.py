# [TESTER] v1

from __future__ import annotations

import pytest

from zapswap.integration.memory_amm import LOCKED_SHARES_HOLDER, AmmRevert, InMemoryAmm
from zapswap.state.assets import NATIVE_COIN, Asset
from zapswap.state.pools import PoolStatus

ALICE = "0x" + "a1" * 20
BOB = "0x" + "b2" * 20
X = Asset.token("0x" + "11" * 20)
Y = Asset.token("0x" + "22" * 20)


def _amm():
    amm = InMemoryAmm()
    amm.mint(ALICE, X, 10_000)
    amm.mint(ALICE, Y, 10_000)
    pool, minted = amm.create_pool(X, Y, 1000, 2000, ALICE)
    return amm, pool, minted


def test_create_pool_locks_minimum_liquidity() -> None:
    amm, pool, minted = _amm()
    assert minted == 414
    assert amm.share_balance(ALICE, pool) == 414
    assert amm.share_balance(LOCKED_SHARES_HOLDER, pool) == 1000
    assert amm.balance_of(pool, X) == 1000
    assert amm.balance_of(ALICE, Y) == 8000
    assert amm.pool_for(Y, X) == pool


def test_duplicate_pool_reverts() -> None:
    amm, _, _ = _amm()
    with pytest.raises(AmmRevert, match="already exists"):
        amm.create_pool(Y, X, 100, 100, ALICE)


def test_swap_enforces_min_output_atomically() -> None:
    amm, pool, _ = _amm()
    with pytest.raises(AmmRevert, match="insufficient output"):
        amm.swap(pool, X, 48, 92, ALICE)
    assert amm.balance_of(ALICE, X) == 9000
    assert amm.swap(pool, X, 48, 91, ALICE) == 91
    state = amm.read_pool(pool)
    assert (state.reserve0, state.reserve1) == (1048, 1909)


def test_swap_requires_balance() -> None:
    amm, pool, _ = _amm()
    with pytest.raises(AmmRevert, match="insufficient"):
        amm.swap(pool, X, 48, 1, BOB)


def test_add_liquidity_returns_unused_amounts() -> None:
    amm, pool, _ = _amm()
    shares, unused0, unused1 = amm.add_liquidity(pool, 100, 500, 1, ALICE)
    assert (unused0, unused1) == (0, 300)
    assert shares == 141
    assert amm.read_pool(pool).total_shares == 1414 + 141


def test_frozen_pool_rejects_trades() -> None:
    amm, pool, _ = _amm()
    amm.set_status(pool, PoolStatus.FROZEN)
    with pytest.raises(AmmRevert, match="FROZEN"):
        amm.swap(pool, X, 10, 1, ALICE)


def test_share_tokens_transfer_through_lp_table() -> None:
    amm, pool, _ = _amm()
    amm.transfer(Asset.token(pool), ALICE, BOB, 14)
    assert amm.share_balance(BOB, pool) == 14
    assert amm.balance_of(BOB, Asset.token(pool)) == 14
    with pytest.raises(AmmRevert, match="insufficient shares"):
        amm.transfer(Asset.token(pool), BOB, ALICE, 15)


def test_wrap_and_unwrap_native() -> None:
    amm = InMemoryAmm()
    amm.mint(ALICE, NATIVE_COIN, 50)
    amm.wrap_native(ALICE, 20)
    assert amm.balance_of(ALICE, amm.wrapped_native) == 20
    amm.unwrap_native(ALICE, 5)
    assert amm.balance_of(ALICE, NATIVE_COIN) == 35
    with pytest.raises(AmmRevert):
        amm.unwrap_native(ALICE, 100)


def test_read_pool_returns_a_copy() -> None:
    amm, pool, _ = _amm()
    copy = amm.read_pool(pool)
    copy.reserve0 = 1
    assert amm.read_pool(pool).reserve0 == 1000
    assert amm.read_pool("0x" + "99" * 20) is None
