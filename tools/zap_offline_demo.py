#!/usr/bin/env python3

from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from zapswap.core.errors import ZapError
from zapswap.core.zap import ZapConfig, ZapEngine
from zapswap.integration.memory_amm import InMemoryAmm
from zapswap.state.assets import NATIVE_COIN, Asset
from zapswap.state.units import ether, usdc


def main() -> int:
    lp_whale = "0x" + "a1" * 20
    user = "0x" + "b2" * 20
    usdc_token = Asset.token("0x" + "c3" * 20)

    amm = InMemoryAmm()
    weth = amm.wrapped_native
    engine = ZapEngine.from_backend(amm, ZapConfig(slippage_bps=50))

    amm.mint(lp_whale, weth, ether(100))
    amm.mint(lp_whale, usdc_token, usdc(200_000))
    pool, _ = amm.create_pool(weth, usdc_token, ether(100), usdc(200_000), lp_whale)
    print(f"[zap-demo] pool={pool}")

    amm.mint(user, NATIVE_COIN, ether(5))
    amm.mint(user, usdc_token, usdc(10_000))

    try:
        native = engine.zap_in_native(pool, ether(1), user)
    except ZapError as exc:
        print(f"[zap-demo] FAIL (native zap): {exc}")
        return 1
    print(
        f"[zap-demo] native zap: swapped={native.swap_amount} out={native.amount_out} "
        f"shares={native.shares_minted} leftovers=({native.leftover_input}, {native.leftover_other})"
    )

    try:
        token = engine.zap_in_token(pool, usdc_token, usdc(1_000), user)
    except ZapError as exc:
        print(f"[zap-demo] FAIL (token zap): {exc}")
        return 1
    print(
        f"[zap-demo] token zap:  swapped={token.swap_amount} out={token.amount_out} "
        f"shares={token.shares_minted} leftovers=({token.leftover_input}, {token.leftover_other})"
    )

    held = amm.share_balance(user, pool)
    engine_dust = [amm.balance_of(engine.address, a) for a in (NATIVE_COIN, weth, usdc_token)]
    print(f"[zap-demo] user shares={held} engine balances={engine_dust}")
    if held != native.shares_minted + token.shares_minted or any(engine_dust):
        print("[zap-demo] FAIL: balances do not reconcile")
        return 1
    print("[zap-demo] OK: zaps executed")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
