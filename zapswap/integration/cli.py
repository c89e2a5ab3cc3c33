"""
Command-line entry point (`python -m zapswap`).

Subcommands:
- quote:    optimal split and expected shares for raw reserves
- simulate: run one zap against an in-memory AMM loaded from a JSON snapshot
"""

from __future__ import annotations

import argparse
import json
import logging
import math
import os
import sys
from typing import Any, Dict, List, Optional

from ..core.errors import ZapError
from ..core.pair_resolver import PoolSnapshot
from ..core.swap_split import quote_zap
from ..core.zap import ZapEngine
from ..kernels.python.optimal_swap import ratio_residual
from ..state.assets import Asset
from ..state.pools import BPS_DENOM, DEFAULT_FEE, FeeRatio
from .config import load_config
from .snapshot import load_amm, save_amm

# Placeholder assets for `quote`, which only needs reserves.
_QUOTE_ASSET_IN = Asset.token("0x" + "01" * 20)
_QUOTE_ASSET_OUT = Asset.token("0x" + "02" * 20)
_QUOTE_POOL = "0x" + "03" * 20


def _configure_logging() -> None:
    level = os.environ.get("LOG_LEVEL", "WARNING").strip().upper() or "WARNING"
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _emit(obj: Dict[str, Any]) -> None:
    print(json.dumps(obj, indent=2, sort_keys=True))


def _cmd_quote(args: argparse.Namespace) -> int:
    try:
        fee = FeeRatio.parse(args.fee) if args.fee else DEFAULT_FEE
    except ValueError as exc:
        _emit({"ok": False, "error": f"invalid --fee: {exc}"})
        return 2
    if not 0 <= args.slippage_bps < BPS_DENOM:
        _emit({"ok": False, "error": f"--slippage-bps must be in [0, {BPS_DENOM})"})
        return 2
    if args.reserve_in <= 0 or args.reserve_out <= 0:
        _emit({"ok": False, "error": "reserves must be positive"})
        return 2
    total = args.total_shares if args.total_shares is not None else math.isqrt(args.reserve_in * args.reserve_out)
    snapshot = PoolSnapshot(
        address=_QUOTE_POOL,
        asset0=_QUOTE_ASSET_IN,
        asset1=_QUOTE_ASSET_OUT,
        reserve0=args.reserve_in,
        reserve1=args.reserve_out,
        fee=fee,
        total_shares=total,
    )
    try:
        q = quote_zap(snapshot, _QUOTE_ASSET_IN, args.amount, slippage_bps=args.slippage_bps)
    except ZapError as exc:
        _emit({"ok": False, "error": str(exc), "kind": type(exc).__name__})
        return 1

    split = q.split
    _emit(
        {
            "ok": True,
            "fee": fee.to_str(),
            "amount_in": split.amount_in,
            "swap_amount": split.swap_amount,
            "expected_out": split.expected_out,
            "min_amount_out": split.min_amount_out,
            "deposit": [q.amount0, q.amount1],
            "post_swap_reserves": [args.reserve_in + split.swap_amount, args.reserve_out - split.expected_out],
            "expected_shares": q.expected_shares,
            "min_shares": q.min_shares,
            "leftover_in": q.leftover_in,
            "leftover_out": q.leftover_out,
            "residual": ratio_residual(
                swap_amount=split.swap_amount,
                amount_in=split.amount_in,
                reserve_in=args.reserve_in,
                fee_numerator=fee.numerator,
                fee_denominator=fee.denominator,
            ),
        }
    )
    return 0


def _cmd_simulate(args: argparse.Namespace) -> int:
    if (args.asset is None) == (args.native is None):
        _emit({"ok": False, "error": "exactly one of --asset/--amount or --native is required"})
        return 2
    if args.asset is not None and args.amount is None:
        _emit({"ok": False, "error": "--asset requires --amount"})
        return 2

    config = load_config(args.config)
    amm = load_amm(args.state)
    engine = ZapEngine.from_backend(amm, config)

    try:
        if args.native is not None:
            result = engine.zap_in_native(args.pool, args.native, args.caller)
        else:
            result = engine.zap_in_token(args.pool, args.asset, args.amount, args.caller)
    except ZapError as exc:
        _emit({"ok": False, "error": str(exc), "kind": type(exc).__name__})
        return 1

    out: Dict[str, Any] = {"ok": True, "result": result.to_dict()}
    if args.out:
        out["commitment"] = save_amm(amm, args.out)
    _emit(out)
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="zapswap", description="Single-asset liquidity zaps for constant-product pools")
    sub = p.add_subparsers(dest="command", required=True)

    q = sub.add_parser("quote", help="Optimal split for raw reserves")
    q.add_argument("--reserve-in", type=int, required=True, help="Reserve of the input asset")
    q.add_argument("--reserve-out", type=int, required=True, help="Reserve of the other asset")
    q.add_argument("--amount", type=int, required=True, help="Input amount (base units)")
    q.add_argument("--fee", default=None, help="Fee ratio kept, e.g. 997/1000 or 30bps (default: 997/1000)")
    q.add_argument("--total-shares", type=int, default=None, help="Share supply (default: isqrt(reserve_in*reserve_out))")
    q.add_argument("--slippage-bps", type=int, default=0, help="Slippage applied to min outputs (default: 0)")
    q.set_defaults(func=_cmd_quote)

    s = sub.add_parser("simulate", help="Run a zap against a JSON AMM snapshot")
    s.add_argument("--state", required=True, help="Path to AMM snapshot JSON")
    s.add_argument("--caller", required=True, help="Caller address")
    s.add_argument("--pool", required=True, help="Pool address")
    s.add_argument("--asset", default=None, help="Input token address")
    s.add_argument("--amount", type=int, default=None, help="Input token amount (base units)")
    s.add_argument("--native", type=int, default=None, help="Native coin amount (base units)")
    s.add_argument("--config", default=None, help="YAML config file")
    s.add_argument("--out", default=None, help="Write the post-zap snapshot here")
    s.set_defaults(func=_cmd_simulate)
    return p


def main(argv: Optional[List[str]] = None) -> int:
    _configure_logging()
    args = build_parser().parse_args(argv)
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
