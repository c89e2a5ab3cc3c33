"""
State management for zapswap
"""

from .assets import NATIVE_COIN, Asset, AssetKind, parse_asset
from .balances import BalanceTable
from .lp import LPTable
from .pools import DEFAULT_FEE, FeeRatio, PoolState, PoolStatus

__all__ = [
    "NATIVE_COIN",
    "Asset",
    "AssetKind",
    "parse_asset",
    "BalanceTable",
    "LPTable",
    "DEFAULT_FEE",
    "FeeRatio",
    "PoolState",
    "PoolStatus",
]
