"""
Core zap algorithms and orchestration
"""

from .errors import (
    DepositExecutionError,
    InputAmountError,
    InvalidPairError,
    StaleReserveError,
    SwapComputationError,
    SwapExecutionError,
    ZapError,
)
from .pair_resolver import PairResolver, PoolHint, PoolSnapshot
from .services import DepositService, NativeWrapper, PoolReader, SwapService, TransferService
from .swap_split import SwapSplit, ZapQuote, apply_slippage, compute_swap_split, quote_zap
from .zap import ZapConfig, ZapEngine, ZapRequest, ZapResult, ZapStage

__all__ = [
    "DepositExecutionError",
    "InputAmountError",
    "InvalidPairError",
    "StaleReserveError",
    "SwapComputationError",
    "SwapExecutionError",
    "ZapError",
    "PairResolver",
    "PoolHint",
    "PoolSnapshot",
    "DepositService",
    "NativeWrapper",
    "PoolReader",
    "SwapService",
    "TransferService",
    "SwapSplit",
    "ZapQuote",
    "apply_slippage",
    "compute_swap_split",
    "quote_zap",
    "ZapConfig",
    "ZapEngine",
    "ZapRequest",
    "ZapResult",
    "ZapStage",
]
