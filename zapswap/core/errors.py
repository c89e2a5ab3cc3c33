"""Exception types for the zap engine.

Every failure surfaces to the caller as a ``ZapError`` subclass carrying the
reason. Only ``DepositExecutionError`` implies a compensating refund was made
after a committed swap; the others abort before or without moving assets.
"""

from __future__ import annotations


class ZapError(Exception):
    """Base class for zap failures."""


class InputAmountError(ZapError):
    """Raised when the input amount is not positive."""


class InvalidPairError(ZapError):
    """Raised when no pool exists for the assets or the pool lacks the input asset."""


class SwapComputationError(ZapError):
    """Raised when the optimal swap split has no valid positive root."""


class SwapExecutionError(ZapError):
    """Raised when the external swap reverts or returns less than the slippage floor."""


class DepositExecutionError(ZapError):
    """Raised when the external deposit fails after the swap committed."""

    def __init__(self, reason: str, *, refunded: dict | None = None) -> None:
        self.refunded = dict(refunded or {})
        super().__init__(reason)


class StaleReserveError(ZapError):
    """Raised when pool reserves moved beyond tolerance between read and swap."""
