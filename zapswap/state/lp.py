"""
Pool-share (LP token) balance tracking.

Shares are scoped per pool address and are tracked separately from asset balances.
"""

from __future__ import annotations

from typing import Dict, Tuple

from .assets import Address, Amount

# Type alias
PoolAddress = Address


class LPTable:
    """
    LP balance table mapping (holder, pool_address) -> share amount.

    Notes:
    - Share balances are always non-negative.
    - Zero balances are omitted to keep the table sparse.
    """

    def __init__(self) -> None:
        self._balances: Dict[Tuple[Address, PoolAddress], Amount] = {}

    def get(self, holder: Address, pool: PoolAddress) -> Amount:
        """Get share balance for (holder, pool). Returns 0 if not found."""
        return self._balances.get((holder, pool), 0)

    def set(self, holder: Address, pool: PoolAddress, amount: Amount) -> None:
        """Set share balance for (holder, pool)."""
        if amount < 0:
            raise ValueError(f"LP balance cannot be negative: {amount}")
        if amount == 0:
            self._balances.pop((holder, pool), None)
        else:
            self._balances[(holder, pool)] = amount

    def add(self, holder: Address, pool: PoolAddress, delta: int) -> None:
        """Add delta to a share balance (delta may be negative)."""
        current = self.get(holder, pool)
        new_balance = current + delta
        if new_balance < 0:
            raise ValueError(
                f"Insufficient LP balance: {current} + {delta} = {new_balance} < 0"
            )
        self.set(holder, pool, new_balance)

    def subtract(self, holder: Address, pool: PoolAddress, delta: Amount) -> None:
        """Subtract a non-negative amount from a share balance."""
        if delta < 0:
            raise ValueError(f"Delta must be non-negative: {delta}")
        self.add(holder, pool, -delta)

    def total_for_pool(self, pool: PoolAddress) -> Amount:
        """Sum of all holder balances for one pool."""
        return sum(amount for (_, p), amount in self._balances.items() if p == pool)

    def get_all_balances(self) -> Dict[Tuple[Address, PoolAddress], Amount]:
        """Return all LP balances."""
        return dict(self._balances)

    def __repr__(self) -> str:
        return f"LPTable({len(self._balances)} entries)"
