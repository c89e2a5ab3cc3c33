"""
Multi-asset balance tracking.

Implements BalanceTable[Address, Asset] -> Amount
"""

from typing import Dict, Tuple

from .assets import Address, Amount, Asset


class BalanceTable:
    """
    Balance table mapping (holder, asset) -> amount.

    Note: balances are stored in a plain dict. Callers that need a stable
    ordering (snapshots, reports) must sort keys explicitly.
    """

    def __init__(self):
        """Initialize empty balance table."""
        self._balances: Dict[Tuple[Address, Asset], Amount] = {}

    def get(self, holder: Address, asset: Asset) -> Amount:
        """Get balance for (holder, asset). Returns 0 if not found."""
        return self._balances.get((holder, asset), 0)

    def set(self, holder: Address, asset: Asset, amount: Amount) -> None:
        """
        Set balance for (holder, asset).

        Args:
            holder: Account address
            asset: Asset identifier
            amount: Non-negative amount

        Raises:
            ValueError: If amount is negative
        """
        if amount < 0:
            raise ValueError(f"Balance cannot be negative: {amount}")
        if amount == 0:
            # Remove zero balances to keep table sparse
            self._balances.pop((holder, asset), None)
        else:
            self._balances[(holder, asset)] = amount

    def add(self, holder: Address, asset: Asset, delta: Amount) -> None:
        """
        Add delta to balance. Equivalent to set(holder, asset, get(...) + delta).

        Args:
            holder: Account address
            asset: Asset identifier
            delta: Amount to add (can be negative for subtraction)

        Raises:
            ValueError: If resulting balance would be negative
        """
        current = self.get(holder, asset)
        new_balance = current + delta
        if new_balance < 0:
            raise ValueError(
                f"Insufficient balance: {current} + {delta} = {new_balance} < 0"
            )
        self.set(holder, asset, new_balance)

    def subtract(self, holder: Address, asset: Asset, delta: Amount) -> None:
        """
        Subtract delta from balance. Equivalent to add(holder, asset, -delta).

        Raises:
            ValueError: If delta is negative or insufficient balance
        """
        if delta < 0:
            raise ValueError(f"Delta must be non-negative: {delta}")
        self.add(holder, asset, -delta)

    def move(self, asset: Asset, sender: Address, recipient: Address, amount: Amount) -> None:
        """Move amount of asset from sender to recipient (all-or-nothing)."""
        if amount < 0:
            raise ValueError(f"Transfer amount must be non-negative: {amount}")
        self.subtract(sender, asset, amount)
        self.add(recipient, asset, amount)

    def get_all_balances(self) -> Dict[Tuple[Address, Asset], Amount]:
        """
        Get all balances as a dictionary.

        Returns:
            Dictionary mapping (holder, asset) -> amount
        """
        return dict(self._balances)

    def __repr__(self) -> str:
        return f"BalanceTable({len(self._balances)} entries)"
