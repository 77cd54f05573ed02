"""Account position state"""
from dataclasses import dataclass

from ..fixed_point import checked_add, checked_sub

@dataclass
class AccountPosition:
    """Per-account balances, created lazily and never removed"""
    collateral_balance: int = 0
    borrowed_units: int = 0  # share of PoolLedger.total_borrowed, not raw underlying

    @property
    def is_closed(self) -> bool:
        return self.collateral_balance == 0 and self.borrowed_units == 0

    def update_collateral(self, amount_change: int) -> None:
        """Update position collateral"""
        if amount_change >= 0:
            self.collateral_balance = checked_add(self.collateral_balance, amount_change)
        else:
            self.collateral_balance = checked_sub(self.collateral_balance, -amount_change)

    def update_borrowed_units(self, units_change: int) -> None:
        """Update position debt units"""
        if units_change >= 0:
            self.borrowed_units = checked_add(self.borrowed_units, units_change)
        else:
            self.borrowed_units = checked_sub(self.borrowed_units, -units_change)
