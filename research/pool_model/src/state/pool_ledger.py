"""Aggregate pool state"""
from copy import deepcopy
from dataclasses import dataclass, field
from typing import Dict

from .position import AccountPosition

@dataclass
class PoolLedger:
    """Pool-wide totals and per-account positions.

    total_borrowed counts debt units; total_debt is the same debt in
    underlying, including accrued interest. Their ratio is the debt
    exchange rate.
    """
    ltv: int
    accrual_timestamp: int
    total_deposited: int = 0
    total_borrowed: int = 0
    total_debt: int = 0
    total_reserve: int = 0
    positions: Dict[str, AccountPosition] = field(default_factory=dict)

    def position(self, account: str) -> AccountPosition:
        """Position for account, created with zero balances on first use"""
        if account not in self.positions:
            self.positions[account] = AccountPosition()
        return self.positions[account]

    def peek(self, account: str) -> AccountPosition:
        """Position for account without creating it"""
        return self.positions.get(account, AccountPosition())

    def total_collateral(self) -> int:
        return sum(p.collateral_balance for p in self.positions.values())

    def sum_borrowed_units(self) -> int:
        return sum(p.borrowed_units for p in self.positions.values())

    def snapshot(self) -> dict:
        return deepcopy(self.__dict__)

    def restore(self, snapshot: dict) -> None:
        self.__dict__.clear()
        self.__dict__.update(deepcopy(snapshot))
