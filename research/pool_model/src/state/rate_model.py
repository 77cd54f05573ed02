"""Utilization based interest rate model"""
from dataclasses import dataclass

from ..constants import SCALE
from ..fixed_point import checked_add, mul_div

@dataclass(frozen=True)
class InterestRateModel:
    """Linear borrow rate: base + utilization * multiplier.

    All values are per-second fractions scaled by SCALE.
    """
    base_rate: int
    multiplier: int
    reserve_factor: int

    @staticmethod
    def utilization(total_deposited: int, total_borrowed: int, total_reserve: int) -> int:
        """Borrowed share of lendable deposits, scaled by SCALE.

        The reserve is not lendable and is taken out of deposits first.
        Zero when nothing is borrowed or nothing is lendable.
        """
        lendable = total_deposited - total_reserve
        if total_borrowed == 0 or lendable <= 0:
            return 0
        return mul_div(total_borrowed, SCALE, lendable)

    def borrow_rate(self, utilization: int) -> int:
        """Per-second borrow rate for a given utilization"""
        return checked_add(self.base_rate, mul_div(utilization, self.multiplier, SCALE))

    def supply_rate(self, utilization: int) -> int:
        """Per-second rate earned by suppliers after the reserve cut"""
        # supply_rate = borrow_rate * utilization * (1 - reserve_factor)
        rate_to_pool = mul_div(self.borrow_rate(utilization), SCALE - self.reserve_factor, SCALE)
        return mul_div(rate_to_pool, utilization, SCALE)
