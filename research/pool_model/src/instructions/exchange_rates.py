"""Lend and debt exchange rates

Both rates are SCALE-based fractions derived from current ledger state on
each call and are reported only. Conversions between shares, debt units and
underlying divide by the pool totals directly. Callers must accrue interest
first.
"""
from ..state.pool_ledger import PoolLedger
from ..errors import AccountingInvariantViolation
from ..constants import SCALE
from ..fixed_point import checked_add, mul_div, mul_div_up

def net_assets(ledger: PoolLedger, custody_balance: int) -> int:
    """Cash plus outstanding debt, less the reserve.

    Outstanding loans count at their underlying value (total_debt), so accrued
    interest net of the reserve flows to shareholders.
    """
    assets = checked_add(custody_balance, ledger.total_debt)
    if ledger.total_reserve > assets:
        raise AccountingInvariantViolation(
            f"Reserve {ledger.total_reserve} exceeds cash plus debt {assets}"
        )
    return assets - ledger.total_reserve

def lend_exchange_rate(ledger: PoolLedger, custody_balance: int, total_supply: int) -> int:
    """Underlying per share: (cash + debt - reserve) / share supply, for reporting"""
    if total_supply == 0:
        return SCALE
    return mul_div(net_assets(ledger, custody_balance), SCALE, total_supply)

def debt_exchange_rate(ledger: PoolLedger) -> int:
    """Underlying debt per borrowed unit, for reporting.

    Conversions below work from the totals so they keep full precision.
    """
    if not _check_debt(ledger):
        return SCALE
    return mul_div(ledger.total_debt, SCALE, ledger.total_borrowed)

def _check_debt(ledger: PoolLedger) -> bool:
    """True when units are outstanding"""
    if ledger.total_borrowed == 0:
        return False
    if ledger.total_debt < ledger.total_borrowed:
        raise AccountingInvariantViolation(
            f"Total debt {ledger.total_debt} below borrowed units {ledger.total_borrowed}"
        )
    return True

def units_to_underlying(ledger: PoolLedger, units: int) -> int:
    if not _check_debt(ledger):
        return units
    return mul_div(units, ledger.total_debt, ledger.total_borrowed)

def units_to_underlying_up(ledger: PoolLedger, units: int) -> int:
    """Underlying value of `units`, rounded up against the borrower"""
    if not _check_debt(ledger):
        return units
    return mul_div_up(units, ledger.total_debt, ledger.total_borrowed)

def underlying_to_units(ledger: PoolLedger, amount: int) -> int:
    """Debt units covering `amount`, rounded up against the borrower"""
    if not _check_debt(ledger):
        return amount
    return mul_div_up(amount, ledger.total_borrowed, ledger.total_debt)

def shares_for_underlying(amount: int, assets: int, total_supply: int) -> int:
    """Shares minted for `amount` against net assets, rounded down"""
    if total_supply == 0:
        return amount
    return mul_div(amount, total_supply, assets)

def underlying_for_shares(shares: int, assets: int, total_supply: int) -> int:
    """Underlying paid for `shares`, rounded down"""
    if total_supply == 0:
        return shares
    return mul_div(shares, assets, total_supply)
