"""Borrow and repay underlying against collateral"""
import logging

from ..errors import OverRepaymentError
from ..fixed_point import checked_add, checked_sub
from .accrue_interest import accrue_interest
from .context import PoolContext, require_positive
from .exchange_rates import underlying_to_units, units_to_underlying_up
from .liquidity import require_borrow_allowed

logger = logging.getLogger(__name__)

def borrow(ctx: PoolContext, account: str, amount: int, now: int) -> int:
    """Draw `amount` underlying, returns debt units issued"""
    require_positive(amount)
    accrue_interest(ctx.ledger, ctx.config, now)
    require_borrow_allowed(ctx.ledger, ctx.config, ctx.oracle, account, amount)

    ledger = ctx.ledger
    units = underlying_to_units(ledger, amount)
    # debt is booked at the rounded-up value of the units so the debt rate never falls
    debt = units_to_underlying_up(ledger, units)

    ledger.position(account).update_borrowed_units(units)
    ledger.total_borrowed = checked_add(ledger.total_borrowed, units)
    ledger.total_debt = checked_add(ledger.total_debt, debt)
    ctx.underlying.transfer_out(account, amount)

    logger.info("Borrow account=%s amount=%s units=%s debt=%s", account, amount, units, debt)
    return units

def repay(ctx: PoolContext, account: str, amount: int, now: int) -> int:
    """Pay back `amount` underlying, returns debt units retired"""
    require_positive(amount)
    accrue_interest(ctx.ledger, ctx.config, now)

    ledger = ctx.ledger
    units = underlying_to_units(ledger, amount)
    owed_units = ledger.peek(account).borrowed_units
    if units > owed_units:
        raise OverRepaymentError(
            f"Repaying {amount} retires {units} units but {account} owes {owed_units}"
        )

    ctx.underlying.transfer_in(account, amount)
    ledger.position(account).update_borrowed_units(-units)
    ledger.total_borrowed = checked_sub(ledger.total_borrowed, units)
    ledger.total_debt = checked_sub(ledger.total_debt, amount)
    if ledger.total_borrowed == 0:
        # rounding dust left once every unit is retired
        ledger.total_debt = 0

    logger.info("Repay account=%s amount=%s units=%s", account, amount, units)
    return units
