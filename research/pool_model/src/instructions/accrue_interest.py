"""Interest accrual"""
import logging
from dataclasses import dataclass

from ..state.pool_config import PoolConfig
from ..state.pool_ledger import PoolLedger
from ..errors import ClockRegressionError
from ..constants import SCALE
from ..fixed_point import checked_add, checked_mul, mul_div

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class AccrualResult:
    time_elapsed: int
    borrow_rate: int
    interest_accrued: int
    reserve_increase: int

def accrue_interest(ledger: PoolLedger, config: PoolConfig, now: int) -> AccrualResult:
    """Advance total_debt and total_reserve to `now`.

    Interest is simple within one call (rate * elapsed) and compounds across
    calls. It is charged against total_borrowed, the debt unit count, so only
    total_debt grows and the debt exchange rate rises.
    """
    if now < ledger.accrual_timestamp:
        raise ClockRegressionError(
            f"Accrual at {now} is before last accrual at {ledger.accrual_timestamp}"
        )
    time_elapsed = now - ledger.accrual_timestamp
    if time_elapsed == 0:
        return AccrualResult(0, 0, 0, 0)

    rate_model = config.rate_model
    utilization = rate_model.utilization(
        ledger.total_deposited,
        ledger.total_borrowed,
        ledger.total_reserve
    )
    borrow_rate = rate_model.borrow_rate(utilization)

    # interest_accrued = rate * dt * total_borrowed
    interest_factor = checked_mul(borrow_rate, time_elapsed)
    interest_accrued = mul_div(interest_factor, ledger.total_borrowed, SCALE)
    reserve_increase = mul_div(interest_accrued, config.reserve_factor, SCALE)

    total_debt = checked_add(ledger.total_debt, interest_accrued)
    total_reserve = checked_add(ledger.total_reserve, reserve_increase)

    # Update pool state
    ledger.total_debt = total_debt
    ledger.total_reserve = total_reserve
    ledger.accrual_timestamp = now

    logger.debug(
        "Accrued interest dt=%s utilization=%s rate=%s interest=%s reserve+=%s",
        time_elapsed, utilization, borrow_rate, interest_accrued, reserve_increase
    )
    return AccrualResult(time_elapsed, borrow_rate, interest_accrued, reserve_increase)
