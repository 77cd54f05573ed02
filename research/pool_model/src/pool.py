"""Lending pool entry points

LendingPool serializes every call behind one re-entrant lock and runs it as
an atomic transaction over the ledger: the ledger is snapshotted before
accrual and restored if anything raises, so a failed call leaves no trace.
Read-only views accrue on the live ledger to price at the current time and
are then rolled back as well.
"""
import logging
import threading
import time
from contextlib import contextmanager
from typing import Callable, List, Optional

from .adapters.interfaces import CollateralCustody, ShareToken, UnderlyingCustody
from .adapters.price_oracle import ExchangeRateOracle
from .state.pool_config import PoolConfig
from .state.pool_ledger import PoolLedger
from .errors import AccountingInvariantViolation
from .instructions import admin, borrow as borrowing, collateral, supply as supplying
from .instructions.accrue_interest import AccrualResult, accrue_interest
from .instructions.context import PoolContext
from .instructions.exchange_rates import debt_exchange_rate
from .instructions.liquidity import Liquidity, account_liquidity, borrow_balance

logger = logging.getLogger(__name__)


def system_clock() -> int:
    return int(time.time())


class LendingPool:
    def __init__(
        self,
        config: PoolConfig,
        oracle: ExchangeRateOracle,
        underlying: UnderlyingCustody,
        collateral_custody: CollateralCustody,
        shares: ShareToken,
        clock: Callable[[], int] = system_clock,
        address: str = "pool",
        ledger: Optional[PoolLedger] = None,
    ):
        self._clock = clock
        self._lock = threading.RLock()
        if ledger is None:
            ledger = PoolLedger(ltv=config.initial_ltv, accrual_timestamp=clock())
        self.ctx = PoolContext(
            ledger=ledger,
            config=config,
            oracle=oracle,
            underlying=underlying,
            collateral=collateral_custody,
            shares=shares,
            address=address,
        )

    @property
    def ledger(self) -> PoolLedger:
        return self.ctx.ledger

    @property
    def config(self) -> PoolConfig:
        return self.ctx.config

    @contextmanager
    def _transaction(self, name: str):
        with self._lock:
            snapshot = self.ledger.snapshot()
            try:
                yield self._clock()
            except Exception as e:
                self.ledger.restore(snapshot)
                logger.debug("Rolled back %s: %s", name, e)
                raise

    @contextmanager
    def _view(self):
        """Accrue to now for reading, then discard every change"""
        with self._lock:
            snapshot = self.ledger.snapshot()
            try:
                accrue_interest(self.ledger, self.config, self._clock())
                yield
            finally:
                self.ledger.restore(snapshot)

    # State-changing operations

    def accrue_interest(self) -> AccrualResult:
        with self._transaction("accrue_interest") as now:
            return accrue_interest(self.ledger, self.config, now)

    def supply(self, account: str, amount: int) -> int:
        with self._transaction("supply") as now:
            return supplying.supply(self.ctx, account, amount, now)

    def redeem(self, account: str, shares: int) -> int:
        with self._transaction("redeem") as now:
            return supplying.redeem(self.ctx, account, shares, now)

    def add_collateral(self, account: str, amount: int) -> None:
        with self._transaction("add_collateral") as now:
            collateral.add_collateral(self.ctx, account, amount, now)

    def remove_collateral(self, account: str, amount: int) -> None:
        with self._transaction("remove_collateral") as now:
            collateral.remove_collateral(self.ctx, account, amount, now)

    def borrow(self, account: str, amount: int) -> int:
        with self._transaction("borrow") as now:
            return borrowing.borrow(self.ctx, account, amount, now)

    def repay(self, account: str, amount: int) -> int:
        with self._transaction("repay") as now:
            return borrowing.repay(self.ctx, account, amount, now)

    def set_ltv(self, caller: str, ltv: int) -> None:
        with self._transaction("set_ltv") as now:
            admin.set_ltv(self.ctx, caller, ltv, now)

    # Views

    def cash(self) -> int:
        return self.ctx.cash()

    def lend_exchange_rate(self) -> int:
        with self._view():
            return self.ctx.lend_rate()

    def debt_exchange_rate(self) -> int:
        with self._view():
            return debt_exchange_rate(self.ledger)

    def borrow_balance(self, account: str) -> int:
        with self._view():
            return borrow_balance(self.ledger, account)

    def supply_balance(self, account: str) -> int:
        """Underlying redeemable for account's shares"""
        with self._view():
            return self.ctx.underlying_for(self.ctx.shares.balance_of(account))

    def account_liquidity(self, account: str) -> Liquidity:
        with self._view():
            return account_liquidity(self.ledger, self.config, self.ctx.oracle, account)

    def utilization(self) -> int:
        with self._view():
            return self.config.rate_model.utilization(
                self.ledger.total_deposited, self.ledger.total_borrowed, self.ledger.total_reserve
            )

    def borrow_rate_per_second(self) -> int:
        return self.config.rate_model.borrow_rate(self.utilization())

    def supply_rate_per_second(self) -> int:
        return self.config.rate_model.supply_rate(self.utilization())

    def invariant_violations(self) -> List[str]:
        """Ledger invariants that do not hold right now, empty when consistent"""
        with self._lock:
            ledger = self.ledger
            problems = []
            if ledger.total_debt < ledger.total_borrowed:
                problems.append(f"total_debt {ledger.total_debt} < total_borrowed {ledger.total_borrowed}")
            units = ledger.sum_borrowed_units()
            if units != ledger.total_borrowed:
                problems.append(f"sum of borrowed units {units} != total_borrowed {ledger.total_borrowed}")
            held = self.ctx.collateral.balance_of(self.ctx.address)
            if ledger.total_collateral() != held:
                problems.append(f"sum of collateral {ledger.total_collateral()} != collateral held {held}")
            return problems

    def verify_invariants(self) -> None:
        problems = self.invariant_violations()
        if problems:
            raise AccountingInvariantViolation("; ".join(problems))
