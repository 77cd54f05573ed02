"""Shared fixtures: a pool wired to in-memory collaborators and a manual clock"""
from dataclasses import dataclass

import pytest

from pool_model.src.adapters.memory import (
    InMemoryNativeCustody,
    InMemoryShareToken,
    InMemoryToken,
    StaticPriceFeed,
)
from pool_model.src.adapters.price_oracle import ExchangeRateOracle
from pool_model.src.pool import LendingPool
from pool_model.src.constants import YEAR_IN_SECONDS
from pool_model.src.state.pool_config import PoolConfig

TOKEN = 10**18
START_TIME = 1_700_000_000
COLLATERAL_PRICE = 2000 * 10**8  # $2000, 8 decimal feed
UNDERLYING_PRICE = 1 * 10**8     # $1, 8 decimal feed


class ManualClock:
    def __init__(self, now: int = START_TIME):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> int:
        self.now += seconds
        return self.now


@dataclass
class Harness:
    pool: LendingPool
    clock: ManualClock
    underlying: InMemoryToken
    native: InMemoryNativeCustody
    shares: InMemoryShareToken
    collateral_feed: StaticPriceFeed
    underlying_feed: StaticPriceFeed

    @property
    def ledger(self):
        return self.pool.ledger

    def fund(self, account: str, underlying: int = 0, native: int = 0):
        if underlying:
            self.underlying.mint(account, underlying)
        if native:
            self.native.fund(account, native)

    def lend(self, account: str, amount: int) -> int:
        self.fund(account, underlying=amount)
        return self.pool.supply(account, amount)

    def post_collateral(self, account: str, amount: int):
        self.fund(account, native=amount)
        self.pool.add_collateral(account, amount)


def build_harness(config: PoolConfig = None) -> Harness:
    clock = ManualClock()
    underlying = InMemoryToken("USDX")
    native = InMemoryNativeCustody()
    shares = InMemoryShareToken()
    collateral_feed = StaticPriceFeed(COLLATERAL_PRICE, 8)
    underlying_feed = StaticPriceFeed(UNDERLYING_PRICE, 8)
    pool = LendingPool(
        config=config or PoolConfig(controller="admin"),
        oracle=ExchangeRateOracle(collateral_feed, underlying_feed),
        underlying=underlying,
        collateral_custody=native,
        shares=shares,
        clock=clock,
    )
    return Harness(pool, clock, underlying, native, shares, collateral_feed, underlying_feed)


@pytest.fixture
def make_harness():
    """Factory for fresh pools; safe to call repeatedly inside one test"""
    return build_harness


@pytest.fixture
def harness():
    return build_harness()


@pytest.fixture
def borrowing_harness(harness):
    """Pool with 1M underlying supplied by lender and alice holding 1000 collateral"""
    harness.lend("lender", 1_000_000 * TOKEN)
    harness.post_collateral("alice", 1000 * TOKEN)
    return harness


def build_seasoned_harness() -> Harness:
    """Pool after a year with alice owing on half the deposits; bob holds 1000 collateral"""
    harness = build_harness()
    harness.lend("lender", 1_000_000 * TOKEN)
    harness.post_collateral("alice", 1000 * TOKEN)
    harness.pool.borrow("alice", 500_000 * TOKEN)
    harness.clock.advance(YEAR_IN_SECONDS)
    harness.pool.accrue_interest()
    harness.post_collateral("bob", 1000 * TOKEN)
    return harness


@pytest.fixture
def make_seasoned_harness():
    return build_seasoned_harness
