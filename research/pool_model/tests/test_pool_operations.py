"""Tests for pool entry points: supply, redeem, collateral, borrow, repay, admin"""
import pytest

from pool_model.src.constants import SCALE, YEAR_IN_SECONDS
from pool_model.src.errors import (
    ClockRegressionError,
    ExternalTransferFailed,
    InsufficientCollateralError,
    InsufficientSharesError,
    InvalidAmountError,
    InvalidParameterError,
    OverRepaymentError,
    UnauthorizedError,
)
from pool_model.src.instructions.liquidity import Liquidity

TOKEN = 10**18
USD = 10**18


class TestSupplyRedeem:
    def test_fresh_pool_mints_one_to_one_and_redeems_back(self, harness):
        shares = harness.lend("lender", 1000 * TOKEN)
        assert shares == 1000 * TOKEN
        assert harness.shares.total_supply() == 1000 * TOKEN
        assert harness.ledger.total_deposited == 1000 * TOKEN

        assert harness.pool.redeem("lender", 1000 * TOKEN) == 1000 * TOKEN
        assert harness.underlying.balance_of("lender") == 1000 * TOKEN
        assert harness.shares.total_supply() == 0
        assert harness.ledger.total_deposited == 0
        assert harness.pool.lend_exchange_rate() == SCALE

    def test_round_trip_with_other_lenders(self, harness):
        harness.lend("lender", 5000 * TOKEN)
        shares = harness.lend("bob", 1234 * TOKEN)
        assert harness.pool.redeem("bob", shares) == 1234 * TOKEN

    def test_round_trip_at_a_grown_lend_rate(self, make_seasoned_harness):
        h = make_seasoned_harness()
        assert h.pool.lend_exchange_rate() > SCALE
        for amount in (7, 999 * TOKEN + 3, 10**27 + 1):
            shares = h.lend("carol", amount)
            assert amount - 2 <= h.pool.redeem("carol", shares) <= amount

    def test_redeem_more_than_held(self, harness):
        harness.lend("lender", 100 * TOKEN)
        before = harness.ledger.snapshot()
        with pytest.raises(InsufficientSharesError):
            harness.pool.redeem("lender", 100 * TOKEN + 1)
        assert harness.ledger.snapshot() == before

    @pytest.mark.parametrize("amount", [0, -5])
    def test_zero_or_negative_amounts(self, harness, amount):
        with pytest.raises(InvalidAmountError):
            harness.pool.supply("lender", amount)
        with pytest.raises(InvalidAmountError):
            harness.pool.redeem("lender", amount)

    def test_unfunded_supply_fails_without_side_effects(self, borrowing_harness):
        harness = borrowing_harness
        harness.pool.borrow("alice", 1000 * TOKEN)
        harness.clock.advance(3600)
        before = harness.ledger.snapshot()
        with pytest.raises(ExternalTransferFailed):
            harness.pool.supply("pauper", 10 * TOKEN)
        # the accrual that ran inside the failed call is undone too
        assert harness.ledger.snapshot() == before

    def test_redeem_blocked_by_missing_cash(self, borrowing_harness):
        h = borrowing_harness
        h.pool.borrow("alice", 900_000 * TOKEN)
        before = h.ledger.snapshot()
        with pytest.raises(ExternalTransferFailed):
            h.pool.redeem("lender", 200_000 * TOKEN)
        assert h.ledger.snapshot() == before
        assert h.shares.balance_of("lender") == 1_000_000 * TOKEN


class TestCollateral:
    def test_collateral_only_liquidity(self, harness):
        harness.post_collateral("alice", TOKEN)
        assert harness.pool.account_liquidity("alice") == Liquidity(excess=1600 * USD, shortfall=0)

    def test_add_requires_attached_value(self, harness):
        with pytest.raises(ExternalTransferFailed):
            harness.pool.add_collateral("alice", TOKEN)
        assert "alice" not in harness.ledger.positions

    def test_add_zero(self, harness):
        with pytest.raises(InvalidAmountError):
            harness.pool.add_collateral("alice", 0)

    def test_remove_without_debt_is_unconstrained(self, harness):
        harness.post_collateral("alice", 5 * TOKEN)
        harness.pool.set_ltv("admin", 0)
        harness.pool.remove_collateral("alice", 5 * TOKEN)
        assert harness.native.balance_of("alice") == 5 * TOKEN
        assert harness.ledger.position("alice").is_closed

    def test_remove_more_than_balance(self, harness):
        harness.post_collateral("alice", TOKEN)
        with pytest.raises(InvalidAmountError):
            harness.pool.remove_collateral("alice", TOKEN + 1)

    def test_remove_gated_by_debt(self, borrowing_harness):
        h = borrowing_harness
        h.pool.borrow("alice", 800_000 * TOKEN)  # exactly half the borrowing power
        h.pool.remove_collateral("alice", 500 * TOKEN)
        with pytest.raises(InsufficientCollateralError):
            h.pool.remove_collateral("alice", 1)
        assert h.ledger.position("alice").collateral_balance == 500 * TOKEN

    def test_rejected_payout_rolls_back(self, harness):
        harness.post_collateral("alice", TOKEN)
        harness.native.rejecting.add("alice")
        with pytest.raises(ExternalTransferFailed):
            harness.pool.remove_collateral("alice", TOKEN)
        assert harness.ledger.position("alice").collateral_balance == TOKEN
        assert harness.pool.invariant_violations() == []


class TestBorrow:
    def test_borrow_to_the_boundary_then_one_more_fails(self, harness):
        harness.lend("lender", 2_000_000 * TOKEN)
        harness.post_collateral("alice", TOKEN)

        units = harness.pool.borrow("alice", 1600 * TOKEN)
        assert units == 1600 * TOKEN
        assert harness.pool.account_liquidity("alice") == Liquidity(0, 0)

        before = harness.ledger.snapshot()
        with pytest.raises(InsufficientCollateralError):
            harness.pool.borrow("alice", 1)
        assert harness.ledger.snapshot() == before

    def test_borrow_updates_totals_and_pays_out(self, borrowing_harness):
        h = borrowing_harness
        h.pool.borrow("alice", 1000 * TOKEN)
        assert h.underlying.balance_of("alice") == 1000 * TOKEN
        assert h.ledger.total_borrowed == 1000 * TOKEN
        assert h.ledger.total_debt == 1000 * TOKEN
        assert h.ledger.position("alice").borrowed_units == 1000 * TOKEN
        assert h.pool.cash() == 999_000 * TOKEN

    def test_borrow_after_interest_issues_fewer_units(self, borrowing_harness):
        h = borrowing_harness
        h.pool.borrow("alice", 100_000 * TOKEN)
        h.clock.advance(YEAR_IN_SECONDS)
        h.post_collateral("bob", 1000 * TOKEN)
        units = h.pool.borrow("bob", 100_000 * TOKEN)
        assert units < 100_000 * TOKEN
        # owed is the amount drawn, rounded up by at most two wei
        assert 0 <= h.pool.borrow_balance("bob") - 100_000 * TOKEN <= 2

    def test_borrow_does_not_dilute_existing_debt(self, borrowing_harness):
        h = borrowing_harness
        h.pool.borrow("alice", 100_000 * TOKEN)
        h.clock.advance(YEAR_IN_SECONDS)
        h.post_collateral("bob", 1000 * TOKEN)
        h.pool.accrue_interest()
        debt_rate = h.pool.debt_exchange_rate()
        alice_owes = h.pool.borrow_balance("alice")
        debt_before = h.ledger.total_debt

        h.pool.borrow("bob", 100_000 * TOKEN)
        assert h.pool.debt_exchange_rate() >= debt_rate
        assert 0 <= h.pool.borrow_balance("alice") - alice_owes <= 1
        # every position together never owes more than the pool books
        owed = h.pool.borrow_balance("alice") + h.pool.borrow_balance("bob")
        assert 0 <= h.ledger.total_debt - owed <= 2
        assert h.ledger.total_debt - debt_before >= 100_000 * TOKEN

    def test_no_collateral_no_borrow(self, borrowing_harness):
        with pytest.raises(InsufficientCollateralError):
            borrowing_harness.pool.borrow("mallory", 1)

    def test_borrow_zero(self, borrowing_harness):
        with pytest.raises(InvalidAmountError):
            borrowing_harness.pool.borrow("alice", 0)

    def test_borrow_beyond_cash_rolls_back(self, harness):
        harness.lend("lender", 10 * TOKEN)
        harness.post_collateral("alice", TOKEN)
        before = harness.ledger.snapshot()
        with pytest.raises(ExternalTransferFailed):
            harness.pool.borrow("alice", 11 * TOKEN)
        assert harness.ledger.snapshot() == before


class TestRepay:
    def test_over_repayment_is_rejected(self, borrowing_harness):
        h = borrowing_harness
        h.pool.borrow("alice", 1000 * TOKEN)
        h.clock.advance(30 * 24 * 3600)
        h.fund("alice", underlying=100 * TOKEN)

        owed = h.pool.borrow_balance("alice")
        assert owed > 1000 * TOKEN
        before = h.ledger.snapshot()
        wallet = h.underlying.balance_of("alice")
        with pytest.raises(OverRepaymentError):
            h.pool.repay("alice", owed + 1)
        assert h.ledger.snapshot() == before
        assert h.underlying.balance_of("alice") == wallet

    def test_full_repayment_closes_the_debt(self, borrowing_harness):
        h = borrowing_harness
        h.pool.borrow("alice", 1000 * TOKEN)
        h.clock.advance(7 * 24 * 3600)
        h.fund("alice", underlying=100 * TOKEN)

        owed = h.pool.borrow_balance("alice")
        h.pool.repay("alice", owed)
        assert h.ledger.position("alice").borrowed_units == 0
        assert h.ledger.total_borrowed == 0
        assert h.ledger.total_debt == 0
        assert h.pool.debt_exchange_rate() == SCALE

        # and collateral is free again
        h.pool.remove_collateral("alice", 1000 * TOKEN)
        assert h.ledger.position("alice").is_closed

    def test_partial_repayment(self, borrowing_harness):
        h = borrowing_harness
        h.pool.borrow("alice", 1000 * TOKEN)
        units = h.pool.repay("alice", 400 * TOKEN)
        assert units == 400 * TOKEN
        assert h.ledger.total_debt == 600 * TOKEN
        assert h.ledger.position("alice").borrowed_units == 600 * TOKEN

    def test_partial_repayment_keeps_other_debt_whole(self, make_seasoned_harness):
        h = make_seasoned_harness()
        h.pool.borrow("bob", 123_456 * TOKEN + 789)
        h.clock.advance(86_400)
        h.pool.accrue_interest()
        debt_rate = h.pool.debt_exchange_rate()
        alice_owes = h.pool.borrow_balance("alice")

        h.pool.repay("bob", 50_000 * TOKEN + 1)
        assert h.pool.debt_exchange_rate() >= debt_rate
        assert h.pool.borrow_balance("alice") >= alice_owes
        assert h.pool.invariant_violations() == []

    def test_repay_without_funds(self, borrowing_harness):
        h = borrowing_harness
        h.pool.borrow("alice", 1000 * TOKEN)
        h.underlying.balances["alice"] = 0  # loan spent elsewhere
        before = h.ledger.snapshot()
        with pytest.raises(ExternalTransferFailed):
            h.pool.repay("alice", 10 * TOKEN)
        assert h.ledger.snapshot() == before


class TestAccrualThroughPool:
    def test_year_of_interest(self, borrowing_harness):
        h = borrowing_harness
        h.pool.borrow("alice", 500_000 * TOKEN)
        debt_before = h.ledger.total_debt
        debt_rate_before = h.pool.debt_exchange_rate()
        lend_rate_before = h.pool.lend_exchange_rate()

        h.clock.advance(YEAR_IN_SECONDS)
        h.pool.accrue_interest()

        debt_rate_after = h.pool.debt_exchange_rate()
        lend_rate_after = h.pool.lend_exchange_rate()
        assert h.ledger.total_debt > debt_before
        assert h.ledger.total_reserve > 0
        assert debt_rate_after > debt_rate_before
        assert lend_rate_after > lend_rate_before
        assert lend_rate_after - lend_rate_before < debt_rate_after - debt_rate_before

    def test_lender_earns_interest_net_of_reserve(self, borrowing_harness):
        h = borrowing_harness
        h.pool.borrow("alice", 500_000 * TOKEN)
        h.clock.advance(YEAR_IN_SECONDS)
        h.pool.accrue_interest()
        interest = h.ledger.total_debt - 500_000 * TOKEN
        expected = 1_000_000 * TOKEN + interest - h.ledger.total_reserve
        assert abs(h.pool.supply_balance("lender") - expected) <= 10**7

    def test_views_do_not_mutate(self, borrowing_harness):
        h = borrowing_harness
        h.pool.borrow("alice", 500_000 * TOKEN)
        h.clock.advance(YEAR_IN_SECONDS)
        before = h.ledger.snapshot()
        h.pool.borrow_balance("alice")
        h.pool.lend_exchange_rate()
        h.pool.account_liquidity("alice")
        h.pool.borrow_rate_per_second()
        h.pool.supply_rate_per_second()
        assert h.ledger.snapshot() == before

    def test_utilization_and_rates(self, borrowing_harness):
        h = borrowing_harness
        assert h.pool.utilization() == 0
        assert h.pool.borrow_rate_per_second() == h.pool.config.base_rate_per_second
        h.pool.borrow("alice", 250_000 * TOKEN)
        assert h.pool.utilization() == SCALE // 4
        assert h.pool.supply_rate_per_second() < h.pool.borrow_rate_per_second()

    def test_clock_regression_fails_the_operation(self, borrowing_harness):
        h = borrowing_harness
        h.clock.advance(-1)
        with pytest.raises(ClockRegressionError):
            h.pool.supply("lender", 1)


class TestAdmin:
    def test_controller_sets_ltv(self, harness):
        harness.pool.set_ltv("admin", 5)
        assert harness.ledger.ltv == 5
        harness.post_collateral("alice", TOKEN)
        assert harness.pool.account_liquidity("alice").excess == 1000 * USD

    def test_other_callers_are_rejected(self, harness):
        with pytest.raises(UnauthorizedError):
            harness.pool.set_ltv("alice", 10)
        assert harness.ledger.ltv == 8

    @pytest.mark.parametrize("ltv", [11, -1, 7.5])
    def test_out_of_range(self, harness, ltv):
        with pytest.raises(InvalidParameterError):
            harness.pool.set_ltv("admin", ltv)
