"""Account solvency in USD terms"""
from dataclasses import dataclass

from ..adapters.price_oracle import ExchangeRateOracle
from ..state.pool_config import PoolConfig
from ..state.pool_ledger import PoolLedger
from ..errors import InsufficientCollateralError
from ..constants import LTV_SCALE
from ..fixed_point import checked_add, checked_sub, mul_div
from .exchange_rates import units_to_underlying

@dataclass(frozen=True)
class Liquidity:
    """USD headroom (excess) or deficit (shortfall), 18 decimals.

    At most one of the two is nonzero.
    """
    excess: int
    shortfall: int

    @property
    def is_solvent(self) -> bool:
        return self.shortfall == 0

def borrow_balance(ledger: PoolLedger, account: str) -> int:
    """Underlying owed by account at the current debt rate"""
    units = ledger.peek(account).borrowed_units
    return units_to_underlying(ledger, units)

def hypothetical_liquidity(
    ledger: PoolLedger,
    config: PoolConfig,
    oracle: ExchangeRateOracle,
    account: str,
    withdraw_collateral: int = 0,
    borrow_amount: int = 0
) -> Liquidity:
    """Liquidity of account as if it withdrew and/or borrowed the given amounts.

    Prices are read from the oracle on every call.
    """
    position = ledger.peek(account)
    collateral = checked_sub(position.collateral_balance, withdraw_collateral)
    debt = checked_add(borrow_balance(ledger, account), borrow_amount)

    underlying_price = oracle.underlying_price()
    collateral_price = oracle.collateral_price()

    # debt_usd = debt * underlying_price
    debt_usd = mul_div(debt, underlying_price, config.underlying_unit)
    # collateral_usd = (collateral * ltv / 10) * collateral_price
    haircut_collateral = mul_div(collateral, ledger.ltv, LTV_SCALE)
    collateral_usd = mul_div(haircut_collateral, collateral_price, config.collateral_unit)

    if collateral_usd >= debt_usd:
        return Liquidity(excess=collateral_usd - debt_usd, shortfall=0)
    return Liquidity(excess=0, shortfall=debt_usd - collateral_usd)

def account_liquidity(
    ledger: PoolLedger,
    config: PoolConfig,
    oracle: ExchangeRateOracle,
    account: str
) -> Liquidity:
    return hypothetical_liquidity(ledger, config, oracle, account)

def require_borrow_allowed(
    ledger: PoolLedger,
    config: PoolConfig,
    oracle: ExchangeRateOracle,
    account: str,
    amount: int
) -> None:
    liquidity = hypothetical_liquidity(ledger, config, oracle, account, borrow_amount=amount)
    if not liquidity.is_solvent:
        raise InsufficientCollateralError(
            f"Borrow of {amount} by {account} leaves a shortfall of {liquidity.shortfall} USD"
        )

def require_withdraw_allowed(
    ledger: PoolLedger,
    config: PoolConfig,
    oracle: ExchangeRateOracle,
    account: str,
    amount: int
) -> None:
    if ledger.peek(account).borrowed_units == 0:
        return
    liquidity = hypothetical_liquidity(ledger, config, oracle, account, withdraw_collateral=amount)
    if not liquidity.is_solvent:
        raise InsufficientCollateralError(
            f"Withdrawing {amount} collateral leaves {account} with a shortfall of {liquidity.shortfall} USD"
        )
