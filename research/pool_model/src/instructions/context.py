"""Handles every instruction needs: ledger, config and collaborators"""
from dataclasses import dataclass

from ..adapters.interfaces import CollateralCustody, ShareToken, UnderlyingCustody
from ..adapters.price_oracle import ExchangeRateOracle
from ..state.pool_config import PoolConfig
from ..state.pool_ledger import PoolLedger
from ..errors import InvalidAmountError
from .exchange_rates import lend_exchange_rate, net_assets, shares_for_underlying, underlying_for_shares

@dataclass
class PoolContext:
    ledger: PoolLedger
    config: PoolConfig
    oracle: ExchangeRateOracle
    underlying: UnderlyingCustody
    collateral: CollateralCustody
    shares: ShareToken
    address: str = "pool"  # the pool's own holder identity at both custodies

    def cash(self) -> int:
        """Underlying actually held by the pool"""
        return self.underlying.balance_of(self.address)

    def lend_rate(self) -> int:
        return lend_exchange_rate(self.ledger, self.cash(), self.shares.total_supply())

    def shares_for(self, amount: int) -> int:
        return shares_for_underlying(amount, net_assets(self.ledger, self.cash()), self.shares.total_supply())

    def underlying_for(self, shares: int) -> int:
        return underlying_for_shares(shares, net_assets(self.ledger, self.cash()), self.shares.total_supply())

def require_positive(amount: int, what: str = "amount") -> int:
    if not isinstance(amount, int) or isinstance(amount, bool) or amount <= 0:
        raise InvalidAmountError(f"{what} must be a positive integer, got {amount!r}")
    return amount
