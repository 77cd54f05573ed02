"""In-memory collaborators used by tests and the research simulation"""
from dataclasses import dataclass, field
from typing import Dict, Tuple

from ..errors import ExternalTransferFailed, InsufficientSharesError, PriceFeedError


@dataclass
class InMemoryToken:
    """Fungible underlying asset with a single custodian account (the pool)"""
    symbol: str
    custodian: str = "pool"
    balances: Dict[str, int] = field(default_factory=dict)

    def balance_of(self, holder: str) -> int:
        return self.balances.get(holder, 0)

    def mint(self, to: str, amount: int) -> None:
        self.balances[to] = self.balance_of(to) + amount

    def _move(self, sender: str, recipient: str, amount: int) -> None:
        if amount < 0 or self.balance_of(sender) < amount:
            raise ExternalTransferFailed(
                f"{self.symbol}: {sender} cannot transfer {amount} (balance {self.balance_of(sender)})"
            )
        self.balances[sender] = self.balance_of(sender) - amount
        self.balances[recipient] = self.balance_of(recipient) + amount

    def transfer_in(self, sender: str, amount: int) -> None:
        self._move(sender, self.custodian, amount)

    def transfer_out(self, recipient: str, amount: int) -> None:
        self._move(self.custodian, recipient, amount)


@dataclass
class InMemoryNativeCustody:
    """Native collateral wallets; payouts report failure instead of raising"""
    custodian: str = "pool"
    balances: Dict[str, int] = field(default_factory=dict)
    rejecting: set = field(default_factory=set)  # recipients whose payouts bounce

    def balance_of(self, holder: str) -> int:
        return self.balances.get(holder, 0)

    def fund(self, holder: str, amount: int) -> None:
        self.balances[holder] = self.balance_of(holder) + amount

    def receive(self, sender: str, amount: int) -> None:
        if self.balance_of(sender) < amount:
            raise ExternalTransferFailed(f"{sender} attached {amount} but holds {self.balance_of(sender)}")
        self.balances[sender] -= amount
        self.fund(self.custodian, amount)

    def transfer_out(self, recipient: str, amount: int) -> bool:
        if recipient in self.rejecting or self.balance_of(self.custodian) < amount:
            return False
        self.balances[self.custodian] -= amount
        self.fund(recipient, amount)
        return True


@dataclass
class InMemoryShareToken:
    """Pool share ledger"""
    balances: Dict[str, int] = field(default_factory=dict)
    supply: int = 0

    def balance_of(self, holder: str) -> int:
        return self.balances.get(holder, 0)

    def total_supply(self) -> int:
        return self.supply

    def mint(self, to: str, amount: int) -> None:
        self.balances[to] = self.balance_of(to) + amount
        self.supply += amount

    def burn(self, owner: str, amount: int) -> None:
        if amount > self.balance_of(owner):
            raise InsufficientSharesError(f"{owner} holds {self.balance_of(owner)} shares, cannot burn {amount}")
        self.balances[owner] -= amount
        self.supply -= amount


@dataclass
class StaticPriceFeed:
    """Price feed returning a settable answer, optionally failing first N reads"""
    price: int
    decimals: int = 8
    failures: int = 0
    reads: int = 0

    def set_price(self, price: int) -> None:
        self.price = price

    def latest_price(self) -> Tuple[int, int]:
        self.reads += 1
        if self.failures > 0:
            self.failures -= 1
            raise PriceFeedError("feed unavailable")
        return self.price, self.decimals
