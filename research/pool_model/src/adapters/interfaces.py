"""Read/write contracts for the pool's external collaborators"""
from typing import Protocol, Tuple


class UnderlyingCustody(Protocol):
    """Custody of the underlying asset held by the pool.

    Transfers are exact-amount; a shortfall raises ExternalTransferFailed.
    """

    def transfer_in(self, sender: str, amount: int) -> None: ...

    def transfer_out(self, recipient: str, amount: int) -> None: ...

    def balance_of(self, holder: str) -> int: ...


class CollateralCustody(Protocol):
    """Native collateral: value attached to the call, paid out by push"""

    def receive(self, sender: str, amount: int) -> None: ...

    def transfer_out(self, recipient: str, amount: int) -> bool: ...

    def balance_of(self, holder: str) -> int: ...


class PriceFeed(Protocol):
    def latest_price(self) -> Tuple[int, int]:
        """Return (price, decimals) for one whole unit of the asset in USD"""
        ...


class ShareToken(Protocol):
    def mint(self, to: str, amount: int) -> None: ...

    def burn(self, owner: str, amount: int) -> None: ...

    def balance_of(self, holder: str) -> int: ...

    def total_supply(self) -> int: ...
