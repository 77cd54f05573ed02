"""Native collateral deposits and withdrawals"""
import logging

from ..errors import ExternalTransferFailed, InvalidAmountError
from .accrue_interest import accrue_interest
from .context import PoolContext, require_positive
from .liquidity import require_withdraw_allowed

logger = logging.getLogger(__name__)

def add_collateral(ctx: PoolContext, account: str, amount: int, now: int) -> None:
    """Credit collateral attached to the call"""
    require_positive(amount)
    accrue_interest(ctx.ledger, ctx.config, now)

    ctx.collateral.receive(account, amount)
    ctx.ledger.position(account).update_collateral(amount)

    logger.info("AddCollateral account=%s amount=%s", account, amount)

def remove_collateral(ctx: PoolContext, account: str, amount: int, now: int) -> None:
    """Withdraw collateral, gated on solvency while the account has debt"""
    require_positive(amount)
    accrue_interest(ctx.ledger, ctx.config, now)

    balance = ctx.ledger.peek(account).collateral_balance
    if amount > balance:
        raise InvalidAmountError(f"{account} has {balance} collateral, cannot remove {amount}")
    require_withdraw_allowed(ctx.ledger, ctx.config, ctx.oracle, account, amount)

    ctx.ledger.position(account).update_collateral(-amount)
    if not ctx.collateral.transfer_out(account, amount):
        raise ExternalTransferFailed(f"Collateral payout of {amount} to {account} was rejected")

    logger.info("RemoveCollateral account=%s amount=%s", account, amount)
