"""Supply and redeem underlying for pool shares"""
import logging

from ..errors import InsufficientSharesError, InvalidAmountError
from ..fixed_point import checked_add
from .accrue_interest import accrue_interest
from .context import PoolContext, require_positive

logger = logging.getLogger(__name__)

def supply(ctx: PoolContext, account: str, amount: int, now: int) -> int:
    """Deposit `amount` underlying from account, returns shares minted"""
    require_positive(amount)
    accrue_interest(ctx.ledger, ctx.config, now)

    # Priced before the deposit lands in custody
    lend_rate = ctx.lend_rate()
    shares = ctx.shares_for(amount)
    if shares == 0:
        raise InvalidAmountError(f"Supply of {amount} is worth less than one share at rate {lend_rate}")

    ctx.underlying.transfer_in(account, amount)
    ctx.ledger.total_deposited = checked_add(ctx.ledger.total_deposited, amount)
    ctx.shares.mint(account, shares)

    logger.info("Supply account=%s amount=%s shares=%s rate=%s", account, amount, shares, lend_rate)
    return shares

def redeem(ctx: PoolContext, account: str, shares: int, now: int) -> int:
    """Burn `shares` from account, returns underlying paid out"""
    require_positive(shares, "shares")
    accrue_interest(ctx.ledger, ctx.config, now)

    balance = ctx.shares.balance_of(account)
    if shares > balance:
        raise InsufficientSharesError(f"{account} holds {balance} shares, cannot redeem {shares}")

    lend_rate = ctx.lend_rate()
    underlying = ctx.underlying_for(shares)

    # total_deposited tracks principal; redeemed interest can take it past zero
    ctx.ledger.total_deposited = max(ctx.ledger.total_deposited - underlying, 0)
    ctx.underlying.transfer_out(account, underlying)
    ctx.shares.burn(account, shares)
    if ctx.shares.total_supply() == 0:
        # no shares left, so no deposits are outstanding
        ctx.ledger.total_deposited = 0

    logger.info("Redeem account=%s shares=%s amount=%s rate=%s", account, shares, underlying, lend_rate)
    return underlying
