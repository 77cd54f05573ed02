"""Controller-only parameter updates"""
import logging

from ..errors import UnauthorizedError
from ..state.pool_config import validate_ltv
from .accrue_interest import accrue_interest
from .context import PoolContext

logger = logging.getLogger(__name__)

def set_ltv(ctx: PoolContext, caller: str, ltv: int, now: int) -> None:
    if caller != ctx.config.controller:
        raise UnauthorizedError(f"{caller} is not the pool controller")
    validate_ltv(ltv)
    accrue_interest(ctx.ledger, ctx.config, now)

    previous = ctx.ledger.ltv
    ctx.ledger.ltv = ltv
    logger.info("SetLtv caller=%s ltv=%s previous=%s", caller, ltv, previous)
