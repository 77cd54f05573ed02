"""Pool configuration"""
from dataclasses import dataclass

from ..constants import (
    DEFAULT_BASE_RATE_PER_SECOND,
    DEFAULT_COLLATERAL_DECIMALS,
    DEFAULT_LTV,
    DEFAULT_MULTIPLIER_PER_SECOND,
    DEFAULT_RESERVE_FACTOR,
    DEFAULT_UNDERLYING_DECIMALS,
    MAX_LTV,
    SCALE,
)
from ..errors import InvalidParameterError
from .rate_model import InterestRateModel

@dataclass(frozen=True)
class PoolConfig:
    """Immutable parameters fixed at pool construction"""
    controller: str
    base_rate_per_second: int = DEFAULT_BASE_RATE_PER_SECOND
    multiplier_per_second: int = DEFAULT_MULTIPLIER_PER_SECOND
    reserve_factor: int = DEFAULT_RESERVE_FACTOR
    initial_ltv: int = DEFAULT_LTV
    underlying_decimals: int = DEFAULT_UNDERLYING_DECIMALS
    collateral_decimals: int = DEFAULT_COLLATERAL_DECIMALS

    def __post_init__(self):
        if self.base_rate_per_second < 0 or self.multiplier_per_second < 0:
            raise InvalidParameterError("Rate model parameters must be non-negative")
        if not 0 <= self.reserve_factor <= SCALE:
            raise InvalidParameterError(f"Reserve factor {self.reserve_factor} outside [0, {SCALE}]")
        validate_ltv(self.initial_ltv)
        if self.underlying_decimals < 0 or self.collateral_decimals < 0:
            raise InvalidParameterError("Asset decimals must be non-negative")

    @property
    def rate_model(self) -> InterestRateModel:
        return InterestRateModel(self.base_rate_per_second, self.multiplier_per_second, self.reserve_factor)

    @property
    def underlying_unit(self) -> int:
        """Smallest-unit count of one whole underlying token"""
        return 10 ** self.underlying_decimals

    @property
    def collateral_unit(self) -> int:
        return 10 ** self.collateral_decimals


def validate_ltv(ltv: int) -> int:
    if not isinstance(ltv, int) or not 0 <= ltv <= MAX_LTV:
        raise InvalidParameterError(f"LTV must be an integer in tenths between 0 and {MAX_LTV}, got {ltv!r}")
    return ltv
