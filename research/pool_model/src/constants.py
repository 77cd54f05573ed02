# Fixed point scale factors
SCALE = 1_000_000_000_000_000_000  # 1e18 for rates and exchange rates
PRICE_DECIMALS = 18  # Internal price precision (USD per whole asset unit)
LTV_SCALE = 10  # LTV is expressed in tenths (8 = 80%)
MAX_UINT = 2**256 - 1  # Ceiling for checked arithmetic

# Time constants
YEAR_IN_SECONDS = 365 * 24 * 60 * 60  # 365 days * 24 hours * 60 minutes * 60 seconds

# Rate model defaults, per-second fractions scaled by SCALE
DEFAULT_BASE_RATE_PER_SECOND = SCALE * 2 // 100 // YEAR_IN_SECONDS  # ~2% APR
DEFAULT_MULTIPLIER_PER_SECOND = SCALE * 20 // 100 // YEAR_IN_SECONDS  # ~20% APR at full utilization
DEFAULT_RESERVE_FACTOR = SCALE // 10  # 10% of accrued interest

# Position constants
DEFAULT_LTV = 8  # 80%
MAX_LTV = LTV_SCALE  # 100%

# Asset precision
DEFAULT_UNDERLYING_DECIMALS = 18
DEFAULT_COLLATERAL_DECIMALS = 18

# Oracle
DEFAULT_FEED_ATTEMPTS = 3
