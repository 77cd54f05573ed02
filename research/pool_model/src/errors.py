"""Custom errors for the lending pool model"""

class ProtocolError(Exception):
    """Base error class for protocol errors"""
    pass

class AccountingInvariantViolation(ProtocolError):
    """Error for arithmetic overflow/underflow in ledger accounting"""
    pass

class ClockRegressionError(ProtocolError):
    """Error for accrual requested at a timestamp before the last accrual"""
    pass

class InvalidAmountError(ProtocolError):
    """Error for zero or otherwise disallowed amounts"""
    pass

class InvalidParameterError(ProtocolError):
    """Error for out of range configuration values"""
    pass

class InvalidPriceError(ProtocolError):
    """Error for invalid or stale price data"""
    pass

class PriceFeedError(ProtocolError):
    """Error for a price feed that could not be read"""
    pass

class InsufficientCollateralError(ProtocolError):
    """Error for insufficient collateral"""
    pass

class InsufficientSharesError(ProtocolError):
    """Error for redeeming more shares than held"""
    pass

class OverRepaymentError(ProtocolError):
    """Error for repaying more than the account owes"""
    pass

class ExternalTransferFailed(ProtocolError):
    """Error for a custody transfer rejected by the asset"""
    pass

class UnauthorizedError(ProtocolError):
    """Error for administrative calls from a non-controller identity"""
    pass
