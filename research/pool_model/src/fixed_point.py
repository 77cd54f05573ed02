"""Checked scaled-integer arithmetic

All ledger math goes through these helpers. Values are plain ints; fractions
are scaled by SCALE (1e18). Results above MAX_UINT or below zero raise
AccountingInvariantViolation instead of wrapping.
"""
from .constants import MAX_UINT
from .errors import AccountingInvariantViolation


def checked_add(a: int, b: int) -> int:
    """Add with overflow checking"""
    result = a + b
    if result > MAX_UINT:
        raise AccountingInvariantViolation("Arithmetic overflow in addition")
    return result

def checked_sub(a: int, b: int) -> int:
    """Subtract with underflow checking"""
    if b > a:
        raise AccountingInvariantViolation(f"Arithmetic underflow in subtraction ({a} - {b})")
    return a - b

def checked_mul(a: int, b: int) -> int:
    """Multiply with overflow checking"""
    result = a * b
    if result > MAX_UINT:
        raise AccountingInvariantViolation("Arithmetic overflow in multiplication")
    return result

def checked_div(a: int, b: int) -> int:
    """Divide with zero checking, rounds down"""
    if b == 0:
        raise AccountingInvariantViolation("Division by zero")
    return a // b

def mul_div(a: int, b: int, denominator: int) -> int:
    """Compute a * b / denominator, rounding down (floor).

    The intermediate product is overflow checked against MAX_UINT.
    """
    return checked_div(checked_mul(a, b), denominator)

def mul_div_up(a: int, b: int, denominator: int) -> int:
    """Compute a * b / denominator, rounding up (ceiling)"""
    product = checked_mul(a, b)
    if denominator == 0:
        raise AccountingInvariantViolation("Division by zero")
    return -(-product // denominator)
