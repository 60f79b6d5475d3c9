# PATH: core/math.py
"""
Math utilities for the vault adapter.

Integer-only amount handling (no float money).
"""

from decimal import Decimal
from typing import Any, Union

from core.constants import U64_MAX
from core.exceptions import ErrorCode, ValidationError


def require_u64(amount: Any, field: str = "amount") -> int:
    """
    Check that amount is a raw token amount encodable as u64.

    Args:
        amount: Candidate amount (smallest token unit)
        field: Field name for the error details

    Returns:
        The amount, unchanged

    Raises:
        ValidationError: If amount is not an int in [0, U64_MAX]
    """
    # bool is an int subclass
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise ValidationError(
            f"{field} must be an integer, got {type(amount).__name__}",
            code=ErrorCode.INVALID_AMOUNT,
            details={"field": field, "value": repr(amount)},
        )
    if amount < 0 or amount > U64_MAX:
        raise ValidationError(
            f"{field} out of u64 range: {amount}",
            code=ErrorCode.INVALID_AMOUNT,
            details={"field": field, "value": amount},
        )
    return amount


def rescale_amount(amount: int, from_decimals: int, to_decimals: int) -> int:
    """
    Move a raw amount between two decimal scales.

    Scaling down floors (dust below the target precision is dropped).

    Example:
        rescale_amount(1_500, 6, 3) -> 1
        rescale_amount(1, 3, 6) -> 1_000
    """
    if to_decimals >= from_decimals:
        return amount * 10 ** (to_decimals - from_decimals)
    return amount // 10 ** (from_decimals - to_decimals)


def normalize_to_decimals(
    amount: Union[str, int, Decimal],
    decimals: int,
) -> Decimal:
    """
    Normalize amount to token decimals (raw units to token units).

    Args:
        amount: Amount in smallest unit
        decimals: Token decimals

    Returns:
        Normalized amount
    """
    return Decimal(amount) / (Decimal(10) ** decimals)
