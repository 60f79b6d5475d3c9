"""
dex/quote_engine.py - Fixed-rate quoting.

No pricing curve and no fees: the output is the input moved across the
configured decimal scale. Redeem quotes are additionally gated by the
reserve the vault held at the last refresh.

Zero amounts are valid and quote to zero.
"""

from solders.pubkey import Pubkey

from core.constants import Direction
from core.exceptions import ErrorCode
from core.math import require_u64
from core.models import Quote, ScaleConversion, VaultSnapshot


def amount_out_for(direction: Direction, amount_in: int, scale: ScaleConversion) -> int:
    """
    Output amount for a direction, before any reserve check.

    Raises:
        ValidationError: Scaling up pushed the output past u64
    """
    if direction is Direction.DEPOSIT:
        amount_out = scale.a_to_b(amount_in)
    else:
        amount_out = scale.b_to_a(amount_in)
    return require_u64(amount_out, "amount_out")


def has_sufficient_reserve(direction: Direction, amount_out: int, snapshot: VaultSnapshot) -> bool:
    """Deposits mint against the vault and need no reserve."""
    if direction is Direction.DEPOSIT:
        return True
    return amount_out <= snapshot.reserve_balance


def compute_quote(
    snapshot: VaultSnapshot,
    direction: Direction,
    amount_in: int,
    scale: ScaleConversion,
    mint_in: Pubkey,
    mint_out: Pubkey,
) -> Quote:
    """
    Compute a quote against one snapshot.

    Args:
        snapshot: Vault state read once by the caller
        direction: Direction of the vault instance
        amount_in: Raw input amount (u64)
        scale: Decimal conversion between the two assets
        mint_in: Input mint
        mint_out: Output mint

    Returns:
        Quote; valid=False with INSUFFICIENT_RESERVE when a redeem exceeds the reserve

    Raises:
        ValidationError: amount_in or the scaled amount_out is not a u64
    """
    require_u64(amount_in, "amount_in")

    amount_out = amount_out_for(direction, amount_in, scale)
    valid = has_sufficient_reserve(direction, amount_out, snapshot)

    return Quote(
        amount_in=amount_in,
        amount_out=amount_out,
        valid=valid,
        direction=direction,
        input_mint=mint_in,
        output_mint=mint_out,
        reserve_balance=snapshot.reserve_balance,
        reject_reason=None if valid else ErrorCode.INSUFFICIENT_RESERVE,
    )
