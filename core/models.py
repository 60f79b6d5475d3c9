# PATH: core/models.py
"""
Core data models for the vault adapter.

Amounts are raw integers in the smallest unit of their mint.
Pubkeys are solders Pubkey values; to_dict() renders them as base58 strings.

QUOTE CONTRACT
==============
  - amount_out is always reported, even when the quote is not executable
  - valid=False only for the redeem direction when the vault reserve is short
  - reject_reason is INSUFFICIENT_RESERVE exactly when valid=False
  - fees are always zero (fixed-rate vault)
==============
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple

from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey

from core.constants import Direction, SWAP_KIND_TOKEN_SWAP
from core.exceptions import ErrorCode, InsufficientReserveError
from core.math import rescale_amount


# ============================================================================
# TOKENS AND SCALE
# ============================================================================

@dataclass(frozen=True)
class Token:
    """SPL mint with display metadata."""
    mint: Pubkey
    symbol: str
    decimals: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mint": str(self.mint),
            "symbol": self.symbol,
            "decimals": self.decimals,
        }


@dataclass(frozen=True)
class ScaleConversion:
    """
    Fixed decimal-scale factor between asset A (reserve asset) and asset B.

    Equal decimals make both conversions the identity, i.e. a 1:1 raw rate.
    """
    decimals_a: int
    decimals_b: int

    def a_to_b(self, amount: int) -> int:
        return rescale_amount(amount, self.decimals_a, self.decimals_b)

    def b_to_a(self, amount: int) -> int:
        return rescale_amount(amount, self.decimals_b, self.decimals_a)


# ============================================================================
# VAULT STATE
# ============================================================================

@dataclass(frozen=True)
class VaultSnapshot:
    """Ledger-observed state of one vault token account."""
    reserve_balance: int = 0
    last_refresh_slot: Optional[int] = None
    owner: Optional[Pubkey] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "reserve_balance": self.reserve_balance,
            "last_refresh_slot": self.last_refresh_slot,
            "owner": str(self.owner) if self.owner else None,
        }


@dataclass(frozen=True)
class KeyedAccount:
    """Account handed over by the host at discovery time."""
    key: Pubkey
    data: bytes = b""
    owner: Optional[Pubkey] = None
    slot: Optional[int] = None


# ============================================================================
# QUOTE
# ============================================================================

@dataclass(frozen=True)
class Quote:
    """Quote for one request. Never cached."""
    amount_in: int
    amount_out: int
    valid: bool
    direction: Direction
    input_mint: Pubkey
    output_mint: Pubkey
    reserve_balance: int = 0
    reject_reason: Optional[ErrorCode] = None
    fee_amount: int = 0
    fee_pct: Decimal = Decimal("0")

    @property
    def fee_mint(self) -> Pubkey:
        return self.input_mint

    def require_executable(self) -> "Quote":
        """Raise if the quote must not be routed."""
        if not self.valid:
            raise InsufficientReserveError(
                f"Insufficient reserve: need {self.amount_out}, vault holds {self.reserve_balance}",
                details={
                    "amount_in": self.amount_in,
                    "amount_out": self.amount_out,
                    "reserve_balance": self.reserve_balance,
                },
            )
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            "direction": self.direction.value,
            "amount_in": self.amount_in,
            "amount_out": self.amount_out,
            "valid": self.valid,
            "reject_reason": self.reject_reason.value if self.reject_reason else None,
            "input_mint": str(self.input_mint),
            "output_mint": str(self.output_mint),
            "reserve_balance": self.reserve_balance,
            "fee_amount": self.fee_amount,
            "fee_pct": str(self.fee_pct),
            "fee_mint": str(self.fee_mint),
        }


# ============================================================================
# SWAP REQUEST
# ============================================================================

@dataclass(frozen=True)
class UserAccounts:
    """Per-swap user accounts supplied by the router. None means absent."""
    token_transfer_authority: Optional[Pubkey] = None
    source_token_account: Optional[Pubkey] = None
    destination_token_account: Optional[Pubkey] = None

    def missing(self) -> list[str]:
        return [
            name
            for name in ("token_transfer_authority", "source_token_account", "destination_token_account")
            if getattr(self, name) is None
        ]


@dataclass(frozen=True)
class SwapParams:
    """Router swap request. Direction follows from source_mint."""
    source_mint: Pubkey
    destination_mint: Pubkey
    in_amount: int
    user_accounts: UserAccounts = field(default_factory=UserAccounts)


# ============================================================================
# INSTRUCTION PLAN
# ============================================================================

@dataclass(frozen=True)
class InstructionPlan:
    """Ordered instructions the router embeds verbatim in its transaction."""
    instructions: Tuple[Instruction, ...]
    direction: Direction
    amount_in: int
    amount_out: int
    swap_kind: str = SWAP_KIND_TOKEN_SWAP

    @property
    def account_metas(self) -> list[AccountMeta]:
        return [meta for ix in self.instructions for meta in ix.accounts]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "direction": self.direction.value,
            "amount_in": self.amount_in,
            "amount_out": self.amount_out,
            "swap_kind": self.swap_kind,
            "instructions": [
                {
                    "program_id": str(ix.program_id),
                    "data": bytes(ix.data).hex(),
                    "accounts": [
                        {
                            "pubkey": str(meta.pubkey),
                            "is_signer": meta.is_signer,
                            "is_writable": meta.is_writable,
                        }
                        for meta in ix.accounts
                    ],
                }
                for ix in self.instructions
            ],
        }
