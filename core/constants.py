# PATH: core/constants.py
"""
Constants for the Deaura vault adapter.

Only protocol values that never vary per deployment live here.
Deployment identifiers (program id, mints, vault addresses) go to config/deaura.yaml.
"""

from enum import Enum
from typing import Final

from solders.pubkey import Pubkey


# =============================================================================
# TRADE DIRECTION
# =============================================================================

class Direction(str, Enum):
    """
    Conversion direction of a vault instance.

    Fixed at construction: one adapter instance per direction.
    """
    DEPOSIT = "deposit"  # asset A (VNX) -> asset B (GOLDC)
    REDEEM = "redeem"    # asset B (GOLDC) -> asset A (VNX)


# =============================================================================
# ON-CHAIN LIMITS
# =============================================================================

# Instruction amounts are encoded as u64
U64_MAX: Final[int] = 2**64 - 1


# =============================================================================
# ANCHOR INSTRUCTION DISCRIMINATORS (HARDCODED - TRUST ANCHORS)
# =============================================================================

# deposit(amount: u64)
DEPOSIT_IX_DISC: Final[bytes] = bytes([242, 35, 198, 137, 82, 225, 242, 182])
# redeem(amount: u64)
REDEEM_IX_DISC: Final[bytes] = bytes([184, 12, 86, 149, 70, 196, 97, 225])

IX_DISCRIMINATORS: Final[dict[Direction, bytes]] = {
    Direction.DEPOSIT: DEPOSIT_IX_DISC,
    Direction.REDEEM: REDEEM_IX_DISC,
}


# =============================================================================
# PDA SEEDS
# =============================================================================

GLOBAL_STATE_SEED: Final[bytes] = b"global_state"
VAULT_AUTHORITY_SEED: Final[bytes] = b"vault_authority"
USER_STATE_SEED: Final[bytes] = b"user_state"


# =============================================================================
# SOLANA PROGRAMS
# =============================================================================

TOKEN_PROGRAM_ID: Final[Pubkey] = Pubkey.from_string("TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA")
ASSOCIATED_TOKEN_PROGRAM_ID: Final[Pubkey] = Pubkey.from_string("ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL")
SYSTEM_PROGRAM_ID: Final[Pubkey] = Pubkey.from_string("11111111111111111111111111111111")


# =============================================================================
# SPL TOKEN ACCOUNT LAYOUT
# =============================================================================

# Total size: 165 bytes
TOKEN_ACCOUNT_LEN: Final[int] = 165
TOKEN_ACCOUNT_OFFSETS: Final[dict[str, int]] = {
    "mint": 0,              # Pubkey
    "owner": 32,            # Pubkey
    "amount": 64,           # u64
    "delegate": 72,         # COption<Pubkey>
    "state": 108,           # u8
    "is_native": 109,       # COption<u64>
    "delegated_amount": 121,  # u64
    "close_authority": 129,   # COption<Pubkey>
}


class TokenAccountState(int, Enum):
    """SPL token account state byte."""
    UNINITIALIZED = 0
    INITIALIZED = 1
    FROZEN = 2


# =============================================================================
# ROUTER CONTRACT
# =============================================================================

# Account metas per swap, IDL order (see dex/instructions.py)
SWAP_ACCOUNTS_LEN: Final[int] = 12

# Swap kind reported to the router for custom programs
SWAP_KIND_TOKEN_SWAP: Final[str] = "TokenSwap"
