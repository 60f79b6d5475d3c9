"""
dex/instructions.py - Deposit/redeem instruction building.

The vault program is an Anchor program exposing:
    deposit(amount: u64)   VNX -> GOLDC
    redeem(amount: u64)    GOLDC -> VNX

Both take the same 12 accounts in IDL order:
    payer, global_state, vault_authority, goldc_mint, payer_goldc_token_account,
    vnx_mint, payer_vnx_token_account, vnx_vault, user_data,
    token_program, associated_token_program, system_program

Instruction data = discriminator (8) + amount (u64 LE).
"""

import struct

from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey

from config import VaultConfig
from core.constants import (
    ASSOCIATED_TOKEN_PROGRAM_ID,
    Direction,
    GLOBAL_STATE_SEED,
    IX_DISCRIMINATORS,
    SYSTEM_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
    USER_STATE_SEED,
    VAULT_AUTHORITY_SEED,
)
from core.exceptions import DirectionMismatchError, InsufficientReserveError, MissingAccountError
from core.logging import get_logger, log_error
from core.math import require_u64
from core.models import InstructionPlan, ScaleConversion, UserAccounts, VaultSnapshot
from dex.quote_engine import amount_out_for, has_sufficient_reserve

logger = get_logger(__name__)


# =============================================================================
# PDA DERIVATION
# =============================================================================

def derive_global_state(program_id: Pubkey) -> Pubkey:
    return Pubkey.find_program_address([GLOBAL_STATE_SEED], program_id)[0]


def derive_vault_authority(program_id: Pubkey) -> Pubkey:
    return Pubkey.find_program_address([VAULT_AUTHORITY_SEED], program_id)[0]


def derive_user_state(program_id: Pubkey, payer: Pubkey) -> Pubkey:
    return Pubkey.find_program_address([USER_STATE_SEED, bytes(payer)], program_id)[0]


# =============================================================================
# ENCODING
# =============================================================================

def encode_instruction_data(discriminator: bytes, amount: int) -> bytes:
    """Discriminator (8 bytes) followed by amount as u64 little-endian."""
    return discriminator + struct.pack("<Q", amount)


def build_account_metas(
    config: VaultConfig,
    payer: Pubkey,
    payer_asset_b_account: Pubkey,
    payer_asset_a_account: Pubkey,
    vault: Pubkey,
    global_state: Pubkey,
    vault_authority: Pubkey,
) -> list[AccountMeta]:
    """
    Account metas in the exact order required by the Anchor instruction.

    Only the payer signs. The vault authority and the three programs are read-only.
    """
    return [
        AccountMeta(payer, is_signer=True, is_writable=True),

        AccountMeta(global_state, is_signer=False, is_writable=True),
        AccountMeta(vault_authority, is_signer=False, is_writable=False),

        AccountMeta(config.asset_b.mint, is_signer=False, is_writable=True),
        AccountMeta(payer_asset_b_account, is_signer=False, is_writable=True),

        AccountMeta(config.asset_a.mint, is_signer=False, is_writable=True),
        AccountMeta(payer_asset_a_account, is_signer=False, is_writable=True),

        AccountMeta(vault, is_signer=False, is_writable=True),

        AccountMeta(derive_user_state(config.program_id, payer), is_signer=False, is_writable=True),

        AccountMeta(TOKEN_PROGRAM_ID, is_signer=False, is_writable=False),
        AccountMeta(ASSOCIATED_TOKEN_PROGRAM_ID, is_signer=False, is_writable=False),
        AccountMeta(SYSTEM_PROGRAM_ID, is_signer=False, is_writable=False),
    ]


# =============================================================================
# BUILDER
# =============================================================================

class InstructionBuilder:
    """
    Builds the single deposit or redeem instruction for one vault.

    build() is a pure projection of (snapshot, amount, user accounts) into an
    InstructionPlan. It never touches the VaultView and returns nothing partial.
    """

    def __init__(self, config: VaultConfig, direction: Direction):
        self.config = config
        self.direction = direction
        self.vault = config.vault(direction).address
        self.scale: ScaleConversion = config.scale
        self.discriminator = IX_DISCRIMINATORS[direction]
        # Program-wide PDAs do not depend on the swap
        self.global_state = derive_global_state(config.program_id)
        self.vault_authority = derive_vault_authority(config.program_id)

    def build(
        self,
        snapshot: VaultSnapshot,
        amount_in: int,
        direction: Direction,
        user_accounts: UserAccounts,
    ) -> InstructionPlan:
        """
        Build the instruction plan for a swap.

        Args:
            snapshot: Vault state read once by the caller
            amount_in: Raw input amount (u64)
            direction: Requested direction; must match this builder's vault
            user_accounts: Payer and the payer's source/destination token accounts

        Returns:
            InstructionPlan with exactly one instruction

        Raises:
            ValidationError: amount_in is not a u64
            DirectionMismatchError: direction is not this vault's direction
            MissingAccountError: a user account is absent
            InsufficientReserveError: redeem exceeds the observed reserve
        """
        require_u64(amount_in, "amount_in")

        try:
            direction = Direction(direction)
        except ValueError:
            raise DirectionMismatchError(
                f"Unknown direction {direction!r} for vault {self.vault}",
                details={"vault": str(self.vault), "requested": repr(direction)},
            ) from None

        if direction is not self.direction:
            raise DirectionMismatchError(
                f"Vault {self.vault} serves {self.direction.value}, not {direction.value}",
                details={"vault": str(self.vault), "requested": direction.value},
            )

        missing = user_accounts.missing()
        if missing:
            log_error(
                logger,
                "MISSING_ACCOUNT",
                f"Swap build missing accounts: {', '.join(missing)}",
                vault=str(self.vault),
                missing=missing,
            )
            raise MissingAccountError(
                f"Missing required user accounts: {', '.join(missing)}",
                details={"missing": missing},
            )

        amount_out = amount_out_for(direction, amount_in, self.scale)
        if not has_sufficient_reserve(direction, amount_out, snapshot):
            logger.info(
                "Redeem rejected: insufficient reserve",
                extra={
                    "context": {
                        "vault": str(self.vault),
                        "amount_out": amount_out,
                        "reserve_balance": snapshot.reserve_balance,
                    }
                },
            )
            raise InsufficientReserveError(
                f"Insufficient reserve: need {amount_out}, vault holds {snapshot.reserve_balance}",
                details={
                    "amount_in": amount_in,
                    "amount_out": amount_out,
                    "reserve_balance": snapshot.reserve_balance,
                },
            )

        # Deposit spends the payer's asset A account; redeem spends asset B
        if direction is Direction.DEPOSIT:
            payer_asset_a_account = user_accounts.source_token_account
            payer_asset_b_account = user_accounts.destination_token_account
        else:
            payer_asset_a_account = user_accounts.destination_token_account
            payer_asset_b_account = user_accounts.source_token_account

        metas = build_account_metas(
            self.config,
            payer=user_accounts.token_transfer_authority,
            payer_asset_b_account=payer_asset_b_account,
            payer_asset_a_account=payer_asset_a_account,
            vault=self.vault,
            global_state=self.global_state,
            vault_authority=self.vault_authority,
        )

        ix = Instruction(
            self.config.program_id,
            encode_instruction_data(self.discriminator, amount_in),
            metas,
        )

        return InstructionPlan(
            instructions=(ix,),
            direction=direction,
            amount_in=amount_in,
            amount_out=amount_out,
        )
