"""
dex/adapters/deaura.py - Deaura fixed-rate vault adapter.

The Deaura program converts VNX into GOLDC (deposit vault) and GOLDC back
into VNX (redeem vault) at a fixed rate with no fee.

Each vault account is listed to the router as its own market, so the
router constructs one adapter per vault and the direction is fixed by
which vault the adapter was built from.
"""

from typing import Mapping, Optional

from solders.pubkey import Pubkey

from config import VaultConfig, get_vault_config
from core.constants import Direction, SWAP_ACCOUNTS_LEN
from core.exceptions import AdapterError, BuildError, ErrorCode
from core.logging import get_logger, log_quote
from core.models import (
    InstructionPlan,
    KeyedAccount,
    Quote,
    SwapParams,
    UserAccounts,
    VaultSnapshot,
)
from dex.instructions import InstructionBuilder
from dex.interface import LiquiditySource
from dex.quote_engine import compute_quote
from dex.vault_view import VaultView

logger = get_logger(__name__)


class DeauraVaultAdapter(LiquiditySource):
    """
    Liquidity source for one Deaura vault.

    Usage:
        adapter = DeauraVaultAdapter.from_keyed_account(keyed_account)
        adapter.refresh(vault_account_bytes, slot)
        quote = adapter.quote(1_000)
        if quote.valid:
            plan = adapter.build(1_000, adapter.direction, user_accounts)
    """

    def __init__(
        self,
        direction: Direction,
        config: Optional[VaultConfig] = None,
        snapshot: Optional[VaultSnapshot] = None,
    ):
        self.config = config or get_vault_config()

        entry = self.config.vault(direction)
        self._label = entry.label
        mint_in, mint_out = self.config.mints_for(direction)

        self.view = VaultView(
            vault_address=entry.address,
            direction=direction,
            mint_in=mint_in,
            mint_out=mint_out,
            reserve_mint=self.config.asset_a.mint,
            snapshot=snapshot,
        )
        self.builder = InstructionBuilder(self.config, direction)

    @classmethod
    def from_keyed_account(
        cls,
        keyed_account: KeyedAccount,
        config: Optional[VaultConfig] = None,
    ) -> "DeauraVaultAdapter":
        """
        Construct the adapter for a discovered vault account.

        Account data, when present, is applied as the first refresh.

        Raises:
            AdapterError: The account is not one of the configured vaults
            DecodeError: Account data was supplied but does not decode
        """
        config = config or get_vault_config()
        direction = config.direction_for_vault(keyed_account.key)
        if direction is None:
            raise AdapterError(
                f"Unknown Deaura vault account: {keyed_account.key}",
                code=ErrorCode.UNKNOWN_VAULT,
                details={"key": str(keyed_account.key)},
            )

        adapter = cls(direction, config)
        if keyed_account.data:
            adapter.refresh(keyed_account.data, slot=keyed_account.slot)
        return adapter

    # ── Identity ─────────────────────────────────────────────────────

    @property
    def label(self) -> str:
        return self._label

    @property
    def key(self) -> Pubkey:
        return self.view.vault_address

    @property
    def program_id(self) -> Pubkey:
        return self.config.program_id

    @property
    def reserve_mints(self) -> list[Pubkey]:
        return self.config.reserve_mints

    @property
    def accounts_len(self) -> int:
        return SWAP_ACCOUNTS_LEN

    @property
    def direction(self) -> Direction:
        return self.view.direction

    @property
    def mint_in(self) -> Pubkey:
        return self.view.mint_in

    @property
    def mint_out(self) -> Pubkey:
        return self.view.mint_out

    # ── State ────────────────────────────────────────────────────────

    def required_accounts(self) -> frozenset[Pubkey]:
        return self.view.required_accounts()

    def refresh(self, data: bytes, slot: Optional[int] = None) -> VaultSnapshot:
        return self.view.refresh(data, slot=slot)

    def update(self, account_map: Mapping[Pubkey, bytes], slot: Optional[int] = None) -> VaultSnapshot:
        return self.view.update(account_map, slot=slot)

    # ── Quoting ──────────────────────────────────────────────────────

    def quote(self, amount_in: int) -> Quote:
        quote = compute_quote(
            self.view.snapshot(),
            self.direction,
            amount_in,
            self.config.scale,
            self.mint_in,
            self.mint_out,
        )
        log_quote(
            logger,
            self.label,
            self.direction.value,
            quote.amount_in,
            quote.amount_out,
            quote.valid,
            reserve_balance=quote.reserve_balance,
        )
        return quote

    # ── Instruction Building ─────────────────────────────────────────

    def build(self, amount_in: int, direction: Direction, user_accounts: UserAccounts) -> InstructionPlan:
        plan = self.builder.build(self.view.snapshot(), amount_in, direction, user_accounts)
        logger.debug(
            f"Built {plan.direction.value} plan for {self.label}",
            extra={
                "context": {
                    "vault": str(self.key),
                    "amount_in": plan.amount_in,
                    "amount_out": plan.amount_out,
                    "accounts": len(plan.account_metas),
                }
            },
        )
        return plan

    def build_swap(self, swap_params: SwapParams) -> InstructionPlan:
        """
        Build from a router swap request; direction follows from the source mint.

        Raises:
            BuildError: UNSUPPORTED_MINT for a source mint outside the pair,
                or any error build() raises
        """
        direction = self.config.direction_for_source_mint(swap_params.source_mint)
        if direction is None:
            raise BuildError(
                f"Unsupported source mint for {self.label}: {swap_params.source_mint}",
                code=ErrorCode.UNSUPPORTED_MINT,
                details={"source_mint": str(swap_params.source_mint)},
            )
        return self.build(swap_params.in_amount, direction, swap_params.user_accounts)

    def clone(self) -> "DeauraVaultAdapter":
        """Independent adapter starting from the current snapshot."""
        return DeauraVaultAdapter(self.direction, self.config, snapshot=self.view.snapshot())

    def __repr__(self) -> str:
        return f"DeauraVaultAdapter({self.label!r}, key={self.key})"
