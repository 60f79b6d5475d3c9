"""
dex/vault_view.py - In-memory view of one vault token account.

The vault is a plain SPL token account holding the reserve asset (VNX).
The host fetches its bytes and pushes them in via refresh(); this module
never performs I/O.

Snapshots are immutable. refresh() decodes into a new VaultSnapshot and
swaps the reference under a lock, so readers always see a consistent copy.
"""

import struct
import threading
from dataclasses import dataclass
from typing import Mapping, Optional

from solders.pubkey import Pubkey

from core.constants import (
    Direction,
    TOKEN_ACCOUNT_LEN,
    TOKEN_ACCOUNT_OFFSETS,
    TokenAccountState,
)
from core.exceptions import DecodeError, ErrorCode
from core.logging import get_logger, log_error
from core.models import VaultSnapshot


# =============================================================================
# SPL TOKEN ACCOUNT DECODING
# =============================================================================

@dataclass(frozen=True)
class TokenAccountData:
    """Fields of an SPL token account the adapter cares about."""
    mint: Pubkey
    owner: Pubkey
    amount: int
    state: TokenAccountState


def decode_token_account(data: bytes) -> TokenAccountData:
    """
    Decode an SPL token account.

    Layout: mint (32) | owner (32) | amount u64 LE | ... | state u8 @108 | ...

    Raises:
        DecodeError: Wrong length or uninitialized/unknown state byte
    """
    if len(data) != TOKEN_ACCOUNT_LEN:
        raise DecodeError(
            f"Token account must be {TOKEN_ACCOUNT_LEN} bytes, got {len(data)}",
            code=ErrorCode.DECODE_BAD_LENGTH,
            details={"data_length": len(data)},
        )

    state_byte = data[TOKEN_ACCOUNT_OFFSETS["state"]]
    if state_byte not in (TokenAccountState.INITIALIZED, TokenAccountState.FROZEN):
        raise DecodeError(
            f"Token account not initialized (state={state_byte})",
            code=ErrorCode.DECODE_BAD_STATE,
            details={"state": state_byte},
        )

    mint_at = TOKEN_ACCOUNT_OFFSETS["mint"]
    owner_at = TOKEN_ACCOUNT_OFFSETS["owner"]

    return TokenAccountData(
        mint=Pubkey.from_bytes(data[mint_at:mint_at + 32]),
        owner=Pubkey.from_bytes(data[owner_at:owner_at + 32]),
        amount=struct.unpack_from("<Q", data, TOKEN_ACCOUNT_OFFSETS["amount"])[0],
        state=TokenAccountState(state_byte),
    )


# =============================================================================
# VAULT VIEW
# =============================================================================

class VaultView:
    """
    Snapshot of one vault account, bound to one address and one direction.

    Usage:
        view = VaultView(vault_address, Direction.REDEEM, mint_in, mint_out, reserve_mint)
        view.refresh(account_bytes, slot=312_000_000)
        view.reserve_balance
    """

    def __init__(
        self,
        vault_address: Pubkey,
        direction: Direction,
        mint_in: Pubkey,
        mint_out: Pubkey,
        reserve_mint: Pubkey,
        snapshot: Optional[VaultSnapshot] = None,
    ):
        self._vault_address = vault_address
        self._direction = direction
        self._mint_in = mint_in
        self._mint_out = mint_out
        self._reserve_mint = reserve_mint
        self._snapshot = snapshot or VaultSnapshot()
        self._lock = threading.Lock()
        self._log = get_logger(__name__, vault=str(vault_address), direction=direction.value)

    # Identity is read-only after construction

    @property
    def vault_address(self) -> Pubkey:
        return self._vault_address

    @property
    def direction(self) -> Direction:
        return self._direction

    @property
    def mint_in(self) -> Pubkey:
        return self._mint_in

    @property
    def mint_out(self) -> Pubkey:
        return self._mint_out

    @property
    def reserve_mint(self) -> Pubkey:
        return self._reserve_mint

    # Observed state

    def snapshot(self) -> VaultSnapshot:
        """Current snapshot. Read once and work from the returned copy."""
        return self._snapshot

    @property
    def reserve_balance(self) -> int:
        return self._snapshot.reserve_balance

    @property
    def last_refresh_slot(self) -> Optional[int]:
        return self._snapshot.last_refresh_slot

    def required_accounts(self) -> frozenset[Pubkey]:
        """Accounts the host must fetch before refresh/quote."""
        return frozenset({self._vault_address})

    def refresh(self, data: bytes, slot: Optional[int] = None) -> VaultSnapshot:
        """
        Decode vault account bytes and replace the snapshot.

        Args:
            data: Raw account data as fetched by the host
            slot: Slot the data was observed at, if known

        Returns:
            The new snapshot

        Raises:
            DecodeError: Bytes do not decode as a token account of the reserve mint.
                The previous snapshot is kept.
        """
        try:
            account = decode_token_account(bytes(data))
            if account.mint != self._reserve_mint:
                raise DecodeError(
                    f"Vault holds mint {account.mint}, expected {self._reserve_mint}",
                    code=ErrorCode.DECODE_MINT_MISMATCH,
                    details={"mint": str(account.mint), "expected": str(self._reserve_mint)},
                )
        except DecodeError as e:
            e.details.setdefault("vault", str(self._vault_address))
            log_error(self._log, e.code.value, f"Vault refresh rejected: {e.message}", slot=slot)
            raise

        snapshot = VaultSnapshot(
            reserve_balance=account.amount,
            last_refresh_slot=slot,
            owner=account.owner,
        )
        with self._lock:
            self._snapshot = snapshot

        self._log.debug(
            "Vault refreshed",
            extra={
                "context": {
                    "reserve_balance": snapshot.reserve_balance,
                    "slot": slot,
                }
            },
        )
        return snapshot

    def update(self, account_map: Mapping[Pubkey, bytes], slot: Optional[int] = None) -> VaultSnapshot:
        """
        Refresh from a host account map keyed by address.

        Raises:
            DecodeError: Vault account missing from the map, or undecodable
        """
        data = account_map.get(self._vault_address)
        if data is None:
            raise DecodeError(
                f"Account data missing for vault {self._vault_address}",
                code=ErrorCode.DECODE_ACCOUNT_MISSING,
                details={"vault": str(self._vault_address)},
            )
        return self.refresh(data, slot=slot)
