"""
tests/unit/test_vault_view.py - Vault account decoding and snapshot tests.
"""

import pytest
from solders.pubkey import Pubkey

from core.constants import Direction, TokenAccountState
from core.exceptions import DecodeError, ErrorCode
from dex.vault_view import VaultView, decode_token_account


@pytest.fixture
def view(vault_config):
    return VaultView(
        vault_address=vault_config.vault(Direction.REDEEM).address,
        direction=Direction.REDEEM,
        mint_in=vault_config.asset_b.mint,
        mint_out=vault_config.asset_a.mint,
        reserve_mint=vault_config.asset_a.mint,
    )


class TestDecodeTokenAccount:
    """Test SPL token account decoding."""

    def test_decodes_fields(self, token_account_bytes):
        """Reads mint, owner, amount and state at their offsets."""
        mint = Pubkey.new_unique()
        owner = Pubkey.new_unique()
        data = token_account_bytes(mint, amount=123_456_789, owner=owner)

        account = decode_token_account(data)

        assert account.mint == mint
        assert account.owner == owner
        assert account.amount == 123_456_789
        assert account.state == TokenAccountState.INITIALIZED

    def test_max_u64_amount(self, token_account_bytes):
        data = token_account_bytes(Pubkey.new_unique(), amount=2**64 - 1)
        assert decode_token_account(data).amount == 2**64 - 1

    def test_frozen_account_accepted(self, token_account_bytes):
        data = token_account_bytes(Pubkey.new_unique(), amount=5, state=2)
        assert decode_token_account(data).state == TokenAccountState.FROZEN

    @pytest.mark.parametrize("length", [0, 72, 164, 166, 200])
    def test_wrong_length_raises(self, length):
        """Anything but 165 bytes is rejected."""
        with pytest.raises(DecodeError) as exc_info:
            decode_token_account(bytes(length))

        assert exc_info.value.code == ErrorCode.DECODE_BAD_LENGTH
        assert exc_info.value.details["data_length"] == length

    @pytest.mark.parametrize("state", [0, 3, 255])
    def test_bad_state_raises(self, token_account_bytes, state):
        data = token_account_bytes(Pubkey.new_unique(), amount=1, state=state)

        with pytest.raises(DecodeError) as exc_info:
            decode_token_account(data)

        assert exc_info.value.code == ErrorCode.DECODE_BAD_STATE


class TestVaultViewIdentity:
    """Identity is fixed at construction."""

    def test_bound_to_address_and_direction(self, view, vault_config):
        assert view.vault_address == vault_config.vault(Direction.REDEEM).address
        assert view.direction is Direction.REDEEM
        assert view.mint_in == vault_config.asset_b.mint
        assert view.mint_out == vault_config.asset_a.mint

    def test_identity_is_read_only(self, view):
        with pytest.raises(AttributeError):
            view.direction = Direction.DEPOSIT

    def test_required_accounts_is_vault(self, view, vault_config):
        assert view.required_accounts() == frozenset({vault_config.vault(Direction.REDEEM).address})

    def test_initial_snapshot_empty(self, view):
        assert view.reserve_balance == 0
        assert view.last_refresh_slot is None


class TestVaultViewRefresh:
    """Test refresh semantics."""

    def test_refresh_updates_reserve_and_slot(self, view, vault_bytes):
        view.refresh(vault_bytes(1_000), slot=42)

        assert view.reserve_balance == 1_000
        assert view.last_refresh_slot == 42

    def test_refresh_is_idempotent(self, view, vault_bytes):
        """Identical bytes yield an identical snapshot."""
        data = vault_bytes(777)

        first = view.refresh(data, slot=9)
        second = view.refresh(data, slot=9)

        assert first == second
        assert view.snapshot() == first

    def test_refresh_replaces_snapshot(self, view, vault_bytes):
        view.refresh(vault_bytes(1_000), slot=1)
        view.refresh(vault_bytes(250), slot=2)

        assert view.reserve_balance == 250
        assert view.last_refresh_slot == 2

    def test_malformed_bytes_keep_previous_snapshot(self, view, vault_bytes):
        """Wrong length raises DecodeError and the reserve is unchanged."""
        view.refresh(vault_bytes(1_000), slot=10)
        before = view.snapshot()

        with pytest.raises(DecodeError) as exc_info:
            view.refresh(b"\x00" * 100, slot=11)

        assert exc_info.value.code == ErrorCode.DECODE_BAD_LENGTH
        assert view.reserve_balance == 1_000
        assert view.snapshot() is before

    def test_wrong_mint_rejected(self, view, token_account_bytes, vault_config):
        """A token account of the other asset is not the vault."""
        data = token_account_bytes(vault_config.asset_b.mint, amount=5_000)

        with pytest.raises(DecodeError) as exc_info:
            view.refresh(data)

        assert exc_info.value.code == ErrorCode.DECODE_MINT_MISMATCH
        assert view.reserve_balance == 0

    def test_error_details_name_vault(self, view):
        with pytest.raises(DecodeError) as exc_info:
            view.refresh(b"")

        assert exc_info.value.details["vault"] == str(view.vault_address)

    def test_snapshot_object_is_immutable(self, view, vault_bytes):
        snapshot = view.refresh(vault_bytes(10))

        with pytest.raises(AttributeError):
            snapshot.reserve_balance = 99

    def test_held_snapshot_survives_refresh(self, view, vault_bytes):
        """Readers holding a snapshot are not affected by later refreshes."""
        view.refresh(vault_bytes(100), slot=1)
        held = view.snapshot()

        view.refresh(vault_bytes(5), slot=2)

        assert held.reserve_balance == 100
        assert view.reserve_balance == 5


class TestVaultViewUpdate:
    """Test refresh from a host account map."""

    def test_update_from_map(self, view, vault_bytes):
        account_map = {view.vault_address: vault_bytes(321), Pubkey.new_unique(): b"ignored"}

        view.update(account_map, slot=7)

        assert view.reserve_balance == 321
        assert view.last_refresh_slot == 7

    def test_update_missing_account_raises(self, view):
        with pytest.raises(DecodeError) as exc_info:
            view.update({Pubkey.new_unique(): b""})

        assert exc_info.value.code == ErrorCode.DECODE_ACCOUNT_MISSING
