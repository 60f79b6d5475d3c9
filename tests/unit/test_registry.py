"""
tests/unit/test_registry.py - Vault registry tests.
"""

import pytest
from solders.pubkey import Pubkey

from core.constants import Direction
from core.exceptions import AdapterError, ErrorCode
from core.models import KeyedAccount
from discovery.registry import VaultRegistry


@pytest.fixture
def registry(vault_config):
    return VaultRegistry(vault_config)


class TestDiscovery:
    """Adapter construction from candidate accounts."""

    def test_discover_configured(self, registry, vault_config):
        assert registry.discover_configured() == 2
        assert len(registry) == 2
        assert registry.get(vault_config.vault(Direction.DEPOSIT).address).direction is Direction.DEPOSIT
        assert registry.get(vault_config.vault(Direction.REDEEM).address).direction is Direction.REDEEM

    def test_discover_is_idempotent(self, registry):
        registry.discover_configured()

        assert registry.discover_configured() == 0
        assert len(registry) == 2

    def test_unknown_accounts_skipped(self, registry, vault_config):
        accounts = [
            KeyedAccount(key=Pubkey.new_unique()),
            KeyedAccount(key=vault_config.vault(Direction.DEPOSIT).address),
        ]

        assert registry.discover(accounts) == 1
        assert len(registry) == 1

    def test_undecodable_account_skipped(self, registry, vault_config):
        accounts = [KeyedAccount(key=vault_config.vault(Direction.REDEEM).address, data=b"short")]

        assert registry.discover(accounts) == 0
        assert registry.get(vault_config.vault(Direction.REDEEM).address) is None


class TestLookup:
    def test_for_pair(self, registry, vault_config):
        registry.discover_configured()
        a, b = vault_config.asset_a.mint, vault_config.asset_b.mint

        assert registry.for_pair(a, b).direction is Direction.DEPOSIT
        assert registry.for_pair(b, a).direction is Direction.REDEEM
        assert registry.for_pair(a, Pubkey.new_unique()) is None

    def test_require_unknown(self, registry):
        with pytest.raises(AdapterError) as exc_info:
            registry.require(Pubkey.new_unique())

        assert exc_info.value.code == ErrorCode.UNKNOWN_VAULT

    def test_required_accounts_union(self, registry, vault_config):
        registry.discover_configured()

        assert registry.required_accounts() == frozenset({
            vault_config.vault(Direction.DEPOSIT).address,
            vault_config.vault(Direction.REDEEM).address,
        })

    def test_iteration(self, registry):
        registry.discover_configured()

        assert {adapter.direction for adapter in registry} == {Direction.DEPOSIT, Direction.REDEEM}


class TestUpdateAll:
    """Batch refresh from one account map."""

    def test_refreshes_every_adapter(self, registry, vault_config, vault_bytes):
        registry.discover_configured()
        deposit = vault_config.vault(Direction.DEPOSIT).address
        redeem = vault_config.vault(Direction.REDEEM).address

        failures = registry.update_all({deposit: vault_bytes(10), redeem: vault_bytes(20)}, slot=8)

        assert failures == {}
        assert registry.require(deposit).view.reserve_balance == 10
        assert registry.require(redeem).view.reserve_balance == 20
        assert registry.require(redeem).view.last_refresh_slot == 8

    def test_failure_isolated(self, registry, vault_config, vault_bytes):
        """One bad account does not block the other refresh."""
        registry.discover_configured()
        deposit = vault_config.vault(Direction.DEPOSIT).address
        redeem = vault_config.vault(Direction.REDEEM).address
        registry.update_all({deposit: vault_bytes(1), redeem: vault_bytes(2)})

        failures = registry.update_all({deposit: b"bad", redeem: vault_bytes(7)})

        assert set(failures) == {deposit}
        assert failures[deposit].code == ErrorCode.DECODE_BAD_LENGTH
        assert registry.require(deposit).view.reserve_balance == 1
        assert registry.require(redeem).view.reserve_balance == 7

    def test_missing_account_reported(self, registry, vault_config, vault_bytes):
        registry.discover_configured()
        redeem = vault_config.vault(Direction.REDEEM).address

        failures = registry.update_all({redeem: vault_bytes(3)})

        assert list(failures.values())[0].code == ErrorCode.DECODE_ACCOUNT_MISSING

    def test_summary(self, registry, vault_config, vault_bytes):
        registry.discover_configured()
        registry.update_all({
            vault_config.vault(Direction.DEPOSIT).address: vault_bytes(4),
            vault_config.vault(Direction.REDEEM).address: vault_bytes(5),
        }, slot=1)

        summary = registry.get_summary()

        assert summary["total_adapters"] == 2
        assert {a["reserve_balance"] for a in summary["adapters"]} == {4, 5}
