"""
discovery/registry.py - Vault adapter registry.

Pipeline:
1. Host lists candidate accounts (or the configured vault addresses)
2. One adapter is constructed per known vault, keyed by vault address
3. Host fetches required_accounts() and pushes them through update_all()
4. Router looks adapters up by key or by (input_mint, output_mint)
"""

from typing import Iterable, Iterator, Mapping, Optional

from solders.pubkey import Pubkey

from config import VaultConfig, get_vault_config
from core.constants import Direction
from core.exceptions import AdapterError, DecodeError, ErrorCode
from core.logging import get_logger
from core.models import KeyedAccount
from dex.adapters.deaura import DeauraVaultAdapter

logger = get_logger(__name__)


class VaultRegistry:
    """
    Registry of vault adapters keyed by vault address.

    Each vault address yields exactly one adapter with a fixed direction.
    """

    def __init__(self, config: Optional[VaultConfig] = None):
        self.config = config or get_vault_config()
        self._adapters: dict[Pubkey, DeauraVaultAdapter] = {}

    def discover(self, keyed_accounts: Iterable[KeyedAccount]) -> int:
        """
        Build adapters for discovered accounts.

        Unknown accounts and accounts whose data fails to decode are skipped
        and logged; the rest are registered.

        Returns:
            Number of newly registered adapters
        """
        discovered = 0
        skipped = []

        for keyed_account in keyed_accounts:
            if keyed_account.key in self._adapters:
                continue
            try:
                adapter = DeauraVaultAdapter.from_keyed_account(keyed_account, self.config)
            except AdapterError as e:
                skipped.append({"key": str(keyed_account.key), "code": e.code.value})
                continue

            self._adapters[adapter.key] = adapter
            discovered += 1
            logger.info(
                f"Discovered {adapter.label}",
                extra={"context": {"vault": str(adapter.key), "direction": adapter.direction.value}},
            )

        if skipped:
            logger.warning(
                f"Skipped {len(skipped)} accounts during discovery",
                extra={"context": {"skipped": skipped[:10]}},  # First 10
            )

        logger.info(f"Vault discovery complete: {discovered} new ({len(self._adapters)} total)")
        return discovered

    def discover_configured(self) -> int:
        """Register both configured vaults without account data."""
        return self.discover(
            KeyedAccount(key=self.config.vault(direction).address, owner=self.config.program_id)
            for direction in Direction
        )

    def get(self, key: Pubkey) -> Optional[DeauraVaultAdapter]:
        return self._adapters.get(key)

    def for_pair(self, input_mint: Pubkey, output_mint: Pubkey) -> Optional[DeauraVaultAdapter]:
        """Adapter converting input_mint into output_mint, if registered."""
        for adapter in self._adapters.values():
            if adapter.mint_in == input_mint and adapter.mint_out == output_mint:
                return adapter
        return None

    def required_accounts(self) -> frozenset[Pubkey]:
        """Union of every adapter's monitor set."""
        accounts: set[Pubkey] = set()
        for adapter in self._adapters.values():
            accounts |= adapter.required_accounts()
        return frozenset(accounts)

    def update_all(
        self,
        account_map: Mapping[Pubkey, bytes],
        slot: Optional[int] = None,
    ) -> dict[Pubkey, DecodeError]:
        """
        Refresh every adapter from one host account map.

        A failing adapter keeps its previous snapshot; the others still refresh.

        Returns:
            Decode failures keyed by vault address (empty when all succeeded)
        """
        failures: dict[Pubkey, DecodeError] = {}
        for key, adapter in self._adapters.items():
            try:
                adapter.update(account_map, slot=slot)
            except DecodeError as e:
                failures[key] = e

        if failures:
            logger.warning(
                f"{len(failures)} vault refreshes failed",
                extra={"context": {
                    "failures": {str(k): e.code.value for k, e in failures.items()},
                    "slot": slot,
                }},
            )
        return failures

    def require(self, key: Pubkey) -> DeauraVaultAdapter:
        """Like get(), but raises for an unregistered key."""
        adapter = self._adapters.get(key)
        if adapter is None:
            raise AdapterError(
                f"No adapter registered for {key}",
                code=ErrorCode.UNKNOWN_VAULT,
                details={"key": str(key)},
            )
        return adapter

    def get_summary(self) -> dict:
        """Registry summary for logging."""
        return {
            "total_adapters": len(self._adapters),
            "adapters": [
                {
                    "key": str(adapter.key),
                    "label": adapter.label,
                    "direction": adapter.direction.value,
                    "reserve_balance": adapter.view.reserve_balance,
                    "last_refresh_slot": adapter.view.last_refresh_slot,
                }
                for adapter in self._adapters.values()
            ],
        }

    def __len__(self) -> int:
        return len(self._adapters)

    def __iter__(self) -> Iterator[DeauraVaultAdapter]:
        return iter(self._adapters.values())
