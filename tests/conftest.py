# PATH: tests/conftest.py
"""
Pytest configuration and fixtures for adapter tests.
"""

import struct
import sys
from pathlib import Path

import pytest
from solders.pubkey import Pubkey

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from config import get_vault_config  # noqa: E402
from core.constants import Direction, TOKEN_ACCOUNT_LEN  # noqa: E402
from core.models import UserAccounts  # noqa: E402


def pytest_configure(config):
    """Configure pytest."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )


@pytest.fixture
def vault_config():
    """Deployment config from config/deaura.yaml."""
    return get_vault_config()


@pytest.fixture
def token_account_bytes():
    """
    Factory for raw SPL token account data.

    Usage:
        data = token_account_bytes(mint, amount=1_000)
    """
    def _make(mint: Pubkey, amount: int = 0, owner: Pubkey | None = None, state: int = 1) -> bytes:
        data = bytearray(TOKEN_ACCOUNT_LEN)
        data[0:32] = bytes(mint)
        data[32:64] = bytes(owner or Pubkey.new_unique())
        struct.pack_into("<Q", data, 64, amount)
        data[108] = state
        return bytes(data)

    return _make


@pytest.fixture
def vault_bytes(vault_config, token_account_bytes):
    """Factory for vault (VNX) token account data with a given reserve."""
    def _make(amount: int) -> bytes:
        return token_account_bytes(vault_config.asset_a.mint, amount=amount)

    return _make


@pytest.fixture
def user_accounts():
    """Complete set of per-swap user accounts."""
    return UserAccounts(
        token_transfer_authority=Pubkey.new_unique(),
        source_token_account=Pubkey.new_unique(),
        destination_token_account=Pubkey.new_unique(),
    )


@pytest.fixture
def deposit_adapter(vault_config):
    from dex.adapters.deaura import DeauraVaultAdapter
    return DeauraVaultAdapter(Direction.DEPOSIT, vault_config)


@pytest.fixture
def redeem_adapter(vault_config):
    from dex.adapters.deaura import DeauraVaultAdapter
    return DeauraVaultAdapter(Direction.REDEEM, vault_config)
