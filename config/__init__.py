# PATH: config/__init__.py
"""
Configuration loading utilities.

Deployment identifiers are read once from deaura.yaml into a frozen VaultConfig.
"""

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv
from solders.pubkey import Pubkey

from core.constants import Direction
from core.exceptions import ConfigError, ErrorCode
from core.models import ScaleConversion, Token


CONFIG_DIR = Path(__file__).parent
DEFAULT_RPC_URL = "https://api.mainnet-beta.solana.com"


def load_yaml(filename: str) -> Dict[str, Any]:
    """
    Load a YAML configuration file.

    Args:
        filename: Name of file in config directory

    Returns:
        Parsed YAML as dict
    """
    filepath = CONFIG_DIR / filename
    if not filepath.exists():
        raise FileNotFoundError(f"Config file not found: {filepath}")

    with open(filepath, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_deaura() -> Dict[str, Any]:
    """Load Deaura deployment configuration."""
    return load_yaml("deaura.yaml")


@dataclass(frozen=True)
class VaultEntry:
    """One vault token account and its display label."""
    address: Pubkey
    label: str


@dataclass(frozen=True)
class VaultConfig:
    """Process-wide deployment identifiers."""
    program_id: Pubkey
    asset_a: Token
    asset_b: Token
    vaults: Dict[Direction, VaultEntry]

    @property
    def scale(self) -> ScaleConversion:
        return ScaleConversion(self.asset_a.decimals, self.asset_b.decimals)

    @property
    def reserve_mints(self) -> list[Pubkey]:
        return [self.asset_a.mint, self.asset_b.mint]

    def vault(self, direction: Direction) -> VaultEntry:
        return self.vaults[direction]

    def direction_for_vault(self, address: Pubkey) -> Optional[Direction]:
        for direction, entry in self.vaults.items():
            if entry.address == address:
                return direction
        return None

    def direction_for_source_mint(self, mint: Pubkey) -> Optional[Direction]:
        if mint == self.asset_a.mint:
            return Direction.DEPOSIT
        if mint == self.asset_b.mint:
            return Direction.REDEEM
        return None

    def mints_for(self, direction: Direction) -> tuple[Pubkey, Pubkey]:
        """(mint_in, mint_out) for a direction."""
        if direction is Direction.DEPOSIT:
            return self.asset_a.mint, self.asset_b.mint
        return self.asset_b.mint, self.asset_a.mint


def _pubkey(raw: Dict[str, Any], key: str) -> Pubkey:
    value = raw.get(key)
    if not value:
        raise ConfigError(f"Missing '{key}'", code=ErrorCode.CONFIG_INVALID, details={"key": key})
    try:
        return Pubkey.from_string(str(value))
    except ValueError as e:
        raise ConfigError(
            f"'{key}' is not a valid pubkey: {value}",
            code=ErrorCode.CONFIG_INVALID,
            details={"key": key, "value": value, "error": str(e)},
        ) from e


def parse_vault_config(raw: Dict[str, Any]) -> VaultConfig:
    """
    Build a VaultConfig from the parsed YAML document.

    Raises:
        ConfigError: On missing sections, bad pubkeys, out-of-range decimals
            or duplicate vaults
    """
    try:
        mints = raw["mints"]
        vaults = raw["vaults"]
        assets = {
            name: Token(
                mint=_pubkey(mints[name], "mint"),
                symbol=str(mints[name]["symbol"]),
                decimals=int(mints[name]["decimals"]),
            )
            for name in ("asset_a", "asset_b")
        }
        entries = {
            direction: VaultEntry(
                address=_pubkey(vaults[direction.value], "address"),
                label=str(vaults[direction.value]["label"]),
            )
            for direction in Direction
        }
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise ConfigError(
            f"Malformed vault configuration: {e}",
            code=ErrorCode.CONFIG_INVALID,
            details={"error": str(e)},
        ) from e

    for name, token in assets.items():
        # SPL mint decimals is a u8
        if not 0 <= token.decimals <= 255:
            raise ConfigError(
                f"{name} decimals out of range: {token.decimals}",
                code=ErrorCode.CONFIG_INVALID,
                details={"asset": name, "decimals": token.decimals},
            )

    if entries[Direction.DEPOSIT].address == entries[Direction.REDEEM].address:
        raise ConfigError(
            "Deposit and redeem vaults must be distinct accounts",
            code=ErrorCode.CONFIG_INVALID,
            details={"address": str(entries[Direction.DEPOSIT].address)},
        )
    if assets["asset_a"].mint == assets["asset_b"].mint:
        raise ConfigError(
            "Asset mints must be distinct",
            code=ErrorCode.CONFIG_INVALID,
            details={"mint": str(assets["asset_a"].mint)},
        )

    return VaultConfig(
        program_id=_pubkey(raw, "program_id"),
        asset_a=assets["asset_a"],
        asset_b=assets["asset_b"],
        vaults=entries,
    )


@lru_cache(maxsize=1)
def get_vault_config() -> VaultConfig:
    """Load deaura.yaml once per process."""
    return parse_vault_config(load_deaura())


def get_rpc_urls() -> list[str]:
    """
    RPC endpoints for the host harness.

    SOLANA_RPC_URL may hold several comma-separated URLs (tried in order).
    """
    load_dotenv()
    raw = os.getenv("SOLANA_RPC_URL", DEFAULT_RPC_URL)
    return [url.strip() for url in raw.split(",") if url.strip()]
