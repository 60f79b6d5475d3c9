"""
dex/adapters/ - Protocol-specific liquidity source adapters.

Adapters:
- deaura: Deaura fixed-rate VNX/GOLDC vaults
"""

from dex.adapters.deaura import DeauraVaultAdapter

__all__ = [
    "DeauraVaultAdapter",
]
