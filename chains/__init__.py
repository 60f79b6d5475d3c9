"""
chains/ - Ledger access layer for the host harness.

Modules:
- providers: Solana JSON-RPC provider with failover
"""

from chains.providers import (
    AccountFetch,
    RPCProvider,
    RPCResponse,
    RPCStats,
)

__all__ = [
    "AccountFetch",
    "RPCProvider",
    "RPCResponse",
    "RPCStats",
]
