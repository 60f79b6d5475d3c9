"""
dex/ - Liquidity source layer.

Modules:
- interface: LiquiditySource capability set consumed by the router
- vault_view: vault account snapshot and decoding
- quote_engine: fixed-rate quoting
- instructions: deposit/redeem instruction building
- adapters: protocol adapters built from the above
"""
