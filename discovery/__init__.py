"""
discovery/ - Discovery-time bookkeeping.

Modules:
- registry: one adapter per configured vault, keyed by vault address
"""
