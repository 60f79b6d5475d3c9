"""
core - Core utilities and models for the vault adapter.

This package contains:
- models.py: Data models (Quote, InstructionPlan, VaultSnapshot, UserAccounts)
- constants.py: Direction enum and protocol constants
- exceptions.py: Typed exceptions with error codes
- math.py: Integer amount utilities (no float)
- logging.py: Structured JSON logging
"""

from core.constants import Direction
from core.exceptions import (
    AdapterError,
    BuildError,
    ConfigError,
    DecodeError,
    DirectionMismatchError,
    ErrorCode,
    InfraError,
    InsufficientReserveError,
    MissingAccountError,
    ValidationError,
)
from core.logging import get_logger, setup_logging
from core.models import (
    InstructionPlan,
    KeyedAccount,
    Quote,
    ScaleConversion,
    SwapParams,
    Token,
    UserAccounts,
    VaultSnapshot,
)

__all__ = [
    # Constants
    "Direction",
    # Exceptions
    "AdapterError",
    "BuildError",
    "ConfigError",
    "DecodeError",
    "DirectionMismatchError",
    "ErrorCode",
    "InfraError",
    "InsufficientReserveError",
    "MissingAccountError",
    "ValidationError",
    # Models
    "InstructionPlan",
    "KeyedAccount",
    "Quote",
    "ScaleConversion",
    "SwapParams",
    "Token",
    "UserAccounts",
    "VaultSnapshot",
    # Logging
    "get_logger",
    "setup_logging",
]
