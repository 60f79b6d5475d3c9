# PATH: core/exceptions.py
"""
Typed exceptions for the vault adapter.

Every error carries an ErrorCode, a message and a details dict.
Failures are raised to the caller immediately; nothing is retried here.
"""

from enum import Enum
from typing import Any, Optional


class ErrorCode(str, Enum):
    """Error codes surfaced to the host."""
    # Account decoding
    DECODE_BAD_LENGTH = "DECODE_BAD_LENGTH"
    DECODE_BAD_STATE = "DECODE_BAD_STATE"
    DECODE_MINT_MISMATCH = "DECODE_MINT_MISMATCH"
    DECODE_ACCOUNT_MISSING = "DECODE_ACCOUNT_MISSING"

    # Quoting / building
    INSUFFICIENT_RESERVE = "INSUFFICIENT_RESERVE"
    MISSING_ACCOUNT = "MISSING_ACCOUNT"
    DIRECTION_MISMATCH = "DIRECTION_MISMATCH"
    UNSUPPORTED_MINT = "UNSUPPORTED_MINT"
    INVALID_AMOUNT = "INVALID_AMOUNT"

    # Discovery / configuration
    UNKNOWN_VAULT = "UNKNOWN_VAULT"
    CONFIG_INVALID = "CONFIG_INVALID"

    # Host harness
    INFRA_RPC_ERROR = "INFRA_RPC_ERROR"

    UNKNOWN = "UNKNOWN"


class AdapterError(Exception):
    """Base exception for the vault adapter."""

    default_code: ErrorCode = ErrorCode.UNKNOWN

    def __init__(
        self,
        message: str,
        code: Optional[ErrorCode] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}

    def __str__(self):
        return f"[{self.code.value}] {self.message}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
        }


class DecodeError(AdapterError):
    """Account bytes do not match the expected layout. Previous snapshot is kept."""
    default_code = ErrorCode.DECODE_BAD_LENGTH


class BuildError(AdapterError):
    """Instruction plan could not be built. No partial plan is returned."""
    pass


class InsufficientReserveError(BuildError):
    """Redeem amount exceeds the observed vault reserve."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message, ErrorCode.INSUFFICIENT_RESERVE, details)


class MissingAccountError(BuildError):
    """A required user account was not supplied."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message, ErrorCode.MISSING_ACCOUNT, details)


class DirectionMismatchError(BuildError):
    """Build requested for a direction this instance does not serve."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message, ErrorCode.DIRECTION_MISMATCH, details)


class ValidationError(AdapterError):
    """Input value out of range."""
    default_code = ErrorCode.INVALID_AMOUNT


class ConfigError(AdapterError):
    """Configuration missing or malformed."""
    default_code = ErrorCode.CONFIG_INVALID


class InfraError(AdapterError):
    """Infrastructure-related errors (RPC, timeouts)."""
    default_code = ErrorCode.INFRA_RPC_ERROR
