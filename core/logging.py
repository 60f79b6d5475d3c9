# PATH: core/logging.py
"""
Structured JSON logging for the vault adapter.

Contextual fields travel only via extra={"context": {...}}. A logger can be
bound to a vault with get_logger(__name__, vault=..., direction=...); bound
fields are merged under the per-call context.

Entry shape:
    {"timestamp", "level", "logger", "message", "context": {vault, slot, ...}}
"""

import json
import logging
import sys
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from core.exceptions import ConfigError, ErrorCode

# Process-wide fields (service name, version) added to every entry
_global_context: dict[str, Any] = {}

_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _json_default(value: Any) -> Any:
    """Enums by value, raw bytes as hex, everything else (Pubkey) via str()."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).hex()
    return str(value)


class JSONFormatter(logging.Formatter):
    """One JSON object per line; timestamp is the record's creation time in UTC."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        context = {**_global_context, **(getattr(record, "context", None) or {})}
        if record.exc_info:
            context["exception"] = self.formatException(record.exc_info)
        if context:
            entry["context"] = context

        return json.dumps(entry, default=_json_default)


class ContextAdapter(logging.LoggerAdapter):
    """Merges bound fields (vault, direction) into each call's context."""

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        call_context = kwargs.get("extra", {}).get("context", {})
        kwargs["extra"] = {"context": {**self.extra, **call_context}}
        return msg, kwargs


def set_global_context(**fields: Any) -> None:
    """Add fields to every entry, e.g. set_global_context(service="deaura-quote")."""
    _global_context.update(fields)


def clear_global_context() -> None:
    _global_context.clear()


def get_logger(name: str, **bound: Any) -> ContextAdapter:
    """
    Module logger, optionally bound to fixed context fields.

    Example:
        logger = get_logger(__name__, vault=str(vault_address), direction="redeem")
        logger.debug("Vault refreshed", extra={"context": {"slot": 312_000_000}})
    """
    return ContextAdapter(logging.getLogger(name), bound)


def setup_logging(
    level: str = "INFO",
    json_output: bool = True,
    log_file: str | None = None,
) -> None:
    """
    Configure the root logger for the CLI host.

    Raises:
        ConfigError: Unknown level name
    """
    level_name = level.upper()
    if level_name not in _LEVELS:
        raise ConfigError(
            f"Unknown log level: {level}",
            code=ErrorCode.CONFIG_INVALID,
            details={"level": level},
        )

    if json_output:
        formatter: logging.Formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    root_logger = logging.getLogger()
    root_logger.setLevel(level_name)
    root_logger.handlers.clear()
    for handler in handlers:
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    # RPC transport chatter
    for noisy in ("httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def log_quote(
    logger: ContextAdapter,
    label: str,
    direction: str,
    amount_in: int,
    amount_out: int,
    valid: bool,
    **extra: Any,
) -> None:
    """Quote record at debug level."""
    logger.debug(
        f"Quote: {label} {amount_in} -> {amount_out} (valid={valid})",
        extra={
            "context": {
                "label": label,
                "direction": direction,
                "amount_in": amount_in,
                "amount_out": amount_out,
                "valid": valid,
                **extra,
            }
        },
    )


def log_error(
    logger: ContextAdapter,
    error_code: str,
    message: str,
    **extra: Any,
) -> None:
    """Error record prefixed with its code."""
    logger.error(
        f"[{error_code}] {message}",
        extra={
            "context": {
                "error_code": error_code,
                **extra,
            }
        },
    )
