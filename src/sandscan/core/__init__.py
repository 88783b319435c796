"""Core module exports."""

from sandscan.core.cache import TTLCache
from sandscan.core.errors import (
    ConfigError,
    ErrorCode,
    InternalError,
    RemoteError,
    SandScanError,
)
from sandscan.core.logging import (
    clear_request_id,
    configure_logging,
    get_logger,
    get_request_id,
    set_request_id,
)

__all__ = [
    # Cache
    "TTLCache",
    # Errors
    "ConfigError",
    "ErrorCode",
    "InternalError",
    "RemoteError",
    "SandScanError",
    # Logging
    "clear_request_id",
    "configure_logging",
    "get_logger",
    "get_request_id",
    "set_request_id",
]
