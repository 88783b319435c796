"""sandscan error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Remote sandbox I/O
- 9xxx: Internal
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002
    CONFIG_FILE_NOT_FOUND = 2004

    # Remote (3xxx)
    REMOTE_TIMEOUT = 3001
    REMOTE_COMMAND_FAILED = 3002

    # Internal (9xxx)
    INTERNAL_ERROR = 9001


@dataclass(frozen=True, slots=True)
class SandScanError(Exception):
    """Base error with structured context."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'REMOTE_TIMEOUT')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON responses."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(SandScanError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )

    @classmethod
    def file_not_found(cls, path: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_FILE_NOT_FOUND,
            message=f"Config file not found: {path}",
            details={"path": path},
        )


class RemoteError(SandScanError):
    """Sandbox command or file I/O failures.

    Always retryable: the sandbox may simply be busy or still booting.
    """

    @classmethod
    def timeout(cls, sandbox_id: str, command: str, timeout_ms: int) -> "RemoteError":
        return cls(
            code=ErrorCode.REMOTE_TIMEOUT,
            message=f"Command timed out after {timeout_ms}ms in sandbox {sandbox_id}",
            retryable=True,
            details={"sandbox_id": sandbox_id, "command": command, "timeout_ms": timeout_ms},
        )

    @classmethod
    def command_failed(cls, sandbox_id: str, command: str, reason: str) -> "RemoteError":
        return cls(
            code=ErrorCode.REMOTE_COMMAND_FAILED,
            message=f"Command failed in sandbox {sandbox_id}: {reason}",
            retryable=True,
            details={"sandbox_id": sandbox_id, "command": command, "reason": reason},
        )


class InternalError(SandScanError):
    """Internal/unexpected errors."""

    @classmethod
    def unexpected(cls, reason: str, **details: Any) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {reason}",
            details=details,
        )
