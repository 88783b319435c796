"""Remote sandbox boundary types.

Every collaborator response is adapted into ``CommandResult`` as soon as it
crosses the boundary; nothing downstream branches on backend-specific fields.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol

from sandscan.core.errors import InternalError


class SandboxClient(Protocol):
    """Primitives provided by whatever hosts the sandboxes.

    ``sandbox_id`` is opaque: it is only passed back to these two methods and
    used as a cache key.
    """

    async def execute_command(self, sandbox_id: str, command: str, *, timeout_ms: int) -> Any:
        """Run a shell command; returns a backend-specific result object or mapping."""
        ...

    async def read_file(self, sandbox_id: str, path: str) -> str:
        """Read a file; raises (typically a not-found error) when it is absent."""
        ...


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Normalized result of one remote command."""

    exit_code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.exit_code == 0

    @property
    def combined_output(self) -> str:
        """stdout and stderr joined, skipping empty streams."""
        return "\n".join(s for s in (self.stdout, self.stderr) if s)


_EXIT_CODE_KEYS = ("exit_code", "exitCode", "returncode", "code")
_STDOUT_KEYS = ("stdout", "output", "result")
_STDERR_KEYS = ("stderr",)


def _pick(raw: Any, keys: tuple[str, ...]) -> Any:
    for key in keys:
        if isinstance(raw, Mapping):
            if key in raw and raw[key] is not None:
                return raw[key]
        else:
            value = getattr(raw, key, None)
            if value is not None:
                return value
    return None


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode(errors="replace")
    if isinstance(value, (list, tuple)):
        return "".join(_as_text(v) for v in value)
    return str(value)


def normalize_command_result(raw: Any) -> CommandResult:
    """Adapt a collaborator's command response into a ``CommandResult``.

    Accepts mappings or objects. A missing exit code counts as success and
    missing streams as empty, matching backends that omit them on clean runs.

    Raises:
        InternalError: If the response is None or an unsupported scalar.
    """
    if isinstance(raw, CommandResult):
        return raw
    if raw is None or isinstance(raw, (str, bytes, int, float, bool)):
        raise InternalError.unexpected(
            "unsupported command result shape", result_type=type(raw).__name__
        )

    exit_code = _pick(raw, _EXIT_CODE_KEYS)
    try:
        code = int(exit_code) if exit_code is not None else 0
    except (TypeError, ValueError):
        raise InternalError.unexpected(
            "non-integer exit code in command result", exit_code=repr(exit_code)
        ) from None

    return CommandResult(
        exit_code=code,
        stdout=_as_text(_pick(raw, _STDOUT_KEYS)),
        stderr=_as_text(_pick(raw, _STDERR_KEYS)),
    )
