"""Timeout-bounded access to sandbox primitives."""

from __future__ import annotations

import asyncio
import time

from sandscan.core.errors import RemoteError, SandScanError
from sandscan.core.logging import get_logger
from sandscan.remote.models import CommandResult, SandboxClient, normalize_command_result

log = get_logger("sandscan.remote")


class RemoteClient:
    """Wraps a ``SandboxClient`` with explicit timeouts and result normalization.

    ``run`` raises ``RemoteError`` for timeouts and transport failures so
    callers can treat the call as "no data"; ``read_text`` returns None for
    any unreadable path, which is the expected answer for a missing file.
    """

    def __init__(self, client: SandboxClient) -> None:
        self._client = client

    async def run(self, sandbox_id: str, command: str, *, timeout_ms: int) -> CommandResult:
        start = time.monotonic()
        try:
            raw = await asyncio.wait_for(
                self._client.execute_command(sandbox_id, command, timeout_ms=timeout_ms),
                timeout=timeout_ms / 1000,
            )
        except TimeoutError:
            log.warning(
                "remote_command_timeout",
                sandbox_id=sandbox_id,
                command=command[:120],
                timeout_ms=timeout_ms,
            )
            raise RemoteError.timeout(sandbox_id, command, timeout_ms) from None
        except SandScanError:
            raise
        except Exception as e:
            # Collaborator transport errors arrive as arbitrary exception types
            log.warning(
                "remote_command_failed",
                sandbox_id=sandbox_id,
                command=command[:120],
                error=str(e),
            )
            raise RemoteError.command_failed(sandbox_id, command, str(e)) from e

        result = normalize_command_result(raw)
        log.debug(
            "remote_command_complete",
            sandbox_id=sandbox_id,
            exit_code=result.exit_code,
            stdout_len=len(result.stdout),
            stderr_len=len(result.stderr),
            duration_ms=int((time.monotonic() - start) * 1000),
        )
        return result

    async def read_text(self, sandbox_id: str, path: str) -> str | None:
        """Read a sandbox file, or None if it cannot be read."""
        try:
            content = await self._client.read_file(sandbox_id, path)
        except Exception as e:
            log.debug("remote_read_miss", sandbox_id=sandbox_id, path=path, error=str(e))
            return None
        if isinstance(content, bytes):
            return content.decode(errors="replace")
        return content
