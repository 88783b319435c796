"""Sandbox client backed by local directories.

Lets the CLI (and integration tests) run full-project analysis against a
checkout on disk. Sandbox ids are directories relative to ``root``.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from sandscan.remote.models import CommandResult


class LocalSandbox:
    """``SandboxClient`` implementation using local subprocesses and file reads."""

    def __init__(self, root: Path) -> None:
        self._root = root.resolve()

    def _project_dir(self, sandbox_id: str) -> Path:
        project_dir = (self._root / sandbox_id).resolve()
        if not project_dir.is_relative_to(self._root) or not project_dir.is_dir():
            raise FileNotFoundError(f"No sandbox directory: {sandbox_id}")
        return project_dir

    async def execute_command(
        self, sandbox_id: str, command: str, *, timeout_ms: int
    ) -> CommandResult:
        proc = await asyncio.create_subprocess_shell(
            command,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=self._project_dir(sandbox_id),
        )
        try:
            stdout_bytes, stderr_bytes = await asyncio.wait_for(
                proc.communicate(), timeout=timeout_ms / 1000
            )
        except TimeoutError:
            proc.kill()
            await proc.wait()
            raise
        return CommandResult(
            exit_code=proc.returncode if proc.returncode is not None else -1,
            stdout=stdout_bytes.decode(errors="replace"),
            stderr=stderr_bytes.decode(errors="replace"),
        )

    async def read_file(self, sandbox_id: str, path: str) -> str:
        project_dir = self._project_dir(sandbox_id)
        target = (project_dir / path).resolve()
        if not target.is_relative_to(project_dir) or not target.is_file():
            raise FileNotFoundError(f"No such file in sandbox {sandbox_id}: {path}")
        return target.read_text(encoding="utf-8", errors="replace")
