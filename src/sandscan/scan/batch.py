"""Batched remote scanning - whole-project reads in a single round trip.

Sandboxes charge a lot per command and cap how many commands a run may issue,
so instead of ``find`` + one ``cat`` per file, the scanner sends:

- one listing command (names only) that feeds the ``FileTreeCache``, and
- one ``bash -c`` loop that prints, for each selected file, a start
  delimiter, the path, the content (or an unreadable sentinel) and an end
  delimiter.

The shell runs the loop sequentially, so blocks come back whole and in
selection order. Selection is priority-ordered (top-level sources, pages,
components, api/routes, hooks, lib, utils, then everything else),
deduplicated, and capped at ``max_files``.
"""

from __future__ import annotations

import shlex
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from sandscan.config.constants import (
    EXCLUDED_NAME_GLOBS,
    EXCLUDED_PATH_GLOBS,
    GENERATED_UI_PATH_GLOB,
    PRIORITY_DIRECTORIES,
    SOURCE_EXTENSIONS,
)
from sandscan.core.logging import get_logger
from sandscan.resolve.file_tree import FileTreeCache

if TYPE_CHECKING:
    from sandscan.config.models import ScannerConfig
    from sandscan.remote.client import RemoteClient

log = get_logger("sandscan.scan")


@dataclass(frozen=True, slots=True)
class ScannedFile:
    path: str
    content: str


@dataclass(frozen=True, slots=True)
class BatchScanResult:
    """Files recovered from one batched read."""

    files: tuple[ScannedFile, ...] = ()
    skipped: tuple[str, ...] = field(default=())  # unreadable paths

    @property
    def paths(self) -> list[str]:
        return [f.path for f in self.files]


# =============================================================================
# Command Builders
# =============================================================================


def _name_filter(extensions: tuple[str, ...]) -> str:
    clauses = " -o ".join(f'-name "*{ext}"' for ext in extensions)
    return f"\\( {clauses} \\)"


def _exclusions(name_globs: tuple[str, ...], path_globs: tuple[str, ...] = ()) -> str:
    parts = [f'! -name "{g}"' for g in name_globs]
    parts.extend(f'! -path "{g}"' for g in path_globs)
    return " ".join(parts)


def build_file_tree_command(
    source_root: str, extensions: tuple[str, ...] = SOURCE_EXTENSIONS
) -> str:
    """Command listing every source-like file under ``source_root``."""
    script = f"find {shlex.quote(source_root)} -type f {_name_filter(extensions)} 2>/dev/null"
    return f"bash -c {shlex.quote(script)}"


def build_listing_script(source_root: str, extensions: tuple[str, ...] = SOURCE_EXTENSIONS) -> str:
    """Shell fragment printing candidate files in priority order (may repeat)."""
    names = _name_filter(extensions)
    excluded = _exclusions(EXCLUDED_NAME_GLOBS)
    root = shlex.quote(source_root)
    finds = [f"find {root} -maxdepth 1 -type f {names} {excluded} 2>/dev/null"]

    for group in PRIORITY_DIRECTORIES:
        dirs = " ".join(shlex.quote(f"{source_root}/{d}") for d in group)
        extra = ""
        if "components" in group:
            extra = " " + _exclusions((), (GENERATED_UI_PATH_GLOB,))
        finds.append(f"find {dirs} -type f {names} {excluded}{extra} 2>/dev/null")

    catch_all = _exclusions(EXCLUDED_NAME_GLOBS, EXCLUDED_PATH_GLOBS)
    finds.append(f"find {root} -type f {names} {catch_all} 2>/dev/null")
    return "; ".join(finds)


def build_batch_command(
    source_root: str,
    *,
    max_files: int,
    start_delimiter: str,
    end_delimiter: str,
    unreadable_sentinel: str,
) -> str:
    """One command that selects up to ``max_files`` files and prints them all."""
    listing = build_listing_script(source_root)
    start = shlex.quote(start_delimiter)
    end = shlex.quote(end_delimiter)
    sentinel = shlex.quote(unreadable_sentinel)
    script = (
        f"({listing}) | awk '!seen[$0]++' | head -n {max_files} | "
        'while IFS= read -r file; do '
        f'echo {start}; echo "$file"; '
        f'cat "$file" 2>/dev/null || echo {sentinel}; '
        f"echo {end}; "
        "done"
    )
    return f"bash -c {shlex.quote(script)}"


# =============================================================================
# Output Parsing
# =============================================================================


def parse_batch_output(
    stdout: str,
    *,
    start_delimiter: str,
    end_delimiter: str,
    unreadable_sentinel: str,
) -> BatchScanResult:
    """Recover ``(path, content)`` pairs from batched command output.

    Blocks without an end delimiter (truncated output) or without a path are
    ignored. Unreadable files are reported in ``skipped``; empty files are
    dropped since there is nothing to analyze.
    """
    files: list[ScannedFile] = []
    skipped: list[str] = []

    for block in stdout.split(start_delimiter)[1:]:
        end_index = block.find(end_delimiter)
        if end_index == -1:
            continue

        body = block[:end_index]
        if body.startswith("\r\n"):
            body = body[2:]
        elif body.startswith("\n"):
            body = body[1:]

        path, _, content = body.partition("\n")
        path = path.strip()
        if not path:
            continue

        if content.strip() == unreadable_sentinel:
            log.warning("batch_file_unreadable", path=path)
            skipped.append(path)
            continue
        if not content.strip():
            log.debug("batch_file_empty", path=path)
            continue

        files.append(ScannedFile(path=path, content=content))

    return BatchScanResult(files=tuple(files), skipped=tuple(skipped))


# =============================================================================
# Scanner
# =============================================================================


class BatchedScanner:
    """Issues the listing and batched-read commands for one sandbox.

    Both methods raise ``RemoteError`` when the command times out or the
    sandbox is unreachable; a command that runs but finds nothing yields an
    empty result.
    """

    def __init__(self, remote: RemoteClient, config: ScannerConfig) -> None:
        self._remote = remote
        self._config = config

    async def enumerate_file_tree(self, sandbox_id: str) -> FileTreeCache | None:
        """List every source file under the source root.

        Returns None when the listing command failed without output, so callers
        never mistake a broken listing for an empty project.
        """
        command = build_file_tree_command(self._config.source_root)
        result = await self._remote.run(
            sandbox_id, command, timeout_ms=self._config.tree_timeout_ms
        )
        if not result.ok and not result.stdout:
            log.warning(
                "file_tree_unavailable",
                sandbox_id=sandbox_id,
                exit_code=result.exit_code,
                stderr=result.stderr[:500],
            )
            return None
        tree = FileTreeCache.from_listing(result.stdout)
        log.info("file_tree_enumerated", sandbox_id=sandbox_id, file_count=len(tree))
        return tree

    async def scan(self, sandbox_id: str) -> BatchScanResult:
        cfg = self._config
        command = build_batch_command(
            cfg.source_root,
            max_files=cfg.max_files,
            start_delimiter=cfg.start_delimiter,
            end_delimiter=cfg.end_delimiter,
            unreadable_sentinel=cfg.unreadable_sentinel,
        )
        result = await self._remote.run(sandbox_id, command, timeout_ms=cfg.batch_timeout_ms)

        if result.stderr:
            log.warning("batch_scan_stderr", sandbox_id=sandbox_id, stderr=result.stderr[:500])
        if not result.stdout:
            log.warning("batch_scan_empty", sandbox_id=sandbox_id, exit_code=result.exit_code)
            return BatchScanResult()

        scan = parse_batch_output(
            result.stdout,
            start_delimiter=cfg.start_delimiter,
            end_delimiter=cfg.end_delimiter,
            unreadable_sentinel=cfg.unreadable_sentinel,
        )
        log.info(
            "batch_scan_complete",
            sandbox_id=sandbox_id,
            file_count=len(scan.files),
            skipped=len(scan.skipped),
        )
        return scan
