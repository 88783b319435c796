"""Import path resolution - maps an import specifier to a sandbox file path.

Resolution order, first hit wins:

1. Node built-ins are already resolved; other bare specifiers (npm packages)
   are out of scope and never map to files.
2. Alias resolution through the manifest's ``paths`` patterns, probing
   ``<path>.ts|.tsx|.js|.jsx`` and then ``<path>/index.ts|.tsx``.
3. Relative resolution (``./`` and ``../``) from the importing file's
   directory, probing the same extension list.

Every probed path is recorded in order; an unresolved result carries the full
list so the caller can explain what was tried and suggest a fix.

Probes are answered by a ``FileTreeCache`` when one is given (no round trip),
otherwise by reading the candidate from the sandbox (one round trip each).
"""

from __future__ import annotations

import functools
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from sandscan.config.constants import (
    ASSET_EXTENSIONS,
    INDEX_EXTENSIONS,
    NODE_BUILTINS,
    NODE_PROTOCOL_PREFIX,
    RELATIVE_PREFIXES,
    SOURCE_EXTENSIONS,
)
from sandscan.core.logging import get_logger

if TYPE_CHECKING:
    from sandscan.remote.client import RemoteClient
    from sandscan.resolve.file_tree import FileTreeCache
    from sandscan.resolve.tsconfig import ConfigResolver, ModuleResolutionConfig

log = get_logger("sandscan.resolve")


@dataclass(frozen=True, slots=True)
class ResolutionResult:
    """Outcome of resolving one specifier."""

    resolved: str | None
    candidates: tuple[str, ...] = ()

    @property
    def found(self) -> bool:
        return self.resolved is not None


def is_relative_specifier(specifier: str) -> bool:
    return specifier.startswith(RELATIVE_PREFIXES)


def is_node_builtin(specifier: str) -> bool:
    if specifier.startswith(NODE_PROTOCOL_PREFIX):
        return True
    return specifier.split("/", 1)[0] in NODE_BUILTINS


def is_asset_import(specifier: str) -> bool:
    """True for stylesheet, image and font imports (query suffixes ignored)."""
    path = specifier.split("?", 1)[0].lower()
    return path.endswith(ASSET_EXTENSIONS)


@functools.lru_cache(maxsize=256)
def compile_alias_pattern(pattern: str) -> re.Pattern[str]:
    """Compile a single-``*`` alias pattern to an anchored regex.

    >>> compile_alias_pattern("@/*").match("@/lib/utils").group(1)
    'lib/utils'
    """
    head, star, tail = pattern.partition("*")
    if not star:
        return re.compile("^" + re.escape(pattern) + "$")
    return re.compile("^" + re.escape(head) + "(.*)" + re.escape(tail) + "$")


def join_base_url(base_url: str | None, path: str) -> str:
    """Compose a replacement path with ``baseUrl`` ('.' means no prefix)."""
    clean = path
    while clean.startswith("./"):
        clean = clean[2:]
    if base_url is None:
        return clean
    base = base_url.rstrip("/")
    while base.startswith("./"):
        base = base[2:]
    if base in ("", "."):
        return clean
    return f"{base}/{clean}"


def relative_base_path(specifier: str, origin_file: str) -> str:
    """Target path (without extension) of a relative specifier.

    Leading ``..`` segments each strip one directory from the origin file's
    directory; the remaining segments are appended.
    """
    origin_dir = origin_file.rpartition("/")[0]
    dir_parts = [p for p in origin_dir.split("/") if p and p != "."]
    import_parts = [p for p in specifier.split("/") if p and p != "."]

    up_count = 0
    for part in import_parts:
        if part != "..":
            break
        up_count += 1

    kept = dir_parts[: max(len(dir_parts) - up_count, 0)]
    remaining = "/".join(import_parts[up_count:])
    return "/".join([*kept, remaining]) if kept else remaining


class ImportPathResolver:
    """Resolves import specifiers to sandbox-relative file paths.

    Usage::

        resolver = ImportPathResolver(remote, config_resolver)
        result = await resolver.resolve("@/lib/utils", "src/App.tsx", sandbox_id, tree)
    """

    def __init__(
        self,
        remote: RemoteClient | None,
        config_resolver: ConfigResolver,
        *,
        alias_prefix: str = "@/",
    ) -> None:
        self._remote = remote
        self._config_resolver = config_resolver
        self._alias_prefix = alias_prefix

    @property
    def alias_prefix(self) -> str:
        return self._alias_prefix

    def is_local_specifier(self, specifier: str) -> bool:
        """True for relative or alias-prefixed specifiers (the ones we resolve)."""
        return is_relative_specifier(specifier) or specifier.startswith(self._alias_prefix)

    async def resolve(
        self,
        specifier: str,
        origin_file: str,
        sandbox_id: str | None,
        file_tree: FileTreeCache | None = None,
    ) -> ResolutionResult:
        if is_node_builtin(specifier):
            return ResolutionResult(resolved=specifier)
        if not self.is_local_specifier(specifier):
            return ResolutionResult(resolved=None)

        candidates: list[str] = []

        if sandbox_id is not None:
            config = await self._config_resolver.get_config(sandbox_id)
            if config.paths:
                resolved = await self._resolve_alias(
                    specifier, config, candidates, sandbox_id, file_tree
                )
                if resolved is not None:
                    return ResolutionResult(resolved, tuple(candidates))

        # Alias-prefixed specifiers never fall through to relative resolution
        if is_relative_specifier(specifier):
            base = relative_base_path(specifier, origin_file)
            for ext in SOURCE_EXTENSIONS:
                candidate = f"{base}{ext}"
                if await self._probe(candidate, candidates, sandbox_id, file_tree):
                    return ResolutionResult(candidate, tuple(candidates))

        log.debug(
            "import_unresolved",
            specifier=specifier,
            origin=origin_file,
            candidates=candidates,
        )
        return ResolutionResult(resolved=None, candidates=tuple(candidates))

    async def _resolve_alias(
        self,
        specifier: str,
        config: ModuleResolutionConfig,
        candidates: list[str],
        sandbox_id: str,
        file_tree: FileTreeCache | None,
    ) -> str | None:
        for pattern, replacements in config.paths.items():
            match = compile_alias_pattern(pattern).match(specifier)
            if match is None:
                continue
            capture = match.group(1) if match.groups() else ""
            log.debug("alias_match", specifier=specifier, pattern=pattern)

            for replacement in replacements:
                full_path = join_base_url(config.base_url, replacement.replace("*", capture, 1))
                for ext in SOURCE_EXTENSIONS:
                    candidate = f"{full_path}{ext}"
                    if await self._probe(candidate, candidates, sandbox_id, file_tree):
                        return candidate
                for ext in INDEX_EXTENSIONS:
                    candidate = f"{full_path}/index{ext}"
                    if await self._probe(candidate, candidates, sandbox_id, file_tree):
                        return candidate
        return None

    async def _probe(
        self,
        candidate: str,
        candidates: list[str],
        sandbox_id: str | None,
        file_tree: FileTreeCache | None,
    ) -> bool:
        candidates.append(candidate)
        if file_tree is not None:
            return candidate in file_tree
        if sandbox_id is not None and self._remote is not None:
            return await self._remote.read_text(sandbox_id, candidate) is not None
        # No tree and no sandbox: the candidate cannot be verified
        return False
