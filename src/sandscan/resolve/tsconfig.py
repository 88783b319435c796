"""Module-resolution manifest (tsconfig.json) loading and caching.

Only ``compilerOptions.baseUrl`` and ``compilerOptions.paths`` matter here.
A missing or unparseable manifest is a normal state for generated projects:
it yields an empty config, and that empty config is cached like any other so
the sandbox is not asked again until the TTL elapses.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from sandscan.core.cache import TTLCache
from sandscan.core.logging import get_logger

if TYPE_CHECKING:
    from sandscan.remote.client import RemoteClient

log = get_logger("sandscan.resolve.tsconfig")

# Strings are matched first so comment markers inside them survive
_JSONC_TOKEN_RE = re.compile(r'("(?:\\.|[^"\\])*")|//[^\n]*|/\*.*?\*/', re.DOTALL)
_TRAILING_COMMA_RE = re.compile(r'("(?:\\.|[^"\\])*")|,(\s*[}\]])')


@dataclass(frozen=True, slots=True)
class ModuleResolutionConfig:
    """The two resolution fields of a tsconfig-style manifest."""

    base_url: str | None = None
    # pattern -> replacements, in declaration order
    paths: dict[str, tuple[str, ...]] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return self.base_url is None and not self.paths

    @classmethod
    def from_compiler_options(cls, options: Any) -> ModuleResolutionConfig:
        """Build from a ``compilerOptions`` object, dropping malformed fields."""
        if not isinstance(options, dict):
            return cls()

        base_url = options.get("baseUrl")
        if not isinstance(base_url, str) or not base_url:
            base_url = None

        paths: dict[str, tuple[str, ...]] = {}
        raw_paths = options.get("paths")
        if isinstance(raw_paths, dict):
            for pattern, replacements in raw_paths.items():
                if not isinstance(replacements, list):
                    continue
                kept = tuple(r for r in replacements if isinstance(r, str))
                if kept:
                    paths[pattern] = kept

        return cls(base_url=base_url, paths=paths)


def strip_jsonc(text: str) -> str:
    """Remove comments and trailing commas so tsconfig text parses as JSON."""
    without_comments = _JSONC_TOKEN_RE.sub(lambda m: m.group(1) or "", text)
    return _TRAILING_COMMA_RE.sub(lambda m: m.group(1) or m.group(2), without_comments)


def parse_manifest(text: str) -> ModuleResolutionConfig:
    """Parse manifest text.

    Raises:
        ValueError: If the text is not valid JSON (after JSONC stripping).
    """
    data = json.loads(strip_jsonc(text))
    if not isinstance(data, dict):
        return ModuleResolutionConfig()
    return ModuleResolutionConfig.from_compiler_options(data.get("compilerOptions"))


class ConfigResolver:
    """Loads the module-resolution config of a sandbox, at most once per TTL."""

    def __init__(
        self,
        remote: RemoteClient | None,
        cache: TTLCache[str, ModuleResolutionConfig],
        *,
        manifest_path: str = "tsconfig.json",
    ) -> None:
        self._remote = remote
        self._cache = cache
        self._manifest_path = manifest_path

    async def get_config(self, sandbox_id: str | None) -> ModuleResolutionConfig:
        """Return the cached or freshly loaded config. Never raises."""
        if sandbox_id is None or self._remote is None:
            return ModuleResolutionConfig()

        cached = self._cache.get(sandbox_id)
        if cached is not None:
            log.debug("manifest_cache_hit", sandbox_id=sandbox_id, empty=cached.is_empty)
            return cached

        text = await self._remote.read_text(sandbox_id, self._manifest_path)
        if text is None:
            log.info("manifest_unavailable", sandbox_id=sandbox_id, path=self._manifest_path)
            config = ModuleResolutionConfig()
        else:
            try:
                config = parse_manifest(text)
            except ValueError as e:
                log.info(
                    "manifest_parse_failed",
                    sandbox_id=sandbox_id,
                    path=self._manifest_path,
                    error=str(e),
                )
                config = ModuleResolutionConfig()
            else:
                log.info(
                    "manifest_loaded",
                    sandbox_id=sandbox_id,
                    base_url=config.base_url,
                    alias_count=len(config.paths),
                )

        self._cache.put(sandbox_id, config)
        return config

    def invalidate(self, sandbox_id: str | None = None) -> None:
        self._cache.invalidate(sandbox_id)
