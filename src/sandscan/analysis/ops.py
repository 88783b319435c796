"""Analysis operations - fragment and hybrid error detection.

``analyze_fragment`` works on in-memory files only. ``analyze_project_hybrid``
additionally runs the compiler and the batched scan + import detector in the
sandbox. All detectors of one run are launched together and awaited together.

No entry point raises: a failing detector contributes nothing, and a hybrid
run where every sandbox-backed detector failed (or the orchestration itself
broke) returns the fragment result with mode ``fallback``.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from sandscan.config.constants import SOURCE_EXTENSIONS
from sandscan.config.models import SandScanConfig
from sandscan.core.cache import Clock, TTLCache
from sandscan.core.errors import RemoteError
from sandscan.core.logging import get_logger, set_request_id
from sandscan.detect.build import (
    parse_compiler_output,
    parse_eslint_output,
    scan_build_risks,
    scan_lint_risks,
)
from sandscan.detect.imports import ImportDetector
from sandscan.detect.models import (
    AnalysisMode,
    BuildError,
    ModuleImportError,
    NavigationError,
    ProjectError,
    ProjectErrors,
    deduplicate_errors,
)
from sandscan.detect.navigation import detect_navigation_errors
from sandscan.remote.client import RemoteClient
from sandscan.resolve.file_tree import FileTreeCache
from sandscan.resolve.resolver import ImportPathResolver
from sandscan.resolve.tsconfig import ConfigResolver, ModuleResolutionConfig
from sandscan.scan.batch import BatchedScanner, BatchScanResult

if TYPE_CHECKING:
    from sandscan.remote.models import SandboxClient

log = get_logger("sandscan.analysis")


@dataclass(slots=True)
class _DetectorRun:
    """Outcome of one sandbox-backed detector. ``ok=False`` means no data."""

    name: str
    ok: bool = True
    errors: list[ProjectError] = field(default_factory=list)


def _source_files(files: Mapping[str, str]) -> dict[str, str]:
    return {path: content for path, content in files.items() if path.endswith(SOURCE_EXTENSIONS)}


class AnalysisOps:
    """Error detection for one sandbox client.

    Owns the manifest and file-tree caches (both keyed by sandbox id). Pass
    caches or a clock to control expiry, e.g. in tests.
    """

    def __init__(
        self,
        client: SandboxClient | None = None,
        config: SandScanConfig | None = None,
        *,
        config_cache: TTLCache[str, ModuleResolutionConfig] | None = None,
        file_tree_cache: TTLCache[str, FileTreeCache] | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._config = config or SandScanConfig()
        resolver_cfg = self._config.resolver

        self._remote = RemoteClient(client) if client is not None else None
        if config_cache is None:
            config_cache = TTLCache(resolver_cfg.config_ttl_sec, clock=clock)
        if file_tree_cache is None:
            file_tree_cache = TTLCache(resolver_cfg.file_tree_ttl_sec, clock=clock)
        self._file_tree_cache = file_tree_cache

        self._config_resolver = ConfigResolver(
            self._remote, config_cache, manifest_path=resolver_cfg.manifest_path
        )
        self._resolver = ImportPathResolver(
            self._remote, self._config_resolver, alias_prefix=resolver_cfg.alias_prefix
        )
        self._imports = ImportDetector(self._resolver)
        self._fragment_imports = ImportDetector()
        self._scanner = (
            BatchedScanner(self._remote, self._config.scanner) if self._remote is not None else None
        )

    @property
    def config(self) -> SandScanConfig:
        return self._config

    def invalidate(self, sandbox_id: str | None = None) -> None:
        """Drop cached manifest configs and file trees (one sandbox or all)."""
        self._config_resolver.invalidate(sandbox_id)
        self._file_tree_cache.invalidate(sandbox_id)

    # =========================================================================
    # Fragment Analysis
    # =========================================================================

    async def analyze_fragment(self, files: Mapping[str, str]) -> ProjectErrors:
        """Analyze in-memory files without touching the sandbox."""
        set_request_id()
        return await self._fragment(files)

    async def _fragment(
        self, files: Mapping[str, str], mode: AnalysisMode = AnalysisMode.FRAGMENT
    ) -> ProjectErrors:
        start_time = time.time()
        sources = _source_files(files)

        build, imports, navigation = await asyncio.gather(
            self._guard("build_heuristics", self._fragment_build, sources),
            self._guard("fragment_imports", self._fragment_import_errors, sources),
            self._guard("navigation", self._fragment_navigation, sources),
        )

        result = ProjectErrors.collect(
            build=[e for e in build if isinstance(e, BuildError)],
            imports=[e for e in imports if isinstance(e, ModuleImportError)],
            navigation=[e for e in navigation if isinstance(e, NavigationError)],
            mode=mode,
        )
        log.info(
            "fragment_analysis_complete",
            file_count=len(sources),
            total_errors=result.total_errors,
            severity=result.severity.value,
            mode=mode.value,
            duration_ms=round((time.time() - start_time) * 1000),
        )
        return result

    async def _guard(
        self,
        name: str,
        detector: Callable[[dict[str, str]], Awaitable[list[ProjectError]]],
        sources: dict[str, str],
    ) -> list[ProjectError]:
        try:
            return await detector(sources)
        except Exception as e:
            log.warning("detector_failed", detector=name, error=str(e), exc_info=True)
            return []

    async def _fragment_build(self, sources: dict[str, str]) -> list[ProjectError]:
        errors: list[ProjectError] = []
        for path, content in sources.items():
            errors.extend(scan_build_risks(path, content))
            if self._config.detectors.content_lint:
                errors.extend(scan_lint_risks(path, content))
        return errors

    async def _fragment_import_errors(self, sources: dict[str, str]) -> list[ProjectError]:
        errors: list[ProjectError] = []
        for path, content in sources.items():
            errors.extend(await self._fragment_imports.analyze_file(path, content))
        return errors

    async def _fragment_navigation(self, sources: dict[str, str]) -> list[ProjectError]:
        errors: list[ProjectError] = []
        for path, content in sources.items():
            errors.extend(detect_navigation_errors(path, content))
        return errors

    # =========================================================================
    # Hybrid Analysis
    # =========================================================================

    async def analyze_project_hybrid(
        self, files: Mapping[str, str], sandbox_id: str
    ) -> ProjectErrors:
        """Compiler + whole-project import checks, degrading to fragment analysis."""
        set_request_id()
        start_time = time.time()

        if self._remote is None:
            log.error("hybrid_analysis_unavailable", sandbox_id=sandbox_id, reason="no client")
            return await self._fragment(files, AnalysisMode.FALLBACK)

        try:
            result = await self._hybrid(sandbox_id)
        except Exception as e:
            log.error(
                "hybrid_analysis_failed", sandbox_id=sandbox_id, error=str(e), exc_info=True
            )
            result = None

        if result is None:
            log.error("hybrid_analysis_fallback", sandbox_id=sandbox_id)
            return await self._fragment(files, AnalysisMode.FALLBACK)

        log.info(
            "hybrid_analysis_complete",
            sandbox_id=sandbox_id,
            build_errors=len(result.build_errors),
            import_errors=len(result.import_errors),
            navigation_errors=len(result.navigation_errors),
            severity=result.severity.value,
            duration_ms=round((time.time() - start_time) * 1000),
        )
        return result

    async def _hybrid(self, sandbox_id: str) -> ProjectErrors | None:
        outcomes = await asyncio.gather(
            self._compiler_run(sandbox_id),
            self._lint_run(sandbox_id),
            self._project_run(sandbox_id),
            return_exceptions=True,
        )
        # Every detector has settled; only now surface the first unexpected failure
        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                raise outcome
        active = [run for run in outcomes if isinstance(run, _DetectorRun)]
        if not any(run.ok for run in active):
            log.warning(
                "remote_detectors_failed",
                sandbox_id=sandbox_id,
                detectors=[run.name for run in active],
            )
            return None

        collected = [e for run in active for e in run.errors]
        return ProjectErrors.collect(
            build=[e for e in collected if isinstance(e, BuildError)],
            imports=[e for e in collected if isinstance(e, ModuleImportError)],
            navigation=[e for e in collected if isinstance(e, NavigationError)],
            mode=AnalysisMode.HYBRID,
        )

    async def _compiler_run(self, sandbox_id: str) -> _DetectorRun | None:
        cfg = self._config.compiler
        if not cfg.enabled:
            return None
        assert self._remote is not None

        try:
            result = await self._remote.run(sandbox_id, cfg.command, timeout_ms=cfg.timeout_ms)
        except RemoteError as e:
            log.warning("compiler_unavailable", sandbox_id=sandbox_id, error=e.message)
            return _DetectorRun("compiler", ok=False)

        errors = deduplicate_errors(parse_compiler_output(result.combined_output))
        if not result.ok and not errors:
            # Non-zero exit without diagnostics: the compiler itself did not run
            log.warning(
                "compiler_failed",
                sandbox_id=sandbox_id,
                exit_code=result.exit_code,
                output=result.combined_output[:500],
            )
            return _DetectorRun("compiler", ok=False)

        log.info("compiler_complete", sandbox_id=sandbox_id, error_count=len(errors))
        return _DetectorRun("compiler", errors=list(errors))

    async def _lint_run(self, sandbox_id: str) -> _DetectorRun | None:
        cfg = self._config.compiler
        if not cfg.lint_command:
            return None
        assert self._remote is not None

        try:
            result = await self._remote.run(
                sandbox_id, cfg.lint_command, timeout_ms=cfg.lint_timeout_ms
            )
        except RemoteError as e:
            log.warning("lint_unavailable", sandbox_id=sandbox_id, error=e.message)
            return _DetectorRun("lint", ok=False)

        if not result.stdout.strip():
            log.warning("lint_no_output", sandbox_id=sandbox_id, exit_code=result.exit_code)
            return _DetectorRun("lint", ok=result.ok)

        errors = parse_eslint_output(result.stdout)
        log.info("lint_complete", sandbox_id=sandbox_id, error_count=len(errors))
        return _DetectorRun("lint", errors=list(errors))

    async def _project_run(self, sandbox_id: str) -> _DetectorRun:
        assert self._scanner is not None

        # One fresh listing per run; manifest is loaded up front so per-file
        # resolution hits the cache
        tree, scan, _ = await asyncio.gather(
            self._scanner.enumerate_file_tree(sandbox_id),
            self._scanner.scan(sandbox_id),
            self._config_resolver.get_config(sandbox_id),
            return_exceptions=True,
        )
        for outcome in (tree, scan):
            if isinstance(outcome, RemoteError):
                log.warning("project_scan_unavailable", sandbox_id=sandbox_id, error=outcome.message)
                return _DetectorRun("project_scan", ok=False)
            if isinstance(outcome, BaseException):
                raise outcome
        assert isinstance(scan, BatchScanResult)
        assert tree is None or isinstance(tree, FileTreeCache)

        if tree is None:
            # No listing: resolution probes the sandbox per candidate instead
            self._file_tree_cache.invalidate(sandbox_id)
        else:
            self._file_tree_cache.put(sandbox_id, tree)

        results = await asyncio.gather(
            *(
                self._imports.analyze_file(f.path, f.content, sandbox_id, tree)
                for f in scan.files
            ),
            return_exceptions=True,
        )

        errors: list[ProjectError] = []
        for scanned, outcome in zip(scan.files, results, strict=True):
            if isinstance(outcome, Exception):
                log.warning("import_analysis_skipped", file=scanned.path, error=str(outcome))
                continue
            if isinstance(outcome, BaseException):
                raise outcome
            errors.extend(outcome)

        if self._config.detectors.project_navigation:
            for scanned in scan.files:
                errors.extend(detect_navigation_errors(scanned.path, scanned.content))

        log.info(
            "project_scan_complete",
            sandbox_id=sandbox_id,
            scanned=len(scan.files),
            skipped=len(scan.skipped),
            tree_size=len(tree) if tree is not None else None,
            error_count=len(errors),
        )
        return _DetectorRun("project_scan", errors=errors)

    # =========================================================================
    # Single-File Validation
    # =========================================================================

    async def analyze_file_imports(
        self, path: str, content: str, sandbox_id: str | None = None
    ) -> list[ModuleImportError]:
        """Validate one file's imports, reusing a cached file tree when fresh."""
        if sandbox_id is None or self._remote is None:
            detector, tree = self._fragment_imports, None
        else:
            detector, tree = self._imports, self._file_tree_cache.get(sandbox_id)

        try:
            return await detector.analyze_file(path, content, sandbox_id, tree)
        except Exception as e:
            log.warning("file_import_analysis_failed", file=path, error=str(e), exc_info=True)
            return []
