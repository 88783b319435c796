"""Import detection - unresolved local imports and known-bad imports.

With a sandbox, every relative or alias-prefixed import is resolved through
the ``ImportPathResolver`` and unresolved ones are reported HIGH with the
candidate paths and a suggested fix. Without one (fragment mode) nothing can
be resolved, so only a curated list of known-problematic imports is flagged,
at LOW severity.
"""

from __future__ import annotations

import re
from pathlib import PurePosixPath
from typing import TYPE_CHECKING

from sandscan.core.logging import get_logger
from sandscan.detect.exports import detect_missing_exports
from sandscan.detect.models import ErrorType, ModuleImportError, Severity
from sandscan.detect.rules import (
    KNOWN_UI_COMPONENTS,
    PROBLEMATIC_IMPORT_RULES,
    UI_LIBRARY_PREFIX,
)
from sandscan.resolve.file_tree import strip_source_extension
from sandscan.resolve.resolver import is_asset_import, is_node_builtin

if TYPE_CHECKING:
    from sandscan.resolve.file_tree import FileTreeCache
    from sandscan.resolve.resolver import ImportPathResolver, ResolutionResult

log = get_logger("sandscan.detect.imports")

# Groups: default name, named list, namespace name, specifier
IMPORT_RE = re.compile(
    r"""import\s+(?:type\s+)?(?:(\w+)\s*,?\s*)?(?:\{([^}]*)\}|\*\s+as\s+(\w+))?\s*(?:from\s+)?['"]([^'"]+)['"]"""
)

DEFAULT_SUGGESTION = "Fix import path or create missing file"


def import_type_of(match: re.Match[str]) -> str:
    default, named, namespace, _ = match.groups()
    if default:
        return "default"
    if named is not None:
        return "named"
    if namespace:
        return "namespace"
    return "side_effect"


def is_problematic_import(specifier: str) -> bool:
    if any(rule.match(specifier) for rule in PROBLEMATIC_IMPORT_RULES):
        return True
    if specifier.startswith(UI_LIBRARY_PREFIX):
        return not any(name in specifier for name in KNOWN_UI_COMPONENTS)
    return False


def suggest_fix(result: ResolutionResult, file_tree: FileTreeCache | None) -> str:
    """Best replacement import path for an unresolved specifier."""
    if not result.candidates:
        return DEFAULT_SUGGESTION
    first = result.candidates[0]
    if file_tree is not None:
        base_name = strip_source_extension(PurePosixPath(first).name)
        similar = file_tree.find_similar(base_name)
        if similar:
            return strip_source_extension(similar[0])
    return strip_source_extension(first)


def _line_of(content: str, offset: int) -> int:
    return content.count("\n", 0, offset) + 1


class ImportDetector:
    """Checks the imports of one file at a time."""

    def __init__(self, resolver: ImportPathResolver | None = None) -> None:
        self._resolver = resolver

    async def analyze_file(
        self,
        path: str,
        content: str,
        sandbox_id: str | None = None,
        file_tree: FileTreeCache | None = None,
    ) -> list[ModuleImportError]:
        errors: list[ModuleImportError] = []
        fragment_mode = sandbox_id is None or self._resolver is None

        for match in IMPORT_RE.finditer(content):
            specifier = match.group(4)
            if is_asset_import(specifier):
                continue

            if fragment_mode:
                if is_problematic_import(specifier):
                    errors.append(self._problematic_error(path, content, match))
                continue

            assert self._resolver is not None  # fragment_mode covers None
            if not self._resolver.is_local_specifier(specifier):
                if not is_node_builtin(specifier):
                    log.debug("bare_import_skipped", file=path, specifier=specifier)
                continue

            result = await self._resolver.resolve(specifier, path, sandbox_id, file_tree)
            if result.found:
                continue
            log.info(
                "import_unresolved",
                file=path,
                specifier=specifier,
                candidates=len(result.candidates),
            )
            errors.append(self._unresolved_error(path, content, match, result, file_tree))

        errors.extend(detect_missing_exports(path, content))
        return errors

    @staticmethod
    def _unresolved_error(
        path: str,
        content: str,
        match: re.Match[str],
        result: ResolutionResult,
        file_tree: FileTreeCache | None,
    ) -> ModuleImportError:
        specifier = match.group(4)
        line_no = _line_of(content, match.start())
        return ModuleImportError(
            type=ErrorType.IMPORT,
            message=f"Cannot find module '{specifier}'",
            file=path,
            import_path=specifier,
            line=line_no,
            severity=Severity.HIGH,
            auto_fixable=True,
            details={
                "import_type": import_type_of(match),
                "reason": "unresolved",
                "import_statement": match.group(0),
                "line": line_no,
                "candidates": list(result.candidates),
                "suggestion": suggest_fix(result, file_tree),
            },
        )

    @staticmethod
    def _problematic_error(path: str, content: str, match: re.Match[str]) -> ModuleImportError:
        specifier = match.group(4)
        line_no = _line_of(content, match.start())
        return ModuleImportError(
            type=ErrorType.IMPORT,
            message=f"Potentially missing import: {specifier}",
            file=path,
            import_path=specifier,
            line=line_no,
            severity=Severity.LOW,
            auto_fixable=True,
            details={
                "import_type": import_type_of(match),
                "reason": "problematic_pattern",
                "import_statement": match.group(0),
                "line": line_no,
            },
        )
