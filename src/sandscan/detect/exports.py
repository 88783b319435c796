"""Missing-export detection for entry components."""

from __future__ import annotations

import re
from pathlib import PurePosixPath

from sandscan.detect.models import ErrorType, ModuleImportError, Severity
from sandscan.detect.rules import APP_ROOT_COMPONENT, APP_ROOT_FILES, ENTRY_COMPONENT_NAMES

_DEFAULT_EXPORT_RE = re.compile(r"export\s+default\s+")
_DECLARATION_RE = re.compile(
    r"^(export\s+)?(?:async\s+)?(?:function|const|let|var)\s+([A-Z][A-Za-z0-9]*)"
)
_EXPORT_CLAUSE_RE = re.compile(r"export\s*(?:type\s*)?\{([^}]*)\}")


def has_default_export(content: str) -> bool:
    return _DEFAULT_EXPORT_RE.search(content) is not None


def exported_names(content: str) -> set[str]:
    """Local names listed in ``export { A, B as C }`` clauses."""
    names: set[str] = set()
    for match in _EXPORT_CLAUSE_RE.finditer(content):
        for item in match.group(1).split(","):
            local = item.strip().split(" as ")[0].strip()
            if local:
                names.add(local)
    return names


def _declares_app_root(content: str) -> bool:
    return re.search(rf"\b(?:function|const)\s+{APP_ROOT_COMPONENT}\b", content) is not None


def detect_missing_exports(path: str, content: str) -> list[ModuleImportError]:
    """Entry components (App, Main, Home, Index) declared but never exported.

    Files with a default export are fine. Otherwise each unexported entry
    component is a HIGH error. An application-root file (``App.tsx`` or
    ``App.jsx``) declaring ``App`` without a default export gets one CRITICAL
    error for App instead, since the app's bootstrap imports it by default.
    """
    if has_default_export(content):
        return []

    errors: list[ModuleImportError] = []
    app_root = PurePosixPath(path).name in APP_ROOT_FILES and _declares_app_root(content)
    clause_exports = exported_names(content)
    reported: set[str] = set()

    for line_no, line in enumerate(content.split("\n"), start=1):
        match = _DECLARATION_RE.match(line)
        if match is None:
            continue
        exported, name = match.groups()
        if name not in ENTRY_COMPONENT_NAMES or name in reported:
            continue
        if exported or name in clause_exports:
            continue
        if app_root and name == APP_ROOT_COMPONENT:
            continue
        reported.add(name)
        errors.append(
            ModuleImportError(
                type=ErrorType.IMPORT,
                message=f"Missing export for {name} component",
                file=path,
                import_path=name,
                line=line_no,
                severity=Severity.HIGH,
                auto_fixable=True,
                details={
                    "component_name": name,
                    "line": line_no,
                    "suggestion": f"Add 'export default {name}' or 'export {{ {name} }}'",
                    "original_line": line.strip(),
                },
            )
        )

    if app_root:
        errors.append(
            ModuleImportError(
                type=ErrorType.IMPORT,
                message=f"Missing export default for {APP_ROOT_COMPONENT} component",
                file=path,
                import_path=APP_ROOT_COMPONENT,
                severity=Severity.CRITICAL,
                auto_fixable=True,
                details={
                    "component_name": APP_ROOT_COMPONENT,
                    "suggestion": f"Add export default {APP_ROOT_COMPONENT} at the end of the file",
                    "issue": (
                        f"{APP_ROOT_COMPONENT} component is not exported, "
                        "causing import errors in the app entry point"
                    ),
                },
            )
        )
    return errors
