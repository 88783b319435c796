"""Error detectors and the error model they produce."""

from sandscan.detect.build import (
    parse_compiler_output,
    parse_eslint_output,
    scan_build_risks,
    scan_lint_risks,
)
from sandscan.detect.exports import detect_missing_exports
from sandscan.detect.imports import ImportDetector, is_problematic_import
from sandscan.detect.models import (
    AnalysisMode,
    BuildError,
    ErrorType,
    ModuleImportError,
    NavigationError,
    PageRuntimeError,
    ProjectError,
    ProjectErrors,
    Severity,
    deduplicate_errors,
    max_severity,
)
from sandscan.detect.navigation import detect_navigation_errors
from sandscan.detect.rules import PatternRule

__all__ = [
    "AnalysisMode",
    "BuildError",
    "ErrorType",
    "ImportDetector",
    "ModuleImportError",
    "NavigationError",
    "PageRuntimeError",
    "PatternRule",
    "ProjectError",
    "ProjectErrors",
    "Severity",
    "deduplicate_errors",
    "detect_missing_exports",
    "detect_navigation_errors",
    "is_problematic_import",
    "max_severity",
    "parse_compiler_output",
    "parse_eslint_output",
    "scan_build_risks",
    "scan_lint_risks",
]
