"""Detection models - severities, error records, and the per-run aggregate."""

from __future__ import annotations

import dataclasses
import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any, ClassVar, TypeVar


class Severity(Enum):
    """How urgently an issue should block further work."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    @property
    def is_blocking(self) -> bool:
        return self.rank >= _SEVERITY_RANK[Severity.HIGH]


_SEVERITY_RANK = {
    Severity.LOW: 0,
    Severity.MEDIUM: 1,
    Severity.HIGH: 2,
    Severity.CRITICAL: 3,
}


def max_severity(severities: Iterable[Severity]) -> Severity:
    """Highest severity present; LOW when there is none."""
    return max(severities, key=lambda s: s.rank, default=Severity.LOW)


class ErrorType(Enum):
    """Error taxonomy shared with persisted error records."""

    COMPILATION = "COMPILATION"
    RUNTIME = "RUNTIME"
    IMPORT = "IMPORT"
    NAVIGATION = "NAVIGATION"
    BUILD = "BUILD"
    TYPE_SCRIPT = "TYPE_SCRIPT"
    ESLINT = "ESLINT"
    DEPENDENCY = "DEPENDENCY"
    OTHER = "OTHER"


class AnalysisMode(Enum):
    """Which pipeline produced a result."""

    FRAGMENT = "fragment"
    HYBRID = "hybrid"
    FALLBACK = "fallback"  # hybrid failed, fragment analysis substituted


def new_error_id() -> str:
    return f"err_{uuid.uuid4().hex[:12]}"


def _jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, tuple):
        return [_jsonable(v) for v in value]
    if isinstance(value, list):
        return [_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    return value


# =============================================================================
# Error Records
# =============================================================================


@dataclass(frozen=True, slots=True, kw_only=True)
class ProjectError:
    """One detected problem.

    ``details`` carries detector-specific metadata (candidate paths tried,
    suggested fix, compiler code, ...). Records are created once per detection
    and never mutated.
    """

    kind: ClassVar[str] = "project"

    type: ErrorType
    message: str
    severity: Severity
    auto_fixable: bool = False
    details: dict[str, Any] = field(default_factory=dict)
    file: str | None = None
    line: int | None = None
    column: int | None = None
    id: str = field(default_factory=new_error_id)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"kind": self.kind}
        for f in dataclasses.fields(self):
            data[f.name] = _jsonable(getattr(self, f.name))
        return data


@dataclass(frozen=True, slots=True, kw_only=True)
class BuildError(ProjectError):
    kind: ClassVar[str] = "build"


@dataclass(frozen=True, slots=True, kw_only=True)
class ModuleImportError(ProjectError):
    """An import that does not resolve, or a component that is not exported."""

    kind: ClassVar[str] = "import"

    file: str
    import_path: str


@dataclass(frozen=True, slots=True, kw_only=True)
class NavigationError(ProjectError):
    kind: ClassVar[str] = "navigation"

    route: str


@dataclass(frozen=True, slots=True, kw_only=True)
class PageRuntimeError(ProjectError):
    """Browser-side error; reported by external collectors, never detected here."""

    kind: ClassVar[str] = "runtime"

    stack: str | None = None
    url: str | None = None


E = TypeVar("E", bound=ProjectError)


def deduplicate_errors(errors: Iterable[E]) -> list[E]:
    """Keep the first error per ``(file, line, column, message)``."""
    seen: set[tuple[str | None, int | None, int | None, str]] = set()
    unique: list[E] = []
    for error in errors:
        key = (error.file, error.line, error.column, error.message)
        if key in seen:
            continue
        seen.add(key)
        unique.append(error)
    return unique


# =============================================================================
# Aggregate
# =============================================================================


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class ProjectErrors:
    """All errors from one analysis run, grouped by kind.

    ``severity``, ``auto_fixable`` and ``total_errors`` are derived from the
    build, import and navigation groups. Runtime errors are carried through
    untouched and do not count.
    """

    build_errors: tuple[BuildError, ...] = ()
    runtime_errors: tuple[PageRuntimeError, ...] = ()
    import_errors: tuple[ModuleImportError, ...] = ()
    navigation_errors: tuple[NavigationError, ...] = ()
    mode: AnalysisMode = AnalysisMode.FRAGMENT
    detected_at: datetime = field(default_factory=_utcnow)

    @classmethod
    def collect(
        cls,
        *,
        build: Iterable[BuildError] = (),
        imports: Iterable[ModuleImportError] = (),
        navigation: Iterable[NavigationError] = (),
        mode: AnalysisMode = AnalysisMode.FRAGMENT,
        detected_at: datetime | None = None,
    ) -> ProjectErrors:
        return cls(
            build_errors=tuple(build),
            import_errors=tuple(imports),
            navigation_errors=tuple(navigation),
            mode=mode,
            detected_at=detected_at or _utcnow(),
        )

    @property
    def counted_errors(self) -> tuple[ProjectError, ...]:
        return (*self.build_errors, *self.import_errors, *self.navigation_errors)

    @property
    def total_errors(self) -> int:
        return len(self.build_errors) + len(self.import_errors) + len(self.navigation_errors)

    @property
    def severity(self) -> Severity:
        return max_severity(e.severity for e in self.counted_errors)

    @property
    def auto_fixable(self) -> bool:
        return any(e.auto_fixable for e in self.counted_errors)

    @property
    def has_blocking_errors(self) -> bool:
        return self.severity.is_blocking

    def to_dict(self) -> dict[str, Any]:
        return {
            "build_errors": [e.to_dict() for e in self.build_errors],
            "runtime_errors": [e.to_dict() for e in self.runtime_errors],
            "import_errors": [e.to_dict() for e in self.import_errors],
            "navigation_errors": [e.to_dict() for e in self.navigation_errors],
            "severity": self.severity.value,
            "auto_fixable": self.auto_fixable,
            "total_errors": self.total_errors,
            "detected_at": self.detected_at.isoformat(),
            "mode": self.mode.value,
        }
