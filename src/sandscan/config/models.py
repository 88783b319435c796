"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (SANDSCAN__SECTION__KEY)
3. Explicit YAML file passed to load_config()
4. Global YAML (~/.config/sandscan/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    SANDSCAN__<SECTION>__<KEY>=<VALUE>

Examples:
    SANDSCAN__LOGGING__LEVEL=DEBUG
    SANDSCAN__SCANNER__MAX_FILES=50
    SANDSCAN__COMPILER__COMMAND="npx tsc --noEmit"
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from sandscan.config.constants import (
    DEFAULT_END_DELIMITER,
    DEFAULT_START_DELIMITER,
    DEFAULT_UNREADABLE_SENTINEL,
    SCAN_MAX_FILES_CEILING,
)

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration."""

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        SANDSCAN__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG logs every resolution probe.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class ResolverConfig(BaseModel):
    """Module resolution configuration.

    Env vars:
        SANDSCAN__RESOLVER__MANIFEST_PATH: tsconfig-style manifest path in the sandbox
        SANDSCAN__RESOLVER__CONFIG_TTL_SEC: How long a parsed manifest is reused
        SANDSCAN__RESOLVER__ALIAS_PREFIX: Specifier prefix that marks alias imports
    """

    manifest_path: str = Field(
        default="tsconfig.json",
        description="Module-resolution manifest, relative to the sandbox project root.",
    )
    config_ttl_sec: float = Field(
        default=300.0,
        description="TTL for parsed manifests (and for failed lookups). "
        "TRADEOFF: Lower picks up alias edits sooner but costs a remote read per run.",
    )
    alias_prefix: str = Field(
        default="@/",
        description="Specifiers starting with this are resolved through manifest aliases only.",
    )
    file_tree_ttl_sec: float = Field(
        default=300.0,
        description="How long the last file tree snapshot is reused for single-file checks.",
    )

    @field_validator("config_ttl_sec", "file_tree_ttl_sec")
    @classmethod
    def validate_ttl(cls, v: float) -> float:
        if v < 0:
            raise ValueError(f"TTL must be >= 0, got {v}")
        return v


class ScannerConfig(BaseModel):
    """Batched remote scan configuration.

    Env vars:
        SANDSCAN__SCANNER__SOURCE_ROOT: Directory holding project sources
        SANDSCAN__SCANNER__MAX_FILES: Files read by the batched scan
        SANDSCAN__SCANNER__BATCH_TIMEOUT_MS: Timeout for the batched read
    """

    source_root: str = Field(
        default="src",
        description="Source directory, relative to the sandbox project root.",
    )
    max_files: int = Field(
        default=100,
        description="Files deep-scanned per run, in priority order. "
        "RISK: Large values produce very large command output.",
    )
    tree_timeout_ms: int = Field(
        default=10_000,
        description="Timeout for the file listing command.",
    )
    batch_timeout_ms: int = Field(
        default=30_000,
        description="Timeout for the batched content read.",
    )
    start_delimiter: str = DEFAULT_START_DELIMITER
    end_delimiter: str = DEFAULT_END_DELIMITER
    unreadable_sentinel: str = DEFAULT_UNREADABLE_SENTINEL

    @field_validator("max_files")
    @classmethod
    def validate_max_files(cls, v: int) -> int:
        if not (1 <= v <= SCAN_MAX_FILES_CEILING):
            raise ValueError(f"max_files must be 1-{SCAN_MAX_FILES_CEILING}, got {v}")
        return v

    @field_validator("source_root")
    @classmethod
    def validate_source_root(cls, v: str) -> str:
        cleaned = v.strip().strip("/")
        if not cleaned or ".." in cleaned.split("/") or "'" in cleaned:
            raise ValueError(f"source_root must be a relative directory, got {v!r}")
        return cleaned


class CompilerConfig(BaseModel):
    """Compiler (and optional linter) invocation in full-project mode.

    Env vars:
        SANDSCAN__COMPILER__ENABLED: Run the compiler during hybrid analysis
        SANDSCAN__COMPILER__COMMAND: Compiler command line
        SANDSCAN__COMPILER__LINT_COMMAND: ESLint command emitting JSON (optional)
    """

    enabled: bool = True
    command: str = Field(
        default="bunx tsc -b --noEmit",
        description="Type-check command run inside the sandbox.",
    )
    timeout_ms: int = Field(
        default=60_000,
        description="Compiler timeout. Cold tsc runs on large projects can take tens of seconds.",
    )
    lint_command: str | None = Field(
        default=None,
        description="Optional lint command producing ESLint JSON, e.g. 'bunx eslint -f json src'.",
    )
    lint_timeout_ms: int = 60_000


class DetectorsConfig(BaseModel):
    """Optional detectors.

    Env vars:
        SANDSCAN__DETECTORS__CONTENT_LINT: Add lint heuristics to fragment analysis
        SANDSCAN__DETECTORS__PROJECT_NAVIGATION: Check links in scanned project files
    """

    content_lint: bool = Field(
        default=False,
        description="Run lint-style content heuristics in fragment mode. Noisy.",
    )
    project_navigation: bool = Field(
        default=False,
        description="Run the navigation detector over batch-scanned files in hybrid mode.",
    )


class SandScanConfig(BaseModel):
    """Root configuration for sandscan."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    resolver: ResolverConfig = Field(default_factory=ResolverConfig)
    scanner: ScannerConfig = Field(default_factory=ScannerConfig)
    compiler: CompilerConfig = Field(default_factory=CompilerConfig)
    detectors: DetectorsConfig = Field(default_factory=DetectorsConfig)
