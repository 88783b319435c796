"""Config module exports."""

from sandscan.config.loader import load_config
from sandscan.config.models import (
    CompilerConfig,
    DetectorsConfig,
    LoggingConfig,
    LogOutputConfig,
    ResolverConfig,
    SandScanConfig,
    ScannerConfig,
)

__all__ = [
    "load_config",
    "CompilerConfig",
    "DetectorsConfig",
    "LoggingConfig",
    "LogOutputConfig",
    "ResolverConfig",
    "SandScanConfig",
    "ScannerConfig",
]
