"""Batched remote scanning."""

from sandscan.scan.batch import (
    BatchedScanner,
    BatchScanResult,
    ScannedFile,
    build_batch_command,
    build_file_tree_command,
    parse_batch_output,
)

__all__ = [
    "BatchedScanner",
    "BatchScanResult",
    "ScannedFile",
    "build_batch_command",
    "build_file_tree_command",
    "parse_batch_output",
]
