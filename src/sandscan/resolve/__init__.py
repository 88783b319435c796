"""Import resolution - manifest config, file tree index, and path resolver."""

from sandscan.resolve.file_tree import FileTreeCache, strip_source_extension
from sandscan.resolve.resolver import (
    ImportPathResolver,
    ResolutionResult,
    is_asset_import,
    is_node_builtin,
    is_relative_specifier,
)
from sandscan.resolve.tsconfig import ConfigResolver, ModuleResolutionConfig, parse_manifest

__all__ = [
    "ConfigResolver",
    "FileTreeCache",
    "ImportPathResolver",
    "ModuleResolutionConfig",
    "ResolutionResult",
    "is_asset_import",
    "is_node_builtin",
    "is_relative_specifier",
    "parse_manifest",
    "strip_source_extension",
]
