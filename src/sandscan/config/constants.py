"""Configuration constants.

This module contains truly constant values that should NOT be user-configurable:
file-type conventions of the projects being analyzed and fixed resolution rules.

For configurable values, see models.py (ResolverConfig, ScannerConfig, etc.).
"""

# =============================================================================
# Source Files
# =============================================================================

SOURCE_EXTENSIONS: tuple[str, ...] = (".ts", ".tsx", ".js", ".jsx")
"""Extensions probed, in order, when resolving an import to a file."""

INDEX_EXTENSIONS: tuple[str, ...] = (".ts", ".tsx")
"""Extensions probed for directory-style ``index`` files (alias resolution only)."""

EXCLUDED_NAME_GLOBS: tuple[str, ...] = (
    "*.test.*",
    "*.spec.*",
    "*.stories.*",
    "*.mock.*",
    "*.d.ts",
)
"""File name patterns never selected for deep scanning."""

EXCLUDED_PATH_GLOBS: tuple[str, ...] = (
    "*/test/*",
    "*/tests/*",
    "*/__tests__/*",
    "*/__mocks__/*",
    "*/mocks/*",
    "*/components/ui/*",
    "*/shadcn/*",
)
"""Path patterns excluded from the catch-all sweep."""

GENERATED_UI_PATH_GLOB = "*/components/ui/*"
"""Generated UI-library subtree, skipped when scanning components."""

PRIORITY_DIRECTORIES: tuple[tuple[str, ...], ...] = (
    ("pages",),
    ("components",),
    ("api", "routes"),
    ("hooks",),
    ("lib",),
    ("utils",),
)
"""Directories (under the source root) scanned in this order after top-level files."""

# =============================================================================
# Import Classification
# =============================================================================

RELATIVE_PREFIXES: tuple[str, ...] = ("./", "../")

ASSET_EXTENSIONS: tuple[str, ...] = (
    ".css",
    ".scss",
    ".sass",
    ".less",
    ".svg",
    ".png",
    ".jpg",
    ".jpeg",
    ".gif",
    ".webp",
    ".woff",
    ".woff2",
    ".ttf",
    ".eot",
)
"""Imports ending in these are bundler assets, never resolution failures."""

NODE_BUILTINS: frozenset[str] = frozenset(
    {"fs", "path", "http", "https", "crypto", "stream", "events", "util", "os"}
)
"""Node built-in module names treated as already resolved."""

NODE_PROTOCOL_PREFIX = "node:"

# =============================================================================
# Batch Scan Protocol Defaults
# =============================================================================

DEFAULT_START_DELIMITER = "___FILE_SEPARATOR___"
DEFAULT_END_DELIMITER = "___END_FILE___"
DEFAULT_UNREADABLE_SENTINEL = "ERROR_READING_FILE"

SCAN_MAX_FILES_CEILING = 500
"""Hard cap on ``scanner.max_files``; one command's output must stay bounded."""
