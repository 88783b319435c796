"""Membership index over the sandbox's source files."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from pathlib import PurePosixPath

from sandscan.config.constants import SOURCE_EXTENSIONS


def strip_source_extension(path: str) -> str:
    """Drop a trailing .ts/.tsx/.js/.jsx, turning a file path into an import path."""
    for ext in SOURCE_EXTENSIONS:
        if path.endswith(ext):
            return path[: -len(ext)]
    return path


class FileTreeCache:
    """Set of relative file paths from one enumeration of the sandbox.

    Only existence is tracked. Iteration and ``paths`` are sorted so anything
    derived from the tree is independent of listing order.
    """

    __slots__ = ("_paths", "_sorted")

    def __init__(self, paths: Iterable[str] = ()) -> None:
        self._paths = frozenset(p.strip().removeprefix("./") for p in paths if p.strip())
        self._sorted = tuple(sorted(self._paths))

    @classmethod
    def from_listing(cls, listing: str) -> FileTreeCache:
        """Build from newline-separated ``find`` output."""
        return cls(listing.splitlines())

    @property
    def paths(self) -> tuple[str, ...]:
        return self._sorted

    def __contains__(self, path: object) -> bool:
        return path in self._paths

    def __len__(self) -> int:
        return len(self._paths)

    def __iter__(self) -> Iterator[str]:
        return iter(self._sorted)

    def find_similar(self, name: str) -> list[str]:
        """Paths containing ``name`` (case-insensitive), best match first.

        Paths whose file stem equals ``name`` rank first, then shorter paths.
        """
        if not name:
            return []
        needle = name.lower()
        matches = [p for p in self._sorted if needle in p.lower()]

        def rank(path: str) -> tuple[int, int, str]:
            stem = strip_source_extension(PurePosixPath(path).name).lower()
            return (0 if stem == needle else 1, len(path), path)

        return sorted(matches, key=rank)
