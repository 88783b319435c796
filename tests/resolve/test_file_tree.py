"""Tests for resolve/file_tree.py."""

from __future__ import annotations

from sandscan.resolve.file_tree import FileTreeCache, strip_source_extension


class TestStripSourceExtension:
    def test_strips_known_extensions(self) -> None:
        assert strip_source_extension("src/App.tsx") == "src/App"
        assert strip_source_extension("src/lib/utils.ts") == "src/lib/utils"

    def test_keeps_other_extensions(self) -> None:
        assert strip_source_extension("src/styles.css") == "src/styles.css"


class TestFileTreeCache:
    """Membership index behavior."""

    def test_given_listing_when_built_then_normalized_membership(self) -> None:
        """Leading './' and blank lines from find output are ignored."""
        tree = FileTreeCache.from_listing("./src/App.tsx\n\nsrc/lib/utils.ts\n")

        assert "src/App.tsx" in tree
        assert "src/lib/utils.ts" in tree
        assert "./src/App.tsx" not in tree
        assert len(tree) == 2

    def test_given_any_listing_order_when_iterated_then_sorted(self) -> None:
        a = FileTreeCache(["src/b.ts", "src/a.ts"])
        b = FileTreeCache(["src/a.ts", "src/b.ts"])

        assert a.paths == b.paths == ("src/a.ts", "src/b.ts")
        assert list(a) == list(b)

    def test_given_empty_tree_when_checked_then_still_a_tree(self) -> None:
        tree = FileTreeCache()

        assert len(tree) == 0
        assert "src/a.ts" not in tree


class TestFindSimilar:
    """Smart-suggestion lookup."""

    def test_given_exact_stem_when_searched_then_ranked_first(self) -> None:
        tree = FileTreeCache(
            [
                "src/components/HeaderMenu.tsx",
                "src/components/layout/Header.tsx",
                "src/Header.test.tsx",
            ]
        )

        assert tree.find_similar("Header")[0] == "src/components/layout/Header.tsx"

    def test_given_different_case_when_searched_then_matched(self) -> None:
        tree = FileTreeCache(["src/lib/Utils.ts"])

        assert tree.find_similar("utils") == ["src/lib/Utils.ts"]

    def test_given_no_match_when_searched_then_empty(self) -> None:
        tree = FileTreeCache(["src/App.tsx"])

        assert tree.find_similar("Footer") == []
        assert tree.find_similar("") == []
