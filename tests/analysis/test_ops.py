"""Tests for analysis/ops.py - fragment and hybrid orchestration."""

from __future__ import annotations

import asyncio
from typing import Any
from unittest.mock import patch

import pytest

from sandscan.analysis import AnalysisOps
from sandscan.config.models import (
    CompilerConfig,
    DetectorsConfig,
    SandScanConfig,
    ScannerConfig,
)
from sandscan.detect.models import AnalysisMode, Severity
from sandscan.scan.batch import build_file_tree_command

TSCONFIG = '{"compilerOptions": {"baseUrl": ".", "paths": {"@/*": ["./src/*"]}}}'

PROJECT_FILES = {
    "src/main.tsx": "import App from './App';\nimport './index.css';\n",
    "src/App.tsx": (
        "import { cn } from '@/lib/utils';\n"
        "import Missing from './Missing';\n"
        "export default function App() {\n"
        "  return <a href='/about'>About</a>;\n"
        "}\n"
    ),
    "src/lib/utils.ts": "export const cn = (...xs: string[]) => xs.join(' ');\n",
}

TSC_OUTPUT = "src/App.tsx(2,21): error TS2307: Cannot find module './Missing'\n"


class FakeSandbox:
    """In-memory sandbox answering the commands AnalysisOps issues."""

    def __init__(
        self,
        files: dict[str, str],
        *,
        compiler: Any = None,
        lint: dict[str, Any] | None = None,
        listing_fails: bool = False,
        delay: float = 0.0,
    ) -> None:
        self.files = {**files, "tsconfig.json": TSCONFIG}
        self.compiler = compiler if compiler is not None else {"exitCode": 0, "stdout": ""}
        self.lint = lint
        self.listing_fails = listing_fails
        self.delay = delay
        self.commands: list[str] = []
        self.finished: list[str] = []
        self.reads: list[str] = []

    async def execute_command(self, sandbox_id: str, command: str, *, timeout_ms: int) -> Any:
        self.commands.append(command)
        if command == CompilerConfig().command:
            return self.compiler
        if self.delay:
            await asyncio.sleep(self.delay)
        self.finished.append(command)
        if command == build_file_tree_command("src"):
            if self.listing_fails:
                return {"exitCode": 1, "stderr": "find: 'src': Input/output error"}
            listing = "\n".join(p for p in self.files if p.startswith("src/"))
            return {"exitCode": 0, "stdout": listing + "\n"}
        if "while IFS= read -r file" in command:
            blocks = "".join(
                f"___FILE_SEPARATOR___\n{path}\n{content}\n___END_FILE___\n"
                for path, content in self.files.items()
                if path.startswith("src/")
            )
            return {"exitCode": 0, "stdout": blocks}
        if self.lint is not None:
            return self.lint
        return {"exitCode": 127, "stderr": f"unknown command: {command}"}

    async def read_file(self, sandbox_id: str, path: str) -> str:
        self.reads.append(path)
        try:
            return self.files[path]
        except KeyError:
            raise FileNotFoundError(path) from None

    def count(self, predicate: str) -> int:
        return sum(1 for c in self.commands if predicate in c)


class BrokenSandbox:
    """Every sandbox call fails at the transport level."""

    async def execute_command(self, sandbox_id: str, command: str, *, timeout_ms: int) -> Any:
        raise ConnectionError("sandbox unreachable")

    async def read_file(self, sandbox_id: str, path: str) -> str:
        raise ConnectionError("sandbox unreachable")


class StalledSandbox:
    """Commands never answer within their timeout."""

    async def execute_command(self, sandbox_id: str, command: str, *, timeout_ms: int) -> Any:
        await asyncio.sleep(5)
        return {"exitCode": 0}

    async def read_file(self, sandbox_id: str, path: str) -> str:
        raise FileNotFoundError(path)


class TestAnalyzeFragment:
    """Fragment analysis over in-memory files."""

    @pytest.mark.asyncio
    async def test_given_files_when_analyzed_then_all_detectors_contribute(self) -> None:
        # Given
        files = {
            "src/App.tsx": (
                "import { motion } from 'framer-motion';\n"
                "function App() {\n"
                "  const data = value as any;\n"
                "  return <Link to='/settings' />;\n"
                "}\n"
            ),
            "README.md": "const x = y as any;\n",
        }

        # When
        result = await AnalysisOps().analyze_fragment(files)

        # Then
        assert result.mode == AnalysisMode.FRAGMENT
        assert [e.line for e in result.build_errors] == [3]
        assert [e.import_path for e in result.import_errors] == ["framer-motion", "App"]
        assert [e.route for e in result.navigation_errors] == ["/settings"]
        assert result.total_errors == 4
        assert result.severity == Severity.CRITICAL
        assert result.auto_fixable is True

    @pytest.mark.asyncio
    async def test_given_clean_files_when_analyzed_then_empty_low(self) -> None:
        files = {"src/App.tsx": "export default function App() { return null; }\n"}

        result = await AnalysisOps().analyze_fragment(files)

        assert result.total_errors == 0
        assert result.severity == Severity.LOW
        assert result.auto_fixable is False

    @pytest.mark.asyncio
    async def test_given_content_lint_enabled_when_analyzed_then_lint_findings(self) -> None:
        config = SandScanConfig(detectors=DetectorsConfig(content_lint=True))
        files = {"src/legacy.js": "var count = 0;\n"}

        result = await AnalysisOps(config=config).analyze_fragment(files)

        assert [e.details["rule_id"] for e in result.build_errors] == ["no-var"]

    @pytest.mark.asyncio
    async def test_given_failing_detector_when_analyzed_then_others_still_reported(self) -> None:
        files = {"src/a.ts": "const x = y as any;\n<a href='/x'>x</a>\n"}

        with patch(
            "sandscan.analysis.ops.detect_navigation_errors", side_effect=RuntimeError("bug")
        ):
            result = await AnalysisOps().analyze_fragment(files)

        assert len(result.build_errors) == 1
        assert result.navigation_errors == ()


class TestAnalyzeProjectHybrid:
    """Hybrid analysis against a sandbox."""

    @pytest.mark.asyncio
    async def test_given_sandbox_when_analyzed_then_compiler_and_import_errors(self) -> None:
        # Given
        sandbox = FakeSandbox(PROJECT_FILES, compiler={"exitCode": 2, "stdout": TSC_OUTPUT})
        ops = AnalysisOps(sandbox)

        # When
        result = await ops.analyze_project_hybrid({}, "sbx")

        # Then
        assert result.mode == AnalysisMode.HYBRID
        assert [(e.file, e.line, e.column) for e in result.build_errors] == [
            ("src/App.tsx", 2, 21)
        ]
        assert result.build_errors[0].severity == Severity.CRITICAL
        assert [(e.file, e.import_path) for e in result.import_errors] == [
            ("src/App.tsx", "./Missing")
        ]
        assert result.import_errors[0].details["candidates"] == [
            "src/Missing.ts",
            "src/Missing.tsx",
            "src/Missing.js",
            "src/Missing.jsx",
        ]
        # Navigation over scanned files is off by default
        assert result.navigation_errors == ()
        assert result.severity == Severity.CRITICAL

    @pytest.mark.asyncio
    async def test_given_project_navigation_enabled_when_analyzed_then_links_checked(
        self,
    ) -> None:
        config = SandScanConfig(detectors=DetectorsConfig(project_navigation=True))

        result = await AnalysisOps(FakeSandbox(PROJECT_FILES), config).analyze_project_hybrid(
            {}, "sbx"
        )

        assert [e.route for e in result.navigation_errors] == ["/about"]

    @pytest.mark.asyncio
    async def test_given_unreachable_sandbox_when_analyzed_then_fragment_fallback(self) -> None:
        """Transport failures degrade to fragment analysis instead of raising."""
        files = {"src/a.ts": "const x = y as any;\n"}

        result = await AnalysisOps(BrokenSandbox()).analyze_project_hybrid(files, "sbx")

        assert result.mode == AnalysisMode.FALLBACK
        assert [e.file for e in result.build_errors] == ["src/a.ts"]
        assert result.build_errors[0].details["analysis_type"] == "content_pattern"

    @pytest.mark.asyncio
    async def test_given_no_client_when_analyzed_then_fragment_fallback(self) -> None:
        result = await AnalysisOps().analyze_project_hybrid({"src/a.ts": "// @ts-ignore\n"}, "sbx")

        assert result.mode == AnalysisMode.FALLBACK
        assert len(result.build_errors) == 1

    @pytest.mark.asyncio
    async def test_given_compiler_cannot_run_when_analyzed_then_scan_results_kept(self) -> None:
        """A compiler that exits non-zero without diagnostics contributes nothing."""
        sandbox = FakeSandbox(
            PROJECT_FILES, compiler={"exitCode": 127, "stderr": "bunx: command not found"}
        )

        result = await AnalysisOps(sandbox).analyze_project_hybrid({}, "sbx")

        assert result.mode == AnalysisMode.HYBRID
        assert result.build_errors == ()
        assert [e.import_path for e in result.import_errors] == ["./Missing"]

    @pytest.mark.asyncio
    async def test_given_compiler_disabled_when_analyzed_then_not_run(self) -> None:
        config = SandScanConfig(compiler=CompilerConfig(enabled=False))
        sandbox = FakeSandbox(PROJECT_FILES)

        result = await AnalysisOps(sandbox, config).analyze_project_hybrid({}, "sbx")

        assert result.mode == AnalysisMode.HYBRID
        assert CompilerConfig().command not in sandbox.commands

    @pytest.mark.asyncio
    async def test_given_lint_command_when_analyzed_then_eslint_errors_included(self) -> None:
        eslint_json = (
            '[{"filePath": "src/App.tsx", "messages": [{"ruleId": "no-undef", '
            '"severity": 2, "message": "\'x\' is not defined.", "line": 1, "column": 1}]}]'
        )
        config = SandScanConfig(compiler=CompilerConfig(lint_command="bunx eslint -f json src"))
        sandbox = FakeSandbox(PROJECT_FILES, lint={"exitCode": 1, "stdout": eslint_json})

        result = await AnalysisOps(sandbox, config).analyze_project_hybrid({}, "sbx")

        assert [e.details["rule_id"] for e in result.build_errors] == ["no-undef"]

    @pytest.mark.asyncio
    async def test_given_repeat_runs_when_analyzed_then_manifest_cached_tree_relisted(
        self,
    ) -> None:
        # Given
        sandbox = FakeSandbox(PROJECT_FILES)
        ops = AnalysisOps(sandbox)
        listing = build_file_tree_command("src")

        # When
        await ops.analyze_project_hybrid({}, "sbx")
        await ops.analyze_project_hybrid({}, "sbx")

        # Then
        assert sandbox.commands.count(listing) == 2
        assert sandbox.reads.count("tsconfig.json") == 1
        assert sandbox.count("while IFS= read -r file") == 2

    @pytest.mark.asyncio
    async def test_given_invalidate_when_analyzed_again_then_reloaded(self) -> None:
        sandbox = FakeSandbox(PROJECT_FILES)
        ops = AnalysisOps(sandbox)
        listing = build_file_tree_command("src")

        await ops.analyze_project_hybrid({}, "sbx")
        ops.invalidate("sbx")
        await ops.analyze_project_hybrid({}, "sbx")

        assert sandbox.commands.count(listing) == 2
        assert sandbox.reads.count("tsconfig.json") == 2

    @pytest.mark.asyncio
    async def test_given_file_added_between_runs_when_analyzed_then_new_import_resolves(
        self,
    ) -> None:
        # Given
        files = {
            "src/main.tsx": "import App from './App';\n",
            "src/App.tsx": "export default function App() { return null; }\n",
        }
        sandbox = FakeSandbox(files)
        ops = AnalysisOps(sandbox)
        first = await ops.analyze_project_hybrid({}, "sbx")

        # When
        sandbox.files["src/Header.tsx"] = "export default function Header() {}\n"
        sandbox.files["src/App.tsx"] = (
            "import Header from './Header';\nexport default function App() { return null; }\n"
        )
        second = await ops.analyze_project_hybrid({}, "sbx")

        # Then
        assert first.import_errors == ()
        assert second.import_errors == ()
        assert second.mode == AnalysisMode.HYBRID

    @pytest.mark.asyncio
    async def test_given_failed_listing_when_analyzed_then_imports_probed_remotely(
        self,
    ) -> None:
        """A broken listing is not an empty tree: existing files still resolve."""
        files = {
            "src/App.tsx": (
                "import Header from './Header';\n"
                "import Gone from './Gone';\n"
                "export default function App() { return <Header />; }\n"
            ),
            "src/Header.tsx": "export default function Header() {}\n",
        }
        sandbox = FakeSandbox(files, listing_fails=True)
        ops = AnalysisOps(sandbox)

        result = await ops.analyze_project_hybrid({}, "sbx")

        assert result.mode == AnalysisMode.HYBRID
        assert [e.import_path for e in result.import_errors] == ["./Gone"]
        assert "src/Header.tsx" in sandbox.reads
        # Later single-file checks do not reuse a missing snapshot
        await ops.analyze_file_imports("src/App.tsx", files["src/App.tsx"], "sbx")
        assert sandbox.reads.count("src/Header.tsx") == 2

    @pytest.mark.asyncio
    async def test_given_hybrid_run_when_file_imports_checked_then_snapshot_reused(
        self,
    ) -> None:
        sandbox = FakeSandbox(PROJECT_FILES)
        ops = AnalysisOps(sandbox)
        await ops.analyze_project_hybrid({}, "sbx")
        listed = len(sandbox.commands)

        errors = await ops.analyze_file_imports(
            "src/App.tsx", "import { cn } from '@/lib/utils';\n", "sbx"
        )

        assert errors == []
        assert len(sandbox.commands) == listed
        assert "src/lib/utils.ts" not in sandbox.reads

    @pytest.mark.asyncio
    async def test_given_stalled_sandbox_when_analyzed_then_fragment_fallback(self) -> None:
        """Commands that time out degrade to fragment analysis instead of raising."""
        config = SandScanConfig(
            compiler=CompilerConfig(timeout_ms=20),
            scanner=ScannerConfig(tree_timeout_ms=20, batch_timeout_ms=20),
        )
        files = {"src/a.ts": "const x = y as any;\n"}

        result = await AnalysisOps(StalledSandbox(), config).analyze_project_hybrid(files, "sbx")

        assert result.mode == AnalysisMode.FALLBACK
        assert [e.file for e in result.build_errors] == ["src/a.ts"]

    @pytest.mark.asyncio
    async def test_given_malformed_compiler_response_when_analyzed_then_siblings_settle(
        self,
    ) -> None:
        """An unexpected detector failure falls back only after the others finish."""
        sandbox = FakeSandbox(PROJECT_FILES, compiler=42, delay=0.01)
        files = {"src/a.ts": "// @ts-ignore\n"}

        result = await AnalysisOps(sandbox).analyze_project_hybrid(files, "sbx")

        assert result.mode == AnalysisMode.FALLBACK
        assert [e.file for e in result.build_errors] == ["src/a.ts"]
        assert build_file_tree_command("src") in sandbox.finished
        assert any("while IFS= read -r file" in c for c in sandbox.finished)


class TestAnalyzeFileImports:
    """Single-file import validation."""

    @pytest.mark.asyncio
    async def test_given_no_sandbox_when_analyzed_then_fragment_rules(self) -> None:
        errors = await AnalysisOps().analyze_file_imports(
            "src/a.ts", "import { x } from '@/lib/types';\n"
        )

        assert [(e.import_path, e.severity) for e in errors] == [("@/lib/types", Severity.LOW)]

    @pytest.mark.asyncio
    async def test_given_sandbox_when_analyzed_then_resolved_remotely(self) -> None:
        sandbox = FakeSandbox(PROJECT_FILES)
        content = "import { cn } from '@/lib/utils';\nimport Gone from './Gone';\n"

        errors = await AnalysisOps(sandbox).analyze_file_imports("src/App.tsx", content, "sbx")

        assert [e.import_path for e in errors] == ["./Gone"]
        assert "src/lib/utils.ts" in sandbox.reads
