"""Build-error detection - compiler output parsing and content heuristics."""

from __future__ import annotations

import json
import re
from typing import Any

from sandscan.core.logging import get_logger
from sandscan.detect.models import BuildError, ErrorType, Severity
from sandscan.detect.rules import (
    ESLINT_DEFAULT_SEVERITY,
    ESLINT_RULE_SEVERITY,
    LINT_RISK_RULES,
    TSC_AUTO_FIXABLE_CODES,
    TSC_CODE_SEVERITY,
    TSC_DEFAULT_SEVERITY,
    TYPESCRIPT_RISK_RULES,
    PatternRule,
    is_benign,
)

log = get_logger("sandscan.detect.build")

# Format: file(line,col): error TSxxxx: message
_DIAGNOSTIC_RE = re.compile(r"^(.+?)\((\d+),(\d+)\):\s+error\s+(TS\d+):\s+(.+)$")
_LOCATION_RE = re.compile(r"^.+?\(\d+,\d+\):")
_SUMMARY_RE = re.compile(r"^Found \d+ errors?\b")


def classify_compiler_code(code: str) -> Severity:
    return TSC_CODE_SEVERITY.get(code, TSC_DEFAULT_SEVERITY)


def classify_eslint_rule(rule_id: str | None) -> Severity:
    if not rule_id:
        return Severity.LOW
    for fragment, severity in ESLINT_RULE_SEVERITY:
        if fragment in rule_id:
            return severity
    return ESLINT_DEFAULT_SEVERITY


def parse_compiler_output(output: str) -> list[BuildError]:
    """Parse ``tsc`` diagnostics into build errors.

    Lines that do not start a new ``file(line,col):`` diagnostic are treated as
    continuations and appended to the previous message, which reassembles
    multi-line diagnostics. Text before the first diagnostic and the trailing
    ``Found N errors`` summary are ignored.
    """
    errors: list[BuildError] = []
    lines = output.replace("\r\n", "\n").split("\n")

    i = 0
    while i < len(lines):
        line = lines[i].strip()
        match = _DIAGNOSTIC_RE.match(line)
        i += 1
        if match is None:
            continue

        file, line_no, col_no, code, message = match.groups()
        parts = [message.strip()]
        while i < len(lines) and not _LOCATION_RE.match(lines[i].strip()):
            continuation = lines[i].strip()
            if continuation and not _SUMMARY_RE.match(continuation):
                parts.append(continuation)
            i += 1

        errors.append(
            BuildError(
                type=ErrorType.TYPE_SCRIPT,
                message=" ".join(parts),
                file=file,
                line=int(line_no),
                column=int(col_no),
                severity=classify_compiler_code(code),
                auto_fixable=code in TSC_AUTO_FIXABLE_CODES,
                details={
                    "error_code": code,
                    "compiler_output": line,
                    "analysis_type": "tsc_compiler",
                },
            )
        )
    return errors


def _scan_rules(path: str, content: str, rules: tuple[PatternRule, ...]) -> list[BuildError]:
    errors: list[BuildError] = []
    for line_no, line in enumerate(content.split("\n"), start=1):
        if is_benign(line):
            continue
        # One report per line; rules are ordered by importance
        rule = next((r for r in rules if r.matches(line)), None)
        if rule is None:
            continue
        errors.append(
            BuildError(
                type=rule.error_type,
                message=rule.format_message(line),
                file=path,
                line=line_no,
                column=1,
                severity=rule.severity,
                auto_fixable=rule.auto_fixable,
                details={
                    "rule_id": rule.rule_id,
                    "original_line": line.strip(),
                    "analysis_type": "content_pattern",
                },
            )
        )
    return errors


def scan_build_risks(
    path: str, content: str, rules: tuple[PatternRule, ...] = TYPESCRIPT_RISK_RULES
) -> list[BuildError]:
    """Flag lines that suppress or bypass type checking. Heuristic, so LOW."""
    return _scan_rules(path, content, rules)


def scan_lint_risks(path: str, content: str) -> list[BuildError]:
    return _scan_rules(path, content, LINT_RISK_RULES)


def parse_eslint_output(json_text: str) -> list[BuildError]:
    """Parse ESLint ``--format json`` output, keeping error-level messages."""
    try:
        results = json.loads(json_text)
    except ValueError as e:
        log.warning("eslint_output_unparseable", error=str(e))
        return []
    if not isinstance(results, list):
        log.warning("eslint_output_unexpected", shape=type(results).__name__)
        return []

    errors: list[BuildError] = []
    for result in results:
        if not isinstance(result, dict):
            continue
        messages: list[dict[str, Any]] = result.get("messages") or []
        for message in messages:
            text = str(message.get("message", ""))
            if is_benign(text) or message.get("severity") != 2:
                continue
            rule_id = message.get("ruleId")
            errors.append(
                BuildError(
                    type=ErrorType.ESLINT,
                    message=text,
                    file=result.get("filePath"),
                    line=message.get("line"),
                    column=message.get("column"),
                    severity=classify_eslint_rule(rule_id),
                    auto_fixable=message.get("fix") is not None,
                    details={
                        "rule_id": rule_id,
                        "severity": message.get("severity"),
                        "fix": message.get("fix"),
                    },
                )
            )
    return errors
