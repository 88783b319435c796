"""Rule tables for the heuristic detectors.

Each content rule is a ``PatternRule`` value, so rule sets can be extended and
tested without touching the scanning loop in ``detect.build``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from sandscan.detect.models import ErrorType, Severity

COMMENT_PREFIXES = ("//", "*", "/*")


@dataclass(frozen=True, slots=True)
class PatternRule:
    """A line-level risk pattern.

    ``message`` is a format string receiving ``line`` (the stripped source
    line). A line is skipped when it is a comment line (``skip_comment_lines``),
    when it carries any comment (``skip_inline_comments``), or when any
    ``exclusions`` pattern matches.
    """

    rule_id: str
    pattern: re.Pattern[str]
    severity: Severity = Severity.LOW
    auto_fixable: bool = True
    error_type: ErrorType = ErrorType.TYPE_SCRIPT
    message: str = "Potential issue: {line}"
    exclusions: tuple[re.Pattern[str], ...] = ()
    skip_comment_lines: bool = True
    skip_inline_comments: bool = False

    def matches(self, line: str) -> bool:
        stripped = line.strip()
        if self.skip_comment_lines and stripped.startswith(COMMENT_PREFIXES):
            return False
        if self.skip_inline_comments and ("//" in stripped or "/*" in stripped):
            return False
        if any(p.search(line) for p in self.exclusions):
            return False
        return self.pattern.search(line) is not None

    def format_message(self, line: str) -> str:
        return self.message.format(line=line.strip())


# =============================================================================
# Compiler / Linter Classification
# =============================================================================

TSC_CODE_SEVERITY: dict[str, Severity] = {
    "TS2307": Severity.CRITICAL,  # cannot find module
    "TS2339": Severity.CRITICAL,  # property does not exist
    "TS2345": Severity.CRITICAL,  # argument type mismatch
    "TS2304": Severity.HIGH,  # cannot find name
    "TS2322": Severity.HIGH,  # type not assignable
}
TSC_DEFAULT_SEVERITY = Severity.MEDIUM

TSC_AUTO_FIXABLE_CODES = frozenset({"TS2304", "TS2307", "TS2339"})

# Substring match on the rule id, first hit wins
ESLINT_RULE_SEVERITY: tuple[tuple[str, Severity], ...] = (
    ("no-undef", Severity.CRITICAL),
    ("no-unused-vars", Severity.CRITICAL),
    ("react-hooks/exhaustive-deps", Severity.CRITICAL),
    ("prefer-const", Severity.HIGH),
    ("no-var", Severity.HIGH),
    ("@typescript-eslint/no-explicit-any", Severity.HIGH),
)
ESLINT_DEFAULT_SEVERITY = Severity.MEDIUM

# Dev-server and tooling chatter that is never a real problem
BENIGN_WARNINGS: tuple[str, ...] = (
    "Fast refresh only works when a file only exports components",
)


def is_benign(text: str) -> bool:
    return any(w in text for w in BENIGN_WARNINGS)


# =============================================================================
# Content Rules
# =============================================================================

TYPESCRIPT_RISK_RULES: tuple[PatternRule, ...] = (
    PatternRule(
        rule_id="ts-ignore",
        pattern=re.compile(r"@ts-ignore"),
        message="Potential TypeScript error: {line}",
        # The directive is itself a comment
        skip_comment_lines=False,
    ),
    PatternRule(
        rule_id="as-any",
        pattern=re.compile(r"\bas\s+any\b"),
        message="Potential TypeScript error: {line}",
    ),
)

_DEBUG_LOGGING = re.compile(r"console\.log.*(?:debug|development|TODO)|(?:debug|development|TODO).*console\.log")

LINT_RISK_RULES: tuple[PatternRule, ...] = (
    PatternRule(
        rule_id="no-var",
        pattern=re.compile(r"\bvar\s+\w+"),
        error_type=ErrorType.ESLINT,
        message="Potential ESLint violation: {line}",
        exclusions=(_DEBUG_LOGGING,),
        skip_inline_comments=True,
    ),
    PatternRule(
        rule_id="eqeqeq",
        pattern=re.compile(r"(?<![=!<>])(?:==|!=)(?!=)"),
        error_type=ErrorType.ESLINT,
        message="Potential ESLint violation: {line}",
        exclusions=(_DEBUG_LOGGING,),
        skip_inline_comments=True,
    ),
    PatternRule(
        rule_id="no-trailing-spaces",
        pattern=re.compile(r"\S[ \t]+$"),
        error_type=ErrorType.ESLINT,
        message="Potential ESLint violation: {line}",
        exclusions=(_DEBUG_LOGGING,),
        skip_inline_comments=True,
    ),
)


# =============================================================================
# Import / Export Rules
# =============================================================================

# Imports that are known to break generated projects when no sandbox is
# available to check them properly
PROBLEMATIC_IMPORT_RULES: tuple[re.Pattern[str], ...] = (
    re.compile(r"^@/lib/store$"),
    re.compile(r"^@/lib/types$"),
    re.compile(r"^framer-motion$"),
    re.compile(r"^react-spring$"),
)

UI_LIBRARY_PREFIX = "@/components/ui/"

# Generated UI-library components that are normally present
KNOWN_UI_COMPONENTS: tuple[str, ...] = (
    "button",
    "dialog",
    "input",
    "card",
    "badge",
    "alert",
    "form",
    "table",
    "select",
    "textarea",
    "checkbox",
    "radio",
    "switch",
    "slider",
    "tabs",
    "accordion",
    "carousel",
    "calendar",
    "command",
    "popover",
    "tooltip",
    "dropdown",
    "navigation",
    "sidebar",
    "toggle",
    "separator",
    "scroll-area",
    "sheet",
    "skeleton",
    "avatar",
    "progress",
    "spinner",
    "toast",
    "sonner",
)

ENTRY_COMPONENT_NAMES = frozenset({"App", "Main", "Home", "Index"})

APP_ROOT_FILES = frozenset({"App.tsx", "App.jsx"})
APP_ROOT_COMPONENT = "App"
