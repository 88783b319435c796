"""Navigation-link heuristics."""

from __future__ import annotations

import re

from sandscan.detect.models import ErrorType, NavigationError, Severity

_LINK_RE = re.compile(r"""\b(href|to)=['"]([^'"]+)['"]""")


def is_problematic_route(route: str) -> bool:
    """Absolute in-app paths other than ``/`` may point at pages that do not exist."""
    if not route.startswith("/") or route.startswith("//"):
        return False
    return route != "/" and "#" not in route


def detect_navigation_errors(path: str, content: str) -> list[NavigationError]:
    """Flag ``href``/``to`` targets that might be missing routes.

    This is a coarse heuristic and does not consult the route table.
    """
    errors: list[NavigationError] = []
    for match in _LINK_RE.finditer(content):
        attribute, route = match.groups()
        if not is_problematic_route(route):
            continue
        line_no = content.count("\n", 0, match.start()) + 1
        errors.append(
            NavigationError(
                type=ErrorType.NAVIGATION,
                message=f"Potentially broken route: {route}",
                route=route,
                file=path,
                line=line_no,
                severity=Severity.LOW,
                auto_fixable=True,
                details={"link_attribute": attribute, "line": line_no},
            )
        )
    return errors
