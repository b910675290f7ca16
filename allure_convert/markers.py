"""Marker tables used to classify free-text log lines.

The classifier holds no patterns of its own: everything it knows about a
log format lives in a ``MarkerTable`` so formats can be tested and extended
without touching control flow.
"""

import re
from collections.abc import Sequence
from dataclasses import dataclass


@dataclass(frozen=True, kw_only=True)
class FailureRule:
    """A failure marker and the phrases that cancel it on the same line."""

    marker: str
    exclusions: Sequence[str] = ()

    def matches(self, line: str) -> bool:
        """Check whether the line reports a failure under this rule."""
        return self.marker in line and not any(
            exclusion in line for exclusion in self.exclusions
        )


@dataclass(frozen=True, kw_only=True)
class MarkerTable:
    """Substrings and patterns recognised in a runner's log."""

    start: Sequence[str]
    success: Sequence[str]
    failure: Sequence[FailureRule]
    # Lines describing handled failures rather than reporting one
    failure_suppressions: Sequence[str]
    skip: Sequence[str]
    name_patterns: Sequence[re.Pattern[str]]

    def is_start(self, line: str) -> bool:
        """Check for a marker announcing a new test."""
        return any(marker in line for marker in self.start)

    def is_success(self, line: str) -> bool:
        """Check for a success marker."""
        return any(marker in line for marker in self.success)

    def is_failure(self, line: str) -> bool:
        """Check for a failure marker that survives both exclusion layers."""
        if not any(rule.matches(line) for rule in self.failure):
            return False
        return not any(phrase in line for phrase in self.failure_suppressions)

    def is_skip(self, line: str) -> bool:
        """Check for a skip marker."""
        return any(marker in line for marker in self.skip)

    def extract_test_name(self, line: str) -> str | None:
        """Extract a test name using the first matching name pattern."""
        for pattern in self.name_patterns:
            if match := pattern.search(line):
                return match.group(1).strip()
        return None


PATROL_MARKERS = MarkerTable(
    start=("Running", "🚀", "Starting:"),
    success=("✅", "PASS", "SUCCESS", "completed", "verified"),
    failure=(
        FailureRule(marker="❌", exclusions=("Failed: 0", "Errors: 0")),
        FailureRule(marker="FAIL", exclusions=("API failure",)),
        FailureRule(marker="ERROR", exclusions=("Error state",)),
        FailureRule(marker="Exception", exclusions=("Expected",)),
        FailureRule(marker="failed", exclusions=("API failure", "failure test")),
    ),
    failure_suppressions=(
        "✅",
        "completed successfully",
        "properly displayed",
        "handled",
    ),
    skip=("⚠️", "SKIP", "skipped"),
    name_patterns=(
        re.compile(r"Running\s+(.+?)\s+test", re.IGNORECASE),
        re.compile(r"🚀\s*Starting:\s*(.+)", re.IGNORECASE),
        re.compile(r"▶️\s*(.+)", re.IGNORECASE),
        re.compile(r"Test:\s*(.+)", re.IGNORECASE),
    ),
)

# First platform with a marker anywhere in the log wins
PLATFORM_MARKERS: Sequence[tuple[str, Sequence[str]]] = (
    ("iOS", ("iOS", "iPhone", "simulator")),
    ("Android", ("Android", "emulator", "device")),
)

UNKNOWN_PLATFORM = "Unknown"


def detect_platform(content: str) -> str:
    """Infer the platform a log was produced on."""
    for platform_name, markers in PLATFORM_MARKERS:
        if any(marker in content for marker in markers):
            return platform_name
    return UNKNOWN_PLATFORM
