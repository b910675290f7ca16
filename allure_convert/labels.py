"""Derive report labels from test names."""

import re
from collections.abc import Mapping, Sequence

from allure_convert.models.record import RecordId, SuiteRecord

SUITE_NAME_PATTERNS: Sequence[re.Pattern[str]] = tuple(
    re.compile(rf"^(.+?)\s+{suffix}", re.IGNORECASE)
    for suffix in (
        "Widget",
        "Integration",
        "Unit",
        "Test",
        "should",
        "displays",
        "loads",
    )
)

SUITE_FALLBACK_WORDS = 3

FEATURES: Sequence[tuple[Sequence[str], str]] = (
    (("hotel", "search"), "Hotel Search"),
    (("favorite", "heart"), "Favorites Management"),
    (("navigation", "tab", "route"), "Navigation"),
    (("overview", "home"), "Overview"),
    (("account", "profile"), "Account"),
    (("dashboard",), "Dashboard"),
    (("widget", "component"), "UI Components"),
    (("integration",), "Integration"),
    (("unit",), "Unit Tests"),
)

DEFAULT_FEATURE = "General"


def history_id(test_name: str) -> str:
    """Return the stable id Allure uses to track a test across runs."""
    return re.sub(r"\s+", "_", test_name).lower()


def extract_suite_name(
    test_name: str,
    group_ids: Sequence[RecordId] = (),
    suites: Mapping[RecordId, SuiteRecord] | None = None,
) -> str:
    """Resolve the suite of a test.

    The display name of the first group the test belongs to wins. Otherwise
    the name is matched against common naming patterns, and as a last resort
    its first few words are used.
    """
    if group_ids and suites and (suite := suites.get(group_ids[0])) is not None:
        return suite.name

    for pattern in SUITE_NAME_PATTERNS:
        if match := pattern.match(test_name):
            return match.group(1)

    return " ".join(test_name.split(" ")[:SUITE_FALLBACK_WORDS])


def extract_feature(test_name: str) -> str:
    """Map a test name to a feature using the first matching keyword set."""
    lower_name = test_name.lower()
    for keywords, feature in FEATURES:
        if any(keyword in lower_name for keyword in keywords):
            return feature
    return DEFAULT_FEATURE
