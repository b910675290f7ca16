"""Read test outcomes from an iOS ``.xcresult`` bundle via ``xcresulttool``."""

import asyncio
import json
import logging
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from allure_convert.classifier import Clock, now_ms, synthetic_record
from allure_convert.models.record import TestRecord

logger = logging.getLogger(__name__)

XCRESULT_SUFFIX = ".xcresult"
IOS_SUITE = "iOS Integration Tests"


class XCResultError(Exception):
    """Raised when an archive cannot be read by xcresulttool."""


def find_xcresult(build_dir: Path) -> Path | None:
    """Return the first ``.xcresult`` bundle below the build directory."""
    if not build_dir.is_dir():
        return None

    bundles = sorted(
        path for path in build_dir.rglob(f"*{XCRESULT_SUFFIX}") if path.is_dir()
    )
    return bundles[0] if bundles else None


async def read_xcresult(bundle: Path) -> Mapping[str, Any]:
    """Run ``xcrun xcresulttool`` and return the parsed JSON document.

    Raises:
        XCResultError: If the tool cannot be run, fails, or prints invalid JSON

    """
    try:
        process = await asyncio.create_subprocess_exec(
            "xcrun",
            "xcresulttool",
            "get",
            "--format",
            "json",
            "--path",
            str(bundle),
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        raise XCResultError(f"Cannot run xcrun: {e}") from e

    stdout, stderr = await process.communicate()

    if process.returncode != 0:
        message = stderr.decode(errors="replace").strip()
        raise XCResultError(f"xcresulttool failed: {message}")

    try:
        data = json.loads(stdout)
    except ValueError as e:
        raise XCResultError(f"Invalid xcresulttool output: {e}") from e

    if not isinstance(data, dict):
        raise XCResultError("Unexpected xcresulttool output: not an object")
    return data


def extract_tests(
    data: Mapping[str, Any], test_name: str, *, clock: Clock = now_ms
) -> Sequence[TestRecord]:
    """Build one record per action that produced a tests reference.

    Only the presence of test output is read from the archive; every
    record is reported as passed under the given name.
    """
    actions = data.get("actions")
    values = actions.get("_values") if isinstance(actions, dict) else None
    if not isinstance(values, list):
        return []

    return [
        synthetic_record(
            test_name,
            status="passed",
            platform="iOS",
            suite=IOS_SUITE,
            clock=clock,
        )
        for action in values
        if isinstance(action, dict)
        and isinstance(action.get("actionResult"), dict)
        and action["actionResult"].get("testsRef")
    ]


async def load_xcresult_tests(
    build_dir: Path, test_name: str, *, clock: Clock = now_ms
) -> Sequence[TestRecord]:
    """Find and read an ``.xcresult`` bundle, returning no records on failure."""
    if (bundle := find_xcresult(build_dir)) is None:
        return []

    logger.info("Found iOS .xcresult bundle: %s", bundle)
    try:
        data = await read_xcresult(bundle)
    except XCResultError as e:
        logger.warning("Error parsing .xcresult: %s", e)
        return []

    tests = extract_tests(data, test_name, clock=clock)
    logger.info("Extracted %d test(s) from .xcresult", len(tests))
    return tests
