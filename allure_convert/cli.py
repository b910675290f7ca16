"""CLI entry points converting test runner output to Allure results."""

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Sequence
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from allure_convert.config import FlutterTestConfig, PatrolLogConfig
from allure_convert.emitter import (
    cleanup_input,
    ensure_output_dir,
    write_categories,
    write_environment,
    write_result_files,
)
from allure_convert.models.record import TestRecord
from allure_convert.sources import (
    FlutterTestSource,
    InputMissingError,
    PatrolLogSource,
    ResultSource,
)

STATUS_SYMBOLS = {
    "passed": "✓",
    "failed": "✗",
    "skipped": "↷",
}


def log_results_summary(log: logging.Logger, records: Sequence[TestRecord]) -> None:
    """Log a formatted summary of converted test results."""
    log.info("=" * 80)
    log.info("Test Results Summary:")
    log.info("=" * 80)

    for record in records:
        symbol = STATUS_SYMBOLS.get(record.status, "?")
        log.info("%s %s: %s", symbol, record.name, record.status)
        if record.error:
            log.info("  Message: %s", record.error)

    counts = count_statuses(records)
    log.info(
        "%d passed, %d failed, %d skipped",
        counts["passed"],
        counts["failed"],
        counts["skipped"],
    )


def count_statuses(records: Sequence[TestRecord]) -> dict[str, int]:
    """Count records per reportable status."""
    counts = {"passed": 0, "failed": 0, "skipped": 0, "unknown": 0}
    for record in records:
        key = record.status if record.status in counts else "unknown"
        counts[key] += 1
    return counts


def format_output(
    records: Sequence[TestRecord], written: int, output_dir: Path
) -> dict[str, Any]:
    """Format the conversion summary for JSON output."""
    return {
        "total": len(records),
        **count_statuses(records),
        "written": written,
        "output_dir": str(output_dir),
    }


async def run(source: ResultSource) -> int:
    """Convert a source to an Allure results directory and return exit code."""
    log = logging.getLogger("allure_convert")

    log.info("Reading: %s", source.input_path)
    try:
        records = await source.collect()
    except InputMissingError as e:
        log.error("%s", e)
        return 1

    log.info("Found %d test(s)", len(records))

    output_dir = source.output_dir
    ensure_output_dir(output_dir)

    written = write_result_files(records, source.profile, output_dir)
    write_environment(source.profile, output_dir, datetime.now(timezone.utc))
    write_categories(source.profile, output_dir)

    log.info("Successfully converted %d test results", written)
    log.info("Results written to %s", output_dir)
    log_results_summary(log, records)

    print(json.dumps(format_output(records, written, output_dir), indent=2))

    cleanup_input(source.input_path)
    return 0


def configure_logging() -> None:
    """Send log records to stderr, leaving stdout for the JSON summary."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def patrol_main(argv: Sequence[str] | None = None) -> None:
    """Convert a Patrol log to Allure results."""
    defaults = PatrolLogConfig()
    parser = argparse.ArgumentParser(
        description="Convert Patrol integration test output to Allure results"
    )
    parser.add_argument(
        "test_name",
        nargs="?",
        default=defaults.test_name,
        help="Name reported when a test name cannot be read from the log",
    )
    parser.add_argument(
        "log_file",
        nargs="?",
        type=Path,
        default=defaults.log_file,
        help="Path to the patrol test log",
    )

    args = parser.parse_args(argv)

    configure_logging()

    config = PatrolLogConfig(test_name=args.test_name, log_file=args.log_file)
    sys.exit(asyncio.run(run(PatrolLogSource(config=config))))


def flutter_test_main(argv: Sequence[str] | None = None) -> None:
    """Convert ``flutter test --machine`` output to Allure results."""
    parser = argparse.ArgumentParser(
        description=(
            "Convert flutter test JSON events (test-results.json) to Allure results"
        )
    )
    parser.parse_args(argv)

    configure_logging()

    sys.exit(asyncio.run(run(FlutterTestSource(config=FlutterTestConfig()))))

