"""Write Allure result directories."""

import contextlib
import json
import logging
import uuid
from collections.abc import Callable, Sequence
from datetime import datetime
from pathlib import Path

from allure_convert.config import CATEGORIES_FILE, ENVIRONMENT_FILE, ReportProfile
from allure_convert.labels import history_id
from allure_convert.models.record import TestRecord
from allure_convert.models.result import Label, ResultFile, ResultStatus, StatusDetails

log = logging.getLogger(__name__)


def result_status(record: TestRecord) -> ResultStatus:
    """Map a record status to a reportable one."""
    if record.status == "running":
        return "unknown"
    return record.status


def build_result_file(
    record: TestRecord,
    profile: ReportProfile,
    *,
    uuid_factory: Callable[[], uuid.UUID] = uuid.uuid4,
) -> ResultFile:
    """Project a finished record onto an Allure result."""
    status = result_status(record)

    labels = [
        Label(name="framework", value=profile.framework),
        Label(name="language", value=profile.language),
        Label(name="suite", value=record.suite or profile.default_suite),
        Label(name="feature", value=record.feature or profile.default_feature),
        Label(name="severity", value=profile.severity),
        Label(name="testType", value=profile.test_type),
    ]
    if record.platform is not None:
        labels.append(Label(name="platform", value=record.platform))

    status_details = None
    if status == "failed" and record.error:
        status_details = StatusDetails(message=record.error, trace=record.trace or "")

    stop = record.end_time if record.end_time is not None else record.start_time

    return ResultFile(
        uuid=str(uuid_factory()),
        history_id=history_id(record.name),
        name=record.name,
        full_name=record.name,
        status=status,
        start=record.start_time,
        stop=max(stop, record.start_time),
        labels=labels,
        status_details=status_details,
    )


def ensure_output_dir(output_dir: Path) -> None:
    """Create the output directory if it does not exist."""
    if not output_dir.is_dir():
        output_dir.mkdir(parents=True, exist_ok=True)
        log.info("Created directory: %s", output_dir)


def write_result_files(
    records: Sequence[TestRecord], profile: ReportProfile, output_dir: Path
) -> int:
    """Write one result file per record.

    A failing write is logged and skipped so the rest of the batch is still
    written.

    Returns:
        Number of result files written

    """
    written = 0
    for record in records:
        result = build_result_file(record, profile)
        path = output_dir / result.file_name
        try:
            path.write_text(
                json.dumps(result.to_json_dict(), indent=2, ensure_ascii=False),
                encoding="utf-8",
            )
        except OSError as e:
            log.error("Failed to write result for test %s: %s", record.name, e)
            continue
        log.info("Written result to %s", result.file_name)
        written += 1
    return written


def write_environment(
    profile: ReportProfile, output_dir: Path, executed_at: datetime
) -> Path:
    """Write ``environment.properties`` for the run."""
    properties = profile.environment_properties(executed_at)
    path = output_dir / ENVIRONMENT_FILE
    path.write_text(
        "\n".join(f"{key}={value}" for key, value in properties.items()),
        encoding="utf-8",
    )
    return path


def write_categories(profile: ReportProfile, output_dir: Path) -> Path:
    """Write ``categories.json`` with the profile's categories."""
    path = output_dir / CATEGORIES_FILE
    categories = [
        category.model_dump(mode="json", by_alias=True)
        for category in profile.categories
    ]
    path.write_text(json.dumps(categories, indent=2), encoding="utf-8")
    return path


def cleanup_input(input_path: Path) -> None:
    """Remove a consumed input file, ignoring any failure."""
    with contextlib.suppress(OSError):
        if input_path.exists():
            input_path.unlink()
            log.info("Cleaned up input file: %s", input_path)
