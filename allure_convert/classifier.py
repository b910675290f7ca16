"""Infer tests and their outcome from a free-text log.

Classification is a single pass over the log lines. The fold state is an
immutable ``ClassifierState`` threaded through ``advance`` so a chunk of lines
can be checked in isolation.
"""

import logging
import time
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, replace
from typing import Literal, assert_never

from allure_convert.markers import (
    PATROL_MARKERS,
    UNKNOWN_PLATFORM,
    MarkerTable,
    detect_platform,
)
from allure_convert.models.record import TestRecord, TestStatus

log = logging.getLogger(__name__)

type LineKind = Literal["start", "success", "failure", "skip"]
type Clock = Callable[[], int]

DEFAULT_SUITE = "Integration Tests"
DEFAULT_FEATURE = "Patrol Tests"
# Nominal duration given to records that have no observed start
SYNTHETIC_DURATION_MS = 5000


def now_ms() -> int:
    """Return the current time in epoch milliseconds."""
    return time.time_ns() // 1_000_000


@dataclass(frozen=True, kw_only=True)
class ClassifierState:
    """Fold state of the classifier."""

    current: TestRecord | None = None
    finished: tuple[TestRecord, ...] = ()
    # Outcome seen outside of any test, applied to unfinished records
    status: TestStatus = "passed"
    error: str | None = None
    signal_seen: bool = False


@dataclass(frozen=True, kw_only=True)
class LineContext:
    """Values that stay constant for a whole log."""

    default_name: str
    platform: str
    markers: MarkerTable = PATROL_MARKERS
    clock: Clock = now_ms


def classify_line(
    line: str, markers: MarkerTable = PATROL_MARKERS
) -> LineKind | None:
    """Classify a log line, first match in start/success/failure/skip order."""
    if markers.is_start(line):
        return "start"
    if markers.is_success(line):
        return "success"
    if markers.is_failure(line):
        return "failure"
    if markers.is_skip(line):
        return "skip"
    return None


def advance(
    state: ClassifierState, line: str, context: LineContext
) -> ClassifierState:
    """Fold one trimmed, non-empty log line into the state."""
    kind = classify_line(line, context.markers)
    if kind is None:
        return state

    state = replace(state, signal_seen=True)
    current = state.current

    match kind:
        case "start":
            finished = (
                state.finished if current is None else (*state.finished, current)
            )
            name = context.markers.extract_test_name(line) or context.default_name
            return replace(
                state,
                finished=finished,
                current=TestRecord(
                    name=name,
                    status="running",
                    start_time=context.clock(),
                    suite=DEFAULT_SUITE,
                    feature=DEFAULT_FEATURE,
                    platform=context.platform,
                ),
            )
        case "success":
            if current is None:
                return replace(state, status="passed")
            return replace(
                state,
                current=current.model_copy(
                    update={"status": "passed", "end_time": context.clock()}
                ),
            )
        case "failure":
            if current is None:
                return replace(state, status="failed", error=line)
            return replace(
                state,
                current=current.model_copy(
                    update={
                        "status": "failed",
                        "end_time": context.clock(),
                        "error": line,
                        "trace": line,
                    }
                ),
            )
        case "skip":
            if current is None or current.status == "failed":
                return state
            return replace(
                state,
                current=current.model_copy(
                    update={"status": "skipped", "end_time": context.clock()}
                ),
            )
        case _:
            assert_never(kind)


def finalize(state: ClassifierState, context: LineContext) -> Sequence[TestRecord]:
    """Close the open record and apply the fallbacks for empty results."""
    records = list(state.finished)

    if (current := state.current) is not None:
        if current.status == "running":
            update: dict[str, object] = {
                "status": state.status,
                "end_time": context.clock(),
            }
            if state.error is not None:
                update["error"] = state.error
                update["trace"] = state.error
            current = current.model_copy(update=update)
        records.append(current)

    if records:
        return records

    if state.signal_seen:
        log.info("No individual tests found, reporting the run as one test")
        return [
            synthetic_record(
                context.default_name,
                status=state.status,
                error=state.error,
                platform=context.platform,
                clock=context.clock,
            )
        ]

    log.warning("No test signals recognised, reporting a passed fallback result")
    return [fallback_record(context.default_name, clock=context.clock)]


def synthetic_record(
    name: str,
    *,
    status: TestStatus,
    error: str | None = None,
    platform: str,
    suite: str = DEFAULT_SUITE,
    clock: Clock = now_ms,
) -> TestRecord:
    """Build a record for a run whose individual tests are not known."""
    end = clock()
    return TestRecord(
        name=name,
        status=status,
        start_time=end - SYNTHETIC_DURATION_MS,
        end_time=end,
        error=error,
        trace=error,
        suite=suite,
        feature=DEFAULT_FEATURE,
        platform=platform,
    )


def fallback_record(name: str, *, clock: Clock = now_ms) -> TestRecord:
    """Build the passed record reported when nothing could be read."""
    return synthetic_record(
        name, status="passed", platform=UNKNOWN_PLATFORM, clock=clock
    )


def classify_lines(
    lines: Iterable[str], context: LineContext
) -> Sequence[TestRecord]:
    """Run the classifier over already split log lines."""
    state = ClassifierState()
    for raw in lines:
        if line := raw.strip():
            state = advance(state, line, context)
    return finalize(state, context)


def classify_log(
    content: str,
    default_name: str,
    *,
    markers: MarkerTable = PATROL_MARKERS,
    clock: Clock = now_ms,
) -> Sequence[TestRecord]:
    """Infer test records from the full text of a log."""
    context = LineContext(
        default_name=default_name,
        platform=detect_platform(content),
        markers=markers,
        clock=clock,
    )
    return classify_lines(content.split("\n"), context)
