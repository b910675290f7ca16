"""Fold a flutter test event stream into test and suite records."""

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field

from allure_convert.labels import extract_feature, extract_suite_name
from allure_convert.models.events import (
    ErrorEvent,
    Event,
    GroupEvent,
    StartEvent,
    TestDoneEvent,
    TestStartEvent,
)
from allure_convert.models.record import RecordId, SuiteRecord, TestRecord

log = logging.getLogger(__name__)

SUCCESS_RESULT = "success"


@dataclass(frozen=True, kw_only=True)
class ReducedRun:
    """Tests and suites reconstructed from one event stream."""

    tests: Mapping[RecordId, TestRecord] = field(default_factory=dict)
    suites: Mapping[RecordId, SuiteRecord] = field(default_factory=dict)

    def completed_tests(self) -> Sequence[TestRecord]:
        """Finished tests enriched with suite and feature, in start order.

        Tests that never received a ``testDone`` are left out.
        """
        return [
            test.model_copy(
                update={
                    "suite": extract_suite_name(test.name, test.group_ids, self.suites),
                    "feature": extract_feature(test.name),
                }
            )
            for test in self.tests.values()
            if test.is_finished
        ]


def reduce_events(events: Iterable[Event], *, started_at: int) -> ReducedRun:
    """Fold events into a ``ReducedRun``.

    Args:
        events: Parsed events in stream order
        started_at: Epoch milliseconds the run began; event times are
            offsets from it

    Returns:
        Tests keyed by test id and suites keyed by group id

    """
    tests: dict[RecordId, TestRecord] = {}
    suites: dict[RecordId, SuiteRecord] = {}

    for event in events:
        match event:
            case StartEvent():
                pass
            case GroupEvent(group=group):
                suites[group.id] = SuiteRecord(
                    id=group.id, name=group.name, parent_id=group.parent_id
                )
            case TestStartEvent(test=info, time=offset):
                tests[info.id] = TestRecord(
                    name=info.name,
                    external_id=info.id,
                    status="running",
                    start_time=started_at + (offset or 0),
                    group_ids=tuple(info.group_ids),
                )
                for group_id in info.group_ids:
                    if (suite := suites.get(group_id)) is not None:
                        suites[group_id] = suite.model_copy(
                            update={"tests": (*suite.tests, info.id)}
                        )
            case TestDoneEvent():
                if (test := tests.get(event.test_id)) is None:
                    log.debug("testDone for unknown test id %s", event.test_id)
                    continue
                tests[event.test_id] = test.model_copy(
                    update={
                        "end_time": started_at + (event.time or 0),
                        "status": (
                            "passed" if event.result == SUCCESS_RESULT else "failed"
                        ),
                        "error": event.error or test.error,
                        "trace": event.stack_trace or test.trace,
                        "skipped": event.skipped,
                        "hidden": event.hidden,
                    }
                )
            case ErrorEvent():
                test = tests.get(event.test_id)
                if test is None or test.error is not None:
                    continue
                tests[event.test_id] = test.model_copy(
                    update={"error": event.error, "trace": event.stack_trace}
                )

    return ReducedRun(tests=tests, suites=suites)
