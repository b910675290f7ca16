"""Models for the ``flutter test --machine`` JSON event stream."""

import logging
from collections.abc import Iterator, Sequence
from typing import Annotated, Literal

from pydantic import Field, TypeAdapter, ValidationError

from allure_convert.models.base import Model
from allure_convert.models.record import RecordId

log = logging.getLogger(__name__)


class GroupInfo(Model):
    """Group payload of a ``group`` event."""

    id: RecordId
    name: str = ""
    parent_id: RecordId | None = Field(default=None, alias="parentID")


class TestInfo(Model):
    """Test payload of a ``testStart`` event."""

    __test__ = False

    id: RecordId
    name: str
    group_ids: Sequence[RecordId] = Field(default_factory=tuple, alias="groupIDs")


class StartEvent(Model):
    """Marks the beginning of a run."""

    type: Literal["start"]
    time: int | None = None


class GroupEvent(Model):
    """Announces a group (suite) of tests."""

    type: Literal["group"]
    group: GroupInfo
    time: int | None = None


class TestStartEvent(Model):
    """A test began."""

    __test__ = False

    type: Literal["testStart"]
    test: TestInfo
    time: int | None = None


class TestDoneEvent(Model):
    """A test finished."""

    __test__ = False

    type: Literal["testDone"]
    test_id: RecordId = Field(..., alias="testID")
    result: str | None = None
    error: str | None = None
    stack_trace: str | None = Field(default=None, alias="stackTrace")
    skipped: bool = False
    hidden: bool = False
    time: int | None = None


class ErrorEvent(Model):
    """An error reported for a running test."""

    type: Literal["error"]
    test_id: RecordId = Field(..., alias="testID")
    error: str
    stack_trace: str | None = Field(default=None, alias="stackTrace")
    time: int | None = None


Event = Annotated[
    StartEvent | GroupEvent | TestStartEvent | TestDoneEvent | ErrorEvent,
    Field(discriminator="type"),
]

EVENT_ADAPTER: TypeAdapter[Event] = TypeAdapter(Event)


def parse_event_line(line: str) -> Event | None:
    """Parse one line of the event stream.

    Returns None for malformed JSON and for event types that are not modelled.
    """
    try:
        return EVENT_ADAPTER.validate_json(line)
    except ValidationError as e:
        log.debug("Skipping event line: %s", e.errors()[0]["msg"])
        return None


def parse_event_stream(content: str) -> Iterator[Event]:
    """Yield every recognised event of a newline-delimited JSON document."""
    for line in content.splitlines():
        if not line.strip():
            continue
        if (event := parse_event_line(line)) is not None:
            yield event
