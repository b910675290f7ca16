"""Models for tests and suites reconstructed from runner output."""

from collections.abc import Sequence
from typing import Literal

from pydantic import Field

from allure_convert.models.base import Model

type TestStatus = Literal["running", "passed", "failed", "skipped", "unknown"]
type RecordId = int | str


class TestRecord(Model):
    """A single test as observed in a log or event stream.

    Records are immutable; every refinement produces a new copy via
    ``model_copy`` so folds can thread them through explicit state.
    """

    __test__ = False

    name: str = Field(..., description="Display name of the test")
    external_id: RecordId | None = Field(
        default=None, description="Runner-assigned identifier, if any"
    )
    status: TestStatus = "running"
    start_time: int = Field(..., description="Start, epoch milliseconds")
    end_time: int | None = Field(default=None, description="End, epoch milliseconds")
    error: str | None = None
    trace: str | None = None
    suite: str | None = None
    feature: str | None = None
    platform: str | None = None
    group_ids: Sequence[RecordId] = Field(default_factory=tuple)
    skipped: bool = False
    hidden: bool = False

    @property
    def is_finished(self) -> bool:
        """Whether the record reached a status other than running."""
        return self.status != "running"


class SuiteRecord(Model):
    """A group of tests announced by the runner."""

    id: RecordId
    name: str
    parent_id: RecordId | None = None
    tests: Sequence[RecordId] = Field(default_factory=tuple)
