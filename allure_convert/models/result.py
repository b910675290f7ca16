"""Models for the Allure 2 result directory format."""

from collections.abc import Sequence
from typing import Any, Literal

from pydantic import Field

from allure_convert.models.base import AllureModel

type ResultStatus = Literal["passed", "failed", "skipped", "unknown"]


class Label(AllureModel):
    """A name/value label attached to a result."""

    name: str
    value: str


class StatusDetails(AllureModel):
    """Failure details shown by the report."""

    message: str
    trace: str = ""


class ResultFile(AllureModel):
    """One ``<uuid>-result.json`` document."""

    uuid: str
    history_id: str
    name: str
    full_name: str
    status: ResultStatus
    stage: Literal["finished"] = "finished"
    start: int
    stop: int
    labels: Sequence[Label] = Field(default_factory=tuple)
    links: Sequence[Any] = Field(default_factory=tuple)
    parameters: Sequence[Any] = Field(default_factory=tuple)
    attachments: Sequence[Any] = Field(default_factory=tuple)
    status_details: StatusDetails | None = None

    @property
    def file_name(self) -> str:
        """Name of the file this result is written to."""
        return f"{self.uuid}-result.json"

    def to_json_dict(self) -> dict[str, Any]:
        """Serialize with Allure key names, omitting absent details."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Category(AllureModel):
    """A rule in ``categories.json`` grouping results in the report."""

    name: str
    matched_statuses: Sequence[str]
    message_regex: str
