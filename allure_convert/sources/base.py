"""Abstract base class for test result sources."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from allure_convert.config import ReportProfile
from allure_convert.models.record import TestRecord


class InputMissingError(Exception):
    """Raised when a source's required input file does not exist."""


@dataclass(frozen=True, kw_only=True)
class ResultSource(ABC):
    """A runner output that can be turned into test records.

    Sources own the interpretation of their input; writing the Allure
    directory is left to the caller.
    """

    @property
    @abstractmethod
    def input_path(self) -> Path:
        """File consumed by the source, removed after a successful run."""

    @property
    @abstractmethod
    def profile(self) -> ReportProfile:
        """Labels and metadata for results of this source."""

    @property
    @abstractmethod
    def output_dir(self) -> Path:
        """Directory the Allure results are written to."""

    @abstractmethod
    async def collect(self) -> Sequence[TestRecord]:
        """Read the input and return the records to report.

        Returns:
            Finished test records, in the order they were observed

        Raises:
            InputMissingError: If the input is required and absent

        """
