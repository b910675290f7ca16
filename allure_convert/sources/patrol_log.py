"""Patrol log source."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from allure_convert.classifier import Clock, classify_log, fallback_record, now_ms
from allure_convert.config import PATROL_PROFILE, PatrolLogConfig, ReportProfile
from allure_convert.models.record import TestRecord
from allure_convert.sources.base import ResultSource
from allure_convert.xcresult import load_xcresult_tests

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class PatrolLogSource(ResultSource):
    """Infers tests from the free-text output of ``patrol test``.

    A missing log is not fatal: an ``.xcresult`` bundle from the build
    directory is tried next, then a single passed result is reported.
    """

    config: PatrolLogConfig
    clock: Clock = field(default=now_ms, repr=False)

    @property
    def input_path(self) -> Path:
        """Path of the Patrol log."""
        return self.config.log_file

    @property
    def profile(self) -> ReportProfile:
        """Patrol report profile."""
        return PATROL_PROFILE

    @property
    def output_dir(self) -> Path:
        """Configured Allure results directory."""
        return self.config.output_dir

    async def collect(self) -> Sequence[TestRecord]:
        """Classify the log, falling back to the .xcresult bundle."""
        test_name = self.config.test_name

        if not self.input_path.exists():
            log.warning("Log file not found: %s", self.input_path)
            tests = await load_xcresult_tests(
                self.config.build_dir, test_name, clock=self.clock
            )
            return tests or [fallback_record(test_name, clock=self.clock)]

        try:
            content = self.input_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            log.warning("Error reading log file: %s", e)
            return [fallback_record(test_name, clock=self.clock)]

        return classify_log(content, test_name, clock=self.clock)
