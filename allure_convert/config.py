"""Configuration for the conversion pipelines and their report profiles."""

import platform
import sys
from collections.abc import Mapping, Sequence
from datetime import datetime
from pathlib import Path

from pydantic import BaseModel, Field

from allure_convert.models.base import Model
from allure_convert.models.result import Category

DEFAULT_OUTPUT_DIR = Path("integration_test/reports/allure-results")
ENVIRONMENT_FILE = "environment.properties"
CATEGORIES_FILE = "categories.json"


class ReportProfile(Model):
    """Fixed labels and metadata written for every result of a pipeline."""

    framework: str = Field(..., description="Value of the framework label")
    language: str = "dart"
    test_type: str = Field(..., description="Value of the testType label")
    severity: str = "normal"
    default_suite: str = "General"
    default_feature: str = "General"
    test_framework: str = Field(..., description="Test.Framework environment entry")
    test_runner: str = Field(..., description="Test.Runner environment entry")
    project: str = "Hotel Booking App"
    environment: str = "local"
    extra_environment: Mapping[str, str] = Field(default_factory=dict)
    categories: Sequence[Category] = Field(default_factory=tuple)

    def environment_properties(self, executed_at: datetime) -> Mapping[str, str]:
        """Key/value pairs for ``environment.properties``."""
        return {
            "Platform": sys.platform,
            "Python.Version": platform.python_version(),
            "Test.Framework": self.test_framework,
            "Test.Runner": self.test_runner,
            "Execution.Date": executed_at.isoformat(),
            "Project": self.project,
            "Environment": self.environment,
            **self.extra_environment,
        }


PATROL_PROFILE = ReportProfile(
    framework="patrol",
    test_type="integration",
    default_suite="Integration Tests",
    default_feature="Patrol Tests",
    test_framework="Patrol Integration Tests",
    test_runner="patrol test",
    extra_environment={"Test.Type": "integration"},
    categories=(
        Category(
            name="Integration Test Failures",
            matched_statuses=("failed", "broken"),
            message_regex=".*integration.*|.*patrol.*",
        ),
        Category(
            name="iOS Tests",
            matched_statuses=("failed", "broken", "passed"),
            message_regex=".*iOS.*|.*iPhone.*|.*simulator.*",
        ),
        Category(
            name="Android Tests",
            matched_statuses=("failed", "broken", "passed"),
            message_regex=".*Android.*|.*emulator.*|.*device.*",
        ),
    ),
)

FLUTTER_TEST_PROFILE = ReportProfile(
    framework="flutter_test",
    test_type="widget",
    test_framework="Flutter Widget Tests",
    test_runner="flutter test",
    categories=(
        Category(
            name="UI Widget Tests",
            matched_statuses=("failed", "broken"),
            message_regex=".*widget.*|.*component.*|.*ui.*",
        ),
        Category(
            name="Integration Tests",
            matched_statuses=("failed", "broken"),
            message_regex=".*integration.*|.*e2e.*",
        ),
        Category(
            name="Search Functionality",
            matched_statuses=("failed", "broken"),
            message_regex=".*search.*|.*hotel.*",
        ),
        Category(
            name="Navigation Tests",
            matched_statuses=("failed", "broken"),
            message_regex=".*navigation.*|.*route.*|.*tab.*",
        ),
    ),
)


class PatrolLogConfig(BaseModel):
    """Configuration for the Patrol log pipeline."""

    test_name: str = "Patrol Integration Test"
    log_file: Path = Path("patrol.log")
    # Searched for .xcresult bundles when the log file is absent
    build_dir: Path = Path("build")
    output_dir: Path = DEFAULT_OUTPUT_DIR


class FlutterTestConfig(BaseModel):
    """Configuration for the flutter test event pipeline."""

    input_file: Path = Path("test-results.json")
    output_dir: Path = DEFAULT_OUTPUT_DIR
