"""End-to-end tests running both pipelines against a temp working directory."""

import json
from pathlib import Path
from typing import Any

import pytest

from allure_convert.cli import flutter_test_main, patrol_main
from allure_convert.config import DEFAULT_OUTPUT_DIR


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run the pipelines from an empty temp directory."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


def read_results(workdir: Path) -> list[dict[str, Any]]:
    """Load every result file of the output directory."""
    return [
        json.loads(path.read_text(encoding="utf-8"))
        for path in sorted((workdir / DEFAULT_OUTPUT_DIR).glob("*-result.json"))
    ]


def labels(result: dict[str, Any]) -> dict[str, str]:
    """Index result labels by name."""
    return {label["name"]: label["value"] for label in result["labels"]}


def exit_code_of(main: Any, argv: list[str]) -> int | str | None:
    """Run an entry point and return its exit code."""
    with pytest.raises(SystemExit) as exc_info:
        main(argv)
    return exc_info.value.code


class TestPatrolPipeline:
    """Patrol log to Allure results."""

    def test_passed_login_log(self, workdir: Path) -> None:
        """Reports a single passed test named from the log."""
        (workdir / "run.log").write_text(
            "🚀 Starting: Login test\n✅ completed successfully\n", encoding="utf-8"
        )

        assert exit_code_of(patrol_main, ["X", "run.log"]) == 0

        results = read_results(workdir)
        assert len(results) == 1
        result = results[0]
        assert result["name"] == "Login test"
        assert result["status"] == "passed"
        assert result["historyId"] == "login_test"
        assert result["start"] <= result["stop"]
        assert labels(result)["framework"] == "patrol"
        assert labels(result)["platform"] == "Unknown"
        assert "statusDetails" not in result
        assert not (workdir / "run.log").exists()

    def test_failed_search_log(self, workdir: Path) -> None:
        """Reports the failing line as the failure message."""
        (workdir / "patrol.log").write_text(
            "Running Search flow\n❌ ERROR: network timeout\n", encoding="utf-8"
        )

        assert exit_code_of(patrol_main, []) == 0

        results = read_results(workdir)
        assert len(results) == 1
        assert results[0]["status"] == "failed"
        assert results[0]["name"] == "Patrol Integration Test"
        assert results[0]["statusDetails"] == {
            "message": "❌ ERROR: network timeout",
            "trace": "❌ ERROR: network timeout",
        }

    def test_zero_failures_summary_does_not_fail(self, workdir: Path) -> None:
        """Keeps a passed test passed on a zero failure count line."""
        (workdir / "patrol.log").write_text(
            "🚀 Starting: Checkout\n✅ PASS\n❌ Failed: 0\n", encoding="utf-8"
        )

        exit_code_of(patrol_main, [])

        assert [r["status"] for r in read_results(workdir)] == ["passed"]

    def test_missing_log_reports_fallback(self, workdir: Path) -> None:
        """Writes one passed result when there is no log or .xcresult."""
        assert exit_code_of(patrol_main, ["Nightly"]) == 0

        results = read_results(workdir)
        assert len(results) == 1
        assert results[0]["name"] == "Nightly"
        assert results[0]["status"] == "passed"

    def test_writes_metadata_files(self, workdir: Path) -> None:
        """Writes environment.properties and categories.json."""
        exit_code_of(patrol_main, [])

        output_dir = workdir / DEFAULT_OUTPUT_DIR
        environment = (output_dir / "environment.properties").read_text("utf-8")
        categories = json.loads((output_dir / "categories.json").read_text("utf-8"))
        assert "Test.Framework=Patrol Integration Tests" in environment
        assert "Test.Type=integration" in environment
        assert [c["name"] for c in categories] == [
            "Integration Test Failures",
            "iOS Tests",
            "Android Tests",
        ]


class TestFlutterTestPipeline:
    """flutter test --machine events to Allure results."""

    def test_checkout_events(
        self, workdir: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Reports the finished test with suite and feature labels."""
        (workdir / "test-results.json").write_text(
            "\n".join(
                [
                    '{"type":"group","group":{"id":"g1","name":"Checkout"}}',
                    '{"type":"testStart","test":{"id":"t1",'
                    '"name":"Checkout should complete","groupIDs":["g1"]}}',
                    '{"type":"testDone","testID":"t1","result":"success"}',
                ]
            ),
            encoding="utf-8",
        )

        assert exit_code_of(flutter_test_main, []) == 0

        results = read_results(workdir)
        assert len(results) == 1
        result = results[0]
        assert result["status"] == "passed"
        assert result["historyId"] == "checkout_should_complete"
        assert labels(result) == {
            "framework": "flutter_test",
            "language": "dart",
            "suite": "Checkout",
            "feature": "General",
            "severity": "normal",
            "testType": "widget",
        }
        assert not (workdir / "test-results.json").exists()
        assert json.loads(capsys.readouterr().out)["written"] == 1

    def test_failed_and_unfinished_events(self, workdir: Path) -> None:
        """Reports failures with details and drops unfinished tests."""
        (workdir / "test-results.json").write_text(
            "\n".join(
                [
                    '{"type":"start","time":0}',
                    '{"type":"testStart","test":{"id":1,"name":"search widget"},'
                    '"time":5}',
                    '{"type":"testDone","testID":1,"result":"failure",'
                    '"error":"Expected: 3","stackTrace":"at search_test.dart"}',
                    '{"type":"testStart","test":{"id":2,"name":"hangs"}}',
                    '{"type":"testDone","testID":99,"result":"success"}',
                    "{broken",
                ]
            ),
            encoding="utf-8",
        )

        assert exit_code_of(flutter_test_main, []) == 0

        results = read_results(workdir)
        assert len(results) == 1
        assert results[0]["name"] == "search widget"
        assert results[0]["status"] == "failed"
        assert results[0]["statusDetails"] == {
            "message": "Expected: 3",
            "trace": "at search_test.dart",
        }
        assert labels(results[0])["feature"] == "Hotel Search"

    def test_missing_input_fails_without_output(self, workdir: Path) -> None:
        """Exits non-zero and writes nothing when the events file is missing."""
        assert exit_code_of(flutter_test_main, []) == 1

        assert not (workdir / DEFAULT_OUTPUT_DIR).exists()


def test_history_id_matches_across_pipelines(workdir: Path) -> None:
    """Derives the same history id for the same name in both pipelines."""
    (workdir / "patrol.log").write_text("🚀 Starting: Hotel Search", encoding="utf-8")
    exit_code_of(patrol_main, ["Hotel Search"])
    patrol_ids = {r["historyId"] for r in read_results(workdir)}

    for path in (workdir / DEFAULT_OUTPUT_DIR).glob("*-result.json"):
        path.unlink()

    (workdir / "test-results.json").write_text(
        '{"type":"testStart","test":{"id":1,"name":"Hotel Search"}}\n'
        '{"type":"testDone","testID":1,"result":"success"}\n',
        encoding="utf-8",
    )
    exit_code_of(flutter_test_main, [])
    flutter_ids = {r["historyId"] for r in read_results(workdir)}

    assert patrol_ids == flutter_ids == {"hotel_search"}
