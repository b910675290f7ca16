"""Test result sources."""

from allure_convert.sources.base import InputMissingError, ResultSource
from allure_convert.sources.flutter_test import FlutterTestSource
from allure_convert.sources.patrol_log import PatrolLogSource

__all__ = ["FlutterTestSource", "InputMissingError", "PatrolLogSource", "ResultSource"]
