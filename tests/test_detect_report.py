"""!
@brief End-to-end tests for the detection-only decision flow.
"""

from __future__ import annotations

import datetime

import pytest

from conftest import FakeRegistry, add_retail_locales
from retail_remediation import constants, detect_report, summary

NOW = datetime.datetime(2026, 10, 18, 12, 0, tzinfo=datetime.timezone.utc)


def _installed_hours_ago(registry: FakeRegistry, hours: float) -> None:
    stamp = int((NOW - datetime.timedelta(hours=hours)).timestamp())
    registry.add_key(constants.OS_CURRENT_VERSION_KEY, {constants.INSTALL_DATE_VALUE: stamp})


def test_not_installed_exits_ok(fake_registry: FakeRegistry) -> None:
    _installed_hours_ago(fake_registry, 2)

    result = detect_report.run_detection_report(fake_registry, now=NOW)

    assert result.status_code == 0
    assert "NOT detected" in result.message


def test_recent_os_with_retail_flags_failure(fake_registry: FakeRegistry) -> None:
    _installed_hours_ago(fake_registry, 2)
    add_retail_locales(fake_registry, ["en-US"])

    result = detect_report.run_detection_report(fake_registry, 24, now=NOW)

    assert result.status_code == 1
    assert summary.normalize_exit_code(result.status_code) == 1
    assert "en-US" in result.message


def test_old_os_with_retail_is_informational(fake_registry: FakeRegistry) -> None:
    _installed_hours_ago(fake_registry, 48)
    add_retail_locales(fake_registry, ["en-US", "nl-NL"])

    result = detect_report.run_detection_report(fake_registry, 24, now=NOW)

    assert result.status_code == -2
    assert summary.normalize_exit_code(result.status_code) == 0
    assert "NOT within threshold" in result.message
    assert summary.format_summary(result).startswith("WARNING ")


def test_threshold_boundary_counts_as_within(fake_registry: FakeRegistry) -> None:
    _installed_hours_ago(fake_registry, 24)
    add_retail_locales(fake_registry, ["en-US"])

    assert detect_report.run_detection_report(fake_registry, 24, now=NOW).status_code == 1


def test_custom_threshold(fake_registry: FakeRegistry) -> None:
    _installed_hours_ago(fake_registry, 48)
    add_retail_locales(fake_registry, ["ko-KR"])

    assert detect_report.run_detection_report(fake_registry, 72, now=NOW).status_code == 1


def test_missing_install_date_is_an_error(fake_registry: FakeRegistry) -> None:
    add_retail_locales(fake_registry, ["en-US"])

    result = detect_report.run_detection_report(fake_registry, now=NOW)

    assert result.status_code == -3
    assert summary.normalize_exit_code(result.status_code) == 0
    assert "installation date" in result.message


def test_registry_fault_during_detection_is_an_error(fake_registry: FakeRegistry) -> None:
    _installed_hours_ago(fake_registry, 2)
    fake_registry.fail(constants.retail_uninstall_key("en-US"))

    result = detect_report.run_detection_report(fake_registry, now=NOW)

    assert result.status_code == -3
    assert "Access denied" in result.message
