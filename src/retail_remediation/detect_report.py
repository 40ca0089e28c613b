"""!
@brief Decision flow for the detection-only script.
@details Reports retail Microsoft 365 as a problem only on freshly provisioned
devices, where removing the consumer build is expected. On older devices the
presence is reported as informational (``-2``), and internal errors as ``-3``.
Both negative codes are clamped to ``0`` at exit by default.
"""
from __future__ import annotations

import datetime

from . import constants, detect, logging_ext, os_age
from .registry_tools import RegistryAccess
from .summary import ExecutionSummary


def run_detection_report(
    registry: RegistryAccess,
    hours_threshold: float = constants.DEFAULT_HOURS_THRESHOLD,
    *,
    now: datetime.datetime | None = None,
) -> ExecutionSummary:
    """!
    @brief Detect retail Microsoft 365 and gate the result on OS install age.
    @param registry Registry capability to read from.
    @param hours_threshold Age in hours under which the OS counts as new.
    @param now Reference time for the age check; defaults to the current time.
    """

    human_logger = logging_ext.get_human_logger()
    machine_logger = logging_ext.get_machine_logger()

    try:
        record = os_age.read_install_date(registry, hours_threshold, now=now)
        installed = detect.detect_retail_installations(registry)
    except Exception as exc:
        human_logger.exception("Detection failed")
        machine_logger.error(
            "detection_error",
            extra=logging_ext.build_event_extra(
                "detection_error", error=str(exc), error_type=type(exc).__name__
            ),
        )
        return ExecutionSummary(constants.EXIT_DETECTION_ERROR, f"Detection error: {exc}")

    if not installed:
        return ExecutionSummary(constants.EXIT_OK, "Microsoft 365 retail NOT detected.")

    locales = ", ".join(installed)
    installed_on = record.installation_date.strftime("%Y-%m-%d %H:%M:%S")
    if record.is_within_threshold:
        return ExecutionSummary(
            constants.EXIT_FAIL,
            f"Microsoft 365 retail ({locales}) detected; OS installed {installed_on} UTC, "
            f"within {hours_threshold:g} hours.",
        )
    return ExecutionSummary(
        constants.EXIT_NOT_WITHIN_THRESHOLD,
        f"Microsoft 365 retail ({locales}) detected; OS installed {installed_on} UTC, "
        f"NOT within threshold of {hours_threshold:g} hours.",
    )


__all__ = ["run_detection_report"]
