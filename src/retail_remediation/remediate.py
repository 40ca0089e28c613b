"""!
@brief Decision flow for the uninstall remediation.
@details ``admin check -> Intune busy check -> detection -> uninstall``. The
flow returns an :class:`~retail_remediation.summary.ExecutionSummary` instead
of exiting so it can be exercised against an in-memory registry.
"""
from __future__ import annotations

from typing import Callable

from . import constants, detect, elevation, intune, logging_ext, retail_uninstall
from .registry_tools import RegistryAccess
from .summary import ExecutionSummary


def run_remediation(
    registry: RegistryAccess,
    *,
    admin_check: Callable[[], None] = elevation.require_admin,
    dry_run: bool = False,
    delay: float = constants.POST_UNINSTALL_DELAY,
) -> ExecutionSummary:
    """!
    @brief Remove retail Microsoft 365 builds unless Intune is mid-install.
    @returns ``0`` when nothing was installed or the uninstallers ran, ``1``
    on any failure or when the agent is busy.
    """

    human_logger = logging_ext.get_human_logger()
    machine_logger = logging_ext.get_machine_logger()
    machine_logger.info(
        "remediation_start",
        extra=logging_ext.build_event_extra("remediation_start", dry_run=dry_run),
    )

    try:
        admin_check()

        if intune.is_enforcement_in_progress(registry):
            return ExecutionSummary(
                constants.EXIT_FAIL,
                "Intune is currently installing an application; retail Microsoft 365 removal deferred.",
            )

        installed = detect.detect_retail_installations(registry)
        if not installed:
            return ExecutionSummary(constants.EXIT_OK, "Microsoft 365 retail NOT detected.")

        retail_uninstall.uninstall_retail_installations(
            registry, installed, dry_run=dry_run, delay=delay
        )
        return ExecutionSummary(
            constants.EXIT_OK,
            f"Microsoft 365 retail ({', '.join(installed)}) uninstalled.",
        )
    except Exception as exc:
        human_logger.exception("Remediation failed")
        machine_logger.error(
            "remediation_error",
            extra=logging_ext.build_event_extra(
                "remediation_error", error=str(exc), error_type=type(exc).__name__
            ),
        )
        return ExecutionSummary(constants.EXIT_FAIL, str(exc))


__all__ = ["run_remediation"]
