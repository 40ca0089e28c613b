"""!
@brief Intune Management Extension activity probe.
@details The agent records one ``EnforcementState`` per user SID and Win32 app
GUID. Uninstalling Office while the agent is installing something else races
its own Click-to-Run work, so the uninstall flow aborts when any app reports an
in-flight state and leaves the retry to the next scheduled run.
"""
from __future__ import annotations

from . import constants, logging_ext
from .registry_tools import RegistryAccess


def _as_int(value: object) -> int | None:
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None


def is_enforcement_in_progress(registry: RegistryAccess) -> bool:
    """!
    @brief Report whether any Win32 app is currently being enforced.
    @details Scans ``Win32Apps\\<SID>\\<GUID>`` and stops at the first
    ``EnforcementState`` found in :data:`constants.BUSY_ENFORCEMENT_STATES`. Missing
    keys and missing or malformed values count as idle.
    @param registry Registry capability to read from.
    @returns ``True`` when the agent is busy.
    """

    human_logger = logging_ext.get_human_logger()
    machine_logger = logging_ext.get_machine_logger()
    root = constants.HKLM

    for sid in registry.subkeys(root, constants.INTUNE_WIN32APPS_ROOT):
        sid_path = f"{constants.INTUNE_WIN32APPS_ROOT}\\{sid}"
        for app_id in registry.subkeys(root, sid_path):
            if app_id in constants.INTUNE_RESERVED_SUBKEYS:
                continue
            state = _as_int(
                registry.get_value(root, f"{sid_path}\\{app_id}", constants.ENFORCEMENT_STATE_VALUE)
            )
            if state in constants.BUSY_ENFORCEMENT_STATES:
                human_logger.info("Intune is enforcing app %s for %s (state %s)", app_id, sid, state)
                machine_logger.info(
                    "intune_busy",
                    extra=logging_ext.build_event_extra(
                        "intune_busy", sid=sid, app_id=app_id, enforcement_state=state
                    ),
                )
                return True

    machine_logger.info("intune_idle", extra=logging_ext.build_event_extra("intune_idle"))
    return False


__all__ = ["is_enforcement_in_progress"]
