"""!
@brief Detection of retail Microsoft 365 installations.
@details Probes the uninstall registrations written by consumer Click-to-Run
builds (``O365HomePremRetail - <locale>``) for every locale in
:data:`retail_remediation.constants.RETAIL_LOCALES`.
"""
from __future__ import annotations

from typing import Iterable, List

from . import constants, logging_ext, registry_tools
from .registry_tools import RegistryAccess


def detect_retail_installations(
    registry: RegistryAccess,
    locales: Iterable[str] = constants.RETAIL_LOCALES,
) -> List[str]:
    """!
    @brief Return the locales that have a retail uninstall registration.
    @details The result keeps the order of ``locales``. Absent keys are skipped;
    any other registry fault propagates as
    :class:`~retail_remediation.registry_tools.RegistryAccessError`.
    """

    machine_logger = logging_ext.get_machine_logger()

    installed: List[str] = []
    for locale in locales:
        key_path = constants.retail_uninstall_key(locale)
        if registry.key_exists(constants.HKLM, key_path):
            installed.append(locale)
            machine_logger.info(
                "retail_detected",
                extra=logging_ext.build_event_extra(
                    "retail_detected",
                    locale=locale,
                    handle=f"{registry_tools.hive_name(constants.HKLM)}\\{key_path}",
                ),
            )

    logging_ext.get_human_logger().info(
        "Retail detection found %d locale(s): %s", len(installed), ", ".join(installed) or "none"
    )
    return installed


__all__ = ["detect_retail_installations"]
