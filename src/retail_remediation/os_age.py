"""!
@brief Operating system provisioning age check.
@details Windows records the install time as Unix-epoch seconds under
``HKLM\\SOFTWARE\\Microsoft\\Windows NT\\CurrentVersion\\InstallDate``. A
recently imaged device is the signal the detection script gates on.
"""
from __future__ import annotations

import datetime
from dataclasses import dataclass

from . import constants, logging_ext
from .registry_tools import RegistryAccess


class MissingInstallDate(LookupError):
    """!
    @brief Raised when the ``InstallDate`` value is absent or null.
    """


@dataclass(frozen=True)
class InstallDateRecord:
    """!
    @brief Result of the OS age gate.
    """

    is_within_threshold: bool
    installation_date: datetime.datetime


def read_install_date(
    registry: RegistryAccess,
    hours_threshold: float = constants.DEFAULT_HOURS_THRESHOLD,
    *,
    now: datetime.datetime | None = None,
) -> InstallDateRecord:
    """!
    @brief Read the OS install time and compare it against ``hours_threshold``.
    @details The comparison is inclusive: an install exactly ``hours_threshold``
    hours old is within the threshold.
    @param registry Registry capability to read from.
    @param hours_threshold Maximum age in hours that still counts as recent.
    @param now Reference time; defaults to the current UTC time.
    @throws MissingInstallDate When the value is missing.
    """

    raw = registry.get_value(
        constants.HKLM, constants.OS_CURRENT_VERSION_KEY, constants.INSTALL_DATE_VALUE
    )
    if raw is None:
        raise MissingInstallDate("Unable to retrieve the OS installation date.")

    installed = datetime.datetime.fromtimestamp(int(raw), tz=datetime.timezone.utc)
    reference = now if now is not None else datetime.datetime.now(datetime.timezone.utc)
    elapsed_hours = (reference - installed).total_seconds() / 3600.0
    within = elapsed_hours <= hours_threshold

    logging_ext.get_machine_logger().info(
        "os_install_date",
        extra=logging_ext.build_event_extra(
            "os_install_date",
            installation_date=installed.isoformat(),
            elapsed_hours=round(elapsed_hours, 3),
            hours_threshold=hours_threshold,
            within_threshold=within,
        ),
    )
    return InstallDateRecord(is_within_threshold=within, installation_date=installed)


__all__ = ["InstallDateRecord", "MissingInstallDate", "read_install_date"]
