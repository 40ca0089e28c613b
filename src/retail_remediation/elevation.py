"""!
@brief Administrative privilege checks.
@details The uninstall flow must run elevated before it reads the registry
with intent to act or spawns an uninstaller. There is no relaunch path: the
device-management agent already runs remediations as SYSTEM, so a non-elevated
process is a configuration error and is reported as such.
"""
from __future__ import annotations

import ctypes
import os

from . import logging_ext


class InsufficientPrivileges(PermissionError):
    """!
    @brief Raised when the current process does not hold the administrator role.
    """


def is_admin() -> bool:
    """!
    @brief Determine whether the current process token has administrative rights.
    """

    if os.name != "nt":
        return False
    try:
        shell32 = ctypes.windll.shell32  # type: ignore[attr-defined]
        return bool(shell32.IsUserAnAdmin())
    except Exception:
        return False


def require_admin() -> None:
    """!
    @brief Raise :class:`InsufficientPrivileges` unless the process is elevated.
    """

    if is_admin():
        return
    logging_ext.get_machine_logger().error(
        "admin_check_failed",
        extra=logging_ext.build_event_extra("admin_check_failed"),
    )
    raise InsufficientPrivileges("You must run this script with administrative privileges.")


__all__ = ["InsufficientPrivileges", "is_admin", "require_admin"]
