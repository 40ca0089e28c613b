"""!
@brief Silent removal of retail Microsoft 365 builds.
@details Each retail registration carries an ``UninstallString`` that launches
``OfficeClickToRun.exe`` for the matching locale. The string is run through
``cmd.exe /c`` with ``DisplayLevel=False`` appended so the Click-to-Run UI
stays hidden. The child's exit code is not inspected and removal is not
verified afterwards, but a command that cannot be started at all aborts the
run.
"""
from __future__ import annotations

import time
from typing import Iterable, List

from . import constants, exec_utils, logging_ext
from .registry_tools import RegistryAccess

COMMAND_SHELL = "cmd.exe"


class UninstallError(RuntimeError):
    """!
    @brief Raised when a locale's uninstaller cannot be read or started.
    @details Carries the offending ``locale`` and the underlying ``cause``.
    """

    def __init__(self, locale: str, cause: BaseException) -> None:
        super().__init__(f"Failed to uninstall Microsoft 365 ({locale}): {cause}")
        self.locale = locale
        self.cause = cause


def build_uninstall_command(uninstall_string: str) -> str:
    """!
    @brief Compose the ``cmd.exe /c`` command line for ``uninstall_string``.
    """

    return f"{COMMAND_SHELL} /c {uninstall_string} {constants.SILENT_UNINSTALL_ARGUMENT}"


def uninstall_retail_installations(
    registry: RegistryAccess,
    locales: Iterable[str],
    *,
    dry_run: bool = False,
    delay: float = constants.POST_UNINSTALL_DELAY,
) -> List[str]:
    """!
    @brief Run the uninstaller for every locale in ``locales``, in order.
    @details A locale without an ``UninstallString`` is skipped. A registry
    fault, or an uninstaller that fails to start, aborts the loop with
    :class:`UninstallError`; later locales are not attempted. After each uninstaller returns the loop pauses for ``delay``
    seconds.
    @returns Locales for which an uninstaller was launched.
    """

    human_logger = logging_ext.get_human_logger()
    launched: List[str] = []

    for locale in locales:
        key_path = constants.retail_uninstall_key(locale)
        try:
            uninstall_string = registry.get_value(
                constants.HKLM, key_path, constants.UNINSTALL_STRING_VALUE
            )
        except Exception as exc:
            human_logger.error("Unable to read the uninstall registration for %s: %s", locale, exc)
            raise UninstallError(locale, exc) from exc

        if not uninstall_string:
            continue

        result = exec_utils.run_command(
            build_uninstall_command(str(uninstall_string)),
            event="retail_uninstall",
            dry_run=dry_run,
            hidden=True,
            human_message=f"Uninstalling Microsoft 365 ({locale})",
            extra={"locale": locale},
        )
        if not result.skipped and result.error:
            raise UninstallError(locale, OSError(result.error))
        launched.append(locale)
        if not dry_run:
            time.sleep(delay)

    return launched


__all__ = ["COMMAND_SHELL", "UninstallError", "build_uninstall_command", "uninstall_retail_installations"]
