"""!
@brief Static data shared by both remediation entry points.
@details Centralises the registry root, the retail locale table, Intune
enforcement codes, and exit codes so the uninstall and detection scripts work
from a single source of truth instead of duplicating the locale list.
"""
from __future__ import annotations

from typing import FrozenSet, Tuple

try:  # pragma: no cover - Windows registry handles are optional on test hosts.
    import winreg
except ImportError:  # pragma: no cover - test scaffolding supplies substitutes.
    winreg = None  # type: ignore[assignment]


if winreg is not None:  # pragma: no branch - deterministic assignments.
    HKLM = winreg.HKEY_LOCAL_MACHINE
else:  # pragma: no cover - exercised implicitly in non-Windows CI.
    HKLM = 0x80000002


UNINSTALL_ROOT = r"SOFTWARE\Microsoft\Windows\CurrentVersion\Uninstall"
"""!
@brief Base key holding per-product uninstall registrations.
"""

RETAIL_PRODUCT_PREFIX = "O365HomePremRetail"
"""!
@brief Product identifier used by consumer Microsoft 365 Click-to-Run builds.
"""

RETAIL_LOCALES: Tuple[str, ...] = (
    "en-US",
    "es-ES",
    "fr-FR",
    "de-DE",
    "it-IT",
    "ja-JP",
    "ko-KR",
    "pt-BR",
    "pt-PT",
    "ru-RU",
    "zh-CN",
    "zh-TW",
    "nl-NL",
    "pl-PL",
    "sv-SE",
    "da-DK",
    "fi-FI",
    "nb-NO",
    "tr-TR",
    "cs-CZ",
    "hu-HU",
    "el-GR",
    "ar-SA",
    "he-IL",
    "th-TH",
)
"""!
@brief Locales for which a retail uninstall registration is probed, in scan order.
"""

INTUNE_WIN32APPS_ROOT = r"SOFTWARE\Microsoft\IntuneManagementExtension\Win32Apps"
"""!
@brief Intune Management Extension tree keyed by user SID and then app GUID.
"""

INTUNE_RESERVED_SUBKEYS: FrozenSet[str] = frozenset({"GRS"})
"""!
@brief Subkeys under a SID that are bookkeeping rather than applications.
"""

ENFORCEMENT_STATE_VALUE = "EnforcementState"

ENFORCEMENT_INSTALL_RECEIVED = 1003
ENFORCEMENT_IN_PROGRESS = 2000

BUSY_ENFORCEMENT_STATES: FrozenSet[int] = frozenset(
    {ENFORCEMENT_INSTALL_RECEIVED, ENFORCEMENT_IN_PROGRESS}
)
"""!
@brief Enforcement codes meaning the agent is mid-installation.
"""

OS_CURRENT_VERSION_KEY = r"SOFTWARE\Microsoft\Windows NT\CurrentVersion"
INSTALL_DATE_VALUE = "InstallDate"

DEFAULT_HOURS_THRESHOLD = 24

UNINSTALL_STRING_VALUE = "UninstallString"

SILENT_UNINSTALL_ARGUMENT = "DisplayLevel=False"
"""!
@brief Argument appended to ``UninstallString`` to suppress the Click-to-Run UI.
"""

POST_UNINSTALL_DELAY = 5.0
"""!
@brief Pause in seconds after each uninstaller returns.
"""

EXIT_OK = 0
EXIT_FAIL = 1
EXIT_NOT_WITHIN_THRESHOLD = -2
EXIT_DETECTION_ERROR = -3


def retail_uninstall_key(locale: str) -> str:
    """!
    @brief Build the uninstall registration path for a retail ``locale``.
    """

    return f"{UNINSTALL_ROOT}\\{RETAIL_PRODUCT_PREFIX} - {locale}"


__all__ = [
    "BUSY_ENFORCEMENT_STATES",
    "DEFAULT_HOURS_THRESHOLD",
    "ENFORCEMENT_INSTALL_RECEIVED",
    "ENFORCEMENT_IN_PROGRESS",
    "ENFORCEMENT_STATE_VALUE",
    "EXIT_DETECTION_ERROR",
    "EXIT_FAIL",
    "EXIT_NOT_WITHIN_THRESHOLD",
    "EXIT_OK",
    "HKLM",
    "INSTALL_DATE_VALUE",
    "INTUNE_RESERVED_SUBKEYS",
    "INTUNE_WIN32APPS_ROOT",
    "OS_CURRENT_VERSION_KEY",
    "POST_UNINSTALL_DELAY",
    "RETAIL_LOCALES",
    "RETAIL_PRODUCT_PREFIX",
    "SILENT_UNINSTALL_ARGUMENT",
    "UNINSTALL_ROOT",
    "UNINSTALL_STRING_VALUE",
    "retail_uninstall_key",
]
