"""!
@brief Registry access helpers.
@details Thin ``winreg`` wrappers used by detection, the Intune busy check and
the OS age check. A missing key or value is an ordinary answer ("not
present"); any other registry fault is raised as :class:`RegistryAccessError`
so callers can tell an absent product from an unreachable registry. The
:class:`RegistryAccess` protocol is what the higher level modules consume, which
lets tests substitute an in-memory registry.
"""
from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator, List, Protocol

try:  # pragma: no cover - exercised through fakes on non-Windows platforms.
    import winreg
except ImportError:  # pragma: no cover - handled gracefully during tests.
    winreg = None  # type: ignore[assignment]


class RegistryAccessError(OSError):
    """!
    @brief Raised when the registry cannot be read for reasons other than absence.
    """


class RegistryAccess(Protocol):
    """!
    @brief Read-only registry capability consumed by the remediation checks.
    """

    def key_exists(self, root: int, path: str) -> bool:
        ...

    def get_value(self, root: int, path: str, value_name: str, default: Any | None = None) -> Any | None:
        ...

    def subkeys(self, root: int, path: str) -> List[str]:
        ...


def _ensure_winreg() -> None:
    """!
    @brief Raise an informative error when ``winreg`` is unavailable.
    """

    if winreg is None:  # pragma: no cover - simplifies non-Windows test runs.
        raise RegistryAccessError("Windows registry APIs are unavailable on this platform")


@contextmanager
def open_key(root: int, path: str, access: int | None = None) -> Iterator[Any]:
    """!
    @brief Context manager that mirrors ``winreg.OpenKey`` while ensuring
    handles are closed correctly.
    @details Reads go to the 64-bit view so a 32-bit interpreter sees the same
    uninstall registrations as a native PowerShell host.
    """

    _ensure_winreg()
    access_mask = access if access is not None else winreg.KEY_READ | winreg.KEY_WOW64_64KEY  # type: ignore[union-attr]
    handle = winreg.OpenKey(root, path, 0, access_mask)  # type: ignore[union-attr]
    try:
        yield handle
    finally:
        winreg.CloseKey(handle)  # type: ignore[union-attr]


def list_subkeys(root: int, path: str) -> List[str]:
    """!
    @brief Return subkey names for ``root``/``path``; empty when the key is absent.
    """

    try:
        with open_key(root, path) as handle:
            subkey_count, _, _ = winreg.QueryInfoKey(handle)  # type: ignore[union-attr]
            return [winreg.EnumKey(handle, index) for index in range(subkey_count)]  # type: ignore[union-attr]
    except FileNotFoundError:
        return []
    except RegistryAccessError:
        raise
    except OSError as exc:
        raise RegistryAccessError(f"Unable to enumerate {hive_name(root)}\\{path}: {exc}") from exc


def get_value(root: int, path: str, value_name: str, default: Any | None = None) -> Any | None:
    """!
    @brief Read ``value_name`` beneath ``root``/``path``.
    @returns The stored value, or ``default`` when the key or value is missing.
    """

    try:
        with open_key(root, path) as handle:
            value, _ = winreg.QueryValueEx(handle, value_name)  # type: ignore[union-attr]
            return value
    except FileNotFoundError:
        return default
    except RegistryAccessError:
        raise
    except OSError as exc:
        raise RegistryAccessError(
            f"Unable to read {hive_name(root)}\\{path}\\{value_name}: {exc}"
        ) from exc


def key_exists(root: int, path: str) -> bool:
    """!
    @brief Determine whether the given key exists.
    """

    try:
        with open_key(root, path):
            return True
    except FileNotFoundError:
        return False
    except RegistryAccessError:
        raise
    except OSError as exc:
        raise RegistryAccessError(f"Unable to open {hive_name(root)}\\{path}: {exc}") from exc


def hive_name(root: int) -> str:
    """!
    @brief Provide a friendly identifier for a registry hive.
    """

    mapping = {getattr(winreg, "HKEY_LOCAL_MACHINE", 0x80000002): "HKLM"}
    return mapping.get(root, hex(root))


class WinRegistry:
    """!
    @brief :class:`RegistryAccess` implementation backed by ``winreg``.
    """

    def key_exists(self, root: int, path: str) -> bool:
        return key_exists(root, path)

    def get_value(self, root: int, path: str, value_name: str, default: Any | None = None) -> Any | None:
        return get_value(root, path, value_name, default)

    def subkeys(self, root: int, path: str) -> List[str]:
        return list_subkeys(root, path)


__all__ = [
    "RegistryAccess",
    "RegistryAccessError",
    "WinRegistry",
    "get_value",
    "hive_name",
    "key_exists",
    "list_subkeys",
    "open_key",
]
