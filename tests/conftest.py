"""!
@brief Shared pytest fixtures.
@details Puts ``src/`` on ``sys.path`` and provides :class:`FakeRegistry`, an
in-memory stand-in for :class:`retail_remediation.registry_tools.RegistryAccess`.
"""

from __future__ import annotations

import logging
import pathlib
import sys
from typing import Any, Dict, Iterable, List, Mapping, Set, Tuple

import pytest

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from retail_remediation import constants, logging_ext  # noqa: E402
from retail_remediation.registry_tools import RegistryAccessError  # noqa: E402


class FakeRegistry:
    """!
    @brief Dictionary-backed registry keyed by ``(root, path)``.
    @details Paths compare case-insensitively like the real registry. Paths in
    ``faults`` raise :class:`RegistryAccessError` on any access, and every
    ``get_value`` call is recorded in ``reads``.
    """

    def __init__(self) -> None:
        self._keys: Dict[Tuple[int, str], Dict[str, Any]] = {}
        self.faults: Set[Tuple[int, str]] = set()
        self.reads: List[Tuple[str, str]] = []
        self._names: Dict[Tuple[int, str], str] = {}

    @staticmethod
    def _norm(path: str) -> str:
        return path.strip("\\").lower()

    def add_key(self, path: str, values: Mapping[str, Any] | None = None, *, root: int = constants.HKLM) -> None:
        parts = path.strip("\\").split("\\")
        for depth in range(1, len(parts) + 1):
            partial = (root, self._norm("\\".join(parts[:depth])))
            self._keys.setdefault(partial, {})
            self._names[partial] = parts[depth - 1]
        self._keys[(root, self._norm(path))].update(values or {})

    def fail(self, path: str, *, root: int = constants.HKLM) -> None:
        self.faults.add((root, self._norm(path)))

    def _check(self, root: int, path: str) -> None:
        if (root, self._norm(path)) in self.faults:
            raise RegistryAccessError(f"Access denied: {path}")

    def key_exists(self, root: int, path: str) -> bool:
        self._check(root, path)
        return (root, self._norm(path)) in self._keys

    def get_value(self, root: int, path: str, value_name: str, default: Any | None = None) -> Any | None:
        self._check(root, path)
        self.reads.append((path, value_name))
        return self._keys.get((root, self._norm(path)), {}).get(value_name, default)

    def subkeys(self, root: int, path: str) -> List[str]:
        self._check(root, path)
        prefix = self._norm(path) + "\\"
        names: List[str] = []
        for (key_root, key_path) in self._keys:
            if key_root != root or not key_path.startswith(prefix):
                continue
            remainder = key_path[len(prefix):]
            if remainder and "\\" not in remainder:
                names.append(self._names[(key_root, key_path)])
        return names


def add_retail_locales(registry: FakeRegistry, locales: Iterable[str], *, with_uninstall: bool = True) -> None:
    for locale in locales:
        values: Dict[str, Any] = {}
        if with_uninstall:
            values[constants.UNINSTALL_STRING_VALUE] = (
                '"C:\\Program Files\\Common Files\\Microsoft Shared\\ClickToRun\\OfficeClickToRun.exe" '
                f"scenario=install scenariosubtype=ARP sourcetype=None productstoremove=O365HomePremRetail.16_{locale}_x-none "
                f"culture={locale.lower()} version.16=16.0"
            )
        registry.add_key(constants.retail_uninstall_key(locale), values)


def add_intune_app(registry: FakeRegistry, sid: str, app_id: str, state: Any | None) -> None:
    values = {} if state is None else {constants.ENFORCEMENT_STATE_VALUE: state}
    registry.add_key(f"{constants.INTUNE_WIN32APPS_ROOT}\\{sid}\\{app_id}", values)


@pytest.fixture
def fake_registry() -> FakeRegistry:
    return FakeRegistry()


@pytest.fixture(autouse=True)
def _isolated_logging(tmp_path: pathlib.Path):
    """!
    @brief Route logs to a per-test directory and drop handlers afterwards.
    """

    logging_ext.setup_logging(tmp_path / "logs")
    yield
    for name in (logging_ext.HUMAN_LOGGER_NAME, logging_ext.MACHINE_LOGGER_NAME):
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
        for flt in list(logger.filters):
            logger.removeFilter(flt)
