"""!
@brief Retail detection tests against the in-memory registry.
"""

from __future__ import annotations

import itertools

import pytest

from conftest import FakeRegistry, add_retail_locales
from retail_remediation import constants, detect
from retail_remediation.registry_tools import RegistryAccessError


def test_empty_registry_detects_nothing(fake_registry: FakeRegistry) -> None:
    assert detect.detect_retail_installations(fake_registry) == []


@pytest.mark.parametrize(
    "present",
    [
        ["en-US"],
        ["th-TH"],
        ["fr-FR", "en-US"],
        ["zh-TW", "de-DE", "he-IL", "pt-BR"],
        list(constants.RETAIL_LOCALES),
    ],
)
def test_detected_subset_follows_table_order(fake_registry: FakeRegistry, present: list) -> None:
    add_retail_locales(fake_registry, present)

    result = detect.detect_retail_installations(fake_registry)

    assert result == [locale for locale in constants.RETAIL_LOCALES if locale in present]


def test_every_stride_subset_is_detected_exactly() -> None:
    for start, step in itertools.product(range(3), range(1, 5)):
        registry = FakeRegistry()
        present = list(constants.RETAIL_LOCALES[start::step])
        add_retail_locales(registry, present)
        assert detect.detect_retail_installations(registry) == present


def test_other_products_are_ignored(fake_registry: FakeRegistry) -> None:
    fake_registry.add_key(f"{constants.UNINSTALL_ROOT}\\O365ProPlusRetail - en-us")
    fake_registry.add_key(f"{constants.UNINSTALL_ROOT}\\O365HomePremRetail - xx-XX")

    assert detect.detect_retail_installations(fake_registry) == []


def test_detection_is_idempotent(fake_registry: FakeRegistry) -> None:
    add_retail_locales(fake_registry, ["ja-JP"])

    first = detect.detect_retail_installations(fake_registry)
    second = detect.detect_retail_installations(fake_registry)

    assert first == second == ["ja-JP"]


def test_registry_fault_propagates(fake_registry: FakeRegistry) -> None:
    add_retail_locales(fake_registry, ["en-US"])
    fake_registry.fail(constants.retail_uninstall_key("es-ES"))

    with pytest.raises(RegistryAccessError):
        detect.detect_retail_installations(fake_registry)
