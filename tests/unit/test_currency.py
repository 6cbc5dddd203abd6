from __future__ import annotations

from pathlib import Path

import pytest
from pint import UnitRegistry

from number_with_units.currency import (
    CurrencyCatalog,
    CurrencyCatalogError,
    CurrencyUnit,
    register_currency_units,
)


def test_package_catalog_lists_currencies() -> None:
    catalog = CurrencyCatalog.from_package_yaml()
    assert [c.name for c in catalog.currencies] == ["dollar", "rupee", "cent", "paise"]
    assert set(catalog.front_units()) == {"$", "Rs", "₹"}
    assert catalog.front_units()[0] == "Rs"


def test_catalog_alias_lookup() -> None:
    catalog = CurrencyCatalog.from_package_yaml()
    assert catalog.canonical_name("USD") == "dollar"
    assert catalog.canonical_name("₹") == "rupee"
    assert catalog.canonical_name("m") is None
    assert catalog.canonical_units("$ m^-1  Rs^2") == "dollar m^-1 rupee^2"


def test_pint_definitions() -> None:
    assert CurrencyUnit(name="dollar").pint_definition() == "dollar = [currency_dollar]"
    assert CurrencyUnit(name="cent", base_unit="0.01 * dollar").pint_definition() == "cent = 0.01 * dollar"


def test_catalog_rejects_malformed_yaml() -> None:
    with pytest.raises(CurrencyCatalogError, match="'currencies' mapping"):
        CurrencyCatalog.from_yaml_text("- dollar\n")
    with pytest.raises(CurrencyCatalogError, match="must be lists"):
        CurrencyCatalog.from_yaml_text("currencies:\n  dollar:\n    aliases: $\n")


def test_catalog_from_file(tmp_path: Path) -> None:
    path = tmp_path / "currencies.yaml"
    path.write_text(
        "currencies:\n  euro:\n    aliases: ['€', euros]\n    front_units: ['€']\n    base_unit: null\n",
        encoding="utf-8",
    )
    catalog = CurrencyCatalog.load(path)
    assert catalog.canonical_name("euros") == "euro"
    assert catalog.front_units() == ["€"]


def test_register_reports_instead_of_raising() -> None:
    registry = UnitRegistry()
    catalog = CurrencyCatalog.from_package_yaml()
    first = register_currency_units(registry, catalog)
    assert {"dollar", "rupee"} <= set(first.registered)
    assert registry.Quantity("3 dollar").dimensionality != registry.Quantity("3 rupee").dimensionality

    again = register_currency_units(registry, catalog)
    assert not again.ok
    assert "dollar: already defined" in again.errors
    assert again.registered == []
