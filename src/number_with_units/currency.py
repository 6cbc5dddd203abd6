from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from importlib.resources import files
from pathlib import Path
from typing import Any

import yaml
from pint import UnitRegistry


class CurrencyCatalogError(ValueError):
    pass


@dataclass(frozen=True)
class CurrencyUnit:
    name: str
    aliases: tuple[str, ...] = ()
    front_units: tuple[str, ...] = ()
    base_unit: str | None = None

    def pint_definition(self) -> str:
        if self.base_unit:
            return f"{self.name} = {self.base_unit}"
        # Currencies without a base unit get their own dimension.
        return f"{self.name} = [currency_{self.name}]"


@dataclass
class CurrencyRegistration:
    registered: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


class CurrencyCatalog:
    def __init__(self, currencies: list[CurrencyUnit]):
        self._currencies = list(currencies)
        self._names: dict[str, str] = {}
        for currency in self._currencies:
            for symbol in (currency.name, *currency.aliases, *currency.front_units):
                self._names.setdefault(symbol, currency.name)

    @classmethod
    def from_mapping(cls, raw: Any) -> "CurrencyCatalog":
        currencies = (raw or {}).get("currencies") if isinstance(raw, dict) else None
        if not isinstance(currencies, dict):
            raise CurrencyCatalogError("Currency table must define a 'currencies' mapping")
        items: list[CurrencyUnit] = []
        for name, payload in currencies.items():
            if not isinstance(payload, dict):
                raise CurrencyCatalogError(f"Currency '{name}' must be a mapping")
            aliases = payload.get("aliases") or []
            front_units = payload.get("front_units") or []
            if not isinstance(aliases, list) or not isinstance(front_units, list):
                raise CurrencyCatalogError(f"Currency '{name}' aliases and front_units must be lists")
            base_unit = payload.get("base_unit")
            if base_unit is not None and not isinstance(base_unit, str):
                raise CurrencyCatalogError(f"Currency '{name}' base_unit must be a string")
            items.append(
                CurrencyUnit(
                    name=str(name),
                    aliases=tuple(str(a) for a in aliases),
                    front_units=tuple(str(f).strip() for f in front_units),
                    base_unit=base_unit,
                )
            )
        return cls(items)

    @classmethod
    def from_yaml_text(cls, text: str) -> "CurrencyCatalog":
        return cls.from_mapping(yaml.safe_load(text))

    @classmethod
    def from_yaml_file(cls, path: Path) -> "CurrencyCatalog":
        return cls.from_yaml_text(Path(path).read_text(encoding="utf-8"))

    @classmethod
    def from_package_yaml(cls) -> "CurrencyCatalog":
        return _package_catalog()

    @classmethod
    def load(cls, path: Path | None = None) -> "CurrencyCatalog":
        if path is None:
            return cls.from_package_yaml()
        return cls.from_yaml_file(path)

    @property
    def currencies(self) -> list[CurrencyUnit]:
        return list(self._currencies)

    def front_units(self) -> list[str]:
        symbols = [f for c in self._currencies for f in c.front_units]
        return sorted(symbols, key=len, reverse=True)

    def canonical_name(self, symbol: str) -> str | None:
        return self._names.get(symbol)

    def canonical_units(self, units: str) -> str:
        """Replace currency aliases in a units string with currency names."""
        out: list[str] = []
        for token in units.split(" "):
            if not token:
                continue
            base, sep, exponent = token.partition("^")
            out.append(self._names.get(base, base) + sep + exponent)
        return " ".join(out)


@lru_cache(maxsize=1)
def _package_catalog() -> CurrencyCatalog:
    data = files("number_with_units").joinpath("currency_units.yaml").read_text(encoding="utf-8")
    return CurrencyCatalog.from_yaml_text(data)


def register_currency_units(registry: UnitRegistry, catalog: CurrencyCatalog) -> CurrencyRegistration:
    """Define every catalog currency in ``registry``.

    Never raises; a currency the registry already knows, or cannot define,
    is reported in ``errors`` and skipped.
    """
    status = CurrencyRegistration()
    for currency in catalog.currencies:
        if currency.name in registry:
            status.errors.append(f"{currency.name}: already defined")
            continue
        try:
            registry.define(currency.pint_definition())
        except Exception as ex:
            status.errors.append(f"{currency.name}: {ex}")
            continue
        status.registered.append(currency.name)
    return status
