from __future__ import annotations

import math
from enum import Enum
from typing import TYPE_CHECKING, Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

if TYPE_CHECKING:
    from number_with_units.currency import CurrencyCatalog


class QuantityType(str, Enum):
    real = "real"
    fraction = "fraction"


def format_real(value: float) -> str:
    """Render a float the way the answer was typed: ``5`` rather than ``5.0``."""
    value = float(value)
    if math.isfinite(value) and value.is_integer() and abs(value) < 1e16:
        return str(int(value))
    return repr(value)


class Fraction(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    is_negative: bool = Field(default=False, alias="isNegative")
    whole_number: int = Field(default=0, alias="wholeNumber")
    numerator: int = 0
    denominator: int = 1

    @field_validator("denominator")
    @classmethod
    def denominator_nonzero(cls, v: int) -> int:
        if v == 0:
            raise ValueError("fraction denominator must not be zero")
        return v

    @classmethod
    def from_raw_input_string(cls, raw: str) -> "Fraction":
        from number_with_units.parsing import parse_fraction

        return parse_fraction(raw)

    def to_float(self) -> float:
        value = (self.whole_number * self.denominator + self.numerator) / self.denominator
        return -value if self.is_negative else value

    def to_string(self) -> str:
        out = ""
        if self.numerator != 0:
            out = f"{self.numerator}/{self.denominator}"
        if self.whole_number != 0:
            out = f"{self.whole_number} {out}".strip()
        if self.is_negative and out:
            out = "-" + out
        return out or "0"

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class UnitTerm(BaseModel):
    unit: str
    exponent: int = Field(default=1, validation_alias=AliasChoices("exponent", "exp"))

    def to_string(self) -> str:
        if self.exponent == 1:
            return self.unit
        return f"{self.unit}^{self.exponent}"


class NumberWithUnits(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: QuantityType = Field(
        default=QuantityType.real, validation_alias=AliasChoices("type", "kind")
    )
    real: float = 0.0
    fraction: Fraction = Field(default_factory=Fraction)
    units: list[UnitTerm] = Field(default_factory=list)

    @classmethod
    def from_dict(cls, raw: Any) -> "NumberWithUnits":
        return cls.model_validate(raw)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "real": self.real,
            "fraction": self.fraction.to_dict(),
            "units": [term.model_dump() for term in self.units],
        }

    def value_string(self) -> str:
        if self.type == QuantityType.fraction:
            return self.fraction.to_string()
        return format_real(self.real)

    def units_string(self) -> str:
        return " ".join(term.to_string() for term in self.units)

    def to_string(self, currencies: "CurrencyCatalog | None" = None) -> str:
        front = set(currencies.front_units()) if currencies is not None else set()
        prefix = [t.unit for t in self.units if t.unit in front and t.exponent == 1]
        rest = [t.to_string() for t in self.units if t.unit not in prefix]
        return " ".join(prefix + [self.value_string()] + rest)

    def canonical_units_string(self, currencies: "CurrencyCatalog | None" = None) -> str:
        units = self.units_string()
        if currencies is not None:
            units = currencies.canonical_units(units)
        return units

    def to_canonical_string(self, currencies: "CurrencyCatalog | None" = None) -> str:
        return f"{self.value_string()} {self.canonical_units_string(currencies)}".strip()

    def as_real(self) -> "NumberWithUnits":
        """Copy of this quantity with any fraction value replaced by its float."""
        if self.type != QuantityType.fraction:
            return self.model_copy(deep=True)
        return self.model_copy(
            update={"type": QuantityType.real, "real": self.fraction.to_float()},
            deep=True,
        )


class RuleInputs(BaseModel):
    f: NumberWithUnits
