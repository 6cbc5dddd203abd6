from __future__ import annotations

import pytest

from number_with_units.currency import CurrencyCatalog
from number_with_units.models import QuantityType
from number_with_units.parsing import (
    FractionParseError,
    NumberWithUnitsParseError,
    parse_fraction,
    parse_number_with_units,
    parse_units,
)


def _units(raw: str) -> list[tuple[str, int]]:
    return [(t.unit, t.exponent) for t in parse_units(raw)]


def test_parse_real_with_unit() -> None:
    q = parse_number_with_units("5 km")
    assert q.type == QuantityType.real
    assert q.real == 5.0
    assert [(t.unit, t.exponent) for t in q.units] == [("km", 1)]


def test_parse_mixed_fraction_with_compound_units() -> None:
    q = parse_number_with_units("1 1/2 kg m^-2")
    assert q.type == QuantityType.fraction
    assert (q.fraction.whole_number, q.fraction.numerator, q.fraction.denominator) == (1, 1, 2)
    assert [(t.unit, t.exponent) for t in q.units] == [("kg", 1), ("m", -2)]


def test_parse_signed_and_scientific_values() -> None:
    assert parse_number_with_units("-2.5 m").real == -2.5
    assert parse_number_with_units("1e-3 kg").real == pytest.approx(0.001)
    assert parse_number_with_units(".5 s").real == 0.5


def test_parse_units_division_and_grouping() -> None:
    assert _units("m/s^2") == [("m", 1), ("s", -2)]
    assert _units("N/(m s)") == [("N", 1), ("m", -1), ("s", -1)]
    assert _units("km per hr") == [("km", 1), ("hr", -1)]
    assert _units("kg*m^2/s^2") == [("kg", 1), ("m", 2), ("s", -2)]
    assert _units("(m/s)^2") == [("m", 2), ("s", -2)]


def test_parse_units_merges_repeated_symbols_in_first_seen_order() -> None:
    assert _units("m s m") == [("m", 2), ("s", 1)]
    assert _units("s^-1 km") == [("s", -1), ("km", 1)]


def test_parse_units_errors() -> None:
    with pytest.raises(NumberWithUnitsParseError, match="only contains"):
        parse_units("km#")
    with pytest.raises(NumberWithUnitsParseError, match="integers"):
        parse_units("m^x")
    with pytest.raises(NumberWithUnitsParseError, match="parenthesis"):
        parse_units("(m s")
    with pytest.raises(NumberWithUnitsParseError, match="incomplete"):
        parse_units("m /")


def test_parse_currency_front_units() -> None:
    q = parse_number_with_units("$5")
    assert q.real == 5.0
    assert [t.unit for t in q.units] == ["$"]
    assert [t.unit for t in parse_number_with_units("Rs 5 per hour").units] == ["Rs", "hour"]
    assert [t.unit for t in parse_number_with_units("₹ 10").units] == ["₹"]


def test_parse_currency_errors() -> None:
    with pytest.raises(NumberWithUnitsParseError, match="at the beginning"):
        parse_number_with_units("5 $")
    with pytest.raises(NumberWithUnitsParseError, match="valid currency"):
        parse_number_with_units("abc")
    with pytest.raises(NumberWithUnitsParseError, match="valid currency"):
        parse_number_with_units("$ kg")


_EURO_TABLE = """
currencies:
  euro:
    aliases: [euros, "€"]
    front_units: ["€", "EUR€"]
    base_unit: null
"""


def test_parse_front_units_from_custom_catalog() -> None:
    catalog = CurrencyCatalog.from_yaml_text(_EURO_TABLE)
    q = parse_number_with_units("€3 per hr", catalog)
    assert [(t.unit, t.exponent) for t in q.units] == [("€", 1), ("hr", -1)]
    assert q.to_canonical_string(catalog) == "3 euro hr^-1"
    assert [t.unit for t in parse_number_with_units("EUR€ 4", catalog).units] == ["EUR€"]
    with pytest.raises(NumberWithUnitsParseError, match="at the beginning"):
        parse_number_with_units("3 €", catalog)
    with pytest.raises(NumberWithUnitsParseError, match="only contains"):
        parse_units("$ kg", catalog)


def test_parse_value_errors() -> None:
    with pytest.raises(NumberWithUnitsParseError, match="fraction or a number"):
        parse_number_with_units("5 1km")
    with pytest.raises(FractionParseError, match="denominator"):
        parse_number_with_units("1/0 kg")


def test_parse_empty_input_is_zero() -> None:
    q = parse_number_with_units("   ")
    assert q.real == 0.0
    assert q.units == []


def test_parse_fraction_forms() -> None:
    f = parse_fraction("-3/4")
    assert f.is_negative and (f.numerator, f.denominator) == (3, 4)
    assert parse_fraction("7").whole_number == 7
    assert parse_fraction(" 2 1 / 3 ").to_string() == "2 1/3"


def test_parse_fraction_errors() -> None:
    with pytest.raises(FractionParseError, match="numerical digits"):
        parse_fraction("1.5")
    with pytest.raises(FractionParseError, match="7 digits"):
        parse_fraction("12345678/2")
    with pytest.raises(FractionParseError, match="valid fraction"):
        parse_fraction("1/2/3")


def test_canonical_string_round_trips_through_parser() -> None:
    q = parse_number_with_units("-1 1/2 kg m^-2")
    again = parse_number_with_units(q.to_canonical_string())
    assert again.to_dict() == q.to_dict()
