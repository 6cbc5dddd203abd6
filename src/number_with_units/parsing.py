from __future__ import annotations

import re
from functools import lru_cache

from number_with_units.currency import CurrencyCatalog
from number_with_units.models import Fraction, NumberWithUnits, QuantityType, UnitTerm


class NumberWithUnitsParseError(ValueError):
    pass


class FractionParseError(NumberWithUnitsParseError):
    pass


INVALID_VALUE = "Please ensure that value is either a fraction or a number."
INVALID_CURRENCY = "Please enter a valid currency (e.g., $5 or Rs 5)."
INVALID_CURRENCY_FORMAT = "Please write currency units at the beginning."
INVALID_UNIT_CHARS = "Please ensure that unit only contains numbers, alphabets, (, ), *, ^, /, -."

_FRACTION_INVALID_CHARS = re.compile(r"[^\d\s/-]")
_FRACTION_LONG_INTEGER = re.compile(r"\d{8,}")
_FRACTION_FORMAT = re.compile(r"^\s*-?\s*((\d*\s*\d+\s*/\s*\d+)|\d+)\s*$")

_NUMERIC_PREFIX = re.compile(r"^(?P<value>[-+]?[\d.\s/]*\d(?:[eE][-+]?\d+)?)(?P<units>.*)$", re.DOTALL)
_INVALID_UNIT_CHARS = re.compile(r"[^0-9a-zA-Z/* ^()-]")


@lru_cache(maxsize=32)
def _unit_symbol_pattern(front_units: tuple[str, ...]) -> str:
    """Alternation matching a unit name or one of the currency front units."""
    # Alphabetic front units such as "Rs" are already unit names.
    symbols = sorted((f for f in front_units if not f.isalpha()), key=len, reverse=True)
    return "|".join([*(re.escape(s) for s in symbols), "[A-Za-z]+"])


@lru_cache(maxsize=32)
def _unit_token_regex(front_units: tuple[str, ...]) -> re.Pattern[str]:
    symbol = _unit_symbol_pattern(front_units)
    return re.compile(rf"\s*(?:(?P<name>{symbol})|(?P<number>\d+)|(?P<op>[*/()^-]))")


def parse_fraction(raw: str) -> Fraction:
    text = raw or ""
    if _FRACTION_LONG_INTEGER.search(text):
        raise FractionParseError("None of the integers should have more than 7 digits.")
    if _FRACTION_INVALID_CHARS.search(text):
        raise FractionParseError("Please only use numerical digits, spaces or forward slashes (/).")
    if not _FRACTION_FORMAT.match(text):
        raise FractionParseError("Please enter a valid fraction (e.g., 5/3 or 1 2/3).")

    text = text.strip()
    is_negative = text.startswith("-")
    if is_negative:
        text = text[1:].strip()
    numbers = [int(n) for n in re.split(r"[/\s]", text) if n]
    whole, numerator, denominator = 0, 0, 1
    if len(numbers) == 1:
        whole = numbers[0]
    elif len(numbers) == 2:
        numerator, denominator = numbers
    else:
        whole, numerator, denominator = numbers
    if denominator == 0:
        raise FractionParseError("Please do not put 0 in the denominator.")
    return Fraction(
        is_negative=is_negative,
        whole_number=whole,
        numerator=numerator,
        denominator=denominator,
    )


class _UnitsParser:
    """Recursive descent over unit text such as ``kg m^2 / (s^2 K)``.

    ``/`` and ``per`` divide only the term that follows them; whitespace and
    ``*`` multiply.
    """

    def __init__(self, text: str, front_units: tuple[str, ...] = ()):
        self.token_regex = _unit_token_regex(front_units)
        self.tokens = self._tokenize(text)
        self.pos = 0

    def _tokenize(self, text: str) -> list[tuple[str, str]]:
        tokens: list[tuple[str, str]] = []
        text = text.strip()
        pos = 0
        while pos < len(text):
            m = self.token_regex.match(text, pos)
            if not m:
                raise NumberWithUnitsParseError(f"Unrecognized unit text: '{text[pos:].strip()}'")
            kind = m.lastgroup or ""
            tokens.append((kind, m.group(kind)))
            pos = m.end()
        return tokens

    def _peek(self) -> tuple[str, str] | None:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def _next(self) -> tuple[str, str] | None:
        tok = self._peek()
        if tok is not None:
            self.pos += 1
        return tok

    def parse(self) -> list[tuple[str, int]]:
        if not self.tokens:
            return []
        terms = self._product()
        if self.pos != len(self.tokens):
            raise NumberWithUnitsParseError(f"Unexpected '{self.tokens[self.pos][1]}' in units.")
        return terms

    def _product(self) -> list[tuple[str, int]]:
        terms = self._power()
        while True:
            tok = self._peek()
            if tok is None or tok == ("op", ")"):
                return terms
            if tok == ("op", "*"):
                self.pos += 1
                terms += self._power()
            elif tok == ("op", "/") or tok == ("name", "per"):
                self.pos += 1
                terms += [(unit, -exponent) for unit, exponent in self._power()]
            else:
                terms += self._power()

    def _power(self) -> list[tuple[str, int]]:
        tok = self._next()
        if tok is None:
            raise NumberWithUnitsParseError("Units are incomplete.")
        if tok == ("op", "("):
            terms = self._product()
            if self._next() != ("op", ")"):
                raise NumberWithUnitsParseError("Units have an unmatched parenthesis.")
        elif tok[0] == "name" and tok[1] != "per":
            terms = [(tok[1], 1)]
        else:
            raise NumberWithUnitsParseError(f"Unexpected '{tok[1]}' in units.")
        if self._peek() == ("op", "^"):
            self.pos += 1
            power = self._exponent()
            terms = [(unit, exponent * power) for unit, exponent in terms]
        return terms

    def _exponent(self) -> int:
        sign = 1
        tok = self._next()
        if tok == ("op", "-"):
            sign = -1
            tok = self._next()
        if tok is None or tok[0] != "number":
            raise NumberWithUnitsParseError("Unit exponents must be integers.")
        return sign * int(tok[1])


def parse_units(text: str, currencies: CurrencyCatalog | None = None) -> list[UnitTerm]:
    """Parse unit text into terms, merging repeated symbols in first-seen order.

    Currency front units of ``currencies`` (the packaged table by default) are
    accepted as unit symbols.
    """
    catalog = currencies if currencies is not None else CurrencyCatalog.from_package_yaml()
    front_units = tuple(catalog.front_units())
    symbols = re.compile(_unit_symbol_pattern(front_units))
    if _INVALID_UNIT_CHARS.search(symbols.sub(" ", text)):
        raise NumberWithUnitsParseError(INVALID_UNIT_CHARS)
    merged: dict[str, int] = {}
    for unit, exponent in _UnitsParser(text, front_units).parse():
        merged[unit] = merged.get(unit, 0) + exponent
    return [UnitTerm(unit=unit, exponent=exponent) for unit, exponent in merged.items()]


def _split_numeric_prefix(text: str) -> tuple[str, str] | None:
    m = _NUMERIC_PREFIX.match(text)
    if not m:
        return None
    return m.group("value").strip(), m.group("units").strip()


def _reject_front_units(unit_text: str, front_units: list[str]) -> None:
    found = re.findall(_unit_symbol_pattern(tuple(front_units)), unit_text)
    if any(symbol in front_units for symbol in found):
        raise NumberWithUnitsParseError(INVALID_CURRENCY_FORMAT)


def _parse_value(value: str) -> tuple[QuantityType, float, Fraction]:
    if "/" in value:
        return QuantityType.fraction, 0.0, parse_fraction(value)
    try:
        real = float(value)
    except ValueError as ex:
        raise NumberWithUnitsParseError(INVALID_VALUE) from ex
    return QuantityType.real, real, Fraction()


def parse_number_with_units(raw: str, currencies: CurrencyCatalog | None = None) -> NumberWithUnits:
    """Build a quantity from learner text such as ``5 km``, ``1 1/2 kg`` or ``$5``."""
    catalog = currencies if currencies is not None else CurrencyCatalog.from_package_yaml()
    text = (raw or "").strip()
    if not text:
        return NumberWithUnits()

    front_units = catalog.front_units()
    if re.match(r"[-+.\d]", text):
        split = _split_numeric_prefix(text)
        if split is None:
            raise NumberWithUnitsParseError(INVALID_VALUE)
        value, unit_text = split
        _reject_front_units(unit_text, front_units)
        units = parse_units(unit_text, catalog)
    else:
        front = next((f for f in front_units if text.startswith(f)), None)
        if front is None:
            raise NumberWithUnitsParseError(INVALID_CURRENCY)
        split = _split_numeric_prefix(text[len(front):].strip())
        if split is None:
            raise NumberWithUnitsParseError(INVALID_CURRENCY)
        value, unit_text = split
        _reject_front_units(unit_text, front_units)
        # Parsed together so "Rs 5 per hour" divides by hour.
        units = parse_units(f"{front} {unit_text}", catalog)

    quantity_type, real, fraction = _parse_value(value)
    return NumberWithUnits(type=quantity_type, real=real, fraction=fraction, units=units)
