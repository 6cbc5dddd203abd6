from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from pint import UnitRegistry

from number_with_units.currency import CurrencyCatalog, register_currency_units
from number_with_units.models import NumberWithUnits, RuleInputs
from number_with_units.parsing import parse_number_with_units

logger = logging.getLogger(__name__)


class UnknownRuleError(LookupError):
    pass


class RuleOutcome(str, Enum):
    match = "match"
    mismatch = "mismatch"
    invalid_input = "invalid_input"


@dataclass
class RuleResult:
    outcome: RuleOutcome
    message: str = ""

    @property
    def passed(self) -> bool:
        return self.outcome == RuleOutcome.match


def find_duplicate_unit(canonical_string: str) -> str | None:
    """Return the first space-separated token that occurs more than once."""
    tokens = [t.strip() for t in canonical_string.split(" ")]
    counts = Counter(t for t in tokens if t)
    for token, count in counts.items():
        if count > 1:
            return token
    return None


def _log_rejection(message: str) -> None:
    logger.warning(message)


def _outcome(matched: bool) -> RuleOutcome:
    return RuleOutcome.match if matched else RuleOutcome.mismatch


class NumberWithUnitsRulesService:
    """Answer rules for the number-with-units interaction.

    ``answer`` is the stored quantity and ``inputs`` wraps the learner's
    submission under ``f``. Both may be raw dicts or models.
    """

    RULE_NAMES = {
        "IsEqualTo": "evaluate_equal_to",
        "IsEquivalentTo": "evaluate_equivalent_to",
    }

    def __init__(
        self,
        registry: UnitRegistry | None = None,
        catalog: CurrencyCatalog | None = None,
        notify: Callable[[str], None] | None = None,
    ):
        self.registry = registry if registry is not None else UnitRegistry()
        self.catalog = catalog if catalog is not None else CurrencyCatalog.from_package_yaml()
        self.notify = notify or _log_rejection
        # Checks keep working with whatever currencies did register.
        self.currency_setup = register_currency_units(self.registry, self.catalog)
        for error in self.currency_setup.errors:
            logger.debug("Currency unit not registered: %s", error)

    def _materialize(self, answer: Any, inputs: Any) -> tuple[NumberWithUnits, NumberWithUnits]:
        return NumberWithUnits.from_dict(answer), RuleInputs.model_validate(inputs).f

    def evaluate_equal_to(self, answer: Any, inputs: Any) -> RuleResult:
        answer_obj, inputs_obj = self._materialize(answer, inputs)
        answer_string = answer_obj.to_canonical_string(self.catalog)
        inputs_string = inputs_obj.to_canonical_string(self.catalog)

        # Only the submission is checked; stored answers are trusted.
        duplicate = find_duplicate_unit(inputs_string)
        if duplicate is not None:
            return RuleResult(RuleOutcome.invalid_input, f"Duplicate unit '{duplicate}' is not allowed.")

        answer_dict = parse_number_with_units(answer_string, self.catalog).to_dict()
        inputs_dict = parse_number_with_units(inputs_string, self.catalog).to_dict()
        return RuleResult(_outcome(answer_dict == inputs_dict))

    def evaluate_equivalent_to(self, answer: Any, inputs: Any) -> RuleResult:
        answer_obj, inputs_obj = self._materialize(answer, inputs)
        matched = self._quantity(answer_obj.as_real()) == self._quantity(inputs_obj.as_real())
        return RuleResult(_outcome(bool(matched)))

    def _quantity(self, quantity: NumberWithUnits):
        # Magnitude and units are passed separately; pint refuses "5 * degC".
        return self.registry.Quantity(quantity.real, quantity.canonical_units_string(self.catalog))

    def evaluate(self, rule_name: str, answer: Any, inputs: Any) -> RuleResult:
        method = self.RULE_NAMES.get(rule_name)
        if method is None:
            raise UnknownRuleError(f"Unknown rule: {rule_name}")
        return getattr(self, method)(answer, inputs)

    def check(self, rule_name: str, answer: Any, inputs: Any) -> bool:
        result = self.evaluate(rule_name, answer, inputs)
        if result.outcome == RuleOutcome.invalid_input:
            self.notify(result.message)
        return result.passed

    def is_equal_to(self, answer: Any, inputs: Any) -> bool:
        return self.check("IsEqualTo", answer, inputs)

    def is_equivalent_to(self, answer: Any, inputs: Any) -> bool:
        return self.check("IsEquivalentTo", answer, inputs)
