from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pint.errors import PintError
from pydantic import BaseModel, ConfigDict, Field, field_validator

from number_with_units.models import NumberWithUnits
from number_with_units.parsing import parse_number_with_units
from number_with_units.rules import NumberWithUnitsRulesService, UnknownRuleError


class RuleCase(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str = ""
    rule: str
    answer: str | dict[str, Any]
    submitted: str | dict[str, Any] = Field(alias="input")
    expected: bool

    @field_validator("rule")
    @classmethod
    def rule_known(cls, v: str) -> str:
        if v not in NumberWithUnitsRulesService.RULE_NAMES:
            raise ValueError(f"unknown rule '{v}'")
        return v


def load_rule_cases(path: Path) -> list[RuleCase]:
    raw = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    cases = raw.get("cases") if isinstance(raw, dict) else None
    if not isinstance(cases, list):
        raise ValueError(f"{path}: expected a 'cases' list")
    items: list[RuleCase] = []
    for idx, item in enumerate(cases, start=1):
        case = RuleCase.model_validate(item)
        if not case.id:
            case.id = f"case{idx}"
        items.append(case)
    return items


def _quantity(value: str | dict[str, Any], service: NumberWithUnitsRulesService) -> NumberWithUnits:
    if isinstance(value, str):
        return parse_number_with_units(value, service.catalog)
    return NumberWithUnits.from_dict(value)


def run_rule_cases(service: NumberWithUnitsRulesService, cases: list[RuleCase]) -> list[str]:
    errors: list[str] = []
    for case in cases:
        try:
            answer = _quantity(case.answer, service)
            submitted = _quantity(case.submitted, service)
            result = service.evaluate(case.rule, answer, {"f": submitted})
        except (UnknownRuleError, PintError, ValueError) as ex:
            errors.append(f"{case.id}: {ex}")
            continue
        if result.passed != case.expected:
            detail = f" ({result.message})" if result.message else ""
            errors.append(
                f"{case.id}: {case.rule} expected {case.expected}, got {result.passed}{detail}"
            )
    return errors
