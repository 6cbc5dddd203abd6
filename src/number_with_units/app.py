from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from fastapi import Body, FastAPI
from fastapi.responses import JSONResponse
from pint.errors import PintError
from pydantic import BaseModel

from number_with_units.currency import CurrencyCatalog
from number_with_units.parsing import parse_number_with_units
from number_with_units.rules import NumberWithUnitsRulesService, UnknownRuleError


class RulePayload(BaseModel):
    answer: dict[str, Any]
    inputs: dict[str, Any]


class ParsePayload(BaseModel):
    raw: str = ""


def create_app(
    currency_file: Path | None = None, service: NumberWithUnitsRulesService | None = None
) -> FastAPI:
    logger = logging.getLogger(__name__)
    logger.setLevel(logging.INFO)
    app = FastAPI(title="Number With Units Rules")
    if service is None:
        service = NumberWithUnitsRulesService(catalog=CurrencyCatalog.load(currency_file))
    app.state.service = service

    @app.post("/rules/{rule_name}")
    def evaluate_rule(rule_name: str, payload: RulePayload = Body(...)) -> JSONResponse:
        try:
            result = service.evaluate(rule_name, payload.answer, payload.inputs)
        except UnknownRuleError as ex:
            return JSONResponse({"detail": str(ex)}, status_code=404)
        except (ValueError, PintError) as ex:
            return JSONResponse({"detail": str(ex)}, status_code=400)
        logger.info("Rule %s evaluated: %s", rule_name, result.outcome.value)
        return JSONResponse(
            {
                "rule": rule_name,
                "result": result.passed,
                "outcome": result.outcome.value,
                "message": result.message,
            }
        )

    @app.post("/parse")
    def parse_quantity(payload: ParsePayload = Body(...)) -> JSONResponse:
        try:
            quantity = parse_number_with_units(payload.raw, service.catalog)
        except ValueError as ex:
            return JSONResponse({"detail": str(ex)}, status_code=400)
        return JSONResponse(
            {
                "quantity": quantity.to_dict(),
                "display": quantity.to_string(service.catalog),
                "canonical": quantity.to_canonical_string(service.catalog),
            }
        )

    @app.get("/currencies")
    def list_currencies() -> JSONResponse:
        return JSONResponse(
            {
                "currencies": [
                    {
                        "name": c.name,
                        "aliases": list(c.aliases),
                        "front_units": list(c.front_units),
                        "base_unit": c.base_unit,
                    }
                    for c in service.catalog.currencies
                ],
                "registered": service.currency_setup.registered,
            }
        )

    return app
