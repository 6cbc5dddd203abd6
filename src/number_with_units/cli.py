from __future__ import annotations

import argparse
import logging
from pathlib import Path

from pint.errors import PintError

from number_with_units.cases import load_rule_cases, run_rule_cases
from number_with_units.config import resolve_currency_units_file, resolve_log_level
from number_with_units.currency import CurrencyCatalog
from number_with_units.models import RuleInputs
from number_with_units.parsing import parse_number_with_units
from number_with_units.rules import NumberWithUnitsRulesService, UnknownRuleError


def build_service(currency_file: str | None) -> NumberWithUnitsRulesService:
    catalog = CurrencyCatalog.load(resolve_currency_units_file(currency_file))
    return NumberWithUnitsRulesService(catalog=catalog)


def cmd_check(args: argparse.Namespace) -> int:
    service = build_service(args.currency_file)
    try:
        answer = parse_number_with_units(args.answer, service.catalog)
        submitted = parse_number_with_units(args.input, service.catalog)
        result = service.evaluate(args.rule, answer, RuleInputs(f=submitted))
    except (UnknownRuleError, PintError, ValueError) as ex:
        print(f"ERROR: {ex}")
        return 2
    if result.message:
        print(result.message)
    print(result.passed)
    return 0 if result.passed else 1


def cmd_validate(args: argparse.Namespace) -> int:
    path = Path(args.path)
    if not path.exists():
        raise SystemExit(f"Path does not exist: {path}")
    service = build_service(args.currency_file)
    try:
        cases = load_rule_cases(path)
    except ValueError as ex:
        print(f"ERROR: {ex}")
        return 1
    errors = run_rule_cases(service, cases)
    if errors:
        for err in errors:
            print(f"ERROR: {err}")
        return 1
    print(f"Validation succeeded: {path} ({len(cases)} cases)")
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    from number_with_units.app import create_app

    app = create_app(currency_file=resolve_currency_units_file(args.currency_file))
    uvicorn.run(app, host=args.host, port=args.port)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="number-with-units")
    parser.add_argument("--log-level", default=None)
    parser.add_argument("--currency-file", default=None, help="YAML currency table to use instead of the built-in one.")
    sub = parser.add_subparsers(dest="command", required=True)

    p_check = sub.add_parser("check", help="Evaluate one rule on two raw answers.")
    p_check.add_argument("rule", choices=sorted(NumberWithUnitsRulesService.RULE_NAMES))
    p_check.add_argument("answer")
    p_check.add_argument("input")
    p_check.set_defaults(func=cmd_check)

    p_validate = sub.add_parser("validate", help="Run a YAML file of rule cases.")
    p_validate.add_argument("path")
    p_validate.set_defaults(func=cmd_validate)

    p_serve = sub.add_parser("serve", help="Serve the rules over HTTP.")
    p_serve.add_argument("--host", default="127.0.0.1")
    p_serve.add_argument("--port", type=int, default=8000)
    p_serve.set_defaults(func=cmd_serve)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=resolve_log_level(args.log_level))
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
