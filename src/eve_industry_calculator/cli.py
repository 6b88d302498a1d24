from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any, Optional

from eve_industry_calculator.bootstrap import build_calculator
from eve_industry_calculator.config.settings import get_settings
from eve_industry_calculator.domain.models import CalculationRequest, FacilityConfig
from eve_industry_calculator.infrastructure.esi.market_data import StaticMarketData
from flask_app.app import create_app
from flask_app.bootstrap import initialize_application
from flask_app.settings import flask_debug, flask_host, flask_port
from utils.logging_setup import configure_logging


def _parse_skill(raw: str) -> tuple[int, int]:
    try:
        skill_id, level = raw.split("=", 1)
        return int(skill_id), int(level)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected SKILL_ID=LEVEL, got '{raw}'")


def _load_prices(path: Optional[str]) -> Optional[dict[int, float]]:
    if not path:
        return None
    with open(path, "r", encoding="utf-8") as fh:
        data = json.load(fh)
    if isinstance(data, list):
        # ESI /markets/prices/ shape
        return {int(r["type_id"]): float(r["adjusted_price"]) for r in data if r.get("adjusted_price") is not None}
    return {int(k): float(v) for k, v in data.items()}


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="eve-industry-calculator",
        description="EVE Online blueprint manufacturing-cost calculator.",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Python logging level (default: %(default)s)",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    calc = sub.add_parser("calculate", help="Calculate materials, time and cost for one blueprint.")
    calc.add_argument("--blueprint-id", type=int, required=True, help="Blueprint type ID.")
    calc.add_argument("--system-id", type=int, required=True, help="Solar system the facility is in.")
    calc.add_argument("--runs", type=int, default=1)
    calc.add_argument("--me", type=int, default=0, help="Blueprint material efficiency (0-100).")
    calc.add_argument("--te", type=int, default=0, help="Blueprint time efficiency (0-100).")
    calc.add_argument("--structure-id", type=int, default=None, help="Structure type ID.")
    calc.add_argument("--rig", type=int, action="append", default=[], help="Installed rig type ID (repeatable).")
    calc.add_argument("--tax", type=float, default=0.0, help="Facility tax as a fraction (0.01 == 1%%).")
    calc.add_argument(
        "--skill",
        type=_parse_skill,
        action="append",
        default=[],
        help="Character skill as SKILL_ID=LEVEL (repeatable).",
    )
    calc.add_argument("--reaction", action="store_true", help="Treat the blueprint as a reaction formula.")
    calc.add_argument(
        "--prices-file",
        default=None,
        help="JSON file with {type_id: adjusted_price} or an ESI /markets/prices/ dump.",
    )
    calc.add_argument("--cost-index", type=float, default=None, help="System cost index to use instead of ESI.")
    calc.add_argument("--offline", action="store_true", help="Never call ESI; missing data falls back to defaults.")

    sub.add_parser("serve", help="Run the Flask API.")

    return parser


def run_calculate(args: argparse.Namespace) -> int:
    try:
        request = CalculationRequest(
            blueprint_type_id=args.blueprint_id,
            facility=FacilityConfig(
                solar_system_id=args.system_id,
                structure_type_id=args.structure_id,
                rig_type_ids=tuple(args.rig),
                tax_rate=args.tax,
            ),
            runs=args.runs,
            material_efficiency=args.me,
            time_efficiency=args.te,
            character_skills=dict(args.skill),
            is_reaction=args.reaction,
        )
    except ValueError as e:
        logging.error("Invalid request: %s", e)
        return 2

    prices = _load_prices(args.prices_file)
    market: Any = StaticMarketData(prices) if args.offline else None

    calculator = build_calculator(get_settings(), market=market)
    result = calculator.calculate_sync(request, prices=prices, cost_index=args.cost_index)

    json.dump(result.to_dict(), sys.stdout, indent=2)
    sys.stdout.write("\n")
    return 0 if result.success else 1


def run_serve() -> int:
    app = create_app()
    initialize_application(app.extensions.get("app_state"))
    app.run(host=flask_host(), port=flask_port(), debug=flask_debug(), use_reloader=False)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(default_level=str(args.log_level).upper())

    if args.command == "calculate":
        return run_calculate(args)
    return run_serve()


if __name__ == "__main__":
    sys.exit(main())
