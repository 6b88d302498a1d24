from __future__ import annotations

from flask import Blueprint, request

from eve_industry_calculator.application.errors import ServiceError
from eve_industry_calculator.domain.models import CalculationRequest

from flask_app.bootstrap import require_ready
from flask_app.http import error, ok


industry_bp = Blueprint("industry", __name__)


def _parse_prices(raw) -> dict[int, float] | None:
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise ServiceError("'prices' must be an object of type_id -> adjusted price", status_code=400)
    try:
        return {int(k): float(v) for k, v in raw.items()}
    except (TypeError, ValueError):
        raise ServiceError("'prices' keys must be type IDs and values numbers", status_code=400)


@industry_bp.post("/industry/blueprint_calculator")
def blueprint_calculator():
    """Calculate materials, time and job cost for one blueprint.

    Body: blueprint_type_id, solar_system_id, runs, material_efficiency,
    time_efficiency, structure_type_id, rig_type_ids, facility_tax,
    character_skills, is_reaction and optionally prices / cost_index to skip
    the market lookups.
    """

    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise ServiceError("Request body must be a JSON object", status_code=400)

    try:
        calc_request = CalculationRequest.from_payload(payload)
    except ValueError as e:
        raise ServiceError(str(e), status_code=400)

    prices = _parse_prices(payload.get("prices"))
    cost_index = payload.get("cost_index")
    try:
        cost_index = float(cost_index) if cost_index is not None else None
    except (TypeError, ValueError):
        raise ServiceError("'cost_index' must be a number", status_code=400)

    state = require_ready()
    result = state.calculator.calculate_sync(calc_request, prices=prices, cost_index=cost_index)
    if not result.success:
        return error(message=result.error_message or "Calculation failed", status_code=404, data=result.to_dict())
    return ok(data=result.to_dict())
