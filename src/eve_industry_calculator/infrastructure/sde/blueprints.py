from __future__ import annotations

from typing import Any, Optional

from eve_industry_calculator.domain.industry import ActivityKind
from eve_industry_calculator.domain.models import BlueprintMaterial, BlueprintProduct
from eve_industry_calculator.infrastructure.sde.dogma import safe_json_loads
from eve_industry_calculator.infrastructure.sde.models import Blueprints


def get_blueprint_activity(session: Any, blueprint_type_id: int, activity: ActivityKind) -> Optional[dict]:
    """Return the raw SDE activity block (materials/products/skills/time) or None."""

    bp = session.query(Blueprints).filter(Blueprints.blueprintTypeID == int(blueprint_type_id)).first()
    if bp is None:
        return None

    activities = safe_json_loads(bp.activities)
    if not isinstance(activities, dict):
        return None
    block = activities.get(activity.value)
    return block if isinstance(block, dict) else None


def _type_quantity_rows(block: Optional[dict], key: str) -> list[tuple[int, int]]:
    out: list[tuple[int, int]] = []
    for row in (block or {}).get(key, []) or []:
        if not isinstance(row, dict):
            continue
        try:
            type_id = int(row["typeID"])
            quantity = int(row.get("quantity", 0) or 0)
        except (KeyError, TypeError, ValueError):
            continue
        out.append((type_id, quantity))
    return out


def parse_materials(block: Optional[dict]) -> list[BlueprintMaterial]:
    return [BlueprintMaterial(type_id=t, quantity=q) for t, q in _type_quantity_rows(block, "materials") if q > 0]


def parse_product(block: Optional[dict]) -> Optional[BlueprintProduct]:
    products = _type_quantity_rows(block, "products")
    if not products:
        return None
    type_id, quantity = products[0]
    return BlueprintProduct(type_id=type_id, quantity=max(1, quantity))


def parse_time(block: Optional[dict]) -> Optional[int]:
    if not block or block.get("time") is None:
        return None
    try:
        return int(block["time"])
    except (TypeError, ValueError):
        return None


def parse_required_skills(block: Optional[dict]) -> list[int]:
    out: list[int] = []
    for skill in (block or {}).get("skills", []) or []:
        if not isinstance(skill, dict):
            continue
        try:
            out.append(int(skill["typeID"]))
        except (KeyError, TypeError, ValueError):
            continue
    return out
