from __future__ import annotations

import json
from typing import Any, Iterable, Optional

from sqlalchemy import bindparam, text

from eve_industry_calculator.domain.industry import (
    SKILL_ADVANCED_INDUSTRY,
    SKILL_INDUSTRY,
    ActivityKind,
    BonusAxis,
    SecurityClass,
)

# Dogma attribute IDs, keyed by (activity, axis)
STRUCTURE_ATTRIBUTE_IDS: dict[tuple[ActivityKind, BonusAxis], int] = {
    (ActivityKind.MANUFACTURING, BonusAxis.MATERIAL): 2600,
    (ActivityKind.MANUFACTURING, BonusAxis.TAX): 2601,
    (ActivityKind.MANUFACTURING, BonusAxis.TIME): 2602,
    (ActivityKind.REACTION, BonusAxis.TIME): 2721,
}

RIG_ATTRIBUTE_IDS: dict[tuple[ActivityKind, BonusAxis], int] = {
    (ActivityKind.MANUFACTURING, BonusAxis.TIME): 2593,
    (ActivityKind.MANUFACTURING, BonusAxis.MATERIAL): 2594,
    (ActivityKind.REACTION, BonusAxis.TIME): 2713,
    (ActivityKind.REACTION, BonusAxis.MATERIAL): 2714,
}

SKILL_TIME_ATTRIBUTE_IDS: dict[ActivityKind, int] = {
    ActivityKind.MANUFACTURING: 1982,
    ActivityKind.REACTION: 2660,
}

# Industry / Advanced Industry carry their bonus on their own attributes.
UNIVERSAL_SKILL_TIME_ATTRIBUTE_IDS: dict[int, int] = {
    SKILL_INDUSTRY: 440,
    SKILL_ADVANCED_INDUSTRY: 1961,
}

SECURITY_MODIFIER_ATTRIBUTE_IDS: dict[SecurityClass, int] = {
    SecurityClass.HIGH_SEC: 2355,
    SecurityClass.LOW_SEC: 2356,
    SecurityClass.NULL_SEC_OR_WORMHOLE: 2357,
}


def structure_attribute_id(activity: ActivityKind, axis: BonusAxis) -> Optional[int]:
    return STRUCTURE_ATTRIBUTE_IDS.get((activity, axis))


def rig_attribute_id(activity: ActivityKind, axis: BonusAxis) -> Optional[int]:
    return RIG_ATTRIBUTE_IDS.get((activity, axis))


def skill_time_attribute_id(skill_id: int, activity: ActivityKind) -> int:
    if int(skill_id) in UNIVERSAL_SKILL_TIME_ATTRIBUTE_IDS:
        return UNIVERSAL_SKILL_TIME_ATTRIBUTE_IDS[int(skill_id)]
    return SKILL_TIME_ATTRIBUTE_IDS[activity]


def safe_json_loads(value: Any) -> Any:
    if isinstance(value, str):
        try:
            return json.loads(value)
        except ValueError:
            return None
    return value


def parse_dogma_attributes(raw: Any) -> dict[int, float]:
    """Turn a typeDogma.dogmaAttributes payload into {attributeID: value}."""

    attrs = safe_json_loads(raw) or []
    if not isinstance(attrs, list):
        return {}

    out: dict[int, float] = {}
    for a in attrs:
        if not isinstance(a, dict):
            continue
        aid = a.get("attributeID")
        val = a.get("value")
        if aid is None or val is None:
            continue
        try:
            out[int(aid)] = float(val)
        except (TypeError, ValueError):
            continue
    return out


def load_dogma_attributes(sde_session: Any, type_ids: Iterable[int]) -> dict[int, dict[int, float]]:
    """Return {type_id: {attributeID: value}}; types without a typeDogma row are omitted."""

    ids = sorted({int(t) for t in type_ids if t is not None and int(t) != 0})
    if not ids:
        return {}

    rows = (
        sde_session.execute(
            text("SELECT id, dogmaAttributes FROM typeDogma WHERE id IN :ids").bindparams(
                bindparam("ids", expanding=True)
            ),
            {"ids": ids},
        ).fetchall()
    )

    out: dict[int, dict[int, float]] = {}
    for tid, attrs_raw in rows or []:
        if tid is None:
            continue
        out[int(tid)] = parse_dogma_attributes(attrs_raw)
    return out
