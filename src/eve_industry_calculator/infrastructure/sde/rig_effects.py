from __future__ import annotations

import threading
from typing import Any, Iterable

from sqlalchemy import bindparam, text

from eve_industry_calculator.domain.models import RigEligibility


_RIG_ELIGIBILITY_CACHE: dict[int, tuple[RigEligibility, ...]] = {}
_RIG_ELIGIBILITY_CACHE_LOCK = threading.Lock()


def clear_rig_eligibility_cache() -> None:
    with _RIG_ELIGIBILITY_CACHE_LOCK:
        _RIG_ELIGIBILITY_CACHE.clear()


def _normalize_filter(value: Any) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def get_rig_eligibility(sde_session: Any, rig_type_ids: Iterable[int]) -> dict[int, list[RigEligibility]]:
    """Return {rig_type_id: [RigEligibility, ...]}.

    A rig with no facilityRigEffects rows maps to an empty list, meaning it
    applies to every product. NULL columns are kept as None; such rows never
    match a product.
    """

    ids = sorted({int(x) for x in rig_type_ids if x is not None and int(x) != 0})
    if not ids:
        return {}

    out: dict[int, list[RigEligibility]] = {}
    missing: list[int] = []
    with _RIG_ELIGIBILITY_CACHE_LOCK:
        for rid in ids:
            cached = _RIG_ELIGIBILITY_CACHE.get(rid)
            if cached is None:
                missing.append(rid)
            else:
                out[rid] = list(cached)

    if not missing:
        return out

    rows = (
        sde_session.execute(
            text(
                "SELECT rigTypeID, categoryID, groupID FROM facilityRigEffects WHERE rigTypeID IN :ids"
            ).bindparams(bindparam("ids", expanding=True)),
            {"ids": missing},
        ).fetchall()
    )

    loaded: dict[int, list[RigEligibility]] = {rid: [] for rid in missing}
    for rig_id, category_id, group_id in rows or []:
        if rig_id is None:
            continue
        loaded.setdefault(int(rig_id), []).append(
            RigEligibility(category_id=_normalize_filter(category_id), group_id=_normalize_filter(group_id))
        )

    with _RIG_ELIGIBILITY_CACHE_LOCK:
        for rid, records in loaded.items():
            _RIG_ELIGIBILITY_CACHE[rid] = tuple(records)

    out.update(loaded)
    return out
