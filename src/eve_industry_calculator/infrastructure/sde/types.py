from __future__ import annotations

from typing import Any, Iterable

from eve_industry_calculator.domain.models import TypeInfo
from eve_industry_calculator.infrastructure.sde.localization import parse_localized
from eve_industry_calculator.infrastructure.sde.models import Groups, Types


def get_type_info(session: Any, language: str, type_ids: Iterable[int]) -> dict[int, TypeInfo]:
    """Return name/icon/group/category for the given type IDs; unknown IDs are omitted."""

    ids = sorted({int(t) for t in type_ids if t is not None})
    if not ids:
        return {}

    types_q = session.query(Types).filter(Types.id.in_(ids)).all()
    group_ids = {t.groupID for t in types_q if getattr(t, "groupID", None) is not None}
    group_data_map = {g.id: g for g in session.query(Groups).filter(Groups.id.in_(group_ids)).all()} if group_ids else {}

    result: dict[int, TypeInfo] = {}
    for t in types_q:
        group = group_data_map.get(t.groupID)
        result[int(t.id)] = TypeInfo(
            type_id=int(t.id),
            type_name=parse_localized(t.name, language) or str(t.id),
            type_name_en=parse_localized(t.name, "en") or str(t.id),
            icon_id=getattr(t, "iconID", None),
            group_id=getattr(t, "groupID", None),
            category_id=getattr(group, "categoryID", None) if group else None,
        )

    return result
