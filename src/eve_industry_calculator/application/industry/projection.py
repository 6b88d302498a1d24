from __future__ import annotations

import math
from typing import Iterable, Mapping, Optional

from eve_industry_calculator.domain.models import (
    BlueprintMaterial,
    BlueprintProduct,
    MaterialLine,
    ProductOutput,
    TimeRequirement,
    TypeInfo,
)


def final_material_quantity(base_quantity: int, material_multiplier: float, runs: int) -> int:
    """Run-scaled quantity of one input.

    Inputs needed once per run are never reduced. Everything else is rounded up
    once, over all runs.
    """

    if int(base_quantity) == 1:
        return int(runs)
    return max(0, math.ceil(int(base_quantity) * float(material_multiplier) * int(runs)))


def project_materials(
    materials: Iterable[BlueprintMaterial],
    *,
    material_multiplier: float,
    runs: int,
    type_info: Optional[Mapping[int, TypeInfo]] = None,
) -> tuple[MaterialLine, ...]:
    info = type_info or {}
    out: list[MaterialLine] = []
    for mat in materials:
        t = info.get(int(mat.type_id))
        out.append(
            MaterialLine(
                type_id=int(mat.type_id),
                type_name=t.type_name if t else str(mat.type_id),
                type_name_en=t.type_name_en if t else str(mat.type_id),
                icon_id=t.icon_id if t else None,
                base_quantity=int(mat.quantity),
                final_quantity=final_material_quantity(mat.quantity, material_multiplier, runs),
            )
        )
    return tuple(out)


def project_time(base_seconds_per_run: int, *, time_multiplier: float, runs: int) -> TimeRequirement:
    return TimeRequirement(
        base_seconds_per_run=int(base_seconds_per_run),
        final_seconds=float(base_seconds_per_run) * float(time_multiplier) * int(runs),
    )


def project_product(
    product: Optional[BlueprintProduct],
    *,
    runs: int,
    type_info: Optional[Mapping[int, TypeInfo]] = None,
) -> Optional[ProductOutput]:
    if product is None:
        return None
    t = (type_info or {}).get(int(product.type_id))
    return ProductOutput(
        type_id=int(product.type_id),
        type_name=t.type_name if t else str(product.type_id),
        icon_id=t.icon_id if t else None,
        quantity_per_run=int(product.quantity),
        total_quantity=int(product.quantity) * int(runs),
    )


def format_duration(seconds: float) -> str:
    """Format seconds as e.g. '1d 02:03:04' (fractions are rounded up)."""

    total = int(math.ceil(max(0.0, float(seconds))))
    days, rest = divmod(total, 86400)
    hours, rest = divmod(rest, 3600)
    minutes, secs = divmod(rest, 60)
    if days:
        return f"{days}d {hours:02d}:{minutes:02d}:{secs:02d}"
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"
