from __future__ import annotations

import logging
from typing import Iterable, Optional

from eve_industry_calculator.application.ports import AttributeStore
from eve_industry_calculator.domain.bonus import BonusMultiplier
from eve_industry_calculator.domain.industry import ActivityKind, SecurityClass, UNIVERSAL_MANUFACTURING_SKILL_IDS
from eve_industry_calculator.domain.models import (
    BlueprintSpec,
    BonusBreakdown,
    CalculationRequest,
    RigAttributes,
    SecurityModifiers,
    StructureAttributes,
    TypeInfo,
)
from eve_industry_calculator.domain.security import classify_security


def _coefficient(modifiers: SecurityModifiers, security_class: Optional[SecurityClass]) -> float:
    if security_class is None:
        return 1.0
    return float(modifiers.for_class(security_class))


def structure_multiplier(attrs: StructureAttributes, security_class: Optional[SecurityClass]) -> BonusMultiplier:
    coef = _coefficient(attrs.security, security_class)
    return BonusMultiplier.from_percent_reduction(
        material_percent=attrs.material_percent * coef,
        time_percent=attrs.time_percent * coef,
    )


def rig_multiplier(attrs: RigAttributes, security_class: Optional[SecurityClass]) -> BonusMultiplier:
    coef = _coefficient(attrs.security, security_class)
    return BonusMultiplier(
        material=1.0 - abs(attrs.material_percent * coef) / 100.0,
        time=1.0 - abs(attrs.time_percent * coef) / 100.0,
    )


def skill_multiplier(percent_per_level: float, level: int) -> BonusMultiplier:
    # Skill bonuses are negative percentages per level (e.g. -4.0).
    return BonusMultiplier(time=1.0 + (float(percent_per_level) * int(level)) / 100.0)


class BonusResolver:
    """Resolve structure, rig, blueprint and skill multipliers for one request.

    Missing attribute rows contribute the identity multiplier; the resolver
    itself never raises for incomplete static data.
    """

    def __init__(self, store: AttributeStore):
        self._store = store

    def resolve_security_class(self, solar_system_id: int) -> Optional[SecurityClass]:
        true_security = self._store.get_system_security(int(solar_system_id))
        if true_security is None:
            logging.warning(
                "No security status for solar system %s; applying facility bonuses unattenuated",
                solar_system_id,
            )
            return None
        return classify_security(float(true_security))

    def resolve_product_info(self, blueprint: BlueprintSpec) -> Optional[TypeInfo]:
        if blueprint.product is None:
            return None
        return self._store.get_type_info([blueprint.product.type_id]).get(int(blueprint.product.type_id))

    def eligible_rigs(self, rig_type_ids: Iterable[int], product_info: Optional[TypeInfo]) -> tuple[int, ...]:
        rig_ids = [int(r) for r in rig_type_ids if r]
        if not rig_ids:
            return ()
        if product_info is None or product_info.category_id is None or product_info.group_id is None:
            logging.debug("Product category/group unknown; no rig is eligible")
            return ()

        out: list[int] = []
        for rig_id in rig_ids:
            records = self._store.get_rig_eligibility(rig_id)
            if not records or any(
                rec.matches(category_id=product_info.category_id, group_id=product_info.group_id) for rec in records
            ):
                out.append(rig_id)
            else:
                logging.debug(
                    "Rig %s does not apply to product %s (category=%s group=%s)",
                    rig_id,
                    product_info.type_id,
                    product_info.category_id,
                    product_info.group_id,
                )
        return tuple(out)

    def structure_bonus(
        self,
        structure_type_id: Optional[int],
        activity: ActivityKind,
        security_class: Optional[SecurityClass],
    ) -> tuple[BonusMultiplier, float]:
        """Return (multiplier, tax multiplier) for the facility's structure."""

        if not structure_type_id:
            return BonusMultiplier.identity(), 1.0
        attrs = self._store.get_structure_attributes(int(structure_type_id), activity)
        if attrs is None:
            logging.debug("No industry attributes for structure %s", structure_type_id)
            return BonusMultiplier.identity(), 1.0
        return structure_multiplier(attrs, security_class), float(attrs.tax_multiplier)

    def rig_bonus(
        self,
        eligible_rig_ids: Iterable[int],
        activity: ActivityKind,
        security_class: Optional[SecurityClass],
    ) -> BonusMultiplier:
        ids = list(eligible_rig_ids)
        if not ids:
            return BonusMultiplier.identity()
        rigs = self._store.get_rig_attributes(ids, activity)
        return BonusMultiplier.compose(rig_multiplier(r, security_class) for r in rigs)

    def skill_bonus(self, request: CalculationRequest, blueprint: BlueprintSpec) -> BonusMultiplier:
        skill_ids = set(blueprint.required_skill_ids)
        if request.activity is ActivityKind.MANUFACTURING:
            skill_ids |= UNIVERSAL_MANUFACTURING_SKILL_IDS

        out = BonusMultiplier.identity()
        for skill_id in sorted(skill_ids):
            level = request.skill_level(skill_id)
            if level <= 0:
                continue
            per_level = self._store.get_skill_time_bonus(skill_id, request.activity)
            if per_level is None:
                continue
            out = out * skill_multiplier(per_level, level)
            logging.debug("Skill %s level %s: %.2f%% per level", skill_id, level, per_level)
        return out

    def resolve(self, request: CalculationRequest, blueprint: BlueprintSpec) -> BonusBreakdown:
        activity = request.activity
        facility = request.facility

        security_class = self.resolve_security_class(facility.solar_system_id)
        structure, tax_multiplier = self.structure_bonus(facility.structure_type_id, activity, security_class)

        product_info = self.resolve_product_info(blueprint)
        eligible = self.eligible_rigs(facility.rig_type_ids, product_info)
        rigs = self.rig_bonus(eligible, activity, security_class)

        own = BonusMultiplier.from_percent_reduction(
            material_percent=float(request.material_efficiency),
            time_percent=float(request.time_efficiency),
        )
        skills = self.skill_bonus(request, blueprint)

        breakdown = BonusBreakdown(
            structure=structure,
            rigs=rigs,
            blueprint=own,
            # Skills only ever touch the time axis.
            skills=BonusMultiplier(time=skills.time),
            security_class=security_class,
            eligible_rig_type_ids=eligible,
            structure_tax_multiplier=tax_multiplier,
        )

        total = breakdown.total
        logging.debug(
            "Bonuses for blueprint %s (%s, security=%s): structure=%s rigs=%s blueprint=%s skills=%s total=%s",
            blueprint.blueprint_type_id,
            activity.value,
            security_class.value if security_class else "unknown",
            structure.to_dict(),
            rigs.to_dict(),
            own.to_dict(),
            skills.to_dict(),
            total.to_dict(),
        )
        return breakdown
