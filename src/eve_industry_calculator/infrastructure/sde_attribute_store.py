from __future__ import annotations

import logging
from typing import Iterable, Optional

from eve_industry_calculator.domain.industry import ActivityKind, BonusAxis, SecurityClass
from eve_industry_calculator.domain.models import (
    BlueprintMaterial,
    BlueprintProduct,
    RigAttributes,
    RigEligibility,
    SecurityModifiers,
    StructureAttributes,
    TypeInfo,
)
from eve_industry_calculator.infrastructure.sde.blueprints import (
    get_blueprint_activity,
    parse_materials,
    parse_product,
    parse_required_skills,
    parse_time,
)
from eve_industry_calculator.infrastructure.sde.dogma import (
    SECURITY_MODIFIER_ATTRIBUTE_IDS,
    load_dogma_attributes,
    rig_attribute_id,
    skill_time_attribute_id,
    structure_attribute_id,
)
from eve_industry_calculator.infrastructure.sde.models import MapSolarSystems
from eve_industry_calculator.infrastructure.sde.rig_effects import get_rig_eligibility
from eve_industry_calculator.infrastructure.sde.types import get_type_info
from eve_industry_calculator.infrastructure.session_provider import SessionProvider


def _security_modifiers(attrs: dict[int, float]) -> SecurityModifiers:
    return SecurityModifiers(
        high_sec=float(attrs.get(SECURITY_MODIFIER_ATTRIBUTE_IDS[SecurityClass.HIGH_SEC], 1.0)),
        low_sec=float(attrs.get(SECURITY_MODIFIER_ATTRIBUTE_IDS[SecurityClass.LOW_SEC], 1.0)),
        null_sec=float(attrs.get(SECURITY_MODIFIER_ATTRIBUTE_IDS[SecurityClass.NULL_SEC_OR_WORMHOLE], 1.0)),
    )


class SdeAttributeStore:
    """AttributeStore over the SDE SQLite database.

    Structure bonuses are stored as multipliers (0.99) and rig bonuses as
    signed percentages (-2.0); both are exposed as positive percentage
    reductions.
    """

    def __init__(self, sessions: SessionProvider, *, language: str = "en"):
        self._sessions = sessions
        self._language = language

    def _dogma(self, type_ids: Iterable[int]) -> dict[int, dict[int, float]]:
        with self._sessions.sde_session() as session:
            return load_dogma_attributes(session, type_ids)

    def _blueprint_block(self, blueprint_type_id: int, activity: ActivityKind) -> Optional[dict]:
        with self._sessions.sde_session() as session:
            return get_blueprint_activity(session, blueprint_type_id, activity)

    def get_structure_attributes(self, structure_type_id: int, activity: ActivityKind) -> Optional[StructureAttributes]:
        attrs = self._dogma([structure_type_id]).get(int(structure_type_id))
        if attrs is None:
            return None

        def _percent(axis: BonusAxis) -> float:
            aid = structure_attribute_id(activity, axis)
            if aid is None or aid not in attrs:
                return 0.0
            return (1.0 - float(attrs[aid])) * 100.0

        tax_id = structure_attribute_id(activity, BonusAxis.TAX)
        tax_multiplier = float(attrs.get(tax_id, 1.0)) if tax_id is not None else 1.0

        return StructureAttributes(
            material_percent=_percent(BonusAxis.MATERIAL),
            time_percent=_percent(BonusAxis.TIME),
            tax_multiplier=tax_multiplier,
            security=_security_modifiers(attrs),
        )

    def get_rig_attributes(self, rig_type_ids: Iterable[int], activity: ActivityKind) -> list[RigAttributes]:
        ids = [int(r) for r in rig_type_ids if r]
        dogma = self._dogma(ids)
        material_id = rig_attribute_id(activity, BonusAxis.MATERIAL)
        time_id = rig_attribute_id(activity, BonusAxis.TIME)

        out: list[RigAttributes] = []
        for rid in ids:
            attrs = dogma.get(rid)
            if attrs is None:
                logging.debug("No dogma attributes for rig %s", rid)
                continue
            out.append(
                RigAttributes(
                    rig_type_id=rid,
                    material_percent=abs(float(attrs.get(material_id, 0.0))) if material_id is not None else 0.0,
                    time_percent=abs(float(attrs.get(time_id, 0.0))) if time_id is not None else 0.0,
                    security=_security_modifiers(attrs),
                )
            )
        return out

    def get_rig_eligibility(self, rig_type_id: int) -> list[RigEligibility]:
        with self._sessions.sde_session() as session:
            return get_rig_eligibility(session, [rig_type_id]).get(int(rig_type_id), [])

    def get_blueprint_required_skills(self, blueprint_type_id: int, activity: ActivityKind) -> list[int]:
        return parse_required_skills(self._blueprint_block(blueprint_type_id, activity))

    def get_skill_time_bonus(self, skill_id: int, activity: ActivityKind) -> Optional[float]:
        attrs = self._dogma([skill_id]).get(int(skill_id))
        if attrs is None:
            return None
        value = attrs.get(skill_time_attribute_id(skill_id, activity))
        return float(value) if value is not None else None

    def get_blueprint_materials(self, blueprint_type_id: int, activity: ActivityKind) -> list[BlueprintMaterial]:
        return parse_materials(self._blueprint_block(blueprint_type_id, activity))

    def get_blueprint_time(self, blueprint_type_id: int, activity: ActivityKind) -> Optional[int]:
        return parse_time(self._blueprint_block(blueprint_type_id, activity))

    def get_blueprint_product(self, blueprint_type_id: int, activity: ActivityKind) -> Optional[BlueprintProduct]:
        return parse_product(self._blueprint_block(blueprint_type_id, activity))

    def get_system_security(self, solar_system_id: int) -> Optional[float]:
        with self._sessions.sde_session() as session:
            row = session.query(MapSolarSystems.securityStatus).filter(MapSolarSystems.id == int(solar_system_id)).first()
        if row is None or row[0] is None:
            return None
        return float(row[0])

    def get_type_info(self, type_ids: Iterable[int]) -> dict[int, TypeInfo]:
        with self._sessions.sde_session() as session:
            return get_type_info(session, self._language, type_ids)
