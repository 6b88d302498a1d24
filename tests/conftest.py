from __future__ import annotations

from typing import Any, Iterable, Optional

import pytest

from eve_industry_calculator.domain.industry import ActivityKind
from eve_industry_calculator.domain.models import (
    BlueprintMaterial,
    BlueprintProduct,
    CalculationRequest,
    FacilityConfig,
    RigAttributes,
    RigEligibility,
    StructureAttributes,
    TypeInfo,
)
from eve_industry_calculator.infrastructure.sde.rig_effects import clear_rig_eligibility_cache


class InMemoryAttributeStore:
    """AttributeStore backed by plain dicts."""

    def __init__(self) -> None:
        self.structures: dict[tuple[int, ActivityKind], StructureAttributes] = {}
        self.rigs: dict[tuple[int, ActivityKind], RigAttributes] = {}
        self.rig_eligibility: dict[int, list[RigEligibility]] = {}
        self.blueprints: dict[tuple[int, ActivityKind], dict[str, Any]] = {}
        self.skill_bonuses: dict[tuple[int, ActivityKind], float] = {}
        self.security: dict[int, float] = {}
        self.types: dict[int, TypeInfo] = {}

    # --- builders ---
    def add_blueprint(
        self,
        blueprint_type_id: int,
        *,
        materials: Iterable[tuple[int, int]],
        time_seconds: Optional[int] = 3600,
        product: Optional[tuple[int, int]] = None,
        skills: Iterable[int] = (),
        activity: ActivityKind = ActivityKind.MANUFACTURING,
    ) -> None:
        self.blueprints[(blueprint_type_id, activity)] = {
            "materials": [BlueprintMaterial(type_id=t, quantity=q) for t, q in materials],
            "time": time_seconds,
            "product": BlueprintProduct(type_id=product[0], quantity=product[1]) if product else None,
            "skills": list(skills),
        }

    def add_type(self, type_id: int, name: str = "", *, group_id: Optional[int] = None, category_id: Optional[int] = None) -> None:
        self.types[type_id] = TypeInfo(
            type_id=type_id,
            type_name=name or str(type_id),
            type_name_en=name or str(type_id),
            icon_id=None,
            group_id=group_id,
            category_id=category_id,
        )

    # --- AttributeStore ---
    def get_structure_attributes(self, structure_type_id, activity):
        return self.structures.get((int(structure_type_id), activity))

    def get_rig_attributes(self, rig_type_ids, activity):
        return [self.rigs[(int(r), activity)] for r in rig_type_ids if (int(r), activity) in self.rigs]

    def get_rig_eligibility(self, rig_type_id):
        return list(self.rig_eligibility.get(int(rig_type_id), []))

    def get_blueprint_required_skills(self, blueprint_type_id, activity):
        bp = self.blueprints.get((int(blueprint_type_id), activity))
        return list(bp["skills"]) if bp else []

    def get_skill_time_bonus(self, skill_id, activity):
        return self.skill_bonuses.get((int(skill_id), activity))

    def get_blueprint_materials(self, blueprint_type_id, activity):
        bp = self.blueprints.get((int(blueprint_type_id), activity))
        return list(bp["materials"]) if bp else []

    def get_blueprint_time(self, blueprint_type_id, activity):
        bp = self.blueprints.get((int(blueprint_type_id), activity))
        return bp["time"] if bp else None

    def get_blueprint_product(self, blueprint_type_id, activity):
        bp = self.blueprints.get((int(blueprint_type_id), activity))
        return bp["product"] if bp else None

    def get_system_security(self, solar_system_id):
        return self.security.get(int(solar_system_id))

    def get_type_info(self, type_ids):
        return {int(t): self.types[int(t)] for t in type_ids if int(t) in self.types}


HIGH_SEC_SYSTEM = 30000142
LOW_SEC_SYSTEM = 30002813
NULL_SEC_SYSTEM = 30004759


@pytest.fixture(autouse=True)
def _clear_rig_cache():
    clear_rig_eligibility_cache()
    yield
    clear_rig_eligibility_cache()


@pytest.fixture
def store() -> InMemoryAttributeStore:
    s = InMemoryAttributeStore()
    s.security[HIGH_SEC_SYSTEM] = 0.9459
    s.security[LOW_SEC_SYSTEM] = 0.3
    s.security[NULL_SEC_SYSTEM] = -0.45
    return s


@pytest.fixture
def make_request():
    def _make(
        blueprint_type_id: int = 1000,
        *,
        runs: int = 1,
        me: int = 0,
        te: int = 0,
        system_id: int = HIGH_SEC_SYSTEM,
        structure_type_id: Optional[int] = None,
        rig_type_ids: tuple[int, ...] = (),
        tax_rate: float = 0.0,
        skills: Optional[dict[int, int]] = None,
        is_reaction: bool = False,
    ) -> CalculationRequest:
        return CalculationRequest(
            blueprint_type_id=blueprint_type_id,
            facility=FacilityConfig(
                solar_system_id=system_id,
                structure_type_id=structure_type_id,
                rig_type_ids=rig_type_ids,
                tax_rate=tax_rate,
            ),
            runs=runs,
            material_efficiency=me,
            time_efficiency=te,
            character_skills=skills or {},
            is_reaction=is_reaction,
        )

    return _make
