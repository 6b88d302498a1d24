from __future__ import annotations

from typing import Iterable, Optional, Protocol

from eve_industry_calculator.domain.industry import ActivityKind
from eve_industry_calculator.domain.models import (
    BlueprintMaterial,
    BlueprintProduct,
    RigAttributes,
    RigEligibility,
    StructureAttributes,
    TypeInfo,
)


class AttributeStore(Protocol):
    """Read-only static game data used by the calculator.

    Missing rows are reported as None / empty collections, never raised.
    """

    def get_structure_attributes(self, structure_type_id: int, activity: ActivityKind) -> Optional[StructureAttributes]: ...

    def get_rig_attributes(self, rig_type_ids: Iterable[int], activity: ActivityKind) -> list[RigAttributes]: ...

    def get_rig_eligibility(self, rig_type_id: int) -> list[RigEligibility]: ...

    def get_blueprint_required_skills(self, blueprint_type_id: int, activity: ActivityKind) -> list[int]: ...

    def get_skill_time_bonus(self, skill_id: int, activity: ActivityKind) -> Optional[float]: ...

    def get_blueprint_materials(self, blueprint_type_id: int, activity: ActivityKind) -> list[BlueprintMaterial]: ...

    def get_blueprint_time(self, blueprint_type_id: int, activity: ActivityKind) -> Optional[int]: ...

    def get_blueprint_product(self, blueprint_type_id: int, activity: ActivityKind) -> Optional[BlueprintProduct]: ...

    def get_system_security(self, solar_system_id: int) -> Optional[float]: ...

    def get_type_info(self, type_ids: Iterable[int]) -> dict[int, TypeInfo]: ...


class MarketDataSource(Protocol):
    async def get_market_prices(self, type_ids: Iterable[int]) -> dict[int, float]: ...

    async def get_system_cost_index(self, solar_system_id: int, activity: ActivityKind) -> Optional[float]: ...
