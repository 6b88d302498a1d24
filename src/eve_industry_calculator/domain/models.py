from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple

from eve_industry_calculator.domain.bonus import BonusMultiplier
from eve_industry_calculator.domain.industry import ActivityKind, SecurityClass


# --------------------------
# Static data
# --------------------------
@dataclass(frozen=True)
class BlueprintMaterial:
    type_id: int
    quantity: int  # per run, before any efficiency bonus


@dataclass(frozen=True)
class BlueprintProduct:
    type_id: int
    quantity: int  # per run


@dataclass(frozen=True)
class BlueprintSpec:
    blueprint_type_id: int
    activity: ActivityKind
    materials: Tuple[BlueprintMaterial, ...]
    time_seconds: int
    product: Optional[BlueprintProduct] = None
    required_skill_ids: Tuple[int, ...] = ()


@dataclass(frozen=True)
class TypeInfo:
    type_id: int
    type_name: str = ""
    type_name_en: str = ""
    icon_id: Optional[int] = None
    group_id: Optional[int] = None
    category_id: Optional[int] = None


@dataclass(frozen=True)
class SecurityModifiers:
    high_sec: float = 1.0
    low_sec: float = 1.0
    null_sec: float = 1.0

    def for_class(self, security_class: SecurityClass) -> float:
        if security_class is SecurityClass.HIGH_SEC:
            return self.high_sec
        if security_class is SecurityClass.LOW_SEC:
            return self.low_sec
        return self.null_sec


@dataclass(frozen=True)
class StructureAttributes:
    """Structure industry bonuses as percentage reductions (8.0 == 8 % less)."""

    material_percent: float = 0.0
    time_percent: float = 0.0
    # Multiplies the system cost index part of the job fee (1.0 == no reduction).
    tax_multiplier: float = 1.0
    security: SecurityModifiers = field(default_factory=SecurityModifiers)


@dataclass(frozen=True)
class RigAttributes:
    rig_type_id: int
    material_percent: float = 0.0
    time_percent: float = 0.0
    security: SecurityModifiers = field(default_factory=SecurityModifiers)


@dataclass(frozen=True)
class RigEligibility:
    """One product scope of a rig; 0 matches anything.

    A scope with an unknown (None) category or group never matches.
    """

    category_id: Optional[int] = 0
    group_id: Optional[int] = 0

    def matches(self, *, category_id: Optional[int], group_id: Optional[int]) -> bool:
        if self.category_id is None or self.group_id is None:
            return False
        category_ok = self.category_id == 0 or self.category_id == category_id
        group_ok = self.group_id == 0 or self.group_id == group_id
        return category_ok and group_ok


# --------------------------
# Request
# --------------------------
def _whole_number(name: str, value: Any) -> int:
    """int(value), refusing fractional floats such as 2.5."""

    try:
        number = int(value)
    except (TypeError, ValueError, OverflowError):
        raise ValueError(f"'{name}' must be an integer, got {value!r}")
    if isinstance(value, float) and number != value:
        raise ValueError(f"'{name}' must be a whole number, got {value}")
    return number


@dataclass(frozen=True)
class FacilityConfig:
    solar_system_id: int
    structure_type_id: Optional[int] = None
    rig_type_ids: Tuple[int, ...] = ()
    tax_rate: float = 0.0  # fraction, 0.01 == 1 %

    def __post_init__(self) -> None:
        object.__setattr__(self, "rig_type_ids", tuple(int(r) for r in self.rig_type_ids if r))
        if not 0.0 <= float(self.tax_rate) <= 1.0:
            raise ValueError(f"Facility tax rate must be a fraction between 0 and 1, got {self.tax_rate}")


@dataclass(frozen=True)
class CalculationRequest:
    blueprint_type_id: int
    facility: FacilityConfig
    runs: int = 1
    material_efficiency: int = 0
    time_efficiency: int = 0
    character_skills: Mapping[int, int] = field(default_factory=dict)
    is_reaction: bool = False

    def __post_init__(self) -> None:
        for name in ("blueprint_type_id", "runs", "material_efficiency", "time_efficiency"):
            object.__setattr__(self, name, _whole_number(name, getattr(self, name)))
        object.__setattr__(self, "is_reaction", bool(self.is_reaction))
        if self.runs < 1:
            raise ValueError(f"Runs must be at least 1, got {self.runs}")
        if not 0 <= self.material_efficiency <= 100:
            raise ValueError(f"Material efficiency must be between 0 and 100, got {self.material_efficiency}")
        if not 0 <= self.time_efficiency <= 100:
            raise ValueError(f"Time efficiency must be between 0 and 100, got {self.time_efficiency}")
        skills = {int(k): int(v) for k, v in dict(self.character_skills or {}).items()}
        object.__setattr__(self, "character_skills", skills)

    @property
    def activity(self) -> ActivityKind:
        return ActivityKind.from_is_reaction(self.is_reaction)

    def skill_level(self, skill_id: int) -> int:
        return int(self.character_skills.get(int(skill_id), 0))

    @staticmethod
    def from_payload(payload: Mapping[str, Any]) -> "CalculationRequest":
        """Build a request from a JSON-like mapping.

        Raises ValueError for missing or malformed fields.
        """

        if not isinstance(payload, Mapping):
            raise ValueError("Request payload must be an object")

        def _required_int(key: str) -> int:
            raw = payload.get(key)
            if raw is None:
                raise ValueError(f"'{key}' is required")
            return _whole_number(key, raw)

        def _optional_int(key: str, default: int) -> int:
            raw = payload.get(key)
            if raw is None:
                return default
            return _whole_number(key, raw)

        raw_skills = payload.get("character_skills") or {}
        if not isinstance(raw_skills, Mapping):
            raise ValueError("'character_skills' must be an object of skill_id -> level")
        try:
            skills = {int(k): int(v) for k, v in raw_skills.items()}
        except (TypeError, ValueError):
            raise ValueError("'character_skills' keys and levels must be integers")

        raw_rigs = payload.get("rig_type_ids") or []
        if not isinstance(raw_rigs, (list, tuple)):
            raise ValueError("'rig_type_ids' must be a list")
        try:
            rigs = tuple(int(r) for r in raw_rigs)
        except (TypeError, ValueError):
            raise ValueError("'rig_type_ids' must contain integers")

        try:
            tax_rate = float(payload.get("facility_tax") or 0.0)
        except (TypeError, ValueError):
            raise ValueError("'facility_tax' must be a number")

        is_reaction = payload.get("is_reaction", False)
        if is_reaction is None:
            is_reaction = False
        if not isinstance(is_reaction, bool):
            raise ValueError("'is_reaction' must be a boolean")

        structure_type_id = payload.get("structure_type_id")
        facility = FacilityConfig(
            solar_system_id=_required_int("solar_system_id"),
            structure_type_id=int(structure_type_id) if structure_type_id else None,
            rig_type_ids=rigs,
            tax_rate=tax_rate,
        )

        return CalculationRequest(
            blueprint_type_id=_required_int("blueprint_type_id"),
            facility=facility,
            runs=_optional_int("runs", 1),
            material_efficiency=_optional_int("material_efficiency", 0),
            time_efficiency=_optional_int("time_efficiency", 0),
            character_skills=skills,
            is_reaction=is_reaction,
        )


# --------------------------
# Result
# --------------------------
@dataclass(frozen=True)
class MaterialLine:
    type_id: int
    type_name: str
    type_name_en: str
    icon_id: Optional[int]
    base_quantity: int
    final_quantity: int

    @property
    def unscalable(self) -> bool:
        # Single-unit inputs are exempt from efficiency bonuses.
        return self.base_quantity == 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type_id": self.type_id,
            "type_name": self.type_name,
            "type_name_en": self.type_name_en,
            "icon_id": self.icon_id,
            "base_quantity": self.base_quantity,
            "final_quantity": self.final_quantity,
            "unscalable": self.unscalable,
        }


@dataclass(frozen=True)
class TimeRequirement:
    base_seconds_per_run: int
    final_seconds: float

    def to_dict(self) -> Dict[str, Any]:
        return {"base_seconds_per_run": self.base_seconds_per_run, "final_seconds": self.final_seconds}


@dataclass(frozen=True)
class ProductOutput:
    type_id: int
    type_name: str
    icon_id: Optional[int]
    quantity_per_run: int
    total_quantity: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type_id": self.type_id,
            "type_name": self.type_name,
            "icon_id": self.icon_id,
            "quantity_per_run": self.quantity_per_run,
            "total_quantity": self.total_quantity,
        }


@dataclass(frozen=True)
class BonusBreakdown:
    structure: BonusMultiplier = field(default_factory=BonusMultiplier)
    rigs: BonusMultiplier = field(default_factory=BonusMultiplier)
    blueprint: BonusMultiplier = field(default_factory=BonusMultiplier)
    skills: BonusMultiplier = field(default_factory=BonusMultiplier)
    security_class: Optional[SecurityClass] = None
    eligible_rig_type_ids: Tuple[int, ...] = ()
    structure_tax_multiplier: float = 1.0

    @property
    def total(self) -> BonusMultiplier:
        return self.structure * self.rigs * self.blueprint * self.skills

    def to_dict(self) -> Dict[str, Any]:
        return {
            "structure": self.structure.to_dict(),
            "rigs": self.rigs.to_dict(),
            "blueprint": self.blueprint.to_dict(),
            "skills": self.skills.to_dict(),
            "total": self.total.to_dict(),
            "security_class": self.security_class.value if self.security_class else None,
            "eligible_rig_type_ids": list(self.eligible_rig_type_ids),
            "structure_tax_multiplier": self.structure_tax_multiplier,
        }


@dataclass(frozen=True)
class JobCost:
    eiv: float
    cost_index: float
    structure_tax_multiplier: float
    coefficient_tax: float
    building_and_scc_tax: float
    facility_cost_per_run: float
    facility_cost: float

    @property
    def total_cost(self) -> float:
        # Single-run EIV plus run-scaled fees; EIV here is a tax basis.
        return self.eiv + self.facility_cost

    def to_dict(self) -> Dict[str, Any]:
        return {
            "eiv": self.eiv,
            "cost_index": self.cost_index,
            "structure_tax_multiplier": self.structure_tax_multiplier,
            "coefficient_tax": self.coefficient_tax,
            "building_and_scc_tax": self.building_and_scc_tax,
            "facility_cost_per_run": self.facility_cost_per_run,
            "facility_cost": self.facility_cost,
            "total_cost": self.total_cost,
        }


@dataclass(frozen=True)
class CalculationResult:
    success: bool
    materials: Tuple[MaterialLine, ...] = ()
    time: TimeRequirement = field(default_factory=lambda: TimeRequirement(0, 0.0))
    facility_cost: float = 0.0
    total_cost: float = 0.0
    product: Optional[ProductOutput] = None
    error_message: Optional[str] = None
    bonuses: Optional[BonusBreakdown] = None
    job_cost: Optional[JobCost] = None

    @staticmethod
    def failure(message: str) -> "CalculationResult":
        return CalculationResult(success=False, error_message=message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "error_message": self.error_message,
            "materials": [m.to_dict() for m in self.materials],
            "time": self.time.to_dict(),
            "facility_cost": self.facility_cost,
            "total_cost": self.total_cost,
            "product": self.product.to_dict() if self.product else None,
            "bonuses": self.bonuses.to_dict() if self.bonuses else None,
            "job_cost": self.job_cost.to_dict() if self.job_cost else None,
        }
