from __future__ import annotations

import logging

import pytest

from eve_industry_calculator.application.industry.bonuses import BonusResolver
from eve_industry_calculator.domain.industry import (
    SKILL_ADVANCED_INDUSTRY,
    SKILL_INDUSTRY,
    ActivityKind,
    SecurityClass,
)
from eve_industry_calculator.domain.models import (
    BlueprintMaterial,
    BlueprintProduct,
    BlueprintSpec,
    RigAttributes,
    RigEligibility,
    SecurityModifiers,
    StructureAttributes,
)


STRUCTURE_ID = 35827  # Sotiyo
RIG_ID = 37180
OTHER_RIG_ID = 43920
PRODUCT_ID = 587
BLUEPRINT_ID = 1000
SHIP_CATEGORY = 6
FRIGATE_GROUP = 25


def _blueprint(*, skills=(), activity=ActivityKind.MANUFACTURING, product=True) -> BlueprintSpec:
    return BlueprintSpec(
        blueprint_type_id=BLUEPRINT_ID,
        activity=activity,
        materials=(BlueprintMaterial(34, 100),),
        time_seconds=3600,
        product=BlueprintProduct(PRODUCT_ID, 1) if product else None,
        required_skill_ids=tuple(skills),
    )


@pytest.fixture
def facility_store(store):
    store.add_type(PRODUCT_ID, "Rifter", group_id=FRIGATE_GROUP, category_id=SHIP_CATEGORY)
    store.structures[(STRUCTURE_ID, ActivityKind.MANUFACTURING)] = StructureAttributes(
        material_percent=1.0,
        time_percent=30.0,
        tax_multiplier=0.95,
        security=SecurityModifiers(high_sec=1.0, low_sec=1.9, null_sec=2.1),
    )
    store.rigs[(RIG_ID, ActivityKind.MANUFACTURING)] = RigAttributes(
        rig_type_id=RIG_ID,
        material_percent=2.0,
        time_percent=20.0,
        security=SecurityModifiers(high_sec=1.0, low_sec=1.9, null_sec=2.1),
    )
    return store


def test_no_facility_bonuses_is_identity(store, make_request) -> None:
    resolver = BonusResolver(store)
    breakdown = resolver.resolve(make_request(), _blueprint())

    assert breakdown.total.is_identity()
    assert breakdown.security_class is SecurityClass.HIGH_SEC
    assert breakdown.structure_tax_multiplier == 1.0


def test_blueprint_me_te(store, make_request) -> None:
    breakdown = BonusResolver(store).resolve(make_request(me=10, te=20), _blueprint())
    assert breakdown.blueprint.material == pytest.approx(0.9)
    assert breakdown.blueprint.time == pytest.approx(0.8)
    assert breakdown.total.material == pytest.approx(0.9)


@pytest.mark.parametrize(
    "system_id,coef",
    [(30000142, 1.0), (30002813, 1.9), (30004759, 2.1)],
)
def test_structure_bonus_is_scaled_by_security(facility_store, make_request, system_id, coef) -> None:
    req = make_request(system_id=system_id, structure_type_id=STRUCTURE_ID)
    breakdown = BonusResolver(facility_store).resolve(req, _blueprint())

    assert breakdown.structure.material == pytest.approx(1.0 - 1.0 * coef / 100.0)
    assert breakdown.structure.time == pytest.approx(1.0 - 30.0 * coef / 100.0)
    assert breakdown.structure_tax_multiplier == pytest.approx(0.95)


def test_unknown_system_security_applies_bonuses_unattenuated(facility_store, make_request, caplog) -> None:
    req = make_request(system_id=31000001, structure_type_id=STRUCTURE_ID, rig_type_ids=(RIG_ID,))
    with caplog.at_level(logging.WARNING):
        breakdown = BonusResolver(facility_store).resolve(req, _blueprint())

    assert breakdown.security_class is None
    assert breakdown.structure.material == pytest.approx(0.99)
    assert breakdown.rigs.material == pytest.approx(0.98)
    assert "31000001" in caplog.text


def test_missing_structure_attributes_default_to_identity(store, make_request) -> None:
    breakdown = BonusResolver(store).resolve(make_request(structure_type_id=99999), _blueprint())
    assert breakdown.structure.is_identity()
    assert breakdown.structure_tax_multiplier == 1.0


def test_rig_bonus_in_low_sec(facility_store, make_request) -> None:
    req = make_request(system_id=30002813, rig_type_ids=(RIG_ID,))
    breakdown = BonusResolver(facility_store).resolve(req, _blueprint())

    assert breakdown.eligible_rig_type_ids == (RIG_ID,)
    assert breakdown.rigs.material == pytest.approx(1.0 - 2.0 * 1.9 / 100.0)
    assert breakdown.rigs.time == pytest.approx(1.0 - 20.0 * 1.9 / 100.0)


def test_rig_without_eligibility_records_applies_to_everything(facility_store, make_request) -> None:
    breakdown = BonusResolver(facility_store).resolve(make_request(rig_type_ids=(RIG_ID,)), _blueprint())
    assert breakdown.eligible_rig_type_ids == (RIG_ID,)


def test_rig_restricted_to_other_group_contributes_nothing(facility_store, make_request) -> None:
    facility_store.rig_eligibility[RIG_ID] = [RigEligibility(category_id=SHIP_CATEGORY, group_id=26)]
    breakdown = BonusResolver(facility_store).resolve(make_request(rig_type_ids=(RIG_ID,)), _blueprint())

    assert breakdown.eligible_rig_type_ids == ()
    assert breakdown.rigs.is_identity()


def test_rig_eligibility_wildcards(facility_store, make_request) -> None:
    facility_store.rig_eligibility[RIG_ID] = [
        RigEligibility(category_id=7, group_id=0),
        RigEligibility(category_id=SHIP_CATEGORY, group_id=0),
    ]
    breakdown = BonusResolver(facility_store).resolve(make_request(rig_type_ids=(RIG_ID,)), _blueprint())
    assert breakdown.eligible_rig_type_ids == (RIG_ID,)


def test_rig_scope_with_unknown_columns_never_matches(facility_store, make_request) -> None:
    facility_store.rig_eligibility[RIG_ID] = [RigEligibility(category_id=SHIP_CATEGORY, group_id=None)]
    breakdown = BonusResolver(facility_store).resolve(make_request(rig_type_ids=(RIG_ID,)), _blueprint())

    assert breakdown.eligible_rig_type_ids == ()
    assert breakdown.rigs.is_identity()


def test_no_rig_is_eligible_without_a_product(facility_store, make_request) -> None:
    breakdown = BonusResolver(facility_store).resolve(
        make_request(rig_type_ids=(RIG_ID,)), _blueprint(product=False)
    )
    assert breakdown.eligible_rig_type_ids == ()
    assert breakdown.rigs.is_identity()


def test_rigs_compose_multiplicatively_and_missing_rows_are_identity(facility_store, make_request) -> None:
    facility_store.rigs[(OTHER_RIG_ID, ActivityKind.MANUFACTURING)] = RigAttributes(
        rig_type_id=OTHER_RIG_ID, material_percent=2.4, time_percent=0.0
    )
    req = make_request(rig_type_ids=(RIG_ID, OTHER_RIG_ID, 123456))
    breakdown = BonusResolver(facility_store).resolve(req, _blueprint())

    assert breakdown.rigs.material == pytest.approx(0.98 * 0.976)
    assert breakdown.rigs.time == pytest.approx(0.80)


def test_universal_skills_apply_to_manufacturing(store, make_request) -> None:
    store.skill_bonuses[(SKILL_INDUSTRY, ActivityKind.MANUFACTURING)] = -4.0
    store.skill_bonuses[(SKILL_ADVANCED_INDUSTRY, ActivityKind.MANUFACTURING)] = -3.0
    req = make_request(skills={SKILL_INDUSTRY: 5, SKILL_ADVANCED_INDUSTRY: 5})

    breakdown = BonusResolver(store).resolve(req, _blueprint())

    assert breakdown.skills.time == pytest.approx(0.80 * 0.85)
    assert breakdown.skills.material == 1.0
    assert breakdown.total.material == 1.0


def test_required_skill_bonus(store, make_request) -> None:
    store.skill_bonuses[(3395, ActivityKind.MANUFACTURING)] = -1.0
    req = make_request(skills={3395: 4})
    breakdown = BonusResolver(store).resolve(req, _blueprint(skills=(3395,)))
    assert breakdown.skills.time == pytest.approx(0.96)


def test_universal_skills_never_apply_to_reactions(store, make_request) -> None:
    store.skill_bonuses[(SKILL_INDUSTRY, ActivityKind.REACTION)] = -4.0
    store.skill_bonuses[(45746, ActivityKind.REACTION)] = -4.0
    req = make_request(is_reaction=True, skills={SKILL_INDUSTRY: 5, 45746: 5})

    breakdown = BonusResolver(store).resolve(req, _blueprint(skills=(45746,), activity=ActivityKind.REACTION))

    assert breakdown.skills.time == pytest.approx(0.80)


def test_untrained_skills_do_nothing(store, make_request) -> None:
    store.skill_bonuses[(SKILL_INDUSTRY, ActivityKind.MANUFACTURING)] = -4.0
    breakdown = BonusResolver(store).resolve(make_request(), _blueprint())
    assert breakdown.skills.is_identity()
