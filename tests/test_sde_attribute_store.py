from __future__ import annotations

import pytest
from sqlalchemy.pool import StaticPool

from eve_industry_calculator.domain.industry import ActivityKind
from eve_industry_calculator.domain.models import RigEligibility
from eve_industry_calculator.infrastructure.sde.dogma import skill_time_attribute_id
from eve_industry_calculator.infrastructure.sde.models import (
    BaseSde,
    Blueprints,
    FacilityRigEffects,
    Groups,
    MapSolarSystems,
    TypeDogma,
    Types,
)
from eve_industry_calculator.infrastructure.sde_attribute_store import SdeAttributeStore
from eve_industry_calculator.infrastructure.session_provider import SdeDatabase


RAITARU = 35825
ME_RIG = 37146
TE_RIG = 37147
REACTION_RIG = 46484
NULL_SCOPE_RIG = 43891


def _dogma(type_id: int, attrs: dict[int, float]) -> TypeDogma:
    return TypeDogma(id=type_id, dogmaAttributes=[{"attributeID": k, "value": v} for k, v in attrs.items()])


@pytest.fixture
def sde_db():
    db = SdeDatabase("sqlite://", poolclass=StaticPool, connect_args={"check_same_thread": False})
    BaseSde.metadata.create_all(db.engine)

    with db.sde_session() as session:
        session.add_all(
            [
                Types(id=587, groupID=25, name={"en": "Rifter", "de": "Rifter (DE)"}, iconID=None),
                Types(id=34, groupID=18, name={"en": "Tritanium"}, iconID=22),
                Groups(id=25, categoryID=6, name={"en": "Frigate"}),
                Blueprints(
                    id=1,
                    blueprintTypeID=691,
                    activities={
                        "manufacturing": {
                            "materials": [{"typeID": 34, "quantity": 32000}, {"typeID": 35, "quantity": 0}],
                            "products": [{"typeID": 587, "quantity": 1}],
                            "skills": [{"typeID": 3380, "level": 1}],
                            "time": 6000,
                        },
                        "copying": {"time": 4800},
                    },
                ),
                _dogma(RAITARU, {2600: 0.99, 2601: 0.97, 2602: 0.85, 2355: 1.0, 2356: 1.9, 2357: 2.1}),
                _dogma(ME_RIG, {2594: -2.0, 2593: 0.0, 2355: 1.0, 2356: 1.9, 2357: 2.1}),
                _dogma(TE_RIG, {2593: -20.0}),
                _dogma(3380, {440: -4.0, 1982: -1.0}),
                _dogma(45746, {2660: -4.0}),
                MapSolarSystems(id=30000142, securityStatus=0.9459),
                FacilityRigEffects(rigTypeID=ME_RIG, categoryID=6, groupID=0),
                FacilityRigEffects(rigTypeID=NULL_SCOPE_RIG, categoryID=6, groupID=None),
            ]
        )
        session.commit()

    yield db
    db.dispose()


@pytest.fixture
def sde_store(sde_db):
    return SdeAttributeStore(sde_db, language="de")


def test_structure_multipliers_become_percent_reductions(sde_store) -> None:
    attrs = sde_store.get_structure_attributes(RAITARU, ActivityKind.MANUFACTURING)

    assert attrs.material_percent == pytest.approx(1.0)
    assert attrs.time_percent == pytest.approx(15.0)
    assert attrs.tax_multiplier == pytest.approx(0.97)
    assert attrs.security.low_sec == pytest.approx(1.9)


def test_structure_has_no_material_bonus_for_reactions(sde_store) -> None:
    attrs = sde_store.get_structure_attributes(RAITARU, ActivityKind.REACTION)

    assert attrs.material_percent == 0.0
    assert attrs.time_percent == 0.0
    assert attrs.tax_multiplier == 1.0


def test_unknown_structure(sde_store) -> None:
    assert sde_store.get_structure_attributes(99999, ActivityKind.MANUFACTURING) is None


def test_rig_attributes_are_positive_percentages(sde_store) -> None:
    rigs = sde_store.get_rig_attributes([ME_RIG, TE_RIG, 12345], ActivityKind.MANUFACTURING)

    assert [r.rig_type_id for r in rigs] == [ME_RIG, TE_RIG]
    assert rigs[0].material_percent == pytest.approx(2.0)
    assert rigs[0].time_percent == 0.0
    assert rigs[0].security.null_sec == pytest.approx(2.1)
    assert rigs[1].time_percent == pytest.approx(20.0)
    assert rigs[1].security.low_sec == 1.0


def test_rig_eligibility(sde_store) -> None:
    assert sde_store.get_rig_eligibility(ME_RIG) == [RigEligibility(category_id=6, group_id=0)]
    assert sde_store.get_rig_eligibility(TE_RIG) == []


def test_rig_scope_with_null_column_is_kept_but_matches_nothing(sde_store) -> None:
    records = sde_store.get_rig_eligibility(NULL_SCOPE_RIG)

    assert records == [RigEligibility(category_id=6, group_id=None)]
    assert not records[0].matches(category_id=6, group_id=25)


def test_skill_time_bonus(sde_store) -> None:
    assert sde_store.get_skill_time_bonus(3380, ActivityKind.MANUFACTURING) == pytest.approx(-4.0)
    assert sde_store.get_skill_time_bonus(45746, ActivityKind.REACTION) == pytest.approx(-4.0)
    assert sde_store.get_skill_time_bonus(45746, ActivityKind.MANUFACTURING) is None
    assert sde_store.get_skill_time_bonus(11111, ActivityKind.MANUFACTURING) is None


@pytest.mark.parametrize("activity", [ActivityKind.MANUFACTURING, ActivityKind.REACTION])
def test_industry_skills_use_their_own_attributes_for_every_activity(sde_store, activity) -> None:
    assert skill_time_attribute_id(3380, activity) == 440
    assert skill_time_attribute_id(3388, activity) == 1961
    assert sde_store.get_skill_time_bonus(3380, activity) == pytest.approx(-4.0)


def test_other_skills_use_the_activity_attribute() -> None:
    assert skill_time_attribute_id(45746, ActivityKind.REACTION) == 2660
    assert skill_time_attribute_id(3395, ActivityKind.MANUFACTURING) == 1982


def test_blueprint_activity(sde_store) -> None:
    materials = sde_store.get_blueprint_materials(691, ActivityKind.MANUFACTURING)

    assert [(m.type_id, m.quantity) for m in materials] == [(34, 32000)]
    assert sde_store.get_blueprint_time(691, ActivityKind.MANUFACTURING) == 6000
    assert sde_store.get_blueprint_product(691, ActivityKind.MANUFACTURING).type_id == 587
    assert sde_store.get_blueprint_required_skills(691, ActivityKind.MANUFACTURING) == [3380]

    assert sde_store.get_blueprint_materials(691, ActivityKind.REACTION) == []
    assert sde_store.get_blueprint_time(691, ActivityKind.REACTION) is None
    assert sde_store.get_blueprint_product(1, ActivityKind.MANUFACTURING) is None


def test_system_security(sde_store) -> None:
    assert sde_store.get_system_security(30000142) == pytest.approx(0.9459)
    assert sde_store.get_system_security(31000001) is None


def test_type_info(sde_store) -> None:
    info = sde_store.get_type_info([587, 34, 99])

    assert set(info) == {587, 34}
    assert info[587].type_name == "Rifter (DE)"
    assert info[587].type_name_en == "Rifter"
    assert info[587].group_id == 25
    assert info[587].category_id == 6
    assert info[34].type_name == "Tritanium"
    assert info[34].icon_id == 22
    assert info[34].category_id is None


def test_db_name() -> None:
    db = SdeDatabase("sqlite:///database/eve_sde.db")
    assert db.get_db_name() == "eve_sde.db"
    db.dispose()
