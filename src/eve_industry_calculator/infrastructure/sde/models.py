from typing import Any, Optional

from sqlalchemy import Boolean, Float, Integer, JSON
from sqlalchemy.orm import Mapped, declarative_base, mapped_column

# Declarative base for the (read-only) static data export tables
BaseSde = declarative_base()


# --------------------------
# SDE
# --------------------------
class Types(BaseSde):
    __tablename__ = "types"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    groupID: Mapped[int] = mapped_column(Integer, nullable=True)
    name: Mapped[dict[str, str]] = mapped_column(JSON, nullable=True)
    published: Mapped[bool] = mapped_column(Boolean, nullable=True)
    iconID: Mapped[int] = mapped_column(Integer, nullable=True)
    metaGroupID: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

class Groups(BaseSde):
    __tablename__ = "groups"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    categoryID: Mapped[int] = mapped_column(Integer, nullable=True)
    name: Mapped[dict[str, str]] = mapped_column(JSON, nullable=True)
    published: Mapped[bool] = mapped_column(Boolean, nullable=True)
    iconID: Mapped[int] = mapped_column(Integer, nullable=True)

class Categories(BaseSde):
    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[dict[str, str]] = mapped_column(JSON, nullable=False)
    iconID: Mapped[int] = mapped_column(Integer, nullable=True)
    published: Mapped[bool] = mapped_column(Boolean, nullable=True)

class Blueprints(BaseSde):
    __tablename__ = "blueprints"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    blueprintTypeID: Mapped[int] = mapped_column(Integer, nullable=False)
    maxProductionLimit: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    activities: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)

class TypeDogma(BaseSde):
    __tablename__ = "typeDogma"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    dogmaAttributes: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=True)
    dogmaEffects: Mapped[Optional[list[dict[str, Any]]]] = mapped_column(JSON, nullable=True)

class MapSolarSystems(BaseSde):
    __tablename__ = "mapSolarSystems"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[dict[str, str]] = mapped_column(JSON, nullable=True)
    regionID: Mapped[int] = mapped_column(Integer, nullable=True)
    constellationID: Mapped[int] = mapped_column(Integer, nullable=True)
    securityStatus: Mapped[float] = mapped_column(Float, nullable=True)
    wormholeClassID: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

class FacilityRigEffects(BaseSde):
    """Product scopes a rig applies to; 0 category or group is a wildcard, NULL matches nothing."""

    __tablename__ = "facilityRigEffects"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    rigTypeID: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    categoryID: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    groupID: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
