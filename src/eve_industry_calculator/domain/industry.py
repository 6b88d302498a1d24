from __future__ import annotations

from enum import Enum


class ActivityKind(str, Enum):
    """Industry activity a blueprint is run for.

    Values match the ESI `/industry/systems/` activity names and the SDE
    blueprint activity keys.
    """

    MANUFACTURING = "manufacturing"
    REACTION = "reaction"

    @classmethod
    def from_is_reaction(cls, is_reaction: bool) -> "ActivityKind":
        return cls.REACTION if is_reaction else cls.MANUFACTURING


class BonusAxis(str, Enum):
    MATERIAL = "material"
    TIME = "time"
    TAX = "tax"


class SecurityClass(str, Enum):
    HIGH_SEC = "high_sec"
    LOW_SEC = "low_sec"
    NULL_SEC_OR_WORMHOLE = "null_sec_or_wormhole"


# Industry (3380) and Advanced Industry (3388) reduce manufacturing time
# whether or not the blueprint lists them. They never apply to reactions.
SKILL_INDUSTRY = 3380
SKILL_ADVANCED_INDUSTRY = 3388
UNIVERSAL_MANUFACTURING_SKILL_IDS: frozenset[int] = frozenset({SKILL_INDUSTRY, SKILL_ADVANCED_INDUSTRY})
