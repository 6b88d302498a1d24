from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable


@dataclass(frozen=True)
class BonusMultiplier:
    """Multiplicative (material, time) factor; (1.0, 1.0) is the identity.

    Composition is elementwise multiplication, so the order in which sources
    are combined does not change the result beyond float rounding.
    """

    material: float = 1.0
    time: float = 1.0

    @classmethod
    def identity(cls) -> "BonusMultiplier":
        return cls()

    @classmethod
    def from_percent_reduction(cls, *, material_percent: float = 0.0, time_percent: float = 0.0) -> "BonusMultiplier":
        # 8 -> 0.92
        return cls(material=1.0 - material_percent / 100.0, time=1.0 - time_percent / 100.0)

    @classmethod
    def compose(cls, multipliers: Iterable["BonusMultiplier"]) -> "BonusMultiplier":
        out = cls.identity()
        for m in multipliers:
            out = out.combine(m)
        return out

    def combine(self, other: "BonusMultiplier") -> "BonusMultiplier":
        return BonusMultiplier(material=self.material * other.material, time=self.time * other.time)

    def __mul__(self, other: "BonusMultiplier") -> "BonusMultiplier":
        if not isinstance(other, BonusMultiplier):
            return NotImplemented
        return self.combine(other)

    @property
    def material_percent(self) -> float:
        """Signed change in material use, e.g. -10.0 for a 0.9 multiplier."""
        return (self.material - 1.0) * 100.0

    @property
    def time_percent(self) -> float:
        return (self.time - 1.0) * 100.0

    def is_identity(self) -> bool:
        return self.material == 1.0 and self.time == 1.0

    def to_dict(self) -> Dict[str, Any]:
        return {"material": self.material, "time": self.time}
