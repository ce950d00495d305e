"""
Safety categories and upper limits

Sources:
- NIH Office of Dietary Supplements (Tolerable Upper Intake Levels)
- Endocrine Society clinical practice guideline (vitamin D)
- FDA guidance (caffeine)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional


class SafetyCategory(str, Enum):
    MAGNESIUM = "magnesium"
    ZINC = "zinc"
    IRON = "iron"
    COPPER = "copper"
    CALCIUM = "calcium"
    SELENIUM = "selenium"
    IODINE = "iodine"
    POTASSIUM = "potassium"
    VITAMIN_A = "vitamin-a"
    VITAMIN_B6 = "vitamin-b6"
    VITAMIN_C = "vitamin-c"
    VITAMIN_D3 = "vitamin-d3"
    CAFFEINE = "caffeine"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["SafetyCategory"]:
        """Map a free-text catalog tag onto a category, None if unknown."""
        if not value:
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


@dataclass(frozen=True)
class SafetyLimit:
    limit: float
    unit: str  # "mg", "mcg", "IU"
    source: str
    is_hard_limit: bool = False  # hard = block, soft = warn
    period: str = "daily"


SAFETY_LIMITS: Dict[SafetyCategory, SafetyLimit] = {
    SafetyCategory.MAGNESIUM: SafetyLimit(350, "mg", "NIH"),
    SafetyCategory.ZINC: SafetyLimit(40, "mg", "NIH"),
    SafetyCategory.IRON: SafetyLimit(45, "mg", "NIH", is_hard_limit=True),
    SafetyCategory.COPPER: SafetyLimit(10, "mg", "NIH", is_hard_limit=True),
    SafetyCategory.CALCIUM: SafetyLimit(2500, "mg", "NIH"),
    SafetyCategory.SELENIUM: SafetyLimit(400, "mcg", "NIH", is_hard_limit=True),
    SafetyCategory.IODINE: SafetyLimit(1100, "mcg", "NIH", is_hard_limit=True),
    SafetyCategory.POTASSIUM: SafetyLimit(3500, "mg", "NIH"),
    SafetyCategory.VITAMIN_A: SafetyLimit(10000, "IU", "NIH", is_hard_limit=True),
    SafetyCategory.VITAMIN_B6: SafetyLimit(100, "mg", "NIH", is_hard_limit=True),
    SafetyCategory.VITAMIN_C: SafetyLimit(2000, "mg", "NIH"),
    SafetyCategory.VITAMIN_D3: SafetyLimit(10000, "IU", "Endocrine Society"),
    SafetyCategory.CAFFEINE: SafetyLimit(400, "mg", "FDA"),
}

# Every hard-limit category must be listed. None means the generic caution.
SAFETY_CAUTIONS: Dict[SafetyCategory, Optional[str]] = {
    SafetyCategory.IRON: "Caution: Only supplement if Ferritin <150ng/mL. Test before use.",
    SafetyCategory.VITAMIN_A: "Caution: High doses are teratogenic. Not recommended during pregnancy.",
    SafetyCategory.SELENIUM: "Caution: Narrow therapeutic window. Don't exceed 200mcg/day without testing.",
    SafetyCategory.COPPER: None,
    SafetyCategory.IODINE: None,
    SafetyCategory.VITAMIN_B6: None,
}

_missing = [
    c.value for c, limit in SAFETY_LIMITS.items()
    if limit.is_hard_limit and c not in SAFETY_CAUTIONS
]
if _missing:
    raise RuntimeError(f"Hard-limit categories without caution text: {_missing}")


def is_hard_limit(category: Optional[SafetyCategory]) -> bool:
    if category is None:
        return False
    limit = SAFETY_LIMITS.get(category)
    return bool(limit and limit.is_hard_limit)


def get_safety_caution(
    category: Optional[SafetyCategory],
    substance_name: str
) -> Optional[str]:
    """
    Caution text for suggesting a substance, or None if it has no hard ceiling.
    """
    if not is_hard_limit(category):
        return None
    caution = SAFETY_CAUTIONS[category]
    if caution is None:
        return f"Caution: {substance_name} has a hard safety limit."
    return caution
