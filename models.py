"""Domain models and lookup tables for demographics and macro plans."""
from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict

KCAL_PER_G = {
    "protein": 4,
    "carbs": 4,
    "fat": 9,
}

ACTIVITY_MAP = {
    "sedentary": 1.2,
    "lightly-active": 1.375,
    "moderately-active": 1.55,
    "very-active": 1.725,
    "extremely-active": 1.9,
}
DEFAULT_ACTIVITY_FACTOR = 1.2

# fractions of total calories
MACRO_RATIOS = {
    "weight-loss": {"protein": 0.30, "carbs": 0.35, "fat": 0.35},
    "muscle-gain": {"protein": 0.25, "carbs": 0.45, "fat": 0.30},
    "weight-gain": {"protein": 0.20, "carbs": 0.50, "fat": 0.30},
    "maintenance": {"protein": 0.25, "carbs": 0.40, "fat": 0.35},
}
DEFAULT_RATIO_GOAL = "maintenance"

GOAL_MULTIPLIERS = {
    "weight-loss": 0.85,
    "muscle-gain": 1.12,
    "weight-gain": 1.12,
}
GOAL_OFFSETS = {
    "weight-loss": -500,
    "weight-gain": 300,
    "muscle-gain": 200,
}

PROTEIN_G_PER_LB = 1.0
BODY_WEIGHT_FAT_FRACTION = 0.225

SEXES = ["male", "female", "other", "prefer-not-to-say"]
GOALS = list(MACRO_RATIOS)
ACTIVITY_LEVELS = list(ACTIVITY_MAP)


class CalorieStrategy(str, Enum):
    PERCENTAGE = "percentage"
    FIXED_OFFSET = "fixed-offset"


class SplitStrategy(str, Enum):
    RATIO = "ratio"
    BODY_WEIGHT = "body-weight"


@dataclass(frozen=True)
class EngineConfig:
    calorie_strategy: CalorieStrategy = CalorieStrategy.FIXED_OFFSET
    split_strategy: SplitStrategy = SplitStrategy.RATIO


# What the onboarding wizard shipped with: flat offsets plus the per-goal ratio table.
DEFAULT_CONFIG = EngineConfig()


@dataclass(frozen=True)
class Demographics:
    age_years: int
    biological_sex: str
    height_feet: int
    height_inches: int
    weight_pounds: float
    activity_level: str
    goal: str

    @property
    def total_inches(self) -> int:
        return self.height_feet * 12 + self.height_inches

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Demographics":
        """Build from a snake_case record or the wizard's camelCase form data.

        Missing numbers become 0 and missing strings become "" so the validator
        can report them instead of this constructor raising.
        """
        height = data.get("height")
        if isinstance(height, dict):
            feet = height.get("feet")
            inches = height.get("inches")
        else:
            feet = data.get("height_feet")
            inches = data.get("height_inches")
        return cls(
            age_years=_whole(_first(data, "age_years", "age"), "age_years"),
            biological_sex=str(_first(data, "biological_sex", "gender", "sex") or ""),
            height_feet=_whole(feet, "height_feet"),
            height_inches=_whole(inches, "height_inches"),
            weight_pounds=float(_first(data, "weight_pounds", "weight") or 0.0),
            activity_level=str(_first(data, "activity_level", "activityLevel") or ""),
            goal=str(data.get("goal") or ""),
        )


@dataclass(frozen=True)
class MacroSplit:
    protein_grams: int
    carb_grams: int
    fat_grams: int
    protein_percent: int
    carb_percent: int
    fat_percent: int


@dataclass(frozen=True)
class MacroPlan:
    bmr_calories: int
    tdee_calories: int
    target_calories: int
    protein_grams: int
    carb_grams: int
    fat_grams: int
    protein_percent: int
    carb_percent: int
    fat_percent: int

    def to_dict(self, camel: bool = False) -> Dict[str, int]:
        if not camel:
            return asdict(self)
        # shape stored as `macroGoals` on onboarding profiles
        return {
            "calories": self.target_calories,
            "protein": self.protein_percent,
            "carbs": self.carb_percent,
            "fat": self.fat_percent,
            "proteinGrams": self.protein_grams,
            "carbsGrams": self.carb_grams,
            "fatGrams": self.fat_grams,
            "bmr": self.bmr_calories,
            "tdee": self.tdee_calories,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MacroPlan":
        if "calories" in data:
            return cls(
                bmr_calories=int(data["bmr"]),
                tdee_calories=int(data["tdee"]),
                target_calories=int(data["calories"]),
                protein_grams=int(data["proteinGrams"]),
                carb_grams=int(data["carbsGrams"]),
                fat_grams=int(data["fatGrams"]),
                protein_percent=int(data["protein"]),
                carb_percent=int(data["carbs"]),
                fat_percent=int(data["fat"]),
            )
        return cls(**{k: int(v) for k, v in data.items()})


def _whole(value: Any, field: str) -> int:
    """Integer field from form or CSV input; blanks become 0, fractions are rejected."""
    if value is None or value == "":
        return 0
    number = float(value)
    if not number.is_integer():
        raise ValueError(f"{field} must be a whole number (got {value!r})")
    return int(number)


def _first(data: Dict[str, Any], *keys: str) -> Any:
    for k in keys:
        if data.get(k) is not None:
            return data[k]
    return None
