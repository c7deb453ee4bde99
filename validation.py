"""Demographics checks run by callers before the macro engine.

The engine accepts anything; these are the bounds the onboarding form enforces.
"""
from __future__ import annotations

from typing import Dict

from models import Demographics

AGE_RANGE = (13, 120)
HEIGHT_FEET_RANGE = (3, 8)
WEIGHT_LB_RANGE = (50, 500)


class DemographicsError(ValueError):
    def __init__(self, errors: Dict[str, str]):
        self.errors = dict(errors)
        super().__init__("; ".join(f"{k}: {v}" for k, v in self.errors.items()))


def _within(value, bounds) -> bool:
    lo, hi = bounds
    return bool(value) and lo <= value <= hi


def validate_demographics(d: Demographics) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    if not _within(d.age_years, AGE_RANGE):
        errors["age"] = "Please enter a valid age between 13 and 120"
    if not d.biological_sex:
        errors["gender"] = "Please select your gender"
    if not _within(d.height_feet, HEIGHT_FEET_RANGE):
        errors["height"] = "Please enter a valid height"
    if not _within(d.weight_pounds, WEIGHT_LB_RANGE):
        errors["weight"] = "Please enter a valid weight between 50-500 lbs"
    if not d.activity_level:
        errors["activityLevel"] = "Please select your activity level"
    if not d.goal:
        errors["goal"] = "Please select your goal"
    return errors


def ensure_valid(d: Demographics) -> Demographics:
    errors = validate_demographics(d)
    if errors:
        raise DemographicsError(errors)
    return d
