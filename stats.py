from __future__ import annotations

from typing import Dict

from models import KCAL_PER_G, MacroPlan


def macro_calories(plan: MacroPlan) -> Dict[str, int]:
    protein = plan.protein_grams * KCAL_PER_G["protein"]
    carbs = plan.carb_grams * KCAL_PER_G["carbs"]
    fat = plan.fat_grams * KCAL_PER_G["fat"]
    return {"protein": protein, "carbs": carbs, "fat": fat, "total": protein + carbs + fat}


def calorie_drift(plan: MacroPlan) -> int:
    """Calories implied by the rounded grams minus the target."""
    return macro_calories(plan)["total"] - plan.target_calories
