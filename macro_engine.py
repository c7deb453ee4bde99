"""Daily calorie and macro targets from demographics.

Pipeline: BMR (Mifflin-St Jeor) -> TDEE (activity multiplier) -> goal-adjusted
calorie target -> protein/carb/fat split. Every step is a pure function; the
calorie adjustment and the macro split each have two strategies selected by
`EngineConfig`.

Unknown activity levels and goals are not errors: they fall back to the
sedentary multiplier and to maintenance behaviour respectively.
"""
from __future__ import annotations

import logging
import math

from models import (
    ACTIVITY_MAP,
    BODY_WEIGHT_FAT_FRACTION,
    DEFAULT_ACTIVITY_FACTOR,
    DEFAULT_CONFIG,
    DEFAULT_RATIO_GOAL,
    GOAL_MULTIPLIERS,
    GOAL_OFFSETS,
    KCAL_PER_G,
    MACRO_RATIOS,
    PROTEIN_G_PER_LB,
    CalorieStrategy,
    Demographics,
    EngineConfig,
    MacroPlan,
    MacroSplit,
    SplitStrategy,
)

logger = logging.getLogger(__name__)

LB_TO_KG = 0.453592
IN_TO_CM = 2.54


def round_half_up(value: float) -> int:
    """Round .5 towards +inf, the way JavaScript's Math.round does.

    Compares the fractional part instead of computing floor(x + 0.5), which
    would round 0.49999999999999994 up to 1.
    """
    whole = math.floor(value)
    return int(whole) + (1 if value - whole >= 0.5 else 0)


def compute_bmr(demographics: Demographics) -> int:
    weight_kg = demographics.weight_pounds * LB_TO_KG
    height_cm = (demographics.height_feet * 12 + demographics.height_inches) * IN_TO_CM
    bmr = 10 * weight_kg + 6.25 * height_cm - 5 * demographics.age_years
    if demographics.biological_sex == "male":
        bmr += 5
    else:
        bmr -= 161
    return round_half_up(bmr)


def compute_tdee(bmr: float, activity_level: str) -> int:
    factor = ACTIVITY_MAP.get(activity_level)
    if factor is None:
        logger.debug("unknown activity level %r, using %s", activity_level, DEFAULT_ACTIVITY_FACTOR)
        factor = DEFAULT_ACTIVITY_FACTOR
    return round_half_up(bmr * factor)


def compute_calorie_target(
    tdee: float,
    goal: str,
    strategy: CalorieStrategy = DEFAULT_CONFIG.calorie_strategy,
) -> int:
    if strategy == CalorieStrategy.PERCENTAGE:
        return round_half_up(tdee * GOAL_MULTIPLIERS.get(goal, 1.0))
    if strategy == CalorieStrategy.FIXED_OFFSET:
        return round_half_up(tdee + GOAL_OFFSETS.get(goal, 0))
    raise ValueError(f"unsupported calorie strategy: {strategy!r}")


def _ratio_split(target_calories: float, goal: str) -> MacroSplit:
    ratio = MACRO_RATIOS.get(goal)
    if ratio is None:
        logger.debug("unknown goal %r, using %s ratios", goal, DEFAULT_RATIO_GOAL)
        ratio = MACRO_RATIOS[DEFAULT_RATIO_GOAL]
    return MacroSplit(
        protein_grams=round_half_up(target_calories * ratio["protein"] / KCAL_PER_G["protein"]),
        carb_grams=round_half_up(target_calories * ratio["carbs"] / KCAL_PER_G["carbs"]),
        fat_grams=round_half_up(target_calories * ratio["fat"] / KCAL_PER_G["fat"]),
        protein_percent=round_half_up(ratio["protein"] * 100),
        carb_percent=round_half_up(ratio["carbs"] * 100),
        fat_percent=round_half_up(ratio["fat"] * 100),
    )


def _body_weight_split(target_calories: float, weight_pounds: float) -> MacroSplit:
    protein_g = round_half_up(weight_pounds * PROTEIN_G_PER_LB)
    fat_kcal = target_calories * BODY_WEIGHT_FAT_FRACTION
    fat_g = round_half_up(fat_kcal / KCAL_PER_G["fat"])
    carb_kcal = target_calories - protein_g * KCAL_PER_G["protein"] - fat_kcal
    carb_g = round_half_up(carb_kcal / KCAL_PER_G["carbs"])

    def pct(grams: int, macro: str) -> int:
        # a zero target has no meaningful share; report 0 rather than divide by it
        if target_calories == 0:
            return 0
        return round_half_up(grams * KCAL_PER_G[macro] / target_calories * 100)

    return MacroSplit(
        protein_grams=protein_g,
        carb_grams=carb_g,
        fat_grams=fat_g,
        protein_percent=pct(protein_g, "protein"),
        carb_percent=pct(carb_g, "carbs"),
        fat_percent=pct(fat_g, "fat"),
    )


def compute_macro_split(
    target_calories: float,
    weight_pounds: float,
    goal: str,
    strategy: SplitStrategy = DEFAULT_CONFIG.split_strategy,
) -> MacroSplit:
    """Split a calorie target into grams and percent of protein, carbs and fat.

    RATIO uses the per-goal table and reports the table percentages as-is.
    BODY_WEIGHT gives 1 g protein per lb, 22.5% of calories to fat and the
    remainder to carbs, and reports percentages from the rounded grams, so
    they need not sum to exactly 100.
    """
    if strategy == SplitStrategy.RATIO:
        return _ratio_split(target_calories, goal)
    if strategy == SplitStrategy.BODY_WEIGHT:
        return _body_weight_split(target_calories, weight_pounds)
    raise ValueError(f"unsupported split strategy: {strategy!r}")


def compute_macro_goals(demographics: Demographics, config: EngineConfig = DEFAULT_CONFIG) -> MacroPlan:
    bmr = compute_bmr(demographics)
    tdee = compute_tdee(bmr, demographics.activity_level)
    target = compute_calorie_target(tdee, demographics.goal, config.calorie_strategy)
    split = compute_macro_split(target, demographics.weight_pounds, demographics.goal, config.split_strategy)
    return MacroPlan(
        bmr_calories=bmr,
        tdee_calories=tdee,
        target_calories=target,
        protein_grams=split.protein_grams,
        carb_grams=split.carb_grams,
        fat_grams=split.fat_grams,
        protein_percent=split.protein_percent,
        carb_percent=split.carb_percent,
        fat_percent=split.fat_percent,
    )
