import itertools

from macro_engine import (
    compute_bmr,
    compute_calorie_target,
    compute_macro_goals,
    compute_macro_split,
    compute_tdee,
    round_half_up,
)
from models import ACTIVITY_LEVELS, GOALS, CalorieStrategy, Demographics, EngineConfig, SplitStrategy
from stats import calorie_drift

MALE = Demographics(
    age_years=30,
    biological_sex="male",
    height_feet=5,
    height_inches=10,
    weight_pounds=180,
    activity_level="moderately-active",
    goal="weight-loss",
)


def with_(d, **changes):
    values = d.to_dict()
    values.update(changes)
    return Demographics(**values)


def test_round_half_up():
    assert round_half_up(237.5) == 238
    assert round_half_up(2.4999) == 2
    assert round_half_up(-1.5) == -1
    assert round_half_up(-1.6) == -2
    assert round_half_up(0.49999999999999994) == 0
    assert round_half_up(-0.5) == 0


def test_bmr_follows_mifflin_st_jeor():
    kg = 180 * 0.453592
    cm = 70 * 2.54
    expected = 10 * kg + 6.25 * cm - 5 * 30 + 5
    assert compute_bmr(MALE) == round_half_up(expected) == 1783


def test_bmr_non_male_subtracts_161():
    for sex in ("female", "other", "prefer-not-to-say", ""):
        assert compute_bmr(with_(MALE, biological_sex=sex)) == 1617


def test_bmr_deterministic():
    assert compute_bmr(MALE) == compute_bmr(MALE)


def test_bmr_does_not_guard_bad_input():
    d = with_(MALE, weight_pounds=0, height_feet=0, height_inches=0, age_years=100)
    assert compute_bmr(d) == -495


def test_tdee_multipliers():
    assert compute_tdee(1783, "sedentary") == round_half_up(1783 * 1.2) == 2140
    assert compute_tdee(1783, "lightly-active") == round_half_up(1783 * 1.375)
    assert compute_tdee(1783, "moderately-active") == 2764
    assert compute_tdee(1783, "very-active") == round_half_up(1783 * 1.725)
    assert compute_tdee(1783, "extremely-active") == round_half_up(1783 * 1.9)


def test_tdee_unknown_activity_falls_back_to_sedentary():
    assert compute_tdee(1783, "unknown-value") == compute_tdee(1783, "sedentary")
    assert compute_tdee(1783, "") == compute_tdee(1783, "sedentary")


def test_calorie_target_percentage():
    s = CalorieStrategy.PERCENTAGE
    assert compute_calorie_target(2000, "weight-loss", s) == 1700
    assert compute_calorie_target(2000, "muscle-gain", s) == 2240
    assert compute_calorie_target(2000, "weight-gain", s) == 2240
    assert compute_calorie_target(2000, "maintenance", s) == 2000
    assert compute_calorie_target(2000, "bulk-ish", s) == 2000


def test_calorie_target_fixed_offset():
    s = CalorieStrategy.FIXED_OFFSET
    assert compute_calorie_target(2000, "weight-loss", s) == 1500
    assert compute_calorie_target(2000, "weight-gain", s) == 2300
    assert compute_calorie_target(2000, "muscle-gain", s) == 2200
    assert compute_calorie_target(2000, "maintenance", s) == 2000
    assert compute_calorie_target(2000, "bulk-ish", s) == 2000


def test_calorie_target_accepts_strategy_strings():
    assert compute_calorie_target(2000, "weight-loss", "percentage") == 1700


def test_ratio_split_maintenance():
    split = compute_macro_split(2000, 150, "maintenance", SplitStrategy.RATIO)
    assert split.protein_grams == round_half_up(2000 * 0.25 / 4) == 125
    assert split.carb_grams == round_half_up(2000 * 0.40 / 4) == 200
    assert split.fat_grams == round_half_up(2000 * 0.35 / 9) == 78
    assert (split.protein_percent, split.carb_percent, split.fat_percent) == (25, 40, 35)


def test_ratio_split_per_goal_percentages():
    expected = {
        "weight-loss": (30, 35, 35),
        "muscle-gain": (25, 45, 30),
        "weight-gain": (20, 50, 30),
        "maintenance": (25, 40, 35),
        "something-else": (25, 40, 35),
    }
    for goal, pcts in expected.items():
        split = compute_macro_split(1850, 160, goal, SplitStrategy.RATIO)
        assert (split.protein_percent, split.carb_percent, split.fat_percent) == pcts


def test_ratio_split_ignores_body_weight():
    a = compute_macro_split(2000, 120, "weight-gain", SplitStrategy.RATIO)
    b = compute_macro_split(2000, 260, "weight-gain", SplitStrategy.RATIO)
    assert a == b


def test_body_weight_split():
    split = compute_macro_split(2000, 150, "maintenance", SplitStrategy.BODY_WEIGHT)
    assert split.protein_grams == 150
    assert split.fat_grams == round_half_up(2000 * 0.225 / 9) == 50
    # (2000 - 600 - 450) / 4 = 237.5, rounded half up
    assert split.carb_grams == 238
    assert split.protein_percent == 30
    assert split.carb_percent == 48
    assert split.fat_percent == 23


def test_body_weight_split_protein_independent_of_goal():
    for goal in GOALS + ["unknown"]:
        split = compute_macro_split(2400, 175.4, goal, SplitStrategy.BODY_WEIGHT)
        assert split.protein_grams == 175


def test_body_weight_split_zero_target():
    split = compute_macro_split(0, 150, "maintenance", SplitStrategy.BODY_WEIGHT)
    assert split.protein_grams == 150
    assert split.fat_grams == 0
    assert split.carb_grams == -150
    assert (split.protein_percent, split.carb_percent, split.fat_percent) == (0, 0, 0)


def test_ratio_split_negative_target_propagates():
    split = compute_macro_split(-400, 150, "maintenance", SplitStrategy.RATIO)
    assert split.protein_grams == -25
    assert split.carb_grams == -40


def test_macro_goals_default_config():
    plan = compute_macro_goals(MALE)
    assert plan.bmr_calories == 1783
    assert plan.tdee_calories == 2764
    assert plan.target_calories == 2264
    assert (plan.protein_grams, plan.carb_grams, plan.fat_grams) == (170, 198, 88)
    assert (plan.protein_percent, plan.carb_percent, plan.fat_percent) == (30, 35, 35)


def test_macro_goals_percentage_body_weight():
    config = EngineConfig(CalorieStrategy.PERCENTAGE, SplitStrategy.BODY_WEIGHT)
    plan = compute_macro_goals(with_(MALE, goal="muscle-gain"), config)
    assert plan.target_calories == 3096
    assert plan.protein_grams == 180
    assert plan.fat_grams == 77
    assert plan.carb_grams == 420
    assert abs(calorie_drift(plan)) <= 5


def test_macro_goals_strategies_differ():
    offset = compute_macro_goals(MALE, EngineConfig(CalorieStrategy.FIXED_OFFSET))
    pct = compute_macro_goals(MALE, EngineConfig(CalorieStrategy.PERCENTAGE))
    assert offset.tdee_calories == pct.tdee_calories
    assert offset.target_calories == 2264
    assert pct.target_calories == round_half_up(2764 * 0.85)


def test_macro_goals_idempotent():
    for split in SplitStrategy:
        config = EngineConfig(split_strategy=split)
        assert compute_macro_goals(MALE, config) == compute_macro_goals(MALE, config)


def test_body_weight_drift_bounded():
    config = EngineConfig(CalorieStrategy.PERCENTAGE, SplitStrategy.BODY_WEIGHT)
    for age, sex, feet, weight, activity, goal in itertools.product(
        (18, 35, 70), ("male", "female"), (4, 5, 6), (95, 150.5, 240, 333), ACTIVITY_LEVELS, GOALS
    ):
        d = Demographics(age, sex, feet, 7, weight, activity, goal)
        plan = compute_macro_goals(d, config)
        # fat rounds to within 4.5 kcal and carbs to within 2 kcal
        assert abs(calorie_drift(plan)) <= 6


def test_ratio_percentages_sum_to_100():
    for goal in GOALS:
        plan = compute_macro_goals(with_(MALE, goal=goal))
        assert plan.protein_percent + plan.carb_percent + plan.fat_percent == 100
