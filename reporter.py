"""Text, markdown and chart output for macro plans."""
from __future__ import annotations

import os
from typing import Dict, Optional

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402

from models import Demographics, EngineConfig, MacroPlan  # noqa: E402
from stats import calorie_drift, macro_calories  # noqa: E402


def format_macro_goals(plan: MacroPlan) -> Dict:
    return {
        "summary": f"{plan.target_calories} calories per day",
        "breakdown": {
            "protein": f"{plan.protein_grams}g protein ({plan.protein_percent}%)",
            "carbs": f"{plan.carb_grams}g carbs ({plan.carb_percent}%)",
            "fat": f"{plan.fat_grams}g fat ({plan.fat_percent}%)",
        },
        "details": {
            "bmr": f"{plan.bmr_calories} calories (BMR)",
            "tdee": f"{plan.tdee_calories} calories (TDEE)",
            "target": f"{plan.target_calories} calories (Daily Target)",
        },
    }


def plan_markdown(
    plan: MacroPlan,
    demographics: Optional[Demographics] = None,
    config: Optional[EngineConfig] = None,
    title: str = "Macro Plan",
) -> str:
    fmt = format_macro_goals(plan)
    lines = [f"# {title}", ""]
    if demographics is not None:
        d = demographics
        lines += [
            f"- Age: {d.age_years}, Sex: {d.biological_sex}, Height: {d.height_feet}'{d.height_inches}\", Weight: {d.weight_pounds:g} lb",
            f"- Activity: {d.activity_level}, Goal: {d.goal}",
            "",
        ]
    lines.append(f"**{fmt['summary']}**")
    lines.append("")
    lines += [f"- {v}" for v in fmt["breakdown"].values()]
    lines.append("")
    lines += [f"- {v}" for v in fmt["details"].values()]
    drift = calorie_drift(plan)
    if drift:
        lines.append(f"- Rounding drift: {drift:+d} calories")
    if config is not None:
        lines.append(f"\n_Calorie strategy: {config.calorie_strategy.value}, split strategy: {config.split_strategy.value}_")
    return "\n".join(lines)


def plot_macro_split(plan: MacroPlan, out_dir: str, label: str = "plan") -> str:
    kcal = macro_calories(plan)
    fig, (ax_g, ax_k) = plt.subplots(1, 2, figsize=(8, 4))
    names = ["Protein", "Carbs", "Fat"]
    colors = ["#59a14f", "#4e79a7", "#f28e2b"]
    ax_g.bar(names, [plan.protein_grams, plan.carb_grams, plan.fat_grams], color=colors)
    ax_g.set_title("Grams per day")
    ax_g.set_ylabel("g")
    ax_k.bar(names, [kcal["protein"], kcal["carbs"], kcal["fat"]], color=colors)
    ax_k.axhline(0, color="black", linewidth=0.5)
    ax_k.set_title(f"Calories ({plan.target_calories} target)")
    ax_k.set_ylabel("kcal")
    os.makedirs(out_dir, exist_ok=True)
    out_path = os.path.join(out_dir, f"macros_{label}.png")
    fig.tight_layout()
    fig.savefig(out_path)
    plt.close(fig)
    return out_path
