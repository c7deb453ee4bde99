"""Compute macro plans for a table of demographics.

Expected CSV columns: age_years, biological_sex, height_feet, height_inches,
weight_pounds, activity_level, goal. Extra columns (profile_id, name, ...) are
carried through untouched.
"""
from __future__ import annotations

from typing import List

import pandas as pd

from macro_engine import compute_macro_goals
from models import DEFAULT_CONFIG, Demographics, EngineConfig, MacroPlan

DEMOGRAPHIC_COLUMNS = [
    "age_years",
    "biological_sex",
    "height_feet",
    "height_inches",
    "weight_pounds",
    "activity_level",
    "goal",
]
PLAN_COLUMNS = list(MacroPlan.__dataclass_fields__)


def load_demographics_csv(path: str) -> pd.DataFrame:
    df = pd.read_csv(path)
    missing = [c for c in DEMOGRAPHIC_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"{path} is missing columns: {', '.join(missing)}")
    return df


def frame_to_demographics(row: pd.Series) -> Demographics:
    # blank cells come back as NaN; let the validator see them as empty
    record = {c: (None if pd.isna(row.get(c)) else row.get(c)) for c in DEMOGRAPHIC_COLUMNS}
    return Demographics.from_dict(record)


def compute_plans_frame(frame: pd.DataFrame, config: EngineConfig = DEFAULT_CONFIG) -> pd.DataFrame:
    rows: List[dict] = []
    for _, row in frame.iterrows():
        plan = compute_macro_goals(frame_to_demographics(row), config)
        rows.append(plan.to_dict())
    plans = pd.DataFrame(rows, columns=PLAN_COLUMNS, index=frame.index)
    return pd.concat([frame, plans], axis=1)
