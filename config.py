"""Paths and engine defaults for macro-planner.

Environment overrides:
- MACRO_CALORIE_STRATEGY: "percentage" or "fixed-offset"
- MACRO_SPLIT_STRATEGY: "ratio" or "body-weight"
"""
from __future__ import annotations

import os
from typing import Mapping

from models import DEFAULT_CONFIG, CalorieStrategy, EngineConfig, SplitStrategy

DEFAULT_DB_PATH = os.path.join("storage", "macros.db")
REPORTS_DIR = os.path.join("storage", "reports")

CALORIE_STRATEGY_ENV = "MACRO_CALORIE_STRATEGY"
SPLIT_STRATEGY_ENV = "MACRO_SPLIT_STRATEGY"


def _choice(enum_cls, raw: str, env_name: str):
    try:
        return enum_cls(raw.strip().lower())
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValueError(f"{env_name} must be one of: {allowed} (got {raw!r})")


def load_engine_config(
    env: Mapping[str, str] | None = None,
    calorie_strategy: str | None = None,
    split_strategy: str | None = None,
) -> EngineConfig:
    """Resolve the engine configuration: explicit args, then env, then defaults."""
    env = os.environ if env is None else env
    raw_cal = calorie_strategy or env.get(CALORIE_STRATEGY_ENV)
    raw_split = split_strategy or env.get(SPLIT_STRATEGY_ENV)
    return EngineConfig(
        calorie_strategy=_choice(CalorieStrategy, raw_cal, CALORIE_STRATEGY_ENV) if raw_cal else DEFAULT_CONFIG.calorie_strategy,
        split_strategy=_choice(SplitStrategy, raw_split, SPLIT_STRATEGY_ENV) if raw_split else DEFAULT_CONFIG.split_strategy,
    )
