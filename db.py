"""SQLite profile store for macro-planner.

- Creates the database and table if missing.
- Keeps one row per caller-assigned profile id with the demographics snapshot
  and the macro plan computed from it.
- A save always replaces the stored plan as a whole; plans are never patched.

Timestamps are UTC ISO-8601 strings.
"""
from __future__ import annotations

import json
import logging
import os
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Dict, List, Optional

import pandas as pd

from batch import frame_to_demographics
from config import DEFAULT_DB_PATH
from macro_engine import compute_macro_goals
from models import DEFAULT_CONFIG, CalorieStrategy, Demographics, EngineConfig, MacroPlan, SplitStrategy
from validation import validate_demographics

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS profiles(
    profile_id TEXT PRIMARY KEY,
    name TEXT,
    age_years INTEGER,
    biological_sex TEXT,
    height_feet INTEGER,
    height_inches INTEGER,
    weight_pounds REAL,
    activity_level TEXT,
    goal TEXT,
    macro_plan TEXT,
    calorie_strategy TEXT,
    split_strategy TEXT,
    created_at TEXT,
    updated_at TEXT
);
"""

PROFILE_COLUMNS = (
    "profile_id, name, age_years, biological_sex, height_feet, height_inches, weight_pounds, "
    "activity_level, goal, macro_plan, calorie_strategy, split_strategy, created_at, updated_at"
)


def ensure_dirs(db_path: str) -> None:
    storage_dir = os.path.dirname(db_path)
    if storage_dir and not os.path.isdir(storage_dir):
        os.makedirs(storage_dir, exist_ok=True)


@contextmanager
def get_conn(db_path: str = DEFAULT_DB_PATH):
    conn = sqlite3.connect(db_path)
    try:
        yield conn
        conn.commit()
    finally:
        conn.close()


def init_db(db_path: str = DEFAULT_DB_PATH) -> None:
    ensure_dirs(db_path)
    with get_conn(db_path) as conn:
        conn.executescript(SCHEMA_SQL)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def _row_to_profile(r) -> Dict:
    return {
        "profile_id": r[0],
        "name": r[1],
        "demographics": Demographics(
            age_years=r[2],
            biological_sex=r[3],
            height_feet=r[4],
            height_inches=r[5],
            weight_pounds=r[6],
            activity_level=r[7],
            goal=r[8],
        ),
        "macro_plan": MacroPlan.from_dict(json.loads(r[9])) if r[9] else None,
        "calorie_strategy": r[10],
        "split_strategy": r[11],
        "created_at": r[12],
        "updated_at": r[13],
    }


def save_profile(
    profile_id: str,
    demographics: Demographics,
    plan: MacroPlan,
    config: EngineConfig = DEFAULT_CONFIG,
    name: Optional[str] = None,
    db_path: str = DEFAULT_DB_PATH,
) -> str:
    """Insert or update a profile; returns the profile id."""
    init_db(db_path)
    now = _now()
    d = demographics
    with get_conn(db_path) as conn:
        cur = conn.execute("SELECT name FROM profiles WHERE profile_id=?", (profile_id,))
        existing = cur.fetchone()
        if existing:
            logger.info("Updating existing profile %s", profile_id)
        else:
            logger.info("Creating new profile %s", profile_id)
        conn.execute(
            f"INSERT INTO profiles({PROFILE_COLUMNS}) VALUES(?,?,?,?,?,?,?,?,?,?,?,?,?,?) "
            "ON CONFLICT(profile_id) DO UPDATE SET name=excluded.name, age_years=excluded.age_years, "
            "biological_sex=excluded.biological_sex, height_feet=excluded.height_feet, "
            "height_inches=excluded.height_inches, weight_pounds=excluded.weight_pounds, "
            "activity_level=excluded.activity_level, goal=excluded.goal, macro_plan=excluded.macro_plan, "
            "calorie_strategy=excluded.calorie_strategy, split_strategy=excluded.split_strategy, "
            "updated_at=excluded.updated_at",
            (
                profile_id,
                name if name is not None else (existing[0] if existing else None),
                d.age_years,
                d.biological_sex,
                d.height_feet,
                d.height_inches,
                d.weight_pounds,
                d.activity_level,
                d.goal,
                json.dumps(plan.to_dict()),
                CalorieStrategy(config.calorie_strategy).value,
                SplitStrategy(config.split_strategy).value,
                now,
                now,
            ),
        )
    return profile_id


def get_profile(profile_id: str, db_path: str = DEFAULT_DB_PATH) -> Optional[Dict]:
    init_db(db_path)
    with get_conn(db_path) as conn:
        cur = conn.execute(f"SELECT {PROFILE_COLUMNS} FROM profiles WHERE profile_id=?", (profile_id,))
        r = cur.fetchone()
        return _row_to_profile(r) if r else None


def list_profiles(db_path: str = DEFAULT_DB_PATH) -> List[Dict]:
    init_db(db_path)
    with get_conn(db_path) as conn:
        cur = conn.execute(f"SELECT {PROFILE_COLUMNS} FROM profiles ORDER BY profile_id")
        return [_row_to_profile(r) for r in cur.fetchall()]


def delete_profile(profile_id: str, db_path: str = DEFAULT_DB_PATH) -> bool:
    init_db(db_path)
    with get_conn(db_path) as conn:
        cur = conn.execute("DELETE FROM profiles WHERE profile_id=?", (profile_id,))
        return cur.rowcount > 0


def _clean_id(raw) -> str:
    """CSV id cell as text; blanks (NaN) become "" and 5550100.0 becomes "5550100"."""
    if pd.isna(raw):
        return ""
    if isinstance(raw, float) and raw.is_integer():
        raw = int(raw)
    return str(raw).strip()


def import_csv(csv_path: str, config: EngineConfig = DEFAULT_CONFIG, db_path: str = DEFAULT_DB_PATH) -> int:
    """Compute and store a plan for every valid row of a demographics CSV."""
    df = pd.read_csv(csv_path)
    if "profile_id" not in df.columns:
        raise ValueError(f"{csv_path} has no profile_id column")
    count = 0
    for idx, row in df.iterrows():
        profile_id = _clean_id(row["profile_id"])
        if not profile_id:
            logger.warning("Skipping row %s: blank profile_id", idx)
            continue
        try:
            demographics = frame_to_demographics(row)
        except (TypeError, ValueError) as e:
            logger.warning("Skipping row %s (%s): %s", idx, profile_id, e)
            continue
        errors = validate_demographics(demographics)
        if errors:
            logger.warning("Skipping row %s (%s): %s", idx, profile_id, errors)
            continue
        name = row.get("name")
        save_profile(
            profile_id=profile_id,
            demographics=demographics,
            plan=compute_macro_goals(demographics, config),
            config=config,
            name=None if pd.isna(name) else str(name),
            db_path=db_path,
        )
        count += 1
    return count
