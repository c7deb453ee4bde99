from __future__ import annotations

import argparse
import json
import logging
import os
import sys

from batch import compute_plans_frame, load_demographics_csv
from config import DEFAULT_DB_PATH, REPORTS_DIR, load_engine_config
from db import delete_profile, get_profile, import_csv, init_db, list_profiles, save_profile
from macro_engine import compute_macro_goals
from models import ACTIVITY_LEVELS, GOALS, SEXES, CalorieStrategy, Demographics, EngineConfig, SplitStrategy
from reporter import format_macro_goals, plan_markdown, plot_macro_split
from validation import DemographicsError, ensure_valid

logger = logging.getLogger("macro_bot")


def demographics_from_args(args) -> Demographics:
    return Demographics(
        age_years=args.age,
        biological_sex=args.sex,
        height_feet=args.feet,
        height_inches=args.inches,
        weight_pounds=args.weight,
        activity_level=args.activity,
        goal=args.goal,
    )


def print_plan(plan) -> None:
    fmt = format_macro_goals(plan)
    print(fmt["summary"])
    for line in fmt["breakdown"].values():
        print(f"  {line}")
    for line in fmt["details"].values():
        print(f"  {line}")


def cmd_compute(args):
    d = ensure_valid(demographics_from_args(args))
    plan = compute_macro_goals(d, args.config)
    if args.json:
        print(json.dumps(plan.to_dict(camel=args.camel), indent=2))
    else:
        print_plan(plan)


def cmd_profile_set(args):
    d = ensure_valid(demographics_from_args(args))
    plan = compute_macro_goals(d, args.config)
    save_profile(args.id, d, plan, config=args.config, name=args.name, db_path=args.db)
    cmd_profile_show(args)


def cmd_profile_show(args):
    p = get_profile(args.id, args.db)
    if p is None:
        print(f"No profile with id {args.id}", file=sys.stderr)
        return 1
    d = p["demographics"]
    print(f"Profile {p['profile_id']}" + (f" ({p['name']})" if p["name"] else ""))
    print(
        f"Age: {d.age_years}, Sex: {d.biological_sex}, Height: {d.height_feet}ft {d.height_inches}in, "
        f"Weight: {d.weight_pounds:g} lb, Activity: {d.activity_level}, Goal: {d.goal}"
    )
    print(f"Strategies: {p['calorie_strategy']} / {p['split_strategy']}, updated {p['updated_at']}")
    print_plan(p["macro_plan"])
    return 0


def cmd_profile_list(args):
    for p in list_profiles(args.db):
        plan = p["macro_plan"]
        print(
            f"[{p['profile_id']}] {p['name'] or '-'}: {plan.target_calories} kcal "
            f"P{plan.protein_grams} C{plan.carb_grams} F{plan.fat_grams}"
        )


def cmd_profile_delete(args):
    if not delete_profile(args.id, args.db):
        print(f"No profile with id {args.id}", file=sys.stderr)
        return 1
    print(f"Deleted profile {args.id}")
    return 0


def cmd_profile_import(args):
    count = import_csv(args.csv, args.config, args.db)
    print(f"Imported {count} profiles from {args.csv}")


def cmd_batch(args):
    frame = compute_plans_frame(load_demographics_csv(args.csv), args.config)
    if args.out:
        frame.to_csv(args.out, index=False)
        print(f"Saved: {args.out} ({len(frame)} rows)")
    else:
        print(frame.to_string(index=False))


def cmd_report(args):
    p = get_profile(args.id, args.db)
    if p is None:
        print(f"No profile with id {args.id}", file=sys.stderr)
        return 1
    config = EngineConfig(CalorieStrategy(p["calorie_strategy"]), SplitStrategy(p["split_strategy"]))
    md = plan_markdown(p["macro_plan"], p["demographics"], config, title=f"Macro Plan {args.id}")
    os.makedirs(args.out_dir, exist_ok=True)
    md_path = os.path.join(args.out_dir, f"plan_{args.id}.md")
    with open(md_path, "w", encoding="utf-8") as f:
        f.write(md)
    img = plot_macro_split(p["macro_plan"], args.out_dir, label=str(args.id))
    print(md)
    print(f"Saved: {md_path}, {img}")
    return 0


def add_demographic_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--age", type=int, required=True)
    p.add_argument("--sex", choices=SEXES, required=True)
    p.add_argument("--feet", type=int, required=True)
    p.add_argument("--inches", type=int, default=0)
    p.add_argument("--weight", type=float, required=True, help="pounds")
    p.add_argument("--activity", choices=ACTIVITY_LEVELS, required=True)
    p.add_argument("--goal", choices=GOALS, required=True)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="macro-planner: daily calorie and macro targets")
    p.add_argument("--db", default=DEFAULT_DB_PATH)
    p.add_argument("--calorie-strategy", choices=[s.value for s in CalorieStrategy])
    p.add_argument("--split-strategy", choices=[s.value for s in SplitStrategy])
    p.add_argument("--verbose", action="store_true")

    sub = p.add_subparsers(dest="cmd", required=True)

    # compute
    p_compute = sub.add_parser("compute")
    add_demographic_args(p_compute)
    p_compute.add_argument("--json", action="store_true")
    p_compute.add_argument("--camel", action="store_true", help="with --json, emit macroGoals field names")
    p_compute.set_defaults(func=cmd_compute)

    # profile
    p_profile = sub.add_parser("profile")
    sub_profile = p_profile.add_subparsers(dest="sub", required=True)

    sub_profile_set = sub_profile.add_parser("set")
    sub_profile_set.add_argument("--id", required=True)
    sub_profile_set.add_argument("--name")
    add_demographic_args(sub_profile_set)
    sub_profile_set.set_defaults(func=cmd_profile_set)

    sub_profile_show = sub_profile.add_parser("show")
    sub_profile_show.add_argument("--id", required=True)
    sub_profile_show.set_defaults(func=cmd_profile_show)

    sub_profile_list = sub_profile.add_parser("list")
    sub_profile_list.set_defaults(func=cmd_profile_list)

    sub_profile_delete = sub_profile.add_parser("delete")
    sub_profile_delete.add_argument("--id", required=True)
    sub_profile_delete.set_defaults(func=cmd_profile_delete)

    sub_profile_import = sub_profile.add_parser("import-csv")
    sub_profile_import.add_argument("--csv", required=True)
    sub_profile_import.set_defaults(func=cmd_profile_import)

    # batch
    p_batch = sub.add_parser("batch")
    p_batch.add_argument("--csv", required=True)
    p_batch.add_argument("--out")
    p_batch.set_defaults(func=cmd_batch)

    # report
    p_report = sub.add_parser("report")
    p_report.add_argument("--id", required=True)
    p_report.add_argument("--out-dir", default=REPORTS_DIR)
    p_report.set_defaults(func=cmd_report)

    return p


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        args.config = load_engine_config(
            calorie_strategy=args.calorie_strategy,
            split_strategy=args.split_strategy,
        )
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return 2
    logger.debug("engine config: %s", args.config)
    init_db(args.db)
    try:
        return args.func(args) or 0
    except DemographicsError as e:
        for field, message in e.errors.items():
            print(f"{field}: {message}", file=sys.stderr)
        return 2
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
