"""
main.py

Command-line entry point for the plan backend.

Usage:
  python main.py init-db                      → create tables (dev)
  python main.py tick                         → run one scheduler tick now
  python main.py scheduler                    → run the periodic scheduler
  python main.py meal-plans USER_ID           → current meal plans for a user
  python main.py workout-plans USER_ID        → current workout plans for a user
  python main.py generate-meal USER_ID        → custom meal plans (subscribers)
  python main.py generate-workout USER_ID     → custom workout plans (subscribers)
  python main.py default-meal [--days N]      → shared default meal plans
  python main.py default-workout [--days N]   → shared default workout plans
"""

import argparse
import logging
import sys

import config

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════
# Display helpers
# ═══════════════════════════════════════════════════════════════

def print_meal_plans(plans) -> None:
    if not plans:
        print("No meal plans available.")
        return
    print("\n📅 MEAL PLANS")
    print("=" * 70)
    for plan in plans:
        t = plan.totals
        tag = "default" if plan.is_default else "custom"
        print(f"\n{'─'*70}")
        print(f"  {plan.plan_date.isoformat()} ({tag})  —  {t.calories:.0f} kcal | "
              f"P:{t.protein:.0f}g C:{t.carbs:.0f}g F:{t.fat:.0f}g")
        for meal in plan.meals:
            print(f"  [{meal.slot:10}] {meal.title:40} {meal.nutrition.calories:>5.0f} kcal  {meal.duration_minutes} min")


def print_workout_plans(plans) -> None:
    if not plans:
        print("No workout plans available.")
        return
    print("\n🏋️ WORKOUT PLANS")
    print("=" * 70)
    for plan in plans:
        tag = "default" if plan.is_default else "custom"
        print(f"\n{'─'*70}")
        print(f"  {plan.plan_date.isoformat()} ({tag})  —  {plan.name} | {plan.intensity} | "
              f"{plan.duration_minutes} min | ~{plan.estimated_calories:.0f} kcal")
        for ex in plan.exercises:
            part = f" ({ex.body_part})" if ex.body_part else ""
            print(f"    • {ex.name:30} {ex.reps:10}{part}")


# ═══════════════════════════════════════════════════════════════
# Commands
# ═══════════════════════════════════════════════════════════════

def cmd_init_db(args) -> None:
    from db.database import create_tables
    create_tables()
    print("✅ Tables ready.")


def cmd_tick(args) -> None:
    summary = args.app.scheduler.run_tick()
    print(f"✅ {summary.processed} users | {summary.custom} custom | "
          f"{summary.default} default | {len(summary.failed)} failed")
    for user_id, error in summary.failed.items():
        print(f"   ❌ {user_id}: {error}")


def cmd_scheduler(args) -> None:
    print(f"⏰ Refreshing plans every {config.SCHEDULER_EVERY_DAYS} days at "
          f"{config.SCHEDULER_RUN_AT.strftime('%H:%M')}. Ctrl+C to stop.")
    try:
        args.app.scheduler.run_forever()
    except KeyboardInterrupt:
        print("\n👋 Scheduler stopped.")


COMMANDS = {
    "init-db":          (cmd_init_db, False),
    "tick":             (cmd_tick, False),
    "scheduler":        (cmd_scheduler, False),
    "meal-plans":       (lambda a: print_meal_plans(a.app.meal_service.get_plans(a.user_id)), True),
    "workout-plans":    (lambda a: print_workout_plans(a.app.workout_service.get_plans(a.user_id)), True),
    "generate-meal":    (lambda a: print_meal_plans(a.app.meal_service.generate_custom_plans(a.user_id)), True),
    "generate-workout": (lambda a: print_workout_plans(a.app.workout_service.generate_custom_plans(a.user_id)), True),
    "default-meal":     (lambda a: print_meal_plans(a.app.meal_service.get_default_plans(a.days)), False),
    "default-workout":  (lambda a: print_workout_plans(a.app.workout_service.get_default_plans(a.days)), False),
}


def _positive_int(value: str) -> int:
    days = int(value)
    if days < 1:
        raise argparse.ArgumentTypeError("must be at least 1")
    return days


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="AI meal & workout plan backend")
    sub = parser.add_subparsers(dest="command", required=True)
    for name, (_, needs_user) in COMMANDS.items():
        p = sub.add_parser(name)
        if needs_user:
            p.add_argument("user_id", help="User ID")
        if name.startswith("default-"):
            p.add_argument("--days", type=_positive_int, default=config.PLAN_WINDOW_DAYS,
                           help="Days in the window, starting today")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    from errors import PlanError

    handler, _ = COMMANDS[args.command]
    if args.command != "init-db":
        from bootstrap import build_app
        args.app = build_app()

    try:
        handler(args)
    except PlanError as e:
        print(f"❌ {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
