"""
db/migrations/versions/001_initial_schema.py

Initial migration — creates all tables.

Generate future migrations with:
  alembic revision --autogenerate -m "your description"
"""

from alembic import op
import sqlalchemy as sa

revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:

    # ── users ─────────────────────────────────────────────────────────────────
    op.create_table(
        "users",
        sa.Column("id",         sa.String(36),  primary_key=True),
        sa.Column("name",       sa.String(100), nullable=False),
        sa.Column("email",      sa.String(255), unique=True, nullable=True),
        sa.Column("created_at", sa.DateTime,    nullable=False),
        sa.Column("updated_at", sa.DateTime,    nullable=False),
    )

    # ── user_profiles ─────────────────────────────────────────────────────────
    op.create_table(
        "user_profiles",
        sa.Column("id",                    sa.String(36), primary_key=True),
        sa.Column("user_id",               sa.String(36), sa.ForeignKey("users.id"), unique=True),
        sa.Column("gender",                sa.String(20), nullable=True),
        sa.Column("date_of_birth",         sa.Date,       nullable=True),
        sa.Column("weight_kg",             sa.Float,      nullable=True),
        sa.Column("height_cm",             sa.Float,      nullable=True),
        sa.Column("fitness_level",         sa.String(30), nullable=True),
        sa.Column("goal",                  sa.String(50), nullable=True),
        sa.Column("dietary_restrictions",  sa.Text,       nullable=True),
        sa.Column("health_considerations", sa.Text,       nullable=True),
        sa.Column("equipment",             sa.Text,       nullable=True),
        sa.Column("days_per_week",         sa.Integer,    nullable=True),
        sa.Column("minutes_per_day",       sa.Integer,    nullable=True),
        sa.Column("updated_at",            sa.DateTime,   nullable=False),
    )

    # ── subscriptions ─────────────────────────────────────────────────────────
    op.create_table(
        "subscriptions",
        sa.Column("id",                 sa.String(36),  primary_key=True),
        sa.Column("user_id",            sa.String(36),  sa.ForeignKey("users.id"), unique=True),
        sa.Column("status",             sa.String(20),  nullable=False, server_default="INACTIVE"),
        sa.Column("external_id",        sa.String(100), nullable=True),
        sa.Column("current_period_end", sa.DateTime,    nullable=True),
        sa.Column("updated_at",         sa.DateTime,    nullable=False),
    )

    # ── meal_plans ────────────────────────────────────────────────────────────
    op.create_table(
        "meal_plans",
        sa.Column("id",         sa.String(36), primary_key=True),
        sa.Column("owner_key",  sa.String(36), nullable=False),
        sa.Column("user_id",    sa.String(36), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("date",       sa.DateTime,   nullable=False),
        sa.Column("is_default", sa.Boolean,    nullable=False, server_default=sa.false()),
        sa.Column("calories",   sa.Float,      nullable=False),
        sa.Column("protein",    sa.Float,      nullable=False),
        sa.Column("carbs",      sa.Float,      nullable=False),
        sa.Column("fat",        sa.Float,      nullable=False),
        sa.Column("created_at", sa.DateTime,   nullable=False),
        sa.UniqueConstraint("owner_key", "date", name="uq_meal_plans_owner_date"),
    )
    op.create_index("ix_meal_plans_default_date", "meal_plans", ["is_default", "date"])

    # ── planned_meals ─────────────────────────────────────────────────────────
    op.create_table(
        "planned_meals",
        sa.Column("id",               sa.String(36),  primary_key=True),
        sa.Column("plan_id",          sa.String(36),  sa.ForeignKey("meal_plans.id")),
        sa.Column("position",         sa.Integer,     nullable=False),
        sa.Column("meal_type",        sa.String(15),  nullable=False),
        sa.Column("title",            sa.String(200), nullable=False),
        sa.Column("calories",         sa.Float,       nullable=False),
        sa.Column("protein",          sa.Float,       nullable=False),
        sa.Column("carbs",            sa.Float,       nullable=False),
        sa.Column("fat",              sa.Float,       nullable=False),
        sa.Column("duration_minutes", sa.Integer,     nullable=False),
    )

    # ── meal_ingredients / meal_steps ─────────────────────────────────────────
    op.create_table(
        "meal_ingredients",
        sa.Column("id",       sa.String(36),  primary_key=True),
        sa.Column("meal_id",  sa.String(36),  sa.ForeignKey("planned_meals.id")),
        sa.Column("position", sa.Integer,     nullable=False),
        sa.Column("name",     sa.String(200), nullable=False),
    )
    op.create_table(
        "meal_steps",
        sa.Column("id",       sa.String(36), primary_key=True),
        sa.Column("meal_id",  sa.String(36), sa.ForeignKey("planned_meals.id")),
        sa.Column("position", sa.Integer,    nullable=False),
        sa.Column("text",     sa.Text,       nullable=False),
    )

    # ── workout_plans ─────────────────────────────────────────────────────────
    op.create_table(
        "workout_plans",
        sa.Column("id",         sa.String(36), primary_key=True),
        sa.Column("owner_key",  sa.String(36), nullable=False),
        sa.Column("user_id",    sa.String(36), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("date",       sa.DateTime,   nullable=False),
        sa.Column("is_default", sa.Boolean,    nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime,   nullable=False),
        sa.UniqueConstraint("owner_key", "date", name="uq_workout_plans_owner_date"),
    )
    op.create_index("ix_workout_plans_default_date", "workout_plans", ["is_default", "date"])

    # ── workouts ──────────────────────────────────────────────────────────────
    op.create_table(
        "workouts",
        sa.Column("id",                 sa.String(36),  primary_key=True),
        sa.Column("plan_id",            sa.String(36),  sa.ForeignKey("workout_plans.id")),
        sa.Column("name",               sa.String(200), nullable=False),
        sa.Column("description",        sa.Text,        nullable=False),
        sa.Column("intensity",          sa.String(30),  nullable=False),
        sa.Column("duration_minutes",   sa.Integer,     nullable=False),
        sa.Column("estimated_calories", sa.Float,       nullable=False),
    )

    # ── exercises ─────────────────────────────────────────────────────────────
    op.create_table(
        "exercises",
        sa.Column("id",                 sa.String(36),  primary_key=True),
        sa.Column("workout_id",         sa.String(36),  sa.ForeignKey("workouts.id")),
        sa.Column("position",           sa.Integer,     nullable=False),
        sa.Column("name",               sa.String(200), nullable=False),
        sa.Column("reps",               sa.String(50),  nullable=False),
        sa.Column("body_part",          sa.String(50),  nullable=True),
        sa.Column("description",        sa.Text,        nullable=True),
        sa.Column("duration_minutes",   sa.Integer,     nullable=True),
        sa.Column("estimated_calories", sa.Float,       nullable=True),
    )

    # ── meal_logs ─────────────────────────────────────────────────────────────
    op.create_table(
        "meal_logs",
        sa.Column("id",        sa.String(36), primary_key=True),
        sa.Column("user_id",   sa.String(36), sa.ForeignKey("users.id")),
        sa.Column("date",      sa.DateTime,   nullable=False),
        sa.Column("meal_type", sa.String(15), nullable=False),
        sa.Column("calories",  sa.Float,      nullable=False),
        sa.Column("protein",   sa.Float,      nullable=False),
        sa.Column("carbs",     sa.Float,      nullable=False),
        sa.Column("fat",       sa.Float,      nullable=False),
        sa.Column("logged_at", sa.DateTime,   nullable=False),
        sa.UniqueConstraint("user_id", "date", "meal_type", name="uq_meal_logs_user_date_type"),
    )

    # ── user_weight_entries ───────────────────────────────────────────────────
    op.create_table(
        "user_weight_entries",
        sa.Column("id",         sa.String(36), primary_key=True),
        sa.Column("user_id",    sa.String(36), sa.ForeignKey("users.id")),
        sa.Column("entry_date", sa.Date,       nullable=False),
        sa.Column("weight_kg",  sa.Float,      nullable=False),
        sa.Column("created_at", sa.DateTime,   nullable=False),
    )
    op.create_index("ix_weight_entries_user_date", "user_weight_entries", ["user_id", "entry_date"])


def downgrade() -> None:
    # Drop in reverse dependency order
    op.drop_table("user_weight_entries")
    op.drop_table("meal_logs")
    op.drop_table("exercises")
    op.drop_table("workouts")
    op.drop_table("workout_plans")
    op.drop_table("meal_steps")
    op.drop_table("meal_ingredients")
    op.drop_table("planned_meals")
    op.drop_table("meal_plans")
    op.drop_table("subscriptions")
    op.drop_table("user_profiles")
    op.drop_table("users")
