"""
config.py

Environment-driven configuration. Values are read once at import time
after loading a local .env file.

Generation settings (model, temperature, timeout) are fixed here and are
never supplied by callers. The billing / mail / JWT values are carried as
opaque strings for the HTTP and notification layers that consume them.
"""

from __future__ import annotations

import os
from datetime import time

from dotenv import load_dotenv

load_dotenv()


# ── Store ─────────────────────────────────────────────────────────────────────
DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///fitplan.db")

# ── Generation provider ───────────────────────────────────────────────────────
LLM_MODEL: str             = os.getenv("LLM_MODEL", "openai:gpt-4o")
LLM_TEMPERATURE: float     = float(os.getenv("LLM_TEMPERATURE", "0.7"))
LLM_TIMEOUT_SECONDS: float = float(os.getenv("LLM_TIMEOUT_SECONDS", "60"))
OPENAI_API_KEY: str | None = os.getenv("OPENAI_API_KEY")

# ── Opaque values for the surrounding layers ──────────────────────────────────
JWT_SECRET: str | None            = os.getenv("JWT_SECRET")
STRIPE_SECRET_KEY: str | None     = os.getenv("STRIPE_SECRET_KEY")
STRIPE_WEBHOOK_SECRET: str | None = os.getenv("STRIPE_WEBHOOK_SECRET")
MAIL_USER: str | None             = os.getenv("MAIL_USER")
MAIL_PASSWORD: str | None         = os.getenv("MAIL_PASSWORD")
FRONTEND_URL: str                 = os.getenv("FRONTEND_URL", "http://localhost:3000")

# ── Rate limiting ─────────────────────────────────────────────────────────────
REDIS_URL: str            = os.getenv("REDIS_URL", "redis://localhost:6379/0")
RATE_LIMIT_MAX_CALLS: int = int(os.getenv("RATE_LIMIT_MAX_CALLS", "5"))

# ── Planning / scheduling ─────────────────────────────────────────────────────
PLAN_WINDOW_DAYS: int     = int(os.getenv("PLAN_WINDOW_DAYS", "7"))
SCHEDULER_EVERY_DAYS: int = int(os.getenv("SCHEDULER_EVERY_DAYS", "2"))
SCHEDULER_RUN_AT: time    = time.fromisoformat(os.getenv("SCHEDULER_RUN_AT", "00:00"))

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
