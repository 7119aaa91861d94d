"""
state.py

Per-user state for one scheduler tick, carried through the refresh graph.

Key rules:
- Every field has a default so LangGraph can merge partial updates.
- Nodes return ONLY the keys they changed — LangGraph merges the rest.
- A fresh state is built for every user on every tick; nothing carries
  over from a previous tick.
"""

from typing import Optional

from pydantic import BaseModel


class UserRefreshState(BaseModel):

    user_id: str

    # ── CheckSubscription ─────────────────────────────────────
    subscribed: Optional[bool] = None

    # ── GenerateCustom / EnsureDefault ────────────────────────
    mode:               Optional[str] = None   # "custom" / "default"
    meal_plans:         int           = 0      # custom plans stored this tick
    workout_plans:      int           = 0
    defaults_generated: bool          = False

    # ── Outcome ───────────────────────────────────────────────
    status: str           = "pending"          # pending / done / failed
    error:  Optional[str] = None
