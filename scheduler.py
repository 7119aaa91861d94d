"""
scheduler.py

Periodic plan refresh.

Fires on days of the month 1, 3, 5, … (every SCHEDULER_EVERY_DAYS days,
counted from the 1st like a `*/2` cron day field) at SCHEDULER_RUN_AT
local time. Each tick walks every user sequentially through the refresh
graph; a failing user is logged and counted, never fatal to the batch.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, time, timedelta
from typing import Callable, Optional

from pydantic import BaseModel, Field

import config
from db.database import SessionFactory, session_scope
from db.repositories import UserRepository
from scheduler_graph import refresh_user

logger = logging.getLogger(__name__)


class TickSummary(BaseModel):
    started_at: datetime
    processed:  int = 0
    custom:     int = 0
    default:    int = 0
    failed:     dict[str, str] = Field(default_factory=dict)   # user_id → error

    @property
    def succeeded(self) -> int:
        return self.processed - len(self.failed)


def next_run_time(
    now: datetime,
    every_days: int = config.SCHEDULER_EVERY_DAYS,
    at: time = config.SCHEDULER_RUN_AT,
) -> datetime:
    """First matching day-of-month at `at`, strictly after `now`."""
    day = now.date()
    # a matching day exists within two months for any step <= 31
    for _ in range(62):
        if (day.day - 1) % every_days == 0:
            candidate = datetime.combine(day, at, tzinfo=now.tzinfo)
            if candidate > now:
                return candidate
        day += timedelta(days=1)
    raise ValueError(f"No run day found for every_days={every_days}")


class PlanScheduler:

    def __init__(
        self,
        session_factory: SessionFactory,
        graph,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.session_factory = session_factory
        self.graph           = graph
        self.clock           = clock

    def run_tick(self) -> TickSummary:
        summary = TickSummary(started_at=self.clock())
        logger.info("Starting scheduled plan generation for all users...")

        with session_scope(self.session_factory) as db:
            user_ids = UserRepository(db).list_ids()
        logger.info("Found %d users to process", len(user_ids))

        for user_id in user_ids:
            summary.processed += 1
            try:
                result = refresh_user(self.graph, user_id)
            except Exception as e:
                logger.exception("Refresh graph crashed for user %s", user_id)
                summary.failed[user_id] = f"{type(e).__name__}: {e}"
                continue

            if result.status == "failed":
                summary.failed[user_id] = result.error or "unknown error"
            elif result.mode == "custom":
                summary.custom += 1
            else:
                summary.default += 1

        logger.info(
            "✅ Tick complete: %d users, %d custom, %d default, %d failed",
            summary.processed, summary.custom, summary.default, len(summary.failed),
        )
        return summary

    def run_forever(self, stop_event: Optional[threading.Event] = None) -> None:
        """Blocks until stop_event is set. Each tick starts fresh."""
        stop_event = stop_event or threading.Event()
        while not stop_event.is_set():
            now = self.clock()
            due = next_run_time(now)
            logger.info("Next plan refresh at %s", due.isoformat())
            if stop_event.wait(timeout=max(0.0, (due - now).total_seconds())):
                break
            try:
                self.run_tick()
            except Exception:
                logger.exception("Error in scheduled plan generation")
        logger.info("Scheduler stopped.")
