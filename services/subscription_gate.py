"""
services/subscription_gate.py

hasActiveSubscription as a boolean capability check.

Fails safe: any store error is logged and reported as "not subscribed",
so callers fall back to shared default plans instead of failing.
"""

from __future__ import annotations

import logging

from db.database import SessionFactory, session_scope
from db.repositories import SubscriptionRepository

logger = logging.getLogger(__name__)


class SubscriptionGate:

    def __init__(self, session_factory: SessionFactory):
        self.session_factory = session_factory

    def has_active_subscription(self, user_id: str) -> bool:
        try:
            with session_scope(self.session_factory) as db:
                status = SubscriptionRepository(db).get_status(user_id)
        except Exception:
            logger.exception("Subscription lookup failed for user %s; treating as inactive", user_id)
            return False
        return status == SubscriptionRepository.ACTIVE
