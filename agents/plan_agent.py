"""
agents/plan_agent.py

Generation pipeline shared by both domains:

    attributes + dates → prompt → complete() → parse/validate → normalize → drafts

The agent has no persistence and no fallback; GenerationFailure,
MalformedResponse and SchemaViolation propagate to the service layer,
which decides between a generic error and static content.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional, Sequence

from pydantic import BaseModel

from agents.normalizer import normalize_meal_plan, normalize_workout_plan
from agents.response_parser import parse_and_validate
from errors import GenerationFailure
from llm.generation_client import GenerationClient
from prompts.meal_prompt import build_meal_prompt
from prompts.workout_prompt import build_workout_prompt
from schemas.plan_schemas import (
    MEAL_PLAN_SCHEMA, WORKOUT_PLAN_SCHEMA,
    FieldSpec, MealPlanBatch, UserAttributes, WorkoutPlanBatch,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlanDomain:
    name:          str
    build_prompt:  Callable[[UserAttributes, Sequence[date]], str]
    schema:        FieldSpec
    model:         type[BaseModel]
    normalize:     Callable[[BaseModel, Optional[str]], list]


MEAL_DOMAIN = PlanDomain(
    name="meal",
    build_prompt=build_meal_prompt,
    schema=MEAL_PLAN_SCHEMA,
    model=MealPlanBatch,
    normalize=normalize_meal_plan,
)

WORKOUT_DOMAIN = PlanDomain(
    name="workout",
    build_prompt=build_workout_prompt,
    schema=WORKOUT_PLAN_SCHEMA,
    model=WorkoutPlanBatch,
    normalize=normalize_workout_plan,
)


def unique_days(drafts: list, dates: Optional[Sequence[date]] = None) -> list:
    """One draft per date, last occurrence wins. With `dates`, other days are dropped."""
    wanted = None if dates is None else set(dates)
    by_date: dict = {}
    for draft in drafts:
        if wanted is not None and draft.plan_date not in wanted:
            logger.warning("Dropping unrequested day %s", draft.plan_date)
            continue
        if draft.plan_date in by_date:
            logger.warning("Batch repeats %s, keeping the last one", draft.plan_date)
        by_date[draft.plan_date] = draft
    return list(by_date.values())


class PlanAgent:

    def __init__(self, client: GenerationClient, domain: PlanDomain):
        self.client = client
        self.domain = domain

    def generate(
        self,
        attributes: UserAttributes,
        dates: Sequence[date],
        owner_id: Optional[str] = None,
    ) -> list:
        """
        Returns one draft per requested date the model answered, in the
        model's order. Days outside `dates` are dropped and a repeated date
        keeps its last occurrence. No usable day is a GenerationFailure.
        """
        logger.info(
            "Generating %s plan for %s (%d dates)",
            self.domain.name, owner_id or "default", len(dates),
        )
        prompt = self.domain.build_prompt(attributes, dates)
        raw    = self.client.complete(prompt)
        batch  = parse_and_validate(raw, self.domain.schema, self.domain.model)
        drafts = unique_days(self.domain.normalize(batch, owner_id), dates)
        if not drafts:
            raise GenerationFailure(f"Model returned no {self.domain.name} plan for the requested dates")
        logger.info("✅ %s plan: %d day(s) validated", self.domain.name, len(drafts))
        return drafts
