# tests/test_plan_agent.py
from datetime import date

import pytest

from agents.plan_agent import MEAL_DOMAIN, WORKOUT_DOMAIN, PlanAgent
from errors import GenerationFailure, MalformedResponse
from llm.generation_client import GenerationClient
from schemas.plan_schemas import DEFAULT_ATTRIBUTES


def test_meal_agent_returns_owned_drafts(fake_model_cls, meal_day, as_reply):
    agent = PlanAgent(GenerationClient(fake_model_cls(as_reply([meal_day("2024-01-01")]))), MEAL_DOMAIN)
    drafts = agent.generate(DEFAULT_ATTRIBUTES, [date(2024, 1, 1)], owner_id="u1")
    assert len(drafts) == 1
    assert drafts[0].owner_id == "u1"
    assert drafts[0].totals.calories == 1500


def test_workout_agent_uses_workout_prompt(fake_model_cls, workout_day, as_reply):
    model = fake_model_cls(as_reply([workout_day("2024-01-01")]))
    drafts = PlanAgent(GenerationClient(model), WORKOUT_DOMAIN).generate(DEFAULT_ATTRIBUTES, [date(2024, 1, 1)])
    assert drafts[0].is_default is True
    assert "coach sportif" in model.prompts[0]


def test_agent_propagates_pipeline_errors(fake_model_cls):
    agent = PlanAgent(GenerationClient(fake_model_cls("désolé")), MEAL_DOMAIN)
    with pytest.raises(MalformedResponse):
        agent.generate(DEFAULT_ATTRIBUTES, [date(2024, 1, 1)])


def test_empty_reply_is_a_generation_failure(fake_model_cls):
    agent = PlanAgent(GenerationClient(fake_model_cls("[]")), MEAL_DOMAIN)
    with pytest.raises(GenerationFailure):
        agent.generate(DEFAULT_ATTRIBUTES, [date(2024, 1, 1)])


def test_only_unrequested_days_is_a_generation_failure(fake_model_cls, workout_day, as_reply):
    agent = PlanAgent(GenerationClient(fake_model_cls(as_reply([workout_day("2024-02-01")]))), WORKOUT_DOMAIN)
    with pytest.raises(GenerationFailure):
        agent.generate(DEFAULT_ATTRIBUTES, [date(2024, 1, 1)])


def test_repeated_and_unrequested_days_are_dropped(fake_model_cls, meal_day, as_reply):
    first, again = meal_day("2024-01-01"), meal_day("2024-01-01", snack=False)
    reply = as_reply([first, meal_day("2024-01-02"), again, meal_day("2024-03-01")])
    agent = PlanAgent(GenerationClient(fake_model_cls(reply)), MEAL_DOMAIN)

    drafts = agent.generate(DEFAULT_ATTRIBUTES, [date(2024, 1, 1), date(2024, 1, 2)])

    assert [d.plan_date for d in drafts] == [date(2024, 1, 1), date(2024, 1, 2)]
    assert drafts[0].totals.calories == 1400
