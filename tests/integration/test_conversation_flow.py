"""End-to-end conversations against the deterministic offline oracle."""

from __future__ import annotations

import pytest

from intakebot.config import Settings
from intakebot.conversation.models import ChatRequest, Phase
from intakebot.conversation.orchestrator import (
    NEEDS_DISCUSSION_REASON,
    UNCLEAR_REQUIREMENTS_REASON,
)
from intakebot.factory import create_orchestrator

pytestmark = pytest.mark.integration


@pytest.fixture
def orchestrator():
    return create_orchestrator(Settings(_env_file=None, llama_stack_provider="fake"))


async def _walk(orchestrator, messages):
    session_id = None
    responses = []
    for message in messages:
        response = await orchestrator.handle_message(
            ChatRequest(session_id=session_id, message=message)
        )
        session_id = response.session_id
        responses.append(response)
    return session_id, responses


GATHER_MARKETING = [
    "I need a marketing plan for SEO",
    "service type: SEO; current state: nothing yet; goals: leads, traffic; "
    "target audience: local bakeries",
    "timeline: 3 months; budget: 2000-4000",
]


@pytest.mark.anyio
async def test_gather_clarify_and_complete(orchestrator):
    session_id, responses = await _walk(
        orchestrator,
        [*GATHER_MARKETING, "no, the budget is wrong", "budget: 5000", "Yes, that's correct"],
    )

    assert [r.phase for r in responses] == [
        Phase.GATHERING,
        Phase.GATHERING,
        Phase.CONFIRMATION_FIRST,
        Phase.CLARIFYING,
        Phase.CONFIRMATION_SECOND,
        Phase.COMPLETE,
    ]
    assert responses[1].readiness_score == 67
    assert responses[2].readiness_score == 100
    assert responses[2].response.startswith("Let me confirm what I've gathered:")
    assert responses[-1].estimate_ready is True

    session = orchestrator.get_session(session_id)
    assert session.problem_type == "marketing"
    assert session.confirmation_attempts == 1
    assert session.requirements["budget"] == {"fixed": 5000}
    assert session.requirements["goals"] == ["leads", "traffic"]
    assert len(session.messages) == 12

    followup = await orchestrator.handle_message(
        ChatRequest(session_id=session_id, message="When do we start?")
    )
    assert followup.phase == Phase.COMPLETE
    assert followup.response.startswith("Your estimate is ready!")


@pytest.mark.anyio
async def test_two_disagreements_escalate(orchestrator):
    session_id, responses = await _walk(
        orchestrator,
        [*GATHER_MARKETING, "no, that's wrong", "no, still wrong", "no, all wrong"],
    )

    assert [r.phase for r in responses[2:]] == [
        Phase.CONFIRMATION_FIRST,
        Phase.CLARIFYING,
        Phase.CONFIRMATION_SECOND,
        Phase.HUMAN_ESCALATION,
    ]
    assert responses[-1].escalation_reason == UNCLEAR_REQUIREMENTS_REASON

    session = orchestrator.get_session(session_id)
    assert session.confirmation_attempts == 2
    assert session.escalation_reason == UNCLEAR_REQUIREMENTS_REASON


@pytest.mark.anyio
async def test_needs_discussion_escalates(orchestrator):
    session_id, responses = await _walk(
        orchestrator, [*GATHER_MARKETING, "I need to discuss with my partner first"]
    )

    assert responses[-1].phase == Phase.HUMAN_ESCALATION
    assert responses[-1].escalation_reason == NEEDS_DISCUSSION_REASON
    assert orchestrator.get_session(session_id).confirmation_attempts == 0


@pytest.mark.anyio
async def test_additions_reopen_gathering(orchestrator):
    session_id, responses = await _walk(
        orchestrator,
        [*GATHER_MARKETING, "Yes, and also a monthly newsletter", "Yes, looks good"],
    )

    assert responses[3].phase == Phase.GATHERING
    assert "a monthly newsletter" in responses[3].response
    # All required fields are still present, so the next turn re-confirms.
    assert responses[4].phase == Phase.CONFIRMATION_FIRST
    assert orchestrator.get_session(session_id).confirmation_attempts == 0


@pytest.mark.anyio
async def test_attempt_counter_never_decreases(orchestrator):
    session_id = None
    seen: list[int] = []
    for message in [*GATHER_MARKETING, "no", "budget: 1000", "no", "hello", "hello again"]:
        response = await orchestrator.handle_message(
            ChatRequest(session_id=session_id, message=message)
        )
        session_id = response.session_id
        seen.append(orchestrator.get_session(session_id).confirmation_attempts)

    assert seen == sorted(seen)
    assert seen[-1] == 2


@pytest.mark.anyio
async def test_sessions_are_listed(orchestrator):
    first, _ = await _walk(orchestrator, ["Build me a Shopify store"])
    second, _ = await _walk(orchestrator, ["Our bounce rate is terrible"])

    summaries = {s.id: s for s in orchestrator.list_sessions()}
    assert summaries[first].problem_type == "web_development"
    assert summaries[second].problem_type == "website_analytics"
    assert all(s.message_count == 2 for s in summaries.values())
