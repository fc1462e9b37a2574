"""Tests for requirements extraction and readiness scoring."""

from __future__ import annotations

import json

import pytest

from intakebot.conversation.extractor import (
    ExtractedRequirements,
    RequirementsExtractor,
    is_present,
    readiness_score,
)
from intakebot.conversation.models import Message
from intakebot.conversation.schema import get_all_fields, get_required_fields


@pytest.mark.parametrize(
    ("value", "present"),
    [
        (None, False),
        ("", False),
        ("   ", False),
        ([], False),
        ({}, False),
        ("Shopify", True),
        (["blog"], True),
        ({"fixed": 5000}, True),
        (0, True),
        (False, True),
    ],
)
def test_is_present(value, present):
    assert is_present(value) is present


def test_readiness_score_rounding():
    assert readiness_score(11, 0) == 0
    assert readiness_score(11, 6) == 55
    assert readiness_score(3, 2) == 67
    assert readiness_score(8, 1) == 13
    assert readiness_score(8, 5) == 63
    assert readiness_score(8, 8) == 100
    assert readiness_score(0, 0) == 0


class TestParse:
    def test_partial_extraction(self):
        fields = get_all_fields("marketing")
        text = (
            '{"extracted": {"serviceType": "SEO", "goals": ["traffic", "leads"], '
            '"timeline": null, "websiteUrl": "", "budget": {"min": 1000, "max": 2000}, '
            '"favouriteColour": "blue"}, "confidence": 80}'
        )

        result = RequirementsExtractor.parse(text, fields)

        assert result.data == {
            "serviceType": "SEO",
            "goals": ["traffic", "leads"],
            "budget": {"min": 1000, "max": 2000},
        }
        assert result.missing_required == ["currentState", "targetAudience", "timeline"]
        assert result.readiness_score == 50
        assert result.completion_ready is False

    def test_all_required_present(self):
        fields = get_all_fields("general")
        text = (
            '{"extracted": {"projectSummary": "CRM cleanup", "goals": ["dedupe"], '
            '"timeline": "1 month", "budget": {"fixed": 3000}}}'
        )

        result = RequirementsExtractor.parse(text, fields)

        assert result.missing_required == []
        assert result.readiness_score == 100
        assert result.completion_ready is True

    @pytest.mark.parametrize(
        "text",
        ["not json at all", '{"confidence": 50}', '{"extracted": ["a", "b"]}'],
    )
    def test_malformed_output_is_zero_state(self, text):
        fields = get_all_fields("analytics")
        result = RequirementsExtractor.parse(text, fields)
        assert result == ExtractedRequirements.zero_state(get_required_fields("analytics"))
        assert result.readiness_score == 0
        assert len(result.missing_required) == 8

    @pytest.mark.parametrize(("present", "score"), [(1, 13), (5, 63)])
    def test_half_scores_round_up(self, present, score):
        fields = get_all_fields("analytics")
        required = get_required_fields("analytics")
        extracted = {f.key: "given" for f in required[:present]}
        text = json.dumps({"extracted": extracted, "confidence": 70})

        result = RequirementsExtractor.parse(text, fields)

        assert len(required) == 8
        assert result.readiness_score == score
        assert len(result.missing_required) == 8 - present


class TestExtract:
    @pytest.mark.anyio
    async def test_prompt_contains_transcript_and_fields(self, oracle_factory):
        oracle = oracle_factory(extract='{"extracted": {"platform": "Shopify"}}')
        messages = [
            Message.user("I want an online store"),
            Message.assistant("Which platform?"),
            Message.user("Shopify please"),
        ]

        result = await RequirementsExtractor(oracle).extract("web_development", messages)

        assert result.data == {"platform": "Shopify"}
        assert result.readiness_score == 9
        purpose, prompt, max_tokens = oracle.calls[0]
        assert purpose == "extract"
        assert max_tokens == 2000
        assert "USER: I want an online store" in prompt
        assert "ASSISTANT: Which platform?" in prompt
        assert "- platform (REQUIRED)" in prompt
        assert "- integrations (optional)" in prompt

    @pytest.mark.anyio
    async def test_category_without_fields_skips_oracle(self, oracle_factory):
        oracle = oracle_factory()

        result = await RequirementsExtractor(oracle).extract("astrology", [Message.user("hi")])

        assert oracle.calls == []
        assert result.completion_ready is True
        assert result.readiness_score == 0
        assert result.missing_required == []
