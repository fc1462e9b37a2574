"""Prompt builders for every oracle call the conversation makes.

Section headers are stable so the offline fake oracle can read prompts back.
"""

from __future__ import annotations

import json
from typing import Any, Iterable, Sequence

from intakebot.conversation.models import Message
from intakebot.conversation.schema import RequirementField

USER_MESSAGE_HEADER = "USER MESSAGE:"
CONVERSATION_HEADER = "CONVERSATION:"
FIELDS_HEADER = "FIELDS TO EXTRACT:"
MISSING_HEADER = "STILL MISSING (focus on these):"
REQUIREMENTS_HEADER = "REQUIREMENTS:"

MAX_TOKENS = {
    "classify": 500,
    "extract": 2000,
    "confirm": 300,
    "question": 300,
    "summary": 500,
}

SERVICE_DESCRIPTIONS = {
    "web_development": (
        "Website building, app development, technical implementation, project estimation"
    ),
    "analytics": "Business analytics, revenue analysis, financial forecasting, data insights",
    "marketing": "Content creation, SEO, blog posts, social media, copywriting",
    "website_analytics": (
        "Website traffic analysis, bounce rate, conversion optimization, user behavior"
    ),
}


def build_classification_prompt(user_message: str, history: Sequence[str]) -> str:
    prompt = (
        "Classify the user's intent so the conversation can gather the right requirements.\n\n"
        f'{USER_MESSAGE_HEADER} "{user_message}"\n\n'
    )
    if history:
        prompt += "CONVERSATION HISTORY:\n" + "\n".join(history) + "\n\n"

    services = "\n".join(
        f"{i}. {name} - {desc}" for i, (name, desc) in enumerate(SERVICE_DESCRIPTIONS.items(), 1)
    )
    prompt += (
        f"AVAILABLE SERVICES:\n{services}\n\n"
        "If none fits, use \"general\".\n\n"
        "Respond ONLY with JSON:\n"
        "{\n"
        '  "primaryIntent": "service_name",\n'
        '  "confidence": 0-100,\n'
        '  "suggestedBackend": "/api/service-name",\n'
        '  "reasoning": "brief explanation"\n'
        "}"
    )
    return prompt


def format_transcript(messages: Iterable[Message]) -> str:
    return "\n".join(f"{m.role.upper()}: {m.content}" for m in messages)


def build_extraction_prompt(
    problem_type: str, fields: Sequence[RequirementField], messages: Sequence[Message]
) -> str:
    field_lines = "\n".join(
        f"- {f.key} ({'REQUIRED' if f.required else 'optional'}): {f.description}" for f in fields
    )
    return (
        f"Extract structured requirements from this conversation for a {problem_type} project.\n\n"
        f"{CONVERSATION_HEADER}\n{format_transcript(messages)}\n\n"
        f"{FIELDS_HEADER}\n{field_lines}\n\n"
        "INSTRUCTIONS:\n"
        "1. Extract all mentioned information into structured JSON\n"
        "2. If information is not explicitly stated, use null. Do not guess.\n"
        "3. Be specific - extract exact details mentioned, not assumptions\n"
        "4. For arrays, extract all items mentioned\n"
        "5. For budget, extract as {min: number, max: number} or {fixed: number}\n\n"
        "Respond ONLY with valid JSON in this format:\n"
        "{\n"
        '  "extracted": {\n'
        '    "fieldName": "value",\n'
        "    ...\n"
        "  },\n"
        '  "confidence": 0-100\n'
        "}"
    )


def build_confirmation_analysis_prompt(user_response: str) -> str:
    return (
        "Analyze this user response to a confirmation question:\n\n"
        f'{USER_MESSAGE_HEADER} "{user_response}"\n\n'
        "Categorize their response:\n\n"
        "1. PURE AGREEMENT: They agree with everything, no changes\n"
        '   - Examples: "yes", "correct", "that\'s right", "looks good", "perfect"\n\n'
        "2. NEEDS DISCUSSION: They need to talk to someone else before deciding\n"
        '   - Examples: "need to discuss with partner/boss/team", "let me check with my team"\n\n'
        "3. ADDING REQUIREMENTS: They agree BUT want to add something NEW\n"
        '   - Examples: "yes, and also...", "can we add...", "I also need...", "plus..."\n'
        "   - This is NOT a disagreement, it's expanding scope\n\n"
        "4. CORRECTIONS: They disagree with what was captured, want to change something\n"
        '   - Examples: "no, the budget is...", "actually it\'s...", "you got X wrong"\n\n'
        "5. TRUE DISAGREEMENT: They fundamentally disagree or it's completely wrong\n"
        '   - Examples: "no that\'s all wrong", "I never said that", "not what I meant"\n\n'
        "Respond ONLY with JSON:\n"
        "{\n"
        '  "agreed": boolean (true for pure agreement),\n'
        '  "needsDiscussion": boolean,\n'
        '  "hasAdditions": boolean (true if adding new requirements),\n'
        '  "additionDetails": "what they want to add, or empty string",\n'
        '  "clarificationNeeded": "what needs correction, or empty string"\n'
        "}"
    )


def build_question_prompt(
    problem_type: str,
    known: dict[str, Any],
    missing: Sequence[RequirementField],
    recent: Sequence[Message],
) -> str:
    missing_lines = "\n".join(f"- {f.key}: {f.description}" for f in missing)
    conversation = "\n".join(m.as_line() for m in recent)
    return (
        f"You are gathering requirements for a {problem_type} project.\n\n"
        f"WHAT WE KNOW:\n{json.dumps(known, indent=2, default=str)}\n\n"
        f"{MISSING_HEADER}\n{missing_lines}\n\n"
        f"RECENT CONVERSATION:\n{conversation}\n\n"
        "YOUR TASK:\n"
        "Ask ONE natural follow-up question to gather the first missing field listed.\n"
        "Be conversational and friendly. Don't ask for everything at once.\n\n"
        "Respond with just your question:"
    )


def build_summary_prompt(problem_type: str, requirements: dict[str, Any]) -> str:
    return (
        f"Generate a friendly confirmation summary for these {problem_type} requirements:\n\n"
        f"{REQUIREMENTS_HEADER}\n{json.dumps(requirements, indent=2, default=str)}\n\n"
        "Create a concise, bullet-point summary that:\n"
        '1. Starts with "Let me confirm what I\'ve gathered:"\n'
        "2. Lists 5-8 key points\n"
        '3. Ends with "Is this accurate?"\n\n'
        "Keep it natural and conversational:"
    )
