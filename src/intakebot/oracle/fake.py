"""Deterministic offline oracle.

Reads the prompt sections written by :mod:`intakebot.conversation.prompts`
and answers with simple keyword rules. Used when ``LLAMA_STACK_PROVIDER=fake``
and in tests; it never touches the network.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any, List, Tuple

from intakebot.conversation.prompts import (
    CONVERSATION_HEADER,
    FIELDS_HEADER,
    MISSING_HEADER,
    REQUIREMENTS_HEADER,
    USER_MESSAGE_HEADER,
)
from intakebot.conversation.schema import RequirementField, get_field
from intakebot.oracle.parsing import extract_balanced_json
from intakebot.oracle.protocols import OraclePurpose

__all__ = ["FakeOracle"]

# Checked in order; website_analytics must win over analytics.
_INTENT_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("website_analytics", ("bounce rate", "website traffic", "conversion rate", "site speed")),
    ("analytics", ("analytics", "revenue", "forecast", "dashboard", "report")),
    ("marketing", ("marketing", "seo", "social media", "blog", "content", "ads")),
    (
        "web_development",
        ("website", "web app", "site", "shopify", "wordpress", "e-commerce", "app"),
    ),
)

_DISCUSSION_WORDS = ("discuss", "check with", "talk to", "partner", "my team", "my boss")
_AGREEMENT_PREFIXES = ("yes", "yeah", "yep", "correct", "looks good", "perfect", "that's right")
_ADDITION_WORDS = ("also", "add", "plus")

_PAIR_RE = re.compile(r"^\s*([A-Za-z][\w ]*?)\s*:\s*(.+?)\s*$")
_NUMBER_RE = re.compile(r"\d[\d,]*(?:\.\d+)?")
_PROBLEM_TYPE_RE = re.compile(r"for an? (\w+) project")


def _quoted_user_message(prompt: str) -> str:
    match = re.search(re.escape(USER_MESSAGE_HEADER) + r' "(.*?)"\n\n', prompt, re.DOTALL)
    return match.group(1) if match else ""


def _section(prompt: str, header: str, end: str = "\n\n") -> str:
    start = prompt.find(header)
    if start < 0:
        return ""
    start += len(header)
    stop = prompt.find(end, start)
    return prompt[start:] if stop < 0 else prompt[start:stop]


def _coerce(field_def: RequirementField | None, raw: str) -> Any:
    kind = field_def.type if field_def is not None else "string"
    if kind == "array":
        return [part.strip() for part in raw.split(",") if part.strip()]
    if kind == "object":
        numbers = [float(n.replace(",", "")) for n in _NUMBER_RE.findall(raw)]
        numbers = [int(n) if n.is_integer() else n for n in numbers]
        if len(numbers) >= 2:
            return {"min": min(numbers[:2]), "max": max(numbers[:2])}
        if numbers:
            return {"fixed": numbers[0]}
        return {"notes": raw}
    if kind == "number":
        numbers = _NUMBER_RE.findall(raw)
        return float(numbers[0].replace(",", "")) if numbers else None
    if kind == "boolean":
        return raw.lower() in ("yes", "true", "y")
    return raw


@dataclass
class FakeOracle:
    """Rule-based oracle that records every call it receives."""

    calls: List[Tuple[str, str]] = field(default_factory=list)

    async def infer(
        self, prompt: str, *, purpose: OraclePurpose, max_tokens: int | None = None
    ) -> str:
        self.calls.append((purpose, prompt))
        handler = getattr(self, f"_{purpose}")
        return handler(prompt)

    def _classify(self, prompt: str) -> str:
        text = _quoted_user_message(prompt).lower()
        for intent, words in _INTENT_KEYWORDS:
            hits = [w for w in words if w in text]
            if hits:
                return json.dumps(
                    {
                        "primaryIntent": intent,
                        "confidence": 85,
                        "suggestedBackend": f"/api/{intent.replace('_', '-')}",
                        "reasoning": f"mentions {hits[0]}",
                    }
                )
        return json.dumps(
            {
                "primaryIntent": "general",
                "confidence": 40,
                "suggestedBackend": "/api/general",
                "reasoning": "no service keywords",
            }
        )

    def _extract(self, prompt: str) -> str:
        match = _PROBLEM_TYPE_RE.search(prompt)
        problem_type = match.group(1) if match else "general"
        field_keys = {
            line[2:].split(" ", 1)[0].lower(): line[2:].split(" ", 1)[0]
            for line in _section(prompt, FIELDS_HEADER).splitlines()
            if line.startswith("- ")
        }

        extracted: dict[str, Any] = {}
        for line in _section(prompt, CONVERSATION_HEADER, FIELDS_HEADER).splitlines():
            if not line.startswith("USER: "):
                continue
            for chunk in line[len("USER: "):].split(";"):
                pair = _PAIR_RE.match(chunk)
                if pair is None:
                    continue
                key = field_keys.get(pair.group(1).replace(" ", "").lower())
                if key is None:
                    continue
                extracted[key] = _coerce(get_field(problem_type, key), pair.group(2))
        return json.dumps({"extracted": extracted, "confidence": 90 if extracted else 10})

    def _confirm(self, prompt: str) -> str:
        raw = _quoted_user_message(prompt)
        text = raw.lower().strip()
        result = {
            "agreed": False,
            "needsDiscussion": False,
            "hasAdditions": False,
            "additionDetails": "",
            "clarificationNeeded": "",
        }
        if any(w in text for w in _DISCUSSION_WORDS):
            result["needsDiscussion"] = True
        elif text.startswith(_AGREEMENT_PREFIXES):
            for word in _ADDITION_WORDS:
                found = re.search(rf"\b{word}\b", text)
                if found:
                    result["hasAdditions"] = True
                    result["additionDetails"] = raw[found.end():].strip(" ,.")
                    break
            else:
                result["agreed"] = True
        else:
            result["clarificationNeeded"] = raw.strip()
        return json.dumps(result)

    def _question(self, prompt: str) -> str:
        for line in _section(prompt, MISSING_HEADER).splitlines():
            if line.startswith("- "):
                key, _, description = line[2:].partition(": ")
                return f"Could you tell me about your {key} ({description})?"
        return "Is there anything else you'd like to add?"

    def _summary(self, prompt: str) -> str:
        raw = extract_balanced_json(_section(prompt, REQUIREMENTS_HEADER, "\n\nCreate"))
        requirements = json.loads(raw) if raw else {}
        bullets = "\n".join(f"- {key}: {value}" for key, value in requirements.items())
        return f"Let me confirm what I've gathered:\n{bullets}\nIs this accurate?"
