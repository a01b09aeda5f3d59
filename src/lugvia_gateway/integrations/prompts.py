"""
lugvia_gateway.integrations.prompts

System prompt construction for the moving assistant.

Responsibilities:
- Render the assistant persona plus a context block describing the user's
  profile, recent quotes, recommendations and recent conversation.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

HISTORY_TURNS = 3

_PERSONA = """You are Lugvia AI, the intelligent moving assistant for Lugvia.com, an AI-powered moving platform.

Lugvia connects people with trusted moving service providers through cost estimation, quote comparison, and personalized recommendations.

You help users with:
1. Moving cost estimation and budgeting
2. Comparing quotes from multiple providers
3. Packing tips and moving timeline planning
4. Insurance, storage and specialty item handling
5. Matching them with suitable moving companies

Keep responses concise, friendly and practical. Ask clarifying questions when you need more information."""


def _section(label: str, value: Any, empty: str) -> str:
    if not value:
        return empty
    return f"{label}: {json.dumps(value, indent=2, default=str)}"


class PromptBuilder:
    def __init__(self, persona: str = _PERSONA) -> None:
        self._persona = persona

    def context_block(self, context: Mapping[str, Any] | None) -> str:
        ctx = dict(context or {})
        history = ctx.get("conversation_history") or []
        lines = [
            _section("User Profile", ctx.get("user_profile"), "No user profile available"),
            _section("Recent Quotes", ctx.get("last_quotes"), "No recent quotes"),
            _section(
                "Current Recommendations",
                ctx.get("current_recommendations"),
                "No current recommendations",
            ),
            _section(
                "Recent Conversation",
                list(history)[-HISTORY_TURNS:],
                "No conversation history",
            ),
        ]
        return "\n".join(lines)

    def system_prompt(self, context: Mapping[str, Any] | None = None) -> str:
        return f"{self._persona}\n\nCURRENT CONTEXT:\n{self.context_block(context)}"
