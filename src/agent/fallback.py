"""
agent.fallback - Canned replies for when the language model is unavailable.
"""

from __future__ import annotations

import random
from typing import Optional

TOOL_FAILURE_REPLY = (
    "I apologize, but I encountered an error processing your request."
)


def general_templates(message: str) -> list[str]:
    return [
        f"I understand you're saying: {message}",
        "That's interesting. Could you tell me more?",
        "I see. How can I help you with that?",
        "Thanks for sharing that with me.",
    ]


class RandomFallbackResponses:
    """Pick one of the general templates at random."""

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()

    def general_reply(self, message: str) -> str:
        return self._rng.choice(general_templates(message))


class FixedFallbackResponses:
    """Always return the template at *index*."""

    def __init__(self, index: int = 0):
        self._index = index

    def general_reply(self, message: str) -> str:
        templates = general_templates(message)
        return templates[self._index % len(templates)]
