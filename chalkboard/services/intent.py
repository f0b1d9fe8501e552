import logging
import re
from typing import Literal

from chalkboard.clients import GroqClient
from chalkboard.services.prompts import INTENT_PROMPT

logger = logging.getLogger(__name__)

Intent = Literal["teach", "chat"]

# Phrases that always continue the lesson, so no model call is needed.
TEACH_TRIGGERS = (
    "ok",
    "okay",
    "haan",
    "haanji",
    "ready",
    "next",
    "continue",
    "tell me more",
    "in detail",
    "detail",
    "explain more",
    "more about",
    "deep",
    "expand",
    "example",
    "sample",
    "show example",
    "give example",
    "code example",
    "syntax",
)

# substring match, so "examples" and "detailed" count too
_TRIGGER_RE = re.compile(
    "|".join(re.escape(t) for t in TEACH_TRIGGERS),
    re.IGNORECASE,
)


def matches_teach_trigger(text: str) -> bool:
    return bool(_TRIGGER_RE.search(text or ""))


def normalize_intent(answer: str | None) -> Intent:
    """Read the model's one-word answer.  Anything but "chat" means teach."""
    word = re.sub(r"[^a-z]", "", (answer or "").strip().lower())
    return "chat" if word == "chat" else "teach"


class IntentClassifier:
    """Decide whether an utterance should be taught on the board or just answered."""

    def __init__(self, groq: GroqClient | None = None) -> None:
        self.groq = groq or GroqClient()

    async def classify(self, text: str) -> Intent:
        if matches_teach_trigger(text):
            return "teach"

        messages = [
            {"role": "system", "content": INTENT_PROMPT},
            {"role": "user", "content": text},
        ]
        answer = await self.groq.chat(messages, temperature=0)
        intent = normalize_intent(answer)
        logger.debug("Classified %r as %s (model said %r)", text[:60], intent, answer)
        return intent
