import base64
import logging

from chalkboard.clients import GroqClient
from chalkboard.config import settings
from chalkboard.errors import InvalidInputError, UpstreamReportedError
from chalkboard.models import Step
from chalkboard.parsing import list_field
from chalkboard.services.board_notes import BoardNotesService
from chalkboard.services.conversation import ConversationStore
from chalkboard.services.intent import IntentClassifier
from chalkboard.services.prompts import (
    DEFAULT_IMAGE_QUESTION,
    chat_prompt,
    image_prompt,
    teach_prompt,
)
from chalkboard.services.speech import SpeechService

logger = logging.getLogger(__name__)

DEFAULT_CHAT_ID = "default"
IMAGE_PLACEHOLDER = "[Uploaded Image]"


def steps_from_payload(items: list) -> list[Step]:
    """Build steps from the model's ``steps`` list, dropping non-object entries."""
    return [Step.from_payload(item) for item in items if isinstance(item, dict)]


def needs_board_fallback(step: Step) -> bool:
    return not step.board_lines and len(step.spoken_text) > settings.board_fallback_min_chars


class StepGenerator:
    """Turn one student utterance into the ordered steps of a teaching turn.

    Pipeline::

        classify intent -> chat reply | structured steps
                        -> board fallback per step (teach only)
                        -> audio per step
                        -> persist narration, one message per step

    The conversation store is written only once every step is complete, so a
    turn that fails half way leaves no teacher messages behind.
    """

    def __init__(
        self,
        groq: GroqClient | None = None,
        store: ConversationStore | None = None,
    ) -> None:
        self.groq = groq or GroqClient()
        self.store = store or ConversationStore()
        self.intents = IntentClassifier(self.groq)
        self.board_notes = BoardNotesService(self.groq)
        self.speech = SpeechService(self.groq)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    async def teach(
        self, topic: str, voice_profile: str | None, chat_id: str | None
    ) -> list[Step]:
        chat_id = chat_id or DEFAULT_CHAT_ID
        history = await self.store.history(chat_id)
        await self.store.insert(chat_id, "student", topic)

        intent = await self.intents.classify(topic)
        logger.info("Chat %s: intent=%s", chat_id, intent)

        if intent == "chat":
            reply = await self._chat_reply(topic, voice_profile, history)
            steps = [Step(spoken_text=reply)]
            await self._complete_steps(steps, board_fallback=False)
        else:
            messages = [
                {"role": "system", "content": teach_prompt(voice_profile)},
                *history,
                {"role": "user", "content": topic},
            ]
            data = await self.groq.chat_json(messages, temperature=0.45)
            steps = steps_from_payload(list_field(data, "steps"))
            await self._complete_steps(steps)

        await self._persist(chat_id, steps)
        return steps

    async def teach_image(
        self,
        question: str | None,
        voice_profile: str | None,
        chat_id: str | None,
        image: bytes | None,
        content_type: str | None = None,
    ) -> list[Step]:
        if not image:
            raise InvalidInputError("No image file uploaded.")

        chat_id = chat_id or DEFAULT_CHAT_ID
        history = await self.store.history(chat_id)
        await self.store.insert(chat_id, "student", question or IMAGE_PLACEHOLDER)

        mime = content_type if content_type and content_type.startswith("image/") else "image/jpeg"
        image_url = f"data:{mime};base64,{base64.b64encode(image).decode('ascii')}"
        messages = [
            {"role": "system", "content": image_prompt(voice_profile)},
            *history,
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": question or DEFAULT_IMAGE_QUESTION},
                    {"type": "image_url", "image_url": {"url": image_url}},
                ],
            },
        ]
        vision = self.groq.with_model(settings.vision_model)
        try:
            data = await vision.chat_json(messages, temperature=0.45)
        except UpstreamReportedError as e:
            raise UpstreamReportedError("AI failed to process image.") from e

        items = list_field(data, "steps")
        # Some answers come back as a single step object instead of a list.
        if not items and data.get("spokenText"):
            items = [data]
        steps = steps_from_payload(items)
        await self._complete_steps(steps)

        await self._persist(chat_id, steps)
        return steps

    # ------------------------------------------------------------------
    # Pipeline stages
    # ------------------------------------------------------------------
    async def _chat_reply(
        self, topic: str, voice_profile: str | None, history: list[dict]
    ) -> str:
        messages = [
            {"role": "system", "content": chat_prompt(voice_profile)},
            *history,
            {"role": "user", "content": topic},
        ]
        return await self.groq.chat(messages, temperature=0.4)

    async def _complete_steps(self, steps: list[Step], board_fallback: bool = True) -> None:
        """Fill in missing board notes and attach audio, step by step, in order."""
        for step in steps:
            if board_fallback and needs_board_fallback(step):
                step.board_lines = await self.board_notes.from_spoken(step.spoken_text)
            step.audio = await self.speech.synthesize(step.spoken_text)

    async def _persist(self, chat_id: str, steps: list[Step]) -> None:
        for step in steps:
            await self.store.insert(chat_id, "teacher", step.spoken_text)
