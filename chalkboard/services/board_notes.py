import logging

from chalkboard.clients import GroqClient
from chalkboard.errors import UpstreamReportedError, UpstreamUnavailableError
from chalkboard.parsing import list_field
from chalkboard.services.prompts import BOARD_FALLBACK_PROMPT

logger = logging.getLogger(__name__)


class BoardNotesService:
    """Write board notes for narration that came back without any."""

    def __init__(self, groq: GroqClient | None = None) -> None:
        self.groq = groq or GroqClient()

    async def from_spoken(self, spoken_text: str) -> list[str]:
        """Convert *spoken_text* into marker-tagged board lines.

        Never raises: malformed output or a failed call yields ``[]`` so the
        other steps of the turn are unaffected.
        """
        messages = [
            {"role": "system", "content": BOARD_FALLBACK_PROMPT},
            {"role": "user", "content": spoken_text},
        ]
        try:
            data = await self.groq.chat_json(messages, temperature=0.2)
        except (UpstreamUnavailableError, UpstreamReportedError) as e:
            logger.warning("Board fallback failed, step keeps an empty board: %s", e)
            return []
        return [line for line in list_field(data, "lines") if isinstance(line, str)]
