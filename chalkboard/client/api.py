import logging

import httpx

from chalkboard.config import settings
from chalkboard.models import Step

logger = logging.getLogger(__name__)


class TutorClientError(Exception):
    """A turn produced no steps; the message is fit for the status line."""


class TutorAPI:
    """HTTP client for the tutor server's ``/teach`` endpoints."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._client = client or httpx.AsyncClient(
            base_url=base_url or settings.server_url,
            timeout=timeout or settings.request_timeout_seconds,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def submit_utterance(
        self, topic: str, voice_profile: str, chat_id: str
    ) -> list[Step]:
        try:
            resp = await self._client.post(
                "/teach",
                json={"topic": topic, "voiceProfile": voice_profile, "chatId": chat_id},
            )
        except httpx.HTTPError as e:
            logger.error("POST /teach failed: %s", e)
            raise TutorClientError("Failed to connect to server.") from e
        return self._steps(resp, "No teaching steps received.")

    async def submit_image(
        self,
        question: str,
        voice_profile: str,
        chat_id: str,
        image: bytes,
        filename: str = "image.jpg",
        content_type: str = "image/jpeg",
    ) -> list[Step]:
        try:
            resp = await self._client.post(
                "/teach-image",
                data={"question": question, "voiceProfile": voice_profile, "chatId": chat_id},
                files={"image": (filename, image, content_type)},
            )
        except httpx.HTTPError as e:
            logger.error("POST /teach-image failed: %s", e)
            raise TutorClientError("Image request failed.") from e
        return self._steps(resp, "Image teaching failed.")

    @staticmethod
    def _steps(resp: httpx.Response, fallback_message: str) -> list[Step]:
        try:
            data = resp.json()
        except ValueError:
            data = {}
        steps = data.get("steps") if isinstance(data, dict) else None
        if not isinstance(steps, list):
            error = data.get("error") if isinstance(data, dict) else None
            raise TutorClientError(error or fallback_message)
        return [Step.from_payload(s) for s in steps if isinstance(s, dict)]
