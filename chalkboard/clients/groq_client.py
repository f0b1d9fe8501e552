import logging
from collections.abc import Iterator
from contextlib import contextmanager

import groq
import httpx
from groq import AsyncGroq

from chalkboard.config import settings
from chalkboard.errors import UpstreamReportedError, UpstreamUnavailableError
from chalkboard.parsing import loads_object

logger = logging.getLogger(__name__)


@contextmanager
def _translate_errors(what: str) -> Iterator[None]:
    """Map Groq SDK failures onto the tutor's error taxonomy."""
    try:
        yield
    except groq.APIConnectionError as e:
        logger.error("%s: Groq unreachable: %s", what, e)
        raise UpstreamUnavailableError(f"{what} service is unreachable.") from e
    except groq.APIStatusError as e:
        logger.error("%s: Groq returned %s: %s", what, e.status_code, e.message)
        raise UpstreamReportedError(f"{what} service reported an error.") from e


def _is_json_validation_failure(exc: BaseException | None) -> bool:
    if not isinstance(exc, groq.BadRequestError):
        return False
    body = exc.body if isinstance(exc.body, dict) else {}
    # the SDK usually unwraps the "error" envelope, but not always
    detail = body.get("error") if isinstance(body.get("error"), dict) else body
    return detail.get("code") == "json_validate_failed"


class GroqClient:
    """Async wrapper around the official Groq SDK with easy model switching.

    Usage::

        groq = GroqClient()                          # uses CHAT_MODEL from env
        text = await groq.chat(messages)             # plain completion

        vision = groq.with_model(settings.vision_model)
        data = await vision.chat_json(messages)      # JSON object mode

        wav = await groq.speech("Hello there")       # text to speech

    ``with_model()`` shares the underlying ``AsyncGroq`` HTTP session, so
    switching models mid-request is allocation-free beyond the wrapper object.

    Transport failures raise :class:`UpstreamUnavailableError`; error
    responses from the service raise :class:`UpstreamReportedError`.
    """

    def __init__(
        self,
        model: str | None = None,
        api_key: str | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._model = model or settings.chat_model
        # failures surface on the first attempt, the SDK must not retry
        self._client = AsyncGroq(
            api_key=api_key or settings.groq_api_key,
            max_retries=0,
            http_client=http_client,
        )

    # ------------------------------------------------------------------
    # Model switching
    # ------------------------------------------------------------------
    @property
    def default_model(self) -> str:
        return self._model

    def with_model(self, model_name: str) -> "GroqClient":
        """Return a new GroqClient bound to *model_name*.

        The underlying ``AsyncGroq`` client (and its httpx session) is shared.
        """
        clone = GroqClient.__new__(GroqClient)
        clone._model = model_name
        clone._client = self._client  # shared, no new HTTP connection
        return clone

    # ------------------------------------------------------------------
    # Completions
    # ------------------------------------------------------------------
    async def chat(
        self,
        messages: list[dict],
        *,
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        response_format: dict | None = None,
    ) -> str:
        """Plain chat completion. Returns the content string ("" if absent)."""
        kwargs: dict = {
            "model": model or self._model,
            "messages": messages,
        }
        if temperature is not None:
            kwargs["temperature"] = temperature
        if max_tokens is not None:
            kwargs["max_tokens"] = max_tokens
        if response_format is not None:
            kwargs["response_format"] = response_format

        with _translate_errors("Language model"):
            resp = await self._client.chat.completions.create(**kwargs)
        if not resp.choices:
            return ""
        return resp.choices[0].message.content or ""

    async def chat_json(
        self,
        messages: list[dict],
        *,
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> dict:
        """Completion in JSON object mode.

        The prompt must describe the expected shape.  Returns the parsed
        object, or ``{}`` when the model produced something that is not a
        JSON object.  Groq rejects such output itself with a 400
        ``json_validate_failed``; that lands on the same ``{}``.
        """
        try:
            content = await self.chat(
                messages,
                model=model,
                temperature=temperature,
                max_tokens=max_tokens,
                response_format={"type": "json_object"},
            )
        except UpstreamReportedError as e:
            if not _is_json_validation_failure(e.__cause__):
                raise
            logger.warning("Model output failed JSON validation; using empty object")
            return {}
        return loads_object(content)

    # ------------------------------------------------------------------
    # Speech
    # ------------------------------------------------------------------
    async def speech(
        self,
        text: str,
        *,
        model: str | None = None,
        voice: str | None = None,
    ) -> bytes:
        """Synthesize *text* and return the WAV bytes."""
        with _translate_errors("Speech"):
            resp = await self._client.audio.speech.create(
                model=model or settings.tts_model,
                voice=voice or settings.tts_voice,
                input=text,
                response_format="wav",
            )
            return await resp.read()
