import base64

from chalkboard.clients import GroqClient

AUDIO_MIME = "audio/wav"


def to_data_uri(audio: bytes, mime: str = AUDIO_MIME) -> str:
    """Embed audio bytes in a ``data:`` URI the player can use without a fetch."""
    return f"data:{mime};base64,{base64.b64encode(audio).decode('ascii')}"


class SpeechService:
    """Turn narration into a self-contained playable audio handle."""

    def __init__(self, groq: GroqClient | None = None) -> None:
        self.groq = groq or GroqClient()

    async def synthesize(self, text: str) -> str | None:
        """Return a data URI for *text*, or ``None`` when there is nothing to say."""
        if not text:
            return None
        audio = await self.groq.speech(text)
        return to_data_uri(audio)
