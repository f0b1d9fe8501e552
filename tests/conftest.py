import json

import pytest
from httpx import ASGITransport, AsyncClient

from chalkboard.clients import GroqClient
from chalkboard.config import settings
from chalkboard.database import init_db
from chalkboard.main import app
from chalkboard.routes.teach import get_step_generator
from chalkboard.services import prompts
from chalkboard.services.conversation import ConversationStore
from chalkboard.services.teaching import StepGenerator

FAKE_WAV = b"RIFF\x24\x00\x00\x00WAVEfmt "

PHOTOSYNTHESIS = "Photosynthesis is how plants make their food."  # 45 chars


def _kind(messages: list[dict]) -> str:
    system = messages[0]["content"]
    if system == prompts.INTENT_PROMPT:
        return "intent"
    if system == prompts.BOARD_FALLBACK_PROMPT:
        return "board"
    if system.startswith("You are a friendly one-to-one tutor"):
        return "chat"
    if "explaining from an image" in system:
        return "image"
    return "teach"


class FakeGroq(GroqClient):
    """Scripted stand-in for the Groq API.

    ``responses`` maps a call kind (intent, chat, teach, image, board) to the
    raw content string the model returns, or to an exception to raise.
    """

    def __init__(self, **responses) -> None:
        self._model = "fake-model"
        self.responses = {
            "intent": "teach",
            "chat": "Hello! Happy to chat.",
            "teach": json.dumps({"steps": []}),
            "image": json.dumps({"steps": []}),
            "board": json.dumps({"lines": ["# Notes"]}),
        }
        self.responses.update(responses)
        self.calls: list[tuple[str, list[dict]]] = []
        self.spoken: list[str] = []
        self.models: list[str] = []
        self.speech_error: Exception | None = None

    def with_model(self, model_name: str) -> "FakeGroq":
        self.models.append(model_name)
        return self

    def kinds(self) -> list[str]:
        return [kind for kind, _ in self.calls]

    async def chat(self, messages, *, model=None, temperature=None, max_tokens=None,
                   response_format=None) -> str:
        kind = _kind(messages)
        self.calls.append((kind, messages))
        result = self.responses[kind]
        if isinstance(result, Exception):
            raise result
        return result

    async def speech(self, text, *, model=None, voice=None) -> bytes:
        if self.speech_error is not None:
            raise self.speech_error
        self.spoken.append(text)
        return FAKE_WAV


@pytest.fixture
async def db(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "database_path", str(tmp_path / "chalkboard.db"))
    await init_db()
    return ConversationStore()


@pytest.fixture
def fake_groq():
    return FakeGroq()


@pytest.fixture
def generator(db, fake_groq):
    return StepGenerator(groq=fake_groq, store=db)


@pytest.fixture
async def client(generator):
    app.dependency_overrides[get_step_generator] = lambda: generator
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
