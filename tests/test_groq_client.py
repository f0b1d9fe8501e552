import json

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from chalkboard.clients import GroqClient
from chalkboard.errors import UpstreamReportedError, UpstreamUnavailableError
from chalkboard.main import app
from chalkboard.routes.teach import get_step_generator
from chalkboard.services.teaching import StepGenerator
from tests.conftest import FAKE_WAV

MESSAGES = [{"role": "user", "content": "hi"}]


def _completion(content: str | None) -> dict:
    return {
        "id": "chatcmpl-1",
        "object": "chat.completion",
        "created": 0,
        "model": "test-model",
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ],
    }


def _error(status: int, code: str, message: str = "failed") -> httpx.Response:
    return httpx.Response(
        status,
        json={"error": {"message": message, "type": "invalid_request_error", "code": code}},
    )


class Upstream:
    """Records every request the SDK sends and answers with *respond*."""

    def __init__(self, respond) -> None:
        self.respond = respond
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.respond(request)

    def groq(self) -> GroqClient:
        http = httpx.AsyncClient(transport=httpx.MockTransport(self))
        return GroqClient(model="test-model", api_key="gsk_test", http_client=http)


async def test_chat_returns_message_content():
    upstream = Upstream(lambda request: httpx.Response(200, json=_completion("Hello!")))

    assert await upstream.groq().chat(MESSAGES, temperature=0) == "Hello!"

    [request] = upstream.requests
    assert request.url.path.endswith("/chat/completions")
    body = json.loads(request.content)
    assert body["model"] == "test-model"
    assert body["temperature"] == 0


async def test_chat_without_choices_is_empty_string():
    payload = _completion("unused")
    payload["choices"] = []
    upstream = Upstream(lambda request: httpx.Response(200, json=payload))

    assert await upstream.groq().chat(MESSAGES) == ""


async def test_chat_with_null_content_is_empty_string():
    upstream = Upstream(lambda request: httpx.Response(200, json=_completion(None)))

    assert await upstream.groq().chat(MESSAGES) == ""


async def test_with_model_sends_the_new_model_name():
    upstream = Upstream(lambda request: httpx.Response(200, json=_completion("{}")))

    await upstream.groq().with_model("vision-model").chat(MESSAGES)

    assert json.loads(upstream.requests[0].content)["model"] == "vision-model"


async def test_connection_failure_is_unavailable_after_one_attempt():
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    upstream = Upstream(refuse)

    with pytest.raises(UpstreamUnavailableError, match="unreachable"):
        await upstream.groq().chat(MESSAGES)
    assert len(upstream.requests) == 1


@pytest.mark.parametrize("status", [429, 500, 503])
async def test_error_status_is_reported_after_one_attempt(status):
    upstream = Upstream(lambda request: _error(status, "server_error", "over capacity"))

    with pytest.raises(UpstreamReportedError, match="reported an error"):
        await upstream.groq().chat(MESSAGES)
    assert len(upstream.requests) == 1


async def test_chat_json_parses_object():
    upstream = Upstream(
        lambda request: httpx.Response(200, json=_completion('{"lines": ["# Title"]}'))
    )

    assert await upstream.groq().chat_json(MESSAGES) == {"lines": ["# Title"]}
    body = json.loads(upstream.requests[0].content)
    assert body["response_format"] == {"type": "json_object"}


async def test_chat_json_validation_failure_is_empty_object():
    upstream = Upstream(
        lambda request: _error(400, "json_validate_failed", "Failed to generate JSON.")
    )

    assert await upstream.groq().chat_json(MESSAGES) == {}
    assert len(upstream.requests) == 1


async def test_chat_json_other_bad_request_still_raises():
    upstream = Upstream(lambda request: _error(400, "model_not_found"))

    with pytest.raises(UpstreamReportedError):
        await upstream.groq().chat_json(MESSAGES)


async def test_speech_returns_wav_bytes():
    upstream = Upstream(
        lambda request: httpx.Response(
            200, content=FAKE_WAV, headers={"content-type": "audio/wav"}
        )
    )

    assert await upstream.groq().speech("Hello there", voice="Fritz-PlayAI") == FAKE_WAV

    [request] = upstream.requests
    assert request.url.path.endswith("/audio/speech")
    body = json.loads(request.content)
    assert body["input"] == "Hello there"
    assert body["voice"] == "Fritz-PlayAI"
    assert body["response_format"] == "wav"


async def test_speech_error_is_reported():
    upstream = Upstream(lambda request: _error(500, "server_error"))

    with pytest.raises(UpstreamReportedError, match="Speech service"):
        await upstream.groq().speech("Hello there")
    assert len(upstream.requests) == 1


async def test_teach_route_survives_json_validation_failure(db):
    upstream = Upstream(lambda request: _error(400, "json_validate_failed"))
    generator = StepGenerator(groq=upstream.groq(), store=db)
    app.dependency_overrides[get_step_generator] = lambda: generator
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            resp = await ac.post("/teach", json={"topic": "ok", "chatId": "c1"})
    finally:
        app.dependency_overrides.clear()

    assert resp.status_code == 200
    assert resp.json() == {"steps": []}
    # "ok" takes the fast path, so the teach call is the only upstream request
    assert len(upstream.requests) == 1
