import json

import httpx
import pytest

from chalkboard.client.api import TutorAPI, TutorClientError


def _api(handler) -> TutorAPI:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://tutor")
    return TutorAPI(client=client)


async def test_submit_utterance_posts_camel_case_body():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"steps": [
            {"spokenText": "Hi.", "boardLines": ["# Hi"], "audio": "data:audio/wav;base64,AA=="},
            {"spokenText": "", "boardLines": ["- x"], "audio": None},
        ]})

    steps = await _api(handler).submit_utterance("ok", "hindi", "c1")

    assert seen == {
        "path": "/teach",
        "body": {"topic": "ok", "voiceProfile": "hindi", "chatId": "c1"},
    }
    assert [s.board_lines for s in steps] == [["# Hi"], ["- x"]]
    assert steps[0].audio == "data:audio/wav;base64,AA=="
    assert steps[1].audio is None


async def test_error_payload_becomes_client_error():
    def handler(request):
        return httpx.Response(400, json={"error": "No image file uploaded."})

    with pytest.raises(TutorClientError, match="No image file uploaded."):
        await _api(handler).submit_image("q", "english", "c1", b"")


async def test_missing_steps_uses_default_message():
    def handler(request):
        return httpx.Response(200, json={"unexpected": True})

    with pytest.raises(TutorClientError, match="No teaching steps received."):
        await _api(handler).submit_utterance("ok", "english", "c1")


async def test_transport_failure_becomes_client_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(TutorClientError, match="Failed to connect to server."):
        await _api(handler).submit_utterance("ok", "english", "c1")


async def test_image_is_sent_as_multipart():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["type"] = request.headers["content-type"]
        seen["body"] = request.content
        return httpx.Response(200, json={"steps": []})

    steps = await _api(handler).submit_image(
        "What is it?", "english", "c1", b"PNGDATA", filename="a.png", content_type="image/png"
    )

    assert steps == []
    assert seen["type"].startswith("multipart/form-data")
    assert b"PNGDATA" in seen["body"]
    assert b'name="voiceProfile"' in seen["body"]
