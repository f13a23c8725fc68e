"""Chat route — UI message stream, plain text and JSON answers grounded in stored documents."""
import json

from fastapi.testclient import TestClient

from apps.api.container import build_container
from apps.api.main import create_app

from conftest import FakeLLMAdapter

QUESTION = {"role": "user", "content": "When does the office open?"}


def _client_with(settings, embedder, llm) -> TestClient:
    return TestClient(create_app(container=build_container(settings, embedder=embedder, llm_adapter=llm)))


def test_streams_plain_text_on_request(client):
    r = client.post("/api/chat", json={"messages": [QUESTION], "format": "text"})

    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/plain")
    assert r.text == "Hello from the docs "


def _events(body: str) -> list:
    """Decode an SSE body into its data payloads; [DONE] stays a string."""
    payloads = []
    for frame in body.split("\n\n"):
        if not frame:
            continue
        assert frame.startswith("data: ")
        data = frame[len("data: "):]
        payloads.append(data if data == "[DONE]" else json.loads(data))
    return payloads


def test_default_stream_is_ai_sdk_ui_message_stream(client):
    body = {
        "id": "chat-1",
        "trigger": "submit-message",
        "messages": [
            {"id": "m1", "role": "user", "parts": [{"type": "text", "text": "When does the office open?"}]},
        ],
    }
    r = client.post("/api/chat", json=body)

    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/event-stream")
    assert r.headers["x-vercel-ai-ui-message-stream"] == "v1"

    events = _events(r.text)
    assert [e if isinstance(e, str) else e["type"] for e in events] == [
        "start", "text-start",
        "text-delta", "text-delta", "text-delta", "text-delta",
        "text-end", "finish", "[DONE]",
    ]
    assert events[0]["messageId"]
    text_id = events[1]["id"]
    deltas = [e for e in events if isinstance(e, dict) and e["type"] == "text-delta"]
    assert all(e["id"] == text_id for e in deltas)
    assert "".join(e["delta"] for e in deltas) == "Hello from the docs "
    assert events[6] == {"type": "text-end", "id": text_id}


def test_ui_stream_with_empty_answer_still_frames_a_message(settings, embedder):
    client = _client_with(settings, embedder, FakeLLMAdapter(reply=""))
    events = _events(client.post("/api/chat", json={"messages": [QUESTION]}).text)

    assert [e if isinstance(e, str) else e["type"] for e in events] == [
        "start", "text-start", "text-delta", "text-end", "finish", "[DONE]",
    ]


def test_unknown_format_is_400(client):
    r = client.post("/api/chat", json={"messages": [QUESTION], "format": "xml"})
    assert r.status_code == 400


def test_json_answer_when_stream_is_false(client):
    r = client.post("/api/chat", json={"messages": [QUESTION], "stream": False})

    assert r.status_code == 200
    assert r.json() == {"message": "Hello from the docs", "model": "fake-model", "finishReason": "stop"}


def test_system_message_carries_retrieved_context(client, llm):
    client.post("/api/document", json={"content": "The office opens at nine."})

    client.post("/api/chat", json={"messages": [QUESTION], "stream": False})

    sent = llm.received[0]
    assert sent[0].role == "system"
    assert "Context:\n[1] (document 1)" in sent[0].content
    assert "[2] (document 1)" in sent[0].content
    assert "[3]" not in sent[0].content  # chat_top_k=2
    assert sent[1].content == QUESTION["content"]


def test_ui_message_parts_are_accepted(client, llm):
    body = {
        "messages": [
            {"role": "user", "parts": [{"type": "text", "text": "When "}, {"type": "text", "text": "open?"}]},
        ],
        "stream": False,
    }
    r = client.post("/api/chat", json=body)

    assert r.status_code == 200
    assert llm.received[0][-1].content == "When open?"


def test_messages_not_an_array_is_400(client):
    r = client.post("/api/chat", json={"messages": "hello"})
    assert r.status_code == 400
    assert r.json()["message"].startswith("messages")


def test_message_without_text_is_400(client):
    r = client.post("/api/chat", json={"messages": [{"role": "user"}]})
    assert r.status_code == 400


def test_unknown_role_is_400(client):
    r = client.post("/api/chat", json={"messages": [{"role": "tool", "content": "x"}]})
    assert r.status_code == 400


def test_provider_failure_is_502_when_streaming(settings, embedder):
    client = _client_with(settings, embedder, FakeLLMAdapter(fail=True))
    r = client.post("/api/chat", json={"messages": [QUESTION]})

    assert r.status_code == 502
    assert r.json() == {"message": "upstream service error"}


def test_provider_failure_is_502_without_streaming(settings, embedder):
    client = _client_with(settings, embedder, FakeLLMAdapter(fail=True))
    r = client.post("/api/chat", json={"messages": [QUESTION], "stream": False})

    assert r.status_code == 502


def test_embedding_failure_is_502(client, embedder):
    client.post("/api/document", json={"content": "The office opens at nine."})
    embedder.fail = True

    r = client.post("/api/chat", json={"messages": [QUESTION]})
    assert r.status_code == 502
