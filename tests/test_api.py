from __future__ import annotations

from typing import Any, Dict, List

import httpx
import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketState

from conftest import groq_client_with
from interview_chat.main import create_app
from interview_chat.services.completion_client import CompletionServiceError
from interview_chat.services.orchestrator import ConversationOrchestrator
from interview_chat.services.realtime import ConnectionHub
from interview_chat.services.session_store import SessionStore


class FakeWebSocket:
    """Records events the hub sends; no network involved."""

    def __init__(self, fail: bool = False) -> None:
        self.client_state = WebSocketState.CONNECTED
        self.sent: List[Dict[str, Any]] = []
        self.fail = fail

    async def send_json(self, data: Dict[str, Any]) -> None:
        if self.fail:
            raise RuntimeError("socket closed")
        self.sent.append(data)


class FailingClient:
    enabled = True

    async def complete(self, messages, on_token=None) -> str:
        raise CompletionServiceError("completion service returned 500")

    async def stream(self, messages):
        raise CompletionServiceError("completion service returned 500")
        yield ""


@pytest.fixture
def app(orchestrator: ConversationOrchestrator):
    return create_app(orchestrator=orchestrator)


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


def chat(client: TestClient, message: str, session_id: str = "abc", **extra):
    return client.post("/api/chat", json={"message": message, "sessionId": session_id, **extra})


def test_health(client: TestClient) -> None:
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"
    assert resp.json()["completion"]["enabled"] is False


def test_chat_returns_answer_and_analysis(client: TestClient) -> None:
    resp = chat(client, "What is the difference between SQL and NoSQL databases?")
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["streaming"] is False
    assert body["response"]
    assert body["structured"]["structure"] == "Comparison Analysis"
    assert body["analysis"]["classification"]["type"] == "technical"
    assert body["analysis"]["followUp"]["isFollowUp"] is False


@pytest.mark.parametrize(
    "payload, field",
    [
        ({"message": "", "sessionId": "abc"}, "message"),
        ({"message": "   ", "sessionId": "abc"}, "message"),
        ({"message": "What is Docker?"}, "sessionId"),
    ],
)
def test_invalid_chat_request(client: TestClient, payload: Dict[str, Any], field: str) -> None:
    resp = client.post("/api/chat", json=payload)
    assert resp.status_code == 400
    body = resp.json()
    assert body["error"] == "Invalid request data"
    assert field in [d["field"] for d in body["details"]]


def test_context_round_trip(client: TestClient) -> None:
    resp = client.post("/api/context", json={"content": "Senior engineer at Acme.", "sessionId": "abc"})
    assert resp.status_code == 200
    assert resp.json()["success"] is True

    resp = client.get("/api/context/abc")
    assert resp.json() == {"context": "Senior engineer at Acme.", "hasContext": True}


def test_missing_context(client: TestClient) -> None:
    assert client.get("/api/context/nobody").json() == {"context": None, "hasContext": False}


def test_context_upload_plain_text(client: TestClient) -> None:
    resp = client.post(
        "/api/context/upload",
        files={"file": ("resume.txt", b"Built payment APIs in Go.\n", "text/plain")},
        data={"sessionId": "abc"},
    )
    assert resp.status_code == 200
    assert client.get("/api/context/abc").json()["context"] == "Built payment APIs in Go."


def test_empty_upload_is_rejected(client: TestClient) -> None:
    resp = client.post(
        "/api/context/upload",
        files={"file": ("empty.txt", b"   ", "text/plain")},
        data={"sessionId": "abc"},
    )
    assert resp.status_code == 400


def test_memory_and_messages_after_chat(client: TestClient) -> None:
    chat(client, "What is Docker?")

    memory = client.get("/api/memory/abc").json()
    assert memory["messageCount"] == 2
    assert memory["maxMessages"] == 10
    assert memory["memoryUsage"] == 20.0
    assert memory["hasContext"] is False

    messages = client.get("/api/messages/abc").json()["messages"]
    assert [m["role"] for m in messages] == ["user", "assistant"]
    assert messages[0]["content"] == "What is Docker?"


def test_delete_session(client: TestClient) -> None:
    chat(client, "What is Docker?")
    resp = client.delete("/api/session/abc")
    assert resp.json()["success"] is True
    assert client.get("/api/messages/abc").json() == {"messages": []}


def test_create_session_returns_new_id(client: TestClient) -> None:
    first = client.post("/api/session").json()["sessionId"]
    second = client.post("/api/session").json()["sessionId"]
    assert first and second and first != second


def test_completion_failure_returns_500_and_keeps_question() -> None:
    store = SessionStore(max_turns=10)
    client = TestClient(create_app(ConversationOrchestrator(store=store, completion_client=FailingClient())))

    resp = chat(client, "What is Docker?")
    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to process chat message"}
    messages = client.get("/api/messages/abc").json()["messages"]
    assert [m["role"] for m in messages] == ["user"]


def test_chat_streams_to_registered_subscriber(app, client: TestClient) -> None:
    ws = FakeWebSocket()
    app.state.hub.register("abc", ws)

    body = chat(client, "What is Docker?").json()

    assert body["streaming"] is True
    types = [event["type"] for event in ws.sent]
    assert types[0] == "stream_start"
    assert types[-1] == "stream_end"
    assert set(types[1:-1]) == {"stream_chunk"}
    chunks = "".join(e["content"] for e in ws.sent if e["type"] == "stream_chunk")
    assert chunks == body["response"]
    assert ws.sent[-1]["fullResponse"] == body["response"]


def test_streaming_failure_publishes_error() -> None:
    store = SessionStore(max_turns=10)
    app = create_app(ConversationOrchestrator(store=store, completion_client=FailingClient()))
    ws = FakeWebSocket()
    app.state.hub.register("abc", ws)

    resp = chat(TestClient(app), "What is Docker?")
    assert resp.status_code == 500
    assert [e["type"] for e in ws.sent] == ["stream_start", "error"]


def test_malformed_upstream_stream_reports_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, headers={"content-type": "text/event-stream"}, content=b"data: {not json\n\n")

    store = SessionStore(max_turns=10)
    app = create_app(ConversationOrchestrator(store=store, completion_client=groq_client_with(handler)))
    ws = FakeWebSocket()
    app.state.hub.register("abc", ws)

    resp = chat(TestClient(app), "What is Docker?")
    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to process chat message"}
    assert [e["type"] for e in ws.sent] == ["stream_start", "error"]


def test_websocket_register_ack(client: TestClient) -> None:
    with client.websocket_connect("/ws") as ws:
        ws.send_json({"type": "register", "sessionId": "abc"})
        assert ws.receive_json() == {"type": "registered", "sessionId": "abc"}


@pytest.mark.anyio
async def test_hub_publish_order_and_disconnects() -> None:
    hub = ConnectionHub()
    ws = FakeWebSocket()
    assert await hub.publish("abc", {"type": "stream_chunk", "content": "x"}) is False

    hub.register("abc", ws)
    for piece in ("a", "b", "c"):
        assert await hub.publish("abc", {"type": "stream_chunk", "content": piece}) is True
    assert [e["content"] for e in ws.sent] == ["a", "b", "c"]

    ws.client_state = WebSocketState.DISCONNECTED
    assert hub.is_connected("abc") is False
    assert await hub.publish("abc", {"type": "stream_end"}) is False


@pytest.mark.anyio
async def test_hub_drops_broken_socket() -> None:
    hub = ConnectionHub()
    hub.register("abc", FakeWebSocket(fail=True))
    assert await hub.publish("abc", {"type": "stream_start"}) is False
    assert hub.is_connected("abc") is False


def test_hub_unregister_ignores_stale_socket() -> None:
    hub = ConnectionHub()
    old, new = FakeWebSocket(), FakeWebSocket()
    hub.register("abc", old)
    hub.register("abc", new)
    hub.unregister("abc", old)
    assert hub.is_connected("abc") is True
    hub.unregister("abc")
    assert hub.is_connected("abc") is False
