"""Shared fixtures for the interview chat tests."""

from __future__ import annotations

import json
import random
from typing import Callable, List

import httpx
import pytest

from interview_chat.services.completion_client import CompletionClient
from interview_chat.services.orchestrator import ConversationOrchestrator
from interview_chat.services.session_store import SessionStore, Turn


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def make_turn() -> Callable[..., Turn]:
    counter = iter(range(1, 10_000))

    def _make(role: str, content: str, session_id: str = "s1") -> Turn:
        return Turn(id=next(counter), session_id=session_id, role=role, content=content)

    return _make


@pytest.fixture
def offline_client() -> CompletionClient:
    """Client without an API key: always answers with the simulated response."""
    return CompletionClient(api_key=None, rng=random.Random(7), word_delay=0, sentence_delay=0)


@pytest.fixture
def store() -> SessionStore:
    return SessionStore(max_turns=10)


@pytest.fixture
def orchestrator(store: SessionStore, offline_client: CompletionClient) -> ConversationOrchestrator:
    return ConversationOrchestrator(store=store, completion_client=offline_client)


def sse_body(fragments: List[str], finish_reason: str = "stop", done: bool = True) -> bytes:
    """Render fragments the way the completion endpoint streams them."""
    lines = []
    for i, fragment in enumerate(fragments):
        last = i == len(fragments) - 1
        payload = {
            "id": "chatcmpl-test",
            "object": "chat.completion.chunk",
            "created": 0,
            "model": "test-model",
            "choices": [{
                "index": 0,
                "delta": {"content": fragment},
                "finish_reason": finish_reason if last else None,
            }],
        }
        lines.append(f"data: {json.dumps(payload)}\n\n")
    if done:
        lines.append("data: [DONE]\n\n")
    return "".join(lines).encode()


def completion_body(content: str) -> dict:
    return {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "created": 0,
        "model": "test-model",
        "choices": [{
            "index": 0,
            "message": {"role": "assistant", "content": content},
            "finish_reason": "stop",
        }],
    }


def groq_client_with(handler: Callable[[httpx.Request], httpx.Response], **kwargs) -> CompletionClient:
    """A keyed client whose HTTP traffic goes to ``handler`` instead of the network."""
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    kwargs.setdefault("rng", random.Random(3))
    kwargs.setdefault("word_delay", 0)
    kwargs.setdefault("sentence_delay", 0)
    return CompletionClient(api_key="test-key", http_client=http_client, **kwargs)
