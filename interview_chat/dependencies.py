from __future__ import annotations

from fastapi import Request

from interview_chat.services.orchestrator import ConversationOrchestrator
from interview_chat.services.realtime import ConnectionHub


def get_orchestrator(request: Request) -> ConversationOrchestrator:
	return request.app.state.orchestrator


def get_hub(request: Request) -> ConnectionHub:
	return request.app.state.hub
