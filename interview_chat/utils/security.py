from __future__ import annotations

from fastapi import Header, HTTPException, WebSocket, status
from typing import Optional

from interview_chat.config import settings


async def verify_api_key(authorization: Optional[str] = Header(default=None)) -> None:
	if not settings.api_key:
		return
	if not authorization or not authorization.startswith("Bearer "):
		raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing API key")
	key = authorization.removeprefix("Bearer ")
	if key != settings.api_key:
		raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")


def websocket_api_key_ok(websocket: WebSocket) -> bool:
	# Browsers cannot set headers on WebSocket upgrades; the key travels as the subprotocol
	if not settings.api_key:
		return True
	return websocket.headers.get("sec-websocket-protocol") == settings.api_key
