from __future__ import annotations

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status
from typing import Optional
import json
import logging

from interview_chat.config import settings
from interview_chat.utils.security import websocket_api_key_ok


logger = logging.getLogger(__name__)

router = APIRouter()


@router.websocket("/ws")
async def ws_stream(websocket: WebSocket):
	if not websocket_api_key_ok(websocket):
		await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
		return
	# Echo the key back as the accepted subprotocol, browsers require it
	await websocket.accept(subprotocol=settings.api_key or None)
	logger.info("WebSocket connection established")

	hub = websocket.app.state.hub
	session_id: Optional[str] = None
	try:
		while True:
			raw = await websocket.receive_text()
			try:
				data = json.loads(raw)
			except json.JSONDecodeError:
				logger.warning("Ignoring malformed WebSocket message")
				continue
			if not isinstance(data, dict):
				continue
			if data.get("type") == "register" and data.get("sessionId"):
				if session_id and session_id != data["sessionId"]:
					hub.unregister(session_id, websocket)
				session_id = str(data["sessionId"])
				hub.register(session_id, websocket)
				await websocket.send_json({"type": "registered", "sessionId": session_id})
	except WebSocketDisconnect:
		pass
	finally:
		if session_id:
			hub.unregister(session_id, websocket)
