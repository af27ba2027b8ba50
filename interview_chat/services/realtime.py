from __future__ import annotations

from typing import Any, Dict, Optional
import logging

from fastapi import WebSocket
from starlette.websockets import WebSocketState


logger = logging.getLogger(__name__)


class ConnectionHub:
	"""One live WebSocket subscriber per session.

	Events are sent in the order ``publish`` is awaited, so a caller that
	awaits each chunk keeps generation order on the wire.
	"""

	def __init__(self) -> None:
		self._connections: Dict[str, WebSocket] = {}

	def register(self, session_id: str, websocket: WebSocket) -> None:
		previous = self._connections.get(session_id)
		if previous is not None and previous is not websocket:
			logger.info("Replacing subscriber for session %s", session_id)
		self._connections[session_id] = websocket
		logger.info("Client registered with session: %s", session_id)

	def unregister(self, session_id: str, websocket: Optional[WebSocket] = None) -> None:
		current = self._connections.get(session_id)
		if current is None:
			return
		if websocket is None or current is websocket:
			del self._connections[session_id]
			logger.info("Client disconnected: %s", session_id)

	def is_connected(self, session_id: str) -> bool:
		ws = self._connections.get(session_id)
		return ws is not None and ws.client_state == WebSocketState.CONNECTED

	async def publish(self, session_id: str, event: Dict[str, Any]) -> bool:
		"""Send one event; returns False when nobody is listening."""
		ws = self._connections.get(session_id)
		if ws is None or ws.client_state != WebSocketState.CONNECTED:
			return False
		try:
			await ws.send_json(event)
		except (RuntimeError, OSError) as exc:
			# Socket went away mid-stream
			logger.warning("Dropping subscriber for session %s: %s", session_id, exc)
			self.unregister(session_id, ws)
			return False
		return True


