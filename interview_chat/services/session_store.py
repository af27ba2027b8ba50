from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from itertools import count
from typing import Dict, List, Optional
import asyncio
import logging


logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
	return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Turn:
	id: int
	session_id: str
	role: str  # "user" | "assistant"
	content: str
	created_at: datetime = field(default_factory=_utcnow)
	is_voice: bool = False

	def as_message(self) -> Dict[str, str]:
		return {"role": self.role, "content": self.content}

	def to_dict(self) -> dict:
		return {
			"id": self.id,
			"sessionId": self.session_id,
			"role": self.role,
			"content": self.content,
			"timestamp": self.created_at.isoformat(),
			"isVoice": self.is_voice,
		}


@dataclass
class SessionContext:
	session_id: str
	background_text: str
	created_at: datetime = field(default_factory=_utcnow)


@dataclass
class SessionState:
	session_id: str
	turns: List[Turn] = field(default_factory=list)
	context: Optional[SessionContext] = None
	last_update: datetime = field(default_factory=_utcnow)


class SessionStore:
	"""In-memory turn log and background context, keyed by session id.

	Sessions are created implicitly on first write. Each session keeps at most
	``max_turns`` turns; appending beyond that evicts the oldest first.
	"""

	def __init__(self, max_turns: int = 10) -> None:
		if max_turns < 1:
			raise ValueError("max_turns must be positive")
		self._max_turns = max_turns
		self._sessions: Dict[str, SessionState] = {}
		self._locks: Dict[str, asyncio.Lock] = {}
		self._ids = count(1)

	@property
	def max_turns(self) -> int:
		return self._max_turns

	def _lock_for(self, session_id: str) -> asyncio.Lock:
		return self._locks.setdefault(session_id, asyncio.Lock())

	def _state(self, session_id: str) -> SessionState:
		state = self._sessions.get(session_id)
		if state is None:
			state = SessionState(session_id=session_id)
			self._sessions[session_id] = state
		return state

	async def append_turn(self, session_id: str, role: str, content: str, is_voice: bool = False) -> Turn:
		if role not in ("user", "assistant"):
			raise ValueError(f"unknown role: {role}")
		async with self._lock_for(session_id):
			state = self._state(session_id)
			turn = Turn(
				id=next(self._ids),
				session_id=session_id,
				role=role,
				content=content,
				is_voice=is_voice,
			)
			state.turns.append(turn)
			overflow = len(state.turns) - self._max_turns
			if overflow > 0:
				del state.turns[:overflow]
				logger.debug("Evicted %d turn(s) from session %s", overflow, session_id)
			state.last_update = turn.created_at
			return turn

	async def recent_turns(self, session_id: str, limit: Optional[int] = None) -> List[Turn]:
		"""Return up to ``limit`` most recent turns, oldest first."""
		state = self._sessions.get(session_id)
		if state is None:
			return []
		if limit is None:
			return list(state.turns)
		if limit <= 0:
			return []
		return state.turns[-limit:]

	async def set_context(self, session_id: str, text: str) -> SessionContext:
		async with self._lock_for(session_id):
			state = self._state(session_id)
			state.context = SessionContext(session_id=session_id, background_text=text)
			state.last_update = state.context.created_at
			return state.context

	async def get_context(self, session_id: str) -> Optional[str]:
		state = self._sessions.get(session_id)
		if state is None or state.context is None:
			return None
		return state.context.background_text

	async def clear_session(self, session_id: str) -> bool:
		"""Drop turns and context for a session. Returns True if it existed."""
		async with self._lock_for(session_id):
			existed = self._sessions.pop(session_id, None) is not None
		self._locks.pop(session_id, None)
		return existed

	def memory_usage(self, message_count: int) -> float:
		return min(message_count / self._max_turns * 100, 100.0)
