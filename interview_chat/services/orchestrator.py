from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional
import logging

from interview_chat.config import settings
from interview_chat.services.completion_client import CompletionClient, TokenCallback, emit_token
from interview_chat.services.follow_up_detector import FollowUpAnalysis, FollowUpDetector
from interview_chat.services.prompt_composer import PromptComposer
from interview_chat.services.question_classifier import QuestionClassification, QuestionClassifier
from interview_chat.services.response_structurer import ResponseStructurer, StructuredResponse
from interview_chat.services.session_store import SessionStore, Turn
from interview_chat.services.transcript_corrector import TranscriptCorrector


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChatResult:
	structured_response: StructuredResponse
	classification: QuestionClassification
	follow_up: FollowUpAnalysis
	raw_text: str


PREVIEW_CHARS = 100


def _preview(context: Optional[str]) -> Optional[str]:
	if not context:
		return None
	if len(context) <= PREVIEW_CHARS:
		return context
	return context[:PREVIEW_CHARS] + "..."


@dataclass(frozen=True)
class MemoryStatus:
	has_context: bool
	message_count: int
	memory_usage: float
	max_messages: int
	context_preview: Optional[str]

	def to_dict(self) -> dict:
		return {
			"hasContext": self.has_context,
			"messageCount": self.message_count,
			"memoryUsage": self.memory_usage,
			"maxMessages": self.max_messages,
			"contextPreview": self.context_preview,
		}


class ConversationOrchestrator:
	"""Runs one chat turn: analyse, compose, complete, persist, structure."""

	def __init__(
		self,
		store: SessionStore,
		completion_client: CompletionClient,
		classifier: Optional[QuestionClassifier] = None,
		detector: Optional[FollowUpDetector] = None,
		composer: Optional[PromptComposer] = None,
		structurer: Optional[ResponseStructurer] = None,
		transcript_corrector: Optional[Callable[[str], str]] = None,
		focus_window: int = 2,
	) -> None:
		self.store = store
		self.completion_client = completion_client
		self.classifier = classifier or QuestionClassifier()
		self.detector = detector or FollowUpDetector()
		self.composer = composer or PromptComposer()
		self.structurer = structurer or ResponseStructurer()
		self.transcript_corrector = transcript_corrector or TranscriptCorrector()
		self.focus_window = focus_window

	async def respond(
		self,
		session_id: str,
		message: str,
		is_voice: bool = False,
		on_token: Optional[TokenCallback] = None,
	) -> ChatResult:
		if is_voice:
			message = self.transcript_corrector(message)

		background = await self.store.get_context(session_id)
		focused = await self.store.recent_turns(session_id, self.focus_window)

		follow_up = self.detector.analyze(message, focused)
		classification = self.classifier.classify(message)
		logger.info(
			"session=%s type=%s format=%s follow_up=%s/%s",
			session_id, classification.type, classification.suggested_format,
			follow_up.is_follow_up, follow_up.context_type,
		)

		await self.store.append_turn(session_id, "user", message, is_voice)

		messages = self.composer.build_messages(classification, follow_up, message, background)
		# CompletionServiceError propagates; the user turn above stays in the log
		if on_token is None:
			raw_text = await self.completion_client.complete(messages)
		else:
			raw_text = await self._stream_to(messages, on_token)

		await self.store.append_turn(session_id, "assistant", raw_text)

		structured = self.structurer.structure(classification, raw_text, background_present=bool(background))
		return ChatResult(
			structured_response=structured,
			classification=classification,
			follow_up=follow_up,
			raw_text=raw_text,
		)

	async def _stream_to(self, messages: List[dict], on_token: TokenCallback) -> str:
		parts: List[str] = []
		fragments = self.completion_client.stream(messages)
		try:
			async for piece in fragments:
				parts.append(piece)
				await emit_token(on_token, piece)
		finally:
			await fragments.aclose()
		return "".join(parts)

	async def set_context(self, session_id: str, text: str) -> None:
		await self.store.set_context(session_id, text)

	async def get_context(self, session_id: str) -> Optional[str]:
		return await self.store.get_context(session_id)

	async def history(self, session_id: str) -> List[Turn]:
		return await self.store.recent_turns(session_id, self.store.max_turns)

	async def clear_session(self, session_id: str) -> bool:
		return await self.store.clear_session(session_id)

	async def memory_status(self, session_id: str) -> MemoryStatus:
		context = await self.store.get_context(session_id)
		turns = await self.store.recent_turns(session_id, self.store.max_turns)
		return MemoryStatus(
			has_context=bool(context),
			message_count=len(turns),
			memory_usage=self.store.memory_usage(len(turns)),
			max_messages=self.store.max_turns,
			context_preview=_preview(context),
		)


def build_orchestrator() -> ConversationOrchestrator:
	return ConversationOrchestrator(
		store=SessionStore(max_turns=settings.memory_max_messages),
		completion_client=CompletionClient.from_settings(),
		focus_window=settings.focus_window_turns,
	)
