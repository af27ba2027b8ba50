from __future__ import annotations

from typing import AsyncIterator, Awaitable, Callable, Dict, List, Optional, Union
import inspect
import logging
import random
import re

import anyio
import httpx
from groq import AsyncGroq, APIConnectionError, APIError, APIStatusError, APITimeoutError

from interview_chat.config import settings


logger = logging.getLogger(__name__)

TokenCallback = Callable[[str], Union[Awaitable[None], None]]

EMPTY_RESPONSE = "I apologize, but I couldn't generate a response."

SIMULATED_STARTERS = (
	"In my experience with that technology,",
	"I've worked with this extensively.",
	"From my projects, here's how I approached it:",
	"I've dealt with this challenge before.",
)

SIMULATED_BODY = (
	" I typically break this down into a few key areas:\n\n"
	"• **Implementation approach:** I start by understanding the specific requirements and constraints\n"
	"• **Best practices:** I follow industry standards and leverage proven patterns\n"
	"• **Real-world considerations:** I always think about scalability, maintainability, and performance\n\n"
	"For example, in one of my recent projects, I had to solve a similar challenge. "
	"I implemented a solution that improved efficiency by about 30% while keeping the code clean and well-documented.\n\n"
	"The key is balancing technical excellence with practical delivery timelines."
)

DANGLING_ENDING = re.compile(
	r"(?:\b(?:and|or|the|to|of|in|for|with|that|which|when|while|because|so|but|also)|[,:])\s*$",
	re.IGNORECASE,
)
TERMINAL_PUNCTUATION = re.compile(r"[.!?]\s*$")

TOPIC_CONCLUSIONS = (
	(("database", "data"), " This approach ensures data integrity while maintaining good performance."),
	(("api", "request"), " This design provides a robust and scalable API architecture."),
	(("test", "quality"), " This testing strategy has helped me maintain high code quality."),
	(("performance", "optimize"), " This optimization approach has delivered measurable performance improvements."),
)

GENERIC_CONCLUSIONS = (
	" That's been my approach to handling this type of challenge.",
	" This strategy has worked well for me in production environments.",
	" I find this approach balances performance with maintainability effectively.",
	" That's how I've successfully implemented this in my projects.",
	" This methodology has proven reliable in my experience.",
)


class CompletionServiceError(RuntimeError):
	"""The completion service rejected or failed a request outright."""


def is_response_incomplete(text: str) -> bool:
	"""True when a long answer trails off on a connective, comma or colon."""
	trimmed = (text or "").strip()
	if len(trimmed) <= 50:
		return False
	return bool(DANGLING_ENDING.search(trimmed)) and not TERMINAL_PUNCTUATION.search(trimmed)


async def emit_token(on_token: TokenCallback, piece: str) -> None:
	result = on_token(piece)
	if inspect.isawaitable(result):
		await result


class CompletionClient:
	"""Chat-completion calls against Groq with a simulated fallback.

	Without an API key, or when the service times out, answers come from a
	templated responder so callers always get a complete answer.
	"""

	def __init__(
		self,
		api_key: Optional[str] = None,
		model: str = "llama-3.1-8b-instant",
		temperature: float = 0.7,
		max_tokens: int = 1500,
		timeout: float = 15.0,
		*,
		base_url: Optional[str] = None,
		http_client: Optional[httpx.AsyncClient] = None,
		rng: Optional[random.Random] = None,
		word_delay: float = 0.02,
		sentence_delay: float = 0.1,
	) -> None:
		self._api_key = api_key
		self._model = model
		self._temperature = temperature
		self._max_tokens = max_tokens
		self._timeout = timeout
		self._base_url = base_url
		self._http_client = http_client
		self._rng = rng or random.Random()
		self._word_delay = word_delay
		self._sentence_delay = sentence_delay
		self._client: AsyncGroq | None = None
		if not api_key:
			logger.warning("GROQ_API_KEY not set; answers will be simulated")

	@classmethod
	def from_settings(cls) -> "CompletionClient":
		return cls(
			api_key=settings.groq_api_key,
			model=settings.groq_model,
			temperature=settings.answer_temperature,
			max_tokens=settings.groq_max_tokens,
			timeout=settings.completion_timeout_seconds,
			base_url=settings.groq_base_url,
			word_delay=settings.simulation_word_delay,
			sentence_delay=settings.simulation_sentence_delay,
		)

	@property
	def enabled(self) -> bool:
		return bool(self._api_key)

	def _ensure_client(self) -> AsyncGroq | None:
		if not self._api_key:
			return None
		if self._client is None:
			# Single attempt per request
			self._client = AsyncGroq(
				api_key=self._api_key,
				base_url=self._base_url,
				timeout=self._timeout,
				max_retries=0,
				http_client=self._http_client,
			)
		return self._client

	def _request_kwargs(self, messages: List[Dict[str, str]], stream: bool) -> dict:
		return {
			"model": self._model,
			"messages": messages,
			"temperature": self._temperature,
			"max_tokens": self._max_tokens,
			"stream": stream,
		}

	async def complete(self, messages: List[Dict[str, str]], on_token: Optional[TokenCallback] = None) -> str:
		"""Return the full answer; with ``on_token`` every fragment is delivered as it arrives."""
		if on_token is not None:
			parts: list[str] = []
			async for piece in self.stream(messages):
				parts.append(piece)
				await emit_token(on_token, piece)
			return "".join(parts)

		client = self._ensure_client()
		if client is None:
			return self.simulated_response()

		try:
			with anyio.fail_after(self._timeout):
				resp = await client.chat.completions.create(**self._request_kwargs(messages, stream=False))
		except (APITimeoutError, TimeoutError):
			logger.warning("Completion request timed out after %.1fs; using simulated answer", self._timeout)
			return self.simulated_response()
		except APIConnectionError as exc:
			raise CompletionServiceError(f"completion service unreachable: {exc}") from exc
		except APIStatusError as exc:
			logger.error("Completion service error %s: %s", exc.status_code, exc.message)
			raise CompletionServiceError(f"completion service returned {exc.status_code}") from exc
		except (APIError, httpx.HTTPError, ValueError) as exc:
			raise CompletionServiceError(f"completion request failed: {exc}") from exc

		# A non-JSON body comes back from the SDK as plain text
		choices = getattr(resp, "choices", None)
		if choices is None:
			raise CompletionServiceError("completion service returned an unreadable payload")
		text = (choices[0].message.content or "") if choices else ""
		if not text.strip():
			return EMPTY_RESPONSE
		return text + self._conclusion_for(text)

	async def stream(self, messages: List[Dict[str, str]]) -> AsyncIterator[str]:
		"""Yield answer fragments in generation order.

		The whole call, request plus every chunk, shares one deadline of
		``timeout`` seconds. Timeouts and transport failures before any text
		switch to the simulated answer; a stream cut off after delivering text
		is always finished with a closing sentence instead of being restarted.
		Any other failure surfaces as ``CompletionServiceError``.
		"""
		client = self._ensure_client()
		if client is None:
			async for piece in self._simulate():
				yield piece
			return

		deadline = anyio.current_time() + self._timeout
		try:
			with anyio.fail_after(self._remaining(deadline)):
				response = await client.chat.completions.create(**self._request_kwargs(messages, stream=True))
		except (APIConnectionError, TimeoutError) as exc:
			logger.warning("Completion stream unavailable (%r); using simulated answer", exc)
			async for piece in self._simulate():
				yield piece
			return
		except APIStatusError as exc:
			logger.error("Completion service error %s: %s", exc.status_code, exc.message)
			raise CompletionServiceError(f"completion service returned {exc.status_code}") from exc
		except (APIError, httpx.HTTPError, ValueError) as exc:
			raise CompletionServiceError(f"completion request failed: {exc}") from exc

		parts: list[str] = []
		broken = False
		chunks = response.__aiter__()
		try:
			while True:
				try:
					# No cancel scope may span a yield, so each read gets the time left
					with anyio.fail_after(self._remaining(deadline)):
						chunk = await chunks.__anext__()
				except StopAsyncIteration:
					break
				if not chunk.choices:
					continue
				choice = chunk.choices[0]
				piece = getattr(choice.delta, "content", None) or ""
				if piece:
					parts.append(piece)
					yield piece
				if choice.finish_reason in ("stop", "length"):
					break
		except TimeoutError:
			logger.warning("Completion stream exceeded %.1fs after %d fragment(s)", self._timeout, len(parts))
			broken = True
		except (httpx.TransportError, APIConnectionError) as exc:
			logger.warning("Completion stream interrupted after %d fragment(s): %s", len(parts), exc)
			broken = True
		except Exception as exc:
			raise CompletionServiceError(f"completion stream failed: {exc}") from exc
		finally:
			await response.close()

		if broken and not parts:
			async for piece in self._simulate():
				yield piece
			return

		full_text = "".join(parts)
		if not full_text.strip():
			yield EMPTY_RESPONSE
			return
		conclusion = self._closing_for_partial(full_text) if broken else self._conclusion_for(full_text)
		if conclusion:
			logger.info("Response appears incomplete, adding natural conclusion")
			yield conclusion

	def simulated_response(self) -> str:
		return self._rng.choice(SIMULATED_STARTERS) + SIMULATED_BODY

	async def _simulate(self) -> AsyncIterator[str]:
		text = self.simulated_response()
		sentences = text.split(". ")
		for i, sentence in enumerate(sentences):
			if i < len(sentences) - 1:
				sentence += ". "
			for j, word in enumerate(sentence.split(" ")):
				yield word if j == 0 else " " + word
				if self._word_delay:
					await anyio.sleep(self._word_delay)
			if i < len(sentences) - 1 and self._sentence_delay:
				await anyio.sleep(self._sentence_delay)

	@staticmethod
	def _remaining(deadline: float) -> float:
		return max(deadline - anyio.current_time(), 0.0)

	def _topic_conclusion(self, text: str) -> str:
		lowered = text.lower()
		for keywords, conclusion in TOPIC_CONCLUSIONS:
			if any(k in lowered for k in keywords):
				return conclusion
		return self._rng.choice(GENERIC_CONCLUSIONS)

	def _conclusion_for(self, text: str) -> str:
		if not is_response_incomplete(text):
			return ""
		return self._topic_conclusion(text)

	def _closing_for_partial(self, text: str) -> str:
		"""Closing for an answer that was cut off, whatever word it stopped on."""
		trimmed = text.rstrip()
		if TERMINAL_PUNCTUATION.search(trimmed):
			return ""
		if is_response_incomplete(trimmed):
			return self._topic_conclusion(trimmed)
		return "." + self._topic_conclusion(trimmed)
