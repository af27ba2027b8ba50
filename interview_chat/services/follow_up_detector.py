from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence, Tuple
import re

from interview_chat.services.session_store import Turn


FOLLOW_UP_PHRASES: Tuple[str, ...] = (
	# Direct references
	"what about", "how about", "what if", "and what", "also",
	# Continuation words
	"furthermore", "additionally", "moreover", "besides", "in addition",
	# Clarification requests
	"can you explain", "could you clarify", "what do you mean", "how does",
	# Comparison requests
	"compared to", "versus", "difference between", "instead of",
	# Extension requests
	"any other", "more about", "further details", "tell me more", "another example",
	"go deeper", "expand on",
	# Specific follow-ups
	"in that case", "then how", "but what", "however",
	# Project/experience continuations
	"in that project", "during that", "when you", "how did you",
)

PRONOUN_REFERENCE = re.compile(r"(?:^|\s)(?:that|this|it|they|those|these)(?=\s|$)")

CONTEXTUAL_REFERENCES: Tuple[str, ...] = (
	"the same", "similar", "like that", "same thing", "that one",
)

BUILDING_QUESTION_STARTS: Tuple[str, ...] = ("why", "how", "when", "where", "which")
BUILDING_QUESTION_MAX_CHARS = 50

CLARIFICATION_WORDS: Tuple[str, ...] = (
	"explain", "clarify", "what do you mean", "how does", "why",
	"could you elaborate", "can you expand", "more details",
)

CONTINUATION_WORDS: Tuple[str, ...] = (
	"what about", "how about", "also", "and", "furthermore",
	"in addition", "moreover", "next", "then",
)

FILLER_WORDS = frozenset({"um", "uh", "ah", "er", "hmm"})

MIN_MESSAGE_CHARS = 5
MIN_UNIQUE_RATIO = 0.5
MAX_FILLER_RATIO = 0.3


@dataclass(frozen=True)
class FollowUpAnalysis:
	is_follow_up: bool
	context_type: str  # "continuation" | "clarification" | "new_topic"
	relevant_history: List[Turn] = field(default_factory=list)

	def to_dict(self) -> dict:
		return {
			"isFollowUp": self.is_follow_up,
			"contextType": self.context_type,
			"relevantHistory": [t.to_dict() for t in self.relevant_history],
		}


NEW_TOPIC = FollowUpAnalysis(is_follow_up=False, context_type="new_topic")


def is_garbled(message: str) -> bool:
	"""Heuristic for voice-transcription noise.

	Too short, heavily repeated, or mostly filler sounds. Known to misfire on
	terse but valid input; tests pin the current behaviour.
	"""
	text = (message or "").strip().lower()
	if len(text) < MIN_MESSAGE_CHARS:
		return True
	words = text.split()
	if not words:
		return True
	if len(set(words)) / len(words) < MIN_UNIQUE_RATIO:
		return True
	fillers = sum(1 for w in words if w.strip(".,!?") in FILLER_WORDS)
	return fillers / len(words) > MAX_FILLER_RATIO


class FollowUpDetector:
	"""Decide whether a message builds on the last exchange."""

	def analyze(self, message: str, last_two_turns: Sequence[Turn]) -> FollowUpAnalysis:
		recent = list(last_two_turns)[-2:]
		if not recent:
			return NEW_TOPIC
		if is_garbled(message):
			return NEW_TOPIC

		text = message.strip().lower()
		if not self._is_follow_up(text):
			return NEW_TOPIC

		return FollowUpAnalysis(
			is_follow_up=True,
			context_type=self._context_type(text),
			relevant_history=self._relevant_history(recent),
		)

	def _is_follow_up(self, text: str) -> bool:
		if any(p in text for p in FOLLOW_UP_PHRASES):
			return True
		if PRONOUN_REFERENCE.search(text):
			return True
		if any(p in text for p in CONTEXTUAL_REFERENCES):
			return True
		return text.startswith(BUILDING_QUESTION_STARTS) and len(text) < BUILDING_QUESTION_MAX_CHARS

	def _context_type(self, text: str) -> str:
		if any(w in text for w in CLARIFICATION_WORDS):
			return "clarification"
		if any(w in text for w in CONTINUATION_WORDS):
			return "continuation"
		# A detected follow-up with neither signal keeps the new_topic label
		return "new_topic"

	def _relevant_history(self, recent: List[Turn]) -> List[Turn]:
		# The last user/assistant pair when complete, otherwise whatever is there
		return list(recent[-2:])
