from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
import math
import re

from interview_chat.services.question_classifier import QuestionClassification


SENTENCE_SPLIT = re.compile(r"[.!?]+")

STRUCTURE_LABELS: Dict[str, str] = {
	"star": "STAR Format",
	"definition": "Technical Explanation",
	"comparison": "Comparison Analysis",
	"architecture": "System Design",
	"step_by_step": "Coding Solution",
	"general": "General Discussion",
}

STAR_SECTION_KEYWORDS: Dict[str, Tuple[str, ...]] = {
	"situation": ("situation", "context", "background"),
	"task": ("task", "challenge", "goal", "objective"),
	"action": ("action", "steps", "approach", "solution"),
	"result": ("result", "outcome", "impact", "achievement"),
}
STAR_BOUNDARIES = ("task", "action", "result", "situation")

STAR_FILLERS: Dict[str, str] = {
	"situation": "In a previous role, I encountered a situation that required careful handling.",
	"task": "My objective was to resolve the issue while maintaining team productivity.",
	"action": "I took a systematic approach, focusing on clear communication and collaboration.",
	"result": "The outcome was successful, leading to improved processes and team satisfaction.",
}

DEFINITION_FILLER = "This concept is a core building block of modern software systems."
KEY_POINT_FILLERS = [
	"It solves a specific, well-understood problem",
	"It comes with trade-offs that depend on the use case",
]
EXAMPLE_FILLER = "For example, it shows up in most production systems that need reliability at scale."
PRACTICAL_FILLER = "In practice, I apply it where it clearly simplifies the design."

OVERVIEW_FILLER = "Both options solve the same problem with different trade-offs."
OPTION_A_FILLERS = ["Strong fit for its primary use case", "Mature ecosystem and tooling"]
OPTION_B_FILLERS = ["Different trade-offs in flexibility and performance", "Better suited to other workloads"]
USE_CASE_FILLERS = ["Choose based on data shape, scale and team familiarity"]
RECOMMENDATION_FILLER = "The right choice depends on the specific requirements of the system."

ARCHITECTURE_OVERVIEW_FILLER = "A layered, service-oriented architecture with clear boundaries between components."
ARCHITECTURE_COMPONENTS: List[Tuple[str, str]] = [
	("Frontend", "User interface and client-side logic"),
	("API Gateway", "Request routing and authentication"),
	("Backend Services", "Business logic and data processing"),
	("Database", "Data storage and retrieval"),
]
DATA_FLOW_FILLERS = [
	"Client sends a request through the API gateway",
	"Backend services process the request and read or write data",
	"The response is returned to the client",
]
SCALABILITY_FILLERS = [
	"Scale stateless services horizontally behind a load balancer",
	"Add caching and replication for read-heavy paths",
]
TECH_STACK = ["React", "Node.js", "PostgreSQL", "Redis", "AWS"]

APPROACH_FILLER = "Break the problem down, pick the right data structure, then iterate on the solution."
ALGORITHM_FILLERS = [
	"Clarify inputs, outputs and constraints",
	"Process the input in a single pass while tracking the needed state",
	"Return the result once all elements are handled",
]
PLACEHOLDER_CODE = "# Implementation would go here\ndef solution(data):\n    pass"
PLACEHOLDER_LANGUAGE = "python"
TIME_COMPLEXITY = "O(n)"
SPACE_COMPLEXITY = "O(1)"
EDGE_CASES = ["Empty input", "Null values", "Edge boundaries"]

FOLLOW_UP_POOLS: Dict[str, List[str]] = {
	"technical": [
		"How would you implement {keyword} in a real project?",
		"What are common pitfalls with {keyword}?",
		"Can you compare this with alternative approaches?",
		"Tell me about your experience using this technology",
	],
	"behavioral": [
		"Can you tell me about another challenging situation?",
		"How do you handle conflict in team settings?",
		"Describe your leadership style with an example",
		"What's your approach to giving feedback?",
	],
	"system_design": [
		"How would you handle system failures in this design?",
		"What monitoring and alerting would you implement?",
		"How would you scale this to handle 10x more traffic?",
		"What security considerations are important here?",
	],
	"coding": [
		"How would you optimize this solution further?",
		"What if the input constraints were different?",
		"Can you solve this using a different approach?",
		"How would you test this implementation?",
	],
	"general": [
		"Can you elaborate on that point?",
		"How does this relate to your experience?",
		"What would you do in a similar situation?",
		"Are there alternative approaches to consider?",
	],
}
DEFAULT_KEYWORD = "this concept"
MAX_SUGGESTIONS = 4


@dataclass(frozen=True)
class StructuredResponse:
	content: str
	structure_label: str
	follow_up_suggestions: List[str] = field(default_factory=list)
	estimated_delivery_seconds: int = 0

	def to_dict(self) -> dict:
		return {
			"content": self.content,
			"structure": self.structure_label,
			"followUpSuggestions": list(self.follow_up_suggestions),
			"timeToDeliver": self.estimated_delivery_seconds,
		}


def split_sentences(text: str, min_length: int = 5) -> List[str]:
	return [s.strip() for s in SENTENCE_SPLIT.split(text or "") if len(s.strip()) > min_length]


def _label(word: str) -> re.Pattern:
	# Whole-word "word:" so "transaction:" never reads as "action:"
	return re.compile(rf"\b{re.escape(word)}:")


def _sentence(text: Optional[str], filler: str) -> str:
	return f"{text}." if text else filler


def _bullets(items: List[str]) -> str:
	return "\n".join(f"• {item}" for item in items)


def _numbered(items: List[str]) -> str:
	return "\n".join(f"{i}. {item}" for i, item in enumerate(items, start=1))


class ResponseStructurer:
	"""Reshape a free-text answer into the presentation its question calls for.

	Deterministic: the same classification and text always produce the same
	result. Degenerate input never leaves a section empty.
	"""

	def structure(
		self,
		classification: QuestionClassification,
		raw_text: str,
		background_present: bool = False,
	) -> StructuredResponse:
		# Layout is the same with or without background context
		fmt = classification.suggested_format
		formatter = {
			"star": self._star,
			"definition": self._definition,
			"comparison": self._comparison,
			"architecture": self._architecture,
			"step_by_step": self._step_by_step,
		}.get(fmt)
		if formatter is None:
			content, label = raw_text or "", STRUCTURE_LABELS["general"]
		else:
			content, label = formatter(raw_text or ""), STRUCTURE_LABELS[fmt]
		return StructuredResponse(
			content=content,
			structure_label=label,
			follow_up_suggestions=self.follow_up_suggestions(classification),
			estimated_delivery_seconds=classification.estimated_time_seconds,
		)

	def follow_up_suggestions(self, classification: QuestionClassification) -> List[str]:
		pool = FOLLOW_UP_POOLS.get(classification.type, FOLLOW_UP_POOLS["general"])
		keyword = classification.keywords[0] if classification.keywords else DEFAULT_KEYWORD
		return [q.format(keyword=keyword) for q in pool[:MAX_SUGGESTIONS]]

	def _star(self, text: str) -> str:
		parts = self._star_components(text)
		return "\n\n".join(
			f"**{name.capitalize()}**: {parts[name]}" for name in ("situation", "task", "action", "result")
		)

	def _star_components(self, text: str) -> Dict[str, str]:
		found = {name: self._find_section(text, kws) for name, kws in STAR_SECTION_KEYWORDS.items()}
		if any(found.values()):
			return {name: found[name] or STAR_FILLERS[name] for name in found}

		# No labelled sections: spread the sentences over four quarters
		sentences = split_sentences(text, min_length=10)
		quarter = math.ceil(len(sentences) / 4)
		slices = {
			"situation": sentences[:quarter],
			"task": sentences[quarter:quarter * 2],
			"action": sentences[quarter * 2:quarter * 3],
			"result": sentences[quarter * 3:],
		}
		return {
			name: (". ".join(chunk) + ".") if chunk else STAR_FILLERS[name]
			for name, chunk in slices.items()
		}

	def _find_section(self, text: str, keywords: Tuple[str, ...]) -> Optional[str]:
		lowered = text.lower()
		for keyword in keywords:
			match = _label(keyword).search(lowered)
			if match is None:
				continue
			start = match.end()
			later = [m.start() for m in (_label(b).search(lowered, start) for b in STAR_BOUNDARIES) if m]
			end = min(later) if later else len(text)
			section = text[start:end].strip()
			return section or None
		return None

	def _definition(self, text: str) -> str:
		sentences = split_sentences(text)
		definition = _sentence(sentences[0] if sentences else None, DEFINITION_FILLER)
		key_points = sentences[1:4] or KEY_POINT_FILLERS
		example = next(
			(s for s in sentences if "example" in s.lower() or "for instance" in s.lower()),
			None,
		)
		practical = _sentence(sentences[-1] if sentences else None, PRACTICAL_FILLER)
		return (
			f"**Definition**: {definition}\n\n"
			f"**Key Points**:\n{_bullets(key_points)}\n\n"
			f"**Example**: {_sentence(example, EXAMPLE_FILLER)}\n\n"
			f"**Practical Application**: {practical}"
		)

	def _comparison(self, text: str) -> str:
		sentences = split_sentences(text)
		overview = _sentence(sentences[0] if sentences else None, OVERVIEW_FILLER)
		recommendation = _sentence(sentences[-1] if sentences else None, RECOMMENDATION_FILLER)
		return (
			f"**Overview**: {overview}\n\n"
			f"**Option A**:\n{_bullets(sentences[1:3] or OPTION_A_FILLERS)}\n\n"
			f"**Option B**:\n{_bullets(sentences[3:5] or OPTION_B_FILLERS)}\n\n"
			f"**Best Use Cases**:\n{_bullets(sentences[5:7] or USE_CASE_FILLERS)}\n\n"
			f"**Recommendation**: {recommendation}"
		)

	def _architecture(self, text: str) -> str:
		# Components and stack are a fixed outline, not read from the answer
		sentences = split_sentences(text)
		overview = _sentence(sentences[0] if sentences else None, ARCHITECTURE_OVERVIEW_FILLER)
		components = "\n".join(f"• **{name}**: {desc}" for name, desc in ARCHITECTURE_COMPONENTS)
		return (
			f"**High-Level Architecture**: {overview}\n\n"
			f"**Core Components**:\n{components}\n\n"
			f"**Data Flow**:\n{_numbered(sentences[1:4] or DATA_FLOW_FILLERS)}\n\n"
			f"**Scalability Considerations**:\n{_bullets(sentences[4:6] or SCALABILITY_FILLERS)}\n\n"
			f"**Technology Stack**: {', '.join(TECH_STACK)}"
		)

	def _step_by_step(self, text: str) -> str:
		# Code, complexity and edge cases are placeholders, not read from the answer
		sentences = split_sentences(text)
		approach = _sentence(sentences[0] if sentences else None, APPROACH_FILLER)
		return (
			f"**Approach**: {approach}\n\n"
			f"**Algorithm**:\n{_numbered(sentences[1:4] or ALGORITHM_FILLERS)}\n\n"
			f"**Code Implementation**:\n```{PLACEHOLDER_LANGUAGE}\n{PLACEHOLDER_CODE}\n```\n\n"
			f"**Time Complexity**: {TIME_COMPLEXITY}\n"
			f"**Space Complexity**: {SPACE_COMPLEXITY}\n\n"
			f"**Edge Cases**: {', '.join(EDGE_CASES)}"
		)
