from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Tuple
import math
import re


TECHNICAL_KEYWORDS: FrozenSet[str] = frozenset({
	# Programming concepts
	"algorithm", "data structure", "complexity", "big o", "recursion", "iteration",
	"polymorphism", "inheritance", "encapsulation", "abstraction", "design pattern",
	"solid principles", "dry", "kiss", "yagni", "mvc", "mvp", "mvvm",
	# Languages & frameworks
	"javascript", "python", "java", "react", "angular", "vue", "node.js", "express",
	"spring", "django", "flask", "laravel", "php", "c++", "c#", "go", "rust",
	"typescript", "kotlin", "swift", "objective-c", "ruby", "rails",
	# Databases
	"sql", "nosql", "mysql", "postgresql", "mongodb", "redis", "elasticsearch",
	"database", "orm", "acid", "transaction", "index", "normalization",
	"join", "query optimization", "sharding", "replication",
	# System design
	"scalability", "load balancer", "microservices", "api", "rest", "graphql",
	"caching", "cdn", "distributed system", "consistency", "availability",
	"partition tolerance", "cap theorem", "eventual consistency",
	# DevOps & tools
	"docker", "kubernetes", "ci/cd", "jenkins", "git", "aws", "azure", "gcp",
	"terraform", "ansible", "monitoring", "logging", "testing", "junit",
	"integration test", "unit test", "tdd", "bdd",
})

BEHAVIORAL_PHRASES: Tuple[str, ...] = (
	"tell me about", "describe a time", "give an example", "how did you handle",
	"what would you do", "challenging situation", "conflict", "leadership",
	"teamwork", "mistake", "failure", "success", "achievement", "disagreement",
	"deadline", "pressure", "priority", "difficult", "improve", "feedback",
	"learn", "adapt", "communication", "collaboration", "problem solving",
	"decision making", "initiative", "responsibility", "accountability",
)

SYSTEM_DESIGN_PHRASES: Tuple[str, ...] = (
	"design a system", "build a", "architect", "scale", "handle millions",
	"design twitter", "design facebook", "design uber", "design netflix",
	"chat system", "notification system", "payment system", "search engine",
	"recommendation system", "url shortener", "file storage", "messaging app",
)

CODING_PHRASES: Tuple[str, ...] = (
	"write a function", "implement", "code", "algorithm for", "solve this problem",
	"two sum", "binary search", "merge sort", "fibonacci", "palindrome",
	"reverse", "find the", "maximum", "minimum", "optimize", "time complexity",
	"space complexity", "dynamic programming", "recursion", "iteration",
)

BEHAVIORAL_PATTERNS: Tuple[re.Pattern, ...] = tuple(re.compile(p) for p in (
	r"tell me about.*time",
	r"describe.*situation",
	r"give.*example",
	r"how.*handle",
	r"what.*do.*if",
	r"experience.*with",
	r"time.*when",
))

TECHNICAL_CATEGORIES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
	("Programming Languages", ("javascript", "python", "java", "react", "node")),
	("Database Systems", ("sql", "database", "mysql", "mongodb", "redis")),
	("System Architecture", ("scalability", "microservices", "api", "distributed")),
	("Software Engineering", ("algorithm", "design pattern", "testing", "solid")),
	("DevOps & Cloud", ("docker", "kubernetes", "aws", "ci/cd", "deployment")),
)

COMPARISON_WORDS: Tuple[str, ...] = (
	"difference", "compare", "vs", "versus", "better", "advantage", "disadvantage",
)

ADVANCED_WORDS: Tuple[str, ...] = (
	"optimize", "scale", "distributed", "concurrent", "performance", "architecture",
)

PERSONAL_CONTEXT_PHRASES: Tuple[str, ...] = (
	"your experience", "you worked", "your project", "in your role", "at your company",
	"tell me about", "introduce yourself", "your background", "walk me through",
	"you have experience", "you used", "you implemented", "you built", "you developed",
	"your team", "your responsibilities", "your skills", "you know", "you familiar",
	"you worked with", "you handle", "you approach", "you solve", "you debug",
	"what have you", "where have you", "how do you", "what do you",
	"describe your", "explain your", "share your", "give me an example",
)

PERSONAL_PRONOUNS: Tuple[str, ...] = ("you", "your", "yourself")

COMMON_WORDS: FrozenSet[str] = frozenset({
	"what", "how", "why", "when", "where", "which", "would", "could", "should",
	"about", "between", "through", "during", "before", "after", "above", "below",
})

KEYWORD_STRIP_CHARS = "?!.,;:\"'()"

BASE_SECONDS: Dict[str, int] = {
	"technical": 15,
	"behavioral": 25,
	"system_design": 35,
	"coding": 20,
	"general": 10,
}

COMPLEXITY_MULTIPLIER: Dict[str, float] = {
	"beginner": 1.0,
	"intermediate": 1.3,
	"advanced": 1.6,
}

QUESTION_TYPES = ("technical", "behavioral", "system_design", "coding", "general")
RESPONSE_FORMATS = ("star", "definition", "comparison", "architecture", "step_by_step")


@dataclass(frozen=True)
class QuestionClassification:
	type: str
	category: str
	confidence: float
	suggested_format: str
	complexity: str
	estimated_time_seconds: int
	requires_personal_context: bool
	keywords: List[str] = field(default_factory=list)

	def to_dict(self) -> dict:
		return {
			"type": self.type,
			"category": self.category,
			"confidence": self.confidence,
			"suggestedFormat": self.suggested_format,
			"complexity": self.complexity,
			"estimatedTime": self.estimated_time_seconds,
			"requiresPersonalContext": self.requires_personal_context,
			"keywords": list(self.keywords),
		}


def _count_phrases(text: str, phrases) -> int:
	return sum(1 for phrase in phrases if phrase in text)


class QuestionClassifier:
	"""Keyword heuristics that guess what kind of interview question was asked.

	Every input yields a classification; text with no recognizable signal falls
	back to ``general``/``definition`` at confidence 0.3.
	"""

	def classify(self, question: str) -> QuestionClassification:
		q = (question or "").lower()
		words = q.split()

		technical_hits = sum(1 for w in words if w in TECHNICAL_KEYWORDS)
		behavioral_hits = _count_phrases(q, BEHAVIORAL_PHRASES)
		design_hits = _count_phrases(q, SYSTEM_DESIGN_PHRASES)
		coding_hits = _count_phrases(q, CODING_PHRASES)

		if design_hits > 0 or ("design" in q and technical_hits > 2):
			qtype, category, fmt = "system_design", "Architecture & Design", "architecture"
			confidence = min(0.9, 0.6 + design_hits * 0.1)
		elif coding_hits > 0 or "write" in q or "implement" in q:
			qtype, category, fmt = "coding", "Algorithm & Implementation", "step_by_step"
			confidence = min(0.9, 0.6 + coding_hits * 0.1)
		elif behavioral_hits > 0 or self._is_behavioral_pattern(q):
			qtype, category, fmt = "behavioral", "Leadership & Communication", "star"
			confidence = min(0.9, 0.7 + behavioral_hits * 0.1)
		elif technical_hits > 0:
			qtype, category = "technical", self._technical_category(words)
			fmt = "comparison" if self._is_comparison(q) else "definition"
			confidence = min(0.8, 0.5 + technical_hits * 0.1)
		else:
			qtype, category, fmt = "general", "General Discussion", "definition"
			confidence = 0.3

		complexity = self._complexity(q, technical_hits)
		return QuestionClassification(
			type=qtype,
			category=category,
			confidence=round(confidence, 2),
			suggested_format=fmt,
			complexity=complexity,
			estimated_time_seconds=self._estimate_seconds(qtype, complexity),
			requires_personal_context=self._requires_personal_context(q),
			keywords=self._keywords(words),
		)

	def _is_behavioral_pattern(self, q: str) -> bool:
		return any(p.search(q) for p in BEHAVIORAL_PATTERNS)

	def _technical_category(self, words: List[str]) -> str:
		for category, keywords in TECHNICAL_CATEGORIES:
			if any(k in words for k in keywords):
				return category
		return "Computer Science Fundamentals"

	def _is_comparison(self, q: str) -> bool:
		return any(w in q for w in COMPARISON_WORDS)

	def _complexity(self, q: str, technical_hits: int) -> str:
		if any(w in q for w in ADVANCED_WORDS) or technical_hits > 3:
			return "advanced"
		if technical_hits > 1 or len(q) > 100:
			return "intermediate"
		return "beginner"

	def _estimate_seconds(self, qtype: str, complexity: str) -> int:
		# Round half up so 32.5 reads as 33 seconds
		return int(math.floor(BASE_SECONDS[qtype] * COMPLEXITY_MULTIPLIER[complexity] + 0.5))

	def _requires_personal_context(self, q: str) -> bool:
		if any(p in q for p in PERSONAL_CONTEXT_PHRASES):
			return True
		return any(p in q for p in PERSONAL_PRONOUNS)

	def _keywords(self, words: List[str]) -> List[str]:
		"""Technical terms first, then other content words, in question order."""
		cleaned = [w.strip(KEYWORD_STRIP_CHARS) for w in words]
		technical = [w for w in cleaned if w in TECHNICAL_KEYWORDS]
		other = [
			w for w in cleaned
			if w not in TECHNICAL_KEYWORDS and len(w) > 4 and w not in COMMON_WORDS
		]
		return technical + other
