from __future__ import annotations

from typing import Dict, Mapping, Optional, Tuple
import re


# Spoken forms the browser recognizer tends to produce for technical terms
TECHNICAL_TERMS: Dict[str, str] = {
	# Programming languages
	"java script": "JavaScript",
	"type script": "TypeScript",
	"c plus plus": "C++",
	"c sharp": "C#",
	"go lang": "Go",
	# Frameworks
	"spring boot": "Spring Boot",
	"node js": "Node.js",
	"node j s": "Node.js",
	"react j s": "React.js",
	"angular j s": "Angular.js",
	"rest api": "REST API",
	# Databases
	"my sequel": "MySQL",
	"postgre sequel": "PostgreSQL",
	"postgres sequel": "PostgreSQL",
	"mongo db": "MongoDB",
	"graph ql": "GraphQL",
	# Cloud & tools
	"amazon web services": "AWS",
	"google cloud": "GCP",
	"ci cd": "CI/CD",
	"dev ops": "DevOps",
	"git hub": "GitHub",
	"post man": "Postman",
	"vs code": "VS Code",
	"solid principle": "SOLID principles",
	"aws": "AWS",
	"ec2": "EC2",
	"s3": "S3",
	"api": "API",
	"kubernetes": "Kubernetes",
	"docker": "Docker",
	"jenkins": "Jenkins",
	"redis": "Redis",
}

PHRASE_FIXES: Tuple[Tuple[str, str], ...] = (
	(r"\bresponsible developing\b", "responsible for developing"),
	(r"\bresponsible implementing\b", "responsible for implementing"),
)


class TranscriptCorrector:
	"""Fix common speech-to-text misspellings of technical vocabulary.

	Pure pattern matching: it will also rewrite phrases the speaker meant
	literally. Swap in a different table (or any ``str -> str`` callable) where
	that matters.
	"""

	def __init__(self, terms: Optional[Mapping[str, str]] = None) -> None:
		table = TECHNICAL_TERMS if terms is None else terms
		# Longest spoken form first so "rest api" wins over "api"
		self._patterns = [
			(re.compile(rf"\b{re.escape(spoken)}\b", re.IGNORECASE), written)
			for spoken, written in sorted(table.items(), key=lambda kv: len(kv[0]), reverse=True)
		]
		self._fixes = [(re.compile(p, re.IGNORECASE), r) for p, r in PHRASE_FIXES]

	def __call__(self, text: str) -> str:
		return self.correct(text)

	def correct(self, text: str) -> str:
		corrected = text or ""
		for pattern, written in self._patterns:
			corrected = pattern.sub(written, corrected)
		for pattern, replacement in self._fixes:
			corrected = pattern.sub(replacement, corrected)
		return corrected.strip()
