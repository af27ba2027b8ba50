from __future__ import annotations

from typing import Dict, List, Optional

from interview_chat.services.follow_up_detector import FollowUpAnalysis
from interview_chat.services.question_classifier import QuestionClassification


BASE_PROMPT = (
	"You are an AI Interview Assistant that answers like a confident software engineer in a live job interview.\n\n"
	"RESPONSE GUIDELINES:\n"
	"- Listen carefully to the exact question and answer it directly.\n"
	"- Speak naturally with varied sentence structure; avoid sounding scripted.\n"
	"- Include specific technical details and real-world context.\n"
	"- Keep answers concise but insightful (60-90 seconds when spoken).\n"
	"- ALWAYS complete your thoughts and sentences; never cut off mid-sentence.\n"
	"- End with a natural conclusion that wraps up your answer.\n"
)

FRESH_TOPIC_BLOCK = (
	"\nCONVERSATION STATE: This is a new topic/question.\n"
	"- Treat it as a standalone question; do not assume earlier context.\n"
	"- Provide a focused, interview-appropriate response that demonstrates expertise and practical experience.\n"
)

CONTEXT_TYPE_INSTRUCTIONS: Dict[str, str] = {
	"clarification": (
		"Provide a clear, detailed clarification that builds on your previous response. "
		"Focus on explaining the specific aspect the interviewer is asking about."
	),
	"continuation": (
		"Continue the discussion naturally, building on the previous topic. "
		"Provide additional relevant information or explore the next logical aspect."
	),
	"new_topic": (
		"Respond appropriately to this follow-up while maintaining conversation flow."
	),
}

FORMAT_GUIDANCE: Dict[str, str] = {
	"star": (
		"\nFORMAT: STAR (behavioral question)\n"
		"- Situation: set the context briefly.\n"
		"- Task: state your responsibility or objective.\n"
		"- Action: describe the concrete steps you took.\n"
		"- Result: close with the measurable outcome and what you learned.\n"
		"- Label each part with 'Situation:', 'Task:', 'Action:' and 'Result:'.\n"
	),
	"definition": (
		"\nFORMAT: Technical explanation\n"
		"- Open with a one-sentence definition.\n"
		"- Follow with two or three key points.\n"
		"- Give a concrete example (start it with 'For example').\n"
		"- Finish with the practical application in real projects.\n"
	),
	"comparison": (
		"\nFORMAT: Comparison\n"
		"- Start with a one-sentence overview of both options.\n"
		"- Cover the strengths of the first option, then the second.\n"
		"- Describe the use cases where each one fits best.\n"
		"- End with a clear recommendation.\n"
	),
	"architecture": (
		"\nFORMAT: System design\n"
		"- Start with the high-level architecture.\n"
		"- Walk through the core components and how data flows between them.\n"
		"- Finish with scalability, reliability and the main trade-offs.\n"
	),
	"step_by_step": (
		"\nFORMAT: Coding solution\n"
		"- State the approach first.\n"
		"- Walk through the algorithm step by step.\n"
		"- Give the time and space complexity.\n"
		"- Mention the edge cases you would test.\n"
	),
}


class PromptComposer:
	"""Builds the system instruction and the message list for one chat turn."""

	def compose(
		self,
		classification: QuestionClassification,
		follow_up: FollowUpAnalysis,
		background_text: Optional[str] = None,
	) -> str:
		prompt = BASE_PROMPT
		if follow_up.is_follow_up:
			prompt += self._contextual_block(follow_up)
		else:
			prompt += FRESH_TOPIC_BLOCK

		prompt += FORMAT_GUIDANCE.get(classification.suggested_format, "")

		background = (background_text or "").strip()
		if background:
			prompt += self._background_block(background, classification.suggested_format)
		return prompt

	def build_messages(
		self,
		classification: QuestionClassification,
		follow_up: FollowUpAnalysis,
		message: str,
		background_text: Optional[str] = None,
	) -> List[Dict[str, str]]:
		messages: List[Dict[str, str]] = [
			{"role": "system", "content": self.compose(classification, follow_up, background_text)}
		]
		if follow_up.is_follow_up:
			messages.extend(turn.as_message() for turn in follow_up.relevant_history)
		# Current question last
		messages.append({"role": "user", "content": message})
		return messages

	def _contextual_block(self, follow_up: FollowUpAnalysis) -> str:
		history = "\n".join(
			f"{turn.role.upper()}: {turn.content}" for turn in follow_up.relevant_history
		)
		return (
			f"\nCONVERSATION STATE: This is a {follow_up.context_type} question building on the recent conversation.\n"
			"RECENT CONVERSATION CONTEXT:\n"
			f"{history or '(none)'}\n"
			f"{CONTEXT_TYPE_INSTRUCTIONS.get(follow_up.context_type, CONTEXT_TYPE_INSTRUCTIONS['new_topic'])}\n"
		)

	def _background_block(self, background: str, suggested_format: str) -> str:
		block = (
			"\nYour Professional Identity:\n"
			f"{background}\n\n"
			"CRITICAL INSTRUCTIONS:\n"
			"- You ARE this person; answer in first person using 'I' statements.\n"
			"- ONLY use experience, skills, projects and metrics explicitly present in the background above.\n"
			"- NEVER invent experience, projects, companies or details that are not in the background.\n"
			"- If asked about something not covered, say you haven't worked with that specific technology or situation.\n"
		)
		if suggested_format != "star":
			block += "- Reference the concrete projects and technologies named in the background that relate to the question.\n"
		return block
