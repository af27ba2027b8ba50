from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, Dict


def _not_blank(v: str) -> str:
	if not v.strip():
		raise ValueError("must not be blank")
	return v


class ChatRequest(BaseModel):
	model_config = ConfigDict(populate_by_name=True)

	message: str = Field(..., min_length=1, description="Question text, typed or transcribed")
	session_id: str = Field(..., min_length=1, alias="sessionId", description="Session identifier")
	is_voice: bool = Field(default=False, alias="isVoice", description="Message came from speech recognition")

	@field_validator("message")
	@classmethod
	def message_not_blank(cls, v: str) -> str:
		return _not_blank(v)


class ContextRequest(BaseModel):
	model_config = ConfigDict(populate_by_name=True)

	content: str = Field(..., min_length=1, description="Background text such as a resume excerpt")
	session_id: str = Field(..., min_length=1, alias="sessionId", description="Session identifier")

	@field_validator("content")
	@classmethod
	def content_not_blank(cls, v: str) -> str:
		return _not_blank(v)


class ChatResponse(BaseModel):
	success: bool
	response: str
	streaming: bool
	structured: Dict[str, Any] = Field(default_factory=dict, description="Formatted answer and follow-up suggestions")
	analysis: Dict[str, Any] = Field(default_factory=dict, description="Question classification and follow-up analysis")
