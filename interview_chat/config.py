from pydantic_settings import BaseSettings
from pydantic import field_validator
from typing import List
from dotenv import load_dotenv


# Ensure .env is loaded eagerly
load_dotenv(dotenv_path=".env")


class Settings(BaseSettings):
	# Server
	host: str = "0.0.0.0"
	port: int = 8000
	cors_allow_origins: List[str] = [
		"http://localhost:3000",
		"http://localhost:5000",
		"http://localhost:5173",
		"http://127.0.0.1:3000",
		"http://127.0.0.1:5173",
	]

	# Auth
	api_key: str | None = None  # simple bearer key if provided

	# Completion service (Groq, OpenAI-compatible)
	groq_api_key: str | None = None  # absent -> simulated answers
	groq_base_url: str | None = None
	groq_model: str = "llama-3.1-8b-instant"
	answer_temperature: float = 0.7
	groq_max_tokens: int = 1500
	completion_timeout_seconds: float = 15.0

	# Simulated answers (used when the completion service is unreachable)
	simulation_word_delay: float = 0.02
	simulation_sentence_delay: float = 0.1

	# Conversation memory
	memory_max_messages: int = 10  # retention cap per session
	focus_window_turns: int = 2  # turns fed to follow-up detection and prompts

	# Logging
	log_level: str = "INFO"
	analytics_path: str | None = None  # e.g., logs/chat.jsonl

	@field_validator("answer_temperature")
	@classmethod
	def clamp_temperature(cls, v: float) -> float:
		return max(0.0, min(1.0, v))

	@field_validator("memory_max_messages", "focus_window_turns")
	@classmethod
	def at_least_one(cls, v: int) -> int:
		return max(1, v)

	@field_validator("cors_allow_origins", mode="before")
	@classmethod
	def parse_cors_origins(cls, v):
		# Allow environment variable override
		if isinstance(v, str):
			return [origin.strip() for origin in v.split(",")]
		return v

	class Config:
		env_file = ".env"
		env_file_encoding = "utf-8"


settings = Settings()
