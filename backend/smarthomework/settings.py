from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
	gemini_api_key: str | None = Field(default=None, validation_alias="GEMINI_API_KEY")
	# Provider can be "vertex" (Vertex AI Express) or "ai_studio" (Generative Language API)
	gemini_provider: str = Field(default="ai_studio", validation_alias="GEMINI_PROVIDER")
	# Model used for generation and grading
	gemini_model: str = Field(default="gemini-2.5-flash", validation_alias="GEMINI_MODEL")
	gemini_timeout_seconds: float = Field(default=60.0, validation_alias="GEMINI_TIMEOUT_SECONDS")
	# Vertex configuration
	vertex_region: str = Field(default="us-central1", validation_alias="GEMINI_VERTEX_REGION")
	vertex_project: str | None = Field(default=None, validation_alias="GEMINI_VERTEX_PROJECT")

	# Exam countdown, 45 minutes
	exam_duration_seconds: int = Field(default=2700, validation_alias="EXAM_DURATION_SECONDS")

	# Prompt clamps for uploaded source material
	context_char_limit: int = Field(default=50000, validation_alias="CONTEXT_CHAR_LIMIT")
	curriculum_char_limit: int = Field(default=40000, validation_alias="CURRICULUM_CHAR_LIMIT")

	# In-memory exam sessions older than this are purged (timers cancelled)
	session_max_age_hours: int = Field(default=24, validation_alias="SESSION_MAX_AGE_HOURS")

	# Base URL used when building share links for students
	public_base_url: str = Field(default="http://localhost:8000", validation_alias="PUBLIC_BASE_URL")

	log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

	# pydantic-settings v2 style config
	model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
