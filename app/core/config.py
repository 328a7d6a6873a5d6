from dataclasses import dataclass
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

# app/core/config.py

@dataclass(frozen=True)
class ProviderConfig:
    """Credentials and model names for both providers. Missing keys are valid."""

    primary_api_key: Optional[str] = None
    primary_model_name: str = "mistralai/Mistral-7B-Instruct-v0.2"
    secondary_api_key: Optional[str] = None
    secondary_model_name: str = "gemini-2.5-flash"
    request_timeout_seconds: float = 60.0
    mock_delay_seconds: float = 1.0

class Settings(BaseSettings):
    PROJECT_NAME: str = "Workflow Builder Lite"
    LOG_LEVEL: str = "INFO"

    # Provider A: Hugging Face hosted inference
    HUGGING_FACE_API_KEY: Optional[str] = None
    HUGGING_FACE_MODEL: str = "mistralai/Mistral-7B-Instruct-v0.2"

    # Provider B: Gemini
    GEMINI_API_KEY: Optional[str] = None
    GEMINI_MODEL: str = "gemini-2.5-flash"

    # Reliability knobs
    LLM_MAX_ATTEMPTS: int = 2
    LLM_RETRY_BACKOFF_SECONDS: float = 1.0
    LLM_REQUEST_TIMEOUT_SECONDS: float = 60.0
    MOCK_DELAY_SECONDS: float = 1.0
    CLEAN_TEXT_DELAY_SECONDS: float = 0.5

    # History
    HISTORY_FILE: str = "data/history.json"
    HISTORY_MAX_ENTRIES: int = 50

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    def provider_config(self) -> ProviderConfig:
        """Explicit provider configuration handed to the LLM caller."""
        return ProviderConfig(
            primary_api_key=self.HUGGING_FACE_API_KEY or None,
            primary_model_name=self.HUGGING_FACE_MODEL,
            secondary_api_key=self.GEMINI_API_KEY or None,
            secondary_model_name=self.GEMINI_MODEL,
            request_timeout_seconds=self.LLM_REQUEST_TIMEOUT_SECONDS,
            mock_delay_seconds=self.MOCK_DELAY_SECONDS,
        )

    def configured_provider(self) -> str:
        """Which provider wins the first slot, or 'missing_key' in mock mode."""
        if self.HUGGING_FACE_API_KEY:
            return "huggingface"
        if self.GEMINI_API_KEY:
            return "gemini"
        return "missing_key"

settings = Settings()
