"""
Application configuration using Pydantic Settings.
"""

from dataclasses import dataclass
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional

from services.errors import CredentialNotConfiguredError


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    LOG_LEVEL: str = "INFO"

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    # YouTube Data API
    YOUTUBE_API_KEY: str = ""
    COMMENTS_PAGE_SIZE: int = 100  # commentThreads.list allows at most 100
    COMMENTS_TARGET_TOTAL: int = 2000

    # OpenAI
    OPENAI_API_KEY: str = ""
    OPENAI_MODEL: str = "gpt-4o-mini"

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True)


settings = Settings()


@dataclass(frozen=True)
class AnalyzerCredentials:
    """API keys handed to the fetcher and the classifier for one request."""

    youtube_api_key: str = ""
    openai_api_key: str = ""

    @classmethod
    def from_settings(cls, openai_api_key: Optional[str] = None) -> "AnalyzerCredentials":
        """Build credentials from settings, letting a caller supply its own OpenAI key."""
        return cls(
            youtube_api_key=settings.YOUTUBE_API_KEY,
            openai_api_key=(openai_api_key or "").strip() or settings.OPENAI_API_KEY,
        )


def require_youtube_api_key(credentials: AnalyzerCredentials) -> str:
    """Return configured YouTube API key or raise a configuration error."""
    api_key = (credentials.youtube_api_key or "").strip()
    if not api_key:
        raise CredentialNotConfiguredError("youtube")
    return api_key


def require_openai_api_key(credentials: AnalyzerCredentials) -> str:
    """Return configured OpenAI API key or raise a configuration error."""
    api_key = (credentials.openai_api_key or "").strip()
    if not api_key:
        raise CredentialNotConfiguredError("openai")
    return api_key
