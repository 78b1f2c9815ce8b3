from typing import List, Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationError


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    exa_api_key: str | None = None
    google_api_key: str | None = None
    tavily_api_key: str | None = None

    search_backend: Literal["exa", "tavily"] = "exa"
    exa_search_url: str = "https://api.exa.ai/search"
    google_chat_model: str = "gemini-1.5-flash"

    max_articles_per_source: int = 6
    search_num_results: int = 20
    lookback_days: int = 7
    request_timeout_seconds: float = 20.0

    summary_cache_ttl_seconds: int = 3600
    search_cache_ttl_seconds: int = 900
    summary_temperature: float = 0.3
    summary_max_output_tokens: int = 150

    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    def missing_credentials(self) -> List[str]:
        """Return the environment variable names of absent required keys."""

        missing: List[str] = []
        if self.search_backend == "tavily":
            if not self.tavily_api_key:
                missing.append("TAVILY_API_KEY")
        elif not self.exa_api_key:
            missing.append("EXA_API_KEY")
        if not self.google_api_key:
            missing.append("GOOGLE_API_KEY")
        return missing

    def require_credentials(self) -> None:
        missing = self.missing_credentials()
        if missing:
            raise ConfigurationError(
                f"{', '.join(missing)} is not configured in the environment."
            )


settings = Settings()
