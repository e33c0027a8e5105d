from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Central settings object.
    Vercel/Render provide env vars; locally you can use backend/.env.
    """
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Model provider: "groq" (OpenAI-style chat completions) or "gemini"
    MODEL_PROVIDER: str = "groq"

    # API keys
    GROQ_API_KEY: str = ""
    GROQ_MODEL: str = "llama-3.3-70b-versatile"
    GEMINI_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-2.0-flash"

    # Sampling
    MODEL_TEMPERATURE: float = 0.7
    MODEL_MAX_TOKENS: int = 500

    # Attach the first listing photo when the provider accepts images
    MODEL_VISION: bool = True
    MAX_IMAGE_BYTES: int = 5 * 1024 * 1024

    # Outbound timeouts (seconds)
    FETCH_TIMEOUT_SECONDS: float = 20.0
    MODEL_TIMEOUT_SECONDS: float = 60.0
    IMAGE_TIMEOUT_SECONDS: float = 10.0

    LOG_LEVEL: str = "INFO"

    # Versioning
    APP_VERSION: str = "0.1.0"
    BUILD_ID: str = "dev"

    @property
    def provider(self) -> str:
        return (self.MODEL_PROVIDER or "groq").strip().lower()

    @property
    def api_key(self) -> str:
        """Key for the active provider (may be empty)."""
        if self.provider == "gemini":
            return (self.GEMINI_API_KEY or "").strip()
        return (self.GROQ_API_KEY or "").strip()

    @property
    def api_key_name(self) -> str:
        return "GEMINI_API_KEY" if self.provider == "gemini" else "GROQ_API_KEY"


@lru_cache
def get_settings() -> Settings:
    return Settings()


# Module-level instance for app startup (logging level, title/version)
settings = get_settings()
