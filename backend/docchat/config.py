"""Typed settings configuration - single source of truth."""

from functools import lru_cache

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database (unset -> in-memory stores)
    database_url: str | None = None

    # LLM providers
    openai_api_key: SecretStr | None = None
    openai_model: str = "gpt-4o-mini"
    anthropic_api_key: SecretStr | None = None
    anthropic_base_url: str = "https://api.anthropic.com"

    # OCR fallback for image-only PDFs
    ocr_space_api_key: SecretStr | None = None
    ocr_space_url: str = "https://api.ocr.space/parse/image"

    # Retrieval
    retrieval_candidate_limit: int = 20
    retrieval_top_k: int = 8
    retrieval_min_score: int = 0

    # Standardization budgets (characters)
    standardize_input_chars: int = 120_000
    fallback_body_chars: int = 4_000

    # Sessions
    session_cookie_name: str = "docchat_session"
    session_ttl_hours: int = 24 * 7
    session_cookie_secure: bool = False

    # Seeded admin account
    bootstrap_admin_username: str = "admin"
    bootstrap_admin_email: str = "admin@example.com"
    bootstrap_admin_password: SecretStr = SecretStr("admin")

    # Logging
    log_level: str = "INFO"

    @property
    def use_database(self) -> bool:
        """True when a SQL database is configured."""
        return bool(self.database_url)


def secret_value(secret: SecretStr | None) -> str | None:
    """Return the secret's value, or None when unset or blank."""
    if secret is None:
        return None
    value = secret.get_secret_value().strip()
    return value or None


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
