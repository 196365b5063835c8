from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_name: str = "PainCompass AI"
    env: str = "dev"
    api_prefix: str = "/api"
    log_level: str = "INFO"

    database_url: str = "sqlite:///./paincompass.db"

    frontend_origin: str = "http://localhost:5173"

    # LLM provider
    anthropic_api_key: str | None = None
    anthropic_base_url: str | None = None
    llm_model: str = "claude-sonnet-4-20250514"
    analysis_max_tokens: int = 4000
    diary_max_tokens: int = 1200
    llm_timeout_seconds: float = 60.0

    # Per-IP limits on /analyze
    rate_limit_per_minute: int = 2
    rate_limit_per_day: int = 30
    rate_limit_cleanup_interval_seconds: int = 60 * 60
    # Only enable behind a proxy that overwrites X-Forwarded-For.
    trust_forwarded_for: bool = False


settings = Settings()
