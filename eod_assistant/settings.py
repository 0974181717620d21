from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Values are read from process environment and optionally from `.env`.
    Credential fields act as fallbacks when no stored profile provides them.
    """

    database_url: str = "sqlite+pysqlite:///./eod_assistant.db"
    github_api_base_url: str = "https://api.github.com"
    github_token: str | None = None
    github_username: str | None = None
    github_user_agent: str = "eod-assistant"
    github_timeout_seconds: float = 15.0
    branch_batch_size: int = 5
    jira_email: str | None = None
    jira_api_token: str | None = None
    slack_default_webhook_url: str | None = None
    llm_api_key: str | None = None
    llm_base_url: str | None = None
    llm_model: str | None = None
    log_level: str = "INFO"
    sentry_dsn: str | None = None
    environment: str = "development"
    release: str | None = None
    sentry_traces_sample_rate: float = 0.1
    rate_limit_per_minute: int = 30
    rate_limit_window_seconds: int = 60

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")
