from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


PROJECT_ROOT = Path(__file__).resolve().parents[2]


class Settings(BaseSettings):
    app_name: str = "community-activity-directory"
    app_env: str = "dev"
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    database_url: str | None = None
    mysql_host: str = "127.0.0.1"
    mysql_port: int = 3306
    mysql_user: str = "root"
    mysql_password: str = ""
    mysql_db: str = "community_activities"

    log_level: str = "INFO"

    llm_enabled: bool = False
    llm_provider: str = "openai"
    llm_model: str = "gpt-4o-mini"
    llm_api_key: str | None = None
    llm_api_base: str = "https://api.openai.com/v1"
    llm_timeout_seconds: float = 10.0

    model_config = SettingsConfigDict(
        env_file=str(PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def mysql_host_resolved(self) -> str:
        host = (self.mysql_host or "").strip()
        if host.lower() in {"localhost", "::1", "[::1]"}:
            return "127.0.0.1"
        return host

    @property
    def mysql_dsn(self) -> str:
        return (
            f"mysql+pymysql://{self.mysql_user}:{self.mysql_password}"
            f"@{self.mysql_host_resolved}:{self.mysql_port}/{self.mysql_db}"
        )

    @property
    def database_dsn(self) -> str:
        url = (self.database_url or "").strip()
        return url or self.mysql_dsn

    @property
    def keyword_expansion_configured(self) -> bool:
        return self.llm_enabled and bool(self.llm_api_key)


settings = Settings()
