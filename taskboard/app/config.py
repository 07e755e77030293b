from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # Persistence: "sql" (SQLAlchemy, default) or "file" (JSON documents)
    database_url: str = Field("sqlite:///./taskboard.db")
    task_repo_backend: str = Field("sql")
    workspace_root: str = Field("./data")

    # Browser client served from the Vite dev server by default
    cors_allow_origins: List[str] = Field(default_factory=lambda: ["http://localhost:5173"])

    # Client side: where the task service lives and how long a request may take
    api_base_url: str = Field("http://localhost:8000")
    http_timeout_seconds: float = Field(10.0)

    host: str = Field("127.0.0.1")
    port: int = Field(8000)
    log_level: str = Field("INFO")


@lru_cache()
def get_settings() -> Settings:
    return Settings()
