"""Application configuration via environment variables.

Uses pydantic-settings to load config from env vars with VISITLOG_ prefix.
No YAML files, no file-based config — just env vars (12-factor app style).

The JWT signing secret has no default: the process refuses to start
without VISITLOG_JWT_SECRET.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """All app configuration. Set via VISITLOG_* env vars."""

    # Database
    database_url: str = "postgresql+asyncpg://postgres-dev@db/dev"

    # Auth
    jwt_secret: str = Field(min_length=1)
    jwt_algorithm: str = "HS256"

    # First admin, created only when the users table is empty at startup
    initial_admin_email: Optional[str] = None
    initial_admin_name: str = "Administrator"

    # GitHub OAuth login (disabled unless both are set)
    github_client_id: str = ""
    github_client_secret: str = ""

    # Server
    environment: str = "development"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 3001

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    model_config = {"env_prefix": "VISITLOG_"}

    @property
    def oauth_enabled(self) -> bool:
        return bool(self.github_client_id and self.github_client_secret)


# Singleton — import this everywhere
settings = Settings()
