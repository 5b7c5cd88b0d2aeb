# daybook/config/settings.py
import secrets
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # DATABASE_URL wins; otherwise a MySQL URL is assembled from DB_*
    database_url: Optional[str] = None
    db_user: Optional[str] = None
    db_pass: Optional[str] = None
    db_host: str = "localhost"
    db_port: Optional[int] = None
    db_name: Optional[str] = None

    # unset -> random per process (tokens die on restart)
    jwt_secret_key: str = Field(default_factory=lambda: secrets.token_hex(32))
    jwt_lifetime_seconds: int = 60 * 60 * 12

    session_lifetime_seconds: int = 43200
    cookie_domain: Optional[str] = None
    cookie_secure: bool = True

    cors_origins: List[str] = ["*"]
    timezone: str = "Asia/Tokyo"
    log_level: str = "INFO"


settings = Settings()
