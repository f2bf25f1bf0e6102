from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    # App info
    app_name: str = "Asador Callejero"
    currency: str = "MXN"

    # Database
    database_url: str = "duckdb://./data/asador.duckdb"

    # Session auth (empty password disables auth for local development)
    auth_password: str = ""
    session_secret: str = "change-me"
    session_algorithm: str = "HS256"
    session_cookie_name: str = "asador_session"
    session_max_age_seconds: int = 60 * 60 * 24 * 7  # 7 days
    cookie_secure: bool = True

    # API
    api_title: str = "Asador POS API"
    api_version: str = "1.0.0"
    api_prefix: str = "/api/v1"
    allowed_origins: List[str] = ["*"]

    # Sales
    closed_sales_limit: int = 100

    # Dev mode
    debug: bool = False
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_prefix = "ASADOR_"
        case_sensitive = False


# Global settings instance
settings = Settings()
