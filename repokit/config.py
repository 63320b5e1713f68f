from typing import Any, Dict, List, Optional
from urllib.parse import quote_plus
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # --- Basic configuration ---
    APP_NAME: str = "repokit"
    APP_DESCRIPTION: str = "Generic repository layer with fluent queries and primary-key upserts"
    APP_VERSION: str = "1.0.0"
    APP_ENV: str = "development"  # development, production, testing
    DEBUG: bool = True
    APP_LOCALE: str = "en"

    # --- Database (MySQL/SQLModel) ---
    DB_DRIVER: str = "mysql+pymysql"
    DB_HOST: str = "localhost"
    DB_PORT: int = 3306
    DB_USER: str = "root"
    DB_PASSWORD: str = "root"
    DB_NAME: str = "app_db"
    DB_URL: Optional[str] = None  # Full URL override, e.g. sqlite:///./app.db
    DB_ECHO: bool = False

    @property
    def DATABASE_URL(self) -> str:
        if self.DB_URL:
            return self.DB_URL
        safe_password = quote_plus(self.DB_PASSWORD)
        return f"{self.DB_DRIVER}://{self.DB_USER}:{safe_password}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    # --- Logging ---
    LOG_DIR: str = "logs"
    LOG_LEVEL: str = "INFO"
    LOG_RETENTION: str = "30 days"

    # --- Repository defaults ---
    REPOSITORY_DEFAULT_PER_PAGE: int = 15
    # Transport fields stripped from request input before persistence
    REPOSITORY_DEFAULT_ATTRIBUTES_TO_EXCEPT: List[str] = ["_token", "_method"]
    # Declarative file/image config per repository config key (JSON in env)
    REPOSITORY_FILES: Dict[str, Any] = {}

    # --- API route prefixes ---
    API_V1_DIRECTORY_PREFIX: str = "/api/v1/directory"

    # --- Pydantic ---
    # Load env from project root .env; priority: env vars > .env > defaults
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_ignore_empty=True,
    )


# Singleton settings instance
settings = Settings()
