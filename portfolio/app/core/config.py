"""
Application configuration settings.
Loads from .env file first (overrides shell env for local dev), then pydantic reads from environment.
Production: set env vars in the platform (Docker, K8s, etc.); .env is optional.

The process-wide default lives in `settings`; create_app() accepts an explicit
Settings instance and hands it to handlers through app.state.
"""
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve .env path: portfolio/.env (absolute path, works regardless of cwd)
_BASE_DIR = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = (_BASE_DIR / ".env").resolve()

if _ENV_FILE.exists():
    load_dotenv(_ENV_FILE, override=True)


class Settings(BaseSettings):
    """Application settings. Source: env vars (after dotenv load)."""

    # App
    app_name: str = "Portfolio"
    app_version: str = "1.0.0"
    app_env: str = "development"
    port: int = 3000
    cors_origins: list[str] = ["*"]

    # Storage: "file" keeps profiles in a JSON document, "database" in a table
    storage_backend: Literal["file", "database"] = "file"
    storage_dir: str = "storage"
    users_file_name: str = "users.json"
    pictures_dir_name: str = "profile-pictures"
    serialize_writes: bool = False

    # Database (storage_backend="database")
    database_url: str = "sqlite:///./portfolio.db"

    # Uploads
    max_picture_bytes: int = 10 * 1024 * 1024

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE) if _ENV_FILE.exists() else ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def users_file_path(self) -> Path:
        return Path(self.storage_dir) / self.users_file_name

    @property
    def pictures_dir(self) -> Path:
        return Path(self.storage_dir) / self.pictures_dir_name


settings = Settings()


# --- Constants (non-env) ---

# Picture route: stored filename extension -> response content type
PICTURE_CONTENT_TYPES: dict[str, str] = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
}
DEFAULT_PICTURE_CONTENT_TYPE: str = "application/octet-stream"

# Picture types the edit dialog accepts before upload
FORM_PICTURE_TYPES: tuple[str, ...] = ("image/jpeg", "image/png", "image/gif")
