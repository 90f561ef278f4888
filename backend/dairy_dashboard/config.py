import logging
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings

_config_logger = logging.getLogger(__name__)

_BACKEND_DIR = Path(__file__).resolve().parents[1]
_PACKAGE_DIR = Path(__file__).resolve().parent
_ENV_FILES = (
    _BACKEND_DIR / ".env",
    ".env",
)
_DEFAULT_CATALOG = _PACKAGE_DIR / "catalog" / "entities.yaml"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_title: str = "Dairy Farm Dashboard"
    app_version: str = "0.1.0"
    app_env: str = "development"
    cors_origins: list[str] = ["http://localhost:5173"]

    # Farm REST API
    farm_api_base_url: str = "http://localhost:8000/api"
    farm_api_timeout: float = 30.0

    # Entity catalog (YAML definitions of every record module)
    entity_catalog_file: str = str(_DEFAULT_CATALOG)

    # Logging — per-category log levels (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    log_level: str = "INFO"                  # Root / app-wide
    log_level_http: str = "WARNING"          # httpx / httpcore — outbound HTTP
    log_level_uvicorn: str = "INFO"          # uvicorn.access / uvicorn.error
    log_level_records: str = "INFO"          # record modules (fetch / submit / export)
    log_level_farm_api: str = "INFO"         # farm API client

    model_config = {
        "env_file": _ENV_FILES,
        "env_file_encoding": "utf-8",
    }

    def model_post_init(self, __context: object) -> None:
        """Normalise the farm API base URL and warn about a missing catalog."""
        object.__setattr__(self, "farm_api_base_url", self.farm_api_base_url.rstrip("/"))
        if not Path(self.entity_catalog_file).exists():
            _config_logger.warning(
                "Entity catalog file not found: %s", self.entity_catalog_file
            )


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance — reads .env once."""
    return Settings()
