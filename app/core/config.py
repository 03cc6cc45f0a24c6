"""
app/core/config.py

Centralised configuration loaded from environment variables.
Use a .env file locally; Docker Compose injects these at runtime.
"""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # ── Application ────────────────────────────────────────────────────────────
    app_name: str = "Movie Search API"
    app_version: str = "1.0.0"
    debug: bool = False

    # ── Search index (Elasticsearch) ───────────────────────────────────────────
    # Leaving the node unset switches search to catalog-only mode.
    elasticsearch_node: Optional[str] = None
    elasticsearch_api_key: Optional[str] = None
    elasticsearch_index: str = "movies"
    elasticsearch_request_timeout: float = 10.0
    elasticsearch_max_retries: int = 2
    elasticsearch_verify_certs: bool = False

    # ── Catalog store (MongoDB) ────────────────────────────────────────────────
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_database: str = "movie_catalog"
    mongodb_collection: str = "movies"
    mongodb_server_selection_timeout_ms: int = 3000

    # ── Public search ──────────────────────────────────────────────────────────
    search_default_size: int = 20
    search_max_size: int = 100
    suggestion_default_limit: int = 5
    suggestion_max_limit: int = 10

    # ── Admin ──────────────────────────────────────────────────────────────────
    admin_default_limit: int = 10
    admin_max_limit: int = 50
    admin_api_token: Optional[str] = None

    # ── Maintenance ────────────────────────────────────────────────────────────
    resync_batch_size: int = 500

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )


# Single shared instance; import this everywhere.
settings = Settings()
