"""
Application Settings.

Centralizes all configuration via .env / environment variables.
"""

from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Settings loaded from environment variables."""

    # --- App ---
    env: str = "development"
    debug: bool = True
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # --- Database ---
    database_url: str = "sqlite:///civil_docs.db"

    # --- Pricing ---
    delivery_surcharge: int = 2000
    currency: str = "XOF"

    # --- Reference allocation ---
    allocator_max_attempts: int = 8
    allocator_backoff_seconds: float = 0.01
    allocator_backoff_max_seconds: float = 0.5

    # --- Request mutations (optimistic concurrency) ---
    mutation_max_attempts: int = 3

    # --- Storage ---
    storage_backend: str = "local"          # "local" | "minio"
    storage_root: str = "storage"
    public_base_url: str = ""               # ex: "https://docs.example.org/files"
    storage_max_attempts: int = 3
    storage_url_expiry_seconds: int = 7 * 24 * 3600
    minio_endpoint: str = "localhost:9000"
    minio_access_key: str = ""
    minio_secret_key: str = ""
    minio_bucket: str = "civil-documents"
    minio_secure: bool = False

    # --- Document texts ---
    country_name: str = "REPUBLIQUE DE COTE D'IVOIRE"
    district_name: str = "DISTRICT D'ABIDJAN"
    commune_name: str = "ABOBO"
    issuing_centre: str = "Centre Principal"
    officer_name: str = "OUATTARA SOULEYMANE"
    officer_title: str = "Officier d'Etat - Civil Délégué"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


@lru_cache
def get_settings() -> Settings:
    """Settings singleton."""
    return Settings()
