from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 8000
    identity_header: str = "X-User-Id"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "vault"
    db_username: str = "vault"
    db_password: str = "secret"

    master_password: str = ""

    max_chunk_chars: int = Field(default=6000, gt=0)
    prefer_direct_csv_parse: bool = False
    max_upload_bytes: int = Field(default=10 * 1024 * 1024, gt=0)
    decryption_cache_size: int = Field(default=512, gt=0)

    extraction_provider: str = "openai"
    extraction_api_key: str = ""
    extraction_base_url: str = ""
    extraction_model_name: str = "gpt-4o-mini"
    extraction_temperature: float = 0.0
    extraction_timeout_seconds: int = 120
