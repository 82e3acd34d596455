# eventcatalog_openapi/config.py
from __future__ import annotations
import os
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Catalog root (the generator writes domains/services/messages under it)
    project_dir: str = os.getenv("PROJECT_DIR", "")

    # Identity
    service_name: str = os.getenv("SERVICE_NAME", "eventcatalog-generator-openapi")

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # HTTP client (remote specs)
    http_client_timeout_seconds: float = float(
        os.getenv("HTTP_CLIENT_TIMEOUT_SECONDS", "30")
    )
    http_user_agent: str = os.getenv(
        "HTTP_USER_AGENT", "eventcatalog-generator-openapi/0.1.0"
    )

    model_config = SettingsConfigDict(env_file=None, extra="ignore")


settings = Settings()
