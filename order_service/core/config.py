from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DATABASE_URL = "sqlite+pysqlite:///./orders.db"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="OS_", extra="ignore")

    app_name: str = "Order Service"
    env: str = "dev"
    api_host: str = "0.0.0.0"
    api_port: int = 8083
    log_level: str = "INFO"

    database_url: str = DEFAULT_DATABASE_URL

    membership_service_url: str = "http://localhost:8081"
    product_service_url: str = "http://localhost:8082"
    http_timeout_seconds: int = Field(default=10, description="per-request timeout for collaborator calls")

    shipping_address_min_length: int = 10
    shipping_address_max_length: int = 200

    def model_post_init(self, __context) -> None:
        if self.env.lower() == "dev":
            return

        if self.database_url == DEFAULT_DATABASE_URL:
            raise ValueError(
                "the local sqlite database is not allowed outside dev mode; set env var: OS_DATABASE_URL"
            )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
