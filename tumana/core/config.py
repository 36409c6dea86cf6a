from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_BACKEND_BASE_URL = "http://localhost:5000"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="TUMANA_", extra="ignore")

    app_name: str = "Digital Tumana Storefront"
    env: str = "dev"
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    log_level: str = "INFO"

    backend_base_url: str = DEFAULT_BACKEND_BASE_URL
    backend_timeout_seconds: int = 15

    # Client-side key-value storage (auth token, signed-in user).
    database_url: str = "sqlite+pysqlite:///./tumana.db"

    shipping_fee_per_seller: float = Field(
        default=50.0,
        ge=0,
        description="Flat fee charged once per distinct seller in an order",
    )
    shuffle_marketplace: bool = True

    def model_post_init(self, __context) -> None:
        if self.env.lower() == "dev":
            return

        if not self.backend_base_url.startswith("https://"):
            raise ValueError(
                "plain-http backend urls are not allowed outside dev mode; set TUMANA_BACKEND_BASE_URL "
                "to an https:// url"
            )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
