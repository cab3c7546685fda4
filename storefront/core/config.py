from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App
    app_name: str = "Storefront"
    debug: bool = False

    # API
    frontend_url: str = "http://localhost:3000"

    # Stripe
    stripe_secret_key: str = ""
    stripe_webhook_secret: str = ""
    stripe_currency: str = "gbp"

    # Sanity
    sanity_project_id: str = ""
    sanity_dataset: str = "production"
    sanity_api_version: str = "2024-01-01"
    sanity_api_token: str = ""
    sanity_use_cdn: bool = False
    sanity_timeout_seconds: float = 10.0

    # Clerk
    clerk_publishable_key: str = ""
    clerk_allowed_origins: list[str] = [
        "http://localhost:3000",
    ]


@lru_cache
def get_settings() -> Settings:
    return Settings()
