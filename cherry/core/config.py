from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    # Listing dates and times of day are interpreted in this zone.
    CHERRY_TIMEZONE: str = "UTC"
    DISPLAY_NAME_FALLBACK: str = "Cherry user"

    STORE_PROVIDER: str = "memory"  # "memory" | "json" | "supabase"
    DATA_FILE: str = "./data/cherry.json"

    SUPABASE_URL: str | None = None
    SUPABASE_ANON_KEY: str | None = None
    SUPABASE_TIMEOUT_SECONDS: float = 10.0

    STRIPE_SECRET_KEY: str | None = None
    STRIPE_API_BASE: str = "https://api.stripe.com/v1"
    CHECKOUT_CURRENCY: str = "usd"
    CHECKOUT_PRODUCT_NAME: str = "Cherry Booking"
    SITE_URL: str = "http://localhost:3000"


settings = Settings()
