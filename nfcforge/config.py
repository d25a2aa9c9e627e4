from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="NFCFORGE_")

    app_name: str = "NFCForge"
    debug: bool = False

    database_url: str = "sqlite+aiosqlite:///./nfcforge.db"

    # Single settlement currency passed through to the payment provider.
    # No conversion or tax logic is applied anywhere.
    currency: str = "usd"

    # Upper bound on cards per order; anything above is rejected at checkout
    max_order_quantity: int = 100_000

    # Confirmation email service. Empty URL falls back to log-only delivery.
    email_service_url: str = ""
    email_service_api_key: str = ""
    email_from: str = "orders@nfcforge.example"

    # Designer sessions idle longer than this are dropped; the oldest idle
    # session is evicted once the cap is reached
    design_session_ttl_seconds: int = 3600
    max_design_sessions: int = 10_000

    payment_api_url: str = "https://api.stripe.com/v1"
    payment_api_key: str = ""

    cors_origins: list[str] = ["http://localhost:3000"]


settings = Settings()


# =============================================================================
# DESIGNER DEFAULTS
# =============================================================================

DEFAULT_TEMPLATE = "classic"

DEFAULT_PRIMARY_COLOR = "#000000"
DEFAULT_SECONDARY_COLOR = "#666666"
DEFAULT_BACKGROUND_COLOR = "#ffffff"

DEFAULT_ACTIVE_TAB = "elements"

DEFAULT_QUANTITY = 1
