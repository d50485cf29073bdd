from typing import Literal, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

class AppConfig(BaseSettings):
    """Application configuration using Pydantic BaseSettings.

    Loads configuration from environment variables and .env file (if present).
    Fields are type-checked and validated. Defaults are provided where appropriate.
    """
    # Supabase
    supabase_url: Optional[str] = None
    supabase_anon_key: Optional[str] = None
    supabase_service_role_key: Optional[str] = None

    # Application
    app_env: str = "local"
    log_level: str = "DEBUG"
    app_title: str = "RINL Steel Plant Operations"
    currency_symbol: str = "₹"

    # Backends
    data_backend: Literal["csv", "supabase"] = "csv"
    auth_provider: Literal["local", "supabase"] = "local"
    log_sessions: bool = True

    # Data paths
    data_dir: str = "sample_data"

    # Production page
    production_row_limit: int = 30
    production_target_tons: float = 2500.0

    # Checkout
    otp_max_attempts: int = 3
    payment_gateway: Literal["simulated", "http"] = "simulated"
    payment_gateway_url: Optional[str] = None
    payment_gateway_key: Optional[str] = None
    payment_latency_seconds: float = 2.0
    order_delivery_days: int = 7

    # Materials requests
    request_delivery_days: int = 10

    # Chat assistant
    chat_api_url: str = "https://api.groq.com/openai/v1/chat/completions"
    chat_api_key: Optional[str] = None
    chat_model: str = "llama-3.3-70b-versatile"
    chat_temperature: float = 0.7
    http_timeout_seconds: float = 30.0

    # Seed data settings
    default_seed_days: int = 60
    default_seed_value: int = 42

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

_config: Optional[AppConfig] = None

def get_config() -> AppConfig:
    """Return the AppConfig instance (singleton pattern)."""
    global _config
    if _config is None:
        _config = AppConfig()
    return _config

def set_config_for_test(**kwargs):
    """For testing only: override the AppConfig instance with new values."""
    global _config
    _config = AppConfig(**kwargs)
