from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_name: str = "Session Console"
    app_env: str = "development"
    debug: bool = False

    # Management API of the identity platform
    management_api_url: str = "http://localhost:3001"
    management_api_token: str = ""
    management_api_timeout_seconds: float = 10.0

    # Fetch-by-key cache
    cache_ttl_seconds: int = 30
    cache_maxsize: int = 1024

    # Presentation
    display_timezone: str = "UTC"
    timestamp_format: str = "%m/%d/%Y, %I:%M:%S %p"
    ui_cookie_name: str = "_logto"

    # CORS — comma-separated origins (e.g. "https://console.yourdomain.com")
    cors_allow_origins: str = "http://localhost:3002"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_allow_origins.split(",") if o.strip()]

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"


settings = Settings()
