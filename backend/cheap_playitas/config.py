from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Apollo booking-guide BFF
    apollo_base_url: str = "https://booking-guide-bff.prod.dertouristiknordic.com"
    apollo_sales_unit: str = "apollorejserdk"
    apollo_alternatives_path: str = "Core/AlternativeDurations"
    booking_site_url: str = "https://www.apollorejser.dk"

    # Outbound connection pool
    upstream_max_connections: int = 30
    upstream_keepalive_expiry: float = 600.0  # 10 minutes
    upstream_timeout_seconds: float = 30.0

    # Prices cache
    prices_cache_ttl_hours: int = 20

    # Request defaults
    default_persons: int = 2
    pax_age: int = 18

    # Long-stay (21/28 days) resolution
    long_stay_strategy: Literal["probe", "alternatives"] = "probe"
    long_stay_pricing: Literal["base", "product"] = "base"

    # CORS
    cors_origins: str = "*"

    # Relative paths resolve against the working directory
    log_dir: str = "logs"

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def prices_cache_ttl_seconds(self) -> float:
        return self.prices_cache_ttl_hours * 60 * 60

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


settings = Settings()
