from pydantic_settings import BaseSettings
from pydantic import field_validator, model_validator
from typing import List, Optional


class Settings(BaseSettings):
    # Project Info
    PROJECT_NAME: str = "Lydia Storefront API"
    API_V1_STR: str = "/api/v1"

    # Flat-file database
    DB_FILE: str = "data/db.json"
    PUBLIC_DIR: str = "public"

    # CORS
    BACKEND_CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:5500",
    ]

    # Rate limiting (per client IP)
    RATE_LIMIT: str = "60/minute"

    # Cart storage
    CART_STORAGE_KEY: str = "lydia_cart"
    CART_BACKEND: str = "memory"
    UPSTASH_REDIS_REST_URL: Optional[str] = None
    UPSTASH_REDIS_REST_TOKEN: Optional[str] = None
    CART_SESSION_HEADER: str = "X-Cart-Session"

    # Pricing
    TAX_RATE: float = 0.05
    FREE_SHIPPING_THRESHOLD: Optional[float] = 1000.0
    FLAT_SHIPPING_FEE: float = 49.0
    BOUTIQUE_DISCOUNT_RATE: float = 0.0
    CURRENCY: str = "INR"

    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    # Monitoring (Optional - Add to .env for production)
    SENTRY_DSN: str = ""

    @field_validator("ENVIRONMENT", "CART_BACKEND")
    @classmethod
    def normalize_choice(cls, value: str) -> str:
        return value.lower().strip()

    @field_validator("TAX_RATE", "BOUTIQUE_DISCOUNT_RATE")
    @classmethod
    def validate_rate(cls, value: float) -> float:
        if value < 0 or value > 1:
            raise ValueError("Rates must be between 0 and 1")
        return value

    @model_validator(mode="after")
    def validate_cart_backend(self):
        if self.CART_BACKEND not in {"memory", "redis"}:
            raise ValueError("CART_BACKEND must be 'memory' or 'redis'")
        if self.FLAT_SHIPPING_FEE < 0:
            raise ValueError("FLAT_SHIPPING_FEE cannot be negative")
        return self

    model_config = {
        "env_file": ".env",
        "case_sensitive": True,
        "extra": "ignore",
    }


settings = Settings()
