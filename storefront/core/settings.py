# ==============================================================================
# SETTINGS CONFIGURATION - Environment Management
# ==============================================================================
# Pydantic Settings for type-safe environment variable management
# Supports: Development, Staging, Production environments
# ==============================================================================

from __future__ import annotations

from enum import Enum
from functools import lru_cache
from typing import Annotated, List, Optional

from pydantic import Field, field_validator, computed_field
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Environment(str, Enum):
    """Application environment types."""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """
    Application Settings Configuration.

    Every value can be overridden through the process environment or a
    `.env` file. Defaults are only suitable for local development.

    Example:
        >>> from storefront.core.settings import settings
        >>> print(settings.API_PREFIX)
        '/api'
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # --------------------------------------------------------------------------
    # APPLICATION SETTINGS
    # --------------------------------------------------------------------------
    APP_NAME: str = Field(
        default="Storefront API",
        description="Application display name"
    )
    APP_VERSION: str = Field(
        default="1.0.0",
        description="Application semantic version"
    )
    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (logs, stack traces)"
    )
    ENVIRONMENT: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Current deployment environment"
    )

    # --------------------------------------------------------------------------
    # API CONFIGURATION
    # --------------------------------------------------------------------------
    API_PREFIX: str = Field(
        default="/api",
        description="Route prefix for every API router"
    )
    API_TITLE: str = Field(
        default="Storefront API",
        description="OpenAPI documentation title"
    )
    API_DESCRIPTION: str = Field(
        default="E-commerce storefront with Stripe checkout and admin back-office",
        description="OpenAPI documentation description"
    )

    # --------------------------------------------------------------------------
    # MONGODB CONFIGURATION
    # --------------------------------------------------------------------------
    MONGODB_URL: str = Field(
        default="mongodb://localhost:27017",
        description="MongoDB connection URI"
    )
    MONGODB_DB: str = Field(
        default="storefront",
        description="MongoDB database name"
    )
    DB_POOL_SIZE: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Maximum connections in the Motor pool"
    )
    DB_POOL_TIMEOUT: int = Field(
        default=30,
        ge=1,
        le=300,
        description="Idle connection timeout in seconds"
    )

    # --------------------------------------------------------------------------
    # SECURITY SETTINGS
    # --------------------------------------------------------------------------
    SECRET_KEY: str = Field(
        default="your-super-secret-key-change-in-production",
        min_length=32,
        description="JWT signing secret key (min 32 chars)"
    )
    ALGORITHM: str = Field(
        default="HS256",
        description="JWT signing algorithm"
    )
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(
        default=60 * 24 * 7,
        ge=1,
        description="Access token expiration in minutes (7 days)"
    )
    BCRYPT_ROUNDS: int = Field(
        default=12,
        ge=4,
        le=31,
        description="bcrypt work factor for password hashes"
    )

    # --------------------------------------------------------------------------
    # STRIPE CONFIGURATION
    # --------------------------------------------------------------------------
    STRIPE_SECRET_KEY: str = Field(
        default="sk_test_placeholder",
        description="Stripe secret API key"
    )
    STRIPE_WEBHOOK_SECRET: str = Field(
        default="whsec_placeholder",
        description="Shared secret used to verify webhook signatures"
    )
    STRIPE_CURRENCY: str = Field(
        default="usd",
        description="Currency for every charge"
    )
    STRIPE_TIMEOUT: int = Field(
        default=30,
        ge=1,
        le=120,
        description="Timeout in seconds for Stripe API calls"
    )
    STRIPE_MAX_NETWORK_RETRIES: int = Field(
        default=2,
        ge=0,
        le=5,
        description="Automatic retries for failed Stripe API calls"
    )
    STRIPE_WEBHOOK_TOLERANCE: int = Field(
        default=300,
        ge=1,
        description="Maximum age in seconds of a signed webhook payload"
    )
    FRONTEND_URL: str = Field(
        default="http://localhost:3000",
        description="Storefront client origin, used for checkout redirects and email links"
    )

    # --------------------------------------------------------------------------
    # PRICING RULES
    # --------------------------------------------------------------------------
    FREE_SHIPPING_THRESHOLD: float = Field(
        default=1000.0,
        ge=0,
        description="Order totals above this ship for free"
    )
    SHIPPING_FLAT_RATE: float = Field(
        default=100.0,
        ge=0,
        description="Shipping cost below the free shipping threshold"
    )
    TAX_RATE: float = Field(
        default=0.18,
        ge=0,
        le=1,
        description="Tax rate used for cart estimates"
    )
    MIN_CHARGE_AMOUNT: float = Field(
        default=0.50,
        ge=0,
        description="Smallest amount the payment provider accepts"
    )

    # --------------------------------------------------------------------------
    # RATE LIMITING
    # --------------------------------------------------------------------------
    RATE_LIMIT_ENABLED: bool = Field(
        default=True,
        description="Enable rate limiting"
    )
    RATE_LIMIT_REQUESTS: int = Field(
        default=100,
        ge=1,
        description="Maximum requests per window"
    )
    RATE_LIMIT_WINDOW: int = Field(
        default=15 * 60,
        ge=1,
        description="Rate limit window in seconds"
    )

    # --------------------------------------------------------------------------
    # CORS SETTINGS
    # --------------------------------------------------------------------------
    CORS_ORIGINS: Annotated[List[str], NoDecode] = Field(
        default=["http://localhost:3000"],
        description="Allowed CORS origins"
    )
    CORS_ALLOW_CREDENTIALS: bool = Field(
        default=True,
        description="Allow credentials in CORS requests"
    )

    # --------------------------------------------------------------------------
    # EMAIL CONFIGURATION
    # --------------------------------------------------------------------------
    EMAIL_ENABLED: bool = Field(
        default=False,
        description="Send real email (production only)"
    )
    SMTP_HOST: str = Field(
        default="smtp.gmail.com",
        description="SMTP server hostname"
    )
    SMTP_PORT: int = Field(
        default=587,
        ge=1,
        le=65535,
        description="SMTP server port"
    )
    SMTP_USER: Optional[str] = Field(
        default=None,
        description="SMTP username"
    )
    SMTP_PASSWORD: Optional[str] = Field(
        default=None,
        description="SMTP password"
    )
    EMAIL_FROM: str = Field(
        default="noreply@storefront.local",
        description="Sender address for outgoing email"
    )

    # --------------------------------------------------------------------------
    # LOGGING CONFIGURATION
    # --------------------------------------------------------------------------
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    # --------------------------------------------------------------------------
    # COMPUTED PROPERTIES
    # --------------------------------------------------------------------------
    @computed_field
    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.ENVIRONMENT == Environment.DEVELOPMENT

    @computed_field
    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.ENVIRONMENT == Environment.PRODUCTION

    # --------------------------------------------------------------------------
    # VALIDATORS
    # --------------------------------------------------------------------------
    @field_validator("SECRET_KEY")
    @classmethod
    def validate_secret_key(cls, v: str) -> str:
        """Warn when the development secret is used."""
        if v == "your-super-secret-key-change-in-production":
            import warnings
            warnings.warn(
                "Using default SECRET_KEY. Generate a secure key for production!",
                UserWarning
            )
        return v

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS origins from string or list."""
        if isinstance(v, str):
            if v == "*":
                return ["*"]
            return [origin.strip() for origin in v.split(",")]
        return v


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Returns:
        Settings: Cached settings instance
    """
    return Settings()


# Module-level settings instance for convenient imports
settings = get_settings()
