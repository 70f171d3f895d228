"""
storefront/core/config.py

Purpose: Application configuration

- Loads environment variables
- Centralizes config values (DB URI, secrets, gateway keys, etc.)
- Validates configuration on startup
- Environment-specific settings
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, Literal


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Validates all required configs on startup.
    """

    # Environment
    ENVIRONMENT: Literal["development", "staging", "production"] = "development"

    # MongoDB
    MONGODB_URL: str = Field(
        default="mongodb://localhost:27017",
        description="MongoDB connection URI"
    )
    MONGODB_DB_NAME: str = Field(
        default="storefront",
        description="MongoDB database name"
    )

    # Auth
    JWT_SECRET: str = Field(
        default="change-me-in-production",
        description="Secret used to sign access tokens"
    )
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRES_DAYS: int = Field(
        default=7,
        description="Access token lifetime in days"
    )
    BCRYPT_ROUNDS: int = Field(
        default=10,
        description="bcrypt cost factor for password hashes"
    )
    COOKIE_SECURE: bool = Field(
        default=False,
        description="Send the auth cookie over HTTPS only"
    )
    PASSWORD_RESET_EXPIRE_MINUTES: int = 10

    # URLs
    FRONTEND_URL: str = Field(
        default="http://localhost:5173",
        description="SPA base URL (used in e-mails and OAuth redirects)"
    )
    SERVER_URL: str = Field(
        default="http://localhost:5000",
        description="Public base URL of this API"
    )

    # Razorpay
    RAZORPAY_KEY_ID: Optional[str] = None
    RAZORPAY_KEY_SECRET: Optional[str] = None
    RAZORPAY_WEBHOOK_SECRET: Optional[str] = None
    RAZORPAY_BASE_URL: str = "https://api.razorpay.com/v1"
    RAZORPAY_TIMEOUT: float = 15.0

    # Resend (e-mail)
    RESEND_API_KEY: Optional[str] = None
    RESEND_FROM_EMAIL: str = "Farbetter <onboarding@resend.dev>"
    SUPPORT_EMAIL: str = "farbetterstore@gmail.com"

    # Cloudinary (images)
    CLOUDINARY_CLOUD_NAME: Optional[str] = None
    CLOUDINARY_API_KEY: Optional[str] = None
    CLOUDINARY_API_SECRET: Optional[str] = None
    CLOUDINARY_FOLDER: str = "farbetter"

    # Google OAuth
    GOOGLE_CLIENT_ID: Optional[str] = None
    GOOGLE_CLIENT_SECRET: Optional[str] = None

    # Seed data
    ADMIN_EMAIL: Optional[str] = None
    ADMIN_PASSWORD: Optional[str] = None

    # Response cache (TTLs in seconds)
    CACHE_TTL_PRODUCTS: int = 300
    CACHE_TTL_CATEGORIES: int = 3600
    CACHE_TTL_OFFERS: int = 600
    CACHE_TTL_TESTIMONIALS: int = 3600
    CACHE_MAX_ENTRIES: int = 1000

    # Inventory
    LOW_STOCK_THRESHOLD: int = Field(
        default=10,
        description="Stock level at or below which a product is reported as low"
    )

    # Application
    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    API_PREFIX: str = Field(
        default="/api",
        description="API route prefix"
    )
    PORT: int = 5000
    CORS_ORIGINS: list = Field(
        default=[
            "https://www.farbetterstore.com",
            "https://farbetterstore.com",
            "http://localhost:5173",
            "http://localhost:5000",
        ],
        description="Allowed CORS origins"
    )

    @field_validator("JWT_SECRET")
    @classmethod
    def validate_jwt_secret(cls, v, info):
        """Ensure the signing secret is changed in production."""
        if info.data.get("ENVIRONMENT") == "production" and v == "change-me-in-production":
            raise ValueError("JWT_SECRET must be changed in production environment")
        return v

    @field_validator("BCRYPT_ROUNDS")
    @classmethod
    def validate_bcrypt_rounds(cls, v):
        if not 4 <= v <= 31:
            raise ValueError("BCRYPT_ROUNDS must be between 4 and 31")
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"

    @property
    def razorpay_configured(self) -> bool:
        return bool(self.RAZORPAY_KEY_ID and self.RAZORPAY_KEY_SECRET)

    @property
    def email_configured(self) -> bool:
        return bool(self.RESEND_API_KEY)

    @property
    def cloudinary_configured(self) -> bool:
        return bool(
            self.CLOUDINARY_CLOUD_NAME
            and self.CLOUDINARY_API_KEY
            and self.CLOUDINARY_API_SECRET
        )

    @property
    def google_oauth_configured(self) -> bool:
        return bool(self.GOOGLE_CLIENT_ID and self.GOOGLE_CLIENT_SECRET)

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        env_file_encoding="utf-8",
        extra="ignore",
    )


# Global settings instance
settings = Settings()


def validate_settings():
    """
    Validates critical settings on application startup.
    Raises ValueError if any required setting is missing or invalid.
    """
    errors = []

    if not settings.MONGODB_URL:
        errors.append("MONGODB_URL is required")

    if not settings.JWT_SECRET:
        errors.append("JWT_SECRET is required")

    # Production-specific validations
    if settings.is_production:
        if not settings.RAZORPAY_WEBHOOK_SECRET and settings.razorpay_configured:
            errors.append("RAZORPAY_WEBHOOK_SECRET is required when Razorpay is enabled in production")
        if not settings.COOKIE_SECURE:
            errors.append("COOKIE_SECURE must be enabled in production")

    if errors:
        raise ValueError(f"Configuration validation failed: {', '.join(errors)}")

    return True
