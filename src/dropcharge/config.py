"""
Configuration management for DropCharge.
"""
import os
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


class Config:
    """Application configuration."""

    # Supabase (products, subscribers, clicks)
    SUPABASE_URL: Optional[str] = os.getenv("SUPABASE_URL")
    SUPABASE_SERVICE_ROLE_KEY: Optional[str] = os.getenv("SUPABASE_SERVICE_ROLE_KEY")
    PRODUCTS_TABLE: str = os.getenv("PRODUCTS_TABLE", "auto_products")
    SUBSCRIBERS_TABLE: str = os.getenv("SUBSCRIBERS_TABLE", "newsletter_subscribers")
    CLICKS_TABLE: str = os.getenv("CLICKS_TABLE", "clicks")

    # Admin API token (unset = open mode)
    ADMIN_TOKEN: Optional[str] = os.getenv("ADMIN_TOKEN")

    # Optional fetch proxy
    SCRAPER_API_KEY: Optional[str] = os.getenv("SCRAPER_API_KEY")

    # Marketplace / affiliate settings
    AMAZON_DOMAIN: str = os.getenv("AMAZON_DOMAIN", "amazon.de")
    SITE_URL: str = os.getenv("SITE_URL", "https://affiliatelux.netlify.app")
    AFFILIATE_TAG_PREFIX: str = os.getenv("AFFILIATE_TAG_PREFIX", "dropcharge")

    # Fetch timeouts
    RESOLVE_TIMEOUT_S: int = int(os.getenv("RESOLVE_TIMEOUT_S", "10"))
    FETCH_TIMEOUT_S: int = int(os.getenv("FETCH_TIMEOUT_S", "12"))

    # Extraction limits
    MIN_HTML_CHARS: int = int(os.getenv("MIN_HTML_CHARS", "20"))
    TITLE_MAX_CHARS: int = 200
    DESCRIPTION_MAX_CHARS: int = 300
    DEFAULT_LIST_LIMIT: int = 100

    # Leads / stats
    LEADS_PAGE_SIZE: int = 50
    LEADS_MAX_PAGE_SIZE: int = 100
    LEADS_EXPORT_LIMIT: int = 10000
    STATS_RECENT_CLICKS: int = 200
    STATS_RECENT_EMAILS: int = 50

    # Flask settings
    FLASK_ENV: str = os.getenv("FLASK_ENV", "development")
    FLASK_DEBUG: bool = os.getenv("FLASK_DEBUG", "True").lower() == "true"
    FLASK_HOST: str = os.getenv("FLASK_HOST", "0.0.0.0")
    FLASK_PORT: int = int(os.getenv("FLASK_PORT", "5000"))
    SECRET_KEY: str = os.getenv("SECRET_KEY", "dev-secret-key")
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "*")

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    @classmethod
    def get_cors_origins(cls) -> list[str]:
        """Parse the comma-separated CORS_ORIGINS setting."""
        origins = [o.strip() for o in (cls.CORS_ORIGINS or "*").split(",") if o.strip()]
        return origins or ["*"]

    @classmethod
    def validate(cls) -> list[str]:
        """
        Validate configuration.

        Returns:
            List of validation error messages (empty if valid)
        """
        errors = []

        if not cls.SUPABASE_URL or not cls.SUPABASE_SERVICE_ROLE_KEY:
            errors.append("SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY not set (product store disabled)")

        if not cls.ADMIN_TOKEN:
            errors.append("ADMIN_TOKEN not set, admin endpoints are running in open mode")

        if cls.FETCH_TIMEOUT_S <= 0 or cls.RESOLVE_TIMEOUT_S <= 0:
            errors.append("Fetch timeouts must be positive")

        if cls.FLASK_ENV == "production" and cls.SECRET_KEY == "dev-secret-key":
            errors.append("SECRET_KEY uses the development default in production")

        return errors

    @classmethod
    def is_valid(cls) -> bool:
        """Check if configuration is valid."""
        return len(cls.validate()) == 0

    @classmethod
    def get_summary(cls) -> dict:
        """Get configuration summary (safe for logging)."""
        return {
            "flask_env": cls.FLASK_ENV,
            "flask_debug": cls.FLASK_DEBUG,
            "amazon_domain": cls.AMAZON_DOMAIN,
            "supabase_configured": bool(cls.SUPABASE_URL and cls.SUPABASE_SERVICE_ROLE_KEY),
            "admin_token_configured": cls.ADMIN_TOKEN is not None,
            "scraper_api_configured": cls.SCRAPER_API_KEY is not None,
            "log_level": cls.LOG_LEVEL,
        }
