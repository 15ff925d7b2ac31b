"""
Configuration management for the model catalog.
"""
import os
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Application configuration."""

    # Storage locations
    CACHE_DIR: Optional[str] = os.getenv("CACHE_DIR", ".cache") or None
    CATALOG_DIR: str = os.getenv("CATALOG_DIR", "catalog")
    FEATURE_MATRIX_FILE: str = os.getenv("FEATURE_MATRIX_FILE", "FEATURE_MATRIX.md")

    # HTTP cache
    CACHE_TTL_S: int = int(os.getenv("CACHE_TTL_S", "300"))

    # Fetching
    REQUEST_TIMEOUT_S: float = float(os.getenv("REQUEST_TIMEOUT_S", "30"))
    MAX_RETRIES: int = int(os.getenv("MAX_RETRIES", "3"))
    RETRY_DELAY_S: float = float(os.getenv("RETRY_DELAY_S", "2"))
    USER_AGENT: str = os.getenv(
        "USER_AGENT",
        "Mozilla/5.0 (compatible; modelcatalog/1.0; +https://example.invalid/modelcatalog)",
    )

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT: str = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"
    LOG_COLOR: bool = _env_bool("LOG_COLOR", "false")

    @classmethod
    def validate(cls) -> list[str]:
        """
        Validate configuration.

        Returns:
            List of validation error messages (empty if valid)
        """
        errors = []

        if cls.CACHE_TTL_S < 0:
            errors.append(f"CACHE_TTL_S must be >= 0, got {cls.CACHE_TTL_S}")

        if cls.REQUEST_TIMEOUT_S <= 0:
            errors.append(f"REQUEST_TIMEOUT_S must be > 0, got {cls.REQUEST_TIMEOUT_S}")

        if cls.MAX_RETRIES < 0:
            errors.append(f"MAX_RETRIES must be >= 0, got {cls.MAX_RETRIES}")

        if cls.RETRY_DELAY_S < 0:
            errors.append(f"RETRY_DELAY_S must be >= 0, got {cls.RETRY_DELAY_S}")

        if cls.LOG_LEVEL.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            errors.append(f"Invalid LOG_LEVEL: {cls.LOG_LEVEL}")

        if not cls.CATALOG_DIR:
            errors.append("CATALOG_DIR must not be empty")

        return errors

    @classmethod
    def get_summary(cls) -> dict:
        """Get configuration summary (safe for logging)."""
        return {
            "cache_dir": cls.CACHE_DIR,
            "cache_ttl_s": cls.CACHE_TTL_S,
            "catalog_dir": cls.CATALOG_DIR,
            "request_timeout_s": cls.REQUEST_TIMEOUT_S,
            "max_retries": cls.MAX_RETRIES,
            "retry_delay_s": cls.RETRY_DELAY_S,
            "log_level": cls.LOG_LEVEL,
            "log_color": cls.LOG_COLOR,
        }
