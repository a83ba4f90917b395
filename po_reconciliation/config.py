"""
Configuration for the order confirmation reconciliation system.
"""

# Load environment variables FIRST
from dotenv import load_dotenv
load_dotenv()

import logging
import os
from typing import Optional


class Config:
    """Base configuration."""

    # Default tolerance thresholds (percent), used when a caller omits them
    QUANTITY_TOLERANCE_PERCENT: float = float(os.getenv("QUANTITY_TOLERANCE_PERCENT", "5.0"))
    PRICE_TOLERANCE_PERCENT: float = float(os.getenv("PRICE_TOLERANCE_PERCENT", "2.0"))

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    LOG_FILE: Optional[str] = os.getenv("LOG_FILE") or None  # JSON log file, disabled when unset

    # API Configuration (if using FastAPI)
    API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
    API_PORT: int = int(os.getenv("API_PORT", "8000"))
    API_DEBUG: bool = os.getenv("API_DEBUG", "false").lower() == "true"

    @classmethod
    def validate(cls) -> None:
        """Validate configuration."""
        if cls.QUANTITY_TOLERANCE_PERCENT < 0:
            raise ValueError(f"QUANTITY_TOLERANCE_PERCENT must be >= 0, got {cls.QUANTITY_TOLERANCE_PERCENT}")

        if cls.PRICE_TOLERANCE_PERCENT < 0:
            raise ValueError(f"PRICE_TOLERANCE_PERCENT must be >= 0, got {cls.PRICE_TOLERANCE_PERCENT}")

        if not isinstance(logging.getLevelName(cls.LOG_LEVEL.upper()), int):
            raise ValueError(f"Invalid LOG_LEVEL: {cls.LOG_LEVEL}")

    def tolerance_config(self):
        """Default tolerance thresholds as a ToleranceConfig."""
        from po_reconciliation.schemas.result import ToleranceConfig

        return ToleranceConfig(
            quantity_tolerance_percent=self.QUANTITY_TOLERANCE_PERCENT,
            price_tolerance_percent=self.PRICE_TOLERANCE_PERCENT,
        )


class DevelopmentConfig(Config):
    """Development configuration."""
    LOG_LEVEL = "DEBUG"
    API_DEBUG = True


class ProductionConfig(Config):
    """Production configuration."""
    LOG_LEVEL = "INFO"
    API_DEBUG = False


class TestConfig(Config):
    """Test configuration."""
    LOG_LEVEL = "DEBUG"
    LOG_FILE = None


def get_config(env: str = None) -> Config:
    """Get configuration based on environment."""
    if env is None:
        env = os.getenv("ENV", "development").lower()

    if env == "production":
        config = ProductionConfig()
    elif env == "test":
        config = TestConfig()
    else:
        config = DevelopmentConfig()

    # Validate configuration on creation
    config.validate()
    return config
