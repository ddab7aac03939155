"""Settings and configuration."""
import logging
from typing import Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

# Load .env file if it exists
load_dotenv()

MIN_JWT_SECRET_LENGTH = 24


class Settings(BaseSettings):
    # Core
    MODE: str = "dev"  # dev, prod
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./aikya.db"
    RUN_MIGRATIONS: bool = False

    # Security
    # Accepted as 64 hex chars, base64, or raw text; see domain/integrations/keys.py
    INTEGRATION_MASTER_KEY: Optional[str] = None
    JWT_SECRET: Optional[str] = None

    model_config = {
        "case_sensitive": True,
        "env_file": ".env",
        "extra": "ignore"
    }

    @property
    def is_production(self) -> bool:
        return self.MODE.lower() == "prod"


def validate_secrets(cfg: Settings) -> None:
    """Eager startup check for required secrets.

    In prod a missing secret is fatal; in dev it only warns so the dashboard
    can boot without integrations.
    """
    for name in ("JWT_SECRET", "INTEGRATION_MASTER_KEY"):
        if not getattr(cfg, name):
            if cfg.is_production:
                raise RuntimeError(f"Missing required environment variable: {name}")
            logger.warning("%s is not set. Some features may not work as expected.", name)

    if cfg.JWT_SECRET and len(cfg.JWT_SECRET) < MIN_JWT_SECRET_LENGTH:
        logger.warning("JWT_SECRET should be at least %d characters long.", MIN_JWT_SECRET_LENGTH)


settings = Settings()
