import os
import secrets
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

DEFAULT_DATABASE_URL = "sqlite:///./crm.db"
DEFAULT_CORS_ORIGINS = "http://localhost:3000,http://127.0.0.1:3000"
ONE_DAY = 60 * 60 * 24


@dataclass
class Settings:
    """Runtime configuration, read from the environment (and .env)."""

    database_url: str = DEFAULT_DATABASE_URL
    admin_username: Optional[str] = None
    admin_password: Optional[str] = None
    session_secret: str = field(default_factory=lambda: secrets.token_urlsafe(32))
    session_secret_generated: bool = True
    session_max_age: int = ONE_DAY
    environment: str = "development"
    cors_origins: List[str] = field(
        default_factory=lambda: DEFAULT_CORS_ORIGINS.split(",")
    )
    log_level: str = "INFO"
    log_dir: Optional[str] = None

    @classmethod
    def from_env(cls) -> "Settings":
        secret = os.getenv("SESSION_SECRET")
        origins = os.getenv("CORS_ORIGINS", DEFAULT_CORS_ORIGINS)

        settings = cls(
            database_url=os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL),
            admin_username=os.getenv("ADMIN_USERNAME") or None,
            admin_password=os.getenv("ADMIN_PASSWORD") or None,
            session_max_age=int(os.getenv("SESSION_MAX_AGE", str(ONE_DAY))),
            environment=os.getenv("ENVIRONMENT", "development"),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            log_dir=os.getenv("LOG_DIR") or None,
        )
        if secret:
            settings.session_secret = secret
            settings.session_secret_generated = False
        return settings

    @property
    def credentials_configured(self) -> bool:
        return bool(self.admin_username and self.admin_password)

    @property
    def cookie_secure(self) -> bool:
        return self.environment.lower() == "production"


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()
