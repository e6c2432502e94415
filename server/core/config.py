# server/core/config.py

import os
import logging
from dataclasses import dataclass
from dotenv import load_dotenv
from core.errors import ConfigurationError


DEFAULT_DATABASE_URL = "sqlite:///./data/minibase.db"
DEFAULT_TOKEN_EXPIRE_MINUTES = 60 * 24


@dataclass(frozen=True)
class Settings:
    jwt_secret_key: str
    database_url: str = DEFAULT_DATABASE_URL
    access_token_expire_minutes: int = DEFAULT_TOKEN_EXPIRE_MINUTES
    admin_bootstrap_password: str = "admin123"
    log_level: str = "INFO"


def load_settings() -> Settings:
    """
    Reads settings from the environment (and a .env file if present).
    A missing JWT secret is fatal: tokens must never be signed with a default key.
    """
    load_dotenv()

    secret = os.getenv("JWT_SECRET_KEY")
    if not secret:
        raise ConfigurationError("JWT_SECRET_KEY must be set")

    return Settings(
        jwt_secret_key=secret,
        database_url=os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL),
        access_token_expire_minutes=int(
            os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(DEFAULT_TOKEN_EXPIRE_MINUTES))
        ),
        admin_bootstrap_password=os.getenv("ADMIN_BOOTSTRAP_PASSWORD", "admin123"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )


def configure_logging(level: str):
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
