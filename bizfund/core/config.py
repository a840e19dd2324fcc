"""Configuration system for the BizFund API and its scripts."""
from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env file from project root
env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(dotenv_path=env_path)


def _get_env(name: str, default: str) -> str:
    return os.getenv(name, default)


def _get_int(name: str, default: int) -> int:
    raw_value = _get_env(name, str(default))
    try:
        return int(raw_value)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw_value!r}") from exc


def _get_flag(name: str, default: str = "0") -> bool:
    return _get_env(name, default) not in {"0", "false", "False", ""}


@dataclass(frozen=True, slots=True)
class DatabaseSettings:
    """Connection details for the identity store."""

    driver: str
    host: str
    port: int
    user: str
    password: str
    name: str
    url_override: str | None = None

    @property
    def sqlalchemy_url(self) -> str:
        """Build a SQLAlchemy compatible URL."""

        if self.url_override:
            return self.url_override
        if self.password:
            credentials = f"{self.user}:{self.password}"
        else:
            credentials = self.user
        return f"{self.driver}://{credentials}@{self.host}:{self.port}/{self.name}"

    @property
    def masked_url(self) -> str:
        """Return the connection URL with the password hidden."""

        if self.url_override:
            return self.url_override.split("@")[-1] if "@" in self.url_override else self.url_override
        pwd = "***" if self.password else ""
        return f"{self.driver}://{self.user}:{pwd}@{self.host}:{self.port}/{self.name}"


@dataclass(frozen=True, slots=True)
class AuthSettings:
    """Bearer token settings."""

    secret_key: str
    algorithm: str
    access_token_expire_minutes: int


@dataclass(frozen=True, slots=True)
class LoggingSettings:
    """Console level and optional directory for the rotating log file."""

    level: str = "INFO"
    log_dir: Path | None = None


@dataclass(frozen=True, slots=True)
class Settings:
    """Top-level application configuration container."""

    database: DatabaseSettings
    auth: AuthSettings
    logging: LoggingSettings
    sqlalchemy_echo: bool = False

    @classmethod
    def from_env(cls) -> "Settings":
        """Load configuration values from environment variables."""

        db = DatabaseSettings(
            driver=_get_env("DB_DRIVER", "mysql+pymysql"),
            host=_get_env("DB_HOST", "127.0.0.1"),
            port=_get_int("DB_PORT", 3306),
            user=_get_env("DB_USER", "bizfund"),
            password=_get_env("DB_PASSWORD", "bizfund"),
            name=_get_env("DB_NAME", "bizfund"),
            url_override=os.getenv("DATABASE_URL") or None,
        )
        auth = AuthSettings(
            secret_key=_get_env("JWT_SECRET_KEY", "change-me"),
            algorithm=_get_env("JWT_ALGORITHM", "HS256"),
            access_token_expire_minutes=_get_int("JWT_EXPIRE_MINUTES", 1440),
        )
        log_dir = _get_env("LOG_DIR", "logs")
        logging_settings = LoggingSettings(
            level=_get_env("LOG_LEVEL", "INFO"),
            log_dir=Path(log_dir) if log_dir else None,
        )
        return cls(
            database=db,
            auth=auth,
            logging=logging_settings,
            sqlalchemy_echo=_get_flag("SQLALCHEMY_ECHO"),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached ``Settings`` instance."""

    settings = Settings.from_env()

    # Import locally to avoid circular dependencies during module import time.
    from .logger import get_logger

    logger = get_logger(__name__)
    logger.debug(
        "Settings initialised",
        extra={
            "sqlalchemy_echo": settings.sqlalchemy_echo,
            "database": settings.database.masked_url,
            "auth": {
                "algorithm": settings.auth.algorithm,
                "token_ttl": settings.auth.access_token_expire_minutes,
            },
        },
    )
    return settings
