"""
Deployment environment and runtime configuration.

The environment (test, staging, prod) is detected once at import. Values
read from the process environment, like the primary admin email, are read
once as well and never reloaded.
"""

import os
from enum import Enum
from typing import Any, Dict, Optional

from dotenv import load_dotenv

load_dotenv("network_intel/.env")


class Environment(Enum):
    """Supported deployment environments"""

    TEST = "test"
    STAGING = "staging"
    PRODUCTION = "prod"


# APP_ENV aliases; anything unknown runs as production
APP_ENV_ALIASES = {
    "test": Environment.TEST,
    "testing": Environment.TEST,
    "dev": Environment.STAGING,
    "development": Environment.STAGING,
    "stage": Environment.STAGING,
    "staging": Environment.STAGING,
    "prod": Environment.PRODUCTION,
    "production": Environment.PRODUCTION,
}

DATABASE_URL_VARS = {
    Environment.TEST: "POSTGRES_TEST",
    Environment.STAGING: "POSTGRES_STAGING",
    Environment.PRODUCTION: "POSTGRES_PROD",
}


def normalize_email(email: Optional[str]) -> str:
    """Trim and lower-case an email address. None becomes an empty string."""
    if not email:
        return ""
    return email.strip().lower()


def _split_origins(raw: str) -> list:
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def _per_environment_settings(environment: Environment) -> Dict[str, Any]:
    if environment == Environment.TEST:
        return {"debug": True, "log_level": "DEBUG", "cors_origins": ["*"], "secure_cookies": False}
    if environment == Environment.STAGING:
        return {
            "debug": True,
            "log_level": "DEBUG",
            "cors_origins": ["http://localhost:3000", "http://localhost:5173"],
            "secure_cookies": True,
        }
    return {
        "debug": False,
        "log_level": os.getenv("LOG_LEVEL", "INFO"),
        "cors_origins": _split_origins(os.getenv("CORS_ORIGINS", "")),
        "secure_cookies": True,
    }


class EnvironmentConfig:
    """Detected environment plus the settings that depend on it."""

    def __init__(self, environment: Optional[str] = None):
        """
        Args:
            environment: Force a specific environment name; auto-detected when None
        """
        self._environment = self._detect_environment(environment)
        self._config = {
            "primary_admin_email": normalize_email(os.getenv("PRIMARY_ADMIN_EMAIL")),
            "owner_notify_url": os.getenv("OWNER_NOTIFY_URL") or None,
            **_per_environment_settings(self._environment),
        }

    @staticmethod
    def _detect_environment(force_env: Optional[str]) -> Environment:
        """forced name, then PYTEST_RUNNING=1, then APP_ENV (default prod)."""
        if force_env:
            return Environment(force_env.lower())
        if os.getenv("PYTEST_RUNNING") == "1":
            return Environment.TEST
        return APP_ENV_ALIASES.get(os.getenv("APP_ENV", "prod").lower(), Environment.PRODUCTION)

    @property
    def environment(self) -> Environment:
        return self._environment

    @property
    def is_test(self) -> bool:
        return self._environment == Environment.TEST

    @property
    def primary_admin_email(self) -> str:
        """Normalized primary admin email ("" when not configured)."""
        return self._config["primary_admin_email"]

    def get(self, key: str, default: Any = None) -> Any:
        return self._config.get(key, default)

    def __repr__(self) -> str:
        return f"EnvironmentConfig(environment={self._environment.value})"


# Global environment configuration instance
env_config = EnvironmentConfig()


def is_test() -> bool:
    """Check if running in test environment"""
    return env_config.is_test


def get_database_connection_string(environment: Optional[str] = None) -> str:
    """
    PostgreSQL DSN for the given (or detected) environment.

    Raises:
        ValueError: If the environment's POSTGRES_* variable is not set
    """
    detected = EnvironmentConfig(environment).environment
    var_name = DATABASE_URL_VARS[detected]

    conn_str = os.getenv(var_name)
    if not conn_str:
        raise ValueError(f"Set {var_name} to connect to the {detected.value} database")
    return conn_str
