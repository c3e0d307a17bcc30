"""
Configuration classes for the taskboard frontend.

The frontend is a thin BFF (backend-for-frontend): it renders HTML and
delegates authentication and task operations to either the remote task
API or the built-in demo data.  Demo mode is selected when no API URL is
configured or when ``DEMO_MODE=true`` is set.
"""

from __future__ import annotations

import os


def _env_flag(name: str, default: str = "false") -> bool:
    """Return True when the environment variable is set to ``true``."""
    return os.environ.get(name, default).strip().lower() == "true"


class Config:
    """Base configuration for all taskboard environments."""

    SECRET_KEY: str = os.environ.get(
        "SECRET_KEY", "taskboard-dev-secret-change-in-production"
    )

    TASK_API_URL: str = os.environ.get("TASK_API_URL", "").strip()
    API_TIMEOUT: int = int(os.environ.get("API_TIMEOUT", "10"))
    DEMO_MODE: bool = _env_flag("DEMO_MODE")

    DEMO_TOKEN_SECRET: str = os.environ.get(
        "DEMO_TOKEN_SECRET", "taskboard-demo-token-secret-change-me"
    )
    DEMO_TOKEN_TTL_MINUTES: int = int(os.environ.get("DEMO_TOKEN_TTL_MINUTES", "60"))

    SESSION_COOKIE_HTTPONLY: bool = True
    SESSION_COOKIE_SAMESITE: str = os.environ.get("SESSION_COOKIE_SAMESITE", "Lax")
    SESSION_COOKIE_SECURE: bool = _env_flag("SESSION_COOKIE_SECURE")


class DevelopmentConfig(Config):
    """Configuration for local development."""

    DEBUG: bool = True
    TESTING: bool = False


class TestingConfig(Config):
    """Configuration for automated tests: always demo mode, short timeouts."""

    DEBUG: bool = True
    TESTING: bool = True

    TASK_API_URL: str = os.environ.get("TEST_TASK_API_URL", "")
    API_TIMEOUT: int = int(os.environ.get("TEST_API_TIMEOUT", "1"))
    DEMO_TOKEN_SECRET: str = "taskboard-test-token-secret-0123456789"


class ProductionConfig(Config):
    """Configuration for production deployments."""

    DEBUG: bool = False
    TESTING: bool = False
    SESSION_COOKIE_SECURE: bool = _env_flag("SESSION_COOKIE_SECURE", "true")


config = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    "default": DevelopmentConfig,
}


def get_config(env: str | None = None) -> type[Config]:
    """
    Look up and return the configuration class for the given environment.

    Args:
        env: Environment name. When None, falls back to FLASK_ENV.

    Returns:
        The selected configuration class.
    """
    if env is None:
        env = os.environ.get("FLASK_ENV", "development")
    return config.get(env, config["default"])
