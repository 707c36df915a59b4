"""Runtime settings read from the environment."""

import os


def get_environment() -> str:
    """Name of the active environment (development, test, staging, production)."""
    return (os.getenv("PROTEAN_ENV") or os.getenv("ENVIRONMENT") or os.getenv("ENV") or "development").lower()


def is_production() -> bool:
    return get_environment() in ("production", "staging")


def order_rate_limit() -> int:
    """Maximum order submissions per client within one window."""
    return int(os.getenv("ORDER_RATE_LIMIT", "10"))


def order_rate_window_seconds() -> float:
    return float(os.getenv("ORDER_RATE_WINDOW_SECONDS", "60"))


def stock_database_url() -> str | None:
    """SQLAlchemy URL of the stock tables. Unset means the in-memory store."""
    return os.getenv("STOCK_DATABASE_URL") or None


def admin_api_token() -> str | None:
    return os.getenv("ADMIN_API_TOKEN") or None


def log_level() -> str | None:
    return os.getenv("LOG_LEVEL") or None
