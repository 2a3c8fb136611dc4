"""
Configuration management for the Cocktail Order Engine.

This module handles:
- Database path and URL configuration
- Environment-specific configuration (development vs. production)
"""

import os
from pathlib import Path
from typing import Optional

from .constants import (
    APP_NAME,
    APP_VERSION,
    DATABASE_FILENAME,
    DATABASE_VERSION,
)

ENV_VAR_ENVIRONMENT = "COCKTAIL_ORDER_ENV"
ENV_VAR_DATABASE_URL = "COCKTAIL_ORDER_DATABASE_URL"


class Config:
    """
    Application configuration manager.

    Handles database location and environment settings.
    """

    def __init__(self, environment: str = "production"):
        """
        Initialize configuration.

        Args:
            environment: Environment mode - 'production' or 'development'
        """
        self.environment = environment
        self._app_name = APP_NAME
        self._app_version = APP_VERSION
        self._database_version = DATABASE_VERSION

        if environment == "development":
            self._base_dir = self._get_project_data_dir()
        else:
            self._base_dir = self._get_user_data_dir()

        self._database_dir = self._base_dir
        self._database_path = self._database_dir / DATABASE_FILENAME
        self._database_url_override = os.environ.get(ENV_VAR_DATABASE_URL) or None

    def _get_project_data_dir(self) -> Path:
        """
        Get the project's data directory for development.

        Returns:
            Path to project data/ directory
        """
        project_root = Path(__file__).parent.parent.parent
        return project_root / "data"

    def _get_user_data_dir(self) -> Path:
        """
        Get the per-user data directory for production.

        Returns:
            Path to ~/.cocktail_order
        """
        return Path.home() / ".cocktail_order"

    def ensure_directories(self):
        """Create the database directory if it doesn't exist."""
        self._database_dir.mkdir(parents=True, exist_ok=True)

    @property
    def app_name(self) -> str:
        """Application name."""
        return self._app_name

    @property
    def app_version(self) -> str:
        """Application version."""
        return self._app_version

    @property
    def database_version(self) -> str:
        """Database schema version."""
        return self._database_version

    @property
    def database_path(self) -> Path:
        """Full path to the database file."""
        return self._database_path

    @property
    def database_url(self) -> str:
        """
        SQLAlchemy database URL.

        Returns:
            The COCKTAIL_ORDER_DATABASE_URL override when set, otherwise a
            SQLite URL for database_path
        """
        if self._database_url_override:
            return self._database_url_override
        db_path_str = str(self._database_path).replace("\\", "/")
        return f"sqlite:///{db_path_str}"

    @property
    def uses_default_database(self) -> bool:
        """True when the database lives at database_path (no URL override)."""
        return self._database_url_override is None

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"

    def database_exists(self) -> bool:
        """
        Check if database file exists.

        Returns:
            True if database file exists, False otherwise
        """
        return self._database_path.exists()

    def __repr__(self) -> str:
        """String representation of config."""
        return f"Config(environment='{self.environment}', database_url='{self.database_url}')"


# Global configuration instance
_config_instance: Optional[Config] = None


def get_config(environment: Optional[str] = None) -> Config:
    """
    Get the global configuration instance.

    Once created, the singleton's environment cannot be changed by passing
    a different environment argument; this prevents switching databases
    mid-session.

    Args:
        environment: Optional environment for initial creation. If None, uses
                    COCKTAIL_ORDER_ENV or defaults to production. Ignored if
                    singleton already exists.

    Returns:
        Config instance
    """
    global _config_instance

    if _config_instance is None:
        if environment is None:
            environment = os.environ.get(ENV_VAR_ENVIRONMENT, "production")
        _config_instance = Config(environment)
    elif environment is not None and environment != _config_instance.environment:
        import logging

        logger = logging.getLogger(__name__)
        logger.warning(
            f"get_config() called with environment='{environment}' but singleton "
            f"already exists with environment='{_config_instance.environment}'. "
            f"Returning existing singleton."
        )

    return _config_instance


def reset_config():
    """
    Reset the global configuration instance.

    Useful for testing.
    """
    global _config_instance
    _config_instance = None


def get_database_url() -> str:
    """
    Get the database URL.

    Returns:
        SQLAlchemy database URL string
    """
    return get_config().database_url
