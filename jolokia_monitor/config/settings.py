"""Environment settings."""

import os


DEFAULT_CONFIG_PATH = "config/config.yaml"


class Settings:
    """Application settings from environment variables."""

    @staticmethod
    def get(key: str, default: str = "") -> str:
        """
        Get environment variable value.

        Args:
            key: Environment variable name
            default: Value used when the variable is unset or empty

        Returns:
            str: Environment variable value
        """
        return os.getenv(key) or default

    @staticmethod
    def log_level() -> str:
        return Settings.get("LOG_LEVEL", "INFO").upper()

    @staticmethod
    def config_path() -> str:
        return Settings.get("JOLOKIA_MONITOR_CONFIG", DEFAULT_CONFIG_PATH)
