"""Configuration loader with YAML parsing and environment variable substitution."""

import yaml
import os
import re
from pathlib import Path
from typing import Any, Dict
from .models import MonitoringSystemConfig


# ${VAR} or ${VAR:-fallback}
_ENV_PATTERN = re.compile(r'\$\{(\w+)(?::-([^}]*))?\}')


class ConfigLoader:
    """Load and validate Jolokia collector configuration."""

    @staticmethod
    def load_from_file(config_path: str) -> MonitoringSystemConfig:
        """
        Load configuration from YAML file with environment variable substitution.

        Args:
            config_path: Path to YAML configuration file

        Returns:
            MonitoringSystemConfig: Validated configuration object

        Raises:
            FileNotFoundError: If config file doesn't exist
            yaml.YAMLError: If YAML parsing fails
            ValueError: If the document is not a mapping
            pydantic.ValidationError: If configuration validation fails
        """
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_file, 'r') as f:
            raw_config = yaml.safe_load(f)

        if not isinstance(raw_config, dict):
            raise ValueError(f"Configuration file must contain a mapping: {config_path}")

        return ConfigLoader.load_from_dict(raw_config)

    @staticmethod
    def load_from_dict(raw_config: Dict[str, Any]) -> MonitoringSystemConfig:
        """Validate an already parsed configuration mapping."""
        return MonitoringSystemConfig(**ConfigLoader._substitute_env_vars(raw_config))

    @staticmethod
    def _substitute_env_vars(obj: Any) -> Any:
        """
        Recursively substitute ${ENV_VAR} and ${ENV_VAR:-default} placeholders.

        Credentials (server passwords, jmx_auth) are usually supplied this way.
        """
        if isinstance(obj, str):
            return _ENV_PATTERN.sub(
                lambda m: os.getenv(m.group(1), m.group(2) or ''), obj
            )

        elif isinstance(obj, dict):
            return {k: ConfigLoader._substitute_env_vars(v) for k, v in obj.items()}

        elif isinstance(obj, list):
            return [ConfigLoader._substitute_env_vars(item) for item in obj]

        return obj
