"""
Configuration loader for the IMS Station Assignment System.

This module provides the ConfigLoader class that handles loading and validating
JSON configuration files for multi-environment deployments.
"""

import json
import os
from pathlib import Path
from typing import Dict, Any, Optional
from functools import lru_cache

from ..exceptions import IMSConfigurationError, IMSValidationError
from ..utils import get_logger


REQUIRED_ENVIRONMENT_KEYS = ["data_sources", "logging", "processing"]
REQUIRED_DATA_SOURCES = ["stations", "fire_districts"]


class ConfigLoader:
    """
    Configuration loader and validator for the IMS system.

    This class handles loading environment-specific configuration from JSON files,
    validating required fields, and providing access to module configuration and
    data source locations.
    """

    def __init__(self, config_dir: Optional[str] = None, modules_dir: Optional[str] = None):
        """
        Initialize the configuration loader.

        Args:
            config_dir: Directory containing configuration files (defaults to 'config/')
            modules_dir: Directory containing processing modules (defaults to 'modules/')
        """
        self.logger = get_logger(__name__)
        self.config_dir = Path(config_dir) if config_dir else Path("config")
        self.modules_dir = Path(modules_dir) if modules_dir else Path("modules")

    @lru_cache(maxsize=2)
    def load_environment_config(self, environment: str) -> Dict[str, Any]:
        """
        Load configuration for a specific environment.

        Args:
            environment: Environment name (development/production)

        Returns:
            Dictionary containing environment-specific configuration merged with shared config

        Raises:
            IMSConfigurationError: If the configuration file cannot be read
            IMSValidationError: If the configuration structure is invalid
        """
        env_config_path = self.config_dir / "environment_config.json"

        if not env_config_path.exists():
            raise IMSConfigurationError(
                f"Environment configuration file not found: {env_config_path}"
            )

        try:
            with open(env_config_path, 'r') as f:
                config_data = json.load(f)
        except json.JSONDecodeError as e:
            raise IMSConfigurationError(
                f"Invalid JSON in environment configuration: {str(e)}",
                {"path": str(env_config_path)}
            )
        except OSError as e:
            raise IMSConfigurationError(
                f"Failed to read environment configuration: {str(e)}",
                {"path": str(env_config_path)}
            )

        self._validate_environment_config(config_data, environment)

        env_config = dict(config_data["environments"][environment])

        # Merge shared configuration underneath the environment-specific values
        shared_config = config_data.get("shared", {})
        for key, value in shared_config.items():
            if isinstance(value, dict) and isinstance(env_config.get(key), dict):
                merged = dict(value)
                merged.update(env_config[key])
                env_config[key] = merged
            elif key not in env_config:
                env_config[key] = value

        self._validate_data_sources(env_config, environment)

        env_config["_validation"] = config_data.get("validation", {})

        self.logger.info(f"Loaded configuration for environment: {environment}")
        return env_config

    @lru_cache(maxsize=4)
    def load_module_config(self, module_name: str) -> Dict[str, Any]:
        """
        Load module-specific configuration.

        Module configuration lives at ``<modules_dir>/<module>/config/<module>_config.json``.

        Args:
            module_name: Name of the processing module (e.g. 'station_assignment')

        Returns:
            Dictionary containing the module configuration

        Raises:
            IMSConfigurationError: If the module configuration cannot be loaded
        """
        config_path = self.modules_dir / module_name / "config" / f"{module_name}_config.json"

        if not config_path.exists():
            raise IMSConfigurationError(
                f"Module configuration file not found: {config_path}",
                {"module": module_name}
            )

        try:
            with open(config_path, 'r') as f:
                module_config = json.load(f)
        except json.JSONDecodeError as e:
            raise IMSConfigurationError(
                f"Invalid JSON in module configuration: {str(e)}",
                {"module": module_name}
            )
        except OSError as e:
            raise IMSConfigurationError(
                f"Failed to read module configuration: {str(e)}",
                {"module": module_name}
            )

        if not isinstance(module_config, dict):
            raise IMSValidationError(
                "Module configuration must be a JSON object",
                {"module": module_name}
            )

        self.logger.info(f"Loaded module configuration for: {module_name}")
        return module_config

    def get_data_source_path(self, environment: str, source_name: str) -> Path:
        """
        Resolve the file path of a configured data source.

        Relative paths are resolved against the parent of the configuration directory.

        Args:
            environment: Environment name
            source_name: Key under ``data_sources`` (e.g. 'stations', 'fire_districts')

        Returns:
            Path to the data source

        Raises:
            IMSConfigurationError: If the data source is not configured
        """
        env_config = self.load_environment_config(environment)
        data_sources = env_config["data_sources"]

        if source_name not in data_sources:
            raise IMSConfigurationError(
                f"Data source '{source_name}' not found in {environment} configuration"
            )

        path = Path(data_sources[source_name])
        if not path.is_absolute():
            path = self.config_dir.parent / path
        return path

    def validate_environment_variables(self, environment: str) -> None:
        """
        Validate that required environment variables are set.

        Args:
            environment: Environment name to validate

        Raises:
            IMSValidationError: If required environment variables are missing
        """
        env_config = self.load_environment_config(environment)
        required_vars = env_config.get("_validation", {}).get("required_environment_variables", [])

        missing_vars = [var for var in required_vars if not os.getenv(var)]

        if missing_vars:
            raise IMSValidationError(
                f"Missing required environment variables: {', '.join(missing_vars)}"
            )

        self.logger.info(f"Environment variables validated for: {environment}")

    def _validate_environment_config(self, config_data: Dict[str, Any], environment: str) -> None:
        """
        Validate environment configuration structure.

        Args:
            config_data: Configuration data to validate
            environment: Environment name to validate

        Raises:
            IMSValidationError: If configuration is invalid
        """
        if "environments" not in config_data:
            raise IMSValidationError("Missing 'environments' key in configuration")

        if environment not in config_data["environments"]:
            available_envs = list(config_data["environments"].keys())
            raise IMSValidationError(
                f"Environment '{environment}' not found. Available: {available_envs}"
            )

        env_config = config_data["environments"][environment]
        shared_config = config_data.get("shared", {})

        for key in REQUIRED_ENVIRONMENT_KEYS:
            if key not in env_config and key not in shared_config:
                raise IMSValidationError(
                    f"Missing required key '{key}' in {environment} configuration"
                )

    def _validate_data_sources(self, env_config: Dict[str, Any], environment: str) -> None:
        """
        Validate that all required data sources are configured after merging.

        Raises:
            IMSValidationError: If data sources are missing
        """
        data_sources = env_config.get("data_sources", {})
        missing = [name for name in REQUIRED_DATA_SOURCES if name not in data_sources]
        if missing:
            raise IMSValidationError(
                f"Missing required data sources in {environment} configuration (including shared): {missing}"
            )

    def clear_cache(self) -> None:
        """Clear the configuration cache."""
        self.load_environment_config.cache_clear()
        self.load_module_config.cache_clear()
        self.logger.info("Configuration cache cleared")
