"""
Configuration management for licscan.

Loads the packaged defaults, discovers a user configuration file, and
merges CLI overrides into the ``pip`` adapter options.
"""
import importlib.resources as importlib_resources
import os
from typing import Any, Dict, Optional

import yaml

from licscan.utils.exceptions import InvalidConfigurationError

USER_CONFIG_FILENAME = "licscan.config.yaml"
CONFIG_SECTIONS = ("pip", "scan", "output")


class ConfigManager:
    """Manages licscan configuration loading and merging operations."""

    def load_config(self, path: str) -> dict:
        """Load configuration from a YAML file."""
        with open(path, "r") as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise InvalidConfigurationError(f"Could not parse config file {path}: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise InvalidConfigurationError(
                f"Config file {path} must contain a mapping at the top level"
            )

        for section in CONFIG_SECTIONS:
            # An empty section (all keys commented out) loads as None.
            if data.get(section) is None:
                data.pop(section, None)
            elif not isinstance(data[section], dict):
                raise InvalidConfigurationError(
                    f"Section '{section}' in config file {path} must be a mapping",
                    option=section,
                )
        return data

    def deep_merge(self, default: dict, user: dict) -> dict:
        """Deep merge user config into default config."""
        result = default.copy()
        for key, value in user.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self.deep_merge(result[key], value)
            else:
                result[key] = value
        return result

    def load_package_default_config(self) -> dict:
        """Load default config shipped with the package."""
        default_config_path = importlib_resources.files("licscan.config") / "default.yaml"
        with default_config_path.open("r") as f:
            return yaml.safe_load(f)

    def load_and_merge_config(self, user_config_path: str) -> dict:
        """Load user config and merge with package default."""
        default_config = self.load_package_default_config()
        user_config = self.load_config(user_config_path)
        return self.deep_merge(default_config, user_config)

    def discover_and_load_config(self, config_arg: Optional[str]) -> dict:
        """Discover config file with priority order."""

        # Priority 1: --config argument
        if config_arg:
            if os.path.exists(config_arg):
                return self.load_and_merge_config(config_arg)
            else:
                raise FileNotFoundError(f"Config file not found: {config_arg}")

        # Priority 2: licscan.config.yaml in current directory
        if os.path.exists(USER_CONFIG_FILENAME):
            return self.load_and_merge_config(USER_CONFIG_FILENAME)

        # Priority 3: Package default config
        return self.load_package_default_config()

    def merge_config_and_args(
        self,
        config: dict,
        project_path: Optional[str] = None,
        python_version: Optional[str] = None,
        requirements: Optional[str] = None,
        prepare_no_fail: Optional[bool] = None,
        skip_prepare: Optional[bool] = None,
        output: Optional[str] = None,
    ) -> dict:
        """Merge configuration with CLI arguments. ``None`` leaves a value alone."""
        pip_overrides: Dict[str, Any] = {
            "project_path": project_path,
            "python_version": python_version,
            "pip_requirements_path": requirements,
            "prepare_no_fail": prepare_no_fail,
        }
        for section in CONFIG_SECTIONS:
            if not isinstance(config.get(section), dict):
                config[section] = {}

        for key, value in pip_overrides.items():
            if value is not None:
                config["pip"][key] = value

        if skip_prepare is not None:
            config["scan"]["prepare"] = not skip_prepare

        if output is not None:
            config["output"]["packages_file"] = output

        return config

    def pip_options(self, config: dict) -> dict:
        """Adapter options from a merged config."""
        return dict(config.get("pip") or {})
