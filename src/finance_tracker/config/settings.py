import json
import os
from pathlib import Path
from typing import Any, Dict

from finance_tracker.logging_setup import get_logger

logger = get_logger("finance_tracker.config")

# Package defaults (bundled with code)
PACKAGE_CONFIG_DIR = Path(__file__).parent / "defaults"

# User configs (in the working directory, gitignored)
USER_CONFIG_DIR = Path(os.getenv("FINANCE_TRACKER_CONFIG_DIR", "config"))

DATA_DIR_ENV = "FINANCE_TRACKER_DATA_DIR"

class ConfigLoader:
    """Load configuration with user overrides"""

    @staticmethod
    def load_config(config_name: str) -> Dict[str, Any]:
        """
        Load config with fallback: user config -> default config

        Args:
            config_name: Name of the config file (e.g., 'app.json')

        Raises:
            FileNotFoundError: If no config file was found

        Returns:
            Parsed JSON configuration
        """
        user_config_path = USER_CONFIG_DIR / config_name
        if user_config_path.exists():
            logger.debug("Loading %s from %s", config_name, user_config_path)
            with open(user_config_path) as f:
                return json.load(f)

        default_config_path = PACKAGE_CONFIG_DIR / config_name
        if default_config_path.exists():
            logger.debug("Loading %s from %s", config_name, default_config_path)
            with open(default_config_path) as f:
                return json.load(f)

        raise FileNotFoundError(
            f"Config file '{config_name}' not found in:\n"
            f" - {user_config_path}\n"
            f" - {default_config_path}"
        )

    @staticmethod
    def load_app_config() -> Dict[str, Any]:
        """
        Load application settings, user values layered over the bundled defaults.

        The data directory can be moved with the FINANCE_TRACKER_DATA_DIR
        environment variable; relative store paths are resolved against it.
        """
        with open(PACKAGE_CONFIG_DIR / "app.json") as f:
            config = json.load(f)

        user_config_path = USER_CONFIG_DIR / "app.json"
        if user_config_path.exists():
            with open(user_config_path) as f:
                config.update(json.load(f))

        data_dir = os.getenv(DATA_DIR_ENV)
        if data_dir:
            for key in ("data_path", "db_path"):
                path = Path(config[key])
                if not path.is_absolute():
                    config[key] = str(Path(data_dir) / path.name)

        return config

    @staticmethod
    def load_controllability_rules() -> Dict[str, Any]:
        """Load user controllability rules"""
        return ConfigLoader.load_config('controllability_rules.json')
