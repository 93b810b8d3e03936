"""
OrgAdmin Server - Configuration Manager

Handles loading and saving server configuration from/to config.json.
Missing keys are filled from DEFAULT_CONFIG; a JWT signing secret is
generated and persisted the first time the file is written.
"""

import json
import logging
import secrets
from pathlib import Path
from typing import Optional, Dict, Any

# Configure logging
logger = logging.getLogger(__name__)


# Default configuration values
DEFAULT_CONFIG = {
    "database_url": "sqlite:///database/orgadmin.db",
    "redis_url": None,  # None disables the shared remote user cache
    "jwt_secret_key": None,  # Generated on first load
    "jwt_algorithm": "HS256",
    "jwt_expiration_hours": 24,
    "local_cache_max_size": 1024,
    "local_cache_ttl_seconds": 300,
    "id_separator": ",",
    "log_level": "INFO",
    "log_dir": "logs",
    "host": "0.0.0.0",
    "port": 8000
}


class ConfigManager:
    """
    Manages server configuration.

    Responsibilities:
    - Load/save config.json (working directory unless a path is given)
    - Provide configuration values to other modules
    """

    def __init__(self, config_file: Optional[Path] = None):
        """
        Initialize configuration manager.

        Args:
            config_file: Path to the JSON config file (default ./config.json)
        """
        self.config_file = Path(config_file) if config_file else Path.cwd() / "config.json"
        self.config: Dict[str, Any] = {}

    def load_config(self) -> Dict[str, Any]:
        """
        Load configuration from config.json.
        Creates default config if file doesn't exist.

        Returns:
            Configuration dictionary
        """
        if self.config_file.exists():
            logger.debug(f"Loading configuration from {self.config_file}")
            with open(self.config_file, 'r') as f:
                self.config = json.load(f)
            # Merge with defaults for any missing keys
            for key, value in DEFAULT_CONFIG.items():
                if key not in self.config:
                    self.config[key] = value
            logger.info("Configuration loaded successfully")
        else:
            logger.info(f"Configuration file not found, creating default at {self.config_file}")
            self.config = DEFAULT_CONFIG.copy()

        if not self.config.get("jwt_secret_key"):
            self.config["jwt_secret_key"] = secrets.token_urlsafe(32)
            self.save_config()

        return self.config

    def save_config(self):
        """Save current configuration to config.json."""
        logger.debug(f"Saving configuration to {self.config_file}")
        self.config_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_file, 'w') as f:
            json.dump(self.config, f, indent=2)
        logger.debug("Configuration saved successfully")

    def get(self, key: str, default=None) -> Any:
        """
        Get configuration value.

        Args:
            key: Configuration key
            default: Default value if key not found

        Returns:
            Configuration value
        """
        if key in self.config:
            return self.config[key]
        if default is not None:
            return default
        return DEFAULT_CONFIG.get(key)

    def set(self, key: str, value: Any):
        """
        Set configuration value and save to file.

        Args:
            key: Configuration key
            value: Configuration value
        """
        self.config[key] = value
        self.save_config()
