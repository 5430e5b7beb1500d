"""
Configuration loader for busmap.

Loads settings from config.json with sensible defaults.
"""

import copy
import json
import os
from typing import Any, Dict


# Default configuration
DEFAULT_CONFIG = {
    "feed": {
        "sources": [
            "https://api.gtfs-data.jp/v2/organizations/kariyacity/feeds/communitybus/files/feed.zip?rid=current",
            "https://api.gtfs-data.jp/v2/organizations/kariyacity/feeds/communitybus/files/feed.zip?rid=next",
        ],
        "metadata_url": None,
        "metadata_url_keys": ["file_url"],
        "timeout": 30,
        "route_type": 3
    },
    "map": {
        "center": {
            "latitude": 34.9896,
            "longitude": 137.0025,
            "name": "Kariya, Aichi"
        },
        "radius_meters": 500
    },
    "display": {
        "default_route_color": "#3388ff",
        "default_headsign": "(no headsign)"
    },
    "providers": {
        "departures": {
            "max_departures": 5,
            "cache_duration": 30
        },
        "nearby_stops": {
            "max_stops": 10
        }
    }
}


class Config:
    """
    Configuration manager for busmap.

    Loads config.json from project root, falling back to defaults.
    """

    def __init__(self, config_path: str = "config.json"):
        """
        Initialize configuration.

        Args:
            config_path: Path to config file (default: config.json in current directory)
        """
        self.config_path = config_path
        self.config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """
        Load configuration from file or use defaults.

        Returns:
            Configuration dictionary
        """
        if os.path.exists(self.config_path):
            try:
                with open(self.config_path, 'r', encoding='utf-8') as f:
                    return json.load(f)
            except (json.JSONDecodeError, IOError) as e:
                print(f"Warning: Could not load {self.config_path}: {e}")
                print("Using default configuration")
                return copy.deepcopy(DEFAULT_CONFIG)
        else:
            # Config file doesn't exist, use defaults
            return copy.deepcopy(DEFAULT_CONFIG)

    def get(self, *keys: str, default: Any = None) -> Any:
        """
        Get nested config value.

        Args:
            *keys: Nested keys to traverse (e.g., "map", "center", "latitude")
            default: Default value if key not found

        Returns:
            Config value or default

        Example:
            config.get("map", "center", "latitude")
            # Returns: 34.9896
        """
        value = self.config
        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default
        return value

    def get_provider_config(self, provider_name: str) -> Dict[str, Any]:
        """
        Get configuration for a specific provider.

        Args:
            provider_name: Name of provider (e.g., "departures", "nearby_stops")

        Returns:
            Provider configuration dictionary (empty dict if not found)
        """
        return self.get("providers", provider_name, default={})

    def get_feed_config(self) -> Dict[str, Any]:
        """
        Get feed source configuration.

        Returns:
            Feed configuration dictionary with sources, metadata_url, timeout, route_type
        """
        return self.get("feed", default=copy.deepcopy(DEFAULT_CONFIG["feed"]))

    def get_map_config(self) -> Dict[str, Any]:
        """
        Get map configuration.

        Returns:
            Map configuration dictionary with center and radius_meters
        """
        return self.get("map", default=copy.deepcopy(DEFAULT_CONFIG["map"]))

    def get_display_config(self) -> Dict[str, Any]:
        """
        Get display defaults (route color, headsign placeholder).
        """
        return self.get("display", default=copy.deepcopy(DEFAULT_CONFIG["display"]))


# Global config instance
_config = None


def get_config(config_path: str = None) -> Config:
    """
    Get global configuration instance.

    Lazy-loads configuration on first access. Passing a path replaces the
    global instance with one loaded from that path.

    Returns:
        Config instance
    """
    global _config
    if config_path is not None:
        _config = Config(config_path)
    elif _config is None:
        _config = Config()
    return _config
