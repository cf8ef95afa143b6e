"""
Configuration management for Notion Digest.
"""

import os
import re
import configparser
from pathlib import Path
from typing import Dict, Optional
from loguru import logger

from ..notion.columns import ColumnMapping, resolve_column_mapping

# Whitespace, zero-width spaces and BOMs that sneak in when tokens are pasted
_TOKEN_PADDING = re.compile(r"^[\s\u200b\ufeff]+|[\s\u200b\ufeff]+$")
_TOKEN_QUOTES = re.compile(r"^['\"]|['\"]$")


class ConfigurationError(Exception):
    """Raised when a required configuration value is missing."""


def clean_token(raw: Optional[str]) -> str:
    """Strip padding and one layer of quotes from a pasted API token."""
    if not raw:
        return ""
    return _TOKEN_QUOTES.sub("", _TOKEN_PADDING.sub("", raw))


class Config:
    """
    Configuration manager for Notion Digest.

    Handles loading configuration from environment variables and config files.
    A new instance is created for every run; nothing is cached between runs.
    """

    def __init__(self, config_path: Optional[str] = None, env: Optional[Dict[str, str]] = None):
        """
        Initialize configuration with optional config file path.

        Args:
            config_path: Path to configuration file (optional)
            env: Mapping to read instead of ``os.environ`` (optional)
        """
        env = os.environ if env is None else env

        self.notion_api_token = clean_token(env.get("NOTION_API_TOKEN", ""))
        self.database_id = env.get("DATABASE_ID", "").strip()
        self.discord_webhook_url = env.get("DISCORD_WEBHOOK_URL", "").strip()
        self.column_map_raw = env.get("NOTION_COLUMN_MAP")

        # Load from config file if provided
        if config_path:
            self._load_from_file(config_path)

        # Validate configuration
        self._validate_config()

    def _load_from_file(self, config_path: str):
        """
        Load configuration from file.

        Args:
            config_path: Path to configuration file
        """
        path = Path(config_path)
        if not path.exists():
            logger.warning(f"Config file not found: {config_path}")
            return

        # Interpolation off: column maps are JSON and may contain '%'
        config = configparser.ConfigParser(interpolation=None)
        config.optionxform = str
        config.read(path, encoding="utf-8")

        if "NOTION" in config:
            section = config["NOTION"]
            self.notion_api_token = clean_token(section.get("API_TOKEN", self.notion_api_token))
            self.database_id = section.get("DATABASE_ID", self.database_id).strip()
            self.column_map_raw = section.get("COLUMN_MAP", self.column_map_raw)

        if "DISCORD" in config:
            self.discord_webhook_url = config["DISCORD"].get("WEBHOOK_URL", self.discord_webhook_url).strip()

    def _validate_config(self):
        """Validate configuration and warn about missing values."""
        if not self.notion_api_token:
            logger.warning("Notion API token not found")

        if not self.database_id:
            logger.warning("Notion database ID not found")

        if not self.discord_webhook_url:
            logger.warning("Discord webhook URL not configured")

    def require_notion(self):
        """
        Ensure the Notion token and database ID are both set.

        Raises:
            ConfigurationError: If either is missing
        """
        if not self.notion_api_token or not self.database_id:
            raise ConfigurationError("Set NOTION_API_TOKEN and DATABASE_ID before submitting records")

    def column_mapping(self) -> ColumnMapping:
        """Resolve the column mapping from the raw configured JSON."""
        return resolve_column_mapping(self.column_map_raw)

    def describe(self) -> Dict[str, object]:
        """Presence flags for each setting, safe to log."""
        return {
            "NOTION_API_TOKEN": bool(self.notion_api_token),
            "DATABASE_ID": bool(self.database_id),
            "DISCORD_WEBHOOK_URL": bool(self.discord_webhook_url),
            "NOTION_COLUMN_MAP": self.column_map_raw,
        }
