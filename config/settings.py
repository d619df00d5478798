"""
Configuration management for the campaign dashboard engine.
Handles data locations, notice timings, and environment configuration.
"""

import os
import streamlit as st
from dotenv import load_dotenv
from typing import Optional
from dataclasses import dataclass

# Load .env file for local development
load_dotenv()


@dataclass
class AppConfig:
    """Application configuration settings."""
    campaign_data_path: str = "campaigns.xlsx"
    default_currency: str = "EUR"
    cache_timeout_hours: int = 24
    max_file_size_mb: int = 10
    status_warning_seconds: float = 5.0
    status_info_seconds: float = 4.0
    strict_status_migration: bool = False
    supported_file_formats: list = None

    def __post_init__(self):
        if self.supported_file_formats is None:
            self.supported_file_formats = ['.xlsx', '.xls', '.csv']

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_mb * 1024 * 1024


class ConfigManager:
    """Manages application configuration and settings."""

    def __init__(self):
        self._config: Optional[AppConfig] = None

    def load_config(self) -> AppConfig:
        """Load configuration from environment and Streamlit secrets."""
        if self._config is not None:
            return self._config

        self._config = AppConfig(
            campaign_data_path=self._get_setting("CAMPAIGN_DATA_PATH", "campaigns.xlsx"),
            default_currency=self._get_setting("DEFAULT_CURRENCY", "EUR"),
            cache_timeout_hours=self._get_int_setting("CACHE_TIMEOUT_HOURS", 24),
            max_file_size_mb=self._get_int_setting("MAX_FILE_SIZE_MB", 10),
            status_warning_seconds=self._get_float_setting("STATUS_WARNING_SECONDS", 5.0),
            status_info_seconds=self._get_float_setting("STATUS_INFO_SECONDS", 4.0),
            strict_status_migration=self._get_bool_setting("STRICT_STATUS_MIGRATION", False)
        )

        return self._config

    def reset(self):
        """Drop the loaded configuration so the next access re-reads it."""
        self._config = None

    def _get_secret_or_env(self, key: str) -> Optional[str]:
        """Get value from Streamlit secrets or environment variables."""
        # Try Streamlit secrets first
        try:
            if hasattr(st, 'secrets') and key in st.secrets:
                return st.secrets[key]
        except Exception:
            pass

        # Fall back to environment variables
        return os.getenv(key)

    def _get_setting(self, key: str, default: str) -> str:
        """Get string setting with default value."""
        value = self._get_secret_or_env(key)
        return value if value is not None else default

    def _get_int_setting(self, key: str, default: int) -> int:
        """Get integer setting with default value."""
        value = self._get_secret_or_env(key)
        if value is not None:
            try:
                return int(value)
            except ValueError:
                pass
        return default

    def _get_float_setting(self, key: str, default: float) -> float:
        """Get float setting with default value."""
        value = self._get_secret_or_env(key)
        if value is not None:
            try:
                return float(value)
            except ValueError:
                pass
        return default

    def _get_bool_setting(self, key: str, default: bool) -> bool:
        """Get boolean setting with default value."""
        value = self._get_secret_or_env(key)
        if value is None:
            return default
        return str(value).strip().lower() in ('1', 'true', 'yes', 'on')

    def get_campaign_data_path(self) -> str:
        """Get path of the campaign export file."""
        config = self.load_config()
        return config.campaign_data_path

    def get_cache_timeout(self) -> int:
        """Get cache timeout in hours."""
        config = self.load_config()
        return config.cache_timeout_hours

    def get_notice_durations(self) -> dict:
        """Get auto-dismiss delays for status notices, in seconds."""
        config = self.load_config()
        return {
            'warning': config.status_warning_seconds,
            'info': config.status_info_seconds,
        }

    def is_strict_status_migration(self) -> bool:
        """Check whether unknown status values should raise."""
        config = self.load_config()
        return config.strict_status_migration

    def get_max_file_size_bytes(self) -> int:
        """Get maximum file size in bytes."""
        config = self.load_config()
        return config.max_file_size_bytes


# Global configuration manager instance
config_manager = ConfigManager()
