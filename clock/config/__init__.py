"""Configuration module for clock."""

from clock.config.loader import get_data_dir, get_ledger_path, load_settings
from clock.config.schema import Settings

__all__ = ["Settings", "load_settings", "get_data_dir", "get_ledger_path"]
