"""Settings loading and data path resolution."""

from pathlib import Path

import typer
from loguru import logger

from clock.config.schema import Settings

APP_NAME = "clock"


def load_settings() -> Settings:
    """Load settings from the environment and `.env`."""
    settings = Settings()
    logger.debug(f"Loaded settings: {settings.model_dump()}")
    return settings


def get_data_dir(settings: Settings | None = None) -> Path:
    """Directory holding the ledger file (not created here)."""
    settings = settings or Settings()
    if settings.data_dir:
        return Path(settings.data_dir).expanduser()
    return Path(typer.get_app_dir(APP_NAME))


def get_ledger_path(settings: Settings | None = None) -> Path:
    """Full path of the persisted ledger."""
    settings = settings or Settings()
    return get_data_dir(settings) / settings.ledger_file
