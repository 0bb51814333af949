"""Configuration settings for liftlog."""

import logging
import os
from pathlib import Path

DEFAULT_REST_SECONDS = 75
DEFAULT_WEIGHT_STEP = 1.25
DEFAULT_DATA_DIR = Path.cwd() / "data"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _int_env(name: str, default: int) -> int:
    try:
        value = int(os.getenv(name, default))
    except ValueError:
        return default
    return value if value > 0 else default


def _float_env(name: str, default: float) -> float:
    try:
        value = float(os.getenv(name, default))
    except ValueError:
        return default
    return value if value > 0 else default


class Settings:
    """Application settings."""

    DATA_DIR: Path = DEFAULT_DATA_DIR
    REST_SECONDS: int = DEFAULT_REST_SECONDS
    WEIGHT_STEP: float = DEFAULT_WEIGHT_STEP
    LOG_LEVEL: str = "WARNING"

    def __init__(self):
        data_dir = os.getenv("LIFTLOG_DATA_DIR")
        self.DATA_DIR = Path(data_dir).expanduser() if data_dir else DEFAULT_DATA_DIR

        # Rest and weight stepping
        self.REST_SECONDS = _int_env("LIFTLOG_REST_SECONDS", DEFAULT_REST_SECONDS)
        self.WEIGHT_STEP = _float_env("LIFTLOG_WEIGHT_STEP", DEFAULT_WEIGHT_STEP)

        level = os.getenv("LIFTLOG_LOG_LEVEL", "WARNING").upper()
        self.LOG_LEVEL = level if level in LOG_LEVELS else "WARNING"


settings = Settings()


def configure_logging(verbose: bool = False) -> None:
    """Configure root logging for the CLI."""
    level = logging.DEBUG if verbose else getattr(logging, settings.LOG_LEVEL)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
