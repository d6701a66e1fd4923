"""
Tourney Core Configuration

Centralized settings, paths, and constants for the tournament engine.
"""

import json
import logging
import os
from pathlib import Path
from dataclasses import dataclass
from typing import Optional

import appdirs

from models.schemas import TournamentSettingsSchema
from models.tournament import TournamentSettings


# Application info
APP_NAME = "TourneyCore"
APP_AUTHOR = "TourneyCore"
APP_VERSION = "1.0.0"


@dataclass(frozen=True)
class Paths:
    """Application paths."""
    # Config directory (stores tournament settings overrides)
    config_dir: Path = Path(appdirs.user_config_dir(APP_NAME, APP_AUTHOR))

    # Log directory
    log_dir: Path = Path(appdirs.user_log_dir(APP_NAME, APP_AUTHOR))

    @property
    def settings(self) -> Path:
        return self.config_dir / "settings.json"

    @property
    def log_file(self) -> Path:
        return self.log_dir / "tourney.log"

    def ensure_directories(self) -> None:
        """Create all required directories."""
        for dir_path in [self.config_dir, self.log_dir]:
            dir_path.mkdir(parents=True, exist_ok=True)


@dataclass(frozen=True)
class MapBanSettings:
    """Map ban rules per match length."""
    # Supported best-of lengths
    match_lengths: tuple[int, ...] = (1, 3, 5)

    # (best_of, bans per team); Bo1 accepts any number
    bans_per_length: tuple[tuple[int, int], ...] = ((3, 3), (5, 2))

    def required_bans(self, best_of: int) -> Optional[int]:
        """Bans per team for a match length, None when unrestricted."""
        return dict(self.bans_per_length).get(best_of)


@dataclass(frozen=True)
class LogSettings:
    """Logging settings."""
    level: str = os.environ.get("TOURNEY_LOG_LEVEL", "INFO").upper()
    format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"


# Singleton instances
PATHS = Paths()
MAP_BAN_SETTINGS = MapBanSettings()
LOG_SETTINGS = LogSettings()


def init_config() -> None:
    """Initialize configuration and create required directories."""
    PATHS.ensure_directories()


def configure_logging(level: Optional[str] = None) -> None:
    """Install the root logging configuration for applications embedding the engine."""
    logging.basicConfig(
        level=(level or LOG_SETTINGS.level),
        format=LOG_SETTINGS.format,
    )


def load_tournament_settings(path: Optional[Path] = None) -> TournamentSettings:
    """
    Load per-tournament settings overrides.

    Args:
        path: JSON file to read; defaults to PATHS.settings

    Returns:
        TournamentSettings with defaults for anything the file omits.
        A missing file yields the defaults.

    Raises:
        pydantic.ValidationError: if the file contents are invalid
    """
    path = path or PATHS.settings
    if not path.exists():
        return TournamentSettings()

    with open(path, encoding="utf-8") as f:
        raw = json.load(f)

    schema = TournamentSettingsSchema.model_validate(raw)
    return TournamentSettings(**schema.model_dump())
