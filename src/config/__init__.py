"""
Configuration Management Module

Centralized settings for Eternal Quest. Everything is environment-variable
based, with an optional `.env` file in the working directory supplying
defaults that do not override variables already set.

Environment Variables:
- QUEST_DATA_DIR: Directory for the save file and activity log (default: ~/.eternal_quest)
- QUEST_SAVE_FILE: Save file name or absolute path (default: goals.txt)
- QUEST_ACTIVITY_LOG: Record each event in activity.md (default: true)
- LOG_LEVEL: Logging verbosity (default: WARNING)
- LOG_FILE: Optional log file path (default: console only)

Usage:
    from config import config
    save_path = config.save_path

The goal-tracking core never reads configuration; only the CLI does.
"""

import os
from pathlib import Path
from typing import Optional

from utils import get_logger

logger = get_logger(__name__)

VALID_LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']

ENV_VARS = [
    ('QUEST_DATA_DIR', 'Directory for the save file and activity log'),
    ('QUEST_SAVE_FILE', 'Save file name (relative to QUEST_DATA_DIR) or absolute path'),
    ('QUEST_ACTIVITY_LOG', 'Append recorded events to activity.md (true/false)'),
    ('LOG_LEVEL', 'Logging verbosity'),
    ('LOG_FILE', 'Optional log file path'),
]


class ConfigError(Exception):
    """Configuration-related errors."""
    pass


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ('1', 'true', 'yes', 'on'):
        return True
    if lowered in ('0', 'false', 'no', 'off'):
        return False
    raise ConfigError(f"Invalid {name}: {value!r}. Expected true or false")


class Config:
    """Configuration manager for the application."""

    def __init__(self, env_file: Optional[str] = '.env'):
        if env_file:
            self._load_env_file(Path(env_file))
        self._load_config()

    def _load_env_file(self, env_file: Path) -> None:
        """Load environment variables from a .env file if it exists."""
        if not env_file.exists():
            return
        try:
            with open(env_file, 'r', encoding='utf-8') as f:
                for line in f:
                    line = line.strip()
                    if not line or line.startswith('#'):
                        continue
                    if '=' in line:
                        key, value = line.split('=', 1)
                        key = key.strip()
                        value = value.strip()
                        # Blank values in a generated .env mean "use the default"
                        if value and key not in os.environ:
                            os.environ[key] = value
                            logger.debug(f"Loaded {key} from .env file")
        except OSError as e:
            logger.warning(f"Failed to load .env file: {e}")

    def _load_config(self) -> None:
        """Load and validate configuration from environment variables."""
        self.data_dir = os.path.expanduser(os.getenv('QUEST_DATA_DIR', '~/.eternal_quest'))
        self.save_file = os.getenv('QUEST_SAVE_FILE', 'goals.txt')
        self.activity_log = _parse_bool(
            'QUEST_ACTIVITY_LOG', os.getenv('QUEST_ACTIVITY_LOG', 'true')
        )

        self.log_level = os.getenv('LOG_LEVEL', 'WARNING').upper()
        self.log_file = os.getenv('LOG_FILE')

        self._validate_config()

    def _validate_config(self) -> None:
        """Validate the loaded configuration."""
        if self.log_level not in VALID_LOG_LEVELS:
            raise ConfigError(f"Invalid LOG_LEVEL: {self.log_level}. Must be one of {VALID_LOG_LEVELS}")

        if not os.path.isabs(self.data_dir):
            raise ConfigError("QUEST_DATA_DIR must be an absolute path")

        if not self.save_file.strip():
            raise ConfigError("QUEST_SAVE_FILE must not be empty")

    @property
    def save_path(self) -> Path:
        """Full path of the default save file."""
        save_file = Path(os.path.expanduser(self.save_file))
        if save_file.is_absolute():
            return save_file
        return Path(self.data_dir) / save_file


# Global configuration instance
config = Config()
