"""
Tests for configuration loading.
"""
import os
from pathlib import Path

import pytest

from config import Config, ConfigError

CONFIG_VARS = ['QUEST_DATA_DIR', 'QUEST_SAVE_FILE', 'QUEST_ACTIVITY_LOG', 'LOG_LEVEL', 'LOG_FILE']


@pytest.fixture
def clean_env(monkeypatch):
    """Private copy of the environment without any quest settings."""
    environ = {key: value for key, value in os.environ.items() if key not in CONFIG_VARS}
    monkeypatch.setattr(os, 'environ', environ)
    return monkeypatch


class TestDefaults:

    def test_defaults(self, clean_env):
        settings = Config(env_file=None)
        assert settings.data_dir == os.path.expanduser('~/.eternal_quest')
        assert settings.save_path == Path(settings.data_dir) / "goals.txt"
        assert settings.activity_log is True
        assert settings.log_level == 'WARNING'
        assert settings.log_file is None


class TestEnvironment:

    def test_relative_save_file_lives_in_data_dir(self, clean_env, tmp_path):
        clean_env.setenv('QUEST_DATA_DIR', str(tmp_path))
        clean_env.setenv('QUEST_SAVE_FILE', 'quest.txt')
        assert Config(env_file=None).save_path == tmp_path / "quest.txt"

    def test_absolute_save_file(self, clean_env, tmp_path):
        target = tmp_path / "elsewhere" / "goals.txt"
        clean_env.setenv('QUEST_SAVE_FILE', str(target))
        assert Config(env_file=None).save_path == target

    @pytest.mark.parametrize("value,expected", [("false", False), ("0", False), ("YES", True)])
    def test_activity_log_flag(self, clean_env, value, expected):
        clean_env.setenv('QUEST_ACTIVITY_LOG', value)
        assert Config(env_file=None).activity_log is expected

    def test_log_level_is_normalized(self, clean_env):
        clean_env.setenv('LOG_LEVEL', 'debug')
        assert Config(env_file=None).log_level == 'DEBUG'


class TestValidation:

    @pytest.mark.parametrize("name,value", [
        ('LOG_LEVEL', 'LOUD'),
        ('QUEST_DATA_DIR', 'relative/dir'),
        ('QUEST_ACTIVITY_LOG', 'maybe'),
        ('QUEST_SAVE_FILE', '   '),
    ])
    def test_invalid_values(self, clean_env, name, value):
        clean_env.setenv(name, value)
        with pytest.raises(ConfigError):
            Config(env_file=None)


class TestEnvFile:

    def test_env_file_supplies_missing_values(self, clean_env, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text(
            "# comment\n"
            f"QUEST_DATA_DIR={tmp_path}\n"
            "QUEST_SAVE_FILE=from_file.txt\n"
            "LOG_FILE=\n",
            encoding='utf-8'
        )
        clean_env.setenv('QUEST_SAVE_FILE', 'from_env.txt')

        settings = Config(env_file=str(env_file))
        assert settings.data_dir == str(tmp_path)
        assert settings.save_path == tmp_path / "from_env.txt"
        assert settings.log_file is None

    def test_missing_env_file_is_ignored(self, clean_env, tmp_path):
        settings = Config(env_file=str(tmp_path / "absent.env"))
        assert settings.log_level == 'WARNING'
