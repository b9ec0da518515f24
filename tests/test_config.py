# tests/test_config.py

"""
Test cases for environment configuration and logging setup
Run: pytest tests/test_config.py -v
"""

import logging

import pytest

from threat_rl.config import DEFAULT_TIMELINE, Settings
from threat_rl.errors import ConfigurationError
from threat_rl.logging_config import setup_logging


class TestSettings:

    def test_defaults(self):
        settings = Settings.from_env({})
        assert settings.log_level == "INFO"
        assert settings.log_file is None
        assert settings.timeline == DEFAULT_TIMELINE
        assert (settings.api_host, settings.api_port) == ("127.0.0.1", 5000)
        assert settings.max_content_mb == 50

    def test_overrides(self):
        settings = Settings.from_env({
            "THREAT_RL_LOG_LEVEL": "debug",
            "THREAT_RL_TIMELINE_START": "2024-01-01",
            "THREAT_RL_TIMELINE_END": "2024-06-30",
            "THREAT_RL_API_PORT": "8080",
        })
        assert settings.log_level_value == logging.DEBUG
        assert settings.timeline == ("2024-01-01", "2024-06-30")
        assert settings.api_port == 8080

    @pytest.mark.parametrize("env, key", [
        ({"THREAT_RL_LOG_LEVEL": "LOUD"}, "THREAT_RL_LOG_LEVEL"),
        ({"THREAT_RL_API_PORT": "x"}, "THREAT_RL_API_PORT"),
        ({"THREAT_RL_MAX_CONTENT_MB": "0"}, "THREAT_RL_MAX_CONTENT_MB"),
        ({"THREAT_RL_TIMELINE_START": "01/02/2023"}, "THREAT_RL_TIMELINE_START"),
        ({"THREAT_RL_TIMELINE_START": "2025-01-01"}, "THREAT_RL_TIMELINE_END"),
    ])
    def test_invalid(self, env, key):
        with pytest.raises(ConfigurationError) as exc_info:
            Settings.from_env(env)
        assert exc_info.value.config_key == key


class TestLogging:

    def test_file_handler(self, tmp_path):
        log_file = tmp_path / "logs" / "threat_rl.log"
        root = logging.getLogger()
        saved = root.handlers[:], root.level
        try:
            setup_logging(logging.INFO, str(log_file))
            logging.getLogger("threat_rl.test").info("[Test] hello")
            for handler in root.handlers:
                handler.flush()
            assert "[Test] hello" in log_file.read_text(encoding="utf-8")
            assert logging.getLogger("werkzeug").level == logging.WARNING
        finally:
            for handler in root.handlers:
                handler.close()
            root.handlers[:] = saved[0]
            root.setLevel(saved[1])
