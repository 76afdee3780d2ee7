"""
Tests for settings and logging setup.
"""

import logging

from launchcache.core.config import Settings
from launchcache.core.logging_config import setup_logging


class TestSettings:

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("CACHE_TTL_SECONDS", raising=False)
        settings = Settings(_env_file=None)
        assert settings.CACHE_TTL_SECONDS == 60
        assert settings.SPACEX_BASE_URL == "https://api.spacexdata.com/v4"
        assert settings.API_V1_STR == "/api/v1"

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("CACHE_TTL_SECONDS", "5")
        monkeypatch.setenv("SPACEX_BASE_URL", "http://localhost:9000/v4")
        settings = Settings(_env_file=None)
        assert settings.CACHE_TTL_SECONDS == 5
        assert settings.SPACEX_BASE_URL == "http://localhost:9000/v4"


class TestSetupLogging:

    def test_leaves_configured_root_alone(self):
        root = logging.getLogger()
        sentinel = logging.NullHandler()
        root.addHandler(sentinel)
        handlers_before = list(root.handlers)
        level_before = root.level
        try:
            setup_logging("debug", logfile="should-not-be-created.log")
            assert root.handlers == handlers_before
            assert root.level == level_before
        finally:
            root.removeHandler(sentinel)
