"""Tests for configuration validation"""
import pytest

from momentum import config
from momentum.exceptions import ConfigurationError


class TestConfigValidation:
    """Test validate_config"""

    def test_defaults_are_valid(self, monkeypatch):
        monkeypatch.setattr(config, "STORE_BACKEND", "memory")
        config.validate_config()

    def test_unknown_store_backend(self, monkeypatch):
        monkeypatch.setattr(config, "STORE_BACKEND", "redis")

        with pytest.raises(ConfigurationError) as exc_info:
            config.validate_config()
        assert exc_info.value.config_key == "STORE_BACKEND"

    def test_postgres_requires_database_url(self, monkeypatch):
        monkeypatch.setattr(config, "STORE_BACKEND", "postgres")
        monkeypatch.setattr(config, "DATABASE_URL", "")

        with pytest.raises(ConfigurationError) as exc_info:
            config.validate_config()
        assert exc_info.value.config_key == "DATABASE_URL"

    def test_hours_must_be_ordered(self, monkeypatch):
        monkeypatch.setattr(config, "STORE_BACKEND", "memory")
        monkeypatch.setattr(config, "EARLY_BIRD_HOUR", 23)
        monkeypatch.setattr(config, "NIGHT_OWL_HOUR", 22)

        with pytest.raises(ConfigurationError):
            config.validate_config()

    def test_xp_rewards_must_be_positive(self, monkeypatch):
        monkeypatch.setattr(config, "STORE_BACKEND", "memory")
        monkeypatch.setattr(config, "ACTION_XP", 0)

        with pytest.raises(ConfigurationError):
            config.validate_config()

    def test_pool_sizes_must_be_ordered(self, monkeypatch):
        monkeypatch.setattr(config, "STORE_BACKEND", "memory")
        monkeypatch.setattr(config, "DB_POOL_MIN_SIZE", 5)
        monkeypatch.setattr(config, "DB_POOL_MAX_SIZE", 2)

        with pytest.raises(ConfigurationError) as exc_info:
            config.validate_config()
        assert exc_info.value.config_key == "DB_POOL_MIN_SIZE"
