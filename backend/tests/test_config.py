"""Tests for settings normalization."""

from catalog_api.config import Settings


class TestSettings:

    def test_environment_and_log_level_ignore_case(self):
        settings = Settings(environment=" PRODUCTION ", log_level="info")

        assert settings.environment == "production"
        assert settings.is_production is True
        assert settings.log_level == "INFO"

    def test_values_read_from_environment(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "Test")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        settings = Settings()

        assert settings.environment == "test"
        assert settings.log_level == "DEBUG"

    def test_blank_api_key_is_unset(self):
        assert Settings(api_key="").api_key is None
