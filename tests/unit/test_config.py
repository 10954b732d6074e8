"""
Unit Tests for environment configuration.
"""

import pytest

from socratix_tutor.config import Config


class TestConfig:

    def test_cors_origins_split(self, monkeypatch):
        monkeypatch.setattr(Config, "CORS_ORIGINS", "http://a.test, http://b.test,,")
        assert Config.cors_origins() == ["http://a.test", "http://b.test"]

    def test_validate_requires_api_key(self, monkeypatch):
        monkeypatch.setattr(Config, "OPENAI_API_KEY", "")
        with pytest.raises(ValueError):
            Config.validate_config()

    def test_validate_rejects_non_positive_timeout(self, monkeypatch):
        monkeypatch.setattr(Config, "OPENAI_API_KEY", "sk-test")
        monkeypatch.setattr(Config, "LLM_TIMEOUT_SECONDS", 0)
        with pytest.raises(ValueError):
            Config.validate_config()

    def test_valid_config(self, monkeypatch):
        monkeypatch.setattr(Config, "OPENAI_API_KEY", "sk-test")
        monkeypatch.setattr(Config, "LLM_TIMEOUT_SECONDS", 30.0)
        Config.validate_config()
