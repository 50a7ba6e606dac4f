"""
Unit tests for engine construction, settings and management commands
"""
import json
import logging
from unittest.mock import patch

import pytest
import redis

import manage
from config.settings import Settings
from resume_ats import create_engine, setup_logging, setup_redis
from resume_ats.schemas import AnalysisSource


def make_settings(**overrides):
    values = {
        "gemini_api_keys": "",
        "gemini_api_key": "",
        "google_api_key": "",
        "environment": "testing",
        "log_format": "text",
        "redis_cache_url": "",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.mark.unit
class TestSettings:
    """Tests for Settings"""

    def test_api_key_list(self):
        settings = make_settings(gemini_api_keys=" key-a, ,key-b ")
        assert settings.api_key_list == ["key-a", "key-b"]

    def test_single_key_fallbacks(self):
        assert make_settings(gemini_api_key="solo").api_key_list == ["solo"]
        assert make_settings(google_api_key="google").api_key_list == ["google"]

    def test_validators(self):
        settings = make_settings(environment="PRODUCTION", log_level="debug")
        assert settings.is_production is True
        assert settings.log_level == "DEBUG"
        with pytest.raises(ValueError):
            make_settings(environment="staging")
        with pytest.raises(ValueError):
            make_settings(log_format="xml")

    def test_display_config_masks_keys(self, capsys):
        make_settings(gemini_api_keys="AIzaSyVerySecretKey1234").display_config()
        output = capsys.readouterr().out
        assert "AIzaSyVerySecretKey1234" not in output
        assert "AIza" in output


@pytest.mark.unit
class TestSetup:
    """Tests for logging and Redis setup"""

    def test_setup_logging_idempotent(self):
        settings = make_settings(log_format="json")
        setup_logging(settings)
        setup_logging(settings)
        handlers = [
            handler for handler in logging.getLogger("resume_ats").handlers
            if getattr(handler, "_resume_ats_handler", False)
        ]
        assert len(handlers) == 1
        assert type(handlers[0].formatter).__name__ == "JsonFormatter"

    def test_redis_disabled(self):
        assert setup_redis(make_settings(redis_cache_url="")) is None

    @patch("redis.from_url")
    def test_redis_unreachable_in_development(self, mock_from_url):
        mock_from_url.return_value.ping.side_effect = redis.ConnectionError("refused")
        assert setup_redis(make_settings(redis_cache_url="redis://user:pw@cache:6379/1")) is None

    @patch("redis.from_url")
    def test_redis_unreachable_in_production(self, mock_from_url):
        mock_from_url.return_value.ping.side_effect = redis.ConnectionError("refused")
        with pytest.raises(redis.ConnectionError):
            setup_redis(make_settings(environment="production", redis_cache_url="redis://cache:6379/1"))

    @patch("redis.from_url")
    def test_redis_connected(self, mock_from_url):
        mock_from_url.return_value.ping.return_value = True
        assert setup_redis(make_settings(redis_cache_url="redis://cache:6379/1")) is mock_from_url.return_value


@pytest.mark.unit
class TestCreateEngine:
    """Tests for engine wiring"""

    def test_rules_only_without_keys(self, raw_scenario_resume):
        engine = create_engine(make_settings(), configure_logging=False)
        assert engine.ai_client is None
        assert engine.combine(raw_scenario_resume).source is AnalysisSource.RULES

    def test_full_wiring(self, fake_redis, fake_provider_factory, valid_ai_text, raw_strong_resume):
        settings = make_settings(gemini_api_keys="key-a,key-b", ai_max_attempts=2, circuit_fail_max=4)
        engine = create_engine(
            settings,
            redis_connection=fake_redis,
            provider=fake_provider_factory(valid_ai_text),
            configure_logging=False,
        )

        assert len(engine.ai_client.key_pool) == 2
        assert engine.ai_client.max_attempts == 2
        assert engine.ai_client.circuit_breaker.fail_max == 4

        result = engine.combine(raw_strong_resume)
        assert result.source is AnalysisSource.HYBRID
        assert fake_redis.store

        health = engine.health_status()
        assert health['ai']['api_keys_configured'] == 2
        assert health['cache']['redis_enabled'] is True
        engine.close()


@pytest.mark.unit
class TestManageCommands:
    """Tests for manage.py commands"""

    @pytest.fixture
    def engine(self):
        return create_engine(make_settings(), configure_logging=False)

    def test_analyze(self, engine, tmp_path, capsys, raw_scenario_resume):
        resume_path = tmp_path / "resume.txt"
        resume_path.write_text(raw_scenario_resume, encoding="utf-8")

        assert manage.analyze(engine, str(resume_path)) == 0

        data = json.loads(capsys.readouterr().out)
        assert data["metadata"]["source"] == "rules"
        assert "atsScore" in data

    def test_analyze_invalid_input(self, engine, tmp_path, capsys):
        resume_path = tmp_path / "resume.txt"
        resume_path.write_text("too short", encoding="utf-8")

        assert manage.analyze(engine, str(resume_path)) == 2
        assert json.loads(capsys.readouterr().out)["reason"] == "too_short"

    def test_score(self, engine, tmp_path, capsys, raw_scenario_resume):
        resume_path = tmp_path / "resume.txt"
        resume_path.write_text(raw_scenario_resume, encoding="utf-8")

        assert manage.score(engine, str(resume_path)) == 0
        assert json.loads(capsys.readouterr().out)["metadata"]["source"] == "rules"

    def test_health(self, engine, capsys):
        assert manage.health(engine) == 0
        assert json.loads(capsys.readouterr().out)["ai"]["initialized"] is False
