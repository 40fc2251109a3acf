import logging

import pytest

from ats_scorer.utils.config import WEIGHT_ENV_KEYS, load_settings, load_weights
from ats_scorer.utils.exceptions import ConfigurationError
from ats_scorer.utils.logging_config import (
    LOGGER_PREFIX, PerformanceMonitor, configure_for_environment, get_logger
)


@pytest.fixture
def clean_env(monkeypatch):
    for key in WEIGHT_ENV_KEYS.values():
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr("ats_scorer.utils.config.load_dotenv", lambda: None)
    return monkeypatch


class TestConfig:

    def test_defaults(self, clean_env):
        settings = load_settings()
        assert settings.weights_source == "default"
        assert settings.weights.as_dict() == {"skills": 0.4, "experience": 0.35, "education": 0.1, "keywords": 0.15}

    def test_weights_from_environment(self, clean_env):
        clean_env.setenv("SCORING_WEIGHT_SKILLS", "0.5")
        clean_env.setenv("SCORING_WEIGHT_EXPERIENCE", "0.25")

        settings = load_settings()
        assert settings.weights_source == "environment"
        assert settings.weights.skills == 0.5
        assert settings.weights.experience == 0.25

    def test_weights_must_sum_to_one(self, clean_env):
        clean_env.setenv("SCORING_WEIGHT_SKILLS", "0.9")
        with pytest.raises(ConfigurationError) as exc_info:
            load_weights()
        assert exc_info.value.error_code == "CONFIGURATION_ERROR"

    def test_non_numeric_weight(self, clean_env):
        clean_env.setenv("SCORING_WEIGHT_KEYWORDS", "lots")
        with pytest.raises(ConfigurationError) as exc_info:
            load_weights()
        assert exc_info.value.details["config_key"] == "SCORING_WEIGHT_KEYWORDS"

    def test_llm_can_be_disabled(self, clean_env):
        clean_env.setenv("LLM_EXTRACTION_ENABLED", "false")
        clean_env.setenv("OLLAMA_BASE_URL", "http://ollama:11434/")
        settings = load_settings()
        assert settings.llm.enabled is False
        assert settings.llm.base_url == "http://ollama:11434"


def test_get_logger_namespaces_modules():
    logger = get_logger("services.scoring")
    assert isinstance(logger, logging.Logger)
    assert logger.name == f"{LOGGER_PREFIX}.services.scoring"
    assert get_logger(logger.name) is logger


class TestLoggingConfig:

    def test_testing_profile_writes_no_files(self, monkeypatch, tmp_path):
        monkeypatch.setenv("ENVIRONMENT", "testing")
        monkeypatch.setenv("LOG_DIR", str(tmp_path / "logs"))
        configure_for_environment()

        assert not (tmp_path / "logs").exists()
        assert logging.getLogger().level == logging.WARNING
        assert logging.getLogger("pymongo").level == logging.WARNING

    def test_development_profile_adds_rotating_files(self, monkeypatch, tmp_path):
        monkeypatch.setenv("ENVIRONMENT", "development")
        monkeypatch.setenv("LOG_DIR", str(tmp_path))
        try:
            configure_for_environment()
            files = sorted(p.name for p in tmp_path.iterdir())
            assert any(name.startswith("ats_scorer_errors_") for name in files)
            assert logging.getLogger().level == logging.DEBUG
        finally:
            monkeypatch.setenv("ENVIRONMENT", "testing")
            configure_for_environment()

    def test_performance_monitor_records_elapsed_time(self):
        with PerformanceMonitor("noop", get_logger("tests")) as monitor:
            pass
        assert monitor.elapsed_ms >= 0

    def test_performance_monitor_reraises(self):
        with pytest.raises(RuntimeError):
            with PerformanceMonitor("boom", get_logger("tests")):
                raise RuntimeError("boom")
