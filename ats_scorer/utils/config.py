"""
Environment-driven configuration loading
"""
import os

from dotenv import load_dotenv
from pydantic import ValidationError as PydanticValidationError

from ats_scorer.models.scoring_settings import (
    DatabaseSettings, LLMSettings, MatchingSettings, ScoringSettings, ScoringWeights
)
from ats_scorer.utils.exceptions import ConfigurationError
from ats_scorer.utils.logging_config import get_logger

logger = get_logger(__name__)

WEIGHT_ENV_KEYS = {
    "skills": "SCORING_WEIGHT_SKILLS",
    "experience": "SCORING_WEIGHT_EXPERIENCE",
    "education": "SCORING_WEIGHT_EDUCATION",
    "keywords": "SCORING_WEIGHT_KEYWORDS",
}


def _env_bool(key: str, default: bool) -> bool:
    raw = os.getenv(key)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_number(key: str, default, cast=float):
    raw = os.getenv(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw)
    except ValueError as e:
        raise ConfigurationError(f"Invalid value for {key}", config_key=key, config_value=raw, cause=e)


def load_weights() -> ScoringWeights:
    """Read section weights from the environment, falling back to the defaults"""
    defaults = ScoringWeights()
    overrides = {
        section: _env_number(key, None)
        for section, key in WEIGHT_ENV_KEYS.items()
        if os.getenv(key)
    }
    if not overrides:
        return defaults
    try:
        return ScoringWeights(**{**defaults.as_dict(), **overrides})
    except PydanticValidationError as e:
        raise ConfigurationError(
            "Configured scoring weights are invalid",
            config_key="SCORING_WEIGHT_*",
            config_value=overrides,
            cause=e
        )


def load_settings() -> ScoringSettings:
    """Build the service settings from .env and the process environment"""
    load_dotenv()

    weights = load_weights()
    weights_source = "environment" if any(os.getenv(k) for k in WEIGHT_ENV_KEYS.values()) else "default"

    try:
        settings = ScoringSettings(
            weights=weights,
            weights_source=weights_source,
            llm=LLMSettings(
                enabled=_env_bool("LLM_EXTRACTION_ENABLED", True),
                model_name=os.getenv("LLM_MODEL", LLMSettings().model_name),
                base_url=os.getenv("OLLAMA_BASE_URL", LLMSettings().base_url),
                timeout=_env_number("LLM_TIMEOUT", 30, int),
                retry_attempts=_env_number("LLM_RETRY_ATTEMPTS", 1, int),
            ),
            matching=MatchingSettings(
                threshold=_env_number("KEYWORD_MATCH_THRESHOLD", 0.3),
            ),
            database=DatabaseSettings(
                mongo_details=os.getenv("MONGO_DETAILS", DatabaseSettings().mongo_details),
                db_name=os.getenv("DB_NAME", DatabaseSettings().db_name),
            ),
            min_text_length=_env_number("MIN_TEXT_LENGTH", 50, int),
            model_version=os.getenv("MODEL_VERSION", "1.0"),
        )
    except PydanticValidationError as e:
        raise ConfigurationError("Service configuration is invalid", cause=e)

    logger.info(
        f"Settings loaded - weights from {settings.weights_source}, "
        f"LLM extraction {'enabled' if settings.llm.enabled else 'disabled'}, "
        f"database {settings.database.db_name}"
    )
    return settings
