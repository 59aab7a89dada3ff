"""
Centralized configuration with environment variable overrides.

Brand defaults, context-window sizes, phase thresholds, and model settings
are configurable here. Nothing is hardcoded in resolver, aggregator, or
shaper logic.
"""

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from leadsync.logging_context import get_request_logger

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_INTEREST_KEYWORDS = "property,properties,sqft,budget,location,area,rent"


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_float(env_var: str, default: str) -> float:
    """Parse a float from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return float(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid float for {env_var}: {raw!r}"
        ) from None


def _csv_tuple(env_var: str, default: str) -> tuple[str, ...]:
    """Parse a comma-separated env var into a tuple of lower-cased terms."""
    raw = os.getenv(env_var, default)
    return tuple(term.strip().lower() for term in raw.split(",") if term.strip())


@dataclass(frozen=True)
class BrandConfig:
    """Brand and channel defaults for inbound messages."""

    default_brand: str = os.getenv("DEFAULT_BRAND", "proxe")
    default_channel: str = os.getenv("DEFAULT_CHANNEL", "whatsapp")


@dataclass(frozen=True)
class ModelConfig:
    """Generation backend settings."""

    llm_model: str = os.getenv("LLM_MODEL", "gpt-4o-mini")
    llm_max_tokens: int = _safe_int("LLM_MAX_TOKENS", "2000")
    llm_temperature: float = _safe_float("LLM_TEMPERATURE", "0.3")
    llm_timeout_sec: float = _safe_float("LLM_TIMEOUT_SEC", "30.0")
    api_key: str = os.getenv("OPENAI_API_KEY", "")


@dataclass(frozen=True)
class ContextConfig:
    """Window sizes and caps used while synthesizing a Context."""

    history_limit: int = _safe_int("HISTORY_LIMIT", "20")
    last_messages_window: int = _safe_int("LAST_MESSAGES_WINDOW", "10")
    summary_window: int = _safe_int("SUMMARY_WINDOW", "5")
    summary_max_chars: int = _safe_int("SUMMARY_MAX_CHARS", "500")
    interest_window_chars: int = _safe_int("INTEREST_WINDOW_CHARS", "20")
    max_extracted_interests: int = _safe_int("MAX_EXTRACTED_INTERESTS", "5")
    max_merged_interests: int = _safe_int("MAX_MERGED_INTERESTS", "10")
    knowledge_results: int = _safe_int("KNOWLEDGE_RESULTS", "2")
    interest_keywords: tuple[str, ...] = _csv_tuple(
        "INTEREST_KEYWORDS", DEFAULT_INTEREST_KEYWORDS
    )


@dataclass(frozen=True)
class PhaseConfig:
    """Message-count thresholds for journey phase classification."""

    evaluation_threshold: int = _safe_int("PHASE_EVALUATION_THRESHOLD", "3")
    closing_threshold: int = _safe_int("PHASE_CLOSING_THRESHOLD", "8")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    brand: BrandConfig = field(default_factory=BrandConfig)
    model: ModelConfig = field(default_factory=ModelConfig)
    context: ContextConfig = field(default_factory=ContextConfig)
    phase: PhaseConfig = field(default_factory=PhaseConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    service_name: str = os.getenv("SERVICE_NAME", "leadsync")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    if not 0.0 <= config.model.llm_temperature <= 2.0:
        raise ValueError(
            f"LLM_TEMPERATURE must be between 0.0 and 2.0, got {config.model.llm_temperature}"
        )
    if config.model.llm_max_tokens < 1:
        raise ValueError(
            f"LLM_MAX_TOKENS must be >= 1, got {config.model.llm_max_tokens}"
        )
    if config.model.llm_timeout_sec <= 0:
        raise ValueError(
            f"LLM_TIMEOUT_SEC must be > 0, got {config.model.llm_timeout_sec}"
        )
    if not 1 <= config.context.history_limit <= 20:
        raise ValueError(
            f"HISTORY_LIMIT must be between 1 and 20, got {config.context.history_limit}"
        )

    for name, value in [
        ("LAST_MESSAGES_WINDOW", config.context.last_messages_window),
        ("SUMMARY_WINDOW", config.context.summary_window),
        ("SUMMARY_MAX_CHARS", config.context.summary_max_chars),
        ("MAX_EXTRACTED_INTERESTS", config.context.max_extracted_interests),
        ("MAX_MERGED_INTERESTS", config.context.max_merged_interests),
    ]:
        if value < 1:
            raise ValueError(f"{name} must be >= 1, got {value}")

    if config.context.interest_window_chars < 0:
        raise ValueError(
            "INTEREST_WINDOW_CHARS must be >= 0, "
            f"got {config.context.interest_window_chars}"
        )
    if config.context.knowledge_results < 0:
        raise ValueError(
            f"KNOWLEDGE_RESULTS must be >= 0, got {config.context.knowledge_results}"
        )
    if not config.context.interest_keywords:
        raise ValueError("INTEREST_KEYWORDS must name at least one keyword")

    if config.phase.evaluation_threshold < 1:
        raise ValueError(
            "PHASE_EVALUATION_THRESHOLD must be >= 1, "
            f"got {config.phase.evaluation_threshold}"
        )
    if config.phase.closing_threshold <= config.phase.evaluation_threshold:
        raise ValueError(
            "PHASE_CLOSING_THRESHOLD must be greater than PHASE_EVALUATION_THRESHOLD, "
            f"got {config.phase.closing_threshold} <= {config.phase.evaluation_threshold}"
        )


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] [%(request_id)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    get_request_logger()
    logger.info("Configuration loaded for '%s'", config.service_name)
    return config


# Singleton instance
settings = load_config()
