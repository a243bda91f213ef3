from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv


class ConfigurationError(RuntimeError):
    """Missing credentials or invalid pipeline configuration."""


def _load_env() -> None:
    # Centralized dotenv loading; safe if .env missing
    load_dotenv()


def _as_bool(value: str | None) -> bool:
    return (value or "").strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class PipelineConfig:
    """CRM identifiers the workflow operates on, validated once at startup."""

    pipeline_id: str
    source_stage_id: str
    target_stage_id: str
    name_prefix: str = "Post:"
    link_property: str = "link_original_de_la_noticia"
    profile_property: str = "linkedin_profile_link"
    association_type_id: int = 3

    def validate(self) -> "PipelineConfig":
        missing = [
            name
            for name in ("pipeline_id", "source_stage_id", "target_stage_id", "profile_property")
            if not str(getattr(self, name) or "").strip()
        ]
        if missing:
            raise ConfigurationError(f"Pipeline configuration missing: {', '.join(missing)}")
        if self.source_stage_id == self.target_stage_id:
            raise ConfigurationError("Source and target stage must differ")
        if self.association_type_id <= 0:
            raise ConfigurationError("association_type_id must be positive")
        return self


@dataclass(frozen=True)
class Settings:
    hubspot_token: str | None
    hubspot_base_url: str

    apify_token: str | None
    apify_profile_actor_id: str
    apify_scraper_mode: str

    openai_api_key: str | None
    openai_model: str

    max_deals_per_week: int
    weekly_tracking_file: str

    # Pipeline/stage identifiers
    pipeline_id: str
    source_stage_id: str
    target_stage_id: str
    deal_name_prefix: str

    # Self-imposed rate limiting (seconds)
    page_delay_seconds: float
    lookup_delay_seconds: float
    write_delay_seconds: float
    request_timeout_seconds: int

    log_level: str
    run_env: str

    # Logging/tracing
    llm_trace: bool = False
    llm_log_path: str = "logs/llm_calls.jsonl"

    def pipeline_config(self) -> PipelineConfig:
        return PipelineConfig(
            pipeline_id=self.pipeline_id,
            source_stage_id=self.source_stage_id,
            target_stage_id=self.target_stage_id,
            name_prefix=self.deal_name_prefix,
        ).validate()

    def require_credentials(self, *, enrichment: bool = True) -> None:
        """Fail fast before any external call is made."""
        if not self.hubspot_token:
            raise ConfigurationError("HUBSPOT_TOKEN is not configured")
        if enrichment and not self.apify_token:
            raise ConfigurationError("APIFY_TOKEN is not configured")
        if self.max_deals_per_week <= 0:
            raise ConfigurationError("MAX_DEALS_PER_WEEK must be greater than 0")


def _int_env(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}")


def _float_env(name: str, default: str) -> float:
    raw = os.getenv(name, default)
    try:
        return float(raw)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name} must be a number, got {raw!r}")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    _load_env()
    return Settings(
        hubspot_token=os.getenv("HUBSPOT_TOKEN"),
        hubspot_base_url=os.getenv("HUBSPOT_BASE_URL", "https://api.hubapi.com"),
        apify_token=os.getenv("APIFY_TOKEN"),
        apify_profile_actor_id=os.getenv("APIFY_PROFILE_ACTOR_ID", "LpVuK3Zozwuipa5bp"),
        apify_scraper_mode=os.getenv("APIFY_SCRAPER_MODE", "Profile details no email ($4 per 1k)"),
        openai_api_key=os.getenv("OPENAI_API_KEY"),
        openai_model=os.getenv("OPENAI_MODEL", "gpt-4o-mini"),
        max_deals_per_week=_int_env("MAX_DEALS_PER_WEEK", "1000"),
        weekly_tracking_file=os.getenv("WEEKLY_TRACKING_FILE", "weekly-tracking.json"),
        pipeline_id=os.getenv("PIPELINE_ID", "654720623"),
        source_stage_id=os.getenv("SOURCE_STAGE_ID", "1169433784"),
        target_stage_id=os.getenv("TARGET_STAGE_ID", "1259550373"),
        deal_name_prefix=os.getenv("DEAL_NAME_PREFIX", "Post:"),
        page_delay_seconds=_float_env("PAGE_DELAY_SECONDS", "3"),
        lookup_delay_seconds=_float_env("LOOKUP_DELAY_SECONDS", "0.1"),
        write_delay_seconds=_float_env("WRITE_DELAY_SECONDS", "0.5"),
        request_timeout_seconds=_int_env("REQUEST_TIMEOUT", "30"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        run_env=os.getenv("RUN_ENV", "local"),
        llm_trace=_as_bool(os.getenv("LLM_TRACE", "false")),
        llm_log_path=os.getenv("LLM_LOG_PATH", "logs/llm_calls.jsonl"),
    )
