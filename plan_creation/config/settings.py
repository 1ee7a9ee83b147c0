from functools import lru_cache

from loguru import logger
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from plan_creation.creation import constants


class Settings(BaseSettings):
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_file: str | None = Field(default=None, validation_alias="LOG_FILE")
    log_rotation: str = Field(default="10 MB", validation_alias="LOG_ROTATION")
    log_retention: str = Field(default="7 days", validation_alias="LOG_RETENTION")
    preview_refresh_delay_ms: int = Field(
        default=constants.PREVIEW_REFRESH_DELAY_MS,
        ge=0,
        validation_alias="PREVIEW_REFRESH_DELAY_MS",
        description="Debounce before a feasibility/preview recompute after any config change",
    )
    high_impact_recompute_delay_ms: int = Field(
        default=constants.HIGH_IMPACT_RECOMPUTE_DELAY_MS,
        ge=0,
        validation_alias="HIGH_IMPACT_RECOMPUTE_DELAY_MS",
        description="Debounce before requesting new suggestions after a high-impact change",
    )
    blocking_issue_limit: int = Field(default=constants.DEFAULT_BLOCKING_ISSUE_LIMIT, ge=0, validation_alias="BLOCKING_ISSUE_LIMIT")
    weight_precision: int = Field(default=constants.WEIGHT_PRECISION, ge=1, le=12, validation_alias="WEIGHT_PRECISION")
    min_prep_days_between_goals: int = Field(default=constants.MIN_PREP_DAYS_BETWEEN_GOALS, ge=0, validation_alias="MIN_PREP_DAYS_BETWEEN_GOALS")
    max_safe_weekly_tss_ramp_pct: float = Field(
        default=constants.MAX_SAFE_WEEKLY_TSS_RAMP_PCT,
        ge=0,
        le=constants.CREATION_MAX_WEEKLY_TSS_RAMP_PCT,
        validation_alias="MAX_SAFE_WEEKLY_TSS_RAMP_PCT",
        description="System-wide weekly load-ramp ceiling applied by the TSS ramp quick fix",
    )
    max_safe_ctl_ramp_per_week: float = Field(
        default=constants.MAX_SAFE_CTL_RAMP_PER_WEEK,
        ge=0,
        le=constants.CREATION_MAX_CTL_RAMP_PER_WEEK,
        validation_alias="MAX_SAFE_CTL_RAMP_PER_WEEK",
        description="System-wide weekly fitness-ramp ceiling applied by the CTL ramp quick fix",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Validate that log level is one of the standard logging levels."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_value = value.upper()
        if upper_value not in valid_levels:
            logger.warning(f"Invalid LOG_LEVEL '{value}'. Valid levels are: {', '.join(sorted(valid_levels))}. Defaulting to INFO.")
            return "INFO"
        return upper_value

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
